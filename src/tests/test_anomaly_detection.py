# tests/test_anomaly_detection.py

import pytest

from anomaly_detection import AnomalyDetector, percent_deviation
from conftest import make_facility, make_metrics
from models import AnomalyType, Severity


@pytest.fixture
def facility():
    return make_facility("pump-1", "pump", name="Main Export Pump")


@pytest.fixture
def baseline():
    return make_metrics()


def detect_one(facility, baseline, anomaly_type, **overrides):
    anomalies = AnomalyDetector().detect(make_metrics(**overrides), baseline, facility)
    matching = [a for a in anomalies if a.type is anomaly_type]
    assert len(matching) <= 1
    return matching[0] if matching else None


def test_nominal_sample_is_clean(facility, baseline):
    assert AnomalyDetector().detect(make_metrics(), baseline, facility) == []


@pytest.mark.parametrize(
    "co2, severity",
    [(131.0, Severity.CRITICAL), (122.0, Severity.HIGH), (116.0, Severity.MEDIUM),
     (114.0, None), (60.0, Severity.CRITICAL)],
)
def test_co2_spike(facility, baseline, co2, severity):
    anomaly = detect_one(facility, baseline, AnomalyType.CO2_SPIKE, co2_emissions=co2)
    if severity is None:
        assert anomaly is None
    else:
        assert anomaly.severity is severity
        assert anomaly.current_value == co2
        assert anomaly.expected_value == 100.0


def test_co2_description_and_identity(facility, baseline):
    anomaly = detect_one(facility, baseline, AnomalyType.CO2_SPIKE, co2_emissions=131.0)

    assert anomaly.description == "CO2 emissions increased by 31.0%"
    assert anomaly.deviation == pytest.approx(31.0)
    assert anomaly.facility_id == "pump-1"
    assert anomaly.facility_name == "Main Export Pump"
    assert anomaly.id.startswith("anom-")
    assert anomaly.id.endswith("-co2-pump-1")


def test_co2_drop_is_reported_as_decrease(facility, baseline):
    anomaly = detect_one(facility, baseline, AnomalyType.CO2_SPIKE, co2_emissions=80.0)
    assert anomaly.description == "CO2 emissions decreased by 20.0%"
    assert anomaly.deviation == pytest.approx(-20.0)


@pytest.mark.parametrize(
    "efficiency, severity",
    [(0.75, Severity.MEDIUM), (0.66, Severity.HIGH), (0.80, None), (0.99, None)],
)
def test_efficiency_drop(facility, baseline, efficiency, severity):
    anomaly = detect_one(
        facility, baseline, AnomalyType.EFFICIENCY_DROP, efficiency=efficiency
    )
    assert (anomaly.severity if anomaly else None) is severity


@pytest.mark.parametrize(
    "energy, severity",
    [(57.0, Severity.MEDIUM), (63.0, Severity.HIGH), (55.0, None), (30.0, None)],
)
def test_energy_surge(facility, baseline, energy, severity):
    anomaly = detect_one(
        facility, baseline, AnomalyType.ENERGY_SURGE, energy_consumption=energy
    )
    assert (anomaly.severity if anomaly else None) is severity


@pytest.mark.parametrize(
    "pressure, severity",
    [(28.0, Severity.MEDIUM), (19.0, Severity.HIGH), (27.0, None)],
)
def test_pressure_anomaly(facility, baseline, pressure, severity):
    anomaly = detect_one(facility, baseline, AnomalyType.PRESSURE_ANOMALY, pressure=pressure)
    assert (anomaly.severity if anomaly else None) is severity


def test_pressure_description(facility, baseline):
    anomaly = detect_one(facility, baseline, AnomalyType.PRESSURE_ANOMALY, pressure=19.0)
    assert anomaly.description == "Pressure decrease of 24.0%"


@pytest.mark.parametrize(
    "vibration, severity",
    [(8.0, Severity.MEDIUM), (12.0, Severity.HIGH), (16.0, Severity.CRITICAL), (7.5, None)],
)
def test_vibration_alert(facility, baseline, vibration, severity):
    anomaly = detect_one(facility, baseline, AnomalyType.VIBRATION_ALERT, vibration=vibration)
    assert (anomaly.severity if anomaly else None) is severity
    if anomaly:
        assert anomaly.expected_value == 4.5


def test_vibration_ignores_baseline(facility):
    """The vibration limit is absolute"""
    noisy_baseline = make_metrics(vibration=9.0)
    anomaly = detect_one(facility, noisy_baseline, AnomalyType.VIBRATION_ALERT, vibration=8.0)
    assert anomaly.severity is Severity.MEDIUM


def test_every_rule_can_fire_on_one_sample(facility, baseline):
    anomalies = AnomalyDetector().detect(
        make_metrics(
            co2_emissions=140.0,
            efficiency=0.5,
            energy_consumption=70.0,
            pressure=35.0,
            vibration=16.0,
        ),
        baseline,
        facility,
    )
    assert [a.type for a in anomalies] == [
        AnomalyType.CO2_SPIKE,
        AnomalyType.EFFICIENCY_DROP,
        AnomalyType.ENERGY_SURGE,
        AnomalyType.VIBRATION_ALERT,
        AnomalyType.PRESSURE_ANOMALY,
    ]
    assert len({a.id for a in anomalies}) == 5


def test_zero_baseline_never_divides(facility):
    zero = make_metrics(
        co2_emissions=0.0, energy_consumption=0.0, pressure=0.0, efficiency=0.0
    )
    anomalies = AnomalyDetector().detect(make_metrics(), zero, facility)
    assert anomalies == []


def test_missing_baseline_skips_detection(facility):
    sample = make_metrics(co2_emissions=500.0, vibration=30.0)
    assert AnomalyDetector().detect(sample, None, facility) == []


def test_percent_deviation():
    assert percent_deviation(110.0, 100.0) == pytest.approx(10.0)
    assert percent_deviation(90.0, 100.0) == pytest.approx(-10.0)
    assert percent_deviation(5.0, 0.0) == 0.0
