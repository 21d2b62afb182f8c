# src/anomaly_detection.py

import logging
from typing import List, Optional

import config
from models import (
    Anomaly,
    AnomalyType,
    Facility,
    PerformanceMetrics,
    Severity,
)

# Short tags used in anomaly ids
_ID_TAGS = {
    AnomalyType.CO2_SPIKE: "co2",
    AnomalyType.EFFICIENCY_DROP: "eff",
    AnomalyType.ENERGY_SURGE: "energy",
    AnomalyType.PRESSURE_ANOMALY: "press",
    AnomalyType.VIBRATION_ALERT: "vib",
    AnomalyType.EQUIPMENT_DEGRADATION: "degr",
}


def percent_deviation(current: float, baseline: float) -> float:
    """Signed percent change from baseline; 0 when there is no usable baseline"""
    if baseline == 0:
        return 0.0
    return (current - baseline) / baseline * 100


def co2_severity(deviation: float) -> Severity:
    magnitude = abs(deviation)
    if magnitude > config.CO2_SPIKE_CRITICAL:
        return Severity.CRITICAL
    if magnitude > config.CO2_SPIKE_HIGH:
        return Severity.HIGH
    return Severity.MEDIUM


def efficiency_severity(deviation: float) -> Severity:
    return Severity.HIGH if deviation < config.EFFICIENCY_DROP_HIGH else Severity.MEDIUM


def energy_severity(deviation: float) -> Severity:
    return Severity.HIGH if deviation > config.ENERGY_SURGE_HIGH else Severity.MEDIUM


def pressure_severity(deviation: float) -> Severity:
    return Severity.HIGH if abs(deviation) > config.PRESSURE_HIGH else Severity.MEDIUM


def vibration_severity(vibration: float) -> Severity:
    if vibration > config.VIBRATION_CRITICAL:
        return Severity.CRITICAL
    if vibration > config.VIBRATION_HIGH:
        return Severity.HIGH
    return Severity.MEDIUM


class AnomalyDetector:
    """Rule-based deviation checks of one sample against its facility baseline

    Stateless: every rule is evaluated independently, so one sample yields
    between zero and five anomalies.
    """

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def detect(
        self,
        sample: PerformanceMetrics,
        baseline: Optional[PerformanceMetrics],
        facility: Facility,
    ) -> List[Anomaly]:
        if baseline is None:
            self.logger.debug(f"No baseline for {sample.facility_id}, skipping detection")
            return []

        checks = [
            self._check_co2(sample, baseline, facility),
            self._check_efficiency(sample, baseline, facility),
            self._check_energy(sample, baseline, facility),
            self._check_vibration(sample, facility),
            self._check_pressure(sample, baseline, facility),
        ]
        anomalies = [a for a in checks if a is not None]

        for anomaly in anomalies:
            self.logger.warning(
                f"{anomaly.severity.value.upper()} {anomaly.type.value} at "
                f"{facility.name}: {anomaly.description}"
            )
        return anomalies

    def _anomaly(
        self,
        sample: PerformanceMetrics,
        facility: Facility,
        anomaly_type: AnomalyType,
        severity: Severity,
        description: str,
        current_value: float,
        expected_value: float,
        deviation: float,
    ) -> Anomaly:
        millis = int(sample.timestamp.timestamp() * 1000)
        return Anomaly(
            id=f"anom-{millis}-{_ID_TAGS[anomaly_type]}-{sample.facility_id}",
            timestamp=sample.timestamp,
            facility_id=sample.facility_id,
            facility_name=facility.name,
            type=anomaly_type,
            severity=severity,
            description=description,
            current_value=current_value,
            expected_value=expected_value,
            deviation=deviation,
        )

    def _check_co2(self, sample, baseline, facility) -> Optional[Anomaly]:
        deviation = percent_deviation(sample.co2_emissions, baseline.co2_emissions)
        if abs(deviation) <= config.CO2_SPIKE_THRESHOLD:
            return None
        direction = "increased" if deviation > 0 else "decreased"
        return self._anomaly(
            sample,
            facility,
            AnomalyType.CO2_SPIKE,
            co2_severity(deviation),
            f"CO2 emissions {direction} by {abs(deviation):.1f}%",
            sample.co2_emissions,
            baseline.co2_emissions,
            deviation,
        )

    def _check_efficiency(self, sample, baseline, facility) -> Optional[Anomaly]:
        deviation = percent_deviation(sample.efficiency, baseline.efficiency)
        if deviation >= config.EFFICIENCY_DROP_THRESHOLD:
            return None
        return self._anomaly(
            sample,
            facility,
            AnomalyType.EFFICIENCY_DROP,
            efficiency_severity(deviation),
            f"Processing efficiency dropped by {abs(deviation):.1f}%",
            sample.efficiency,
            baseline.efficiency,
            deviation,
        )

    def _check_energy(self, sample, baseline, facility) -> Optional[Anomaly]:
        deviation = percent_deviation(
            sample.energy_consumption, baseline.energy_consumption
        )
        if deviation <= config.ENERGY_SURGE_THRESHOLD:
            return None
        return self._anomaly(
            sample,
            facility,
            AnomalyType.ENERGY_SURGE,
            energy_severity(deviation),
            f"Energy consumption increased by {deviation:.1f}%",
            sample.energy_consumption,
            baseline.energy_consumption,
            deviation,
        )

    def _check_vibration(self, sample, facility) -> Optional[Anomaly]:
        # Absolute limit, reported against the nominal vibration level
        if sample.vibration <= config.VIBRATION_THRESHOLD:
            return None
        return self._anomaly(
            sample,
            facility,
            AnomalyType.VIBRATION_ALERT,
            vibration_severity(sample.vibration),
            f"Abnormal vibration detected: {sample.vibration:.2f} mm/s",
            sample.vibration,
            config.VIBRATION_REFERENCE,
            percent_deviation(sample.vibration, config.VIBRATION_REFERENCE),
        )

    def _check_pressure(self, sample, baseline, facility) -> Optional[Anomaly]:
        deviation = percent_deviation(sample.pressure, baseline.pressure)
        if abs(deviation) <= config.PRESSURE_THRESHOLD:
            return None
        direction = "increase" if deviation > 0 else "decrease"
        return self._anomaly(
            sample,
            facility,
            AnomalyType.PRESSURE_ANOMALY,
            pressure_severity(deviation),
            f"Pressure {direction} of {abs(deviation):.1f}%",
            sample.pressure,
            baseline.pressure,
            deviation,
        )
