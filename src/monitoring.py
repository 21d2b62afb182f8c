# src/monitoring.py

import logging
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Optional, Sequence

import config
from anomaly_detection import AnomalyDetector
from maintenance import MaintenancePredictor
from models import (
    Anomaly,
    Facility,
    MaintenanceAlert,
    MonitoringReport,
    PerformanceMetrics,
    Route,
)
from telemetry import TelemetryHistory


def default_baseline(facility: Facility, timestamp: datetime) -> PerformanceMetrics:
    """Nominal operating point derived from the facility's static factors"""
    return PerformanceMetrics(
        facility_id=facility.id,
        timestamp=timestamp,
        co2_emissions=facility.co2_factor,
        energy_consumption=facility.energy_factor,
        throughput=facility.capacity * config.BASELINE_THROUGHPUT_RATIO,
        temperature=config.BASELINE_TEMPERATURE,
        pressure=config.BASELINE_PRESSURE,
        vibration=config.BASELINE_VIBRATION,
        efficiency=config.BASELINE_EFFICIENCY,
    )


class MonitoringService:
    """Owns the telemetry history and baselines for a set of facilities

    Create one per process and pass it to whatever produces samples; it is
    never shared implicitly. Detection and prediction only read history.
    """

    def __init__(
        self,
        facilities: Iterable[Facility],
        history: Optional[TelemetryHistory] = None,
        detector: Optional[AnomalyDetector] = None,
        predictor: Optional[MaintenancePredictor] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.facilities: Dict[str, Facility] = {f.id: f for f in facilities}
        self.history = history or TelemetryHistory()
        self.detector = detector or AnomalyDetector()
        self.predictor = predictor or MaintenancePredictor()
        self.clock = clock
        self._routes: List[Route] = []
        self.logger = logging.getLogger(__name__)

    def initialize_baselines(self, facilities: Optional[Iterable[Facility]] = None) -> None:
        """Seed a default baseline for every facility"""
        now = self.clock()
        for facility in facilities or self.facilities.values():
            self.facilities.setdefault(facility.id, facility)
            self.set_baseline(facility.id, default_baseline(facility, now))
        self.logger.info(f"Initialized baselines for {len(self.facilities)} facilities")

    def set_baseline(self, facility_id: str, metrics: PerformanceMetrics) -> None:
        self.history.set_baseline(facility_id, metrics)

    def get_baseline(self, facility_id: str) -> Optional[PerformanceMetrics]:
        return self.history.get_baseline(facility_id)

    def record_sample(self, metrics: PerformanceMetrics) -> None:
        self.history.record(metrics)

    def register_routes(self, routes: Sequence[Route]) -> None:
        """Routes whose names are reported as impacted by maintenance alerts"""
        self._routes = list(routes)

    def impacted_routes(self, facility_id: str) -> List[str]:
        return [r.name for r in self._routes if r.passes_through(facility_id)]

    def detect_anomalies(
        self, sample: PerformanceMetrics, facility: Facility
    ) -> List[Anomaly]:
        """Anomalies in a sample; empty when the facility has no baseline"""
        baseline = self.get_baseline(sample.facility_id)
        return self.detector.detect(sample, baseline, facility)

    def predict_maintenance(
        self, facility: Facility, sample: PerformanceMetrics
    ) -> Optional[MaintenanceAlert]:
        """Maintenance alert for a facility, or None"""
        if self.get_baseline(facility.id) is None:
            self.logger.debug(f"No baseline for {facility.id}, skipping prediction")
            return None
        return self.predictor.predict(
            facility,
            sample,
            self.history.count(facility.id),
            impacted_routes=self.impacted_routes(facility.id),
            now=self.clock(),
        )

    def process_tick(self, samples: Iterable[PerformanceMetrics]) -> MonitoringReport:
        """Record one sample per facility, then run detection and prediction on each"""
        report = MonitoringReport(timestamp=self.clock())

        for sample in samples:
            facility = self.facilities.get(sample.facility_id)
            if facility is None:
                self.logger.warning(f"Sample for unknown facility {sample.facility_id}")
                continue

            self.record_sample(sample)
            report.anomalies.extend(self.detect_anomalies(sample, facility))
            alert = self.predict_maintenance(facility, sample)
            if alert is not None:
                report.maintenance_alerts.append(alert)
            report.facilities_monitored += 1

        self.logger.info(
            f"Tick {report.timestamp:%H:%M:%S}: {report.facilities_monitored} facilities, "
            f"{len(report.anomalies)} anomalies, "
            f"{len(report.maintenance_alerts)} maintenance alerts"
        )
        return report
