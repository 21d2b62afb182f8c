# src/simulation.py

from dataclasses import replace
from datetime import datetime
from typing import Optional, Union

import numpy as np

from models import AnomalyType, Facility, PerformanceMetrics


class TelemetrySimulator:
    """Generates noisy samples around a baseline, standing in for real sensors"""

    def __init__(self, seed: Optional[int] = None):
        self.rng = np.random.default_rng(seed)

    def generate(
        self,
        facility: Facility,
        baseline: PerformanceMetrics,
        timestamp: Optional[datetime] = None,
    ) -> PerformanceMetrics:
        noise = (self.rng.random() - 0.5) * 0.15  # +/-7.5%

        return PerformanceMetrics(
            facility_id=facility.id,
            timestamp=timestamp or datetime.now(),
            co2_emissions=baseline.co2_emissions * (1 + noise),
            energy_consumption=baseline.energy_consumption * (1 + noise * 0.8),
            throughput=baseline.throughput * (1 + noise * 0.5),
            temperature=baseline.temperature + (self.rng.random() - 0.5) * 10,
            pressure=baseline.pressure * (1 + noise * 0.6),
            vibration=baseline.vibration + (self.rng.random() - 0.5) * 2,
            efficiency=float(
                np.clip(baseline.efficiency * (1 + noise * 0.3), 0.7, 1.0)
            ),
        )

    def should_inject(self, probability: float) -> bool:
        return bool(self.rng.random() < probability)

    def choose(self, options):
        return options[int(self.rng.integers(len(options)))]


def inject_anomaly(
    metrics: PerformanceMetrics, anomaly_type: Union[AnomalyType, str]
) -> PerformanceMetrics:
    """Copy of metrics distorted the way the given anomaly shows up in the field"""
    anomaly_type = AnomalyType(anomaly_type)

    if anomaly_type is AnomalyType.CO2_SPIKE:
        return replace(metrics, co2_emissions=metrics.co2_emissions * 1.35)
    if anomaly_type is AnomalyType.EFFICIENCY_DROP:
        return replace(metrics, efficiency=metrics.efficiency * 0.75)
    if anomaly_type is AnomalyType.ENERGY_SURGE:
        return replace(metrics, energy_consumption=metrics.energy_consumption * 1.28)
    if anomaly_type is AnomalyType.VIBRATION_ALERT:
        return replace(metrics, vibration=12.5)
    if anomaly_type is AnomalyType.PRESSURE_ANOMALY:
        return replace(metrics, pressure=metrics.pressure * 0.8)
    # Equipment degradation
    return replace(
        metrics,
        efficiency=metrics.efficiency * 0.85,
        vibration=metrics.vibration * 1.3,
    )
