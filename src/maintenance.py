# src/maintenance.py
"""
Failure forecasting for facility equipment.

Combines a current-condition health score with a two-parameter Weibull
wear-out model on equipment age to estimate days until failure, and prices
the intervention from per-category maintenance profiles.
"""

import logging
import math
from datetime import datetime, timedelta
from typing import Dict, Optional, Sequence

import config
from models import (
    Facility,
    FacilityCategory,
    MaintenanceAlert,
    MaintenancePriority,
    MaintenanceProfile,
    PerformanceMetrics,
)

GENERIC_ACTION = "Comprehensive equipment inspection"


def _generic_actions() -> Dict[MaintenancePriority, str]:
    return {priority: GENERIC_ACTION for priority in MaintenancePriority}


# Used for FacilityCategory.OTHER
DEFAULT_MAINTENANCE_PROFILE = MaintenanceProfile(
    downtime_hours=12, base_cost=50000, actions=_generic_actions()
)

MAINTENANCE_PROFILES: Dict[FacilityCategory, MaintenanceProfile] = {
    FacilityCategory.WELLHEAD: MaintenanceProfile(
        downtime_hours=8, base_cost=15000, actions=_generic_actions()
    ),
    FacilityCategory.SEPARATOR: MaintenanceProfile(
        downtime_hours=16, base_cost=45000, actions=_generic_actions()
    ),
    FacilityCategory.GOSP: MaintenanceProfile(
        downtime_hours=24,
        base_cost=120000,
        actions={
            MaintenancePriority.ROUTINE: "Scheduled inspection and filter replacement",
            MaintenancePriority.SCHEDULED: "Compressor overhaul and seal replacement",
            MaintenancePriority.URGENT: "Emergency shutdown for critical component repair",
            MaintenancePriority.EMERGENCY: "Immediate equipment replacement required",
        },
    ),
    FacilityCategory.DISTILLATOR: MaintenanceProfile(
        downtime_hours=48,
        base_cost=95000,
        actions={
            MaintenancePriority.ROUTINE: "Column cleaning and tray inspection",
            MaintenancePriority.SCHEDULED: "Reboiler tube bundle replacement",
            MaintenancePriority.URGENT: "Emergency leak repair and pressure testing",
            MaintenancePriority.EMERGENCY: "Critical safety system failure - immediate shutdown",
        },
    ),
    FacilityCategory.PUMP: MaintenanceProfile(
        downtime_hours=12,
        base_cost=35000,
        actions={
            MaintenancePriority.ROUTINE: "Bearing lubrication and alignment check",
            MaintenancePriority.SCHEDULED: "Impeller replacement and motor service",
            MaintenancePriority.URGENT: "Seal failure repair",
            MaintenancePriority.EMERGENCY: "Catastrophic pump failure - immediate replacement",
        },
    ),
    FacilityCategory.EXPORT: MaintenanceProfile(
        downtime_hours=4, base_cost=25000, actions=_generic_actions()
    ),
    FacilityCategory.OTHER: DEFAULT_MAINTENANCE_PROFILE,
}

PRIORITY_COST_MULTIPLIERS: Dict[MaintenancePriority, float] = {
    MaintenancePriority.ROUTINE: 1.0,
    MaintenancePriority.SCHEDULED: 1.2,
    MaintenancePriority.URGENT: 1.8,
    MaintenancePriority.EMERGENCY: 2.5,
}


def equipment_age(facility: Facility, current_year: int) -> int:
    install_year = facility.year_installed or config.DEFAULT_INSTALL_YEAR
    return current_year - install_year


def health_score(metrics: PerformanceMetrics) -> float:
    """Weighted condition score, roughly in [0, 1]; 1 is healthy"""
    efficiency_score = metrics.efficiency
    vibration_score = max(0.0, 1 - metrics.vibration / config.VIBRATION_LIMIT)
    temperature_score = max(
        0.0,
        1
        - abs(metrics.temperature - config.NOMINAL_TEMPERATURE)
        / config.TEMPERATURE_TOLERANCE,
    )
    return efficiency_score * 0.5 + vibration_score * 0.3 + temperature_score * 0.2


def weibull_failure_probability(
    age: float,
    scale: float = config.WEIBULL_SCALE,
    shape: float = config.WEIBULL_SHAPE,
) -> float:
    """Weibull CDF: probability of failure by the given age in years"""
    if age <= 0:
        return 0.0
    return 1 - math.exp(-((age / scale) ** shape))


def days_until_failure(failure_probability: float, score: float) -> int:
    days = config.BASE_DAYS_TO_FAILURE * (1 - failure_probability) * score
    # Half-up rounding
    return max(1, int(math.floor(days + 0.5)))


def priority_for(days: int) -> MaintenancePriority:
    if days < 7:
        return MaintenancePriority.EMERGENCY
    if days < 30:
        return MaintenancePriority.URGENT
    if days < 90:
        return MaintenancePriority.SCHEDULED
    return MaintenancePriority.ROUTINE


def prediction_confidence(history_length: int, score: float) -> float:
    data_confidence = min(history_length / config.HISTORY_LIMIT, 1.0)
    return data_confidence * 0.6 + score * 0.4


class MaintenancePredictor:
    """Produces a maintenance alert when the reliability model says one is due"""

    def __init__(
        self,
        profiles: Optional[Dict[FacilityCategory, MaintenanceProfile]] = None,
        min_history: int = config.MIN_HISTORY_FOR_PREDICTION,
    ):
        self.profiles = profiles if profiles is not None else MAINTENANCE_PROFILES
        self.min_history = min_history
        self.logger = logging.getLogger(__name__)

    def profile_for(self, category: FacilityCategory) -> MaintenanceProfile:
        return self.profiles.get(category, DEFAULT_MAINTENANCE_PROFILE)

    def predict(
        self,
        facility: Facility,
        metrics: PerformanceMetrics,
        history_length: int,
        impacted_routes: Sequence[str] = (),
        now: Optional[datetime] = None,
    ) -> Optional[MaintenanceAlert]:
        """
        Forecast failure for a facility from its latest sample

        Args:
            facility: Facility being evaluated
            metrics: Latest sample for the facility
            history_length: Number of stored samples for the facility
            impacted_routes: Names of routes passing through the facility
            now: Reference time, defaults to the current time

        Returns:
            MaintenanceAlert, or None when history is insufficient or the
            equipment is healthy
        """
        if history_length < self.min_history:
            self.logger.debug(
                f"{facility.id}: {history_length} samples, need {self.min_history}"
            )
            return None

        now = now or datetime.now()
        age = equipment_age(facility, now.year)
        score = health_score(metrics)
        probability = weibull_failure_probability(age)

        if (
            probability <= config.FAILURE_PROBABILITY_TRIGGER
            and score >= config.HEALTH_SCORE_TRIGGER
        ):
            return None

        days = days_until_failure(probability, score)
        priority = priority_for(days)
        profile = self.profile_for(facility.category)

        alert = MaintenanceAlert(
            id=f"maint-{int(now.timestamp() * 1000)}-{facility.id}",
            facility_id=facility.id,
            facility_name=facility.name,
            equipment_type=facility.category,
            priority=priority,
            predicted_failure_date=now + timedelta(days=days),
            days_until_failure=days,
            confidence=prediction_confidence(history_length, score),
            estimated_downtime=profile.downtime_hours,
            estimated_cost=profile.base_cost * PRIORITY_COST_MULTIPLIERS[priority],
            recommended_action=profile.action_for(priority),
            impact_on_routes=list(impacted_routes),
        )
        self.logger.warning(
            f"{priority.value.upper()} maintenance for {facility.name}: "
            f"failure in ~{days} days (age {age}y, health {score:.2f}, "
            f"P(fail) {probability:.2f})"
        )
        return alert
