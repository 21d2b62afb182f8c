# src/models.py

from dataclasses import dataclass, field, fields
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from exceptions import InvalidWeights


class FacilityCategory(str, Enum):
    """Processing stage a facility belongs to"""

    WELLHEAD = "wellhead"
    SEPARATOR = "separator"
    GOSP = "gosp"
    DISTILLATOR = "distillator"
    PUMP = "pump"
    EXPORT = "export"
    # Explicit default variant for equipment without a dedicated profile
    OTHER = "other"


class AnomalyType(str, Enum):
    CO2_SPIKE = "co2_spike"
    EFFICIENCY_DROP = "efficiency_drop"
    ENERGY_SURGE = "energy_surge"
    PRESSURE_ANOMALY = "pressure_anomaly"
    VIBRATION_ALERT = "vibration_alert"
    EQUIPMENT_DEGRADATION = "equipment_degradation"


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class MaintenancePriority(str, Enum):
    ROUTINE = "routine"
    SCHEDULED = "scheduled"
    URGENT = "urgent"
    EMERGENCY = "emergency"


class OptimizationCriteria(str, Enum):
    CO2 = "co2"
    COST = "cost"
    ENERGY = "energy"
    BALANCED = "balanced"


@dataclass(frozen=True)
class Equipment:
    """Optional equipment metadata attached to a facility"""

    manufacturer: Optional[str] = None
    model: Optional[str] = None
    year_installed: Optional[int] = None


@dataclass(frozen=True)
class Facility:
    """Represents a processing facility in the production network"""

    id: str
    name: str
    category: FacilityCategory
    co2_factor: float  # kg CO2 per barrel
    energy_factor: float  # kWh per barrel
    capacity: float  # barrels per day
    position: Optional[Tuple[float, float]] = None
    equipment: Optional[Equipment] = None

    def __post_init__(self):
        if not self.id:
            raise ValueError("Facility id cannot be empty")

        # Accept plain strings for the category
        if not isinstance(self.category, FacilityCategory):
            try:
                category = FacilityCategory(str(self.category).strip().lower())
            except ValueError:
                valid = {c.value for c in FacilityCategory}
                raise ValueError(
                    f"Invalid facility category: {self.category}. Must be one of {valid}"
                )
            object.__setattr__(self, "category", category)

        if self.co2_factor < 0:
            raise ValueError(f"CO2 factor cannot be negative: {self.co2_factor}")
        if self.energy_factor < 0:
            raise ValueError(f"Energy factor cannot be negative: {self.energy_factor}")
        if self.capacity < 0:
            raise ValueError(f"Capacity cannot be negative: {self.capacity}")

    @property
    def year_installed(self) -> Optional[int]:
        return self.equipment.year_installed if self.equipment else None


@dataclass(frozen=True)
class Connection:
    """Represents a directed pipeline between two facilities"""

    id: str
    source: str
    destination: str
    distance: float  # km
    pipeline_co2: float  # kg CO2 per barrel per km
    pipeline_size: Optional[float] = None  # inches

    def __post_init__(self):
        if self.distance < 0:
            raise ValueError(f"Distance cannot be negative: {self.distance}")
        if self.pipeline_co2 < 0:
            raise ValueError(f"Pipeline CO2 cannot be negative: {self.pipeline_co2}")


@dataclass(frozen=True)
class Route:
    """A simple path through the network with aggregate metrics for one throughput"""

    id: str
    name: str
    path: Tuple[str, ...]
    total_co2: float  # kg per day
    total_energy: float  # kWh per day
    total_distance: float  # km
    throughput: float  # barrels per day
    operating_cost: float  # currency per day

    def __post_init__(self):
        object.__setattr__(self, "path", tuple(self.path))
        if len(self.path) < 2:
            raise ValueError(f"Route path needs at least two facilities: {self.path}")

    def passes_through(self, facility_id: str) -> bool:
        return facility_id in self.path


@dataclass(frozen=True)
class OptimizationWeights:
    """Relative importance of each objective; any non-negative scale"""

    co2: float
    cost: float
    energy: float

    @classmethod
    def from_dict(cls, weights: Dict[str, float]) -> "OptimizationWeights":
        return cls(
            co2=float(weights.get("co2", 0.0)),
            cost=float(weights.get("cost", 0.0)),
            energy=float(weights.get("energy", 0.0)),
        )

    @property
    def total(self) -> float:
        return self.co2 + self.cost + self.energy

    def normalized(self) -> "OptimizationWeights":
        """
        Scale the weights so that they sum to 1

        Raises:
            InvalidWeights: If a weight is negative or not finite, or all are zero
        """
        values = (self.co2, self.cost, self.energy)
        # NaN fails every comparison, so test the accepted range
        if not all(0 <= value < float("inf") for value in values):
            raise InvalidWeights(f"Weights must be finite and non-negative: {self}")
        total = self.total
        if total <= 0:
            raise InvalidWeights(f"At least one weight must be positive: {self}")
        return OptimizationWeights(
            co2=self.co2 / total,
            cost=self.cost / total,
            energy=self.energy / total,
        )


@dataclass(frozen=True)
class RouteScore:
    """A route ranked within one candidate set; sub-scores are in [0, 1], higher is better"""

    route: Route
    co2_score: float
    cost_score: float
    energy_score: float
    total_score: float
    is_pareto_optimal: bool = False

    @property
    def sub_scores(self) -> Tuple[float, float, float]:
        return (self.co2_score, self.cost_score, self.energy_score)


@dataclass(frozen=True)
class RouteSavings:
    """Improvement of one route over the worst-ranked alternative"""

    co2_saved: float  # tonnes per day
    energy_saved: float  # MWh per day
    cost_saved: float  # currency per day
    percent_co2_reduction: float
    percent_energy_reduction: float
    annual_co2_saved: float
    annual_energy_saved: float
    annual_cost_saved: float


@dataclass(frozen=True)
class PerformanceMetrics:
    """One telemetry observation for one facility"""

    facility_id: str
    timestamp: datetime
    co2_emissions: float  # kg/bbl
    energy_consumption: float  # kWh/bbl
    throughput: float  # bbl/day
    temperature: float  # degrees C
    pressure: float  # bar
    vibration: float  # mm/s
    efficiency: float  # 0-1


@dataclass(frozen=True)
class Anomaly:
    id: str
    timestamp: datetime
    facility_id: str
    facility_name: str
    type: AnomalyType
    severity: Severity
    description: str
    current_value: float
    expected_value: float
    deviation: float  # signed percent


@dataclass(frozen=True)
class MaintenanceAlert:
    id: str
    facility_id: str
    facility_name: str
    equipment_type: FacilityCategory
    priority: MaintenancePriority
    predicted_failure_date: datetime
    days_until_failure: int
    confidence: float  # 0-1
    estimated_downtime: float  # hours
    estimated_cost: float
    recommended_action: str
    impact_on_routes: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class MaintenanceProfile:
    """Downtime, cost and actions for one facility category"""

    downtime_hours: float
    base_cost: float
    actions: Dict[MaintenancePriority, str]

    def action_for(self, priority: MaintenancePriority) -> str:
        return self.actions[priority]


@dataclass
class MonitoringReport:
    """Result of evaluating one telemetry tick across facilities"""

    timestamp: datetime
    anomalies: List[Anomaly] = field(default_factory=list)
    maintenance_alerts: List[MaintenanceAlert] = field(default_factory=list)
    facilities_monitored: int = 0


def to_dict(obj: Any) -> Any:
    """Convert model objects into JSON-compatible structures"""
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, datetime):
        return obj.isoformat()
    if hasattr(obj, "__dataclass_fields__"):
        return {f.name: to_dict(getattr(obj, f.name)) for f in fields(obj)}
    if isinstance(obj, dict):
        return {to_dict(k): to_dict(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [to_dict(v) for v in obj]
    return obj
