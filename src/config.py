# src/config.py
"""
Model constants and runtime settings for route optimization and facility monitoring.
"""

import os

# --- Operating cost model ---
CARBON_PRICE = 25.0  # currency per tonne CO2
ELECTRICITY_PRICE = 0.12  # currency per kWh

# --- Route search ---
DEFAULT_THROUGHPUT = 5000.0  # barrels per day
DEFAULT_WEIGHTS = {"co2": 0.5, "cost": 0.3, "energy": 0.2}
CRITERIA_WEIGHTS = {
    "co2": {"co2": 1.0, "cost": 0.0, "energy": 0.0},
    "cost": {"co2": 0.0, "cost": 1.0, "energy": 0.0},
    "energy": {"co2": 0.0, "cost": 0.0, "energy": 1.0},
    "balanced": {"co2": 0.4, "cost": 0.35, "energy": 0.25},
}
PARETO_WEIGHTS = {"co2": 0.33, "cost": 0.33, "energy": 0.34}

BOUNDED_SEARCH_MAX_RESULTS = 5

# Per-hop averages used by the bounded search heuristic
HEURISTIC_AVG_CO2 = 15.0
HEURISTIC_AVG_ENERGY = 4.0
HEURISTIC_AVG_COST = 3.0
HEURISTIC_POSITION_SPACING = 200.0  # layout units between facility stages

# Edge score normalisers (per unit of throughput)
EDGE_CO2_SCALE = 100.0
EDGE_ENERGY_SCALE = 20.0
EDGE_COST_SCALE = 5.0

# --- Telemetry ---
HISTORY_LIMIT = 100  # samples kept per facility
MIN_HISTORY_FOR_PREDICTION = 10

# --- Anomaly thresholds (percent deviation from baseline) ---
CO2_SPIKE_THRESHOLD = 15.0
CO2_SPIKE_HIGH = 20.0
CO2_SPIKE_CRITICAL = 30.0
EFFICIENCY_DROP_THRESHOLD = -10.0
EFFICIENCY_DROP_HIGH = -20.0
ENERGY_SURGE_THRESHOLD = 12.0
ENERGY_SURGE_HIGH = 25.0
PRESSURE_THRESHOLD = 10.0
PRESSURE_HIGH = 20.0

# Vibration thresholds are absolute, mm/s
VIBRATION_THRESHOLD = 7.5
VIBRATION_HIGH = 10.0
VIBRATION_CRITICAL = 15.0
VIBRATION_REFERENCE = 4.5

# --- Reliability model ---
DEFAULT_INSTALL_YEAR = 2015
WEIBULL_SCALE = 15.0  # years
WEIBULL_SHAPE = 2.5
FAILURE_PROBABILITY_TRIGGER = 0.3
HEALTH_SCORE_TRIGGER = 0.6
BASE_DAYS_TO_FAILURE = 365
NOMINAL_TEMPERATURE = 75.0  # degrees C
TEMPERATURE_TOLERANCE = 50.0
VIBRATION_LIMIT = 20.0  # mm/s at which the vibration health term reaches zero

# --- Default baselines ---
BASELINE_THROUGHPUT_RATIO = 0.7
BASELINE_TEMPERATURE = 75.0
BASELINE_PRESSURE = 25.0  # bar
BASELINE_VIBRATION = 4.5  # mm/s
BASELINE_EFFICIENCY = 0.88

# --- Runtime settings ---
DATA_PATH = os.environ.get("ECOROUTE_DATA_PATH", "data/")
LOG_DIR = os.environ.get("ECOROUTE_LOG_DIR", ".")
NARRATIVE_URL = os.environ.get("ECOROUTE_NARRATIVE_URL")
NARRATIVE_API_KEY = os.environ.get("ECOROUTE_NARRATIVE_API_KEY", "")
