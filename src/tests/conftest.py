# src/tests/conftest.py

import sys
from datetime import datetime
from pathlib import Path

import pytest

# Add src directory to Python path
src_path = Path(__file__).parent.parent
sys.path.insert(0, str(src_path))

from models import Connection, Equipment, Facility, PerformanceMetrics  # noqa: E402

DATA_DIR = Path(__file__).parent.parent.parent / "data"
SAMPLE_TIME = datetime(2026, 3, 1, 12, 0, 0)


def make_facility(facility_id, category="pump", co2=1.0, energy=1.0, **kwargs):
    return Facility(
        id=facility_id,
        name=kwargs.pop("name", f"Facility {facility_id}"),
        category=category,
        co2_factor=co2,
        energy_factor=energy,
        capacity=kwargs.pop("capacity", 10000.0),
        **kwargs,
    )


def make_connection(conn_id, source, destination, distance=1.0, pipeline_co2=0.0):
    return Connection(
        id=conn_id,
        source=source,
        destination=destination,
        distance=distance,
        pipeline_co2=pipeline_co2,
    )


def make_metrics(facility_id="pump-1", timestamp=SAMPLE_TIME, **overrides):
    values = {
        "co2_emissions": 100.0,
        "energy_consumption": 50.0,
        "throughput": 1000.0,
        "temperature": 75.0,
        "pressure": 25.0,
        "vibration": 4.5,
        "efficiency": 0.88,
    }
    values.update(overrides)
    return PerformanceMetrics(facility_id=facility_id, timestamp=timestamp, **values)


@pytest.fixture
def reference_facilities():
    """The wellhead-to-export network used throughout the tests"""
    return [
        make_facility("wh-1", "wellhead", 2.5, 0.5, name="Wellhead Alpha",
                      position=(100, 300), equipment=Equipment("Cameron", None, 2020)),
        make_facility("wh-2", "wellhead", 2.8, 0.6, name="Wellhead Beta", position=(100, 400)),
        make_facility("sep-1", "separator", 7.2, 2.1, position=(300, 250),
                      equipment=Equipment("Schlumberger", "TS-3000", 2018)),
        make_facility("sep-2", "separator", 8.5, 2.3, position=(300, 380)),
        make_facility("gosp-1", "gosp", 18.5, 4.2, position=(500, 220)),
        make_facility("gosp-2", "gosp", 22.3, 5.1, position=(500, 380)),
        make_facility("dist-1", "distillator", 15.8, 6.5, position=(700, 300)),
        make_facility("pump-1", "pump", 5.2, 1.8, position=(900, 300)),
        make_facility("exp-1", "export", 3.5, 1.2, name="Export Terminal", position=(1100, 300)),
    ]


@pytest.fixture
def reference_connections():
    return [
        make_connection("c1", "wh-1", "sep-1", 5.2, 0.3),
        make_connection("c2", "wh-1", "sep-2", 6.8, 0.3),
        make_connection("c3", "wh-2", "sep-2", 4.5, 0.3),
        make_connection("c4", "sep-1", "gosp-1", 8.5, 0.3),
        make_connection("c5", "sep-1", "gosp-2", 12.3, 0.3),
        make_connection("c6", "sep-2", "gosp-2", 7.2, 0.3),
        make_connection("c7", "sep-2", "gosp-1", 11.5, 0.3),
        make_connection("c8", "gosp-1", "dist-1", 10.5, 0.3),
        make_connection("c9", "gosp-2", "dist-1", 9.8, 0.3),
        make_connection("c10", "dist-1", "pump-1", 15.2, 0.3),
        make_connection("c11", "pump-1", "exp-1", 20.5, 0.3),
    ]


@pytest.fixture
def reference_graph(reference_facilities, reference_connections):
    from facility_graph import build_graph

    return build_graph(reference_facilities, reference_connections)
