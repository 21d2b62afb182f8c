# tests/test_scoring.py

import math

import pytest

from exceptions import InvalidWeights
from models import OptimizationWeights, Route
from scoring import MultiObjectiveScorer, dominates, normalize, operating_cost


def make_route(number, co2, cost, energy):
    return Route(
        id=f"route-{number}",
        name=f"Route {number}",
        path=("a", f"n{number}", "z"),
        total_co2=co2,
        total_energy=energy,
        total_distance=10.0,
        throughput=1000.0,
        operating_cost=cost,
    )


def test_operating_cost_model():
    """25 per tonne CO2 and 0.12 per kWh"""
    assert operating_cost(1000, 0) == pytest.approx(25.0)
    assert operating_cost(0, 10) == pytest.approx(1.2)
    assert operating_cost(68.17, 15.8) == pytest.approx(3.60025)


def test_normalize_degenerate_range_is_zero():
    assert normalize(5.0, 5.0, 5.0) == 0.0
    assert normalize(5.0, 0.0, 10.0) == 0.5


@pytest.mark.parametrize(
    "weights",
    [(1, 0, 0), (0.5, 0.3, 0.2), (2, 2, 2), (10, 0.1, 3.7), (0, 0, 1e-9)],
)
def test_normalized_weights_sum_to_one(weights):
    normalized = OptimizationWeights(*weights).normalized()
    assert normalized.total == pytest.approx(1.0)


@pytest.mark.parametrize(
    "weights",
    [(0, 0, 0), (-1, -1, -1), (-1, 2, 0), (math.nan, 1, 1), (math.inf, 1, 1)],
)
def test_degenerate_weights_are_rejected(weights):
    with pytest.raises(InvalidWeights):
        MultiObjectiveScorer(OptimizationWeights(*weights))


def test_sub_scores_are_inverted_and_bounded():
    routes = [
        make_route(1, co2=100, cost=10, energy=50),
        make_route(2, co2=300, cost=30, energy=10),
        make_route(3, co2=200, cost=20, energy=30),
    ]
    scored = MultiObjectiveScorer(OptimizationWeights(1, 1, 1)).score(routes)
    by_id = {s.route.id: s for s in scored}

    assert by_id["route-1"].co2_score == pytest.approx(1.0)
    assert by_id["route-2"].co2_score == pytest.approx(0.0)
    assert by_id["route-3"].co2_score == pytest.approx(0.5)
    assert by_id["route-2"].energy_score == pytest.approx(1.0)
    for s in scored:
        for value in s.sub_scores:
            assert 0.0 <= value <= 1.0


def test_ranking_is_descending_by_total_score():
    routes = [
        make_route(1, co2=300, cost=30, energy=30),
        make_route(2, co2=100, cost=30, energy=30),
        make_route(3, co2=200, cost=10, energy=30),
    ]
    scored = MultiObjectiveScorer(OptimizationWeights(0.7, 0.3, 0)).score(routes)

    totals = [s.total_score for s in scored]
    assert totals == sorted(totals, reverse=True)
    assert scored[0].total_score == max(totals)
    assert scored[0].route.id == "route-2"


def test_ties_keep_discovery_order():
    routes = [make_route(n, co2=100, cost=10, energy=10) for n in (1, 2, 3)]
    scored = MultiObjectiveScorer(OptimizationWeights(1, 1, 1)).score(routes)
    assert [s.route.id for s in scored] == ["route-1", "route-2", "route-3"]


def test_single_candidate_is_trivially_optimal():
    scored = MultiObjectiveScorer(OptimizationWeights(1, 0, 0)).score(
        [make_route(1, co2=500, cost=50, energy=5)]
    )
    assert len(scored) == 1
    only = scored[0]
    # Degenerate range normalizes to 0, so every inverted sub-score is 1
    assert only.sub_scores == (1.0, 1.0, 1.0)
    assert only.total_score == pytest.approx(1.0)
    assert only.is_pareto_optimal


def test_empty_candidate_set():
    assert MultiObjectiveScorer(OptimizationWeights(1, 1, 1)).score([]) == []


def test_dominated_route_is_not_pareto_optimal():
    routes = [
        make_route(1, co2=100, cost=10, energy=10),
        make_route(2, co2=200, cost=20, energy=20),
        make_route(3, co2=50, cost=40, energy=10),
    ]
    scored = MultiObjectiveScorer(OptimizationWeights(1, 1, 1)).score(routes)
    flags = {s.route.id: s.is_pareto_optimal for s in scored}

    assert flags == {"route-1": True, "route-2": False, "route-3": True}


def test_exact_ties_are_mutually_non_dominating():
    routes = [
        make_route(1, co2=100, cost=10, energy=10),
        make_route(2, co2=100, cost=10, energy=10),
        make_route(3, co2=200, cost=20, energy=20),
    ]
    scored = MultiObjectiveScorer(OptimizationWeights(1, 1, 1)).score(routes)
    flags = {s.route.id: s.is_pareto_optimal for s in scored}

    assert flags == {"route-1": True, "route-2": True, "route-3": False}


def test_no_optimal_route_is_strictly_worse_than_another():
    routes = [
        make_route(n, co2=co2, cost=cost, energy=energy)
        for n, (co2, cost, energy) in enumerate(
            [(10, 5, 7), (12, 4, 9), (9, 9, 9), (15, 6, 8), (10, 5, 7), (8, 8, 2)], 1
        )
    ]
    scored = MultiObjectiveScorer(OptimizationWeights(0.2, 0.5, 0.3)).score(routes)

    for a in scored:
        if a.is_pareto_optimal:
            assert not any(dominates(b, a) for b in scored if b is not a)
        else:
            assert any(dominates(b, a) for b in scored if b is not a)
