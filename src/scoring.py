# src/scoring.py

import logging
from dataclasses import replace
from typing import List, Sequence

import config
from models import OptimizationWeights, Route, RouteScore


def operating_cost(co2_per_unit: float, energy_per_unit: float) -> float:
    """Operating cost of one barrel from its CO2 (kg) and energy (kWh) footprint"""
    co2_cost = (co2_per_unit / 1000) * config.CARBON_PRICE
    energy_cost = energy_per_unit * config.ELECTRICITY_PRICE
    return co2_cost + energy_cost


def normalize(value: float, minimum: float, maximum: float) -> float:
    """Map value onto [0, 1] within [minimum, maximum]; 0 for a degenerate range"""
    if maximum == minimum:
        return 0.0
    return (value - minimum) / (maximum - minimum)


def dominates(a: RouteScore, b: RouteScore) -> bool:
    """True if a is at least as good as b everywhere and strictly better somewhere"""
    pairs = list(zip(a.sub_scores, b.sub_scores))
    return all(x >= y for x, y in pairs) and any(x > y for x, y in pairs)


class MultiObjectiveScorer:
    """Scores a candidate set of routes relative to each other"""

    def __init__(self, weights: OptimizationWeights):
        # Fail before any scoring work
        self.weights = weights.normalized()
        self.logger = logging.getLogger(__name__)

    def score(self, routes: Sequence[Route]) -> List[RouteScore]:
        """
        Score, Pareto-mark and rank a candidate set

        Sub-scores are relative to the min/max of this candidate set only,
        so the result must be recomputed whenever the set changes.

        Returns:
            RouteScores sorted by total score, highest first; ties keep
            discovery order
        """
        if not routes:
            return []

        co2_values = [r.total_co2 for r in routes]
        cost_values = [r.operating_cost for r in routes]
        energy_values = [r.total_energy for r in routes]

        min_co2, max_co2 = min(co2_values), max(co2_values)
        min_cost, max_cost = min(cost_values), max(cost_values)
        min_energy, max_energy = min(energy_values), max(energy_values)

        w = self.weights
        scored = []
        for route in routes:
            # Inverted so that lower raw values score higher
            co2_score = 1 - normalize(route.total_co2, min_co2, max_co2)
            cost_score = 1 - normalize(route.operating_cost, min_cost, max_cost)
            energy_score = 1 - normalize(route.total_energy, min_energy, max_energy)

            total_score = (
                co2_score * w.co2 + cost_score * w.cost + energy_score * w.energy
            )
            scored.append(
                RouteScore(
                    route=route,
                    co2_score=co2_score,
                    cost_score=cost_score,
                    energy_score=energy_score,
                    total_score=total_score,
                )
            )

        scored = self.mark_pareto_optimal(scored)
        ranked = sorted(scored, key=lambda s: s.total_score, reverse=True)

        self.logger.debug(
            f"Scored {len(ranked)} routes, "
            f"{sum(1 for s in ranked if s.is_pareto_optimal)} Pareto-optimal"
        )
        return ranked

    @staticmethod
    def mark_pareto_optimal(scored: Sequence[RouteScore]) -> List[RouteScore]:
        """Flag every score not dominated by another in the same set; exact ties stay optimal"""
        marked = []
        for i, candidate in enumerate(scored):
            is_pareto = not any(
                dominates(other, candidate)
                for j, other in enumerate(scored)
                if i != j
            )
            marked.append(replace(candidate, is_pareto_optimal=is_pareto))
        return marked
