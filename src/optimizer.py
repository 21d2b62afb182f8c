# src/optimizer.py

import logging
from typing import Dict, List, Optional, Sequence, Union

import config
from facility_graph import FacilityGraph
from models import (
    OptimizationCriteria,
    OptimizationWeights,
    Route,
    RouteSavings,
    RouteScore,
)
from routing import RouteEnumerator
from scoring import MultiObjectiveScorer


class RouteOptimizer:
    """Multi-objective route ranking over a fixed facility graph

    Holds no per-request state, so one instance can serve concurrent
    requests. Routes and scores are rebuilt on every call because weights
    and throughput change between requests.
    """

    def __init__(self, graph: FacilityGraph):
        self.graph = graph
        self.enumerator = RouteEnumerator(graph)
        self.logger = logging.getLogger(__name__)

    def find_optimal_routes(
        self,
        start_id: str,
        end_id: str,
        weights: Optional[OptimizationWeights] = None,
        throughput: float = config.DEFAULT_THROUGHPUT,
        max_paths: Optional[int] = None,
    ) -> List[RouteScore]:
        """
        Rank every simple route between two facilities

        Args:
            start_id: Facility the routes start at
            end_id: Facility the routes end at
            weights: Objective weights, defaults to config.DEFAULT_WEIGHTS
            throughput: Barrels per day
            max_paths: Optional cap on the enumeration

        Returns:
            RouteScores, best first; empty if end_id is unreachable

        Raises:
            InvalidWeights: If the weights are all zero or negative
        """
        if weights is None:
            weights = OptimizationWeights.from_dict(config.DEFAULT_WEIGHTS)

        # Built first so bad weights fail before enumeration
        scorer = MultiObjectiveScorer(weights)
        routes = self.enumerator.find_all_routes(
            start_id, end_id, throughput, max_paths=max_paths
        )
        return scorer.score(routes)

    def find_bounded_routes(
        self,
        start_id: str,
        end_id: str,
        weights: Optional[OptimizationWeights] = None,
        throughput: float = config.DEFAULT_THROUGHPUT,
        max_results: int = config.BOUNDED_SEARCH_MAX_RESULTS,
    ) -> List[Route]:
        """Approximate search returning at most max_results routes, in completion order"""
        if weights is None:
            weights = OptimizationWeights.from_dict(config.DEFAULT_WEIGHTS)
        return self.enumerator.find_bounded_routes(
            start_id, end_id, weights, throughput, max_results
        )

    def routes_by_criteria(
        self,
        start_id: str,
        end_id: str,
        criteria: Union[OptimizationCriteria, str] = OptimizationCriteria.BALANCED,
        throughput: float = config.DEFAULT_THROUGHPUT,
    ) -> List[RouteScore]:
        """Rank routes with one of the preset weightings"""
        criteria = OptimizationCriteria(criteria)
        weights = OptimizationWeights.from_dict(config.CRITERIA_WEIGHTS[criteria.value])
        return self.find_optimal_routes(start_id, end_id, weights, throughput)

    def pareto_optimal_routes(
        self,
        start_id: str,
        end_id: str,
        throughput: float = config.DEFAULT_THROUGHPUT,
    ) -> List[RouteScore]:
        weights = OptimizationWeights.from_dict(config.PARETO_WEIGHTS)
        ranked = self.find_optimal_routes(start_id, end_id, weights, throughput)
        return [s for s in ranked if s.is_pareto_optimal]

    @staticmethod
    def calculate_savings(route: Route, ranked_routes: Sequence[Route]) -> RouteSavings:
        """
        Compare a route against the worst-ranked route of the same request

        Args:
            route: Route to evaluate
            ranked_routes: Routes ordered best first

        Raises:
            ValueError: If ranked_routes is empty
        """
        if not ranked_routes:
            raise ValueError("Cannot calculate savings without alternative routes")

        worst = ranked_routes[-1]
        co2_diff = worst.total_co2 - route.total_co2
        energy_diff = worst.total_energy - route.total_energy
        cost_diff = worst.operating_cost - route.operating_cost

        def percent(diff: float, reference: float) -> float:
            if reference == 0:
                return 0.0
            return round(diff / reference * 100, 1)

        return RouteSavings(
            co2_saved=co2_diff / 1000,
            energy_saved=energy_diff / 1000,
            cost_saved=cost_diff,
            percent_co2_reduction=percent(co2_diff, worst.total_co2),
            percent_energy_reduction=percent(energy_diff, worst.total_energy),
            annual_co2_saved=co2_diff / 1000 * 365,
            annual_energy_saved=energy_diff / 1000 * 365,
            annual_cost_saved=cost_diff * 365,
        )

    def get_solution_stats(self, ranked: Sequence[RouteScore]) -> Dict:
        """Get statistics about a ranked route set"""
        stats = {
            "route_count": len(ranked),
            "pareto_count": sum(1 for s in ranked if s.is_pareto_optimal),
            "best_route": ranked[0].route.name if ranked else None,
            "best_score": ranked[0].total_score if ranked else None,
            "min_co2": min((s.route.total_co2 for s in ranked), default=None),
            "min_cost": min((s.route.operating_cost for s in ranked), default=None),
            "min_energy": min((s.route.total_energy for s in ranked), default=None),
        }

        self.logger.info(f"Routes evaluated: {stats['route_count']}")
        self.logger.info(f"Pareto-optimal routes: {stats['pareto_count']}")
        if ranked:
            self.logger.info(
                f"Best route: {stats['best_route']} (score {stats['best_score']:.3f})"
            )

        return stats


def find_optimal_routes(
    graph: FacilityGraph,
    start_id: str,
    end_id: str,
    weights: OptimizationWeights,
    throughput: float,
) -> List[RouteScore]:
    return RouteOptimizer(graph).find_optimal_routes(start_id, end_id, weights, throughput)


def find_bounded_routes(
    graph: FacilityGraph,
    start_id: str,
    end_id: str,
    weights: OptimizationWeights,
    throughput: float,
    max_results: int = config.BOUNDED_SEARCH_MAX_RESULTS,
) -> List[Route]:
    return RouteOptimizer(graph).find_bounded_routes(
        start_id, end_id, weights, throughput, max_results
    )
