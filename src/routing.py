# src/routing.py

import heapq
import itertools
import logging
from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Optional, Tuple

import config
from facility_graph import FacilityGraph
from models import Connection, Facility, OptimizationWeights, Route
from scoring import operating_cost


@dataclass(frozen=True)
class _PathFrame:
    """Partial path on the depth-first stack; every branch owns its visited set"""

    facility_id: str
    path: Tuple[str, ...]
    visited: FrozenSet[str]
    co2: float  # per barrel
    energy: float  # per barrel
    distance: float


@dataclass(frozen=True)
class _SearchNode:
    """Frontier entry of the bounded best-first search"""

    facility_id: str
    path: Tuple[str, ...]  # facilities before this one
    g_score: float
    f_score: float
    total_co2: float
    total_energy: float
    total_cost: float
    total_distance: float


def hop_co2(facility: Facility, conn: Connection) -> float:
    """Per-barrel CO2 for entering facility through conn"""
    return facility.co2_factor + conn.pipeline_co2 * conn.distance


class RouteEnumerator:
    """Finds routes between two facilities of a FacilityGraph"""

    def __init__(self, graph: FacilityGraph):
        self.graph = graph
        self.logger = logging.getLogger(__name__)

    def _endpoints_known(self, start_id: str, end_id: str) -> bool:
        for facility_id in (start_id, end_id):
            if facility_id not in self.graph:
                self.logger.warning(f"Unknown facility {facility_id}, no routes")
                return False
        if start_id == end_id:
            self.logger.warning(f"Start and end are the same facility: {start_id}")
            return False
        return True

    def find_all_routes(
        self,
        start_id: str,
        end_id: str,
        throughput: float = config.DEFAULT_THROUGHPUT,
        max_paths: Optional[int] = None,
        max_depth: Optional[int] = None,
    ) -> List[Route]:
        """
        Enumerate every simple path from start_id to end_id

        Exhaustive, so exponential in the branching factor. Use max_paths or
        max_depth (in connections) on anything beyond a few dozen facilities,
        or switch to find_bounded_routes.

        Args:
            start_id: Facility the route starts at
            end_id: Facility the route ends at
            throughput: Barrels per day used for the aggregate metrics
            max_paths: Stop after this many routes
            max_depth: Ignore paths longer than this many connections

        Returns:
            Routes in depth-first discovery order; empty if unreachable
        """
        if not self._endpoints_known(start_id, end_id):
            return []

        routes: List[Route] = []
        stack = [
            _PathFrame(
                facility_id=start_id,
                path=(start_id,),
                visited=frozenset([start_id]),
                co2=0.0,
                energy=0.0,
                distance=0.0,
            )
        ]

        while stack:
            frame = stack.pop()

            if frame.facility_id == end_id:
                routes.append(self._build_route(frame, len(routes) + 1, throughput))
                if max_paths is not None and len(routes) >= max_paths:
                    self.logger.warning(
                        f"Route enumeration {start_id} -> {end_id} stopped at {max_paths} paths"
                    )
                    break
                continue

            if max_depth is not None and len(frame.path) - 1 >= max_depth:
                continue

            children = []
            for conn in self.graph.outgoing(frame.facility_id):
                if conn.destination in frame.visited:
                    continue
                facility = self.graph.get_facility(conn.destination)
                children.append(
                    _PathFrame(
                        facility_id=conn.destination,
                        path=frame.path + (conn.destination,),
                        visited=frame.visited | {conn.destination},
                        co2=frame.co2 + hop_co2(facility, conn),
                        energy=frame.energy + facility.energy_factor,
                        distance=frame.distance + conn.distance,
                    )
                )
            # Reversed so connections are explored in load order
            stack.extend(reversed(children))

        self.logger.info(f"Found {len(routes)} routes from {start_id} to {end_id}")
        return routes

    @staticmethod
    def _build_route(frame: _PathFrame, number: int, throughput: float) -> Route:
        return Route(
            id=f"route-{number}",
            name=f"Route {number}",
            path=frame.path,
            total_co2=frame.co2 * throughput,
            total_energy=frame.energy * throughput,
            total_distance=frame.distance,
            throughput=throughput,
            operating_cost=operating_cost(frame.co2, frame.energy) * throughput,
        )

    def find_bounded_routes(
        self,
        start_id: str,
        end_id: str,
        weights: OptimizationWeights,
        throughput: float = config.DEFAULT_THROUGHPUT,
        max_results: int = config.BOUNDED_SEARCH_MAX_RESULTS,
    ) -> List[Route]:
        """
        Best-first (A*-style) search that stops after max_results routes

        This is an approximation: expanded facilities are closed, so the
        result is not guaranteed to contain the true lowest-cost route set.
        It trades completeness for runtime that stays bounded on graphs too
        large to enumerate.

        Raises:
            InvalidWeights: If the weights cannot be normalized
        """
        w = weights.normalized()
        if max_results <= 0 or not self._endpoints_known(start_id, end_id):
            return []

        hops = self.graph.hops_to(end_id)
        if start_id not in hops:
            self.logger.info(f"No path from {start_id} to {end_id}")
            return []

        goal = self.graph.get_facility(end_id)
        counter = itertools.count()
        start_h = self._heuristic(start_id, goal, hops, w)
        start = _SearchNode(
            facility_id=start_id,
            path=(),
            g_score=0.0,
            f_score=start_h,
            total_co2=0.0,
            total_energy=0.0,
            total_cost=0.0,
            total_distance=0.0,
        )
        open_nodes: Dict[str, _SearchNode] = {start_id: start}
        heap = [(start.f_score, next(counter), start)]
        closed = set()
        routes: List[Route] = []

        while heap:
            _, _, current = heapq.heappop(heap)
            # Superseded by a cheaper entry for the same facility
            if open_nodes.get(current.facility_id) is not current:
                continue
            del open_nodes[current.facility_id]

            if current.facility_id == end_id:
                number = len(routes) + 1
                routes.append(
                    Route(
                        id=f"route-{number}",
                        name=f"Route {number}",
                        path=current.path + (current.facility_id,),
                        total_co2=current.total_co2,
                        total_energy=current.total_energy,
                        total_distance=current.total_distance,
                        throughput=throughput,
                        operating_cost=current.total_cost,
                    )
                )
                if len(routes) >= max_results:
                    break
                continue

            closed.add(current.facility_id)

            for conn in self.graph.outgoing(current.facility_id):
                next_id = conn.destination
                # Closed facilities include the whole current path
                if next_id in closed or next_id not in hops:
                    continue

                facility = self.graph.get_facility(next_id)
                co2 = hop_co2(facility, conn)
                energy = facility.energy_factor
                cost = operating_cost(co2, energy)

                edge_score = (
                    co2 / config.EDGE_CO2_SCALE * w.co2
                    + cost / config.EDGE_COST_SCALE * w.cost
                    + energy / config.EDGE_ENERGY_SCALE * w.energy
                )
                g_score = current.g_score + edge_score

                existing = open_nodes.get(next_id)
                if existing is not None and g_score >= existing.g_score:
                    continue

                node = _SearchNode(
                    facility_id=next_id,
                    path=current.path + (current.facility_id,),
                    g_score=g_score,
                    f_score=g_score + self._heuristic(next_id, goal, hops, w),
                    total_co2=current.total_co2 + co2 * throughput,
                    total_energy=current.total_energy + energy * throughput,
                    total_cost=current.total_cost + cost * throughput,
                    total_distance=current.total_distance + conn.distance,
                )
                open_nodes[next_id] = node
                heapq.heappush(heap, (node.f_score, next(counter), node))

        self.logger.info(
            f"Bounded search found {len(routes)} routes from {start_id} to {end_id}"
        )
        return routes

    def _heuristic(
        self,
        facility_id: str,
        goal: Facility,
        hops: Dict[str, int],
        w: OptimizationWeights,
    ) -> float:
        """Estimated remaining score: facilities left times per-hop averages"""
        current = self.graph.get_facility(facility_id)
        if current.position is not None and goal.position is not None:
            remaining = (
                abs(goal.position[0] - current.position[0])
                / config.HEURISTIC_POSITION_SPACING
            )
        else:
            remaining = hops.get(facility_id, 0)

        return (
            config.HEURISTIC_AVG_CO2 * remaining * w.co2
            + config.HEURISTIC_AVG_COST * remaining * w.cost
            + config.HEURISTIC_AVG_ENERGY * remaining * w.energy
        )
