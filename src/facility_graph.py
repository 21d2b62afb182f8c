# src/facility_graph.py

import logging
from collections import deque
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Tuple

from exceptions import FacilityNotFound, InvalidReference
from models import Connection, Facility


class FacilityGraph:
    """Read-only adjacency index over facilities and directed connections"""

    def __init__(
        self,
        facilities: Mapping[str, Facility],
        outgoing: Mapping[str, Tuple[Connection, ...]],
    ):
        self._facilities = MappingProxyType(dict(facilities))
        self._outgoing = MappingProxyType(dict(outgoing))

    def __contains__(self, facility_id: str) -> bool:
        return facility_id in self._facilities

    def __len__(self) -> int:
        return len(self._facilities)

    @property
    def facilities(self) -> List[Facility]:
        return list(self._facilities.values())

    @property
    def connections(self) -> List[Connection]:
        return [conn for conns in self._outgoing.values() for conn in conns]

    def get_facility(self, facility_id: str) -> Facility:
        try:
            return self._facilities[facility_id]
        except KeyError:
            raise FacilityNotFound(facility_id) from None

    def outgoing(self, facility_id: str) -> Tuple[Connection, ...]:
        """Connections leaving a facility, in load order; empty if none"""
        return self._outgoing.get(facility_id, ())

    def hops_to(self, target_id: str) -> Dict[str, int]:
        """Minimum number of connections from every facility that can reach target_id"""
        incoming: Dict[str, List[str]] = {}
        for conn in self.connections:
            incoming.setdefault(conn.destination, []).append(conn.source)

        hops = {target_id: 0}
        queue = deque([target_id])
        while queue:
            current = queue.popleft()
            for source in incoming.get(current, []):
                if source not in hops:
                    hops[source] = hops[current] + 1
                    queue.append(source)
        return hops


def build_graph(
    facilities: Iterable[Facility], connections: Iterable[Connection]
) -> FacilityGraph:
    """
    Build the facility graph, validating every connection endpoint

    Args:
        facilities: Facilities of the network
        connections: Directed connections between those facilities

    Returns:
        Immutable FacilityGraph

    Raises:
        InvalidReference: If a facility id is duplicated or a connection
            points at an unknown facility
    """
    logger = logging.getLogger(__name__)

    by_id: Dict[str, Facility] = {}
    for facility in facilities:
        if facility.id in by_id:
            raise InvalidReference(f"Duplicate facility id: {facility.id}")
        by_id[facility.id] = facility

    outgoing: Dict[str, List[Connection]] = {}
    count = 0
    for conn in connections:
        for endpoint in (conn.source, conn.destination):
            if endpoint not in by_id:
                raise InvalidReference(
                    f"Connection {conn.id} references unknown facility: {endpoint}"
                )
        outgoing.setdefault(conn.source, []).append(conn)
        count += 1

    logger.info(f"Built facility graph: {len(by_id)} facilities, {count} connections")
    return FacilityGraph(
        by_id, {source: tuple(conns) for source, conns in outgoing.items()}
    )

