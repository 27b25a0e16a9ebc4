"""
Internal fallback graph
=======================

A small, fixed network of named locations connected by bidirectional
"road-proxy" edges weighted with haversine distance.  Used when the
external routing provider cannot produce a route.

Lifecycle
---------
``GraphBuilder`` collects nodes and edges exactly once at startup and
``build()`` freezes them into a ``Graph`` value.  ``Graph`` exposes no
mutation methods, so it is shared read-only by every request without
locking.

Complexity
----------
* ``connect_bidirectional``: O(1)
* ``nearest_node_id``:       O(V) -- linear scan, fine for a handful of nodes
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from .distance import haversine_km
from .entities import (
    Coordinate,
    Edge,
    EmptyGraphError,
    GraphConstructionError,
    GraphNode,
)


class Graph:
    """Immutable node registry plus directed adjacency map."""

    def __init__(
        self,
        nodes: Mapping[str, GraphNode],
        adjacency: Mapping[str, tuple[Edge, ...]],
    ):
        self._nodes = MappingProxyType(dict(nodes))
        self._adjacency = MappingProxyType(
            {node_id: tuple(edges) for node_id, edges in adjacency.items()}
        )

    @property
    def nodes(self) -> Mapping[str, GraphNode]:
        return self._nodes

    @property
    def adjacency(self) -> Mapping[str, tuple[Edge, ...]]:
        return self._adjacency

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def coordinate_of(self, node_id: str) -> Coordinate:
        return self._nodes[node_id].coordinate

    def nearest_node_id(self, coordinate: Coordinate) -> str:
        """Id of the node closest to *coordinate*; first one wins on ties."""
        if not self._nodes:
            raise EmptyGraphError("No nodes registered in the graph")
        return min(
            self._nodes.values(),
            key=lambda node: haversine_km(node.coordinate, coordinate),
        ).id


class GraphBuilder:
    """Collects nodes and edges, then freezes them with :meth:`build`."""

    def __init__(self):
        self._nodes: dict[str, GraphNode] = {}
        self._adjacency: dict[str, list[Edge]] = {}
        self._built = False

    def register_node(self, node: GraphNode) -> GraphBuilder:
        self._check_open()
        if node.id in self._nodes:
            raise GraphConstructionError(f"Node already registered: {node.id}")
        self._nodes[node.id] = node
        self._adjacency.setdefault(node.id, [])
        return self

    def connect_bidirectional(self, id_a: str, id_b: str) -> GraphBuilder:
        self._check_open()
        missing = [i for i in (id_a, id_b) if i not in self._nodes]
        if missing:
            raise GraphConstructionError(
                f"Cannot connect unregistered node(s): {', '.join(missing)}"
            )
        cost = haversine_km(self._nodes[id_a].coordinate, self._nodes[id_b].coordinate)
        self._adjacency[id_a].append(Edge(id_b, cost))
        self._adjacency[id_b].append(Edge(id_a, cost))
        return self

    def build(self) -> Graph:
        self._check_open()
        self._built = True
        return Graph(self._nodes, self._adjacency)

    def _check_open(self) -> None:
        if self._built:
            raise GraphConstructionError("Graph has already been built")


# ── Seed topology ─────────────────────────────────────────────────────

SEED_NODES: tuple[GraphNode, ...] = (
    GraphNode("SP", Coordinate(-23.5505, -46.6333)),  # Sao Paulo
    GraphNode("RJ", Coordinate(-22.9068, -43.1729)),  # Rio de Janeiro
    GraphNode("BH", Coordinate(-19.9167, -43.9345)),  # Belo Horizonte
    GraphNode("BSB", Coordinate(-15.793889, -47.882778)),  # Brasilia
    GraphNode("SSA", Coordinate(-12.9777, -38.5016)),  # Salvador
)

SEED_EDGES: tuple[tuple[str, str], ...] = (
    ("SP", "RJ"),
    ("SP", "BH"),
    ("BH", "RJ"),
    ("BH", "BSB"),
    ("RJ", "SSA"),
    ("BH", "SSA"),
    ("BSB", "SSA"),
)


def build_seed_graph() -> Graph:
    """Build the operational graph; any inconsistency fails startup."""
    builder = GraphBuilder()
    for node in SEED_NODES:
        builder.register_node(node)
    for id_a, id_b in SEED_EDGES:
        builder.connect_bidirectional(id_a, id_b)
    return builder.build()
