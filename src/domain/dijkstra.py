"""
Shortest Path Engine (Dijkstra)
===============================

Classic single-source Dijkstra over a directed adjacency map
``{node_id: [Edge(target_id, cost), ...]}``.  Edge costs are haversine
distances, hence non-negative, so no negative-cycle handling is needed.

Frontier
--------
A ``heapq`` binary heap keyed by tentative distance.  Decrease-key is done
by pushing a fresh entry and skipping stale ones on pop (lazy deletion).
Ties on distance are popped in node-id order.

Complexity: O((V + E) log E).
"""

from __future__ import annotations

import heapq
import math
from typing import Iterable, Mapping

from .entities import Edge, ShortestPathResult, UnknownNodeError


def known_nodes(graph: Mapping[str, Iterable[Edge]]) -> set[str]:
    """Every id that appears as a key or as any edge's target."""
    nodes = set(graph.keys())
    for edges in graph.values():
        nodes.update(edge.target_id for edge in edges)
    return nodes


def shortest_path(
    start_id: str,
    target_id: str,
    graph: Mapping[str, Iterable[Edge]],
) -> ShortestPathResult:
    """
    Return the cheapest path from *start_id* to *target_id*.

    An unreachable target is not an error: the result then has an empty
    path and an infinite cost.
    """
    nodes = known_nodes(graph)
    missing = [n for n in (start_id, target_id) if n not in nodes]
    if missing:
        raise UnknownNodeError(f"Unknown node(s) in graph: {', '.join(missing)}")

    dist: dict[str, float] = {node: math.inf for node in nodes}
    previous: dict[str, str] = {}
    dist[start_id] = 0.0

    frontier: list[tuple[float, str]] = [(0.0, start_id)]
    while frontier:
        current_dist, current = heapq.heappop(frontier)
        if current_dist > dist[current]:
            continue  # stale entry
        if current == target_id:
            break

        for edge in graph.get(current, ()):
            candidate = current_dist + edge.cost
            if candidate < dist[edge.target_id]:
                dist[edge.target_id] = candidate
                previous[edge.target_id] = current
                heapq.heappush(frontier, (candidate, edge.target_id))

    cost_to_target = dist[target_id]
    if math.isinf(cost_to_target):
        return ShortestPathResult(path=(), total_cost=math.inf)

    path = [target_id]
    while path[-1] != start_id:
        path.append(previous[path[-1]])
    path.reverse()
    return ShortestPathResult(path=tuple(path), total_cost=cost_to_target)
