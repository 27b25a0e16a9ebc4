"""Unit tests for the Dijkstra shortest-path engine."""

import math
import random

import pytest

from src.domain.dijkstra import known_nodes, shortest_path
from src.domain.entities import Edge, UnknownNodeError


def _path_cost(path, graph) -> float:
    total = 0.0
    for a, b in zip(path, path[1:]):
        total += min(e.cost for e in graph[a] if e.target_id == b)
    return total


def _brute_force_min(start, target, graph) -> float:
    """Cheapest simple path by exhaustive DFS (small graphs only)."""
    best = math.inf
    stack = [(start, (start,), 0.0)]
    while stack:
        node, visited, cost = stack.pop()
        if node == target:
            best = min(best, cost)
            continue
        for edge in graph.get(node, ()):
            if edge.target_id not in visited:
                stack.append((edge.target_id, visited + (edge.target_id,), cost + edge.cost))
    return best


def _random_graph(rng: random.Random, n: int, p: float) -> dict[str, list[Edge]]:
    ids = [f"N{i}" for i in range(n)]
    graph: dict[str, list[Edge]] = {i: [] for i in ids}
    for a in ids:
        for b in ids:
            if a != b and rng.random() < p:
                graph[a].append(Edge(b, round(rng.uniform(0.0, 50.0), 3)))
    return graph


class TestSeedGraphScenario:
    def test_sao_paulo_to_salvador_goes_through_belo_horizonte(self, seed_graph):
        result = shortest_path("SP", "SSA", seed_graph.adjacency)

        assert result.path == ("SP", "BH", "SSA")
        # SP-BH ~490.8 km + BH-SSA ~964.6 km
        assert result.total_cost == pytest.approx(1455.47, abs=0.5)
        assert result.total_cost == pytest.approx(_path_cost(result.path, seed_graph.adjacency))

    def test_beats_the_rio_alternative(self, seed_graph):
        result = shortest_path("SP", "SSA", seed_graph.adjacency)
        via_rio = _path_cost(("SP", "RJ", "SSA"), seed_graph.adjacency)
        assert via_rio == pytest.approx(1570.02, abs=0.5)
        assert result.total_cost < via_rio

    def test_start_equals_target(self, seed_graph):
        for node_id in seed_graph.nodes:
            result = shortest_path(node_id, node_id, seed_graph.adjacency)
            assert result.path == (node_id,)
            assert result.total_cost == 0.0


class TestUnreachableAndUnknown:
    def test_isolated_node_is_unreachable(self):
        graph = {"A": [Edge("B", 1.0)], "B": [Edge("A", 1.0)], "C": []}
        result = shortest_path("A", "C", graph)
        assert result.path == ()
        assert math.isinf(result.total_cost)
        assert not result.reachable

    def test_direction_matters(self):
        graph = {"A": [Edge("B", 2.0)]}
        assert shortest_path("A", "B", graph).path == ("A", "B")
        assert not shortest_path("B", "A", graph).reachable

    def test_node_known_only_as_edge_target(self):
        graph = {"A": [Edge("Z", 3.0)]}
        assert known_nodes(graph) == {"A", "Z"}
        assert shortest_path("A", "Z", graph).total_cost == 3.0

    @pytest.mark.parametrize("start,target", [("X", "A"), ("A", "X"), ("X", "Y")])
    def test_unknown_node_rejected(self, start, target):
        with pytest.raises(UnknownNodeError):
            shortest_path(start, target, {"A": [Edge("B", 1.0)]})


class TestOptimality:
    def test_relaxation_replaces_worse_tentative_distance(self):
        # direct A->C is expensive; A->B->C is cheaper and discovered later
        graph = {
            "A": [Edge("C", 10.0), Edge("B", 1.0)],
            "B": [Edge("C", 1.0)],
            "C": [],
        }
        result = shortest_path("A", "C", graph)
        assert result.path == ("A", "B", "C")
        assert result.total_cost == 2.0

    def test_zero_cost_edges(self):
        graph = {"A": [Edge("B", 0.0)], "B": [Edge("C", 0.0)], "C": []}
        result = shortest_path("A", "C", graph)
        assert result.path == ("A", "B", "C")
        assert result.total_cost == 0.0

    @pytest.mark.parametrize("seed", range(25))
    def test_matches_brute_force_on_random_graphs(self, seed):
        rng = random.Random(seed)
        graph = _random_graph(rng, n=rng.randint(2, 7), p=0.35)
        ids = sorted(graph)
        start, target = rng.choice(ids), rng.choice(ids)

        result = shortest_path(start, target, graph)
        expected = _brute_force_min(start, target, graph)

        if math.isinf(expected):
            assert result.path == ()
            assert math.isinf(result.total_cost)
        else:
            assert result.path[0] == start and result.path[-1] == target
            assert result.total_cost == pytest.approx(expected)
            assert result.total_cost == pytest.approx(_path_cost(result.path, graph))
