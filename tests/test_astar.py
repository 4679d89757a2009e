"""Tests for the A* search engine."""

import itertools
import threading

import numpy as np
import pytest

from minpath.search.astar import (
    SearchEngine, SearchResult, SearchConfig, CostEntry, create_search_engine, find_min_cost,
    HeuristicInconsistencyError, NegativeCostError, SearchAbortedError
)
from minpath.search.heuristics import zero_heuristic


def graph_neighbors(graph):
    """Neighbour generator over an explicit adjacency dict."""
    return lambda state: graph.get(state, [])


def random_graph(seed, num_nodes=12, edge_probability=0.25, max_weight=9):
    """Random directed graph with non-negative (possibly zero) weights."""
    rng = np.random.default_rng(seed)
    graph = {node: [] for node in range(num_nodes)}
    for u in range(num_nodes):
        for v in range(num_nodes):
            if u != v and rng.random() < edge_probability:
                graph[u].append((v, int(rng.integers(0, max_weight + 1))))
    return graph


def bellman_ford(graph, source):
    """Exhaustive shortest distances from ``source`` (inf when unreachable)."""
    dist = {node: float('inf') for node in graph}
    dist[source] = 0
    for _ in range(len(graph)):
        changed = False
        for u, edges in graph.items():
            for v, w in edges:
                if dist[u] + w < dist[v]:
                    dist[v] = dist[u] + w
                    changed = True
        if not changed:
            break
    return dist


def reversed_graph(graph):
    reverse = {node: [] for node in graph}
    for u, edges in graph.items():
        for v, w in edges:
            reverse[v].append((u, w))
    return reverse


def line_graph(state):
    """Unbounded graph 0 -> 1 -> 2 -> ..."""
    return [(state + 1, 1)]


class TestCostEntry:
    """Test CostEntry functionality."""

    def test_f_score(self):
        entry = CostEntry(g=2, h=3)
        assert entry.f == 5

    def test_g_is_mutable(self):
        entry = CostEntry(g=10, h=1)
        entry.g = 4
        assert entry.f == 5


class TestSearchConfig:
    """Test SearchConfig functionality."""

    def test_default_config(self):
        config = SearchConfig()

        assert config.max_nodes_expanded is None
        assert config.max_computation_time is None
        assert config.check_heuristic_consistency is True
        assert config.verify_goal_heuristic is False
        assert config.log_interval == 10000

    def test_from_config_section(self):
        config = SearchConfig.from_config({
            'max_nodes_expanded': 50,
            'verify_goal_heuristic': True,
            'unrelated_key': 'ignored'
        })

        assert config.max_nodes_expanded == 50
        assert config.verify_goal_heuristic is True
        assert config.max_computation_time is None

    def test_from_empty_section(self):
        assert SearchConfig.from_config(None) == SearchConfig()
        assert SearchConfig.from_config({}) == SearchConfig()

    def test_factory(self):
        engine = create_search_engine(max_nodes_expanded=7, max_computation_time=1.5,
                                      check_heuristic_consistency=False)

        assert engine.config.max_nodes_expanded == 7
        assert engine.config.max_computation_time == 1.5
        assert engine.config.check_heuristic_consistency is False


class TestSearchEngine:
    """Test the best-first search loop."""

    @pytest.fixture
    def engine(self):
        return SearchEngine(SearchConfig())

    @pytest.fixture
    def detour_graph(self):
        """S reaches A expensively, cheaply via B, and expensively again via C."""
        return {
            'S': [('A', 10), ('B', 1), ('C', 1)],
            'B': [('A', 1)],
            'C': [('A', 50)],
            'A': [('G', 1)],
        }

    def test_start_is_goal(self, engine):
        result = engine.search('S', lambda s: s == 'S', graph_neighbors({}))

        assert result.success is True
        assert result.cost == 0
        assert result.termination_reason == "goal_reached"
        assert result.goal_state == 'S'
        assert result.nodes_expanded == 1

    def test_simple_chain(self, engine):
        graph = {'S': [('A', 2)], 'A': [('G', 3)]}

        result = engine.search('S', lambda s: s == 'G', graph_neighbors(graph))

        assert isinstance(result, SearchResult)
        assert result.success is True
        assert result.cost == 5

    def test_unreachable_goal(self, engine):
        graph = {'S': [('A', 1)], 'A': [('S', 1)], 'G': []}

        result = engine.search('S', lambda s: s == 'G', graph_neighbors(graph))

        assert result.success is False
        assert result.cost is None
        assert result.termination_reason == "search_exhausted"
        assert result.aborted is False
        assert result.nodes_expanded == 2

    def test_cheaper_rediscovery_lowers_cost(self, engine, detour_graph):
        result = engine.search('S', lambda s: s == 'G', graph_neighbors(detour_graph))

        assert result.cost == 3
        # A improves once via B; the later, dearer route via C changes nothing
        assert result.statistics['cost_updates'] == 1

    def test_improved_state_expanded_once(self, detour_graph):
        expanded = []
        original_neighbors = graph_neighbors(detour_graph)

        def neighbors(state):
            expanded.append(state)
            return original_neighbors(state)

        result = SearchEngine(SearchConfig()).search('S', lambda s: s == 'G', neighbors)

        # A is expanded once, after its improvement, so G is reached with g(A) = 2
        assert expanded == ['S', 'B', 'C', 'A']
        assert result.cost == 3

    def test_ties_expand_in_insertion_order(self, engine):
        graph = {'S': [('A', 1), ('B', 1), ('C', 1)]}
        expanded = []

        def neighbors(state):
            expanded.append(state)
            return graph.get(state, [])

        engine.search('S', lambda s: False, neighbors)

        assert expanded == ['S', 'A', 'B', 'C']

    def test_closed_states_are_not_reopened(self, engine):
        graph = {'S': [('A', 1)], 'A': [('S', 1), ('G', 5)]}

        result = engine.search('S', lambda s: s == 'G', graph_neighbors(graph))

        assert result.cost == 6
        assert result.statistics['duplicate_states'] == 1

    def test_zero_cost_edges(self, engine):
        graph = {'S': [('A', 0)], 'A': [('B', 0)], 'B': [('G', 0)]}

        assert engine.search('S', lambda s: s == 'G', graph_neighbors(graph)).cost == 0

    def test_float_costs(self, engine):
        graph = {'S': [('A', 0.5), ('G', 2.0)], 'A': [('G', 0.25)]}

        result = engine.search('S', lambda s: s == 'G', graph_neighbors(graph))

        assert result.cost == pytest.approx(0.75)

    def test_negative_cost_rejected(self, engine):
        graph = {'S': [('A', -1)]}

        with pytest.raises(NegativeCostError):
            engine.search('S', lambda s: s == 'A', graph_neighbors(graph))

    def test_statistics_reset_between_runs(self, engine, detour_graph):
        first = engine.search('S', lambda s: s == 'G', graph_neighbors(detour_graph))
        second = engine.search('S', lambda s: s == 'G', graph_neighbors(detour_graph))

        assert first.statistics == second.statistics
        assert engine.get_search_stats()['nodes_expanded'] == second.nodes_expanded

    def test_search_stats_include_config(self, engine):
        engine.search('S', lambda s: True, graph_neighbors({}))
        stats = engine.get_search_stats()

        assert stats['nodes_expanded'] == 1
        assert stats['config']['max_nodes_expanded'] is None
        assert stats['config']['check_heuristic_consistency'] is True

    def test_result_to_dict(self, engine):
        result = engine.search('S', lambda s: True, graph_neighbors({}))
        payload = result.to_dict()

        assert payload['success'] is True
        assert payload['cost'] == 0
        assert payload['termination_reason'] == "goal_reached"
        assert 'statistics' in payload
        assert 'goal_state' not in payload

    def test_engine_without_config_uses_defaults(self):
        engine = SearchEngine()
        assert engine.config == SearchConfig()


class TestHeuristicContract:
    """Test detection of heuristics that break their contract."""

    def test_impure_heuristic_detected(self):
        graph = {'S': [('A', 1), ('B', 1)], 'A': [('X', 1)], 'B': [('X', 1)]}
        counter = itertools.count()

        def drifting_heuristic(state):
            return next(counter)

        engine = SearchEngine(SearchConfig())
        with pytest.raises(HeuristicInconsistencyError):
            engine.search('S', lambda s: False, graph_neighbors(graph), drifting_heuristic)

    def test_impure_heuristic_tolerated_when_check_disabled(self):
        graph = {'S': [('A', 1), ('B', 1)], 'A': [('X', 1)], 'B': [('X', 1)]}
        counter = itertools.count()

        engine = SearchEngine(SearchConfig(check_heuristic_consistency=False))
        result = engine.search('S', lambda s: False, graph_neighbors(graph),
                               lambda s: next(counter))

        assert result.termination_reason == "search_exhausted"

    def test_nonzero_goal_estimate_detected(self):
        engine = SearchEngine(SearchConfig(verify_goal_heuristic=True))

        with pytest.raises(HeuristicInconsistencyError):
            engine.search('S', lambda s: True, graph_neighbors({}), lambda s: 5)

    def test_nonzero_goal_estimate_allowed_by_default(self):
        engine = SearchEngine(SearchConfig())

        result = engine.search('S', lambda s: True, graph_neighbors({}), lambda s: 5)

        assert result.cost == 0


class TestBudgetsAndCancellation:
    """Test node budget, deadline and cancellation token."""

    def test_node_budget(self):
        engine = SearchEngine(SearchConfig(max_nodes_expanded=10))

        result = engine.search(0, lambda s: False, line_graph)

        assert result.success is False
        assert result.termination_reason == "max_nodes_reached"
        assert result.nodes_expanded == 10
        assert result.aborted is True

    def test_node_budget_does_not_hide_reachable_goal(self):
        engine = SearchEngine(SearchConfig(max_nodes_expanded=10))

        result = engine.search(0, lambda s: s == 5, line_graph)

        assert result.cost == 5

    def test_deadline(self):
        engine = SearchEngine(SearchConfig(max_computation_time=0.05))

        result = engine.search(0, lambda s: False, line_graph)

        assert result.termination_reason == "timeout"
        assert result.computation_time >= 0.05

    def test_preset_cancellation(self):
        cancel = threading.Event()
        cancel.set()

        result = SearchEngine(SearchConfig()).search(0, lambda s: False, line_graph,
                                                     cancel_event=cancel)

        assert result.termination_reason == "cancelled"
        assert result.nodes_expanded == 0

    def test_cancellation_during_search(self):
        cancel = threading.Event()

        def neighbors(state):
            if state == 4:
                cancel.set()
            return line_graph(state)

        result = SearchEngine(SearchConfig()).search(0, lambda s: False, neighbors,
                                                     cancel_event=cancel)

        assert result.termination_reason == "cancelled"
        assert result.nodes_expanded == 5


class TestFindMinCost:
    """Test the optional-cost contract and search properties."""

    @pytest.mark.parametrize("seed", range(20))
    def test_matches_exhaustive_shortest_paths(self, seed):
        graph = random_graph(seed)
        goal = len(graph) - 1
        expected = bellman_ford(graph, 0)[goal]

        cost = find_min_cost(0, lambda s: s == goal, graph_neighbors(graph))

        if expected == float('inf'):
            assert cost is None
        else:
            assert cost == expected

    @pytest.mark.parametrize("seed", range(10))
    def test_informed_heuristic_gives_same_cost(self, seed):
        graph = random_graph(seed, num_nodes=15)
        goal = len(graph) - 1
        to_goal = bellman_ford(reversed_graph(graph), goal)

        def exact_heuristic(state):
            remaining = to_goal[state]
            return 0 if remaining == float('inf') else remaining

        plain = find_min_cost(0, lambda s: s == goal, graph_neighbors(graph), zero_heuristic)
        informed = find_min_cost(0, lambda s: s == goal, graph_neighbors(graph), exact_heuristic)

        assert plain == informed

    def test_idempotent(self):
        graph = random_graph(3)
        goal = len(graph) - 1

        first = find_min_cost(0, lambda s: s == goal, graph_neighbors(graph))
        second = find_min_cost(0, lambda s: s == goal, graph_neighbors(graph))

        assert first == second

    def test_unreachable_returns_none(self):
        assert find_min_cost('S', lambda s: s == 'G', graph_neighbors({'S': []})) is None

    def test_budget_abort_is_an_error(self):
        with pytest.raises(SearchAbortedError) as exc_info:
            find_min_cost(0, lambda s: False, line_graph,
                          config=SearchConfig(max_nodes_expanded=3))

        assert exc_info.value.result.termination_reason == "max_nodes_reached"
