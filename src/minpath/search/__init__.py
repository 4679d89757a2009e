"""Search algorithms for minpath.

This module implements the best-first A* search engine and the admissible
heuristics that guide it.
"""

from .heuristics import (
    BaseHeuristic, ManhattanHeuristic, BurrowLowerBound, ZeroHeuristic,
    create_heuristic, manhattan_distance, zero_heuristic
)
from .astar import (
    SearchEngine, SearchResult, SearchConfig, SearchStatistics, CostEntry,
    SearchError, HeuristicInconsistencyError, NegativeCostError, SearchAbortedError,
    create_search_engine, find_min_cost
)

__all__ = [
    'BaseHeuristic',
    'ManhattanHeuristic',
    'BurrowLowerBound',
    'ZeroHeuristic',
    'create_heuristic',
    'manhattan_distance',
    'zero_heuristic',
    'SearchEngine',
    'SearchResult',
    'SearchConfig',
    'SearchStatistics',
    'CostEntry',
    'SearchError',
    'HeuristicInconsistencyError',
    'NegativeCostError',
    'SearchAbortedError',
    'create_search_engine',
    'find_min_cost'
]
