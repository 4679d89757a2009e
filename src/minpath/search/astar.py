"""A* search engine for minpath.

This module implements a generic best-first (A*/Dijkstra) search over an
implicitly defined, weighted state graph. States are produced on demand by a
neighbour generator, so the same engine serves fixed grids and combinatorial
puzzle spaces alike.
"""

import heapq
import itertools
import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Hashable, Iterable, List, Optional, Set, Tuple, Union

from minpath.search.heuristics import zero_heuristic

logger = logging.getLogger(__name__)

Cost = Union[int, float]
State = Hashable
GoalTest = Callable[[State], bool]
NeighborGenerator = Callable[[State], Iterable[Tuple[State, Cost]]]
Heuristic = Callable[[State], Cost]


class SearchError(Exception):
    """Base class for search engine errors."""
    pass


class HeuristicInconsistencyError(SearchError):
    """Raised when a heuristic breaks its contract.

    Either it returned a different estimate for a state already in the open
    set, or a non-zero estimate at a goal while that self-check is enabled.
    """
    pass


class NegativeCostError(SearchError):
    """Raised when a neighbour generator yields a negative step cost."""
    pass


class SearchAbortedError(SearchError):
    """Raised when a search stops on a budget or cancellation before finishing."""

    def __init__(self, result: 'SearchResult'):
        super().__init__(f"Search aborted: {result.termination_reason} "
                         f"after {result.nodes_expanded} expansions")
        self.result = result


@dataclass
class CostEntry:
    """Cost record of a discovered state."""
    g: Cost  # cumulative cost from start
    h: Cost  # heuristic estimate to goal

    @property
    def f(self) -> Cost:
        """Total estimated cost f = g + h."""
        return self.g + self.h


@dataclass
class SearchResult:
    """Result from a search run."""
    success: bool
    cost: Optional[Cost] = None
    termination_reason: str = "unknown"
    goal_state: Optional[State] = None
    nodes_expanded: int = 0
    nodes_generated: int = 0
    computation_time: float = 0.0
    statistics: Dict[str, Any] = field(default_factory=dict)

    @property
    def aborted(self) -> bool:
        """True when the search stopped before exhausting or finding a goal."""
        return self.termination_reason in ("max_nodes_reached", "timeout", "cancelled")

    def to_dict(self) -> Dict[str, Any]:
        return {
            'success': self.success,
            'cost': self.cost,
            'termination_reason': self.termination_reason,
            'nodes_expanded': self.nodes_expanded,
            'nodes_generated': self.nodes_generated,
            'computation_time': self.computation_time,
            'statistics': dict(self.statistics),
        }


@dataclass
class SearchStatistics:
    """Detailed search statistics."""
    nodes_expanded: int = 0
    nodes_generated: int = 0
    duplicate_states: int = 0  # neighbours skipped because already closed
    cost_updates: int = 0  # open states reached again by a cheaper path
    stale_entries: int = 0  # superseded heap entries skipped on pop
    heuristic_computations: int = 0
    max_open_size: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert statistics to dictionary."""
        return {
            'nodes_expanded': self.nodes_expanded,
            'nodes_generated': self.nodes_generated,
            'duplicate_states': self.duplicate_states,
            'cost_updates': self.cost_updates,
            'stale_entries': self.stale_entries,
            'heuristic_computations': self.heuristic_computations,
            'max_open_size': self.max_open_size,
        }


@dataclass
class SearchConfig:
    """Configuration for A* search."""
    max_nodes_expanded: Optional[int] = None  # None = no node budget
    max_computation_time: Optional[float] = None  # seconds, None = no deadline
    check_heuristic_consistency: bool = True  # recompute h on rediscovery and compare
    verify_goal_heuristic: bool = False  # require h == 0 at the goal
    log_interval: int = 10000  # expansions between progress log lines

    @classmethod
    def from_config(cls, section: Optional[Any]) -> 'SearchConfig':
        """Build a SearchConfig from a config section (DictConfig or dict).

        Missing keys keep their defaults.
        """
        if not section:
            return cls()

        kwargs = {}
        for name in ('max_nodes_expanded', 'max_computation_time',
                     'check_heuristic_consistency', 'verify_goal_heuristic', 'log_interval'):
            if name in section:
                kwargs[name] = section[name]
        return cls(**kwargs)


class SearchEngine:
    """Best-first search with an open set, a closed set and a binary heap."""

    def __init__(self, config: Optional[SearchConfig] = None):
        """Initialize search engine.

        Args:
            config: Search configuration parameters. When omitted, the
                ``search`` section of the loaded configuration is used if any.
        """
        if config is None:
            from minpath.config import get_config
            cfg = get_config()
            config = SearchConfig.from_config(cfg.get('search') if cfg is not None else None)

        self.config = config
        self.statistics = SearchStatistics()

        logger.debug(f"Search engine initialized with max_nodes={self.config.max_nodes_expanded}, "
                     f"max_time={self.config.max_computation_time}")

    def search(self,
               start: State,
               goal_test: GoalTest,
               neighbors: NeighborGenerator,
               heuristic: Optional[Heuristic] = None,
               cancel_event: Optional[threading.Event] = None) -> SearchResult:
        """Search for the minimum cost from ``start`` to any goal state.

        Args:
            start: Initial state
            goal_test: Predicate identifying goal states
            neighbors: Maps a state to its (next_state, step_cost) pairs
            heuristic: Admissible estimate of the remaining cost (zero if omitted)
            cancel_event: Checked once per iteration; setting it stops the search

        Returns:
            SearchResult with the optimal cost on success

        Raises:
            HeuristicInconsistencyError: If the heuristic is not a pure function
                of the state, or is non-zero at a goal when that is verified
            NegativeCostError: If a neighbour has a negative step cost
        """
        heuristic = heuristic or zero_heuristic
        start_time = time.perf_counter()
        deadline = (start_time + self.config.max_computation_time
                    if self.config.max_computation_time is not None else None)

        # Reset statistics
        self.statistics = SearchStatistics()
        stats = self.statistics

        logger.info("Starting A* search")

        # Open set keyed by state, heap ordered by (f, insertion sequence)
        open_set: Dict[State, CostEntry] = {}
        closed_set: Set[State] = set()
        open_queue: List[Tuple[Cost, int, Cost, State]] = []
        sequence = itertools.count()

        start_entry = CostEntry(g=0, h=heuristic(start))
        stats.heuristic_computations += 1
        stats.nodes_generated += 1
        open_set[start] = start_entry
        heapq.heappush(open_queue, (start_entry.f, next(sequence), start_entry.g, start))

        termination_reason = "search_exhausted"
        while open_queue:
            if cancel_event is not None and cancel_event.is_set():
                termination_reason = "cancelled"
                break
            if (self.config.max_nodes_expanded is not None and
                    stats.nodes_expanded >= self.config.max_nodes_expanded):
                termination_reason = "max_nodes_reached"
                break
            if deadline is not None and time.perf_counter() > deadline:
                termination_reason = "timeout"
                break

            _, _, g, state = heapq.heappop(open_queue)
            entry = open_set.get(state)
            if entry is None or g != entry.g:
                # Closed already, or a cheaper path was recorded after this push
                stats.stale_entries += 1
                continue

            del open_set[state]
            closed_set.add(state)
            stats.nodes_expanded += 1

            if goal_test(state):
                if self.config.verify_goal_heuristic and entry.h != 0:
                    raise HeuristicInconsistencyError(
                        f"Heuristic estimated {entry.h} at a goal state")
                computation_time = time.perf_counter() - start_time
                logger.info(f"Goal reached with cost {entry.g} after "
                            f"{stats.nodes_expanded} expansions")
                return self._create_result(True, entry.g, "goal_reached", computation_time, state)

            if self.config.log_interval and stats.nodes_expanded % self.config.log_interval == 0:
                logger.debug(f"Expanded {stats.nodes_expanded} nodes, open={len(open_set)}, "
                             f"closed={len(closed_set)}, f={entry.f}")

            for neighbor, step_cost in neighbors(state):
                if step_cost < 0:
                    raise NegativeCostError(f"Negative step cost {step_cost} to {neighbor!r}")
                if neighbor in closed_set:
                    stats.duplicate_states += 1
                    continue

                new_g = entry.g + step_cost
                existing = open_set.get(neighbor)
                if existing is None:
                    new_entry = CostEntry(g=new_g, h=heuristic(neighbor))
                    stats.heuristic_computations += 1
                    stats.nodes_generated += 1
                    open_set[neighbor] = new_entry
                    heapq.heappush(open_queue, (new_entry.f, next(sequence), new_g, neighbor))
                    continue

                if self.config.check_heuristic_consistency:
                    new_h = heuristic(neighbor)
                    stats.heuristic_computations += 1
                    if new_h != existing.h:
                        raise HeuristicInconsistencyError(
                            f"Heuristic returned {new_h} for {neighbor!r}, "
                            f"previously {existing.h}")

                if new_g < existing.g:
                    existing.g = new_g
                    stats.cost_updates += 1
                    heapq.heappush(open_queue, (existing.f, next(sequence), new_g, neighbor))

            stats.max_open_size = max(stats.max_open_size, len(open_set))

        computation_time = time.perf_counter() - start_time
        if termination_reason == "search_exhausted":
            logger.info(f"Search exhausted after {stats.nodes_expanded} expansions; goal unreachable")
        else:
            logger.warning(f"Search stopped ({termination_reason}) after "
                           f"{stats.nodes_expanded} expansions")
        return self._create_result(False, None, termination_reason, computation_time)

    def _create_result(self, success: bool, cost: Optional[Cost], termination_reason: str,
                       computation_time: float, goal_state: Optional[State] = None) -> SearchResult:
        return SearchResult(
            success=success,
            cost=cost,
            termination_reason=termination_reason,
            goal_state=goal_state,
            nodes_expanded=self.statistics.nodes_expanded,
            nodes_generated=self.statistics.nodes_generated,
            computation_time=computation_time,
            statistics=self.statistics.to_dict(),
        )

    def get_search_stats(self) -> Dict[str, Any]:
        """Get statistics of the last search together with the configuration."""
        stats = self.statistics.to_dict()
        stats['config'] = {
            'max_nodes_expanded': self.config.max_nodes_expanded,
            'max_computation_time': self.config.max_computation_time,
            'check_heuristic_consistency': self.config.check_heuristic_consistency,
            'verify_goal_heuristic': self.config.verify_goal_heuristic,
        }
        return stats


def find_min_cost(start: State,
                  goal_test: GoalTest,
                  neighbors: NeighborGenerator,
                  heuristic: Optional[Heuristic] = None,
                  config: Optional[SearchConfig] = None,
                  cancel_event: Optional[threading.Event] = None) -> Optional[Cost]:
    """Minimum total cost from ``start`` to a state satisfying ``goal_test``.

    Returns:
        The optimal cost, or None if no goal state is reachable

    Raises:
        SearchAbortedError: If a node budget, deadline or cancellation stopped
            the search before it could decide
    """
    result = SearchEngine(config).search(start, goal_test, neighbors, heuristic, cancel_event)
    if result.success:
        return result.cost
    if result.aborted:
        raise SearchAbortedError(result)
    return None


def create_search_engine(max_nodes_expanded: Optional[int] = None,
                         max_computation_time: Optional[float] = None,
                         check_heuristic_consistency: bool = True) -> SearchEngine:
    """Factory function to create a search engine with custom configuration.

    Args:
        max_nodes_expanded: Maximum nodes to expand (None for unbounded)
        max_computation_time: Time budget in seconds (None for unbounded)
        check_heuristic_consistency: Verify the heuristic on rediscovered states

    Returns:
        Configured SearchEngine instance
    """
    config = SearchConfig(
        max_nodes_expanded=max_nodes_expanded,
        max_computation_time=max_computation_time,
        check_heuristic_consistency=check_heuristic_consistency
    )

    return SearchEngine(config)
