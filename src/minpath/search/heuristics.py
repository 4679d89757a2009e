"""Admissible heuristics for best-first search.

Implements the remaining-cost estimates used by the two solvers:
- Zero heuristic: no information, turns A* into Dijkstra
- Manhattan heuristic: grid distance to a fixed goal cell
- Burrow lower bound: per-token travel cost ignoring collisions
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Hashable, Tuple

from minpath.core.data_models import Burrow, BurrowState, Position, Token

logger = logging.getLogger(__name__)


def zero_heuristic(state: Hashable) -> int:
    """Trivial admissible estimate; reduces A* to Dijkstra."""
    return 0


def manhattan_distance(p1: Tuple[int, int], p2: Tuple[int, int]) -> int:
    """Manhattan (L1) distance between two positions."""
    return abs(p1[0] - p2[0]) + abs(p1[1] - p2[1])


class BaseHeuristic(ABC):
    """Abstract base class for heuristics.

    A heuristic must be a pure function of the state: the search engine
    rejects a heuristic that returns different values for the same state.
    """

    def __init__(self, name: str):
        """Initialize heuristic.

        Args:
            name: Name of the heuristic
        """
        self.name = name
        self.computation_count = 0

    @abstractmethod
    def compute(self, state: Hashable) -> int:
        """Compute heuristic value.

        Args:
            state: State to estimate the remaining cost from

        Returns:
            Lower bound on the remaining cost to a goal
        """
        pass

    def __call__(self, state: Hashable) -> int:
        """Compute heuristic and count the call."""
        self.computation_count += 1
        return self.compute(state)

    def get_stats(self) -> Dict[str, Any]:
        """Get heuristic statistics."""
        return {
            'name': self.name,
            'computation_count': self.computation_count,
        }

    def reset_stats(self) -> None:
        self.computation_count = 0


class ZeroHeuristic(BaseHeuristic):
    """Counted variant of :func:`zero_heuristic`."""

    def __init__(self):
        super().__init__("zero")

    def compute(self, state: Hashable) -> int:
        return 0


class ManhattanHeuristic(BaseHeuristic):
    """Manhattan distance to a goal cell.

    Admissible on grids whose cheapest cell costs 1, since every step
    closes at most one unit of distance.
    """

    def __init__(self, goal: Position):
        super().__init__("manhattan")
        self.goal = goal

    def compute(self, state: Position) -> int:
        return manhattan_distance(state, self.goal)


class BurrowLowerBound(BaseHeuristic):
    """Sum of each token's cheapest route home, ignoring the other tokens.

    A token in the hall still has to walk to its room entrance and step
    down at least once. A token in a foreign room has to climb out, walk
    to its room and step down. A token in its own room with a token of
    another kind below it has to climb out, step aside and back, and step
    down again. Settled tokens contribute nothing, so the bound is 0 at
    the goal.
    """

    def __init__(self, burrow: Burrow):
        super().__init__("lower_bound")
        self.burrow = burrow

    def compute(self, state: BurrowState) -> int:
        occupied = self.burrow.occupancy(state)
        hall_y = self.burrow.hall.y
        total = 0

        for token in state:
            home = self.burrow.room_for(token.kind)
            x, y = token.pos

            if self.burrow.hall.contains(token.pos):
                steps = abs(x - home.x) + 1
            elif home.contains(token.pos):
                if not self._blocks_foreign_token(token, occupied):
                    continue
                steps = (y - hall_y) + 3
            else:
                steps = (y - hall_y) + abs(x - home.x) + 1

            total += steps * token.kind.movement_cost

        return total

    def _blocks_foreign_token(self, token: Token, occupied: Dict[Position, Token]) -> bool:
        """Whether a token of another kind sits deeper in the same room."""
        home = self.burrow.room_for(token.kind)
        for y in range(token.pos[1] + 1, home.y_stop):
            other = occupied.get((home.x, y))
            if other is not None and other.kind != token.kind:
                return True
        return False


HEURISTIC_NAMES = ('zero', 'manhattan', 'lower_bound')


def create_heuristic(name: str, **kwargs) -> BaseHeuristic:
    """Factory function to create a heuristic by name.

    Args:
        name: One of 'zero', 'manhattan' (needs ``goal``) or
            'lower_bound' (needs ``burrow``)
        **kwargs: Constructor arguments for the chosen heuristic

    Returns:
        Configured heuristic instance
    """
    if name == 'zero':
        return ZeroHeuristic()
    if name == 'manhattan':
        if 'goal' not in kwargs:
            raise ValueError("Heuristic 'manhattan' needs a goal position")
        return ManhattanHeuristic(kwargs['goal'])
    if name == 'lower_bound':
        if 'burrow' not in kwargs:
            raise ValueError("Heuristic 'lower_bound' needs a burrow layout")
        return BurrowLowerBound(kwargs['burrow'])
    raise ValueError(f"Unknown heuristic '{name}', expected one of {HEURISTIC_NAMES}")
