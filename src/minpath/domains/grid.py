"""Lowest-total-cost route across a grid of cell entry costs.

Each cell is a search state; moving into a cell costs that cell's value and
movement is 4-directional. The start cell's own cost is never paid.
"""

import logging
import threading
from dataclasses import replace
from typing import Callable, List, Optional, Tuple

from minpath.core.data_models import CostGrid, Position
from minpath.search.astar import SearchAbortedError, SearchConfig, SearchEngine, SearchResult
from minpath.search.heuristics import create_heuristic

logger = logging.getLogger(__name__)


def grid_neighbours(grid: CostGrid) -> Callable[[Position], List[Tuple[Position, int]]]:
    """Neighbour generator for ``grid``: adjacent cells with their entry cost."""
    def neighbours(pos: Position) -> List[Tuple[Position, int]]:
        return [(cell, grid.cost(cell)) for cell in grid.neighbours(pos)]
    return neighbours


def _resolve_endpoints(grid: CostGrid, start: Optional[Position],
                       goal: Optional[Position]) -> Tuple[Position, Position]:
    start = start if start is not None else (0, 0)
    goal = goal if goal is not None else grid.bottom_right
    for name, pos in (('start', start), ('goal', goal)):
        if not grid.contains(pos):
            raise ValueError(f"{name} {pos} outside {grid.width}x{grid.height} grid")
    return start, goal


def solve_grid(grid: CostGrid,
               start: Optional[Position] = None,
               goal: Optional[Position] = None,
               heuristic: str = 'manhattan',
               config: Optional[SearchConfig] = None,
               cancel_event: Optional[threading.Event] = None) -> SearchResult:
    """Search the cheapest route from ``start`` to ``goal``.

    Args:
        grid: Cell entry costs
        start: Start cell, top-left by default
        goal: Goal cell, bottom-right by default
        heuristic: 'manhattan' or 'zero'
        config: Search configuration
        cancel_event: Optional cancellation token

    Returns:
        SearchResult whose cost is the total risk of the cheapest route
    """
    start, goal = _resolve_endpoints(grid, start, goal)

    engine = SearchEngine(config)
    # Both grid heuristics are exactly 0 at the goal cell
    engine.config = replace(engine.config, verify_goal_heuristic=True)

    h = create_heuristic(heuristic, goal=goal)
    logger.info(f"Solving {grid.width}x{grid.height} grid from {start} to {goal} ({h.name})")

    return engine.search(start, lambda pos: pos == goal, grid_neighbours(grid), h, cancel_event)


def min_total_risk(grid: CostGrid,
                   start: Optional[Position] = None,
                   goal: Optional[Position] = None,
                   heuristic: str = 'manhattan',
                   config: Optional[SearchConfig] = None) -> Optional[int]:
    """Cheapest route cost, or None when the goal cannot be reached."""
    result = solve_grid(grid, start, goal, heuristic, config)
    if result.aborted:
        raise SearchAbortedError(result)
    return result.cost
