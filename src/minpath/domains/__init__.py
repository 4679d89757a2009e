"""Problem domains solved with the search engine."""

from .grid import grid_neighbours, solve_grid, min_total_risk
from .burrow import calculate_moves, is_finished, solve_burrow, min_energy, render_state

__all__ = [
    'grid_neighbours',
    'solve_grid',
    'min_total_risk',
    'calculate_moves',
    'is_finished',
    'solve_burrow',
    'min_energy',
    'render_state'
]
