"""Tests for cost grids and the grid route solver."""

import threading

import numpy as np
import pytest

from minpath.core.data_models import CostGrid
from minpath.domains.grid import grid_neighbours, min_total_risk, solve_grid
from minpath.integration.io import parse_cost_grid
from minpath.search.astar import SearchAbortedError, SearchConfig


@pytest.fixture
def detour_grid():
    # Column x=1 is expensive above the bottom row
    return CostGrid(np.array([
        [1, 9, 1],
        [1, 9, 1],
        [1, 1, 1],
    ]))


class TestCostGrid:
    """Test the CostGrid data model."""

    def test_shape(self):
        grid = CostGrid(np.ones((3, 5), dtype=int))

        assert grid.width == 5
        assert grid.height == 3
        assert grid.bottom_right == (4, 2)

    def test_cost_is_indexed_x_then_y(self):
        grid = CostGrid(np.array([[1, 2, 3], [4, 5, 6]]))

        assert grid.cost((2, 0)) == 3
        assert grid.cost((0, 1)) == 4
        assert isinstance(grid.cost((1, 1)), int)

    def test_cost_outside_grid(self):
        grid = CostGrid(np.ones((2, 2), dtype=int))

        with pytest.raises(IndexError):
            grid.cost((2, 0))
        with pytest.raises(IndexError):
            grid.cost((0, -1))

    def test_neighbours_corner_and_centre(self):
        grid = CostGrid(np.ones((3, 3), dtype=int))

        assert set(grid.neighbours((0, 0))) == {(1, 0), (0, 1)}
        assert set(grid.neighbours((1, 1))) == {(0, 1), (2, 1), (1, 0), (1, 2)}

    def test_rejects_invalid_cells(self):
        with pytest.raises(AssertionError):
            CostGrid(np.array([1, 2, 3]))
        with pytest.raises(AssertionError):
            CostGrid(np.array([[1, 0], [1, 1]]))
        with pytest.raises(AssertionError):
            CostGrid(np.zeros((0, 0), dtype=int))


class TestTiling:
    """Test grid expansion with cost wrap-around."""

    def test_single_cell_wraps(self):
        tiled = CostGrid(np.array([[8]])).tile(5)

        assert tiled.width == 5 and tiled.height == 5
        assert tiled.cells[0].tolist() == [8, 9, 1, 2, 3]
        assert tiled.cells[:, 0].tolist() == [8, 9, 1, 2, 3]
        assert tiled.cost((4, 4)) == 7

    def test_tile_dimensions(self, sample_grid_text):
        tiled = parse_cost_grid(sample_grid_text).tile(5)

        assert tiled.width == 50
        assert tiled.height == 50
        assert tiled.cells.min() >= 1
        assert tiled.cells.max() <= 9

    def test_first_tile_unchanged(self, sample_grid_text):
        grid = parse_cost_grid(sample_grid_text)

        np.testing.assert_array_equal(grid.tile(5).cells[:10, :10], grid.cells)
        np.testing.assert_array_equal(grid.tile(1).cells, grid.cells)

    def test_invalid_factor(self):
        with pytest.raises(ValueError, match="Tile factor"):
            CostGrid(np.ones((2, 2), dtype=int)).tile(0)


class TestSolveGrid:
    """Test cheapest routes across grids."""

    def test_uniform_grid(self):
        grid = CostGrid(np.ones((5, 5), dtype=int))

        assert min_total_risk(grid) == 8

    def test_single_cell(self):
        result = solve_grid(CostGrid(np.array([[7]])))

        assert result.success
        assert result.cost == 0
        assert result.nodes_expanded == 1

    def test_detour_around_expensive_cells(self, detour_grid):
        # Straight across pays 9 + 1, the way round pays six cells of 1
        assert min_total_risk(detour_grid, start=(0, 0), goal=(2, 0)) == 6

    def test_sample_grid(self, sample_grid_text):
        assert min_total_risk(parse_cost_grid(sample_grid_text)) == 40

    def test_tiled_sample_grid(self, sample_grid_text):
        assert min_total_risk(parse_cost_grid(sample_grid_text).tile(5)) == 315

    def test_heuristic_does_not_change_cost(self, sample_grid_text):
        grid = parse_cost_grid(sample_grid_text)

        guided = solve_grid(grid, heuristic='manhattan')
        blind = solve_grid(grid, heuristic='zero')

        assert guided.cost == blind.cost == 40

    def test_matches_brute_force(self):
        rng = np.random.default_rng(7)
        for _ in range(5):
            grid = CostGrid(rng.integers(1, 10, size=(3, 3)))
            assert min_total_risk(grid) == _brute_force_min_cost(grid)

    def test_endpoints_outside_grid(self, detour_grid):
        with pytest.raises(ValueError, match="start"):
            solve_grid(detour_grid, start=(3, 0))
        with pytest.raises(ValueError, match="goal"):
            solve_grid(detour_grid, goal=(0, 5))

    def test_unknown_heuristic(self, detour_grid):
        with pytest.raises(ValueError):
            solve_grid(detour_grid, heuristic='euclidean')

    def test_burrow_heuristic_rejected(self, detour_grid):
        with pytest.raises(ValueError, match="needs a burrow"):
            solve_grid(detour_grid, heuristic='lower_bound')

    def test_caller_config_not_modified(self, detour_grid):
        config = SearchConfig()
        solve_grid(detour_grid, config=config)

        assert config.verify_goal_heuristic is False

    def test_cancelled(self, sample_grid_text):
        cancel = threading.Event()
        cancel.set()

        result = solve_grid(parse_cost_grid(sample_grid_text), cancel_event=cancel)

        assert not result.success
        assert result.aborted
        assert result.termination_reason == "cancelled"

    def test_node_budget_raises(self, sample_grid_text):
        config = SearchConfig(max_nodes_expanded=3)

        with pytest.raises(SearchAbortedError) as exc_info:
            min_total_risk(parse_cost_grid(sample_grid_text), config=config)

        assert exc_info.value.result.termination_reason == "max_nodes_reached"
        assert exc_info.value.result.nodes_expanded == 3

    def test_neighbour_generator(self, detour_grid):
        neighbours = dict(grid_neighbours(detour_grid)((1, 0)))

        assert neighbours == {(0, 0): 1, (2, 0): 1, (1, 1): 9}


def _brute_force_min_cost(grid: CostGrid) -> int:
    """Cheapest simple path from top-left to bottom-right by exhaustive DFS."""
    goal = grid.bottom_right
    best = [float('inf')]

    def walk(pos, visited, cost):
        if cost >= best[0]:
            return
        if pos == goal:
            best[0] = cost
            return
        for nxt in grid.neighbours(pos):
            if nxt not in visited:
                visited.add(nxt)
                walk(nxt, visited, cost + grid.cost(nxt))
                visited.remove(nxt)

    walk((0, 0), {(0, 0)}, 0)
    return best[0]
