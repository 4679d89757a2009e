"""Shared fixtures for the minpath test suite."""

import pytest

from minpath.config import reset_config


SAMPLE_GRID = """\
1163751742
1381373672
2136511328
3694931569
7463417111
1319128137
1359912421
3125421639
1293138521
2311944581
"""

SAMPLE_BURROW = """\
#############
#...........#
###B#C#B#D###
  #A#D#C#A#
  #########
"""

SAMPLE_BURROW_UNFOLDED = """\
#############
#...........#
###B#C#B#D###
  #D#C#B#A#
  #D#B#A#C#
  #A#D#C#A#
  #########
"""

SORTED_BURROW = """\
#############
#...........#
###A#B#C#D###
  #A#B#C#D#
  #########
"""

# Each token's only stopping cell is the one the other token needs to pass
DEADLOCKED_BURROW = """\
#######
###...#
###B#A#
  ###
"""


@pytest.fixture(autouse=True)
def clean_global_config():
    """Keep a configuration loaded by one test from leaking into the next."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def sample_grid_text():
    return SAMPLE_GRID


@pytest.fixture
def sample_burrow_text():
    return SAMPLE_BURROW


@pytest.fixture
def unfolded_burrow_text():
    return SAMPLE_BURROW_UNFOLDED


@pytest.fixture
def sorted_burrow_text():
    return SORTED_BURROW


@pytest.fixture
def deadlocked_burrow_text():
    return DEADLOCKED_BURROW
