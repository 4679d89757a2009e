"""Command-line interface for minpath.

This module provides CLI commands for solving single puzzles and batches.
"""

from .main import main_cli
from .commands import grid_command, burrow_command, batch_command, config_command
from .utils import setup_logging, save_results

__all__ = [
    'main_cli',
    'grid_command',
    'burrow_command',
    'batch_command',
    'config_command',
    'setup_logging',
    'save_results'
]
