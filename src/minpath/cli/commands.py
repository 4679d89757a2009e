"""CLI command implementations."""

import json
import logging
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

from omegaconf import OmegaConf

from minpath import __version__
from minpath.config import load_config, validate_config, ConfigValidationError
from minpath.core.data_models import Burrow, BurrowState, CostGrid
from minpath.domains.burrow import solve_burrow
from minpath.domains.grid import solve_grid
from minpath.integration.io import load_burrow, load_cost_grid
from minpath.search.astar import SearchConfig, SearchResult

from .utils import (
    save_results, find_puzzle_files, format_duration,
    ProgressReporter, create_result_summary, print_summary, TimeoutHandler
)

logger = logging.getLogger(__name__)


class MinPathSolver:
    """Wires configuration, loaders and the two solvers together."""

    def __init__(self, config_overrides: Optional[List[str]] = None,
                 config_dir: Optional[str] = None,
                 apply_log_level: bool = False):
        """Initialize solver.

        Args:
            config_overrides: List of configuration overrides
            config_dir: Configuration directory (project ``conf`` by default)
            apply_log_level: Set the root log level from ``logging.level``
        """
        self.config = load_config(overrides=config_overrides or [], config_dir=config_dir)

        if apply_log_level:
            level = str(self.config.get('logging', {}).get('level', 'WARNING')).upper()
            logging.getLogger().setLevel(level)

        self.search_config = SearchConfig.from_config(self.config.get('search'))
        grid_cfg = self.config.get('grid', {})
        self.tile_factor = int(grid_cfg.get('tile_factor', 1))
        self.grid_heuristic = str(grid_cfg.get('heuristic', 'manhattan'))
        self.burrow_heuristic = str(self.config.get('burrow', {}).get('heuristic', 'lower_bound'))

        logger.info("minpath solver initialized")

    def solve_grid(self, grid: CostGrid, timeout: Optional[float] = None) -> Dict[str, Any]:
        """Cheapest route across ``grid`` after applying the configured tiling."""
        if self.tile_factor > 1:
            grid = grid.tile(self.tile_factor)

        with TimeoutHandler(timeout) as handler:
            result = solve_grid(grid, heuristic=self.grid_heuristic,
                                config=self.search_config, cancel_event=handler.cancel_event)

        payload = self._result_payload(result, handler.timed_out)
        payload.update({
            'kind': 'grid',
            'width': grid.width,
            'height': grid.height,
            'heuristic': self.grid_heuristic,
        })
        return payload

    def solve_burrow(self, burrow: Burrow, state: BurrowState,
                     timeout: Optional[float] = None) -> Dict[str, Any]:
        """Least energy to sort every token of ``state`` home."""
        with TimeoutHandler(timeout) as handler:
            result = solve_burrow(burrow, state, heuristic=self.burrow_heuristic,
                                  config=self.search_config, cancel_event=handler.cancel_event)

        payload = self._result_payload(result, handler.timed_out)
        payload.update({
            'kind': 'burrow',
            'tokens': len(state),
            'rooms': len(burrow.rooms),
            'heuristic': self.burrow_heuristic,
        })
        return payload

    def solve_file(self, kind: str, puzzle_file: Path, timeout: Optional[float] = None) -> Dict[str, Any]:
        if kind == 'grid':
            return self.solve_grid(load_cost_grid(puzzle_file), timeout)
        if kind == 'burrow':
            burrow, state = load_burrow(puzzle_file)
            return self.solve_burrow(burrow, state, timeout)
        raise ValueError(f"Unknown puzzle kind: {kind}")

    @staticmethod
    def _result_payload(result: SearchResult, timed_out: bool = False) -> Dict[str, Any]:
        payload = result.to_dict()
        # The timeout timer stops the search through its cancel event
        if timed_out and result.termination_reason == 'cancelled':
            payload['termination_reason'] = 'timeout'
        payload['unreachable'] = result.termination_reason == 'search_exhausted'
        return payload


def _config_overrides(args) -> List[str]:
    overrides = []
    if getattr(args, 'max_nodes', None) is not None:
        overrides.append(f"search.max_nodes_expanded={args.max_nodes}")
    if getattr(args, 'heuristic', None):
        section = getattr(args, 'kind', None) or args.command
        overrides.append(f"{section}.heuristic={args.heuristic}")
    if getattr(args, 'tile', None) is not None:
        overrides.append(f"grid.tile_factor={args.tile}")
    if getattr(args, 'config', None):
        overrides.extend(args.config.split())
    return overrides


def _apply_log_level(args) -> bool:
    return not args.quiet and args.verbose == 0


def _report(result: Dict[str, Any], args, source: str) -> None:
    if args.output:
        save_results(result, args.output)
        logger.info(f"Results saved to {args.output}")
    else:
        print(json.dumps(result, indent=2))

    if args.quiet:
        return

    print(f"\nPuzzle: {Path(source).name}")
    if result['success']:
        print(f"Minimum cost: {result['cost']}")
    elif result['unreachable']:
        print("No solution: goal is unreachable")
    else:
        print(f"Search stopped: {result['termination_reason']}")
    print(f"Nodes expanded: {result['nodes_expanded']}")
    print(f"Computation time: {format_duration(result['computation_time'])}")


def _solve_single(args, kind: str) -> int:
    try:
        logger.info(f"Loading {kind} from {args.puzzle_file}")
        solver = MinPathSolver(_config_overrides(args), apply_log_level=_apply_log_level(args))

        start_time = time.perf_counter()
        result = solver.solve_file(kind, Path(args.puzzle_file), timeout=args.timeout)
        result.update({
            'puzzle_file': str(args.puzzle_file),
            'solver_version': __version__,
            'total_time': time.perf_counter() - start_time,
        })

        _report(result, args, args.puzzle_file)
        return 0 if result['success'] else 1

    except Exception as e:
        logger.error(f"{kind.capitalize()} command failed: {e}")
        return 1


def grid_command(args) -> int:
    """Handle grid command.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code
    """
    return _solve_single(args, 'grid')


def burrow_command(args) -> int:
    """Handle burrow command.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code
    """
    return _solve_single(args, 'burrow')


def batch_command(args) -> int:
    """Handle batch command.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code (0 when every puzzle was solved)
    """
    try:
        logger.info(f"Finding puzzle files in {args.input_path}")
        puzzle_files = find_puzzle_files(args.input_path, args.max_tasks, args.pattern)
        if not puzzle_files:
            logger.error(f"No puzzle files found in {args.input_path}")
            return 1

        solver = MinPathSolver(_config_overrides(args), apply_log_level=_apply_log_level(args))
        reporter = ProgressReporter(len(puzzle_files), args.report_interval)

        results = []
        for puzzle_file in puzzle_files:
            try:
                result = solver.solve_file(args.kind, puzzle_file, timeout=args.timeout)
            except (ValueError, FileNotFoundError) as e:
                logger.warning(f"Skipping {puzzle_file}: {e}")
                result = {'success': False, 'error': str(e), 'computation_time': 0.0}
            result['puzzle_file'] = str(puzzle_file)
            results.append(result)
            reporter.update(result['success'])

        summary = create_result_summary(results)
        if args.output:
            save_results({'summary': summary, 'results': results}, args.output)
            logger.info(f"Results saved to {args.output}")
        if not args.quiet:
            print_summary(summary)

        return 0 if summary['failed_tasks'] == 0 else 1

    except Exception as e:
        logger.error(f"Batch command failed: {e}")
        return 1


def config_command(args) -> int:
    """Handle config command.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code
    """
    try:
        overrides = args.config.split() if getattr(args, 'config', None) else []

        if args.config_action == 'show':
            config = load_config(overrides=overrides)
            print("Current Configuration:")
            print("=" * 50)
            print(OmegaConf.to_yaml(config, resolve=True))
            return 0

        elif args.config_action == 'validate':
            try:
                config = load_config(overrides=overrides, validate=False)
                validate_config(config)
                print("Configuration is valid")
                return 0
            except ConfigValidationError as e:
                print(f"Configuration validation failed: {e}")
                return 1

        else:
            print("Unknown config action")
            return 1

    except Exception as e:
        logger.error(f"Config command failed: {e}")
        return 1
