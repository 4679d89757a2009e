"""Main CLI entry point for minpath."""

import sys
import argparse
import logging
from typing import List, Optional

from . import commands
from .utils import setup_logging


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {value}")
    return number


def _add_search_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        '--timeout', '-t',
        type=float,
        default=None,
        help='Cancel the search after this many seconds (default: no limit)'
    )

    parser.add_argument(
        '--max-nodes',
        type=int,
        default=None,
        help='Maximum number of states to expand (default: from configuration)'
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog='minpath',
        description='minpath - minimum-cost best-first search for grid and burrow puzzles',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  minpath grid cave.txt                         # Cheapest route across a cost grid
  minpath grid cave.txt --tile 5                # Same, on the grid tiled 5x5
  minpath burrow burrow.txt                     # Least energy to sort the burrow
  minpath batch puzzles/ --kind grid            # Solve every grid in a folder
  minpath config show                           # Show current configuration
        """
    )

    # Global options
    parser.add_argument(
        '--config', '-c',
        type=str,
        help='Configuration overrides, space separated (e.g., "search.max_nodes_expanded=100000")'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='count',
        default=0,
        help='Increase verbosity (use -v or -vv)'
    )

    parser.add_argument(
        '--quiet', '-q',
        action='store_true',
        help='Suppress all output except results'
    )

    parser.add_argument(
        '--output', '-o',
        type=str,
        help='Output file for results (JSON format)'
    )

    subparsers = parser.add_subparsers(
        dest='command',
        help='Available commands',
        metavar='COMMAND'
    )

    # Grid command
    grid_parser = subparsers.add_parser(
        'grid',
        help='Cheapest route across a cost grid',
        description='Find the lowest total cost from the top-left to the bottom-right cell'
    )
    grid_parser.add_argument('puzzle_file', type=str, help='Path to grid file (rows of digits 1-9)')
    grid_parser.add_argument(
        '--tile',
        type=int,
        default=None,
        help='Tile the grid N times in each direction before searching'
    )
    grid_parser.add_argument(
        '--heuristic',
        choices=['manhattan', 'zero'],
        default=None,
        help='Heuristic to guide the search (default: from configuration)'
    )
    _add_search_options(grid_parser)

    # Burrow command
    burrow_parser = subparsers.add_parser(
        'burrow',
        help='Least energy to sort tokens into their rooms',
        description='Find the least total energy to move every token into its room'
    )
    burrow_parser.add_argument('puzzle_file', type=str, help='Path to burrow diagram file')
    burrow_parser.add_argument(
        '--heuristic',
        choices=['lower_bound', 'zero'],
        default=None,
        help='Heuristic to guide the search (default: from configuration)'
    )
    _add_search_options(burrow_parser)

    # Batch command
    batch_parser = subparsers.add_parser(
        'batch',
        help='Solve multiple puzzles',
        description='Solve every puzzle file in a directory'
    )
    batch_parser.add_argument('input_path', type=str, help='Directory containing puzzle files')
    batch_parser.add_argument(
        '--kind',
        choices=['grid', 'burrow'],
        required=True,
        help='Puzzle kind of every file'
    )
    batch_parser.add_argument(
        '--pattern',
        type=str,
        default='*.txt',
        help='Glob pattern for puzzle files (default: *.txt)'
    )
    batch_parser.add_argument(
        '--max-tasks',
        type=int,
        help='Maximum number of puzzles to process'
    )
    batch_parser.add_argument(
        '--report-interval',
        type=_positive_int,
        default=10,
        help='Progress report interval (default: 10)'
    )
    batch_parser.add_argument(
        '--heuristic',
        choices=['manhattan', 'lower_bound', 'zero'],
        default=None,
        help='Heuristic for every puzzle; must suit --kind (default: from configuration)'
    )
    _add_search_options(batch_parser)

    # Config command
    config_parser = subparsers.add_parser(
        'config',
        help='Configuration management',
        description='Inspect solver configuration'
    )
    config_subparsers = config_parser.add_subparsers(
        dest='config_action',
        help='Configuration actions'
    )
    config_subparsers.add_parser('show', help='Show current configuration')
    config_subparsers.add_parser('validate', help='Validate configuration')

    return parser


def main_cli(args: Optional[List[str]] = None) -> int:
    """Main CLI entry point.

    Args:
        args: Command line arguments (uses sys.argv if None)

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    if parsed_args.quiet:
        log_level = logging.ERROR
    elif parsed_args.verbose == 0:
        log_level = logging.WARNING
    elif parsed_args.verbose == 1:
        log_level = logging.INFO
    else:
        log_level = logging.DEBUG

    setup_logging(log_level)
    logger = logging.getLogger(__name__)

    try:
        if not parsed_args.command:
            parser.print_help()
            return 1

        if parsed_args.command == 'grid':
            return commands.grid_command(parsed_args)
        if parsed_args.command == 'burrow':
            return commands.burrow_command(parsed_args)
        if parsed_args.command == 'batch':
            return commands.batch_command(parsed_args)
        if parsed_args.command == 'config':
            return commands.config_command(parsed_args)

        logger.error(f"Unknown command: {parsed_args.command}")
        return 1

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130  # Standard exit code for SIGINT
    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        return 1


def main() -> None:
    """Entry point for console script."""
    sys.exit(main_cli())


if __name__ == '__main__':
    main()
