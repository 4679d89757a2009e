"""CLI utility functions."""

import json
import logging
import threading
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Union


class TimeoutHandler:
    """Cancel a search after a wall-clock timeout.

    The handler owns a ``threading.Event`` that is set when the timer fires;
    pass ``handler.cancel_event`` to the search engine.
    """

    def __init__(self, timeout_seconds: Optional[float]):
        """Initialize timeout handler.

        Args:
            timeout_seconds: Timeout in seconds; None or <= 0 disables it
        """
        self.timeout_seconds = timeout_seconds
        self.cancel_event = threading.Event()
        self.timer: Optional[threading.Timer] = None

    @property
    def timed_out(self) -> bool:
        return self.cancel_event.is_set()

    def __enter__(self):
        """Start timeout timer."""
        if self.timeout_seconds is not None and self.timeout_seconds > 0:
            self.timer = threading.Timer(self.timeout_seconds, self.cancel_event.set)
            self.timer.daemon = True
            self.timer.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Stop timeout timer."""
        if self.timer:
            self.timer.cancel()


def setup_logging(level: int = logging.INFO,
                  format_string: Optional[str] = None) -> None:
    """Setup logging configuration.

    Args:
        level: Logging level
        format_string: Custom format string
    """
    if format_string is None:
        if level <= logging.DEBUG:
            format_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        else:
            format_string = "%(levelname)s: %(message)s"

    logging.basicConfig(
        level=level,
        format=format_string,
        datefmt="%Y-%m-%d %H:%M:%S"
    )


def save_results(results: Dict[str, Any],
                 output_path: Union[str, Path],
                 pretty: bool = True) -> None:
    """Save results to JSON file.

    Args:
        results: Results dictionary
        output_path: Output file path
        pretty: Whether to pretty-print JSON
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    # numpy scalars and arrays are not JSON serializable
    def convert_numpy(obj):
        if hasattr(obj, 'tolist'):
            return obj.tolist()
        elif isinstance(obj, dict):
            return {k: convert_numpy(v) for k, v in obj.items()}
        elif isinstance(obj, (list, tuple)):
            return [convert_numpy(item) for item in obj]
        else:
            return obj

    serializable_results = convert_numpy(results)

    with open(output_path, 'w') as f:
        if pretty:
            json.dump(serializable_results, f, indent=2, sort_keys=True)
        else:
            json.dump(serializable_results, f)


def find_puzzle_files(input_path: Union[str, Path],
                      max_files: Optional[int] = None,
                      pattern: str = '*.txt') -> List[Path]:
    """Find puzzle files in a directory, or return a single file.

    Args:
        input_path: Directory path or a single puzzle file
        max_files: Maximum number of files to return
        pattern: Glob pattern used inside directories

    Returns:
        Sorted list of puzzle file paths
    """
    input_path = Path(input_path)

    if input_path.is_file():
        return [input_path]

    if input_path.is_dir():
        puzzle_files = sorted(input_path.rglob(pattern))
        return puzzle_files[:max_files] if max_files else puzzle_files

    raise FileNotFoundError(f"Input path not found: {input_path}")


def format_duration(seconds: float) -> str:
    """Format duration in human-readable format.

    Args:
        seconds: Duration in seconds

    Returns:
        Formatted duration string
    """
    if seconds < 0.001:
        return f"{seconds*1000000:.1f}µs"
    elif seconds < 1:
        return f"{seconds*1000:.1f}ms"
    elif seconds < 60:
        return f"{seconds:.2f}s"
    elif seconds < 3600:
        minutes = int(seconds // 60)
        secs = seconds % 60
        return f"{minutes}m {secs:.1f}s"
    else:
        hours = int(seconds // 3600)
        minutes = int((seconds % 3600) // 60)
        secs = seconds % 60
        return f"{hours}h {minutes}m {secs:.1f}s"


class ProgressReporter:
    """Progress reporting for batch processing."""

    def __init__(self, total_tasks: int, report_interval: int = 10):
        """Initialize progress reporter.

        Args:
            total_tasks: Total number of puzzles
            report_interval: Report progress every N puzzles; 0 reports only at the end
        """
        self.total_tasks = total_tasks
        self.report_interval = report_interval
        self.completed_tasks = 0
        self.successful_tasks = 0
        self.start_time = time.time()

    def update(self, success: bool = False) -> None:
        """Update progress.

        Args:
            success: Whether the puzzle was solved
        """
        self.completed_tasks += 1
        if success:
            self.successful_tasks += 1

        if ((self.report_interval and self.completed_tasks % self.report_interval == 0) or
                self.completed_tasks == self.total_tasks):
            self._report_progress()

    def _report_progress(self) -> None:
        elapsed = time.time() - self.start_time

        tasks_per_second = self.completed_tasks / elapsed if elapsed > 0 else 0
        success_rate = self.successful_tasks / self.completed_tasks if self.completed_tasks > 0 else 0

        remaining_tasks = self.total_tasks - self.completed_tasks
        eta = remaining_tasks / tasks_per_second if tasks_per_second > 0 else 0

        print(f"Progress: {self.completed_tasks}/{self.total_tasks} "
              f"({self.completed_tasks/self.total_tasks*100:.1f}%) | "
              f"Solved: {self.successful_tasks} ({success_rate*100:.1f}%) | "
              f"Rate: {tasks_per_second:.1f} puzzles/s | "
              f"ETA: {format_duration(eta)}")


def create_result_summary(results: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Create summary statistics from batch results.

    Args:
        results: List of individual puzzle results

    Returns:
        Summary statistics dictionary
    """
    if not results:
        return {
            'total_tasks': 0,
            'successful_tasks': 0,
            'failed_tasks': 0,
            'success_rate': 0.0,
            'average_time': 0.0,
            'median_time': 0.0,
            'total_time': 0.0,
            'total_nodes_expanded': 0
        }

    times = sorted(r.get('computation_time', 0.0) for r in results)
    total_tasks = len(results)
    successful_tasks = sum(1 for r in results if r.get('success', False))

    n = len(times)
    if n % 2 == 0:
        median_time = (times[n//2 - 1] + times[n//2]) / 2
    else:
        median_time = times[n//2]

    total_time = sum(times)
    return {
        'total_tasks': total_tasks,
        'successful_tasks': successful_tasks,
        'failed_tasks': total_tasks - successful_tasks,
        'success_rate': successful_tasks / total_tasks,
        'average_time': total_time / total_tasks,
        'median_time': median_time,
        'total_time': total_time,
        'total_nodes_expanded': sum(r.get('nodes_expanded', 0) for r in results)
    }


def print_summary(summary: Dict[str, Any]) -> None:
    """Print batch processing summary."""
    print("\n" + "="*60)
    print("BATCH SUMMARY")
    print("="*60)

    print(f"Total puzzles:    {summary['total_tasks']}")
    print(f"Solved:           {summary['successful_tasks']} ({summary['success_rate']*100:.1f}%)")
    print(f"Unsolved:         {summary['failed_tasks']}")
    print(f"Nodes expanded:   {summary['total_nodes_expanded']}")

    print(f"\nTiming Statistics:")
    print(f"Total time:       {format_duration(summary['total_time'])}")
    print(f"Average time:     {format_duration(summary['average_time'])}")
    print(f"Median time:      {format_duration(summary['median_time'])}")
