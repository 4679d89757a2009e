"""Configuration validation for minpath."""

import logging
from typing import Any

from omegaconf import DictConfig

logger = logging.getLogger(__name__)

GRID_HEURISTICS = ('manhattan', 'zero')
BURROW_HEURISTICS = ('lower_bound', 'zero')
LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


class ConfigValidationError(Exception):
    """Exception raised when configuration validation fails."""
    pass


def validate_config(config: DictConfig) -> None:
    """Validate the complete configuration.

    Args:
        config: Configuration to validate

    Raises:
        ConfigValidationError: If validation fails
    """
    try:
        validate_search_config(config.get('search', {}))
        validate_grid_config(config.get('grid', {}))
        validate_burrow_config(config.get('burrow', {}))
        validate_logging_config(config.get('logging', {}))

        logger.debug("Configuration validation passed")

    except ConfigValidationError:
        raise
    except Exception as e:
        raise ConfigValidationError(f"Configuration validation failed: {e}")


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_search_config(search_config: DictConfig) -> None:
    """Validate search configuration section.

    Args:
        search_config: Search configuration section
    """
    if not search_config:
        return

    max_nodes = search_config.get('max_nodes_expanded', None)
    if max_nodes is not None and (not _is_int(max_nodes) or max_nodes < 1):
        raise ConfigValidationError(
            f"max_nodes_expanded must be a positive integer or null, got {max_nodes}"
        )

    max_time = search_config.get('max_computation_time', None)
    if max_time is not None and (isinstance(max_time, bool) or
                                 not isinstance(max_time, (int, float)) or max_time <= 0):
        raise ConfigValidationError(
            f"max_computation_time must be a positive number or null, got {max_time}"
        )

    for key in ('check_heuristic_consistency', 'verify_goal_heuristic'):
        value = search_config.get(key, True)
        if not isinstance(value, bool):
            raise ConfigValidationError(f"{key} must be a boolean, got {value}")

    log_interval = search_config.get('log_interval', 10000)
    if not _is_int(log_interval) or log_interval < 0:
        raise ConfigValidationError(
            f"log_interval must be a non-negative integer, got {log_interval}"
        )


def validate_grid_config(grid_config: DictConfig) -> None:
    """Validate grid configuration section.

    Args:
        grid_config: Grid configuration section
    """
    if not grid_config:
        return

    tile_factor = grid_config.get('tile_factor', 1)
    if not _is_int(tile_factor) or tile_factor < 1:
        raise ConfigValidationError(
            f"tile_factor must be a positive integer, got {tile_factor}"
        )

    heuristic = grid_config.get('heuristic', 'manhattan')
    if heuristic not in GRID_HEURISTICS:
        raise ConfigValidationError(
            f"grid.heuristic must be one of {GRID_HEURISTICS}, got {heuristic}"
        )


def validate_burrow_config(burrow_config: DictConfig) -> None:
    """Validate burrow configuration section."""
    if not burrow_config:
        return

    heuristic = burrow_config.get('heuristic', 'lower_bound')
    if heuristic not in BURROW_HEURISTICS:
        raise ConfigValidationError(
            f"burrow.heuristic must be one of {BURROW_HEURISTICS}, got {heuristic}"
        )


def validate_logging_config(logging_config: DictConfig) -> None:
    if not logging_config:
        return

    level = str(logging_config.get('level', 'WARNING')).upper()
    if level not in LOG_LEVELS:
        raise ConfigValidationError(
            f"logging.level must be one of {LOG_LEVELS}, got {level}"
        )
