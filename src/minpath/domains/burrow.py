"""Token sorting in a burrow of one hall and several rooms.

Every token has to end up in the room of its kind. Moves are generated on
demand from a full snapshot of token positions, so the state space is never
materialised. Legality rules:

- A token leaves a room only while that room still holds a token of another
  kind, and only if every cell between it and the hall is free.
- A token leaving a room stops on a free hall cell that is not directly
  above a room entrance; it cannot pass other tokens in the hall.
- A token in the hall may only enter its own room, only when that room holds
  no token of another kind, and only along free hall cells. It moves to the
  deepest free cell it can reach.

The cost of a move is its Manhattan length times the kind's movement cost.
"""

import logging
import threading
from dataclasses import replace
from typing import Dict, List, Optional, Tuple

from minpath.core.data_models import Burrow, BurrowState, Position, Token
from minpath.search.astar import SearchAbortedError, SearchConfig, SearchEngine, SearchResult
from minpath.search.heuristics import create_heuristic, manhattan_distance

logger = logging.getLogger(__name__)

Move = Tuple[BurrowState, int]


def is_finished(state: BurrowState, burrow: Burrow) -> bool:
    """Goal test: every token is inside the room of its kind."""
    return all(burrow.room_for(token.kind).contains(token.pos) for token in state)


def _moved(state: BurrowState, index: int, new_pos: Position) -> Move:
    token = state[index]
    new_tokens = list(state)
    new_tokens[index] = Token(token.kind, new_pos)
    cost = manhattan_distance(token.pos, new_pos) * token.kind.movement_cost
    return Burrow.make_state(new_tokens), cost


def _moves_to_hall(state: BurrowState, index: int, burrow: Burrow,
                   occupied: Dict[Position, Token]) -> List[Move]:
    token = state[index]
    room = burrow.room_at(token.pos)
    x, y = token.pos

    # Stay put once the room holds nothing but its own kind
    if all(other.kind == room.kind for pos, other in occupied.items() if room.contains(pos)):
        return []

    # Cells above the token up to and including the hall entrance must be free
    if any((x, above) in occupied for above in range(burrow.hall.y, y)):
        return []

    moves = []
    for step in (-1, 1):
        hall_x = x
        while burrow.hall.contains((hall_x, burrow.hall.y)) and (hall_x, burrow.hall.y) not in occupied:
            if not burrow.is_entrance(hall_x):
                moves.append(_moved(state, index, (hall_x, burrow.hall.y)))
            hall_x += step
    return moves


def _move_to_room(state: BurrowState, index: int, burrow: Burrow,
                  occupied: Dict[Position, Token]) -> List[Move]:
    token = state[index]
    room = burrow.room_for(token.kind)

    if any(other.kind != token.kind for pos, other in occupied.items() if room.contains(pos)):
        return []

    # Hall cells between the token and the entrance, entrance included
    x = token.pos[0]
    if room.x > x:
        path = range(x + 1, room.x + 1)
    else:
        path = range(room.x, x)
    if any((hall_x, burrow.hall.y) in occupied for hall_x in path):
        return []

    destination = None
    for cell in room.cells():
        if cell in occupied:
            break
        destination = cell
    if destination is None:
        return []

    return [_moved(state, index, destination)]


def calculate_moves(state: BurrowState, burrow: Burrow) -> List[Move]:
    """All legal single-token moves from ``state``.

    Pure function of its arguments: ``state`` is never modified.

    Args:
        state: Canonical snapshot of all token positions
        burrow: Hall and room layout

    Returns:
        List of (next_state, move_cost) pairs
    """
    occupied = burrow.occupancy(state)
    moves: List[Move] = []

    for index, token in enumerate(state):
        if burrow.room_at(token.pos) is not None:
            moves.extend(_moves_to_hall(state, index, burrow, occupied))
        elif burrow.hall.contains(token.pos):
            moves.extend(_move_to_room(state, index, burrow, occupied))

    return moves


def solve_burrow(burrow: Burrow,
                 state: BurrowState,
                 heuristic: str = 'lower_bound',
                 config: Optional[SearchConfig] = None,
                 cancel_event: Optional[threading.Event] = None) -> SearchResult:
    """Search the least total energy that sorts every token home.

    Args:
        burrow: Hall and room layout
        state: Initial token positions
        heuristic: 'lower_bound' or 'zero'
        config: Search configuration
        cancel_event: Optional cancellation token

    Returns:
        SearchResult whose cost is the minimum total energy
    """
    start = Burrow.make_state(state)

    engine = SearchEngine(config)
    engine.config = replace(engine.config, verify_goal_heuristic=True)

    h = create_heuristic(heuristic, burrow=burrow)
    logger.info(f"Solving burrow with {len(start)} tokens in {len(burrow.rooms)} rooms ({h.name})")

    return engine.search(
        start,
        lambda s: is_finished(s, burrow),
        lambda s: calculate_moves(s, burrow),
        h,
        cancel_event,
    )


def min_energy(burrow: Burrow,
               state: BurrowState,
               heuristic: str = 'lower_bound',
               config: Optional[SearchConfig] = None) -> Optional[int]:
    """Least total energy, or None when the tokens can never be sorted."""
    result = solve_burrow(burrow, state, heuristic, config)
    if result.aborted:
        raise SearchAbortedError(result)
    return result.cost


def render_state(state: BurrowState, burrow: Burrow) -> str:
    """Draw the burrow in the diagram format read by the loader."""
    occupied = burrow.occupancy(state)
    hall = burrow.hall
    width = hall.x_stop + 1
    depth = max(room.depth for room in burrow.rooms)

    def cell(x: int, y: int) -> str:
        if (x, y) in occupied:
            return occupied[(x, y)].kind.symbol
        if hall.contains((x, y)) or burrow.room_at((x, y)) is not None:
            return '.'
        return '#'

    lines = ['#' * width]
    lines.append(''.join(cell(x, hall.y) if hall.contains((x, hall.y)) else '#'
                         for x in range(width)))
    for y in range(hall.y + 1, hall.y + 1 + depth):
        lines.append(''.join(cell(x, y) for x in range(width)))
    lines.append('#' * width)
    return '\n'.join(lines)
