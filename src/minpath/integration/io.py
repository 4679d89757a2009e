"""Loading of puzzle inputs for the minpath solvers."""

from pathlib import Path
from typing import List, Tuple, Union
import numpy as np

from minpath.core.data_models import Burrow, BurrowState, CostGrid, Hall, Room, Token, TokenKind

TOKEN_CHARS = {kind.symbol for kind in TokenKind}
OPEN_CHARS = TOKEN_CHARS | {'.'}
DIAGRAM_CHARS = OPEN_CHARS | {'#', ' '}


def parse_cost_grid(text: str) -> CostGrid:
    """Parse rows of single-digit cell costs.

    Args:
        text: One line per grid row, one digit (1-9) per cell

    Returns:
        CostGrid with the parsed costs

    Raises:
        ValueError: If the input is empty, ragged or contains non-digits
    """
    lines = [line.strip() for line in text.splitlines() if line.strip()]
    if not lines:
        raise ValueError("Empty grid input")

    width = len(lines[0])
    rows = []
    for row_idx, line in enumerate(lines):
        if len(line) != width:
            raise ValueError(f"Row {row_idx} has length {len(line)}, expected {width}")
        if not all(char in '123456789' for char in line):
            raise ValueError(f"Row {row_idx} contains a character other than 1-9: {line!r}")
        rows.append([int(char) for char in line])

    return CostGrid(np.array(rows, dtype=np.int64))


def parse_burrow(text: str) -> Tuple[Burrow, BurrowState]:
    """Parse a burrow diagram.

    The first line is wall, the second the hall, followed by one line per
    room level. Rooms are the open columns of the first room level and are
    assigned to token kinds A, B, C, D from left to right::

        #############
        #...........#
        ###B#C#B#D###
          #A#D#C#A#
          #########

    Returns:
        Tuple of (Burrow layout, initial state)

    Raises:
        ValueError: If the diagram is malformed
    """
    lines = [line.rstrip() for line in text.splitlines() if line.strip()]
    if len(lines) < 3:
        raise ValueError("Burrow diagram needs a wall, a hall and at least one room level")

    for line_idx, line in enumerate(lines):
        bad = set(line) - DIAGRAM_CHARS
        if bad:
            raise ValueError(f"Line {line_idx} contains invalid characters: {sorted(bad)}")

    hall_y = 1
    hall_line = lines[hall_y]
    hall_cells = [x for x, char in enumerate(hall_line) if char in OPEN_CHARS]
    if not hall_cells:
        raise ValueError("Hall line has no open cells")
    x_start, x_stop = hall_cells[0], hall_cells[-1] + 1
    if any(hall_line[x] not in OPEN_CHARS for x in range(x_start, x_stop)):
        raise ValueError("Hall must be one contiguous run of open cells")
    hall = Hall(y=hall_y, x_start=x_start, x_stop=x_stop)

    def char_at(x: int, y: int) -> str:
        line = lines[y] if y < len(lines) else ''
        return line[x] if x < len(line) else ' '

    room_columns = [x for x, char in enumerate(lines[hall_y + 1]) if char in OPEN_CHARS]
    kinds = list(TokenKind)
    if not room_columns:
        raise ValueError("No rooms found below the hall")
    if len(room_columns) > len(kinds):
        raise ValueError(f"Found {len(room_columns)} rooms, at most {len(kinds)} are supported")

    rooms: List[Room] = []
    for kind, x in zip(kinds, room_columns):
        if not x_start <= x < x_stop:
            raise ValueError(f"Room at column {x} does not open onto the hall")
        y_stop = hall_y + 1
        while char_at(x, y_stop) in OPEN_CHARS:
            y_stop += 1
        rooms.append(Room(x=x, y_start=hall_y + 1, y_stop=y_stop, kind=kind))
    burrow = Burrow(hall=hall, rooms=tuple(rooms))

    tokens = []
    for y, line in enumerate(lines):
        for x, char in enumerate(line):
            if char not in TOKEN_CHARS:
                continue
            pos = (x, y)
            if not hall.contains(pos) and burrow.room_at(pos) is None:
                raise ValueError(f"Token {char} at {pos} is outside the hall and rooms")
            tokens.append(Token(TokenKind.from_char(char), pos))

    room_kinds = {room.kind for room in rooms}
    for token in tokens:
        if token.kind not in room_kinds:
            raise ValueError(f"No room for token kind {token.kind.symbol}")

    return burrow, Burrow.make_state(tokens)


def _read_text(file_path: Union[str, Path]) -> str:
    file_path = Path(file_path)
    if not file_path.exists():
        raise FileNotFoundError(f"Puzzle file not found: {file_path}")
    with open(file_path, 'r') as f:
        return f.read()


def load_cost_grid(file_path: Union[str, Path]) -> CostGrid:
    """Load a cost grid from a text file."""
    return parse_cost_grid(_read_text(file_path))


def load_burrow(file_path: Union[str, Path]) -> Tuple[Burrow, BurrowState]:
    """Load a burrow diagram from a text file."""
    return parse_burrow(_read_text(file_path))
