"""Core data models for the minpath solvers."""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, Iterator, Optional, Tuple
import numpy as np


Position = Tuple[int, int]  # (x, y)


@dataclass
class CostGrid:
    """Rectangular grid of per-cell entry costs (digits 1-9)."""

    cells: np.ndarray  # Indexed as cells[y, x]

    def __post_init__(self) -> None:
        """Validate grid shape and cost range."""
        self.cells = np.asarray(self.cells, dtype=np.int64)
        assert self.cells.ndim == 2, f"Expected 2-D cost grid, got shape {self.cells.shape}"
        assert self.cells.size > 0, "Cost grid must not be empty"
        assert self.cells.min() >= 1, "Cell costs must be at least 1"

    @property
    def width(self) -> int:
        return int(self.cells.shape[1])

    @property
    def height(self) -> int:
        return int(self.cells.shape[0])

    def contains(self, pos: Position) -> bool:
        """Check whether a position lies inside the grid."""
        return 0 <= pos[0] < self.width and 0 <= pos[1] < self.height

    def cost(self, pos: Position) -> int:
        """Cost of entering the cell at ``pos``.

        Raises:
            IndexError: If the position is outside the grid
        """
        if not self.contains(pos):
            raise IndexError(f"Position {pos} outside {self.width}x{self.height} grid")
        return int(self.cells[pos[1], pos[0]])

    def neighbours(self, pos: Position) -> Iterator[Position]:
        """Yield the axis-adjacent cells of ``pos`` that are inside the grid."""
        x, y = pos
        for candidate in ((x - 1, y), (x + 1, y), (x, y - 1), (x, y + 1)):
            if self.contains(candidate):
                yield candidate

    def tile(self, factor: int = 5) -> 'CostGrid':
        """Expand the grid ``factor`` times in each direction.

        Each copy's costs are raised by its tile row plus tile column and
        wrapped back into 1-9: ``((cost - 1 + tile_index) mod 9) + 1``.

        Args:
            factor: Number of tiles along each axis

        Returns:
            New CostGrid of size (width * factor) x (height * factor)
        """
        if factor < 1:
            raise ValueError(f"Tile factor must be positive, got {factor}")

        rows = []
        for tile_row in range(factor):
            row = []
            for tile_col in range(factor):
                row.append((self.cells - 1 + tile_row + tile_col) % 9 + 1)
            rows.append(row)
        return CostGrid(np.block(rows))

    @property
    def bottom_right(self) -> Position:
        return (self.width - 1, self.height - 1)


class TokenKind(Enum):
    """Kinds of movable tokens and their per-step movement cost."""

    AMBER = 'A'
    BRONZE = 'B'
    COPPER = 'C'
    DESERT = 'D'

    @classmethod
    def from_char(cls, char: str) -> 'TokenKind':
        try:
            return cls(char)
        except ValueError:
            raise ValueError(f"Invalid token kind {char!r}") from None

    @property
    def symbol(self) -> str:
        return self.value

    @property
    def movement_cost(self) -> int:
        return _MOVEMENT_COSTS[self]

    def __lt__(self, other: 'TokenKind') -> bool:
        return self.value < other.value


_MOVEMENT_COSTS = {
    TokenKind.AMBER: 1,
    TokenKind.BRONZE: 10,
    TokenKind.COPPER: 100,
    TokenKind.DESERT: 1000,
}


@dataclass(frozen=True, order=True)
class Token:
    """A token of a given kind at a board position."""

    kind: TokenKind
    pos: Position


# Tokens sorted by (kind, pos); same-kind tokens are interchangeable
BurrowState = Tuple[Token, ...]


@dataclass(frozen=True)
class Hall:
    """Horizontal corridor at row ``y`` spanning columns [x_start, x_stop)."""

    y: int
    x_start: int
    x_stop: int

    def contains(self, pos: Position) -> bool:
        return self.x_start <= pos[0] < self.x_stop and pos[1] == self.y


@dataclass(frozen=True)
class Room:
    """Vertical room at column ``x`` spanning rows [y_start, y_stop), home of ``kind``."""

    x: int
    y_start: int
    y_stop: int
    kind: TokenKind

    def contains(self, pos: Position) -> bool:
        return self.x == pos[0] and self.y_start <= pos[1] < self.y_stop

    @property
    def depth(self) -> int:
        return self.y_stop - self.y_start

    def cells(self) -> Iterator[Position]:
        """Room cells from the entrance downwards."""
        for y in range(self.y_start, self.y_stop):
            yield (self.x, y)


@dataclass(frozen=True)
class Burrow:
    """Fixed layout of hall and rooms that tokens move through."""

    hall: Hall
    rooms: Tuple[Room, ...]

    def __post_init__(self) -> None:
        kinds = [room.kind for room in self.rooms]
        assert len(set(kinds)) == len(kinds), f"Duplicate room kinds: {kinds}"
        for room in self.rooms:
            assert self.hall.contains((room.x, self.hall.y)), \
                f"Room at x={room.x} has no entrance on the hall"
            assert room.y_start == self.hall.y + 1, \
                f"Room at x={room.x} must start directly below the hall"

    def room_for(self, kind: TokenKind) -> Room:
        """Destination room of a token kind."""
        for room in self.rooms:
            if room.kind == kind:
                return room
        raise KeyError(f"No room for token kind {kind.symbol}")

    def room_at(self, pos: Position) -> Optional[Room]:
        """Room containing ``pos``, if any."""
        for room in self.rooms:
            if room.contains(pos):
                return room
        return None

    def is_entrance(self, x: int) -> bool:
        """Whether hall column ``x`` sits directly above a room."""
        return any(room.x == x for room in self.rooms)

    @staticmethod
    def make_state(tokens: Iterable[Token]) -> BurrowState:
        """Canonical state from an arbitrary collection of tokens."""
        return tuple(sorted(tokens))

    def occupancy(self, state: BurrowState) -> Dict[Position, Token]:
        return {token.pos: token for token in state}
