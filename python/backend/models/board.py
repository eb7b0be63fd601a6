"""Board model for the 3×3 sliding puzzle."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import ClassVar, Iterable

BOARD_SIZE = 3


class Direction(StrEnum):
    """Direction the *blank* travels.

    The solver speaks in single-letter codes (``U``/``D``/``L``/``R``);
    ``code`` and ``from_code`` convert between the two forms.
    """

    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"

    @property
    def code(self) -> str:
        return self.value[0].upper()

    @property
    def opposite(self) -> Direction:
        return _OPPOSITES[self]

    @classmethod
    def from_code(cls, code: object) -> Direction | None:
        """Map ``"U"``/``"d"``/`` "L " ``... to a Direction, or ``None``."""
        if not isinstance(code, str):
            return None
        return _BY_CODE.get(code.strip().upper())


_OPPOSITES = {
    Direction.UP: Direction.DOWN,
    Direction.DOWN: Direction.UP,
    Direction.LEFT: Direction.RIGHT,
    Direction.RIGHT: Direction.LEFT,
}

_BY_CODE = {d.code: d for d in Direction}


@dataclass(frozen=True)
class Board:
    """An immutable 3×3 board stored as a flat row-major permutation of 0..8.

    0 represents the blank.  Boards compare and hash by their tiles, so they
    can be used directly as cache keys.
    """

    tiles: tuple[int, ...]

    size: ClassVar[int] = BOARD_SIZE

    def __post_init__(self) -> None:
        tiles = tuple(self.tiles)
        cells = self.size * self.size
        if len(tiles) != cells:
            raise ValueError(
                f"Expected {cells} tiles for a {self.size}×{self.size} board, "
                f"got {len(tiles)}."
            )
        if sorted(tiles) != list(range(cells)):
            raise ValueError(
                f"Tiles must contain each value 0..{cells - 1} exactly once, "
                f"got {list(tiles)}."
            )
        object.__setattr__(self, "tiles", tiles)

    # -- construction helpers -------------------------------------------------

    @classmethod
    def from_flat(cls, flat: Iterable[int]) -> Board:
        """Create a board from a flat row-major tile list.

        Example::

            Board.from_flat([1, 2, 3, 4, 5, 6, 7, 0, 8])
        """
        return cls(tuple(flat))

    @classmethod
    def goal(cls) -> Board:
        return GOAL

    # -- queries --------------------------------------------------------------

    @property
    def blank_index(self) -> int:
        return self.tiles.index(0)

    @property
    def blank_pos(self) -> tuple[int, int]:
        return divmod(self.blank_index, self.size)

    @property
    def rows(self) -> list[tuple[int, ...]]:
        return [
            self.tiles[r * self.size : (r + 1) * self.size]
            for r in range(self.size)
        ]

    def get_tile(self, row: int, col: int) -> int:
        return self.tiles[row * self.size + col]

    def is_solved(self) -> bool:
        """Check if all tiles are in their goal positions."""
        return self.tiles == GOAL.tiles

    def is_tile_correct(self, row: int, col: int) -> bool:
        """Check if a specific tile is in its goal position."""
        val = self.get_tile(row, col)
        if val == 0:
            return row == self.size - 1 and col == self.size - 1
        return divmod(val - 1, self.size) == (row, col)

    def to_list(self) -> list[int]:
        return list(self.tiles)

    def __str__(self) -> str:
        return " ".join(str(v) for v in self.tiles)


GOAL = Board((1, 2, 3, 4, 5, 6, 7, 8, 0))
