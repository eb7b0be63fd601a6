"""Move rules for the 3×3 board: legality, application, and solvability."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from backend.models.board import Board, Direction

# Offsets are applied to the blank's (row, col).
_OFFSETS: dict[Direction, tuple[int, int]] = {
    Direction.UP: (-1, 0),
    Direction.DOWN: (1, 0),
    Direction.LEFT: (0, -1),
    Direction.RIGHT: (0, 1),
}


@dataclass(frozen=True)
class Validation:
    valid: bool
    solvable: bool
    message: str


class MoveEngine:
    """Stateless rules engine; all methods are static.

    Directions describe where the blank travels: ``Direction.UP`` swaps
    the blank with the tile above it.
    """

    @staticmethod
    def can_move(direction: Direction, board: Board) -> bool:
        br, bc = board.blank_pos
        dr, dc = _OFFSETS[direction]
        return 0 <= br + dr < board.size and 0 <= bc + dc < board.size

    @staticmethod
    def apply_move(direction: Direction, board: Board) -> Board:
        """Return the board after moving the blank in *direction*.

        An illegal move returns *board* itself, unchanged.
        """
        if not MoveEngine.can_move(direction, board):
            return board
        br, bc = board.blank_pos
        dr, dc = _OFFSETS[direction]
        blank = board.blank_index
        target = (br + dr) * board.size + (bc + dc)
        tiles = list(board.tiles)
        tiles[blank], tiles[target] = tiles[target], tiles[blank]
        return Board(tuple(tiles))

    @staticmethod
    def apply_code(code: object, board: Board) -> Board:
        """Apply a single-letter move code; unknown codes are ignored."""
        direction = Direction.from_code(code)
        if direction is None:
            return board
        return MoveEngine.apply_move(direction, board)

    @staticmethod
    def apply_all(moves: Sequence[Direction], board: Board) -> Board:
        for direction in moves:
            board = MoveEngine.apply_move(direction, board)
        return board

    @staticmethod
    def legal_moves(board: Board) -> list[Direction]:
        return [d for d in Direction if MoveEngine.can_move(d, board)]

    @staticmethod
    def neighbors(board: Board) -> list[tuple[Direction, Board]]:
        return [(d, MoveEngine.apply_move(d, board)) for d in MoveEngine.legal_moves(board)]

    # -- solvability ----------------------------------------------------------

    @staticmethod
    def inversions(tiles: Board | Sequence[int]) -> int:
        """Count out-of-order pairs among the non-blank values."""
        values = tiles.tiles if isinstance(tiles, Board) else tiles
        arr = [v for v in values if v != 0]
        count = 0
        for i, a in enumerate(arr):
            for b in arr[i + 1 :]:
                if a > b:
                    count += 1
        return count

    @staticmethod
    def is_solvable(board: Board | Sequence[int]) -> bool:
        """Odd-width board: solvable iff the inversion count is even."""
        return MoveEngine.inversions(board) % 2 == 0

    @staticmethod
    def validate(values: object) -> Validation:
        """Check shape, contents, and parity of a raw tile sequence."""
        if not isinstance(values, (list, tuple)):
            return Validation(False, False, "State must be a list of 9 integers.")
        cells = Board.size * Board.size
        if len(values) != cells:
            return Validation(
                False, False,
                f"Invalid shape: expected length {cells}, got {len(values)}.",
            )
        seen: set[int] = set()
        for value in values:
            if isinstance(value, bool) or not isinstance(value, int):
                return Validation(False, False, f"Invalid tile value: {value!r}.")
            if not 0 <= value < cells:
                return Validation(
                    False, False,
                    f"Invalid tile value: {value} (allowed range is 0..{cells - 1}).",
                )
            if value in seen:
                return Validation(False, False, f"Duplicate tile value detected: {value}.")
            seen.add(value)

        inversions = MoveEngine.inversions(values)
        if inversions % 2:
            return Validation(
                True, False,
                f"Unsolvable configuration: inversion count is odd ({inversions}).",
            )
        return Validation(True, True, "State is valid and solvable.")
