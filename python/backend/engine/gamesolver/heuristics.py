"""Manhattan-distance guidance for the coach arrows."""

from __future__ import annotations

from enum import StrEnum

from backend.engine.gameplay.moves import MoveEngine
from backend.models.board import Board, Direction


class MoveQuality(StrEnum):
    GOOD = "good"
    OK = "ok"
    BAD = "bad"


class HeuristicEvaluator:
    """Stateless scoring; all methods are static.  Purely advisory."""

    @staticmethod
    def manhattan(board: Board) -> int:
        """Sum of row + column distance of every tile from its goal square."""
        distance = 0
        for index, value in enumerate(board.tiles):
            if value == 0:
                continue
            r, c = divmod(index, board.size)
            gr, gc = divmod(value - 1, board.size)
            distance += abs(r - gr) + abs(c - gc)
        return distance

    @staticmethod
    def misplaced(board: Board) -> int:
        return sum(
            1
            for index, value in enumerate(board.tiles)
            if value != 0 and value != index + 1
        )

    @staticmethod
    def classify_moves(board: Board) -> dict[Direction, MoveQuality]:
        """Grade each legal direction by how it changes the Manhattan distance."""
        h0 = HeuristicEvaluator.manhattan(board)
        grades: dict[Direction, MoveQuality] = {}
        for direction, nxt in MoveEngine.neighbors(board):
            dh = HeuristicEvaluator.manhattan(nxt) - h0
            if dh < 0:
                grades[direction] = MoveQuality.GOOD
            elif dh == 0:
                grades[direction] = MoveQuality.OK
            else:
                grades[direction] = MoveQuality.BAD
        return grades
