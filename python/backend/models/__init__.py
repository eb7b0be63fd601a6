from backend.models.board import BOARD_SIZE, GOAL, Board, Direction
from backend.models.solution import Algorithm, CacheKey, SolutionResult

__all__ = [
    "Algorithm",
    "BOARD_SIZE",
    "Board",
    "CacheKey",
    "Direction",
    "GOAL",
    "SolutionResult",
]
