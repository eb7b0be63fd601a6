"""Turn loosely-shaped solver payloads into well-typed models.

Nothing in here raises: fields that are missing or malformed come back as
``None`` (or an empty tuple for moves).
"""

from __future__ import annotations

import math
from typing import Any, Mapping

from backend.engine.gameplay.moves import MoveEngine
from backend.models.board import Board, Direction
from backend.models.solution import SolutionResult


def _to_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if not isinstance(value, (int, float, str)):
        return None
    try:
        number = float(value)
    except (ValueError, OverflowError):
        return None
    return number if math.isfinite(number) else None


def _to_count(value: Any) -> int | None:
    number = _to_number(value)
    if number is None or number < 0 or not number.is_integer():
        return None
    return int(number)


def _to_duration(value: Any) -> float | None:
    number = _to_number(value)
    if number is None or number < 0:
        return None
    return number


def _to_depth(value: Any) -> int | None:
    number = _to_number(value)
    if number is None or not number.is_integer():
        return None
    return int(number)


def _first(payload: Mapping[str, Any], *names: str, convert) -> Any:
    for name in names:
        value = convert(payload.get(name))
        if value is not None:
            return value
    return None


def to_board(raw: Any) -> Board | None:
    """Return a Board for a valid 9-permutation, otherwise ``None``."""
    if not MoveEngine.validate(raw).valid:
        return None
    return Board(tuple(raw))


def normalize_moves(raw: Any) -> tuple[Direction, ...]:
    if not isinstance(raw, (list, tuple)):
        return ()
    moves = (Direction.from_code(str(m)) for m in raw)
    return tuple(m for m in moves if m is not None)


def normalize_path(raw: Any, move_count: int) -> tuple[Board, ...] | None:
    if not isinstance(raw, (list, tuple)) or len(raw) != move_count + 1:
        return None
    boards = [to_board(state) for state in raw]
    if any(b is None for b in boards):
        return None
    return tuple(boards)


def normalize_solve_result(payload: Any) -> SolutionResult:
    """Normalize a ``/solve`` response body."""
    if not isinstance(payload, Mapping):
        return SolutionResult()

    moves = normalize_moves(payload.get("moves"))
    hit_cap = payload.get("hitDepthCap")

    return SolutionResult(
        moves=moves,
        path_states=normalize_path(payload.get("pathStates"), len(moves)),
        expanded_node_count=_first(
            payload, "expandedNodeCount", "nodesExpanded", "expandedCount",
            convert=_to_count,
        ),
        solve_time_ms=_first(
            payload, "solveTimeMs", "solverTimeMs", "timeMs",
            convert=_to_duration,
        ),
        hit_depth_cap=hit_cap if isinstance(hit_cap, bool) else None,
        max_depth=_to_depth(payload.get("maxDepth")),
    )


def extract_shuffled_board(payload: Any) -> Board | None:
    """Pull the scrambled board out of a ``/shuffle`` response."""
    raw = payload
    if isinstance(payload, Mapping):
        raw = None
        for name in ("shuffledState", "shuffled", "state"):
            if payload.get(name) is not None:
                raw = payload[name]
                break
    return to_board(raw)
