"""Board-at-step lookup for solution playback."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Protocol

from backend.engine.gameplay.moves import MoveEngine
from backend.models.board import Board, Direction
from backend.models.solution import SolutionResult

logger = logging.getLogger(__name__)


class Trajectory(Protocol):
    def state_at(self, index: int) -> Board: ...


@dataclass(frozen=True)
class ExplicitPath:
    """States supplied by the solver, one per step (start state included)."""

    states: tuple[Board, ...]

    def state_at(self, index: int) -> Board:
        return self.states[index]


@dataclass(frozen=True)
class Reconstructed:
    """States recomputed by replaying moves from the snapshot."""

    snapshot: Board
    moves: tuple[Direction, ...]
    _states: list[Board] = field(default_factory=list, init=False, repr=False, compare=False)

    def state_at(self, index: int) -> Board:
        if not 0 <= index <= len(self.moves):
            raise IndexError(f"step {index} outside 0..{len(self.moves)}")
        states = self._states
        if not states:
            states.append(self.snapshot)
        while len(states) <= index:
            step = len(states) - 1
            states.append(MoveEngine.apply_move(self.moves[step], states[step]))
        return states[index]


def build_trajectory(snapshot: Board, result: SolutionResult) -> Trajectory:
    """Prefer the solver's own path when it starts at *snapshot* and follows the moves."""
    path = result.path_states
    if path is not None and _follows(snapshot, result.moves, path):
        return ExplicitPath(path)
    if path is not None:
        logger.info("solver path disagrees with its moves; recomputing states")
    return Reconstructed(snapshot, result.moves)


def _follows(snapshot: Board, moves: tuple[Direction, ...], path: tuple[Board, ...]) -> bool:
    if len(path) != len(moves) + 1 or path[0] != snapshot:
        return False
    return all(
        MoveEngine.apply_move(move, path[i]) == path[i + 1]
        for i, move in enumerate(moves)
    )
