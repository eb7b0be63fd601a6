"""Core gameplay: owns the live board and decides who may write to it."""

from __future__ import annotations

from enum import StrEnum

from backend.engine.gamegenerator.generator import GameGenerator
from backend.engine.gameplay.moves import MoveEngine
from backend.engine.gamesolver.heuristics import HeuristicEvaluator, MoveQuality
from backend.engine.gamestate.timer import TimerService
from backend.models.board import Board, Direction
from backend.models.solution import Algorithm


class BoardMode(StrEnum):
    """Which writer currently owns the board."""

    MANUAL = "manual"
    REPLAY = "replay"


class GamePlay:
    """Orchestrates a single game session.

    The board has two writers.  Player input goes through :meth:`move` and
    is refused while the board is in ``REPLAY`` mode; solution playback goes
    through :meth:`present`.
    """

    def __init__(
        self,
        board: Board | None = None,
        *,
        algorithm: Algorithm = Algorithm.ASTAR,
        timer: TimerService | None = None,
    ) -> None:
        self.board = board or GameGenerator.solved()
        self.algorithm = algorithm
        self.timer = timer or TimerService()
        self.mode = BoardMode.MANUAL
        self.moves: int = 0
        self.coach: bool = False
        self._open_panels: int = 0

    # -- writers --------------------------------------------------------------

    def move(self, direction: Direction) -> bool:
        """Move the blank in *direction* on behalf of the player.

        Returns True if the move was applied.
        """
        if self.mode is BoardMode.REPLAY:
            return False
        nxt = MoveEngine.apply_move(direction, self.board)
        if nxt == self.board:
            return False

        self.board = nxt
        self.moves += 1
        if not self._open_panels:
            self.timer.start()
        self._check_solved()
        return True

    def present(self, board: Board) -> None:
        """Repaint the board from solution playback."""
        self.board = board
        self._check_solved()

    def shuffle(self, board: Board) -> None:
        """Replace the board wholesale and restart the clock."""
        self.board = board
        self.moves = 0
        self.mode = BoardMode.MANUAL
        self.timer.reset()
        self.timer.start()
        self._check_solved()

    def _check_solved(self) -> None:
        if self.board.is_solved():
            self.timer.stop()

    # -- panels ---------------------------------------------------------------

    @property
    def panel_open(self) -> bool:
        return self._open_panels > 0

    def open_panel(self) -> None:
        """Suspend the clock while an overlay (algorithm/solution) is shown."""
        self._open_panels += 1
        self.timer.stop()

    def close_panel(self) -> None:
        self._open_panels = max(0, self._open_panels - 1)
        if not self._open_panels and not self.is_won:
            self.timer.start()

    # -- queries --------------------------------------------------------------

    @property
    def is_won(self) -> bool:
        return self.board.is_solved()

    @property
    def distance(self) -> int:
        return HeuristicEvaluator.manhattan(self.board)

    @property
    def move_quality(self) -> dict[Direction, MoveQuality]:
        """Coach grades for each legal move; empty while coach mode is off."""
        if not self.coach:
            return {}
        return HeuristicEvaluator.classify_moves(self.board)

    @property
    def timer_label(self) -> str:
        return self.timer.label

    @property
    def algorithm_label(self) -> str:
        return self.algorithm.label
