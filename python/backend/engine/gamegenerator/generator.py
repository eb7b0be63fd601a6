"""Generates solvable sliding puzzle boards."""

from __future__ import annotations

import logging
import random

from backend.engine.gameplay.moves import MoveEngine
from backend.engine.gamesolver.client import SolverClient
from backend.engine.gamesolver.errors import SolverError
from backend.engine.gamesolver.normalize import extract_shuffled_board
from backend.models.board import GOAL, Board, Direction

logger = logging.getLogger(__name__)

FALLBACK_STEPS = 50


class GameGenerator:
    """Creates solvable puzzles by walking the blank away from the goal state."""

    @staticmethod
    def solved() -> Board:
        """Return the goal-state board (all tiles in order, blank bottom-right)."""
        return GOAL

    @staticmethod
    def scramble(
        board: Board,
        steps: int = FALLBACK_STEPS,
        rng: random.Random | None = None,
    ) -> Board:
        """Return *board* after *steps* random legal moves.

        The walk never immediately undoes its previous move.
        """
        rng = rng or random.Random()
        prev: Direction | None = None

        for _ in range(steps):
            options = MoveEngine.legal_moves(board)
            if prev is not None and prev.opposite in options and len(options) > 1:
                options.remove(prev.opposite)
            prev = rng.choice(options)
            board = MoveEngine.apply_move(prev, board)
        return board

    @staticmethod
    def generate(steps: int = FALLBACK_STEPS, rng: random.Random | None = None) -> Board:
        """Return a random, solvable, not-yet-solved board."""
        board = GameGenerator.scramble(GameGenerator.solved(), steps, rng)

        # Ensure the board is not already solved
        if board.is_solved():
            return GameGenerator.generate(steps, rng)

        return board

    @staticmethod
    def shuffle(client: SolverClient, steps: int) -> Board:
        """Ask the solver for a scramble; fall back to a local one on failure."""
        try:
            board = extract_shuffled_board(client.shuffle(steps))
        except SolverError as exc:
            logger.warning("remote shuffle failed (%s); scrambling locally", exc.message)
            return GameGenerator.generate()

        if board is None or not MoveEngine.is_solvable(board):
            logger.warning("remote shuffle returned an unusable board; scrambling locally")
            return GameGenerator.generate()
        return board
