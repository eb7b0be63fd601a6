"""One-shot "what should I do next?" hints."""

from __future__ import annotations

import asyncio
import logging

from backend.engine.gamesolver.cache import SolutionCache
from backend.models.board import Board, Direction
from backend.models.solution import Algorithm

logger = logging.getLogger(__name__)


class HintService:
    """Asks the solver for the first move from the current board.

    Only one hint request runs at a time.  The suggested direction is kept
    in ``direction`` for ``HINT_DURATION`` seconds so a frontend can
    highlight it.
    """

    HINT_DURATION = 0.65

    def __init__(self, cache: SolutionCache) -> None:
        self.cache = cache
        self.direction: Direction | None = None
        self.busy = False
        self._clear_handle: asyncio.TimerHandle | None = None

    async def request(self, board: Board, algorithm: Algorithm) -> Direction | None:
        if self.busy or board.is_solved():
            return None
        self.busy = True
        try:
            outcome = await self.cache.fetch_solution(board, algorithm)
        finally:
            self.busy = False

        if not outcome.ok or outcome.result is None or outcome.result.is_empty:
            logger.debug("no hint for %s: %s", board, outcome.error)
            return None

        self._show(outcome.result.moves[0])
        return self.direction

    def _show(self, direction: Direction) -> None:
        if self._clear_handle is not None:
            self._clear_handle.cancel()
        self.direction = direction
        self._clear_handle = asyncio.get_running_loop().call_later(
            self.HINT_DURATION, self._clear
        )

    def _clear(self) -> None:
        self.direction = None
        self._clear_handle = None
