"""Fetches, normalizes, and remembers solutions keyed by (board, algorithm)."""

from __future__ import annotations

import asyncio
import logging
from collections import OrderedDict
from dataclasses import dataclass

from backend.engine.gameplay.moves import MoveEngine
from backend.engine.gamesolver.client import SolverClient
from backend.engine.gamesolver.errors import SolverError
from backend.engine.gamesolver.normalize import normalize_solve_result
from backend.models.board import Board
from backend.models.solution import Algorithm, CacheKey, SolutionResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FetchOutcome:
    """Either a result or an error message, tagged with the key it answers."""

    key: CacheKey
    result: SolutionResult | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.result is not None


class SolutionCache:
    """Owns the single authoritative solver request.

    ``request`` starts a fetch or, while one is still in flight, hands back
    that same task; callers compare the outcome's key against the key they
    currently want before using it.
    """

    def __init__(self, client: SolverClient, max_entries: int = 32) -> None:
        self.client = client
        self.max_entries = max_entries
        self._results: OrderedDict[CacheKey, SolutionResult] = OrderedDict()
        self._pending: asyncio.Task[FetchOutcome] | None = None
        self._pending_key: CacheKey | None = None

    # -- queries --------------------------------------------------------------

    @property
    def pending(self) -> bool:
        return self._pending is not None and not self._pending.done()

    @property
    def pending_key(self) -> CacheKey | None:
        return self._pending_key if self.pending else None

    def lookup(self, key: CacheKey) -> SolutionResult | None:
        return self._results.get(key)

    @staticmethod
    def is_stale(key: CacheKey, board: Board, algorithm: Algorithm) -> bool:
        return key != CacheKey(board, algorithm)

    # -- fetching -------------------------------------------------------------

    def request(self, key: CacheKey) -> asyncio.Task[FetchOutcome]:
        """Start fetching *key*, or return the fetch already in flight."""
        if self.pending:
            assert self._pending is not None
            logger.debug("fetch for %s already in flight", self._pending_key)
            return self._pending
        self._pending_key = key
        self._pending = asyncio.get_running_loop().create_task(
            self.fetch_solution(key.board, key.algorithm)
        )
        return self._pending

    async def fetch_solution(self, snapshot: Board, algorithm: Algorithm) -> FetchOutcome:
        """Ask the solver for *snapshot*; never raises."""
        key = CacheKey(snapshot, algorithm)
        cached = self._results.get(key)
        if cached is not None:
            self._results.move_to_end(key)
            return FetchOutcome(key, result=cached)

        validation = MoveEngine.validate(snapshot.to_list())
        if not validation.solvable:
            return FetchOutcome(key, error=validation.message)

        loop = asyncio.get_running_loop()
        try:
            payload = await loop.run_in_executor(None, self.client.solve, snapshot, algorithm)
        except SolverError as exc:
            logger.warning("solve %s failed: %s", key.algorithm, exc.message)
            return FetchOutcome(key, error=exc.message)

        try:
            result = normalize_solve_result(payload)
        except Exception:
            logger.exception("could not read solver response for %s", key.algorithm)
            return FetchOutcome(key, error="Solver returned an unreadable response.")
        self._remember(key, result)
        return FetchOutcome(key, result=result)

    def _remember(self, key: CacheKey, result: SolutionResult) -> None:
        self._results[key] = result
        self._results.move_to_end(key)
        while len(self._results) > self.max_entries:
            self._results.popitem(last=False)

    def clear(self) -> None:
        self._results.clear()
