"""Shared fixtures: a fake clock and a scripted stand-in for the remote solver."""

from __future__ import annotations

import threading
from collections import deque
from typing import Any

import pytest

from backend.engine.gameplay.game import GamePlay
from backend.engine.gameplay.moves import MoveEngine
from backend.engine.gamesolver.cache import SolutionCache
from backend.engine.gamestate.timer import TimerService
from backend.models.board import GOAL, Board
from backend.models.solution import Algorithm

ONE_MOVE = Board.from_flat([1, 2, 3, 4, 5, 6, 7, 0, 8])
THREE_MOVES = Board.from_flat([1, 2, 3, 0, 5, 6, 4, 7, 8])


# -- helpers ------------------------------------------------------------------


def bfs_solution(board: Board) -> tuple[list[str], list[list[int]]]:
    """Shortest move codes and path states from *board* to GOAL (shallow boards only)."""
    parents: dict[Board, tuple[Board, str] | None] = {board: None}
    queue = deque([board])
    while queue:
        current = queue.popleft()
        if current == GOAL:
            break
        for direction, nxt in MoveEngine.neighbors(current):
            if nxt not in parents:
                parents[nxt] = (current, direction.code)
                queue.append(nxt)

    codes: list[str] = []
    states = [GOAL.to_list()]
    node = GOAL
    while parents[node] is not None:
        prev, code = parents[node]  # type: ignore[misc]
        codes.append(code)
        states.append(prev.to_list())
        node = prev
    return codes[::-1], states[::-1]


class FakeClock:
    def __init__(self, now: float = 100.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeSolverClient:
    """Answers ``solve`` from canned payloads, or with a BFS solution.

    ``gate`` (if given) blocks each solve until it is set, keeping a fetch
    in flight for as long as a test needs.
    """

    def __init__(
        self,
        responses: dict[Board, Any] | None = None,
        error: Exception | None = None,
        gate: threading.Event | None = None,
    ) -> None:
        self.responses = responses or {}
        self.error = error
        self.gate = gate
        self.calls: list[tuple[Board, Algorithm]] = []
        self.shuffle_payload: Any = None

    def solve(self, board: Board, algorithm: Algorithm) -> Any:
        self.calls.append((board, algorithm))
        if self.gate is not None:
            self.gate.wait(timeout=2)
        if self.error is not None:
            raise self.error
        if board in self.responses:
            return self.responses[board]
        codes, states = bfs_solution(board)
        return {
            "moves": codes,
            "pathStates": states,
            "expandedNodeCount": len(codes) * 3,
            "solveTimeMs": 1,
        }

    def shuffle(self, steps: int) -> Any:
        if self.error is not None:
            raise self.error
        return self.shuffle_payload

    def close(self) -> None:
        pass


# -- fixtures -----------------------------------------------------------------


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def timer(clock: FakeClock) -> TimerService:
    return TimerService(clock)


@pytest.fixture
def solver() -> FakeSolverClient:
    return FakeSolverClient()


@pytest.fixture
def cache(solver: FakeSolverClient) -> SolutionCache:
    return SolutionCache(solver)  # type: ignore[arg-type]


@pytest.fixture
def game(timer: TimerService) -> GamePlay:
    return GamePlay(ONE_MOVE, timer=timer)
