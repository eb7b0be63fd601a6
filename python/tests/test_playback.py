"""PlaybackController: fetching, stepping, autoplay, and staleness.

Every scenario runs on a fresh event loop via ``asyncio.run``.  The solver
is a :class:`FakeSolverClient`; a ``threading.Event`` gate holds a fetch in
flight where a test needs to act while it is pending.
"""

from __future__ import annotations

import asyncio
import threading

import pytest

from backend.engine.gameplay.game import BoardMode, GamePlay
from backend.engine.gameplay.moves import MoveEngine
from backend.engine.gamesolver.cache import SolutionCache
from backend.engine.gamesolver.errors import NetworkError
from backend.engine.gamestate.timer import TimerService
from backend.engine.playback.controller import PlaybackController, PlaybackState
from backend.models.board import GOAL, Board, Direction
from backend.models.solution import Algorithm

from tests.conftest import ONE_MOVE, THREE_MOVES, FakeSolverClient

FAST = 0.01


# -- helpers ------------------------------------------------------------------


def _setup(
    board: Board = ONE_MOVE,
    solver: FakeSolverClient | None = None,
    tick_interval: float = FAST,
) -> tuple[PlaybackController, GamePlay, FakeSolverClient]:
    solver = solver or FakeSolverClient()
    game = GamePlay(board, timer=TimerService())
    controller = PlaybackController(
        game,
        SolutionCache(solver),  # type: ignore[arg-type]
        tick_interval=tick_interval,
    )
    return controller, game, solver


# -- opening ------------------------------------------------------------------


def test_open_loads_solution_and_locks_manual_input() -> None:
    controller, game, solver = _setup()

    async def scenario() -> None:
        task = controller.open()
        assert controller.state is PlaybackState.LOADING
        assert game.mode is BoardMode.REPLAY
        assert not controller.manual_input_enabled
        assert not game.move(Direction.UP)

        assert await task
        assert controller.state is PlaybackState.READY
        assert controller.step_index == 0
        assert controller.moves == (Direction.RIGHT,)
        assert controller.is_fresh
        assert game.mode is BoardMode.MANUAL
        assert controller.manual_input_enabled

    asyncio.run(scenario())
    assert solver.calls == [(ONE_MOVE, Algorithm.ASTAR)]


def test_open_twice_issues_one_request() -> None:
    controller, _, solver = _setup()

    async def scenario() -> None:
        first = controller.open()
        second = controller.open()
        assert first is second
        await first

    asyncio.run(scenario())
    assert len(solver.calls) == 1


def test_open_suspends_clock_and_close_resumes_it() -> None:
    controller, game, _ = _setup()
    game.timer.start()

    async def scenario() -> None:
        await controller.open()
        assert not game.timer.running
        controller.close()
        assert game.timer.running
        assert controller.state is PlaybackState.IDLE
        assert controller.session is None

    asyncio.run(scenario())


def test_replaying_solution_reaches_goal() -> None:
    controller, game, _ = _setup(Board.from_flat([1, 2, 3, 4, 5, 6, 7, 0, 8]))

    async def scenario() -> None:
        await controller.open(Algorithm.ASTAR)
        assert MoveEngine.apply_all(controller.moves, controller.session.snapshot) == GOAL
        assert await controller.next()
        assert game.board == GOAL
        assert game.is_won

    asyncio.run(scenario())


# -- stepping -----------------------------------------------------------------


def test_prev_next_reset_follow_trajectory() -> None:
    controller, game, _ = _setup(THREE_MOVES)

    async def scenario() -> None:
        await controller.open()
        session = controller.session
        assert session is not None
        assert controller.moves == (Direction.DOWN, Direction.RIGHT, Direction.RIGHT)

        assert not await controller.prev()
        assert await controller.next()
        assert await controller.next()
        assert controller.step_index == 2
        assert controller.state is PlaybackState.STEPPING
        assert game.board == session.trajectory.state_at(2)
        assert controller.step_label == "Step 2/3"

        assert await controller.prev()
        assert controller.step_index == 1
        assert game.board == MoveEngine.apply_move(Direction.DOWN, THREE_MOVES)

        assert await controller.reset_steps()
        assert controller.step_index == 0
        assert controller.state is PlaybackState.READY
        assert game.board == THREE_MOVES

    asyncio.run(scenario())


def test_next_stops_at_end_and_jump_to_checks_bounds() -> None:
    controller, game, _ = _setup(THREE_MOVES)

    async def scenario() -> None:
        await controller.open()
        assert await controller.jump_to(3)
        assert game.board == GOAL
        assert controller.progress == 1.0
        assert not await controller.next()
        assert controller.step_index == 3
        assert not await controller.jump_to(4)
        assert not await controller.jump_to(-1)
        assert await controller.jump_to(0)
        assert game.board == THREE_MOVES

    asyncio.run(scenario())


def test_next_flashes_a_short_direction_cue() -> None:
    controller, _, _ = _setup()
    controller.CUE_DURATION = FAST

    async def scenario() -> None:
        await controller.open()
        await controller.next()
        assert controller.cue is Direction.RIGHT
        await asyncio.sleep(FAST * 5)
        assert controller.cue is None

    asyncio.run(scenario())


def test_navigation_is_ignored_while_fetch_in_flight() -> None:
    gate = threading.Event()
    controller, game, _ = _setup(THREE_MOVES, FakeSolverClient(gate=gate))

    async def scenario() -> None:
        task = controller.open()
        assert not await controller.next()
        assert not await controller.play_pause()
        assert not await controller.reset_steps()
        gate.set()
        await task
        assert game.board == THREE_MOVES
        assert controller.step_index == 0

    asyncio.run(scenario())


# -- staleness ----------------------------------------------------------------


def test_manual_move_makes_next_refetch_before_replaying() -> None:
    controller, game, solver = _setup()
    presented: list[Board] = []
    original_present = game.present

    def spy(board: Board) -> None:
        presented.append(board)
        original_present(board)

    game.present = spy  # type: ignore[method-assign]

    async def scenario() -> None:
        await controller.open()
        assert game.move(Direction.UP)
        moved = game.board
        assert not controller.is_fresh

        assert await controller.next()

        assert solver.calls == [(ONE_MOVE, Algorithm.ASTAR), (moved, Algorithm.ASTAR)]
        session = controller.session
        assert session is not None
        assert session.snapshot == moved
        assert session.moves == (Direction.DOWN, Direction.RIGHT)
        assert presented == [ONE_MOVE]
        assert controller.step_index == 1

    asyncio.run(scenario())


def test_result_for_superseded_algorithm_is_discarded() -> None:
    gate = threading.Event()
    controller, _, solver = _setup(solver=FakeSolverClient(gate=gate))

    async def scenario() -> None:
        task = controller.open()
        await asyncio.sleep(0.05)
        assert controller.change_algorithm(Algorithm.BFS) is task
        gate.set()
        assert await task
        assert controller.session is not None
        assert controller.session.key.algorithm is Algorithm.BFS

    asyncio.run(scenario())
    assert solver.calls == [(ONE_MOVE, Algorithm.ASTAR), (ONE_MOVE, Algorithm.BFS)]


def test_result_arriving_after_close_is_ignored() -> None:
    gate = threading.Event()
    controller, game, _ = _setup(solver=FakeSolverClient(gate=gate))

    async def scenario() -> None:
        task = controller.open()
        await asyncio.sleep(0.05)
        controller.close()
        assert game.mode is BoardMode.MANUAL
        gate.set()
        assert not await task
        assert controller.session is None
        assert controller.state is PlaybackState.IDLE

    asyncio.run(scenario())


def test_reset_after_manual_move_refetches_for_the_moved_board() -> None:
    controller, game, solver = _setup(THREE_MOVES)

    async def scenario() -> None:
        await controller.open()
        assert game.move(Direction.UP)
        moved = game.board

        assert await controller.reset_steps()

        assert game.board == moved
        session = controller.session
        assert session is not None
        assert session.snapshot == moved
        assert controller.step_index == 0
        assert controller.state is PlaybackState.READY
        assert controller.is_fresh

    asyncio.run(scenario())
    assert [board for board, _ in solver.calls] == [THREE_MOVES, MoveEngine.apply_move(Direction.UP, THREE_MOVES)]


def test_closing_with_fetch_in_flight_reenables_manual_input() -> None:
    gate = threading.Event()
    controller, game, _ = _setup(solver=FakeSolverClient(gate=gate))

    async def scenario() -> None:
        task = controller.open()
        await asyncio.sleep(0.05)
        assert not controller.manual_input_enabled
        controller.close()
        assert not controller.loading
        assert controller.manual_input_enabled
        assert game.move(Direction.UP)
        gate.set()
        await task

    asyncio.run(scenario())


# -- autoplay -----------------------------------------------------------------


def test_autoplay_runs_to_the_end_at_fixed_cadence() -> None:
    controller, game, _ = _setup(THREE_MOVES, tick_interval=PlaybackController.TICK_INTERVAL)

    async def scenario() -> None:
        await controller.open()
        assert await controller.play_pause()
        assert controller.autoplaying
        await asyncio.sleep(0.2)
        assert controller.step_index == 0
        await asyncio.sleep(1.4)
        assert controller.step_index == 3
        assert not controller.autoplaying
        assert controller.state is PlaybackState.READY

    asyncio.run(scenario())
    assert game.board == GOAL
    assert game.mode is BoardMode.MANUAL


def test_manual_moves_refused_during_autoplay() -> None:
    controller, game, _ = _setup(THREE_MOVES, tick_interval=0.05)

    async def scenario() -> None:
        await controller.open()
        await controller.play_pause()
        assert game.mode is BoardMode.REPLAY
        assert not controller.manual_input_enabled
        assert not game.move(Direction.UP)
        await asyncio.sleep(0.3)

    asyncio.run(scenario())
    assert game.board == GOAL


def test_pause_stops_ticking() -> None:
    controller, _, _ = _setup(THREE_MOVES, tick_interval=0.05)

    async def scenario() -> None:
        await controller.open()
        await controller.play_pause()
        await asyncio.sleep(0.07)
        assert not await controller.play_pause()
        step = controller.step_index
        assert controller.state in (PlaybackState.STEPPING, PlaybackState.READY)
        await asyncio.sleep(0.2)
        assert controller.step_index == step

    asyncio.run(scenario())


def test_play_at_end_rewinds() -> None:
    controller, game, _ = _setup(THREE_MOVES)

    async def scenario() -> None:
        await controller.open()
        await controller.jump_to(3)
        assert await controller.play_pause()
        assert controller.step_index == 0
        assert game.board == THREE_MOVES
        await asyncio.sleep(FAST * 20)
        assert controller.step_index == 3

    asyncio.run(scenario())


def test_close_cancels_autoplay() -> None:
    controller, game, _ = _setup(THREE_MOVES, tick_interval=0.05)

    async def scenario() -> None:
        await controller.open()
        await controller.play_pause()
        controller.close()
        board = game.board
        await asyncio.sleep(0.2)
        assert game.board == board
        assert not controller.autoplaying
        assert game.timer.running

    asyncio.run(scenario())


def test_change_algorithm_cancels_autoplay_and_refetches() -> None:
    controller, _, solver = _setup(THREE_MOVES, tick_interval=0.05)

    async def scenario() -> None:
        await controller.open()
        await controller.play_pause()
        task = controller.change_algorithm(Algorithm.DFS)
        assert task is not None
        assert not controller.autoplaying
        assert await task
        assert controller.state is PlaybackState.READY

    asyncio.run(scenario())
    assert solver.calls[-1] == (THREE_MOVES, Algorithm.DFS)


# -- degenerate results -------------------------------------------------------


def test_failure_enters_error_state_and_next_retries() -> None:
    solver = FakeSolverClient(error=NetworkError("solver offline"))
    controller, game, _ = _setup(solver=solver)

    async def scenario() -> None:
        assert not await controller.open()
        assert controller.state is PlaybackState.ERROR
        assert controller.error == "solver offline"
        assert controller.moves == ()
        assert not controller.can_play
        assert not await controller.play_pause()
        assert game.mode is BoardMode.MANUAL

        solver.error = None
        assert await controller.next()
        assert controller.state is PlaybackState.STEPPING
        assert controller.error is None
        assert game.board == GOAL

    asyncio.run(scenario())


def test_solved_board_has_nothing_to_play() -> None:
    controller, game, _ = _setup(GOAL)

    async def scenario() -> None:
        assert await controller.open()
        assert controller.total == 0
        assert not controller.can_play
        assert not await controller.next()
        assert not await controller.play_pause()
        assert controller.step_label == "Step 0/0"
        assert game.board == GOAL

    asyncio.run(scenario())


def test_malformed_response_is_an_empty_solution() -> None:
    solver = FakeSolverClient(responses={ONE_MOVE: {"moves": "R", "pathStates": 7}})
    controller, _, _ = _setup(solver=solver)

    async def scenario() -> None:
        assert await controller.open()
        assert controller.state is PlaybackState.READY
        assert controller.total == 0

    asyncio.run(scenario())


def test_oversized_metadata_does_not_stall_loading() -> None:
    solver = FakeSolverClient(responses={ONE_MOVE: {"moves": ["R"], "expandedNodeCount": 10**400}})
    controller, game, _ = _setup(solver=solver)

    async def scenario() -> None:
        assert await controller.open()
        assert controller.state is PlaybackState.READY
        assert controller.session is not None
        assert controller.session.result.expanded_node_count is None
        assert controller.moves == (Direction.RIGHT,)
        assert controller.manual_input_enabled

    asyncio.run(scenario())
    assert game.mode is BoardMode.MANUAL


def test_unreadable_response_enters_error_state(monkeypatch: pytest.MonkeyPatch) -> None:
    def explode(payload: object) -> None:
        raise RuntimeError("unexpected payload")

    monkeypatch.setattr("backend.engine.gamesolver.cache.normalize_solve_result", explode)
    controller, game, _ = _setup()

    async def scenario() -> None:
        assert not await controller.open()
        assert controller.state is PlaybackState.ERROR
        assert controller.error
        assert not controller.loading
        assert controller.manual_input_enabled

    asyncio.run(scenario())
    assert game.mode is BoardMode.MANUAL


def test_depth_capped_partial_sequence_still_plays() -> None:
    solver = FakeSolverClient(responses={
        THREE_MOVES: {"moves": ["D", "R"], "hitDepthCap": True, "maxDepth": 2},
    })
    controller, game, _ = _setup(THREE_MOVES, solver=solver)

    async def scenario() -> None:
        await controller.open()
        assert controller.state is PlaybackState.READY
        assert controller.depth_note is not None
        assert "depth 2" in controller.depth_note
        assert await controller.play_pause()
        await asyncio.sleep(FAST * 20)
        assert controller.step_index == 2
        assert not controller.autoplaying

    asyncio.run(scenario())
    assert game.board == Board.from_flat([1, 2, 3, 4, 5, 6, 7, 0, 8])
    assert not game.is_won
