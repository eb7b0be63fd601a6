"""Solution playback: stepping and autoplay over a fetched solution.

While the solution view is open the controller is the only thing that
repaints the board from a solution.  It keeps a snapshot of the board the
solution was requested for and refuses to navigate a solution that no
longer matches the live board or algorithm; instead it fetches a new one.

State flow::

    IDLE -> LOADING -> READY <-> STEPPING <-> PLAYING
                 \\-> ERROR     (any of these) -> LOADING on refetch
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import Callable

from backend.engine.gameplay.game import BoardMode, GamePlay
from backend.engine.gamesolver.cache import SolutionCache
from backend.engine.playback.trajectory import Trajectory, build_trajectory
from backend.models.board import Board, Direction
from backend.models.solution import Algorithm, CacheKey, SolutionResult

logger = logging.getLogger(__name__)


class PlaybackState(StrEnum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    STEPPING = "stepping"
    PLAYING = "playing"
    ERROR = "error"


# States in which player input must not touch the board.
_LOCKED = frozenset({PlaybackState.LOADING, PlaybackState.PLAYING})


@dataclass
class PlaybackSession:
    snapshot: Board
    key: CacheKey
    result: SolutionResult
    trajectory: Trajectory
    step_index: int = 0

    @property
    def moves(self) -> tuple[Direction, ...]:
        return self.result.moves

    @property
    def total(self) -> int:
        return len(self.result.moves)

    @property
    def board(self) -> Board:
        """The board this session shows at its current step."""
        return self.trajectory.state_at(self.step_index)


class PlaybackController:
    TICK_INTERVAL = 0.45
    CUE_DURATION = 0.2

    def __init__(
        self,
        game: GamePlay,
        cache: SolutionCache,
        *,
        tick_interval: float = TICK_INTERVAL,
        on_change: Callable[[], None] | None = None,
    ) -> None:
        self.game = game
        self.cache = cache
        self.tick_interval = tick_interval
        self.on_change = on_change

        self.state = PlaybackState.IDLE
        self.session: PlaybackSession | None = None
        self.error: str | None = None
        self.cue: Direction | None = None
        self.visible = False

        self._loading: asyncio.Task[bool] | None = None
        self._tick_handle: asyncio.TimerHandle | None = None
        self._cue_handle: asyncio.TimerHandle | None = None

    # -- queries --------------------------------------------------------------

    @property
    def autoplaying(self) -> bool:
        return self.state is PlaybackState.PLAYING

    @property
    def loading(self) -> bool:
        """A fetch for the open view is in flight."""
        return self.visible and self._loading is not None and not self._loading.done()

    @property
    def step_index(self) -> int:
        return self.session.step_index if self.session else 0

    @property
    def moves(self) -> tuple[Direction, ...]:
        return self.session.moves if self.session else ()

    @property
    def total(self) -> int:
        return self.session.total if self.session else 0

    @property
    def desired_key(self) -> CacheKey:
        return CacheKey(self.game.board, self.game.algorithm)

    @property
    def is_fresh(self) -> bool:
        session = self.session
        return (
            session is not None
            and session.key.algorithm == self.game.algorithm
            and session.board == self.game.board
        )

    @property
    def manual_input_enabled(self) -> bool:
        return not self.loading and self.state not in _LOCKED

    @property
    def can_play(self) -> bool:
        return self.total > 0 and not self.loading

    @property
    def step_label(self) -> str:
        return f"Step {min(self.step_index, self.total)}/{self.total}"

    @property
    def progress(self) -> float:
        return self.step_index / self.total if self.total else 0.0

    @property
    def depth_note(self) -> str | None:
        """Informational note for a depth-capped search, if any."""
        result = self.session.result if self.session else None
        if result is None or not result.hit_depth_cap:
            return None
        cap = f" at depth {result.max_depth}" if result.max_depth is not None else ""
        if result.is_empty:
            return f"Search stopped{cap} without reaching the goal."
        return f"Search stopped{cap}; the sequence may not reach the goal."

    # -- lifecycle ------------------------------------------------------------

    def open(self, algorithm: Algorithm | None = None) -> asyncio.Task[bool]:
        """Show the solution view and fetch a solution for the live board.

        Opening again while a fetch is in flight returns that same fetch.
        """
        if algorithm is not None:
            self.game.algorithm = algorithm
        if not self.visible:
            self.visible = True
            self.game.open_panel()
        return self._refetch()

    def change_algorithm(self, algorithm: Algorithm) -> asyncio.Task[bool] | None:
        self._pause()
        self.game.algorithm = algorithm
        if not self.visible:
            return None
        return self._refetch()

    def close(self) -> None:
        """Hide the view, drop the session and hand the board back to the player.

        A fetch still in flight is left to finish; its result is ignored.
        """
        self._stop_ticking()
        self._clear_cue()
        self.session = None
        self.error = None
        was_visible = self.visible
        self.visible = False
        self._set_state(PlaybackState.IDLE)
        if was_visible:
            self.game.close_panel()

    # -- navigation -----------------------------------------------------------

    async def ensure_fresh(self) -> bool:
        """Make sure the session still matches the board and algorithm.

        A stale (or failed) session is replaced by a fresh fetch; this
        returns once it is ready.  While a fetch is already in flight
        navigation is refused.
        """
        if not self.visible or self.loading:
            return False
        if self.is_fresh:
            return True
        logger.info("solution is stale for %s; refetching", self.desired_key.algorithm)
        return await self._refetch()

    async def next(self) -> bool:
        if not await self.ensure_fresh():
            return False
        self._pause()
        if not self._advance():
            return False
        self._set_state(PlaybackState.STEPPING)
        return True

    async def prev(self) -> bool:
        if not await self.ensure_fresh():
            return False
        assert self.session is not None
        if self.session.step_index == 0:
            return False
        self._pause()
        self._goto(self.session.step_index - 1)
        return True

    async def jump_to(self, index: int) -> bool:
        if not await self.ensure_fresh():
            return False
        assert self.session is not None
        if not 0 <= index <= self.session.total:
            return False
        self._pause()
        self._goto(index)
        return True

    async def reset_steps(self) -> bool:
        if not await self.ensure_fresh():
            return False
        session = self.session
        assert session is not None
        self._stop_ticking()
        session.step_index = 0
        self.game.present(session.board)
        self._set_state(PlaybackState.READY)
        return True

    async def play_pause(self) -> bool:
        """Toggle autoplay.  Returns True if autoplay is now running."""
        if self.autoplaying:
            self._pause()
            return False
        if not await self.ensure_fresh():
            return False
        session = self.session
        assert session is not None
        if session.total == 0:
            return False
        if session.step_index >= session.total:
            session.step_index = 0
            self.game.present(session.board)

        self._set_state(PlaybackState.PLAYING)
        self._schedule_tick()
        return True

    # -- internals ------------------------------------------------------------

    def _refetch(self) -> asyncio.Task[bool]:
        self._stop_ticking()
        self._set_state(PlaybackState.LOADING)
        if not self.loading:
            self._loading = asyncio.get_running_loop().create_task(self._load())
        assert self._loading is not None
        return self._loading

    async def _load(self) -> bool:
        while True:
            outcome = await self.cache.request(self.desired_key)
            if not self.visible:
                logger.info("solution view closed; ignoring result for %s", outcome.key)
                return False
            if outcome.key == self.desired_key:
                break
            logger.info("discarding stale solution for %s", outcome.key)

        if outcome.result is None:
            self.session = None
            self.error = outcome.error or "Solver request failed."
            self._set_state(PlaybackState.ERROR)
            return False

        snapshot = outcome.key.board
        self.session = PlaybackSession(
            snapshot=snapshot,
            key=outcome.key,
            result=outcome.result,
            trajectory=build_trajectory(snapshot, outcome.result),
        )
        self.error = None
        self._set_state(PlaybackState.READY)
        return True

    def _advance(self) -> bool:
        session = self.session
        if session is None or session.step_index >= session.total:
            return False
        direction = session.moves[session.step_index]
        session.step_index += 1
        self.game.present(session.board)
        self._flash(direction)
        return True

    def _goto(self, index: int) -> None:
        assert self.session is not None
        self.session.step_index = index
        self.game.present(self.session.board)
        self._set_state(PlaybackState.STEPPING)

    def _pause(self) -> None:
        self._stop_ticking()
        if self.state is PlaybackState.PLAYING:
            paused = PlaybackState.STEPPING if self.step_index else PlaybackState.READY
            self._set_state(paused)

    def _schedule_tick(self) -> None:
        self._stop_ticking()
        self._tick_handle = asyncio.get_running_loop().call_later(
            self.tick_interval, self._tick
        )

    def _stop_ticking(self) -> None:
        if self._tick_handle is not None:
            self._tick_handle.cancel()
            self._tick_handle = None

    def _tick(self) -> None:
        self._tick_handle = None
        if self.state is not PlaybackState.PLAYING or self.session is None:
            return
        if not self.is_fresh:
            logger.info("board changed during autoplay; pausing")
            self._pause()
            return
        self._advance()
        if self.session.step_index >= self.session.total:
            self._set_state(PlaybackState.READY)
            return
        self._schedule_tick()

    def _flash(self, direction: Direction) -> None:
        if self._cue_handle is not None:
            self._cue_handle.cancel()
        self.cue = direction
        self._cue_handle = asyncio.get_running_loop().call_later(
            self.CUE_DURATION, self._clear_cue
        )

    def _clear_cue(self) -> None:
        if self._cue_handle is not None:
            self._cue_handle.cancel()
            self._cue_handle = None
        if self.cue is not None:
            self.cue = None
            self._notify()

    def _set_state(self, state: PlaybackState) -> None:
        if state is not self.state:
            logger.debug("playback %s -> %s", self.state, state)
        self.state = state
        self.game.mode = BoardMode.REPLAY if state in _LOCKED else BoardMode.MANUAL
        self._notify()

    def _notify(self) -> None:
        if self.on_change is not None:
            self.on_change()
