"""Rich terminal frontend: board, coach arrows, and solution playback.

Uses the ``rich`` library for styled output.  The client runs on an
asyncio loop: keys are read in a worker via ``run_in_executor`` so that
autoplay ticks and solver fetches keep progressing between keypresses.
"""

from __future__ import annotations

import asyncio
import logging
from enum import StrEnum
from typing import Awaitable

import rich.box
from rich.align import Align
from rich.console import Console, Group
from rich.panel import Panel
from rich.progress_bar import ProgressBar
from rich.table import Table
from rich.text import Text

from backend.engine.gamegenerator import GameGenerator
from backend.engine.gameplay import GamePlay
from backend.engine.gamesolver import HintService, MoveQuality, SolutionCache, SolverClient
from backend.engine.playback import PlaybackController, PlaybackState
from backend.models.board import Board, Direction
from backend.models.solution import Algorithm
from backend.settings import Settings
from frontend.cli.input_handler import KeyPress, get_key_timeout, resolve_move_key

logger = logging.getLogger(__name__)

console = Console()

_ARROW = {
    Direction.UP: "↑",
    Direction.DOWN: "↓",
    Direction.LEFT: "←",
    Direction.RIGHT: "→",
}

_QUALITY_STYLE = {
    MoveQuality.GOOD: "bold green",
    MoveQuality.OK: "bold yellow",
    MoveQuality.BAD: "bold red",
}

_ALGORITHM_KEYS = {"1": Algorithm.ASTAR, "2": Algorithm.BFS, "3": Algorithm.DFS}

_POLL_SECONDS = 0.1


class View(StrEnum):
    BOARD = "board"
    ALGORITHM = "algorithm"
    SOLUTION = "solution"


# -- board rendering ----------------------------------------------------------


def _render_board(board: Board, highlight: Direction | None = None) -> Table:
    """Return a Rich Table representing the puzzle grid."""
    table = Table(
        show_header=False,
        show_edge=True,
        pad_edge=True,
        box=rich.box.HEAVY,
        border_style="bright_blue",
        padding=(0, 1),
    )
    for _ in range(board.size):
        table.add_column(width=2, justify="center")

    for r, row in enumerate(board.rows):
        cells: list[str] = []
        for c, val in enumerate(row):
            if val == 0:
                mark = _ARROW[highlight] if highlight else "·"
                cells.append(f"[bold cyan]{mark}[/bold cyan]" if highlight else f"[dim]{mark}[/dim]")
            elif board.is_tile_correct(r, c):
                cells.append(f"[bold green]{val}[/bold green]")
            else:
                cells.append(f"[bold white]{val}[/bold white]")
        table.add_row(*cells)

    return table


def _render_status(game: GamePlay) -> Text:
    stats = Text()
    stats.append("  Time: ", style="dim")
    stats.append(game.timer_label, style="bold yellow")
    stats.append("    Algorithm: ", style="dim")
    stats.append(game.algorithm_label, style="bold yellow")
    stats.append("    Distance: ", style="dim")
    stats.append(str(game.distance), style="bold yellow")
    if game.is_won:
        stats.append("    ★ Solved!", style="bold green")
    return stats


def _render_coach(game: GamePlay, hint: Direction | None) -> Text:
    line = Text()
    if hint is not None:
        line.append("  Hint: ", style="dim")
        line.append(f"{_ARROW[hint]} {hint.value}", style="bold cyan")
    grades = game.move_quality
    if grades:
        line.append("  Coach: ", style="dim")
        for direction, quality in grades.items():
            line.append(f"{_ARROW[direction]} {quality.value}  ", style=_QUALITY_STYLE[quality])
        line.append(f"\n  {game.algorithm.label}: {game.algorithm.explanation}", style="dim")
    return line


# -- panels -------------------------------------------------------------------


def _solution_body(controller: PlaybackController) -> Group:
    parts: list = []
    state = controller.state

    header = Text()
    header.append("Algorithm: ", style="dim")
    header.append(controller.game.algorithm_label, style="bold")
    header.append(f"  •  Steps: {controller.total}", style="dim")
    parts.append(header)
    parts.append(Text(controller.game.algorithm.explanation, style="italic dim"))

    if state is PlaybackState.LOADING or controller.loading:
        parts.append(Text("Solving…", style="bold cyan"))
    elif state is PlaybackState.ERROR:
        parts.append(Text(f"Error: {controller.error}", style="bold red"))
        parts.append(Text("Press → to retry.", style="dim"))
    elif controller.session is not None:
        result = controller.session.result
        meta = Text()
        if result.expanded_node_count is not None:
            meta.append(f"Nodes: {result.expanded_node_count}  ", style="dim")
        if result.solve_time_ms is not None:
            meta.append(f"Time: {result.solve_time_ms:g} ms", style="dim")
        if meta:
            parts.append(meta)
        note = controller.depth_note
        if note:
            parts.append(Text(note, style="yellow"))
        if controller.total == 0:
            parts.append(Text("No solution data.", style="dim"))
        else:
            steps = Text()
            for i, move in enumerate(controller.moves):
                style = "bold black on cyan" if i == controller.step_index else "white"
                steps.append(f" {move.code} ", style=style)
            parts.append(steps)

    playing = "Pause" if controller.autoplaying else "Play"
    parts.append(Text(f"{controller.step_label}   [{playing}]", style="bold"))
    parts.append(ProgressBar(total=1.0, completed=controller.progress, width=30))
    return Group(*parts)


def _algorithm_body(game: GamePlay) -> Text:
    body = Text()
    for key, algorithm in _ALGORITHM_KEYS.items():
        marker = "●" if algorithm is game.algorithm else "○"
        style = "bold" if algorithm is game.algorithm else "dim"
        body.append(f"  {key}  {marker} {algorithm.label:<4}", style=style)
        body.append(f" {algorithm.summary}\n", style="dim")
    body.append(f"\n  {game.algorithm.explanation}", style="italic")
    return body


def _controls(view: View) -> Text:
    controls = Text()
    pairs = {
        View.BOARD: [
            ("↑↓←→/WASD", "move"), ("R", "shuffle"), ("N", "hint"),
            ("C", "coach"), ("G", "algorithm"), ("V", "solution"), ("Q", "quit"),
        ],
        View.ALGORITHM: [("1-3", "choose"), ("Enter/Q", "close")],
        View.SOLUTION: [
            ("←→", "step"), ("Space", "play"), ("Home", "reset"),
            ("End", "last"), ("1-3", "algorithm"), ("Q", "close"),
        ],
    }[view]
    for key, label in pairs:
        controls.append(f"  {key}", style="bold cyan")
        controls.append(f" {label} ", style="dim")
    return controls


# -- app ----------------------------------------------------------------------


class ClientApp:
    """Terminal client wiring the engine pieces to keyboard input."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.client = SolverClient(settings)
        self.cache = SolutionCache(self.client)
        self.game = GamePlay(algorithm=settings.algorithm)
        self.controller = PlaybackController(
            self.game,
            self.cache,
            tick_interval=settings.tick_interval,
            on_change=self._mark_dirty,
        )
        self.hints = HintService(self.cache)
        self.view = View.BOARD
        self.status = ""
        self._dirty = True
        self._tasks: set[asyncio.Task] = set()

    def _mark_dirty(self) -> None:
        self._dirty = True

    def _spawn(self, coro: Awaitable) -> None:
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        self._dirty = True
        if not task.cancelled() and task.exception() is not None:
            logger.error("background task failed", exc_info=task.exception())

    # -- drawing --------------------------------------------------------------

    def _frame(self) -> tuple:
        return (self.game.timer_label, self.hints.direction, self.controller.cue)

    def draw(self) -> None:
        console.clear()
        game = self.game
        highlight = self.controller.cue if self.view is View.SOLUTION else None

        panel = Panel(
            Align.center(_render_board(game.board, highlight)),
            title="[bold cyan]8-Puzzle  3×3[/bold cyan]",
            border_style="green" if game.is_won else "bright_blue",
            padding=(1, 2),
        )
        console.print()
        console.print(Align.center(panel))
        console.print(Align.center(_render_status(game)))
        console.print(Align.center(_render_coach(game, self.hints.direction)))

        if self.view is View.SOLUTION:
            console.print(Align.center(Panel(
                _solution_body(self.controller),
                title="[bold yellow]Solution[/bold yellow]",
                border_style="yellow",
                padding=(0, 2),
            )))
        elif self.view is View.ALGORITHM:
            console.print(Align.center(Panel(
                _algorithm_body(game),
                title="[bold yellow]Algorithm[/bold yellow]",
                border_style="yellow",
                padding=(0, 2),
            )))

        if self.status:
            console.print(Align.center(Text.from_markup(f"  {self.status}")))
        console.print(Align.center(_controls(self.view)))

    # -- input ----------------------------------------------------------------

    async def handle(self, press: KeyPress) -> bool:
        """Apply one keypress.  Returns False when the client should exit."""
        self.status = ""
        self._dirty = True
        if self.view is View.SOLUTION:
            return self._handle_solution(press)
        if self.view is View.ALGORITHM:
            return self._handle_algorithm(press)
        return await self._handle_board(press)

    async def _handle_board(self, press: KeyPress) -> bool:
        direction = resolve_move_key(press, autoplaying=self.controller.autoplaying)
        if direction is not None:
            self.game.move(direction)
            return True

        action = press.action
        if action == "quit":
            return False
        if action == "restart":
            await self._shuffle()
        elif action == "hint":
            hint = await self.hints.request(self.game.board, self.game.algorithm)
            self.status = (
                f"[cyan]Hint:[/cyan] move the blank [bold]{hint.value}[/bold]"
                if hint else "[yellow]No hint available.[/yellow]"
            )
        elif action == "coach":
            self.game.coach = not self.game.coach
        elif action == "algorithm":
            self.view = View.ALGORITHM
            self.game.open_panel()
        elif action == "solve":
            self.view = View.SOLUTION
            self.controller.open()
        return True

    def _handle_algorithm(self, press: KeyPress) -> bool:
        algorithm = _ALGORITHM_KEYS.get(press.key)
        if algorithm is not None:
            self.game.algorithm = algorithm
        elif press.action in ("enter", "quit", "algorithm"):
            self.view = View.BOARD
            self.game.close_panel()
        return True

    def _handle_solution(self, press: KeyPress) -> bool:
        controller = self.controller
        if press.has_modifier:
            return True

        algorithm = _ALGORITHM_KEYS.get(press.key)
        if algorithm is not None:
            controller.change_algorithm(algorithm)
            return True

        key = press.key
        if key in ("ArrowRight", "."):
            self._spawn(controller.next())
        elif key in ("ArrowLeft", ","):
            self._spawn(controller.prev())
        elif press.action == "play":
            self._spawn(controller.play_pause())
        elif press.action == "reset":
            self._spawn(controller.reset_steps())
        elif press.action == "end":
            self._spawn(controller.jump_to(controller.total))
        elif press.action in ("quit", "solve"):
            controller.close()
            self.view = View.BOARD
        elif key not in ("ArrowUp", "ArrowDown"):
            direction = resolve_move_key(press, autoplaying=controller.autoplaying)
            if direction is not None and controller.manual_input_enabled:
                self.game.move(direction)
        return True

    async def _shuffle(self) -> None:
        self.controller.close()
        loop = asyncio.get_running_loop()
        board = await loop.run_in_executor(
            None, GameGenerator.shuffle, self.client, self.settings.shuffle_steps
        )
        self.game.shuffle(board)
        self.status = "[yellow]Shuffled![/yellow]"

    # -- main loop ------------------------------------------------------------

    async def run(self) -> None:
        loop = asyncio.get_running_loop()
        last_frame: tuple | None = None
        try:
            while True:
                frame = self._frame()
                if self._dirty or frame != last_frame:
                    self.draw()
                    self._dirty = False
                    last_frame = frame

                press = await loop.run_in_executor(None, get_key_timeout, _POLL_SECONDS)
                if press is None:
                    continue
                if not await self.handle(press):
                    break
        finally:
            self.controller.close()
            for task in self._tasks:
                task.cancel()
            self.client.close()

        console.clear()
        console.print(Align.center(Text("\nGoodbye!\n", style="bold cyan")))


# -- public entry point -------------------------------------------------------


def run(settings: Settings) -> None:
    """Launch the Rich client."""
    asyncio.run(ClientApp(settings).run())
