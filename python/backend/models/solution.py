"""Solver-facing models: algorithms, cache keys, and normalized results."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from backend.models.board import Board, Direction


class Algorithm(StrEnum):
    ASTAR = "astar"
    BFS = "bfs"
    DFS = "dfs"

    @property
    def label(self) -> str:
        return "A*" if self is Algorithm.ASTAR else self.value.upper()

    @property
    def summary(self) -> str:
        """Short tagline for the algorithm picker."""
        return _SUMMARIES[self]

    @property
    def explanation(self) -> str:
        """One-line description of how the search behaves."""
        return _EXPLANATIONS[self]

    @classmethod
    def parse(cls, value: object, default: Algorithm | None = None) -> Algorithm | None:
        """Return the Algorithm named by *value* (case-insensitive) or *default*."""
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        return default


_SUMMARIES = {
    Algorithm.ASTAR: "Optimal, heuristic-guided",
    Algorithm.BFS: "Optimal, no heuristic",
    Algorithm.DFS: "Not guaranteed optimal",
}

_EXPLANATIONS = {
    Algorithm.ASTAR: "Chooses lowest f = g + h using Manhattan; optimal with fewer expansions.",
    Algorithm.BFS: "Expands states by depth; guaranteed shortest path but more expansions.",
    Algorithm.DFS: "Explores one branch deeply; path may be longer. Depth is capped for responsiveness.",
}


@dataclass(frozen=True)
class CacheKey:
    """Identifies a solution request: equal iff board and algorithm are equal."""

    board: Board
    algorithm: Algorithm


@dataclass(frozen=True)
class SolutionResult:
    """A solver response after normalization.

    Optional metadata is ``None`` when the solver omitted it or sent
    something unusable; it is never defaulted.
    """

    moves: tuple[Direction, ...] = ()
    path_states: tuple[Board, ...] | None = None
    expanded_node_count: int | None = None
    solve_time_ms: float | None = None
    hit_depth_cap: bool | None = None
    max_depth: int | None = None

    @property
    def is_empty(self) -> bool:
        return not self.moves

    @property
    def codes(self) -> str:
        return "".join(m.code for m in self.moves)
