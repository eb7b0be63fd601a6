"""Move rules: legality, application, and solvability parity."""

from __future__ import annotations

import itertools
import random

import pytest

from backend.engine.gamegenerator.generator import GameGenerator
from backend.engine.gameplay.moves import MoveEngine
from backend.models.board import GOAL, Board, Direction


def _boards_with_blank_everywhere() -> list[Board]:
    boards = []
    for index in range(9):
        tiles = [v for v in GOAL.tiles if v != 0]
        tiles.insert(index, 0)
        boards.append(Board.from_flat(tiles))
    return boards


_BOARDS = _boards_with_blank_everywhere()


# -- legality -----------------------------------------------------------------


@pytest.mark.parametrize(
    "blank_index, legal",
    [
        (0, {Direction.DOWN, Direction.RIGHT}),
        (1, {Direction.DOWN, Direction.LEFT, Direction.RIGHT}),
        (4, set(Direction)),
        (8, {Direction.UP, Direction.LEFT}),
        (6, {Direction.UP, Direction.RIGHT}),
    ],
)
def test_can_move_tracks_grid_edges(blank_index: int, legal: set[Direction]) -> None:
    board = _BOARDS[blank_index]
    assert set(MoveEngine.legal_moves(board)) == legal
    for direction in Direction:
        assert MoveEngine.can_move(direction, board) == (direction in legal)


def test_apply_move_swaps_blank_with_neighbour() -> None:
    after = MoveEngine.apply_move(Direction.UP, GOAL)
    assert after.to_list() == [1, 2, 3, 4, 5, 0, 7, 8, 6]


def test_illegal_move_returns_board_unchanged() -> None:
    assert MoveEngine.apply_move(Direction.DOWN, GOAL) is GOAL
    assert MoveEngine.apply_move(Direction.RIGHT, GOAL) is GOAL


_LEGAL_PAIRS = [
    pytest.param(board, direction, id=f"blank{board.blank_index}-{direction.code}")
    for board in _BOARDS
    for direction in MoveEngine.legal_moves(board)
]


@pytest.mark.parametrize("board, direction", _LEGAL_PAIRS)
def test_legal_move_is_undone_by_opposite(board: Board, direction: Direction) -> None:
    moved = MoveEngine.apply_move(direction, board)
    assert MoveEngine.apply_move(direction.opposite, moved) == board


@pytest.mark.parametrize("board", _BOARDS, ids=str)
@pytest.mark.parametrize("direction", list(Direction))
def test_move_changes_only_blank_and_one_neighbour(board: Board, direction: Direction) -> None:
    moved = MoveEngine.apply_move(direction, board)
    if moved == board:
        assert not MoveEngine.can_move(direction, board)
        return
    changed = [i for i in range(9) if moved.tiles[i] != board.tiles[i]]
    assert len(changed) == 2
    assert board.blank_index in changed
    assert sorted(moved.tiles) == list(range(9))


def test_apply_code_accepts_letters_and_ignores_junk() -> None:
    assert MoveEngine.apply_code("u", GOAL) == MoveEngine.apply_move(Direction.UP, GOAL)
    assert MoveEngine.apply_code(" L ", GOAL) == MoveEngine.apply_move(Direction.LEFT, GOAL)
    assert MoveEngine.apply_code("X", GOAL) is GOAL
    assert MoveEngine.apply_code(None, GOAL) is GOAL


# -- solvability --------------------------------------------------------------


def test_goal_is_solvable() -> None:
    assert MoveEngine.inversions(GOAL) == 0
    assert MoveEngine.is_solvable(GOAL)


def test_swapping_two_tiles_toggles_solvability() -> None:
    rng = random.Random(7)
    for _ in range(20):
        board = GameGenerator.scramble(GOAL, 30, rng)
        base = MoveEngine.is_solvable(board)
        assert base
        tiles = [i for i, v in enumerate(board.tiles) if v != 0]
        for i, j in itertools.combinations(tiles, 2):
            swapped = list(board.tiles)
            swapped[i], swapped[j] = swapped[j], swapped[i]
            assert MoveEngine.is_solvable(swapped) is not base


def test_classic_unsolvable_board() -> None:
    assert not MoveEngine.is_solvable(Board.from_flat([1, 2, 3, 4, 5, 6, 8, 7, 0]))


@pytest.mark.parametrize(
    "values, valid, solvable",
    [
        ([1, 2, 3, 4, 5, 6, 7, 8, 0], True, True),
        ([2, 1, 3, 4, 5, 6, 7, 8, 0], True, False),
        ([1, 2, 3], False, False),
        ([1, 1, 3, 4, 5, 6, 7, 8, 0], False, False),
        ([1, 2, 3, 4, 5, 6, 7, 8, 9], False, False),
        ([1, 2, 3, 4, 5, 6, 7, 8, True], False, False),
        ("123456780", False, False),
    ],
)
def test_validate(values: object, valid: bool, solvable: bool) -> None:
    result = MoveEngine.validate(values)
    assert (result.valid, result.solvable) == (valid, solvable)
    assert result.message


def test_board_rejects_non_permutations() -> None:
    with pytest.raises(ValueError):
        Board.from_flat([1, 2, 3, 4, 5, 6, 7, 8])
    with pytest.raises(ValueError):
        Board.from_flat([1, 1, 3, 4, 5, 6, 7, 8, 0])


def test_direction_codes_round_trip() -> None:
    assert [d.code for d in Direction] == ["U", "D", "L", "R"]
    assert Direction.from_code("r") is Direction.RIGHT
    assert Direction.from_code("up") is None
    assert Direction.UP.opposite is Direction.DOWN
