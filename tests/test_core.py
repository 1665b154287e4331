# -*- coding: utf-8 -*-
"""
Tests for line reduction, board transforms and directional moves.
"""
import copy
import random
from unittest import TestCase, main

from slide2048.core import (
    Direction,
    apply_move,
    get_board_shape,
    is_any_move_possible,
    legal_moves,
    move_down,
    move_left,
    move_right,
    move_up,
    parse_direction,
    reverse_row,
    reverse_rows,
    slide_row_left,
    transpose_board,
    validate_board,
)

EXAMPLE_BOARD = [
    [None, 8, 2, 2],
    [4, 2, None, 2],
    [None, None, None, None],
    [None, None, None, 2],
]


def random_board(rng, rows=4, cols=4):
    return [[rng.choice([None, None, 2, 4, 8, 16]) for _ in range(cols)] for _ in range(rows)]


def board_sum(board):
    return sum(cell for row in board for cell in row if cell is not None)


class TestSlideRowLeft(TestCase):
    def test_merges_adjacent_equal_tiles_once(self):
        row, changed = slide_row_left([2, 2, 2, None])
        self.assertEqual(row, [4, 2, None, None])
        self.assertTrue(changed)

    def test_all_equal_tiles_merge_pairwise(self):
        row, changed = slide_row_left([2, 2, 2, 2])
        self.assertEqual(row, [4, 4, None, None])
        self.assertTrue(changed)

    def test_merged_tile_is_not_merged_again(self):
        row, _ = slide_row_left([4, 4, 2, 2])
        self.assertEqual(row, [8, 4, None, None])
        row, _ = slide_row_left([2, 2, 4, None])
        self.assertEqual(row, [4, 4, None, None])

    def test_slides_across_gaps(self):
        row, changed = slide_row_left([None, 8, None, 2])
        self.assertEqual(row, [8, 2, None, None])
        self.assertTrue(changed)

    def test_merges_across_gaps(self):
        row, changed = slide_row_left([2, None, None, 2])
        self.assertEqual(row, [4, None, None, None])
        self.assertTrue(changed)

    def test_compacted_row_is_unchanged(self):
        row, changed = slide_row_left([2, 4, 8, 16])
        self.assertEqual(row, [2, 4, 8, 16])
        self.assertFalse(changed)

    def test_empty_cells_only(self):
        row, changed = slide_row_left([None, None, None, None])
        self.assertEqual(row, [None, None, None, None])
        self.assertFalse(changed)

    def test_zero_length_row(self):
        self.assertEqual(slide_row_left([]), ([], False))

    def test_does_not_mutate_input(self):
        line = [None, 2, 2, 4]
        slide_row_left(line)
        self.assertEqual(line, [None, 2, 2, 4])


class TestBoardTransform(TestCase):
    def test_reverse_row(self):
        self.assertEqual(reverse_row([2, None, 4, None]), [None, 4, None, 2])

    def test_reverse_rows_returns_new_rows(self):
        board = [[2, 4], [8, None]]
        reversed_board = reverse_rows(board)
        self.assertEqual(reversed_board, [[4, 2], [None, 8]])
        self.assertEqual(board, [[2, 4], [8, None]])

    def test_transpose_square(self):
        board = [
            [None, 2, None, 4],
            [None, None, None, None],
            [8, None, 16, None],
            [None, None, None, 32],
        ]
        expected = [
            [None, None, 8, None],
            [2, None, None, None],
            [None, None, 16, None],
            [4, None, None, 32],
        ]
        self.assertEqual(transpose_board(board), expected)

    def test_transpose_non_square(self):
        board = [[2, 4, 8], [16, None, 32]]
        self.assertEqual(transpose_board(board), [[2, 16], [4, None], [8, 32]])
        self.assertEqual(transpose_board(transpose_board(board)), board)


class TestMoves(TestCase):
    def test_left_example(self):
        expected = [
            [8, 4, None, None],
            [4, 4, None, None],
            [None, None, None, None],
            [2, None, None, None],
        ]
        result = apply_move(EXAMPLE_BOARD, Direction.LEFT)
        self.assertEqual(result.board, expected)
        self.assertTrue(result.changed)

    def test_right_example(self):
        expected = [
            [None, None, 8, 4],
            [None, None, 4, 4],
            [None, None, None, None],
            [None, None, None, 2],
        ]
        result = apply_move(EXAMPLE_BOARD, Direction.RIGHT)
        self.assertEqual(result.board, expected)
        self.assertTrue(result.changed)

    def test_up_example(self):
        expected = [
            [4, 8, 2, 4],
            [None, 2, None, 2],
            [None, None, None, None],
            [None, None, None, None],
        ]
        result = apply_move(EXAMPLE_BOARD, Direction.UP)
        self.assertEqual(result.board, expected)
        self.assertTrue(result.changed)

    def test_down_example(self):
        expected = [
            [None, None, None, None],
            [None, None, None, None],
            [None, 8, None, 2],
            [4, 2, 2, 4],
        ]
        result = apply_move(EXAMPLE_BOARD, Direction.DOWN)
        self.assertEqual(result.board, expected)
        self.assertTrue(result.changed)

    def test_down_merges_toward_bottom(self):
        board = [[2, None], [2, None], [4, None], [4, None]]
        board_after, changed = apply_move(board, Direction.DOWN)
        self.assertEqual(board_after, [[None, None], [None, None], [4, None], [8, None]])
        self.assertTrue(changed)

    def test_unchanged_moves(self):
        left_packed = [[2, 4, 8, 16], [None] * 4, [2, None, None, None], [4, 8, None, None]]
        right_packed = [[None, None, None, 2], [None, None, 4, 8], [None] * 4, [None, 2, 4, 8]]
        up_packed = [[2, 4, 8, 16], [None] * 4, [None] * 4, [None] * 4]
        for board, direction in (
            (left_packed, Direction.LEFT),
            (right_packed, Direction.RIGHT),
            (up_packed, Direction.UP),
        ):
            with self.subTest(direction=direction):
                result = apply_move(board, direction)
                self.assertFalse(result.changed)
                self.assertEqual(result.board, board)
                self.assertIsNot(result.board, board)

    def test_does_not_mutate_input(self):
        board = copy.deepcopy(EXAMPLE_BOARD)
        for direction in Direction:
            apply_move(board, direction)
        self.assertEqual(board, EXAMPLE_BOARD)

    def test_non_square_board(self):
        board = [[2, 2, None], [None, 4, 4]]
        self.assertEqual(apply_move(board, Direction.LEFT).board, [[4, None, None], [8, None, None]])
        self.assertEqual(apply_move(board, Direction.UP).board, [[2, 2, 4], [None, 4, None]])

    def test_rejects_unknown_direction(self):
        with self.assertRaises(ValueError):
            apply_move(EXAMPLE_BOARD, "left")
        with self.assertRaises(ValueError):
            apply_move(EXAMPLE_BOARD, None)

    def test_rejects_malformed_board(self):
        with self.assertRaises(ValueError):
            apply_move([[2, 4], [2]], Direction.LEFT)
        with self.assertRaises(ValueError):
            apply_move([[2, 3], [None, None]], Direction.LEFT)


class TestMoveProperties(TestCase):
    """Properties checked over seeded random boards."""

    def setUp(self):
        rng = random.Random(2048)
        self.boards = [random_board(rng) for _ in range(200)]

    def test_no_op_moves_are_idempotent(self):
        for board in self.boards:
            for direction in Direction:
                moved, changed = apply_move(board, direction)
                if not changed:
                    self.assertEqual(moved, board)
                    self.assertEqual(apply_move(moved, direction), (board, False))

    def test_moves_preserve_tile_sum(self):
        for board in self.boards:
            for direction in Direction:
                self.assertEqual(board_sum(apply_move(board, direction).board), board_sum(board))

    def test_directional_symmetry(self):
        for board in self.boards:
            self.assertEqual(move_right(board).board, reverse_rows(move_left(reverse_rows(board)).board))
            self.assertEqual(move_up(board).board, transpose_board(move_left(transpose_board(board)).board))
            self.assertEqual(move_down(board).board, transpose_board(move_right(transpose_board(board)).board))


class TestValidation(TestCase):
    def test_shape(self):
        self.assertEqual(get_board_shape([[None, 2, 4]]), (1, 3))

    def test_empty_board_is_rejected(self):
        for board in ([], [[]]):
            with self.subTest(board=board):
                with self.assertRaises(ValueError):
                    get_board_shape(board)

    def test_cell_values(self):
        validate_board([[None, 2], [1024, 65536]])
        for bad in (0, 1, -2, 3, 6, 2.0, True, "2"):
            with self.subTest(bad=bad):
                with self.assertRaises(ValueError):
                    validate_board([[None, bad], [None, None]])

    def test_parse_direction(self):
        self.assertEqual(parse_direction(" Left "), Direction.LEFT)
        self.assertEqual(parse_direction("DOWN"), Direction.DOWN)
        self.assertIs(parse_direction(Direction.UP), Direction.UP)
        for bad in ("diagonal", "", None, 1):
            with self.subTest(bad=bad):
                with self.assertRaises(ValueError):
                    parse_direction(bad)


class TestLegalMoves(TestCase):
    def test_single_tile_in_corner(self):
        board = [[2, None], [None, None]]
        self.assertEqual(legal_moves(board), [Direction.RIGHT, Direction.DOWN])

    def test_empty_board_has_no_legal_move(self):
        self.assertEqual(legal_moves([[None] * 4 for _ in range(4)]), [])

    def test_checkerboard_has_no_legal_move(self):
        board = [[2, 4, 2, 4], [4, 2, 4, 2], [2, 4, 2, 4], [4, 2, 4, 2]]
        self.assertEqual(legal_moves(board), [])
        self.assertFalse(is_any_move_possible(board))
        board[0][0] = 4
        self.assertTrue(is_any_move_possible(board))


if __name__ == "__main__":
    main()
