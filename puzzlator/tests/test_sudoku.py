"""
Tests for the 4x4 Sudoku kernel.

Tests:
- Generation (clue counts, valid solutions, determinism)
- Move validation and error reporting
- Completion, undo/redo and status transitions
- Solver, hints and scoring
- Serialization
"""

import random

import pytest

from ..engine_core import Difficulty, PuzzleStatus, ScoreParams
from ..errors import SnapshotError
from ..puzzles.sudoku import ConstraintGrid, find_violations
from .conftest import OPEN_GRID, SOLVED_GRID, fill_solution


def _assert_valid_solution(grid):
    for row in range(4):
        for col in range(4):
            assert grid[row][col] in (1, 2, 3, 4)
            assert find_violations(grid, row, col, grid[row][col]) == []


class TestGeneration:
    """Tests for puzzle generation."""

    @pytest.mark.parametrize("difficulty,clues", [
        ("easy", 12),
        ("medium", 10),
        ("hard", 8),
        ("expert", 6),
    ])
    def test_clue_count_by_difficulty(self, difficulty, clues):
        """Each difficulty removes a fixed number of cells."""
        puzzle = ConstraintGrid(difficulty, rng=random.Random(3))
        assert puzzle.state.clue_count == clues
        assert len(puzzle.state.empty_cells()) == 16 - clues

    @pytest.mark.parametrize("seed", range(10))
    def test_solution_is_valid(self, seed):
        """Generated solutions satisfy every row, column and box."""
        puzzle = ConstraintGrid(rng=random.Random(seed))
        _assert_valid_solution(puzzle.solution)

    def test_clues_match_solution(self):
        """Locked cells hold their solution value; other cells are empty."""
        puzzle = ConstraintGrid("hard", rng=random.Random(5))
        solution = puzzle.solution
        for row in puzzle.state.grid:
            for cell in row:
                if cell.locked:
                    assert cell.value == solution[cell.row][cell.col]
                else:
                    assert cell.value is None

    def test_same_seed_same_puzzle(self):
        """Generation is deterministic for a seeded rng."""
        a = ConstraintGrid(rng=random.Random(11))
        b = ConstraintGrid(rng=random.Random(11))
        assert a.state.values() == b.state.values()

    def test_new_puzzle_not_started(self):
        """A fresh puzzle has no moves and is not started."""
        puzzle = ConstraintGrid(rng=random.Random(1))
        assert puzzle.state.status == PuzzleStatus.NOT_STARTED
        assert puzzle.state.moves == []
        assert puzzle.is_solvable()

    def test_invalid_difficulty(self):
        """Unknown difficulty strings are rejected."""
        with pytest.raises(ValueError):
            ConstraintGrid("impossible")


class TestMoves:
    """Tests for make_move validation."""

    def test_valid_move(self, sudoku):
        """A legal value is accepted and recorded."""
        result = sudoku.make_move(0, 1, 2)
        assert result.success
        assert sudoku.state.grid[0][1].value == 2
        assert len(sudoku.state.moves) == 1
        assert sudoku.state.status == PuzzleStatus.IN_PROGRESS

    def test_locked_cell(self, sudoku):
        """Clue cells cannot be changed."""
        result = sudoku.make_move(0, 0, 2)
        assert not result.success
        assert result.error == "Cannot modify locked cell"
        assert result.error_code == "LOCKED_CELL"

    def test_violation_names_row_and_box(self, sudoku):
        """The error names every violated constraint."""
        result = sudoku.make_move(0, 1, 1)
        assert not result.success
        assert result.error == "Invalid move: number already exists in row and box"
        assert result.error_code == "CONSTRAINT_VIOLATION"
        assert sudoku.state.grid[0][1].value is None

    def test_violation_names_row_and_column(self, sudoku):
        """3 is in row 0 and column 1."""
        result = sudoku.make_move(0, 1, 3)
        assert result.error == "Invalid move: number already exists in row and column"

    def test_out_of_range_value(self, sudoku):
        result = sudoku.make_move(0, 1, 5)
        assert result.error_code == "OUT_OF_RANGE"

    def test_bool_is_not_a_value(self, sudoku):
        """True == 1 in Python, but a bool is never a cell value."""
        assert sudoku.is_valid_move(1, 2, 1)
        assert sudoku.make_move(1, 2, True).error_code == "OUT_OF_RANGE"
        assert not sudoku.is_valid_move(1, 2, True)
        assert sudoku.state.grid[1][2].value is None
        assert sudoku.state.moves == []

    def test_load_puzzle_rejects_bool(self, sudoku):
        grid = [row[:] for row in OPEN_GRID]
        grid[0][1] = True
        with pytest.raises(ValueError):
            sudoku.load_puzzle(grid)

    def test_out_of_bounds(self, sudoku):
        result = sudoku.make_move(4, 0, 1)
        assert result.error_code == "OUT_OF_BOUNDS"

    def test_clearing_is_always_valid(self, sudoku):
        """Clearing an unlocked cell succeeds."""
        sudoku.make_move(0, 1, 2)
        result = sudoku.make_move(0, 1, None)
        assert result.success
        assert sudoku.state.grid[0][1].value is None
        assert sudoku.is_valid_move(0, 1, None)

    def test_rejected_move_not_recorded(self, sudoku):
        sudoku.make_move(0, 1, 1)
        assert sudoku.state.moves == []

    def test_get_violations(self, sudoku):
        assert sudoku.get_violations(0, 1, 1) == ["row", "box"]
        assert sudoku.get_violations(0, 1, 2) == []
        assert not sudoku.is_valid_move(0, 1, 1)


class TestCompletion:
    """Tests for completion and status transitions."""

    def test_filling_solution_completes(self, sudoku, clock):
        """Entering every solution value completes the puzzle."""
        fill_solution(sudoku)
        assert sudoku.is_complete()
        assert sudoku.state.status == PuzzleStatus.COMPLETED
        assert sudoku.state.end_time == clock.now

    def test_generated_puzzle_completes(self):
        """A generated medium puzzle is solvable and completes."""
        puzzle = ConstraintGrid("medium", rng=random.Random(8))
        assert puzzle.is_solvable()
        fill_solution(puzzle)
        assert puzzle.is_complete()
        assert puzzle.state.status == PuzzleStatus.COMPLETED

    def test_no_moves_after_completion(self, sudoku):
        """A completed puzzle rejects further moves."""
        fill_solution(sudoku)
        result = sudoku.make_move(0, 1, None)
        assert not result.success
        assert result.error_code == "PUZZLE_CLOSED"
        assert sudoku.is_complete()

    def test_undo_reopens_completed_puzzle(self, sudoku):
        """Undo after completion goes back to in progress; redo completes again."""
        fill_solution(sudoku)
        assert sudoku.undo()
        assert sudoku.state.status == PuzzleStatus.IN_PROGRESS
        assert sudoku.state.end_time is None

        assert sudoku.redo()
        assert sudoku.state.status == PuzzleStatus.COMPLETED

    def test_load_puzzle_full_grid_is_complete(self, sudoku):
        sudoku.load_puzzle(SOLVED_GRID)
        assert sudoku.is_complete()

    def test_abandon(self, sudoku):
        sudoku.abandon()
        assert sudoku.state.status == PuzzleStatus.ABANDONED
        assert sudoku.make_move(0, 1, 2).error_code == "PUZZLE_CLOSED"

    def test_abandon_freezes_history(self, sudoku):
        """Undo and redo do nothing once the puzzle is abandoned."""
        sudoku.make_move(0, 1, 2)
        sudoku.make_move(0, 3, 4)
        sudoku.undo()
        sudoku.abandon()
        before = sudoku.state.values()

        assert not sudoku.can_undo()
        assert not sudoku.undo()
        assert not sudoku.can_redo()
        assert not sudoku.redo()
        assert sudoku.state.values() == before
        assert sudoku.state.grid[0][1].value == 2
        assert sudoku.state.status == PuzzleStatus.ABANDONED


class TestHistory:
    """Tests for undo/redo."""

    def test_undo_restores_previous_value(self, sudoku):
        """Undo puts back the value of the previous move on that cell."""
        sudoku.make_move(0, 1, 2)
        sudoku.make_move(0, 1, None)

        assert sudoku.undo()
        assert sudoku.state.grid[0][1].value == 2
        assert sudoku.undo()
        assert sudoku.state.grid[0][1].value is None
        assert not sudoku.undo()

    def test_redo(self, sudoku):
        sudoku.make_move(0, 1, 2)
        sudoku.undo()
        assert sudoku.redo()
        assert sudoku.state.grid[0][1].value == 2
        assert not sudoku.redo()

    def test_new_move_clears_redo(self, sudoku):
        """An accepted move discards undone moves."""
        sudoku.make_move(0, 1, 2)
        sudoku.undo()
        sudoku.make_move(0, 3, 4)
        assert not sudoku.can_redo()
        assert not sudoku.redo()

    @pytest.mark.parametrize("seed", range(40))
    def test_random_history_matches_grids(self, seed, clock):
        """
        Random moves, undos and redos: the board always equals the grid at
        the current point in a linear history, and new moves drop the
        undone tail.
        """
        actions = random.Random(seed)
        puzzle = ConstraintGrid("expert", rng=random.Random(seed), clock=clock)
        history = [puzzle.state.values()]
        position = 0

        for _ in range(80):
            roll = actions.random()
            if roll < 0.25:
                undone = puzzle.undo()
                assert undone == (position > 0)
                if undone:
                    position -= 1
            elif roll < 0.4:
                redone = puzzle.redo()
                assert redone == (position < len(history) - 1)
                if redone:
                    position += 1
            else:
                row, col = actions.randrange(4), actions.randrange(4)
                value = actions.choice([None, 1, 2, 3, 4])
                if puzzle.make_move(row, col, value).success:
                    del history[position + 1:]
                    history.append(puzzle.state.values())
                    position += 1

            assert puzzle.state.values() == history[position]
            assert len(puzzle.state.moves) == position

    def test_clear_history(self, sudoku):
        sudoku.make_move(0, 1, 2)
        sudoku.clear_history()
        assert not sudoku.can_undo()
        assert sudoku.state.grid[0][1].value == 2


class TestSolver:
    """Tests for the solver and hints."""

    def test_solve_does_not_mutate(self, sudoku):
        """solve() returns a solution without touching the grid."""
        assert sudoku.solve() == SOLVED_GRID
        assert sudoku.state.values() == OPEN_GRID

    def test_unsolvable(self, sudoku):
        """(0, 3) needs a 4 but column 3 already has one."""
        sudoku.load_puzzle([
            [1, 2, 3, None],
            [None, None, None, 4],
            [None, None, None, None],
            [None, None, None, None],
        ])
        assert not sudoku.is_solvable()
        assert sudoku.solve() is None
        assert sudoku.solution is None

    def test_load_puzzle_rejects_bad_shape(self, sudoku):
        with pytest.raises(ValueError):
            sudoku.load_puzzle([[1, 2, 3]])

    def test_hint_possible_values(self, sudoku):
        """Only 2 fits at (0, 1)."""
        hint = sudoku.get_hint(0, 1)
        assert hint.possible_values == [2]
        assert hint.difficulty == 4

    def test_hint_for_locked_cell(self, sudoku):
        assert sudoku.get_hint(0, 0) is None

    def test_get_hint_does_not_charge(self, sudoku):
        sudoku.get_hint(0, 1)
        assert sudoku.state.hints_used == 0
        sudoku.use_hint()
        assert sudoku.state.hints_used == 1

    def test_next_move_most_constrained(self, sudoku):
        move = sudoku.get_next_move()
        assert (move.row, move.col, move.value) == (0, 1, 2)

    def test_next_move_none_when_full(self, sudoku):
        sudoku.load_puzzle(SOLVED_GRID)
        assert sudoku.get_next_move() is None


class TestTimerAndScore:
    """Tests for timing and scoring."""

    def test_start_timer_starts_puzzle(self, sudoku, clock):
        sudoku.start_timer()
        assert sudoku.state.status == PuzzleStatus.IN_PROGRESS
        assert sudoku.state.start_time == clock.now

    def test_elapsed_excludes_pause(self, sudoku, clock):
        sudoku.start_timer()
        clock.advance(30)
        sudoku.pause_timer()
        clock.advance(100)
        sudoku.resume_timer()
        clock.advance(5)
        assert sudoku.get_elapsed_time() == 35

    def test_completion_stops_timer(self, sudoku, clock):
        sudoku.start_timer()
        clock.advance(20)
        fill_solution(sudoku)
        clock.advance(500)
        assert sudoku.get_elapsed_time() == 20

    @pytest.mark.parametrize("params,expected", [
        (ScoreParams(time_elapsed=0, hints_used=0, difficulty=Difficulty.MEDIUM), 300),
        (ScoreParams(time_elapsed=100, hints_used=0, difficulty=Difficulty.MEDIUM), 270),
        (ScoreParams(time_elapsed=600, hints_used=0, difficulty=Difficulty.EASY), 100),
        (ScoreParams(time_elapsed=0, hints_used=1, difficulty=Difficulty.HARD), 360),
        (ScoreParams(time_elapsed=0, hints_used=10, difficulty=Difficulty.EXPERT), 10),
    ])
    def test_score_formula(self, sudoku, params, expected):
        assert sudoku.calculate_score(params) == expected

    def test_score_from_own_counters(self, sudoku, clock):
        """Without params the score uses the puzzle's timer and hints."""
        sudoku.start_timer()
        clock.advance(50)
        sudoku.use_hint()
        # (100 + 90 - 20) * 1.5
        assert sudoku.calculate_score() == 255


class TestSerialization:
    """Tests for serialize/deserialize."""

    def test_round_trip(self, sudoku, clock):
        sudoku.start_timer()
        sudoku.make_move(0, 1, 2)
        sudoku.use_hint()
        clock.advance(10)

        restored = ConstraintGrid(clock=clock)
        restored.deserialize(sudoku.serialize())

        assert restored.state == sudoku.state
        assert restored.solution == sudoku.solution
        assert restored.get_elapsed_time() == 10
        assert restored.undo()
        assert restored.state.grid[0][1].value is None

    def test_redo_stack_cleared(self, sudoku):
        sudoku.make_move(0, 1, 2)
        sudoku.undo()
        data = sudoku.serialize()
        sudoku.deserialize(data)
        assert not sudoku.can_redo()

    def test_malformed_snapshot(self, sudoku):
        with pytest.raises(SnapshotError):
            sudoku.deserialize("not json")
        with pytest.raises(SnapshotError):
            sudoku.deserialize('{"state": {"id": 1}}')
