"""
ConstraintGrid - 4x4 Sudoku with 2x2 boxes.

Numbers 1-4 must appear exactly once in each row, column and box.

Generation:
1. Start from a fixed Latin square
2. Relabel the four symbols with a random bijection
3. Independently swap rows 0/1, rows 2/3, cols 0/1, cols 2/3 (50% each)
4. Punch a difficulty-dependent number of holes; the rest become clues

Every step in (2) and (3) is a symmetry of the base square's block
structure, so the result is always a valid solution without a solver.

Constraint violations are returned as MoveResult failures, never raised.
"""

from __future__ import annotations
from copy import deepcopy
from typing import Any, Callable
import logging
import math
import random
import time
import uuid

from ...engine_core import (
    Difficulty,
    PuzzleStatus,
    MoveResult,
    ScoreParams,
    PuzzleTimer,
    SnapshotCodec,
)
from .state import Cell, Move, SudokuHint, SudokuState, SudokuSnapshot

logger = logging.getLogger(__name__)

GRID_SIZE = 4
BOX_SIZE = 2
VALUES = (1, 2, 3, 4)

BASE_SOLUTION = (
    (1, 2, 3, 4),
    (3, 4, 1, 2),
    (2, 1, 4, 3),
    (4, 3, 2, 1),
)

# Cells removed from the full solution (16 - n clues remain)
CELLS_TO_REMOVE = {
    Difficulty.EASY: 4,
    Difficulty.MEDIUM: 6,
    Difficulty.HARD: 8,
    Difficulty.EXPERT: 10,
}

BASE_SCORE = 100
MIN_SCORE = 10
DIFFICULTY_MULTIPLIER = {
    Difficulty.EASY: 1,
    Difficulty.MEDIUM: 1.5,
    Difficulty.HARD: 2,
    Difficulty.EXPERT: 3,
}

_CODEC = SnapshotCodec(SudokuSnapshot)


def _is_cell_value(value: Any) -> bool:
    # bool is an int subclass; True would pass as 1
    return not isinstance(value, bool) and value in VALUES


def find_violations(
    values: list[list[int | None]],
    row: int,
    col: int,
    value: int,
) -> list[str]:
    """
    Names of the constraints ("row", "column", "box") that value would
    break at (row, col). The cell itself is ignored.
    """
    violations = []

    if any(values[row][c] == value for c in range(GRID_SIZE) if c != col):
        violations.append("row")

    if any(values[r][col] == value for r in range(GRID_SIZE) if r != row):
        violations.append("column")

    box_row = (row // BOX_SIZE) * BOX_SIZE
    box_col = (col // BOX_SIZE) * BOX_SIZE
    for r in range(box_row, box_row + BOX_SIZE):
        for c in range(box_col, box_col + BOX_SIZE):
            if (r, c) != (row, col) and values[r][c] == value:
                violations.append("box")
                break
        else:
            continue
        break

    return violations


def _solve_in_place(values: list[list[int | None]]) -> bool:
    """Backtracking over empty cells, trying 1..4 in order."""
    for row in range(GRID_SIZE):
        for col in range(GRID_SIZE):
            if values[row][col] is not None:
                continue
            for num in VALUES:
                if not find_violations(values, row, col, num):
                    values[row][col] = num
                    if _solve_in_place(values):
                        return True
                    values[row][col] = None
            return False
    return True


class ConstraintGrid:
    """
    4x4 Sudoku kernel.

    Usage:
        puzzle = ConstraintGrid("medium")
        puzzle.start_timer()

        result = puzzle.make_move(0, 2, 3)
        if not result.success:
            show(result.error)

        puzzle.undo()
        puzzle.redo()

        if puzzle.is_complete():
            score = puzzle.calculate_score()
    """

    def __init__(
        self,
        difficulty: Difficulty | str = Difficulty.MEDIUM,
        rng: random.Random | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.difficulty = Difficulty(difficulty)
        self.rng = rng or random.Random()
        self.clock = clock
        self.timer = PuzzleTimer(clock)
        self._redo_stack: list[Move] = []
        self._solution: list[list[int]] | None = None
        self.state = self._create_initial_state()
        self.generate_puzzle()

    # =========================================================================
    # Generation
    # =========================================================================

    def _create_initial_state(self) -> SudokuState:
        return SudokuState(
            id=str(uuid.uuid4()),
            difficulty=self.difficulty,
            grid=[
                [Cell(row=row, col=col) for col in range(GRID_SIZE)]
                for row in range(GRID_SIZE)
            ],
        )

    def generate_puzzle(self, difficulty: Difficulty | str | None = None):
        """
        Generate a fresh puzzle, discarding the current one.

        History, redo stack, hints and timer are all reset.
        """
        if difficulty is not None:
            self.difficulty = Difficulty(difficulty)
        self.state = self._create_initial_state()
        self._redo_stack = []
        self.timer.reset()

        solution = self.generate_complete_solution()
        self._solution = [list(row) for row in solution]

        holes = set(self.rng.sample(range(GRID_SIZE * GRID_SIZE), CELLS_TO_REMOVE[self.difficulty]))
        for row in range(GRID_SIZE):
            for col in range(GRID_SIZE):
                cell = self.state.grid[row][col]
                if row * GRID_SIZE + col in holes:
                    cell.value = None
                    cell.locked = False
                else:
                    cell.value = solution[row][col]
                    cell.locked = True

        logger.debug(
            "Generated %s sudoku %s with %d clues",
            self.difficulty.value, self.state.id, self.state.clue_count,
        )

    def generate_complete_solution(self) -> list[list[int]]:
        """A random valid solution derived from BASE_SOLUTION."""
        relabel = list(VALUES)
        self.rng.shuffle(relabel)
        solution = [[relabel[num - 1] for num in row] for row in BASE_SOLUTION]

        # Rows within each band
        if self.rng.random() < 0.5:
            solution[0], solution[1] = solution[1], solution[0]
        if self.rng.random() < 0.5:
            solution[2], solution[3] = solution[3], solution[2]

        # Columns within each stack
        if self.rng.random() < 0.5:
            for row in solution:
                row[0], row[1] = row[1], row[0]
        if self.rng.random() < 0.5:
            for row in solution:
                row[2], row[3] = row[3], row[2]

        return solution

    @property
    def solution(self) -> list[list[int]] | None:
        """The full solution this puzzle was cut from (a copy)."""
        if self._solution is None:
            return None
        return [list(row) for row in self._solution]

    def load_puzzle(
        self,
        grid: list[list[int | None]],
        metadata: dict[str, Any] | None = None,
    ):
        """
        Install a caller-supplied grid. Non-empty cells become clues.

        The stored solution is recomputed with the solver (None when the
        grid has no solution).
        """
        if len(grid) != GRID_SIZE or any(len(row) != GRID_SIZE for row in grid):
            raise ValueError("Grid must be 4x4")

        for row in range(GRID_SIZE):
            for col in range(GRID_SIZE):
                value = grid[row][col]
                if value is not None and not _is_cell_value(value):
                    raise ValueError(f"Invalid value at ({row}, {col}): {value}")
                cell = self.state.grid[row][col]
                cell.value = value
                cell.locked = value is not None

        if metadata:
            self.state.metadata = dict(metadata)

        self.state.status = PuzzleStatus.NOT_STARTED
        self.state.end_time = None
        self.clear_history()
        self._solution = self.solve()
        self._refresh_status()

    # =========================================================================
    # State
    # =========================================================================

    def get_state(self) -> SudokuState:
        """Deep copy of the current state."""
        return deepcopy(self.state)

    def serialize(self) -> str:
        return _CODEC.dumps(
            SudokuSnapshot(
                state=self.state,
                solution=self._solution,
                timer=self.timer.snapshot(),
            )
        )

    def deserialize(self, data: str):
        """Restore a serialize() string in place. The redo stack is cleared."""
        snapshot = _CODEC.loads(data)
        self.state = snapshot.state
        self.difficulty = snapshot.state.difficulty
        self._solution = snapshot.solution
        self.timer.restore(snapshot.timer)
        self._redo_stack = []

    # =========================================================================
    # Gameplay
    # =========================================================================

    def make_move(self, row: int, col: int, value: int | None) -> MoveResult:
        """
        Set (or clear, with None) an unlocked cell.

        Accepted moves are recorded in history and clear the redo stack.
        """
        if not self._in_bounds(row, col):
            return MoveResult.failure(
                f"Cell ({row}, {col}) is outside the grid", "OUT_OF_BOUNDS"
            )

        if self.state.status in {PuzzleStatus.COMPLETED, PuzzleStatus.ABANDONED}:
            return MoveResult.failure(
                f"Puzzle is {self.state.status.value}", "PUZZLE_CLOSED"
            )

        if self.state.grid[row][col].locked:
            return MoveResult.failure("Cannot modify locked cell", "LOCKED_CELL")

        if value is not None:
            if not _is_cell_value(value):
                return MoveResult.failure(
                    f"Value must be between 1 and 4, got {value}", "OUT_OF_RANGE"
                )
            violations = self.get_violations(row, col, value)
            if violations:
                logger.debug("Rejected %s at (%d, %d): %s", value, row, col, violations)
                return MoveResult.failure(
                    f"Invalid move: number already exists in {' and '.join(violations)}",
                    "CONSTRAINT_VIOLATION",
                )

        self.state.grid[row][col].value = value
        self.state.moves.append(Move(row=row, col=col, value=value, timestamp=self.clock()))
        self._redo_stack.clear()

        if self.state.status == PuzzleStatus.NOT_STARTED:
            self.state.status = PuzzleStatus.IN_PROGRESS
        self._refresh_status()

        return MoveResult.ok()

    def is_valid_move(self, row: int, col: int, value: int | None) -> bool:
        """Clearing is always valid; otherwise no row/column/box conflict."""
        if value is None:
            return True
        if not _is_cell_value(value):
            return False
        return not self.get_violations(row, col, value)

    def get_violations(self, row: int, col: int, value: int) -> list[str]:
        return find_violations(self.state.values(), row, col, value)

    def is_complete(self) -> bool:
        """
        Every cell filled and every value consistent with its row, column
        and box. Any consistent filling counts, not only the stored solution.
        """
        values = self.state.values()
        for row in range(GRID_SIZE):
            for col in range(GRID_SIZE):
                value = values[row][col]
                if value is None:
                    return False
                if find_violations(values, row, col, value):
                    return False
        return True

    def is_solvable(self) -> bool:
        """Whether the current grid can be completed. Works on a copy."""
        return _solve_in_place(self.state.values())

    def solve(self) -> list[list[int]] | None:
        """First solution found by backtracking, or None. Works on a copy."""
        values = self.state.values()
        if not _solve_in_place(values):
            return None
        return values

    def abandon(self):
        """Give up on the puzzle. Further moves are rejected."""
        self.state.status = PuzzleStatus.ABANDONED
        self.timer.stop()

    # =========================================================================
    # Hints
    # =========================================================================

    def get_hint(self, row: int, col: int) -> SudokuHint | None:
        """Legal values for an unlocked cell; None for clues."""
        self._check_bounds(row, col)
        if self.state.grid[row][col].locked:
            return None

        values = self.state.values()
        possible = [num for num in VALUES if not find_violations(values, row, col, num)]
        return SudokuHint(
            row=row,
            col=col,
            possible_values=possible,
            difficulty=5 - len(possible),
        )

    def use_hint(self):
        self.state.hints_used += 1

    def get_next_move(self) -> Move | None:
        """
        Suggest a move in the most constrained empty cell.

        Cells with no legal value are skipped (dead ends, nothing to suggest).
        """
        best: Move | None = None
        fewest = len(VALUES) + 1

        for row, col in self.state.empty_cells():
            hint = self.get_hint(row, col)
            if hint and hint.possible_values and len(hint.possible_values) < fewest:
                fewest = len(hint.possible_values)
                best = Move(row=row, col=col, value=hint.possible_values[0])

        return best

    # =========================================================================
    # History
    # =========================================================================

    def undo(self) -> bool:
        """
        Revert the last move.

        The cell goes back to the value of the most recent earlier move on
        the same cell, or empty if there is none. An abandoned puzzle keeps
        its history frozen.
        """
        if not self.state.moves or self.state.status == PuzzleStatus.ABANDONED:
            return False

        last = self.state.moves.pop()
        self._redo_stack.append(last)

        previous: int | None = None
        if not self.state.grid[last.row][last.col].locked:
            for move in reversed(self.state.moves):
                if (move.row, move.col) == (last.row, last.col):
                    previous = move.value
                    break

        self.state.grid[last.row][last.col].value = previous
        self._refresh_status()
        return True

    def redo(self) -> bool:
        """Reapply the last undone move without clearing the redo stack."""
        if not self._redo_stack or self.state.status == PuzzleStatus.ABANDONED:
            return False

        move = self._redo_stack.pop()
        self.state.grid[move.row][move.col].value = move.value
        self.state.moves.append(move)
        self._refresh_status()
        return True

    def can_undo(self) -> bool:
        return bool(self.state.moves) and self.state.status != PuzzleStatus.ABANDONED

    def can_redo(self) -> bool:
        return bool(self._redo_stack) and self.state.status != PuzzleStatus.ABANDONED

    def clear_history(self):
        self.state.moves = []
        self._redo_stack = []

    # =========================================================================
    # Timer
    # =========================================================================

    def start_timer(self):
        self.timer.start()
        self.state.start_time = self.timer.started_at
        if self.state.status == PuzzleStatus.NOT_STARTED:
            self.state.status = PuzzleStatus.IN_PROGRESS

    def stop_timer(self):
        self.timer.stop()

    def pause_timer(self):
        self.timer.pause()

    def resume_timer(self):
        self.timer.resume()

    def get_elapsed_time(self) -> int:
        return self.timer.elapsed()

    # =========================================================================
    # Scoring
    # =========================================================================

    def calculate_score(self, params: ScoreParams | None = None) -> int:
        """
        100 base, up to 100 time bonus (1 point lost per 5 seconds),
        20 points per hint, times the difficulty multiplier. Never below 10.
        """
        if params is None:
            params = ScoreParams(
                time_elapsed=self.get_elapsed_time(),
                hints_used=self.state.hints_used,
                difficulty=self.difficulty,
                move_count=len(self.state.moves),
            )

        time_bonus = max(0, 100 - math.floor(params.time_elapsed / 5))
        hint_penalty = params.hints_used * 20
        multiplier = DIFFICULTY_MULTIPLIER[Difficulty(params.difficulty)]

        return max(MIN_SCORE, math.floor((BASE_SCORE + time_bonus - hint_penalty) * multiplier))

    # =========================================================================
    # Helpers
    # =========================================================================

    def _refresh_status(self):
        """Keep status in step with completeness after any grid change."""
        if self.state.status == PuzzleStatus.ABANDONED:
            return

        complete = self.is_complete()
        if complete and self.state.status != PuzzleStatus.COMPLETED:
            self.state.status = PuzzleStatus.COMPLETED
            self.state.end_time = self.clock()
            self.timer.stop()
            logger.debug("Sudoku %s completed", self.state.id)
        elif not complete and self.state.status == PuzzleStatus.COMPLETED:
            self.state.status = PuzzleStatus.IN_PROGRESS
            self.state.end_time = None
            self.timer.reopen()

    @staticmethod
    def _in_bounds(row: int, col: int) -> bool:
        return 0 <= row < GRID_SIZE and 0 <= col < GRID_SIZE

    def _check_bounds(self, row: int, col: int):
        if not self._in_bounds(row, col):
            raise IndexError(f"Cell ({row}, {col}) is outside the grid")
