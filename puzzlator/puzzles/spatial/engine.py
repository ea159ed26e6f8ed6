"""
ShapeFitEngine - Place a set of polyominoes on a square grid.

Difficulty picks the grid size, how many shapes are drawn, which template
families they come from and whether rotation is allowed.

Generation is a bounded retry loop:
1. Draw a batch of shapes from the difficulty's templates
2. Accept it if the total block count fits the grid fill ratio
   (and, with verify_packing, if a real packing exists)
3. After max_attempts rejections fall back to SIMPLE_SHAPES, then to DOTs

The fill ratio check alone does not prove a packing exists. is_solvable()
runs the full packing search on demand.
"""

from __future__ import annotations
from copy import deepcopy
from dataclasses import dataclass
from typing import Callable
import logging
import math
import random
import time

from ...engine_core import (
    Difficulty,
    ScoreParams,
    PuzzleTimer,
    SnapshotCodec,
)
from ...errors import PlacementError, ShapeNotFoundError
from .packing import PackingSearch
from .shapes import (
    Block,
    Shape,
    TETROMINO_SHAPES,
    SIMPLE_SHAPES,
    COMPLEX_SHAPES,
    SHAPE_COLORS,
    rotate_shape,
)
from .state import PlacedShape, SpatialHint, SpatialState, SpatialSnapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SpatialLevel:
    """Per-difficulty generation parameters."""
    grid_size: int
    min_shapes: int
    max_shapes: int
    templates: dict[str, tuple[Block, ...]]
    allow_rotation: bool
    max_fill_ratio: float


def _first(templates: dict, count: int) -> dict:
    return dict(list(templates.items())[:count])


LEVELS = {
    Difficulty.EASY: SpatialLevel(
        grid_size=4, min_shapes=2, max_shapes=3,
        templates={**SIMPLE_SHAPES, **_first(TETROMINO_SHAPES, 3)},
        allow_rotation=False, max_fill_ratio=0.9,
    ),
    Difficulty.MEDIUM: SpatialLevel(
        grid_size=5, min_shapes=3, max_shapes=4,
        templates=dict(TETROMINO_SHAPES),
        allow_rotation=False, max_fill_ratio=0.8,
    ),
    Difficulty.HARD: SpatialLevel(
        grid_size=6, min_shapes=4, max_shapes=5,
        templates={**TETROMINO_SHAPES, **_first(COMPLEX_SHAPES, 2)},
        allow_rotation=True, max_fill_ratio=0.8,
    ),
    Difficulty.EXPERT: SpatialLevel(
        grid_size=8, min_shapes=5, max_shapes=7,
        templates={**TETROMINO_SHAPES, **COMPLEX_SHAPES},
        allow_rotation=True, max_fill_ratio=0.8,
    ),
}

BASE_SCORE = 1000
MAX_TIME_PENALTY = 300
DIFFICULTY_MULTIPLIER = {
    Difficulty.EASY: 0.8,
    Difficulty.MEDIUM: 1.0,
    Difficulty.HARD: 1.2,
    Difficulty.EXPERT: 1.5,
}

_CODEC = SnapshotCodec(SpatialSnapshot)


class ShapeFitEngine:
    """
    Shape-fitting puzzle kernel.

    Usage:
        engine = ShapeFitEngine("hard")
        shape = engine.state.shapes_to_place[0]

        if engine.can_place_shape(shape, 0, 0, quarter_turns=1):
            engine.place_shape(shape, 0, 0, quarter_turns=1)

        engine.remove_shape(shape.id)
    """

    def __init__(
        self,
        difficulty: Difficulty | str = Difficulty.MEDIUM,
        rng: random.Random | None = None,
        clock: Callable[[], float] = time.time,
        max_attempts: int = 50,
        verify_packing: bool = False,
    ):
        self.difficulty = Difficulty(difficulty)
        self.level = LEVELS[self.difficulty]
        self.rng = rng or random.Random()
        self.clock = clock
        self.timer = PuzzleTimer(clock)
        self.max_attempts = max_attempts
        self.verify_packing = verify_packing

        self.state = self._create_initial_state()
        self.state.shapes_to_place = self.generate_shapes()

    def _create_initial_state(self) -> SpatialState:
        size = self.level.grid_size
        return SpatialState(
            grid_size=size,
            grid=[[None] * size for _ in range(size)],
            allow_rotation=self.level.allow_rotation,
        )

    # =========================================================================
    # Generation
    # =========================================================================

    def generate_shapes(self) -> list[Shape]:
        """Draw a shape batch that passes the fit check (bounded retries)."""
        for attempt in range(1, self.max_attempts + 1):
            shapes = self._draw_shapes(self.level.templates)
            if self._batch_fits(shapes):
                logger.debug(
                    "Generated %d %s shapes on attempt %d",
                    len(shapes), self.difficulty.value, attempt,
                )
                return shapes

        logger.warning(
            "No %s shape batch fit after %d attempts, falling back to simple shapes",
            self.difficulty.value, self.max_attempts,
        )
        for _ in range(self.max_attempts):
            shapes = self._draw_shapes(SIMPLE_SHAPES)
            if self._batch_fits(shapes):
                return shapes

        logger.warning("Simple shapes did not fit either, using single blocks")
        return self._draw_shapes({"DOT": SIMPLE_SHAPES["DOT"]})

    def _draw_shapes(self, templates: dict[str, tuple[Block, ...]]) -> list[Shape]:
        count = self.rng.randint(self.level.min_shapes, self.level.max_shapes)
        names = list(templates)
        used_colors: set[str] = set()
        shapes = []

        for i in range(count):
            name = self.rng.choice(names)
            free = [c for c in SHAPE_COLORS if c not in used_colors]
            color = self.rng.choice(free or SHAPE_COLORS)
            used_colors.add(color)
            shapes.append(Shape(id=f"shape-{i}", blocks=list(templates[name]), color=color))

        return shapes

    def _batch_fits(self, shapes: list[Shape]) -> bool:
        total_blocks = sum(s.size for s in shapes)
        capacity = self.level.grid_size * self.level.grid_size
        if total_blocks > capacity * self.level.max_fill_ratio:
            return False
        if self.verify_packing:
            search = PackingSearch(self.level.grid_size, self.level.allow_rotation)
            return search.solve(shapes) is not None
        return True

    # =========================================================================
    # State
    # =========================================================================

    def get_state(self) -> SpatialState:
        return deepcopy(self.state)

    def rotate_shape(self, shape: Shape, quarter_turns: int = 1) -> Shape:
        return rotate_shape(shape, quarter_turns)

    def serialize(self) -> str:
        return _CODEC.dumps(
            SpatialSnapshot(
                difficulty=self.difficulty,
                state=self.state,
                timer=self.timer.snapshot(),
            )
        )

    def deserialize(self, data: str):
        snapshot = _CODEC.loads(data)
        self.difficulty = snapshot.difficulty
        self.level = LEVELS[self.difficulty]
        self.state = snapshot.state
        self.timer.restore(snapshot.timer)

    # =========================================================================
    # Placement
    # =========================================================================

    def can_place_shape(self, shape: Shape, x: int, y: int, quarter_turns: int = 0) -> bool:
        """
        True if the pooled shape with this id is unplaced and every rotated
        block lands on an empty in-bounds cell.
        """
        pooled = self._find_shape(shape.id)
        if pooled is None or pooled.id in self.state.placed_ids():
            return False
        if quarter_turns % 4 and not self.state.allow_rotation:
            return False

        size = self.state.grid_size
        for block in rotate_shape(pooled, quarter_turns).blocks:
            gx, gy = x + block.x, y + block.y
            if not (0 <= gx < size and 0 <= gy < size):
                return False
            if self.state.grid[gy][gx] is not None:
                return False
        return True

    def place_shape(self, shape: Shape, x: int, y: int, quarter_turns: int = 0):
        """Place a shape. Callers should check can_place_shape() first."""
        if not self.can_place_shape(shape, x, y, quarter_turns):
            raise PlacementError(
                "Cannot place shape at this position",
                context={"shape_id": shape.id, "x": x, "y": y, "rotation": (quarter_turns % 4) * 90},
            )

        rotated = rotate_shape(self._find_shape(shape.id), quarter_turns)
        placed = PlacedShape(shape=rotated, x=x, y=y, rotation=(quarter_turns % 4) * 90)
        for gx, gy in placed.cells():
            self.state.grid[gy][gx] = rotated.id

        self.state.placed_shapes.append(placed)
        self.state.moves += 1

        if self.is_complete():
            self.timer.stop()
            self.state.end_time = self.clock()
            logger.debug("Spatial puzzle completed in %d moves", self.state.moves)

    def remove_shape(self, shape_id: str):
        for index, placed in enumerate(self.state.placed_shapes):
            if placed.shape.id == shape_id:
                break
        else:
            raise ShapeNotFoundError("Shape not found", context={"shape_id": shape_id})

        was_complete = self.is_complete()
        for gx, gy in placed.cells():
            self.state.grid[gy][gx] = None
        del self.state.placed_shapes[index]
        self.state.moves += 1

        if was_complete:
            self.state.end_time = None
            self.timer.reopen()

    def is_complete(self) -> bool:
        return len(self.state.placed_shapes) == len(self.state.shapes_to_place)

    def is_solvable(self) -> bool:
        """Whether the unplaced shapes can still all be packed. Read-only."""
        return self.find_solution() is not None

    def find_solution(self) -> list[PlacedShape] | None:
        """Placements for the unplaced shapes that complete the board, or None."""
        search = PackingSearch(self.state.grid_size, self.state.allow_rotation)
        return search.solve(self.state.unplaced_shapes(), self.state.occupied_cells())

    # =========================================================================
    # Hints
    # =========================================================================

    def get_hint(self, shape_id: str | None = None) -> SpatialHint:
        """
        General hint (no shape_id): the first unplaced shape.
        Specific hint: first row-major position where the shape fits,
        unrotated first, then each permitted rotation.

        Asking for a hint is free; call use_hint() to charge it.
        """
        if shape_id is None:
            unplaced = self.state.unplaced_shapes()
            if not unplaced:
                return SpatialHint(message="All shapes have been placed!")
            shape = unplaced[0]
            return SpatialHint(
                message=f"Try placing the {shape.color} shape with {shape.size} blocks",
                shape_id=shape.id,
            )

        shape = self._find_shape(shape_id)
        if shape is None:
            return SpatialHint(message="Shape not found")
        if shape.id in self.state.placed_ids():
            return SpatialHint(message="This shape is already placed", shape_id=shape.id)

        turn_options = range(4) if self.state.allow_rotation else range(1)
        for turns in turn_options:
            for y in range(self.state.grid_size):
                for x in range(self.state.grid_size):
                    if not self.can_place_shape(shape, x, y, turns):
                        continue
                    message = f"Try placing the {shape.color} shape at position ({x + 1}, {y + 1})"
                    if turns:
                        message += f" rotated {turns * 90} degrees"
                    return SpatialHint(
                        message=message,
                        shape_id=shape.id,
                        position=(x, y),
                        rotation=turns * 90,
                    )

        return SpatialHint(message="No valid position found for this shape", shape_id=shape.id)

    def use_hint(self):
        self.state.hints_used += 1

    # =========================================================================
    # Timer
    # =========================================================================

    def start_timer(self):
        self.timer.start()
        self.state.start_time = self.timer.started_at

    def stop_timer(self):
        self.timer.stop()
        if self.state.start_time is not None and self.state.end_time is None:
            self.state.end_time = self.timer.stopped_at

    def pause_timer(self):
        self.timer.pause()

    def resume_timer(self):
        self.timer.resume()

    def get_elapsed_time(self) -> int:
        return self.timer.elapsed()

    def reset(self):
        """Clear the board and counters. The shape pool is kept."""
        size = self.state.grid_size
        self.state.grid = [[None] * size for _ in range(size)]
        self.state.placed_shapes = []
        self.state.moves = 0
        self.state.hints_used = 0
        self.state.start_time = None
        self.state.end_time = None
        self.timer.reset()

    # =========================================================================
    # Scoring
    # =========================================================================

    def calculate_score(self, params: ScoreParams | None = None) -> int:
        if params is None:
            params = ScoreParams(
                time_elapsed=self.get_elapsed_time(),
                hints_used=self.state.hints_used,
                difficulty=self.difficulty,
                move_count=self.state.moves,
            )

        time_penalty = min(params.time_elapsed * 2, MAX_TIME_PENALTY)
        move_penalty = params.move_count * 5
        hint_penalty = params.hints_used * 50
        multiplier = DIFFICULTY_MULTIPLIER[Difficulty(params.difficulty)]

        return max(0, math.floor((BASE_SCORE - time_penalty - move_penalty - hint_penalty) * multiplier))

    def _find_shape(self, shape_id: str) -> Shape | None:
        for shape in self.state.shapes_to_place:
            if shape.id == shape_id:
                return shape
        return None
