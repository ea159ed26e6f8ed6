"""
Spatial State - Board, placements and counters for the shape-fit puzzle.

Invariant: every non-empty grid cell holds the id of exactly one entry in
placed_shapes, and that entry's blocks (offset by x, y) cover exactly the
cells holding its id.
"""

from __future__ import annotations
from dataclasses import dataclass, field

from ...engine_core import Difficulty, TimerSnapshot
from .shapes import Shape


@dataclass
class PlacedShape:
    """
    A shape on the board.

    shape holds the rotated blocks actually placed; rotation is in
    degrees (0, 90, 180 or 270).
    """
    shape: Shape
    x: int
    y: int
    rotation: int = 0

    def cells(self) -> list[tuple[int, int]]:
        """Absolute (x, y) cells covered."""
        return [(self.x + b.x, self.y + b.y) for b in self.shape.blocks]


@dataclass
class SpatialState:
    grid_size: int
    grid: list[list[str | None]] = field(default_factory=list)  # grid[y][x]
    shapes_to_place: list[Shape] = field(default_factory=list)
    placed_shapes: list[PlacedShape] = field(default_factory=list)
    allow_rotation: bool = False
    moves: int = 0
    hints_used: int = 0
    start_time: float | None = None
    end_time: float | None = None

    def placed_ids(self) -> set[str]:
        return {p.shape.id for p in self.placed_shapes}

    def unplaced_shapes(self) -> list[Shape]:
        placed = self.placed_ids()
        return [s for s in self.shapes_to_place if s.id not in placed]

    def occupied_cells(self) -> set[tuple[int, int]]:
        return {
            (x, y)
            for y, row in enumerate(self.grid)
            for x, cell in enumerate(row)
            if cell is not None
        }


@dataclass
class SpatialHint:
    message: str
    shape_id: str | None = None
    position: tuple[int, int] | None = None  # (x, y)
    rotation: int | None = None  # degrees


@dataclass
class SpatialSnapshot:
    difficulty: Difficulty
    state: SpatialState
    timer: TimerSnapshot = field(default_factory=TimerSnapshot)
