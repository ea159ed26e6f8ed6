"""
Shapes - Polyomino templates and rotation.

Blocks are (x, y) offsets relative to the shape's top-left corner.
A quarter turn maps (x, y) -> (-y, x) and then shifts the result back to
non-negative coordinates, so four turns give back the original block set.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace


@dataclass(frozen=True)
class Block:
    x: int
    y: int


@dataclass
class Shape:
    """A shape in the puzzle pool. id is unique within one puzzle."""
    id: str
    blocks: list[Block] = field(default_factory=list)
    color: str = ""

    @property
    def size(self) -> int:
        return len(self.blocks)

    @property
    def width(self) -> int:
        return max(b.x for b in self.blocks) + 1 if self.blocks else 0

    @property
    def height(self) -> int:
        return max(b.y for b in self.blocks) + 1 if self.blocks else 0

    def footprint(self) -> frozenset[Block]:
        return frozenset(self.blocks)


def _blocks(*coords: tuple[int, int]) -> tuple[Block, ...]:
    return tuple(Block(x, y) for x, y in coords)


# =============================================================================
# Templates
# =============================================================================

TETROMINO_SHAPES = {
    "I": _blocks((0, 0), (1, 0), (2, 0), (3, 0)),
    "O": _blocks((0, 0), (1, 0), (0, 1), (1, 1)),
    "T": _blocks((1, 0), (0, 1), (1, 1), (2, 1)),
    "S": _blocks((1, 0), (2, 0), (0, 1), (1, 1)),
    "Z": _blocks((0, 0), (1, 0), (1, 1), (2, 1)),
    "J": _blocks((0, 0), (0, 1), (1, 1), (2, 1)),
    "L": _blocks((2, 0), (0, 1), (1, 1), (2, 1)),
}

SIMPLE_SHAPES = {
    "DOT": _blocks((0, 0)),
    "LINE2": _blocks((0, 0), (1, 0)),
    "LINE3": _blocks((0, 0), (1, 0), (2, 0)),
    "CORNER": _blocks((0, 0), (1, 0), (0, 1)),
}

COMPLEX_SHAPES = {
    "PLUS": _blocks((1, 0), (0, 1), (1, 1), (2, 1), (1, 2)),
    "U": _blocks((0, 0), (2, 0), (0, 1), (1, 1), (2, 1)),
    "STAIRS": _blocks((0, 0), (1, 0), (1, 1), (2, 1), (2, 2)),
    "ZIGZAG": _blocks((0, 0), (1, 0), (1, 1), (2, 1), (2, 2), (3, 2)),
}

SHAPE_COLORS = [
    "#FF6B6B",  # Red
    "#4ECDC4",  # Teal
    "#45B7D1",  # Blue
    "#FFA07A",  # Light Salmon
    "#98D8C8",  # Mint
    "#F7DC6F",  # Yellow
    "#BB8FCE",  # Purple
    "#85C1F2",  # Light Blue
]


# =============================================================================
# Rotation
# =============================================================================

def normalize_blocks(blocks: list[Block]) -> list[Block]:
    """Shift blocks so the minimum x and y are both 0."""
    if not blocks:
        return []
    min_x = min(b.x for b in blocks)
    min_y = min(b.y for b in blocks)
    return [Block(b.x - min_x, b.y - min_y) for b in blocks]


def rotate_blocks(blocks: list[Block]) -> list[Block]:
    """One 90 degree clockwise turn."""
    return normalize_blocks([Block(-b.y, b.x) for b in blocks])


def rotate_shape(shape: Shape, quarter_turns: int = 1) -> Shape:
    """A copy of shape turned quarter_turns times (mod 4). id and color kept."""
    blocks = list(shape.blocks)
    for _ in range(quarter_turns % 4):
        blocks = rotate_blocks(blocks)
    return replace(shape, blocks=blocks)


def orientations(shape: Shape, allow_rotation: bool = True) -> list[tuple[int, Shape]]:
    """
    Distinct (quarter_turns, rotated_shape) pairs.

    Symmetric shapes collapse: O yields one orientation, I two.
    """
    if not allow_rotation:
        return [(0, rotate_shape(shape, 0))]

    seen = set()
    result = []
    for turns in range(4):
        rotated = rotate_shape(shape, turns)
        key = rotated.footprint()
        if key not in seen:
            seen.add(key)
            result.append((turns, rotated))
    return result
