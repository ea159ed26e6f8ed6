"""
Spatial - Shape-fitting puzzle on a square grid.
"""

from .shapes import (
    Block,
    Shape,
    TETROMINO_SHAPES,
    SIMPLE_SHAPES,
    COMPLEX_SHAPES,
    SHAPE_COLORS,
    rotate_shape,
    orientations,
)
from .state import PlacedShape, SpatialHint, SpatialState, SpatialSnapshot
from .packing import PackingSearch
from .engine import ShapeFitEngine, LEVELS

__all__ = [
    "Block",
    "Shape",
    "TETROMINO_SHAPES",
    "SIMPLE_SHAPES",
    "COMPLEX_SHAPES",
    "SHAPE_COLORS",
    "rotate_shape",
    "orientations",
    "PlacedShape",
    "SpatialHint",
    "SpatialState",
    "SpatialSnapshot",
    "PackingSearch",
    "ShapeFitEngine",
    "LEVELS",
]
