"""
Puzzlator - Casual Puzzle Engine

Three independent, synchronous puzzle kernels plus the glue around them:
- ConstraintGrid: 4x4 Sudoku generation, validation, undo/redo, hints
- ShapeFitEngine: polyomino placement on a square grid
- SequenceEngine: rule-governed number/shape/color sequences with holes
- Generator: cached, validated puzzle generation with local fallback
- Sessions: tagged-union orchestration, snapshots, score recording
"""

__version__ = "0.1.0"
