"""
Packing Search - Backtracking placement of a shape set on a square grid.

Shapes are tried largest first, each in every permitted orientation and at
every row-major position. The search is bounded by a node budget; running
out of budget is reported as "no packing found".
"""

from __future__ import annotations
from typing import Iterable
import logging

from .shapes import Shape, orientations
from .state import PlacedShape

logger = logging.getLogger(__name__)

DEFAULT_MAX_NODES = 50_000


class PackingSearch:
    """
    Usage:
        search = PackingSearch(grid_size=5, allow_rotation=False)
        placements = search.solve(shapes)
        if placements is None:
            ...  # no packing (or budget exhausted, see search.exhausted)
    """

    def __init__(
        self,
        grid_size: int,
        allow_rotation: bool = False,
        max_nodes: int = DEFAULT_MAX_NODES,
    ):
        self.grid_size = grid_size
        self.allow_rotation = allow_rotation
        self.max_nodes = max_nodes
        self.nodes = 0
        self.exhausted = False

    def solve(
        self,
        shapes: list[Shape],
        occupied: Iterable[tuple[int, int]] = (),
    ) -> list[PlacedShape] | None:
        """
        Find a placement for every shape without touching occupied cells.

        Returns the placements in the order shapes were given, or None.
        """
        self.nodes = 0
        self.exhausted = False

        ordered = sorted(shapes, key=lambda s: s.size, reverse=True)
        candidates = [orientations(s, self.allow_rotation) for s in ordered]
        placements: list[PlacedShape] = []

        found = self._search(0, candidates, set(occupied), placements)
        if self.exhausted:
            logger.debug("Packing search gave up after %d nodes", self.nodes)
        if not found:
            return None

        by_id = {p.shape.id: p for p in placements}
        return [by_id[s.id] for s in shapes]

    def _search(
        self,
        index: int,
        candidates: list[list[tuple[int, Shape]]],
        occupied: set[tuple[int, int]],
        placements: list[PlacedShape],
    ) -> bool:
        if index == len(candidates):
            return True

        self.nodes += 1
        if self.nodes > self.max_nodes:
            self.exhausted = True
            return False

        for turns, rotated in candidates[index]:
            for y in range(self.grid_size - rotated.height + 1):
                for x in range(self.grid_size - rotated.width + 1):
                    cells = [(x + b.x, y + b.y) for b in rotated.blocks]
                    if any(cell in occupied for cell in cells):
                        continue

                    occupied.update(cells)
                    placements.append(PlacedShape(shape=rotated, x=x, y=y, rotation=turns * 90))

                    if self._search(index + 1, candidates, occupied, placements):
                        return True

                    placements.pop()
                    occupied.difference_update(cells)

                    if self.exhausted:
                        return False

        return False
