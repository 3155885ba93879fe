from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

import numpy as np


class GapLocation(Enum):
    BEGINNING = "beginning"  # between the front cross-aisle and the first item
    MIDDLE = "middle"
    END = "end"  # between the last item and the back cross-aisle


@dataclass(frozen=True)
class Gap:
    size: float
    lower: float
    upper: float
    location: GapLocation


@dataclass(frozen=True)
class AisleOccupancy:
    """Distinct item heights per aisle for one batch.

    `heights[a]` is the sorted tuple of distinct heights in aisle a, empty
    when nothing is picked there. min_aisle/max_aisle are None for an empty
    batch.
    """
    shelf_length: float
    heights: Tuple[Tuple[float, ...], ...]
    min_aisle: Optional[int]
    max_aisle: Optional[int]
    total_items: int

    @property
    def is_empty(self) -> bool:
        return self.total_items == 0

    def is_occupied(self, aisle: int) -> bool:
        return bool(self.heights[aisle])

    def occupied_aisles(self) -> List[int]:
        return [a for a, hs in enumerate(self.heights) if hs]

    def num_occupied(self) -> int:
        return sum(1 for hs in self.heights if hs)

    def max_height(self, aisle: int) -> float:
        return self.heights[aisle][-1]

    def min_height(self, aisle: int) -> float:
        return self.heights[aisle][0]

    def bounded_heights(self, aisle: int) -> Tuple[float, ...]:
        # sentinels are kept even when an item sits exactly on them
        return (0.0,) + self.heights[aisle] + (self.shelf_length,)

    def _gap_at(self, bounded, diffs, i) -> Gap:
        if i == 0:
            location = GapLocation.BEGINNING
        elif i == len(diffs) - 1:
            location = GapLocation.END
        else:
            location = GapLocation.MIDDLE
        return Gap(float(diffs[i]), bounded[i], bounded[i + 1], location)

    def largest_gap(self, aisle: int) -> Gap:
        """Largest gap in the bounded sequence; on ties the one nearest the front wins."""
        bounded = self.bounded_heights(aisle)
        diffs = np.diff(bounded)
        return self._gap_at(bounded, diffs, int(np.argmax(diffs)))

    def largest_gap_from_top(self, aisle: int) -> Gap:
        """Same as largest_gap but ties resolve towards the back cross-aisle."""
        bounded = self.bounded_heights(aisle)
        diffs = np.diff(bounded)
        i = len(diffs) - 1 - int(np.argmax(diffs[::-1]))
        return self._gap_at(bounded, diffs, i)

    def largest_interior_gap(self, aisle: int) -> Optional[Gap]:
        """Largest gap between two items, None with fewer than two distinct heights."""
        hs = self.heights[aisle]
        if len(hs) < 2:
            return None
        diffs = np.diff(hs)
        i = int(np.argmax(diffs))
        return Gap(float(diffs[i]), hs[i], hs[i + 1], GapLocation.MIDDLE)


def extract_occupancy(wh, batch) -> AisleOccupancy:
    per_aisle = [set() for _ in range(wh.num_aisles)]
    total = 0
    for product in batch.items():
        wh.check_location(product.aisle, product.height)
        per_aisle[product.aisle].add(float(product.height))
        total += 1
    heights = tuple(tuple(sorted(hs)) for hs in per_aisle)
    occupied = [a for a, hs in enumerate(heights) if hs]
    return AisleOccupancy(
        shelf_length=wh.shelf_length,
        heights=heights,
        min_aisle=occupied[0] if occupied else None,
        max_aisle=occupied[-1] if occupied else None,
        total_items=total,
    )
