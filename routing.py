from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

import geometry
from occupancy import Gap, GapLocation, extract_occupancy


class AislePattern(Enum):
    SKIP = "skip"
    TRAVERSE = "traverse"
    DOUBLE_TRAVERSE = "double_traverse"
    RETURN_FRONT = "return_front"  # in and out through the front cross-aisle
    RETURN_BACK = "return_back"  # in and out through the back cross-aisle
    SPLIT = "split"  # one return from each end, leaving the largest gap unwalked


class CrossAisle(Enum):
    FRONT = "front"
    BACK = "back"


@dataclass(frozen=True)
class AisleDecision:
    aisle: int
    pattern: AislePattern
    length: float
    entry: Optional[CrossAisle] = None
    gap: Optional[Gap] = None


@dataclass(frozen=True)
class Crossing:
    """Number of times each cross-aisle is walked between two columns."""
    start: float
    end: float
    front: int
    back: int


@dataclass(frozen=True)
class RouteResult:
    policy: str
    distance: float
    total_items: int
    min_aisle: Optional[int] = None
    max_aisle: Optional[int] = None
    decisions: Tuple[AisleDecision, ...] = ()
    crossings: Tuple[Crossing, ...] = ()

    @property
    def aisles_visited(self) -> int:
        return sum(1 for d in self.decisions if d.pattern != AislePattern.SKIP)


_GAP_PATTERNS = {
    GapLocation.BEGINNING: (AislePattern.RETURN_BACK, CrossAisle.BACK),
    GapLocation.END: (AislePattern.RETURN_FRONT, CrossAisle.FRONT),
    GapLocation.MIDDLE: (AislePattern.SPLIT, None),
}


def gap_decision(wh, aisle: int, gap: Gap) -> AisleDecision:
    pattern, entry = _GAP_PATTERNS[gap.location]
    length = geometry.gap_skip_length(wh, gap.size, gap.location == GapLocation.MIDDLE)
    return AisleDecision(aisle, pattern, length, entry, gap)


def traverse_decision(wh, aisle: int, entry: CrossAisle = CrossAisle.FRONT) -> AisleDecision:
    return AisleDecision(aisle, AislePattern.TRAVERSE, geometry.traverse_length(wh), entry)


def front_return_decision(wh, occ, aisle: int) -> AisleDecision:
    return AisleDecision(
        aisle, AislePattern.RETURN_FRONT,
        geometry.front_return_length(wh, occ.max_height(aisle)), CrossAisle.FRONT,
    )


def _alternate(entry: CrossAisle) -> CrossAisle:
    return CrossAisle.BACK if entry == CrossAisle.FRONT else CrossAisle.FRONT


class RoutingPolicy:
    name = "base"

    def build_route(self, wh, batch) -> RouteResult:
        occ = extract_occupancy(wh, batch)
        if occ.is_empty:
            return RouteResult(self.name, 0.0, 0)
        return self.route(wh, occ)

    def route(self, wh, occ) -> RouteResult:
        raise NotImplementedError

    def compute_distance(self, wh, batch) -> float:
        return self.build_route(wh, batch).distance

    def compute_cost(self, wh, batch, include_turn_time: bool = False) -> float:
        from kpis import service_time
        return service_time(wh, self.build_route(wh, batch), include_turn_time)

    def _result(self, wh, occ, decisions: List[AisleDecision]) -> RouteResult:
        distance = sum(d.length for d in decisions)
        distance += geometry.cross_aisle_distance(wh, occ.min_aisle, occ.max_aisle)
        return RouteResult(
            self.name, distance, occ.total_items, occ.min_aisle, occ.max_aisle, tuple(decisions)
        )

    def _one_or_two_aisles(self, wh, occ, aisles):
        if len(aisles) == 1:
            return [front_return_decision(wh, occ, aisles[0])]
        return [
            traverse_decision(wh, aisles[0], CrossAisle.FRONT),
            traverse_decision(wh, aisles[1], CrossAisle.BACK),
        ]


class SShapeRouting(RoutingPolicy):
    """Traverse every occupied aisle; with an odd count the last one is a return."""
    name = "S_SHAPE"

    def route(self, wh, occ):
        aisles = occ.occupied_aisles()
        decisions = []
        entry = CrossAisle.FRONT
        for aisle in aisles:
            decisions.append(traverse_decision(wh, aisle, entry))
            entry = _alternate(entry)
        if len(aisles) % 2 == 1:
            decisions[-1] = front_return_decision(wh, occ, aisles[-1])
        return self._result(wh, occ, decisions)


class LargestGapRouting(RoutingPolicy):
    """Traverse the outermost occupied aisles and skip the largest gap in every other one."""
    name = "LARGEST_GAP"

    def route(self, wh, occ):
        aisles = occ.occupied_aisles()
        if len(aisles) <= 2:
            return self._result(wh, occ, self._one_or_two_aisles(wh, occ, aisles))
        decisions = [traverse_decision(wh, aisles[0], CrossAisle.FRONT)]
        for aisle in aisles[1:-1]:
            decisions.append(gap_decision(wh, aisle, occ.largest_gap(aisle)))
        decisions.append(traverse_decision(wh, aisles[-1], CrossAisle.BACK))
        return self._result(wh, occ, decisions)


class CombinedRouting(RoutingPolicy):
    """Greedy per-aisle choice between traversing and skipping the largest gap.

    The picker's side (front or back cross-aisle) flips on each traverse.
    On the back side any gap may be skipped when that walks less than a
    traverse; on the front side only a gap touching the back cross-aisle
    may be skipped. The last aisle is a return from the front, or a
    traverse when the picker is at the back.
    """
    name = "COMBINED"

    def route(self, wh, occ):
        aisles = occ.occupied_aisles()
        if len(aisles) <= 2:
            return self._result(wh, occ, self._one_or_two_aisles(wh, occ, aisles))
        length = wh.shelf_length
        decisions = [traverse_decision(wh, aisles[0], CrossAisle.FRONT)]
        traverses = 1
        for aisle in aisles[1:-1]:
            at_back = traverses % 2 == 1
            gap = occ.largest_gap(aisle)
            walked = 2 * (length - gap.size)
            if at_back:
                if gap.location == GapLocation.MIDDLE:
                    walked += wh.aisle_width
                skip = length > walked
            else:
                skip = gap.location == GapLocation.END and length > walked
            if skip:
                decisions.append(gap_decision(wh, aisle, gap))
            else:
                entry = CrossAisle.BACK if at_back else CrossAisle.FRONT
                decisions.append(traverse_decision(wh, aisle, entry))
                traverses += 1
        last = aisles[-1]
        if traverses % 2 == 0:
            decisions.append(front_return_decision(wh, occ, last))
        else:
            decisions.append(traverse_decision(wh, last, CrossAisle.BACK))
        return self._result(wh, occ, decisions)


class CombinedPlusRouting(RoutingPolicy):
    """Combined routing with a correction pass over runs of traversed aisles.

    Each interior aisle first takes the cheaper of a traverse and its
    largest-gap skip. A run of traversed aisles (possibly interleaved with
    front returns) that flips the picker an odd number of times is then
    repaired by either forcing the cheapest gap aisle nearby into a
    traverse or reverting the cheapest traverse in the run to its gap skip,
    whichever costs less.
    """
    name = "COMBINED_PLUS"

    def route(self, wh, occ):
        aisles = occ.occupied_aisles()
        n = len(aisles)
        if n <= 2:
            return self._result(wh, occ, self._one_or_two_aisles(wh, occ, aisles))
        full = geometry.traverse_length(wh)
        gaps: List[Optional[Gap]] = [None] * n
        walked = [full] * n
        over_full = [False] * n
        use_gap = [False] * n
        for i in range(1, n - 1):
            gap = occ.largest_gap_from_top(aisles[i])
            gaps[i] = gap
            walked[i] = geometry.gap_skip_length(wh, gap.size, gap.location == GapLocation.MIDDLE)
            over_full[i] = walked[i] > full
            use_gap[i] = not over_full[i]

        def front_only(i):
            return use_gap[i] and gaps[i].location == GapLocation.END

        last_gap = -1
        i = 1
        while i < n:
            worst_traverse, worst_traverse_len = -1, float("inf")
            worst_gap, worst_gap_len = -1, float("-inf")
            traverses = 0
            while i < n - 1 and (over_full[i] or front_only(i)):
                if over_full[i]:
                    if (front_only(i) or traverses % 2 == 0) and walked[i] < worst_traverse_len:
                        worst_traverse, worst_traverse_len = i, walked[i]
                    traverses += 1
                elif walked[i] > worst_gap_len:
                    worst_gap, worst_gap_len = i, walked[i]
                i += 1
            if traverses % 2 == 1:
                if i != n - 1 and walked[i] > worst_gap_len:
                    worst_gap, worst_gap_len = i, walked[i]
                if last_gap != -1 and walked[last_gap] > worst_gap_len:
                    worst_gap, worst_gap_len = last_gap, walked[last_gap]
                if full - worst_gap_len < worst_traverse_len - full:
                    use_gap[worst_gap] = False
                    if worst_gap != i:
                        last_gap = i
                else:
                    use_gap[worst_traverse] = True
                    last_gap = i
            else:
                last_gap = i
            i += 1

        decisions = []
        entry = CrossAisle.FRONT
        for i, aisle in enumerate(aisles):
            if use_gap[i]:
                decisions.append(gap_decision(wh, aisle, gaps[i]))
            else:
                decisions.append(traverse_decision(wh, aisle, entry))
                entry = _alternate(entry)
        return self._result(wh, occ, decisions)
