"""Optimal picker tour for a single-block, two cross-aisle warehouse.

Dynamic programme of Ratliff & Rosenthal (1983). The layout is swept left
to right in columns: every aisle between the leftmost of (depot, first
occupied aisle) and the rightmost of (depot, last occupied aisle), plus a
column for the depot itself. At each column the partial tour is summarised
by the degree parity of the column's front and back nodes and by how many
connected components it has. Per-aisle lengths are the same ones the
heuristic policies charge, so the optimum is never longer than any of them.
"""
import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

import numpy as np

import geometry
from routing import AisleDecision, AislePattern, CrossAisle, Crossing, RouteResult, RoutingPolicy

logger = logging.getLogger(__name__)

ZERO, EVEN, ODD = "0", "E", "U"


class TourState(Enum):
    """(front node parity, back node parity, components) of a partial tour."""
    ODD_ODD_1C = (ODD, ODD, 1)
    EVEN_ZERO_1C = (EVEN, ZERO, 1)
    ZERO_EVEN_1C = (ZERO, EVEN, 1)
    EVEN_EVEN_1C = (EVEN, EVEN, 1)
    EVEN_EVEN_2C = (EVEN, EVEN, 2)
    EMPTY = (ZERO, ZERO, 0)
    CLOSED = (ZERO, ZERO, 1)


STATES = list(TourState)
_INDEX = {s: k for k, s in enumerate(STATES)}
_BY_VALUE = {s.value: s for s in STATES}
TERMINAL = (TourState.CLOSED, TourState.EVEN_ZERO_1C, TourState.ZERO_EVEN_1C, TourState.EVEN_EVEN_1C)

# (edges added at the front node, at the back node, whether the two nodes end up connected)
_VERTICAL_EDGES = {
    AislePattern.SKIP: (0, 0, False),
    AislePattern.TRAVERSE: (1, 1, True),
    AislePattern.DOUBLE_TRAVERSE: (2, 2, True),
    AislePattern.RETURN_FRONT: (2, 0, False),
    AislePattern.RETURN_BACK: (0, 2, False),
    AislePattern.SPLIT: (2, 2, False),
}
_COPIES_PARITY = {0: ZERO, 1: ODD, 2: EVEN}
_COPIES = (0, 1, 2)


def _add_edges(parity, edges):
    if edges == 0:
        return parity
    if parity == ZERO:
        return _COPIES_PARITY[edges]
    if edges % 2 == 0:
        return parity
    return EVEN if parity == ODD else ODD


def _closes(parity, copies) -> bool:
    # a node left behind must end with even degree
    if parity == ODD:
        return copies == 1
    return copies != 1


def after_aisle(state: TourState, pattern: AislePattern) -> Optional[TourState]:
    if pattern == AislePattern.SKIP:
        return state
    if state == TourState.CLOSED:
        return None
    a, b, comps = state.value
    front, back, joined = _VERTICAL_EDGES[pattern]
    new_a, new_b = _add_edges(a, front), _add_edges(b, back)
    if comps == 0:
        new_comps = 2 if front and back and not joined else 1
    elif comps == 1:
        fresh = (front and a == ZERO) or (back and b == ZERO)
        new_comps = 2 if fresh and not joined else 1
    else:
        new_comps = 1 if joined else 2
    return _BY_VALUE.get((new_a, new_b, new_comps))


def after_cross(state: TourState, front: int, back: int) -> Optional[TourState]:
    a, b, comps = state.value
    if not (_closes(a, front) and _closes(b, back)):
        return None
    new_a, new_b = _COPIES_PARITY[front], _COPIES_PARITY[back]
    if comps == 0:
        return _BY_VALUE.get((new_a, new_b, int(front > 0) + int(back > 0)))
    if state == TourState.CLOSED:
        return state if front == back == 0 else None
    if comps == 2:
        return _BY_VALUE.get((new_a, new_b, 2)) if front and back else None
    carried = (front and a != ZERO) or (back and b != ZERO)
    fresh = (front and a == ZERO) or (back and b == ZERO)
    if not carried:
        # the tour is complete; anything started now would stay disconnected
        return None if fresh else TourState.CLOSED
    return _BY_VALUE.get((new_a, new_b, 2 if fresh else 1))


VERTICAL = {
    (s, p): after_aisle(s, p) for s in STATES for p in AislePattern
}
CROSS = {
    (s, f, b): after_cross(s, f, b) for s in STATES for f in _COPIES for b in _COPIES
}


@dataclass(frozen=True)
class _Option:
    pattern: AislePattern
    length: float
    gap: object = None


@dataclass(frozen=True)
class _Column:
    x: float
    aisle: Optional[int]
    options: Tuple[_Option, ...]


def _aisle_options(wh, occ, aisle) -> Tuple[_Option, ...]:
    full = geometry.traverse_length(wh)
    if not occ.is_occupied(aisle):
        return (
            _Option(AislePattern.SKIP, 0.0),
            _Option(AislePattern.TRAVERSE, full),
            _Option(AislePattern.DOUBLE_TRAVERSE, geometry.double_traverse_length(wh)),
        )
    options = [
        _Option(AislePattern.TRAVERSE, full),
        _Option(AislePattern.DOUBLE_TRAVERSE, geometry.double_traverse_length(wh)),
        _Option(AislePattern.RETURN_FRONT, geometry.front_return_length(wh, occ.max_height(aisle))),
        _Option(AislePattern.RETURN_BACK, geometry.back_return_length(wh, occ.min_height(aisle))),
    ]
    gap = occ.largest_interior_gap(aisle)
    if gap is not None:
        options.append(_Option(AislePattern.SPLIT, geometry.gap_skip_length(wh, gap.size, True), gap))
    return tuple(options)


def build_columns(wh, occ) -> List[_Column]:
    depot = geometry.depot_position(wh)
    lo = min(occ.min_aisle, depot)
    hi = max(occ.max_aisle, depot)
    columns = [_Column(depot, None, (_Option(AislePattern.SKIP, 0.0),))]
    for aisle in range(math.ceil(lo), math.floor(hi) + 1):
        columns.append(_Column(float(aisle), aisle, _aisle_options(wh, occ, aisle)))
    # depot column first when it shares a position with an aisle
    columns.sort(key=lambda c: (c.x, c.aisle is not None))
    return columns


class RatliffRosenthalRouting(RoutingPolicy):
    name = "RATLIFF_ROSENTHAL"

    def route(self, wh, occ):
        columns = build_columns(wh, occ)
        n_states = len(STATES)
        cost = np.full(n_states, np.inf)
        cost[_INDEX[TourState.EMPTY]] = 0.0
        vertical_from = []
        cross_from = []

        for k, column in enumerate(columns):
            new_cost = np.full(n_states, np.inf)
            came_from = [None] * n_states
            for s in STATES:
                base = cost[_INDEX[s]]
                if not np.isfinite(base):
                    continue
                for opt in column.options:
                    nxt = VERTICAL[(s, opt.pattern)]
                    if nxt is None:
                        continue
                    c = base + opt.length
                    if c < new_cost[_INDEX[nxt]]:
                        new_cost[_INDEX[nxt]] = c
                        came_from[_INDEX[nxt]] = (s, opt)
            cost = new_cost
            vertical_from.append(came_from)
            if k == len(columns) - 1:
                break

            segment = (columns[k + 1].x - column.x) * wh.aisle_pitch
            new_cost = np.full(n_states, np.inf)
            came_from = [None] * n_states
            for s in STATES:
                base = cost[_INDEX[s]]
                if not np.isfinite(base):
                    continue
                for front in _COPIES:
                    if column.aisle is None and front == 0 and s.value[0] == ZERO:
                        # the depot must be on the tour
                        continue
                    for back in _COPIES:
                        nxt = CROSS[(s, front, back)]
                        if nxt is None:
                            continue
                        c = base + (front + back) * segment
                        if c < new_cost[_INDEX[nxt]]:
                            new_cost[_INDEX[nxt]] = c
                            came_from[_INDEX[nxt]] = (s, front, back)
            cost = new_cost
            cross_from.append(came_from)

        best, best_cost = None, np.inf
        for s in TERMINAL:
            if columns[-1].aisle is None and s.value[0] == ZERO:
                continue
            if cost[_INDEX[s]] < best_cost:
                best, best_cost = s, cost[_INDEX[s]]
        if best is None:
            raise RuntimeError("no closed tour found for the batch")
        logger.debug("optimal tour over %d columns: %.3f (%s)", len(columns), best_cost, best.name)

        decisions, crossings = self._backtrack(columns, vertical_from, cross_from, best)
        return RouteResult(
            self.name, float(best_cost), occ.total_items, occ.min_aisle, occ.max_aisle,
            decisions, crossings,
        )

    @staticmethod
    def _backtrack(columns, vertical_from, cross_from, state):
        decisions = []
        crossings = []
        for k in range(len(columns) - 1, -1, -1):
            prev, opt = vertical_from[k][_INDEX[state]]
            column = columns[k]
            if column.aisle is not None and opt.pattern != AislePattern.SKIP:
                entry = None
                if opt.pattern == AislePattern.RETURN_FRONT:
                    entry = CrossAisle.FRONT
                elif opt.pattern == AislePattern.RETURN_BACK:
                    entry = CrossAisle.BACK
                decisions.append(AisleDecision(column.aisle, opt.pattern, opt.length, entry, opt.gap))
            state = prev
            if k > 0:
                prev, front, back = cross_from[k - 1][_INDEX[state]]
                if front or back:
                    crossings.append(Crossing(columns[k - 1].x, column.x, front, back))
                state = prev
        return tuple(reversed(decisions)), tuple(reversed(crossings))
