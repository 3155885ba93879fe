"""Distances shared by every routing policy.

Aisles are vertical, numbered left to right from 0. Positions along the
front cross-aisle are measured in aisle coordinates (aisle i sits at i);
multiplying a coordinate span by the aisle pitch gives metres.
"""
from models import DepotPlacement


def depot_position(wh) -> float:
    if wh.depot_placement == DepotPlacement.CORNER:
        return 0.0
    # half way between the two middle aisles when the count is even
    return (wh.num_aisles - 1) / 2


def depot_aisle(wh):
    """Aisle the depot is aligned with, or None when it sits between two aisles."""
    x = depot_position(wh)
    return int(x) if x == int(x) else None


def cross_aisle_distance(wh, min_aisle: int, max_aisle: int) -> float:
    """Lateral travel to cover aisles min_aisle..max_aisle from the depot and back."""
    x = depot_position(wh)
    left = min(min_aisle, x)
    right = max(max_aisle, x)
    return 2 * wh.aisle_pitch * (right - left)


def traverse_length(wh) -> float:
    return wh.aisle_width + wh.shelf_length


def double_traverse_length(wh) -> float:
    return 2 * traverse_length(wh)


def front_return_length(wh, farthest: float) -> float:
    # enter from the front, turn at the farthest item
    return wh.aisle_width + 2 * farthest


def back_return_length(wh, nearest: float) -> float:
    # enter from the back, turn at the item closest to the front
    return wh.aisle_width + 2 * (wh.shelf_length - nearest)


def gap_skip_length(wh, gap: float, extra_aisle_width: bool = False) -> float:
    """Length walked in an aisle entered from one or both ends, leaving `gap` unwalked."""
    length = wh.aisle_width + 2 * (wh.shelf_length - gap)
    if extra_aisle_width:
        length += wh.aisle_width
    return length
