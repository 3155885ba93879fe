import random

import pytest

from geometry import cross_aisle_distance
from models import Batch, DepotPlacement, Order, Product, Warehouse
from occupancy import extract_occupancy
from ratliff_rosenthal import (
    CROSS, TERMINAL, VERTICAL, RatliffRosenthalRouting, TourState, build_columns,
)
from routing import AislePattern, CombinedPlusRouting, CombinedRouting, LargestGapRouting, SShapeRouting

HEURISTICS = [SShapeRouting, LargestGapRouting, CombinedRouting, CombinedPlusRouting]


def _wh(num_aisles=3, depot=DepotPlacement.CORNER, shelf_length=10.0, shelf_width=1.0, aisle_width=2.0):
    return Warehouse(num_aisles=num_aisles, shelf_length=shelf_length, shelf_width=shelf_width,
                     aisle_width=aisle_width, depot_placement=depot)


def _batch(*locations):
    order = Order(id=1)
    for pid, (aisle, height) in enumerate(locations, start=1):
        order.add_product(Product(id=pid, aisle=aisle, side=0, height=height))
    batch = Batch()
    batch.add_order(order)
    return batch


def _random_batch(wh, rng, max_items=12):
    locations = []
    for _ in range(rng.randint(1, max_items)):
        height = rng.choice([0.0, wh.shelf_length, round(rng.uniform(0, wh.shelf_length), 1)])
        locations.append((rng.randrange(wh.num_aisles), height))
    return _batch(*locations)


def _random_layouts():
    for num_aisles in (1, 2, 3, 4, 5, 8):
        for depot in DepotPlacement:
            yield _wh(num_aisles, depot)
    yield _wh(6, DepotPlacement.CENTER, shelf_length=30.0, shelf_width=0.0, aisle_width=1.0)
    yield _wh(7, DepotPlacement.CORNER, shelf_length=5.0, shelf_width=4.0, aisle_width=3.0)


def test_transition_tables():
    assert VERTICAL[(TourState.EMPTY, AislePattern.TRAVERSE)] == TourState.ODD_ODD_1C
    assert VERTICAL[(TourState.EMPTY, AislePattern.RETURN_FRONT)] == TourState.EVEN_ZERO_1C
    assert VERTICAL[(TourState.EMPTY, AislePattern.SPLIT)] == TourState.EVEN_EVEN_2C
    assert VERTICAL[(TourState.EVEN_ZERO_1C, AislePattern.RETURN_BACK)] == TourState.EVEN_EVEN_2C
    assert VERTICAL[(TourState.EVEN_EVEN_2C, AislePattern.TRAVERSE)] == TourState.ODD_ODD_1C
    assert VERTICAL[(TourState.CLOSED, AislePattern.TRAVERSE)] is None
    assert VERTICAL[(TourState.CLOSED, AislePattern.SKIP)] == TourState.CLOSED

    assert CROSS[(TourState.ODD_ODD_1C, 1, 1)] == TourState.ODD_ODD_1C
    assert CROSS[(TourState.ODD_ODD_1C, 2, 1)] is None
    assert CROSS[(TourState.EVEN_ZERO_1C, 2, 2)] == TourState.EVEN_EVEN_2C
    assert CROSS[(TourState.EVEN_ZERO_1C, 0, 2)] is None
    assert CROSS[(TourState.EVEN_EVEN_1C, 0, 0)] == TourState.CLOSED
    assert CROSS[(TourState.EVEN_EVEN_2C, 2, 0)] is None
    assert CROSS[(TourState.CLOSED, 2, 0)] is None
    assert CROSS[(TourState.EMPTY, 0, 0)] == TourState.EMPTY
    assert TourState.EVEN_EVEN_2C not in TERMINAL


def test_columns_cover_depot_and_occupied_range():
    wh = _wh(6, DepotPlacement.CENTER)
    occ = extract_occupancy(wh, _batch((5, 1.0)))
    columns = build_columns(wh, occ)
    assert [c.x for c in columns] == [2.5, 3.0, 4.0, 5.0]
    assert columns[0].aisle is None

    wh = _wh(5, DepotPlacement.CENTER)
    columns = build_columns(wh, extract_occupancy(wh, _batch((0, 1.0), (2, 3.0))))
    assert [(c.x, c.aisle) for c in columns] == [(0.0, 0), (1.0, 1), (2.0, None), (2.0, 2)]


def test_beats_s_shape_on_short_picks():
    route = RatliffRosenthalRouting().build_route(_wh(4), _batch((0, 1.0), (1, 1.0)))
    assert route.distance == pytest.approx(14.0)
    assert [d.pattern for d in route.decisions] == [AislePattern.RETURN_FRONT, AislePattern.RETURN_FRONT]


def test_reports_crossings():
    route = RatliffRosenthalRouting().build_route(_wh(), _batch((2, 4.0)))
    assert route.distance == pytest.approx(22.0)
    lateral = sum((c.end - c.start) * 3.0 * (c.front + c.back) for c in route.crossings)
    assert lateral == pytest.approx(12.0)
    assert all(c.back == 0 for c in route.crossings)


def test_never_worse_than_heuristics():
    rng = random.Random(0)
    for wh in _random_layouts():
        for _ in range(40):
            batch = _random_batch(wh, rng)
            optimum = RatliffRosenthalRouting().compute_distance(wh, batch)
            for policy_cls in HEURISTICS:
                assert optimum <= policy_cls().compute_distance(wh, batch) + 1e-9


def test_lower_bound_and_every_occupied_aisle_visited():
    rng = random.Random(1)
    for wh in _random_layouts():
        for _ in range(20):
            batch = _random_batch(wh, rng)
            occ = extract_occupancy(wh, batch)
            route = RatliffRosenthalRouting().build_route(wh, batch)
            visited = {d.aisle for d in route.decisions}
            assert set(occ.occupied_aisles()) <= visited
            bound = cross_aisle_distance(wh, occ.min_aisle, occ.max_aisle) + wh.aisle_width * occ.num_occupied()
            assert route.distance >= bound - 1e-9


def test_adding_items_never_shortens_the_optimum():
    rng = random.Random(2)
    wh = _wh(6, DepotPlacement.CENTER)
    locations = []
    previous = 0.0
    for _ in range(15):
        locations.append((rng.randrange(wh.num_aisles), round(rng.uniform(0, wh.shelf_length), 1)))
        batch = _batch(*locations)
        optimum = RatliffRosenthalRouting().compute_distance(wh, batch)
        s_shape = SShapeRouting().compute_distance(wh, batch)
        assert optimum >= previous - 1e-9
        assert s_shape >= optimum - 1e-9
        previous = optimum


def test_deterministic():
    rng = random.Random(3)
    wh = _wh(8, DepotPlacement.CENTER)
    batch = _random_batch(wh, rng, max_items=20)
    first = RatliffRosenthalRouting().build_route(wh, batch)
    second = RatliffRosenthalRouting().build_route(wh, batch)
    assert first == second
