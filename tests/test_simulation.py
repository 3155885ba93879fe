import random

import pandas as pd
import pytest

from comparison import compare_policies, gen_batch, summarize, write_results_csv
from config import EngineConfig
from models import Batch, Order, Product, Warehouse
from registry import list_policies
from simulation import CostEngine


def _wh(**kw):
    return Warehouse(num_aisles=4, shelf_length=10.0, shelf_width=1.0, aisle_width=2.0, **kw)


def _batch(*locations):
    order = Order(id=1)
    for pid, (aisle, height) in enumerate(locations, start=1):
        order.add_product(Product(id=pid, aisle=aisle, side=0, height=height))
    batch = Batch()
    batch.add_order(order)
    return batch


def test_engine_keeps_input_order():
    engine = CostEngine(_wh(), "S_SHAPE", EngineConfig(max_workers=3))
    batches = [_batch((0, 3.0), (1, 8.0), (2, 2.0)), Batch(), _batch((0, 4.0)), _batch((0, 1.0), (1, 1.0))]
    assert engine.evaluate_many(batches) == pytest.approx([42.0, 0.0, 10.0, 30.0])
    assert engine.total_cost(batches) == pytest.approx(82.0)
    assert engine.evaluate(batches[0]) == pytest.approx(42.0)


def test_engine_uses_configured_policy_and_turns():
    wh = _wh(outside_turn_time=1.0)
    engine = CostEngine(wh, config=EngineConfig(include_turn_time=True))
    assert engine.policy.name == "RATLIFF_ROSENTHAL"
    # straight into aisle 0 and straight back out
    assert engine.evaluate(_batch((0, 4.0))) == pytest.approx(10.0)
    assert engine.evaluate(_batch((1, 4.0))) == pytest.approx(10.0 + 6.0 + 2.0)


def test_engine_matches_sequential_evaluation():
    rng = random.Random(7)
    wh = _wh()
    batches = [gen_batch(wh, rng, num_orders=3, mean_items=3) for _ in range(25)]
    engine = CostEngine(wh, "COMBINED_PLUS", EngineConfig(max_workers=4))
    assert engine.evaluate_many(batches) == [engine.evaluate(b) for b in batches]


def test_gen_batch_stays_in_layout():
    rng = random.Random(0)
    wh = _wh()
    batch = gen_batch(wh, rng, num_orders=5, mean_items=4)
    assert len(batch) == 5
    for p in batch.items():
        wh.check_location(p.aisle, p.height)


def test_compare_policies():
    wh = _wh()
    batches = [_batch((0, 3.0), (1, 8.0), (2, 2.0)), _batch((0, 1.0), (1, 1.0)), Batch()]
    df = compare_policies(wh, batches)
    assert len(df) == 15
    assert set(df["Routing"]) == set(list_policies())

    first = df[df["Batch"] == 1]
    assert (first["Gap to Optimal (%)"] == 0).all()

    second = df[df["Batch"] == 2].set_index("Routing")
    assert second.loc["RATLIFF_ROSENTHAL", "Distance (m)"] == pytest.approx(14.0)
    assert second.loc["S_SHAPE", "Gap to Optimal (%)"] == pytest.approx((30.0 - 14.0) / 14.0 * 100)

    empty = df[df["Batch"] == 3]
    assert (empty["Distance (m)"] == 0).all()
    assert (empty["Gap to Optimal (%)"] == 0).all()

    summary = summarize(df)
    assert set(summary.index) == set(list_policies())
    assert summary.loc["RATLIFF_ROSENTHAL", "Gap to Optimal (%)"] == pytest.approx(0.0)


def test_compare_without_exact_policy_has_no_gap():
    df = compare_policies(_wh(), [_batch((0, 1.0), (1, 1.0))], policies=["S_SHAPE", "LARGEST_GAP"])
    assert len(df) == 2
    assert df["Gap to Optimal (%)"].isna().all()


def test_write_results_csv(tmp_path):
    df = compare_policies(_wh(), [_batch((0, 1.0), (3, 9.0))])
    path = write_results_csv(df, results_dir=str(tmp_path))
    loaded = pd.read_csv(path)
    assert list(loaded.columns) == list(df.columns)
    assert len(loaded) == len(df)


def _due_batch(due_dates, arrival, *locations):
    batch = _batch(*locations)
    first = batch.orders[0]
    first.due_date = due_dates[0]
    first.arrival_time = arrival
    for oid, due in enumerate(due_dates[1:], start=2):
        batch.add_order(Order(id=oid, due_date=due, arrival_time=arrival))
    return batch


def test_tardiness_and_throughput_follow_picking_sequence():
    engine = CostEngine(_wh(), "S_SHAPE")
    # 42 then 10 time units of picking
    batches = [
        _due_batch([50.0, 30.0], 5.0, (0, 3.0), (1, 8.0), (2, 2.0)),
        _due_batch([60.0], 2.0, (0, 4.0)),
    ]
    assert engine.completion_times(batches) == pytest.approx([42.0, 52.0])
    assert engine.total_tardiness(batches) == pytest.approx(12.0)
    assert engine.total_tardiness(batches, start_time=10.0) == pytest.approx(22.0 + 2.0 + 2.0)
    assert engine.max_throughput_time(batches) == pytest.approx(50.0)
    assert engine.max_throughput_time([]) == 0.0
