import logging
import os
import random
from concurrent.futures import ProcessPoolExecutor, ThreadPoolExecutor
from datetime import datetime

import pandas as pd
from tqdm import tqdm

from kpis import service_time
from models import Batch, Order, Product, Warehouse
from registry import RoutingPolicyId, build_route, resolve_policy_id

logger = logging.getLogger(__name__)

COLUMNS = [
    "Batch", "Routing", "Orders", "Items Picked", "Aisles Visited",
    "Distance (m)", "Time (s)", "Gap to Optimal (%)",
]


def gen_batch(wh, rng, num_orders, mean_items):
    """Random batch with exponentially distributed order sizes."""
    batch = Batch()
    pid = 0
    for oid in range(1, num_orders + 1):
        items = max(1, int(rng.expovariate(1.0 / mean_items)))
        order = Order(id=oid)
        for _ in range(items):
            pid += 1
            order.add_product(Product(
                id=pid,
                aisle=rng.randrange(wh.num_aisles),
                side=rng.randrange(2),
                height=round(rng.uniform(0, wh.shelf_length), 2),
            ))
        batch.add_order(order)
    return batch


def single_run(args):
    batch_idx, batch, policy, wh, include_turn_time = args
    route = build_route(policy, wh, batch)
    return {
        "Batch": batch_idx,
        "Routing": route.policy,
        "Orders": len(batch.orders),
        "Items Picked": route.total_items,
        "Aisles Visited": route.aisles_visited,
        "Distance (m)": route.distance,
        "Time (s)": service_time(wh, route, include_turn_time),
    }


def _run_args(wh, batches, policies, include_turn_time):
    if policies is None:
        policies = list(RoutingPolicyId)
    policies = [resolve_policy_id(p) for p in policies]
    return [
        (batch_idx, batch, policy, wh, include_turn_time)
        for batch_idx, batch in enumerate(batches, start=1)
        for policy in policies
    ]


def results_frame(rows):
    df = pd.DataFrame(rows, columns=COLUMNS[:-1])
    optimal = df[df["Routing"] == RoutingPolicyId.RATLIFF_ROSENTHAL.name].set_index("Batch")["Distance (m)"]
    best = df["Batch"].map(optimal)
    gap = (df["Distance (m)"] - best) / best * 100
    # empty batches have a zero optimum
    df["Gap to Optimal (%)"] = gap.mask(best == 0, 0.0)
    return df


def compare_policies(wh, batches, policies=None, include_turn_time=False, max_workers=None, show_progress=False):
    """One row per (batch, policy) with distance, time and the gap to the exact optimum.

    The gap column is NaN when the exact policy is not among `policies`.
    """
    all_args = _run_args(wh, batches, policies, include_turn_time)
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        rows = list(tqdm(executor.map(single_run, all_args), total=len(all_args),
                         desc="Policy Comparison", disable=not show_progress))
    return results_frame(rows)


def summarize(df):
    return df.pivot_table(
        index="Routing",
        values=["Distance (m)", "Time (s)", "Gap to Optimal (%)"],
        aggfunc="mean",
    )


def write_results_csv(df, results_dir="comparison_results"):
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    os.makedirs(results_dir, exist_ok=True)
    csv_filename = os.path.join(results_dir, f"routing_comparison_{timestamp}.csv")
    df.to_csv(csv_filename, index=False)
    logger.info("wrote %d rows to %s", len(df), csv_filename)
    return csv_filename


def run_experiments(num_batches=100, seed=1):
    wh = Warehouse(num_aisles=10, shelf_length=20.0, shelf_width=1.0, aisle_width=3.0)
    rng = random.Random(seed)
    batches = [gen_batch(wh, rng, num_orders=rng.randint(1, 6), mean_items=4) for _ in range(num_batches)]
    all_args = _run_args(wh, batches, None, False)
    with ProcessPoolExecutor() as executor:
        rows = list(tqdm(executor.map(single_run, all_args), total=len(all_args), desc="Experiment Progress"))
    df = results_frame(rows)
    write_results_csv(df)
    print(summarize(df))
    return df


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    run_experiments()
