import numpy as np

from geometry import depot_aisle
from registry import build_route, get_policy
from routing import AislePattern

# (outside turns, inside turns) for walking one aisle with a given pattern
_TURNS = {
    AislePattern.SKIP: (0, 0),
    AislePattern.TRAVERSE: (2, 0),
    AislePattern.DOUBLE_TRAVERSE: (4, 0),
    AislePattern.RETURN_FRONT: (2, 1),
    AislePattern.RETURN_BACK: (2, 1),
}
# aisles entered around a skipped gap turn twice inside; a middle gap adds
# a second entry from the other cross-aisle
_GAP_TURNS = {
    AislePattern.RETURN_FRONT: (2, 2),
    AislePattern.RETURN_BACK: (2, 2),
    AislePattern.SPLIT: (4, 3),
}


def _aisle_turns(decision):
    if decision.gap is not None:
        return _GAP_TURNS[decision.pattern]
    return _TURNS[decision.pattern]


def count_turns(wh, route):
    """Outside turns (cross-aisle to aisle or back) and inside U-turns of a route."""
    visited = [d for d in route.decisions if d.pattern != AislePattern.SKIP]
    if not visited:
        return 0, 0
    turns = [_aisle_turns(d) for d in visited]
    outside = sum(t[0] for t in turns)
    inside = sum(t[1] for t in turns)
    if visited[0].aisle == depot_aisle(wh):
        # walking straight out of the depot into the aisle
        outside -= 1
        if len(visited) == 1:
            outside -= 1
    return outside, inside


def turn_time(wh, route) -> float:
    outside, inside = count_turns(wh, route)
    return outside * wh.outside_turn_time + inside * wh.inside_turn_time


def service_time(wh, route, include_turn_time=False) -> float:
    if route.total_items == 0:
        return 0.0
    # travel_speed is time per unit of distance
    time = route.distance * wh.travel_speed
    time += wh.depot_time + route.total_items * wh.picking_time
    if include_turn_time:
        time += turn_time(wh, route)
    return time


def compute_kpis(wh, batches, policy="RATLIFF_ROSENTHAL", include_turn_time=False):
    router = get_policy(policy)
    per_batch_kpis = []
    distances = []
    times = []
    total_orders = 0
    total_items = 0

    for idx, batch in enumerate(batches):
        route = build_route(router, wh, batch)
        time = service_time(wh, route, include_turn_time)
        distances.append(route.distance)
        times.append(time)
        total_orders += len(batch.orders)
        total_items += route.total_items
        per_batch_kpis.append({
            "Batch": idx + 1,
            "Orders": len(batch.orders),
            "Items Picked": route.total_items,
            "Weight": batch.weight,
            "Aisles Visited": route.aisles_visited,
            "Distance Walked (m)": route.distance,
            "Time (s)": time,
            "Time (min)": time / 60 if time else 0,
        })

    distances = np.asarray(distances, dtype=float)
    times = np.asarray(times, dtype=float)
    has_batches = len(per_batch_kpis) > 0
    aisles = [k["Aisles Visited"] for k in per_batch_kpis]

    total_time = float(times.sum())
    avg_time = float(times.mean()) if has_batches else 0
    return {
        "Per Batch": per_batch_kpis,
        "Operation": {
            "Routing": router.name,
            "Batches": len(per_batch_kpis),
            "Total Orders": total_orders,
            "Total Items Picked": total_items,
            "Total Distance Walked (m)": float(distances.sum()),
            "Total Time (s)": total_time,
            "Total Time (min)": total_time / 60 if total_time else 0,
            "Average Batch Distance (m)": float(distances.mean()) if has_batches else 0,
            "Average Batch Time (s)": avg_time,
            "Average Batch Time (min)": avg_time / 60 if avg_time else 0,
            "Max Batch Distance (m)": float(distances.max()) if has_batches else 0,
            "Min Batch Distance (m)": float(distances.min()) if has_batches else 0,
            "Max Batch Time (s)": float(times.max()) if has_batches else 0,
            "Min Batch Time (s)": float(times.min()) if has_batches else 0,
            "Average Aisles Visited": float(np.mean(aisles)) if has_batches else 0,
            "Distance Variance": float(np.var(distances, ddof=1)) if len(distances) > 1 else 0,
            "Time Variance": float(np.var(times, ddof=1)) if len(times) > 1 else 0,
        },
    }
