from dataclasses import dataclass
from typing import Optional

from models import DepotPlacement, Warehouse

WAREHOUSE_REQUIRED = {"num_aisles", "shelf_length", "shelf_width", "aisle_width"}
WAREHOUSE_OPTIONAL = {
    "depot_placement", "worker_capacity", "picking_time", "outside_turn_time",
    "inside_turn_time", "depot_time", "travel_speed",
}


@dataclass
class EngineConfig:
    policy: str = "RATLIFF_ROSENTHAL"
    include_turn_time: bool = False
    max_workers: Optional[int] = None
    show_progress: bool = False


def parse_depot_placement(value) -> DepotPlacement:
    if isinstance(value, DepotPlacement):
        return value
    if isinstance(value, str):
        try:
            return DepotPlacement[value.strip().upper()]
        except KeyError:
            raise ValueError(f"unknown depot placement {value!r}") from None
    try:
        return DepotPlacement(value)
    except ValueError:
        raise ValueError(f"unknown depot placement {value!r}") from None


def warehouse_from_dict(data: dict) -> Warehouse:
    """Build a Warehouse from a flat mapping of layout parameters.

    Unknown keys are rejected so typos in a config file do not silently
    fall back to defaults.
    """
    missing = WAREHOUSE_REQUIRED - set(data)
    if missing:
        raise ValueError(f"Warehouse config missing keys: {sorted(missing)}")
    unknown = set(data) - WAREHOUSE_REQUIRED - WAREHOUSE_OPTIONAL
    if unknown:
        raise ValueError(f"Warehouse config has unknown keys: {sorted(unknown)}")
    kwargs = dict(data)
    kwargs["num_aisles"] = int(kwargs["num_aisles"])
    for key in ("shelf_length", "shelf_width", "aisle_width"):
        kwargs[key] = float(kwargs[key])
    if "depot_placement" in kwargs:
        kwargs["depot_placement"] = parse_depot_placement(kwargs["depot_placement"])
    return Warehouse(**kwargs)
