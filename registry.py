import logging
from enum import Enum
from typing import Dict, List, Type

from ratliff_rosenthal import RatliffRosenthalRouting
from routing import (
    CombinedPlusRouting, CombinedRouting, LargestGapRouting, RouteResult, RoutingPolicy, SShapeRouting,
)

logger = logging.getLogger(__name__)


class RoutingPolicyId(Enum):
    S_SHAPE = 0
    LARGEST_GAP = 1
    COMBINED = 2
    COMBINED_PLUS = 3
    RATLIFF_ROSENTHAL = 4


_POLICIES: Dict[RoutingPolicyId, Type[RoutingPolicy]] = {
    RoutingPolicyId.S_SHAPE: SShapeRouting,
    RoutingPolicyId.LARGEST_GAP: LargestGapRouting,
    RoutingPolicyId.COMBINED: CombinedRouting,
    RoutingPolicyId.COMBINED_PLUS: CombinedPlusRouting,
    RoutingPolicyId.RATLIFF_ROSENTHAL: RatliffRosenthalRouting,
}


def list_policies() -> List[str]:
    return [p.name for p in RoutingPolicyId]


def resolve_policy_id(policy) -> RoutingPolicyId:
    """Accept a RoutingPolicyId, its name (any case) or its numeric value."""
    if isinstance(policy, RoutingPolicyId):
        return policy
    if isinstance(policy, str):
        key = policy.strip().upper().replace("-", "_")
        if key in RoutingPolicyId.__members__:
            return RoutingPolicyId[key]
    elif isinstance(policy, int) and not isinstance(policy, bool):
        try:
            return RoutingPolicyId(policy)
        except ValueError:
            pass
    raise ValueError(f"unknown routing policy {policy!r}; expected one of {list_policies()}")


def get_policy(policy) -> RoutingPolicy:
    if isinstance(policy, RoutingPolicy):
        return policy
    return _POLICIES[resolve_policy_id(policy)]()


def build_route(policy, warehouse, batch) -> RouteResult:
    router = get_policy(policy)
    route = router.build_route(warehouse, batch)
    logger.debug("%s: %d items over %d aisles, distance %.3f",
                 router.name, route.total_items, route.aisles_visited, route.distance)
    return route


def compute_distance(policy, warehouse, batch) -> float:
    return build_route(policy, warehouse, batch).distance


def compute_cost(policy, warehouse, batch, include_turn_time: bool = False) -> float:
    """Service time of one batch: travel, picking, depot handling and optionally turns."""
    from kpis import service_time
    return service_time(warehouse, build_route(policy, warehouse, batch), include_turn_time)
