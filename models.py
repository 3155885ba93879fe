from dataclasses import dataclass, field
from enum import Enum
from typing import List


class DepotPlacement(Enum):
    CORNER = 0
    CENTER = 1


class AisleSide(Enum):
    LEFT = 0
    RIGHT = 1


@dataclass(frozen=True)
class Warehouse:
    num_aisles: int
    shelf_length: float
    shelf_width: float
    aisle_width: float
    depot_placement: DepotPlacement = DepotPlacement.CORNER
    worker_capacity: float = float("inf")
    picking_time: float = 0.0
    outside_turn_time: float = 0.0
    inside_turn_time: float = 0.0
    depot_time: float = 0.0
    travel_speed: float = 1.0

    def __post_init__(self):
        if not isinstance(self.depot_placement, DepotPlacement):
            object.__setattr__(self, "depot_placement", DepotPlacement(self.depot_placement))
        if self.num_aisles < 1:
            raise ValueError(f"num_aisles must be at least 1, got {self.num_aisles}")
        if self.shelf_length <= 0:
            raise ValueError(f"shelf_length must be positive, got {self.shelf_length}")
        if self.aisle_width <= 0:
            raise ValueError(f"aisle_width must be positive, got {self.aisle_width}")
        if self.shelf_width < 0:
            raise ValueError(f"shelf_width must be non-negative, got {self.shelf_width}")
        if self.travel_speed <= 0:
            raise ValueError(f"travel_speed must be positive, got {self.travel_speed}")
        if self.worker_capacity <= 0:
            raise ValueError(f"worker_capacity must be positive, got {self.worker_capacity}")
        for name in ("picking_time", "outside_turn_time", "inside_turn_time", "depot_time"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative, got {getattr(self, name)}")

    @property
    def aisle_pitch(self) -> float:
        # one aisle plus the shelf block separating it from the next
        return self.aisle_width + self.shelf_width

    def check_location(self, aisle: int, height: float):
        if not 0 <= aisle < self.num_aisles:
            raise ValueError(f"aisle {aisle} outside warehouse with {self.num_aisles} aisles")
        if not 0 <= height <= self.shelf_length:
            raise ValueError(f"height {height} outside shelf of length {self.shelf_length}")

    def new_batch(self) -> "Batch":
        return Batch(max_weight=self.worker_capacity)


@dataclass(frozen=True)
class Product:
    id: int
    aisle: int
    side: AisleSide
    height: float
    weight: float = 1.0

    def __post_init__(self):
        if not isinstance(self.side, AisleSide):
            object.__setattr__(self, "side", AisleSide(self.side))
        if self.aisle < 0:
            raise ValueError(f"product {self.id}: aisle must be non-negative, got {self.aisle}")
        if self.height < 0:
            raise ValueError(f"product {self.id}: height must be non-negative, got {self.height}")
        if self.weight <= 0:
            raise ValueError(f"product {self.id}: weight must be positive, got {self.weight}")


@dataclass
class Order:
    id: int
    products: List[Product] = field(default_factory=list)
    due_date: float = 0.0
    arrival_time: float = 0.0

    @property
    def weight(self) -> float:
        return sum(p.weight for p in self.products)

    @property
    def num_products(self) -> int:
        return len(self.products)

    def add_product(self, product: Product):
        self.products.append(product)


@dataclass
class Batch:
    max_weight: float = float("inf")
    orders: List[Order] = field(default_factory=list)

    @property
    def weight(self) -> float:
        return sum(o.weight for o in self.orders)

    @property
    def available_weight(self) -> float:
        return self.max_weight - self.weight

    @property
    def earliest_arrival_time(self) -> float:
        return min((o.arrival_time for o in self.orders), default=0.0)

    def add_order(self, order: Order):
        if self.weight + order.weight > self.max_weight:
            raise ValueError(
                f"order {order.id} ({order.weight}) exceeds remaining batch capacity {self.available_weight}"
            )
        self.orders.append(order)

    def remove_order(self, order: Order):
        self.orders.remove(order)

    def items(self) -> List[Product]:
        return [p for o in self.orders for p in o.products]

    def aisle_list(self) -> List[int]:
        return sorted({p.aisle for p in self.items()})

    def __len__(self):
        return len(self.orders)
