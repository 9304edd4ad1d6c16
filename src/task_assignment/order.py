# task_assignment/order.py
from __future__ import annotations

import math
import numbers
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from task_assignment.catalog import (
    ASN_PREPARATION,
    CARTON_SELECTION,
    LABEL_PLACEMENT,
    PACKING_VERIFICATION,
    SKU_VERIFICATION,
    UPC_VERIFICATION,
    TaskDefinition,
    lookup,
)
from task_assignment.errors import InvalidOrder

DEFAULT_ORDER_TYPE = "Standard"
DEFAULT_RETAILER = "Dick's Sporting Goods"

# task type -> suffix of the per-order task id
_ID_SUFFIX = {
    LABEL_PLACEMENT.id: "LABEL",
    SKU_VERIFICATION.id: "SKU",
    ASN_PREPARATION.id: "ASN",
    CARTON_SELECTION.id: "CARTON",
    PACKING_VERIFICATION.id: "PACK",
    UPC_VERIFICATION.id: "UPC",
}


@dataclass(slots=True)
class Order:
    order_id: str
    item_count: int
    order_type: str = DEFAULT_ORDER_TYPE
    retailer: str = DEFAULT_RETAILER
    special_requirements: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.order_id is None or not str(self.order_id).strip():
            raise InvalidOrder("orderId is required.")
        self.order_id = str(self.order_id)
        self.item_count = _to_item_count(self.item_count)
        self.special_requirements = [str(r) for r in self.special_requirements]

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "Order":
        """Parse an order payload using camelCase or snake_case keys."""
        if not isinstance(raw, Mapping):
            raise InvalidOrder("Order payload must be an object.")
        reqs = _get(raw, "specialRequirements", "special_requirements") or []
        if isinstance(reqs, str):
            reqs = [reqs]
        return cls(
            order_id=_get(raw, "orderId", "order_id"),
            item_count=_get(raw, "itemCount", "item_count"),
            order_type=_get(raw, "orderType", "order_type") or DEFAULT_ORDER_TYPE,
            retailer=_get(raw, "retailer") or DEFAULT_RETAILER,
            special_requirements=list(reqs),
        )


@dataclass(frozen=True, slots=True)
class TaskInstance:
    """A unit of compliance work scoped to one order."""

    id: str
    type: str
    quantity: int
    requirement: str
    potential_fine: float
    required_skills: frozenset[str]
    estimated_time_minutes: int
    complexity: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "quantity": self.quantity,
            "requirement": self.requirement,
            "potentialFine": self.potential_fine,
            "requiredSkills": sorted(self.required_skills),
            "estimatedTime": self.estimated_time_minutes,
            "complexity": self.complexity,
        }


@dataclass(frozen=True, slots=True)
class OrderBreakdown:
    order_id: str
    retailer: str
    order_type: str
    item_count: int
    tasks: tuple[TaskInstance, ...]

    @property
    def total_estimated_time(self) -> int:
        return sum(t.estimated_time_minutes for t in self.tasks)

    @property
    def max_possible_fines(self) -> float:
        # Flat per-task fines; quantity never scales exposure.
        return sum(t.potential_fine for t in self.tasks)

    def to_dict(self) -> dict[str, Any]:
        return {
            "orderId": self.order_id,
            "retailer": self.retailer,
            "orderType": self.order_type,
            "itemCount": self.item_count,
            "tasks": [t.to_dict() for t in self.tasks],
            "totalEstimatedTime": self.total_estimated_time,
            "maxPossibleFines": self.max_possible_fines,
        }


def _instance(
    order_id: str, definition: TaskDefinition, quantity: int, minutes: int
) -> TaskInstance:
    return TaskInstance(
        id=f"{order_id}-{_ID_SUFFIX[definition.id]}",
        type=definition.id,
        quantity=quantity,
        requirement=definition.description,
        potential_fine=definition.potential_fine,
        required_skills=definition.required_skills,
        estimated_time_minutes=minutes,
        complexity=definition.complexity,
    )


def breakdown(order: Order | Mapping[str, Any]) -> OrderBreakdown:
    """
    Decompose an order into its compliance-critical task instances.

    Inclusion rules (in output order):
      - label placement: always, one label batch per 50 items
      - SKU verification: more than 10 items
      - ASN preparation and carton selection: always
      - packing verification: "fragile" requirement or more than 50 items
      - UPC verification: "retail" requirement or a Retail order type
    """
    if not isinstance(order, Order):
        order = Order.from_dict(order)

    oid, n = order.order_id, order.item_count
    reqs = set(order.special_requirements)

    label_batches = math.ceil(n / 50)
    tasks: list[TaskInstance] = [
        _instance(
            oid,
            LABEL_PLACEMENT,
            label_batches,
            label_batches * LABEL_PLACEMENT.base_estimated_time_minutes,
        )
    ]
    if n > 10:
        tasks.append(
            _instance(
                oid,
                SKU_VERIFICATION,
                n,
                math.ceil(n / 100) * SKU_VERIFICATION.base_estimated_time_minutes,
            )
        )
    tasks.append(
        _instance(oid, ASN_PREPARATION, 1, ASN_PREPARATION.base_estimated_time_minutes)
    )
    tasks.append(
        _instance(
            oid, CARTON_SELECTION, 1, CARTON_SELECTION.base_estimated_time_minutes
        )
    )
    if "fragile" in reqs or n > 50:
        tasks.append(
            _instance(
                oid,
                PACKING_VERIFICATION,
                1,
                PACKING_VERIFICATION.base_estimated_time_minutes,
            )
        )
    if "retail" in reqs or order.order_type == "Retail":
        tasks.append(
            _instance(
                oid,
                UPC_VERIFICATION,
                n,
                math.ceil(n / 50) * UPC_VERIFICATION.base_estimated_time_minutes,
            )
        )

    return OrderBreakdown(
        order_id=oid,
        retailer=order.retailer,
        order_type=order.order_type,
        item_count=n,
        tasks=tuple(tasks),
    )


def breakdown_from_dict(raw: Mapping[str, Any]) -> OrderBreakdown:
    """
    Rebuild an OrderBreakdown from a response-shaped payload.

    Task types are checked against the catalog; fines, skills and complexity
    fall back to the catalog entry when the payload omits them.
    """
    if not isinstance(raw, Mapping):
        raise InvalidOrder("orderBreakdown must be an object.")
    order_id = _get(raw, "orderId", "order_id")
    if order_id is None or not str(order_id).strip():
        raise InvalidOrder("orderBreakdown requires an orderId.")
    raw_tasks = raw.get("tasks")
    if raw_tasks is None or isinstance(raw_tasks, (str, bytes, Mapping)):
        raise InvalidOrder("orderBreakdown with tasks is required.")

    tasks = tuple(_task_from_dict(str(order_id), t) for t in raw_tasks)
    item_count = _get(raw, "itemCount", "item_count")
    return OrderBreakdown(
        order_id=str(order_id),
        retailer=_get(raw, "retailer") or DEFAULT_RETAILER,
        order_type=_get(raw, "orderType", "order_type") or DEFAULT_ORDER_TYPE,
        item_count=_to_item_count(item_count) if item_count is not None else 0,
        tasks=tasks,
    )


def _task_from_dict(order_id: str, raw: Any) -> TaskInstance:
    if not isinstance(raw, Mapping):
        raise InvalidOrder("Each task entry must be an object.")
    definition = lookup(raw.get("type"))
    skills = _get(raw, "requiredSkills", "required_skills")
    minutes = _get(raw, "estimatedTime", "estimated_time_minutes")
    fine = _get(raw, "potentialFine", "potential_fine")
    return TaskInstance(
        id=str(raw.get("id") or f"{order_id}-{_ID_SUFFIX[definition.id]}"),
        type=definition.id,
        quantity=_to_int(raw.get("quantity", 1), "quantity", minimum=1),
        requirement=str(raw.get("requirement") or definition.description),
        potential_fine=(
            _to_fine(fine) if fine is not None else definition.potential_fine
        ),
        required_skills=(
            _to_skills(skills) if skills is not None else definition.required_skills
        ),
        estimated_time_minutes=(
            _to_int(minutes, "estimatedTime", minimum=0)
            if minutes is not None
            else definition.base_estimated_time_minutes
        ),
        complexity=str(raw.get("complexity") or definition.complexity),
    )


def _get(raw: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in raw:
            return raw[key]
    return None


def _to_int(value: Any, name: str, minimum: int) -> int:
    """Accept ints, integral floats and numeric strings; raise InvalidOrder otherwise."""
    error = InvalidOrder(f"{name} must be an integer >= {minimum}; got {value!r}")
    if value is None or isinstance(value, bool):
        raise error
    try:
        # Integers never round-trip through float, so values above 2**53 stay exact.
        if isinstance(value, numbers.Integral):
            as_int = int(value)
        elif isinstance(value, str) and value.strip().lstrip("+-").isdigit():
            as_int = int(value)
        else:
            as_int = _integral(float(value))
    except (TypeError, ValueError) as exc:
        raise error from exc
    if as_int < minimum:
        raise error
    return as_int


def _integral(x: float) -> int:
    if not x.is_integer():
        raise ValueError(f"{x!r} is not integral")
    return int(x)


def _to_fine(value: Any) -> float:
    error = InvalidOrder(f"potentialFine must be a non-negative number; got {value!r}")
    if isinstance(value, bool):
        raise error
    try:
        fine = float(value)
    except (TypeError, ValueError) as exc:
        raise error from exc
    if not math.isfinite(fine) or fine < 0:
        raise error
    return fine


def _to_skills(value: Any) -> frozenset[str]:
    if isinstance(value, (str, bytes, Mapping)) or not isinstance(value, Iterable):
        raise InvalidOrder(f"requiredSkills must be a list of names; got {value!r}")
    return frozenset(str(s) for s in value)


def _to_item_count(value: Any) -> int:
    return _to_int(value, "itemCount", minimum=1)
