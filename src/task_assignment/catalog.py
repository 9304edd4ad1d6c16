# task_assignment/catalog.py
from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Literal, Mapping

from task_assignment.errors import UnknownTaskType

Complexity = Literal["low", "medium", "high"]


@dataclass(frozen=True, slots=True)
class TaskDefinition:
    """
    A compliance-critical task and the retailer fine it guards against.
    """

    id: str
    name: str
    description: str
    violation_type: str
    potential_fine: float
    required_skills: frozenset[str]
    base_estimated_time_minutes: int
    complexity: Complexity

    @property
    def skill_key(self) -> str:
        """Key of the matching entry in a worker's skill profile."""
        return self.id.lower()


LABEL_PLACEMENT = TaskDefinition(
    id="LABEL_PLACEMENT",
    name="Label Placement",
    description="UCC-128 labels must be placed 2 inches from bottom-right corner",
    violation_type="INCORRECT_LABEL_PLACEMENT",
    potential_fine=250,
    required_skills=frozenset({"precision", "label_experience", "attention_to_detail"}),
    base_estimated_time_minutes=15,  # per 50 items
    complexity="medium",
)

SKU_VERIFICATION = TaskDefinition(
    id="SKU_VERIFICATION",
    name="SKU Verification",
    description="Verify no mixed SKUs in bulk orders, correct quantities",
    violation_type="MIXED_SKU_VIOLATION",
    potential_fine=500,
    required_skills=frozenset({"attention_to_detail", "bulk_experience", "sku_knowledge"}),
    base_estimated_time_minutes=30,  # per 100 items
    complexity="high",
)

ASN_PREPARATION = TaskDefinition(
    id="ASN_PREPARATION",
    name="ASN Preparation",
    description="Send Advance Ship Notice within 1 hour of shipment",
    violation_type="LATE_ASN",
    potential_fine=500,
    required_skills=frozenset({"system_knowledge", "time_management", "asn_experience"}),
    base_estimated_time_minutes=5,
    complexity="low",
)

CARTON_SELECTION = TaskDefinition(
    id="CARTON_SELECTION",
    name="Carton Selection",
    description="Select appropriate carton size based on item dimensions",
    violation_type="INCORRECT_CARTON_SIZE",
    potential_fine=150,
    required_skills=frozenset({"spatial_reasoning", "carton_knowledge", "measurement"}),
    base_estimated_time_minutes=10,
    complexity="medium",
)

PACKING_VERIFICATION = TaskDefinition(
    id="PACKING_VERIFICATION",
    name="Packing Verification",
    description="Verify proper packing density and protection",
    violation_type="IMPROPER_PACKING",
    potential_fine=300,
    required_skills=frozenset(
        {"packing_experience", "quality_control", "protection_knowledge"}
    ),
    base_estimated_time_minutes=20,
    complexity="high",
)

UPC_VERIFICATION = TaskDefinition(
    id="UPC_VERIFICATION",
    name="UPC Verification",
    description="Verify UPC codes match product and are scannable",
    violation_type="INVALID_UPC",
    potential_fine=200,
    required_skills=frozenset({"upc_knowledge", "scanning_experience", "product_knowledge"}),
    base_estimated_time_minutes=12,  # per 50 items
    complexity="medium",
)

TASK_CATALOG: Mapping[str, TaskDefinition] = MappingProxyType(
    {
        t.id: t
        for t in (
            LABEL_PLACEMENT,
            SKU_VERIFICATION,
            ASN_PREPARATION,
            CARTON_SELECTION,
            PACKING_VERIFICATION,
            UPC_VERIFICATION,
        )
    }
)

# violation type -> skill key, one-to-one with the catalog
VIOLATION_SKILL_MAP: Mapping[str, str] = MappingProxyType(
    {t.violation_type: t.skill_key for t in TASK_CATALOG.values()}
)

SKILL_KEYS: tuple[str, ...] = tuple(t.skill_key for t in TASK_CATALOG.values())


def lookup(task_type: str) -> TaskDefinition:
    """Return the definition for `task_type` or raise UnknownTaskType."""
    try:
        return TASK_CATALOG[task_type]
    except (KeyError, TypeError):
        raise UnknownTaskType(task_type) from None


def catalog_stats() -> dict[str, Any]:
    return {
        "available_tasks": len(TASK_CATALOG),
        "task_types": [
            {
                "id": t.id,
                "name": t.name,
                "potential_fine": t.potential_fine,
                "complexity": t.complexity,
            }
            for t in TASK_CATALOG.values()
        ],
    }
