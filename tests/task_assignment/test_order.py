from __future__ import annotations

import pytest

from task_assignment.errors import InvalidOrder, UnknownTaskType
from task_assignment.order import (
    DEFAULT_ORDER_TYPE,
    DEFAULT_RETAILER,
    Order,
    breakdown,
    breakdown_from_dict,
)


def _types(bd) -> list[str]:
    return [t.type for t in bd.tasks]


def test_breakdown_large_standard_order() -> None:
    bd = breakdown(Order(order_id="ORD-1", item_count=150))
    assert _types(bd) == [
        "LABEL_PLACEMENT",
        "SKU_VERIFICATION",
        "ASN_PREPARATION",
        "CARTON_SELECTION",
        "PACKING_VERIFICATION",
    ]
    qty = {t.type: t.quantity for t in bd.tasks}
    assert qty == {
        "LABEL_PLACEMENT": 3,
        "SKU_VERIFICATION": 150,
        "ASN_PREPARATION": 1,
        "CARTON_SELECTION": 1,
        "PACKING_VERIFICATION": 1,
    }
    assert bd.max_possible_fines == 1700
    # 3*15 + ceil(150/100)*30 + 5 + 10 + 20
    assert bd.total_estimated_time == 140


def test_breakdown_small_order_skips_sku_and_packing() -> None:
    bd = breakdown({"orderId": "ORD-2", "itemCount": 5})
    assert _types(bd) == ["LABEL_PLACEMENT", "ASN_PREPARATION", "CARTON_SELECTION"]
    assert bd.max_possible_fines == 900
    assert bd.tasks[0].quantity == 1


def test_breakdown_thresholds_are_strict() -> None:
    ten = breakdown(Order("T", 10))
    fifty = breakdown(Order("F", 50))
    assert "SKU_VERIFICATION" not in _types(ten)
    assert "SKU_VERIFICATION" in _types(fifty)
    assert "PACKING_VERIFICATION" not in _types(fifty)
    assert "PACKING_VERIFICATION" in _types(breakdown(Order("G", 51)))


def test_fragile_and_retail_requirements() -> None:
    bd = breakdown(
        Order("ORD-3", 120, special_requirements=["fragile", "retail"])
    )
    upc = bd.tasks[-1]
    assert upc.type == "UPC_VERIFICATION"
    assert upc.quantity == 120
    assert upc.estimated_time_minutes == 36
    assert "PACKING_VERIFICATION" in _types(bd)

    fragile_small = breakdown(Order("ORD-4", 3, special_requirements=["fragile"]))
    assert "PACKING_VERIFICATION" in _types(fragile_small)


def test_retail_order_type_adds_upc() -> None:
    bd = breakdown(Order("ORD-5", 5, order_type="Retail"))
    assert _types(bd)[-1] == "UPC_VERIFICATION"


def test_task_ids_and_defaults() -> None:
    bd = breakdown({"order_id": "ORD-6", "item_count": 60})
    assert [t.id for t in bd.tasks][:2] == ["ORD-6-LABEL", "ORD-6-SKU"]
    assert bd.order_type == DEFAULT_ORDER_TYPE
    assert bd.retailer == DEFAULT_RETAILER
    label = bd.tasks[0]
    assert label.requirement.startswith("UCC-128")
    assert label.complexity == "medium"


@pytest.mark.parametrize("count", [0, -3, 2.5, None, True, "many"])
def test_invalid_item_count_raises(count) -> None:
    with pytest.raises(InvalidOrder):
        breakdown({"orderId": "X", "itemCount": count})


@pytest.mark.parametrize("payload", [{"itemCount": 5}, {"orderId": " ", "itemCount": 5}])
def test_missing_order_id_raises(payload) -> None:
    with pytest.raises(InvalidOrder):
        breakdown(payload)


def test_breakdown_payload_round_trips_through_dict() -> None:
    bd = breakdown(Order("ORD-7", 75, special_requirements=["retail"]))
    body = bd.to_dict()
    assert body["maxPossibleFines"] == bd.max_possible_fines
    assert body["tasks"][0]["potentialFine"] == 250
    assert breakdown_from_dict(body) == bd


def test_breakdown_from_dict_fills_catalog_defaults() -> None:
    bd = breakdown_from_dict(
        {"orderId": "ORD-8", "tasks": [{"type": "ASN_PREPARATION"}]}
    )
    (task,) = bd.tasks
    assert task.id == "ORD-8-ASN"
    assert task.potential_fine == 500
    assert task.estimated_time_minutes == 5
    assert bd.item_count == 0


def test_breakdown_from_dict_rejects_bad_payloads() -> None:
    with pytest.raises(UnknownTaskType):
        breakdown_from_dict({"orderId": "O", "tasks": [{"type": "GIFT_WRAP"}]})
    with pytest.raises(InvalidOrder):
        breakdown_from_dict({"orderId": "O"})
    with pytest.raises(InvalidOrder):
        breakdown_from_dict({"tasks": []})


@pytest.mark.parametrize(
    "task",
    [
        {"type": "ASN_PREPARATION", "quantity": "lots"},
        {"type": "ASN_PREPARATION", "quantity": 0},
        {"type": "ASN_PREPARATION", "quantity": None},
        {"type": "ASN_PREPARATION", "potentialFine": "expensive"},
        {"type": "ASN_PREPARATION", "potentialFine": -50},
        {"type": "ASN_PREPARATION", "potentialFine": float("nan")},
        {"type": "ASN_PREPARATION", "potentialFine": [500]},
        {"type": "ASN_PREPARATION", "estimatedTime": "soon"},
        {"type": "ASN_PREPARATION", "estimatedTime": 2.5},
        {"type": "ASN_PREPARATION", "estimatedTime": -1},
        {"type": "ASN_PREPARATION", "requiredSkills": "precision"},
        {"type": "ASN_PREPARATION", "requiredSkills": 3},
    ],
)
def test_breakdown_from_dict_malformed_task_fields_raise_invalid_order(task) -> None:
    with pytest.raises(InvalidOrder):
        breakdown_from_dict({"orderId": "O", "tasks": [task]})


def test_breakdown_from_dict_accepts_numeric_strings() -> None:
    bd = breakdown_from_dict(
        {
            "orderId": "O",
            "tasks": [
                {
                    "type": "UPC_VERIFICATION",
                    "quantity": "40",
                    "potentialFine": "199.5",
                    "estimatedTime": 12.0,
                }
            ],
        }
    )
    (task,) = bd.tasks
    assert task.quantity == 40
    assert task.potential_fine == 199.5
    assert task.estimated_time_minutes == 12


def test_large_item_counts_stay_exact() -> None:
    big = 2**53 + 1
    assert Order("BIG", big).item_count == big
    assert Order("BIG", str(big)).item_count == big
    assert Order("F", 12.0).item_count == 12
