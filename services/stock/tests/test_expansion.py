from itertools import permutations

import pytest

from app.application.reconciliation import expand
from app.domain.errors import ResolutionError
from app.domain.line_items import Direction, LineItem, PartLine, ProductLine, line_item_from_dict


def test_part_line_contributes_signed_quantity(catalog):
    assert expand([PartLine("part-a", 3)], catalog, Direction.INCREASE) == {"part-a": 3}
    assert expand([PartLine("part-a", 3)], catalog, Direction.DECREASE) == {"part-a": -3}


def test_product_line_expands_bill_of_materials(catalog):
    deltas = expand([ProductLine("prod-p", 4)], catalog, Direction.DECREASE)
    assert deltas == {"part-a": -8, "part-b": -4}


@pytest.mark.parametrize("direction", [Direction.INCREASE, Direction.DECREASE])
@pytest.mark.parametrize("product_id,quantity", [("prod-p", 1), ("prod-p", 7), ("prod-q", 3)])
def test_product_expansion_conserves_parts(catalog, direction, product_id, quantity):
    deltas = expand([ProductLine(product_id, quantity)], catalog, direction)
    expected = int(direction) * quantity * catalog.product(product_id).parts_per_unit
    assert sum(deltas.values()) == expected


def test_contributions_to_same_part_accumulate(catalog):
    items = [PartLine("part-a", 2), ProductLine("prod-p", 1)]
    deltas = expand(items, catalog, Direction.INCREASE)
    assert deltas["part-a"] == 4
    assert deltas["part-b"] == 1


def test_expansion_ignores_line_item_order(catalog):
    items = [PartLine("part-a", 2), ProductLine("prod-p", 3), ProductLine("prod-q", 1), PartLine("part-b", 5)]
    results = {tuple(sorted(expand(list(p), catalog, Direction.DECREASE).items())) for p in permutations(items)}
    assert len(results) == 1


def test_duplicate_line_items_are_summed_not_collapsed(catalog):
    deltas = expand([PartLine("part-c", 1), PartLine("part-c", 1)], catalog, Direction.INCREASE)
    assert deltas == {"part-c": 2}


def test_empty_line_items_expand_to_nothing(catalog):
    assert expand([], catalog, Direction.INCREASE) == {}


def test_accepts_plain_int_direction(catalog):
    assert expand([PartLine("part-b", 1)], catalog, -1) == {"part-b": -1}


def test_unknown_product_raises_resolution_error(catalog):
    with pytest.raises(ResolutionError) as exc_info:
        expand([PartLine("part-a", 1), ProductLine("missing", 1)], catalog, Direction.DECREASE)
    err = exc_info.value
    assert err.index == 1
    assert err.line_item == ProductLine("missing", 1)
    assert err.reason == "unknown product"


def test_reference_resolves_only_for_its_declared_kind(catalog):
    # A product id used as a part reference does not resolve
    with pytest.raises(ResolutionError) as exc_info:
        expand([PartLine("prod-p", 1)], catalog, Direction.INCREASE)
    assert exc_info.value.reason == "unknown part"

    with pytest.raises(ResolutionError):
        expand([ProductLine("part-a", 1)], catalog, Direction.INCREASE)


@pytest.mark.parametrize("quantity", [0, -2])
def test_non_positive_quantity_is_rejected(catalog, quantity):
    with pytest.raises(ResolutionError) as exc_info:
        expand([ProductLine("prod-p", quantity)], catalog, Direction.INCREASE)
    assert exc_info.value.index == 0
    assert "at least 1" in exc_info.value.reason


def test_non_integer_quantity_is_rejected(catalog):
    with pytest.raises(ResolutionError):
        expand([PartLine("part-a", 1.5)], catalog, Direction.INCREASE)


def test_expand_does_not_mutate_catalog(catalog):
    before = catalog.stock_snapshot()
    expand([ProductLine("prod-p", 100)], catalog, Direction.DECREASE)
    assert catalog.stock_snapshot() == before


def test_resolution_error_payload(catalog):
    with pytest.raises(ResolutionError) as exc_info:
        expand([ProductLine("nope", 2)], catalog, Direction.DECREASE)
    payload = exc_info.value.to_dict()
    assert payload["index"] == 0
    assert payload["kind"] == "product"
    assert payload["reference_id"] == "nope"
    assert payload["quantity"] == 2


def test_line_item_base_is_abstract():
    with pytest.raises(TypeError):
        LineItem("part-a", 1)


def test_line_item_from_dict():
    assert line_item_from_dict({"kind": "part", "reference_id": "x", "quantity": 2}) == PartLine("x", 2)
    assert line_item_from_dict({"kind": "product", "reference_id": "y", "quantity": 1}) == ProductLine("y", 1)
    with pytest.raises(ValueError):
        line_item_from_dict({"kind": "bundle", "reference_id": "z", "quantity": 1})
