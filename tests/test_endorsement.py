"""Tests for shift handover inventory sheets and count scoring."""

import uuid
from decimal import Decimal

import pytest

from breadpos.core.endorsement import SheetLine, build_end_sheet, build_start_sheet, score_counts
from breadpos.core.errors import ValidationError
from breadpos.models import DailyInventory, Product, ShiftInventoryLine


def _record(name, category, total, sold=0) -> DailyInventory:
    return DailyInventory(
        date_key="2025-03-01",
        product_id=uuid.uuid4(),
        product_name=name,
        category=category,
        total_available=total,
        sold_qty=sold,
        reserved_qty=0,
        cancelled_qty=0,
    )


def test_start_sheet_lists_products_with_stock_sorted():
    records = [
        _record("Spanish Bread", "Bread", 10),
        _record("Ube Cake", "Cakes", 3, sold=3),
        _record("Ensaymada", "Pastry", 6),
        _record("pandesal", "Bread", 50),
    ]

    sheet = build_start_sheet(records)

    assert [line.product_name for line in sheet] == ["pandesal", "Spanish Bread", "Ensaymada"]
    assert sheet[0].expected_qty == 50


def test_end_sheet_uses_start_endorsement():
    pandesal = Product(id=uuid.uuid4(), name="Pandesal", category="Bread", price=Decimal("5.00"), variants=[])
    start_lines = [
        ShiftInventoryLine(product_id=pandesal.id, product_name="Pandesal", category="Bread", counted_qty=40)
    ]

    sheet = build_end_sheet({}, start_lines, {pandesal.id: 15}, {pandesal.id: pandesal})

    assert len(sheet) == 1
    assert sheet[0].start_qty == 40
    assert sheet[0].sold_qty == 15
    assert sheet[0].expected_qty == 25
    assert sheet[0].unit_price == Decimal("5.00")


def test_end_sheet_without_start_rebuilds_from_stock():
    record = _record("Pandesal", "Bread", 50, sold=20)

    sheet = build_end_sheet({record.product_id: record}, None, {record.product_id: 20}, {})

    # Start reconstructed as sellable (30) plus sold this shift (20)
    assert sheet[0].start_qty == 50
    assert sheet[0].expected_qty == 30


def test_end_sheet_rebuilds_products_missing_from_start():
    pandesal = _record("Pandesal", "Bread", 50, sold=10)
    ensaymada = _record("Ensaymada", "Pastry", 12, sold=4)
    start_lines = [
        ShiftInventoryLine(product_id=pandesal.product_id, product_name="Pandesal", category="Bread", counted_qty=45)
    ]
    records = {pandesal.product_id: pandesal, ensaymada.product_id: ensaymada}

    sheet = build_end_sheet(records, start_lines, {pandesal.product_id: 10, ensaymada.product_id: 4}, {})

    by_name = {line.product_name: line for line in sheet}
    assert by_name["Pandesal"].start_qty == 45
    assert by_name["Pandesal"].expected_qty == 35
    # Not endorsed at start: sellable (8) plus sold this shift (4)
    assert by_name["Ensaymada"].start_qty == 12
    assert by_name["Ensaymada"].expected_qty == 8


def test_end_sheet_skips_products_with_nothing_to_count():
    empty = _record("Ube Cake", "Cakes", 0)

    assert build_end_sheet({empty.product_id: empty}, None, {}, {}) == []


def _line(expected, price="10.00") -> SheetLine:
    return SheetLine(
        product_id=uuid.uuid4(),
        product_name="Pandesal",
        category="Bread",
        expected_qty=expected,
        unit_price=Decimal(price),
    )


def test_score_counts_variance_and_shortage():
    line = _line(10, "12.50")

    scored = score_counts([line], {line.product_id: 7}, require_all=True)

    assert scored[0].variance == -3
    assert scored[0].shortage_qty == 3
    assert scored[0].shortage_value == Decimal("37.50")


def test_surplus_has_no_shortage():
    line = _line(10)

    scored = score_counts([line], {line.product_id: 12}, require_all=False)

    assert scored[0].variance == 2
    assert scored[0].shortage_value == Decimal("0.00")


def test_end_count_must_cover_whole_sheet():
    counted, skipped = _line(5), _line(3)

    with pytest.raises(ValidationError) as exc_info:
        score_counts([counted, skipped], {counted.product_id: 5}, require_all=True)

    assert exc_info.value.details["missing"] == [str(skipped.product_id)]


def test_extra_products_are_expected_at_zero():
    on_sheet = _line(5)
    extra = _line(0)

    scored = score_counts(
        [on_sheet],
        {on_sheet.product_id: 5, extra.product_id: 2},
        require_all=False,
        extra={extra.product_id: extra},
    )

    assert [s.variance for s in scored] == [0, 2]


def test_unknown_extra_product_rejected():
    on_sheet = _line(5)

    with pytest.raises(ValidationError):
        score_counts([on_sheet], {uuid.uuid4(): 1}, require_all=False)
