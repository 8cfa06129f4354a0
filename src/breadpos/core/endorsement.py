# File: src/breadpos/core/endorsement.py
"""Start and end-of-shift inventory sheets and how counts are scored."""

import uuid
from dataclasses import dataclass
from decimal import Decimal

from breadpos.core.errors import ValidationError
from breadpos.core.reconciliation import ZERO, end_expected_quantity, shortage_value
from breadpos.models.inventory import DailyInventory
from breadpos.models.product import Product
from breadpos.models.shift_inventory import ShiftInventoryLine


@dataclass
class SheetLine:
    product_id: uuid.UUID
    product_name: str
    category: str | None
    expected_qty: int
    start_qty: int | None = None
    sold_qty: int | None = None
    unit_price: Decimal = ZERO


def _sort_key(line: SheetLine) -> tuple[str, str]:
    return (line.category or "", line.product_name.lower())


def build_start_sheet(records: list[DailyInventory]) -> list[SheetLine]:
    """Products with stock on the shelf, by category then name. Expected = sellable."""
    lines = [
        SheetLine(
            product_id=record.product_id,
            product_name=record.product_name,
            category=record.category,
            expected_qty=record.sellable,
        )
        for record in records
        if record.sellable > 0
    ]
    return sorted(lines, key=_sort_key)


def build_end_sheet(
    records: dict[uuid.UUID, DailyInventory],
    start_lines: list[ShiftInventoryLine] | None,
    sold: dict[uuid.UUID, int],
    products: dict[uuid.UUID, Product],
) -> list[SheetLine]:
    """
    What should be left at shift end.

    Start quantity comes from the start endorsement. Products it does not
    list (or every product, without one) are reconstructed as current
    sellable plus what this shift sold. Only products that started with
    stock or sold something are listed.
    """
    start: dict[uuid.UUID, int] = {}
    names: dict[uuid.UUID, tuple[str, str | None]] = {}

    for product_id, record in records.items():
        start[product_id] = record.sellable + sold.get(product_id, 0)
        names[product_id] = (record.product_name, record.category)
    for line in start_lines or []:
        start[line.product_id] = line.counted_qty
        names[line.product_id] = (line.product_name, line.category)

    lines = []
    for product_id in set(start) | set(sold):
        start_qty = start.get(product_id, 0)
        sold_qty = sold.get(product_id, 0)
        if start_qty <= 0 and sold_qty <= 0:
            continue

        product = products.get(product_id)
        if product_id in names:
            name, category = names[product_id]
        elif product is not None:
            name, category = product.name, product.category
        else:
            name, category = str(product_id), None

        lines.append(
            SheetLine(
                product_id=product_id,
                product_name=name,
                category=category,
                start_qty=start_qty,
                sold_qty=sold_qty,
                expected_qty=end_expected_quantity(start_qty, sold_qty),
                unit_price=product.unit_price() if product is not None else ZERO,
            )
        )
    return sorted(lines, key=_sort_key)


@dataclass
class ScoredCount:
    sheet: SheetLine
    counted_qty: int

    @property
    def variance(self) -> int:
        return self.counted_qty - self.sheet.expected_qty

    @property
    def shortage_qty(self) -> int:
        return max(0, self.sheet.expected_qty - self.counted_qty)

    @property
    def shortage_value(self) -> Decimal:
        return shortage_value(self.sheet.expected_qty, self.counted_qty, self.sheet.unit_price)


def score_counts(
    sheet: list[SheetLine],
    counts: dict[uuid.UUID, int],
    require_all: bool,
    extra: dict[uuid.UUID, SheetLine] | None = None,
) -> list[ScoredCount]:
    """
    Pair submitted counts with sheet lines.

    Counts for products not on the sheet are accepted against an expectation
    of zero (``extra`` supplies their names). With ``require_all`` every
    sheet line must be counted.
    """
    by_product = {line.product_id: line for line in sheet}
    if require_all:
        missing = [str(pid) for pid in by_product if pid not in counts]
        if missing:
            raise ValidationError("Every product on the sheet must be counted", details={"missing": missing})

    scored = []
    for line in sheet:
        if line.product_id in counts:
            scored.append(ScoredCount(sheet=line, counted_qty=counts[line.product_id]))

    for product_id, counted in counts.items():
        if product_id in by_product:
            continue
        line = (extra or {}).get(product_id)
        if line is None:
            raise ValidationError("Unknown product in count", details={"product_id": str(product_id)})
        scored.append(ScoredCount(sheet=line, counted_qty=counted))
    return scored
