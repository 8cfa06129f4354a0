# File: src/breadpos/core/cart.py
"""Cart and discount engine used by POS checkout."""

import uuid
from dataclasses import dataclass, field
from decimal import Decimal

from breadpos.core.errors import InvalidStateError, ValidationError
from breadpos.core.reconciliation import ZERO, money

# Seeded presets; admins can add more through /discounts
DEFAULT_DISCOUNTS = (
    {"id": "senior", "name": "Senior Citizen", "percent": Decimal("20"), "icon": "👴", "requires_id": True},
    {"id": "pwd", "name": "PWD", "percent": Decimal("20"), "icon": "♿", "requires_id": True},
    {"id": "employee", "name": "Employee", "percent": Decimal("10"), "icon": "👔", "requires_id": False},
    {"id": "promo", "name": "Promo", "percent": Decimal("15"), "icon": "🎉", "requires_id": False},
)

CUSTOM_DISCOUNT_ID = "custom"

_ID_REQUIRED_HINTS = ("senior", "pwd")


def infer_requires_id(discount_id: str, name: str | None = None) -> bool:
    """Legacy rule: senior and PWD discounts need an ID, matched on id or name."""
    haystack = f"{discount_id} {name or ''}".lower()
    return any(hint in haystack for hint in _ID_REQUIRED_HINTS)


@dataclass(frozen=True)
class Discount:
    id: str
    name: str
    percent: Decimal
    requires_id: bool = False

    def __post_init__(self):
        if not (ZERO < Decimal(self.percent) <= Decimal("100")):
            raise ValidationError(
                "Discount percent must be greater than 0 and at most 100",
                details={"discount_id": self.id, "percent": str(self.percent)},
            )


@dataclass
class CartLine:
    product_id: uuid.UUID
    product_name: str
    original_price: Decimal
    quantity: int
    variant_index: int | None = None
    variant_name: str | None = None
    category: str | None = None
    main_category: str | None = None
    discount: Discount | None = None

    @property
    def discount_amount(self) -> Decimal:
        """Per-unit discount: original price x percent / 100."""
        if self.discount is None:
            return ZERO
        return money(self.original_price * Decimal(self.discount.percent) / Decimal("100"))

    @property
    def unit_price(self) -> Decimal:
        return self.original_price - self.discount_amount

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity

    @property
    def merge_key(self) -> tuple:
        return (self.product_id, self.variant_index, self.discount.id if self.discount else None)


@dataclass
class Cart:
    """
    In-progress order.

    ``active_discount`` is applied to lines added while it is set. Existing
    lines change only through the per-line toggle or the apply/remove-all
    operations. Lines with the same product, variant and discount merge.
    """

    lines: list[CartLine] = field(default_factory=list)
    active_discount: Discount | None = None

    def add(
        self,
        product_id: uuid.UUID,
        product_name: str,
        price: Decimal,
        quantity: int = 1,
        *,
        variant_index: int | None = None,
        variant_name: str | None = None,
        category: str | None = None,
        main_category: str | None = None,
        discount: Discount | None = None,
    ) -> CartLine:
        """Add units, merging into an existing matching line."""
        if quantity <= 0:
            raise ValidationError("Quantity must be positive", details={"quantity": quantity})

        line = CartLine(
            product_id=product_id,
            product_name=product_name,
            original_price=money(price),
            quantity=quantity,
            variant_index=variant_index,
            variant_name=variant_name,
            category=category,
            main_category=main_category,
            discount=discount if discount is not None else self.active_discount,
        )
        for existing in self.lines:
            if existing.merge_key == line.merge_key:
                existing.quantity += quantity
                return existing
        self.lines.append(line)
        return line

    def _line(self, index: int) -> CartLine:
        if not 0 <= index < len(self.lines):
            raise ValidationError("No such cart line", details={"index": index})
        return self.lines[index]

    def update_quantity(self, index: int, quantity: int) -> None:
        """Set a line's quantity; zero or less removes the line."""
        line = self._line(index)
        if quantity <= 0:
            self.lines.remove(line)
        else:
            line.quantity = quantity

    def remove(self, index: int) -> None:
        self.lines.remove(self._line(index))

    def toggle_line_discount(self, index: int) -> CartLine:
        """Remove a line's discount, or apply the active discount if it has none."""
        line = self._line(index)
        if line.discount is not None:
            line.discount = None
        elif self.active_discount is None:
            raise InvalidStateError("Select a discount before applying it to an item")
        else:
            line.discount = self.active_discount
        return line

    def apply_discount_to_all(self, discount: Discount | None = None) -> None:
        discount = discount or self.active_discount
        if discount is None:
            raise InvalidStateError("Select a discount before applying it to all items")
        for line in self.lines:
            line.discount = discount

    def remove_all_discounts(self) -> None:
        for line in self.lines:
            line.discount = None
        self.active_discount = None

    def quantity_of(self, product_id: uuid.UUID) -> int:
        """Units of a product across all its lines; stock is tracked per product."""
        return sum(line.quantity for line in self.lines if line.product_id == product_id)

    @property
    def requires_id(self) -> bool:
        return any(line.discount and line.discount.requires_id for line in self.lines)

    @property
    def subtotal(self) -> Decimal:
        return sum((line.original_price * line.quantity for line in self.lines), ZERO)

    @property
    def total_discount(self) -> Decimal:
        return sum((line.discount_amount * line.quantity for line in self.lines), ZERO)

    @property
    def total(self) -> Decimal:
        return sum((line.line_total for line in self.lines), ZERO)

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.lines)

    def is_empty(self) -> bool:
        return not self.lines
