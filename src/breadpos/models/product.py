# File: src/breadpos/models/product.py
"""Catalog product model."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import JSON, Numeric, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from breadpos.core.db import Base
from breadpos.utils.datetime import now_utc


class Product(Base):
    """
    A sellable item.

    ``variants`` holds ``[{"name": "Box of 6", "price": "180.00", "cost": "95.00"}]``.
    ``recipe`` holds the bill of materials walked by the ingredient deduction::

        {
            "dough": {"component_id": "...", "weight": 40},
            "filling": {"component_id": "...", "weight": 15},
            "toppings": [{"component_id": "...", "weight": 5}],
            "ingredients": [{"material_id": "...", "quantity": 2}],
            "packaging": [{"material_id": "...", "quantity": 1}]
        }
    """

    __tablename__ = "products"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    name: Mapped[str] = mapped_column(String(150), nullable=False, index=True)
    category: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    main_category: Mapped[str | None] = mapped_column(String(100), nullable=True)

    price: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    cost: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    markup_percent: Mapped[Decimal | None] = mapped_column(Numeric(6, 2), nullable=True)

    variants: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    recipe: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    is_active: Mapped[bool] = mapped_column(default=True, nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(nullable=False, default=now_utc)

    def variant(self, index: int | None) -> dict[str, Any] | None:
        if index is None or not self.variants:
            return None
        if 0 <= index < len(self.variants):
            return self.variants[index]
        return None

    def unit_price(self, variant_index: int | None = None) -> Decimal:
        """Selling price of the product or one of its variants.

        Falls back to the first variant's price for products priced only by variant.
        """
        variant = self.variant(variant_index)
        if variant is not None and variant.get("price") is not None:
            return Decimal(str(variant["price"]))
        if self.price is not None:
            return self.price
        if self.variants and self.variants[0].get("price") is not None:
            return Decimal(str(self.variants[0]["price"]))
        return Decimal("0.00")

    def __repr__(self) -> str:
        return f"<Product(name={self.name}, category={self.category})>"
