# File: src/breadpos/models/material.py
"""Raw materials: baking ingredients and packaging."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import JSON, Numeric, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from breadpos.core.db import Base
from breadpos.models.enums import MaterialKind, RecipeComponentKind
from breadpos.utils.datetime import now_utc


class Material(Base):
    """An ingredient or packaging item whose stock the recipe deduction draws down."""

    __tablename__ = "materials"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    name: Mapped[str] = mapped_column(String(150), nullable=False, index=True)
    kind: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=MaterialKind.INGREDIENT.value,
        index=True,
    )
    unit: Mapped[str] = mapped_column(String(20), nullable=False, default="g")

    current_stock: Mapped[Decimal] = mapped_column(
        Numeric(14, 4), nullable=False, default=Decimal("0")
    )
    reorder_level: Mapped[Decimal] = mapped_column(
        Numeric(14, 4), nullable=False, default=Decimal("0")
    )
    cost_per_unit: Mapped[Decimal | None] = mapped_column(Numeric(12, 4), nullable=True)

    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=now_utc)

    @property
    def is_low(self) -> bool:
        return self.current_stock <= self.reorder_level


class RecipeComponent(Base):
    """
    A dough, filling or topping made in batches.

    ``ingredients`` is ``[{"material_id": "...", "quantity": 500}]`` for one
    batch of ``batch_weight`` grams.
    """

    __tablename__ = "recipe_components"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    name: Mapped[str] = mapped_column(String(150), nullable=False)
    kind: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=RecipeComponentKind.DOUGH.value,
    )
    batch_weight: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    ingredients: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
