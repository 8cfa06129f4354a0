# File: src/breadpos/models/catalog_schemas.py
"""Pydantic schemas for products, raw materials and recipe components."""

from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from breadpos.core.validators import sanitize_html, validate_currency
from breadpos.models.enums import MaterialKind, RecipeComponentKind


class VariantIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    price: Decimal = Field(..., ge=0)
    cost: Decimal | None = Field(None, ge=0)

    @field_validator("price", "cost")
    @classmethod
    def validate_currency_fields(cls, v: Decimal | None) -> Decimal | None:
        if v is None:
            return None
        return validate_currency(v)

    def to_json(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name, "price": str(self.price)}
        if self.cost is not None:
            data["cost"] = str(self.cost)
        return data


class ComponentUse(BaseModel):
    """A dough, filling or topping used by a product, by weight."""

    component_id: UUID
    weight: Decimal = Field(..., ge=0)


class MaterialUse(BaseModel):
    material_id: UUID
    quantity: Decimal | None = Field(None, ge=0)


class RecipeIn(BaseModel):
    model_config = ConfigDict(extra="forbid")

    dough: ComponentUse | None = None
    filling: ComponentUse | None = None
    toppings: list[ComponentUse] = Field(default_factory=list)
    ingredients: list[MaterialUse] = Field(default_factory=list)
    packaging: list[MaterialUse] = Field(default_factory=list)

    def to_json(self) -> dict[str, Any]:
        """Stored form: ids and amounts as strings, empty parts left out."""
        return self.model_dump(mode="json", exclude_none=True, exclude_defaults=True)


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=150)
    category: str | None = Field(None, max_length=100)
    main_category: str | None = Field(None, max_length=100)
    price: Decimal | None = Field(None, ge=0)
    cost: Decimal | None = Field(None, ge=0)
    markup_percent: Decimal | None = Field(None, ge=0)
    variants: list[VariantIn] = Field(default_factory=list)
    recipe: RecipeIn | None = None

    @field_validator("name", "category", "main_category")
    @classmethod
    def validate_text(cls, v: str | None) -> str | None:
        return sanitize_html(v)

    @field_validator("price", "cost")
    @classmethod
    def validate_currency_fields(cls, v: Decimal | None) -> Decimal | None:
        if v is None:
            return None
        return validate_currency(v)

    @model_validator(mode="after")
    def validate_priced(self) -> "ProductCreate":
        if self.price is None and not self.variants:
            raise ValueError("Product needs a price or at least one priced variant")
        return self


class ProductUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=150)
    category: str | None = Field(None, max_length=100)
    main_category: str | None = Field(None, max_length=100)
    price: Decimal | None = Field(None, ge=0)
    cost: Decimal | None = Field(None, ge=0)
    markup_percent: Decimal | None = Field(None, ge=0)
    variants: list[VariantIn] | None = None
    recipe: RecipeIn | None = None
    is_active: bool | None = None


class ProductRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    category: str | None
    main_category: str | None
    price: Decimal | None
    cost: Decimal | None
    markup_percent: Decimal | None
    variants: list[dict[str, Any]]
    recipe: dict[str, Any] | None
    is_active: bool
    created_at: datetime


class MaterialCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=150)
    kind: MaterialKind = MaterialKind.INGREDIENT
    unit: str = Field("g", min_length=1, max_length=20)
    current_stock: Decimal = Field(Decimal("0"), ge=0)
    reorder_level: Decimal = Field(Decimal("0"), ge=0)
    cost_per_unit: Decimal | None = Field(None, ge=0)


class MaterialUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=150)
    unit: str | None = Field(None, min_length=1, max_length=20)
    current_stock: Decimal | None = Field(None, ge=0)
    reorder_level: Decimal | None = Field(None, ge=0)
    cost_per_unit: Decimal | None = Field(None, ge=0)


class MaterialRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    kind: MaterialKind
    unit: str
    current_stock: Decimal
    reorder_level: Decimal
    cost_per_unit: Decimal | None
    is_low: bool
    updated_at: datetime


class ComponentIngredient(BaseModel):
    material_id: UUID
    quantity: Decimal = Field(..., gt=0)


class RecipeComponentCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=150)
    kind: RecipeComponentKind
    batch_weight: Decimal | None = Field(None, ge=0)
    ingredients: list[ComponentIngredient] = Field(default_factory=list)

    def ingredients_json(self) -> list[dict[str, str]]:
        return [
            {"material_id": str(line.material_id), "quantity": str(line.quantity)}
            for line in self.ingredients
        ]


class RecipeComponentRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    kind: RecipeComponentKind
    batch_weight: Decimal | None
    ingredients: list[dict[str, Any]]
