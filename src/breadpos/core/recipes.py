# File: src/breadpos/core/recipes.py
"""Recipe-based ingredient and packaging deduction."""

import uuid
from collections import defaultdict
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from breadpos.core.concurrency import lock_for_update
from breadpos.core.logging import get_logger
from breadpos.models.inventory_deduction import InventoryDeductionLog
from breadpos.models.material import Material, RecipeComponent
from breadpos.models.product import Product
from breadpos.utils.datetime import now_utc

logger = get_logger(__name__)

ONE = Decimal("1")
# Matches Numeric(14, 4) on materials
QUANTITY_PLACES = Decimal("0.0001")


def _as_decimal(value: Any, default: Decimal = Decimal("0")) -> Decimal:
    if value is None or value == "":
        return default
    return Decimal(str(value))


def _component_ids(recipe: Any) -> list[uuid.UUID]:
    if not isinstance(recipe, dict):
        return []
    toppings = recipe.get("toppings")
    entries = [recipe.get("dough"), recipe.get("filling"), *(toppings if isinstance(toppings, list) else [])]
    ids = []
    for entry in entries:
        if not isinstance(entry, dict) or not entry.get("component_id"):
            continue
        try:
            ids.append(uuid.UUID(str(entry["component_id"])))
        except ValueError:
            # reported per product by compute_material_deductions
            continue
    return ids


def _material_key(line: dict[str, Any]) -> str:
    return str(uuid.UUID(str(line["material_id"])))


def _recipe_totals(
    recipe: dict[str, Any], sold: int, components: dict[str, RecipeComponent]
) -> dict[str, Decimal]:
    totals: dict[str, Decimal] = defaultdict(Decimal)

    def add_component(entry: dict[str, Any] | None) -> None:
        if not entry or not entry.get("component_id"):
            return
        component_key = str(uuid.UUID(str(entry["component_id"])))
        component = components.get(component_key)
        if component is None:
            logger.warning("recipe.component_missing", component_id=component_key)
            return
        batch_weight = component.batch_weight or ONE
        ratio = _as_decimal(entry.get("weight")) / Decimal(batch_weight)
        for ingredient in component.ingredients or []:
            totals[_material_key(ingredient)] += _as_decimal(ingredient.get("quantity")) * ratio * sold

    add_component(recipe.get("dough"))
    add_component(recipe.get("filling"))
    for topping in recipe.get("toppings") or []:
        add_component(topping)

    for ingredient in recipe.get("ingredients") or []:
        totals[_material_key(ingredient)] += _as_decimal(ingredient.get("quantity")) * sold

    for packaging in recipe.get("packaging") or []:
        totals[_material_key(packaging)] += _as_decimal(packaging.get("quantity"), ONE) * sold

    return totals


def compute_material_deductions(
    items: Iterable[tuple[uuid.UUID, int]],
    products: dict[uuid.UUID, Product],
    components: dict[str, RecipeComponent],
) -> tuple[dict[str, Decimal], list[dict[str, str]]]:
    """
    Walk each sold product's recipe and total the materials it consumed.

    Order: dough, filling, toppings, direct ingredients, packaging. Batch
    components contribute ``quantity * (used weight / batch weight) * sold``,
    with a missing batch weight treated as 1. Packaging quantity defaults to 1.

    Unknown products and recipes that cannot be read (bad ids, missing keys,
    non-numeric amounts) are reported in ``errors`` and contribute nothing.

    Returns ``(material_id -> amount, errors)``; only positive amounts are kept.
    """
    totals: dict[str, Decimal] = defaultdict(Decimal)
    errors: list[dict[str, str]] = []

    for product_id, sold in items:
        product = products.get(product_id)
        if product is None:
            errors.append({"product_id": str(product_id), "error": "Product not found"})
            continue

        try:
            product_totals = _recipe_totals(product.recipe or {}, sold, components)
        except (AttributeError, KeyError, TypeError, ValueError, ArithmeticError) as exc:
            logger.warning("recipe.malformed", product_id=str(product_id), error=repr(exc))
            errors.append({"product_id": str(product_id), "error": f"Malformed recipe: {exc!r}"})
            continue

        for material_id, amount in product_totals.items():
            totals[material_id] += amount

    rounded = {material_id: amount.quantize(QUANTITY_PLACES) for material_id, amount in totals.items()}
    return {material_id: amount for material_id, amount in rounded.items() if amount > 0}, errors


class MissingMaterialError(Exception):
    """A recipe refers to a material that no longer exists; the batch is aborted."""

    def __init__(self, material_ids: list[str]):
        self.material_ids = material_ids
        super().__init__(f"Materials not found: {', '.join(material_ids)}")


@dataclass
class IngredientDeductionResult:
    success: bool
    deductions: list[dict[str, Any]] = field(default_factory=list)
    errors: list[dict[str, str]] = field(default_factory=list)
    already_applied: bool = False


async def apply_ingredient_deduction(
    session_factory: async_sessionmaker[AsyncSession],
    sale_id: uuid.UUID,
    sale_number: str,
    items: list[tuple[uuid.UUID, int]],
    performed_by: str,
) -> IngredientDeductionResult:
    """
    Deduct materials for one sale in a single transaction.

    Either every material is decremented and the audit row is written, or
    nothing is. A sale already logged is skipped, so retries are safe.
    Raises MissingMaterialError when a referenced material is gone.
    """
    async with session_factory() as session:
        async with session.begin():
            existing = await session.execute(
                select(InventoryDeductionLog.id).where(InventoryDeductionLog.sale_id == sale_id)
            )
            if existing.scalar_one_or_none() is not None:
                return IngredientDeductionResult(success=True, already_applied=True)

            product_ids = {product_id for product_id, _ in items}
            result = await session.execute(select(Product).where(Product.id.in_(product_ids)))
            products = {product.id: product for product in result.scalars().all()}

            component_ids = {
                component_id for product in products.values() for component_id in _component_ids(product.recipe)
            }
            components: dict[str, RecipeComponent] = {}
            if component_ids:
                result = await session.execute(
                    select(RecipeComponent).where(RecipeComponent.id.in_(component_ids))
                )
                components = {str(c.id): c for c in result.scalars().all()}

            totals, errors = compute_material_deductions(items, products, components)

            materials: dict[str, Material] = {}
            if totals:
                stmt = lock_for_update(
                    select(Material).where(Material.id.in_([uuid.UUID(mid) for mid in totals]))
                )
                result = await session.execute(stmt)
                materials = {str(m.id): m for m in result.scalars().all()}

            missing = sorted(set(totals) - set(materials))
            if missing:
                raise MissingMaterialError(missing)

            now = now_utc()
            deductions = []
            for material_id, amount in totals.items():
                material = materials[material_id]
                material.current_stock = material.current_stock - amount
                material.updated_at = now
                deductions.append(
                    {
                        "material_id": material_id,
                        "name": material.name,
                        "kind": material.kind,
                        "quantity": str(amount),
                    }
                )

            session.add(
                InventoryDeductionLog(
                    sale_id=sale_id,
                    sale_number=sale_number,
                    deductions=deductions,
                    errors=errors,
                    performed_by=performed_by,
                )
            )

    logger.info(
        "ingredients.deducted",
        sale_number=sale_number,
        materials=len(deductions),
        errors=len(errors),
    )
    return IngredientDeductionResult(success=True, deductions=deductions, errors=errors)
