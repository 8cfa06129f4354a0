# File: src/breadpos/api/catalog.py
"""Products, raw materials and recipe components."""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from breadpos.api.auth import get_current_staff
from breadpos.api.auth_helpers import require_baker, require_manager
from breadpos.core.db import get_db
from breadpos.core.errors import NotFoundError
from breadpos.core.logging import get_logger
from breadpos.models import Material, Product, RecipeComponent, Staff
from breadpos.models.catalog_schemas import (
    MaterialCreate,
    MaterialRead,
    MaterialUpdate,
    ProductCreate,
    ProductRead,
    ProductUpdate,
    RecipeComponentCreate,
    RecipeComponentRead,
)
from breadpos.models.enums import MaterialKind
from breadpos.utils.datetime import now_utc

logger = get_logger(__name__)

router = APIRouter(tags=["catalog"])


async def _get_product(db: AsyncSession, product_id: UUID) -> Product:
    product = await db.get(Product, product_id)
    if product is None:
        raise NotFoundError("Product", str(product_id))
    return product


@router.get("/products", response_model=list[ProductRead])
async def list_products(
    category: str | None = None,
    include_inactive: bool = False,
    current_staff: Staff = Depends(get_current_staff),
    db: AsyncSession = Depends(get_db),
):
    """Catalog order: name, then id."""
    stmt = select(Product).order_by(Product.name, Product.id)
    if not include_inactive:
        stmt = stmt.where(Product.is_active)
    if category:
        stmt = stmt.where(Product.category == category)
    result = await db.execute(stmt)
    return result.scalars().all()


@router.post("/products", response_model=ProductRead, status_code=status.HTTP_201_CREATED)
async def create_product(
    payload: ProductCreate,
    current_staff: Staff = Depends(require_manager),
    db: AsyncSession = Depends(get_db),
):
    product = Product(
        name=payload.name,
        category=payload.category,
        main_category=payload.main_category,
        price=payload.price,
        cost=payload.cost,
        markup_percent=payload.markup_percent,
        variants=[variant.to_json() for variant in payload.variants],
        recipe=payload.recipe.to_json() if payload.recipe else None,
        is_active=True,
    )
    db.add(product)
    await db.flush()
    await db.refresh(product)

    logger.info("product.created", product_id=str(product.id), name=product.name, created_by=current_staff.name)
    return product


@router.get("/products/{product_id}", response_model=ProductRead)
async def get_product(
    product_id: UUID,
    current_staff: Staff = Depends(get_current_staff),
    db: AsyncSession = Depends(get_db),
):
    return await _get_product(db, product_id)


@router.patch("/products/{product_id}", response_model=ProductRead)
async def update_product(
    product_id: UUID,
    patch: ProductUpdate,
    current_staff: Staff = Depends(require_manager),
    db: AsyncSession = Depends(get_db),
):
    product = await _get_product(db, product_id)

    changes = patch.model_dump(exclude_unset=True, exclude={"variants", "recipe"})
    for field, value in changes.items():
        setattr(product, field, value)
    if patch.variants is not None:
        product.variants = [variant.to_json() for variant in patch.variants]
        changes["variants"] = len(product.variants)
    if "recipe" in patch.model_fields_set:
        product.recipe = patch.recipe.to_json() if patch.recipe else None
        changes["recipe"] = product.recipe is not None
    await db.flush()

    logger.info(
        "product.updated",
        product_id=str(product.id),
        changes=list(changes),
        updated_by=current_staff.name,
    )
    return product


@router.delete("/products/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def deactivate_product(
    product_id: UUID,
    current_staff: Staff = Depends(require_manager),
    db: AsyncSession = Depends(get_db),
):
    """Hide from the POS. Sales and mappings keep pointing at it."""
    product = await _get_product(db, product_id)
    product.is_active = False

    logger.info("product.deactivated", product_id=str(product.id), deactivated_by=current_staff.name)


@router.get("/materials", response_model=list[MaterialRead])
async def list_materials(
    kind: MaterialKind | None = None,
    current_staff: Staff = Depends(require_baker),
    db: AsyncSession = Depends(get_db),
):
    stmt = select(Material).order_by(Material.kind, Material.name)
    if kind is not None:
        stmt = stmt.where(Material.kind == kind.value)
    result = await db.execute(stmt)
    return result.scalars().all()


@router.post("/materials", response_model=MaterialRead, status_code=status.HTTP_201_CREATED)
async def create_material(
    payload: MaterialCreate,
    current_staff: Staff = Depends(require_manager),
    db: AsyncSession = Depends(get_db),
):
    material = Material(**payload.model_dump(exclude={"kind"}), kind=payload.kind.value, updated_at=now_utc())
    db.add(material)
    await db.flush()
    await db.refresh(material)

    logger.info("material.created", material_id=str(material.id), name=material.name, kind=material.kind)
    return material


@router.patch("/materials/{material_id}", response_model=MaterialRead)
async def update_material(
    material_id: UUID,
    patch: MaterialUpdate,
    current_staff: Staff = Depends(require_baker),
    db: AsyncSession = Depends(get_db),
):
    """Restock or correct a material. Bakers record deliveries here."""
    material = await db.get(Material, material_id)
    if material is None:
        raise NotFoundError("Material", str(material_id))

    old_stock = material.current_stock
    changes = patch.model_dump(exclude_unset=True)
    for field, value in changes.items():
        setattr(material, field, value)
    material.updated_at = now_utc()
    await db.flush()

    logger.info(
        "material.updated",
        material_id=str(material.id),
        changes=list(changes),
        old_stock=str(old_stock),
        new_stock=str(material.current_stock),
        updated_by=current_staff.name,
    )
    return material


@router.get("/recipe-components", response_model=list[RecipeComponentRead])
async def list_recipe_components(
    current_staff: Staff = Depends(require_baker),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(select(RecipeComponent).order_by(RecipeComponent.kind, RecipeComponent.name))
    return result.scalars().all()


@router.post("/recipe-components", response_model=RecipeComponentRead, status_code=status.HTTP_201_CREATED)
async def create_recipe_component(
    payload: RecipeComponentCreate,
    current_staff: Staff = Depends(require_manager),
    db: AsyncSession = Depends(get_db),
):
    """A dough, filling or topping; ingredient quantities are per batch."""
    for line in payload.ingredients:
        if await db.get(Material, line.material_id) is None:
            raise NotFoundError("Material", str(line.material_id))

    component = RecipeComponent(
        name=payload.name,
        kind=payload.kind.value,
        batch_weight=payload.batch_weight,
        ingredients=payload.ingredients_json(),
    )
    db.add(component)
    await db.flush()
    await db.refresh(component)

    logger.info("recipe_component.created", component_id=str(component.id), kind=component.kind)
    return component
