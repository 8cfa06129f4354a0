# File: src/breadpos/api/sales.py
"""POS checkout and sale history endpoints."""

from datetime import date
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from starlette.requests import Request

from breadpos.api.auth import find_active_shift, get_current_staff
from breadpos.api.auth_helpers import require_admin
from breadpos.api.settings import get_pos_settings
from breadpos.api.stock import get_stock_broker
from breadpos.core.audit import log_change
from breadpos.core.cache import invalidate_reports
from breadpos.core.cart import CUSTOM_DISCOUNT_ID, Cart, Discount
from breadpos.core.checkout import build_sale, verify_discount_id, verify_payment
from breadpos.core.db import get_db, get_session_factory
from breadpos.core.errors import (
    ConflictError,
    InsufficientStockError,
    InvalidStateError,
    NotFoundError,
    PaymentVerificationError,
    ValidationError,
)
from breadpos.core.events import StockBroker
from breadpos.core.logging import get_logger
from breadpos.core.receivables import receivable_for_sale, retotal
from breadpos.core.stock import evaluate_can_add, get_day_records
from breadpos.core.tasks import SaleDeductionJob, run_sale_deductions
from breadpos.models import ChargeCustomer, DiscountPreset, Product, Receivable, Sale, Staff
from breadpos.models.enums import PaymentMethod, StaffRole
from breadpos.models.sale_schemas import CheckoutRequest, CheckoutResponse, SaleRead
from breadpos.utils.datetime import compact_date, today_key, today_local
from breadpos.utils.datetime import date_key as to_date_key
from breadpos.utils.datetime import now_utc

logger = get_logger(__name__)

router = APIRouter(prefix="/sales", tags=["sales"])


async def next_sale_number(db: AsyncSession, date_key: str) -> str:
    """S-YYYYMMDD-NNN, sequential per day including deleted sales."""
    result = await db.execute(select(func.count(Sale.id)).where(Sale.date_key == date_key))
    sequence = int(result.scalar_one()) + 1
    return f"S-{compact_date(today_local())}-{sequence:03d}"


async def _load_products(db: AsyncSession, payload: CheckoutRequest) -> dict[UUID, Product]:
    ids = {item.product_id for item in payload.items}
    result = await db.execute(select(Product).where(Product.id.in_(ids), Product.is_active))
    products = {product.id: product for product in result.scalars().all()}
    for product_id in ids:
        if product_id not in products:
            raise NotFoundError("Product", str(product_id))
    return products


async def _load_discounts(db: AsyncSession, payload: CheckoutRequest) -> dict[str, Discount]:
    ids = {
        item.discount_id
        for item in payload.items
        if item.discount_id and item.discount_id != CUSTOM_DISCOUNT_ID
    }
    if not ids:
        return {}
    result = await db.execute(select(DiscountPreset).where(DiscountPreset.id.in_(ids), DiscountPreset.is_active))
    presets = {
        preset.id: Discount(preset.id, preset.name, preset.percent, preset.requires_id)
        for preset in result.scalars().all()
    }
    for discount_id in ids:
        if discount_id not in presets:
            raise NotFoundError("DiscountPreset", discount_id)
    return presets


def _build_cart(
    payload: CheckoutRequest,
    products: dict[UUID, Product],
    discounts: dict[str, Discount],
) -> Cart:
    """Price every line from the catalog; client prices are never trusted."""
    cart = Cart()
    for item in payload.items:
        product = products[item.product_id]
        variant = product.variant(item.variant_index)
        if item.variant_index is not None and variant is None:
            raise ValidationError(
                "Variant does not exist on product",
                details={"product_id": str(product.id), "variant_index": item.variant_index},
            )

        discount = None
        if item.discount_id == CUSTOM_DISCOUNT_ID:
            discount = Discount(
                CUSTOM_DISCOUNT_ID,
                item.custom_discount_name or "Custom",
                item.custom_discount_percent,
            )
        elif item.discount_id:
            discount = discounts[item.discount_id]

        cart.add(
            product.id,
            product.name,
            product.unit_price(item.variant_index),
            item.quantity,
            variant_index=item.variant_index,
            variant_name=variant.get("name") if variant else None,
            category=product.category,
            main_category=product.main_category,
            discount=discount,
        )
    return cart


@router.post("", response_model=CheckoutResponse, status_code=status.HTTP_201_CREATED)
async def checkout(
    payload: CheckoutRequest,
    request: Request,
    background_tasks: BackgroundTasks,
    current_staff: Staff = Depends(get_current_staff),
    db: AsyncSession = Depends(get_db),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    broker: StockBroker = Depends(get_stock_broker),
):
    """
    Record a sale.

    The sale (and its receivable for CHARGE) is committed before stock and
    ingredient deductions are scheduled, so the cashier never waits on them.
    """
    if request.session.get("view_only"):
        raise InvalidStateError("View-only mode cannot check out")
    shift = await find_active_shift(db, current_staff.id)
    if shift is None:
        raise InvalidStateError("Start a shift before checking out")

    settings = await get_pos_settings(db)
    products = await _load_products(db, payload)
    cart = _build_cart(payload, products, await _load_discounts(db, payload))

    date_key = today_key()
    records = await get_day_records(db, date_key)
    warnings: list[str] = []
    # Stock is tracked per product, across variants and discount lines
    product_ids = list(dict.fromkeys(line.product_id for line in cart.lines))
    for product_id in product_ids:
        check = evaluate_can_add(
            records.get(product_id),
            cart.quantity_of(product_id),
            0,
            settings.low_stock_threshold,
        )
        if not check.allowed:
            raise InsufficientStockError(products[product_id].name, check.available, check.needed)
        if check.warning:
            warnings.append(f"{products[product_id].name}: {check.warning}")

    verify_discount_id(
        cart,
        payload.discount_id_photo,
        payload.discount_id_skipped,
        settings.require_discount_id_photo,
    )
    change_due = verify_payment(
        payload.payment_method,
        cart.total,
        cash_received=payload.cash_received,
        gcash_ref_no=payload.gcash_ref_no,
        gcash_photo=payload.gcash_photo,
        require_gcash_photo=settings.require_gcash_photo,
    )

    customer = None
    if payload.payment_method == PaymentMethod.CHARGE:
        if payload.charge_customer_id is not None:
            customer = await db.get(ChargeCustomer, payload.charge_customer_id)
            if customer is None or not customer.is_active:
                raise NotFoundError("ChargeCustomer", str(payload.charge_customer_id))
        elif not payload.charge_customer_name:
            raise PaymentVerificationError("Charge sales need a customer")

    sale = build_sale(
        cart,
        sale_number=await next_sale_number(db, date_key),
        date_key=date_key,
        payment_method=payload.payment_method,
        cashier_id=current_staff.id,
        cashier_name=current_staff.name,
        shift_id=shift.id,
        shift_number=shift.shift_number,
    )
    if payload.payment_method == PaymentMethod.CASH:
        sale.cash_received = payload.cash_received
        sale.change_due = change_due
    elif payload.payment_method == PaymentMethod.GCASH:
        sale.gcash_ref_no = payload.gcash_ref_no
        sale.gcash_photo = payload.gcash_photo
    elif payload.payment_method == PaymentMethod.CHARGE:
        sale.charge_customer_id = customer.id if customer else None
        sale.customer_name = customer.name if customer else payload.charge_customer_name
    if cart.requires_id:
        sale.discount_id_photo = payload.discount_id_photo
        sale.discount_id_skipped = payload.discount_id_photo is None and payload.discount_id_skipped

    db.add(sale)
    if payload.payment_method == PaymentMethod.CHARGE:
        db.add(receivable_for_sale(sale))

    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        raise ConflictError("Sale number already taken, retry checkout") from e

    job = SaleDeductionJob(
        sale_id=sale.id,
        sale_number=sale.sale_number,
        date_key=date_key,
        lines=[(product_id, cart.quantity_of(product_id)) for product_id in product_ids],
        performed_by=current_staff.name,
    )
    background_tasks.add_task(run_sale_deductions, session_factory, job, broker)
    invalidate_reports("checkout")

    logger.info(
        "sale.completed",
        sale_number=sale.sale_number,
        shift_id=str(shift.id),
        payment_method=sale.payment_method,
        total=str(sale.total),
        items=cart.item_count,
    )
    return CheckoutResponse(sale=SaleRead.model_validate(sale), change_due=change_due, warnings=warnings)


@router.get("", response_model=list[SaleRead])
async def list_sales(
    date: date | None = None,
    shift_id: UUID | None = None,
    include_deleted: bool = False,
    current_staff: Staff = Depends(get_current_staff),
    db: AsyncSession = Depends(get_db),
):
    """Sales for a day (default today) or a shift. Cashiers see their own."""
    stmt = select(Sale)
    if shift_id is not None:
        stmt = stmt.where(Sale.shift_id == shift_id)
    else:
        stmt = stmt.where(Sale.date_key == (to_date_key(date) if date else today_key()))
    if not include_deleted or not current_staff.has_role(StaffRole.ADMIN):
        stmt = stmt.where(~Sale.is_deleted)
    if not current_staff.has_role(StaffRole.MANAGER):
        stmt = stmt.where(Sale.cashier_id == current_staff.id)

    result = await db.execute(stmt.order_by(Sale.created_at.desc()))
    return result.scalars().all()


async def _get_sale_or_404(db: AsyncSession, sale_id: UUID) -> Sale:
    sale = await db.get(Sale, sale_id)
    if sale is None or sale.is_deleted:
        raise NotFoundError("Sale", str(sale_id))
    return sale


@router.get("/{sale_id}", response_model=SaleRead)
async def get_sale(
    sale_id: UUID,
    current_staff: Staff = Depends(get_current_staff),
    db: AsyncSession = Depends(get_db),
):
    sale = await _get_sale_or_404(db, sale_id)
    if sale.cashier_id != current_staff.id and not current_staff.has_role(StaffRole.MANAGER):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Permission denied")
    return sale


async def _receivable_for(db: AsyncSession, sale: Sale) -> Receivable | None:
    result = await db.execute(select(Receivable).where(Receivable.sale_id == sale.id))
    return result.scalar_one_or_none()


def _append_note(sale: Sale, note: str) -> None:
    sale.audit_notes = f"{sale.audit_notes}\n{note}" if sale.audit_notes else note


@router.delete("/{sale_id}/items/{item_id}", response_model=SaleRead)
async def remove_sale_item(
    sale_id: UUID,
    item_id: UUID,
    reason: str | None = None,
    current_staff: Staff = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Admin correction: drop one line and recompute totals. Stock is not restocked."""
    sale = await _get_sale_or_404(db, sale_id)
    item = next((line for line in sale.items if line.id == item_id), None)
    if item is None:
        raise NotFoundError("SaleItem", str(item_id))
    if len(sale.items) == 1:
        raise InvalidStateError("Cannot remove the only item; delete the sale instead")

    old_values = {"subtotal": sale.subtotal, "total_discount": sale.total_discount, "total": sale.total}
    sale.items.remove(item)
    sale.recompute_totals()
    if sale.payment_method == PaymentMethod.CASH.value and sale.cash_received is not None:
        sale.change_due = sale.cash_received - sale.total

    _append_note(
        sale,
        f"Removed {item.quantity} x {item.display_name} by {current_staff.name}: {reason or 'no reason'}",
    )
    sale.last_modified_at = now_utc()
    sale.last_modified_by = current_staff.name

    receivable = await _receivable_for(db, sale)
    if receivable is not None:
        retotal(receivable, sale.total)

    await log_change(
        db,
        entity_type="SALE",
        entity_id=sale.id,
        changed_by=current_staff.name,
        action="REMOVE_ITEM",
        old_values=old_values,
        new_values={"subtotal": sale.subtotal, "total_discount": sale.total_discount, "total": sale.total},
        reason=reason,
    )
    await db.flush()
    invalidate_reports("sale_item_removed")

    logger.info(
        "sale.item_removed",
        sale_number=sale.sale_number,
        product_id=str(item.product_id),
        quantity=item.quantity,
        removed_by=current_staff.name,
    )
    return sale


@router.delete("/{sale_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_sale(
    sale_id: UUID,
    reason: str | None = None,
    current_staff: Staff = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Soft delete. A receivable with payments blocks the delete."""
    sale = await _get_sale_or_404(db, sale_id)

    receivable = await _receivable_for(db, sale)
    if receivable is not None:
        if receivable.amount_paid > 0:
            raise InvalidStateError(
                "Sale has payments recorded against its receivable",
                details={"receivable_id": str(receivable.id)},
            )
        await db.delete(receivable)

    sale.is_deleted = True
    sale.last_modified_at = now_utc()
    sale.last_modified_by = current_staff.name
    _append_note(sale, f"Deleted by {current_staff.name}: {reason or 'no reason'}")

    await log_change(
        db,
        entity_type="SALE",
        entity_id=sale.id,
        changed_by=current_staff.name,
        action="DELETE",
        old_values={"is_deleted": False},
        new_values={"is_deleted": True},
        reason=reason,
    )
    invalidate_reports("sale_deleted")

    logger.info("sale.deleted", sale_number=sale.sale_number, deleted_by=current_staff.name)
