# File: src/breadpos/core/checkout.py
"""Checkout gates and the conversion of a cart into a sale."""

import uuid
from decimal import Decimal

from breadpos.core.cart import Cart
from breadpos.core.errors import PaymentVerificationError
from breadpos.core.reconciliation import ZERO
from breadpos.models.enums import PaymentMethod
from breadpos.models.sale import Sale, SaleItem


def verify_discount_id(cart: Cart, photo: str | None, skipped: bool, required: bool) -> None:
    """Senior/PWD style discounts need an ID photo, or the cashier must say it was skipped."""
    if not cart.requires_id or not required:
        return
    if photo or skipped:
        return
    names = sorted({line.discount.name for line in cart.lines if line.discount and line.discount.requires_id})
    raise PaymentVerificationError(
        "Discount requires a photo of the customer's ID",
        details={"discounts": names},
    )


def verify_payment(
    method: PaymentMethod,
    total: Decimal,
    cash_received: Decimal | None = None,
    gcash_ref_no: str | None = None,
    gcash_photo: str | None = None,
    require_gcash_photo: bool = True,
) -> Decimal | None:
    """Check the payment proof for ``method``. Returns change due for cash."""
    if method == PaymentMethod.CASH:
        if cash_received is None:
            raise PaymentVerificationError("Cash received is required")
        if cash_received < total:
            raise PaymentVerificationError(
                "Cash received is less than the total",
                details={"total": str(total), "cash_received": str(cash_received)},
            )
        return cash_received - total

    if method == PaymentMethod.GCASH:
        if not (gcash_ref_no or "").strip():
            raise PaymentVerificationError("GCash reference number is required")
        if require_gcash_photo and not gcash_photo:
            raise PaymentVerificationError("GCash payment screenshot is required")

    return None


def build_sale(
    cart: Cart,
    sale_number: str,
    date_key: str,
    payment_method: PaymentMethod,
    cashier_id: uuid.UUID,
    cashier_name: str,
    shift_id: uuid.UUID | None = None,
    shift_number: int | None = None,
) -> Sale:
    """A sale whose lines and totals are exactly the cart's."""
    sale = Sale(
        id=uuid.uuid4(),
        sale_number=sale_number,
        date_key=date_key,
        shift_id=shift_id,
        shift_number=shift_number,
        cashier_id=cashier_id,
        cashier_name=cashier_name,
        payment_method=payment_method.value,
        subtotal=cart.subtotal,
        total_discount=cart.total_discount,
        total=cart.total,
        discount_id_skipped=False,
        source="pos",
        is_deleted=False,
    )
    for line_no, line in enumerate(cart.lines, start=1):
        sale.items.append(
            SaleItem(
                line_no=line_no,
                product_id=line.product_id,
                product_name=line.product_name,
                category=line.category,
                main_category=line.main_category,
                variant_index=line.variant_index,
                variant_name=line.variant_name,
                quantity=line.quantity,
                original_price=line.original_price,
                discount_id=line.discount.id if line.discount else None,
                discount_name=line.discount.name if line.discount else None,
                discount_percent=line.discount.percent if line.discount else ZERO,
                discount_amount=line.discount_amount,
                unit_price=line.unit_price,
                line_total=line.line_total,
            )
        )
    return sale
