"""Receivable bookkeeping for CHARGE sales."""

from decimal import Decimal

from breadpos.core.errors import ValidationError
from breadpos.core.reconciliation import ZERO
from breadpos.models.enums import ReceivableStatus
from breadpos.models.receivable import Receivable
from breadpos.models.sale import Sale
from breadpos.utils.datetime import now_utc


def receivable_status(total: Decimal, amount_paid: Decimal) -> ReceivableStatus:
    if amount_paid <= ZERO:
        return ReceivableStatus.UNPAID
    if amount_paid >= total:
        return ReceivableStatus.PAID
    return ReceivableStatus.PARTIAL


def receivable_for_sale(sale: Sale) -> Receivable:
    """The amount owed for a CHARGE sale, nothing paid yet."""
    return Receivable(
        sale_id=sale.id,
        sale_number=sale.sale_number,
        date_key=sale.date_key,
        customer_id=sale.charge_customer_id,
        customer_name=sale.customer_name or "Unknown customer",
        total=sale.total,
        amount_paid=ZERO,
        balance=sale.total,
        status=ReceivableStatus.UNPAID.value,
    )


def apply_payment(receivable: Receivable, amount: Decimal) -> None:
    """Record ``amount`` against the balance. Overpayment is refused."""
    if amount <= ZERO:
        raise ValidationError("Payment amount must be positive", details={"amount": str(amount)})
    if amount > receivable.balance:
        raise ValidationError(
            "Payment exceeds outstanding balance",
            details={"amount": str(amount), "balance": str(receivable.balance)},
        )
    receivable.amount_paid = (receivable.amount_paid or ZERO) + amount
    receivable.balance = receivable.total - receivable.amount_paid
    receivable.status = receivable_status(receivable.total, receivable.amount_paid).value
    receivable.updated_at = now_utc()


def retotal(receivable: Receivable, new_total: Decimal) -> None:
    """Follow an admin correction of the underlying sale."""
    receivable.total = new_total
    receivable.balance = max(ZERO, new_total - (receivable.amount_paid or ZERO))
    receivable.status = receivable_status(new_total, receivable.amount_paid or ZERO).value
    receivable.updated_at = now_utc()
