# File: src/breadpos/core/reconciliation.py
"""Cash and stock reconciliation formulas.

Everything here is pure arithmetic over values already loaded from the
database, so the API layer and the tests share one definition of each rule.
"""

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from breadpos.models.enums import BalanceStatus, PaymentMethod

ZERO = Decimal("0.00")
CENTS = Decimal("0.01")

# Drawer differences under one peso are rounding noise
BALANCE_TOLERANCE = Decimal("1")


def money(value: Decimal | int | str) -> Decimal:
    """Quantize to centavos, rounding half up."""
    return Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)


def sellable_quantity(total: int, reserved: int, sold: int, cancelled: int) -> int:
    """Units still available: total - reserved - sold + cancelled, never below zero."""
    return max(0, (total or 0) - (reserved or 0) - (sold or 0) + (cancelled or 0))


def classify_balance(variance: Decimal) -> BalanceStatus:
    """BALANCED when |variance| < 1, OVER when positive, SHORT otherwise."""
    if abs(variance) < BALANCE_TOLERANCE:
        return BalanceStatus.BALANCED
    if variance > 0:
        return BalanceStatus.OVER
    return BalanceStatus.SHORT


@dataclass
class SalesPartition:
    """Shift sales split by where the money went."""

    cash: Decimal = ZERO
    gcash: Decimal = ZERO
    other: Decimal = ZERO
    count: int = 0

    @property
    def total(self) -> Decimal:
        return self.cash + self.gcash + self.other


def partition_sales(sales: Iterable[tuple[str, Decimal]]) -> SalesPartition:
    """Partition ``(payment_method, total)`` pairs into cash, GCash and other."""
    partition = SalesPartition()
    for method, total in sales:
        amount = Decimal(total or 0)
        if method == PaymentMethod.CASH.value:
            partition.cash += amount
        elif method == PaymentMethod.GCASH.value:
            partition.gcash += amount
        else:
            partition.other += amount
        partition.count += 1
    return partition


@dataclass
class ShiftCashResult:
    expected_cash: Decimal
    total_expenses: Decimal
    adjusted_expected: Decimal
    variance: Decimal
    balance_status: BalanceStatus
    sales: SalesPartition = field(default_factory=SalesPartition)


def reconcile_shift_cash(
    starting_cash: Decimal,
    sales: SalesPartition,
    actual_cash: Decimal,
    expenses: Iterable[Decimal] = (),
) -> ShiftCashResult:
    """
    End-of-shift drawer math.

    expected = starting + cash sales (GCash, card and charge never reach the drawer)
    adjusted = expected - sum(expenses)
    variance = actual - adjusted
    """
    expected = money(starting_cash + sales.cash)
    total_expenses = money(sum((Decimal(e) for e in expenses), ZERO))
    adjusted = expected - total_expenses
    variance = money(Decimal(actual_cash) - adjusted)
    return ShiftCashResult(
        expected_cash=expected,
        total_expenses=total_expenses,
        adjusted_expected=adjusted,
        variance=variance,
        balance_status=classify_balance(variance),
        sales=sales,
    )


def end_expected_quantity(start_qty: int, sold_qty: int) -> int:
    """Units that should be on the shelf at shift end."""
    return max(0, start_qty - sold_qty)


def shortage_value(expected_qty: int, counted_qty: int, unit_price: Decimal) -> Decimal:
    """Value of missing units; zero when the count meets or beats expectation."""
    missing = max(0, expected_qty - counted_qty)
    return money(unit_price * missing)
