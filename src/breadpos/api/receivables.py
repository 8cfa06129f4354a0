# File: src/breadpos/api/receivables.py
"""Charge customer and receivable endpoints."""

from collections import defaultdict
from datetime import timedelta
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from breadpos.api.auth import get_current_staff
from breadpos.api.auth_helpers import require_manager
from breadpos.core.db import get_db
from breadpos.core.errors import ConflictError, NotFoundError
from breadpos.core.logging import get_logger
from breadpos.core.reconciliation import ZERO
from breadpos.core.receivables import apply_payment, receivable_for_sale
from breadpos.models import ChargeCustomer, Receivable, ReceivablePayment, Sale, Staff
from breadpos.models.enums import PaymentMethod, ReceivableStatus
from breadpos.models.receivable_schemas import (
    ChargeCustomerCreate,
    ChargeCustomerRead,
    ChargeCustomerUpdate,
    CustomerBalance,
    PaymentCreate,
    ReceivableDashboard,
    ReceivableRead,
    SyncResult,
)
from breadpos.utils.datetime import now_utc

logger = get_logger(__name__)

router = APIRouter(tags=["receivables"])


@router.get("/customers", response_model=list[ChargeCustomerRead])
async def list_customers(
    include_inactive: bool = False,
    current_staff: Staff = Depends(get_current_staff),
    db: AsyncSession = Depends(get_db),
):
    stmt = select(ChargeCustomer).order_by(ChargeCustomer.name)
    if not include_inactive:
        stmt = stmt.where(ChargeCustomer.is_active)
    result = await db.execute(stmt)
    return result.scalars().all()


@router.post("/customers", response_model=ChargeCustomerRead, status_code=status.HTTP_201_CREATED)
async def create_customer(
    payload: ChargeCustomerCreate,
    current_staff: Staff = Depends(require_manager),
    db: AsyncSession = Depends(get_db),
):
    existing = await db.execute(select(ChargeCustomer).where(ChargeCustomer.name == payload.name))
    if existing.scalar_one_or_none():
        raise ConflictError("Customer name already exists", details={"name": payload.name})

    customer = ChargeCustomer(**payload.model_dump())
    db.add(customer)
    await db.flush()
    await db.refresh(customer)

    logger.info("customer.created", customer_id=str(customer.id), created_by=current_staff.name)
    return customer


@router.patch("/customers/{customer_id}", response_model=ChargeCustomerRead)
async def update_customer(
    customer_id: UUID,
    patch: ChargeCustomerUpdate,
    current_staff: Staff = Depends(require_manager),
    db: AsyncSession = Depends(get_db),
):
    customer = await db.get(ChargeCustomer, customer_id)
    if customer is None:
        raise NotFoundError("ChargeCustomer", str(customer_id))

    for field, value in patch.model_dump(exclude_unset=True).items():
        setattr(customer, field, value)
    await db.flush()

    logger.info("customer.updated", customer_id=str(customer.id), updated_by=current_staff.name)
    return customer


@router.get("/receivables", response_model=list[ReceivableRead])
async def list_receivables(
    status_filter: ReceivableStatus | None = Query(None, alias="status"),
    customer_id: UUID | None = None,
    current_staff: Staff = Depends(require_manager),
    db: AsyncSession = Depends(get_db),
):
    stmt = select(Receivable)
    if status_filter is not None:
        stmt = stmt.where(Receivable.status == status_filter.value)
    if customer_id is not None:
        stmt = stmt.where(Receivable.customer_id == customer_id)
    result = await db.execute(stmt.order_by(Receivable.created_at.desc()))
    return result.scalars().all()


@router.post("/receivables/sync", response_model=SyncResult)
async def sync_receivables(
    current_staff: Staff = Depends(require_manager),
    db: AsyncSession = Depends(get_db),
):
    """Create receivables for CHARGE sales that have none."""
    stmt = (
        select(Sale)
        .outerjoin(Receivable, Receivable.sale_id == Sale.id)
        .where(
            Sale.payment_method == PaymentMethod.CHARGE.value,
            ~Sale.is_deleted,
            Receivable.id.is_(None),
        )
    )
    result = await db.execute(stmt)
    sales = result.scalars().all()
    for sale in sales:
        db.add(receivable_for_sale(sale))
    await db.flush()

    logger.info("receivables.synced", created=len(sales), synced_by=current_staff.name)
    return SyncResult(created=len(sales))


@router.get("/receivables/dashboard", response_model=ReceivableDashboard)
async def receivables_dashboard(
    current_staff: Staff = Depends(require_manager),
    db: AsyncSession = Depends(get_db),
):
    """Outstanding balances, ageing and per-customer totals."""
    stmt = select(Receivable).where(Receivable.status != ReceivableStatus.PAID.value)
    result = await db.execute(stmt)
    open_receivables = result.scalars().all()

    now = now_utc()
    overdue_7 = ZERO
    overdue_30 = ZERO
    per_customer: dict[tuple, list[Receivable]] = defaultdict(list)
    for receivable in open_receivables:
        age = now - receivable.created_at
        if age > timedelta(days=7):
            overdue_7 += receivable.balance
        if age > timedelta(days=30):
            overdue_30 += receivable.balance
        per_customer[(receivable.customer_id, receivable.customer_name)].append(receivable)

    by_customer = sorted(
        (
            CustomerBalance(
                customer_id=customer_id,
                customer_name=name,
                balance=sum((r.balance for r in rows), ZERO),
                receivable_count=len(rows),
            )
            for (customer_id, name), rows in per_customer.items()
        ),
        key=lambda row: row.balance,
        reverse=True,
    )
    return ReceivableDashboard(
        outstanding_total=sum((r.balance for r in open_receivables), ZERO),
        unpaid_count=len(open_receivables),
        overdue_7_days=overdue_7,
        overdue_30_days=overdue_30,
        by_customer=by_customer,
    )


@router.get("/receivables/{receivable_id}", response_model=ReceivableRead)
async def get_receivable(
    receivable_id: UUID,
    current_staff: Staff = Depends(require_manager),
    db: AsyncSession = Depends(get_db),
):
    receivable = await db.get(Receivable, receivable_id)
    if receivable is None:
        raise NotFoundError("Receivable", str(receivable_id))
    return receivable


@router.post("/receivables/{receivable_id}/payments", response_model=ReceivableRead)
async def record_payment(
    receivable_id: UUID,
    payload: PaymentCreate,
    current_staff: Staff = Depends(get_current_staff),
    db: AsyncSession = Depends(get_db),
):
    """Collect against a receivable. Amount must not exceed the balance."""
    receivable = await db.get(Receivable, receivable_id)
    if receivable is None:
        raise NotFoundError("Receivable", str(receivable_id))

    apply_payment(receivable, payload.amount)
    receivable.payments.append(
        ReceivablePayment(
            amount=payload.amount,
            method=payload.method.value,
            reference=payload.reference,
            received_by=current_staff.name,
            created_at=now_utc(),
        )
    )
    await db.flush()

    logger.info(
        "receivable.payment_recorded",
        receivable_id=str(receivable.id),
        sale_number=receivable.sale_number,
        amount=str(payload.amount),
        balance=str(receivable.balance),
        status=receivable.status,
        received_by=current_staff.name,
    )
    return receivable
