# File: src/breadpos/models/receivable.py
"""Charge customers and the receivables their credit sales create."""

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import ForeignKey, Numeric, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from breadpos.core.db import Base
from breadpos.models.enums import ReceivableStatus
from breadpos.utils.datetime import now_utc

ZERO = Decimal("0.00")


class ChargeCustomer(Base):
    """A customer allowed to buy on credit."""

    __tablename__ = "charge_customers"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    address: Mapped[str | None] = mapped_column(String(300), nullable=True)
    tin: Mapped[str | None] = mapped_column(String(30), nullable=True)
    contact_person: Mapped[str | None] = mapped_column(String(100), nullable=True)
    mobile: Mapped[str | None] = mapped_column(String(30), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)

    is_active: Mapped[bool] = mapped_column(default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(nullable=False, default=now_utc)


class Receivable(Base):
    """Amount owed for one CHARGE sale."""

    __tablename__ = "receivables"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    sale_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("sales.id"),
        nullable=False,
        unique=True,
    )
    sale_number: Mapped[str] = mapped_column(String(20), nullable=False)
    date_key: Mapped[str] = mapped_column(String(10), nullable=False, index=True)

    customer_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("charge_customers.id"),
        nullable=True,
        index=True,
    )
    customer_name: Mapped[str] = mapped_column(String(200), nullable=False)

    total: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    amount_paid: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=ZERO)
    balance: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=ReceivableStatus.UNPAID.value,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=now_utc)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=now_utc)

    payments: Mapped[list["ReceivablePayment"]] = relationship(
        "ReceivablePayment",
        back_populates="receivable",
        cascade="all, delete-orphan",
        order_by="ReceivablePayment.created_at",
        lazy="selectin",
    )


class ReceivablePayment(Base):
    __tablename__ = "receivable_payments"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    receivable_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("receivables.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    method: Mapped[str] = mapped_column(String(20), nullable=False)
    reference: Mapped[str | None] = mapped_column(String(100), nullable=True)
    received_by: Mapped[str] = mapped_column(String(100), nullable=False)
    created_at: Mapped[datetime] = mapped_column(nullable=False, default=now_utc)

    receivable: Mapped["Receivable"] = relationship("Receivable", back_populates="payments")
