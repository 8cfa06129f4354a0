"""Factory classes for creating test objects."""

import uuid
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from breadpos.core.security import hash_pin
from breadpos.models import (
    ChargeCustomer,
    DailyInventory,
    DiscountPreset,
    Material,
    PosSettings,
    Product,
    Sale,
    SaleItem,
    Shift,
    Staff,
)
from breadpos.models.enums import PaymentMethod, ShiftStatus, StaffRole
from breadpos.models.settings import POS_SETTINGS_ID
from breadpos.utils.datetime import now_utc, today_key

DEFAULT_PIN = "1234"


async def _save(session: AsyncSession, obj):
    session.add(obj)
    await session.commit()
    await session.refresh(obj)
    return obj


class StaffFactory:
    """Factory for creating Staff objects."""

    @staticmethod
    async def create(
        session: AsyncSession,
        name: str = "Test Staff",
        pin: str = DEFAULT_PIN,
        role: str = StaffRole.STAFF.value,
        is_active: bool = True,
        **kwargs,
    ) -> Staff:
        staff = Staff(
            id=kwargs.get("id", uuid.uuid4()),
            name=name,
            hashed_pin=kwargs.get("hashed_pin") or hash_pin(pin),
            role=role,
            is_active=is_active,
        )
        return await _save(session, staff)


class ProductFactory:
    """Factory for creating Product objects."""

    @staticmethod
    async def create(
        session: AsyncSession,
        name: str = "Pandesal",
        price: Optional[Decimal] = Decimal("5.00"),
        category: Optional[str] = "Bread",
        cost: Optional[Decimal] = None,
        variants: Optional[list[dict[str, Any]]] = None,
        recipe: Optional[dict[str, Any]] = None,
        is_active: bool = True,
        **kwargs,
    ) -> Product:
        product = Product(
            id=kwargs.get("id", uuid.uuid4()),
            name=name,
            category=category,
            main_category=kwargs.get("main_category", "Bakery"),
            price=price,
            cost=cost,
            markup_percent=kwargs.get("markup_percent"),
            variants=variants or [],
            recipe=recipe,
            is_active=is_active,
        )
        return await _save(session, product)


class DailyInventoryFactory:
    """Factory for a product's stock record for one day."""

    @staticmethod
    async def create(
        session: AsyncSession,
        product: Product,
        total_available: int = 20,
        sold_qty: int = 0,
        reserved_qty: int = 0,
        cancelled_qty: int = 0,
        date_key: Optional[str] = None,
        **kwargs,
    ) -> DailyInventory:
        record = DailyInventory(
            date_key=date_key or today_key(),
            product_id=product.id,
            product_name=product.name,
            category=product.category,
            carryover_qty=kwargs.get("carryover_qty", 0),
            new_production_qty=kwargs.get("new_production_qty", total_available),
            total_available=total_available,
            reserved_qty=reserved_qty,
            sold_qty=sold_qty,
            cancelled_qty=cancelled_qty,
        )
        return await _save(session, record)


class ShiftFactory:
    """Factory for creating Shift objects."""

    @staticmethod
    async def create(
        session: AsyncSession,
        staff: Staff,
        starting_cash: Decimal = Decimal("500.00"),
        status: str = ShiftStatus.ACTIVE.value,
        shift_number: int = 1,
        date_key: Optional[str] = None,
        **kwargs,
    ) -> Shift:
        shift = Shift(
            id=kwargs.get("id", uuid.uuid4()),
            staff_id=staff.id,
            staff_name=staff.name,
            role=staff.role,
            date_key=date_key or today_key(),
            shift_number=shift_number,
            status=status,
            start_time=kwargs.get("start_time", now_utc()),
            starting_cash=starting_cash,
        )
        for field in (
            "end_time",
            "actual_cash",
            "expected_cash",
            "cash_sales",
            "gcash_sales",
            "other_sales",
            "total_sales",
            "transaction_count",
            "total_expenses",
            "variance",
            "balance_status",
        ):
            if field in kwargs:
                setattr(shift, field, kwargs[field])
        return await _save(session, shift)


class SaleFactory:
    """Factory for a committed sale with one line per (product, quantity) pair."""

    @staticmethod
    async def create(
        session: AsyncSession,
        cashier: Staff,
        lines: list[tuple[Product, int]],
        payment_method: str = PaymentMethod.CASH.value,
        shift: Optional[Shift] = None,
        sale_number: Optional[str] = None,
        date_key: Optional[str] = None,
        **kwargs,
    ) -> Sale:
        sale = Sale(
            id=uuid.uuid4(),
            sale_number=sale_number or f"S-TEST-{uuid.uuid4().hex[:8]}",
            date_key=date_key or today_key(),
            shift_id=shift.id if shift else None,
            shift_number=shift.shift_number if shift else None,
            cashier_id=cashier.id,
            cashier_name=cashier.name,
            payment_method=payment_method,
            customer_name=kwargs.get("customer_name"),
            charge_customer_id=kwargs.get("charge_customer_id"),
            is_deleted=kwargs.get("is_deleted", False),
        )
        for line_no, (product, quantity) in enumerate(lines, start=1):
            price = product.unit_price()
            sale.items.append(
                SaleItem(
                    line_no=line_no,
                    product_id=product.id,
                    product_name=product.name,
                    category=product.category,
                    quantity=quantity,
                    original_price=price,
                    unit_price=price,
                    discount_percent=Decimal("0"),
                    discount_amount=Decimal("0.00"),
                    line_total=price * quantity,
                )
            )
        sale.recompute_totals()
        return await _save(session, sale)


class DiscountPresetFactory:
    @staticmethod
    async def create(
        session: AsyncSession,
        id: str = "senior",
        name: str = "Senior Citizen",
        percent: Decimal = Decimal("20"),
        requires_id: bool = True,
        **kwargs,
    ) -> DiscountPreset:
        preset = DiscountPreset(
            id=id,
            name=name,
            percent=percent,
            icon=kwargs.get("icon"),
            requires_id=requires_id,
            is_active=kwargs.get("is_active", True),
            sort_order=kwargs.get("sort_order", 0),
        )
        return await _save(session, preset)


class PosSettingsFactory:
    @staticmethod
    async def create(
        session: AsyncSession,
        require_gcash_photo: bool = True,
        require_discount_id_photo: bool = True,
        low_stock_threshold: int = 5,
    ) -> PosSettings:
        settings = PosSettings(
            id=POS_SETTINGS_ID,
            require_gcash_photo=require_gcash_photo,
            require_discount_id_photo=require_discount_id_photo,
            low_stock_threshold=low_stock_threshold,
        )
        return await _save(session, settings)


class MaterialFactory:
    @staticmethod
    async def create(
        session: AsyncSession,
        name: str = "Bread Flour",
        kind: str = "INGREDIENT",
        current_stock: Decimal = Decimal("10000"),
        reorder_level: Decimal = Decimal("1000"),
        unit: str = "g",
        **kwargs,
    ) -> Material:
        material = Material(
            id=kwargs.get("id", uuid.uuid4()),
            name=name,
            kind=kind,
            unit=unit,
            current_stock=current_stock,
            reorder_level=reorder_level,
            cost_per_unit=kwargs.get("cost_per_unit"),
        )
        return await _save(session, material)


class ChargeCustomerFactory:
    @staticmethod
    async def create(
        session: AsyncSession,
        name: str = "Barangay Hall",
        is_active: bool = True,
        **kwargs,
    ) -> ChargeCustomer:
        customer = ChargeCustomer(
            id=kwargs.get("id", uuid.uuid4()),
            name=name,
            contact_person=kwargs.get("contact_person"),
            mobile=kwargs.get("mobile"),
            is_active=is_active,
        )
        return await _save(session, customer)
