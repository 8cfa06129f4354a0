# File: tests/test_checkout_api.py
"""Tests for POS checkout and admin sale corrections."""

import re
import uuid
from decimal import Decimal

import pytest
from sqlalchemy import select

from breadpos.models import Receivable, Sale, SaleItem, StockMovement
from tests.factories import (
    ChargeCustomerFactory,
    DailyInventoryFactory,
    DiscountPresetFactory,
    PosSettingsFactory,
    ProductFactory,
    SaleFactory,
    ShiftFactory,
    StaffFactory,
)


@pytest.fixture
async def catalog(db_session):
    pandesal = await ProductFactory.create(db_session, name="Pandesal", price=Decimal("5.00"))
    ensaymada = await ProductFactory.create(
        db_session, name="Ensaymada", price=Decimal("35.00"), category="Pastry"
    )
    pandesal_stock = await DailyInventoryFactory.create(db_session, pandesal, total_available=100)
    ensaymada_stock = await DailyInventoryFactory.create(db_session, ensaymada, total_available=30)
    return {
        "pandesal": pandesal,
        "ensaymada": ensaymada,
        "pandesal_stock": pandesal_stock,
        "ensaymada_stock": ensaymada_stock,
    }


@pytest.fixture
async def open_shift(client, db_session):
    return await ShiftFactory.create(db_session, client.test_user)


def _cart(catalog, **extra):
    payload = {
        "items": [
            {"product_id": str(catalog["pandesal"].id), "quantity": 2},
            {"product_id": str(catalog["ensaymada"].id), "quantity": 1},
        ],
        "payment_method": "CASH",
        "cash_received": "100.00",
    }
    payload.update(extra)
    return payload


class TestCashCheckout:
    async def test_cash_sale_recorded_with_change(self, client, catalog, open_shift):
        response = await client.post("/sales", json=_cart(catalog))

        assert response.status_code == 201
        data = response.json()
        sale = data["sale"]
        assert re.fullmatch(r"S-\d{8}-001", sale["sale_number"])
        assert Decimal(sale["subtotal"]) == Decimal("45.00")
        assert Decimal(sale["total"]) == Decimal("45.00")
        assert Decimal(data["change_due"]) == Decimal("55.00")
        assert sale["shift_id"] == str(open_shift.id)
        assert sale["shift_number"] == 1
        assert [item["line_no"] for item in sale["items"]] == [1, 2]

    async def test_sale_numbers_are_sequential(self, client, catalog, open_shift):
        first = await client.post("/sales", json=_cart(catalog))
        second = await client.post("/sales", json=_cart(catalog))

        assert first.json()["sale"]["sale_number"].endswith("-001")
        assert second.json()["sale"]["sale_number"].endswith("-002")

    async def test_stock_deducted_after_checkout(self, client, db_session, catalog, open_shift):
        response = await client.post("/sales", json=_cart(catalog))
        assert response.status_code == 201

        await db_session.refresh(catalog["pandesal_stock"])
        await db_session.refresh(catalog["ensaymada_stock"])
        assert catalog["pandesal_stock"].sold_qty == 2
        assert catalog["ensaymada_stock"].sold_qty == 1

        sale_id = uuid.UUID(response.json()["sale"]["id"])
        movements = (
            await db_session.execute(select(StockMovement).where(StockMovement.sale_id == sale_id))
        ).scalars().all()
        assert sorted(m.quantity for m in movements) == [-2, -1]

    async def test_prices_come_from_catalog(self, client, catalog, open_shift):
        payload = _cart(catalog)
        payload["items"][0]["price"] = "0.01"

        response = await client.post("/sales", json=payload)

        assert Decimal(response.json()["sale"]["items"][0]["original_price"]) == Decimal("5.00")

    async def test_cash_short_of_total(self, client, catalog, open_shift):
        response = await client.post("/sales", json=_cart(catalog, cash_received="40.00"))

        assert response.status_code == 422
        assert response.json()["code"] == "PAYMENT_VERIFICATION_FAILED"

    async def test_unknown_product(self, client, catalog, open_shift):
        payload = _cart(catalog)
        payload["items"].append({"product_id": str(uuid.uuid4()), "quantity": 1})

        response = await client.post("/sales", json=payload)

        assert response.status_code == 404


class TestCheckoutGates:
    async def test_requires_active_shift(self, client, catalog):
        response = await client.post("/sales", json=_cart(catalog))

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_STATE"

    async def test_view_only_cannot_check_out(self, manager_client, catalog):
        entered = await manager_client.post("/shifts/view-only")
        assert entered.status_code == 200

        response = await manager_client.post("/sales", json=_cart(catalog))

        assert response.status_code == 400
        assert "View-only" in response.json()["message"]

    async def test_insufficient_stock_blocks_sale(self, client, db_session, open_shift):
        product = await ProductFactory.create(db_session, name="Ube Cake", price=Decimal("450.00"))
        await DailyInventoryFactory.create(db_session, product, total_available=20, sold_qty=18)

        response = await client.post(
            "/sales",
            json={
                "items": [{"product_id": str(product.id), "quantity": 3}],
                "payment_method": "CASH",
                "cash_received": "2000.00",
            },
        )

        assert response.status_code == 409
        body = response.json()
        assert body["code"] == "INSUFFICIENT_STOCK"
        assert body["details"] == {"product": "Ube Cake", "available": 2, "needed": 3}
        assert "only 2 available (need 3)" in body["message"]

    async def test_quantity_across_variants_counts_against_one_record(self, client, db_session, open_shift):
        product = await ProductFactory.create(
            db_session,
            name="Cheese Roll",
            price=None,
            variants=[{"name": "Single", "price": "15.00"}, {"name": "Box of 6", "price": "85.00"}],
        )
        await DailyInventoryFactory.create(db_session, product, total_available=3)

        response = await client.post(
            "/sales",
            json={
                "items": [
                    {"product_id": str(product.id), "variant_index": 0, "quantity": 2},
                    {"product_id": str(product.id), "variant_index": 1, "quantity": 2},
                ],
                "payment_method": "CASH",
                "cash_received": "500.00",
            },
        )

        assert response.status_code == 409
        assert response.json()["details"]["needed"] == 4

    async def test_low_stock_and_untracked_warnings(self, client, db_session, open_shift):
        low = await ProductFactory.create(db_session, name="Spanish Bread", price=Decimal("10.00"))
        untracked = await ProductFactory.create(db_session, name="Bottled Water", price=Decimal("20.00"))
        await DailyInventoryFactory.create(db_session, low, total_available=4)

        response = await client.post(
            "/sales",
            json={
                "items": [
                    {"product_id": str(low.id), "quantity": 1},
                    {"product_id": str(untracked.id), "quantity": 1},
                ],
                "payment_method": "CASH",
                "cash_received": "30.00",
            },
        )

        assert response.status_code == 201
        warnings = response.json()["warnings"]
        assert "Spanish Bread: Only 4 left" in warnings
        assert any(w.startswith("Bottled Water:") for w in warnings)


class TestGcash:
    async def test_reference_required(self, client, catalog, open_shift):
        response = await client.post("/sales", json=_cart(catalog, payment_method="GCASH", cash_received=None))

        assert response.status_code == 422
        assert "reference" in response.json()["message"]

    async def test_screenshot_required_by_default(self, client, catalog, open_shift):
        response = await client.post(
            "/sales",
            json=_cart(catalog, payment_method="GCASH", cash_received=None, gcash_ref_no="1234567890"),
        )

        assert response.status_code == 422
        assert "screenshot" in response.json()["message"]

    async def test_screenshot_optional_when_setting_off(self, client, db_session, catalog, open_shift):
        await PosSettingsFactory.create(db_session, require_gcash_photo=False)

        response = await client.post(
            "/sales",
            json=_cart(catalog, payment_method="GCASH", cash_received=None, gcash_ref_no="1234567890"),
        )

        assert response.status_code == 201
        sale = response.json()["sale"]
        assert sale["gcash_ref_no"] == "1234567890"
        assert sale["change_due"] is None


class TestDiscounts:
    async def test_senior_discount_needs_id_photo(self, client, db_session, catalog, open_shift):
        await DiscountPresetFactory.create(db_session)
        payload = _cart(catalog)
        payload["items"][1]["discount_id"] = "senior"

        response = await client.post("/sales", json=payload)

        assert response.status_code == 422
        assert response.json()["details"]["discounts"] == ["Senior Citizen"]

    async def test_skipped_id_capture_is_recorded(self, client, db_session, catalog, open_shift):
        await DiscountPresetFactory.create(db_session)
        payload = _cart(catalog, discount_id_skipped=True)
        payload["items"][1]["discount_id"] = "senior"

        response = await client.post("/sales", json=payload)

        assert response.status_code == 201
        sale = response.json()["sale"]
        assert sale["discount_id_skipped"] is True
        discounted = sale["items"][1]
        assert Decimal(discounted["discount_amount"]) == Decimal("7.00")
        assert Decimal(discounted["line_total"]) == Decimal("28.00")
        assert Decimal(sale["total_discount"]) == Decimal("7.00")
        assert Decimal(sale["total"]) == Decimal("38.00")

    async def test_custom_discount(self, client, catalog, open_shift):
        payload = _cart(catalog)
        payload["items"][0].update(
            {"discount_id": "custom", "custom_discount_name": "Suki", "custom_discount_percent": "10"}
        )

        response = await client.post("/sales", json=payload)

        assert response.status_code == 201
        line = response.json()["sale"]["items"][0]
        assert line["discount_name"] == "Suki"
        assert Decimal(line["unit_price"]) == Decimal("4.50")

    async def test_custom_discount_needs_percent(self, client, catalog, open_shift):
        payload = _cart(catalog)
        payload["items"][0]["discount_id"] = "custom"

        response = await client.post("/sales", json=payload)

        assert response.status_code == 422

    async def test_inactive_discount_rejected(self, client, db_session, catalog, open_shift):
        await DiscountPresetFactory.create(db_session, id="promo", name="Promo", requires_id=False, is_active=False)
        payload = _cart(catalog)
        payload["items"][0]["discount_id"] = "promo"

        response = await client.post("/sales", json=payload)

        assert response.status_code == 404


class TestChargeSales:
    async def test_charge_creates_receivable(self, client, db_session, catalog, open_shift):
        customer = await ChargeCustomerFactory.create(db_session)

        response = await client.post(
            "/sales",
            json=_cart(catalog, payment_method="CHARGE", cash_received=None, charge_customer_id=str(customer.id)),
        )

        assert response.status_code == 201
        sale_id = uuid.UUID(response.json()["sale"]["id"])
        receivable = (
            await db_session.execute(select(Receivable).where(Receivable.sale_id == sale_id))
        ).scalar_one()
        assert receivable.customer_name == "Barangay Hall"
        assert receivable.balance == Decimal("45.00")
        assert receivable.status == "UNPAID"

    async def test_charge_needs_customer(self, client, catalog, open_shift):
        response = await client.post("/sales", json=_cart(catalog, payment_method="CHARGE", cash_received=None))

        assert response.status_code == 422


class TestSaleHistory:
    async def test_cashier_sees_only_own_sales(self, client, db_session, catalog, open_shift):
        other = await ShiftFactory.create(db_session, client.test_user, status="COMPLETED", shift_number=2)
        await SaleFactory.create(db_session, client.test_user, [(catalog["pandesal"], 1)], shift=other)

        colleague = await StaffFactory.create(db_session, name="Other Cashier")
        await SaleFactory.create(db_session, colleague, [(catalog["pandesal"], 1)])

        response = await client.get("/sales")

        assert response.status_code == 200
        assert [sale["cashier_name"] for sale in response.json()] == ["Test Cashier"]

    async def test_manager_sees_shift_sales(self, manager_client, db_session, catalog):
        cashier_shift = await ShiftFactory.create(db_session, manager_client.test_user)
        await SaleFactory.create(db_session, manager_client.test_user, [(catalog["pandesal"], 3)], shift=cashier_shift)

        response = await manager_client.get("/sales", params={"shift_id": str(cashier_shift.id)})

        assert len(response.json()) == 1


class TestAdminCorrections:
    async def test_remove_item_recomputes_totals(self, admin_client, db_session, catalog):
        sale = await SaleFactory.create(
            db_session,
            admin_client.test_user,
            [(catalog["pandesal"], 2), (catalog["ensaymada"], 1)],
        )
        item = next(i for i in sale.items if i.product_name == "Ensaymada")

        response = await admin_client.delete(
            f"/sales/{sale.id}/items/{item.id}", params={"reason": "Rang up twice"}
        )

        assert response.status_code == 200
        data = response.json()
        assert Decimal(data["total"]) == Decimal("10.00")
        assert "Rang up twice" in data["audit_notes"]
        # No restock on admin correction
        await db_session.refresh(catalog["ensaymada_stock"])
        assert catalog["ensaymada_stock"].sold_qty == 0

    async def test_cannot_remove_only_item(self, admin_client, db_session, catalog):
        sale = await SaleFactory.create(db_session, admin_client.test_user, [(catalog["pandesal"], 2)])

        response = await admin_client.delete(f"/sales/{sale.id}/items/{sale.items[0].id}")

        assert response.status_code == 400

    async def test_delete_sale(self, admin_client, db_session, catalog):
        sale = await SaleFactory.create(db_session, admin_client.test_user, [(catalog["pandesal"], 2)])

        response = await admin_client.delete(f"/sales/{sale.id}", params={"reason": "Test sale"})

        assert response.status_code == 204
        await db_session.refresh(sale)
        assert sale.is_deleted
        assert (await admin_client.get(f"/sales/{sale.id}")).status_code == 404

    async def test_delete_blocked_by_receivable_payment(self, admin_client, db_session, catalog):
        sale = await SaleFactory.create(
            db_session,
            admin_client.test_user,
            [(catalog["pandesal"], 2)],
            payment_method="CHARGE",
            customer_name="Barangay Hall",
        )
        db_session.add(
            Receivable(
                sale_id=sale.id,
                sale_number=sale.sale_number,
                date_key=sale.date_key,
                customer_name="Barangay Hall",
                total=sale.total,
                amount_paid=Decimal("5.00"),
                balance=sale.total - Decimal("5.00"),
                status="PARTIAL",
            )
        )
        await db_session.commit()

        response = await admin_client.delete(f"/sales/{sale.id}")

        assert response.status_code == 400
        await db_session.refresh(sale)
        assert not sale.is_deleted

    async def test_cashier_cannot_delete(self, client, db_session, catalog):
        sale = await SaleFactory.create(db_session, client.test_user, [(catalog["pandesal"], 1)])

        response = await client.delete(f"/sales/{sale.id}")

        assert response.status_code == 403
        still_there = await db_session.get(Sale, sale.id, populate_existing=True)
        assert not still_there.is_deleted


class TestSaleTotals:
    def test_totals_for_lines_not_yet_flushed(self):
        sale = Sale(sale_number="S-20250301-001", date_key="2025-03-01", payment_method="CASH")
        sale.items.append(
            SaleItem(
                product_id=uuid.uuid4(),
                product_name="Pandesal",
                quantity=4,
                original_price=Decimal("5.00"),
                unit_price=Decimal("5.00"),
                line_total=Decimal("20.00"),
            )
        )
        sale.items.append(
            SaleItem(
                product_id=uuid.uuid4(),
                product_name="Ensaymada",
                quantity=2,
                original_price=Decimal("35.00"),
                discount_percent=Decimal("20"),
                discount_amount=Decimal("7.00"),
                unit_price=Decimal("28.00"),
                line_total=Decimal("56.00"),
            )
        )

        sale.recompute_totals()

        assert sale.subtotal == Decimal("90.00")
        assert sale.total_discount == Decimal("14.00")
        assert sale.total == Decimal("76.00")
