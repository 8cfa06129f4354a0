"""Tests for charge customers, receivables and payment collection."""

from datetime import timedelta
from decimal import Decimal

import pytest

from breadpos.core.errors import ValidationError
from breadpos.core.receivables import apply_payment, receivable_for_sale, retotal
from breadpos.models import Receivable, Sale
from breadpos.utils.datetime import now_utc
from tests.factories import ChargeCustomerFactory, ProductFactory, SaleFactory


def _receivable(total="100.00") -> Receivable:
    sale = Sale(sale_number="S-20250301-001", date_key="2025-03-01", total=Decimal(total), customer_name="Barangay Hall")
    return receivable_for_sale(sale)


async def _charge_sale(db_session, cashier, customer, price="250.00", created_at=None) -> Receivable:
    product = await ProductFactory.create(db_session, name=f"Cake {price}", price=Decimal(price))
    sale = await SaleFactory.create(
        db_session,
        cashier,
        [(product, 1)],
        payment_method="CHARGE",
        customer_name=customer.name,
        charge_customer_id=customer.id,
    )
    receivable = receivable_for_sale(sale)
    if created_at is not None:
        receivable.created_at = created_at
    db_session.add(receivable)
    await db_session.commit()
    await db_session.refresh(receivable)
    return receivable


class TestApplyPayment:
    def test_new_receivable_is_unpaid(self):
        receivable = _receivable()

        assert receivable.status == "UNPAID"
        assert receivable.balance == Decimal("100.00")

    def test_partial_then_full_payment(self):
        receivable = _receivable()

        apply_payment(receivable, Decimal("40.00"))
        assert receivable.status == "PARTIAL"
        assert receivable.balance == Decimal("60.00")

        apply_payment(receivable, Decimal("60.00"))
        assert receivable.status == "PAID"
        assert receivable.balance == Decimal("0.00")

    def test_overpayment_refused(self):
        receivable = _receivable()

        with pytest.raises(ValidationError) as exc_info:
            apply_payment(receivable, Decimal("100.01"))

        assert exc_info.value.details["balance"] == "100.00"
        assert receivable.amount_paid == Decimal("0.00")

    def test_non_positive_amount_refused(self):
        with pytest.raises(ValidationError):
            apply_payment(_receivable(), Decimal("0"))

    def test_retotal_after_correction(self):
        receivable = _receivable()
        apply_payment(receivable, Decimal("40.00"))

        retotal(receivable, Decimal("40.00"))

        assert receivable.balance == Decimal("0.00")
        assert receivable.status == "PAID"


class TestCustomers:
    async def test_manager_creates_customer(self, manager_client):
        response = await manager_client.post(
            "/customers",
            json={"name": "St. Jude Parish", "contact_person": "Fr. Ramos", "mobile": "+63 917 555 0101"},
        )

        assert response.status_code == 201
        assert response.json()["name"] == "St. Jude Parish"
        assert response.json()["is_active"] is True

    async def test_duplicate_name_conflict(self, manager_client, db_session):
        await ChargeCustomerFactory.create(db_session, name="Barangay Hall")

        response = await manager_client.post("/customers", json={"name": "Barangay Hall"})

        assert response.status_code == 409

    async def test_cashier_cannot_create(self, client):
        response = await client.post("/customers", json={"name": "Anyone"})

        assert response.status_code == 403

    async def test_inactive_hidden_from_register(self, client, db_session):
        await ChargeCustomerFactory.create(db_session, name="Barangay Hall")
        await ChargeCustomerFactory.create(db_session, name="Closed Account", is_active=False)

        response = await client.get("/customers")

        assert [c["name"] for c in response.json()] == ["Barangay Hall"]

    async def test_deactivate(self, manager_client, db_session):
        customer = await ChargeCustomerFactory.create(db_session)

        response = await manager_client.patch(f"/customers/{customer.id}", json={"is_active": False})

        assert response.json()["is_active"] is False


class TestPayments:
    async def test_cashier_records_payment(self, client, db_session):
        customer = await ChargeCustomerFactory.create(db_session)
        receivable = await _charge_sale(db_session, client.test_user, customer)

        response = await client.post(
            f"/receivables/{receivable.id}/payments",
            json={"amount": "100.00", "method": "GCASH", "reference": "GC-7781"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "PARTIAL"
        assert Decimal(data["balance"]) == Decimal("150.00")
        assert data["payments"][0]["received_by"] == "Test Cashier"
        assert data["payments"][0]["reference"] == "GC-7781"

    async def test_overpayment_rejected(self, client, db_session):
        customer = await ChargeCustomerFactory.create(db_session)
        receivable = await _charge_sale(db_session, client.test_user, customer)

        response = await client.post(f"/receivables/{receivable.id}/payments", json={"amount": "300.00"})

        assert response.status_code == 422
        assert response.json()["code"] == "VALIDATION_ERROR"

    async def test_charge_is_not_a_payment_method(self, client, db_session):
        customer = await ChargeCustomerFactory.create(db_session)
        receivable = await _charge_sale(db_session, client.test_user, customer)

        response = await client.post(
            f"/receivables/{receivable.id}/payments",
            json={"amount": "10.00", "method": "CHARGE"},
        )

        assert response.status_code == 422

    async def test_listing_filters_by_status(self, manager_client, db_session):
        customer = await ChargeCustomerFactory.create(db_session)
        open_one = await _charge_sale(db_session, manager_client.test_user, customer, price="100.00")
        paid = await _charge_sale(db_session, manager_client.test_user, customer, price="50.00")
        await manager_client.post(f"/receivables/{paid.id}/payments", json={"amount": "50.00"})

        response = await manager_client.get("/receivables", params={"status": "UNPAID"})

        assert [r["id"] for r in response.json()] == [str(open_one.id)]

    async def test_cashier_cannot_list(self, client):
        response = await client.get("/receivables")

        assert response.status_code == 403


class TestSyncAndDashboard:
    async def test_sync_creates_missing_receivables(self, manager_client, db_session):
        customer = await ChargeCustomerFactory.create(db_session)
        product = await ProductFactory.create(db_session, price=Decimal("80.00"))
        await SaleFactory.create(
            db_session,
            manager_client.test_user,
            [(product, 1)],
            payment_method="CHARGE",
            customer_name=customer.name,
            charge_customer_id=customer.id,
        )

        first = await manager_client.post("/receivables/sync")
        second = await manager_client.post("/receivables/sync")

        assert first.json() == {"created": 1}
        assert second.json() == {"created": 0}

    async def test_dashboard_ageing(self, manager_client, db_session):
        hall = await ChargeCustomerFactory.create(db_session, name="Barangay Hall")
        parish = await ChargeCustomerFactory.create(db_session, name="St. Jude Parish")
        now = now_utc()
        await _charge_sale(db_session, manager_client.test_user, hall, price="100.00", created_at=now - timedelta(days=10))
        await _charge_sale(db_session, manager_client.test_user, hall, price="200.00", created_at=now - timedelta(days=40))
        await _charge_sale(db_session, manager_client.test_user, parish, price="50.00")

        response = await manager_client.get("/receivables/dashboard")

        data = response.json()
        assert Decimal(data["outstanding_total"]) == Decimal("350.00")
        assert data["unpaid_count"] == 3
        assert Decimal(data["overdue_7_days"]) == Decimal("300.00")
        assert Decimal(data["overdue_30_days"]) == Decimal("200.00")
        assert data["by_customer"][0]["customer_name"] == "Barangay Hall"
        assert Decimal(data["by_customer"][0]["balance"]) == Decimal("300.00")
        assert data["by_customer"][0]["receivable_count"] == 2
