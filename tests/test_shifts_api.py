# File: tests/test_shifts_api.py
"""Tests for shift start, end-of-shift reconciliation and admin edits."""

from decimal import Decimal

from sqlalchemy import select

from breadpos.models import AuditLog, PendingPurchase, Shift
from tests.factories import ProductFactory, SaleFactory, ShiftFactory, StaffFactory


class TestStartShift:
    async def test_start_shift(self, client):
        response = await client.post("/shifts", json={"starting_cash": "500.00"})

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "ACTIVE"
        assert data["shift_number"] == 1
        assert data["staff_name"] == "Test Cashier"
        assert Decimal(data["starting_cash"]) == Decimal("500.00")

        current = await client.get("/shifts/current")
        assert current.json()["id"] == data["id"]

    async def test_one_active_shift_per_staff(self, client):
        await client.post("/shifts", json={"starting_cash": "500.00"})

        response = await client.post("/shifts", json={"starting_cash": "300.00"})

        assert response.status_code == 409
        assert response.json()["code"] == "CONFLICT"

    async def test_numbers_run_per_day_across_staff(self, client, db_session):
        colleague = await StaffFactory.create(db_session, name="Morning Cashier")
        await ShiftFactory.create(db_session, colleague, status="COMPLETED")

        response = await client.post("/shifts", json={"starting_cash": "500.00"})

        assert response.json()["shift_number"] == 2

    async def test_negative_starting_cash_rejected(self, client):
        response = await client.post("/shifts", json={"starting_cash": "-1.00"})

        assert response.status_code == 422


class TestViewOnly:
    async def test_cashier_cannot_enter_view_only(self, client):
        response = await client.post("/shifts/view-only")

        assert response.status_code == 403

    async def test_manager_with_active_shift_cannot_enter_view_only(self, manager_client, db_session):
        await ShiftFactory.create(db_session, manager_client.test_user)

        response = await manager_client.post("/shifts/view-only")

        assert response.status_code == 400

    async def test_view_only_flag_reported(self, manager_client):
        await manager_client.post("/shifts/view-only")

        response = await manager_client.get("/auth/me")

        assert response.json()["view_only"] is True


class TestEndShift:
    async def test_balanced_end_of_shift(self, client, db_session):
        """500 float, 120 cash and 300 GCash sales, 620 in the drawer."""
        shift = await ShiftFactory.create(db_session, client.test_user, starting_cash=Decimal("500.00"))
        bread = await ProductFactory.create(db_session, name="Pandesal", price=Decimal("120.00"))
        cake = await ProductFactory.create(db_session, name="Ube Cake", price=Decimal("300.00"))
        await SaleFactory.create(db_session, client.test_user, [(bread, 1)], shift=shift)
        await SaleFactory.create(db_session, client.test_user, [(cake, 1)], payment_method="GCASH", shift=shift)

        summary = await client.get(f"/shifts/{shift.id}/summary")
        assert Decimal(summary.json()["expected_cash"]) == Decimal("620.00")
        assert summary.json()["transaction_count"] == 2

        response = await client.post(f"/shifts/{shift.id}/end", json={"actual_cash": "620.00"})

        assert response.status_code == 200
        ended = response.json()["shift"]
        assert ended["status"] == "COMPLETED"
        assert Decimal(ended["cash_sales"]) == Decimal("120.00")
        assert Decimal(ended["gcash_sales"]) == Decimal("300.00")
        assert Decimal(ended["expected_cash"]) == Decimal("620.00")
        assert Decimal(ended["variance"]) == Decimal("0.00")
        assert ended["balance_status"] == "BALANCED"
        assert ended["end_time"] is not None

    async def test_deleted_sales_excluded(self, client, db_session):
        shift = await ShiftFactory.create(db_session, client.test_user, starting_cash=Decimal("500.00"))
        bread = await ProductFactory.create(db_session, name="Pandesal", price=Decimal("100.00"))
        await SaleFactory.create(db_session, client.test_user, [(bread, 1)], shift=shift, is_deleted=True)

        response = await client.post(f"/shifts/{shift.id}/end", json={"actual_cash": "500.00"})

        assert response.json()["shift"]["transaction_count"] == 0
        assert response.json()["shift"]["balance_status"] == "BALANCED"

    async def test_expenses_become_pending_purchases(self, client, db_session):
        shift = await ShiftFactory.create(db_session, client.test_user, starting_cash=Decimal("500.00"))

        response = await client.post(
            f"/shifts/{shift.id}/end",
            json={
                "actual_cash": "350.00",
                "expenses": [
                    {"description": "Ice", "amount": "50.00"},
                    {"description": "LPG refill", "amount": "100.00"},
                ],
            },
        )

        assert response.status_code == 200
        body = response.json()
        assert Decimal(body["shift"]["total_expenses"]) == Decimal("150.00")
        assert Decimal(body["shift"]["adjusted_expected_cash"]) == Decimal("350.00")
        assert body["shift"]["balance_status"] == "BALANCED"
        assert [p["description"] for p in body["purchases"]] == ["Ice", "LPG refill"]
        assert body["failed_purchases"] == []

        purchases = (
            await db_session.execute(select(PendingPurchase).where(PendingPurchase.shift_id == shift.id))
        ).scalars().all()
        assert {p.status for p in purchases} == {"PENDING_APPROVAL"}

    async def test_short_drawer(self, client, db_session):
        shift = await ShiftFactory.create(db_session, client.test_user, starting_cash=Decimal("500.00"))

        response = await client.post(f"/shifts/{shift.id}/end", json={"actual_cash": "480.00"})

        assert Decimal(response.json()["shift"]["variance"]) == Decimal("-20.00")
        assert response.json()["shift"]["balance_status"] == "SHORT"

    async def test_cannot_end_twice(self, client, db_session):
        shift = await ShiftFactory.create(db_session, client.test_user)
        await client.post(f"/shifts/{shift.id}/end", json={"actual_cash": "500.00"})

        response = await client.post(f"/shifts/{shift.id}/end", json={"actual_cash": "500.00"})

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_STATE"

    async def test_only_owner_ends_shift(self, client, db_session):
        colleague = await StaffFactory.create(db_session, name="Other Cashier")
        shift = await ShiftFactory.create(db_session, colleague)

        response = await client.post(f"/shifts/{shift.id}/end", json={"actual_cash": "500.00"})

        assert response.status_code == 403

    async def test_admin_can_end_any_shift(self, admin_client, db_session):
        cashier = await StaffFactory.create(db_session, name="Night Cashier")
        shift = await ShiftFactory.create(db_session, cashier)

        response = await admin_client.post(f"/shifts/{shift.id}/end", json={"actual_cash": "500.00"})

        assert response.status_code == 200


class TestAdminEdit:
    async def test_edit_recomputes_variance_and_audits(self, admin_client, db_session):
        cashier = await StaffFactory.create(db_session, name="Night Cashier")
        shift = await ShiftFactory.create(
            db_session,
            cashier,
            status="COMPLETED",
            starting_cash=Decimal("500.00"),
            cash_sales=Decimal("200.00"),
            total_sales=Decimal("200.00"),
            transaction_count=2,
            expected_cash=Decimal("700.00"),
            actual_cash=Decimal("650.00"),
            variance=Decimal("-50.00"),
            balance_status="SHORT",
        )

        response = await admin_client.patch(
            f"/shifts/{shift.id}",
            json={"actual_cash": "700.00", "reason": "Found envelope in drawer"},
        )

        assert response.status_code == 200
        data = response.json()
        assert Decimal(data["variance"]) == Decimal("0.00")
        assert data["balance_status"] == "BALANCED"
        assert data["last_modified_by"] == "Test Admin"

        audit = (await db_session.execute(select(AuditLog).where(AuditLog.entity_id == shift.id))).scalar_one()
        assert audit.action == "EDIT"
        assert audit.reason == "Found envelope in drawer"

    async def test_edit_requires_reason(self, admin_client, db_session):
        shift = await ShiftFactory.create(db_session, admin_client.test_user)

        response = await admin_client.patch(f"/shifts/{shift.id}", json={"notes": "x"})

        assert response.status_code == 422

    async def test_cashier_cannot_edit(self, client, db_session):
        shift = await ShiftFactory.create(db_session, client.test_user)

        response = await client.patch(f"/shifts/{shift.id}", json={"notes": "x", "reason": "typo"})

        assert response.status_code == 403

    async def test_soft_delete(self, admin_client, db_session):
        shift = await ShiftFactory.create(db_session, admin_client.test_user, status="COMPLETED")

        response = await admin_client.delete(f"/shifts/{shift.id}", params={"reason": "Training shift"})

        assert response.status_code == 204
        refreshed = await db_session.get(Shift, shift.id, populate_existing=True)
        assert refreshed.is_deleted
        assert refreshed.deleted_by == "Test Admin"
        assert (await admin_client.get(f"/shifts/{shift.id}")).status_code == 404
