"""Tests for back-office endpoints: catalog, staff, discounts, settings and deduction failures."""

import uuid
from decimal import Decimal

import pytest

from breadpos.core.security import verify_pin
from breadpos.models import DeductionFailure, Staff
from breadpos.models.enums import DeductionJob
from breadpos.utils.datetime import now_utc, today_key
from tests.factories import DiscountPresetFactory, MaterialFactory, ProductFactory, StaffFactory


class TestCatalog:
    async def test_manager_creates_variant_product(self, manager_client):
        response = await manager_client.post(
            "/products",
            json={
                "name": "Cheese Roll",
                "category": "Bread",
                "variants": [{"name": "Single", "price": "15.00"}, {"name": "Box of 6", "price": "85.00"}],
            },
        )

        assert response.status_code == 201
        data = response.json()
        assert data["price"] is None
        assert data["variants"][1] == {"name": "Box of 6", "price": "85.00"}

    async def test_product_needs_a_price(self, manager_client):
        response = await manager_client.post("/products", json={"name": "Free Taste"})

        assert response.status_code == 422

    async def test_recipe_ids_validated(self, manager_client):
        response = await manager_client.post(
            "/products",
            json={"name": "Pan de Coco", "price": "12.00", "recipe": {"dough": {"component_id": "classic-dough", "weight": 40}}},
        )

        assert response.status_code == 422

    async def test_recipe_stored_as_json(self, manager_client, db_session):
        flour = await MaterialFactory.create(db_session, name="Bread Flour")

        created = await manager_client.post(
            "/products",
            json={"name": "Pandesal", "price": "5.00", "recipe": {"ingredients": [{"material_id": str(flour.id), "quantity": 25}]}},
        )
        patched = await manager_client.patch(
            f"/products/{created.json()['id']}", json={"recipe": {"packaging": [{"material_id": str(flour.id)}]}}
        )

        assert created.status_code == 201
        assert created.json()["recipe"] == {"ingredients": [{"material_id": str(flour.id), "quantity": "25"}]}
        assert patched.json()["recipe"] == {"packaging": [{"material_id": str(flour.id)}]}

    async def test_deactivated_product_hidden(self, manager_client, db_session):
        product = await ProductFactory.create(db_session, name="Hopia")

        deleted = await manager_client.delete(f"/products/{product.id}")
        listed = await manager_client.get("/products")

        assert deleted.status_code == 204
        assert listed.json() == []
        assert len((await manager_client.get("/products", params={"include_inactive": True})).json()) == 1

    async def test_cashier_cannot_edit_catalog(self, client, db_session):
        product = await ProductFactory.create(db_session)

        response = await client.patch(f"/products/{product.id}", json={"price": "6.00"})

        assert response.status_code == 403

    async def test_low_stock_materials(self, baker_client, db_session):
        await MaterialFactory.create(db_session, name="Butter", current_stock=Decimal("200"), reorder_level=Decimal("500"))
        await MaterialFactory.create(db_session, name="Bread Flour")

        response = await baker_client.get("/inventory/low-stock")

        assert [m["name"] for m in response.json()] == ["Butter"]
        assert response.json()[0]["is_low"] is True


class TestStaff:
    async def test_admin_creates_staff_with_hashed_pin(self, admin_client, db_session):
        response = await admin_client.post("/staff", json={"name": "Jun", "pin": "2468", "role": "BAKER"})

        assert response.status_code == 201
        assert response.json()["role"] == "BAKER"
        staff = await db_session.get(Staff, uuid.UUID(response.json()["id"]))
        assert staff.hashed_pin != "2468"
        assert verify_pin("2468", staff.hashed_pin)

    @pytest.mark.parametrize("pin", ["12", "12ab", "123456789"])
    async def test_pin_format(self, admin_client, pin):
        response = await admin_client.post("/staff", json={"name": "Jun", "pin": pin})

        assert response.status_code == 422

    async def test_duplicate_name(self, admin_client, db_session):
        await StaffFactory.create(db_session, name="Jun")

        response = await admin_client.post("/staff", json={"name": "Jun", "pin": "2468"})

        assert response.status_code == 409

    async def test_deactivate(self, admin_client, db_session):
        staff = await StaffFactory.create(db_session, name="Jun")

        response = await admin_client.post(f"/staff/{staff.id}/deactivate")

        assert response.json()["is_active"] is False

    async def test_manager_lists_but_cannot_create(self, manager_client):
        assert (await manager_client.get("/staff")).status_code == 200
        assert (await manager_client.post("/staff", json={"name": "Jun", "pin": "2468"})).status_code == 403


class TestDiscounts:
    async def test_requires_id_inferred(self, admin_client):
        response = await admin_client.post("/discounts", json={"id": "pwd", "name": "PWD", "percent": "20"})

        assert response.status_code == 201
        assert response.json()["requires_id"] is True

    async def test_explicit_requires_id_wins(self, admin_client):
        response = await admin_client.post(
            "/discounts",
            json={"id": "senior-promo", "name": "Senior Week Promo", "percent": "5", "requires_id": False},
        )

        assert response.json()["requires_id"] is False

    async def test_custom_id_reserved(self, admin_client):
        response = await admin_client.post("/discounts", json={"id": "custom", "name": "Custom", "percent": "5"})

        assert response.status_code == 422

    async def test_deactivated_preset_hidden_from_register(self, admin_client, client, db_session):
        await DiscountPresetFactory.create(db_session)

        await admin_client.delete("/discounts/senior")
        response = await client.get("/discounts")

        assert response.json() == []


class TestSettings:
    async def test_defaults_created_on_first_read(self, client):
        response = await client.get("/settings")

        assert response.status_code == 200
        data = response.json()
        assert data["require_gcash_photo"] is True
        assert data["require_discount_id_photo"] is True
        assert data["low_stock_threshold"] == 5

    async def test_admin_updates(self, admin_client):
        response = await admin_client.put("/settings", json={"require_gcash_photo": False, "low_stock_threshold": 8})

        data = response.json()
        assert data["require_gcash_photo"] is False
        assert data["low_stock_threshold"] == 8
        assert data["updated_by"] == "Test Admin"

    async def test_cashier_cannot_update(self, client):
        response = await client.put("/settings", json={"require_gcash_photo": False})

        assert response.status_code == 403


class TestDeductionFailures:
    async def test_list_and_retry(self, admin_client, db_session):
        product = await ProductFactory.create(db_session)
        failure = DeductionFailure(
            sale_id=uuid.uuid4(),
            sale_number="S-20250301-004",
            job=DeductionJob.STOCK.value,
            payload=[{"product_id": str(product.id), "quantity": 1, "date_key": today_key()}],
            error="database is locked",
            attempts=3,
            created_at=now_utc(),
        )
        db_session.add(failure)
        await db_session.commit()

        listed = await admin_client.get("/inventory/deduction-failures")
        assert [f["sale_number"] for f in listed.json()] == ["S-20250301-004"]

        retried = await admin_client.post(f"/inventory/deduction-failures/{failure.id}/retry")
        assert retried.status_code == 200
        assert retried.json()["resolved_at"] is not None

        assert (await admin_client.get("/inventory/deduction-failures")).json() == []

    async def test_retry_unknown(self, admin_client):
        response = await admin_client.post(f"/inventory/deduction-failures/{uuid.uuid4()}/retry")

        assert response.status_code == 404

    async def test_manager_cannot_retry(self, manager_client):
        response = await manager_client.post(f"/inventory/deduction-failures/{uuid.uuid4()}/retry")

        assert response.status_code == 403
