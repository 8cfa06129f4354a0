"""Tests for the sales import upload, preview and history endpoints."""

import json
from decimal import Decimal

from sqlalchemy import func, select

from breadpos.models import ProductMapping, SalesImport
from tests.factories import ProductFactory

ITEMS_CSV = (
    "Item name,SKU,Category,Items sold,Gross sales,Discounts,Net sales\n"
    "PANDESAL,10001,Bread,120,600.00,0.00,600.00\n"
    "Mystery Item,,Other,2,40.00,0.00,40.00\n"
)

DAILY_CSV = (
    "Date,Gross sales,Net sales,Discounts,Cost of goods\n"
    "3/1/25,600.00,600.00,0.00,300.00\n"
    "3/2/25,40.00,40.00,0.00,20.00\n"
)


def _files(items=ITEMS_CSV, daily=DAILY_CSV):
    files = {}
    if items is not None:
        files["items_file"] = ("item-sales.csv", items.encode("utf-8"), "text/csv")
    if daily is not None:
        files["daily_file"] = ("daily-summary.csv", daily.encode("utf-8"), "text/csv")
    return files


class TestPreview:
    async def test_preview_resolves_names_without_writing(self, manager_client, db_session):
        await ProductFactory.create(db_session, name="Pandesal")

        response = await manager_client.post("/imports/preview", files=_files())

        assert response.status_code == 200
        data = response.json()
        assert data["auto_count"] == 1
        assert data["unmapped_count"] == 1
        assert data["total_quantity"] == 122
        assert Decimal(data["total_net_sales"]) == Decimal("640.00")
        assert data["new_days"] == ["2025-03-01", "2025-03-02"]
        assert data["import_items"] is True
        rows = {row["external_name"]: row for row in data["rows"]}
        assert rows["PANDESAL"]["match"]["product_name"] == "Pandesal"
        assert rows["Mystery Item"]["match"] is None

        batches = await db_session.execute(select(func.count(SalesImport.id)))
        assert batches.scalar_one() == 0

    async def test_preview_needs_a_file(self, manager_client):
        response = await manager_client.post("/imports/preview", data={"label": "empty"})

        assert response.status_code == 422

    async def test_preview_reports_bad_columns(self, manager_client):
        response = await manager_client.post(
            "/imports/preview", files=_files(items="Item name,Items sold\nPandesal,3\n", daily=None)
        )

        assert response.status_code == 422
        assert "Gross sales" in response.json()["details"]["missing"]

    async def test_cashier_forbidden(self, client):
        response = await client.post("/imports/preview", files=_files())

        assert response.status_code == 403


class TestCommit:
    async def test_commit_then_reimport_is_skipped(self, manager_client, db_session):
        await ProductFactory.create(db_session, name="Pandesal", cost=Decimal("2.50"))

        first = await manager_client.post("/imports", files=_files(), data={"label": "March week 1"})

        assert first.status_code == 201
        batch = first.json()["batch"]
        assert batch["label"] == "March week 1"
        assert batch["days_count"] == 2
        assert batch["date_from"] == "2025-03-01"
        assert batch["date_to"] == "2025-03-02"
        assert batch["items_file_name"] == "item-sales.csv"

        preview = (await manager_client.post("/imports/preview", files=_files())).json()
        assert preview["already_imported_days"] == ["2025-03-01", "2025-03-02"]
        assert preview["import_items"] is False
        assert preview["rows"][0]["status"] == "MAPPED"

        second = await manager_client.post("/imports", files=_files())
        assert second.json()["batch"]["days_count"] == 0
        assert second.json()["batch"]["skipped_days"] == 2
        assert any("Already imported" in w for w in second.json()["warnings"])

    async def test_manual_mappings_form_field(self, manager_client, db_session):
        cake = await ProductFactory.create(db_session, name="Ube Cake", price=Decimal("450.00"))
        mappings = json.dumps([{"external_name": "Mystery Item", "product_id": str(cake.id)}])

        response = await manager_client.post("/imports", files=_files(daily=None), data={"mappings": mappings})

        assert response.status_code == 201
        detail = (await manager_client.get(f"/imports/{response.json()['batch']['id']}")).json()
        mapped = next(item for item in detail["items"] if item["external_name"] == "Mystery Item")
        assert mapped["product_name"] == "Ube Cake"

        saved = (
            await db_session.execute(select(ProductMapping).where(ProductMapping.product_id == cake.id))
        ).scalar_one()
        assert saved.source == "MANUAL"

    async def test_invalid_mappings_json(self, manager_client):
        response = await manager_client.post("/imports", files=_files(), data={"mappings": "[{\"external_name\": 1}]"})

        assert response.status_code == 422

    async def test_history(self, manager_client):
        await manager_client.post("/imports", files=_files(items=None))

        response = await manager_client.get("/imports")

        assert len(response.json()) == 1
        assert response.json()[0]["imported_by"] == "Test Manager"


class TestMappings:
    async def test_put_and_list(self, manager_client, db_session):
        product = await ProductFactory.create(
            db_session,
            name="Cheese Roll",
            variants=[{"name": "Single", "price": "15.00"}, {"name": "Box of 6", "price": "85.00"}],
        )

        response = await manager_client.put(
            "/imports/mappings",
            json={"external_name": "Cheese Roll (6)", "product_id": str(product.id), "variant_index": 1},
        )

        assert response.status_code == 200
        assert response.json()["variant_name"] == "Box of 6"
        assert response.json()["source"] == "MANUAL"

        listed = (await manager_client.get("/imports/mappings")).json()
        assert [m["external_name"] for m in listed] == ["Cheese Roll (6)"]

    async def test_unknown_product(self, manager_client):
        response = await manager_client.put(
            "/imports/mappings",
            json={"external_name": "Hopia", "product_id": "00000000-0000-0000-0000-000000000000"},
        )

        assert response.status_code == 404
