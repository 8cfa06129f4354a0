# File: src/breadpos/api/imports.py
"""Sales import reconciler endpoints: preview, mappings, commit, history."""

from uuid import UUID

import pydantic
from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from breadpos.api.auth_helpers import require_manager
from breadpos.core.cache import invalidate_reports
from breadpos.core.db import get_db
from breadpos.core.errors import NotFoundError, ValidationError
from breadpos.core.logging import get_logger
from breadpos.core.reconciliation import ZERO
from breadpos.core.sales_import import (
    DayRow,
    ItemRow,
    ManualMapping,
    ResolvedRow,
    commit_import,
    parse_daily_rows,
    parse_item_rows,
    plan_import,
    save_mapping,
)
from breadpos.core.similarity import MatchCandidate
from breadpos.models import Product, ProductMapping, SalesImport, Staff
from breadpos.models.enums import MappingSource
from breadpos.models.import_schemas import (
    ImportPreview,
    ImportResult,
    MappingIn,
    MappingRead,
    MatchRead,
    PreviewDay,
    PreviewRow,
    SalesImportDetail,
    SalesImportRead,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/imports", tags=["imports"])

_mappings_adapter = pydantic.TypeAdapter(list[MappingIn])


async def _read_upload(upload: UploadFile | None, label: str) -> str | None:
    if upload is None:
        return None
    raw = await upload.read()
    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise ValidationError(f"{label} is not UTF-8 text", details={"file": upload.filename}) from e


async def _parse_uploads(
    items_file: UploadFile | None,
    daily_file: UploadFile | None,
) -> tuple[list[ItemRow], list[DayRow]]:
    if items_file is None and daily_file is None:
        raise ValidationError("Upload an item sales file, a daily summary file, or both")
    items_text = await _read_upload(items_file, "Item sales file")
    daily_text = await _read_upload(daily_file, "Daily summary file")
    item_rows = parse_item_rows(items_text) if items_text is not None else []
    day_rows = parse_daily_rows(daily_text) if daily_text is not None else []
    return item_rows, day_rows


def _match(candidate: MatchCandidate | None, score: float | None) -> MatchRead | None:
    if candidate is None:
        return None
    return MatchRead(
        product_id=candidate.product_id,
        product_name=candidate.product_name,
        variant_index=candidate.variant_index,
        variant_name=candidate.variant_name,
        label=candidate.label,
        score=score,
    )


def _preview_row(resolved: ResolvedRow) -> PreviewRow:
    row = resolved.row
    suggestion = resolved.suggestion
    return PreviewRow(
        external_name=row.name,
        sku=row.sku,
        category=row.category,
        quantity=row.quantity,
        gross_sales=row.gross_sales,
        discounts=row.discounts,
        net_sales=row.net_sales,
        status=resolved.status,
        match=_match(resolved.candidate, resolved.score),
        suggestion=_match(suggestion.candidate, suggestion.score) if suggestion else None,
    )


@router.post("/preview", response_model=ImportPreview)
async def preview_import(
    items_file: UploadFile | None = File(None),
    daily_file: UploadFile | None = File(None),
    current_staff: Staff = Depends(require_manager),
    db: AsyncSession = Depends(get_db),
):
    """Resolve every item name and flag which days are new. Nothing is written."""
    item_rows, day_rows = await _parse_uploads(items_file, daily_file)
    plan = await plan_import(db, item_rows, day_rows)

    new_keys = {day.date_key for day in plan.new_days}
    seen: set[str] = set()
    days = []
    for day in day_rows:
        days.append(
            PreviewDay(
                date_key=day.date_key,
                gross_sales=day.gross_sales,
                net_sales=day.net_sales,
                discounts=day.discounts,
                is_new=day.date_key in new_keys and day.date_key not in seen,
            )
        )
        seen.add(day.date_key)

    statuses = [resolved.status for resolved in plan.resolved]
    return ImportPreview(
        rows=[_preview_row(resolved) for resolved in plan.resolved],
        days=days,
        mapped_count=statuses.count("MAPPED"),
        auto_count=statuses.count("AUTO"),
        unmapped_count=statuses.count("UNMAPPED"),
        total_quantity=sum(row.quantity for row in item_rows),
        total_gross_sales=sum((row.gross_sales for row in item_rows), ZERO),
        total_net_sales=sum((row.net_sales for row in item_rows), ZERO),
        new_days=sorted(new_keys),
        already_imported_days=sorted(set(plan.already_imported_days)),
        duplicate_days_in_file=sorted(set(plan.duplicate_days_in_file)),
        import_items=plan.import_items,
        warnings=plan.warnings,
    )


@router.get("/mappings", response_model=list[MappingRead])
async def list_mappings(
    current_staff: Staff = Depends(require_manager),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(select(ProductMapping).order_by(ProductMapping.external_name))
    return result.scalars().all()


@router.put("/mappings", response_model=MappingRead)
async def put_mapping(
    payload: MappingIn,
    current_staff: Staff = Depends(require_manager),
    db: AsyncSession = Depends(get_db),
):
    """Operator mapping. Replaces whatever the name resolved to before."""
    product = await db.get(Product, payload.product_id)
    if product is None or not product.is_active:
        raise NotFoundError("Product", str(payload.product_id))

    mapping = await save_mapping(db, payload.external_name, product, payload.variant_index, MappingSource.MANUAL)
    await db.flush()
    await db.refresh(mapping)

    logger.info(
        "sales_import.mapping_saved",
        external_name=mapping.external_name,
        product_id=str(product.id),
        variant_index=mapping.variant_index,
        saved_by=current_staff.name,
    )
    return mapping


def _parse_manual_mappings(raw: str | None) -> list[ManualMapping]:
    if not raw:
        return []
    try:
        entries = _mappings_adapter.validate_json(raw)
    except pydantic.ValidationError as e:
        raise ValidationError("Invalid mappings", details={"errors": [err["msg"] for err in e.errors()]}) from e
    return [ManualMapping(entry.external_name, entry.product_id, entry.variant_index) for entry in entries]


@router.post("", response_model=ImportResult, status_code=status.HTTP_201_CREATED)
async def create_import(
    items_file: UploadFile | None = File(None),
    daily_file: UploadFile | None = File(None),
    label: str | None = Form(None),
    mappings: str | None = Form(None, description="JSON list of {external_name, product_id, variant_index}"),
    current_staff: Staff = Depends(require_manager),
    db: AsyncSession = Depends(get_db),
):
    """Commit a batch. Days already imported are skipped, never double counted."""
    item_rows, day_rows = await _parse_uploads(items_file, daily_file)
    batch, plan = await commit_import(
        db,
        item_rows,
        day_rows,
        _parse_manual_mappings(mappings),
        imported_by=current_staff.name,
        label=label,
        items_file_name=items_file.filename if items_file else None,
        daily_file_name=daily_file.filename if daily_file else None,
    )
    invalidate_reports("sales_import")

    return ImportResult(batch=SalesImportRead.model_validate(batch), warnings=plan.warnings)


@router.get("", response_model=list[SalesImportRead])
async def list_imports(
    skip: int = 0,
    limit: int = 50,
    current_staff: Staff = Depends(require_manager),
    db: AsyncSession = Depends(get_db),
):
    limit = max(1, min(limit, 500))
    stmt = select(SalesImport).order_by(SalesImport.created_at.desc()).offset(max(skip, 0)).limit(limit)
    result = await db.execute(stmt)
    return result.scalars().all()


@router.get("/{import_id}", response_model=SalesImportDetail)
async def get_import(
    import_id: UUID,
    current_staff: Staff = Depends(require_manager),
    db: AsyncSession = Depends(get_db),
):
    batch = await db.get(SalesImport, import_id)
    if batch is None:
        raise NotFoundError("SalesImport", str(import_id))
    return batch
