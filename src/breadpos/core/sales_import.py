# File: src/breadpos/core/sales_import.py
"""Reconcile externally exported sales CSVs against the catalog."""

import csv
import io
import re
import uuid
from dataclasses import dataclass, field
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from breadpos.core.errors import NotFoundError, ValidationError
from breadpos.core.logging import get_logger
from breadpos.core.reconciliation import ZERO, money
from breadpos.core.similarity import MatchCandidate, MatchResult, best_match
from breadpos.models.enums import MappingSource
from breadpos.models.product import Product
from breadpos.models.sales_import import ProductMapping, SalesImport, SalesImportDay, SalesImportItem
from breadpos.utils.datetime import now_utc

logger = get_logger(__name__)

ITEM_COLUMNS = ("Item name", "SKU", "Category", "Items sold", "Gross sales", "Discounts", "Net sales")
DAILY_COLUMNS = ("Date", "Gross sales", "Net sales", "Discounts", "Cost of goods")

_SHORT_DATE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{2}|\d{4})$")
_ISO_DATE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")


# ---------- parsing ----------


def parse_amount(value: str | None) -> Decimal:
    """Parse an exported money/quantity cell; blanks are zero, thousands separators allowed."""
    cleaned = (value or "").strip().replace(",", "").replace("₱", "").replace("PHP", "").strip()
    if not cleaned:
        return ZERO
    try:
        return Decimal(cleaned)
    except InvalidOperation as e:
        raise ValueError(f"Invalid number: {value}") from e


def normalize_date(value: str) -> str:
    """Accept M/D/YY, M/D/YYYY or YYYY-MM-DD; return YYYY-MM-DD."""
    raw = (value or "").strip()
    if match := _SHORT_DATE.match(raw):
        month, day, year = (int(part) for part in match.groups())
        if year < 100:
            year += 2000
    elif match := _ISO_DATE.match(raw):
        year, month, day = (int(part) for part in match.groups())
    else:
        raise ValueError(f"Unrecognized date: {value!r}")

    try:
        return date(year, month, day).strftime("%Y-%m-%d")
    except ValueError as e:
        raise ValueError(f"Invalid date: {value!r}") from e


def _read_rows(text: str, required: tuple[str, ...], file_label: str) -> list[dict[str, str]]:
    reader = csv.DictReader(io.StringIO(text.lstrip("\ufeff")))
    headers = [h.strip() for h in (reader.fieldnames or [])]
    missing = [column for column in required if column not in headers]
    if missing:
        raise ValidationError(
            f"{file_label} is missing columns: {', '.join(missing)}",
            details={"missing": missing, "found": headers},
        )
    rows = []
    for raw in reader:
        row = {(key or "").strip(): (val or "").strip() for key, val in raw.items() if key is not None}
        if any(row.values()):
            rows.append(row)
    return rows


@dataclass
class ItemRow:
    name: str
    sku: str | None
    category: str | None
    quantity: int
    gross_sales: Decimal
    discounts: Decimal
    net_sales: Decimal


@dataclass
class DayRow:
    date_key: str
    gross_sales: Decimal
    net_sales: Decimal
    discounts: Decimal
    reported_cost: Decimal


def parse_item_rows(text: str) -> list[ItemRow]:
    rows = []
    for line_no, row in enumerate(_read_rows(text, ITEM_COLUMNS, "Item sales file"), start=2):
        name = row["Item name"]
        if not name:
            continue
        try:
            quantity = parse_amount(row["Items sold"]).to_integral_value(rounding=ROUND_HALF_UP)
            rows.append(
                ItemRow(
                    name=name,
                    sku=row["SKU"] or None,
                    category=row["Category"] or None,
                    quantity=int(quantity),
                    gross_sales=money(parse_amount(row["Gross sales"])),
                    discounts=money(parse_amount(row["Discounts"])),
                    net_sales=money(parse_amount(row["Net sales"])),
                )
            )
        except ValueError as e:
            raise ValidationError(str(e), details={"file": "items", "line": line_no}) from e
    return rows


def parse_daily_rows(text: str) -> list[DayRow]:
    """Day summaries; days with zero gross sales (closed days) are dropped."""
    rows = []
    for line_no, row in enumerate(_read_rows(text, DAILY_COLUMNS, "Daily summary file"), start=2):
        try:
            gross = money(parse_amount(row["Gross sales"]))
            if gross == 0:
                continue
            rows.append(
                DayRow(
                    date_key=normalize_date(row["Date"]),
                    gross_sales=gross,
                    net_sales=money(parse_amount(row["Net sales"])),
                    discounts=money(parse_amount(row["Discounts"])),
                    reported_cost=money(parse_amount(row["Cost of goods"])),
                )
            )
        except ValueError as e:
            raise ValidationError(str(e), details={"file": "daily", "line": line_no}) from e
    return rows


# ---------- cost basis ----------


def internal_unit_cost(product: Product, variant_index: int | None = None) -> Decimal:
    """
    Cost of one unit from our own catalog.

    Variant cost, then product cost, then price backed out of the markup,
    then zero. The external system's cost of goods is never used.
    """
    variant = product.variant(variant_index)
    if variant is not None and variant.get("cost") not in (None, ""):
        return money(Decimal(str(variant["cost"])))
    if product.cost is not None:
        return money(product.cost)
    if product.markup_percent:
        price = product.unit_price(variant_index)
        if price:
            return money(price / (1 + Decimal(product.markup_percent) / Decimal("100")))
    return ZERO


# ---------- resolution ----------


def mapping_key(name: str) -> str:
    return (name or "").strip().casefold()


def build_candidates(products: list[Product]) -> list[MatchCandidate]:
    """Every product followed by its variants, in the given catalog order."""
    candidates = []
    for product in products:
        candidates.append(MatchCandidate(product_id=product.id, product_name=product.name))
        for index, variant in enumerate(product.variants or []):
            if variant.get("name"):
                candidates.append(
                    MatchCandidate(
                        product_id=product.id,
                        product_name=product.name,
                        variant_index=index,
                        variant_name=variant["name"],
                    )
                )
    return candidates


@dataclass
class ResolvedRow:
    row: ItemRow
    status: str  # "MAPPED" (stored mapping), "AUTO" or "UNMAPPED"
    candidate: MatchCandidate | None = None
    score: float | None = None
    suggestion: MatchResult | None = None


def resolve_rows(
    rows: list[ItemRow],
    mappings: dict[str, ProductMapping],
    candidates: list[MatchCandidate],
) -> list[ResolvedRow]:
    """A stored mapping always wins; otherwise auto-match at the threshold or leave for the operator."""
    resolved = []
    for row in rows:
        mapping = mappings.get(mapping_key(row.name))
        if mapping is not None:
            resolved.append(
                ResolvedRow(
                    row=row,
                    status="MAPPED",
                    candidate=MatchCandidate(
                        product_id=mapping.product_id,
                        product_name=mapping.product_name,
                        variant_index=mapping.variant_index,
                        variant_name=mapping.variant_name,
                    ),
                    score=float(mapping.score) if mapping.score is not None else None,
                )
            )
            continue

        match = best_match(row.name, candidates)
        if match is not None and match.is_auto:
            resolved.append(ResolvedRow(row=row, status="AUTO", candidate=match.candidate, score=match.score))
        else:
            resolved.append(ResolvedRow(row=row, status="UNMAPPED", suggestion=match))
    return resolved


async def load_catalog(db: AsyncSession) -> list[Product]:
    """Active products in the stable order used for tie-breaking."""
    result = await db.execute(
        select(Product).where(Product.is_active).order_by(Product.name, Product.id)
    )
    return list(result.scalars().all())


async def load_mappings(db: AsyncSession) -> dict[str, ProductMapping]:
    result = await db.execute(select(ProductMapping))
    return {mapping.external_key: mapping for mapping in result.scalars().all()}


async def save_mapping(
    db: AsyncSession,
    external_name: str,
    product: Product,
    variant_index: int | None,
    source: MappingSource,
    score: float | None = None,
    existing: dict[str, ProductMapping] | None = None,
) -> ProductMapping:
    """Create or replace the mapping for an external name."""
    key = mapping_key(external_name)
    if not key:
        raise ValidationError("External name cannot be empty")
    variant = product.variant(variant_index)
    if variant_index is not None and variant is None:
        raise ValidationError(
            "Variant does not exist on product",
            details={"product_id": str(product.id), "variant_index": variant_index},
        )

    if existing is not None and key in existing:
        mapping = existing[key]
    else:
        result = await db.execute(select(ProductMapping).where(ProductMapping.external_key == key))
        mapping = result.scalar_one_or_none()

    if mapping is None:
        mapping = ProductMapping(external_key=key)
        db.add(mapping)

    mapping.external_name = external_name.strip()
    mapping.product_id = product.id
    mapping.product_name = product.name
    mapping.variant_index = variant_index
    mapping.variant_name = variant.get("name") if variant else None
    mapping.source = source.value
    mapping.score = Decimal(str(round(score, 3))) if score is not None else None
    mapping.updated_at = now_utc()

    if existing is not None:
        existing[key] = mapping
    return mapping


# ---------- preview / commit ----------


@dataclass
class ManualMapping:
    external_name: str
    product_id: uuid.UUID
    variant_index: int | None = None


@dataclass
class ImportPlan:
    resolved: list[ResolvedRow]
    new_days: list[DayRow]
    already_imported_days: list[str]
    duplicate_days_in_file: list[str]
    day_rows_supplied: bool = False
    warnings: list[str] = field(default_factory=list)

    @property
    def skipped_days(self) -> int:
        return len(self.already_imported_days) + len(self.duplicate_days_in_file)

    @property
    def import_items(self) -> bool:
        """Item rows carry no date, so they are dropped only when a daily summary came
        with them and none of its days are new (the whole file was imported before).
        """
        return not self.day_rows_supplied or bool(self.new_days)


async def plan_import(
    db: AsyncSession,
    item_rows: list[ItemRow],
    day_rows: list[DayRow],
) -> ImportPlan:
    """Resolve names and split day rows into new and already imported."""
    catalog = await load_catalog(db)
    mappings = await load_mappings(db)
    resolved = resolve_rows(item_rows, mappings, build_candidates(catalog))

    keys = {day.date_key for day in day_rows}
    imported: set[str] = set()
    if keys:
        result = await db.execute(select(SalesImportDay.date_key).where(SalesImportDay.date_key.in_(keys)))
        imported = set(result.scalars().all())

    new_days: list[DayRow] = []
    already: list[str] = []
    repeated: list[str] = []
    seen: set[str] = set()
    for day in day_rows:
        if day.date_key in imported:
            already.append(day.date_key)
        elif day.date_key in seen:
            repeated.append(day.date_key)
        else:
            seen.add(day.date_key)
            new_days.append(day)

    plan = ImportPlan(
        resolved=resolved,
        new_days=new_days,
        already_imported_days=already,
        duplicate_days_in_file=repeated,
        day_rows_supplied=bool(day_rows),
    )
    if already:
        plan.warnings.append(f"Already imported, will be skipped: {', '.join(sorted(set(already)))}")
    if repeated:
        plan.warnings.append(f"Repeated in file, counted once: {', '.join(sorted(set(repeated)))}")
    if item_rows and not plan.import_items:
        plan.warnings.append("Item rows skipped because every day in the file was already imported")
    return plan


async def commit_import(
    db: AsyncSession,
    item_rows: list[ItemRow],
    day_rows: list[DayRow],
    manual_mappings: list[ManualMapping],
    imported_by: str,
    label: str | None = None,
    items_file_name: str | None = None,
    daily_file_name: str | None = None,
) -> tuple[SalesImport, ImportPlan]:
    """
    Persist mappings, then write one batch with only the new days.

    Manual mappings are saved first so they take part in resolution. Auto
    matches are persisted so the same name resolves without asking again.
    """
    if not item_rows and not day_rows:
        raise ValidationError("Nothing to import")

    products = {product.id: product for product in await load_catalog(db)}
    mappings = await load_mappings(db)

    for manual in manual_mappings:
        product = products.get(manual.product_id)
        if product is None:
            raise NotFoundError("Product", str(manual.product_id))
        await save_mapping(db, manual.external_name, product, manual.variant_index, MappingSource.MANUAL, existing=mappings)
    await db.flush()

    plan = await plan_import(db, item_rows, day_rows)

    for resolved in plan.resolved:
        if resolved.status == "AUTO":
            product = products[resolved.candidate.product_id]
            await save_mapping(
                db,
                resolved.row.name,
                product,
                resolved.candidate.variant_index,
                MappingSource.AUTO,
                score=resolved.score,
                existing=mappings,
            )

    batch = SalesImport(
        label=label,
        imported_by=imported_by,
        items_file_name=items_file_name,
        daily_file_name=daily_file_name,
        total_items=len(item_rows),
        total_quantity=0,
        total_gross_sales=ZERO,
        total_discounts=ZERO,
        total_net_sales=ZERO,
        total_cost=ZERO,
        total_profit=ZERO,
        skipped_days=plan.skipped_days,
    )

    imported_items = 0
    for resolved in plan.resolved:
        if resolved.candidate is None or not plan.import_items:
            continue
        row = resolved.row
        product = products.get(resolved.candidate.product_id)
        if product is None:
            # Mapping points at a product that is no longer active
            continue
        unit_cost = internal_unit_cost(product, resolved.candidate.variant_index)
        total_cost = money(unit_cost * row.quantity)
        profit = row.net_sales - total_cost
        margin = money(profit / row.net_sales * 100) if row.net_sales > 0 else ZERO
        batch.items.append(
            SalesImportItem(
                external_name=row.name,
                sku=row.sku,
                category=row.category,
                product_id=product.id,
                product_name=product.name,
                variant_index=resolved.candidate.variant_index,
                variant_name=resolved.candidate.variant_name,
                quantity=row.quantity,
                gross_sales=row.gross_sales,
                discounts=row.discounts,
                net_sales=row.net_sales,
                unit_cost=unit_cost,
                total_cost=total_cost,
                profit=profit,
                margin_percent=margin,
            )
        )
        imported_items += 1
        batch.total_quantity += row.quantity
        batch.total_gross_sales += row.gross_sales
        batch.total_discounts += row.discounts
        batch.total_net_sales += row.net_sales
        batch.total_cost += total_cost
        batch.total_profit += profit

    batch.imported_items = imported_items
    batch.skipped_items = len(item_rows) - imported_items

    for day in plan.new_days:
        batch.days.append(
            SalesImportDay(
                date_key=day.date_key,
                gross_sales=day.gross_sales,
                net_sales=day.net_sales,
                discounts=day.discounts,
                reported_cost=day.reported_cost,
            )
        )
    batch.days_count = len(plan.new_days)
    if plan.new_days:
        batch.date_from = min(day.date_key for day in plan.new_days)
        batch.date_to = max(day.date_key for day in plan.new_days)

    db.add(batch)
    await db.flush()

    logger.info(
        "sales_import.committed",
        import_id=str(batch.id),
        imported_items=batch.imported_items,
        skipped_items=batch.skipped_items,
        days=batch.days_count,
        skipped_days=batch.skipped_days,
    )
    return batch, plan
