# File: src/breadpos/api/reports.py
"""Sales reports combining POS checkouts with imported external sales."""

import io
from collections import defaultdict
from datetime import date, timedelta
from decimal import Decimal

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from breadpos.api.auth_helpers import require_manager
from breadpos.core.cache import get_cache, make_cache_key, set_cache
from breadpos.core.db import get_db
from breadpos.core.errors import DatabaseError, ValidationError
from breadpos.core.logging import get_logger
from breadpos.core.reconciliation import ZERO
from breadpos.models import (
    DailyInventory,
    Material,
    Sale,
    SaleItem,
    SalesImport,
    SalesImportDay,
    SalesImportItem,
    Shift,
    Staff,
)
from breadpos.models.enums import PaymentMethod, ShiftStatus
from breadpos.models.report_schemas import (
    CategorySalesRow,
    DailySalesReport,
    DailySalesRow,
    MonthlySalesReport,
    MonthlySalesRow,
    PaymentBreakdown,
    ProductSalesRow,
    ShiftVarianceRow,
    TodayStats,
)
from breadpos.utils.datetime import date_key, now_local, today_key, today_local

logger = get_logger(__name__)

router = APIRouter(prefix="/reports", tags=["reports"])

DEFAULT_RANGE_DAYS = 30
UNCATEGORIZED = "Uncategorized"


def _date_range(date_from: date | None, date_to: date | None) -> tuple[str, str]:
    """Day-keys for the requested range. Defaults to the last month."""
    end = date_to or today_local()
    start = date_from or end - timedelta(days=DEFAULT_RANGE_DAYS)
    if start > end:
        raise ValidationError(
            "date_from must not be after date_to",
            details={"date_from": str(start), "date_to": str(end)},
        )
    return date_key(start), date_key(end)


def _pos_sales_in_range(key_from: str, key_to: str):
    return (
        ~Sale.is_deleted,
        Sale.date_key >= key_from,
        Sale.date_key <= key_to,
    )


async def _daily_rows(db: AsyncSession, key_from: str, key_to: str) -> list[DailySalesRow]:
    pos_stmt = (
        select(Sale.date_key, func.sum(Sale.total), func.count(Sale.id))
        .where(*_pos_sales_in_range(key_from, key_to))
        .group_by(Sale.date_key)
    )
    import_stmt = (
        select(SalesImportDay.date_key, func.sum(SalesImportDay.net_sales))
        .where(SalesImportDay.date_key >= key_from, SalesImportDay.date_key <= key_to)
        .group_by(SalesImportDay.date_key)
    )
    try:
        pos_result = await db.execute(pos_stmt)
        import_result = await db.execute(import_stmt)
    except SQLAlchemyError as e:
        logger.error("report.query_failed", report="daily", error=str(e))
        raise DatabaseError("Failed to load daily sales") from e

    pos = {key: (Decimal(total or 0), count) for key, total, count in pos_result.all()}
    imported = {key: Decimal(total or 0) for key, total in import_result.all()}

    rows = []
    for key in sorted(set(pos) | set(imported)):
        pos_sales, pos_count = pos.get(key, (ZERO, 0))
        import_sales = imported.get(key, ZERO)
        rows.append(
            DailySalesRow(
                date_key=key,
                pos_sales=pos_sales,
                pos_transactions=pos_count,
                import_sales=import_sales,
                total_sales=pos_sales + import_sales,
            )
        )
    return rows


async def _daily_report(db: AsyncSession, date_from: date | None, date_to: date | None) -> DailySalesReport:
    key_from, key_to = _date_range(date_from, date_to)
    cache_key = make_cache_key("report_daily", date_from=key_from, date_to=key_to)
    cached = get_cache(cache_key)
    if cached is not None:
        return cached

    rows = await _daily_rows(db, key_from, key_to)
    report = DailySalesReport(
        date_from=key_from,
        date_to=key_to,
        total_sales=sum((row.total_sales for row in rows), ZERO),
        rows=rows,
    )
    set_cache(cache_key, report)
    return report


@router.get("/daily", response_model=DailySalesReport)
async def daily_sales(
    date_from: date | None = Query(None, description="Start date (YYYY-MM-DD)"),
    date_to: date | None = Query(None, description="End date (YYYY-MM-DD)"),
    current_staff: Staff = Depends(require_manager),
    db: AsyncSession = Depends(get_db),
):
    """Sales per day: POS checkouts plus imported day summaries."""
    return await _daily_report(db, date_from, date_to)


@router.get("/monthly", response_model=MonthlySalesReport)
async def monthly_sales(
    date_from: date | None = Query(None, description="Start date (YYYY-MM-DD)"),
    date_to: date | None = Query(None, description="End date (YYYY-MM-DD)"),
    current_staff: Staff = Depends(require_manager),
    db: AsyncSession = Depends(get_db),
):
    key_from, key_to = _date_range(date_from, date_to)
    cache_key = make_cache_key("report_monthly", date_from=key_from, date_to=key_to)
    cached = get_cache(cache_key)
    if cached is not None:
        return cached

    months: dict[str, dict] = {}
    for row in await _daily_rows(db, key_from, key_to):
        bucket = months.setdefault(
            row.date_key[:7],
            {"pos_sales": ZERO, "pos_transactions": 0, "import_sales": ZERO},
        )
        bucket["pos_sales"] += row.pos_sales
        bucket["pos_transactions"] += row.pos_transactions
        bucket["import_sales"] += row.import_sales

    rows = [
        MonthlySalesRow(month=month, total_sales=bucket["pos_sales"] + bucket["import_sales"], **bucket)
        for month, bucket in sorted(months.items())
    ]
    report = MonthlySalesReport(
        date_from=key_from,
        date_to=key_to,
        total_sales=sum((row.total_sales for row in rows), ZERO),
        rows=rows,
    )
    set_cache(cache_key, report)
    return report


async def _product_totals(db: AsyncSession, key_from: str, key_to: str) -> list[ProductSalesRow]:
    """Per-product quantity and sales from POS items and imported items.

    Imported items carry no date of their own, so a batch counts when its
    day range falls inside the requested range.
    """
    pos_stmt = (
        select(
            SaleItem.product_id,
            SaleItem.product_name,
            SaleItem.category,
            func.sum(SaleItem.quantity),
            func.sum(SaleItem.line_total),
        )
        .join(Sale, Sale.id == SaleItem.sale_id)
        .where(*_pos_sales_in_range(key_from, key_to))
        .group_by(SaleItem.product_id, SaleItem.product_name, SaleItem.category)
    )
    import_stmt = (
        select(
            SalesImportItem.product_id,
            func.coalesce(SalesImportItem.product_name, SalesImportItem.external_name),
            SalesImportItem.category,
            func.sum(SalesImportItem.quantity),
            func.sum(SalesImportItem.net_sales),
        )
        .join(SalesImport, SalesImport.id == SalesImportItem.import_id)
        .where(
            SalesImport.date_from.is_not(None),
            SalesImport.date_from >= key_from,
            SalesImport.date_to <= key_to,
        )
        .group_by(
            SalesImportItem.product_id,
            SalesImportItem.product_name,
            SalesImportItem.external_name,
            SalesImportItem.category,
        )
    )
    try:
        pos_result = await db.execute(pos_stmt)
        import_result = await db.execute(import_stmt)
    except SQLAlchemyError as e:
        logger.error("report.query_failed", report="products", error=str(e))
        raise DatabaseError("Failed to load product sales") from e

    totals: dict[tuple, dict] = {}
    for product_id, name, category, quantity, sales in [*pos_result.all(), *import_result.all()]:
        key = (product_id, None) if product_id is not None else (None, name)
        entry = totals.setdefault(
            key,
            {"product_id": product_id, "product_name": name, "category": category, "quantity": 0, "sales": ZERO},
        )
        entry["quantity"] += int(quantity or 0)
        entry["sales"] += Decimal(sales or 0)
        if entry["category"] is None:
            entry["category"] = category

    return sorted(
        (ProductSalesRow(**entry) for entry in totals.values()),
        key=lambda row: (-row.sales, row.product_name),
    )


@router.get("/products", response_model=list[ProductSalesRow])
async def product_sales(
    date_from: date | None = Query(None, description="Start date (YYYY-MM-DD)"),
    date_to: date | None = Query(None, description="End date (YYYY-MM-DD)"),
    current_staff: Staff = Depends(require_manager),
    db: AsyncSession = Depends(get_db),
):
    """Best sellers first."""
    key_from, key_to = _date_range(date_from, date_to)
    cache_key = make_cache_key("report_products", date_from=key_from, date_to=key_to)
    cached = get_cache(cache_key)
    if cached is not None:
        return cached

    rows = await _product_totals(db, key_from, key_to)
    set_cache(cache_key, rows)
    return rows


@router.get("/categories", response_model=list[CategorySalesRow])
async def category_sales(
    date_from: date | None = Query(None, description="Start date (YYYY-MM-DD)"),
    date_to: date | None = Query(None, description="End date (YYYY-MM-DD)"),
    current_staff: Staff = Depends(require_manager),
    db: AsyncSession = Depends(get_db),
):
    key_from, key_to = _date_range(date_from, date_to)
    cache_key = make_cache_key("report_categories", date_from=key_from, date_to=key_to)
    cached = get_cache(cache_key)
    if cached is not None:
        return cached

    quantities: dict[str, int] = defaultdict(int)
    sales: dict[str, Decimal] = defaultdict(lambda: ZERO)
    for row in await _product_totals(db, key_from, key_to):
        category = row.category or UNCATEGORIZED
        quantities[category] += row.quantity
        sales[category] += row.sales

    rows = sorted(
        (CategorySalesRow(category=name, quantity=quantities[name], sales=sales[name]) for name in sales),
        key=lambda row: (-row.sales, row.category),
    )
    set_cache(cache_key, rows)
    return rows


@router.get("/shifts", response_model=list[ShiftVarianceRow])
async def shift_variances(
    date_from: date | None = Query(None, description="Start date (YYYY-MM-DD)"),
    date_to: date | None = Query(None, description="End date (YYYY-MM-DD)"),
    current_staff: Staff = Depends(require_manager),
    db: AsyncSession = Depends(get_db),
):
    """Cash variance of every completed shift in range."""
    key_from, key_to = _date_range(date_from, date_to)
    stmt = (
        select(Shift)
        .where(
            ~Shift.is_deleted,
            Shift.status == ShiftStatus.COMPLETED.value,
            Shift.date_key >= key_from,
            Shift.date_key <= key_to,
        )
        .order_by(Shift.date_key, Shift.shift_number)
    )
    try:
        result = await db.execute(stmt)
    except SQLAlchemyError as e:
        logger.error("report.query_failed", report="shifts", error=str(e))
        raise DatabaseError("Failed to load shifts") from e

    return [
        ShiftVarianceRow(
            shift_id=shift.id,
            date_key=shift.date_key,
            shift_number=shift.shift_number,
            staff_name=shift.staff_name,
            total_sales=shift.total_sales,
            expected_cash=shift.expected_cash,
            actual_cash=shift.actual_cash,
            variance=shift.variance,
            balance_status=shift.balance_status,
        )
        for shift in result.scalars().all()
    ]


@router.get("/today", response_model=TodayStats)
async def today_stats(
    current_staff: Staff = Depends(require_manager),
    db: AsyncSession = Depends(get_db),
):
    """Dashboard numbers for the current business day."""
    key = today_key()
    cache_key = make_cache_key("report_today", date=key)
    cached = get_cache(cache_key)
    if cached is not None:
        return cached

    try:
        sales_result = await db.execute(
            select(Sale.payment_method, Sale.total, Sale.total_discount).where(
                ~Sale.is_deleted, Sale.date_key == key
            )
        )
        active_result = await db.execute(
            select(func.count(Shift.id)).where(
                ~Shift.is_deleted, Shift.status == ShiftStatus.ACTIVE.value
            )
        )
        stock_result = await db.execute(select(DailyInventory).where(DailyInventory.date_key == key))
        materials_result = await db.execute(
            select(Material.name)
            .where(Material.current_stock <= Material.reorder_level)
            .order_by(Material.name)
        )
    except SQLAlchemyError as e:
        logger.error("report.query_failed", report="today", error=str(e))
        raise DatabaseError("Failed to load today's stats") from e

    cash = gcash = other = discount = ZERO
    count = 0
    for method, total, total_discount in sales_result.all():
        count += 1
        discount += total_discount or ZERO
        if method == PaymentMethod.CASH.value:
            cash += total
        elif method == PaymentMethod.GCASH.value:
            gcash += total
        else:
            other += total

    total_sales = cash + gcash + other
    stats = TodayStats(
        date_key=key,
        total_sales=total_sales,
        transaction_count=count,
        average_ticket=(total_sales / count).quantize(Decimal("0.01")) if count else ZERO,
        total_discount=discount,
        payments=PaymentBreakdown(cash=cash, gcash=gcash, other=other),
        active_shifts=active_result.scalar_one(),
        sold_out_products=sorted(
            record.product_name
            for record in stock_result.scalars().all()
            if record.total_available > 0 and record.sellable <= 0
        ),
        low_stock_materials=list(materials_result.scalars().all()),
    )
    set_cache(cache_key, stats, ttl_seconds=60)
    return stats


EXPORT_HEADERS = ["Date", "POS Sales", "POS Transactions", "Imported Sales", "Total Sales"]
CURRENCY_COLUMNS = {2, 4, 5}


def _create_daily_workbook(report: DailySalesReport) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = "Daily Sales"

    header_fill = PatternFill(start_color="8B5A2B", end_color="8B5A2B", fill_type="solid")
    header_font = Font(bold=True, color="FFFFFF")
    for col_idx, header in enumerate(EXPORT_HEADERS, start=1):
        cell = ws.cell(row=1, column=col_idx, value=header)
        cell.fill = header_fill
        cell.font = header_font
        cell.alignment = Alignment(horizontal="center", vertical="center")

    for row_idx, row in enumerate(report.rows, start=2):
        values = [
            row.date_key,
            float(row.pos_sales),
            row.pos_transactions,
            float(row.import_sales),
            float(row.total_sales),
        ]
        for col_idx, value in enumerate(values, start=1):
            cell = ws.cell(row=row_idx, column=col_idx, value=value)
            if col_idx in CURRENCY_COLUMNS:
                cell.number_format = "#,##0.00"

    total_row = len(report.rows) + 2
    ws.cell(row=total_row, column=1, value="Total").font = Font(bold=True)
    total_cell = ws.cell(row=total_row, column=5, value=float(report.total_sales))
    total_cell.font = Font(bold=True)
    total_cell.number_format = "#,##0.00"

    for col_idx, header in enumerate(EXPORT_HEADERS, start=1):
        ws.column_dimensions[get_column_letter(col_idx)].width = max(len(header), 12) + 2
    ws.freeze_panes = "A2"

    output = io.BytesIO()
    wb.save(output)
    return output.getvalue()


@router.get("/daily/export")
async def export_daily_sales(
    date_from: date | None = Query(None, description="Start date (YYYY-MM-DD)"),
    date_to: date | None = Query(None, description="End date (YYYY-MM-DD)"),
    current_staff: Staff = Depends(require_manager),
    db: AsyncSession = Depends(get_db),
):
    """Daily sales as an Excel workbook."""
    report = await _daily_report(db, date_from, date_to)
    content = _create_daily_workbook(report)

    logger.info(
        "export.daily_sales",
        date_from=report.date_from,
        date_to=report.date_to,
        rows=len(report.rows),
        staff_id=str(current_staff.id),
    )

    filename = f"daily_sales_{report.date_from}_{report.date_to}_{now_local():%H%M%S}.xlsx"
    return StreamingResponse(
        io.BytesIO(content),
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
            "Cache-Control": "no-cache, no-store, must-revalidate",
        },
    )
