"""Domain models package."""

from breadpos.models.audit_log import AuditLog
from breadpos.models.enums import (
    BalanceStatus,
    DeductionJob,
    EndorsementPhase,
    MappingSource,
    MaterialKind,
    MovementType,
    PaymentMethod,
    PurchaseStatus,
    ReceivableStatus,
    RecipeComponentKind,
    ShiftStatus,
    StaffRole,
)
from breadpos.models.inventory import DailyInventory, StockMovement
from breadpos.models.inventory_deduction import DeductionFailure, InventoryDeductionLog
from breadpos.models.material import Material, RecipeComponent
from breadpos.models.pending_purchase import PendingPurchase
from breadpos.models.product import Product
from breadpos.models.receivable import ChargeCustomer, Receivable, ReceivablePayment
from breadpos.models.sale import Sale, SaleItem
from breadpos.models.sales_import import (
    ProductMapping,
    SalesImport,
    SalesImportDay,
    SalesImportItem,
)
from breadpos.models.settings import DiscountPreset, PosSettings
from breadpos.models.shift import Shift
from breadpos.models.shift_inventory import ShiftInventory, ShiftInventoryLine
from breadpos.models.staff import Staff

__all__ = [
    "AuditLog",
    "BalanceStatus",
    "ChargeCustomer",
    "DailyInventory",
    "DeductionFailure",
    "DeductionJob",
    "DiscountPreset",
    "EndorsementPhase",
    "InventoryDeductionLog",
    "MappingSource",
    "Material",
    "MaterialKind",
    "MovementType",
    "PaymentMethod",
    "PendingPurchase",
    "PosSettings",
    "Product",
    "ProductMapping",
    "PurchaseStatus",
    "Receivable",
    "ReceivablePayment",
    "ReceivableStatus",
    "RecipeComponent",
    "RecipeComponentKind",
    "Sale",
    "SaleItem",
    "SalesImport",
    "SalesImportDay",
    "SalesImportItem",
    "Shift",
    "ShiftInventory",
    "ShiftInventoryLine",
    "ShiftStatus",
    "Staff",
    "StaffRole",
    "StockMovement",
]
