"""
Enums for domain models.
Enums provide type safety and clarity. Validation for categorical fields.
"""

import enum


class StaffRole(str, enum.Enum):
    """Staff roles, lowest rank first."""

    STAFF = "STAFF"
    BAKER = "BAKER"
    MANAGER = "MANAGER"
    OWNER = "OWNER"
    ADMIN = "ADMIN"

    @property
    def rank(self) -> int:
        return list(StaffRole).index(self)


# Roles allowed to open the POS without a cash drawer
VIEW_ONLY_ROLES = {StaffRole.MANAGER, StaffRole.OWNER, StaffRole.ADMIN}


class ShiftStatus(str, enum.Enum):
    """Shift lifecycle states."""

    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"


class BalanceStatus(str, enum.Enum):
    """Outcome of the end-of-shift cash count."""

    BALANCED = "BALANCED"
    OVER = "OVER"
    SHORT = "SHORT"


class PaymentMethod(str, enum.Enum):
    """How a sale was paid."""

    CASH = "CASH"
    GCASH = "GCASH"
    CARD = "CARD"
    CHARGE = "CHARGE"


class ReceivableStatus(str, enum.Enum):
    UNPAID = "UNPAID"
    PARTIAL = "PARTIAL"
    PAID = "PAID"


class EndorsementPhase(str, enum.Enum):
    """Which handover count an inventory endorsement records."""

    START = "START"
    END = "END"


class MaterialKind(str, enum.Enum):
    INGREDIENT = "INGREDIENT"
    PACKAGING = "PACKAGING"


class RecipeComponentKind(str, enum.Enum):
    DOUGH = "DOUGH"
    FILLING = "FILLING"
    TOPPING = "TOPPING"


class MappingSource(str, enum.Enum):
    """How an external item name was linked to a product."""

    AUTO = "AUTO"
    MANUAL = "MANUAL"


class PurchaseStatus(str, enum.Enum):
    PENDING_APPROVAL = "PENDING_APPROVAL"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class MovementType(str, enum.Enum):
    SALE = "SALE"
    ADJUSTMENT = "ADJUSTMENT"


class DeductionJob(str, enum.Enum):
    """Background jobs run after a sale commits."""

    STOCK = "STOCK"
    INGREDIENTS = "INGREDIENTS"
