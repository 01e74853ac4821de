from .purchase import (
    InstallmentPaidRequest,
    InstallmentRead,
    MonthlySummary,
    PurchaseCreate,
    PurchaseDetail,
    PurchaseRead,
    PurchaseStatus,
    PurchaseUpdate,
)

__all__ = [
    "PurchaseCreate",
    "PurchaseRead",
    "PurchaseDetail",
    "PurchaseUpdate",
    "PurchaseStatus",
    "InstallmentRead",
    "InstallmentPaidRequest",
    "MonthlySummary",
]
