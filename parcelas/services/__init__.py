from .purchases import (
    create_purchase,
    delete_purchase,
    get_purchase,
    list_installments,
    list_purchases,
    mark_installment_paid,
    mark_next_installment_paid,
    monthly_total,
    update_purchase,
)
from .schedule import ScheduledInstallment, add_months, generate_schedule
from .tracker import PurchaseTracker

__all__ = [
    "create_purchase",
    "update_purchase",
    "delete_purchase",
    "get_purchase",
    "list_purchases",
    "list_installments",
    "mark_installment_paid",
    "mark_next_installment_paid",
    "monthly_total",
    "ScheduledInstallment",
    "add_months",
    "generate_schedule",
    "PurchaseTracker",
]
