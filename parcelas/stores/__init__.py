from .installments import InstallmentStore
from .purchases import PurchaseStore

__all__ = ["PurchaseStore", "InstallmentStore"]
