"""Domain exceptions raised by the stores and the reconciliation service."""

from __future__ import annotations

from uuid import UUID


class ParcelasError(Exception):
    """Base exception for the purchase tracker."""


class ValidationError(ParcelasError):
    """Input rejected before any store call was issued."""


class StoreError(ParcelasError):
    """A database call failed; the operation was rolled back."""


class NotFoundError(ParcelasError):
    """Target record does not exist."""


class PurchaseNotFoundError(NotFoundError):
    def __init__(self, purchase_id: UUID) -> None:
        super().__init__("Purchase not found")
        self.purchase_id = purchase_id


class InstallmentNotFoundError(NotFoundError):
    def __init__(self, purchase_id: UUID, number: int) -> None:
        super().__init__(f"Installment {number} not found")
        self.purchase_id = purchase_id
        self.number = number
