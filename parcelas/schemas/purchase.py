from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator


class PurchaseStatus(str, Enum):
    ALL = "all"
    PENDING = "pending"
    COMPLETED = "completed"


class InstallmentRead(BaseModel):
    """Read model for a single installment."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    purchase_id: UUID
    number: int
    value: Decimal
    due_date: date
    paid: bool
    created_at: datetime
    updated_at: datetime


class PurchaseRead(BaseModel):
    """Read model for a purchase without its schedule."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    total_value: Decimal
    installment_value: Decimal
    total_installments: int
    paid_installments: int
    purchase_date: date
    created_at: datetime
    updated_at: datetime


class PurchaseDetail(PurchaseRead):
    """Purchase plus its full installment schedule and derived figures."""

    installments: list[InstallmentRead] = Field(default_factory=list)
    remaining_value: Decimal
    progress_percentage: Decimal


class PurchaseCreate(BaseModel):
    """Payload for creating a purchase.

    ``installment_value`` defaults to ``total_value / total_installments``.
    ``paid_installments`` seeds the schedule for back-dated imports.
    """

    name: str = Field(min_length=1, max_length=128)
    total_value: Decimal = Field(gt=0, max_digits=14, decimal_places=2)
    total_installments: int = Field(ge=1)
    purchase_date: date
    installment_value: Optional[Decimal] = Field(
        default=None, gt=0, max_digits=14, decimal_places=2
    )
    paid_installments: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def _check_seed(self) -> "PurchaseCreate":
        if self.paid_installments > self.total_installments:
            raise ValueError("paid_installments cannot exceed total_installments")
        return self


class PurchaseUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=128)
    total_value: Optional[Decimal] = Field(default=None, gt=0, max_digits=14, decimal_places=2)
    installment_value: Optional[Decimal] = Field(
        default=None, gt=0, max_digits=14, decimal_places=2
    )
    total_installments: Optional[int] = Field(default=None, ge=1)
    purchase_date: Optional[date] = None


class InstallmentPaidRequest(BaseModel):
    paid: bool = True


class MonthlySummary(BaseModel):
    """Outstanding installments due within one calendar month."""

    year: int
    month: int
    label: str
    total: Decimal
    installment_count: int
    formatted_total: str
