"""Expansion of a purchase's terms into its monthly installment schedule."""

from __future__ import annotations

from calendar import monthrange
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from ..exceptions import ValidationError

CENT = Decimal("0.01")


@dataclass(frozen=True)
class ScheduledInstallment:
    number: int
    value: Decimal
    due_date: date
    paid: bool


def quantize_money(value: Decimal) -> Decimal:
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def split_installment_value(total_value: Decimal, total_installments: int) -> Decimal:
    """Per-installment amount for an evenly split total, rounded to cents."""
    if total_installments < 1:
        raise ValidationError("Total installments must be at least 1.")
    return quantize_money(Decimal(total_value) / Decimal(total_installments))


def add_months(source: date, months: int) -> date:
    """Return ``source`` shifted by ``months``, clamping the day to the target month's end."""
    month = source.month - 1 + months
    year = source.year + month // 12
    month = month % 12 + 1
    day = min(source.day, monthrange(year, month)[1])
    return date(year, month, day)


def generate_schedule(
    *,
    installment_value: Decimal,
    total_installments: int,
    purchase_date: date,
    paid_installments: int = 0,
) -> list[ScheduledInstallment]:
    """Build the ordered schedule for a purchase.

    Installment ``i`` falls due ``i - 1`` months after ``purchase_date`` and the
    first ``paid_installments`` entries are flagged as paid. Every due date is
    derived from the purchase date itself, so a 31st stays on the 31st in the
    months that have one.
    """
    if total_installments < 0:
        raise ValidationError("Total installments cannot be negative.")
    if paid_installments < 0:
        raise ValidationError("Paid installments cannot be negative.")
    if paid_installments > total_installments:
        raise ValidationError("Paid installments cannot exceed total installments.")

    value = quantize_money(installment_value)
    return [
        ScheduledInstallment(
            number=n,
            value=value,
            due_date=add_months(purchase_date, n - 1),
            paid=n <= paid_installments,
        )
        for n in range(1, total_installments + 1)
    ]
