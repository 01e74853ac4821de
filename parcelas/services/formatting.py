"""pt-BR presentation helpers for money, dates and progress."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

MONTH_NAMES = (
    "janeiro",
    "fevereiro",
    "março",
    "abril",
    "maio",
    "junho",
    "julho",
    "agosto",
    "setembro",
    "outubro",
    "novembro",
    "dezembro",
)


def format_brl(value: Decimal) -> str:
    """Format an amount as Brazilian Real, e.g. ``R$ 1.250,75``."""
    amount = Decimal(value).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    sign = "-" if amount < 0 else ""
    # 1,250.75 -> 1.250,75
    digits = f"{abs(amount):,.2f}".replace(",", "_").replace(".", ",").replace("_", ".")
    return f"{sign}R$ {digits}"


def format_date_br(value: date) -> str:
    return value.strftime("%d/%m/%Y")


def format_month_label(year: int, month: int) -> str:
    return f"{MONTH_NAMES[month - 1]} de {year}"


def progress_percentage(paid_installments: int, total_installments: int) -> Decimal:
    if total_installments <= 0:
        return Decimal("0.00")
    ratio = Decimal(paid_installments) * 100 / Decimal(total_installments)
    return ratio.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def remaining_value(installments: Iterable[Any]) -> Decimal:
    """Sum of the values of installments not yet paid."""
    total = sum((Decimal(inst.value) for inst in installments if not inst.paid), Decimal("0"))
    return total.quantize(Decimal("0.01"))
