from __future__ import annotations

import unittest
from datetime import date
from decimal import Decimal
from types import SimpleNamespace

from parcelas.services.formatting import (
    format_brl,
    format_date_br,
    format_month_label,
    progress_percentage,
    remaining_value,
)


class FormattingTests(unittest.TestCase):
    def test_format_brl_uses_brazilian_separators(self) -> None:
        self.assertEqual(format_brl(Decimal("1250.75")), "R$ 1.250,75")
        self.assertEqual(format_brl(Decimal("1234567.8")), "R$ 1.234.567,80")
        self.assertEqual(format_brl(Decimal("0")), "R$ 0,00")
        self.assertEqual(format_brl(Decimal("-42.5")), "-R$ 42,50")

    def test_format_date_br(self) -> None:
        self.assertEqual(format_date_br(date(2024, 3, 5)), "05/03/2024")

    def test_format_month_label(self) -> None:
        self.assertEqual(format_month_label(2024, 3), "março de 2024")
        self.assertEqual(format_month_label(2025, 12), "dezembro de 2025")

    def test_progress_percentage(self) -> None:
        self.assertEqual(progress_percentage(3, 12), Decimal("25.00"))
        self.assertEqual(progress_percentage(1, 3), Decimal("33.33"))
        self.assertEqual(progress_percentage(0, 0), Decimal("0.00"))

    def test_remaining_value_counts_only_unpaid(self) -> None:
        installments = [
            SimpleNamespace(value=Decimal("100.00"), paid=True),
            SimpleNamespace(value=Decimal("100.00"), paid=False),
            SimpleNamespace(value=Decimal("99.99"), paid=False),
        ]

        self.assertEqual(remaining_value(installments), Decimal("199.99"))
