"""Client-side state container for the purchase list.

Holds the cached purchases, a coarse loading flag and the last user-visible
error message. Service failures never escape: they are logged, turned into a
message on ``error`` and signalled through a ``None``/``False``/``[]`` return.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..exceptions import ParcelasError, ValidationError
from ..models.purchase import Installment, Purchase
from ..schemas.purchase import MonthlySummary, PurchaseCreate, PurchaseStatus, PurchaseUpdate
from . import purchases as purchase_service

logger = logging.getLogger(__name__)


class PurchaseTracker:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory
        self.purchases: list[Purchase] = []
        self.loading = False
        self.error: Optional[str] = None

    @asynccontextmanager
    async def _operation(self) -> AsyncIterator[AsyncSession]:
        self.loading = True
        self.error = None
        try:
            async with self._session_factory() as session:
                yield session
        finally:
            self.loading = False

    def _fail(self, message: str, exc: ParcelasError) -> None:
        logger.exception("%s", message)
        self.error = str(exc) if isinstance(exc, ValidationError) else message

    def _replace(self, purchase: Purchase) -> None:
        self.purchases = [purchase if p.id == purchase.id else p for p in self.purchases]

    def _sort(self) -> None:
        self.purchases.sort(key=lambda p: p.purchase_date, reverse=True)

    async def refresh(self, status: PurchaseStatus = PurchaseStatus.ALL) -> list[Purchase]:
        try:
            async with self._operation() as session:
                self.purchases = await purchase_service.list_purchases(session, status=status)
        except ParcelasError as exc:
            self._fail("Failed to fetch purchases", exc)
        return self.purchases

    async def add_purchase(self, payload: PurchaseCreate) -> Optional[Purchase]:
        try:
            async with self._operation() as session:
                purchase = await purchase_service.create_purchase(session, payload)
        except ParcelasError as exc:
            self._fail("Failed to add purchase", exc)
            return None
        self.purchases.append(purchase)
        self._sort()
        return purchase

    async def update_purchase(
        self, purchase_id: UUID, payload: PurchaseUpdate
    ) -> Optional[Purchase]:
        try:
            async with self._operation() as session:
                purchase = await purchase_service.update_purchase(session, purchase_id, payload)
        except ParcelasError as exc:
            self._fail("Failed to update purchase", exc)
            return None
        self._replace(purchase)
        self._sort()
        return purchase

    async def delete_purchase(self, purchase_id: UUID) -> bool:
        try:
            async with self._operation() as session:
                await purchase_service.delete_purchase(session, purchase_id)
        except ParcelasError as exc:
            self._fail("Failed to delete purchase", exc)
            return False
        self.purchases = [p for p in self.purchases if p.id != purchase_id]
        return True

    async def mark_installment_paid(
        self, purchase_id: UUID, number: int, paid: bool = True
    ) -> Optional[Purchase]:
        try:
            async with self._operation() as session:
                purchase = await purchase_service.mark_installment_paid(
                    session, purchase_id, number, paid
                )
        except ParcelasError as exc:
            self._fail("Failed to mark installment as paid", exc)
            return None
        self._replace(purchase)
        return purchase

    async def mark_next_installment_paid(self, purchase_id: UUID) -> Optional[Purchase]:
        try:
            async with self._operation() as session:
                purchase = await purchase_service.mark_next_installment_paid(session, purchase_id)
        except ParcelasError as exc:
            self._fail("Failed to mark next installment as paid", exc)
            return None
        self._replace(purchase)
        return purchase

    async def fetch_installments(self, purchase_id: UUID) -> list[Installment]:
        try:
            async with self._operation() as session:
                return await purchase_service.list_installments(session, purchase_id)
        except ParcelasError as exc:
            self._fail("Failed to fetch installments", exc)
            return []

    async def monthly_summary(self, year: int, month: int) -> Optional[MonthlySummary]:
        try:
            async with self._operation() as session:
                return await purchase_service.monthly_total(session, year, month)
        except ParcelasError as exc:
            self._fail("Failed to compute monthly total", exc)
            return None
