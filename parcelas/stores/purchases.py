"""Data access for purchases."""

from __future__ import annotations

from typing import Any, Optional
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..exceptions import PurchaseNotFoundError
from ..models.purchase import Installment, Purchase
from ..schemas.purchase import PurchaseStatus


class PurchaseStore:
    """Repository for purchases. Writes are flushed, never committed."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, **fields: Any) -> Purchase:
        purchase = Purchase(**fields)
        self.session.add(purchase)
        await self.session.flush()
        return purchase

    async def find(self, purchase_id: UUID) -> Optional[Purchase]:
        return await self.session.get(Purchase, purchase_id)

    async def get(self, purchase_id: UUID) -> Purchase:
        purchase = await self.find(purchase_id)
        if purchase is None:
            raise PurchaseNotFoundError(purchase_id)
        return purchase

    async def update(self, purchase_id: UUID, fields: dict[str, Any]) -> Purchase:
        purchase = await self.get(purchase_id)
        for key, value in fields.items():
            setattr(purchase, key, value)
        await self.session.flush()
        return purchase

    async def delete(self, purchase_id: UUID) -> None:
        """Delete a purchase together with its installments."""
        await self.get(purchase_id)
        await self.session.execute(
            delete(Installment)
            .where(Installment.purchase_id == purchase_id)
            .execution_options(synchronize_session="evaluate")
        )
        await self.session.execute(
            delete(Purchase)
            .where(Purchase.id == purchase_id)
            .execution_options(synchronize_session="evaluate")
        )

    async def list(self, status: PurchaseStatus = PurchaseStatus.ALL) -> list[Purchase]:
        stmt = select(Purchase).order_by(Purchase.purchase_date.desc(), Purchase.created_at.desc())
        if status == PurchaseStatus.PENDING:
            stmt = stmt.where(Purchase.paid_installments < Purchase.total_installments)
        elif status == PurchaseStatus.COMPLETED:
            stmt = stmt.where(Purchase.paid_installments >= Purchase.total_installments)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
