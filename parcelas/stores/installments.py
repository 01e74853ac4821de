"""Data access for generated installments."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..exceptions import InstallmentNotFoundError
from ..models.purchase import Installment

if TYPE_CHECKING:
    from ..services.schedule import ScheduledInstallment


class InstallmentStore:
    """Repository for installments. Writes are flushed, never committed."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def insert_batch(
        self, purchase_id: UUID, schedule: Iterable[ScheduledInstallment]
    ) -> list[Installment]:
        installments = [
            Installment(
                purchase_id=purchase_id,
                number=item.number,
                value=item.value,
                due_date=item.due_date,
                paid=item.paid,
            )
            for item in schedule
        ]
        self.session.add_all(installments)
        await self.session.flush()
        return installments

    async def delete_all_for_purchase(self, purchase_id: UUID) -> None:
        await self.session.execute(
            delete(Installment)
            .where(Installment.purchase_id == purchase_id)
            .execution_options(synchronize_session="evaluate")
        )

    async def update_paid_flag(self, purchase_id: UUID, number: int, paid: bool) -> None:
        installment = await self.session.scalar(
            select(Installment).where(
                Installment.purchase_id == purchase_id, Installment.number == number
            )
        )
        if installment is None:
            raise InstallmentNotFoundError(purchase_id, number)
        installment.paid = paid
        await self.session.flush()

    async def count_paid(self, purchase_id: UUID) -> int:
        count = await self.session.scalar(
            select(func.count())
            .select_from(Installment)
            .where(Installment.purchase_id == purchase_id, Installment.paid.is_(True))
        )
        return int(count or 0)

    async def list_for_purchase(self, purchase_id: UUID) -> list[Installment]:
        result = await self.session.execute(
            select(Installment)
            .where(Installment.purchase_id == purchase_id)
            .order_by(Installment.number.asc())
        )
        return list(result.scalars().all())

    async def list_unpaid_due_between(self, start: date, end: date) -> list[Installment]:
        """Unpaid installments with ``start <= due_date < end``."""
        result = await self.session.execute(
            select(Installment)
            .where(
                Installment.paid.is_(False),
                Installment.due_date >= start,
                Installment.due_date < end,
            )
            .order_by(Installment.due_date.asc(), Installment.number.asc())
        )
        return list(result.scalars().all())
