"""Purchase lifecycle and paid-count reconciliation.

Every write path re-derives ``Purchase.paid_installments`` by counting paid
installment rows, so the cached counter cannot drift from the schedule. The
purchase write and the installment batch of one operation share a session and
are committed together; a failure rolls back both.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import date
from decimal import Decimal
from typing import Any, Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import get_settings
from ..exceptions import ParcelasError, PurchaseNotFoundError, StoreError, ValidationError
from ..models.purchase import Installment, Purchase
from ..schemas.purchase import MonthlySummary, PurchaseCreate, PurchaseStatus, PurchaseUpdate
from ..stores import InstallmentStore, PurchaseStore
from .formatting import format_brl, format_month_label
from .schedule import add_months, generate_schedule, quantize_money, split_installment_value

logger = logging.getLogger(__name__)

SCHEDULE_FIELDS = frozenset({"total_installments", "installment_value", "purchase_date"})


@asynccontextmanager
async def _store_errors(session: AsyncSession, action: str) -> AsyncIterator[None]:
    """Roll back and translate database failures raised inside the block."""
    try:
        yield
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.exception("Database error while trying to %s", action)
        raise StoreError(f"Failed to {action}") from exc
    except ParcelasError:
        await session.rollback()
        raise


def _validate_value(total_value: Decimal) -> None:
    if total_value is None or Decimal(total_value) <= 0:
        raise ValidationError("Total value must be greater than zero.")


def _validate_count(total_installments: int) -> None:
    if total_installments < 1:
        raise ValidationError("Total installments must be at least 1.")
    max_installments = get_settings().max_installments
    if total_installments > max_installments:
        raise ValidationError(f"Total installments cannot exceed {max_installments}.")


def _validate_terms(total_value: Decimal, total_installments: int, paid_installments: int) -> None:
    _validate_value(total_value)
    _validate_count(total_installments)
    if paid_installments < 0 or paid_installments > total_installments:
        raise ValidationError("Paid installments must be between 0 and total installments.")


async def _sync_paid_count(
    purchases: PurchaseStore, installments: InstallmentStore, purchase_id: UUID
) -> Purchase:
    paid = await installments.count_paid(purchase_id)
    return await purchases.update(purchase_id, {"paid_installments": paid})


async def create_purchase(session: AsyncSession, payload: PurchaseCreate) -> Purchase:
    """Create a purchase and generate its installment schedule."""
    _validate_terms(payload.total_value, payload.total_installments, payload.paid_installments)
    installment_value = (
        quantize_money(payload.installment_value)
        if payload.installment_value is not None
        else split_installment_value(payload.total_value, payload.total_installments)
    )

    purchases = PurchaseStore(session)
    installments = InstallmentStore(session)
    async with _store_errors(session, "add purchase"):
        purchase = await purchases.create(
            name=payload.name,
            total_value=quantize_money(payload.total_value),
            installment_value=installment_value,
            total_installments=payload.total_installments,
            paid_installments=payload.paid_installments,
            purchase_date=payload.purchase_date,
        )
        schedule = generate_schedule(
            installment_value=installment_value,
            total_installments=payload.total_installments,
            purchase_date=payload.purchase_date,
            paid_installments=payload.paid_installments,
        )
        await installments.insert_batch(purchase.id, schedule)
        purchase = await _sync_paid_count(purchases, installments, purchase.id)
        await session.commit()

    logger.info("Created purchase %s with %d installments", purchase.id, len(schedule))
    return purchase


async def update_purchase(
    session: AsyncSession, purchase_id: UUID, payload: PurchaseUpdate
) -> Purchase:
    """Apply a partial update, regenerating the schedule when its terms change.

    A regenerated schedule keeps the number of paid installments, clamped to the
    new total, and marks the first ones as paid. Which specific installments had
    been paid before is not preserved.
    """
    changes: dict[str, Any] = payload.model_dump(exclude_unset=True, exclude_none=True)
    if "total_value" in changes:
        _validate_value(changes["total_value"])
    if "total_installments" in changes:
        _validate_count(changes["total_installments"])
    if "installment_value" in changes and Decimal(changes["installment_value"]) <= 0:
        raise ValidationError("Installment value must be greater than zero.")

    purchases = PurchaseStore(session)
    installments = InstallmentStore(session)
    async with _store_errors(session, "update purchase"):
        purchase = await purchases.get(purchase_id)
        if not changes:
            return purchase

        if "total_value" in changes:
            changes["total_value"] = quantize_money(changes["total_value"])
        if "installment_value" in changes:
            changes["installment_value"] = quantize_money(changes["installment_value"])
        elif {"total_value", "total_installments"} & changes.keys():
            changes["installment_value"] = split_installment_value(
                changes.get("total_value", purchase.total_value),
                changes.get("total_installments", purchase.total_installments),
            )

        total_installments = changes.get("total_installments", purchase.total_installments)
        reschedule = bool(SCHEDULE_FIELDS & changes.keys())
        if reschedule:
            changes["paid_installments"] = min(purchase.paid_installments, total_installments)
        if changes.get("paid_installments", purchase.paid_installments) > total_installments:
            raise ValidationError("Paid installments must be between 0 and total installments.")

        purchase = await purchases.update(purchase_id, changes)
        if reschedule:
            await installments.delete_all_for_purchase(purchase_id)
            schedule = generate_schedule(
                installment_value=purchase.installment_value,
                total_installments=purchase.total_installments,
                purchase_date=purchase.purchase_date,
                paid_installments=purchase.paid_installments,
            )
            await installments.insert_batch(purchase_id, schedule)
            purchase = await _sync_paid_count(purchases, installments, purchase_id)
        await session.commit()

    if reschedule:
        logger.info("Regenerated schedule for purchase %s", purchase_id)
    return purchase


async def delete_purchase(session: AsyncSession, purchase_id: UUID) -> None:
    """Delete a purchase and all of its installments. Irreversible.

    Deleting a purchase that no longer exists succeeds without doing anything.
    """
    try:
        async with _store_errors(session, "delete purchase"):
            await PurchaseStore(session).delete(purchase_id)
            await session.commit()
    except PurchaseNotFoundError:
        logger.info("Purchase %s already deleted", purchase_id)
        return
    logger.info("Deleted purchase %s", purchase_id)


async def mark_installment_paid(
    session: AsyncSession, purchase_id: UUID, number: int, paid: bool = True
) -> Purchase:
    """Set one installment's paid flag and recount the purchase's paid installments."""
    purchases = PurchaseStore(session)
    installments = InstallmentStore(session)
    async with _store_errors(session, "mark installment as paid"):
        await purchases.get(purchase_id)
        await installments.update_paid_flag(purchase_id, number, paid)
        purchase = await _sync_paid_count(purchases, installments, purchase_id)
        await session.commit()
    return purchase


async def mark_next_installment_paid(session: AsyncSession, purchase_id: UUID) -> Purchase:
    """Pay the installment after the last paid one; no-op once fully paid."""
    async with _store_errors(session, "mark next installment as paid"):
        purchase = await PurchaseStore(session).get(purchase_id)
    if purchase.paid_installments >= purchase.total_installments:
        return purchase
    return await mark_installment_paid(session, purchase_id, purchase.paid_installments + 1)


async def get_purchase(session: AsyncSession, purchase_id: UUID) -> Optional[Purchase]:
    async with _store_errors(session, "fetch purchase"):
        return await PurchaseStore(session).find(purchase_id)


async def list_purchases(
    session: AsyncSession, *, status: PurchaseStatus = PurchaseStatus.ALL
) -> list[Purchase]:
    async with _store_errors(session, "fetch purchases"):
        return await PurchaseStore(session).list(status)


async def list_installments(session: AsyncSession, purchase_id: UUID) -> list[Installment]:
    async with _store_errors(session, "fetch installments"):
        await PurchaseStore(session).get(purchase_id)
        return await InstallmentStore(session).list_for_purchase(purchase_id)


async def monthly_total(session: AsyncSession, year: int, month: int) -> MonthlySummary:
    """Sum of unpaid installments falling due in the given month."""
    if not 1 <= month <= 12:
        raise ValidationError("Month must be between 1 and 12.")
    if not date.min.year <= year < date.max.year:
        raise ValidationError(f"Year must be between {date.min.year} and {date.max.year - 1}.")
    start = date(year, month, 1)
    async with _store_errors(session, "compute monthly total"):
        due = await InstallmentStore(session).list_unpaid_due_between(start, add_months(start, 1))
    total = quantize_money(sum((Decimal(inst.value) for inst in due), Decimal("0")))
    return MonthlySummary(
        year=year,
        month=month,
        label=format_month_label(year, month),
        total=total,
        installment_count=len(due),
        formatted_total=format_brl(total),
    )
