from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..db import get_db
from ..exceptions import ParcelasError
from ..schemas.purchase import (
    InstallmentPaidRequest,
    InstallmentRead,
    PurchaseCreate,
    PurchaseDetail,
    PurchaseRead,
    PurchaseStatus,
    PurchaseUpdate,
)
from ..services import (
    create_purchase,
    delete_purchase,
    get_purchase,
    list_installments,
    list_purchases,
    mark_installment_paid,
    mark_next_installment_paid,
    update_purchase,
)
from ..services.formatting import progress_percentage, remaining_value
from .errors import raise_http_error

router = APIRouter()

SessionDep = Annotated[AsyncSession, Depends(get_db)]


@router.post("", response_model=PurchaseRead, status_code=status.HTTP_201_CREATED)
async def create_purchase_endpoint(payload: PurchaseCreate, session: SessionDep) -> PurchaseRead:
    try:
        purchase = await create_purchase(session, payload)
    except ParcelasError as exc:
        raise_http_error(exc)
    return PurchaseRead.model_validate(purchase)


@router.get("", response_model=list[PurchaseRead])
async def list_purchases_endpoint(
    session: SessionDep,
    purchase_status: Annotated[PurchaseStatus, Query(alias="status")] = PurchaseStatus.ALL,
) -> list[PurchaseRead]:
    try:
        purchases = await list_purchases(session, status=purchase_status)
    except ParcelasError as exc:
        raise_http_error(exc)
    return [PurchaseRead.model_validate(p) for p in purchases]


@router.get("/{purchase_id}", response_model=PurchaseDetail)
async def get_purchase_endpoint(purchase_id: UUID, session: SessionDep) -> PurchaseDetail:
    try:
        purchase = await get_purchase(session, purchase_id)
        if not purchase:
            raise HTTPException(status_code=404, detail="Purchase not found")
        installments = await list_installments(session, purchase_id)
    except ParcelasError as exc:
        raise_http_error(exc)
    return PurchaseDetail(
        **PurchaseRead.model_validate(purchase).model_dump(),
        installments=[InstallmentRead.model_validate(i) for i in installments],
        remaining_value=remaining_value(installments),
        progress_percentage=progress_percentage(
            purchase.paid_installments, purchase.total_installments
        ),
    )


@router.patch("/{purchase_id}", response_model=PurchaseRead)
async def update_purchase_endpoint(
    purchase_id: UUID, payload: PurchaseUpdate, session: SessionDep
) -> PurchaseRead:
    try:
        purchase = await update_purchase(session, purchase_id, payload)
    except ParcelasError as exc:
        raise_http_error(exc)
    return PurchaseRead.model_validate(purchase)


@router.delete("/{purchase_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_purchase_endpoint(purchase_id: UUID, session: SessionDep) -> Response:
    try:
        await delete_purchase(session, purchase_id)
    except ParcelasError as exc:
        raise_http_error(exc)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{purchase_id}/installments", response_model=list[InstallmentRead])
async def list_installments_endpoint(
    purchase_id: UUID, session: SessionDep
) -> list[InstallmentRead]:
    try:
        installments = await list_installments(session, purchase_id)
    except ParcelasError as exc:
        raise_http_error(exc)
    return [InstallmentRead.model_validate(i) for i in installments]


@router.post("/{purchase_id}/installments/next/pay", response_model=PurchaseRead)
async def pay_next_installment_endpoint(purchase_id: UUID, session: SessionDep) -> PurchaseRead:
    try:
        purchase = await mark_next_installment_paid(session, purchase_id)
    except ParcelasError as exc:
        raise_http_error(exc)
    return PurchaseRead.model_validate(purchase)


@router.put("/{purchase_id}/installments/{number}", response_model=PurchaseRead)
async def set_installment_paid_endpoint(
    purchase_id: UUID,
    number: int,
    payload: InstallmentPaidRequest,
    session: SessionDep,
) -> PurchaseRead:
    try:
        purchase = await mark_installment_paid(session, purchase_id, number, payload.paid)
    except ParcelasError as exc:
        raise_http_error(exc)
    return PurchaseRead.model_validate(purchase)
