from datetime import date
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..db import get_db
from ..exceptions import ParcelasError
from ..schemas.purchase import MonthlySummary
from ..services import monthly_total
from .errors import raise_http_error

router = APIRouter()

SessionDep = Annotated[AsyncSession, Depends(get_db)]


def _parse_month(value: Optional[str]) -> tuple[int, int]:
    """Parse ``YYYY-MM``; defaults to the current month."""
    if not value:
        today = date.today()
        return today.year, today.month
    try:
        year_part, month_part = value.split("-")
        year, month = int(year_part), int(month_part)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail="Month must use the YYYY-MM format") from exc
    if not 1 <= month <= 12:
        raise HTTPException(status_code=422, detail="Month must be between 1 and 12")
    return year, month


@router.get("/monthly", response_model=MonthlySummary)
async def monthly_summary_endpoint(
    session: SessionDep,
    month: Annotated[Optional[str], Query(description="Month in YYYY-MM format")] = None,
) -> MonthlySummary:
    year, month_number = _parse_month(month)
    try:
        return await monthly_total(session, year, month_number)
    except ParcelasError as exc:
        raise_http_error(exc)
