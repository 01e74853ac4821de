from typing import NoReturn

from fastapi import HTTPException

from ..exceptions import NotFoundError, ParcelasError, StoreError, ValidationError


def raise_http_error(exc: ParcelasError) -> NoReturn:
    """Translate a domain exception into the matching HTTP error."""
    if isinstance(exc, ValidationError):
        raise HTTPException(422, detail=str(exc)) from exc
    if isinstance(exc, NotFoundError):
        raise HTTPException(404, detail=str(exc)) from exc
    if isinstance(exc, StoreError):
        raise HTTPException(503, detail=str(exc)) from exc
    raise HTTPException(500, detail=str(exc)) from exc
