from fastapi import APIRouter

from . import purchases, summary

api_router = APIRouter()
api_router.include_router(purchases.router, prefix="/purchases", tags=["purchases"])
api_router.include_router(summary.router, prefix="/summary", tags=["summary"])
