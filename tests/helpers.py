"""Shared fixtures for database-backed tests."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from unittest import IsolatedAsyncioTestCase

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from parcelas.models import Base
from parcelas.schemas.purchase import PurchaseCreate


def tv_purchase(**overrides) -> PurchaseCreate:
    fields = {
        "name": "TV",
        "total_value": Decimal("1200"),
        "total_installments": 12,
        "purchase_date": date(2024, 3, 15),
    }
    fields.update(overrides)
    return PurchaseCreate(**fields)


class DatabaseTestCase(IsolatedAsyncioTestCase):
    """Runs each test against a fresh in-memory SQLite database."""

    async def asyncSetUp(self) -> None:
        self.engine = create_async_engine(
            "sqlite+aiosqlite://",
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        self.session_factory = async_sessionmaker(
            self.engine, expire_on_commit=False, class_=AsyncSession
        )
        self.session = self.session_factory()

    async def asyncTearDown(self) -> None:
        await self.session.close()
        await self.engine.dispose()
