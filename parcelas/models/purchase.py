from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    ForeignKey,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base


class Purchase(Base):
    """A purchase paid in monthly installments."""

    __tablename__ = "purchases"
    __table_args__ = (
        CheckConstraint("total_installments >= 1", name="ck_purchases_total_installments"),
        CheckConstraint(
            "paid_installments >= 0 AND paid_installments <= total_installments",
            name="ck_purchases_paid_installments",
        ),
    )

    name: Mapped[str] = mapped_column(String(128), nullable=False)
    total_value: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    installment_value: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    total_installments: Mapped[int] = mapped_column(Integer, nullable=False)
    paid_installments: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
        doc="Cached count of paid installments; re-derived on every reconciling write.",
    )
    purchase_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)

    installments: Mapped[list["Installment"]] = relationship(
        back_populates="purchase",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Installment.number",
        lazy="raise",
    )


class Installment(Base):
    """One scheduled monthly payment belonging to a purchase."""

    __tablename__ = "installments"
    __table_args__ = (
        UniqueConstraint("purchase_id", "number", name="uq_installments_purchase_number"),
    )

    purchase_id: Mapped[UUID] = mapped_column(
        ForeignKey("purchases.id", ondelete="CASCADE"), nullable=False, index=True
    )
    number: Mapped[int] = mapped_column(Integer, nullable=False)
    value: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    due_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    paid: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    purchase: Mapped[Purchase] = relationship(back_populates="installments", lazy="raise")
