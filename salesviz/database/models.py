"""
Database Models

Tables owned by the data store:
- sales_records: one row per sales transaction
- sales_people: reference data per salesperson, joined to records by name

The dashboard only reads these tables.
"""

import datetime
from decimal import Decimal
from typing import Optional
import uuid

from sqlalchemy import (
    Date,
    DateTime,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all database models"""
    pass


def _new_id() -> str:
    return str(uuid.uuid4())


class SalesRecordRow(Base):
    """
    Sales Transaction Table

    total_amount is stored as entered and not derived from
    quantity * unit_price.
    """
    __tablename__ = "sales_records"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    date: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    customer_name: Mapped[str] = mapped_column(String(255), nullable=False)
    product_name: Mapped[str] = mapped_column(String(255), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=0)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=0)
    sales_person: Mapped[str] = mapped_column(String(100), nullable=False)
    category: Mapped[Optional[str]] = mapped_column(String(100))
    notes: Mapped[Optional[str]] = mapped_column(Text)

    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        Index("ix_sales_records_date", "date"),
        Index("ix_sales_records_sales_person", "sales_person"),
    )


class SalesPersonRow(Base):
    """Salesperson Reference Table"""
    __tablename__ = "sales_people"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    department: Mapped[Optional[str]] = mapped_column(String(100))
    email: Mapped[Optional[str]] = mapped_column(String(255))
    monthly_target: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=0)
    quarterly_target: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=0)
    hire_date: Mapped[Optional[datetime.date]] = mapped_column(Date)
