"""
SQLAlchemy models for insurance claims.
Used by postgres_real when DATABASE_URL is set.
"""
from __future__ import annotations
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Optional
from uuid import uuid4
from sqlalchemy import Date, DateTime, Numeric, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class Claim(Base):
    __tablename__ = "insurance_claims"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    claim_number: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    policy_number: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    incident_date: Mapped[date] = mapped_column(Date, nullable=False)
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    estimated_amount: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    type: Mapped[str] = mapped_column(String(32), nullable=False)
    status: Mapped[str] = mapped_column(String(32), default="SUBMITTED", nullable=False)
    claimant_name: Mapped[str] = mapped_column(String(256), nullable=False)
    claimant_email: Mapped[Optional[str]] = mapped_column(String(256), nullable=True)
    claimant_phone: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    additional_details: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    assigned_adjuster: Mapped[Optional[str]] = mapped_column(String(256), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)
