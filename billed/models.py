from __future__ import annotations

import uuid
from datetime import datetime
from sqlalchemy import String, DateTime, Float, Text, CheckConstraint, func
from sqlalchemy.orm import Mapped, mapped_column
from .db import Base


def new_bill_key() -> str:
    return uuid.uuid4().hex


class Bill(Base):
    __tablename__ = "bills"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_bill_key)
    email: Mapped[str] = mapped_column(String(255), index=True)
    type: Mapped[str | None] = mapped_column(String(64), nullable=True)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    amount: Mapped[float | None] = mapped_column(Float, nullable=True)
    # kept as text: old rows may hold dates that do not parse
    date: Mapped[str | None] = mapped_column(String(32), nullable=True)
    vat: Mapped[str | None] = mapped_column(String(32), nullable=True)
    pct: Mapped[float | None] = mapped_column(Float, nullable=True)
    commentary: Mapped[str | None] = mapped_column(Text, nullable=True)
    file_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    file_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    status: Mapped[str] = mapped_column(String(16), default="pending")
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())

    __table_args__ = (
        CheckConstraint("amount IS NULL OR amount >= 0", name="ck_bills_amount_nonneg"),
        CheckConstraint("status IN ('pending', 'accepted', 'refused')", name="ck_bills_status"),
    )

    def __repr__(self) -> str:
        return f"<Bill id={self.id} email={self.email} date={self.date} status={self.status}>"
