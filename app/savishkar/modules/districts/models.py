from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.savishkar.models import Base


class PrantDistrict(Base):
    """District reference row under a prant."""

    __tablename__ = "prant_districts"
    __table_args__ = (UniqueConstraint("prant", "district", name="uq_prant_districts_prant_district"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    prant: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    district: Mapped[str] = mapped_column(String(128), nullable=False)
    display_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)
