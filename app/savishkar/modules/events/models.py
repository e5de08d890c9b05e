from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.savishkar.models import Base


class EventDelegate(Base):
    """A delegate registered for an event by an event manager (or an admin)."""

    __tablename__ = "event_delegates"
    __table_args__ = (
        Index("idx_event_delegates_manager", "manager_user_id"),
        Index("idx_event_delegates_prant", "prant"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    event_name: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    prant: Mapped[str | None] = mapped_column(String(128), nullable=True)

    manager_user_id: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)
