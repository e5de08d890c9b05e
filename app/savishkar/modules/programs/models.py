from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import Boolean, Date, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.savishkar.models import Base


class Program(Base):
    """
    A workshop, seminar or other initiative run by a prant (or nationally when
    `prant` is empty). Joint initiatives list their collaborating prants.
    """

    __tablename__ = "programs"
    __table_args__ = (
        Index("idx_programs_prant", "prant"),
        Index("idx_programs_published_date", "is_published", "event_date"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    program_type: Mapped[str] = mapped_column(String(64), nullable=False, default="Workshop")
    event_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    prant: Mapped[str | None] = mapped_column(String(128), nullable=True)

    is_joint_initiative: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    collab_prants: Mapped[str | None] = mapped_column(Text, nullable=True)  # newline-separated
    approval_status: Mapped[str] = mapped_column(String(16), nullable=False, default="approved")  # approved|pending
    is_published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_by_user_id: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)

    @property
    def collaborators(self) -> list[str]:
        return [p for p in (self.collab_prants or "").splitlines() if p]
