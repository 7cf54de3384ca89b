from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column

from tournament_hub.db.models.base import Base


class Tournament(Base):
    __tablename__ = "tournaments"
    __table_args__ = (
        UniqueConstraint("registration_code", name="uq_tournaments_registration_code"),
        CheckConstraint(
            "status IN ('upcoming','ongoing','completed')",
            name="ck_tournaments_status",
        ),
        CheckConstraint("max_participants >= 1", name="ck_tournaments_max_participants_positive"),
        CheckConstraint(
            "end_at IS NULL OR end_at >= start_at",
            name="ck_tournaments_end_after_start",
        ),
        Index("idx_tournaments_status_start_at", "status", "start_at"),
        Index("idx_tournaments_created_by_created_at", "created_by", "created_at"),
    )

    id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True)
    registration_code: Mapped[str] = mapped_column(String(16), nullable=False)
    title: Mapped[str] = mapped_column(String(128), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    game: Mapped[str] = mapped_column(String(64), nullable=False)
    location: Mapped[str] = mapped_column(String(256), nullable=False)
    start_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    prize_pool: Mapped[str | None] = mapped_column(String(128), nullable=True)
    rules: Mapped[str | None] = mapped_column(Text, nullable=True)
    max_participants: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False)
    created_by: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("users.id"),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
