"""Database tables / schema"""

from datetime import datetime, timezone
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import JSON
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class DBGame(Base):
    __tablename__ = "games"
    id: Mapped[UUID] = mapped_column(primary_key=True)
    current_fen: Mapped[str]
    # every piece (incl. whether it moved), side to move, en passant target, game over flag
    board_state: Mapped[dict[str, Any]] = mapped_column(JSON)
    move_history: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)
    clock: Mapped[dict[str, float]] = mapped_column(JSON)
    status: Mapped[str]
    winner: Mapped[Optional[str]]
    created_at: Mapped[datetime] = mapped_column(default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(default=utc_now, onupdate=utc_now)
