"""Database tables / schema"""

from datetime import datetime, timezone

from sqlalchemy import JSON, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class DBGame(Base):
    __tablename__ = "games"
    slot: Mapped[str] = mapped_column(primary_key=True)
    board: Mapped[str] = mapped_column(String(64))
    turn: Mapped[str] = mapped_column(String(2))
    players: Mapped[dict[str, str]] = mapped_column(JSON)
    created_at: Mapped[datetime] = mapped_column(default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(default=utc_now, onupdate=utc_now)
