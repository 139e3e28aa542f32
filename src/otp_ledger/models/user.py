"""SQLAlchemy User model."""

from datetime import UTC, datetime

from sqlalchemy import DateTime, Index, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Shared declarative base for all ORM models."""


class User(Base):
    """An identity that OTPs can be issued to.

    Callers only ever see the opaque ``uuid``; the integer ``id`` is the
    internal key the ledger is keyed on.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    uuid: Mapped[str] = mapped_column(
        String(36), nullable=False, unique=True, doc="Public identifier (UUID4)"
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC)
    )

    __table_args__ = (Index("ix_users_uuid", "uuid"),)

    def __repr__(self) -> str:
        return f"<User id={self.id} uuid={self.uuid!r}>"
