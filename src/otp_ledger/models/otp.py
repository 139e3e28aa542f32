"""SQLAlchemy OTP ledger model."""

from datetime import UTC, datetime
from enum import IntEnum

from sqlalchemy import DateTime, ForeignKey, Index, Integer, SmallInteger, String
from sqlalchemy.orm import Mapped, mapped_column

from otp_ledger.models.user import Base


class OTPStatus(IntEnum):
    """Lifecycle of a ledger row. UNUSED is the only non-terminal state."""

    UNUSED = 0
    USED = 1
    EXPIRED = 2


class OTP(Base):
    """One issued passcode.

    Rows are append-only: a record moves from ``UNUSED`` to ``USED`` or
    ``EXPIRED`` exactly once and is never deleted, so the table doubles as
    an audit trail of every code handed out.
    """

    __tablename__ = "otps"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    code: Mapped[str] = mapped_column(String(16), nullable=False)
    request_id: Mapped[str] = mapped_column(
        String(64), nullable=False, default="", doc="Correlation token given at issuance"
    )
    status: Mapped[int] = mapped_column(
        SmallInteger, nullable=False, default=OTPStatus.UNUSED
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC)
    )

    __table_args__ = (
        Index("ix_otps_user_status", "user_id", "status"),
        Index("ix_otps_user_code_status", "user_id", "code", "status"),
    )

    def __repr__(self) -> str:
        return (
            f"<OTP id={self.id} user_id={self.user_id} "
            f"status={OTPStatus(self.status).name} expires_at={self.expires_at}>"
        )
