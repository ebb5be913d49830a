"""
EmailOutbox model: outgoing emails waiting for delivery through the mail relay.
Entries are written by the booking lifecycle and drained by the dispatcher.
"""

from sqlalchemy import String, Text, Integer, DateTime, Enum as SQLEnum, Index
from sqlalchemy.orm import Mapped, mapped_column
from rental_marketplace.database import Base
from datetime import datetime
import enum
from typing import Optional


class OutboxStatus(str, enum.Enum):
    PENDING = "pending"
    SENDING = "sending"
    SENT = "sent"
    FAILED = "failed"


class EmailOutbox(Base):
    """Queued email with its delivery bookkeeping."""

    __tablename__ = "email_outbox"

    recipient: Mapped[str] = mapped_column(String(255), nullable=False)

    subject: Mapped[str] = mapped_column(String(255), nullable=False)

    html: Mapped[str] = mapped_column(Text, nullable=False)

    status: Mapped[OutboxStatus] = mapped_column(
        SQLEnum(OutboxStatus),
        nullable=False,
        default=OutboxStatus.PENDING,
        index=True
    )

    attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Lease held by the sender that claimed the entry; expired leases are reclaimable
    locked_until: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    last_error: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    sent_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        return f"<EmailOutbox(id={self.id}, recipient={self.recipient}, status={self.status})>"

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "recipient": self.recipient,
            "subject": self.subject,
            "status": self.status.value,
            "attempts": self.attempts,
            "locked_until": self.locked_until.isoformat() if self.locked_until else None,
            "last_error": self.last_error,
            "sent_at": self.sent_at.isoformat() if self.sent_at else None,
            "created_at": self.created_at.isoformat(),
        }


pending_created_index = Index(
    'idx_email_outbox_status_created',
    EmailOutbox.status,
    EmailOutbox.created_at
)
