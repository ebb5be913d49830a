"""
Email outbox repository: queued emails and their delivery bookkeeping.

An entry is posted to the relay only by the sender that claimed it. A claim
moves the entry to SENDING with a lease; a sender that dies mid-delivery
leaves the lease to expire, after which the entry is claimable again.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, asc, and_, or_
from rental_marketplace.repositories.base import BaseRepository
from rental_marketplace.models.email_outbox import EmailOutbox, OutboxStatus
from typing import List, Optional
from datetime import datetime
import uuid
import logging

logger = logging.getLogger(__name__)


class EmailOutboxRepository(BaseRepository[EmailOutbox]):

    def __init__(self, db: AsyncSession):
        super().__init__(EmailOutbox, db)

    @staticmethod
    def _claimable(now: datetime):
        return or_(
            EmailOutbox.status == OutboxStatus.PENDING,
            and_(
                EmailOutbox.status == OutboxStatus.SENDING,
                EmailOutbox.locked_until < now
            )
        )

    async def get_claimable(self, now: datetime, limit: int = 50) -> List[EmailOutbox]:
        """Get pending entries and entries with an expired lease, oldest first."""
        try:
            query = (
                select(EmailOutbox)
                .where(self._claimable(now))
                .order_by(asc(EmailOutbox.created_at))
                .limit(limit)
                .execution_options(populate_existing=True)
            )
            result = await self.db.execute(query)
            return list(result.scalars().all())
        except Exception as e:
            logger.error(f"Failed to load claimable outbox entries: {e}")
            raise

    async def claim(self, entry_id: uuid.UUID, now: datetime, locked_until: datetime) -> Optional[EmailOutbox]:
        """
        Atomically take an entry for delivery.

        Args:
            entry_id: UUID of the outbox entry
            now: Current time, used to detect expired leases
            locked_until: End of the new lease

        Returns:
            The reloaded entry if this caller now holds it, None if another
            sender claimed it first or it is already sent or failed
        """
        async with self._transaction(f"claim outbox entry {entry_id}"):
            result = await self.db.execute(
                update(EmailOutbox)
                .where(EmailOutbox.id == entry_id, self._claimable(now))
                .values(status=OutboxStatus.SENDING, locked_until=locked_until)
                .execution_options(synchronize_session=False)
            )

        if result.rowcount != 1:
            logger.debug(f"Outbox entry {entry_id} already claimed")
            return None

        return await self.db.get(EmailOutbox, entry_id, populate_existing=True)
