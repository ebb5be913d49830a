"""
Email dispatch service backed by the email outbox.
Queues outgoing emails and delivers them through the mail relay HTTP endpoint.
"""

from typing import Optional, Dict, List
from datetime import datetime, timedelta, timezone
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from rental_marketplace.config import Settings, settings as default_settings
from rental_marketplace.models.email_outbox import EmailOutbox, OutboxStatus
from rental_marketplace.repositories.outbox import EmailOutboxRepository
from rental_marketplace.utils.exceptions import EmailDeliveryError
import asyncio
import httpx
import logging

logger = logging.getLogger(__name__)

RELAY_TOKEN_HEADER = "X-Email-Relay-Token"


class EmailDispatchService:
    """
    Outbox-backed email sender.

    Every email is persisted before the first delivery attempt, so a relay
    outage never loses it: the background worker retries pending entries
    until they are sent or reach the attempt limit. Only the sender holding
    an entry's lease posts it.
    """

    def __init__(
        self,
        db_session: AsyncSession,
        http_client: Optional[httpx.AsyncClient] = None,
        app_settings: Optional[Settings] = None
    ):
        self.db = db_session
        self.http_client = http_client
        self.settings = app_settings or default_settings
        self.outbox_repo = EmailOutboxRepository(db_session)

    async def enqueue(self, to: str, subject: str, html: str) -> EmailOutbox:
        """Persist a pending outbox entry for the worker to deliver."""
        entry = await self.outbox_repo.create({
            "recipient": to,
            "subject": subject,
            "html": html,
            "status": OutboxStatus.PENDING,
            "attempts": 0,
        })
        logger.debug(f"Queued email {entry.id} to {to}: {subject}")
        return entry

    async def send(self, to: str, subject: str, html: str) -> bool:
        """
        Queue an email and make exactly one delivery attempt.

        The entry is written already claimed, so a worker round running during
        the relay call skips it instead of posting it a second time.

        Returns:
            True if the relay accepted the email
        """
        entry = await self.outbox_repo.create({
            "recipient": to,
            "subject": subject,
            "html": html,
            "status": OutboxStatus.SENDING,
            "attempts": 0,
            "locked_until": self._lease_end(datetime.now(timezone.utc)),
        })
        logger.debug(f"Queued email {entry.id} to {to} for immediate delivery: {subject}")
        return await self._attempt(entry)

    async def deliver(self, entry: EmailOutbox) -> Optional[bool]:
        """
        Claim an outbox entry and make one delivery attempt.

        Args:
            entry: Pending entry, or a sending entry whose lease expired

        Returns:
            True if the relay answered 2xx, False if the attempt failed,
            None if another sender holds the entry or it is already settled
        """
        now = datetime.now(timezone.utc)
        claimed = await self.outbox_repo.claim(entry.id, now, self._lease_end(now))
        if claimed is None:
            return None
        return await self._attempt(claimed)

    async def dispatch_pending(self, limit: Optional[int] = None) -> Dict[str, int]:
        """
        Deliver claimable outbox entries, oldest first.

        Entries claimed by another sender between the query and the claim are
        skipped and not counted.

        Returns:
            Counts of attempted, sent and failed deliveries
        """
        entries: List[EmailOutbox] = await self.outbox_repo.get_claimable(
            datetime.now(timezone.utc),
            limit or self.settings.outbox_batch_size
        )
        attempted = sent = 0
        for entry in entries:
            outcome = await self.deliver(entry)
            if outcome is None:
                continue
            attempted += 1
            if outcome:
                sent += 1

        result = {"attempted": attempted, "sent": sent, "failed": attempted - sent}
        if attempted:
            logger.info(f"Outbox dispatch: {result}")
        return result

    def _lease_end(self, now: datetime) -> datetime:
        return now + timedelta(seconds=self.settings.outbox_lease_seconds)

    async def _attempt(self, entry: EmailOutbox) -> bool:
        """One relay POST for an entry this sender holds; the outcome releases the lease."""
        attempts = entry.attempts + 1
        try:
            await self._post_to_relay(entry)
        except EmailDeliveryError as e:
            status = OutboxStatus.FAILED if attempts >= self.settings.outbox_max_attempts else OutboxStatus.PENDING
            await self.outbox_repo.update(entry.id, {
                "attempts": attempts,
                "last_error": str(e),
                "status": status,
                "locked_until": None,
            })
            logger.warning(
                f"Email {entry.id} to {entry.recipient} failed (attempt {attempts}/"
                f"{self.settings.outbox_max_attempts}, now {status.value}): {e}"
            )
            return False

        await self.outbox_repo.update(entry.id, {
            "attempts": attempts,
            "last_error": None,
            "status": OutboxStatus.SENT,
            "sent_at": datetime.now(timezone.utc),
            "locked_until": None,
        })
        logger.info(f"Email {entry.id} sent to {entry.recipient}: {entry.subject}")
        return True

    async def _post_to_relay(self, entry: EmailOutbox) -> None:
        payload = {"to": entry.recipient, "subject": entry.subject, "html": entry.html}
        headers = {}
        if self.settings.email_relay_token:
            headers[RELAY_TOKEN_HEADER] = self.settings.email_relay_token

        try:
            if self.http_client is not None:
                response = await self.http_client.post(
                    self.settings.email_endpoint_url,
                    json=payload,
                    headers=headers,
                    timeout=self.settings.email_request_timeout
                )
            else:
                async with httpx.AsyncClient(timeout=self.settings.email_request_timeout) as client:
                    response = await client.post(self.settings.email_endpoint_url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            raise EmailDeliveryError(f"Mail relay request failed: {type(e).__name__}: {e}")

        if not response.is_success:
            raise EmailDeliveryError(
                f"Mail relay returned {response.status_code}: {response.text[:200]}",
                status_code=response.status_code
            )


async def run_outbox_worker(
    session_factory: async_sessionmaker,
    http_client: Optional[httpx.AsyncClient] = None,
    app_settings: Optional[Settings] = None
) -> None:
    """
    Drain the outbox periodically until cancelled.
    Each round uses its own session; a failed round is logged and retried next interval.
    """
    app_settings = app_settings or default_settings
    logger.info(f"Outbox worker started (interval {app_settings.outbox_dispatch_interval_seconds}s)")

    while True:
        try:
            async with session_factory() as session:
                service = EmailDispatchService(session, http_client, app_settings)
                await service.dispatch_pending()
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Outbox dispatch round failed")

        await asyncio.sleep(app_settings.outbox_dispatch_interval_seconds)
