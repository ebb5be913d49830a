"""
Tests for the email outbox: queueing, delivery attempts, retries and the SMTP mailer.
"""

import asyncio
import pytest
import httpx
import aiosmtplib
from datetime import datetime, timedelta, timezone
from pydantic import ValidationError as SettingsError
from sqlalchemy import select

from rental_marketplace.config import Settings
from rental_marketplace.models.email_outbox import EmailOutbox, OutboxStatus
from rental_marketplace.repositories.outbox import EmailOutboxRepository
from rental_marketplace.services.email_dispatch import EmailDispatchService, RELAY_TOKEN_HEADER, run_outbox_worker
from rental_marketplace.services.mailer import MailerService
from rental_marketplace.utils.exceptions import EmailDeliveryError
from tests.conftest import RecordingRelay, TEST_RELAY_URL, make_settings


class TestEmailDispatchService:
    """Delivery bookkeeping on outbox entries."""

    @pytest.mark.asyncio
    async def test_send_success(self, db_session, relay, relay_client):
        service = EmailDispatchService(db_session, relay_client, make_settings())

        assert await service.send("renter@test.com", "Hello", "<p>Hi</p>") is True

        entry = (await db_session.execute(select(EmailOutbox))).scalar_one()
        assert entry.status == OutboxStatus.SENT
        assert entry.attempts == 1
        assert entry.sent_at is not None
        assert entry.last_error is None

        assert len(relay.requests) == 1
        assert str(relay.requests[0].url) == TEST_RELAY_URL
        assert relay.payloads[0] == {"to": "renter@test.com", "subject": "Hello", "html": "<p>Hi</p>"}
        assert RELAY_TOKEN_HEADER not in relay.requests[0].headers

    @pytest.mark.asyncio
    async def test_relay_token_header(self, db_session, relay, relay_client):
        service = EmailDispatchService(db_session, relay_client, make_settings(email_relay_token="s3cret"))

        await service.send("renter@test.com", "Hello", "<p>Hi</p>")

        assert relay.requests[0].headers[RELAY_TOKEN_HEADER] == "s3cret"

    @pytest.mark.asyncio
    async def test_non_2xx_is_a_failed_attempt(self, db_session):
        relay = RecordingRelay(status_code=500)
        async with httpx.AsyncClient(transport=httpx.MockTransport(relay.handler)) as client:
            service = EmailDispatchService(db_session, client, make_settings())
            assert await service.send("renter@test.com", "Hello", "<p>Hi</p>") is False

        entry = (await db_session.execute(select(EmailOutbox))).scalar_one()
        assert entry.status == OutboxStatus.PENDING
        assert entry.attempts == 1
        assert "500" in entry.last_error

    @pytest.mark.asyncio
    async def test_entry_fails_after_max_attempts(self, db_session, failing_relay, failing_relay_client):
        service = EmailDispatchService(db_session, failing_relay_client, make_settings(outbox_max_attempts=3))
        await service.send("renter@test.com", "Hello", "<p>Hi</p>")

        first = await service.dispatch_pending()
        second = await service.dispatch_pending()
        third = await service.dispatch_pending()

        assert first == {"attempted": 1, "sent": 0, "failed": 1}
        assert second == {"attempted": 1, "sent": 0, "failed": 1}
        assert third == {"attempted": 0, "sent": 0, "failed": 0}

        entry = (await db_session.execute(select(EmailOutbox))).scalar_one()
        assert entry.status == OutboxStatus.FAILED
        assert entry.attempts == 3
        assert len(failing_relay.requests) == 3

    @pytest.mark.asyncio
    async def test_retry_succeeds_after_outage(self, db_session, failing_relay_client, relay, relay_client):
        settings = make_settings()
        await EmailDispatchService(db_session, failing_relay_client, settings).send("a@test.com", "Hello", "<p>1</p>")

        result = await EmailDispatchService(db_session, relay_client, settings).dispatch_pending()

        assert result == {"attempted": 1, "sent": 1, "failed": 0}
        entry = (await db_session.execute(select(EmailOutbox))).scalar_one()
        assert entry.status == OutboxStatus.SENT
        assert entry.attempts == 2
        assert entry.last_error is None

    @pytest.mark.asyncio
    async def test_dispatch_respects_limit(self, db_session, relay, relay_client):
        service = EmailDispatchService(db_session, relay_client, make_settings())
        for i in range(3):
            await service.enqueue(f"user{i}@test.com", "Hello", "<p>Hi</p>")

        result = await service.dispatch_pending(limit=2)

        assert result["attempted"] == 2
        assert len(relay.requests) == 2

    @pytest.mark.asyncio
    async def test_worker_round_during_inline_send_skips_the_entry(self, db_session, session_factory):
        settings = make_settings()
        posts = []
        worker_results = []

        async def relay_handler(request: httpx.Request) -> httpx.Response:
            posts.append(request)
            if len(posts) == 1:
                async with session_factory() as worker_session:
                    worker = EmailDispatchService(worker_session, client, settings)
                    worker_results.append(await worker.dispatch_pending())
            return httpx.Response(200, json={"success": True})

        async with httpx.AsyncClient(transport=httpx.MockTransport(relay_handler)) as client:
            service = EmailDispatchService(db_session, client, settings)
            assert await service.send("renter@test.com", "Booking Confirmed", "<p>Hi</p>") is True

        assert len(posts) == 1
        assert worker_results == [{"attempted": 0, "sent": 0, "failed": 0}]

        entry = (await db_session.execute(select(EmailOutbox))).scalar_one()
        assert entry.status == OutboxStatus.SENT
        assert entry.attempts == 1
        assert entry.locked_until is None

    @pytest.mark.asyncio
    async def test_claim_is_exclusive(self, session_factory):
        async with session_factory() as session:
            entry = await EmailDispatchService(session, None, make_settings()).enqueue(
                "a@test.com", "Hello", "<p>Hi</p>"
            )

        now = datetime.now(timezone.utc)
        lease = now + timedelta(seconds=60)
        async with session_factory() as first, session_factory() as second:
            assert await EmailOutboxRepository(first).claim(entry.id, now, lease) is not None
            assert await EmailOutboxRepository(second).claim(entry.id, now, lease) is None

    @pytest.mark.asyncio
    async def test_sent_entry_is_not_delivered_again(self, db_session, relay, relay_client):
        service = EmailDispatchService(db_session, relay_client, make_settings())
        await service.send("renter@test.com", "Hello", "<p>Hi</p>")
        entry = (await db_session.execute(select(EmailOutbox))).scalar_one()

        assert await service.deliver(entry) is None
        assert len(relay.requests) == 1

    @pytest.mark.asyncio
    async def test_expired_lease_is_reclaimed(self, db_session, relay, relay_client):
        now = datetime.now(timezone.utc)
        repo = EmailOutboxRepository(db_session)
        await repo.create({
            "recipient": "stale@test.com", "subject": "Stale", "html": "<p>1</p>",
            "status": OutboxStatus.SENDING, "attempts": 0,
            "locked_until": now - timedelta(seconds=5),
        })
        await repo.create({
            "recipient": "busy@test.com", "subject": "Busy", "html": "<p>2</p>",
            "status": OutboxStatus.SENDING, "attempts": 0,
            "locked_until": now + timedelta(seconds=60),
        })

        result = await EmailDispatchService(db_session, relay_client, make_settings()).dispatch_pending()

        assert result == {"attempted": 1, "sent": 1, "failed": 0}
        assert [payload["to"] for payload in relay.payloads] == ["stale@test.com"]

    def test_lease_must_outlast_request_timeout(self):
        with pytest.raises(SettingsError, match="OUTBOX_LEASE_SECONDS"):
            Settings(email_request_timeout=10.0, outbox_lease_seconds=5.0)

        assert Settings(email_request_timeout=10.0, outbox_lease_seconds=30.0).outbox_lease_seconds == 30.0

    @pytest.mark.asyncio
    async def test_worker_drains_outbox_until_cancelled(self, session_factory, relay, relay_client):
        settings = make_settings(outbox_dispatch_interval_seconds=0.01)
        async with session_factory() as session:
            await EmailDispatchService(session, relay_client, settings).enqueue("a@test.com", "Hello", "<p>Hi</p>")

        worker = asyncio.create_task(run_outbox_worker(session_factory, relay_client, settings))
        for _ in range(100):
            if relay.requests:
                break
            await asyncio.sleep(0.01)
        worker.cancel()
        with pytest.raises(asyncio.CancelledError):
            await worker

        assert len(relay.requests) == 1


class TestMailerService:
    """SMTP side of the mail relay."""

    def test_build_message(self):
        mailer = MailerService(make_settings(smtp_username="bot@test.com", smtp_password="pw", from_email=None))
        message = mailer.build_message("renter@test.com", "Hello", "<p>Hi</p>")

        assert message["To"] == "renter@test.com"
        assert message["Subject"] == "Hello"
        assert message["From"] == "Smart house: your rental services <bot@test.com>"
        assert message.get_payload()[0].get_content_type() == "text/html"

    @pytest.mark.asyncio
    async def test_not_configured(self):
        mailer = MailerService(make_settings(smtp_username=None, smtp_password=None))
        assert mailer.is_configured is False
        with pytest.raises(EmailDeliveryError, match="not configured"):
            await mailer.send_html("renter@test.com", "Hello", "<p>Hi</p>")

    @pytest.mark.asyncio
    async def test_send_html(self, monkeypatch):
        sent = []

        async def fake_send(message, **kwargs):
            sent.append((message, kwargs))

        monkeypatch.setattr(aiosmtplib, "send", fake_send)
        mailer = MailerService(make_settings(smtp_username="bot@test.com", smtp_password="pw", smtp_port=587))

        await mailer.send_html("renter@test.com", "Hello", "<p>Hi</p>")

        assert len(sent) == 1
        message, kwargs = sent[0]
        assert message["To"] == "renter@test.com"
        assert kwargs["port"] == 587
        assert kwargs["username"] == "bot@test.com"

    @pytest.mark.asyncio
    async def test_smtp_error_wrapped(self, monkeypatch):
        async def fake_send(message, **kwargs):
            raise aiosmtplib.SMTPException("authentication failed")

        monkeypatch.setattr(aiosmtplib, "send", fake_send)
        mailer = MailerService(make_settings(smtp_username="bot@test.com", smtp_password="pw"))

        with pytest.raises(EmailDeliveryError, match="authentication failed"):
            await mailer.send_html("renter@test.com", "Hello", "<p>Hi</p>")
