import os
import tempfile
from uuid import uuid4

# point the app at a throwaway sqlite file before any storefront module reads settings
_DB_DIR = tempfile.mkdtemp(prefix="storefront-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_DIR}/test.db"
os.environ["ENV"] = "dev"
os.environ["EMAIL_BACKEND"] = "log"
os.environ["STRICT_ORDER_TRANSITIONS"] = "true"

import pytest
from httpx import AsyncClient, ASGITransport
from asgi_lifespan import LifespanManager
from sqlmodel import SQLModel
from storefront.db.connection import async_engine
from storefront.schema import full_schema  # registers tables on SQLModel.metadata
from storefront.main import app
from storefront.notifications.senders import EmailSender, set_email_sender


class RecordingEmailSender(EmailSender):
    """Keeps messages in memory. Set should_fail to make every send raise."""

    def __init__(self):
        self.sent_emails = []
        self.should_fail = False

    async def send(self, to, subject, body, html_body=None):
        if self.should_fail:
            raise ConnectionError("Email delivery failed")
        message_id = f"email-{uuid4().hex[:12]}"
        self.sent_emails.append({"message_id": message_id, "to": to, "subject": subject,
                                 "body": body, "html_body": html_body})
        return {"message_id": message_id, "status": "sent"}


@pytest.fixture(autouse=True)
async def fresh_db():
    async with async_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
        await conn.run_sync(SQLModel.metadata.create_all)
    yield
    await async_engine.dispose()


@pytest.fixture(autouse=True)
def outbox():
    recorder = RecordingEmailSender()
    set_email_sender(recorder)
    yield recorder
    set_email_sender(None)


@pytest.fixture
async def ac_client():
    async with LifespanManager(app):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            yield ac
