import os

# Set before any zerolist import so configs picks the in-memory database
os.environ["TESTING"] = "true"
for key in ("RESEND_API_KEY", "RESEND_FROM_EMAIL", "CF_ACCESS_TEAM_DOMAIN",
            "CF_ACCESS_AUD", "BASE_URL"):
    os.environ[key] = ""
os.environ["ZEROLIST_DEMO_MODE"] = "false"

import pytest
from unittest.mock import MagicMock, patch
from fastapi.testclient import TestClient
from zerolist import configs
from zerolist.app import app
from zerolist.core.api import WaitlistAPI
from zerolist.core.db import Base, engine, session as db_session
from zerolist.core.models import Signup
from zerolist.core.limiter import store
from zerolist.schemas.waitlist import WaitlistCreate


@pytest.fixture(autouse=True)
def db():
    Base.metadata.create_all(bind=engine)
    store.clear()
    yield db_session
    db_session.remove()
    Base.metadata.drop_all(bind=engine)

@pytest.fixture
def client():
    return TestClient(app)

@pytest.fixture
def email_configured():
    """Turns on transactional email with Resend's HTTP API mocked out."""
    response = MagicMock()
    response.json.return_value = {"id": "email_123"}
    with patch.object(configs, "RESEND_API_KEY", "re_test"), \
         patch.object(configs, "RESEND_FROM_EMAIL", "hello@example.com"), \
         patch("zerolist.core.emails.requests.post", return_value=response) as post:
        yield post

@pytest.fixture
def make_waitlist():
    def _make(**kwargs):
        kwargs.setdefault("name", "Beta")
        return WaitlistAPI.create_waitlist(WaitlistCreate(**kwargs))
    return _make

@pytest.fixture
def add_signup():
    """Inserts a signup directly, bypassing the public workflow."""
    def _add(waitlist, email, status="confirmed", **kwargs):
        kwargs.setdefault("position", Signup.next_position(waitlist.id))
        return Signup.create(waitlist_id=waitlist.id, email=email, status=status, **kwargs)
    return _add
