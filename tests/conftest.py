# tests/conftest.py
import os
import sys
from datetime import timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool

# Ensure root import
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from account_service.app import create_app
from account_service.config import Settings
from account_service.database import build_engine, build_session_factory, create_tables
from account_service.errors import MailDeliveryError
from account_service.models import utcnow

SECRET = "test-secret-key-for-testing"


class FakeClock:
    def __init__(self):
        self.now = utcnow()

    def __call__(self):
        return self.now

    def advance(self, minutes):
        self.now += timedelta(minutes=minutes)


class FakeMailer:
    """Records every OTP instead of mailing it; ``fail`` simulates an outage."""

    def __init__(self):
        self.sent = []
        self.fail = False

    async def send_otp(self, email, otp, expire_minutes):
        if self.fail:
            raise MailDeliveryError(error="SMTP connection refused")
        self.sent.append((email, otp))

    def last_otp(self, email=None):
        for to, otp in reversed(self.sent):
            if email is None or to == email:
                return otp
        return None


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def settings():
    return Settings(auth_secret_key=SECRET, environment="development")


@pytest.fixture
def engine():
    engine = build_engine("sqlite://", poolclass=StaticPool)
    create_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(engine):
    db = build_session_factory(engine)()
    yield db
    db.close()


@pytest.fixture
def app(settings, engine, mailer, clock):
    return create_app(settings, engine=engine, mailer=mailer, clock=clock)


@pytest.fixture
def client(app):
    with TestClient(app) as client:
        yield client


@pytest.fixture
def register(client):
    def _register(username="a", email="a@x.com", password="secret", **extra):
        return client.post(
            "/api/auth/register",
            json={"username": username, "email": email, "password": password, **extra},
        )

    return _register


@pytest.fixture
def verified_user(client, mailer, register):
    """Registers and verifies ``a`` / ``a@x.com``; returns (userId, token)."""
    user_id = register().json()["userId"]
    resp = client.post(
        "/api/auth/verify-otp",
        json={"userId": user_id, "otp": mailer.last_otp("a@x.com")},
    )
    assert resp.status_code == 200
    return user_id, resp.json()["token"]
