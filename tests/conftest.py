"""Pytest configuration and fixtures."""

from datetime import datetime, timedelta, timezone

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from fakes import FakeSupabase, PushBackend
from remmy_notify.core.config import Settings

NOW = datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)
SERVICE_KEY = "service-role-key"


def at(minutes: float) -> str:
    """ISO timestamp `minutes` from NOW."""
    return (NOW + timedelta(minutes=minutes)).isoformat()


def reminder_row(rid, user_id="u1", *, minutes_ahead, notify_before=0, priority=False,
                 notified_at=None, priority_notified_at=None, title=None, description=None):
    return {
        "id": rid,
        "user_id": user_id,
        "title": title or f"Reminder {rid}",
        "description": description,
        "scheduled_time": at(minutes_ahead),
        "is_priority": priority,
        "notify_before_minutes": notify_before,
        "notified_at": notified_at,
        "priority_notified_at": priority_notified_at,
        "notify_claimed_at": None,
    }


def token_row(token, user_id="u1", platform=None, token_type=None, device_id=None):
    return {
        "token": token,
        "user_id": user_id,
        "platform": platform,
        "token_type": token_type,
        "device_id": device_id,
    }


@pytest.fixture(scope="session")
def rsa_private_key_pem():
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()


@pytest.fixture(scope="session")
def rsa_public_key_pem(rsa_private_key_pem):
    key = serialization.load_pem_private_key(rsa_private_key_pem.encode(), password=None)
    return key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode()


@pytest.fixture
def settings(rsa_private_key_pem):
    return Settings(
        supabase_url="https://remmy-test.supabase.co",
        supabase_service_role_key=SERVICE_KEY,
        supabase_anon_key="anon-key",
        fcm_project_id="remmy-test",
        fcm_client_email="push@remmy-test.iam.gserviceaccount.com",
        fcm_private_key=rsa_private_key_pem,
    )


@pytest.fixture
def backend():
    return PushBackend()


@pytest.fixture
def http(backend):
    client = backend.client()
    yield client
    client.close()


@pytest.fixture
def db():
    return FakeSupabase(reminders=[], push_tokens=[], user_preferences=[], reminder_actions=[])
