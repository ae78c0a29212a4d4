"""Shared fixtures: test environment, an in-memory settings backend and auth tokens."""
import os
import tempfile

os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("SETTINGS_BACKEND", "sql")
os.environ.setdefault("DATABASE_URL", "sqlite:///" + os.path.join(tempfile.mkdtemp(), "app_settings.db"))

import jwt
import pytest

from app.core import config
from app.db.settings_repository import SettingsBackendError


class FakeSettingsRepository:
    """Dict-backed stand-in for the settings table that can be told to fail."""

    def __init__(self, records=None, fail_reads=False, fail_writes=False):
        self.records = dict(records or {})
        self.fail_reads = fail_reads
        self.fail_writes = fail_writes
        self.writes = []

    def get(self, key):
        if self.fail_reads:
            raise SettingsBackendError("connection refused")
        return self.records.get(key)

    def upsert(self, key, value):
        if self.fail_writes:
            raise SettingsBackendError("connection refused")
        self.writes.append((key, value))
        self.records[key] = value


@pytest.fixture
def repository():
    return FakeSettingsRepository()


@pytest.fixture
def auth_headers():
    token = jwt.encode({"sub": "3f0c2b9e-user", "role": "authenticated"}, config.JWT_SECRET, algorithm=config.ALGORITHM)
    return {"Authorization": f"Bearer {token}"}
