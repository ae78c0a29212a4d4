# app/db/settings_repository.py
import logging
from datetime import datetime, timezone

import requests
from sqlalchemy.exc import SQLAlchemyError

from app.models.app_setting import AppSetting

logger = logging.getLogger(__name__)


class SettingsBackendError(Exception):
    """Raised when the settings store cannot be read or written."""


class SqlSettingsRepository:
    """Key-value access to the app_settings table through a SQLAlchemy session factory."""

    def __init__(self, session_factory):
        self.session_factory = session_factory

    def get(self, key: str):
        db = self.session_factory()
        try:
            setting = db.query(AppSetting).filter(AppSetting.id == key).first()
            return setting.value if setting else None
        except SQLAlchemyError as e:
            raise SettingsBackendError(f"Failed to read setting '{key}': {e}") from e
        finally:
            db.close()

    def upsert(self, key: str, value: dict) -> None:
        db = self.session_factory()
        try:
            setting = db.query(AppSetting).filter(AppSetting.id == key).first()
            if not setting:
                setting = AppSetting(id=key)
                db.add(setting)

            setting.value = value
            setting.updated_at = datetime.now(timezone.utc)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise SettingsBackendError(f"Failed to write setting '{key}': {e}") from e
        finally:
            db.close()


class RestSettingsRepository:
    """
    Key-value access to app_settings through the hosted backend's REST interface.
    Reads filter by id, writes are upserts merged on the primary key.
    """

    def __init__(self, base_url: str, api_key: str, timeout: float = 10, table: str = "app_settings"):
        self.url = f"{base_url.rstrip('/')}/rest/v1/{table}"
        self.api_key = api_key
        self.timeout = timeout

    def _headers(self, extra=None):
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        if extra:
            headers.update(extra)
        return headers

    def get(self, key: str):
        try:
            response = requests.get(
                self.url,
                params={"id": f"eq.{key}", "select": "value"},
                headers=self._headers(),
                timeout=self.timeout
            )
            response.raise_for_status()
            rows = response.json()
        except (requests.RequestException, ValueError) as e:
            raise SettingsBackendError(f"Failed to read setting '{key}': {e}") from e

        if not isinstance(rows, list):
            raise SettingsBackendError(f"Unexpected response reading setting '{key}': {rows!r}")
        if not rows:
            return None
        if not isinstance(rows[0], dict):
            raise SettingsBackendError(f"Unexpected row reading setting '{key}': {rows[0]!r}")
        return rows[0].get("value")

    def upsert(self, key: str, value: dict) -> None:
        try:
            response = requests.post(
                self.url,
                json={"id": key, "value": value},
                headers=self._headers({"Prefer": "resolution=merge-duplicates,return=minimal"}),
                timeout=self.timeout
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise SettingsBackendError(f"Failed to write setting '{key}': {e}") from e


def build_settings_repository(backend: str = None):
    """Create the repository selected by SETTINGS_BACKEND."""
    from app.core import config

    backend = backend or config.SETTINGS_BACKEND
    if backend == "rest":
        logger.info("Using REST settings backend at %s", config.SETTINGS_API_URL)
        return RestSettingsRepository(config.SETTINGS_API_URL, config.SETTINGS_API_KEY, config.SETTINGS_API_TIMEOUT)
    if backend == "sql":
        from app.db.get_db import SessionLocal
        return SqlSettingsRepository(SessionLocal)
    raise ValueError(f"Unknown settings backend: {backend}")
