# app/services/currency_store.py
import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Optional

from fastapi import Request
from starlette.concurrency import run_in_threadpool

from app.db.settings_repository import SettingsBackendError
from app.models.enums import CurrencyCode, FailureReason
from app.utils.currency import CURRENCY_PRESETS, CurrencySettings, format_amount, get_preset

logger = logging.getLogger(__name__)


class CurrencyStoreNotInitialized(RuntimeError):
    pass


@dataclass(frozen=True)
class Outcome:
    ok: bool
    value: Any = None
    reason: Optional[FailureReason] = None
    detail: Optional[str] = None
    error: Optional[BaseException] = None

    @classmethod
    def success(cls, value=None):
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, reason: FailureReason, detail: str = None, error: BaseException = None):
        return cls(ok=False, reason=reason, detail=detail, error=error)


class CurrencyStore:
    """
    Owns the active currency preset and keeps it in sync with the persisted preference.

    Reads and formatting never block and never raise. load_preference and
    update_currency absorb every backend failure; their result is kept as an
    Outcome for diagnostics only.

    Updates are optimistic: the active preset changes as soon as a valid code
    is accepted and the write happens afterwards. If the write fails the
    in-memory preset is kept, so the stored preference can lag behind until the
    next successful update or reload. Writes are serialized, so the last call
    wins both in memory and in storage.
    """

    def __init__(self, repository, default_code=CurrencyCode.EUR, setting_key: str = "currency"):
        self.repository = repository
        self.setting_key = setting_key
        self._settings = get_preset(default_code) or CURRENCY_PRESETS[CurrencyCode.EUR]
        self._pending_loads = 0
        self._loaded_once = False
        self._updates = 0
        self._write_lock = asyncio.Lock()
        self.last_persist_outcome: Optional[Outcome] = None

    @property
    def is_loading(self) -> bool:
        return self._pending_loads > 0 or not self._loaded_once

    def get_active_settings(self) -> CurrencySettings:
        return self._settings

    def format_currency(self, amount) -> str:
        return format_amount(amount, self._settings)

    async def _fetch_preference(self) -> Outcome:
        try:
            value = await run_in_threadpool(self.repository.get, self.setting_key)
        except SettingsBackendError as e:
            return Outcome.failure(FailureReason.backend_error, str(e), e)

        if value is None:
            return Outcome.failure(FailureReason.missing_record, f"No '{self.setting_key}' setting stored")
        if not isinstance(value, dict) or "code" not in value:
            return Outcome.failure(FailureReason.malformed_record, f"Unexpected setting value: {value!r}")

        preset = get_preset(value["code"])
        if preset is None:
            return Outcome.failure(FailureReason.unknown_code, f"Unknown currency code: {value['code']!r}")
        return Outcome.success(preset)

    async def load_preference(self) -> None:
        updates_before = self._updates
        self._pending_loads += 1
        try:
            outcome = await self._fetch_preference()
        finally:
            self._pending_loads -= 1
            self._loaded_once = True

        if not outcome.ok:
            if outcome.reason == FailureReason.backend_error:
                logger.warning("Error loading currency settings: %s", outcome.detail, exc_info=outcome.error)
            else:
                logger.info("Keeping %s currency settings: %s", self._settings.code.value, outcome.detail)
            return

        # an update issued while loading is newer than what was stored
        if self._updates != updates_before:
            logger.info("Ignoring stored currency %s, updated while loading", outcome.value.code.value)
            return

        self._settings = outcome.value
        logger.info("Loaded currency settings: %s", outcome.value.code.value)

    async def _persist(self, code: CurrencyCode) -> Outcome:
        try:
            await run_in_threadpool(self.repository.upsert, self.setting_key, {"code": code.value})
        except SettingsBackendError as e:
            return Outcome.failure(FailureReason.backend_error, str(e), e)
        return Outcome.success(code)

    def _check_code(self, code) -> Outcome:
        preset = get_preset(code)
        if preset is None:
            return Outcome.failure(FailureReason.invalid_code, f"Unknown currency code: {code!r}")
        return Outcome.success(preset)

    async def update_currency(self, code) -> bool:
        """
        Switch to the preset for code and persist the choice.
        Returns False (and changes nothing) for an unknown code.
        """
        checked = self._check_code(code)
        if not checked.ok:
            logger.info("Ignoring currency update: %s", checked.detail)
            return False

        preset = checked.value

        self._updates += 1
        self._settings = preset

        async with self._write_lock:
            outcome = await self._persist(preset.code)
            self.last_persist_outcome = outcome

        if not outcome.ok:
            logger.error("Error updating currency settings to %s: %s", preset.code.value, outcome.detail)
        return True


def get_currency_store(request: Request) -> CurrencyStore:
    store = getattr(request.app.state, "currency_store", None)
    if store is None:
        raise CurrencyStoreNotInitialized(
            "Currency store is not initialized: it must be created on application startup"
        )
    return store
