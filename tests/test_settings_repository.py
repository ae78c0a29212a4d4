from unittest.mock import Mock, patch

import pytest
import requests
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.db.base import Base
from app.db.settings_repository import (
    RestSettingsRepository,
    SettingsBackendError,
    SqlSettingsRepository,
    build_settings_repository,
)
from app.models.app_setting import AppSetting
from app.models.enums import CurrencyCode
from app.services.currency_store import CurrencyStore


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


class TestSqlSettingsRepository:
    def test_missing_key_returns_none(self, session_factory):
        assert SqlSettingsRepository(session_factory).get("currency") is None

    def test_upsert_inserts_then_replaces(self, session_factory):
        repository = SqlSettingsRepository(session_factory)
        repository.upsert("currency", {"code": "USD"})
        repository.upsert("currency", {"code": "GBP"})

        assert repository.get("currency") == {"code": "GBP"}
        db = session_factory()
        try:
            assert db.query(AppSetting).count() == 1
        finally:
            db.close()

    def test_keys_are_independent(self, session_factory):
        repository = SqlSettingsRepository(session_factory)
        repository.upsert("currency", {"code": "JPY"})
        repository.upsert("company", {"name": "Acme Franchise"})
        assert repository.get("currency") == {"code": "JPY"}

    def test_database_errors_are_wrapped(self):
        session = Mock()
        session.query.side_effect = OperationalError("SELECT", {}, Exception("database is locked"))
        repository = SqlSettingsRepository(lambda: session)

        with pytest.raises(SettingsBackendError):
            repository.get("currency")
        with pytest.raises(SettingsBackendError):
            repository.upsert("currency", {"code": "USD"})
        session.rollback.assert_called_once()
        assert session.close.call_count == 2


def make_response(json_data=None, status_code=200):
    response = Mock()
    response.status_code = status_code
    response.json.return_value = json_data
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status_code} error")
    return response


class TestRestSettingsRepository:
    def setup_method(self):
        self.repository = RestSettingsRepository("https://db.example.com/", "anon-key", timeout=5)

    def test_get_filters_by_id(self):
        with patch("app.db.settings_repository.requests.get", return_value=make_response([{"value": {"code": "CNY"}}])) as mock_get:
            assert self.repository.get("currency") == {"code": "CNY"}

        args, kwargs = mock_get.call_args
        assert args[0] == "https://db.example.com/rest/v1/app_settings"
        assert kwargs["params"] == {"id": "eq.currency", "select": "value"}
        assert kwargs["headers"]["apikey"] == "anon-key"
        assert kwargs["timeout"] == 5

    def test_get_missing_row(self):
        with patch("app.db.settings_repository.requests.get", return_value=make_response([])):
            assert self.repository.get("currency") is None

    @pytest.mark.parametrize("side_effect", [
        requests.ConnectionError("unreachable"),
        requests.Timeout("timed out"),
    ])
    def test_get_network_errors(self, side_effect):
        with patch("app.db.settings_repository.requests.get", side_effect=side_effect):
            with pytest.raises(SettingsBackendError):
                self.repository.get("currency")

    def test_get_http_error(self):
        with patch("app.db.settings_repository.requests.get", return_value=make_response(status_code=401)):
            with pytest.raises(SettingsBackendError):
                self.repository.get("currency")

    def test_get_unexpected_body(self):
        with patch("app.db.settings_repository.requests.get", return_value=make_response({"message": "oops"})):
            with pytest.raises(SettingsBackendError):
                self.repository.get("currency")

    @pytest.mark.parametrize("rows", [["oops"], [None], [["value"]]])
    def test_get_non_object_row(self, rows):
        with patch("app.db.settings_repository.requests.get", return_value=make_response(rows)):
            with pytest.raises(SettingsBackendError):
                self.repository.get("currency")

    @pytest.mark.asyncio
    async def test_store_load_survives_non_object_row(self):
        store = CurrencyStore(self.repository, default_code="GBP")
        with patch("app.db.settings_repository.requests.get", return_value=make_response(["oops"])):
            await store.load_preference()
        assert store.get_active_settings().code == CurrencyCode.GBP
        assert store.is_loading is False

    def test_upsert_merges_on_id(self):
        with patch("app.db.settings_repository.requests.post", return_value=make_response(status_code=201)) as mock_post:
            self.repository.upsert("currency", {"code": "USD"})

        kwargs = mock_post.call_args.kwargs
        assert kwargs["json"] == {"id": "currency", "value": {"code": "USD"}}
        assert "resolution=merge-duplicates" in kwargs["headers"]["Prefer"]

    def test_upsert_failure(self):
        with patch("app.db.settings_repository.requests.post", return_value=make_response(status_code=500)):
            with pytest.raises(SettingsBackendError):
                self.repository.upsert("currency", {"code": "USD"})


class TestBuildSettingsRepository:
    def test_sql_backend(self):
        assert isinstance(build_settings_repository("sql"), SqlSettingsRepository)

    def test_rest_backend(self):
        assert isinstance(build_settings_repository("rest"), RestSettingsRepository)

    def test_unknown_backend(self):
        with pytest.raises(ValueError):
            build_settings_repository("redis")
