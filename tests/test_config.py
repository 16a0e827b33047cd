from __future__ import annotations

import pytest

from stash_api.api.deps import check_startup_configuration, get_price_catalog
from stash_api.domain.exceptions import ConfigurationError
from stash_api.shared.config import get_settings


ENV_NAMES = (
    "STRIPE_MODE",
    "STRIPE_SECRET_KEY",
    "STRIPE_SECRET_KEY_TEST",
    "STRIPE_SECRET_KEY_LIVE",
    "STRIPE_WEBHOOK_SECRET",
    "STRIPE_WEBHOOK_SECRET_TEST",
    "STRIPE_WEBHOOK_SECRET_LIVE",
    "STRIPE_PRICE_CATALOG",
    "STRIPE_PRICE_CATALOG_TEST",
    "STRIPE_PRICE_CATALOG_LIVE",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_NAMES:
        monkeypatch.delenv(name, raising=False)
    get_price_catalog.cache_clear()
    yield
    get_price_catalog.cache_clear()


def test_test_mode_is_the_default(monkeypatch):
    monkeypatch.setenv("STRIPE_SECRET_KEY_TEST", "sk_test_1")
    monkeypatch.setenv("STRIPE_SECRET_KEY_LIVE", "sk_live_1")

    settings = get_settings()

    assert settings.stripe_mode == "test"
    assert settings.stripe_secret_key == "sk_test_1"


def test_live_mode_reads_live_values(monkeypatch):
    monkeypatch.setenv("STRIPE_MODE", "LIVE")
    monkeypatch.setenv("STRIPE_SECRET_KEY_LIVE", "sk_live_1")
    monkeypatch.setenv("STRIPE_PRICE_CATALOG_LIVE", '{"pro_monthly": "price_live"}')
    monkeypatch.setenv("STRIPE_PRICE_CATALOG_TEST", '{"pro_monthly": "price_test"}')

    settings = get_settings()

    assert settings.stripe_mode == "live"
    assert settings.stripe_secret_key == "sk_live_1"
    assert settings.stripe_price_catalog == {"pro_monthly": "price_live"}


def test_unsuffixed_name_is_the_fallback(monkeypatch):
    monkeypatch.setenv("STRIPE_WEBHOOK_SECRET", "whsec_shared")

    assert get_settings().stripe_webhook_secret == "whsec_shared"


def test_unknown_mode_is_rejected(monkeypatch):
    monkeypatch.setenv("STRIPE_MODE", "staging")

    with pytest.raises(ConfigurationError):
        get_settings()


def test_malformed_catalog_json_is_rejected(monkeypatch):
    monkeypatch.setenv("STRIPE_PRICE_CATALOG_TEST", "{not json")

    with pytest.raises(ConfigurationError):
        get_settings()


def test_startup_requires_secret_key(monkeypatch):
    monkeypatch.setenv("STRIPE_PRICE_CATALOG_TEST", '{"pro_monthly": "price_X"}')

    with pytest.raises(ConfigurationError, match="secret key"):
        check_startup_configuration()


def test_startup_requires_catalog(monkeypatch):
    monkeypatch.setenv("STRIPE_SECRET_KEY_TEST", "sk_test_1")

    with pytest.raises(ConfigurationError, match="catalog"):
        check_startup_configuration()


def test_startup_returns_catalog(monkeypatch):
    monkeypatch.setenv("STRIPE_SECRET_KEY_TEST", "sk_test_1")
    monkeypatch.setenv("STRIPE_PRICE_CATALOG_TEST", '{"pro_monthly": "price_X"}')

    catalog = check_startup_configuration()

    assert catalog.resolve_price_id(plan_id="pro", billing_cycle="monthly") == "price_X"
