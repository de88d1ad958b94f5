import pytest
from pydantic import ValidationError

from offer_search.config import Settings, get_settings


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("OFFER_API_URL", "https://offers.example/search")
    monkeypatch.setenv("OFFER_TIMEOUT_S", "7.5")
    monkeypatch.setenv("AIRPORTS", "jfk, LAX ,ORD,")
    monkeypatch.setenv("CURRENCIES", "usd,eur")
    monkeypatch.setenv("OFFER_CACHE_DB", "/var/tmp/offers.db")
    get_settings.cache_clear()

    cfg = get_settings()
    assert isinstance(cfg, Settings)
    assert cfg.offer_api_url == "https://offers.example/search"
    assert cfg.request_timeout_s == 7.5
    assert cfg.airports == ["JFK", "LAX", "ORD"]
    assert cfg.currencies == ["USD", "EUR"]
    assert cfg.cache_db == "/var/tmp/offers.db"
    get_settings.cache_clear()


def test_defaults(monkeypatch):
    for name in ("OFFER_API_URL", "OFFER_TIMEOUT_S", "AIRPORTS", "CURRENCIES"):
        monkeypatch.delenv(name, raising=False)

    cfg = Settings()
    assert cfg.offer_api_url == "http://localhost:5133"
    assert cfg.request_timeout_s is None
    assert cfg.airports == ["JFK", "LAX", "ORD"]
    assert cfg.currencies == ["USD", "EUR"]


def test_timeout_must_be_positive(monkeypatch):
    monkeypatch.setenv("OFFER_TIMEOUT_S", "0")
    with pytest.raises(ValidationError):
        Settings()
