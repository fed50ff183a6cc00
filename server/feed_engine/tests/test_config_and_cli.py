"""
Tests for feed_engine.config and the mock-mode entry point.
"""
import pytest

from feed_engine import config, keys
from feed_engine.config import AssetsConfig, FetcherConfig
from feed_engine.core.types import ConfigurationError, FetchError
from feed_engine.main import run
from feed_engine.mock_catalog import MockCatalogFetcher, default_sources_document

_ENV_VARS = (
    "FEED_REDIS_URL",
    "FEED_STORE_NAMESPACE",
    "FEED_ASSETS_BASE_URL",
    "FEED_DEFAULTS_PATH",
    "FEED_CATALOG_PATH_TEMPLATE",
    "FEED_FETCH_TIMEOUT_SECONDS",
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


# ── Config ────────────────────────────────────────────────────────────────────

def test_defaults_without_environment(clean_env):
    settings = config._load_settings()

    assert settings.store.url == "redis://localhost:6379/0"
    assert settings.store.namespace == "gamefeed:"
    assert settings.fetcher.timeout is None
    assert settings.assets.defaults_path == "/default_sources.json"
    assert settings.assets.catalog_path("boys") == "/sources/boys/games.json"


def test_environment_overrides(clean_env):
    clean_env.setenv("FEED_REDIS_URL", "redis://cache:6379/2")
    clean_env.setenv("FEED_STORE_NAMESPACE", "test:")
    clean_env.setenv("FEED_ASSETS_BASE_URL", "https://cdn.example.com")
    clean_env.setenv("FEED_CATALOG_PATH_TEMPLATE", "/catalogs/{category}.json")
    clean_env.setenv("FEED_FETCH_TIMEOUT_SECONDS", "7")

    settings = config._load_settings()

    assert settings.store.url == "redis://cache:6379/2"
    assert settings.store.namespace == "test:"
    assert settings.fetcher.base_url == "https://cdn.example.com"
    assert settings.fetcher.timeout == 7.0
    assert settings.assets.catalog_path("girls") == "/catalogs/girls.json"


def test_invalid_timeout_raises(clean_env):
    clean_env.setenv("FEED_FETCH_TIMEOUT_SECONDS", "soon")

    with pytest.raises(ConfigurationError, match="FEED_FETCH_TIMEOUT_SECONDS"):
        config._load_settings()


def test_zero_timeout_means_transport_default():
    assert FetcherConfig(base_url="http://x", timeout_seconds=0).timeout is None
    assert AssetsConfig().catalog_path("boys") == "/sources/boys/games.json"


# ── Errors ────────────────────────────────────────────────────────────────────

def test_fetch_error_renders_context():
    err = FetchError("HTTP 503", url="/sources/boys/games.json", status=503)

    assert str(err) == "HTTP 503 [url=/sources/boys/games.json, status=503]"
    assert err.url == "/sources/boys/games.json"
    assert err.status == 503


# ── Mock catalogs ─────────────────────────────────────────────────────────────

def test_default_document_has_hidden_container():
    sources = default_sources_document()["sources"]

    container = next(s for s in sources if s.get("isContainer"))
    assert container["id"] == "learnLanguages"
    assert container["visible"] is False


async def test_mock_fetcher_serves_container_children():
    fetcher = MockCatalogFetcher()

    result = await fetcher.fetch_json("/sources/learnLanguages/games.json")

    assert [c["id"] for c in result.items()] == ["learnItalian", "learnSpanish", "learnEnglish"]


async def test_mock_fetcher_unknown_and_unreachable():
    fetcher = MockCatalogFetcher(unreachable=("/sources/boys/games.json",))

    assert (await fetcher.fetch_json("/sources/boys/games.json")).status == 503
    assert (await fetcher.fetch_json("/sources/nope/games.json")).status == 404
    assert fetcher.requested == ["/sources/boys/games.json", "/sources/nope/games.json"]


# ── Entry point ───────────────────────────────────────────────────────────────

async def test_mock_run_builds_feed():
    feed = await run(use_mock=True)

    assert feed[0]["id"] == "selection-card"
    assert feed[1]["id"] == "tutorial-1"
    assert len(feed) > 2
    assert all(p["type"] == "microgame" for p in feed[2:])


async def test_mock_run_with_selected_external(capsys):
    url = "https://www.example.com/feed.json"

    feed = await run(use_mock=True, add_sources=[url], select=url, as_json=True)

    assert [p["id"] for p in feed[:2]] == ["selection-card", "tutorial-1"]
    essays = feed[2:]
    assert len(essays) == 2
    assert all(p["id"].startswith(f"{url}|") for p in essays)
    assert '"selection-card"' in capsys.readouterr().out


def test_persisted_keys_are_distinct():
    names = [v for k, v in vars(keys).items() if k.isupper()]
    assert len(names) == len(set(names)) == 12
