import httpx
import pytest
from pydantic import ValidationError

from conftest import mock_client
from cilok import main as cli
from cilok.config.settings import ProviderSelection, Settings, resolve_provider_selection
from cilok.services.geo_provider import create_geo_provider
from cilok.services.google_maps import GoogleMapsProvider
from cilok.services.osm import OSMProvider


def test_defaults(config):
    assert config.ai_timeout == 60.0
    assert config.ai_max_attempts == 3
    assert config.default_country == "ID"
    assert config.openrouter_base_url == "https://openrouter.ai/api/v1"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("GOOGLE_MAPS_API_KEY", "from-env")
    monkeypatch.setenv("AI_MODEL", "openai/gpt-4o-mini")

    loaded = Settings(_env_file=None)

    assert loaded.google_maps_api_key == "from-env"
    assert loaded.ai_model == "openai/gpt-4o-mini"


def test_selection_follows_google_key(config, commercial_config):
    assert resolve_provider_selection(config) is ProviderSelection.FREE
    assert resolve_provider_selection(commercial_config) is ProviderSelection.COMMERCIAL
    assert resolve_provider_selection(config.model_copy(update={"google_maps_api_key": ""})) is ProviderSelection.FREE


def test_factory_builds_one_backend(config, commercial_config):
    free = create_geo_provider(config)
    paid = create_geo_provider(commercial_config)
    forced = create_geo_provider(commercial_config, ProviderSelection.FREE)
    try:
        assert isinstance(free, OSMProvider)
        assert isinstance(paid, GoogleMapsProvider)
        assert isinstance(forced, OSMProvider)
        assert free.headers["User-Agent"] == "cilok-tests/1.0"
    finally:
        for provider in (free, paid, forced):
            provider.close()


def test_cli_exits_when_ai_key_missing(monkeypatch, config, capsys):
    monkeypatch.setattr(cli, "settings", config.model_copy(update={"openrouter_api_key": None}))

    assert cli.main(["start"]) == 1
    assert "OPENROUTER_API_KEY" in capsys.readouterr().err


def test_cli_version(capsys):
    with pytest.raises(SystemExit) as exc:
        cli.main(["--version"])

    assert exc.value.code == 0
    assert "cilok 1.0.0" in capsys.readouterr().out


def test_max_attempts_must_be_positive():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, ai_max_attempts=0)


def test_consecutive_searches_use_the_same_backend(config):
    hosts = []

    def handler(request: httpx.Request) -> httpx.Response:
        hosts.append(request.url.host)
        if request.url.path.endswith("/interpreter"):
            return httpx.Response(200, json={"elements": []})
        query = request.url.params["q"]
        return httpx.Response(200, json=[{
            "name": query, "display_name": f"{query}, Indonesia", "lat": "-6.2", "lon": "106.8",
            "osm_type": "node", "osm_id": len(hosts), "type": "attraction", "class": "tourism",
        }])

    provider = create_geo_provider(config, client=mock_client(handler))
    try:
        first = provider.forward_search("Monas")
        second = provider.forward_search("Kota Tua")
    finally:
        provider.close()

    assert isinstance(provider, OSMProvider)
    assert set(hosts) == {"nominatim.openstreetmap.org", "overpass-api.de"}
    assert first.categories == second.categories == ["attraction", "tourism"]
    assert first.source_id.startswith("node/") and second.source_id.startswith("node/")
