"""Smoke tests for the translation API."""

from __future__ import annotations

import pytest

from src.domtranslate.config import Settings, get_settings
from src.domtranslate.deps import get_translator
from src.domtranslate.errors import ConfigurationError
from src.domtranslate.main import app
from src.domtranslate.translator import DOMTranslator


@pytest.mark.asyncio
async def test_health_endpoint(test_client):
    """Test the /health endpoint returns successfully."""
    response = await test_client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"


@pytest.mark.asyncio
async def test_translate_returns_rewritten_document(test_client, fake_service):
    fake_service.translations = {"Hello": "Bonjour", "World": "Monde"}
    payload = {
        "html": "<html><head><title>T</title></head><body><p>Hello</p><p>World</p><p>Hello</p></body></html>",
        "source_language": "en",
        "target_language": "fr",
    }

    response = await test_client.post("/translate", json=payload)

    assert response.status_code == 200
    data = response.json()
    assert data["source_language"] == "en"
    assert data["target_language"] == "fr"
    assert "<title>T</title>" in data["html"]
    assert data["html"].count("Bonjour") == 2
    assert "Monde" in data["html"]
    assert "Hello" not in data["html"]
    assert data["stats"]["segments"] == 2
    assert data["stats"]["rewritten"] == 3


@pytest.mark.asyncio
async def test_translate_missing_language(test_client):
    """Test POST /translate fails validation without a target language."""
    response = await test_client.post("/translate", json={"html": "<p>x</p>", "source_language": "en"})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_translate_empty_language(test_client):
    response = await test_client.post(
        "/translate",
        json={"html": "<p>x</p>", "source_language": "en", "target_language": ""},
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_translate_reports_exhausted_retries(test_client, translator, fake_service):
    fake_service.fail_inference(translator.max_failures + 1)
    response = await test_client.post(
        "/translate",
        json={"html": "<p>Hello</p>", "source_language": "en", "target_language": "hi"},
    )
    assert response.status_code == 502
    assert response.json()["failures"] == translator.max_failures + 1


@pytest.fixture
def unconfigured_settings(monkeypatch):
    """Settings loaded from an environment without pipeline credentials."""
    monkeypatch.setenv("ULCA_API_KEY", "")
    monkeypatch.setenv("ULCA_USER_ID", "")
    get_settings.cache_clear()
    get_translator.cache_clear()
    yield get_settings()
    get_settings.cache_clear()
    get_translator.cache_clear()


def test_translator_from_settings_without_credentials():
    with pytest.raises(ConfigurationError):
        DOMTranslator.from_settings(Settings(ulca_api_key=None, ulca_user_id=None))


@pytest.mark.asyncio
async def test_translate_without_credentials(test_client, unconfigured_settings):
    """Test POST /translate answers 503 when the translator cannot be built."""
    assert not unconfigured_settings.ulca_api_key
    app.dependency_overrides.pop(get_translator, None)

    response = await test_client.post(
        "/translate",
        json={"html": "<p>Hello</p>", "source_language": "en", "target_language": "hi"},
    )

    assert response.status_code == 503
    assert "credentials" in response.json()["detail"]
