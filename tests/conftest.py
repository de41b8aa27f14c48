"""Pytest fixtures for DOM translator tests."""

from __future__ import annotations

import asyncio
import json
from typing import AsyncIterator, Optional, Union

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from src.domtranslate.config import Settings
from src.domtranslate.deps import get_translator
from src.domtranslate.main import app
from src.domtranslate.translator import DOMTranslator


DISCOVERY_URL = "https://discovery.test/ulca/apis/v0/model/getModelsPipeline"
CALLBACK_URL = "https://inference.test/services/inference/pipeline"
PIPELINE_ID = "test-pipeline"


def discovery_body(
    callback_url: str = CALLBACK_URL,
    inference_key: str = "inference-token",
    service_id: str = "ai4bharat/indictrans-v2",
) -> dict:
    return {
        "pipelineInferenceAPIEndPoint": {
            "callbackUrl": callback_url,
            "inferenceApiKey": {"name": "Authorization", "value": inference_key},
        },
        "pipelineResponseConfig": [{"taskType": "translation", "config": {"serviceId": service_id}}],
    }


Scripted = Union[httpx.Response, Exception]


class FakePipelineService:
    """In-memory stand-in for the discovery and inference endpoints.

    Scripted responses queued on ``discovery_queue``/``inference_queue`` are served
    first; afterwards the service answers normally, translating each input with
    ``translations`` or ``"<target>:<text>"``.
    """

    def __init__(self) -> None:
        self.translations: dict[str, str] = {}
        self.discovery_body: dict = discovery_body()
        self.discovery_queue: list[Scripted] = []
        self.inference_queue: list[Scripted] = []
        self.delays: dict[str, float] = {}
        self.latency = 0.0
        self.segment_failures: dict[str, int] = {}
        self.discovery_requests: list[httpx.Request] = []
        self.inference_requests: list[httpx.Request] = []
        self.completed: list[tuple[str, ...]] = []

    @property
    def discovery_calls(self) -> int:
        return len(self.discovery_requests)

    @property
    def inference_calls(self) -> int:
        return len(self.inference_requests)

    def fail_inference(self, times: int, status_code: int = 500) -> None:
        self.inference_queue.extend(
            httpx.Response(status_code, json={"message": "upstream error"}) for _ in range(times)
        )

    def fail_discovery(self, times: int, status_code: int = 503) -> None:
        self.discovery_queue.extend(httpx.Response(status_code) for _ in range(times))

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        if url == DISCOVERY_URL:
            self.discovery_requests.append(request)
            scripted = self._next(self.discovery_queue, request)
            if scripted is not None:
                return scripted
            return httpx.Response(200, json=self.discovery_body)
        if url == CALLBACK_URL:
            self.inference_requests.append(request)
            if self.latency:
                await asyncio.sleep(self.latency)
            scripted = self._next(self.inference_queue, request)
            if scripted is not None:
                return scripted
            first = json.loads(request.content)["inputData"]["input"][0]["source"]
            if self.segment_failures.get(first, 0) > 0:
                self.segment_failures[first] -= 1
                return httpx.Response(500, json={"message": "upstream error"})
            return await self._translate(request)
        return httpx.Response(404)

    @staticmethod
    def _next(queue: list[Scripted], request: httpx.Request) -> Optional[httpx.Response]:
        if not queue:
            return None
        item = queue.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    async def _translate(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        target = body["pipelineTasks"][0]["config"]["language"]["targetLanguage"]
        sources = [item["source"] for item in body["inputData"]["input"]]
        delay = self.delays.get(sources[0]) if sources else None
        if delay:
            await asyncio.sleep(delay)
        self.completed.append(tuple(sources))
        output = [
            {"source": text, "target": self.translations.get(text, f"{target}:{text}")}
            for text in sources
        ]
        return httpx.Response(200, json={"pipelineResponse": [{"taskType": "translation", "output": output}]})


def request_json(request: httpx.Request) -> dict:
    return json.loads(request.content)


@pytest.fixture(scope="function")
def fake_service() -> FakePipelineService:
    return FakePipelineService()


@pytest_asyncio.fixture(scope="function")
async def http_client(fake_service) -> AsyncIterator[httpx.AsyncClient]:
    """HTTP client whose requests are answered by the fake pipeline service."""
    async with httpx.AsyncClient(transport=httpx.MockTransport(fake_service)) as client:
        yield client


@pytest.fixture(scope="function")
def test_settings() -> Settings:
    """Provide test-specific settings."""
    return Settings(
        app_env="test",
        log_level="DEBUG",
        ulca_api_key="test-key",
        ulca_user_id="test-user",
        discovery_url=DISCOVERY_URL,
        pipeline_id=PIPELINE_ID,
    )


@pytest.fixture(scope="function")
def make_translator(test_settings, http_client):
    """Build translators wired to the fake service, with optional overrides."""

    def build(**overrides) -> DOMTranslator:
        settings = test_settings.model_copy(update=overrides)
        return DOMTranslator.from_settings(settings, client=http_client)

    return build


@pytest.fixture(scope="function")
def translator(make_translator) -> DOMTranslator:
    return make_translator()


@pytest_asyncio.fixture(scope="function")
async def test_client(translator) -> AsyncIterator[AsyncClient]:
    """Provide an async HTTP client for testing the FastAPI app."""

    app.dependency_overrides[get_translator] = lambda: translator
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.pop(get_translator, None)
