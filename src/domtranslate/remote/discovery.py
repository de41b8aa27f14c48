"""Pipeline discovery: map a language pair to a usable inference session."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Optional

import httpx

from ..errors import ConfigurationError, DiscoveryError
from .payloads import Session, build_discovery_payload, decode_session
from .transport import REMOTE_ERRORS, post_json


logger = logging.getLogger("domtranslate.remote")


class PipelineResolver:
    """Resolve and cache the inference session for the current language pair.

    Only one session is cached. Asking for a different pair replaces it.
    """

    def __init__(
        self,
        api_key: str,
        user_id: str,
        *,
        discovery_url: str,
        pipeline_id: str,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
    ) -> None:
        if not api_key or not user_id:
            raise ConfigurationError("Invalid credentials: an API key and a user id are required")
        self.discovery_url = discovery_url
        self.pipeline_id = pipeline_id
        self._api_key = api_key
        self._user_id = user_id
        self._client = client
        self._timeout = timeout
        self._session: Optional[Session] = None
        self._lock = asyncio.Lock()
        self.discovery_calls = 0
        self.discovery_seconds: list[float] = []

    @property
    def session(self) -> Optional[Session]:
        return self._session

    async def resolve(self, source_language: str, target_language: str) -> Session:
        """Run one discovery call and cache the resulting session."""

        headers = {
            "ulcaApiKey": self._api_key,
            "userID": self._user_id,
            "Content-Type": "application/json",
        }
        payload = build_discovery_payload(source_language, target_language, self.pipeline_id)
        logger.debug("Resolving pipeline for %s -> %s", source_language, target_language)

        self.discovery_calls += 1
        started = time.perf_counter()
        try:
            data = await post_json(
                self.discovery_url,
                payload=payload,
                headers=headers,
                client=self._client,
                timeout=self._timeout,
            )
        except REMOTE_ERRORS as exc:
            raise DiscoveryError(f"Pipeline discovery failed: {exc}") from exc
        finally:
            self.discovery_seconds.append(time.perf_counter() - started)

        session = decode_session(data, source_language, target_language)
        self._session = session
        logger.info(
            "Resolved pipeline %s -> %s (service %s)",
            source_language,
            target_language,
            session.service_id,
        )
        return session

    async def get_session(self, source_language: str, target_language: str) -> Session:
        """Return the cached session for the pair, resolving it when absent."""

        async with self._lock:
            cached = self._session
            if cached is not None and cached.language_pair == (source_language, target_language):
                return cached
            return await self.resolve(source_language, target_language)

    async def refresh(self, stale: Session) -> Session:
        """Replace ``stale`` with a freshly resolved session for the same pair.

        When another task already replaced it, the newer session is returned
        without a second discovery call.
        """

        async with self._lock:
            current = self._session
            if current is not None and current is not stale and current.language_pair == stale.language_pair:
                return current
            self.invalidate()
            return await self.resolve(*stale.language_pair)

    def invalidate(self) -> None:
        self._session = None
