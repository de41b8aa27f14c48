"""Batch translation against a resolved inference session."""

from __future__ import annotations

import logging
from typing import Optional, Sequence

import httpx

from ..errors import DiscoveryError, RemoteServiceError, RetryExhaustedError
from .discovery import PipelineResolver
from .payloads import Session, TranslationResult, build_inference_payload, decode_translations
from .transport import REMOTE_ERRORS, post_json


logger = logging.getLogger("domtranslate.remote")

DEFAULT_MAX_FAILURES = 10


class RetryBudget:
    """Failure counter shared by every batch of one translation request.

    Each failure increments the counter and the request is abandoned once it
    exceeds ``threshold``. Any success resets it to zero.
    """

    def __init__(self, threshold: int = DEFAULT_MAX_FAILURES) -> None:
        if threshold < 0:
            raise ValueError(f"threshold must not be negative, got {threshold}")
        self.threshold = threshold
        self.failures = 0
        self.total_failures = 0

    @property
    def exhausted(self) -> bool:
        return self.failures > self.threshold

    def record_failure(self, exc: Exception) -> None:
        self.failures += 1
        self.total_failures += 1
        if self.exhausted:
            raise RetryExhaustedError(
                f"Failed getting a response from the server after {self.failures} tries: {exc}",
                failures=self.failures,
            ) from exc

    def record_success(self) -> None:
        self.failures = 0


class TranslationInvoker:
    """Send batches to the inference endpoint, refreshing the session on failure."""

    def __init__(
        self,
        resolver: PipelineResolver,
        *,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
    ) -> None:
        self.resolver = resolver
        self._client = client
        self._timeout = timeout

    async def acquire_session(
        self, source_language: str, target_language: str, budget: RetryBudget
    ) -> Session:
        """Get a session for the pair, retrying discovery failures within ``budget``."""

        while True:
            try:
                session = await self.resolver.get_session(source_language, target_language)
            except DiscoveryError as exc:
                budget.record_failure(exc)
                logger.warning(
                    "Pipeline discovery failed (%d/%d): %s",
                    budget.failures,
                    budget.threshold,
                    exc,
                )
                continue
            return session

    async def invoke(
        self,
        segments: Sequence[str],
        session: Session,
        budget: RetryBudget,
    ) -> TranslationResult:
        """Translate ``segments`` and return the outputs in input order."""

        current = session
        while True:
            try:
                result = await self._request(segments, current)
            except RemoteServiceError as exc:
                budget.record_failure(exc)
                logger.warning(
                    "Translation of %d segment(s) failed (%d/%d), refreshing session: %s",
                    len(segments),
                    budget.failures,
                    budget.threshold,
                    exc,
                )
                current = await self._refresh(current, budget)
                continue
            budget.record_success()
            return result

    async def _request(self, segments: Sequence[str], session: Session) -> TranslationResult:
        headers = {
            "Authorization": session.inference_api_key,
            "Content-Type": "application/json",
        }
        payload = build_inference_payload(session, segments)
        try:
            data = await post_json(
                session.callback_url,
                payload=payload,
                headers=headers,
                client=self._client,
                timeout=self._timeout,
            )
        except REMOTE_ERRORS as exc:
            raise RemoteServiceError(f"Inference call failed: {exc}") from exc
        return decode_translations(data, expected=len(segments))

    async def _refresh(self, stale: Session, budget: RetryBudget) -> Session:
        while True:
            try:
                return await self.resolver.refresh(stale)
            except DiscoveryError as exc:
                budget.record_failure(exc)
                logger.warning(
                    "Session refresh failed (%d/%d): %s",
                    budget.failures,
                    budget.threshold,
                    exc,
                )
