"""High-level orchestration of DOM translation."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import asdict, dataclass, field
from typing import Iterable, Optional

import httpx
from bs4.element import PageElement

from .config import DEFAULT_DISCOVERY_URL, DEFAULT_PIPELINE_ID, Settings
from .dom.batching import DEFAULT_BATCH_SIZE, Batch, make_batches
from .dom.collector import IGNORE_TAGS, OccurrenceMap, collect_segments, document_root, parse_html
from .dom.rewriter import apply_translations
from .errors import ConfigurationError
from .remote.discovery import PipelineResolver
from .remote.inference import DEFAULT_MAX_FAILURES, RetryBudget, TranslationInvoker
from .remote.payloads import Session


logger = logging.getLogger("domtranslate")


@dataclass
class TranslationStats:
    """Counters and timings for one translation request."""

    segments: int = 0
    text_nodes: int = 0
    batches: int = 0
    rewritten: int = 0
    skipped: int = 0
    discovery_calls: int = 0
    failures: int = 0
    mapping_seconds: float = 0.0
    discovery_seconds: list[float] = field(default_factory=list)
    translate_seconds: list[float] = field(default_factory=list)
    rewrite_seconds: float = 0.0
    total_seconds: float = 0.0

    def as_dict(self) -> dict:
        return asdict(self)


@dataclass
class TranslationOutcome:
    root: PageElement
    stats: TranslationStats


class DOMTranslator:
    """Coordinates collection, batching, remote translation and rewrite."""

    def __init__(
        self,
        api_key: Optional[str],
        user_id: Optional[str],
        *,
        discovery_url: str = DEFAULT_DISCOVERY_URL,
        pipeline_id: str = DEFAULT_PIPELINE_ID,
        batch_size: int = DEFAULT_BATCH_SIZE,
        max_failures: int = DEFAULT_MAX_FAILURES,
        ignore_tags: Iterable[str] = IGNORE_TAGS,
        pad_translations: bool = True,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        if batch_size < 1:
            raise ConfigurationError(f"batch_size must be positive, got {batch_size}")
        if max_failures < 0:
            raise ConfigurationError(f"max_failures must not be negative, got {max_failures}")

        self.batch_size = batch_size
        self.max_failures = max_failures
        self.ignore_tags = frozenset(tag.lower() for tag in ignore_tags)
        self.pad_translations = pad_translations
        self.resolver = PipelineResolver(
            api_key,
            user_id,
            discovery_url=discovery_url,
            pipeline_id=pipeline_id,
            client=client,
            timeout=timeout,
        )
        self.invoker = TranslationInvoker(self.resolver, client=client, timeout=timeout)

    @classmethod
    def from_settings(
        cls, settings: Settings, *, client: Optional[httpx.AsyncClient] = None
    ) -> "DOMTranslator":
        return cls(
            settings.ulca_api_key,
            settings.ulca_user_id,
            discovery_url=settings.discovery_url,
            pipeline_id=settings.pipeline_id,
            batch_size=settings.batch_size,
            max_failures=settings.max_failures,
            ignore_tags=settings.ignore_tags,
            pad_translations=settings.pad_translations,
            timeout=settings.request_timeout,
            client=client,
        )

    async def translate_html_string(
        self, html: str, source_language: str, target_language: str
    ) -> PageElement:
        """Parse ``html`` and translate its body in place; return the body."""

        root = document_root(parse_html(html))
        return await self.translate_dom(root, source_language, target_language)

    async def translate_dom(
        self, root: PageElement, source_language: str, target_language: str
    ) -> PageElement:
        """Translate the visible text under ``root`` in place and return it."""

        outcome = await self.translate_document(root, source_language, target_language)
        return outcome.root

    async def translate_document(
        self, root: PageElement, source_language: str, target_language: str
    ) -> TranslationOutcome:
        """Translate ``root`` in place, reporting counters and timings."""

        stats = TranslationStats()
        budget = RetryBudget(self.max_failures)
        discovery_before = self.resolver.discovery_calls
        timings_before = len(self.resolver.discovery_seconds)
        started = time.perf_counter()

        try:
            mapping_started = time.perf_counter()
            occurrences = collect_segments(root, self.ignore_tags)
            stats.mapping_seconds = time.perf_counter() - mapping_started
            stats.segments = len(occurrences)
            stats.text_nodes = sum(len(nodes) for nodes in occurrences.values())

            if not occurrences:
                logger.info("No translatable text found, nothing to do")
                return TranslationOutcome(root=root, stats=stats)

            session = await self.invoker.acquire_session(source_language, target_language, budget)
            batches = make_batches(list(occurrences), self.batch_size)
            stats.batches = len(batches)
            logger.info(
                "Translating %d segment(s) in %d batch(es) %s -> %s",
                stats.segments,
                stats.batches,
                source_language,
                target_language,
            )

            await asyncio.gather(
                *(
                    self._translate_batch(batch, occurrences, session, budget, stats)
                    for batch in batches
                )
            )
        finally:
            stats.failures = budget.total_failures
            stats.discovery_calls = self.resolver.discovery_calls - discovery_before
            stats.discovery_seconds = self.resolver.discovery_seconds[timings_before:]
            stats.total_seconds = time.perf_counter() - started

        logger.info(
            "Translation done: %d node(s) rewritten, %d skipped, %d failure(s) in %.2fs",
            stats.rewritten,
            stats.skipped,
            stats.failures,
            stats.total_seconds,
        )
        logger.debug("Translation stats: %s", stats.as_dict())
        return TranslationOutcome(root=root, stats=stats)

    async def _translate_batch(
        self,
        batch: Batch,
        occurrences: OccurrenceMap,
        session: Session,
        budget: RetryBudget,
        stats: TranslationStats,
    ) -> None:
        translate_started = time.perf_counter()
        translations = await self.invoker.invoke(batch.segments, session, budget)
        stats.translate_seconds.append(time.perf_counter() - translate_started)

        rewrite_started = time.perf_counter()
        result = apply_translations(
            occurrences, batch.segments, translations, pad=self.pad_translations
        )
        stats.rewrite_seconds += time.perf_counter() - rewrite_started
        stats.rewritten += result.rewritten
        stats.skipped += result.skipped
        logger.debug(
            "Batch %d: %d segment(s), %d node(s) rewritten",
            batch.batch_id,
            len(batch),
            result.rewritten,
        )
