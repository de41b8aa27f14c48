"""Pydantic schema definitions."""

from typing import List

from pydantic import BaseModel, Field


class TranslateRequest(BaseModel):
    html: str
    source_language: str = Field(min_length=1)
    target_language: str = Field(min_length=1)


class TranslationStats(BaseModel):
    segments: int
    text_nodes: int
    batches: int
    rewritten: int
    skipped: int
    discovery_calls: int
    failures: int
    mapping_seconds: float
    discovery_seconds: List[float]
    translate_seconds: List[float]
    rewrite_seconds: float
    total_seconds: float


class TranslateResponse(BaseModel):
    html: str
    source_language: str
    target_language: str
    stats: TranslationStats
