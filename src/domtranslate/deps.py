"""FastAPI dependencies."""

from functools import lru_cache

from .config import get_settings
from .translator import DOMTranslator


@lru_cache
def get_translator() -> DOMTranslator:
    """Return the process-wide translator built from settings."""

    return DOMTranslator.from_settings(get_settings())
