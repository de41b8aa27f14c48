"""FastAPI application entrypoint."""

from __future__ import annotations

import logging

from fastapi import Depends, FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import get_settings
from .deps import get_translator
from .dom.collector import document_root, parse_html
from .errors import ConfigurationError, RetryExhaustedError
from .schemas import TranslateRequest, TranslateResponse, TranslationStats
from .translator import DOMTranslator


settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("domtranslate")

app = FastAPI(title="DOM Translation API", version="0.1.0")

# Browser extensions and local frontends call the API cross-origin.
if settings.app_env == "development":
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError) -> JSONResponse:
    logger.error("Translator misconfigured: %s", exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": str(exc)},
    )


@app.exception_handler(RetryExhaustedError)
async def retry_exhausted_handler(request: Request, exc: RetryExhaustedError) -> JSONResponse:
    logger.error("Translation abandoned after %d failures: %s", exc.failures, exc)
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={"detail": str(exc), "failures": exc.failures},
    )


@app.get("/health", tags=["system"])
async def health() -> dict[str, str]:
    """Simple health probe endpoint."""

    return {"status": "ok", "env": settings.app_env}


@app.post("/translate", response_model=TranslateResponse, tags=["translation"])
async def translate(
    payload: TranslateRequest,
    translator: DOMTranslator = Depends(get_translator),
) -> TranslateResponse:
    """Translate the visible text of an HTML document."""

    logger.info(
        "POST /translate: %d chars, %s -> %s",
        len(payload.html),
        payload.source_language,
        payload.target_language,
    )
    soup = parse_html(payload.html)
    outcome = await translator.translate_document(
        document_root(soup),
        payload.source_language,
        payload.target_language,
    )
    return TranslateResponse(
        html=str(soup),
        source_language=payload.source_language,
        target_language=payload.target_language,
        stats=TranslationStats(**outcome.stats.as_dict()),
    )
