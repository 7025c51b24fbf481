# perevod/relay/app.py
"""
Translation relay: a same-origin pass-through to Yandex Cloud Translate.

POST /api/translate  {"texts": [...], "apiKey": "..."}
    → upstream {"texts": [...], "targetLanguageCode": "ru"} with
      "Authorization: Api-Key <apiKey>"
    ← upstream status and JSON body, unchanged

No translation logic lives here.
"""

import json
import logging
from contextlib import asynccontextmanager
from typing import Any, Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

from perevod import __version__
from perevod.config.settings import AppSettings

logger = logging.getLogger(__name__)

ALLOWED_METHODS = ["GET", "OPTIONS", "PATCH", "DELETE", "POST", "PUT"]

# Sent on every response, including requests without an Origin header
CORS_HEADERS = {
    "Access-Control-Allow-Credentials": "true",
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": ",".join(ALLOWED_METHODS),
    "Access-Control-Allow-Headers": (
        "X-CSRF-Token, X-Requested-With, Accept, Accept-Version, Content-Length, "
        "Content-MD5, Content-Type, Date, X-Api-Version"
    ),
}


async def forward_translate(
    client: httpx.AsyncClient,
    texts: Any,
    api_key: str,
    upstream_url: str,
    target_language: str = "ru",
) -> tuple[int, Any]:
    """
    Send one translation request to the provider.

    Args:
        client: Shared HTTP client (owns the timeout)
        texts: A list of texts, or a single text (wrapped into a list)
        api_key: Yandex Cloud API key
        upstream_url: Provider endpoint
        target_language: Target language code

    Returns:
        (status_code, body): parsed JSON for 2xx, raw text otherwise

    Raises:
        httpx.HTTPError: Transport failures
        ValueError: A 2xx reply that is not JSON
    """
    body = {
        "texts": texts if isinstance(texts, list) else [texts],
        "targetLanguageCode": target_language,
    }
    response = await client.post(
        upstream_url,
        json=body,
        headers={"Authorization": f"Api-Key {api_key}"},
    )

    if response.is_success:
        return response.status_code, response.json()
    return response.status_code, response.text


def _is_missing(value: Any) -> bool:
    # An empty list of texts is forwarded; the provider rejects it
    return value is None or value == "" or value is False


def create_app(settings: Optional[AppSettings] = None) -> FastAPI:
    """Create the relay application."""
    settings = settings or AppSettings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        timeout = httpx.Timeout(settings.request_timeout)
        async with httpx.AsyncClient(timeout=timeout) as client:
            app.state.http_client = client
            yield

    app = FastAPI(
        title="Perevod translation relay",
        description="Pass-through to Yandex Cloud Translate",
        version=__version__,
        lifespan=lifespan,
    )

    @app.middleware("http")
    async def add_cors_headers(request: Request, call_next):
        response = await call_next(request)
        response.headers.update(CORS_HEADERS)
        return response

    @app.get("/health")
    async def health():
        return {"status": "ok", "version": __version__}

    @app.api_route("/api/translate", methods=ALLOWED_METHODS)
    async def translate(request: Request):
        # Preflight
        if request.method == "OPTIONS":
            return Response(status_code=200)

        if request.method != "POST":
            return JSONResponse(status_code=405, content={"error": "Method not allowed"})

        try:
            payload = await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            payload = None

        texts = payload.get("texts") if isinstance(payload, dict) else None
        api_key = payload.get("apiKey") if isinstance(payload, dict) else None
        if _is_missing(texts) or _is_missing(api_key):
            return JSONResponse(
                status_code=400,
                content={"error": "Missing texts or apiKey in request body"},
            )

        try:
            status, body = await forward_translate(
                request.app.state.http_client,
                texts,
                api_key,
                settings.upstream_url,
                settings.target_language,
            )
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Upstream request failed: %r", e)
            return JSONResponse(
                status_code=500,
                content={"error": "Translation failed", "message": str(e)},
            )

        logger.info("Yandex API response status: %s", status)

        if not 200 <= status < 300:
            return JSONResponse(
                status_code=status,
                content={"error": f"Yandex API Error: {status}", "details": body},
            )

        logger.debug("Translation successful")
        return JSONResponse(status_code=200, content=body)

    return app
