"""HTTP transport shared by the discovery and inference clients."""

from __future__ import annotations

from typing import Any, Optional

import httpx


REMOTE_ERRORS = (httpx.HTTPError, httpx.InvalidURL, ValueError)


async def post_json(
    url: str,
    *,
    payload: dict,
    headers: dict[str, str],
    client: Optional[httpx.AsyncClient] = None,
    timeout: float = 30.0,
) -> Any:
    """POST ``payload`` as JSON and return the decoded JSON body.

    Raises ``httpx.HTTPError`` on transport failures and error statuses, and
    ``ValueError`` when the body is not JSON.
    """

    close_client = False
    if client is None:
        client = httpx.AsyncClient(timeout=httpx.Timeout(timeout))
        close_client = True

    try:
        response = await client.post(url, json=payload, headers=headers)
        response.raise_for_status()
        return response.json()
    finally:
        if close_client:
            await client.aclose()
