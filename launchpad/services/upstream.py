# FILE: launchpad/services/upstream.py
import logging
from typing import Any, Dict, Optional

import httpx

from launchpad.core.errors import (
    Conflict,
    NotFound,
    UpstreamError,
    ValidationError,
)

logger = logging.getLogger("launchpad.upstream")


def build_client(
    base_url: str,
    headers: Dict[str, str],
    timeout: float,
    params: Optional[Dict[str, str]] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """One client per dashboard operation; nothing is shared across requests."""
    return httpx.AsyncClient(
        base_url=base_url,
        headers=headers,
        params=params or {},
        timeout=timeout,
        transport=transport,
    )


def error_message(resp: httpx.Response) -> Optional[str]:
    """Pull the upstream's own message out of an error body.

    Vercel answers ``{"error": {"code", "message"}}``, GitHub answers
    ``{"message": ...}``. Anything else yields None.
    """
    try:
        data = resp.json()
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None
    err = data.get("error")
    if isinstance(err, dict) and err.get("message"):
        return str(err["message"])
    if isinstance(err, str) and err:
        return err
    if data.get("message"):
        return str(data["message"])
    return None


def raise_for_upstream(resp: httpx.Response, what: str) -> None:
    if resp.is_success:
        return

    status = resp.status_code
    message = error_message(resp)
    logger.warning(f"{what} failed: upstream {status} {message or ''}".rstrip())

    if status in (400, 422):
        raise ValidationError(message or f"{what} was rejected")
    if status == 404:
        raise NotFound(message or f"{what}: not found")
    if status == 409:
        raise Conflict(message or f"{what}: conflict")
    raise UpstreamError(
        message or f"{what} failed (upstream status {status})",
        upstream_status=status,
    )


def decode_json(resp: httpx.Response, what: str) -> Any:
    try:
        return resp.json()
    except ValueError:
        logger.error(f"{what}: upstream returned a malformed body")
        raise UpstreamError(f"{what}: malformed upstream response", upstream_status=resp.status_code)


async def send(client: httpx.AsyncClient, method: str, url: str, what: str, **kwargs) -> httpx.Response:
    """Issue one upstream call, turning transport failures into UpstreamError."""
    try:
        return await client.request(method, url, **kwargs)
    except httpx.TimeoutException as e:
        logger.error(f"{what}: upstream timed out: {e}")
        raise UpstreamError(f"{what}: upstream timed out")
    except httpx.HTTPError as e:
        logger.error(f"{what}: upstream unreachable: {e}")
        raise UpstreamError(f"{what}: upstream unreachable")


async def request_json(client: httpx.AsyncClient, method: str, url: str, what: str, **kwargs) -> Any:
    resp = await send(client, method, url, what, **kwargs)
    raise_for_upstream(resp, what)
    if resp.status_code == 204 or not resp.content:
        return None
    return decode_json(resp, what)
