import json
import logging
import time
from typing import Any, Mapping, Optional

import httpx
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from ..errors import TransportError
from ..schemas.common import ResponseMap
from ..settings import settings

logger = logging.getLogger(__name__)


def client(
    timeout_sec: Optional[float] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=timeout_sec if timeout_sec is not None else settings.QRIS_HTTP_TIMEOUT_SEC,
        transport=transport,
    )


def retry_policy(max_attempts: Optional[int] = None):
    # only connection-level failures are retried; one attempt unless configured
    return retry(
        stop=stop_after_attempt(max(1, max_attempts or settings.QRIS_HTTP_RETRY_MAX)),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=8),
        retry=retry_if_exception_type(httpx.TransportError),
        reraise=True,
    )


def encode_body(body: Mapping[str, Any]) -> bytes:
    """Serialize a request body. The same bytes are hashed for signing and sent."""
    return json.dumps(body, separators=(",", ":"), sort_keys=True, ensure_ascii=False).encode("utf-8")


async def perform_request(
    uri: str,
    body: Mapping[str, Any],
    headers: Mapping[str, str],
    *,
    content: Optional[bytes] = None,
    timeout: Optional[float] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> ResponseMap:
    """
    POST ``body`` as JSON to ``uri`` and decode the JSON answer.

    The HTTP status is not interpreted: banks report business failures in the
    body. An empty body decodes to an empty map. Network errors, timeouts and
    undecodable bodies raise TransportError.
    """
    payload = content if content is not None else encode_body(body)

    @retry_policy()
    async def _post() -> httpx.Response:
        async with client(timeout, transport) as c:
            return await c.post(uri, content=payload, headers=dict(headers))

    started = time.monotonic()
    try:
        resp = await _post()
    except httpx.HTTPError as exc:
        logger.warning("POST %s failed: %s", uri, exc, extra={"uri": uri})
        raise TransportError(f"POST {uri} failed: {exc}") from exc

    elapsed_ms = int((time.monotonic() - started) * 1000)
    logger.info(
        "POST %s -> %s (%d ms)", uri, resp.status_code, elapsed_ms,
        extra={"uri": uri, "status_code": resp.status_code, "elapsed_ms": elapsed_ms},
    )

    if not resp.content.strip():
        return ResponseMap()

    try:
        data = resp.json()
    except ValueError as exc:
        raise TransportError(f"POST {uri} returned invalid JSON: {exc}") from exc

    if not isinstance(data, dict):
        raise TransportError(f"POST {uri} returned {type(data).__name__}, expected a JSON object")
    return ResponseMap(data)
