"""
MetaForge game-data API client for the chat gateway.
"""

import asyncio
import time
from typing import Any, Optional, TYPE_CHECKING

import httpx

from shared.logging import get_logger
from shared.errors import (
    UpstreamHTTPError,
    UpstreamMalformed,
    UpstreamTimeout,
    UpstreamUnavailable,
)

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


SERVICE_NAME = "metaforge"
DEFAULT_BASE_URL = "https://metaforge.app/api/arc-raiders"
DEFAULT_TIMEOUT_MS = 5000


def unwrap_envelope(body: Any) -> Any:
    """Return ``body["data"]`` for ``{data, ...metadata}`` envelopes, else ``body``."""
    if isinstance(body, dict) and body.get("data") is not None:
        return body["data"]
    return body


class MetaForgeClient:
    """Issues single, time-bounded GETs against the upstream API.

    Exactly one attempt per call, no retry or circuit breaker. A failed call
    raises one of the ``Upstream*`` errors and the caller decides what to do.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        *,
        client: Optional[httpx.AsyncClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        metrics: Optional["MetricsCollector"] = None,
    ):
        self.base_url = base_url.rstrip('/')
        self.timeout_ms = timeout_ms
        self.logger = get_logger("chatbot.metaforge_client")
        self.metrics = metrics
        self._transport = transport
        self._client = client
        self._owns_client = client is None

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000.0

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout_seconds),
                headers={"Accept": "application/json"},
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Release the pooled connections if this client created them."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def fetch(self, endpoint: str, unwrap: bool = True) -> Any:
        """GET ``base_url + endpoint`` once and return the decoded JSON payload.

        With ``unwrap`` the inner ``data`` list of an envelope is returned;
        without it the whole body (metadata included) is returned.
        """
        url = f"{self.base_url}{endpoint}"
        start = time.perf_counter()
        outcome = "error"

        async def _request() -> Any:
            response = await self._get_client().get(url)
            if not response.is_success:
                self.logger.error(
                    "Upstream request failed",
                    url=url,
                    status_code=response.status_code,
                )
                raise UpstreamHTTPError(
                    SERVICE_NAME,
                    response.status_code,
                    details={"endpoint": endpoint, "status_code": response.status_code},
                )
            try:
                return response.json()
            except ValueError as exc:
                self.logger.error("Upstream returned malformed JSON", url=url, error=str(exc))
                raise UpstreamMalformed(
                    SERVICE_NAME,
                    details={"endpoint": endpoint, "error": str(exc)},
                ) from exc

        try:
            # httpx timeouts are per phase; wait_for bounds the whole exchange.
            body = await asyncio.wait_for(_request(), timeout=self.timeout_seconds)
            outcome = "success"
        except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
            outcome = "timeout"
            self.logger.error("Upstream request timed out", url=url, timeout_ms=self.timeout_ms)
            raise UpstreamTimeout(
                SERVICE_NAME,
                self.timeout_ms,
                details={"endpoint": endpoint},
            ) from exc
        except httpx.HTTPError as exc:
            outcome = "unavailable"
            self.logger.error("Upstream transport error", url=url, error=str(exc))
            raise UpstreamUnavailable(
                SERVICE_NAME,
                str(exc) or exc.__class__.__name__,
                details={"endpoint": endpoint},
            ) from exc
        finally:
            self._record(endpoint, outcome, time.perf_counter() - start)

        self.logger.debug("Upstream payload retrieved", url=url)
        return unwrap_envelope(body) if unwrap else body

    def _record(self, endpoint: str, outcome: str, duration: float) -> None:
        if not self.metrics:
            return
        self.metrics.increment_counter("upstream_requests_total", endpoint=endpoint, outcome=outcome)
        self.metrics.observe_histogram("upstream_request_duration_seconds", duration, endpoint=endpoint)
