"""HTTP client that forwards envelopes to backend MCP servers."""

import logging
from typing import Optional

import httpx
import mcp.types as types

from ..protocol import Envelope, EnvelopeDecodeError

logger = logging.getLogger(__name__)


class BackendClient:
    """Sends one envelope to one backend endpoint and returns its reply.

    Transport problems never escape ``forward``: they come back as an error
    envelope carrying the caller's id and ``INTERNAL_ERROR``.
    """

    def __init__(
        self,
        timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.timeout = timeout
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=timeout)

    async def forward(self, endpoint: str, envelope: Envelope) -> Envelope:
        """POST ``envelope`` to ``endpoint``; no retries."""
        try:
            response = await self._http.post(
                endpoint,
                json=envelope.encode(),
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
            if not response.is_success:
                raise _BackendStatusError(
                    f"Server responded with {response.status_code}: "
                    f"{response.reason_phrase}"
                )
            return Envelope.decode(response.content)

        except httpx.TimeoutException:
            return self._failure(envelope, endpoint, f"timed out after {self.timeout}s")
        except (
            httpx.HTTPError,
            httpx.InvalidURL,
            _BackendStatusError,
            EnvelopeDecodeError,
        ) as e:
            return self._failure(envelope, endpoint, str(e) or type(e).__name__)

    def _failure(self, envelope: Envelope, endpoint: str, cause: str) -> Envelope:
        logger.warning(f"Backend call to {endpoint} failed: {cause}")
        return envelope.error_reply(
            types.INTERNAL_ERROR, f"Failed to contact server: {cause}"
        )

    async def aclose(self) -> None:
        """Release the connection pool if this client created it."""
        if self._owns_client:
            await self._http.aclose()

    async def __aenter__(self) -> "BackendClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()


class _BackendStatusError(Exception):
    """Backend answered with a non-success HTTP status."""
