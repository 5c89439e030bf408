"""Page fetcher backed by httpx.

Performs one plain GET per call with a browser-like User-Agent and
redirect following.  Transport failures are translated into
:class:`~lncli.utils.errors.NetworkError`; non-success statuses are
returned as-is so :meth:`IFetcher.fetch_text` can report the code.
"""

from __future__ import annotations

import httpx
import structlog

from lncli.interfaces.fetcher import FetchResponse, IFetcher
from lncli.utils.errors import NetworkError, ValidationError, ValidationKind

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_TIMEOUT = 15.0
_DEFAULT_HEADERS = {
    "User-Agent": "Mozilla/5.0 (compatible; lncli/0.1; +https://github.com/lncli)",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
}


class HttpxFetcher(IFetcher):
    """:class:`IFetcher` implementation using ``httpx.AsyncClient``.

    The client is injected via the constructor for testability.  When no
    client is supplied one is created and owned by the fetcher, and
    :meth:`aclose` closes it.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = _DEFAULT_TIMEOUT,
        user_agent: str | None = None,
    ) -> None:
        headers = dict(_DEFAULT_HEADERS)
        if user_agent:
            headers["User-Agent"] = user_agent
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            headers=headers,
            follow_redirects=True,
        )

    # ------------------------------------------------------------------
    # IFetcher implementation
    # ------------------------------------------------------------------

    async def fetch(self, url: str) -> FetchResponse:
        """GET *url*.

        Raises :class:`ValidationError` if httpx rejects the URL itself and
        :class:`NetworkError` if no response arrives.
        """
        try:
            response = await self._client.get(url)
        except httpx.InvalidURL as exc:
            raise ValidationError(
                message=f"Invalid URL: {exc}",
                source=url,
                kind=ValidationKind.MALFORMED_URL,
            ) from exc
        except httpx.TimeoutException as exc:
            raise NetworkError(
                message=f"Timed out: {exc}",
                source=url,
            ) from exc
        except httpx.HTTPError as exc:
            raise NetworkError(
                message=f"Request failed: {exc}",
                source=url,
            ) from exc

        logger.debug("page_fetched", url=url, status=response.status_code, size=len(response.text))
        return FetchResponse(status_code=response.status_code, text=response.text, url=url)

    def get_provider_name(self) -> str:
        return "httpx"

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def aclose(self) -> None:
        """Close the underlying client if this fetcher created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> HttpxFetcher:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        await self.aclose()
