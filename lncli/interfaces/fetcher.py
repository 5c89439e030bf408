"""Abstract base class for page-fetch providers.

Defines the single capability the acquisition engine needs from the
network: GET a URL and hand back the status code and body text.  The
engine never talks to an HTTP library directly, so tests inject a fake
fetcher and retry or caching policies can be layered in a provider
without touching extraction or navigation logic.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from lncli.utils.errors import NetworkError


@dataclass(frozen=True)
class FetchResponse:
    """Raw result of one GET request.

    Attributes
    ----------
    status_code:
        The HTTP status of the final response (after redirects).
    text:
        The decoded response body.
    url:
        The URL that was requested.
    """

    status_code: int
    text: str
    url: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class IFetcher(ABC):
    """Contract for services that retrieve page markup by URL.

    Every call is a fresh request; implementations must not cache bodies.
    """

    @abstractmethod
    async def fetch(self, url: str) -> FetchResponse:
        """GET *url* and return its status and body.

        Parameters
        ----------
        url:
            Absolute URL to request.

        Returns
        -------
        FetchResponse
            The response, whatever its status code.

        Raises
        ------
        lncli.utils.errors.NetworkError
            If no response was received (DNS failure, timeout, reset).
        lncli.utils.errors.ValidationError
            If *url* cannot be parsed as a URL at all.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this fetcher, e.g. ``"httpx"``."""

    async def fetch_text(self, url: str) -> str:
        """GET *url* and return the body, treating any non-2xx as an error.

        Raises
        ------
        lncli.utils.errors.NetworkError
            On transport failure, or carrying ``status_code`` for a
            non-success response.
        """
        response = await self.fetch(url)
        if not response.ok:
            raise NetworkError(
                message=f"HTTP {response.status_code}",
                source=url,
                status_code=response.status_code,
            )
        return response.text
