"""Page fetch providers.

HttpxFetcher -- plain async GET via httpx, one fresh request per call.
"""

from lncli.providers.fetch.httpx_fetcher import HttpxFetcher

__all__ = ["HttpxFetcher"]
