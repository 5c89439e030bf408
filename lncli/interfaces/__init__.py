"""Public interface definitions for external collaborators.

The acquisition engine reaches the network only through :class:`IFetcher`.
The concrete adapter lives in ``lncli/providers/`` and is injected by the
composition root in ``lncli/main.py``; tests inject fakes instead.

    Interface   ->  Concrete implementations (in lncli/providers/)
    -----------------------------------------------------------------
    IFetcher    ->  HttpxFetcher
"""

from lncli.interfaces.fetcher import FetchResponse, IFetcher

__all__ = [
    "FetchResponse",
    "IFetcher",
]
