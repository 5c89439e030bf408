"""Utility modules for lncli.

- **errors** -- Domain exception hierarchy rooted at LncliError; each engine
  component raises its own subclass so callers can render failures
  specifically without broad ``except Exception`` blocks.
- **concurrency** -- semaphore throttling with per-item timeouts for the
  batched update check.
- **logging** -- structlog setup with a dual-renderer pattern: coloured
  console output interactively, structured JSON in production.
"""

# -- Domain exception hierarchy --------------------------------------------
from lncli.utils.errors import (
    BoundaryError,
    ConfigurationError,
    LncliError,
    NetworkError,
    ParseError,
    StoreCorruptError,
    StoreNotFoundError,
    ValidationError,
    ValidationKind,
)

# -- Async concurrency helpers ---------------------------------------------
from lncli.utils.concurrency import throttled_gather

# -- Structured logging setup ----------------------------------------------
from lncli.utils.logging import configure_logging, get_logger

__all__ = [
    "BoundaryError",
    "ConfigurationError",
    "LncliError",
    "NetworkError",
    "ParseError",
    "StoreCorruptError",
    "StoreNotFoundError",
    "ValidationError",
    "ValidationKind",
    "configure_logging",
    "get_logger",
    "throttled_gather",
]
