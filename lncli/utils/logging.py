"""structlog wiring for lncli.

One processor chain, two renderers: key/value console lines for people and
one JSON object per line for log collectors.  The caller picks JSON
explicitly (``--json-logs`` or ``LNCLI_APP_ENV=production``); nothing here
reads the environment.

Every line goes to a single stream, stderr unless told otherwise, so the
chapter text that ``lncli read`` prints on stdout can be piped cleanly.
Records from the standard ``logging`` module (httpx, httpcore) are routed
through the same chain and land on the same stream.
"""

import logging
import sys
from typing import TextIO

import structlog

# Libraries that log every request at INFO.
_CHATTY_LOGGERS = ("httpx", "httpcore")


def _shared_processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
    ]


def _renderer(json_output: bool, stream: TextIO) -> structlog.types.Processor:
    if json_output:
        return structlog.processors.JSONRenderer()
    isatty = getattr(stream, "isatty", None)
    return structlog.dev.ConsoleRenderer(colors=bool(isatty and isatty()))


def _route_stdlib(level: int, processors: list, renderer, stream: TextIO) -> None:
    handler = logging.StreamHandler(stream)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                *processors,
                renderer,
            ],
        )
    )
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    chatty_level = logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(chatty_level)


def configure_logging(
    log_level: str = "WARNING",
    json_output: bool = False,
    stream: TextIO | None = None,
) -> structlog.BoundLogger:
    """Point structlog and stdlib logging at *stream* with one renderer.

    Args:
        log_level: Minimum level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_output: Render JSON lines instead of console lines.
        stream: Destination; ``sys.stderr`` as it is at call time when omitted.

    Returns:
        A logger bound to the new configuration.
    """
    target = stream if stream is not None else sys.stderr
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {log_level!r}")

    processors = _shared_processors()
    renderer = _renderer(json_output, target)

    structlog.configure(
        processors=[*processors, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=target),
        cache_logger_on_first_use=True,
    )
    _route_stdlib(level, processors, renderer, target)

    return structlog.get_logger()


def get_logger(name: str) -> structlog.BoundLogger:
    """Named logger; configures WARNING-level console output on first use."""
    if not structlog.is_configured():
        configure_logging()
    return structlog.get_logger(logger_name=name)
