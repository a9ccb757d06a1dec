"""structlog setup for the quotes service.

Log lines always go to stderr (or an explicit stream). stdout belongs to
the one-shot CLI, which prints its JSON report there, so nothing here may
write to it.

Context bound with structlog.contextvars (the retry loop binds the source
name) is merged into every line emitted from that coroutine.
"""

import logging
import sys
from typing import TextIO

import structlog

# Browser, HTTP and exchange client libraries are chatty below WARNING
NOISY_LOGGERS = ("asyncio", "aiohttp", "ccxt", "playwright", "uvicorn.access")


def _renderer(log_format: str, stream: TextIO) -> structlog.types.Processor:
    if log_format.lower() == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=stream.isatty())


def setup_logging(
    log_level: str = "INFO",
    log_format: str = "console",
    stream: TextIO | None = None,
) -> None:
    """Route structlog and stdlib logging through one stderr handler.

    Args:
        log_level: Root level name; unknown names fall back to INFO.
        log_format: "json" for machine-readable lines, anything else for
            the human-readable console renderer.
        stream: Destination for log lines. Defaults to sys.stderr as it is
            at call time, so test capture is honoured.
    """
    stream = stream if stream is not None else sys.stderr

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(stream)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            # Records from plain stdlib loggers (uvicorn, aiohttp) get the
            # same timestamp and level fields as structlog events.
            foreign_pre_chain=shared_processors[:4],
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(log_format, stream),
            ],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger named after the calling module."""
    return structlog.get_logger(name)
