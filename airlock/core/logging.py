"""Logging for Airlock.

All modules log through a ContextualLogger: a LoggerAdapter that carries a
dict of dimensions (component, type tag, ...) and an optional message
prefix. Dimensions are rendered as ``key=value`` pairs locally and as
top-level JSON fields everywhere else.

Usage:
    from airlock.core.logging import logger

    serializer_logger = logger.with_prefix("Serializer: ").with_context(
        component="serializer"
    )
    serializer_logger.info("done", extra={"type_tag": "users"})
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, MutableMapping, Optional, Tuple

from airlock.core.config import settings

ROOT_LOGGER_NAME = "airlock"


class LocalFormatter(logging.Formatter):
    """Human-readable single-line formatter for local development and tests."""

    def __init__(self) -> None:
        """Initialize with the local line format."""
        super().__init__("%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        """Append dimensions to the formatted line."""
        line = super().format(record)
        dimensions = getattr(record, "dimensions", None)
        if dimensions:
            rendered = " ".join(f"{key}={value}" for key, value in dimensions.items())
            line = f"{line} | {rendered}"
        return line


class JSONFormatter(logging.Formatter):
    """One JSON object per line, dimensions flattened into the payload."""

    def format(self, record: logging.LogRecord) -> str:
        """Serialize the record as JSON."""
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(getattr(record, "dimensions", None) or {})
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class ContextualLogger(logging.LoggerAdapter):
    """Logger adapter carrying dimensions and a message prefix.

    Adapters are immutable from the caller's point of view: ``with_context``
    and ``with_prefix`` return new adapters sharing the underlying logger.
    """

    def __init__(
        self,
        logger: logging.Logger,
        dimensions: Optional[Dict[str, Any]] = None,
        prefix: str = "",
    ) -> None:
        """Wrap a stdlib logger.

        Args:
            logger: The underlying stdlib logger.
            dimensions: Key/value pairs attached to every record.
            prefix: Text prepended to every message.
        """
        super().__init__(logger, {})
        self.dimensions: Dict[str, Any] = dict(dimensions or {})
        self.prefix = prefix

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> Tuple[Any, MutableMapping[str, Any]]:
        """Merge adapter dimensions with per-call extras."""
        dimensions = dict(self.dimensions)
        dimensions.update(kwargs.pop("extra", None) or {})
        kwargs["extra"] = {"dimensions": dimensions}
        return f"{self.prefix}{msg}", kwargs

    def with_context(self, **dimensions: Any) -> "ContextualLogger":
        """Return a logger with additional dimensions."""
        merged = dict(self.dimensions)
        merged.update(dimensions)
        return ContextualLogger(self.logger, merged, self.prefix)

    def with_prefix(self, prefix: str) -> "ContextualLogger":
        """Return a logger whose messages start with ``prefix``."""
        return ContextualLogger(self.logger, self.dimensions, prefix)


class LoggerConfigurator:
    """Creates ContextualLoggers under the ``airlock`` logger hierarchy."""

    _configured = False

    @classmethod
    def _configure_root(cls) -> None:
        if cls._configured:
            return
        root = logging.getLogger(ROOT_LOGGER_NAME)
        handler = logging.StreamHandler()
        handler.setFormatter(LocalFormatter() if settings.is_local else JSONFormatter())
        root.addHandler(handler)
        root.setLevel(settings.LOG_LEVEL.upper())
        cls._configured = True

    @classmethod
    def configure_logger(
        cls, name: str, dimensions: Optional[Dict[str, Any]] = None
    ) -> ContextualLogger:
        """Configure a named logger.

        Args:
            name: Dotted logger name, normally the module's ``__name__``.
            dimensions: Initial dimensions for the returned adapter.

        Returns:
            A ContextualLogger bound to ``name``.
        """
        cls._configure_root()
        return ContextualLogger(logging.getLogger(name), dimensions)


logger = LoggerConfigurator.configure_logger(ROOT_LOGGER_NAME)
