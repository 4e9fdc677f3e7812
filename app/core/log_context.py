"""Logging setup and a logger adapter that appends sanitized context as JSON."""

import json
import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from app.core.config import Settings

# Any context key containing one of these substrings is redacted.
SENSITIVE_KEYS = ("password", "token", "secret", "key")
REDACTED = "REDACTED"
VISIBLE_PREFIX_LEN = 4


def _is_sensitive(key: str) -> bool:
    lowered = key.lower()
    return any(s in lowered for s in SENSITIVE_KEYS)


def _redact(value: Any) -> str:
    if isinstance(value, str) and value:
        return f"{value[:VISIBLE_PREFIX_LEN]}******"
    return REDACTED


def sanitize_context(obj: Any) -> Any:
    """Return a copy of obj with values under sensitive keys redacted, recursively."""
    if isinstance(obj, Mapping):
        return {
            key: _redact(value) if _is_sensitive(str(key)) else sanitize_context(value)
            for key, value in obj.items()
        }
    if isinstance(obj, (list, tuple)):
        return [sanitize_context(item) for item in obj]
    return obj


def format_with_context(message: str, context: Mapping[str, Any] | None) -> str:
    if not context:
        return message
    return f"{message} {json.dumps(sanitize_context(context), default=str)}"


class ContextLogger(logging.LoggerAdapter):
    """
    Logger adapter accepting a ``context`` keyword on every call.

        logger.info("User created", context={"action": "create", "user_id": uid})
    """

    def process(self, msg: Any, kwargs: Any) -> tuple[Any, Any]:
        context = kwargs.pop("context", None)
        return format_with_context(str(msg), context), kwargs


def get_logger(name: str) -> ContextLogger:
    return ContextLogger(logging.getLogger(name), {})


def configure_logging(settings: "Settings") -> None:
    """Configure the root logger once for the API process and CLI entrypoints."""
    logging.basicConfig(
        level=logging.DEBUG if settings.DEBUG else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%SZ",
    )
