"""Root logging setup shared by the API and the setup script."""
import json
import logging
from typing import Any

from osce_admin.config import logging_settings

# Masked when passed through `extra`; participant and feedback records carry emails.
MASKED_FIELDS = frozenset({"password", "token", "authorization", "email"})

TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_RESERVED_ATTRS = frozenset(vars(logging.makeLogRecord({})))


def record_extra(record: logging.LogRecord) -> dict[str, Any]:
    """Return the `extra` fields attached to a record, with sensitive values masked."""
    return {
        key: "***" if key.lower() in MASKED_FIELDS else value
        for key, value in vars(record).items()
        if key not in _RESERVED_ATTRS and key not in ("message", "asctime")
    }


class CustomFormatter(logging.Formatter):
    """Plain-text or JSON formatter that keeps `extra` fields."""

    def __init__(self, use_json: bool = False, fmt: str | None = TEXT_FORMAT):
        super().__init__(fmt=fmt)
        self.use_json = use_json

    def format(self, record: logging.LogRecord) -> str:
        extra = record_extra(record)
        if self.use_json:
            return self._format_json(record, extra)

        line = super().format(record)
        if not extra:
            return line
        return line + " | " + " ".join(f"{key}={value}" for key, value in extra.items())

    def _format_json(self, record: logging.LogRecord, extra: dict[str, Any]) -> str:
        entry = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **extra,
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


_configured = False


def setup_logging() -> None:
    """Install one stream handler on the root logger. Later calls are no-ops."""
    global _configured
    if _configured:
        return

    handler = logging.StreamHandler()
    handler.setFormatter(CustomFormatter(use_json=logging_settings.LOG_FORMAT == "json"))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging_settings.LOG_LEVEL)
    _configured = True
