"""Logging setup: readable lines with structured extras appended as JSON."""

import json
import logging
import sys

from creative_engine.config import settings

ROOT_LOGGER_NAME = "creative_engine"

# Attributes every LogRecord carries; anything else came in through `extra=`.
_STANDARD_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime", "taskName"}


class JSONExtrasFormatter(logging.Formatter):
    """Render `timestamp | LEVEL | logger | message {extras}`.

    Values passed via ``extra=`` are serialized as one JSON object so log
    aggregation can index creative ids, counts and durations.
    """

    def format(self, record: logging.LogRecord) -> str:
        record.message = record.getMessage()
        line = (
            f"{self.formatTime(record, self.datefmt)} | {record.levelname:<8} | "
            f"{record.name} | {record.message}"
        )

        extras = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _STANDARD_RECORD_ATTRS and not key.startswith("_")
        }
        if extras:
            try:
                line = f"{line} {json.dumps(extras, default=str, ensure_ascii=False)}"
            except (TypeError, ValueError):
                pass

        if record.exc_info and not record.exc_text:
            record.exc_text = self.formatException(record.exc_info)
        if record.exc_text:
            line = f"{line}\n{record.exc_text}"
        return line


def setup_logging(level: str | None = None) -> None:
    """Attach a stdout handler to the package logger once."""
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    resolved_level = (level or settings.log_level).upper()
    logger.setLevel(resolved_level)

    if logger.handlers:
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(resolved_level)
    handler.setFormatter(JSONExtrasFormatter(datefmt="%Y-%m-%d %H:%M:%S"))
    logger.addHandler(handler)
    logger.propagate = False
