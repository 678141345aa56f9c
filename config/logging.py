"""Structured logging helpers used by the production LOGGING config.

Services log a short event name as the message and put the details in
``extra``; the formatter turns each record into one JSON line.
"""

import json
import logging
import random
from datetime import date, datetime, timezone
from decimal import Decimal

# Attributes every LogRecord carries; everything else came from ``extra``
RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime", "taskName"}


def _jsonable(value):
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (set, frozenset, tuple)):
        return [_jsonable(v) for v in value]
    if isinstance(value, list):
        return [_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return str(value)


class JsonFormatter(logging.Formatter):
    """One JSON object per record.

    Base fields are ``time`` (ISO-8601 UTC), ``level``, ``logger`` and
    ``event``. ``event`` defaults to the message when the caller did not pass
    one in ``extra``. Decimals (stock quantities, money) are written as
    strings so no precision is lost.
    """

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        message = record.getMessage()
        payload = {
            "time": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "event": getattr(record, "event", message),
        }
        if message != payload["event"]:
            payload["message"] = message

        for key, value in record.__dict__.items():
            if key in RECORD_ATTRS or key in payload:
                continue
            payload[key] = _jsonable(value)

        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


class SamplingFilter(logging.Filter):
    """Keep a fraction of noisy records.

    Only records at one of ``levels`` are sampled; anything else passes.
    Events listed in ``allow_events`` always pass, matched against the
    record's ``event`` extra (or its message when there is none).
    """

    def __init__(self, rate: float = 1.0, levels: list[str] | None = None, allow_events: list[str] | None = None):
        super().__init__()
        self.rate = min(max(float(rate), 0.0), 1.0)
        self.levels = set(levels or ["INFO"])
        self.allow_events = set(allow_events or [])

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        if record.levelname not in self.levels:
            return True
        if getattr(record, "event", record.msg) in self.allow_events:
            return True
        if self.rate >= 1.0:
            return True
        if self.rate <= 0.0:
            return False
        return random.random() < self.rate
