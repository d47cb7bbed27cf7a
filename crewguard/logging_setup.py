from __future__ import annotations

import datetime
import json
import logging
import os
import sys
import traceback

_RESERVED = ("args", "msg", "exc_info", "exc_text", "stack_info", "message")


def _safe_to_json(obj) -> str:
    try:
        return json.dumps(obj, ensure_ascii=False, default=str)
    except (TypeError, ValueError):
        return json.dumps({"unserializable": str(obj)}, ensure_ascii=False)


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        created = datetime.datetime.fromtimestamp(record.created, tz=datetime.timezone.utc)
        base = {
            "timestamp": created.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "funcName": record.funcName,
            "lineno": record.lineno,
        }
        for k, v in record.__dict__.items():
            if k.startswith("_") or k in base or k in _RESERVED:
                continue
            # Only extras passed via logger.x(..., extra={...}) are interesting here.
            if k in _STANDARD_ATTRS:
                continue
            base[k] = v
        if record.exc_info:
            base["exc_info"] = "".join(traceback.format_exception(*record.exc_info))
        return _safe_to_json(base)


_STANDARD_ATTRS = frozenset(logging.LogRecord("", 0, "", 0, "", (), None).__dict__) | {"taskName"}


def install_json_logging(level: int | str | None = None) -> logging.Logger:
    level = level or os.getenv("LOG_LEVEL", "INFO").upper()
    root = logging.getLogger()
    root.setLevel(level)
    handler = logging.StreamHandler(stream=sys.stderr)
    handler.setFormatter(JsonFormatter())
    root.handlers[:] = [handler]
    logging.getLogger("httpx").propagate = False
    logging.getLogger("httpcore").propagate = False
    return root
