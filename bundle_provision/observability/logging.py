from __future__ import annotations

import json
import logging
import os
import sys
from typing import Any

from .context import snapshot


_RESERVED = frozenset(
    {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "message",
        "asctime",
    }
)


class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # noqa: A003
        payload: dict[str, Any] = {
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        # attempt_id/state/errors[] for whatever attempt is running in this context.
        payload.update(snapshot())

        # Convention: extra fields are carried in record.__dict__.
        for k, v in record.__dict__.items():
            if k in _RESERVED or k.startswith("_"):
                continue
            try:
                json.dumps(v)
                payload[k] = v
            except TypeError:
                payload[k] = os.fspath(v) if isinstance(v, os.PathLike) else repr(v)

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False)


class KVLogger:
    """Keyword arguments become structured fields on the record."""

    def __init__(self, logger: logging.Logger):
        self._logger = logger

    def debug(self, msg: str, *args: object, **kwargs: object) -> None:
        self._log("debug", msg, *args, **kwargs)

    def info(self, msg: str, *args: object, **kwargs: object) -> None:
        self._log("info", msg, *args, **kwargs)

    def warning(self, msg: str, *args: object, **kwargs: object) -> None:
        self._log("warning", msg, *args, **kwargs)

    def error(self, msg: str, *args: object, **kwargs: object) -> None:
        self._log("error", msg, *args, **kwargs)

    def exception(self, msg: str, *args: object, **kwargs: object) -> None:
        kwargs.setdefault("exc_info", True)
        self._log("error", msg, *args, **kwargs)

    def _log(self, level: str, msg: str, *args: object, **kwargs: object) -> None:
        exc_info = kwargs.pop("exc_info", None)
        stack_info = kwargs.pop("stack_info", False)
        fields = dict(kwargs.pop("extra", None) or {})
        fields.update(kwargs)

        log_fn = getattr(self._logger, level)
        log_fn(msg, *args, extra=fields, exc_info=exc_info, stack_info=stack_info, stacklevel=3)


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once.

    Safe to call multiple times; later calls only adjust the level.
    """

    root = logging.getLogger()
    if getattr(root, "_bundle_provision_configured", False):
        root.setLevel(level)
        return

    root.setLevel(level)

    handler = logging.StreamHandler(stream=sys.stderr)
    handler.setFormatter(_JsonFormatter())

    root.addHandler(handler)
    setattr(root, "_bundle_provision_configured", True)


def get_logger(name: str = "bundle_provision") -> KVLogger:
    return KVLogger(logging.getLogger(name))
