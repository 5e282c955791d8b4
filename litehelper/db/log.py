# litehelper/db/log.py
"""
Statement trace sink.

Every executed statement and every swallowed convenience-layer failure is
reported here. The sink is injected into handles and helpers at
construction; nothing reads a bare global flag.

Two channels:
  - info:  SQL text plus bound args
  - error: failures swallowed by the convenience layer

Advisory only. A sink never raises and never changes control flow.
"""
from __future__ import annotations

import logging
from typing import Optional

from litehelper.config.settings import trace_sql_enabled

# Module-level logger: output destination configured by the application
_log = logging.getLogger("litehelper.db.trace")


class LogSink:
    """Enable flag plus info/error channels backed by a stdlib logger."""

    def __init__(self, enabled: bool = False, logger: Optional[logging.Logger] = None) -> None:
        self.enabled = enabled
        self._logger = logger or _log

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def info(self, tag: str, msg: str, exc: Optional[BaseException] = None) -> None:
        if not self.enabled:
            return
        if exc is not None:
            self._logger.info("[%s]: %s => %s", tag, type(exc).__name__, msg)
        else:
            self._logger.info("[%s]: %s", tag, msg)

    def error(self, tag: str, msg: str, exc: Optional[BaseException] = None) -> None:
        if not self.enabled:
            return
        if exc is not None:
            self._logger.error(
                "[%s]: %s => %s", tag, type(exc).__name__, msg,
                exc_info=(type(exc), exc, exc.__traceback__),
            )
        else:
            self._logger.error("[%s]: %s", tag, msg)


def default_sink() -> LogSink:
    """Fresh sink whose flag follows LITEHELPER_TRACE_SQL."""
    return LogSink(enabled=trace_sql_enabled())


NULL_SINK = LogSink(enabled=False)
