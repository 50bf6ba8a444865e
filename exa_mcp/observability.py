"""Per-request logging for tool calls.

Each tool invocation gets a `RequestLogger` bound to a request id of the form
``<tool>-<epoch ms>-<5 hex chars>`` so interleaved concurrent calls can be
told apart in the log stream.
"""

from __future__ import annotations

import logging
import time
import uuid
from typing import Optional

logger = logging.getLogger("exa_mcp.requests")


def new_request_id(tool_name: str) -> str:
    return f"{tool_name}-{int(time.time() * 1000)}-{uuid.uuid4().hex[:5]}"


class RequestLogger:
    """Start/log/error/complete lifecycle logging for one tool call."""

    def __init__(self, tool_name: str, request_id: Optional[str] = None, log: Optional[logging.Logger] = None):
        self.tool_name = tool_name
        self.request_id = request_id or new_request_id(tool_name)
        self._log = log or logger
        self._started = time.monotonic()

    @property
    def elapsed_ms(self) -> int:
        return int((time.monotonic() - self._started) * 1000)

    def start(self, subject: str) -> None:
        self._started = time.monotonic()
        self._log.info("[%s] Starting %s: %s", self.request_id, self.tool_name, subject)

    def log(self, message: str) -> None:
        self._log.info("[%s] %s", self.request_id, message)

    def debug(self, message: str) -> None:
        self._log.debug("[%s] %s", self.request_id, message)

    def error(self, exc: BaseException) -> None:
        self._log.error("[%s] Error in %s: %s", self.request_id, self.tool_name, exc)

    def complete(self) -> None:
        self._log.info("[%s] Completed %s in %dms", self.request_id, self.tool_name, self.elapsed_ms)
