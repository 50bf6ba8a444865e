"""Unit tests for exa_mcp.observability: per-request logging."""

import logging
import re

from exa_mcp.observability import RequestLogger, new_request_id


class TestRequestId:
    def test_format(self):
        assert re.fullmatch(r"web_search_exa-\d{13}-[0-9a-f]{5}", new_request_id("web_search_exa"))

    def test_unique(self):
        assert new_request_id("t") != new_request_id("t")


class TestRequestLogger:
    def test_lifecycle_messages(self, caplog):
        request_log = RequestLogger("crawling_exa", request_id="req-1")
        with caplog.at_level(logging.DEBUG, logger="exa_mcp.requests"):
            request_log.start("https://example.com")
            request_log.log("Sending request")
            request_log.debug("details")
            request_log.error(RuntimeError("boom"))
            request_log.complete()

        messages = [r.getMessage() for r in caplog.records]
        assert messages[0] == "[req-1] Starting crawling_exa: https://example.com"
        assert messages[1] == "[req-1] Sending request"
        assert messages[2] == "[req-1] details"
        assert messages[3] == "[req-1] Error in crawling_exa: boom"
        assert re.fullmatch(r"\[req-1\] Completed crawling_exa in \d+ms", messages[4])
        assert caplog.records[3].levelno == logging.ERROR

    def test_generates_request_id(self):
        assert RequestLogger("tool").request_id.startswith("tool-")

    def test_elapsed_is_non_negative(self):
        assert RequestLogger("tool").elapsed_ms >= 0
