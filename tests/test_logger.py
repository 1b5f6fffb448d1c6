"""
Unit tests for logging setup.
"""

import importlib
import logging

from mcp_servers import logger as logger_module


class TestLogger:
    def test_child_loggers_share_package_handler(self):
        log = logger_module.get_logger("notion")

        assert log.name == "mcp_servers.notion"
        assert log.parent is logger_module.logger
        assert len(logger_module.logger.handlers) == 1

    def test_reload_does_not_duplicate_handlers(self):
        importlib.reload(logger_module)
        assert len(logging.getLogger("mcp_servers").handlers) == 1

    def test_httpx_request_lines_are_quiet_by_default(self, monkeypatch):
        monkeypatch.delenv("HTTP_DEBUG", raising=False)
        logging.getLogger("httpx").setLevel(logging.NOTSET)

        importlib.reload(logger_module)

        assert logging.getLogger("httpx").level == logging.WARNING

    def test_uvicorn_level_follows_log_level(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "warning")
        importlib.reload(logger_module)
        try:
            assert logger_module.uvicorn_log_level() == "warning"
        finally:
            monkeypatch.delenv("LOG_LEVEL")
            importlib.reload(logger_module)
