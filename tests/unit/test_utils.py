"""Test utils module functionality."""

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest

from copa.config import Settings
from copa.utils.error_handler import handle_errors, safe_operation, safe_with_default
from copa.utils.logger import get_logger, setup_logging
from copa.utils.mixins import LoggerMixin


@pytest.fixture(autouse=True)
def _reset_logging_state() -> Iterator[None]:
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()
    try:
        yield
    finally:
        for handler in list(root_logger.handlers):
            root_logger.removeHandler(handler)
            handler.close()


class TestLogger:
    """Test logging functionality."""

    def test_setup_logging(self):
        """Test logging setup doesn't raise errors."""
        setup_logging()
        assert logging.getLogger().level == logging.WARNING

    def test_setup_logging_writes_plain_message_to_file(self, tmp_path: Path):
        """Test log file output uses raw message format."""
        log_file = tmp_path / "logs" / "copa.log"
        setup_logging(Settings(log_level="INFO"), log_file=log_file)

        test_message = "logging format check"
        logging.getLogger("format-check").info(test_message)

        for handler in logging.getLogger().handlers:
            handler.flush()

        lines = log_file.read_text(encoding="utf-8").splitlines()
        assert lines
        assert lines[-1] == test_message

    def test_get_logger_returns_logger(self):
        """Test get_logger returns a logger instance."""
        logger = get_logger("test")
        assert hasattr(logger, "info")
        assert hasattr(logger, "warning")


class TestLoggerMixin:
    """Test LoggerMixin functionality."""

    def test_logger_mixin_provides_logger(self):
        """Test LoggerMixin provides logger property."""

        class TestClass(LoggerMixin):
            pass

        logger = TestClass().logger

        assert hasattr(logger, "info")
        assert hasattr(logger, "debug")


class TestErrorHandler:
    """Test error handling decorators."""

    def test_sync_default(self):
        @safe_with_default("explode", default_value=[])
        def explode() -> list[str]:
            raise OSError("boom")

        assert explode() == []

    def test_passes_through_result(self):
        @handle_errors("add", default_return=0)
        def add(a: int, b: int) -> int:
            return a + b

        assert add(1, 2) == 3

    @pytest.mark.asyncio
    async def test_async_none(self):
        @safe_operation("explode async")
        async def explode() -> str:
            raise RuntimeError("boom")

        assert await explode() is None
