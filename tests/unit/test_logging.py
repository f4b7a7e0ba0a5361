"""Tests for loguru sink configuration."""

from loguru import logger

from ingotpool.utils.logging import setup_logging


class TestSetupLogging:
    """Test setup_logging."""

    def test_writes_log_file(self, tmp_path):
        log_file = tmp_path / "engine.log"

        setup_logging("DEBUG", str(log_file))
        logger.debug("pool rolled over")
        logger.complete()

        assert "pool rolled over" in log_file.read_text(encoding="utf-8")

    def test_level_filters_file_sink(self, tmp_path):
        log_file = tmp_path / "engine.log"

        setup_logging("WARNING", str(log_file))
        logger.info("ignored message")
        logger.warning("kept message")

        content = log_file.read_text(encoding="utf-8")
        assert "ignored message" not in content
        assert "kept message" in content
