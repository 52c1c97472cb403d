"""
Unit tests for the log module.
"""

import logging
import sys

import pytest

from rdp_launcher.utils.log import LOGGER_NAME, configure_logging


class TestConfigureLogging:
    """Tests for configure_logging()."""

    def test_file_output(self, tmp_path):
        """Test that records are appended to the log file in text format."""
        logfile = tmp_path / "output.log"
        logger = configure_logging(out="file", logfile=logfile, level="info")

        logging.getLogger(f"{LOGGER_NAME}.test").info("hello")
        logger.handlers[0].flush()

        assert logfile.read_text(encoding="utf-8") == "level=INFO name=rdp_launcher.test msg=hello\n"

    def test_file_output_appends(self, tmp_path):
        """Test that an existing log file is kept."""
        logfile = tmp_path / "output.log"
        logfile.write_text("previous run\n", encoding="utf-8")

        logger = configure_logging(out="file", logfile=logfile)
        logger.info("next run")
        logger.handlers[0].flush()

        assert logfile.read_text(encoding="utf-8").startswith("previous run\n")

    @pytest.mark.parametrize("out, stream_name", [("stdout", "stdout"), ("stderr", "stderr")])
    def test_stream_output(self, out, stream_name):
        """Test that stdout and stderr use a stream handler on that stream."""
        logger = configure_logging(out=out)

        (handler,) = logger.handlers
        assert isinstance(handler, logging.StreamHandler)
        assert handler.stream is getattr(sys, stream_name)

    @pytest.mark.parametrize(
        "level, expected",
        [
            ("debug", logging.DEBUG),
            ("info", logging.INFO),
            ("warn", logging.WARNING),
            ("error", logging.ERROR),
            ("fatal", logging.CRITICAL),
            ("panic", logging.CRITICAL),
        ],
    )
    def test_levels(self, level, expected):
        """Test the level names accepted on the command line."""
        logger = configure_logging(out="stderr", level=level)

        assert logger.level == expected

    def test_debug_filtered_at_info(self, tmp_path):
        """Test that debug records are dropped at the default level."""
        logfile = tmp_path / "output.log"
        logger = configure_logging(logfile=logfile)

        logger.debug("hidden")
        logger.handlers[0].flush()

        assert "hidden" not in logfile.read_text(encoding="utf-8")

    def test_replaces_previous_handler(self, tmp_path):
        """Test that calling twice leaves a single handler."""
        configure_logging(out="stderr")
        logger = configure_logging(out="file", logfile=tmp_path / "output.log")

        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0], logging.FileHandler)

    def test_unknown_level_raises(self):
        """Test that an unknown level is rejected."""
        with pytest.raises(ValueError, match="Unknown log level"):
            configure_logging(out="stderr", level="verbose")

    def test_unknown_output_raises(self):
        """Test that an unknown output is rejected."""
        with pytest.raises(ValueError, match="Unknown log output"):
            configure_logging(out="syslog")

    def test_unopenable_logfile_raises(self, tmp_path):
        """Test that a log file in a missing directory raises OSError."""
        with pytest.raises(OSError):
            configure_logging(out="file", logfile=tmp_path / "missing" / "output.log")
