"""
Tests for pyslopes.logger
"""

import logging
import os

from pyslopes.logger import setup_logger


class TestSetupLogger:

    def test_file_and_console_handlers(self, tmp_path, restore_logging):
        log_dir = tmp_path / "logs"
        root = setup_logger(log_dir=str(log_dir), log_name="unit")
        assert root is logging.getLogger()
        assert len(root.handlers) == 2
        files = os.listdir(log_dir)
        assert len(files) == 1
        assert files[0].startswith("unit_") and files[0].endswith(".log")

    def test_records_reach_the_file(self, tmp_path, restore_logging):
        setup_logger(log_dir=str(tmp_path), log_name="unit", level="DEBUG")
        logging.getLogger("pyslopes.test").debug("hello from the test")
        for handler in logging.getLogger().handlers:
            handler.flush()
        (log_file,) = [name for name in os.listdir(tmp_path) if name.endswith(".log")]
        assert "hello from the test" in (tmp_path / log_file).read_text()

    def test_console_only(self, restore_logging):
        root = setup_logger(log_dir=None)
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0], logging.StreamHandler)

    def test_quiet_console(self, restore_logging):
        root = setup_logger(log_dir=None, quiet=True)
        assert root.handlers[0].level == logging.WARNING

    def test_repeated_setup_does_not_duplicate(self, tmp_path, restore_logging):
        setup_logger(log_dir=str(tmp_path))
        root = setup_logger(log_dir=str(tmp_path))
        assert len(root.handlers) == 2

    def test_level_name(self, restore_logging):
        assert setup_logger(log_dir=None, level="debug").level == logging.DEBUG
