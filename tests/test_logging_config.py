"""Tests for structured logging configuration."""

import logging
import unittest

from bestfit_pkg.logging_config import StructuredFormatter, get_logger, setup_logging


class TestLoggingConfig(unittest.TestCase):
    def tearDown(self):
        logger = logging.getLogger("bestfit")
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()

    def test_get_logger_namespace(self):
        self.assertEqual(get_logger("parser").name, "bestfit.parser")

    def test_setup_logging_level(self):
        logger = setup_logging("DEBUG")
        self.assertEqual(logger.name, "bestfit")
        self.assertEqual(logger.level, logging.DEBUG)
        self.assertEqual(len(logger.handlers), 1)

    def test_setup_logging_replaces_handlers(self):
        setup_logging("INFO")
        logger = setup_logging("INFO")
        self.assertEqual(len(logger.handlers), 1)

    def test_unknown_level_falls_back_to_warning(self):
        self.assertEqual(setup_logging("LOUD").level, logging.WARNING)

    def test_log_file(self):
        import os
        import tempfile

        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "bestfit.log")
            logger = setup_logging("INFO", log_file=path)
            self.assertEqual(len(logger.handlers), 2)
            get_logger("test").info("fitted %d points", 3)
            self.tearDown()
            with open(path) as f:
                self.assertIn("[INFO] bestfit.test: fitted 3 points", f.read())

    def test_structured_format(self):
        record = logging.LogRecord(
            "bestfit.optimizer", logging.WARNING, __file__, 1, "score=%g", (1.5,), None
        )
        line = StructuredFormatter().format(record)
        self.assertTrue(line.endswith("[WARNING] bestfit.optimizer: score=1.5"))


if __name__ == "__main__":
    unittest.main()
