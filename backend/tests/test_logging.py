import logging
import unittest

from app.core.logging import HANDLER_NAME, configure_logging


class TestConfigureLogging(unittest.TestCase):
    def test_repeated_setup_keeps_one_named_handler(self) -> None:
        logger = configure_logging("INFO")
        configure_logging("DEBUG")

        named = [h for h in logger.handlers if h.get_name() == HANDLER_NAME]
        self.assertEqual(len(named), 1)
        self.assertEqual(logger.level, logging.DEBUG)

    def test_unknown_level_falls_back_to_info(self) -> None:
        self.assertEqual(configure_logging("chatty").level, logging.INFO)


if __name__ == "__main__":
    unittest.main()
