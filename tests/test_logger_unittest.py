import io
import json
import os
import unittest
from unittest import mock
import sys
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import structlog

from logger import get_logger, setup_logging


class LoggerTests(unittest.TestCase):
    def tearDown(self):
        structlog.reset_defaults()

    def test_json_events_go_to_stderr(self):
        with mock.patch('sys.stdout', new_callable=io.StringIO) as out, \
                mock.patch('sys.stderr', new_callable=io.StringIO) as err:
            setup_logging("INFO")
            get_logger("tests").info("sale_logged", total=27.0)

        self.assertEqual(out.getvalue(), "")
        event = json.loads(err.getvalue().strip().splitlines()[-1])
        self.assertEqual(event["event"], "sale_logged")
        self.assertEqual(event["total"], 27.0)
        self.assertEqual(event["level"], "info")

    def test_level_filters_events(self):
        with mock.patch('sys.stderr', new_callable=io.StringIO) as err:
            setup_logging("WARNING")
            get_logger("tests").info("quiet")
            get_logger("tests").warning("loud")
        self.assertNotIn("quiet", err.getvalue())
        self.assertIn("loud", err.getvalue())


if __name__ == '__main__':
    unittest.main()
