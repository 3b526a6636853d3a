import json
import logging
import sys
import tempfile
import unittest
from pathlib import Path
from unittest import mock

SRC_DIR = Path(__file__).resolve().parents[1] / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from utils import NoiseFilter, format_duration, generate_id, load_json, save_json, setup_logging


class FormatDurationTests(unittest.TestCase):
    def test_hours_and_minutes(self) -> None:
        self.assertEqual(format_duration("PT2H30M"), "2h 30m")
        self.assertEqual(format_duration("PT150M"), "150m")
        self.assertEqual(format_duration("PT1H"), "1h")

    def test_seconds_only_without_hours_or_minutes(self) -> None:
        self.assertEqual(format_duration("PT45S"), "45s")
        self.assertEqual(format_duration("PT1M30S"), "1m")

    def test_zero_and_empty(self) -> None:
        self.assertEqual(format_duration("PT0M"), "0m")
        self.assertEqual(format_duration(""), "")
        self.assertEqual(format_duration(None), "")

    def test_unparseable_is_returned_unchanged(self) -> None:
        self.assertEqual(format_duration("about an hour"), "about an hour")
        self.assertEqual(format_duration("P1DT2H"), "P1DT2H")


class JsonFileTests(unittest.TestCase):
    def test_save_and_load(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / "nested" / "data.json"
            self.assertTrue(save_json({"title": "Köttbullar"}, str(path)))
            self.assertIn("Köttbullar", path.read_text(encoding="utf-8"))
            self.assertEqual(load_json(str(path)), {"title": "Köttbullar"})

    def test_load_missing_broken_or_non_object(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / "data.json"
            self.assertEqual(load_json(str(path)), {})
            path.write_text("{oops", encoding="utf-8")
            self.assertEqual(load_json(str(path)), {})
            path.write_text(json.dumps([1, 2]), encoding="utf-8")
            self.assertEqual(load_json(str(path)), {})

    def test_save_failure_returns_false(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            self.assertFalse(save_json({}, temp_dir))


class LoggingTests(unittest.TestCase):
    def test_noise_filter(self) -> None:
        noise_filter = NoiseFilter(["HTTP Request:"])
        noisy = logging.LogRecord("x", logging.INFO, __file__, 1, "HTTP Request: GET /", None, None)
        useful = logging.LogRecord("x", logging.INFO, __file__, 1, "Saved recipe", None, None)
        self.assertFalse(noise_filter.filter(noisy))
        self.assertTrue(noise_filter.filter(useful))

    def test_setup_logging_writes_to_file(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            log_file = Path(temp_dir) / "logs" / "app.log"
            try:
                with mock.patch.dict("os.environ", {"LOG_LEVEL": "DEBUG"}):
                    setup_logging(str(log_file))
                root = logging.getLogger()
                self.assertEqual(root.level, logging.DEBUG)
                self.assertTrue(all(any(isinstance(f, NoiseFilter) for f in h.filters) for h in root.handlers))
                logging.info("hello from the test")
                for handler in root.handlers:
                    handler.flush()
                self.assertIn("hello from the test", log_file.read_text(encoding="utf-8"))
            finally:
                for handler in list(logging.getLogger().handlers):
                    handler.close()
                    logging.getLogger().removeHandler(handler)


class GenerateIdTests(unittest.TestCase):
    def test_ids_are_unique(self) -> None:
        self.assertNotEqual(generate_id(), generate_id())


if __name__ == "__main__":
    unittest.main()
