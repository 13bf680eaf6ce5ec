"""Tests for the structured log output."""

import json
import logging
import sys

from loam_iiif.logs import JsonFormatter, setup_logging


def make_record(msg="Fetched %s", args=("x",), **extra):
    record = logging.LogRecord("loam_iiif.test", logging.INFO, __file__, 1, msg, args, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJsonFormatter:
    """Tests for JsonFormatter."""

    def test_standard_fields(self):
        """Test the fields every line carries."""
        payload = json.loads(JsonFormatter().format(make_record()))
        assert payload["msg"] == "Fetched x"
        assert payload["level"] == "INFO"
        assert payload["logger"] == "loam_iiif.test"
        assert "ts" in payload
        assert "lineno" not in payload
        assert "args" not in payload

    def test_extra_fields(self):
        """Test that extra= attributes appear in the JSON line."""
        record = make_record(url="https://example.org", request_id=7)
        payload = json.loads(JsonFormatter().format(record))
        assert payload["url"] == "https://example.org"
        assert payload["request_id"] == 7

    def test_unserialisable_extra(self):
        """Test that values json cannot encode are written as their repr."""
        payload = json.loads(JsonFormatter().format(make_record(obj=object())))
        assert payload["obj"].startswith("<object")

    def test_exception(self):
        """Test that exception tracebacks are included."""
        try:
            raise ValueError("bad")
        except ValueError:
            record = logging.LogRecord("loam_iiif", logging.ERROR, __file__, 1, "boom", (), sys.exc_info())
        payload = json.loads(JsonFormatter().format(record))
        assert "ValueError: bad" in payload["exc_info"]


class TestSetupLogging:
    """Tests for setup_logging()."""

    def test_log_file(self, tmp_path):
        """Test that setup_logging can write to a file only."""
        path = tmp_path / "loam.log"
        logger = setup_logging("debug", log_file=path, stderr=False)
        logger.getChild("test").debug("hello", extra={"request_id": 3})
        for handler in logger.handlers:
            handler.flush()
            handler.close()
        line = json.loads(path.read_text(encoding="utf-8").splitlines()[0])
        assert line["msg"] == "hello"
        assert line["request_id"] == 3

    def test_silent_without_outputs(self):
        """Test that the TUI configuration installs a null handler."""
        logger = setup_logging("INFO", stderr=False)
        assert [type(h) for h in logger.handlers] == [logging.NullHandler]
        assert logger.propagate is False

    def test_unknown_level(self):
        """Test that unknown level names fall back to INFO."""
        logger = setup_logging("chatty", stderr=False)
        assert logger.level == logging.INFO
