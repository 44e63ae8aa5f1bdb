"""
Test the structlog setup: JSON records on the root handlers and gzip rotation.
"""
import gzip
import io
import json
import logging

import pytest

from backend.app.logging_config import _compress_rotated_file, configure_logging, get_logger


def test_records_are_json_with_level_and_logger():
    configure_logging("INFO", enable_file_logging=False)
    buffer = io.StringIO()
    handler = logging.StreamHandler(buffer)
    logging.getLogger().addHandler(handler)
    try:
        get_logger("kidledger.test").warning("Posting rejected", account_id="a1")
        get_logger("kidledger.test").debug("not shown")
    finally:
        logging.getLogger().removeHandler(handler)

    lines = buffer.getvalue().splitlines()
    assert len(lines) == 1
    record = json.loads(lines[0])
    assert record["event"] == "Posting rejected"
    assert record["level"] == "warning"
    assert record["logger"] == "kidledger.test"
    assert record["account_id"] == "a1"
    assert "timestamp" in record


def test_file_logging_disabled_uses_console_only():
    configure_logging("DEBUG", enable_file_logging=False)
    root = logging.getLogger()
    assert root.level == logging.DEBUG
    assert len(root.handlers) == 1
    configure_logging("INFO", enable_file_logging=False)


def test_rotated_file_is_gzipped(tmp_path):
    source = tmp_path / "kidledger.log.2026-10-12"
    source.write_text("line one\n", encoding="utf-8")
    dest = tmp_path / "kidledger.log.2026-10-12.gz"

    _compress_rotated_file(str(source), str(dest))

    assert not source.exists()
    with gzip.open(dest, "rt", encoding="utf-8") as f:
        assert f.read() == "line one\n"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
