# tests/test_logging.py
import json
import logging
import sys

import pytest

from catalog_api.core.logging import JsonFormatter, resolve_level, setup_logging


def _record(**extra) -> logging.LogRecord:
    record = logging.makeLogRecord(
        {"name": "catalog_api.repositories", "levelname": "INFO", "levelno": logging.INFO, "msg": "Getting entity by id"}
    )
    record.__dict__.update(extra)
    return record


def test_json_formatter_nests_extra_fields():
    line = JsonFormatter(service="Catalog API").format(_record(entity_type="Product", entity_id=7))
    payload = json.loads(line)

    assert payload["message"] == "Getting entity by id"
    assert payload["logger"] == "catalog_api.repositories"
    assert payload["level"] == "INFO"
    assert payload["service"] == "Catalog API"
    assert payload["extra"] == {"entity_type": "Product", "entity_id": 7}
    assert "timestamp" in payload


def test_json_formatter_includes_exception_text():
    try:
        raise RuntimeError("database unreachable")
    except RuntimeError:
        record = logging.LogRecord("catalog_api.db", logging.ERROR, __file__, 1, "boom", None, True)
        record.exc_info = sys.exc_info()

    payload = json.loads(JsonFormatter().format(record))
    assert "database unreachable" in payload["exc_info"]
    assert "service" not in payload
    assert "extra" not in payload


@pytest.mark.parametrize("name, expected", [("debug", logging.DEBUG), ("WARNING", logging.WARNING), ("loud", logging.INFO), (None, logging.INFO)])
def test_resolve_level(name, expected):
    assert resolve_level(name) == expected


def test_setup_logging_configures_root_and_sql_loggers():
    root = logging.getLogger()
    saved_level, saved_handlers = root.level, list(root.handlers)
    try:
        setup_logging("debug")
        assert root.level == logging.DEBUG
        assert isinstance(root.handlers[0].formatter, JsonFormatter)
        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
