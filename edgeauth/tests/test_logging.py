import io
import json
import logging

import pytest

from edgeauth.logging_config import BearerRedactionFilter, configure_logging


@pytest.fixture
def root_handlers():
    root = logging.getLogger()
    saved, level = list(root.handlers), root.level
    yield
    root.handlers[:] = saved
    root.setLevel(level)


def test_log_lines_are_json_tagged_with_service(root_handlers, monkeypatch):
    stream = io.StringIO()
    monkeypatch.setattr("sys.stdout", stream)
    configure_logging("info")

    logging.getLogger("edgeauth.test").info("hello", extra={"token_operation": "issue"})

    line = json.loads(stream.getvalue().splitlines()[-1])
    assert line["message"] == "hello"
    assert line["service"] == "edgeauth"
    assert line["token_operation"] == "issue"


def test_bearer_credentials_are_redacted():
    record = logging.LogRecord(
        "edgeauth.test", logging.WARNING, __file__, 1,
        "bad header %s", ("Bearer aaa.bbb.ccc",), None,
    )

    assert BearerRedactionFilter().filter(record) is True
    assert record.getMessage() == "bad header Bearer <redacted>"
