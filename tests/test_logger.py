import json
import logging

from app.core.logger import PLAIN_FORMAT, JsonFormatter, ReceiptContextFilter


def _record(**extra):
    record = logging.LogRecord("app.services.receipt_pipeline", logging.WARNING, __file__, 1, "failed %s", ("x",), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_promotes_receipt_fields():
    record = _record(transaction_id="T1", pipeline_state="Verified", failure_kind="RenderFailure", attempt=2)

    payload = json.loads(JsonFormatter().format(record))

    assert payload["message"] == "failed x"
    assert payload["transaction_id"] == "T1"
    assert payload["pipeline_state"] == "Verified"
    assert payload["failure_kind"] == "RenderFailure"
    assert payload["extra"] == {"attempt": 2}


def test_plain_format_without_context_uses_placeholder():
    record = _record()
    assert ReceiptContextFilter().filter(record) is True

    line = logging.Formatter(PLAIN_FORMAT).format(record)

    assert "tx=- | failed x" in line
    assert "transaction_id" not in json.loads(JsonFormatter().format(record))
