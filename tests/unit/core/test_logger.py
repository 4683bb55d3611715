"""
Unit tests for the context logger.
"""

import json
import logging

import pytest

from pharmacy_delivery.core.shared import configure_logging, get_use_case_logger
from pharmacy_delivery.core.shared.logger import ColoredFormatter, ConsoleFormatter, JSONFormatter


@pytest.mark.unit
def test_with_context_merges_fields(caplog):
    log = get_use_case_logger("apply_transition").with_context(order_id="o-1")

    with caplog.at_level(logging.INFO, logger="use_case.apply_transition"):
        log.info("Order o-1: pending -> confirmed", new_status="confirmed")

    record = caplog.records[-1]
    assert record.extra_data == {
        "component": "use_case",
        "use_case": "apply_transition",
        "order_id": "o-1",
        "new_status": "confirmed",
    }


@pytest.mark.unit
def test_with_context_does_not_mutate_parent():
    parent = get_use_case_logger("create_order")
    parent.with_context(order_id="o-1")

    assert "order_id" not in parent.context
    assert parent.name == "use_case.create_order"


@pytest.mark.unit
def test_json_formatter_includes_context():
    record = logging.LogRecord("use_case.x", logging.WARNING, __file__, 1, "Transition rejected", None, None)
    record.extra_data = {"order_id": "o-1", "error_code": "INVALID_TRANSITION"}

    payload = json.loads(JSONFormatter().format(record))

    assert payload["message"] == "Transition rejected"
    assert payload["level"] == "WARNING"
    assert payload["extra"] == {"order_id": "o-1", "error_code": "INVALID_TRANSITION"}


@pytest.mark.unit
def test_console_formatter_appends_order_context():
    record = logging.LogRecord("use_case.x", logging.INFO, __file__, 1, "Order o-1: pending -> confirmed", None, None)
    record.extra_data = {"component": "use_case", "order_id": "o-1", "action": "confirm", "courier_id": None}

    line = ConsoleFormatter().format(record)

    assert line.endswith("Order o-1: pending -> confirmed [order_id=o-1 action=confirm]")
    assert "component" not in line


@pytest.mark.unit
def test_console_formatter_without_context():
    record = logging.LogRecord("container", logging.INFO, __file__, 1, "ready", None, None)

    assert ConsoleFormatter().format(record).endswith("| container | ready")


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.mark.unit
@pytest.mark.parametrize(
    "format_type,formatter",
    [("json", JSONFormatter), ("colored", ColoredFormatter), ("plain", ConsoleFormatter)],
)
def test_configure_logging_selects_formatter(restore_root_logger, format_type, formatter):
    configure_logging(level="warning", format_type=format_type)

    assert restore_root_logger.level == logging.WARNING
    assert len(restore_root_logger.handlers) == 1
    assert type(restore_root_logger.handlers[0].formatter) is formatter


@pytest.mark.unit
def test_log_file_receives_json(restore_root_logger, tmp_path):
    log_file = tmp_path / "fulfillment.log"
    configure_logging(level="INFO", format_type="plain", log_file=str(log_file))

    get_use_case_logger("create_order").info("Order o-9 placed", order_id="o-9")
    for handler in restore_root_logger.handlers:
        handler.flush()

    payload = json.loads(log_file.read_text().splitlines()[-1])
    assert payload["message"] == "Order o-9 placed"
    assert payload["extra"]["order_id"] == "o-9"
