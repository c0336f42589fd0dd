"""Unit tests for ContextualLogger and the log formatters."""

import json
import logging

import pytest

from airlock.core.logging import ContextualLogger, JSONFormatter, LocalFormatter, LoggerConfigurator


@pytest.fixture
def base_logger():
    return ContextualLogger(logging.getLogger("airlock.tests.logging"))


def _record(message="hello", dimensions=None) -> logging.LogRecord:
    record = logging.LogRecord("airlock.tests", logging.INFO, __file__, 1, message, None, None)
    if dimensions is not None:
        record.dimensions = dimensions
    return record


def test_with_context_merges_without_mutating(base_logger):
    child = base_logger.with_context(component="serializer").with_context(type_tag="users")

    assert child.dimensions == {"component": "serializer", "type_tag": "users"}
    assert base_logger.dimensions == {}


def test_with_prefix_keeps_dimensions(base_logger):
    child = base_logger.with_context(component="api").with_prefix("API: ")

    assert child.prefix == "API: "
    assert child.dimensions == {"component": "api"}


def test_process_prefixes_and_merges_extra(base_logger):
    adapter = base_logger.with_prefix("Loader: ").with_context(component="relation_loader")

    msg, kwargs = adapter.process("loaded", {"extra": {"type_tag": "users"}})

    assert msg == "Loader: loaded"
    assert kwargs["extra"] == {
        "dimensions": {"component": "relation_loader", "type_tag": "users"}
    }


def test_records_carry_dimensions(base_logger, caplog):
    adapter = base_logger.with_context(component="serializer")

    with caplog.at_level(logging.INFO, logger="airlock"):
        adapter.info("done", extra={"type_tag": "groups"})

    assert caplog.records[0].dimensions == {"component": "serializer", "type_tag": "groups"}


def test_local_formatter_appends_dimensions():
    line = LocalFormatter().format(_record(dimensions={"component": "api", "type_tag": "users"}))

    assert line.endswith("hello | component=api type_tag=users")


def test_local_formatter_without_dimensions():
    assert LocalFormatter().format(_record()).endswith("hello")


def test_json_formatter_flattens_dimensions():
    payload = json.loads(JSONFormatter().format(_record(dimensions={"component": "api"})))

    assert payload["message"] == "hello"
    assert payload["level"] == "INFO"
    assert payload["component"] == "api"


def test_configure_logger_names_the_logger():
    configured = LoggerConfigurator.configure_logger("airlock.tests", dimensions={"a": 1})

    assert configured.logger.name == "airlock.tests"
    assert configured.dimensions == {"a": 1}
