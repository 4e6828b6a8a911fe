import json
import logging
import sys

import pytest

from util_logger import (
    ComponentType,
    JSONFormatter,
    LogContext,
    LoggerFactory,
    LogLevel,
    get_memory_stats,
    log_exceptions,
    log_memory_checkpoint,
)


def test_log_level_from_string():
    assert LogLevel.from_string("warning") is LogLevel.WARNING
    assert LogLevel.DEBUG.to_python_level() == logging.DEBUG


def test_log_context_drops_empty_fields():
    context = LogContext(store_path="planet.gol", engine="geodesk")
    assert context.to_dict() == {"store_path": "planet.gol", "engine": "geodesk"}


def test_json_formatter_includes_custom_dimensions():
    record = logging.LogRecord("golquery.test", logging.INFO, __file__, 10, "Opened %s", ("store",), None)
    record.custom_dimensions = {"engine": "memory"}
    payload = json.loads(JSONFormatter().format(record))
    assert payload["message"] == "Opened store"
    assert payload["level"] == "INFO"
    assert payload["customDimensions"] == {"engine": "memory"}


def test_json_formatter_includes_exception():
    try:
        raise ValueError("bad bbox")
    except ValueError:
        record = logging.LogRecord("golquery.test", logging.ERROR, __file__, 10, "failed", (), sys.exc_info())
    payload = json.loads(JSONFormatter().format(record))
    assert payload["exception"]["type"] == "ValueError"
    assert payload["exception"]["message"] == "bad bbox"


def test_logger_attaches_component_dimensions(caplog):
    logger = LoggerFactory.create_logger(
        ComponentType.ADAPTER, "TestAdapter", context=LogContext(engine="memory")
    )
    with caplog.at_level(logging.INFO, logger=logger.name):
        logger.info("hello", extra={"custom_dimensions": {"query": "w[highway]"}})
    record = caplog.records[-1]
    assert record.custom_dimensions == {
        "engine": "memory",
        "component_type": "adapter",
        "component_name": "TestAdapter",
        "query": "w[highway]",
    }


def test_recreating_logger_does_not_duplicate_records(caplog):
    LoggerFactory.create_logger(ComponentType.SERVICE, "Twice")
    logger = LoggerFactory.create_logger(ComponentType.SERVICE, "Twice")
    with caplog.at_level(logging.INFO, logger=logger.name):
        logger.info("once")
    assert [r.getMessage() for r in caplog.records] == ["once"]
    assert len(logger.handlers) == 1


def test_log_exceptions_logs_and_reraises(caplog):
    logger = LoggerFactory.create_logger(ComponentType.TRIGGER, "decorated")

    @log_exceptions(logger=logger)
    def explode():
        raise RuntimeError("boom")

    with caplog.at_level(logging.ERROR, logger=logger.name):
        with pytest.raises(RuntimeError):
            explode()
    record = caplog.records[-1]
    assert record.getMessage() == "Exception in explode"
    assert record.custom_dimensions["exception_type"] == "RuntimeError"


def test_memory_checkpoint_only_in_debug_mode(monkeypatch, caplog):
    from golquery.config import reset_golquery_config

    logger = LoggerFactory.create_logger(ComponentType.REPOSITORY, "Checkpoint")
    with caplog.at_level(logging.INFO, logger=logger.name):
        log_memory_checkpoint(logger, "disabled")
        assert caplog.records == []

        monkeypatch.setenv("GOLQUERY_DEBUG_MODE", "true")
        reset_golquery_config()
        log_memory_checkpoint(logger, "enabled", feature_count=3)

    record = caplog.records[-1]
    assert record.getMessage() == "MEMORY CHECKPOINT: enabled"
    assert record.custom_dimensions["feature_count"] == 3
    assert "process_rss_mb" in record.custom_dimensions


def test_records_point_at_the_calling_function(caplog):
    logger = LoggerFactory.create_logger(ComponentType.SERVICE, "Caller")
    with caplog.at_level(logging.INFO, logger=logger.name):
        logger.info("where am i")
    record = caplog.records[-1]
    assert record.funcName == "test_records_point_at_the_calling_function"
    assert record.module == "test_util_logger"


def test_handler_writes_to_stderr():
    logger = LoggerFactory.create_logger(ComponentType.TRIGGER, "Streams")
    assert logger.handlers[0].stream is sys.stderr


def test_memory_stats_survive_broken_configuration(monkeypatch, caplog):
    from golquery.config import reset_golquery_config

    monkeypatch.setenv("GOLQUERY_ENGINE", "postgis")
    reset_golquery_config()
    assert get_memory_stats() is None

    logger = LoggerFactory.create_logger(ComponentType.REPOSITORY, "ExplicitFlag")
    with caplog.at_level(logging.INFO, logger=logger.name):
        log_memory_checkpoint(logger, "explicit", debug_mode=True)
    assert caplog.records[-1].getMessage() == "MEMORY CHECKPOINT: explicit"
