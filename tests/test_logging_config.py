"""Tests for logging configuration and distribution logging."""

import json
import logging
from decimal import Decimal
from fractions import Fraction

import pytest

from config.settings import Settings
from models.estate import ReconciliationStatus
from services.logging_config import (
    ENGINE_LOGGERS,
    ContextLogger,
    DistributionLogger,
    JsonFormatter,
    ReadableFormatter,
    computation_id_var,
    configure_logging,
    configure_logging_from_settings,
    get_logger,
    render_value,
)


@pytest.fixture
def restore_engine_loggers():
    saved = {}
    for name in ENGINE_LOGGERS:
        engine_logger = logging.getLogger(name)
        saved[name] = (list(engine_logger.handlers), engine_logger.level, engine_logger.propagate)
    yield logging.getLogger("calculator")
    for name, (handlers, level, propagate) in saved.items():
        engine_logger = logging.getLogger(name)
        for handler in engine_logger.handlers:
            if handler not in handlers:
                handler.close()
        engine_logger.handlers[:] = handlers
        engine_logger.setLevel(level)
        engine_logger.propagate = propagate


def _record(message="hello", **extra_data):
    record = logging.LogRecord("faraid.test", logging.INFO, __file__, 10, message, None, None)
    if extra_data:
        record.extra_data = extra_data
    return record


class TestRenderValue:
    """Tests for log value rendering."""

    def test_fraction_stays_exact(self):
        assert render_value(Fraction(1, 3)) == "1/3"

    def test_enum_uses_value(self):
        assert render_value(ReconciliationStatus.AWL) == "Awl"

    def test_decimal_as_string(self):
        assert render_value(Decimal("70000.00")) == "70000.00"

    def test_nested(self):
        rendered = render_value({"shares": {"son": Fraction(7, 16)}, "path": [Fraction(1, 2), 3]})
        assert rendered == {"shares": {"son": "7/16"}, "path": ["1/2", 3]}


class TestFormatters:
    """Tests for log formatters."""

    def test_json_formatter(self):
        data = json.loads(JsonFormatter().format(_record(step="exclusion")))
        assert data["message"] == "hello"
        assert data["level"] == "INFO"
        assert data["step"] == "exclusion"

    def test_json_formatter_includes_computation_id(self):
        token = computation_id_var.set("abc123")
        try:
            data = json.loads(JsonFormatter().format(_record()))
        finally:
            computation_id_var.reset(token)
        assert data["computation_id"] == "abc123"

    def test_json_formatter_serializes_fractions(self):
        data = json.loads(JsonFormatter().format(_record(share=Fraction(7, 16))))
        assert data["share"] == "7/16"

    def test_readable_formatter(self):
        line = ReadableFormatter().format(_record(total="1"))
        assert "[faraid.test] hello" in line
        assert "total=1" in line

    def test_readable_formatter_tags_computation(self):
        line = ReadableFormatter().format(_record(computation_id="abc123", total=Fraction(3, 4)))
        assert "(abc123) hello" in line
        assert "total=3/4" in line
        assert "computation_id=" not in line

    def test_readable_formatter_without_computation(self):
        line = ReadableFormatter().format(_record())
        assert "[faraid.test] hello" in line
        assert "(" not in line


class TestConfigureLogging:
    """Tests for engine logger configuration."""

    def test_json_output(self, restore_engine_loggers):
        configure_logging(level="DEBUG", json_output=True)
        assert restore_engine_loggers.level == logging.DEBUG
        assert isinstance(restore_engine_loggers.handlers[-1].formatter, JsonFormatter)
        assert restore_engine_loggers.propagate is False

    def test_all_engine_loggers_configured(self, restore_engine_loggers):
        configure_logging(level="INFO")
        for name in ENGINE_LOGGERS:
            assert any(getattr(h, "faraid_engine", False) for h in logging.getLogger(name).handlers)

    def test_root_logger_untouched(self, restore_engine_loggers):
        root = logging.getLogger()
        handlers, level = list(root.handlers), root.level
        configure_logging(level="DEBUG", json_output=True)
        assert root.handlers == handlers
        assert root.level == level

    def test_repeat_call_replaces_handlers(self, restore_engine_loggers):
        configure_logging(level="INFO")
        configure_logging(level="INFO")
        engine_handlers = [
            h for h in restore_engine_loggers.handlers if getattr(h, "faraid_engine", False)
        ]
        assert len(engine_handlers) == 1

    def test_log_file(self, restore_engine_loggers, tmp_path):
        log_file = tmp_path / "logs" / "engine.log"
        configure_logging(level="INFO", log_file=log_file)
        logging.getLogger("calculator.test").info(
            "to file", extra={"extra_data": {"share": Fraction(1, 6)}}
        )
        for handler in restore_engine_loggers.handlers:
            handler.flush()
        data = json.loads(log_file.read_text().strip().splitlines()[-1])
        assert data["message"] == "to file"
        assert data["share"] == "1/6"

    def test_from_settings(self, restore_engine_loggers):
        configure_logging_from_settings(Settings(_env_file=None, log_level="warning", json_logs=False))
        assert restore_engine_loggers.level == logging.WARNING
        assert isinstance(restore_engine_loggers.handlers[-1].formatter, ReadableFormatter)


class TestDistributionLogger:
    """Tests for per-distribution logging."""

    def test_get_logger_returns_context_logger(self):
        assert isinstance(get_logger("faraid.test", component="x"), ContextLogger)

    def test_context_logger_merges_bound_fields(self, caplog):
        with caplog.at_level(logging.INFO, logger="calculator.test"):
            get_logger("calculator.test", computation_id="c9").info(
                "merged", extra={"extra_data": {"step": "residue"}}
            )
        assert caplog.records[-1].extra_data == {"step": "residue", "computation_id": "c9"}

    def test_steps_and_result(self, caplog):
        dist_logger = DistributionLogger("c1")
        with caplog.at_level(logging.DEBUG, logger="distribution"):
            dist_logger.start_distribution("1000", 2)
            start = dist_logger.log_step("exclusion", survivors=["son"])
            dist_logger.complete_step("exclusion", start, total="1")
            dist_logger.log_exclusions({"full_brother": "EXCLUDED: blocked by son"})
            dist_logger.log_result(ReconciliationStatus.BALANCED, Fraction(1), {"son": Fraction(1)})

        messages = [record.getMessage() for record in caplog.records]
        assert messages == [
            "Starting estate distribution",
            "Distribution step: exclusion",
            "Completed step: exclusion",
            "Heirs excluded",
            "Distribution complete",
        ]
        result = caplog.records[-1].extra_data
        assert result["reconciliation_status"] == ReconciliationStatus.BALANCED
        assert "exclusion" in result["step_times"]
        assert result["computation_id"] == "c1"

        data = json.loads(JsonFormatter().format(caplog.records[-1]))
        assert data["reconciliation_status"] == "Balanced"
        assert data["shares"] == {"son": "1"}
        assert data["computation_id"] == "c1"

    def test_no_exclusions_not_logged(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="distribution"):
            DistributionLogger().log_exclusions({})
        assert caplog.records == []

    def test_pipeline_logs_exact_result(self, pipeline, caplog):
        with caplog.at_level(logging.INFO, logger="distribution"):
            pipeline.calculate({
                "net_estate_value": "160000",
                "heirs": [{"name": "wife"}, {"name": "daughter", "count": 2}, {"name": "son"}],
            })

        done = [r for r in caplog.records if r.getMessage() == "Distribution complete"]
        assert len(done) == 1
        data = json.loads(JsonFormatter().format(done[0]))
        assert data["total_fraction"] == "1"
        assert data["shares"]["son"] == "7/16"

    def test_pipeline_logs_aborted_distribution(self, pipeline, caplog):
        from calculator.errors import NoHeirsSuppliedError

        with caplog.at_level(logging.WARNING, logger="distribution"):
            with pytest.raises(NoHeirsSuppliedError):
                pipeline.calculate({"net_estate_value": "10", "heirs": []})

        aborted = [r for r in caplog.records if r.getMessage().startswith("Distribution aborted")]
        assert len(aborted) == 1
        assert aborted[0].extra_data["error_code"] == "NO_HEIRS_SUPPLIED"
        assert computation_id_var.get() is None
