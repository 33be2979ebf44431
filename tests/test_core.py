from __future__ import annotations

import logging

import pytest

from commlink.core.config import Settings, get_settings
from commlink.core.errors import (
    CalculationError,
    ErrorCode,
    InvalidParameterError,
    require_in_range,
)
from commlink.core.logging import JsonFormatter, RequestIdFilter, build_logging_config


def test_require_in_range():
    assert require_in_range("x", 5.0, 0.0, 10.0) == 5.0
    with pytest.raises(InvalidParameterError) as exc:
        require_in_range("x", 11.0, 0.0, 10.0)
    assert exc.value.code == ErrorCode.INVALID_PARAMETER
    # still usable where callers expect ValueError
    assert isinstance(exc.value, ValueError)


def test_calculation_error_code():
    assert CalculationError("diverged").code == ErrorCode.CALCULATION_FAILED
    assert CalculationError("x", ErrorCode.NOT_INITIALIZED).code == ErrorCode.NOT_INITIALIZED


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("PACKET_LENGTH_BITS", "1024")
    monkeypatch.setenv("DEFAULT_SCENARIO", "jammed")
    s = Settings()
    assert s.PACKET_LENGTH_BITS == 1024
    assert s.DEFAULT_SCENARIO == "jammed"
    assert get_settings().API_V1_STR == "/api/v1"


def test_logging_config_without_files():
    config = build_logging_config("INFO", "%(message)s")
    assert list(config["handlers"]) == ["console"]
    assert config["root"]["level"] == "INFO"
    assert config["root"]["handlers"] == ["console"]


def test_logging_config_with_files(tmp_path):
    config = build_logging_config("DEBUG", "%(message)s", str(tmp_path / "logs"))
    assert set(config["handlers"]) == {"console", "file", "error_file"}
    assert (tmp_path / "logs").is_dir()


def test_json_formatter_includes_extras():
    formatter = JsonFormatter("%(message)s", json_output=True)
    record = logging.LogRecord("commlink.test", logging.INFO, __file__, 1, "hello", None, None)
    record.status_code = 200
    RequestIdFilter().filter(record)
    out = formatter.format(record)
    assert '"message": "hello"' in out
    assert '"request_id": "system"' in out
    assert '"status_code": 200' in out


def test_text_formatter_outside_production():
    formatter = JsonFormatter("%(levelname)s %(message)s", json_output=False)
    record = logging.LogRecord("commlink.test", logging.WARNING, __file__, 1, "careful", None, None)
    assert formatter.format(record) == "WARNING careful"
