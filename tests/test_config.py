"""
Tests for agri_advisor/config.py and agri_advisor/utils/logging.py.

What we test
------------
load_config():
  - The committed config/default.toml loads with the documented defaults.
  - An explicit TOML path is honoured; a missing one raises FileNotFoundError.
  - A sibling local.toml is deep-merged over the base file.
  - AGRI_ADVISOR_* environment variables override file values.
  - Invalid values fail validation.

DataConfig.path_for():
  - Relative data_dir resolves against root; absolute data_dir is kept.

configure_logging() / _JsonFormatter:
  - JSON lines carry ts / level / logger / msg and extra fields.
  - Plain-text lines use UTC timestamps; httpx request logging is raised
    to WARNING.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest
from pydantic import ValidationError

from agri_advisor.config import AppConfig, DataConfig, LoggingConfig, _deep_merge, load_config
from agri_advisor.utils.logging import _JsonFormatter, configure_logging

_ENV_VARS = (
    "AGRI_ADVISOR_DATA_DIR",
    "AGRI_ADVISOR_MARKET_API_KEY",
    "AGRI_ADVISOR_LOG_LEVEL",
    "AGRI_ADVISOR_DEBUG",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def _write_toml(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


# ── load_config ───────────────────────────────────────────────────────────────

class TestLoadConfig:
    def test_default_toml(self):
        config = load_config()
        assert isinstance(config, AppConfig)
        assert config.data.data_dir == "config/data"
        assert config.market.record_limit == 500
        assert config.market.default_sort == "price_desc"
        assert config.debug is False

    def test_explicit_path(self, tmp_path):
        path = _write_toml(tmp_path / "custom.toml", '[market]\nrecord_limit = 50\n')
        config = load_config(path)
        assert config.market.record_limit == 50
        assert config.market.timeout_seconds == 30.0

    def test_missing_path(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.toml")

    def test_local_toml_merged(self, tmp_path):
        path = _write_toml(
            tmp_path / "default.toml",
            '[logging]\nlevel = "INFO"\njson_format = false\n',
        )
        _write_toml(tmp_path / "local.toml", '[logging]\njson_format = true\n')
        config = load_config(path)
        assert config.logging.json_format is True
        assert config.logging.level == "INFO"

    def test_project_debug(self, tmp_path):
        path = _write_toml(tmp_path / "c.toml", "[project]\ndebug = true\n")
        assert load_config(path).debug is True

    def test_invalid_sort_rejected(self, tmp_path):
        path = _write_toml(tmp_path / "c.toml", '[market]\ndefault_sort = "random"\n')
        with pytest.raises(ValidationError):
            load_config(path)


class TestEnvOverrides:
    def test_api_key(self, tmp_path, monkeypatch):
        monkeypatch.setenv("AGRI_ADVISOR_MARKET_API_KEY", "secret")
        config = load_config(_write_toml(tmp_path / "c.toml", ""))
        assert config.market.api_key == "secret"

    def test_log_level_normalised(self, tmp_path, monkeypatch):
        monkeypatch.setenv("AGRI_ADVISOR_LOG_LEVEL", "debug")
        config = load_config(_write_toml(tmp_path / "c.toml", ""))
        assert config.logging.level == "DEBUG"

    def test_data_dir(self, tmp_path, monkeypatch):
        monkeypatch.setenv("AGRI_ADVISOR_DATA_DIR", "/srv/agri")
        config = load_config(_write_toml(tmp_path / "c.toml", '[data]\ndata_dir = "x"\n'))
        assert config.data.data_dir == "/srv/agri"

    @pytest.mark.parametrize("value, expected", [("1", True), ("true", True), ("no", False)])
    def test_debug(self, tmp_path, monkeypatch, value, expected):
        monkeypatch.setenv("AGRI_ADVISOR_DEBUG", value)
        config = load_config(_write_toml(tmp_path / "c.toml", ""))
        assert config.debug is expected


class TestHelpers:
    def test_deep_merge(self):
        merged = _deep_merge({"a": {"x": 1, "y": 2}, "b": 1}, {"a": {"y": 3}, "c": 4})
        assert merged == {"a": {"x": 1, "y": 3}, "b": 1, "c": 4}

    def test_path_for_relative(self, tmp_path):
        cfg = DataConfig(data_dir="config/data")
        assert cfg.path_for("a.json", tmp_path) == tmp_path / "config" / "data" / "a.json"

    def test_path_for_absolute(self, tmp_path):
        cfg = DataConfig(data_dir=str(tmp_path))
        assert cfg.path_for("a.json", Path("/elsewhere")) == tmp_path / "a.json"

    def test_config_is_frozen(self):
        config = AppConfig()
        with pytest.raises(ValidationError):
            config.debug = True  # type: ignore[misc]

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            LoggingConfig(level="LOUD")


# ── Logging ───────────────────────────────────────────────────────────────────

class TestJsonLogging:
    def test_json_formatter_fields(self):
        record = logging.LogRecord(
            "agri_advisor.test", logging.INFO, __file__, 1, "hello %s", ("world",), None
        )
        record.district = "Ludhiana"
        payload = json.loads(_JsonFormatter().format(record))
        assert payload["level"] == "INFO"
        assert payload["logger"] == "agri_advisor.test"
        assert payload["msg"] == "hello world"
        assert payload["district"] == "Ludhiana"
        assert payload["ts"].endswith("Z")

    def test_configure_logging_writes_file(self, tmp_path):
        log_file = tmp_path / "logs" / "agri.log"
        configure_logging(LoggingConfig(level="INFO", log_file=str(log_file), json_format=True))
        logging.getLogger("agri_advisor.test").info("written")
        for handler in logging.getLogger().handlers:
            handler.flush()
        line = log_file.read_text(encoding="utf-8").strip().splitlines()[-1]
        assert json.loads(line)["msg"] == "written"
        for handler in list(logging.getLogger().handlers):
            handler.close()
            logging.getLogger().removeHandler(handler)

    def test_text_format_and_quiet_http_loggers(self, tmp_path):
        log_file = tmp_path / "agri.log"
        configure_logging(LoggingConfig(level="DEBUG", log_file=str(log_file)))
        logging.getLogger("agri_advisor.test").debug("plain")
        logging.getLogger("httpx").info("GET https://api.data.gov.in/...")
        for handler in logging.getLogger().handlers:
            handler.flush()
        lines = log_file.read_text(encoding="utf-8").splitlines()
        assert len(lines) == 1
        assert lines[0].endswith("DEBUG   agri_advisor.test | plain")
        assert lines[0][:20].endswith("Z")
        assert logging.getLogger().level == logging.DEBUG
        for handler in list(logging.getLogger().handlers):
            handler.close()
            logging.getLogger().removeHandler(handler)
