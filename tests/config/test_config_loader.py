"""
Engine configuration: YAML parsing, validation and environment overrides.
"""

from decimal import Decimal

import pytest
import yaml

from workforce_config import (
    DEFAULT_CONFIG_PATH,
    EngineConfig,
    get_active_config,
    load_config,
    parse_engine_config,
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    monkeypatch.delenv("WORKFORCE_CONFIG", raising=False)
    monkeypatch.delenv("WORKFORCE_DATABASE_URL", raising=False)


def _write(path, data):
    path.write_text(yaml.safe_dump(data))
    return path


class TestDefaults:

    def test_packaged_defaults_load(self):
        config = load_config(DEFAULT_CONFIG_PATH)
        assert isinstance(config, EngineConfig)
        assert config.database.url == "sqlite:///workforce.db"
        assert config.batch.max_workers == 4
        assert config.payroll.overtime_multiplier == Decimal("1.5")
        assert config.payroll.working_days_per_month is None
        assert config.attendance.standard_daily_hours == Decimal("8")
        assert len(config.checksum) == 64

    def test_empty_file_gives_schema_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        config = load_config(path)
        assert config.batch.max_workers == 4
        assert config.logging.level == "INFO"


class TestParse:

    def test_sections(self):
        config = parse_engine_config({
            "database": {"url": "sqlite:///x.db", "pool_size": 3},
            "batch": {"max_workers": 8, "bulk_deadline_seconds": 60},
            "logging": {"level": "debug"},
            "payroll": {"overtime_multiplier": 2, "working_days_per_month": 26},
            "attendance": {"allow_future_dates": True},
        })
        assert config.database.pool_size == 3
        assert config.batch.max_workers == 8
        assert config.batch.bulk_deadline_seconds == 60
        assert config.payroll.overtime_multiplier == Decimal("2")
        assert config.payroll.working_days_per_month == 26
        assert config.attendance.allow_future_dates is True

    def test_unknown_section(self):
        with pytest.raises(ValueError, match="sections"):
            parse_engine_config({"reporting": {}})

    @pytest.mark.parametrize("section", ["database", "batch", "logging", "attendance", "payroll"])
    def test_unknown_key(self, section):
        with pytest.raises(ValueError, match=section):
            parse_engine_config({section: {"surprise": 1}})

    @pytest.mark.parametrize(
        "data",
        [
            {"database": {"url": ""}},
            {"database": {"pool_size": 0}},
            {"batch": {"max_workers": 0}},
            {"batch": {"generation_deadline_seconds": -1}},
            {"logging": {"level": "LOUD"}},
            {"payroll": {"overtime_multiplier": 0.5}},
        ],
    )
    def test_invalid_values(self, data):
        with pytest.raises(ValueError):
            parse_engine_config(data)

    def test_checksum_tracks_content(self):
        a = parse_engine_config({"batch": {"max_workers": 2}})
        b = parse_engine_config({"batch": {"max_workers": 2}})
        c = parse_engine_config({"batch": {"max_workers": 3}})
        assert a.checksum == b.checksum
        assert a.checksum != c.checksum


class TestActiveConfig:

    def test_explicit_path(self, tmp_path):
        path = _write(tmp_path / "engine.yaml", {"batch": {"max_workers": 2}})
        assert get_active_config(path).batch.max_workers == 2

    def test_env_path(self, tmp_path, monkeypatch):
        path = _write(tmp_path / "engine.yaml", {"batch": {"max_workers": 6}})
        monkeypatch.setenv("WORKFORCE_CONFIG", str(path))
        assert get_active_config().batch.max_workers == 6

    def test_database_url_override(self, tmp_path, monkeypatch, captured_logs):
        path = _write(tmp_path / "engine.yaml", {"database": {"url": "sqlite:///a.db"}})
        monkeypatch.setenv("WORKFORCE_DATABASE_URL", "sqlite:///b.db")

        config = get_active_config(path)

        assert config.database.url == "sqlite:///b.db"
        trace = [r for r in captured_logs() if r["message"] == "workforce_config_trace"]
        assert trace[0]["database_url_overridden"] is True
        assert trace[0]["checksum"] == config.checksum

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            get_active_config(tmp_path / "nope.yaml")
