"""
Tests for workshop configuration loading.

Covers:
- Defaults shipped in sets/default.yaml
- Resolution order: explicit path, WORKSHOP_CONFIG, default file
- DATABASE_URL override
- Validation of unknown sections and bad values
- Checksum stability and the config trace log
"""

from decimal import Decimal
from uuid import uuid4

import pytest
import yaml

from workshop_config import (
    CONFIG_ENV_VAR,
    DATABASE_URL_ENV_VAR,
    compute_checksum,
    get_active_config,
)
from workshop_config.loader import parse_config
from workshop_modules.orders.service import ServiceOrderService


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    monkeypatch.delenv(DATABASE_URL_ENV_VAR, raising=False)


@pytest.fixture
def write_config(tmp_path):
    def _write(data, name="workshop.yaml"):
        path = tmp_path / name
        path.write_text(yaml.safe_dump(data))
        return path

    return _write


class TestDefaults:

    def test_default_file(self):
        config = get_active_config()

        assert config.config_id == "default"
        assert config.database.url == "sqlite:///workshop.db"
        assert config.quota.default_total == 0
        assert config.pricing.decimal_places == 2
        assert config.invoicing.labor_line_threshold == Decimal("0.01")
        assert config.stock.critical_pct == Decimal("50")
        assert len(config.checksum) == 64

    def test_empty_file_uses_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")

        config = get_active_config(path)

        assert config.quota.default_total == 0
        assert config.logging.level == "INFO"


class TestResolution:

    def test_explicit_path(self, write_config):
        path = write_config({"config_id": "shop-a", "quota": {"default_total": 5}})

        config = get_active_config(path)

        assert config.config_id == "shop-a"
        assert config.quota.default_total == 5

    def test_env_var(self, write_config, monkeypatch):
        path = write_config({"config_id": "from-env"})
        monkeypatch.setenv(CONFIG_ENV_VAR, str(path))

        assert get_active_config().config_id == "from-env"

    def test_explicit_path_beats_env_var(self, write_config, monkeypatch):
        monkeypatch.setenv(CONFIG_ENV_VAR, str(write_config({"config_id": "env"}, "env.yaml")))
        path = write_config({"config_id": "explicit"}, "explicit.yaml")

        assert get_active_config(path).config_id == "explicit"

    def test_database_url_override(self, write_config, monkeypatch):
        path = write_config({"database": {"url": "sqlite:///ignored.db", "pool_size": 5}})
        monkeypatch.setenv(DATABASE_URL_ENV_VAR, "postgresql://u:p@db/workshop")

        config = get_active_config(path)

        assert config.database.url == "postgresql://u:p@db/workshop"
        assert config.database.pool_size == 5

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            get_active_config(tmp_path / "nope.yaml")

    def test_trace_logged(self, captured_logs):
        config = get_active_config()

        traces = [r for r in captured_logs() if r["message"] == "WORKSHOP_CONFIG_TRACE"]
        assert traces[-1]["checksum"] == config.checksum
        assert traces[-1]["database_url_overridden"] is False


class TestValidation:

    def test_unknown_section(self):
        with pytest.raises(ValueError, match="Unknown config sections"):
            parse_config({"quotas": {"default_total": 1}})

    def test_section_must_be_mapping(self):
        with pytest.raises(ValueError):
            parse_config({"quota": 5})

    @pytest.mark.parametrize(
        "data",
        [
            {"logging": {"level": "LOUD"}},
            {"quota": {"default_total": -1}},
            {"pricing": {"decimal_places": 0}},
            {"stock": {"critical_pct": 150, "low_pct": 100}},
            {"database": {"url": ""}},
        ],
    )
    def test_invalid_values(self, data):
        with pytest.raises(ValueError):
            parse_config(data)


class TestChecksum:

    def test_key_order_independent(self):
        assert compute_checksum({"a": 1, "b": {"c": 2}}) == compute_checksum({"b": {"c": 2}, "a": 1})

    def test_changes_with_content(self):
        assert compute_checksum({"quota": {"default_total": 1}}) != compute_checksum(
            {"quota": {"default_total": 2}}
        )


class TestConfigWiring:

    def test_order_service_from_config(self, session, deterministic_clock, write_config):
        config = get_active_config(write_config({"quota": {"default_total": 3}}))

        service = ServiceOrderService.from_config(session, config, clock=deterministic_clock)

        assert service.quota_stats(uuid4()).total == 3
