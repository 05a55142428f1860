"""
Tests for configuration.

Проверяет:
- Pydantic схемы (PolicyConfig, LoggingConfig, AppConfig)
- Загрузку YAML и переопределения из окружения
- Ошибки конфигурации (ConfigError)
"""

import logging
import logging.handlers
from unittest.mock import patch

import pytest

from netinventory import InterfaceReconciler, MemoryStore
from netinventory.config import load_config, setup_logging_for_config
from netinventory.core.context import get_current_context, set_current_context
from netinventory.core.logging import JSONFormatter
from netinventory.core.config_schema import (
    AppConfig,
    PolicyConfig,
    get_default_config,
    validate_config,
)
from netinventory.core.exceptions import ConfigError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Изолирует тесты от переменных окружения и config.yaml в cwd."""
    for name in ("NETINVENTORY_CONFIG", "NETINVENTORY_LOG_LEVEL", "NETINVENTORY_IGNORE_DUPLEX"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.mark.unit
class TestConfigSchema:
    """Тесты pydantic схем."""

    def test_defaults(self):
        config = get_default_config()
        assert isinstance(config, AppConfig)
        assert config.policy.if_snmp is True
        assert config.policy.if_overwrite_descr is True
        assert config.policy.update_device_ip_names is False
        assert config.policy.ignore_duplex == []
        assert config.policy.add_subnets is False
        assert config.policy.revalidate_existing_ips is False
        assert config.logging.level == "INFO"

    def test_ignore_duplex_normalized(self):
        policy = PolicyConfig(ignore_duplex=[" .1.3.6.1.4.1.9.1.1208 ", "", "1.3.6.1.4.1.9"])
        assert policy.ignore_duplex == ["1.3.6.1.4.1.9.1.1208", "1.3.6.1.4.1.9"]

    def test_validate_config(self):
        config = validate_config({"policy": {"if_snmp": False}, "debug": True})
        assert config.policy.if_snmp is False
        assert config.debug is True

    def test_invalid_log_level(self):
        with pytest.raises(ConfigError) as exc_info:
            validate_config({"logging": {"level": "VERBOSE"}})
        assert exc_info.value.key == "logging.level"

    def test_invalid_type(self):
        with pytest.raises(ConfigError) as exc_info:
            validate_config({"policy": {"ignore_duplex": "not-a-list"}}, config_file="my.yaml")
        assert exc_info.value.config_file == "my.yaml"
        assert exc_info.value.key.startswith("policy.ignore_duplex")


@pytest.mark.unit
class TestLoadConfig:
    """Тесты загрузчика config.yaml."""

    def test_no_file_defaults(self):
        config = load_config()
        assert config == get_default_config()

    def test_load_yaml(self, tmp_path):
        path = tmp_path / "custom.yaml"
        path.write_text(
            "policy:\n"
            "  add_subnets: true\n"
            "  ignore_duplex:\n"
            "    - .1.3.6.1.4.1.9.1.1208\n"
            "logging:\n"
            "  level: DEBUG\n",
            encoding="utf-8",
        )
        config = load_config(str(path))
        assert config.policy.add_subnets is True
        # Незаданные ключи остаются по умолчанию
        assert config.policy.if_snmp is True
        assert config.policy.ignore_duplex == ["1.3.6.1.4.1.9.1.1208"]
        assert config.logging.level == "DEBUG"

    def test_config_yaml_in_cwd(self, tmp_path):
        (tmp_path / "config.yaml").write_text("debug: true\n", encoding="utf-8")
        assert load_config().debug is True

    def test_env_config_path(self, tmp_path, monkeypatch):
        path = tmp_path / "env.yaml"
        path.write_text("policy:\n  subs_inherit: true\n", encoding="utf-8")
        monkeypatch.setenv("NETINVENTORY_CONFIG", str(path))
        assert load_config().policy.subs_inherit is True

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("NETINVENTORY_LOG_LEVEL", "warning")
        monkeypatch.setenv("NETINVENTORY_IGNORE_DUPLEX", "1.3.6.1.4.1.9.1.1, .1.3.6.1.4.1.9.1.2")
        config = load_config()
        assert config.logging.level == "WARNING"
        assert config.policy.ignore_duplex == ["1.3.6.1.4.1.9.1.1", "1.3.6.1.4.1.9.1.2"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="не найден"):
            load_config(str(tmp_path / "missing.yaml"))

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("policy: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="YAML"):
            load_config(str(path))

    def test_root_not_dict(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_config(str(path))

    def test_invalid_value(self, tmp_path):
        path = tmp_path / "invalid.yaml"
        path.write_text("logging:\n  backup_count: 0\n", encoding="utf-8")
        with pytest.raises(ConfigError) as exc_info:
            load_config(str(path))
        assert exc_info.value.key == "logging.backup_count"


@pytest.fixture
def restore_root_logger():
    """Восстанавливает handlers и уровень корневого логгера."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)


@pytest.mark.unit
class TestSetupFromConfig:
    """Логирование и синхронизатор из config.yaml."""

    def test_logging_section_applied(self, tmp_path, restore_root_logger):
        log_file = tmp_path / "inventory.log"
        path = tmp_path / "config.yaml"
        path.write_text(
            "logging:\n"
            "  level: DEBUG\n"
            "  console: false\n"
            "  json_format: true\n"
            f"  file_path: {log_file}\n"
            "  rotation: size\n"
            "  max_bytes: 2048\n",
            encoding="utf-8",
        )

        setup_logging_for_config(load_config(str(path)))

        handlers = restore_root_logger.handlers
        assert len(handlers) == 1
        assert isinstance(handlers[0], logging.handlers.RotatingFileHandler)
        assert handlers[0].maxBytes == 2048
        assert isinstance(handlers[0].formatter, JSONFormatter)
        assert restore_root_logger.level == logging.DEBUG

    def test_reconciler_from_config(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            "policy:\n"
            "  add_subnets: true\n"
            "  ignore_duplex: ['.1.3.6.1.4.1.9.1.1208']\n",
            encoding="utf-8",
        )
        store = MemoryStore()

        try:
            with patch("netinventory.sync.main.setup_logging_for_config") as setup_mock:
                reconciler = InterfaceReconciler.from_config(store, str(path), triggered_by="manual")

            setup_mock.assert_called_once()
            assert reconciler.store is store
            assert reconciler.policy.add_subnets is True
            assert reconciler.policy.ignore_duplex == ["1.3.6.1.4.1.9.1.1208"]
            assert reconciler.ctx.triggered_by == "manual"
            assert get_current_context() is reconciler.ctx
        finally:
            set_current_context(None)

    def test_from_config_invalid(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("policy:\n  add_subnets: [1, 2]\n", encoding="utf-8")

        with pytest.raises(ConfigError):
            InterfaceReconciler.from_config(MemoryStore(), str(path))
