"""
Загрузчик конфигурации из config.yaml.

Порядок применения настроек:
    1. Значения по умолчанию (AppConfig)
    2. YAML файл (NETINVENTORY_CONFIG, config.yaml, config.yml, .netinventory.yaml)
    3. Переменные окружения (NETINVENTORY_LOG_LEVEL, NETINVENTORY_IGNORE_DUPLEX)

Пример:
    config = load_config()
    config.policy.if_snmp            # True
    config.policy.ignore_duplex      # ["1.3.6.1.4.1.9.1.1208"]
    config.logging.level             # "INFO"
"""

import os
import logging
from typing import Any, Dict, Optional

import yaml

from .core.config_schema import AppConfig, validate_config, get_default_config
from .core.exceptions import ConfigError
from .core.logging import LogConfig, setup_logging_from_config

logger = logging.getLogger(__name__)

# Путь к файлу конфигурации рядом с пакетом
CONFIG_FILE = os.path.join(os.path.dirname(__file__), "config.yaml")

CONFIG_SEARCH_PATHS = [
    CONFIG_FILE,
    "config.yaml",
    "config.yml",
    ".netinventory.yaml",
]


def _find_config_file() -> Optional[str]:
    """Ищет файл конфигурации (env NETINVENTORY_CONFIG имеет приоритет)."""
    env_path = os.getenv("NETINVENTORY_CONFIG")
    if env_path:
        return env_path
    for path in CONFIG_SEARCH_PATHS:
        if os.path.exists(path):
            return path
    return None


def _merge_dict(base: dict, override: dict) -> None:
    """Рекурсивно мержит словари."""
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _merge_dict(base[key], value)
        else:
            base[key] = value


def _load_yaml(config_file: str) -> Dict[str, Any]:
    """Читает YAML файл конфигурации."""
    if not os.path.exists(config_file):
        raise ConfigError("Файл конфигурации не найден", config_file=config_file)
    try:
        with open(config_file, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Ошибка разбора YAML: {e}", config_file=config_file)

    if not isinstance(data, dict):
        raise ConfigError("Корень конфигурации должен быть словарём", config_file=config_file)
    logger.debug(f"Конфигурация загружена из {config_file}")
    return data


def _load_env(data: Dict[str, Any]) -> None:
    """Применяет переопределения из переменных окружения."""
    level = os.getenv("NETINVENTORY_LOG_LEVEL")
    if level:
        data.setdefault("logging", {})["level"] = level.upper()

    ignore_duplex = os.getenv("NETINVENTORY_IGNORE_DUPLEX")
    if ignore_duplex:
        data.setdefault("policy", {})["ignore_duplex"] = [
            oid.strip() for oid in ignore_duplex.split(",") if oid.strip()
        ]


def load_config(config_file: Optional[str] = None) -> AppConfig:
    """
    Загружает и валидирует конфигурацию.

    Args:
        config_file: Путь к YAML файлу (опционально, иначе ищется автоматически)

    Returns:
        AppConfig: Валидированная конфигурация

    Raises:
        ConfigError: Файл не читается или не проходит валидацию
    """
    data = get_default_config().model_dump()

    path = config_file or _find_config_file()
    if path:
        _merge_dict(data, _load_yaml(path))

    _load_env(data)
    return validate_config(data, config_file=path or "<defaults>")


def setup_logging_for_config(config: AppConfig) -> None:
    """
    Настраивает логирование по секции logging конфигурации.

    Пример:
        config = load_config()
        setup_logging_for_config(config)   # консоль + файл с ротацией
    """
    setup_logging_from_config(LogConfig.from_dict(config.logging.model_dump()))
