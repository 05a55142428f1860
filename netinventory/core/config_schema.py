"""
Pydantic схемы для валидации config.yaml.

Валидация происходит при загрузке конфигурации.
Ошибки валидации выбрасывают ConfigError.

Пример использования:
    from netinventory.core.config_schema import validate_config

    config_dict = yaml.safe_load(open("config.yaml"))
    validated = validate_config(config_dict)  # raises ConfigError on failure
    reconciler = InterfaceReconciler(store, policy=validated.policy)
"""

from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

from .exceptions import ConfigError


class PolicyConfig(BaseModel):
    """
    Политики инвентаризации интерфейсов.

    Attributes:
        if_snmp: Значение snmp_managed по умолчанию для новых интерфейсов
        if_overwrite_descr: Значение overwrite_descr по умолчанию
        update_device_ip_names: Значение auto_dns по умолчанию
        ignore_duplex: sysObjectID устройств, неверно сообщающих duplex
        add_subnets: Создавать подсети по умолчанию при синхронизации
        subs_inherit: Подсети наследуют owner/used_by устройства
        revalidate_existing_ips: Валидировать существующие IP при обновлении
    """
    if_snmp: bool = True
    if_overwrite_descr: bool = True
    update_device_ip_names: bool = False
    ignore_duplex: List[str] = Field(default_factory=list)
    add_subnets: bool = False
    subs_inherit: bool = False
    revalidate_existing_ips: bool = False

    @field_validator("ignore_duplex")
    @classmethod
    def strip_oids(cls, v: List[str]) -> List[str]:
        """Убирает пробелы и ведущую точку у sysObjectID."""
        return [oid.strip().lstrip(".") for oid in v if oid and oid.strip()]


class LoggingConfig(BaseModel):
    """Настройки логирования."""
    level: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")
    json_format: bool = False
    console: bool = True
    file_path: Optional[str] = None
    rotation: str = Field(default="size", pattern="^(size|time|none)$")
    max_bytes: int = Field(default=10 * 1024 * 1024, ge=1024)  # min 1KB
    backup_count: int = Field(default=5, ge=1, le=100)
    when: str = "midnight"
    interval: int = Field(default=1, ge=1)


class AppConfig(BaseModel):
    """Полная конфигурация приложения."""
    policy: PolicyConfig = Field(default_factory=PolicyConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    debug: bool = False


def validate_config(config_dict: dict, config_file: str = "config.yaml") -> AppConfig:
    """
    Валидирует словарь конфигурации.

    Args:
        config_dict: Словарь из YAML
        config_file: Имя файла (для сообщения об ошибке)

    Returns:
        AppConfig: Валидированная конфигурация

    Raises:
        ConfigError: При ошибке валидации
    """
    try:
        return AppConfig(**config_dict)
    except Exception as e:
        # Форматируем ошибку Pydantic в читаемый вид
        error_msg = str(e)
        key = None
        if hasattr(e, "errors"):
            errors = e.errors()
            if errors:
                first_error = errors[0]
                key = ".".join(str(x) for x in first_error.get("loc", []))
                msg = first_error.get("msg", "Unknown error")
                error_msg = f"{key}: {msg}"

        raise ConfigError(
            message=f"Ошибка валидации конфигурации: {error_msg}",
            config_file=config_file,
            key=key,
        )


def get_default_config() -> AppConfig:
    """Возвращает конфигурацию по умолчанию."""
    return AppConfig()
