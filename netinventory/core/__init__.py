"""
Core модули netinventory.

Содержит:
- exceptions: Типизированные исключения
- config_schema: Pydantic схемы конфигурации
- logging: Structured Logging (JSON/Human-readable)
- context: RunContext для отслеживания циклов опроса
- models: Сущности инвентаря, discovery модели, результаты
- constants: Константы и маппинги
- domain: Чистые функции (скорость, IP, VLAN)
"""

from .context import (
    RunContext,
    get_current_context,
    set_current_context,
    RunContextFilter,
)
from .logging import (
    setup_logging,
    setup_logging_from_config,
    JSONFormatter,
    HumanFormatter,
    LogContext,
    LogConfig,
    RotationType,
)
from .exceptions import (
    InventoryError,
    ValidationError,
    UserError,
    NotFoundError,
    StorageError,
    ConfigError,
    format_error_for_log,
)
from .config_schema import PolicyConfig, LoggingConfig, AppConfig

__all__ = [
    # Context
    "RunContext",
    "get_current_context",
    "set_current_context",
    "RunContextFilter",
    # Logging
    "setup_logging",
    "setup_logging_from_config",
    "JSONFormatter",
    "HumanFormatter",
    "LogContext",
    "LogConfig",
    "RotationType",
    # Exceptions
    "InventoryError",
    "ValidationError",
    "UserError",
    "NotFoundError",
    "StorageError",
    "ConfigError",
    "format_error_for_log",
    # Config
    "PolicyConfig",
    "LoggingConfig",
    "AppConfig",
]
