"""
Типизированные исключения для netinventory.

Иерархия:
    InventoryError (базовый)
    ├── ValidationError (неверные или отсутствующие входные данные)
    ├── UserError (конфликт с ручным/осознанным состоянием)
    ├── NotFoundError (запись не найдена)
    ├── StorageError (ошибка хранилища)
    └── ConfigError (конфигурация)

Пример использования:
    from netinventory.core.exceptions import UserError, NotFoundError

    try:
        reconciler.add_neighbor(10, 20, fixed=False)
    except UserError as e:
        logger.warning(f"Сосед не добавлен: {e.message}")
    except NotFoundError as e:
        logger.error(f"Интерфейс не найден: {e.record_id}")
"""

from typing import Optional, Any


class InventoryError(Exception):
    """
    Базовое исключение для всех ошибок netinventory.

    Attributes:
        message: Описание ошибки
        details: Дополнительные детали (dict)
    """

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message

    def to_dict(self) -> dict:
        """Сериализация для логов/отчётов."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(InventoryError):
    """
    Неверные или отсутствующие обязательные данные.

    Attributes:
        field: Поле с ошибкой
        value: Значение которое не прошло валидацию

    Пример:
        raise ValidationError("Не указан адрес", field="address")
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        details: Optional[dict] = None,
    ):
        self.field = field
        self.value = value
        details = details or {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)[:100]  # Ограничиваем размер
        super().__init__(message, details)


class UserError(InventoryError):
    """
    Операция конфликтует с существующим ручным состоянием.

    Пример:
        raise UserError("sw1 [Gi0/1] вручную связан с sw2 [Gi0/2]")
    """
    pass


class NotFoundError(InventoryError):
    """
    Запись не найдена в хранилище.

    Attributes:
        table: Таблица (interface, vlan, ipblock, ...)
        record_id: ID записи

    Пример:
        raise NotFoundError("Интерфейс не найден", table="interface", record_id=42)
    """

    def __init__(
        self,
        message: str,
        table: Optional[str] = None,
        record_id: Optional[Any] = None,
        details: Optional[dict] = None,
    ):
        self.table = table
        self.record_id = record_id
        details = details or {}
        if table:
            details["table"] = table
        if record_id is not None:
            details["record_id"] = record_id
        super().__init__(message, details)


class StorageError(InventoryError):
    """
    Ошибка хранилища (нарушение ограничения, сбой записи).

    Attributes:
        table: Таблица
        operation: Операция (insert, update, delete)
    """

    def __init__(
        self,
        message: str,
        table: Optional[str] = None,
        operation: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        self.table = table
        self.operation = operation
        details = details or {}
        if table:
            details["table"] = table
        if operation:
            details["operation"] = operation
        super().__init__(message, details)


class ConfigError(InventoryError):
    """
    Ошибка конфигурации.

    Attributes:
        config_file: Путь к файлу конфигурации
        key: Ключ конфигурации с ошибкой

    Пример:
        raise ConfigError("Неверное значение", config_file="config.yaml", key="policy.if_snmp")
    """

    def __init__(
        self,
        message: str,
        config_file: Optional[str] = None,
        key: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        self.config_file = config_file
        self.key = key
        details = details or {}
        if config_file:
            details["config_file"] = config_file
        if key:
            details["key"] = key
        super().__init__(message, details)


def format_error_for_log(error: Exception) -> str:
    """
    Форматирует ошибку для вывода в лог.

    Args:
        error: Исключение

    Returns:
        str: Отформатированная строка ошибки
    """
    if isinstance(error, InventoryError):
        return str(error)
    return f"{error.__class__.__name__}: {error}"
