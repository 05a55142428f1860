"""
Tests for typed exceptions.
"""

import pytest

from netinventory.core.exceptions import (
    ConfigError,
    InventoryError,
    NotFoundError,
    StorageError,
    UserError,
    ValidationError,
    format_error_for_log,
)


@pytest.mark.unit
class TestExceptionHierarchy:
    """Все исключения наследуются от InventoryError."""

    @pytest.mark.parametrize("exc_class", [
        ValidationError, UserError, NotFoundError, StorageError, ConfigError,
    ])
    def test_subclass(self, exc_class):
        assert issubclass(exc_class, InventoryError)

    def test_catch_base(self):
        with pytest.raises(InventoryError):
            raise UserError("вручную связан")


@pytest.mark.unit
class TestExceptionDetails:
    """Детали исключений попадают в details и str()."""

    def test_validation_error(self):
        e = ValidationError("Неверный VLAN ID", field="vid", value=5000)
        assert e.field == "vid"
        assert e.value == 5000
        assert e.details == {"field": "vid", "value": "5000"}
        assert str(e) == "Неверный VLAN ID (field='vid', value='5000')"

    def test_validation_error_value_truncated(self):
        e = ValidationError("Слишком длинно", value="x" * 500)
        assert len(e.details["value"]) == 100

    def test_not_found_error(self):
        e = NotFoundError("Интерфейс не найден", table="interface", record_id=42)
        assert e.table == "interface"
        assert e.record_id == 42
        assert e.details == {"table": "interface", "record_id": 42}

    def test_storage_error(self):
        e = StorageError("Нарушена уникальность", table="vlan", operation="insert")
        assert e.details == {"table": "vlan", "operation": "insert"}

    def test_config_error(self):
        e = ConfigError("Ошибка", config_file="config.yaml", key="policy.if_snmp")
        assert e.key == "policy.if_snmp"
        assert e.details["config_file"] == "config.yaml"

    def test_plain_message(self):
        assert str(UserError("Интерфейс не может быть соседом самому себе")) == (
            "Интерфейс не может быть соседом самому себе"
        )

    def test_to_dict(self):
        e = NotFoundError("Нет записи", table="vlan", record_id=3)
        assert e.to_dict() == {
            "error_type": "NotFoundError",
            "message": "Нет записи",
            "details": {"table": "vlan", "record_id": 3},
        }


@pytest.mark.unit
class TestFormatErrorForLog:
    """Тесты format_error_for_log."""

    def test_inventory_error(self):
        e = ValidationError("Неверный адрес", field="address")
        assert format_error_for_log(e) == "Неверный адрес (field='address')"

    def test_other_error(self):
        assert format_error_for_log(ValueError("boom")) == "ValueError: boom"
