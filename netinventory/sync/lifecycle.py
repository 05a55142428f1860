"""
Жизненный цикл интерфейса.

Mixin класс для create_interface, update_interface, delete_interface.
Значения по умолчанию вычисляются чистой функцией apply_interface_defaults.
"""

import logging
from typing import Any, Dict

from .base import SyncBase
from ..core.config_schema import PolicyConfig
from ..core.constants import DOC_STATUS_MANUAL, NEIGHBOR_CLEAR_FIELDS
from ..core.exceptions import ValidationError
from ..core.models import Interface

logger = logging.getLogger(__name__)


def _normalize_number(fields: Dict[str, Any]) -> None:
    """Номер интерфейса (ifIndex) хранится строкой: 10 и "10" один интерфейс."""
    if fields.get("number") is not None:
        fields["number"] = str(fields["number"]).strip()


def apply_interface_defaults(
    fields: Dict[str, Any],
    policy: PolicyConfig,
    unknown_status_id: int = 0,
) -> Dict[str, Any]:
    """
    Заполняет значения по умолчанию для нового интерфейса.

    Явно переданные значения (не None) не перезаписываются.

    Args:
        fields: Поля интерфейса
        policy: Политики инвентаризации
        unknown_status_id: ID MonitorStatus "Unknown"

    Returns:
        Dict: Новый словарь полей

    Examples:
        >>> apply_interface_defaults({"device": 1}, PolicyConfig())["doc_status"]
        'manual'
    """
    defaults = {
        "speed": 0,
        "doc_status": DOC_STATUS_MANUAL,
        "snmp_managed": policy.if_snmp,
        "overwrite_descr": policy.if_overwrite_descr,
        "monitored": False,
        "auto_dns": policy.update_device_ip_names,
    }
    result = dict(fields)
    for key, value in defaults.items():
        if result.get(key) is None:
            result[key] = value
    # monitorstatus=0 тоже считается незаданным
    if not result.get("monitorstatus"):
        result["monitorstatus"] = unknown_status_id
    return result


class InterfaceLifecycleMixin:
    """Mixin для создания, обновления и удаления интерфейсов."""

    def create_interface(self: SyncBase, fields: Dict[str, Any]) -> Interface:
        """
        Создаёт интерфейс с заполнением значений по умолчанию.

        Если передан neighbor — связь устанавливается через add_neighbor
        после создания (симметрично).

        Args:
            fields: Поля интерфейса (device обязателен)

        Returns:
            Interface: Созданный интерфейс

        Raises:
            ValidationError: Не указано устройство или неизвестные поля
        """
        if not fields.get("device"):
            raise ValidationError("Не указано устройство интерфейса", field="device")

        data = dict(fields)
        _normalize_number(data)
        neighbor = data.pop("neighbor", 0)
        fixed = bool(data.pop("neighbor_fixed", False))

        data = apply_interface_defaults(data, self.policy, self._unknown_status_id())
        interface = self.store.insert("interface", data)
        logger.debug(f"{self._log_prefix()}Создан интерфейс {self._get_label(interface)}")

        if neighbor:
            self.add_neighbor(interface.id, neighbor, fixed=fixed)
            interface = self._get_interface(interface.id)
        return interface

    def update_interface(self: SyncBase, interface_id: int, fields: Dict[str, Any]) -> Interface:
        """
        Обновляет интерфейс.

        Ключ neighbor перехватывается: 0 — remove_neighbor, иначе add_neighbor
        с флагом neighbor_fixed. Ни neighbor, ни neighbor_fixed в этом случае
        не записываются напрямую, остальные поля обновляются как есть.

        Raises:
            ValidationError, UserError, NotFoundError: Из add_neighbor / хранилища
        """
        data = dict(fields)
        _normalize_number(data)

        if "neighbor" in data:
            neighbor = data.pop("neighbor")
            fixed = bool(data.pop("neighbor_fixed", False))
            if neighbor:
                self.add_neighbor(interface_id, neighbor, fixed=fixed)
            else:
                self.remove_neighbor(interface_id)

        if data:
            self.store.update("interface", interface_id, data)
        return self._get_interface(interface_id)

    def delete_interface(self: SyncBase, interface_id: int) -> None:
        """
        Удаляет интерфейс без висячих ссылок.

        Сбрасывает соседство у всех интерфейсов, ссылающихся на удаляемый,
        удаляет его членство во VLAN и отвязывает его IP-блоки.

        Raises:
            NotFoundError: Интерфейс не найден
        """
        interface = self._get_interface(interface_id)
        label = self._get_label(interface)

        with self._locked_scope(interface_id):
            for peer in self.store.search("interface", neighbor=interface_id):
                self.store.update("interface", peer.id, dict(NEIGHBOR_CLEAR_FIELDS))
                logger.debug(f"{self._log_prefix()}Сброшен сосед у {self._get_label(peer)}")

            for membership in self.store.search("interfacevlan", interface=interface_id):
                self.store.delete("interfacevlan", membership.id)

            for ipblock in self.store.search("ipblock", interface=interface_id):
                self.store.update("ipblock", ipblock.id, {"interface": None}, validate=False)

            self.store.delete("interface", interface_id)

        self._release_neighbor_lock(interface_id)
        logger.info(f"{self._log_prefix()}Удалён интерфейс {label}")
