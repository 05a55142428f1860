"""
Хранилище инвентаря в памяти процесса.

Таблицы — словари {id: сущность}. Поддерживает ограничения
уникальности и проверку записей, поэтому ведёт себя как настоящее
хранилище в тестах и при локальном запуске.

Пример использования:
    store = MemoryStore()
    device = store.insert("device", {"name": "sw1", "ipforwarding": True})
    intf = store.insert("interface", {"device": device.id, "name": "Gi0/1"})
"""

import copy
import ipaddress
import logging
import threading
from typing import Any, Dict, List, Optional, Tuple

from .base import Store
from ..core.constants import IPBLOCK_STATUS_STATIC, IPBLOCK_STATUS_SUBNET
from ..core.exceptions import NotFoundError, StorageError, ValidationError
from ..core.models import TABLES, Ipblock

logger = logging.getLogger(__name__)

# Ограничения уникальности: таблица → поля
UNIQUE_KEYS: Dict[str, Tuple[str, ...]] = {
    "physaddr": ("address",),
    "vlan": ("vid",),
    "ipblock": ("address", "prefix"),
    "interfacevlan": ("interface", "vlan"),
    "stpinstance": ("device", "number"),
}


class MemoryStore(Store):
    """
    Store на словарях.

    Attributes:
        tree_rebuilds: Количество перестроек IP-дерева по версиям {4: n, 6: n}
    """

    def __init__(self):
        self._tables: Dict[str, Dict[int, Any]] = {name: {} for name in TABLES}
        self._next_id: Dict[str, int] = {name: 1 for name in TABLES}
        self._lock = threading.RLock()
        self._parents: Dict[int, Optional[int]] = {}
        self.tree_rebuilds: Dict[int, int] = {4: 0, 6: 0}

    # ==================== ЧТЕНИЕ ====================

    def _table(self, table: str) -> Dict[int, Any]:
        if table not in self._tables:
            raise StorageError(f"Неизвестная таблица: {table}", table=table)
        return self._tables[table]

    def find_by_id(self, table: str, record_id: int) -> Any:
        with self._lock:
            record = self._table(table).get(record_id)
            if record is None:
                raise NotFoundError(
                    f"Запись не найдена: {table}#{record_id}",
                    table=table,
                    record_id=record_id,
                )
            return copy.copy(record)

    def find_one(self, table: str, **criteria: Any) -> Optional[Any]:
        found = self.search(table, **criteria)
        return found[0] if found else None

    def search(self, table: str, **criteria: Any) -> List[Any]:
        with self._lock:
            rows = self._table(table)
            self._check_fields(table, criteria)
            return [
                copy.copy(rows[record_id])
                for record_id in sorted(rows)
                if all(getattr(rows[record_id], k) == v for k, v in criteria.items())
            ]

    # ==================== ЗАПИСЬ ====================

    def insert(
        self,
        table: str,
        fields: Dict[str, Any],
        validate: bool = True,
        update_tree: bool = True,
    ) -> Any:
        with self._lock:
            rows = self._table(table)
            self._check_fields(table, fields)
            data = {k: v for k, v in fields.items() if k != "id"}

            record = TABLES[table].from_dict(data)
            record.id = self._next_id[table]

            if validate:
                self._validate(table, record)
            self._check_required(table, record)
            self._check_unique(table, record)

            rows[record.id] = record
            self._next_id[table] += 1
            logger.debug(f"Создана запись {table}#{record.id}")

            if table == "ipblock" and update_tree:
                self.rebuild_ip_tree(record.version)
            return copy.copy(record)

    def update(
        self,
        table: str,
        record_id: int,
        fields: Dict[str, Any],
        validate: bool = True,
    ) -> Any:
        with self._lock:
            rows = self._table(table)
            self._check_fields(table, fields)
            current = self.find_by_id(table, record_id)

            for key, value in fields.items():
                if key != "id":
                    setattr(current, key, value)

            if validate:
                self._validate(table, current)
            self._check_required(table, current)
            self._check_unique(table, current)

            rows[record_id] = current
            return copy.copy(current)

    def delete(self, table: str, record_id: int) -> None:
        with self._lock:
            rows = self._table(table)
            if record_id not in rows:
                raise NotFoundError(
                    f"Запись не найдена: {table}#{record_id}",
                    table=table,
                    record_id=record_id,
                )
            del rows[record_id]
            if table == "ipblock":
                self._parents.pop(record_id, None)
            logger.debug(f"Удалена запись {table}#{record_id}")

    # ==================== IP ДЕРЕВО ====================

    def rebuild_ip_tree(self, version: int) -> None:
        """Пересчитывает родителя каждого IP-блока версии (самая узкая объемлющая сеть)."""
        with self._lock:
            blocks = [b for b in self._tables["ipblock"].values() if b.version == version]
            networks = {
                b.id: ipaddress.ip_network(f"{b.address}/{b.prefix}", strict=False) for b in blocks
            }

            for block in blocks:
                network = networks[block.id]
                parent_id = None
                parent_prefix = -1
                for other in blocks:
                    if other.id == block.id or other.prefix >= block.prefix:
                        continue
                    if network.subnet_of(networks[other.id]) and other.prefix > parent_prefix:
                        parent_id, parent_prefix = other.id, other.prefix
                self._parents[block.id] = parent_id

            self.tree_rebuilds[version] = self.tree_rebuilds.get(version, 0) + 1
            logger.debug(f"IPv{version} дерево перестроено ({len(blocks)} блоков)")

    def get_parent(self, ipblock_id: int) -> Optional[Ipblock]:
        """Родительский блок по последней перестройке дерева."""
        parent_id = self._parents.get(ipblock_id)
        if parent_id is None or parent_id not in self._tables["ipblock"]:
            return None
        return self.find_by_id("ipblock", parent_id)

    # ==================== ПРОВЕРКИ ====================

    def _check_fields(self, table: str, fields: Dict[str, Any]) -> None:
        """Неизвестные поля — ошибка валидации."""
        known = set(TABLES[table].field_names())
        unknown = sorted(set(fields) - known)
        if unknown:
            raise ValidationError(
                f"Неизвестные поля {table}: {', '.join(unknown)}",
                field=unknown[0],
            )

    def _check_required(self, table: str, record: Any) -> None:
        if table == "interface" and not record.device:
            raise ValidationError("Не указано устройство интерфейса", field="device")
        if table == "interfacevlan" and not (record.interface and record.vlan):
            raise ValidationError("Не указан интерфейс или VLAN", field="interface")

    def _check_unique(self, table: str, record: Any) -> None:
        keys = UNIQUE_KEYS.get(table)
        if not keys:
            return
        value = tuple(getattr(record, k) for k in keys)
        for other in self._tables[table].values():
            if other.id != record.id and tuple(getattr(other, k) for k in keys) == value:
                raise StorageError(
                    f"Нарушена уникальность {table} ({', '.join(keys)}={value})",
                    table=table,
                    operation="update" if record.id in self._tables[table] else "insert",
                )

    def _validate(self, table: str, record: Any) -> None:
        """Бизнес-правила записи (пропускаются при validate=False)."""
        if table == "interface" and record.device not in self._tables["device"]:
            raise ValidationError("Устройство не найдено", field="device", value=record.device)
        if table == "ipblock":
            self._validate_ipblock(record)

    def _validate_ipblock(self, block: Ipblock) -> None:
        try:
            ip = ipaddress.ip_address(block.address)
        except ValueError:
            raise ValidationError("Неверный IP-адрес", field="address", value=block.address)

        if ip.version != block.version:
            raise ValidationError("Версия не совпадает с адресом", field="version", value=block.version)

        max_prefix = 32 if ip.version == 4 else 128
        if not 0 <= block.prefix <= max_prefix:
            raise ValidationError("Неверная длина префикса", field="prefix", value=block.prefix)

        network = ipaddress.ip_network(f"{ip}/{block.prefix}", strict=False)
        if block.status == IPBLOCK_STATUS_SUBNET and network.network_address != ip:
            raise ValidationError(
                "Адрес подсети не на границе сети",
                field="address",
                value=f"{block.address}/{block.prefix}",
            )

        # Адрес хоста не может совпадать с адресом существующей подсети (кроме /31, /127)
        if block.status == IPBLOCK_STATUS_STATIC:
            for other in self._tables["ipblock"].values():
                if (
                    other.id != block.id
                    and other.status == IPBLOCK_STATUS_SUBNET
                    and other.address == block.address
                    and other.prefix < max_prefix - 1
                ):
                    raise ValidationError(
                        f"Адрес совпадает с адресом подсети {other.cidr}",
                        field="address",
                        value=block.address,
                    )
