"""
Синхронизация интерфейсов из discovery.

Mixin класс для reconcile_from_discovery и reconcile_device.

Порядок синхронизации одного интерфейса:
1. Скалярные поля (doc_status = snmp)
2. MAC-адрес (PhysAddr)
3. Description (только если разрешён overwrite_descr)
4. Одно обновление интерфейса через update_interface
5. Членство во VLAN (+ STP)
6. IP-адреса и подсети (если не ignore_ip)

Ошибки вспомогательных элементов (MAC, VLAN, IP) не прерывают
синхронизацию: они логируются и попадают в result.warnings.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from .base import SyncBase
from ..core.constants import DOC_STATUS_SNMP, INTERFACE_STD_FIELDS, validate_physaddr
from ..core.domain.vlan import vid_from_interface_name
from ..core.exceptions import InventoryError, ValidationError, format_error_for_log
from ..core.logging import LogContext
from ..core.models import (
    BatchResult,
    DiscoveredInterface,
    Interface,
    PhysAddr,
    ReconcileResult,
    SyncWarning,
    normalize_stp_instances,
)

logger = logging.getLogger(__name__)

DiscoveredData = Union[Dict[str, Any], DiscoveredInterface]


class InterfacesSyncMixin:
    """Mixin для синхронизации интерфейсов из discovery."""

    def reconcile_from_discovery(
        self: SyncBase,
        interface: Union[Interface, int],
        discovered: DiscoveredData,
        add_subnets: Optional[bool] = None,
        subs_inherit: Optional[bool] = None,
        stp_instances: Optional[Dict[Any, Dict[str, Dict[Any, Any]]]] = None,
    ) -> ReconcileResult:
        """
        Обновляет интерфейс по данным опроса.

        Args:
            interface: Интерфейс или его ID
            discovered: Данные опроса (DiscoveredInterface или dict в формате SNMP info)
            add_subnets: Создавать подсети (None — из policy)
            subs_inherit: Подсети наследуют владельца устройства (None — из policy)
            stp_instances: Per-port STP карты (None — из discovered)

        Returns:
            ReconcileResult: Обновлённый интерфейс, изменения VLAN/IP, предупреждения

        Raises:
            NotFoundError: Интерфейс не найден
            ValidationError, UserError: Ошибка обновления самого интерфейса
        """
        discovered = DiscoveredInterface.ensure(discovered)
        interface = self._get_interface(interface)
        if add_subnets is None:
            add_subnets = self.policy.add_subnets
        if subs_inherit is None:
            subs_inherit = self.policy.subs_inherit
        if stp_instances is None:
            stp_instances = discovered.stp_instances
        else:
            stp_instances = normalize_stp_instances(stp_instances)

        label = self._get_label(interface)
        result = ReconcileResult(interface=interface)

        fields = {k: v for k, v in discovered.info.items() if k in INTERFACE_STD_FIELDS}
        if fields.get("number") is not None:
            fields["number"] = str(fields["number"])
        fields["doc_status"] = DOC_STATUS_SNMP

        if not discovered.physaddr:
            fields["physaddr"] = None
        else:
            address = validate_physaddr(discovered.physaddr)
            if address is None:
                message = f"неверный MAC-адрес {discovered.physaddr!r}"
                logger.warning(f"{self._log_prefix()}{label}: {message}")
                result.warnings.append(SyncWarning(item=f"physaddr {discovered.physaddr}", message=message))
            else:
                physaddr = self._resolve_physaddr(address, result.warnings)
                if physaddr:
                    fields["physaddr"] = physaddr.id

        if not interface.overwrite_descr:
            fields.pop("description", None)

        interface = self.update_interface(interface.id, fields)
        result.interface = interface

        if discovered.vlans is not None:
            self.sync_vlans(interface, discovered.vlans, stp_instances, result)

        if interface.ignore_ip:
            logger.debug(f"{self._log_prefix()}{label}: ignore_ip, IP-адреса пропущены")
        elif discovered.ips:
            vlan_id = self._select_ip_vlan(interface)
            for ip in discovered.ips:
                try:
                    resolution = self.resolve_ip(
                        interface,
                        ip.address,
                        mask=ip.mask,
                        add_subnets=add_subnets,
                        subs_inherit=subs_inherit,
                        vlan=vlan_id,
                    )
                except InventoryError as e:
                    logger.warning(f"{self._log_prefix()}{label}: пропущен IP {ip.address!r}: {e.message}")
                    result.warnings.append(SyncWarning(item=f"ip {ip.address}", message=e.message))
                    continue
                result.merge_ip(resolution)

        return result

    def _resolve_physaddr(
        self: SyncBase,
        address: str,
        warnings: List[SyncWarning],
    ) -> Optional[PhysAddr]:
        """Находит MAC-адрес (обновляя last_seen) или создаёт новый."""
        now = datetime.now()
        existing = self.store.find_one("physaddr", address=address)
        if existing:
            return self._safe_store_call(
                f"обновление physaddr {address}",
                warnings,
                self.store.update,
                "physaddr",
                existing.id,
                {"last_seen": now, "static": True},
                default=existing,
            )
        return self._safe_store_call(
            f"создание physaddr {address}",
            warnings,
            self.store.insert,
            "physaddr",
            {"address": address, "static": True, "first_seen": now, "last_seen": now},
        )

    def _select_ip_vlan(self: SyncBase, interface: Interface) -> Optional[int]:
        """
        VLAN для подсетей интерфейса.

        Единственное членство во VLAN, иначе VLAN из имени SVI (Vlan100),
        если такой VLAN уже есть.
        """
        memberships = self.store.search("interfacevlan", interface=interface.id)
        if len(memberships) == 1:
            return memberships[0].vlan

        vid = vid_from_interface_name(interface.name)
        if vid is not None:
            vlan = self.store.find_one("vlan", vid=vid)
            if vlan:
                return vlan.id
        return None

    # ==================== УСТРОЙСТВО ====================

    def reconcile_device(
        self: SyncBase,
        device_id: int,
        discovered_interfaces: Union[List[DiscoveredData], Dict[Any, DiscoveredData]],
        add_subnets: Optional[bool] = None,
        subs_inherit: Optional[bool] = None,
        stp_instances: Optional[Dict[Any, Dict[str, Dict[Any, Any]]]] = None,
    ) -> BatchResult:
        """
        Синхронизирует все интерфейсы устройства из опроса.

        Интерфейс ищется по (device, number), отсутствующий создаётся.
        Ошибка одного интерфейса не прерывает синхронизацию остальных.
        IP-дерево перестраивается один раз на изменённую версию IP.

        Args:
            device_id: ID устройства
            discovered_interfaces: Список интерфейсов или dict {number: данные}
            add_subnets: Создавать подсети (None — из policy)
            subs_inherit: Подсети наследуют владельца устройства (None — из policy)
            stp_instances: Per-port STP карты устройства

        Returns:
            BatchResult: Статистика и результаты по интерфейсам

        Raises:
            NotFoundError: Устройство не найдено
            ValidationError: Неверная карта stp_instances
        """
        device = self.store.find_by_id("device", device_id)
        batch = BatchResult()
        stp_instances = normalize_stp_instances(stp_instances)

        if isinstance(discovered_interfaces, dict):
            items = []
            for number, data in discovered_interfaces.items():
                if isinstance(data, dict) and "number" not in data:
                    data = {**data, "number": number}
                items.append(data)
        else:
            items = list(discovered_interfaces)

        logger.info(f"{self._log_prefix()}Синхронизация {len(items)} интерфейсов {device.label}")

        for data in items:
            raw_number = data.get("number") if isinstance(data, dict) else getattr(data, "number", None)
            number = str(raw_number) if raw_number is not None else None

            with LogContext(device=device.label, interface=number):
                try:
                    discovered = DiscoveredInterface.ensure(data)
                    if number is None:
                        raise ValidationError("Не указан номер интерфейса", field="number")

                    interface = self.store.find_one("interface", device=device_id, number=number)
                    created = interface is None
                    if created:
                        interface = self.create_interface({
                            "device": device_id,
                            "number": number,
                            "name": discovered.info.get("name"),
                            "doc_status": DOC_STATUS_SNMP,
                        })
                    result = self.reconcile_from_discovery(
                        interface,
                        discovered,
                        add_subnets=add_subnets,
                        subs_inherit=subs_inherit,
                        stp_instances=stp_instances,
                    )
                except InventoryError as e:
                    logger.error(
                        f"{self._log_prefix()}Ошибка синхронизации {device.label} "
                        f"[{number}]: {format_error_for_log(e)}"
                    )
                    batch.failed += 1
                    batch.errors.append({"number": number, **e.to_dict()})
                    continue

            if created:
                batch.created += 1
            else:
                batch.updated += 1
            batch.results.append(result)
            batch.ipv4_changed = batch.ipv4_changed or result.ipv4_changed
            batch.ipv6_changed = batch.ipv6_changed or result.ipv6_changed

        if batch.ipv4_changed:
            self.store.rebuild_ip_tree(4)
        if batch.ipv6_changed:
            self.store.rebuild_ip_tree(6)

        logger.info(
            f"{self._log_prefix()}Синхронизация интерфейсов {device.label}: "
            f"создано={batch.created}, обновлено={batch.updated}, "
            f"ошибок={batch.failed}, предупреждений={len(batch.warnings)}"
        )
        return batch
