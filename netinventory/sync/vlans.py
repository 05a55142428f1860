"""
Синхронизация членства интерфейса во VLAN.

Mixin класс для sync_vlans.

Членство из discovery сравнивается с сохранённым: недостающие VLAN
и членства создаются, лишние членства удаляются. STP атрибуты
записываются в членство если для устройства известен STP instance.
"""

import logging
from typing import Any, Dict, List, Optional

from .base import SyncBase
from ..core.constants import DEFAULT_VLAN_ID, INTERFACE_VLAN_STP_FIELDS
from ..core.domain.vlan import parse_vid
from ..core.exceptions import InventoryError
from ..core.models import (
    DiscoveredVlan,
    Interface,
    InterfaceVlan,
    ReconcileResult,
    SyncWarning,
    Vlan,
    normalize_stp_instances,
)

logger = logging.getLogger(__name__)


def _port_key(number: Any) -> Any:
    """Номер интерфейса как ключ per-port карт STP."""
    if isinstance(number, str) and number.strip().isdigit():
        return int(number.strip())
    return number


class VLANsSyncMixin:
    """Mixin для синхронизации членства во VLAN."""

    def sync_vlans(
        self: SyncBase,
        interface: Interface,
        vlans: List[DiscoveredVlan],
        stp_instances: Optional[Dict[Any, Dict[str, Dict[Any, Any]]]] = None,
        result: Optional[ReconcileResult] = None,
    ) -> ReconcileResult:
        """
        Приводит членство интерфейса во VLAN к списку из discovery.

        Args:
            interface: Интерфейс
            vlans: VLAN из discovery (пустой список удаляет всё членство)
            stp_instances: Per-port STP карты устройства
            result: Результат для накопления (если None — создаётся новый)

        Returns:
            ReconcileResult: vlans_added, vlans_removed, warnings
        """
        if result is None:
            result = ReconcileResult(interface=interface)
        stp_instances = normalize_stp_instances(stp_instances) or {}
        label = self._get_label(interface)

        # Снимок текущего членства: membership_id -> InterfaceVlan
        leftover: Dict[int, InterfaceVlan] = {
            m.id: m for m in self.store.search("interfacevlan", interface=interface.id)
        }

        for discovered in vlans:
            try:
                vid = parse_vid(discovered.vid)
            except InventoryError as e:
                logger.warning(f"{self._log_prefix()}{label}: пропущен VLAN {discovered.vid!r}: {e.message}")
                result.warnings.append(SyncWarning(item=f"vlan {discovered.vid}", message=e.message))
                continue

            vlan = self._get_or_create_vlan(vid, discovered.name, result.warnings)
            if vlan is None:
                continue

            membership = self.store.find_one("interfacevlan", interface=interface.id, vlan=vlan.id)
            if membership:
                leftover.pop(membership.id, None)
            else:
                membership = self._safe_store_call(
                    f"создание членства {label} во VLAN {vid}",
                    result.warnings,
                    self.store.insert,
                    "interfacevlan",
                    {"interface": interface.id, "vlan": vlan.id},
                )
                if membership is None:
                    continue
                result.vlans_added.append(vid)
                logger.info(f"{self._log_prefix()}{label}: добавлен VLAN {vid}")

            if discovered.stp_instance is not None:
                self._update_membership_stp(
                    interface, membership, discovered.stp_instance, stp_instances, result.warnings
                )

        for membership in leftover.values():
            vlan = self.store.find_one("vlan", id=membership.vlan)
            self.store.delete("interfacevlan", membership.id)
            vid = vlan.vid if vlan else membership.vlan
            result.vlans_removed.append(vid)
            logger.info(f"{self._log_prefix()}{label}: удалён VLAN {vid}")

        return result

    def _get_or_create_vlan(
        self: SyncBase,
        vid: int,
        name: Optional[str],
        warnings: List[SyncWarning],
    ) -> Optional[Vlan]:
        """
        Находит VLAN по VID или создаёт.

        Имя существующего VLAN обновляется если discovery сообщил другое,
        кроме VLAN 1.
        """
        vlan = self.store.find_one("vlan", vid=vid)
        if vlan is None:
            vlan = self._safe_store_call(
                f"создание VLAN {vid}",
                warnings,
                self.store.insert,
                "vlan",
                {"vid": vid, "name": name},
            )
            if vlan:
                logger.info(f"{self._log_prefix()}Создан VLAN {vid} ({name})")
            return vlan

        if name and vlan.name != name and vid != DEFAULT_VLAN_ID:
            logger.info(f"{self._log_prefix()}VLAN {vid}: имя {vlan.name!r} -> {name!r}")
            vlan = self._safe_store_call(
                f"переименование VLAN {vid}",
                warnings,
                self.store.update,
                "vlan",
                vlan.id,
                {"name": name},
                default=vlan,
            )
        return vlan

    def _update_membership_stp(
        self: SyncBase,
        interface: Interface,
        membership: InterfaceVlan,
        instance_number: Any,
        stp_instances: Dict[Any, Dict[str, Dict[Any, Any]]],
        warnings: List[SyncWarning],
    ) -> None:
        """Записывает STP instance и per-port STP атрибуты в членство."""
        instance = self.store.find_one("stpinstance", device=interface.device, number=instance_number)
        if instance is None:
            message = f"STP instance {instance_number} не найден"
            logger.warning(f"{self._log_prefix()}{self._get_label(interface)}: {message}")
            warnings.append(SyncWarning(item=f"stp instance {instance_number}", message=message))
            return

        port = _port_key(interface.number)
        maps = stp_instances.get(instance_number) or {}
        updates: Dict[str, Any] = {"stp_instance": instance.id}
        for field_name, method in INTERFACE_VLAN_STP_FIELDS.items():
            per_port = maps.get(method) or {}
            if port in per_port:
                updates[field_name] = per_port[port]

        self._safe_store_call(
            f"обновление STP {self._get_label(interface)}",
            warnings,
            self.store.update,
            "interfacevlan",
            membership.id,
            updates,
        )
