"""
Синхронизация IP-адресов интерфейса.

Mixin класс для resolve_ip.

Для каждого адреса из discovery:
- loopback пропускается
- при наличии маски (и если разрешено) создаётся/обновляется подсеть
- адрес хоста (/32 или /128) создаётся или переназначается на интерфейс

IP-дерево при вставке не перестраивается: вызывающий получает флаги
ipv4_changed/ipv6_changed и перестраивает дерево один раз.
"""

import logging
from typing import Optional, Union

from .base import SyncBase
from ..core.constants import IPBLOCK_STATUS_STATIC, IPBLOCK_STATUS_SUBNET
from ..core.domain.ip import (
    get_subnet_addr,
    host_prefix,
    is_loopback,
    needs_subnet,
    normalize_address,
    parse_address,
)
from ..core.exceptions import ValidationError, format_error_for_log
from ..core.models import Device, Interface, Ipblock, IPResolution, SyncWarning

logger = logging.getLogger(__name__)


class IPAddressesSyncMixin:
    """Mixin для синхронизации IP-адресов."""

    def resolve_ip(
        self: SyncBase,
        interface: Interface,
        address: str,
        mask: Optional[Union[str, int]] = None,
        add_subnets: bool = False,
        subs_inherit: bool = False,
        vlan: Optional[int] = None,
    ) -> IPResolution:
        """
        Привязывает IP-адрес к интерфейсу.

        Args:
            interface: Интерфейс
            address: IP-адрес
            mask: Маска (dotted quad или длина префикса)
            add_subnets: Создавать подсеть по маске (только для L3 устройств)
            subs_inherit: Подсеть наследует owner/used_by устройства
            vlan: ID VLAN для подсети

        Returns:
            IPResolution: Блок хоста, подсеть, флаги изменения дерева

        Raises:
            ValidationError: Пустой или неверный адрес
        """
        if not address:
            raise ValidationError("Не указан IP-адрес", field="address")

        address = normalize_address(address)
        resolution = IPResolution()

        if is_loopback(address):
            logger.debug(f"{self._log_prefix()}Loopback {address} пропущен")
            return resolution

        version = parse_address(address).version
        label = self._get_label(interface)

        if mask and add_subnets:
            device = self.store.find_by_id("device", interface.device)
            if device.ipforwarding:
                resolution.subnet = self._resolve_subnet(
                    device, address, mask, subs_inherit, vlan, resolution
                )

        existing = self.store.find_one("ipblock", address=address, prefix=host_prefix(version))
        if existing:
            resolution.ipblock = self._reassign_host_ip(interface, existing, resolution)
        else:
            resolution.ipblock = self._safe_store_call(
                f"создание IP {address} ({label})",
                resolution.warnings,
                self.store.insert,
                "ipblock",
                {
                    "address": address,
                    "prefix": host_prefix(version),
                    "version": version,
                    "status": IPBLOCK_STATUS_STATIC,
                    "interface": interface.id,
                },
                update_tree=False,
            )
            if resolution.ipblock:
                resolution.mark_changed(version)
                logger.info(f"{self._log_prefix()}{label}: добавлен IP {address}")

        return resolution

    def _resolve_subnet(
        self: SyncBase,
        device: Device,
        address: str,
        mask: Union[str, int],
        subs_inherit: bool,
        vlan: Optional[int],
        resolution: IPResolution,
    ) -> Optional[Ipblock]:
        """Создаёт или обновляет подсеть адреса. Ошибка — предупреждение."""
        try:
            subnet_addr, subnet_prefix = get_subnet_addr(address, mask)
        except ValidationError as e:
            logger.warning(f"{self._log_prefix()}Неверная маска {mask!r} для {address}: {e.message}")
            resolution.warnings.append(SyncWarning(item=f"subnet {address}/{mask}", message=e.message))
            return None

        if not needs_subnet(address, subnet_addr, subnet_prefix):
            return None

        cidr = f"{subnet_addr}/{subnet_prefix}"
        subnet = self.store.find_one("ipblock", address=subnet_addr, prefix=subnet_prefix)
        if subnet:
            updates = {"status": IPBLOCK_STATUS_SUBNET}
            if vlan:
                updates["vlan"] = vlan
            logger.debug(f"{self._log_prefix()}Подсеть {cidr} уже есть, обновляем статус")
            return self._safe_store_call(
                f"обновление подсети {cidr}",
                resolution.warnings,
                self.store.update,
                "ipblock",
                subnet.id,
                updates,
                validate=False,
                default=subnet,
            )

        fields = {
            "address": subnet_addr,
            "prefix": subnet_prefix,
            "version": parse_address(address).version,
            "status": IPBLOCK_STATUS_SUBNET,
            "vlan": vlan,
        }
        if subs_inherit:
            fields["owner"] = device.owner
            fields["used_by"] = device.used_by

        subnet = self._safe_store_call(
            f"создание подсети {cidr}",
            resolution.warnings,
            self.store.insert,
            "ipblock",
            fields,
            update_tree=False,
        )
        if subnet:
            resolution.mark_changed(subnet.version)
            logger.info(f"{self._log_prefix()}Создана подсеть {cidr}")
        return subnet

    def _reassign_host_ip(
        self: SyncBase,
        interface: Interface,
        ipblock: Ipblock,
        resolution: IPResolution,
    ) -> Optional[Ipblock]:
        """
        Переназначает существующий адрес хоста на интерфейс.

        По умолчанию без валидации (адрес мог стать "неправильным" после
        изменения подсетей). С policy.revalidate_existing_ips ошибка
        валидации записывается предупреждением, затем выполняется
        обновление без валидации.
        """
        updates = {"status": IPBLOCK_STATUS_STATIC, "interface": interface.id}

        if self.policy.revalidate_existing_ips:
            try:
                return self.store.update("ipblock", ipblock.id, updates, validate=True)
            except ValidationError as e:
                logger.warning(
                    f"{self._log_prefix()}IP {ipblock.address} не прошёл валидацию: "
                    f"{format_error_for_log(e)}"
                )
                resolution.warnings.append(SyncWarning(item=f"ip {ipblock.address}", message=e.message))

        return self._safe_store_call(
            f"обновление IP {ipblock.address}",
            resolution.warnings,
            self.store.update,
            "ipblock",
            ipblock.id,
            updates,
            validate=False,
            default=ipblock,
        )
