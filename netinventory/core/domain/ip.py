"""
Domain logic для IP-адресов.

Классификация адресов, вычисление подсети по маске.
Не зависит от хранилища.
"""

import ipaddress
import logging
from typing import Tuple, Union

from ..exceptions import ValidationError

logger = logging.getLogger(__name__)

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]

HOST_PREFIX = {4: 32, 6: 128}


def parse_address(address: str) -> IPAddress:
    """
    Разбирает строку IP-адреса.

    Raises:
        ValidationError: Пустой или неверный адрес
    """
    if not address:
        raise ValidationError("Не указан IP-адрес", field="address")
    try:
        return ipaddress.ip_address(str(address).strip())
    except ValueError:
        raise ValidationError("Неверный IP-адрес", field="address", value=address)


def normalize_address(address: str) -> str:
    """Каноническая строка адреса (IPv6 в сжатой форме)."""
    return str(parse_address(address))


def get_ip_version(address: str) -> int:
    """Версия IP по синтаксису адреса (4 или 6)."""
    return parse_address(address).version


def host_prefix(version: int) -> int:
    """Префикс хоста: 32 для IPv4, 128 для IPv6."""
    return HOST_PREFIX[version]


def is_loopback(address: str) -> bool:
    """
    Проверяет является ли адрес loopback (127.0.0.0/8, ::1).

    Examples:
        >>> is_loopback("127.0.0.1")
        True
        >>> is_loopback("10.0.0.1")
        False
    """
    return parse_address(address).is_loopback


def mask_to_prefix(mask: Union[str, int], version: int = 4) -> int:
    """
    Конвертирует маску сети в длину префикса.

    Args:
        mask: Маска 255.255.255.0, длина префикса "24"/24 или "/64"
        version: Версия IP (для проверки диапазона)

    Returns:
        int: Длина префикса

    Raises:
        ValidationError: Неверная маска

    Examples:
        >>> mask_to_prefix("255.255.255.252")
        30
        >>> mask_to_prefix("64", version=6)
        64
    """
    max_prefix = HOST_PREFIX[version]
    mask_str = str(mask).strip().lstrip("/")

    if mask_str.isdigit():
        prefix = int(mask_str)
        if prefix > max_prefix:
            raise ValidationError("Неверная длина префикса", field="mask", value=mask)
        return prefix

    if version != 4:
        raise ValidationError("Маска IPv6 должна быть длиной префикса", field="mask", value=mask)

    try:
        return ipaddress.IPv4Network(f"0.0.0.0/{mask_str}").prefixlen
    except ValueError:
        raise ValidationError("Неверная маска сети", field="mask", value=mask)


def get_subnet_addr(address: str, mask: Union[str, int]) -> Tuple[str, int]:
    """
    Вычисляет адрес и префикс подсети по адресу хоста и маске.

    Args:
        address: IP-адрес хоста
        mask: Маска или длина префикса

    Returns:
        Tuple[str, int]: (адрес сети, префикс)

    Examples:
        >>> get_subnet_addr("10.0.0.5", "255.255.255.252")
        ('10.0.0.4', 30)
    """
    ip = parse_address(address)
    prefix = mask_to_prefix(mask, version=ip.version)
    network = ipaddress.ip_network(f"{ip}/{prefix}", strict=False)
    return str(network.network_address), network.prefixlen


def needs_subnet(address: str, subnet_addr: str, subnet_prefix: int) -> bool:
    """
    Нужна ли отдельная запись подсети для адреса.

    Не нужна если адрес сети совпадает с адресом хоста (одиночный хост),
    кроме IPv4 /31 (point-to-point): там подсеть записывается всегда.
    """
    ip = parse_address(address)
    if ip.version == 4 and subnet_prefix == 31:
        return True
    return normalize_address(subnet_addr) != str(ip)
