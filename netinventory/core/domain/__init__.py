"""
Domain Layer для netinventory.

Чистые функции без обращения к хранилищу:
- format_speed: человекочитаемая скорость интерфейса
- ip: классификация адресов и вычисление подсетей
- vlan: разбор VID
"""

from .speed import format_speed
from .ip import (
    get_ip_version,
    get_subnet_addr,
    host_prefix,
    is_loopback,
    mask_to_prefix,
    needs_subnet,
    normalize_address,
)
from .vlan import parse_vid, vid_from_interface_name

__all__ = [
    "format_speed",
    "get_ip_version",
    "get_subnet_addr",
    "host_prefix",
    "is_loopback",
    "mask_to_prefix",
    "needs_subnet",
    "normalize_address",
    "parse_vid",
    "vid_from_interface_name",
]
