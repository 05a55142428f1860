"""
Константы и маппинги netinventory.

Содержит:
- Списки полей интерфейса, синхронизируемых из discovery
- Маппинг STP полей membership ↔ per-port карт discovery
- Таблицу известных legacy скоростей
- Нормализацию MAC-адресов
"""

import re
from typing import Optional, Tuple

# Поля интерфейса, копируемые из discovery как есть (если присутствуют)
INTERFACE_STD_FIELDS: Tuple[str, ...] = (
    "number",
    "name",
    "type",
    "description",
    "speed",
    "admin_status",
    "oper_status",
    "admin_duplex",
    "oper_duplex",
    "stp_id",
    "bpdu_guard_enabled",
    "bpdu_filter_enabled",
    "loop_guard_enabled",
    "root_guard_enabled",
    "dp_remote_id",
    "dp_remote_ip",
    "dp_remote_port",
    "dp_remote_type",
)

# Поле InterfaceVlan → имя per-port карты в stp_instances
INTERFACE_VLAN_STP_FIELDS = {
    "stp_des_bridge": "i_stp_bridge",
    "stp_des_port": "i_stp_port",
    "stp_state": "i_stp_state",
}

# Поля сброса соседства
NEIGHBOR_CLEAR_FIELDS = {
    "neighbor": 0,
    "neighbor_fixed": False,
    "neighbor_missed": 0,
}

# Doc status: источник данных записи
DOC_STATUS_MANUAL = "manual"
DOC_STATUS_SNMP = "snmp"

# Статусы Ipblock
IPBLOCK_STATUS_STATIC = "Static"
IPBLOCK_STATUS_SUBNET = "Subnet"

# Имя MonitorStatus по умолчанию
MONITOR_STATUS_UNKNOWN = "Unknown"

# VLAN по умолчанию, не переименовывается автоматически
DEFAULT_VLAN_ID = 1

# Виртуальные L3 интерфейсы VLAN (SVI): Vlan100, Vlan-interface100 не матчится
SVI_VLAN_PATTERN = re.compile(r"Vlan(\d+)")

# Известные legacy скорости (bps → название)
SPEED_MAP = {
    1536000: "T1",
    1544000: "T1",
    3072000: "Dual T1",
    3088000: "Dual T1",
    44210000: "T3",
    44736000: "T3",
    45045000: "DS3",
    46359642: "DS3",
    149760000: "ATM on OC-3",
    155000000: "OC-3",
    155519000: "OC-3",
    155520000: "OC-3",
    599040000: "ATM on OC-12",
    622000000: "OC-12",
    622080000: "OC-12",
}

# Неверные MAC (нули и broadcast)
INVALID_MACS = frozenset({"000000000000", "ffffffffffff"})


def normalize_mac_raw(mac: str) -> str:
    """
    Нормализует MAC-адрес в сырой формат (12 символов, нижний регистр).

    Args:
        mac: MAC-адрес в любом формате

    Returns:
        str: 12 символов в нижнем регистре (aabbccddeeff) или ""
    """
    if not mac:
        return ""
    mac_clean = str(mac).strip().lower()
    for char in [":", "-", ".", " "]:
        mac_clean = mac_clean.replace(char, "")
    if len(mac_clean) != 12:
        return ""
    if any(c not in "0123456789abcdef" for c in mac_clean):
        return ""
    return mac_clean


def validate_physaddr(mac: str) -> Optional[str]:
    """
    Проверяет и нормализует MAC для хранения (AA:BB:CC:DD:EE:FF).

    Args:
        mac: MAC-адрес в любом формате

    Returns:
        str или None если адрес неверный (формат, нули, broadcast)

    Examples:
        >>> validate_physaddr("0011.2233.4455")
        '00:11:22:33:44:55'
        >>> validate_physaddr("00:00:00:00:00:00") is None
        True
    """
    clean = normalize_mac_raw(mac)
    if not clean or clean in INVALID_MACS:
        return None
    return ":".join(clean[i : i + 2].upper() for i in range(0, 12, 2))
