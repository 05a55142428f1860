"""
Domain logic для VLAN.

Разбор VID из discovery и из имён виртуальных L3 интерфейсов.
Не зависит от хранилища.
"""

import logging
from typing import Any, Optional

from ..constants import SVI_VLAN_PATTERN
from ..exceptions import ValidationError

logger = logging.getLogger(__name__)

MIN_VID = 1
MAX_VID = 4094


def parse_vid(value: Any) -> int:
    """
    Приводит VID к int и проверяет диапазон 1-4094.

    Raises:
        ValidationError: VID не число или вне диапазона
    """
    try:
        vid = int(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationError("Неверный VLAN ID", field="vid", value=value)
    if not MIN_VID <= vid <= MAX_VID:
        raise ValidationError("VLAN ID вне диапазона 1-4094", field="vid", value=value)
    return vid


def vid_from_interface_name(name: Optional[str]) -> Optional[int]:
    """
    Извлекает VID из имени SVI интерфейса.

    Examples:
        >>> vid_from_interface_name("Vlan100")
        100
        >>> vid_from_interface_name("GigabitEthernet0/1") is None
        True
    """
    if not name:
        return None
    match = SVI_VLAN_PATTERN.search(name)
    if not match:
        return None
    return int(match.group(1))
