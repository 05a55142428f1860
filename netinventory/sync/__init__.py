"""
Модуль синхронизации инвентаря интерфейсов.

Разбит на логические части:
- base: Базовые методы и утилиты
- lifecycle: Создание, обновление, удаление интерфейсов
- neighbors: Соседство интерфейсов
- interfaces: Синхронизация из discovery
- vlans: Членство во VLAN
- ip_addresses: IP-адреса и подсети

Использование:
    from netinventory.sync import InterfaceReconciler
"""

from .main import InterfaceReconciler
from .lifecycle import apply_interface_defaults

__all__ = ["InterfaceReconciler", "apply_interface_defaults"]
