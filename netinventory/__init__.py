"""
netinventory - Синхронизация инвентаря интерфейсов с данными опроса устройств.

Модуль поддерживает инвентарь сетевой топологии (интерфейсы, соседство,
членство во VLAN, IP-адреса и подсети) в согласованном состоянии:
- Жизненный цикл интерфейса (значения по умолчанию, удаление без висячих ссылок)
- Симметричные связи соседей (автоматические и закреплённые вручную)
- Синхронизация из discovery (поля, MAC, VLAN + STP, IP/подсети)

Примеры использования:
    from netinventory import InterfaceReconciler, MemoryStore, load_config

    config = load_config()
    reconciler = InterfaceReconciler(MemoryStore(), policy=config.policy)
    result = reconciler.reconcile_device(device_id, discovered_interfaces)
"""

__version__ = "1.0.0"

from .config import load_config, setup_logging_for_config
from .core.config_schema import PolicyConfig
from .core.domain.speed import format_speed
from .store import Store, MemoryStore
from .sync import InterfaceReconciler

__all__ = [
    "__version__",
    "load_config",
    "setup_logging_for_config",
    "PolicyConfig",
    "format_speed",
    "Store",
    "MemoryStore",
    "InterfaceReconciler",
]
