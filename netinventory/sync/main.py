"""
Главный класс InterfaceReconciler, объединяющий все sync-операции.

Использует mixin-классы для организации кода по доменам:
- InterfaceLifecycleMixin: create_interface, update_interface, delete_interface
- NeighborsMixin: add_neighbor, remove_neighbor, find_duplex_mismatches
- InterfacesSyncMixin: reconcile_from_discovery, reconcile_device
- VLANsSyncMixin: sync_vlans
- IPAddressesSyncMixin: resolve_ip
"""

from typing import Optional

from .base import SyncBase
from .lifecycle import InterfaceLifecycleMixin
from .neighbors import NeighborsMixin
from .interfaces import InterfacesSyncMixin
from .vlans import VLANsSyncMixin
from .ip_addresses import IPAddressesSyncMixin
from ..store.base import Store
from ..core.config_schema import PolicyConfig
from ..config import load_config, setup_logging_for_config
from ..core.context import RunContext, TriggerSource, set_current_context
from ..core.domain.speed import format_speed


class InterfaceReconciler(
    InterfaceLifecycleMixin,
    NeighborsMixin,
    InterfacesSyncMixin,
    VLANsSyncMixin,
    IPAddressesSyncMixin,
    SyncBase,
):
    """
    Синхронизация инвентаря интерфейсов.

    ВАЖНО: Соседство меняется только через add_neighbor/remove_neighbor
    (или update_interface с ключом neighbor), иначе пара перестанет быть
    симметричной.

    Attributes:
        store: Хранилище инвентаря
        policy: Политики инвентаризации
        ctx: Контекст выполнения

    Example:
        reconciler = InterfaceReconciler(store, policy=config.policy)

        # Синхронизация по опросу устройства
        batch = reconciler.reconcile_device(device_id, snmp_interfaces)

        # Закрепить связь вручную
        reconciler.update_interface(10, {"neighbor": 20, "neighbor_fixed": True})

    Доступные методы:
        - create_interface(fields)
        - update_interface(interface_id, fields)
        - delete_interface(interface_id)
        - add_neighbor(self_id, neighbor_id, fixed, score)
        - remove_neighbor(self_id)
        - find_duplex_mismatches()
        - reconcile_from_discovery(interface, discovered, ...)
        - reconcile_device(device_id, discovered_interfaces, ...)
        - resolve_ip(interface, address, mask, ...)
        - format_speed(speed)
        - from_config(store, config_file)  (config.yaml + логирование)
    """

    format_speed = staticmethod(format_speed)

    def __init__(
        self,
        store: Store,
        policy: Optional[PolicyConfig] = None,
        context: Optional[RunContext] = None,
    ):
        """
        Инициализация синхронизатора.

        Args:
            store: Хранилище инвентаря
            policy: Политики инвентаризации
            context: Контекст выполнения
        """
        super().__init__(store=store, policy=policy, context=context)

    @classmethod
    def from_config(
        cls,
        store: Store,
        config_file: Optional[str] = None,
        triggered_by: TriggerSource = "poller",
    ) -> "InterfaceReconciler":
        """
        Создаёт синхронизатор из config.yaml.

        Загружает конфигурацию, настраивает логирование (консоль, файл,
        ротация) и создаёт глобальный контекст выполнения.

        Args:
            store: Хранилище инвентаря
            config_file: Путь к YAML (None — автопоиск)
            triggered_by: Источник запуска для RunContext

        Raises:
            ConfigError: Конфигурация не загружается или невалидна
        """
        config = load_config(config_file)
        setup_logging_for_config(config)

        ctx = RunContext.create(triggered_by=triggered_by)
        set_current_context(ctx)
        return cls(store, policy=config.policy, context=ctx)
