"""
Базовые классы и утилиты для синхронизации инвентаря.

Содержит:
- Базовый класс SyncBase с общими методами
- Обёртку вызовов хранилища для некритичных операций
"""

import logging
import threading
from contextlib import ExitStack, contextmanager
from typing import Any, Callable, Dict, Iterator, List, Optional, Union

from ..store.base import Store
from ..core.config_schema import PolicyConfig
from ..core.context import RunContext, get_current_context
from ..core.constants import MONITOR_STATUS_UNKNOWN
from ..core.models import Interface, SyncWarning
from ..core.exceptions import InventoryError, NotFoundError, format_error_for_log

logger = logging.getLogger(__name__)


class SyncBase:
    """
    Базовый класс для синхронизации инвентаря.

    Содержит общие атрибуты и вспомогательные методы,
    используемые во всех sync-операциях.
    """

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
            policy: Политики (если None — значения по умолчанию)
            context: Контекст выполнения (если None — использует глобальный)
        """
        self.store = store
        self.policy = policy or PolicyConfig()
        self.ctx = context or get_current_context()

        # Блокировки соседства: interface_id -> RLock
        self._neighbor_locks: Dict[int, threading.RLock] = {}
        self._neighbor_locks_guard = threading.Lock()

    def _log_prefix(self) -> str:
        """Возвращает префикс для логов с run_id."""
        if self.ctx:
            return f"[{self.ctx.run_id}] "
        return ""

    # ==================== ПОИСК ====================

    def _get_interface(self, interface: Union[Interface, int]) -> Interface:
        """
        Перечитывает интерфейс из хранилища.

        Raises:
            NotFoundError: Интерфейс не найден
        """
        record_id = interface.id if isinstance(interface, Interface) else interface
        return self.store.find_by_id("interface", record_id)

    def _get_label(self, interface: Interface) -> str:
        """Метка интерфейса для сообщений: "device [name]" (или номер)."""
        try:
            device_name = self.store.find_by_id("device", interface.device).label
        except NotFoundError:
            device_name = f"device#{interface.device}"
        return f"{device_name} [{interface.name or interface.number}]"

    def _unknown_status_id(self) -> int:
        """ID MonitorStatus "Unknown" (0 если его нет)."""
        status = self.store.find_one("monitorstatus", name=MONITOR_STATUS_UNKNOWN)
        return status.id if status else 0

    # ==================== БЛОКИРОВКИ ====================

    @contextmanager
    def _neighbor_guard(self, *interface_ids: int) -> Iterator[None]:
        """
        Захватывает блокировки соседства интерфейсов.

        Порядок захвата — по возрастанию ID, чтобы встречные вызовы
        add_neighbor(a, b) и add_neighbor(b, a) не блокировали друг друга.
        """
        ids = sorted({i for i in interface_ids if i})
        with self._neighbor_locks_guard:
            locks = [self._neighbor_locks.setdefault(i, threading.RLock()) for i in ids]
        with ExitStack() as stack:
            for lock in locks:
                stack.enter_context(lock)
            yield

    def _release_neighbor_lock(self, interface_id: int) -> None:
        """Удаляет блокировку соседства удалённого интерфейса."""
        with self._neighbor_locks_guard:
            self._neighbor_locks.pop(interface_id, None)

    # ==================== ОБРАБОТКА ОШИБОК ====================

    def _safe_store_call(
        self,
        operation: str,
        warnings: List[SyncWarning],
        fn: Callable,
        *args,
        default: Any = None,
        **kwargs,
    ) -> Any:
        """
        Выполняет вызов хранилища, ошибка которого не должна прерывать синхронизацию.

        Ошибка логируется и добавляется в warnings.

        Args:
            operation: Описание операции (для лога и SyncWarning.item)
            warnings: Список предупреждений результата
            fn: Функция для вызова
            default: Значение при ошибке

        Example:
            physaddr = self._safe_store_call(
                f"создание physaddr {address}", result.warnings,
                self.store.insert, "physaddr", {"address": address},
            )
        """
        try:
            return fn(*args, **kwargs)
        except InventoryError as e:
            logger.warning(f"{self._log_prefix()}Ошибка {operation}: {format_error_for_log(e)}")
            warnings.append(SyncWarning(item=operation, message=e.message))
            return default
