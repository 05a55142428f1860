"""
Контракт хранилища инвентаря.

InterfaceReconciler не знает как устроено хранилище: он вызывает только
примитивы этого класса. Ошибки хранилища выбрасываются типизированными
исключениями (NotFoundError, ValidationError, StorageError).

Пример создания своего хранилища:
    class SQLStore(Store):
        def find_by_id(self, table, record_id):
            row = self.session.get(...)
            ...
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


class Store(ABC):
    """
    Абстрактное хранилище сущностей инвентаря.

    Таблицы: device, monitorstatus, interface, physaddr, vlan,
    interfacevlan, stpinstance, ipblock (см. models.TABLES).
    Методы возвращают dataclass сущности (models.Interface, ...).
    """

    @abstractmethod
    def find_by_id(self, table: str, record_id: int) -> Any:
        """
        Возвращает запись по ID.

        Raises:
            NotFoundError: Записи нет
        """

    @abstractmethod
    def find_one(self, table: str, **criteria: Any) -> Optional[Any]:
        """Возвращает первую запись по равенству полей или None."""

    @abstractmethod
    def search(self, table: str, **criteria: Any) -> List[Any]:
        """Возвращает все записи по равенству полей (упорядочены по ID)."""

    @abstractmethod
    def insert(
        self,
        table: str,
        fields: Dict[str, Any],
        validate: bool = True,
        update_tree: bool = True,
    ) -> Any:
        """
        Создаёт запись.

        Args:
            table: Таблица
            fields: Значения полей
            validate: Проверять бизнес-правила записи
            update_tree: Перестроить IP-дерево сразу (только ipblock)

        Raises:
            ValidationError: Неверные или неизвестные поля
            StorageError: Нарушение уникальности
        """

    @abstractmethod
    def update(
        self,
        table: str,
        record_id: int,
        fields: Dict[str, Any],
        validate: bool = True,
    ) -> Any:
        """Обновляет запись и возвращает её новое состояние."""

    @abstractmethod
    def delete(self, table: str, record_id: int) -> None:
        """Удаляет запись."""

    @abstractmethod
    def rebuild_ip_tree(self, version: int) -> None:
        """Перестраивает иерархию IP-блоков указанной версии."""
