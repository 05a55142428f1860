"""
Связи соседей между интерфейсами.

Mixin класс для add_neighbor, remove_neighbor, find_duplex_mismatches.

Соседство хранится двумя указателями (A.neighbor = B, B.neighbor = A).
Все изменения идут только через этот mixin, поэтому пара всегда симметрична.
Связь, закреплённая вручную (neighbor_fixed), автоматически не заменяется.
"""

import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional, Set, Tuple

from .base import SyncBase
from ..core.constants import NEIGHBOR_CLEAR_FIELDS
from ..core.exceptions import NotFoundError, UserError, ValidationError

logger = logging.getLogger(__name__)


class NeighborsMixin:
    """Mixin для управления соседством интерфейсов."""

    def add_neighbor(
        self: SyncBase,
        self_id: int,
        neighbor_id: int,
        fixed: bool = False,
        score: Optional[float] = None,
    ) -> bool:
        """
        Связывает два интерфейса соседями (симметрично).

        Args:
            self_id: ID интерфейса
            neighbor_id: ID интерфейса-соседа
            fixed: Закрепить связь вручную
            score: Оценка топологического поиска (только для лога)

        Returns:
            bool: True (в том числе если связь уже существует)

        Raises:
            ValidationError: Не указан сосед
            UserError: Интерфейс сам себе сосед или одна из сторон закреплена вручную
            NotFoundError: Интерфейс или сосед не найден
        """
        if not neighbor_id:
            raise ValidationError("Не указан ID соседа", field="neighbor")
        if neighbor_id == self_id:
            raise UserError("Интерфейс не может быть соседом самому себе")

        with self._locked_scope(self_id, neighbor_id):
            return self._link_neighbors(self_id, neighbor_id, fixed, score)

    def _link_neighbors(
        self: SyncBase,
        self_id: int,
        neighbor_id: int,
        fixed: bool,
        score: Optional[float],
    ) -> bool:
        interface = self._get_interface(self_id)
        try:
            neighbor = self.store.find_by_id("interface", neighbor_id)
        except NotFoundError:
            raise NotFoundError(
                f"Сосед не найден для {self._get_label(interface)}",
                table="interface",
                record_id=neighbor_id,
            )

        if interface.neighbor == neighbor.id and neighbor.neighbor == interface.id:
            return True

        for side in (interface, neighbor):
            if side.neighbor and side.neighbor_fixed:
                current = self._peer_label(side.neighbor)
                raise UserError(
                    f"{self._get_label(side)} вручную связан с {current}",
                    details={"interface": side.id, "neighbor": side.neighbor},
                )

        self.remove_neighbor(interface.id)
        self.remove_neighbor(neighbor.id)

        score_str = f" (score={score})" if score is not None else ""
        logger.info(
            f"{self._log_prefix()}Соседи: {self._get_label(interface)} <-> "
            f"{self._get_label(neighbor)}{score_str}"
        )

        for a, b in ((interface, neighbor), (neighbor, interface)):
            self.store.update(
                "interface",
                a.id,
                {"neighbor": b.id, "neighbor_fixed": bool(fixed), "neighbor_missed": 0},
            )
        return True

    def remove_neighbor(self: SyncBase, self_id: int) -> bool:
        """
        Удаляет соседство интерфейса с обеих сторон.

        Сбрасывает свой указатель и указатели всех интерфейсов, ссылающихся
        на этот. Повторный вызов ничего не меняет.

        Raises:
            NotFoundError: Интерфейс не найден
        """
        with self._locked_scope(self_id):
            interface = self._get_interface(self_id)

            for peer in self.store.search("interface", neighbor=self_id):
                self.store.update("interface", peer.id, dict(NEIGHBOR_CLEAR_FIELDS))
                logger.debug(
                    f"{self._log_prefix()}Удалён сосед {self._get_label(interface)} "
                    f"у {self._get_label(peer)}"
                )

            if interface.neighbor or interface.neighbor_fixed or interface.neighbor_missed:
                self.store.update("interface", self_id, dict(NEIGHBOR_CLEAR_FIELDS))
        return True

    @contextmanager
    def _locked_scope(self: SyncBase, *interface_ids: int) -> Iterator[None]:
        """
        Блокирует интерфейсы, затронутые изменением соседства указанных.

        Пока ждали блокировки, состав затронутых интерфейсов мог измениться:
        тогда блокировки отпускаются и набор вычисляется заново.
        """
        while True:
            scope = self._neighbor_scope(*interface_ids)
            with self._neighbor_guard(*scope):
                if self._neighbor_scope(*interface_ids) == scope:
                    yield
                    return

    def _neighbor_scope(self: SyncBase, *interface_ids: int) -> Set[int]:
        """Интерфейсы, которые затронет изменение соседства указанных."""
        scope: Set[int] = set()
        for record_id in interface_ids:
            scope.add(record_id)
            interface = self.store.find_one("interface", id=record_id)
            if interface and interface.neighbor:
                scope.add(interface.neighbor)
            scope.update(peer.id for peer in self.store.search("interface", neighbor=record_id))
        return scope

    def _peer_label(self: SyncBase, interface_id: int) -> str:
        peer = self.store.find_one("interface", id=interface_id)
        return self._get_label(peer) if peer else f"interface#{interface_id}"

    def find_duplex_mismatches(self: SyncBase) -> List[Tuple[int, int]]:
        """
        Ищет соседей с разным duplex.

        Пара попадает в результат если оба интерфейса в состоянии up, у обоих
        известен oper_duplex и значения различаются. Пары с устройствами из
        policy.ignore_duplex (по sysObjectID) пропускаются.

        Returns:
            List[Tuple[int, int]]: Пары ID интерфейсов (меньший ID первым)
        """
        ignore = set(self.policy.ignore_duplex)
        mismatches = []

        for interface in self.store.search("interface", oper_status="up"):
            if not interface.neighbor or interface.id > interface.neighbor:
                continue
            peer = self.store.find_one("interface", id=interface.neighbor)
            if peer is None or peer.oper_status != "up":
                continue
            if not interface.oper_duplex or not peer.oper_duplex:
                continue
            if interface.oper_duplex == peer.oper_duplex:
                continue

            if self._ignores_duplex(interface.device, ignore) or self._ignores_duplex(peer.device, ignore):
                logger.debug(
                    f"Duplex mismatch пропущен (ignore_duplex): "
                    f"{self._get_label(interface)} <-> {self._get_label(peer)}"
                )
                continue
            mismatches.append((interface.id, peer.id))

        return mismatches

    def _ignores_duplex(self: SyncBase, device_id: int, ignore: Set[str]) -> bool:
        if not ignore:
            return False
        device = self.store.find_one("device", id=device_id)
        return bool(device and device.sysobjectid and device.sysobjectid.lstrip(".") in ignore)
