"""
Контекст выполнения для отслеживания циклов опроса.

RunContext прокидывается в InterfaceReconciler и попадает в каждую
строку лога как префикс [run_id], чтобы сообщения одного цикла
синхронизации можно было отфильтровать.

Пример использования:
    ctx = RunContext.create(triggered_by="cron")
    reconciler = InterfaceReconciler(store, policy=policy, context=ctx)
    reconciler.reconcile_device(device_id, discovered)
"""

import uuid
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Literal

logger = logging.getLogger(__name__)

TriggerSource = Literal["poller", "cron", "manual", "test"]


@dataclass
class RunContext:
    """
    Контекст одного цикла опроса.

    Attributes:
        run_id: Уникальный идентификатор запуска (timestamp или UUID)
        started_at: Время начала
        triggered_by: Источник запуска (poller/cron/manual/test)
        extra: Дополнительные данные контекста
    """

    run_id: str
    started_at: datetime
    triggered_by: TriggerSource = "poller"
    extra: dict = field(default_factory=dict)

    @classmethod
    def create(
        cls,
        triggered_by: TriggerSource = "poller",
        use_timestamp_id: bool = True,
    ) -> "RunContext":
        """
        Создаёт новый контекст выполнения.

        Args:
            triggered_by: Источник запуска
            use_timestamp_id: Использовать timestamp вместо UUID

        Returns:
            RunContext: Новый контекст
        """
        started_at = datetime.now()

        if use_timestamp_id:
            # Формат: 2026-10-18T12-30-22
            run_id = started_at.strftime("%Y-%m-%dT%H-%M-%S")
        else:
            run_id = str(uuid.uuid4())[:8]

        ctx = cls(run_id=run_id, started_at=started_at, triggered_by=triggered_by)
        logger.debug(f"Created RunContext: {ctx.run_id}")
        return ctx

    @property
    def elapsed_seconds(self) -> float:
        """Время выполнения в секундах."""
        return (datetime.now() - self.started_at).total_seconds()

    def log_prefix(self) -> str:
        """Префикс для логов вида "[run_id]"."""
        return f"[{self.run_id}]"

    def to_dict(self) -> dict:
        """Сериализует контекст в словарь для JSON/отчётов."""
        return {
            "run_id": self.run_id,
            "started_at": self.started_at.isoformat(),
            "triggered_by": self.triggered_by,
            "elapsed_seconds": self.elapsed_seconds,
            "extra": self.extra,
        }

    def __str__(self) -> str:
        return f"RunContext({self.run_id})"


# Глобальный контекст для случаев когда нет явного прокидывания
_current_context: Optional[RunContext] = None


def get_current_context() -> Optional[RunContext]:
    """Возвращает текущий глобальный контекст."""
    return _current_context


def set_current_context(ctx: Optional[RunContext]) -> None:
    """Устанавливает текущий глобальный контекст."""
    global _current_context
    _current_context = ctx


class RunContextFilter(logging.Filter):
    """
    Logging filter для добавления run_id в каждую запись.

    Использование:
        handler = logging.StreamHandler()
        handler.addFilter(RunContextFilter())
    """

    def filter(self, record: logging.LogRecord) -> bool:
        ctx = get_current_context()
        record.run_id = ctx.run_id if ctx else "-"
        return True
