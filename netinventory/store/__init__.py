"""
Хранилища инвентаря.

- base: Абстрактный контракт Store
- memory: MemoryStore (словари в памяти процесса)
"""

from .base import Store
from .memory import MemoryStore, UNIQUE_KEYS

__all__ = ["Store", "MemoryStore", "UNIQUE_KEYS"]
