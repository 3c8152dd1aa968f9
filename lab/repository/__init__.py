"""
Storage adapters behind one interface.

``get_repository()`` returns the adapter named by the
``LAB_STORAGE_BACKEND`` setting: ``orm`` for the relational database,
``memory`` for the process-local embedded store.
"""
from __future__ import annotations

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

from .base import LabRepository

_memory_store = None


def get_repository(backend: str | None = None) -> LabRepository:
    global _memory_store
    backend = backend or getattr(settings, 'LAB_STORAGE_BACKEND', 'orm')
    if backend == 'orm':
        from .orm import OrmRepository
        return OrmRepository()
    if backend == 'memory':
        from .memory import MemoryRepository
        if _memory_store is None:
            _memory_store = MemoryRepository()
        return _memory_store
    raise ImproperlyConfigured(f"Unknown LAB_STORAGE_BACKEND {backend!r}")
