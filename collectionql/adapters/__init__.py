from __future__ import annotations

from .memory import MemoryPaginator, memory_key_reader

__all__ = ['MemoryPaginator', 'memory_key_reader']
