"""Storage adapters for the generator."""

from .base import DIALECT_CONFIG, StorageAdapter, get_dialect_config
from .memory import MemoryAdapter

__all__ = ["StorageAdapter", "MemoryAdapter", "DIALECT_CONFIG", "get_dialect_config"]
