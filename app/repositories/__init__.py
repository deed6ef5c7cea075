"""
Persistence layer: the key-value sales store and the ledger repository on top of it.
"""

from .kv_store import FileStore, InMemoryStore
from .ledger_repository import LedgerRepository

__all__ = [
    "FileStore",
    "InMemoryStore",
    "LedgerRepository",
]
