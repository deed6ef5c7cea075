"""Repository protocol definitions used by domain services."""

from __future__ import annotations

from typing import Optional, Protocol

from app.domain.models import Ledger


class KeyValueStore(Protocol):
    """Contract for the opaque-key byte store behind the ledger.

    Implementations raise PersistenceError when the backend is unavailable.
    """

    def get(self, key: str) -> Optional[bytes]: ...

    def set(self, key: str, value: bytes) -> None: ...

    def delete(self, key: str) -> None: ...


class LedgerRepositoryProtocol(Protocol):
    """Contract for loading and saving the whole ledger."""

    def load(self) -> Ledger: ...

    def save(self, ledger: Ledger) -> None: ...

    def clear(self) -> None: ...
