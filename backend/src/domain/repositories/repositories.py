"""
Domain Repository Interfaces Module

These are abstract interfaces that define how the domain layer accesses data.
Concrete implementations are provided in the infrastructure layer.
This follows the Dependency Inversion Principle (DIP).
"""

from abc import ABC, abstractmethod
from typing import Optional

from src.domain.entities.entities import CachedPrediction


class PredictionStore(ABC):
    """
    Abstract key/value store for computed predictions.

    Entries are written whole and never updated in place; expiry policy
    lives outside the store, which may only use `ttl_seconds` as a hint
    for dropping entries on its own.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[CachedPrediction]:
        """Get the cached entry for a key, if any."""
        pass

    @abstractmethod
    def set(self, key: str, value: CachedPrediction, ttl_seconds: Optional[int] = None) -> None:
        """Store (or replace) the entry for a key."""
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Delete an entry. Returns True if something was removed."""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Remove every entry."""
        pass

    @abstractmethod
    def items(self) -> list[tuple[str, CachedPrediction]]:
        """List all stored entries with their keys."""
        pass

    def values(self) -> list[CachedPrediction]:
        """List all stored entries."""
        return [entry for _, entry in self.items()]
