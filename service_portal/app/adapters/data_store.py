"""
Data store interface consumed by the portal repositories.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Union


Row = Dict[str, Any]


@dataclass(frozen=True)
class Order:
    """Ordering clause for a select."""
    column: str
    ascending: bool = True


class DataStore(ABC):
    """Async table-oriented backend.

    Filters are equality matches on column values. Implementations raise
    :class:`shared.errors.DataStoreError` for backend failures; a single-row
    select that matches nothing returns ``None`` instead of raising.
    """

    name = "data_store"

    @abstractmethod
    async def select(
        self,
        table: str,
        filters: Optional[Mapping[str, Any]] = None,
        order: Optional[Order] = None,
        single: bool = False,
    ) -> Union[List[Row], Optional[Row]]:
        """Read rows from ``table``."""

    @abstractmethod
    async def insert(self, table: str, values: Mapping[str, Any]) -> Row:
        """Insert one row and return it as stored."""

    @abstractmethod
    async def update(self, table: str, filters: Mapping[str, Any], values: Mapping[str, Any]) -> Optional[Row]:
        """Update the row matching ``filters``; ``None`` when nothing matched."""

    @abstractmethod
    async def delete(self, table: str, filters: Mapping[str, Any]) -> None:
        """Delete rows matching ``filters``."""

    async def start(self) -> None:
        return None

    async def stop(self) -> None:
        return None

    async def health_check(self) -> bool:
        return True
