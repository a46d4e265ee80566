"""
TableTalk Core - Base Repository.

Abstract base class for all repositories following the repository pattern.
"""

from abc import ABC, abstractmethod
from typing import Any, Generic, TypeVar

from supabase import Client

from tabletalk.core.supabase_client import get_supabase_client

T = TypeVar("T")


class BaseRepository(ABC, Generic[T]):
    """
    Abstract base repository for database operations.

    All module repositories should inherit from this class.
    """

    def __init__(self, client: Client | None = None):
        """Initialize repository with optional Supabase client."""
        self._client = client or get_supabase_client()

    @property
    @abstractmethod
    def table_name(self) -> str:
        """Return the table name for this repository."""
        ...

    @property
    def table(self):
        """Get the Supabase table reference."""
        return self._client.table(self.table_name)

    async def find(
        self,
        filters: dict[str, Any],
        order_by: str = "created_at",
        desc: bool = False,
        limit: int | None = None,
    ) -> list[T]:
        """
        List records matching all filters, ordered by a column.

        Args:
            filters: Column equality filters (AND)
            order_by: Column to order by
            desc: Descending order
            limit: Optional maximum number of records

        Returns:
            Matching records
        """
        query = self.table.select("*")
        for key, value in filters.items():
            query = query.eq(key, value)
        query = query.order(order_by, desc=desc)
        if limit is not None:
            query = query.limit(limit)
        response = query.execute()
        return response.data or []

    async def create(self, data: dict[str, Any]) -> T:
        """
        Create a new record.

        Args:
            data: The record data

        Returns:
            The created record
        """
        response = self.table.insert(data).execute()
        return response.data[0]

    async def update_where(self, filters: dict[str, Any], data: dict[str, Any]) -> list[T]:
        """
        Update records matching all filters.

        Args:
            filters: Column equality filters (AND)
            data: The update data

        Returns:
            The updated records (empty when nothing matched)
        """
        query = self.table.update(data)
        for key, value in filters.items():
            query = query.eq(key, value)
        response = query.execute()
        return response.data or []

    async def delete_where(self, filters: dict[str, Any]) -> int:
        """
        Delete records matching all filters.

        Returns:
            Number of deleted records
        """
        query = self.table.delete()
        for key, value in filters.items():
            query = query.eq(key, value)
        response = query.execute()
        return len(response.data or [])
