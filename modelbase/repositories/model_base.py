"""
Model Base Repository Interface

Defines the generic data access interface shared by every row type.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Generic, Iterable, Optional

from modelbase.repositories.base import K, T
from modelbase.repositories.options import ListOpt, LockMode, Predicate


class ModelBase(ABC, Generic[K, T]):
    """
    Generic Repository Interface

    Not-found contract:
    - get / get_with_lock / get_by / get_with_lock_by return None
    - exist returns False
    - get_or_raise raises NotFoundError
    """

    @abstractmethod
    async def insert(self, *rows: T) -> None:
        """
        Insert rows in one batch

        No-op when called without rows. Generated keys are written back
        into the row instances.

        Raises:
            DuplicateKeyError: A primary-key or unique constraint was violated
            ExecutorError: Any other database failure
        """
        pass

    @abstractmethod
    async def upsert(self, row: T) -> None:
        """
        Insert a row, falling back to an update by primary key on duplicate key

        The fallback is a second statement; it is not atomic unless the caller
        wraps the call in a transaction.
        """
        pass

    @abstractmethod
    async def get(self, id: K) -> Optional[T]:
        """
        Get row by primary key

        Returns:
            T | None: Row, or None if it does not exist
        """
        pass

    @abstractmethod
    async def get_with_lock(self, lock: LockMode, id: K) -> Optional[T]:
        """Get row by primary key with a row lock"""
        pass

    @abstractmethod
    async def get_by(self, where: Predicate, *args: Any) -> Optional[T]:
        """
        Get the first row matching a predicate (ordered by primary key)

        Args:
            where: SQL text with "?" placeholders, or a SQLAlchemy expression
            args: Placeholder values
        """
        pass

    @abstractmethod
    async def get_with_lock_by(
        self, lock: LockMode, where: Predicate, *args: Any
    ) -> Optional[T]:
        """Get the first row matching a predicate with a row lock"""
        pass

    @abstractmethod
    async def get_or_raise(self, id: K) -> T:
        """
        Get row by primary key

        Raises:
            NotFoundError: Row does not exist
        """
        pass

    @abstractmethod
    async def update(self, row: T) -> None:
        """
        Update the non-None column attributes of a row, matched by primary key

        Raises:
            MissingPrimaryKeyError: Row has no primary key
        """
        pass

    @abstractmethod
    async def update_batch(
        self, fields: dict[str, Any], where: Predicate, *args: Any
    ) -> None:
        """Update fields on all rows matching a predicate"""
        pass

    @abstractmethod
    async def list(self, *opts: ListOpt) -> list[T]:
        """
        List rows, applying all options in order

        No filter returns all rows, no page option returns an unbounded list.
        """
        pass

    @abstractmethod
    async def list_map(self, *opts: ListOpt) -> dict[K, T]:
        """List rows indexed by primary key"""
        pass

    @abstractmethod
    async def list_by_ids(self, ids: Iterable[K]) -> list[T]:
        """List rows whose primary key is in ids"""
        pass

    @abstractmethod
    async def list_map_by_ids(self, ids: Iterable[K]) -> dict[K, T]:
        """List rows whose primary key is in ids, indexed by primary key"""
        pass

    @abstractmethod
    async def list_with_total(self, *opts: ListOpt) -> tuple[list[T], int]:
        """
        List rows and count all rows matching the same options

        Returns:
            tuple[list[T], int]: (Rows of the requested page, Total count)
        """
        pass

    @abstractmethod
    async def exist(self, where: Predicate, *args: Any) -> bool:
        """Check whether any row matches a predicate"""
        pass

    @abstractmethod
    async def count(self, *opts: ListOpt) -> int:
        """Count rows, applying only count-eligible options (filters)"""
        pass

    @abstractmethod
    async def delete(self, row: T) -> None:
        """
        Delete a row by primary key

        Raises:
            MissingPrimaryKeyError: Row has no primary key
        """
        pass

    @abstractmethod
    async def delete_batch(self, where: Predicate, *args: Any) -> None:
        """Delete all rows matching a predicate"""
        pass
