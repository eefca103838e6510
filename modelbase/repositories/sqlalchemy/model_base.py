"""
Model Base Repository SQLAlchemy Implementation

Provides the generic CRUD/query implementation over an AsyncSession for any
mapped row type.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Awaitable, Iterable, Optional, TypeVar

from sqlalchemy import delete, inspect, update
from sqlalchemy.exc import IntegrityError, NoInspectionAvailable, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Mapper

from modelbase.common.db_errors import is_duplicate_key_error
from modelbase.common.errors import (
    ConfigurationError,
    DuplicateKeyError,
    ExecutorError,
    InvalidOptionError,
    MissingPrimaryKeyError,
    NotFoundError,
    QueryTimeoutError,
    ValidationError,
)
from modelbase.config import get_settings
from modelbase.repositories.base import K, T
from modelbase.repositories.model_base import ModelBase
from modelbase.repositories.options import (
    ListOpt,
    LockMode,
    Predicate,
    QueryBuilder,
    build_predicate,
)

logger = logging.getLogger(__name__)

R = TypeVar("R")

_UNSET: Any = object()


def inspect_row_type(model: Any) -> Mapper:
    """
    Validate that a row type can be managed by a repository

    Args:
        model: Row class

    Returns:
        Mapper: SQLAlchemy mapper of the row class

    Raises:
        ConfigurationError: Not a mapped class, no table name, no get_id(), or
            not exactly one primary-key column
    """
    if not isinstance(model, type):
        raise ConfigurationError(
            f"Repository requires a mapped row class, got instance of {type(model).__name__}",
            details={"row_type": repr(model)},
        )
    try:
        mapper = inspect(model)
    except NoInspectionAvailable as exc:
        raise ConfigurationError(
            f"{model.__name__} is not a SQLAlchemy mapped class",
            details={"row_type": model.__name__},
        ) from exc

    if not isinstance(getattr(model, "__tablename__", None), str):
        raise ConfigurationError(
            f"{model.__name__} does not declare __tablename__",
            details={"row_type": model.__name__},
        )
    if not callable(getattr(model, "get_id", None)):
        raise ConfigurationError(
            f"{model.__name__} does not implement get_id()",
            details={"row_type": model.__name__},
        )
    if len(mapper.primary_key) != 1:
        raise ConfigurationError(
            f"{model.__name__} must have exactly one primary key column",
            details={
                "row_type": model.__name__,
                "primary_key": [c.name for c in mapper.primary_key],
            },
        )
    return mapper


class SQLAlchemyModelBase(ModelBase[K, T]):
    """
    Generic Repository SQLAlchemy Implementation

    One instance per row type. The instance keeps no per-call state: every
    call folds its options into a fresh QueryBuilder and issues its own
    statement, so it can be shared by any code using the same session.

    Example:
        users = SQLAlchemyModelBase[int, User](session, User)
        await users.insert(User(name="John", age=18), User(name="Mary", age=20))
        page = await users.list(
            where_opt("`age` >= ?", 18),
            sort_opt("age", SortOrder.DESC),
            page_opt(2, 10),
        )
    """

    def __init__(
        self,
        session: AsyncSession,
        model: type[T],
        auto_commit: Optional[bool] = None,
        timeout: Optional[float] = _UNSET,
    ):
        """
        Initialize Repository

        Args:
            session: Async database session. Create it with expire_on_commit=False
                (see modelbase.db.session) so rows stay readable after commit.
            model: Mapped row class
            auto_commit: Commit after each write, defaults to Settings.AUTO_COMMIT.
                With False, writes only flush and the caller owns the transaction.
            timeout: Deadline per executor call in seconds, defaults to
                Settings.QUERY_TIMEOUT_SECONDS; None disables it

        Raises:
            ConfigurationError: model is not a valid row type
        """
        self._mapper = inspect_row_type(model)
        settings = get_settings()

        self.session = session
        self.model = model
        self.table_name: str = model.__tablename__
        self.auto_commit = settings.AUTO_COMMIT if auto_commit is None else auto_commit
        self.timeout = settings.QUERY_TIMEOUT_SECONDS if timeout is _UNSET else timeout

        pk_column = self._mapper.primary_key[0]
        self._pk_key = self._mapper.get_property_by_column(pk_column).key
        self._pk = getattr(model, self._pk_key)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _details(self, operation: str, **extra: Any) -> dict[str, Any]:
        return {"operation": operation, "table": self.table_name, **extra}

    async def _run(self, awaitable: Awaitable[R]) -> R:
        """Await an executor call under the repository deadline"""
        if self.timeout is None:
            return await awaitable
        return await asyncio.wait_for(awaitable, timeout=self.timeout)

    async def _rollback(self) -> None:
        if not self.auto_commit:
            return
        try:
            await self.session.rollback()
        except SQLAlchemyError:
            logger.exception("Rollback failed on %s", self.table_name)

    async def _commit(self) -> None:
        if self.auto_commit:
            await self._run(self.session.commit())
        else:
            await self._run(self.session.flush())

    @asynccontextmanager
    async def _guard(
        self, operation: str, savepoint: bool = False
    ) -> AsyncIterator[None]:
        """
        Translate executor failures into repository errors

        With savepoint=True the statement ran inside a SAVEPOINT, so a
        constraint violation has already been undone there and the session
        transaction is left alone.
        """
        try:
            yield
        except asyncio.TimeoutError as exc:
            logger.warning(
                "%s on %s timed out after %ss", operation, self.table_name, self.timeout
            )
            await self._rollback()
            raise QueryTimeoutError(
                f"{operation} on {self.table_name} timed out",
                details=self._details(operation, timeout=self.timeout),
            ) from exc
        except IntegrityError as exc:
            if not savepoint:
                await self._rollback()
            if is_duplicate_key_error(exc):
                raise DuplicateKeyError(
                    f"Duplicate key on {operation} into {self.table_name}",
                    details=self._details(operation),
                ) from exc
            logger.warning("%s on %s failed: %s", operation, self.table_name, exc)
            raise ExecutorError(
                f"{operation} on {self.table_name} failed",
                code="constraint_violation",
                details=self._details(operation),
            ) from exc
        except SQLAlchemyError as exc:
            logger.warning("%s on %s failed: %s", operation, self.table_name, exc)
            await self._rollback()
            raise ExecutorError(
                f"{operation} on {self.table_name} failed",
                details=self._details(operation),
            ) from exc

    def _check_row(self, row: Any, operation: str) -> None:
        if not isinstance(row, self.model):
            raise ValidationError(
                f"{operation} on {self.table_name} expects {self.model.__name__} rows",
                details=self._details(operation, row_type=type(row).__name__),
            )

    def _require_id(self, row: T, operation: str) -> K:
        self._check_row(row, operation)
        id = row.get_id()
        if id is None:
            raise MissingPrimaryKeyError(
                f"{operation} on {self.table_name} requires a primary key",
                details=self._details(operation),
            )
        return id

    def _identity_conflict(self, row: T) -> bool:
        """
        Check whether the session already holds another row with the same key

        The session would refuse to flush such a row, so it is reported the
        same way as a database duplicate key.
        """
        id = row.get_id()
        if id is None:
            return False
        key = self._mapper.identity_key_from_primary_key([id])
        existing = self.session.identity_map.get(key)
        return existing is not None and existing is not row

    def _column_values(self, row: T) -> dict[str, Any]:
        """Loaded, non-None column attributes of a row, primary key excluded"""
        state = inspect(row)
        values = {}
        for attr in self._mapper.column_attrs:
            if attr.key == self._pk_key:
                continue
            value = state.dict.get(attr.key)
            if value is not None:
                values[attr.key] = value
        return values

    def _fold(self, opts: Iterable[ListOpt], count_only: bool = False) -> QueryBuilder:
        """Apply options in call order to a fresh builder"""
        builder = QueryBuilder()
        for opt in opts:
            if not isinstance(opt, ListOpt):
                raise InvalidOptionError(
                    "Unsupported query option", details={"option": repr(opt)}
                )
            if count_only and not opt.is_count_opt():
                continue
            builder = opt.apply(builder)
        return builder

    async def _first(
        self, operation: str, predicate: Any, lock: LockMode
    ) -> Optional[T]:
        builder = QueryBuilder(
            where=predicate,
            order_by=(self._pk.asc(),),
            limit=1,
            lock=lock,
        )
        stmt = builder.to_select(self.model).execution_options(populate_existing=True)
        async with self._guard(operation):
            result = await self._run(self.session.execute(stmt))
            return result.scalars().first()

    async def _fetch(self, operation: str, builder: QueryBuilder) -> list[T]:
        stmt = builder.to_select(self.model).execution_options(populate_existing=True)
        async with self._guard(operation):
            result = await self._run(self.session.execute(stmt))
            return list(result.scalars().all())

    def _index(self, rows: Iterable[T]) -> dict[K, T]:
        # Later rows overwrite earlier ones with the same key
        return {row.get_id(): row for row in rows}

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def insert(self, *rows: T) -> None:
        """Insert rows in one batch, no-op without rows"""
        if not rows:
            return
        for row in rows:
            self._check_row(row, "insert")
            if self._identity_conflict(row):
                raise DuplicateKeyError(
                    f"Duplicate key on insert into {self.table_name}",
                    details=self._details("insert", id=row.get_id()),
                )

        logger.debug("Inserting %d row(s) into %s", len(rows), self.table_name)
        async with self._guard("insert"):
            self.session.add_all(rows)
            await self._commit()

    async def _insert_savepoint(self, row: T) -> None:
        """
        Insert one row inside a SAVEPOINT

        A conflict only rolls back the savepoint, so rows already loaded in
        the session stay readable and the outer transaction stays usable.
        """
        self._check_row(row, "upsert")
        if self._identity_conflict(row):
            raise DuplicateKeyError(
                f"Duplicate key on upsert into {self.table_name}",
                details=self._details("upsert", id=row.get_id()),
            )
        async with self._guard("upsert", savepoint=True):
            async with self.session.begin_nested():
                self.session.add(row)
                await self._run(self.session.flush())
        if self.auto_commit:
            async with self._guard("upsert"):
                await self._run(self.session.commit())

    async def upsert(self, row: T) -> None:
        """Insert a row, updating it by primary key on duplicate key"""
        try:
            await self._insert_savepoint(row)
        except DuplicateKeyError:
            logger.info(
                "Duplicate key on upsert into %s (id=%r), updating instead",
                self.table_name,
                row.get_id(),
            )
            await self.update(row)

    async def update(self, row: T) -> None:
        """Update non-None columns of a row by primary key"""
        id = self._require_id(row, "update")
        values = self._column_values(row)
        if not values:
            return
        stmt = (
            update(self.model)
            .where(self._pk == id)
            .values(**values)
            .execution_options(synchronize_session="auto")
        )
        async with self._guard("update"):
            await self._run(self.session.execute(stmt))
            await self._commit()

    async def update_batch(
        self, fields: dict[str, Any], where: Predicate, *args: Any
    ) -> None:
        """Update fields on all rows matching a predicate"""
        if not fields:
            raise ValidationError(
                f"update_batch on {self.table_name} requires at least one field",
                details=self._details("update_batch"),
            )
        predicate = build_predicate(where, args)
        stmt = (
            update(self.model)
            .where(predicate)
            .values(**fields)
            .execution_options(synchronize_session="fetch")
        )
        async with self._guard("update_batch"):
            await self._run(self.session.execute(stmt))
            await self._commit()

    async def delete(self, row: T) -> None:
        """Delete a row by primary key"""
        id = self._require_id(row, "delete")
        stmt = (
            delete(self.model)
            .where(self._pk == id)
            .execution_options(synchronize_session="auto")
        )
        async with self._guard("delete"):
            await self._run(self.session.execute(stmt))
            await self._commit()

    async def delete_batch(self, where: Predicate, *args: Any) -> None:
        """Delete all rows matching a predicate"""
        predicate = build_predicate(where, args)
        stmt = (
            delete(self.model)
            .where(predicate)
            .execution_options(synchronize_session="fetch")
        )
        async with self._guard("delete_batch"):
            await self._run(self.session.execute(stmt))
            await self._commit()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get(self, id: K) -> Optional[T]:
        return await self._first("get", self._pk == id, LockMode.NONE)

    async def get_with_lock(self, lock: LockMode, id: K) -> Optional[T]:
        return await self._first("get_with_lock", self._pk == id, lock)

    async def get_by(self, where: Predicate, *args: Any) -> Optional[T]:
        return await self._first("get_by", build_predicate(where, args), LockMode.NONE)

    async def get_with_lock_by(
        self, lock: LockMode, where: Predicate, *args: Any
    ) -> Optional[T]:
        return await self._first("get_with_lock_by", build_predicate(where, args), lock)

    async def get_or_raise(self, id: K) -> T:
        row = await self.get(id)
        if row is None:
            raise NotFoundError(
                f"{self.table_name} row {id!r} not found",
                details=self._details("get", id=id),
            )
        return row

    async def list(self, *opts: ListOpt) -> list[T]:
        return await self._fetch("list", self._fold(opts))

    async def list_map(self, *opts: ListOpt) -> dict[K, T]:
        return self._index(await self.list(*opts))

    async def list_by_ids(self, ids: Iterable[K]) -> list[T]:
        ids = list(ids)
        if not ids:
            return []
        builder = QueryBuilder(where=self._pk.in_(ids))
        return await self._fetch("list_by_ids", builder)

    async def list_map_by_ids(self, ids: Iterable[K]) -> dict[K, T]:
        return self._index(await self.list_by_ids(ids))

    async def list_with_total(self, *opts: ListOpt) -> tuple[list[T], int]:
        rows = await self.list(*opts)
        total = await self.count(*opts)
        return rows, total

    async def exist(self, where: Predicate, *args: Any) -> bool:
        return await self.get_by(where, *args) is not None

    async def count(self, *opts: ListOpt) -> int:
        stmt = self._fold(opts, count_only=True).to_count(self.model)
        async with self._guard("count"):
            result = await self._run(self.session.execute(stmt))
            return int(result.scalar_one())
