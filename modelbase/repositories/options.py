"""
Query Options Module

Composable, immutable query fragments (filter, sort, page) applied to a
QueryBuilder for a single repository call.

Each option implements:
- apply(builder) -> builder: returns a new builder, never mutates the input
- is_count_opt(): whether the option still applies when counting rows

Filters are count-eligible; sort and pagination are not, so the same option
list can be passed to both list() and count().
"""

import enum
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from typing import Any, Optional, Union

from sqlalchemy import ColumnElement, Select, bindparam, column, func, select, text

from modelbase.common.errors import InvalidOptionError


class SortOrder(enum.Enum):
    """Sort direction"""

    ASC = "asc"
    DESC = "desc"


class LockMode(enum.Enum):
    """
    Row lock strength for point lookups

    - NONE: plain SELECT
    - SHARED: SELECT ... FOR SHARE
    - EXCLUSIVE: SELECT ... FOR UPDATE

    Dialects without row locks (SQLite) omit the clause.
    """

    NONE = "none"
    SHARED = "share"
    EXCLUSIVE = "update"


Predicate = Union[str, ColumnElement[bool]]

_EXPANDING_TYPES = (list, tuple, set, frozenset)


def build_predicate(where: Predicate, args: tuple[Any, ...] = ()) -> ColumnElement[bool]:
    """
    Build a boolean SQL expression from a predicate and positional arguments

    Text predicates use "?" placeholders, one per argument. Sequence arguments
    are expanded, so "id IN (?)" accepts a list. Placeholders inside quoted
    literals are left alone.

    Args:
        where: SQL text such as "`age` > ?", or a SQLAlchemy expression such as User.age > 18
        args: Positional values for the "?" placeholders (text predicates only)

    Returns:
        ColumnElement: Expression usable in WHERE

    Raises:
        InvalidOptionError: Placeholder/argument count mismatch, or args given with an expression
    """
    if not isinstance(where, str):
        if args:
            raise InvalidOptionError(
                "Positional arguments are only supported with text predicates",
                details={"args": len(args)},
            )
        return where

    if not where.strip():
        raise InvalidOptionError("Empty predicate")

    parts = []
    params = []
    quote = None
    for char in where:
        if quote:
            if char == quote:
                quote = None
            parts.append(char)
        elif char in ("'", '"', "`"):
            quote = char
            parts.append(char)
        elif char == "?":
            index = len(params)
            if index >= len(args):
                raise InvalidOptionError(
                    "Predicate has more placeholders than arguments",
                    details={"where": where, "args": len(args)},
                )
            value = args[index]
            expanding = isinstance(value, _EXPANDING_TYPES)
            if isinstance(value, (set, frozenset)):
                value = list(value)
            name = f"arg_{index}"
            params.append(bindparam(name, value, expanding=expanding))
            # Expanding parameters render their own parentheses
            parts.append(f":{name}")
        else:
            parts.append(char)

    if len(params) != len(args):
        raise InvalidOptionError(
            "Predicate has fewer placeholders than arguments",
            details={"where": where, "args": len(args)},
        )

    sql = "".join(parts)
    list_keys = [p.key for p in params if p.expanding]
    if list_keys:
        # "IN (?)" becomes "IN (:arg_0)"; drop the caller's parentheses
        # around list parameters only, "lower(?)" keeps its own
        names = "|".join(re.escape(key) for key in list_keys)
        sql = re.sub(rf"\(\s*(:(?:{names}))\s*\)", r"\1", sql)
    return text(sql).bindparams(*params)


@dataclass(frozen=True)
class QueryBuilder:
    """
    Per-call query state

    Options fold into a builder; the repository renders it into a statement.
    - where: single filter, a later filter replaces an earlier one
    - order_by: ORDER BY terms, appended in order
    - offset / limit: pagination window, a later window replaces an earlier one
    - lock: row lock strength
    """

    where: Optional[ColumnElement[bool]] = None
    order_by: tuple[ColumnElement[Any], ...] = ()
    offset: Optional[int] = None
    limit: Optional[int] = None
    lock: LockMode = LockMode.NONE

    def filter(self, predicate: ColumnElement[bool]) -> "QueryBuilder":
        return replace(self, where=predicate)

    def sort(self, clause: ColumnElement[Any]) -> "QueryBuilder":
        return replace(self, order_by=self.order_by + (clause,))

    def window(self, offset: int, limit: int) -> "QueryBuilder":
        return replace(self, offset=offset, limit=limit)

    def with_lock(self, lock: LockMode) -> "QueryBuilder":
        return replace(self, lock=lock)

    def to_select(self, model: type) -> Select:
        """Render a SELECT of model rows"""
        stmt = select(model)
        if self.where is not None:
            stmt = stmt.where(self.where)
        if self.order_by:
            stmt = stmt.order_by(*self.order_by)
        if self.limit is not None:
            stmt = stmt.limit(self.limit)
        if self.offset is not None:
            stmt = stmt.offset(self.offset)
        if self.lock is LockMode.SHARED:
            stmt = stmt.with_for_update(read=True)
        elif self.lock is LockMode.EXCLUSIVE:
            stmt = stmt.with_for_update()
        return stmt

    def to_count(self, model: type) -> Select:
        """Render a SELECT count(*); ordering and pagination are ignored"""
        stmt = select(func.count()).select_from(model)
        if self.where is not None:
            stmt = stmt.where(self.where)
        return stmt


class ListOpt(ABC):
    """Query option protocol"""

    @abstractmethod
    def apply(self, builder: QueryBuilder) -> QueryBuilder:
        """Return a new builder with this option applied"""

    def is_count_opt(self) -> bool:
        """Whether the option applies to count queries"""
        return False


@dataclass(frozen=True)
class WhereOpt(ListOpt):
    """Filter option"""

    where: Predicate
    args: tuple[Any, ...] = ()
    predicate: ColumnElement[bool] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "predicate", build_predicate(self.where, tuple(self.args)))

    def apply(self, builder: QueryBuilder) -> QueryBuilder:
        return builder.filter(self.predicate)

    def is_count_opt(self) -> bool:
        return True


@dataclass(frozen=True)
class SortOpt(ListOpt):
    """Sort option, field is a column name or a mapped attribute"""

    field: Union[str, ColumnElement[Any], Any]
    order: SortOrder = SortOrder.ASC

    def __post_init__(self):
        if isinstance(self.field, str) and not self.field.strip():
            raise InvalidOptionError("Sort field must not be empty")
        if not isinstance(self.order, SortOrder):
            raise InvalidOptionError(
                "Unsupported sort order", details={"order": repr(self.order)}
            )

    def apply(self, builder: QueryBuilder) -> QueryBuilder:
        target = column(self.field) if isinstance(self.field, str) else self.field
        clause = target.desc() if self.order is SortOrder.DESC else target.asc()
        return builder.sort(clause)


@dataclass(frozen=True)
class PageOpt(ListOpt):
    """Pagination window as offset/limit"""

    offset: int
    limit: int

    def __post_init__(self):
        if self.offset < 0 or self.limit < 0:
            raise InvalidOptionError(
                "Offset and limit must not be negative",
                details={"offset": self.offset, "limit": self.limit},
            )

    def apply(self, builder: QueryBuilder) -> QueryBuilder:
        return builder.window(self.offset, self.limit)


def where_opt(where: Predicate, *args: Any) -> WhereOpt:
    """Filter by predicate, e.g. where_opt("`age` > ?", 18) or where_opt(User.age > 18)"""
    return WhereOpt(where, args)


def sort_opt(field: Union[str, Any], order: SortOrder = SortOrder.ASC) -> SortOpt:
    """Add an ORDER BY term"""
    return SortOpt(field, order)


def page_opt(page_no: int, page_size: int) -> PageOpt:
    """Paginate by 1-based page number: offset = (page_no - 1) * page_size"""
    if page_no < 1 or page_size < 1:
        raise InvalidOptionError(
            "Page number and page size must be positive",
            details={"page_no": page_no, "page_size": page_size},
        )
    return PageOpt(offset=(page_no - 1) * page_size, limit=page_size)


def offset_opt(offset: int, limit: int) -> PageOpt:
    """Paginate by explicit offset and limit"""
    return PageOpt(offset=offset, limit=limit)
