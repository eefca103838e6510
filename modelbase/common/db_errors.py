"""
Database Error Classification

Maps driver exceptions wrapped by SQLAlchemy onto the repository error kinds.

Typed driver signals are checked first:
- PostgreSQL (asyncpg, psycopg): SQLSTATE 23505 (unique_violation)
- MySQL (aiomysql, asyncmy, pymysql): errno 1062 (ER_DUP_ENTRY)
- SQLite (sqlite3, aiosqlite): SQLITE_CONSTRAINT_UNIQUE / SQLITE_CONSTRAINT_PRIMARYKEY

Message matching is only a fallback for drivers that expose none of these. It
depends on the server locale and driver version, so keep the signature list
in settings rather than relying on it.
"""

from typing import Iterable, Optional

from modelbase.config import get_settings

UNIQUE_VIOLATION_SQLSTATE = "23505"
MYSQL_DUP_ENTRY_ERRNO = 1062
SQLITE_UNIQUE_ERROR_NAMES = frozenset(
    {"SQLITE_CONSTRAINT_UNIQUE", "SQLITE_CONSTRAINT_PRIMARYKEY"}
)


def _driver_error(exc: BaseException) -> BaseException:
    """Unwrap sqlalchemy.exc.DBAPIError to the driver exception"""
    orig = getattr(exc, "orig", None)
    return orig if orig is not None else exc


def _typed_duplicate_signal(orig: BaseException) -> Optional[bool]:
    """
    Classify from typed driver attributes

    Returns:
        True/False when the driver exposes a code, None when it exposes none
    """
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if isinstance(sqlstate, str) and sqlstate:
        return sqlstate == UNIQUE_VIOLATION_SQLSTATE

    error_name = getattr(orig, "sqlite_errorname", None)
    if isinstance(error_name, str) and error_name:
        return error_name in SQLITE_UNIQUE_ERROR_NAMES

    args = getattr(orig, "args", ())
    if args and isinstance(args[0], int) and not isinstance(args[0], bool):
        return args[0] == MYSQL_DUP_ENTRY_ERRNO

    return None


def is_duplicate_key_error(
    exc: BaseException,
    signatures: Optional[Iterable[str]] = None,
) -> bool:
    """
    Check whether an executor error is a primary-key / unique-constraint violation

    Args:
        exc: Exception raised by the executor (usually sqlalchemy.exc.IntegrityError)
        signatures: Message fragments for the text fallback, defaults to
            Settings.DUPLICATE_KEY_SIGNATURES

    Returns:
        bool: True if the error is a duplicate-key violation
    """
    orig = _driver_error(exc)

    typed = _typed_duplicate_signal(orig)
    if typed is not None:
        return typed

    if signatures is None:
        signatures = get_settings().duplicate_key_signatures
    message = str(orig)
    return any(signature in message for signature in signatures)
