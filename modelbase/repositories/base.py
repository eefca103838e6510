"""
Base Repository Types Module

Defines the row contract and the generic type variables shared by the
repository interface and its implementations.
"""

from typing import Hashable, Protocol, TypeVar, runtime_checkable

# Primary key type, must be usable as a dict key
K = TypeVar("K", bound=Hashable)
K_co = TypeVar("K_co", bound=Hashable, covariant=True)


@runtime_checkable
class DataObject(Protocol[K_co]):
    """
    Row Contract

    Any mapped row type managed by a repository exposes its table identity
    and its primary key. modelbase.db.models.Base provides get_id().
    """

    __tablename__: str

    def get_id(self) -> K_co:
        ...


# Row type
T = TypeVar("T", bound=DataObject)
