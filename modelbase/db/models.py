"""
SQLAlchemy ORM Base Definitions

Declarative base whose mapped subclasses satisfy the repository row contract:
- __tablename__: table identity, declared by every subclass
- get_id(): primary-key accessor, derived from the mapper
"""

from typing import Any

from sqlalchemy import inspect
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """
    SQLAlchemy ORM Base Class

    Example:
        class User(Base):
            __tablename__ = "user"

            id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
            name: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    """

    def get_id(self) -> Any:
        """
        Get primary key value

        Returns None while the key is unassigned (e.g. autoincrement before insert).
        Composite keys are returned as a tuple.
        """
        mapper = inspect(type(self))
        values = tuple(
            getattr(self, mapper.get_property_by_column(column).key)
            for column in mapper.primary_key
        )
        if len(values) == 1:
            return values[0]
        if all(value is None for value in values):
            return None
        return values
