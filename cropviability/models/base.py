"""ORM base class — all models inherit from Base."""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Declarative base — shared MetaData registry for all models."""

    pass
