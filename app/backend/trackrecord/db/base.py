"""Declarative base shared by ORM entities."""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass
