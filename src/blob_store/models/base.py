"""Declarative base for blob store tables."""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass
