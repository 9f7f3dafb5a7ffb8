# This project was developed with assistance from AI tools.
"""Declarative base shared by the models and the migration environment."""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass
