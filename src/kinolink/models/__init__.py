"""SQLAlchemy ORM models."""

from kinolink.models.base import Base
from kinolink.models.movie import Movie

__all__ = ["Base", "Movie"]
