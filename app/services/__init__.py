"""Infrastructure services."""

from .postgres import PostgresPoolProvider

__all__ = ["PostgresPoolProvider"]
