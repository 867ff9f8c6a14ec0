"""SQLite-backed game store."""

from dailynoir.persistence.db import GameStore

__all__ = ["GameStore"]
