from __future__ import annotations

from .memory import InMemoryQueryable
from .mongo import MongoQueryable

__all__ = ["InMemoryQueryable", "MongoQueryable"]
