"""taskflow.context -- Bounded TTL cache and the document context cache."""

from taskflow.context.lru import MISSING, BoundedTTLCache
from taskflow.context.manager import ContextCache

__all__ = ["BoundedTTLCache", "ContextCache", "MISSING"]
