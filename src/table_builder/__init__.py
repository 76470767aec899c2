"""Table builder: generic source reader and stage cache."""

from src.table_builder.reader import read
from src.table_builder.cache import cached, clear_cache, get_memory

__all__ = [
    "read",
    "cached",
    "clear_cache",
    "get_memory",
]
