"""On-disk memoization of pipeline stages (joblib.Memory keyed by stage arguments)."""

import logging
from pathlib import Path

from joblib import Memory

logger = logging.getLogger(__name__)


def get_memory(cache_dir: Path | None) -> Memory:
    """Memory rooted at cache_dir; None gives a pass-through memory that caches nothing."""
    if cache_dir is None:
        return Memory(location=None, verbose=0)
    Path(cache_dir).mkdir(parents=True, exist_ok=True)
    return Memory(location=str(cache_dir), verbose=0)


def cached(func, cache_dir: Path | None):
    return get_memory(cache_dir).cache(func)


def clear_cache(cache_dir: Path | None) -> None:
    """Drop memoized stage results; only joblib's own store under cache_dir is touched."""
    if cache_dir is None or not Path(cache_dir).exists():
        return
    get_memory(cache_dir).clear(warn=False)
    logger.info(f"Cleared cache at {cache_dir}")
