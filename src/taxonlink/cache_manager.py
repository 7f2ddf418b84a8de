"""Durable caching for taxonlink.

This module memoizes expensive lookups (remote queries, table builds) across
runs in named on-disk key-value stores. Each named cache is a diskcache
``Cache`` living in its own directory under the configured cache root.

Entries never expire and nothing is evicted: a cache grows until it is
cleared explicitly. Writes are not wrapped in transactions, and a cache is
meant to be written by a single process at a time.
"""

import atexit
import functools
import hashlib
import inspect
import logging
import os
import time
from collections import defaultdict
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

from diskcache import Cache

from taxonlink.config import config

logger = logging.getLogger(__name__)

CACHE_SUBDIR = "diskcache"
DEFAULT_CACHE_NAME = "default"

# Let SQLite memory-map up to 256 MiB of each cache file
SQLITE_MMAP_SIZE = 2 ** 28

# Open handles, keyed by (cache root, cache name)
_open_caches: Dict[Tuple[Path, str], Cache] = {}


def get_cache_root() -> Path:
    """Return the directory under which all named caches live."""
    return Path(config.cache_dir) / CACHE_SUBDIR


def init_db(name: str) -> Cache:
    """Open (or create) the named cache.

    The directory tree for the cache is created first if it is missing.
    Repeated calls with the same name return the same handle. Handles are
    closed when the process exits.

    Args:
        name: Name of the cache, used as its directory name

    Returns:
        An open diskcache Cache
    """
    root = get_cache_root()
    handle_key = (root, name)
    cache = _open_caches.get(handle_key)
    if cache is not None:
        return cache

    cache_dir = root / name
    cache_dir.mkdir(parents=True, exist_ok=True)
    cache = Cache(
        directory=str(cache_dir),
        eviction_policy="none",
        sqlite_mmap_size=SQLITE_MMAP_SIZE,
    )
    _open_caches[handle_key] = cache
    logger.debug(f"Opened cache '{name}' at {cache_dir}")
    return cache


def close_all() -> None:
    """Close every open cache handle."""
    for key, cache in list(_open_caches.items()):
        try:
            cache.close()
        except Exception as exc:
            logger.warning(f"Failed to close cache {key[1]}: {exc}")
        del _open_caches[key]


atexit.register(close_all)


def list_caches() -> List[str]:
    """Return the names of all caches present under the cache root."""
    root = get_cache_root()
    if not root.exists():
        return []
    return sorted(p.name for p in root.iterdir() if p.is_dir())


def clear_cache(name: Optional[str] = None, pattern: Optional[str] = None) -> int:
    """Clear cache entries.

    Args:
        name: Cache to clear, or None for every cache under the root
        pattern: Only remove keys containing this substring

    Returns:
        Number of entries removed
    """
    names = [name] if name else list_caches()
    removed = 0
    for cache_name in names:
        cache = init_db(cache_name)
        if pattern is None:
            count = len(cache)
            cache.clear()
            removed += count
            continue

        keys_to_delete = [key for key in cache if pattern in str(key)]
        for key in keys_to_delete:
            try:
                del cache[key]
            except KeyError:
                continue
        removed += len(keys_to_delete)

    if pattern is None:
        logger.info(f"Cleared {removed} cache entries")
    else:
        logger.info(f"Cleared {removed} cache entries matching '{pattern}'")
    return removed


def _classify_cache_key(key: str) -> str:
    """Return the cache object category based on the key prefix."""
    prefix, sep, _ = key.partition(":")
    return prefix if sep else "other"


def get_cache_stats() -> Dict[str, Any]:
    """Get statistics about all caches under the cache root.

    Returns:
        Dictionary with cache statistics
    """
    root = get_cache_root()
    stats: Dict[str, Any] = {
        "root": str(root),
        "total_size_bytes": 0,
        "db_file_count": 0,
        "caches": {},
    }

    try:
        for dirpath, _, files in os.walk(root):
            for file_name in files:
                stats["db_file_count"] += 1
                try:
                    stats["total_size_bytes"] += (Path(dirpath) / file_name).stat().st_size
                except OSError:
                    continue

        for cache_name in list_caches():
            cache = init_db(cache_name)
            prefix_counts: Dict[str, int] = defaultdict(int)
            for key in cache:
                prefix_counts[_classify_cache_key(str(key))] += 1
            stats["caches"][cache_name] = {
                "entry_count": len(cache),
                "prefix_counts": dict(prefix_counts),
            }
    except Exception as exc:
        logger.error(f"Error getting cache stats: {exc}")

    return stats


def cached(
    cache_name: str = DEFAULT_CACHE_NAME,
    prefix: Optional[str] = None,
    key_args: Optional[List[str]] = None,
):
    """Decorator to memoize function results in a named durable cache.

    Results are kept until the cache is cleared. None results are not
    stored, so failed lookups are retried on the next call.

    Args:
        cache_name: Named cache to store results in
        prefix: Optional prefix for the cache key (defaults to function name)
        key_args: Argument names to include in the key (defaults to all)

    Returns:
        Decorated function with caching
    """
    def decorator(func: Callable) -> Callable:
        func_prefix = prefix or func.__name__

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            refresh = kwargs.pop('refresh_cache', False)
            cache_key = _create_cache_key(func, func_prefix, args, kwargs, key_args)
            cache = init_db(cache_name)

            if not refresh:
                cached_result = cache.get(cache_key, default=None)
                if cached_result is not None:
                    logger.debug(f"Cache hit for {func.__name__}: {cache_key}")
                    return cached_result

            start_time = time.time()
            result = func(*args, **kwargs)
            elapsed = time.time() - start_time

            if result is not None:
                cache.set(cache_key, result)
                logger.debug(f"Cached result for {func.__name__} (took {elapsed:.2f}s)")
            return result

        def clear_function_cache() -> int:
            """Clear all cache entries for this function."""
            return clear_cache(cache_name, f"{func_prefix}:")

        wrapper.clear_cache = clear_function_cache
        return wrapper

    return decorator


def _create_cache_key(
    func: Callable,
    prefix: str,
    args: Tuple,
    kwargs: Dict[str, Any],
    key_args: Optional[List[str]],
) -> str:
    """Generate a deterministic cache key for a function call."""
    sig = inspect.signature(func)
    try:
        bound = sig.bind(*args, **kwargs)
        bound.apply_defaults()
        arg_dict = dict(bound.arguments)
    except TypeError:
        arg_dict = {f"arg{i}": arg for i, arg in enumerate(args)}
        arg_dict.update(kwargs)

    arg_dict.pop("self", None)
    if key_args:
        arg_dict = {k: v for k, v in arg_dict.items() if k in key_args}

    arg_str = repr(sorted(arg_dict.items()))
    arg_hash = hashlib.md5(arg_str.encode()).hexdigest()
    return f"{prefix}:{arg_hash}"
