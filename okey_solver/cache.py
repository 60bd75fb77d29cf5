"""
Solution Cache

Memoizes solved sub-hands by canonical key. The cache is an explicit
object handed to the solvers; several solvers may share one.

Eviction uses a decayed frequency score, hits / (now - last_access + 1),
and drops the single lowest-scoring entry when the cache is full.

An optional backing store keeps solutions across sessions. The store is
best effort: if it fails, solving carries on with the in-memory cache.
"""

import json
import logging
import threading
import time
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Protocol, Union

from .combinations import Solution

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    """A cached solution and its usage statistics"""
    solution: Solution
    hits: int = 1
    last_accessed: float = 0.0
    joker_count: int = 0

    def priority(self, now: float) -> float:
        """Decayed access frequency, lower is evicted first"""
        return self.hits / (now - self.last_accessed + 1)


@dataclass
class HitRateStats:
    """Aggregate lookup counters"""
    total_requests: int = 0
    cache_hits: int = 0
    cache_misses: int = 0
    hit_rate: float = 0.0
    period_start: float = 0.0
    period_end: float = 0.0


class CacheStore(Protocol):
    """Key/value backing store for serialized solutions"""

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        ...

    def set(self, key: str, data: Dict[str, Any]) -> None:
        ...


class MemoryStore:
    """Backing store kept in a plain dict"""

    def __init__(self):
        self._data: Dict[str, Dict[str, Any]] = {}

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        return self._data.get(key)

    def set(self, key: str, data: Dict[str, Any]) -> None:
        self._data[key] = data

    def __len__(self) -> int:
        return len(self._data)


class JsonFileStore:
    """
    Backing store persisted to a JSON file.

    The file is read once on construction; writes stay in memory until
    save() is called. An unreadable or corrupt file is ignored and the
    store starts empty.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._data: Dict[str, Dict[str, Any]] = {}
        self.is_dirty = False
        if self.path.exists():
            self._load()

    def _load(self) -> None:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                loaded = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Could not read cache file {self.path}, starting empty: {e}")
            return

        if not isinstance(loaded, dict):
            logger.warning(f"Cache file {self.path} does not hold a JSON object, starting empty")
            return

        self._data = loaded
        logger.info(f"Loaded {len(self._data)} cached solutions from {self.path}")

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        return self._data.get(key)

    def set(self, key: str, data: Dict[str, Any]) -> None:
        self._data[key] = data
        self.is_dirty = True

    def save(self) -> None:
        """Write the store to disk if anything changed"""
        if not self.is_dirty:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(self._data, f)
        self.is_dirty = False
        logger.info(f"Saved {len(self._data)} cached solutions to {self.path}")

    def __len__(self) -> int:
        return len(self._data)


class PatternCache:
    """
    Capacity-bounded map from cache key to Solution.

    Args:
        max_size: Maximum number of in-memory entries
        store: Optional backing store consulted on misses and written on set
        clock: Time source in seconds
    """

    def __init__(
        self,
        max_size: int = 1000,
        store: Optional[CacheStore] = None,
        clock: Callable[[], float] = time.time,
    ):
        if max_size < 1:
            raise ValueError(f"Cache size must be positive, got {max_size}")
        self.max_size = max_size
        self.store = store
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.RLock()
        self._hit_rate = HitRateStats()
        self.reset_stats()

    def get(self, key: str, joker_count: int = 0) -> Optional[Solution]:
        """
        Look up a solution.
        Returns None on a miss. Returned solutions are shared, do not mutate.
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is None and self.store is not None:
                entry = self._load_from_store(key, joker_count)

            self._record_request(entry is not None)
            if entry is None:
                return None

            entry.hits += 1
            entry.last_accessed = self._clock()
            return entry.solution

    def set(self, key: str, solution: Solution, joker_count: int = 0) -> None:
        """Store a solution, evicting the least valuable entry when full"""
        with self._lock:
            self._insert(key, CacheEntry(solution, 1, self._clock(), joker_count))

        if self.store is not None:
            try:
                self.store.set(key, solution.to_dict())
            except Exception as e:
                logger.warning(f"Cache store write failed for {key}: {e}")

    def _insert(self, key: str, entry: CacheEntry) -> None:
        if key not in self._entries and len(self._entries) >= self.max_size:
            self._evict_least_used()
        self._entries[key] = entry

    def _evict_least_used(self) -> None:
        now = self._clock()
        victim = min(self._entries, key=lambda k: self._entries[k].priority(now), default=None)
        if victim is not None:
            del self._entries[victim]
            logger.debug(f"Evicted cache entry {victim}")

    def _load_from_store(self, key: str, joker_count: int) -> Optional[CacheEntry]:
        try:
            data = self.store.get(key)
        except Exception as e:
            logger.warning(f"Cache store read failed for {key}: {e}")
            return None
        if data is None:
            return None

        try:
            solution = Solution.from_dict(data)
        except ValueError as e:
            logger.warning(f"Ignoring malformed stored solution for {key}: {e}")
            return None

        entry = CacheEntry(solution, 0, self._clock(), joker_count)
        self._insert(key, entry)
        return entry

    def _record_request(self, is_hit: bool) -> None:
        stats = self._hit_rate
        stats.total_requests += 1
        if is_hit:
            stats.cache_hits += 1
        else:
            stats.cache_misses += 1
        stats.hit_rate = stats.cache_hits / stats.total_requests
        stats.period_end = self._clock()

    def stats(self) -> Dict[str, Dict[str, float]]:
        """Per-entry usage statistics"""
        with self._lock:
            return {
                key: {
                    "hits": entry.hits,
                    "last_accessed": entry.last_accessed,
                    "joker_count": entry.joker_count,
                }
                for key, entry in self._entries.items()
            }

    def hit_rate_stats(self) -> HitRateStats:
        with self._lock:
            return HitRateStats(**asdict(self._hit_rate))

    def detailed_stats(self) -> Dict[str, Any]:
        return {
            "hit_rate": asdict(self.hit_rate_stats()),
            "cache_size": len(self),
            "max_size": self.max_size,
            "items": self.stats(),
        }

    def reset_stats(self) -> None:
        """Restart the aggregate hit/miss counters"""
        with self._lock:
            now = self._clock()
            self._hit_rate = HitRateStats(period_start=now, period_end=now)

    def clear(self) -> None:
        """Drop every in-memory entry and reset the counters"""
        with self._lock:
            self._entries.clear()
        self.reset_stats()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._entries

    def __repr__(self) -> str:
        return f"PatternCache({len(self)}/{self.max_size} entries)"
