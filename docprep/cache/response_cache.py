from __future__ import annotations

"""In-memory TTL cache for answers keyed by question and document content."""

import hashlib
import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Generic, Iterable, Mapping, TypeVar, Union

from docprep.rag.types import Document

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TTL_SECONDS = 60 * 60
DEFAULT_SWEEP_INTERVAL_SECONDS = 5 * 60
KEY_PREFIX = "cache_"

DocumentLike = Union[Document, Mapping[str, Any], str]

_MISSING = object()


def sha256_hex(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def _content_of(document: DocumentLike) -> str:
    if isinstance(document, Document):
        return document.content or ""
    if isinstance(document, str):
        return document
    return str(document.get("content") or "")


def generate_key(
    question: str,
    documents: Iterable[DocumentLike],
    namespace: str = "",
) -> str:
    """Fingerprint a question and the ordered contents of its documents.

    Each content is hashed on its own and the digests are hashed together, so
    names and metadata never affect the key.
    A non-empty ``namespace`` separates answers produced under different
    settings for the same question and documents.
    """
    document_digests = [sha256_hex(_content_of(document)) for document in documents]
    combined = f"{namespace}:{sha256_hex(question)}:{len(document_digests)}:{'|'.join(document_digests)}"
    return KEY_PREFIX + sha256_hex(combined)


@dataclass
class CacheEntry(Generic[T]):
    value: T
    stored_at: float
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now > self.expires_at


@dataclass(frozen=True)
class CacheEntryInfo:
    key: str
    age: float
    expires_in: float


@dataclass(frozen=True)
class CacheStats:
    size: int
    entries: list[CacheEntryInfo] = field(default_factory=list)


class ResponseCache(Generic[T]):
    """Thread-safe TTL map with expire-on-read semantics."""

    def __init__(
        self,
        default_ttl: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if default_ttl <= 0:
            raise ValueError(f"default_ttl must be positive, got {default_ttl}")
        self.default_ttl = float(default_ttl)
        self._clock = clock
        self._entries: dict[str, CacheEntry[T]] = {}
        self._lock = threading.Lock()

    generate_key = staticmethod(generate_key)

    def get(self, key: str, default: T | None = None) -> T | None:
        """Return the cached value, or ``default`` when absent or expired."""
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return default
            if entry.is_expired(now):
                del self._entries[key]
                return default
            return entry.value

    def set(self, key: str, value: T, ttl: float | None = None) -> None:
        """Store a value for ``ttl`` seconds (default TTL when omitted)."""
        lifetime = self.default_ttl if ttl is None else float(ttl)
        if lifetime <= 0:
            raise ValueError(f"ttl must be positive, got {ttl}")
        now = self._clock()
        entry = CacheEntry(value=value, stored_at=now, expires_at=now + lifetime)
        with self._lock:
            self._entries[key] = entry

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def cleanup(self) -> int:
        """Remove every expired entry and return how many were removed."""
        now = self._clock()
        with self._lock:
            expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
            for key in expired:
                del self._entries[key]
        if expired:
            logger.debug("cache_cleanup", extra={"removed": len(expired)})
        return len(expired)

    def invalidate(
        self,
        question: str,
        documents: Iterable[DocumentLike],
        namespace: str = "",
    ) -> bool:
        """Drop the entry for a question/document combination."""
        return self.delete(generate_key(question, documents, namespace))

    def stats(self) -> CacheStats:
        now = self._clock()
        with self._lock:
            items = list(self._entries.items())
        return CacheStats(
            size=len(items),
            entries=[
                CacheEntryInfo(key=key, age=now - entry.stored_at, expires_in=entry.expires_at - now)
                for key, entry in items
            ],
        )

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        return self.get(key, _MISSING) is not _MISSING


def safe_get(cache: ResponseCache[Any], key: str, default: Any = None) -> Any:
    """Look up a key, treating any cache failure as a miss."""
    try:
        return cache.get(key, default)
    except Exception as exc:
        logger.warning("cache_lookup_failed", extra={"error_type": type(exc).__name__})
        return default


def safe_set(cache: ResponseCache[Any], key: str, value: Any, ttl: float | None = None) -> None:
    """Store a value, logging instead of raising on cache failures."""
    try:
        cache.set(key, value, ttl)
    except ValueError:
        raise
    except Exception as exc:
        logger.warning("cache_store_failed", extra={"error_type": type(exc).__name__})


def cached_call(
    cache: ResponseCache[T],
    key: str,
    compute: Callable[[], T],
    ttl: float | None = None,
) -> T:
    """Return the cached value for ``key`` or compute and store it."""
    cached = safe_get(cache, key, _MISSING)
    if cached is not _MISSING:
        return cached
    result = compute()
    safe_set(cache, key, result, ttl)
    return result


async def cached_call_async(
    cache: ResponseCache[T],
    key: str,
    compute: Callable[[], Awaitable[T]],
    ttl: float | None = None,
) -> T:
    """Async variant of :func:`cached_call`."""
    cached = safe_get(cache, key, _MISSING)
    if cached is not _MISSING:
        return cached
    result = await compute()
    safe_set(cache, key, result, ttl)
    return result


class CacheSweeper:
    """Background thread that periodically removes expired cache entries."""

    def __init__(self, cache: ResponseCache[Any], interval: float = DEFAULT_SWEEP_INTERVAL_SECONDS) -> None:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self.cache = cache
        self.interval = float(interval)
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._sweep_loop, name="cache-sweeper", daemon=True)
        self._thread.start()
        logger.info("cache_sweeper_started", extra={"interval": self.interval})

    def stop(self, timeout: float | None = 5.0) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
            logger.info("cache_sweeper_stopped")

    def _sweep_loop(self) -> None:
        while not self._stop_event.wait(self.interval):
            try:
                self.cache.cleanup()
            except Exception:
                logger.exception("cache_sweep_failed")

    def __enter__(self) -> CacheSweeper:
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()
