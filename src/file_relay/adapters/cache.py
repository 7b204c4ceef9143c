"""
In-process LRU cache of stored files.

Holds filename -> StoredFile for fast reads and as the fallback copy when the
remote store is unavailable. Bounded by entry count and total bytes; the most
recently written or read entries are kept.
"""

import logging
import threading
from collections import OrderedDict
from typing import Dict, Optional

from file_relay.models import StoredFile

logger = logging.getLogger(__name__)


class LocalFileCache:
    """Thread-safe LRU map of filename to StoredFile.

    Configuration:
    - max_entries: number of files kept before the least recently used is evicted
    - max_bytes: total payload bytes kept before eviction

    The newest entry is always kept, even when it alone exceeds max_bytes.
    """

    def __init__(self, max_entries: int = 1000, max_bytes: int = 512 * 1024 * 1024):
        self.max_entries = max_entries
        self.max_bytes = max_bytes
        self._entries: "OrderedDict[str, StoredFile]" = OrderedDict()
        self._total_bytes = 0
        self._evictions = 0
        self._lock = threading.Lock()

        logger.info(f"Local file cache initialized: max_entries={max_entries}, max_bytes={max_bytes}")

    def get(self, filename: str) -> Optional[StoredFile]:
        """Return the cached file and mark it recently used, or None."""
        with self._lock:
            stored = self._entries.get(filename)
            if stored is not None:
                self._entries.move_to_end(filename)
            return stored

    def put(self, stored: StoredFile) -> None:
        """Insert or replace an entry, then evict down to the configured bounds."""
        with self._lock:
            previous = self._entries.pop(stored.filename, None)
            if previous is not None:
                self._total_bytes -= len(previous.data)

            self._entries[stored.filename] = stored
            self._total_bytes += len(stored.data)
            self._evict()

    def _evict(self) -> None:
        while len(self._entries) > 1 and (
            len(self._entries) > self.max_entries or self._total_bytes > self.max_bytes
        ):
            filename, evicted = self._entries.popitem(last=False)
            self._total_bytes -= len(evicted.data)
            self._evictions += 1
            logger.info(f"Evicted {filename} ({len(evicted.data)} bytes) from local cache")

    def __contains__(self, filename: str) -> bool:
        with self._lock:
            return filename in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    @property
    def total_bytes(self) -> int:
        with self._lock:
            return self._total_bytes

    def stats(self) -> Dict[str, int]:
        with self._lock:
            return {
                "entries": len(self._entries),
                "bytes": self._total_bytes,
                "evictions": self._evictions,
                "max_entries": self.max_entries,
                "max_bytes": self.max_bytes,
            }
