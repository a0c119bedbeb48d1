"""
EasyMock Statistics

Per-route match/mismatch counters, a grand total of dispatched requests,
and an optional bounded history of dispatches for debugging.
"""

import threading
from collections import defaultdict, deque
from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Any, Deque, Dict, List, Optional

from .matcher import RouteKey, canonical_url, normalize_method


class RouteStatistics:
    """
    Match and mismatch counters keyed by route.

    Matched counters, mismatched counters and the grand total each sit
    behind their own lock so counting never contends with routing.

    Example:
        stats = RouteStatistics()
        stats.record_match(RouteKey('GET', 'https://example.test/a'))
        stats.matched_count('GET', 'https://example.test/a')   # 1
    """

    def __init__(self, default_method: str = 'GET'):
        self.default_method = default_method
        self._matched: Dict[RouteKey, int] = defaultdict(int)
        self._mismatched: Dict[RouteKey, int] = defaultdict(int)
        self._total = 0
        self._matched_lock = threading.Lock()
        self._mismatched_lock = threading.Lock()
        self._total_lock = threading.Lock()

    def _key(self, method: Optional[str], url: str) -> RouteKey:
        return RouteKey(normalize_method(method, self.default_method), canonical_url(url))

    def record_request(self):
        with self._total_lock:
            self._total += 1

    def record_match(self, key: RouteKey):
        with self._matched_lock:
            self._matched[key] += 1

    def record_mismatch(self, key: RouteKey):
        with self._mismatched_lock:
            self._mismatched[key] += 1

    def matched_count(self, method: Optional[str], url: str) -> int:
        """Number of dispatches answered for the requested (method, URL)."""
        key = self._key(method, url)
        with self._matched_lock:
            return self._matched.get(key, 0)

    def mismatched_count(self, method: Optional[str], url: str) -> int:
        """Number of dispatches for (method, URL) that found no available responder."""
        key = self._key(method, url)
        with self._mismatched_lock:
            return self._mismatched.get(key, 0)

    @property
    def total_count(self) -> int:
        with self._total_lock:
            return self._total

    @property
    def matched_total(self) -> int:
        with self._matched_lock:
            return sum(self._matched.values())

    @property
    def mismatched_total(self) -> int:
        with self._mismatched_lock:
            return sum(self._mismatched.values())

    def reset(self):
        with self._matched_lock, self._mismatched_lock, self._total_lock:
            self._matched.clear()
            self._mismatched.clear()
            self._total = 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        total = self.total_count
        matched = self.matched_total
        return {
            'total_requests': total,
            'matched_requests': matched,
            'unmatched_requests': self.mismatched_total,
            'match_rate': round((matched / total * 100) if total > 0 else 0, 2),
        }


@dataclass
class RecordedCall:
    """One dispatched request."""

    method: str
    url: str
    matched: bool
    status_code: Optional[int] = None
    error: Optional[str] = None
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)


class CallRecorder:
    """FIFO history of dispatched requests (``limit`` 0 = unlimited)."""

    def __init__(self, limit: int = 1000):
        self.limit = limit
        self._calls: Deque[RecordedCall] = deque(maxlen=limit or None)
        self._lock = threading.Lock()

    def record(self, call: RecordedCall):
        with self._lock:
            self._calls.append(call)

    @property
    def calls(self) -> List[RecordedCall]:
        with self._lock:
            return list(self._calls)

    def clear(self):
        with self._lock:
            self._calls.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._calls)
