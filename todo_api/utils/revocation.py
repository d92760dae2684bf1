import threading
from datetime import datetime, UTC
from typing import Dict, Optional


class RevokedTokens:
    """Process-wide set of revoked token ids.

    Each entry is kept only until the token it names would have expired on its
    own; expired entries are evicted on every access, so the registry stays
    bounded by the number of live revoked tokens.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._entries: Dict[str, datetime] = {}

    def _evict(self, now: datetime):
        expired = [jti for jti, exp in self._entries.items() if exp <= now]
        for jti in expired:
            del self._entries[jti]

    def revoke(self, jti: str, expires_at: datetime, now: Optional[datetime] = None):
        now = now or datetime.now(UTC)
        with self._lock:
            self._evict(now)
            if expires_at > now:
                self._entries[jti] = expires_at

    def is_revoked(self, jti: Optional[str], now: Optional[datetime] = None) -> bool:
        if not jti:
            return False
        now = now or datetime.now(UTC)
        with self._lock:
            self._evict(now)
            return jti in self._entries

    def clear(self):
        with self._lock:
            self._entries.clear()

    def __len__(self):
        with self._lock:
            return len(self._entries)


revoked_tokens = RevokedTokens()
