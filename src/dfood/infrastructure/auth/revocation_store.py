"""Revocation store for session tokens.

Holds tokens that were invalidated before their natural expiry (logout,
account deletion). ``RevocationStore`` is the contract the JWT service
depends on; ``InMemoryRevocationStore`` is the process-local
implementation. Entries live only as long as the process does: a restart,
or a second instance behind a load balancer, does not see them. A shared
cache can be dropped in by implementing the same interface.
"""

import asyncio
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone

from dfood.core.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class RevocationEntry:
    """A revoked token.

    Attributes:
        subject: Email the token was issued to.
        expires_at: The token's own expiry; the entry is purgeable afterwards.
    """

    subject: str
    expires_at: datetime


class RevocationStore(ABC):
    """Key-value set of revoked tokens with per-entry expiry."""

    @abstractmethod
    def is_revoked(self, token: str) -> bool:
        """Return True if the token string has been revoked."""

    @abstractmethod
    def revoke(self, token: str, subject: str, expires_at: datetime) -> bool:
        """Mark a token revoked.

        Returns:
            True if the token was newly added, False if it was already revoked.
        """

    @abstractmethod
    def entries_for_subject(self, subject: str) -> dict[str, RevocationEntry]:
        """Return the known revoked tokens of one subject."""

    @abstractmethod
    def purge_expired(self, now: datetime | None = None) -> int:
        """Drop entries whose token has expired. Returns the number removed."""

    @abstractmethod
    def clear(self) -> None:
        """Forget every entry."""

    @abstractmethod
    def size(self) -> int:
        """Number of entries currently held."""


class InMemoryRevocationStore(RevocationStore):
    """Thread-safe in-process revocation store.

    A single lock guards every read and read-modify-write, so request
    handlers on different threads or tasks can share one instance.
    """

    def __init__(self) -> None:
        self._entries: dict[str, RevocationEntry] = {}
        self._lock = threading.Lock()

    def is_revoked(self, token: str) -> bool:
        with self._lock:
            return token in self._entries

    def revoke(self, token: str, subject: str, expires_at: datetime) -> bool:
        with self._lock:
            if token in self._entries:
                return False
            self._entries[token] = RevocationEntry(subject=subject, expires_at=expires_at)
            return True

    def entries_for_subject(self, subject: str) -> dict[str, RevocationEntry]:
        with self._lock:
            return {
                token: entry
                for token, entry in self._entries.items()
                if entry.subject == subject
            }

    def purge_expired(self, now: datetime | None = None) -> int:
        current_time = now or datetime.now(timezone.utc)
        with self._lock:
            expired = [
                token for token, entry in self._entries.items()
                if entry.expires_at < current_time
            ]
            for token in expired:
                del self._entries[token]
            return len(expired)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def size(self) -> int:
        with self._lock:
            return len(self._entries)


async def run_revocation_sweeper(store: RevocationStore, interval_seconds: float) -> None:
    """Periodically purge expired revocation entries.

    Runs until cancelled. Expired tokens are already rejected on their
    ``exp`` claim, so the sweep only bounds memory use.

    Args:
        store: The store to sweep.
        interval_seconds: Delay between sweeps.
    """
    while True:
        await asyncio.sleep(interval_seconds)
        removed = store.purge_expired()
        if removed:
            logger.debug("Purged expired revocation entries", removed=removed, remaining=store.size())
