"""Unit tests for the in-memory revocation store and its sweeper."""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from dfood.infrastructure.auth import InMemoryRevocationStore, run_revocation_sweeper

NOW = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def store() -> InMemoryRevocationStore:
    return InMemoryRevocationStore()


class TestInMemoryRevocationStore:

    def test_revoke_and_lookup(self, store):
        assert store.revoke("tok-1", "alice@example.com", NOW) is True

        assert store.is_revoked("tok-1")
        assert not store.is_revoked("tok-2")
        assert store.size() == 1

    def test_revoke_twice_reports_existing_entry(self, store):
        store.revoke("tok-1", "alice@example.com", NOW)

        assert store.revoke("tok-1", "alice@example.com", NOW) is False
        assert store.size() == 1

    def test_entries_for_subject(self, store):
        store.revoke("tok-1", "alice@example.com", NOW)
        store.revoke("tok-2", "alice@example.com", NOW)
        store.revoke("tok-3", "bob@example.com", NOW)

        entries = store.entries_for_subject("alice@example.com")

        assert set(entries) == {"tok-1", "tok-2"}
        assert all(e.subject == "alice@example.com" for e in entries.values())

    def test_entries_for_subject_returns_a_copy(self, store):
        store.revoke("tok-1", "alice@example.com", NOW)

        store.entries_for_subject("alice@example.com").clear()

        assert store.is_revoked("tok-1")

    def test_purge_expired_keeps_live_entries(self, store):
        store.revoke("old", "alice@example.com", NOW - timedelta(seconds=1))
        store.revoke("edge", "alice@example.com", NOW)
        store.revoke("live", "alice@example.com", NOW + timedelta(minutes=5))

        removed = store.purge_expired(NOW)

        assert removed == 1
        assert not store.is_revoked("old")
        assert store.is_revoked("edge")
        assert store.is_revoked("live")

    def test_purge_expired_defaults_to_wall_clock(self, store):
        store.revoke("old", "alice@example.com", datetime.now(timezone.utc) - timedelta(hours=1))

        assert store.purge_expired() == 1

    def test_clear(self, store):
        store.revoke("tok-1", "alice@example.com", NOW)

        store.clear()

        assert store.size() == 0


class TestRevocationSweeper:

    async def test_sweeper_purges_until_cancelled(self, store):
        store.revoke("old", "alice@example.com", datetime.now(timezone.utc) - timedelta(hours=1))
        store.revoke("live", "alice@example.com", datetime.now(timezone.utc) + timedelta(hours=1))

        task = asyncio.create_task(run_revocation_sweeper(store, 0.01))
        for _ in range(100):
            if not store.is_revoked("old"):
                break
            await asyncio.sleep(0.01)

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert not store.is_revoked("old")
        assert store.is_revoked("live")
