"""Tests for IdleReaper expiry sweeps."""

import asyncio

import pytest

from leadcatcher.core.reaper import IdleReaper

TIMEOUT = 86400


@pytest.fixture
def reaper(store, clock):
    return IdleReaper(store, interval_seconds=3600, session_timeout=TIMEOUT, clock=clock)


class TestIdleReaper:
    def test_session_kept_just_inside_timeout(self, reaper, store, clock, user_id):
        store.get_or_create(user_id)
        clock.advance(TIMEOUT - 1)

        assert reaper.sweep() == []
        assert user_id in store

    def test_session_kept_at_exact_timeout(self, reaper, store, clock, user_id):
        store.get_or_create(user_id)
        clock.advance(TIMEOUT)

        assert reaper.sweep() == []

    def test_session_removed_just_past_timeout(self, reaper, store, clock, user_id):
        session = store.get_or_create(user_id)
        clock.advance(TIMEOUT + 1)

        assert reaper.sweep() == [user_id]
        assert user_id not in store
        assert session.closed

    def test_recent_activity_keeps_session(self, reaper, store, clock, user_id):
        store.get_or_create(user_id)
        clock.advance(TIMEOUT - 10)
        store.get(user_id)
        clock.advance(20)

        assert reaper.sweep() == []

    def test_session_with_dispatch_in_flight_is_skipped(self, reaper, store, clock, user_id):
        session = store.get_or_create(user_id)
        session.dispatch_in_flight = True
        clock.advance(TIMEOUT * 2)

        assert reaper.sweep() == []
        assert user_id in store

        session.end_dispatch()
        assert reaper.sweep() == [user_id]

    def test_only_expired_sessions_removed(self, reaper, store, clock):
        store.get_or_create("old")
        clock.advance(TIMEOUT)
        store.get_or_create("new")
        clock.advance(5)

        assert reaper.sweep() == ["old"]
        assert [s.id for s in store.snapshot()] == ["new"]
        assert reaper.get_status()["removed_total"] == 1

    @pytest.mark.asyncio
    async def test_start_and_stop(self, reaper):
        await reaper.start()
        await asyncio.sleep(0)
        assert reaper.get_status()["running"] is True

        await reaper.stop()
        assert reaper.get_status()["running"] is False
