"""
Tests for the EventBus.
"""

from __future__ import annotations

from attribution_engine.shell.hooks import (
    AUTH_RESOLVED,
    PAGE_LOADED,
    AuthResolved,
    EventBus,
    PageLoaded,
)


class TestEventBus:
    """Test publish/subscribe."""

    def test_handlers_run_in_order(self) -> None:
        bus = EventBus()
        seen: list[str] = []
        bus.subscribe(PAGE_LOADED, lambda p: seen.append("first"))
        bus.subscribe(PAGE_LOADED, lambda p: seen.append("second"))

        bus.publish(PAGE_LOADED, PageLoaded(page_url="/"))

        assert seen == ["first", "second"]

    def test_returns_handler_results(self) -> None:
        bus = EventBus()
        bus.subscribe(PAGE_LOADED, lambda p: p.page_url)

        assert bus.publish(PAGE_LOADED, PageLoaded(page_url="/pricing")) == ["/pricing"]

    def test_raising_handler_does_not_stop_others(self, caplog) -> None:
        bus = EventBus()
        seen: list[str] = []

        def broken(payload):
            raise RuntimeError("handler bug")

        bus.subscribe(AUTH_RESOLVED, broken)
        bus.subscribe(AUTH_RESOLVED, lambda p: seen.append("ran"))

        results = bus.publish(AUTH_RESOLVED, AuthResolved(user=None))

        assert results == [None, None]
        assert seen == ["ran"]
        assert "Handler for auth-resolved failed" in caplog.text

    def test_unknown_event(self) -> None:
        assert EventBus().publish("nothing-subscribed") == []

    def test_unsubscribe(self) -> None:
        bus = EventBus()
        unsubscribe = bus.subscribe(PAGE_LOADED, lambda p: None)

        unsubscribe()
        unsubscribe()

        assert bus.handler_count(PAGE_LOADED) == 0


class TestPayloads:
    """Test event payloads."""

    def test_auth_resolved(self) -> None:
        assert AuthResolved(user={"id": "1"}).is_authenticated
        assert not AuthResolved(user=None).is_authenticated

    def test_page_loaded_defaults(self) -> None:
        assert PageLoaded(page_url="/").referrer is None
