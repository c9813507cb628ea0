from attribution_engine.shell.hooks.events import (
    AUTH_RESOLVED,
    PAGE_LOADED,
    AuthResolved,
    EventBus,
    PageLoaded,
)

__all__ = ["AUTH_RESOLVED", "PAGE_LOADED", "AuthResolved", "EventBus", "PageLoaded"]
