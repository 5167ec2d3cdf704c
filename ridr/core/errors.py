# ridr/core/errors.py
"""
Typed errors raised by the orchestration core.

None of these are recovered locally: they propagate to the app's error
callback (``App.handle_error``), or to the caller of ``initialize()`` /
``handle()`` when no callback is registered.
"""
from __future__ import annotations

from typing import Any


class RidrError(Exception):
    """Base class for all runtime errors."""

    def __init__(self, detail: str = "Internal error"):
        self.detail = detail
        super().__init__(detail)


class InvalidMiddlewareError(RidrError):
    """A handler was registered at a stage that is not in the catalog."""

    def __init__(self, name: str, available: list[str] | None = None):
        self.name = name
        detail = f"Can not use middleware '{name}': it does not exist"
        if available:
            detail += f". Available: {', '.join(available)}"
        super().__init__(detail)


class InvalidComponentError(RidrError):
    """The given object can not be registered as a component."""


class DuplicateComponentError(RidrError):
    """Two registrations resolve to the same fully-qualified path."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Component '{path}' is already registered")


class MissingParentComponentError(RidrError):
    """A component's parent is not registered before or with the child."""

    def __init__(self, name: str, parent: str):
        self.name = name
        self.parent = parent
        super().__init__(
            f"Parent component '{parent}' of '{name}' is not registered"
        )


class MatchingPlatformNotFoundError(RidrError):
    """No registered platform recognizes the inbound payload."""

    def __init__(self, request_object: Any):
        self.request_object = request_object
        preview = repr(request_object)
        if len(preview) > 200:
            preview = preview[:200] + "..."
        super().__init__(f"Could not find a matching platform for request: {preview}")


class HandlerNotFoundError(RidrError):
    """A routed component has no method with the routed handler name."""

    def __init__(self, component: str, handler: str):
        self.component = component
        self.handler = handler
        super().__init__(f"Handler '{handler}' not found in component '{component}'")


class InvalidConfigError(RidrError):
    """App config does not match the schema."""
