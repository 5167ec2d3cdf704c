# ridr/core/platform.py
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from ridr.core.plugin import Plugin

if TYPE_CHECKING:
    from ridr.core.app import App
    from ridr.core.conversation import Conversation
    from ridr.core.handle_request import HandleRequest


class Platform(Plugin, ABC):
    """
    Adapter between one assistant platform's payloads and the runtime.

    Exactly one platform is bound per request: the first registered one
    whose ``is_request_related`` accepts the raw payload.
    """

    @abstractmethod
    def is_request_related(self, request_object: Any) -> bool:
        """Pure predicate: does this raw payload belong to this platform?"""
        ...

    @abstractmethod
    def create_conversation(self, app: "App", handle_request: "HandleRequest") -> "Conversation":
        """Build the per-request conversation from the transport's payload."""
        ...

    def finalize_response(self, output: list[dict], conversation: "Conversation") -> Any:
        """Turn collected output into this platform's response payload."""
        return {"output": output}
