# ridr/core/conversation.py
"""
Per-request conversational state, created by the bound platform and
passed to every pipeline handler.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from ridr.core.app import App
    from ridr.core.handle_request import HandleRequest
    from ridr.core.platform import Platform

COMPONENT_PATH_KEY = "component_path"


class InputType:
    LAUNCH = "LAUNCH"
    INTENT = "INTENT"
    TEXT = "TEXT"
    END = "END"


@dataclass
class Input:
    """Normalized user input of one turn"""
    type: str = InputType.INTENT
    intent: Optional[str] = None
    entities: dict[str, Any] = field(default_factory=dict)
    text: Optional[str] = None
    locale: Optional[str] = None


@dataclass(frozen=True)
class RouteMatch:
    """Routing decision: which component handler serves this turn"""
    path: tuple[str, ...]
    handler: str
    intent: str
    is_global: bool = False
    is_unhandled: bool = False

    @property
    def path_str(self) -> str:
        return ".".join(self.path)


class Conversation:
    """
    State of one request/response turn.

    ``response`` stays ``None`` until the output stage produces it; a
    conversation without a response writes nothing back to the transport.
    """

    def __init__(
        self,
        app: "App",
        handle_request: "HandleRequest",
        platform: "Platform",
        request: Any,
        *,
        input: Optional[Input] = None,
        session: Optional[dict] = None,
        user: Optional[dict] = None,
    ):
        self.app = app
        self.handle_request = handle_request
        self.platform = platform
        self.request = request
        self.input = input or Input()
        self.session: dict = session if session is not None else {}
        self.user: dict = user if user is not None else {}
        self.output: list[dict] = []
        self.response: Any = None
        self.component_data: dict[str, dict] = {}
        self.route: Optional[RouteMatch] = None

    @property
    def config(self) -> dict:
        """The request-scoped app config"""
        return self.handle_request.config

    @property
    def current_component_path(self) -> tuple[str, ...]:
        return tuple(self.session.get(COMPONENT_PATH_KEY) or ())

    def set_current_component(self, path: tuple[str, ...]) -> None:
        self.session[COMPONENT_PATH_KEY] = list(path)

    def t(self, key: str, **args: Any) -> str:
        return self.app.i18n.translate(key, self.input.locale, **args)

    def __repr__(self) -> str:
        return (
            f"Conversation(platform={self.platform.name!r}, intent={self.input.intent!r}, "
            f"has_response={self.response is not None})"
        )
