# ridr/core/component.py
"""
Conversational components: units of dialogue logic.

A component is a class deriving from ``BaseComponent``. Its options
(name, parent, global flag, static config, sub-components) come from the
``@component`` decorator and can be overridden per registration with a
``ComponentDeclaration``. Intent handlers are methods marked with
``@handle``; a method named ``UNHANDLED`` is the component's fallback.

Usage::

    @component(name="Order", is_global=True)
    class OrderComponent(BaseComponent):
        @handle("OrderIntent")
        async def order(self):
            self.tell(self.t("order.confirm", item=self.conversation.input.entities["item"]))
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from ridr.core.component_tree import RegisteredComponent
    from ridr.core.conversation import Conversation

UNHANDLED = "UNHANDLED"

_OPTIONS_ATTR = "__ridr_component_options__"
_HANDLER_ATTR = "__ridr_handler__"


class ComponentOptions(BaseModel):
    """Static options of a component."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    name: Optional[str] = None
    parent: Optional[str] = None  # dotted path of the parent component
    global_: bool = Field(default=False, alias="global")
    config: dict[str, Any] = Field(default_factory=dict)
    components: list[Any] = Field(default_factory=list)


@dataclass(frozen=True)
class HandlerOptions:
    """Options attached to a handler method by ``@handle``."""
    intents: tuple[str, ...]
    global_: bool = False


class BaseComponent:
    """
    Base class for components. Instantiated once per handled turn.

    ``data`` is the component's request-scoped data bag; it lives on the
    conversation, so it never outlives the request.
    """

    def __init__(self, conversation: "Conversation", metadata: "RegisteredComponent"):
        self.conversation = conversation
        self.metadata = metadata

    @property
    def data(self) -> dict:
        return self.conversation.component_data.setdefault(self.metadata.path_str, {})

    @property
    def config(self) -> dict:
        return self.metadata.config

    def t(self, key: str, **args: Any) -> str:
        return self.conversation.t(key, **args)

    def tell(self, message: str) -> None:
        """Add a message and end the session."""
        self.conversation.output.append({"message": message, "listen": False})

    def ask(self, message: str, reprompt: Optional[str] = None) -> None:
        """Add a message and keep listening."""
        self.conversation.output.append(
            {"message": message, "reprompt": reprompt or message, "listen": True}
        )


class ComponentDeclaration:
    """Registers a component class with options that override its decorator's."""

    def __init__(
        self,
        component: type[BaseComponent],
        options: Union[ComponentOptions, dict, None] = None,
    ):
        if not (isinstance(component, type) and issubclass(component, BaseComponent)):
            raise TypeError(f"{component!r} is not a BaseComponent subclass")
        self.component = component
        if isinstance(options, dict):
            options = ComponentOptions.model_validate(options)
        self.options = options

    def resolve_options(self) -> ComponentOptions:
        base = get_component_options(self.component)
        if self.options is None:
            return base
        return base.model_copy(update=self.options.model_dump(exclude_unset=True))

    def __repr__(self) -> str:
        return f"ComponentDeclaration({self.component.__name__})"


ComponentUsable = Union[type[BaseComponent], ComponentDeclaration]


def get_component_options(cls: type[BaseComponent]) -> ComponentOptions:
    # Only options set on the class itself, not inherited from a base component
    options = cls.__dict__.get(_OPTIONS_ATTR)
    return options.model_copy(deep=True) if options else ComponentOptions()


def _set_component_options(cls: type[BaseComponent], **update: Any) -> None:
    options = get_component_options(cls)
    setattr(cls, _OPTIONS_ATTR, options.model_copy(update=update))


def component(
    name: Optional[str] = None,
    *,
    parent: Optional[str] = None,
    is_global: Optional[bool] = None,
    config: Optional[dict] = None,
    components: Optional[list] = None,
) -> Callable[[type[BaseComponent]], type[BaseComponent]]:
    """Class decorator setting a component's options."""

    def decorator(cls: type[BaseComponent]) -> type[BaseComponent]:
        update: dict[str, Any] = {}
        if name is not None:
            update["name"] = name
        if parent is not None:
            update["parent"] = parent
        if is_global is not None:
            update["global_"] = is_global
        if config is not None:
            update["config"] = dict(config)
        if components is not None:
            update["components"] = list(components)
        _set_component_options(cls, **update)
        return cls

    return decorator


def global_component(is_global: bool = True) -> Callable[[type[BaseComponent]], type[BaseComponent]]:
    """Mark every handler of a component as reachable from anywhere."""

    def decorator(cls: type[BaseComponent]) -> type[BaseComponent]:
        _set_component_options(cls, global_=is_global)
        return cls

    return decorator


def handle(*intents: str, global_: bool = False) -> Callable[[Callable], Callable]:
    """
    Mark a component method as the handler of *intents*.

    Without intents the method name is used. ``global_=True`` makes this
    handler reachable regardless of the current component.
    """

    def decorator(fn: Callable) -> Callable:
        setattr(fn, _HANDLER_ATTR, HandlerOptions(intents=intents or (fn.__name__,), global_=global_))
        return fn

    return decorator


def collect_handlers(cls: type[BaseComponent]) -> dict[str, HandlerOptions]:
    """Map method name -> handler options for every handler on *cls*."""
    handlers: dict[str, HandlerOptions] = {}
    for attr in dir(cls):
        if attr.startswith("__"):
            continue
        member = getattr(cls, attr, None)
        if not callable(member):
            continue
        options = getattr(member, _HANDLER_ATTR, None)
        if options is not None:
            handlers[attr] = options
        elif attr == UNHANDLED:
            handlers[attr] = HandlerOptions(intents=(UNHANDLED,))
    return handlers
