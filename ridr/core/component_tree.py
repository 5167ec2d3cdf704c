# ridr/core/component_tree.py
"""
Registry of components keyed by fully-qualified path (``Parent.Child``).

The app builds one tree at configuration time; every request works on a
``snapshot()`` so request-time changes never reach another request.
"""
from __future__ import annotations

import copy
from dataclasses import dataclass, field, replace
from typing import Iterator, Optional, Sequence, Union

from ridr.core.component import (
    BaseComponent,
    ComponentDeclaration,
    ComponentOptions,
    ComponentUsable,
    collect_handlers,
)
from ridr.core.errors import (
    DuplicateComponentError,
    InvalidComponentError,
    MissingParentComponentError,
)
from ridr.core.plugin import Plugin
from ridr.infra.logging_config import get_logger

logger = get_logger(__name__)

PathLike = Union[str, Sequence[str]]


def to_path(path: PathLike) -> tuple[str, ...]:
    if isinstance(path, str):
        return tuple(part for part in path.split(".") if part)
    return tuple(path)


@dataclass(frozen=True)
class RegisteredHandler:
    name: str                   # method name on the component class
    intents: tuple[str, ...]
    is_global: bool = False


@dataclass
class RegisteredComponent:
    """Metadata of one registered component."""
    name: str
    path: tuple[str, ...]
    component: type[BaseComponent]
    options: ComponentOptions
    config: dict = field(default_factory=dict)
    handlers: tuple[RegisteredHandler, ...] = ()

    @property
    def path_str(self) -> str:
        return ".".join(self.path)

    @property
    def parent_path(self) -> tuple[str, ...]:
        return self.path[:-1]

    @property
    def is_global(self) -> bool:
        return self.options.global_

    def handler_for(self, intent: str, *, global_only: bool = False) -> Optional[RegisteredHandler]:
        for handler in self.handlers:
            if intent not in handler.intents:
                continue
            if global_only and not (handler.is_global or self.is_global):
                continue
            return handler
        return None

    def copy(self) -> "RegisteredComponent":
        return replace(
            self,
            options=self.options.model_copy(deep=True),
            config=copy.deepcopy(self.config),
        )


@dataclass
class _Pending:
    component: type[BaseComponent]
    options: ComponentOptions
    parent: tuple[str, ...]

    @property
    def name(self) -> str:
        return self.options.name or self.component.__name__


class ComponentTree:
    def __init__(self, *usables: ComponentUsable):
        self.components: dict[str, RegisteredComponent] = {}
        if usables:
            self.add(*usables)

    def add(self, *usables: ComponentUsable) -> list[RegisteredComponent]:
        """
        Register components (and their declared sub-components).

        Parents must be registered already or be part of the same call.
        Nothing is registered if any item fails.

        Raises:
            DuplicateComponentError: path already registered
            MissingParentComponentError: parent never became available
                (absent, forward reference to a later call, or a cycle)
        """
        staged = dict(self.components)
        added: list[RegisteredComponent] = []
        pending = [_to_pending(usable) for usable in usables]

        while pending:
            remaining: list[_Pending] = []
            progressed = False
            for item in pending:
                if item.parent and ".".join(item.parent) not in staged:
                    remaining.append(item)
                    continue
                registered = _register(staged, item)
                progressed = True
                added.append(registered)
                # Sub-components are children of the component that declares them
                remaining.extend(
                    _to_pending(child, parent=registered.path)
                    for child in item.options.components
                )
            if not progressed:
                first = remaining[0]
                raise MissingParentComponentError(first.name, ".".join(first.parent))
            pending = remaining

        self.components = staged
        for registered in added:
            logger.debug(f"Registered component {registered.path_str}")
        return added

    def get_node_at(self, path: PathLike) -> Optional[RegisteredComponent]:
        return self.components.get(".".join(to_path(path)))

    def get_current(self, current_path: Optional[PathLike]) -> Optional[RegisteredComponent]:
        """The active component during routing, if the path is still registered."""
        if not current_path:
            return None
        return self.get_node_at(current_path)

    def get_node_relative_to(self, name: str, path: Optional[PathLike] = None) -> Optional[RegisteredComponent]:
        """Resolve *name* as a child of *path* or of one of its ancestors, then at the root."""
        base = to_path(path) if path else ()
        for depth in range(len(base), -1, -1):
            node = self.get_node_at(base[:depth] + to_path(name))
            if node is not None:
                return node
        return None

    def ancestors(self, path: PathLike) -> Iterator[RegisteredComponent]:
        """The node at *path* followed by its registered ancestors, nearest first."""
        parts = to_path(path)
        for depth in range(len(parts), 0, -1):
            node = self.get_node_at(parts[:depth])
            if node is not None:
                yield node

    def global_components(self) -> list[RegisteredComponent]:
        return [c for c in self.components.values() if c.is_global]

    def snapshot(self) -> "ComponentTree":
        clone = ComponentTree()
        clone.components = {path: node.copy() for path, node in self.components.items()}
        return clone

    def __iter__(self) -> Iterator[RegisteredComponent]:
        return iter(list(self.components.values()))

    def __len__(self) -> int:
        return len(self.components)

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, (str, tuple, list)):
            return False
        return ".".join(to_path(path)) in self.components


def is_component_usable(usable: object) -> bool:
    if isinstance(usable, ComponentDeclaration):
        return True
    return isinstance(usable, type) and issubclass(usable, BaseComponent)


def partition_usables(usables: Sequence[object]) -> tuple[list[Plugin], list[ComponentUsable]]:
    """Split ``use()`` arguments into plugins and components."""
    plugins: list[Plugin] = []
    components: list[ComponentUsable] = []
    for usable in usables:
        if isinstance(usable, Plugin):
            plugins.append(usable)
        elif is_component_usable(usable):
            components.append(usable)  # type: ignore[arg-type]
        else:
            raise InvalidComponentError(f"Can not use {usable!r}: not a plugin or component")
    return plugins, components


def _to_pending(usable: object, parent: tuple[str, ...] = ()) -> _Pending:
    if isinstance(usable, ComponentDeclaration):
        cls, options = usable.component, usable.resolve_options()
    elif isinstance(usable, type) and issubclass(usable, BaseComponent):
        cls, options = usable, ComponentDeclaration(usable).resolve_options()
    else:
        raise InvalidComponentError(f"{usable!r} is not a component class or declaration")

    if not parent and options.parent:
        parent = to_path(options.parent)
    return _Pending(component=cls, options=options, parent=parent)


def _register(staged: dict[str, RegisteredComponent], item: _Pending) -> RegisteredComponent:
    path = item.parent + (item.name,)
    key = ".".join(path)
    if key in staged:
        raise DuplicateComponentError(key)

    handlers = tuple(
        RegisteredHandler(name=method, intents=options.intents, is_global=options.global_)
        for method, options in sorted(collect_handlers(item.component).items())
    )
    registered = RegisteredComponent(
        name=item.name,
        path=path,
        component=item.component,
        options=item.options,
        config=copy.deepcopy(item.options.config),
        handlers=handlers,
    )
    staged[key] = registered
    return registered

