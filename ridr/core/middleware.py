# ridr/core/middleware.py
"""
Named pipeline stages and the ordered collection that runs them.

A ``MiddlewareCollection`` owns one ``Middleware`` (stage) per catalog
name. ``run()`` is strictly sequential: every handler of a stage is
awaited before the next one starts, and no handler of stage N+1 runs
before stage N is done. Handlers may be sync or async.
"""
from __future__ import annotations

import types
from typing import Any, Awaitable, Callable, Iterable, Mapping, Sequence, Union

from ridr.core.errors import InvalidMiddlewareError
from ridr.core.utils import maybe_await
from ridr.infra.logging_config import get_logger

logger = get_logger(__name__)

MiddlewareFunction = Callable[..., Union[Awaitable[Any], Any]]


class Middleware:
    """A single stage: a name and its handlers in registration order."""

    def __init__(self, name: str, *fns: MiddlewareFunction):
        self.name = name
        self.fns: list[MiddlewareFunction] = list(fns)

    @property
    def enabled(self) -> bool:
        return bool(self.fns)

    def use(self, *fns: MiddlewareFunction) -> "Middleware":
        self.fns.extend(fns)
        return self

    def remove(self, *fns: MiddlewareFunction) -> "Middleware":
        """Remove handlers by reference (equality, so bound methods match)."""
        for fn in fns:
            try:
                self.fns.remove(fn)
            except ValueError:
                logger.debug(f"Handler {fn!r} is not registered at '{self.name}'")
        return self

    def clear(self) -> None:
        self.fns.clear()

    async def run(self, *args: Any) -> None:
        # Handlers added during the stage run next time, removed ones are skipped
        for fn in list(self.fns):
            if fn not in self.fns:
                continue
            await maybe_await(fn(*args))

    def __repr__(self) -> str:
        return f"Middleware({self.name!r}, handlers={len(self.fns)})"


class MiddlewareCollection:
    """Ordered mapping of stage name -> Middleware with a fixed catalog."""

    def __init__(self, *names: str):
        self.middlewares: dict[str, Middleware] = {}
        for name in names:
            self.add(name)

    @property
    def names(self) -> list[str]:
        return list(self.middlewares.keys())

    def add(self, name: str) -> Middleware:
        """Add a stage to the catalog (no-op if it already exists)."""
        if name not in self.middlewares:
            self.middlewares[name] = Middleware(name)
        return self.middlewares[name]

    def has(self, name: str) -> bool:
        return name in self.middlewares

    def get(self, name: str) -> Middleware | None:
        return self.middlewares.get(name)

    def use(self, name: str, *fns: MiddlewareFunction) -> "MiddlewareCollection":
        middleware = self.middlewares.get(name)
        if middleware is None:
            raise InvalidMiddlewareError(name, self.names)
        middleware.use(*fns)
        return self

    def disable(self, name: str, *fns: MiddlewareFunction) -> "MiddlewareCollection":
        """Remove specific handlers from a stage."""
        middleware = self.middlewares.get(name)
        if middleware is not None:
            middleware.remove(*fns)
        return self

    def remove(self, *names: str) -> "MiddlewareCollection":
        """Clear the handler lists of the given stages."""
        for name in names:
            middleware = self.middlewares.get(name)
            if middleware is not None:
                middleware.clear()
        return self

    def clear(self) -> None:
        self.remove(*self.names)

    async def run(self, names: Sequence[str] | str, *args: Any) -> None:
        """
        Run the given stages in order against *args*.

        Unknown names are skipped. An exception from any handler stops the
        run and propagates; later handlers and stages are not executed.
        """
        if isinstance(names, str):
            names = [names]
        for name in names:
            middleware = self.middlewares.get(name)
            if middleware is None or not middleware.enabled:
                continue
            await middleware.run(*args)

    def merge(self, other: "MiddlewareCollection") -> "MiddlewareCollection":
        """Append *other*'s handlers by stage name, adding stages we lack."""
        for name, middleware in other.middlewares.items():
            self.add(name).use(*middleware.fns)
        return self

    def fold(self, contributions: Iterable[tuple[str, MiddlewareFunction]]) -> list[tuple[str, MiddlewareFunction]]:
        """Register (stage, handler) pairs; returns what was registered."""
        folded = []
        for name, fn in contributions:
            self.use(name, fn)
            folded.append((name, fn))
        return folded

    def snapshot(self, rebind: Mapping[int, object] | None = None) -> "MiddlewareCollection":
        """
        Independent copy with fresh handler lists.

        *rebind* maps ``id(original)`` to a replacement object; handlers that
        are bound methods of an original are re-bound to its replacement.
        """
        rebind = rebind or {}
        clone = MiddlewareCollection()
        for name, middleware in self.middlewares.items():
            clone.add(name).use(*(rebind_handler(fn, rebind) for fn in middleware.fns))
        return clone

    def __iter__(self):
        return iter(self.middlewares.values())

    def __len__(self) -> int:
        return len(self.middlewares)

    def __repr__(self) -> str:
        return f"MiddlewareCollection({self.names!r})"


def rebind_handler(fn: MiddlewareFunction, rebind: Mapping[int, object]) -> MiddlewareFunction:
    owner = getattr(fn, "__self__", None)
    if isinstance(fn, types.MethodType) and id(owner) in rebind:
        return types.MethodType(fn.__func__, rebind[id(owner)])
    return fn
