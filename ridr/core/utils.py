# ridr/core/utils.py
from __future__ import annotations

import copy
import inspect
from typing import Any, Mapping


def deep_merge(target: dict, *sources: Mapping[str, Any] | None) -> dict:
    """
    Recursively merge *sources* into *target* (in place) and return it.

    Dicts are merged key by key, lists and scalars are replaced.
    Values taken from a source are deep-copied, so the result never
    aliases mutable parts of a source.
    """
    for source in sources:
        if not source:
            continue
        for key, value in source.items():
            current = target.get(key)
            if isinstance(current, dict) and isinstance(value, Mapping):
                deep_merge(current, value)
            elif isinstance(value, Mapping):
                target[key] = deep_merge({}, value)
            else:
                target[key] = copy.deepcopy(value)
    return target


def merged(*sources: Mapping[str, Any] | None) -> dict:
    """Return a new dict with all *sources* deep-merged left to right."""
    return deep_merge({}, *sources)


async def maybe_await(value: Any) -> Any:
    """Await *value* if it is awaitable (lets sync and async callbacks mix)."""
    if inspect.isawaitable(value):
        return await value
    return value
