# ridr/core/plugin.py
"""
Plugin base class.

A plugin is a named, configurable unit that contributes stage handlers.
Lifecycle::

    uninstalled --install()--> installed --mount()--> mounted
                                             ^            |
                                             +-dismount()-+

``install()`` runs once, when the plugin is registered with an
``Extensible``; it returns the (stage, handler) pairs the registry folds
into its middleware collection. ``initialize()`` runs once at app start,
``mount()``/``dismount()`` around every request.
"""
from __future__ import annotations

import copy
from enum import Enum
from typing import TYPE_CHECKING, Any, Iterable, Optional

from ridr.core.middleware import MiddlewareFunction
from ridr.core.utils import merged

if TYPE_CHECKING:
    from ridr.core.extensible import Extensible
    from ridr.core.handle_request import HandleRequest

Contributions = Iterable[tuple[str, MiddlewareFunction]]


class PluginState(str, Enum):
    UNINSTALLED = "uninstalled"
    INSTALLED = "installed"
    MOUNTED = "mounted"
    DISMOUNTED = "dismounted"


class Plugin:
    """Base class for all plugins (platforms included)."""

    # Extra attributes that hold per-request data. ``snapshot()`` deep-copies
    # them; every other attribute is shared with the original.
    data_fields: tuple[str, ...] = ()

    def __init__(self, config: Optional[dict] = None):
        self.init_config: dict = copy.deepcopy(config) if config else {}
        self.config: dict = merged(self.default_config(), config)
        self.state = PluginState.UNINSTALLED
        self.parent: Optional["Extensible"] = None

    @property
    def name(self) -> str:
        return type(self).__name__

    @property
    def skip_tests(self) -> bool:
        return bool(self.config.get("skip_tests", False))

    def default_config(self) -> dict:
        return {}

    def install(self, parent: "Extensible") -> Optional[Contributions]:
        """Return (stage_name, handler) pairs to register with *parent*."""
        return None

    async def initialize(self, parent: "Extensible") -> None:
        """One-time async setup at app start."""

    async def mount(self, handle_request: "HandleRequest") -> None:
        """Called before each request is processed."""

    async def dismount(self, handle_request: "HandleRequest") -> None:
        """Called after each request is processed."""

    def snapshot(self, rebind: Optional[dict[int, Any]] = None) -> "Plugin":
        """
        Request-scoped copy of this plugin.

        ``config`` and ``data_fields`` are deep-copied; everything else
        (clients, connections, callables) is shared. The copy is recorded
        in *rebind* so handlers bound to this plugin can be re-bound.
        """
        clone = copy.copy(self)
        clone.config = copy.deepcopy(self.config)
        clone.init_config = copy.deepcopy(self.init_config)
        for field_name in self.data_fields:
            setattr(clone, field_name, copy.deepcopy(getattr(self, field_name)))
        if rebind is not None:
            rebind[id(self)] = clone
        return clone

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, state={self.state.value})"
