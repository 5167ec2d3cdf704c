# ridr/core/extensible.py
"""
Plugin registry shared by the app, the per-request context and
plugins that carry plugins of their own.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

from ridr.config import settings
from ridr.core.errors import InvalidMiddlewareError
from ridr.core.middleware import Middleware, MiddlewareCollection, MiddlewareFunction, rebind_handler
from ridr.core.plugin import Plugin, PluginState
from ridr.core.utils import merged
from ridr.infra.logging_config import get_logger

if TYPE_CHECKING:
    from ridr.core.handle_request import HandleRequest

logger = get_logger(__name__)


class Extensible:
    """
    Ordered registry of plugins plus the middleware collection they
    contribute to.

    Config keys handled here:
        plugins: plugin instances registered at construction.
        plugin:  per-plugin config overrides, keyed by plugin name.
    """

    def __init__(self, config: Optional[dict] = None, *, test_mode: Optional[bool] = None):
        config = dict(config or {})
        plugins = config.pop("plugins", None) or []
        self.config: dict = merged(self.default_config(), config)
        self._init_registry(test_mode)
        if plugins:
            self.use(*plugins)

    def _init_registry(self, test_mode: Optional[bool] = None) -> None:
        self.test_mode: bool = settings.test_mode if test_mode is None else test_mode
        self.plugins: dict[str, Plugin] = {}
        # name -> (stage, handler) pairs that plugin added to our collection
        self._contributions: dict[str, list[tuple[str, MiddlewareFunction]]] = {}
        self.middleware_collection = self.initialize_middleware_collection()

    def default_config(self) -> dict:
        return {}

    def middleware_names(self) -> list[str]:
        """Stage catalog of this registry."""
        return []

    def initialize_middleware_collection(self) -> MiddlewareCollection:
        return MiddlewareCollection(*self.middleware_names())

    def middleware(self, name: str) -> Middleware | None:
        return self.middleware_collection.get(name)

    def hook(self, name: str, fn: MiddlewareFunction) -> None:
        self.middleware_collection.use(name, fn)

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def use(self, *plugins: Plugin) -> "Extensible":
        for plugin in plugins:
            if self.test_mode and plugin.skip_tests:
                logger.debug(f"Test mode: skipping plugin {plugin.name}")
                continue
            self._register(plugin)
        return self

    def _register(self, plugin: Plugin) -> None:
        """
        Install *plugin* and fold its contributions.

        Every contributed stage is checked before the registry changes, so
        a failing install leaves the registry, the pipeline and a plugin
        being replaced exactly as they were.
        """
        name = plugin.name
        override = (self.config.get("plugin") or {}).get(name)
        existing = self.plugins.get(name)
        previous_config, previous_parent = plugin.config, plugin.parent

        if existing is not None and type(existing) is type(plugin):
            # Same class registered again: extend the config, don't reset it
            plugin.config = merged(existing.config, plugin.init_config)
        if override:
            plugin.config = merged(plugin.config, override)

        plugin.parent = self
        try:
            contributions = list(plugin.install(self) or ())
            nested_stages: list[str] = []
            if isinstance(plugin, Extensible):
                # Fold the nested registry's pipeline into ours (catalog union)
                for middleware in plugin.middleware_collection:
                    nested_stages.append(middleware.name)
                    contributions.extend((middleware.name, fn) for fn in middleware.fns)
            for stage, _ in contributions:
                if not self.middleware_collection.has(stage) and stage not in nested_stages:
                    raise InvalidMiddlewareError(stage, self.middleware_collection.names)
        except Exception:
            plugin.config, plugin.parent = previous_config, previous_parent
            raise

        for stage in nested_stages:
            self.middleware_collection.add(stage)
        if existing is not None:
            self._drop_contributions(name)
            existing.state = PluginState.UNINSTALLED
            logger.debug(f"Replacing plugin {name}")

        # Assigning an existing key keeps the replaced plugin's position
        self.plugins[name] = plugin
        self._contributions[name] = self.middleware_collection.fold(contributions)
        plugin.state = PluginState.INSTALLED
        logger.debug(f"Installed plugin {name} ({len(contributions)} handlers)")

    def _drop_contributions(self, name: str) -> None:
        for stage, fn in self._contributions.pop(name, []):
            self.middleware_collection.disable(stage, fn)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def initialize_plugins(self) -> None:
        """Initialize every plugin once, in registration order; first failure wins."""
        for plugin in list(self.plugins.values()):
            await plugin.initialize(self)

    async def mount_plugins(self, handle_request: "HandleRequest") -> None:
        for plugin in list(self.plugins.values()):
            await plugin.mount(handle_request)
            plugin.state = PluginState.MOUNTED

    async def dismount_plugins(self, handle_request: "HandleRequest") -> None:
        for plugin in list(self.plugins.values()):
            await plugin.dismount(handle_request)
            plugin.state = PluginState.DISMOUNTED

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    def snapshot_into(self, owner: "Extensible", rebind: Optional[dict[int, Any]] = None) -> None:
        """
        Give *owner* an independent copy of this registry.

        Every plugin is snapshotted and re-parented to *owner*; handlers
        bound to a plugin are re-bound to that plugin's copy, so the two
        registries share no handler lists and no plugin config.
        """
        rebind = {} if rebind is None else rebind
        plugins: dict[str, Plugin] = {}
        for name, plugin in self.plugins.items():
            clone = plugin.snapshot(rebind)
            clone.parent = owner
            plugins[name] = clone
        owner.plugins = plugins
        owner._contributions = {
            name: [(stage, rebind_handler(fn, rebind)) for stage, fn in pairs]
            for name, pairs in self._contributions.items()
        }
        owner.middleware_collection = self.middleware_collection.snapshot(rebind)


class ExtensiblePlugin(Plugin, Extensible):
    """
    A plugin with its own registry and stage catalog.

    Nested plugins passed to the constructor are registered when this
    plugin is installed, so they see the owner's test mode. The nested
    collection is folded into the owner's collection on registration.
    """

    def __init__(self, config: Optional[dict] = None, plugins: Optional[list[Plugin]] = None):
        Plugin.__init__(self, config)
        self._init_registry()
        self._pending_plugins: list[Plugin] = list(plugins or [])

    def install(self, parent: Extensible):
        self.test_mode = parent.test_mode
        pending, self._pending_plugins = self._pending_plugins, []
        self.use(*pending)
        return None

    async def initialize(self, parent: Extensible) -> None:
        await self.initialize_plugins()

    async def mount(self, handle_request: "HandleRequest") -> None:
        await self.mount_plugins(handle_request)

    async def dismount(self, handle_request: "HandleRequest") -> None:
        await self.dismount_plugins(handle_request)

    def snapshot(self, rebind: Optional[dict[int, Any]] = None) -> "ExtensiblePlugin":
        rebind = {} if rebind is None else rebind
        clone = Plugin.snapshot(self, rebind)
        self.snapshot_into(clone, rebind)
        return clone
