# ridr/core/handle_request.py
"""
Request-scoped snapshot of the app.

Built fresh for every inbound request: config, plugin registry,
middleware collection and component tree are copied from the app when
the request starts, so ``App.use()`` calls made while the request is in
flight never change what this request sees (and vice versa).
"""
from __future__ import annotations

import copy
import uuid
from typing import TYPE_CHECKING, Optional

from ridr.core.component_tree import partition_usables
from ridr.core.extensible import Extensible
from ridr.core.platform import Platform
from ridr.infra.logging_config import LogContext, get_logger

if TYPE_CHECKING:
    from ridr.core.app import App
    from ridr.transport.server import Server

logger = get_logger(__name__)


class HandleRequest(Extensible):
    def __init__(self, app: "App", server: "Server"):
        # Extensible.__init__ is not called: the registry comes from the app snapshot
        self.app = app
        self.server = server
        self.config: dict = copy.deepcopy(app.config)
        self.test_mode = app.test_mode
        app.snapshot_into(self)
        self.component_tree = app.component_tree.snapshot()
        self.platform: Optional[Platform] = None
        self.request_id: str = getattr(server, "request_id", None) or str(uuid.uuid4())
        self.log = LogContext(logger, request_id=self.request_id)

    def middleware_names(self) -> list[str]:
        return self.app.middleware_names()

    @property
    def platforms(self) -> list[Platform]:
        return [p for p in self.plugins.values() if isinstance(p, Platform)]

    def use(self, *usables) -> "HandleRequest":
        """Request-scoped registration; the app is not affected."""
        plugins, components = partition_usables(usables)
        if plugins:
            super().use(*plugins)
        if components:
            self.component_tree.add(*components)
        return self

    async def mount(self) -> None:
        await self.mount_plugins(self)

    async def dismount(self) -> None:
        await self.dismount_plugins(self)

    def stop_middleware_execution(self) -> None:
        """Drop every remaining handler of this request's pipeline."""
        self.log.debug("Middleware execution stopped")
        self.middleware_collection.remove(*self.middleware_collection.names)
