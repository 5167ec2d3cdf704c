# ridr/core/app.py
"""
Application orchestrator.

Owns the root plugin registry, the root component tree and the fixed
RIDR pipeline (Request, Interpretation, Dialogue, Response). ``handle()``
is the single request entry point::

    app = App({"routing": {"intent_map": {"AMAZON.StopIntent": "END"}}})
    app.use(CorePlatform(), MainComponent)
    await app.initialize()
    await app.handle(InMemoryServer(payload))
"""
from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Optional, Union

from ridr.core.app_config import validate_app_config
from ridr.core.component import ComponentUsable
from ridr.core.component_tree import ComponentTree, partition_usables
from ridr.core.conversation import Conversation
from ridr.core.errors import MatchingPlatformNotFoundError
from ridr.core.extensible import Extensible
from ridr.core.handle_request import HandleRequest
from ridr.core.i18n import I18n
from ridr.core.platform import Platform
from ridr.core.plugin import Plugin
from ridr.core.utils import deep_merge, maybe_await
from ridr.infra.logging_config import get_logger
from ridr.plugins import BasicLogging, HandlerPlugin, OutputPlugin, RouterPlugin
from ridr.transport.server import Server

logger = get_logger(__name__)

APP_MIDDLEWARES: tuple[str, ...] = (
    "request.start",
    "request",
    "request.end",
    "interpretation.start",
    "interpretation.asr",
    "interpretation.nlu",
    "interpretation.end",
    "dialogue.start",
    "dialogue.router",
    "dialogue.logic",
    "dialogue.end",
    "response.start",
    "response.output",
    "response.tts",
    "response.end",
)

AppErrorCallback = Callable[[Exception, Optional[Conversation]], Union[Any, Awaitable[Any]]]


class App(Extensible):
    def __init__(
        self,
        config: Optional[dict] = None,
        *,
        on_error: Optional[AppErrorCallback] = None,
        test_mode: Optional[bool] = None,
    ):
        config = dict(config or {})
        components = config.pop("components", None) or []
        validate_app_config({k: v for k, v in config.items() if k != "plugins"})

        self._initialized = False
        self._initializing: Optional[asyncio.Task] = None
        self._error_callback = on_error
        self.component_tree = ComponentTree()
        super().__init__(config, test_mode=test_mode)

        logging_config = self.config.get("logging")
        if logging_config is True:
            self.use(BasicLogging({"request": True, "response": True}))
        elif isinstance(logging_config, dict):
            self.use(BasicLogging(logging_config))

        self.use(RouterPlugin(), HandlerPlugin(), OutputPlugin())

        if components:
            self.component_tree.add(*components)
        self.i18n = I18n(self.config.get("i18n") or {})

    def default_config(self) -> dict:
        return {"logging": True}

    def middleware_names(self) -> list[str]:
        return list(APP_MIDDLEWARES)

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def platforms(self) -> list[Platform]:
        return [p for p in self.plugins.values() if isinstance(p, Platform)]

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def use(self, *usables: Union[Plugin, ComponentUsable]) -> "App":
        """Register plugins and/or components; mixed input is allowed."""
        plugins, components = partition_usables(usables)
        if plugins:
            self.use_plugins(*plugins)
        if components:
            self.use_components(*components)
        return self

    def use_plugins(self, *plugins: Plugin) -> "App":
        super().use(*plugins)
        return self

    def use_components(self, *components: ComponentUsable) -> "App":
        self.component_tree.add(*components)
        return self

    def configure(self, config: dict) -> None:
        """
        Deep-merge *config* into the current config.

        ``plugins`` and ``components`` are registered through ``use()``
        instead of being merged.
        """
        config = dict(config)
        usables = [*(config.pop("plugins", None) or []), *(config.pop("components", None) or [])]
        validate_app_config(config)
        deep_merge(self.config, config)
        if "i18n" in config and not self._initialized:
            self.i18n = I18n(self.config.get("i18n") or {})
        if usables:
            self.use(*usables)

    def on_error(self, callback: AppErrorCallback) -> None:
        self._error_callback = callback

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def initialize(self) -> None:
        """
        Run i18n and plugin setup once.

        Overlapping calls wait for the same setup. A failure is reported to
        the error sink by the call that started the setup; the next call
        after a failure starts over.
        """
        if self._initialized:
            return
        task = self._initializing
        started_here = task is None
        if started_here:
            task = self._initializing = asyncio.get_running_loop().create_task(self._setup())
        try:
            await asyncio.shield(task)
        except Exception as exc:
            if self._initializing is task:
                self._initializing = None
            if started_here or self._error_callback is None:
                return await self.handle_error(exc)
        return None

    async def _setup(self) -> None:
        await self.i18n.initialize()
        await self.initialize_plugins()
        self._initialized = True
        logger.info(f"App initialized: plugins={list(self.plugins)}, components={len(self.component_tree)}")

    async def handle(self, server: Server) -> Any:
        conversation: Optional[Conversation] = None
        try:
            handle_request = HandleRequest(self, server)
            await handle_request.mount()

            request_object = server.get_request_object()
            platform = next(
                (p for p in handle_request.platforms if p.is_request_related(request_object)),
                None,
            )
            if platform is None:
                raise MatchingPlatformNotFoundError(request_object)
            handle_request.platform = platform
            handle_request.log = handle_request.log.bind(platform=platform.name)
            conversation = platform.create_conversation(self, handle_request)

            # RIDR pipeline
            await handle_request.middleware_collection.run(APP_MIDDLEWARES, conversation)

            await handle_request.dismount()

            if not conversation.response:
                handle_request.log.debug("No response produced, nothing to send")
                return None

            await maybe_await(server.set_response(conversation.response))
        except Exception as exc:
            return await self.handle_error(exc, conversation)
        return None

    async def handle_error(self, error: Exception, conversation: Optional[Conversation] = None) -> Any:
        """Pass *error* to the error callback, or re-raise it if there is none."""
        if self._error_callback is None:
            raise error
        logger.error(f"Handling error: {error.__class__.__name__}: {error}")
        return await maybe_await(self._error_callback(error, conversation))
