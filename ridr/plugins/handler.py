# ridr/plugins/handler.py
from __future__ import annotations

from ridr.core.conversation import Conversation
from ridr.core.errors import HandlerNotFoundError
from ridr.core.plugin import Plugin
from ridr.core.utils import maybe_await


class HandlerPlugin(Plugin):
    """Runs the routed component handler at ``dialogue.logic``."""

    def install(self, parent):
        return [("dialogue.logic", self.handle)]

    async def handle(self, conversation: Conversation) -> None:
        route = conversation.route
        if route is None:
            return

        handle_request = conversation.handle_request
        metadata = handle_request.component_tree.get_node_at(route.path)
        if metadata is None:
            # Component removed from the request's tree after routing
            raise HandlerNotFoundError(route.path_str, route.handler)

        instance = metadata.component(conversation, metadata)
        fn = getattr(instance, route.handler, None)
        if fn is None or not callable(fn):
            raise HandlerNotFoundError(route.path_str, route.handler)

        handle_request.log.bind(component=route.path_str).debug(f"Running handler {route.handler}")
        conversation.set_current_component(route.path)
        await maybe_await(fn())
