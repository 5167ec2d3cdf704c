# ridr/plugins/router.py
"""
Dialogue router: decides which component handler serves the turn.

Resolution order for the (intent-mapped) intent:
1. the current component (from the session) and its ancestors
2. global handlers: handlers marked global, or any handler of a global component
3. the same two scopes again for ``UNHANDLED``, unless the intent is
   listed in ``routing.intents_to_skip_unhandled``

If nothing matches, the rest of the pipeline is stopped for this request.
"""
from __future__ import annotations

from typing import Optional

from ridr.core.component import UNHANDLED
from ridr.core.component_tree import ComponentTree
from ridr.core.conversation import Conversation, RouteMatch
from ridr.core.plugin import Plugin


class RouterPlugin(Plugin):
    def install(self, parent):
        return [("dialogue.router", self.route)]

    def route(self, conversation: Conversation) -> None:
        handle_request = conversation.handle_request
        routing = conversation.config.get("routing") or {}

        intent = conversation.input.intent or conversation.input.type
        mapped = (routing.get("intent_map") or {}).get(intent, intent)

        tree = handle_request.component_tree
        current = conversation.current_component_path

        match = find_route(tree, current, mapped)
        if match is None and mapped not in (routing.get("intents_to_skip_unhandled") or []):
            match = find_route(tree, current, UNHANDLED, intent=mapped)

        if match is None:
            handle_request.log.warning(f"No route for intent={mapped} (current={'.'.join(current) or '-'})")
            handle_request.stop_middleware_execution()
            return

        conversation.route = match
        handle_request.log.debug(f"Routed intent={mapped} to {match.path_str}.{match.handler}")


def find_route(
    tree: ComponentTree,
    current: tuple[str, ...],
    name: str,
    *,
    intent: Optional[str] = None,
) -> Optional[RouteMatch]:
    """Find a handler for *name* in the current scope, then among global handlers."""
    intent = intent or name
    is_unhandled = name == UNHANDLED

    if current:
        for node in tree.ancestors(current):
            handler = node.handler_for(name)
            if handler is not None:
                return RouteMatch(node.path, handler.name, intent, is_unhandled=is_unhandled)

    for node in tree:
        handler = node.handler_for(name, global_only=True)
        if handler is not None:
            return RouteMatch(node.path, handler.name, intent, is_global=True, is_unhandled=is_unhandled)
    return None
