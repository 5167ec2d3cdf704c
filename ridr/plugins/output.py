# ridr/plugins/output.py
from __future__ import annotations

from ridr.core.conversation import Conversation
from ridr.core.plugin import Plugin
from ridr.core.utils import maybe_await


class OutputPlugin(Plugin):
    """Builds the platform response from collected output at ``response.output``."""

    def install(self, parent):
        return [("response.output", self.output)]

    async def output(self, conversation: Conversation) -> None:
        # A handler may have set a raw response itself
        if conversation.response is not None or not conversation.output:
            return
        conversation.response = await maybe_await(
            conversation.platform.finalize_response(conversation.output, conversation)
        )
