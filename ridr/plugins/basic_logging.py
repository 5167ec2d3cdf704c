# ridr/plugins/basic_logging.py
from __future__ import annotations

import json

from ridr.core.conversation import Conversation
from ridr.core.plugin import Plugin


class BasicLogging(Plugin):
    """
    Logs the raw request at ``request.start`` and the final response at
    ``response.end``, through the request's log context.

    Config:
        request: log the incoming payload
        response: log the outgoing response
        indentation: JSON indent used for the dumps
    """

    def default_config(self) -> dict:
        return {"request": True, "response": True, "indentation": 2}

    def install(self, parent):
        return [
            ("request.start", self.log_request),
            ("response.end", self.log_response),
        ]

    def log_request(self, conversation: Conversation) -> None:
        if not self.config.get("request"):
            return
        conversation.handle_request.log.info(f"Request:\n{self._dump(conversation.request)}")

    def log_response(self, conversation: Conversation) -> None:
        if not self.config.get("response"):
            return
        if conversation.response is None:
            conversation.handle_request.log.info("Response: <none>")
            return
        conversation.handle_request.log.info(f"Response:\n{self._dump(conversation.response)}")

    def _dump(self, payload) -> str:
        return json.dumps(payload, indent=self.config.get("indentation"), default=str)
