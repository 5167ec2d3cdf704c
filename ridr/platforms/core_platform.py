# ridr/platforms/core_platform.py
"""
Generic JSON platform.

Request payload::

    {
        "platform": "core",
        "request": {"type": "INTENT", "intent": "OrderIntent",
                    "entities": {...}, "text": "...", "locale": "en-US"},
        "session": {...},
        "user": {...}
    }

Response payload::

    {
        "version": "1",
        "platform": "core",
        "output": [{"message": "...", "listen": false}],
        "session": {...},
        "context": {"request_id": "..."}
    }
"""
from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import Any

from ridr.core.conversation import Conversation, Input, InputType
from ridr.core.platform import Platform

RESPONSE_VERSION = "1"


class CorePlatform(Platform):
    def default_config(self) -> dict:
        return {"type": "core", "fallback_locale": "en"}

    def is_request_related(self, request_object: Any) -> bool:
        return isinstance(request_object, Mapping) and request_object.get("platform") == self.config["type"]

    def create_conversation(self, app, handle_request) -> Conversation:
        payload = handle_request.server.get_request_object()
        request = payload.get("request") or {}

        user_input = Input(
            type=str(request.get("type") or InputType.INTENT).upper(),
            intent=request.get("intent"),
            entities=dict(request.get("entities") or {}),
            text=request.get("text"),
            locale=request.get("locale") or self.config.get("fallback_locale"),
        )
        return Conversation(
            app,
            handle_request,
            self,
            payload,
            input=user_input,
            session=copy.deepcopy(payload.get("session") or {}),
            user=copy.deepcopy(payload.get("user") or {}),
        )

    def finalize_response(self, output: list[dict], conversation: Conversation) -> dict:
        return {
            "version": RESPONSE_VERSION,
            "platform": self.config["type"],
            "output": output,
            "session": conversation.session,
            "context": {"request_id": conversation.handle_request.request_id},
        }
