# tests/test_core_platform.py
"""Tests for ridr/platforms/core_platform.py."""
from __future__ import annotations

from ridr.core.app import App
from ridr.core.conversation import InputType
from ridr.core.handle_request import HandleRequest
from ridr.platforms import CorePlatform
from ridr.transport.server import InMemoryServer


def _conversation(payload):
    app = App(test_mode=True)
    app.use(CorePlatform())
    handle_request = HandleRequest(app, InMemoryServer(payload, request_id="req-core"))
    platform = handle_request.plugins["CorePlatform"]
    return platform, platform.create_conversation(app, handle_request)


class TestIsRequestRelated:
    def test_matches_platform_field(self, make_payload):
        platform = CorePlatform()
        assert platform.is_request_related(make_payload("HelloIntent"))
        assert not platform.is_request_related(make_payload("HelloIntent", platform="alexa"))

    def test_rejects_non_mappings(self):
        platform = CorePlatform()
        assert not platform.is_request_related(None)
        assert not platform.is_request_related("core")
        assert not platform.is_request_related([{"platform": "core"}])

    def test_custom_type(self, make_payload):
        platform = CorePlatform({"type": "web"})
        assert platform.is_request_related(make_payload(platform="web"))
        assert not platform.is_request_related(make_payload(platform="core"))


class TestCreateConversation:
    def test_normalizes_input(self, make_payload):
        _, conversation = _conversation(
            make_payload("OrderIntent", type_="intent", entities={"item": "tea"}, locale="de-DE")
        )
        assert conversation.input.type == InputType.INTENT
        assert conversation.input.intent == "OrderIntent"
        assert conversation.input.entities == {"item": "tea"}
        assert conversation.input.locale == "de-DE"
        assert conversation.user == {"id": "user-1"}

    def test_locale_defaults_to_fallback(self, make_payload):
        _, conversation = _conversation(make_payload("OrderIntent", locale=None))
        assert conversation.input.locale == "en"

    def test_session_is_copied(self, make_payload):
        payload = make_payload("OrderIntent", session={"component_path": ["Order"]})
        _, conversation = _conversation(payload)
        conversation.set_current_component(("Help",))
        assert payload["session"] == {"component_path": ["Order"]}
        assert conversation.current_component_path == ("Help",)

    def test_missing_request_section(self):
        _, conversation = _conversation({"platform": "core"})
        assert conversation.input.type == InputType.INTENT
        assert conversation.input.intent is None
        assert conversation.session == {}


class TestFinalizeResponse:
    def test_response_shape(self, make_payload):
        platform, conversation = _conversation(make_payload("OrderIntent", session={"k": "v"}))
        output = [{"message": "Hi", "listen": False}]
        assert platform.finalize_response(output, conversation) == {
            "version": "1",
            "platform": "core",
            "output": output,
            "session": {"k": "v"},
            "context": {"request_id": "req-core"},
        }
