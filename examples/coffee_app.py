#!/usr/bin/env python3
"""
Coffee Order Example

Demonstrates a small RIDR app: a global entry component, a child
component reached through the session, i18n texts and a custom plugin.

Run from project root:
    python examples/coffee_app.py

Or serve it over HTTP (requires an ASGI server such as uvicorn):
    uvicorn examples.coffee_app:http_app
"""
import asyncio
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from ridr import App, BaseComponent, InMemoryServer, Plugin, component, handle  # noqa: E402
from ridr.platforms import CorePlatform  # noqa: E402
from ridr.transport.http_app import create_http_app  # noqa: E402


@component(name="Coffee", is_global=True)
class CoffeeComponent(BaseComponent):
    @handle("LAUNCH")
    def launch(self):
        self.ask(self.t("welcome"), reprompt=self.t("reprompt"))

    @handle("OrderIntent")
    def order(self):
        size = self.conversation.input.entities.get("size", "medium")
        self.data["size"] = size
        self.tell(self.t("order.confirm", size=size))

    def UNHANDLED(self):
        self.ask(self.t("reprompt"))


class TurnCounter(Plugin):
    """Counts turns in the session at dialogue.start."""

    def install(self, parent):
        return [("dialogue.start", self.count)]

    def count(self, conversation):
        conversation.session["turns"] = conversation.session.get("turns", 0) + 1


def build_app() -> App:
    app = App({
        "logging": False,
        "i18n": {
            "resources": {
                "en": {
                    "translation": {
                        "welcome": "Welcome to the coffee shop! What can I get you?",
                        "reprompt": "Which size would you like?",
                        "order": {"confirm": "One {{size}} coffee coming up."},
                    }
                }
            }
        },
        "routing": {"intent_map": {"AMAZON.StopIntent": "END"}},
    })
    app.use(CorePlatform(), TurnCounter(), CoffeeComponent)
    return app


app = build_app()
http_app = create_http_app(app)


async def demo():
    await app.initialize()

    session = {}
    turns = [
        {"type": "LAUNCH"},
        {"type": "INTENT", "intent": "WeatherIntent"},
        {"type": "INTENT", "intent": "OrderIntent", "entities": {"size": "large"}},
    ]
    for request in turns:
        server = InMemoryServer({"platform": "core", "request": request, "session": session})
        await app.handle(server)
        response = server.response
        for item in response["output"]:
            print(f"> {item['message']}")
        session = response["session"]

    print(f"\nSession after {session['turns']} turns: {session}")


if __name__ == "__main__":
    asyncio.run(demo())
