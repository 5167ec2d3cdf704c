# tests/conftest.py
"""Pytest configuration and fixtures"""
import pytest
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from ridr.core.component import BaseComponent, component, handle  # noqa: E402


@component(name="Main", is_global=True)
class MainComponent(BaseComponent):
    @handle("LAUNCH")
    def launch(self):
        self.ask(self.t("welcome"))

    @handle("HelloIntent")
    def hello(self):
        name = self.conversation.input.entities.get("name", "stranger")
        self.tell(f"Hello {name}")

    @handle("SilentIntent")
    def silent(self):
        # Handled, but produces no output
        self.data["seen"] = True

    def UNHANDLED(self):
        self.ask("Sorry, I did not get that")


@pytest.fixture
def make_payload():
    """Factory for core platform payloads"""

    def _make(intent=None, type_="INTENT", entities=None, session=None, locale="en-US", platform="core"):
        return {
            "platform": platform,
            "request": {
                "type": type_,
                "intent": intent,
                "entities": entities or {},
                "locale": locale,
            },
            "session": session or {},
            "user": {"id": "user-1"},
        }

    return _make


@pytest.fixture
def main_component():
    return MainComponent


@pytest.fixture
def i18n_config():
    return {
        "resources": {
            "en": {"translation": {"welcome": "Welcome!", "greet": "Hi {{name}}"}},
            "de": {"translation": {"welcome": "Willkommen!"}},
        }
    }
