# ridr/transport/server.py
"""
Transport adapters. A ``Server`` wraps one inbound request: it exposes the
raw payload to the app and receives the response the app produces.
"""
from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from typing import Any, Optional


class Server(ABC):
    """One inbound request, as seen by ``App.handle()``."""

    request_id: Optional[str] = None

    @abstractmethod
    def get_request_object(self) -> Any:
        """Raw platform payload"""
        ...

    @abstractmethod
    def set_response(self, response: Any) -> Any:
        """Write the platform response back (may be async)"""
        ...

    def get_request_headers(self) -> dict[str, str]:
        return {}

    def get_query_params(self) -> dict[str, str]:
        return {}


class InMemoryServer(Server):
    """Payload in, captured response out. Used by tests and local scripts."""

    def __init__(
        self,
        request_object: Any,
        headers: Optional[dict[str, str]] = None,
        query: Optional[dict[str, str]] = None,
        request_id: Optional[str] = None,
    ):
        self.request_object = request_object
        self.headers = dict(headers or {})
        self.query = dict(query or {})
        self.request_id = request_id or str(uuid.uuid4())
        self.response: Any = None
        self.response_count = 0

    def get_request_object(self) -> Any:
        return self.request_object

    def set_response(self, response: Any) -> None:
        self.response = response
        self.response_count += 1

    def get_request_headers(self) -> dict[str, str]:
        return self.headers

    def get_query_params(self) -> dict[str, str]:
        return self.query
