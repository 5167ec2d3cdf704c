from ridr.transport.server import InMemoryServer, Server

__all__ = ["InMemoryServer", "Server"]
