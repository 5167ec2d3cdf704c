from ridr.plugins.basic_logging import BasicLogging
from ridr.plugins.handler import HandlerPlugin
from ridr.plugins.output import OutputPlugin
from ridr.plugins.router import RouterPlugin

__all__ = ["BasicLogging", "HandlerPlugin", "OutputPlugin", "RouterPlugin"]
