"""RIDR conversational app runtime."""
from ridr.core.app import APP_MIDDLEWARES, App
from ridr.core.component import (
    UNHANDLED,
    BaseComponent,
    ComponentDeclaration,
    component,
    global_component,
    handle,
)
from ridr.core.conversation import Conversation, Input, InputType
from ridr.core.errors import (
    DuplicateComponentError,
    HandlerNotFoundError,
    InvalidComponentError,
    InvalidConfigError,
    InvalidMiddlewareError,
    MatchingPlatformNotFoundError,
    MissingParentComponentError,
    RidrError,
)
from ridr.core.extensible import Extensible, ExtensiblePlugin
from ridr.core.handle_request import HandleRequest
from ridr.core.platform import Platform
from ridr.core.plugin import Plugin, PluginState
from ridr.platforms import CorePlatform
from ridr.transport import InMemoryServer, Server

__version__ = "0.1.0"
