"""renderlens client contexts: span resolution, token lookup and the channel."""

__version__ = "0.1.0"
__all__ = [
    "Channel",
    "ExpressionClient",
    "HighlightState",
    "InstrumentedPage",
    "MessagePort",
    "ObserverView",
    "PointerTracker",
    "build_channel",
    "create_port_pair",
    "find_enclosing_token",
    "parse_document",
]

from .channel import Channel, MessagePort, build_channel, create_port_pair
from .dom import parse_document
from .enclosing_token import find_enclosing_token
from .expression_client import ExpressionClient
from .inspect_mode import PointerTracker
from .observer import ObserverView
from .page import InstrumentedPage
from .span_resolver import HighlightState
