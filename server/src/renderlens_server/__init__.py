"""renderlens server package."""

__version__ = "0.1.0"
__all__ = [
    "Debugger",
    "DebuggerConfig",
    "DebuggerServer",
    "OutputRef",
    "RenderHooks",
    "TraceRecorder",
    "load_config",
]

from .config import DebuggerConfig, load_config
from .debugger import Debugger, RenderHooks
from .debugger_server import DebuggerServer
from .recorder import OutputRef, TraceRecorder
