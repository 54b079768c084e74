"""UI server module for static web UI and websocket streaming."""

from .config import ServerConfigurationError, UIServerConfig, default_index_file
from .service import UIServer

__all__ = [
    "ServerConfigurationError",
    "UIServerConfig",
    "UIServer",
    "default_index_file",
]
