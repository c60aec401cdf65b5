from __future__ import annotations

"""
HTTP front end that turns booking webhooks into browser booking runs.
"""

from .config import ServerConfig, load_config
from .server import create_app

__all__ = ["ServerConfig", "create_app", "load_config"]
