"""
SqueezeCloud - SoundCloud track resolver.

Turns ``soundcloud://<id>`` references into time-limited CDN URLs and
cached display metadata for a streaming audio player.
"""

__version__ = "0.1.0"

from .app import SqueezeCloud
from .config import Config, ConfigError, load_config
from .errors import ErrorKind, ResolverError

__all__ = [
    "__version__",
    "SqueezeCloud",
    "Config",
    "ConfigError",
    "load_config",
    "ErrorKind",
    "ResolverError",
]
