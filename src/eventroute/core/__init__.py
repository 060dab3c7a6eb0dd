from eventroute.core.config import Settings, load_from_env
from eventroute.core.logging import configure_from_settings, configure_logging

__all__ = [
    "Settings",
    "load_from_env",
    "configure_logging",
    "configure_from_settings",
]
