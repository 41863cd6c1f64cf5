"""Infrastructure: configuration loading."""

from spinguard.infrastructure.config import CONFIG_FILENAME, Settings, load_settings

__all__ = [
    "CONFIG_FILENAME",
    "Settings",
    "load_settings",
]
