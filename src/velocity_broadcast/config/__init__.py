from .const import (
    app_name_title,
    package_name,
    env_name,
    PLUGIN_VERSION,
)
from .settings import Settings

__all__ = [
    "app_name_title",
    "package_name",
    "env_name",
    "PLUGIN_VERSION",
    "Settings",
]
