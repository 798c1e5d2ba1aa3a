"""Built-in plugins. Importing this package fills the registry."""

from . import attributes, cleanup, elements, geometry, style  # noqa: F401
from .base import Plugin, get_plugin, register, registered_plugins

__all__ = ["Plugin", "get_plugin", "register", "registered_plugins"]
