"""Design editing core: registry, component tree, responsive resolver, session."""

from studio_cli.designer.autosave import AutosaveQueue, SaveRecord
from studio_cli.designer.registry import ComponentRegistry, default_registry
from studio_cli.designer.responsive import ResponsiveResolver
from studio_cli.designer.session import DesignerSession
from studio_cli.designer.tree import DesignTree

__all__ = [
    "AutosaveQueue",
    "ComponentRegistry",
    "DesignTree",
    "DesignerSession",
    "ResponsiveResolver",
    "SaveRecord",
    "default_registry",
]
