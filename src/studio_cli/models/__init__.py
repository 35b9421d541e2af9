"""Pydantic data models for designs, breakpoints, and resource locks."""

from studio_cli.models.breakpoint import DESIGNER, TAILWIND, Breakpoint, BreakpointSet
from studio_cli.models.common import ErrorResponse, PaginatedResponse
from studio_cli.models.component import (
    ComponentDefinition,
    ComponentInstance,
    Constraints,
    DesignDocument,
    ResolvedStyle,
    ResponsiveConflict,
    ResponsiveRule,
    Violation,
)
from studio_cli.models.lock import LockType, ResourceLock

__all__ = [
    "DESIGNER",
    "TAILWIND",
    "Breakpoint",
    "BreakpointSet",
    "ComponentDefinition",
    "ComponentInstance",
    "Constraints",
    "DesignDocument",
    "ErrorResponse",
    "LockType",
    "PaginatedResponse",
    "ResolvedStyle",
    "ResourceLock",
    "ResponsiveConflict",
    "ResponsiveRule",
    "Violation",
]
