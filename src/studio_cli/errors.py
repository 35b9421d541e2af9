"""Typed exceptions and error handling decorator."""

from __future__ import annotations

import functools
from datetime import datetime
from typing import Any, Callable, TypeVar

from rich.console import Console

F = TypeVar("F", bound=Callable[..., Any])

err_console = Console(stderr=True)


class StudioError(Exception):
    """Base exception for studio-cli."""

    exit_code: int = 1


class BackendConnectionError(StudioError):
    """Cannot connect to the builder backend."""

    exit_code = 2


class AuthenticationError(StudioError):
    """Authentication failed (401/403)."""

    exit_code = 3


class NotFoundError(StudioError):
    """Resource not found (404)."""

    exit_code = 4


class ConflictError(StudioError):
    """Resource conflict (409/412)."""

    exit_code = 5


class ConfigurationError(StudioError):
    """Missing or invalid configuration."""

    exit_code = 6


class ValidationError(StudioError):
    """Request rejected by validation (422)."""

    exit_code = 7

    def __init__(self, detail: str = "") -> None:
        super().__init__(detail or "Validation error")


class BackendAPIError(StudioError):
    """Generic API error from the backend."""

    def __init__(self, status_code: int, detail: str = "") -> None:
        self.status_code = status_code
        super().__init__(f"Backend returned {status_code}: {detail}")


# ---------------------------------------------------------------------------
# Lock domain
# ---------------------------------------------------------------------------


class LockError(StudioError):
    """Base class for resource lock failures."""

    exit_code = 8


class LockConflict(LockError):
    """The resource is validly locked by another holder."""

    def __init__(self, resource_id: str, holder_id: str, expires_at: datetime) -> None:
        self.resource_id = resource_id
        self.holder_id = holder_id
        self.expires_at = expires_at
        super().__init__(
            f"'{resource_id}' is locked by {holder_id} "
            f"until {expires_at:%Y-%m-%d %H:%M:%S %Z}".rstrip()
        )


class LockNotFound(LockError):
    """No lock is stored for the resource."""

    def __init__(self, resource_id: str) -> None:
        self.resource_id = resource_id
        super().__init__(f"No lock held on '{resource_id}'")


class LockTokenMismatch(LockError):
    """The presented token does not own the stored lock."""

    def __init__(self, resource_id: str) -> None:
        self.resource_id = resource_id
        super().__init__(f"Lock token does not match the current lock on '{resource_id}'")


class LockExpired(LockError):
    """The lock expired; it must be re-acquired."""

    def __init__(self, resource_id: str, expired_at: datetime) -> None:
        self.resource_id = resource_id
        self.expired_at = expired_at
        super().__init__(
            f"Lock on '{resource_id}' expired at {expired_at:%Y-%m-%d %H:%M:%S}; re-acquire it"
        )


class InvalidLockRequest(LockError):
    """Lock parameters out of range (duration, reason, extension)."""


class LockNotHeld(LockError):
    """An edit was attempted without holding a valid lock."""


# ---------------------------------------------------------------------------
# Tree domain
# ---------------------------------------------------------------------------


class TreeError(StudioError):
    """Base class for rejected component tree mutations."""

    exit_code = 9


class InvalidParent(TreeError):
    """Target parent is missing or cannot hold children."""


class DepthExceeded(TreeError):
    """The placement would nest deeper than an applicable max depth."""


class TypeNotAllowed(TreeError):
    """The component type is not permitted under the parent type."""


class CyclicMove(TreeError):
    """The move would make an instance its own descendant."""


class TooManyChildren(TreeError):
    """The parent already holds its maximum number of children."""


class UnknownComponentType(TreeError):
    """The component type is not registered."""


class InstanceNotFound(TreeError):
    """No instance with the given id exists in the design."""


class InvalidDesign(TreeError):
    """A loaded design document violates the tree invariants."""

    def __init__(self, violations: list[Any]) -> None:
        self.violations = violations
        lines = "; ".join(str(v) for v in violations[:5])
        more = f" (+{len(violations) - 5} more)" if len(violations) > 5 else ""
        super().__init__(f"Design has {len(violations)} violation(s): {lines}{more}")


def error_handler(func: F) -> F:
    """Decorator that catches StudioError and prints user-friendly messages."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except StudioError as exc:
            err_console.print(f"[bold red]Error:[/] {exc}")
            raise SystemExit(exc.exit_code)
        except ValueError as exc:
            err_console.print(f"[bold red]Error:[/] {exc}")
            raise SystemExit(1)

    return wrapper  # type: ignore[return-value]
