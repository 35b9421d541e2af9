"""Resource locking: manager, storage port, and store implementations."""

from studio_cli.locking.http_store import HttpLockStore
from studio_cli.locking.manager import LockManager
from studio_cli.locking.store import LockStore, MemoryLockStore

__all__ = ["HttpLockStore", "LockManager", "LockStore", "MemoryLockStore"]
