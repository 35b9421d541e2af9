"""Lock store backed by the builder backend's lock API.

Compare-and-set maps onto conditional requests: ``If-None-Match: *`` when
no lock may exist yet and ``If-Match: "<token>"`` when replacing or deleting
a known lock. The backend answers 409/412 when the precondition fails.
"""

from __future__ import annotations

from datetime import datetime
from urllib.parse import quote

from studio_cli.client.backend import BackendClient
from studio_cli.errors import ConflictError, NotFoundError
from studio_cli.models.lock import ResourceLock


class HttpLockStore:
    """:class:`~studio_cli.locking.store.LockStore` over HTTP."""

    def __init__(self, client: BackendClient, path: str = "/locks") -> None:
        self.client = client
        self.path = path.rstrip("/")

    def _lock_path(self, resource_id: str) -> str:
        return f"{self.path}/{quote(resource_id, safe='')}"

    def get(self, resource_id: str) -> ResourceLock | None:
        try:
            data = self.client.get_json(self._lock_path(resource_id))
        except NotFoundError:
            return None
        return ResourceLock.model_validate(data)

    def compare_and_set(
        self,
        resource_id: str,
        expected_token: str | None,
        new_lock: ResourceLock | None,
    ) -> bool:
        path = self._lock_path(resource_id)
        if new_lock is None:
            if expected_token is None:
                return self.get(resource_id) is None
            try:
                self.client.delete(path, headers={"If-Match": f'"{expected_token}"'})
            except (ConflictError, NotFoundError):
                return False
            return True

        if expected_token is None:
            headers = {"If-None-Match": "*"}
        else:
            headers = {"If-Match": f'"{expected_token}"'}
        try:
            self.client.put(path, json=new_lock.model_dump(mode="json"), headers=headers)
        except ConflictError:
            return False
        except NotFoundError:
            # The lock we meant to replace disappeared
            return False
        return True

    def list(self) -> list[ResourceLock]:
        return [ResourceLock.model_validate(item) for item in self.client.get_all_items(self.path)]

    def delete_expired(self, now: datetime) -> int:
        response = self.client.post(f"{self.path}/cleanup", json={"before": now.isoformat()})
        return int(response.json().get("deleted", 0))
