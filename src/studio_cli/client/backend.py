"""Builder backend HTTP client."""

from __future__ import annotations

import json
from typing import Any

import httpx
from pydantic import ValidationError as PydanticValidationError

from studio_cli.client.auth import resolve_auth
from studio_cli.config.constants import DEFAULT_API_BASE, DEFAULT_MAX_RETRIES
from studio_cli.config.models import BackendProfile
from studio_cli.errors import (
    AuthenticationError,
    BackendAPIError,
    BackendConnectionError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from studio_cli.logging_config import get_logger
from studio_cli.models.common import ErrorResponse, PaginatedResponse

logger = get_logger(__name__)


class BackendClient:
    """Synchronous HTTP client for the builder REST API."""

    def __init__(self, profile: BackendProfile) -> None:
        self.profile = profile
        self.base_url = f"{profile.url}{DEFAULT_API_BASE}"
        if not profile.verify_ssl:
            logger.warning("tls_verification_disabled", url=profile.url)
        transport = httpx.HTTPTransport(retries=DEFAULT_MAX_RETRIES)
        self._client = httpx.Client(
            base_url=self.base_url,
            auth=resolve_auth(profile),
            verify=profile.verify_ssl,
            timeout=profile.timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> BackendClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def _handle_response(self, response: httpx.Response) -> httpx.Response:
        if response.is_success:
            return response
        status = response.status_code
        try:
            detail = ErrorResponse.model_validate(response.json()).message
        except (json.JSONDecodeError, PydanticValidationError):
            detail = response.text
        if status in (401, 403):
            raise AuthenticationError("Authentication failed. Check your API token.")
        if status == 404:
            raise NotFoundError(f"Not found: {detail}")
        if status in (409, 412):
            raise ConflictError(f"Conflict: {detail}")
        if status == 422:
            raise ValidationError(detail)
        raise BackendAPIError(status, detail)

    def request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.ConnectError as exc:
            raise BackendConnectionError(
                f"Cannot connect to backend at {self.profile.url}: {exc}"
            ) from exc
        except httpx.TimeoutException as exc:
            raise BackendConnectionError(
                f"Request to {self.profile.url} timed out: {exc}"
            ) from exc
        except (httpx.InvalidURL, httpx.UnsupportedProtocol) as exc:
            raise BackendConnectionError(
                f"Invalid URL for backend at {self.profile.url}: {exc}"
            ) from exc
        logger.debug("backend_request", method=method, path=path, status=response.status_code)
        return self._handle_response(response)

    def get(self, path: str, **kwargs: Any) -> httpx.Response:
        return self.request("GET", path, **kwargs)

    def post(self, path: str, **kwargs: Any) -> httpx.Response:
        return self.request("POST", path, **kwargs)

    def put(self, path: str, **kwargs: Any) -> httpx.Response:
        return self.request("PUT", path, **kwargs)

    def delete(self, path: str, **kwargs: Any) -> httpx.Response:
        return self.request("DELETE", path, **kwargs)

    def get_json(self, path: str, **kwargs: Any) -> Any:
        return self.get(path, **kwargs).json()

    def get_all_items(
        self,
        path: str,
        *,
        limit: int = 100,
        **kwargs: Any,
    ) -> list[Any]:
        """Auto-paginate through a list endpoint, returning all items."""
        all_items: list[Any] = []
        offset = 0
        caller_params = kwargs.pop("params", {})
        while True:
            params = {**caller_params, "limit": limit, "offset": offset}
            data = self.get_json(path, params=params, **kwargs)
            if isinstance(data, list):
                all_items.extend(data)
                break  # non-paginated response
            page = PaginatedResponse.model_validate(data)
            items = page.items
            all_items.extend(items)
            total = page.metadata.total if page.metadata else None
            if total is None or offset + limit >= total or not items:
                break
            offset += limit
        return all_items

    def health(self) -> dict[str, Any]:
        """Fetch the backend health document (used by ``config test``)."""
        result: dict[str, Any] = self.get_json("/health")
        return result
