"""Authentication for the builder backend."""

from __future__ import annotations

from collections.abc import Generator

import httpx

from studio_cli.config.models import BackendProfile


class BearerTokenAuth(httpx.Auth):
    """Authenticate with an API token in the ``Authorization: Bearer`` header."""

    def __init__(self, token: str) -> None:
        self.token = token

    def auth_flow(
        self, request: httpx.Request,
    ) -> Generator[httpx.Request, httpx.Response, None]:
        request.headers["Authorization"] = f"Bearer {self.token}"
        yield request


def resolve_auth(profile: BackendProfile) -> httpx.Auth | None:
    if profile.token:
        return BearerTokenAuth(profile.token)
    return None
