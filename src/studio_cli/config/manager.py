"""Configuration manager — read/write TOML config, resolve profiles."""

from __future__ import annotations

import getpass
import os
from pathlib import Path
from typing import Any

import tomli_w

from studio_cli.config.constants import (
    CONFIG_FILE,
    ENV_API_TOKEN,
    ENV_BACKEND_URL,
    ENV_HOLDER_ID,
    ENV_PROFILE,
)
from studio_cli.config.models import BackendProfile, CLIConfig, DesignerSettings
from studio_cli.errors import ConfigurationError

try:
    import tomllib
except ModuleNotFoundError:
    import tomli as tomllib


class ConfigManager:
    """Manages CLI configuration on disk and resolves backend profiles."""

    def __init__(self, config_path: Path | None = None) -> None:
        self.config_path = config_path or CONFIG_FILE
        self._config: CLIConfig | None = None

    @property
    def config(self) -> CLIConfig:
        if self._config is None:
            self._config = self._load()
        return self._config

    def _load(self) -> CLIConfig:
        if not self.config_path.exists():
            return CLIConfig()
        try:
            data = tomllib.loads(self.config_path.read_bytes().decode())
        except tomllib.TOMLDecodeError as exc:
            raise ConfigurationError(f"Cannot parse {self.config_path}: {exc}") from exc
        profiles = {
            name: BackendProfile(name=name, **prof_data)
            for name, prof_data in data.get("profiles", {}).items()
        }
        return CLIConfig(
            default_profile=data.get("default_profile"),
            default_format=data.get("default_format", "table"),
            profiles=profiles,
            designer=DesignerSettings(**data.get("designer", {})),
        )

    def save(self) -> None:
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        # Owner-only: profiles may carry tokens
        os.chmod(self.config_path.parent, 0o700)
        data: dict[str, Any] = {}
        if self.config.default_profile:
            data["default_profile"] = self.config.default_profile
        if self.config.default_format != "table":
            data["default_format"] = self.config.default_format
        designer = self.config.designer.model_dump(exclude_defaults=True)
        if designer:
            data["designer"] = designer
        if self.config.profiles:
            # Defaults are dropped to keep the file clean
            data["profiles"] = {
                name: profile.model_dump(
                    exclude={"name"}, exclude_none=True, exclude_defaults=True,
                )
                for name, profile in self.config.profiles.items()
            }
        temp = self.config_path.with_suffix(".tmp")
        fd = os.open(str(temp), os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        try:
            os.write(fd, tomli_w.dumps(data).encode())
        finally:
            os.close(fd)
        temp.replace(self.config_path)

    def add_profile(self, profile: BackendProfile) -> None:
        self.config.profiles[profile.name] = profile
        if not self.config.default_profile:
            self.config.default_profile = profile.name
        self.save()

    def remove_profile(self, name: str) -> bool:
        if name not in self.config.profiles:
            return False
        del self.config.profiles[name]
        if self.config.default_profile == name:
            self.config.default_profile = next(iter(self.config.profiles), None)
        self.save()
        return True

    def set_default(self, name: str) -> bool:
        if name not in self.config.profiles:
            return False
        self.config.default_profile = name
        self.save()
        return True

    def get_profile(self, name: str | None = None) -> BackendProfile | None:
        if name:
            return self.config.profiles.get(name)
        default = self.config.default_profile
        if default:
            return self.config.profiles.get(default)
        return None

    def resolve_backend(
        self,
        profile_name: str | None = None,
        url: str | None = None,
        token: str | None = None,
    ) -> BackendProfile:
        """Resolve the backend connection.

        Precedence: CLI flags > env vars > config profile.
        """
        profile = self.get_profile(profile_name or os.environ.get(ENV_PROFILE))
        if profile_name and profile is None:
            raise ConfigurationError(f"Profile '{profile_name}' not found")

        resolved_url = url or os.environ.get(ENV_BACKEND_URL) or (profile.url if profile else None)
        resolved_token = (
            token or os.environ.get(ENV_API_TOKEN) or (profile.token if profile else None)
        )
        if not resolved_url:
            raise ConfigurationError(
                "No backend URL configured. Use 'studio-cli config add' or set "
                f"{ENV_BACKEND_URL} or pass --url."
            )

        return BackendProfile(
            name=profile.name if profile else "cli",
            url=resolved_url.rstrip("/"),
            token=resolved_token,
            user=profile.user if profile else None,
            verify_ssl=profile.verify_ssl if profile else True,
            timeout=profile.timeout if profile else 30.0,
        )

    def resolve_holder(
        self,
        holder: str | None = None,
        profile: BackendProfile | None = None,
    ) -> str:
        """Lock holder identity: flag > env var > profile user > login name."""
        resolved = holder or os.environ.get(ENV_HOLDER_ID) or (profile.user if profile else None)
        if resolved:
            return resolved
        try:
            return getpass.getuser()
        except (KeyError, OSError) as exc:
            raise ConfigurationError(
                f"Cannot determine a lock holder id. Pass --holder or set {ENV_HOLDER_ID}."
            ) from exc
