"""Pydantic models for CLI configuration."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from studio_cli.models.breakpoint import BREAKPOINT_SETS


class BackendProfile(BaseModel):
    """A named builder backend connection profile."""

    name: str
    url: str = Field(description="Backend base URL, e.g. https://studio.example.com")
    token: str | None = Field(default=None, description="Bearer API token")
    user: str | None = Field(
        default=None, description="Holder identity used when acquiring locks",
    )
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")
    timeout: float = Field(
        default=30.0, gt=0, le=600, description="Request timeout in seconds",
    )

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("URL must start with http:// or https://")
        return v.rstrip("/")

    @property
    def auth_configured(self) -> bool:
        return self.token is not None


class DesignerSettings(BaseModel):
    """Editing defaults for design sessions."""

    mobile_first: bool = True
    breakpoints: str = "tailwind"
    lock_duration_minutes: int = Field(default=30, ge=1, le=480)
    auto_renew_minutes: int = Field(
        default=5, ge=1, description="Renew a held lock when this close to expiry",
    )
    autosave_delay: float = Field(default=2.0, ge=0)

    @field_validator("breakpoints")
    @classmethod
    def validate_breakpoints(cls, v: str) -> str:
        if v not in BREAKPOINT_SETS:
            raise ValueError(
                f"Unknown breakpoint set '{v}'. Expected one of: {', '.join(BREAKPOINT_SETS)}"
            )
        return v


class CLIConfig(BaseModel):
    """Root configuration model."""

    default_profile: str | None = None
    default_format: str = "table"
    profiles: dict[str, BackendProfile] = Field(default_factory=dict)
    designer: DesignerSettings = Field(default_factory=DesignerSettings)
