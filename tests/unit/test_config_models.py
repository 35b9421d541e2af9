"""Tests for config models."""

import pytest
from pydantic import ValidationError

from studio_cli.config.models import BackendProfile, CLIConfig, DesignerSettings


class TestBackendProfile:
    def test_create_with_token(self):
        p = BackendProfile(name="test", url="https://studio.local", token="abc")
        assert p.url == "https://studio.local"
        assert p.auth_configured is True

    def test_create_no_auth(self):
        p = BackendProfile(name="test", url="https://studio.local")
        assert p.auth_configured is False

    def test_defaults(self):
        p = BackendProfile(name="test", url="https://studio.local")
        assert p.verify_ssl is True
        assert p.timeout == 30.0
        assert p.user is None

    def test_url_must_start_with_http(self):
        with pytest.raises(ValidationError, match="URL must start with http"):
            BackendProfile(name="test", url="ftp://studio.local")

    def test_url_strips_trailing_slash(self):
        p = BackendProfile(name="test", url="https://studio.local/")
        assert p.url == "https://studio.local"

    def test_timeout_bounds(self):
        with pytest.raises(ValidationError):
            BackendProfile(name="test", url="https://studio.local", timeout=0)
        with pytest.raises(ValidationError):
            BackendProfile(name="test", url="https://studio.local", timeout=601)


class TestDesignerSettings:
    def test_defaults(self):
        s = DesignerSettings()
        assert s.mobile_first is True
        assert s.breakpoints == "tailwind"
        assert s.lock_duration_minutes == 30
        assert s.auto_renew_minutes == 5
        assert s.autosave_delay == 2.0

    def test_unknown_breakpoint_set(self):
        with pytest.raises(ValidationError, match="Unknown breakpoint set"):
            DesignerSettings(breakpoints="bootstrap")

    def test_lock_duration_capped(self):
        with pytest.raises(ValidationError):
            DesignerSettings(lock_duration_minutes=481)


class TestCLIConfig:
    def test_empty_config(self):
        c = CLIConfig()
        assert c.default_profile is None
        assert c.default_format == "table"
        assert c.profiles == {}
        assert c.designer == DesignerSettings()

    def test_config_with_profiles(self):
        p = BackendProfile(name="dev", url="https://dev.local")
        c = CLIConfig(default_profile="dev", profiles={"dev": p})
        assert "dev" in c.profiles
