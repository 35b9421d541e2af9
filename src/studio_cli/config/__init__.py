"""CLI configuration: profiles, designer settings, and the TOML store."""
