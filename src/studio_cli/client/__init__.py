"""HTTP client for the builder backend."""
