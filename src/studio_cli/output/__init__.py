"""Output rendering: tables, trees, and machine-readable formats."""
