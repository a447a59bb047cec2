"""Top-level pkglock commands (no domain prefix)."""
