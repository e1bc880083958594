"""CLI commands for factorio-profiles."""

__all__ = [
    "activate",
    "config",
    "profile",
]
