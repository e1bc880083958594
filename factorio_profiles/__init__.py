"""Isolated Factorio profiles with selective sharing through a global profile."""
