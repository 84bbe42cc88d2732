"""Shared helpers used across the registry and resolution packages."""
