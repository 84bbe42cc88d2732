"""Artifact registries consulted during resolution."""
