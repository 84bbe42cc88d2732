"""Filesystem-resident Maven descriptor repository."""
