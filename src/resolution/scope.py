"""Tracks the strongest scope seen for each dependency key."""
from __future__ import annotations

from typing import Dict, Optional

from registry.local.models import MavenScope


class ScopeManager:
    """Per-key scope with ``test < provided < runtime < compile`` priority.

    A stronger scope replaces a weaker one; never the reverse.
    """

    def __init__(self) -> None:
        self._scopes: Dict[str, MavenScope] = {}

    def update_scope(self, key: str, scope: Optional[MavenScope]) -> None:
        """Record ``scope`` for ``key`` when it outranks the current one."""
        if scope is None:
            return
        current = self._scopes.get(key)
        if current is None or scope.priority > current.priority:
            self._scopes[key] = scope

    def get_scope(self, key: str) -> MavenScope:
        """Recorded scope, COMPILE when never observed."""
        return self._scopes.get(key, MavenScope.COMPILE)

    @property
    def scopes(self) -> Dict[str, MavenScope]:
        """Copy of every recorded scope."""
        return dict(self._scopes)
