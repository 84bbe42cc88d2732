"""Data model for coordinates read from local descriptors."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

PACKAGING_JAR = "jar"
PACKAGING_POM = "pom"


class MavenScope(Enum):
    """Dependency scopes, ordered by priority (lowest first)."""

    TEST = "test"
    PROVIDED = "provided"
    RUNTIME = "runtime"
    COMPILE = "compile"

    @classmethod
    def from_value(cls, value: Optional[str]) -> "MavenScope":
        """Map a raw scope string; blank or unknown values fall back to COMPILE."""
        if value is None:
            return cls.COMPILE
        text = value.strip().lower()
        for scope in cls:
            if scope.value == text:
                return scope
        return cls.COMPILE

    @property
    def priority(self) -> int:
        """Numeric strength; a larger value wins when scopes conflict."""
        return _SCOPE_PRIORITY[self]


_SCOPE_PRIORITY = {
    MavenScope.TEST: 0,
    MavenScope.PROVIDED: 1,
    MavenScope.RUNTIME: 2,
    MavenScope.COMPILE: 3,
}


@dataclass(frozen=True)
class Coordinate:
    """One resolvable unit read from a descriptor file."""

    group_id: Optional[str]
    artifact_id: Optional[str]
    version: Optional[str]
    packaging: str = PACKAGING_JAR
    scope: MavenScope = MavenScope.COMPILE
    pom_path: Optional[str] = None

    @property
    def key(self) -> str:
        """Return the ``group:artifact`` lookup key."""
        return f"{self.group_id}:{self.artifact_id}"

    @property
    def notation(self) -> str:
        """Return ``group:artifact:version``."""
        return f"{self.group_id}:{self.artifact_id}:{self.version}"

    def is_valid(self) -> bool:
        """True when group, artifact and version are all non-empty."""
        return bool(
            self.group_id and self.group_id.strip()
            and self.artifact_id and self.artifact_id.strip()
            and self.version and self.version.strip()
        )

    def is_bom(self) -> bool:
        """True for ``pom`` packaged descriptors."""
        return (self.packaging or "").strip().lower() == PACKAGING_POM
