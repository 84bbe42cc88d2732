"""Descriptor discovery on the local filesystem.

Collects descriptor files under configured roots, reads one descriptor into
a namespace-agnostic model and loads its parent chain.
"""
from __future__ import annotations

import logging
import os
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled

logger = logging.getLogger(__name__)


class DescriptorParseError(Exception):
    """A descriptor file is unreadable or is not well-formed XML."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class RepositoryUnavailableError(Exception):
    """No configured repository root can be read."""


@dataclass
class DependencyEntry:
    """Raw ``<dependency>`` element values before interpolation."""

    group_id: Optional[str] = None
    artifact_id: Optional[str] = None
    version: Optional[str] = None
    scope: Optional[str] = None
    type: Optional[str] = None


@dataclass
class ParentRef:
    """Raw ``<parent>`` reference."""

    group_id: Optional[str] = None
    artifact_id: Optional[str] = None
    version: Optional[str] = None
    relative_path: Optional[str] = None


@dataclass
class PomModel:  # pylint: disable=too-many-instance-attributes
    """One descriptor file as written, without inheritance applied."""

    path: str
    group_id: Optional[str] = None
    artifact_id: Optional[str] = None
    version: Optional[str] = None
    packaging: Optional[str] = None
    parent: Optional[ParentRef] = None
    properties: Dict[str, str] = field(default_factory=dict)
    dependencies: List[DependencyEntry] = field(default_factory=list)
    managed: List[DependencyEntry] = field(default_factory=list)


def collect_descriptor_files(
    roots: Iterable[str],
    max_depth: Optional[int] = None,
    suffixes: Optional[Sequence[str]] = None,
) -> List[str]:
    """Collect descriptor files beneath the given roots.

    Args:
        roots: Repository root directories.
        max_depth: Maximum directory depth below each root.
        suffixes: File name suffixes that mark a descriptor.

    Returns:
        Sorted, de-duplicated list of descriptor paths.

    Raises:
        RepositoryUnavailableError: When none of the roots is a readable directory.
    """
    depth_limit = Constants.DESCRIPTOR_SCAN_DEPTH if max_depth is None else max_depth
    wanted = tuple(suffixes or Constants.DESCRIPTOR_SUFFIXES)
    roots = [r for r in roots if r]

    usable = []
    for root in roots:
        if os.path.isdir(root) and os.access(root, os.R_OK | os.X_OK):
            usable.append(root)
        else:
            logger.warning("Descriptor directory not readable, ignoring: %s", root)
    if not usable:
        raise RepositoryUnavailableError(
            "No readable descriptor directory among: " + ", ".join(roots or ["<none>"])
        )

    found = set()
    for root in usable:
        base_depth = root.rstrip(os.sep).count(os.sep)
        for current, dirs, files in os.walk(root):
            if current.rstrip(os.sep).count(os.sep) - base_depth >= depth_limit:
                dirs[:] = []
            dirs.sort()
            for name in files:
                if name.endswith(wanted):
                    found.add(os.path.join(current, name))

    result = sorted(found)
    if is_debug_enabled(logger):
        logger.debug(
            "Collected descriptor files",
            extra=extra_context(
                event="function_exit", component="discovery", action="collect_descriptors",
                outcome="success", count=len(result),
            ),
        )
    return result


def _local(tag: str) -> str:
    """Strip an XML namespace from a tag."""
    return tag.rsplit("}", 1)[-1] if "}" in tag else tag


def _child(elem: ET.Element, name: str) -> Optional[ET.Element]:
    for node in elem:
        if isinstance(node.tag, str) and _local(node.tag) == name:
            return node
    return None


def _text(elem: Optional[ET.Element], name: str) -> Optional[str]:
    if elem is None:
        return None
    node = _child(elem, name)
    if node is None or node.text is None:
        return None
    value = node.text.strip()
    return value or None


def _read_dependencies(container: Optional[ET.Element]) -> List[DependencyEntry]:
    if container is None:
        return []
    deps_elem = _child(container, "dependencies")
    if deps_elem is None:
        return []
    entries = []
    for node in deps_elem:
        if not isinstance(node.tag, str) or _local(node.tag) != "dependency":
            continue
        entries.append(DependencyEntry(
            group_id=_text(node, "groupId"),
            artifact_id=_text(node, "artifactId"),
            version=_text(node, "version"),
            scope=_text(node, "scope"),
            type=_text(node, "type"),
        ))
    return entries


def read_pom_model(path: str) -> PomModel:
    """Read a single descriptor file.

    Args:
        path: Descriptor path.

    Returns:
        PomModel with the values exactly as declared.

    Raises:
        DescriptorParseError: When the file cannot be read or parsed.
    """
    try:
        root = ET.parse(path).getroot()
    except ET.ParseError as e:
        raise DescriptorParseError(path, f"malformed XML ({e})") from e
    except OSError as e:
        raise DescriptorParseError(path, f"unreadable ({e.strerror or e})") from e

    if _local(root.tag) != "project":
        raise DescriptorParseError(path, f"unexpected root element <{_local(root.tag)}>")

    parent = None
    parent_elem = _child(root, "parent")
    if parent_elem is not None:
        parent = ParentRef(
            group_id=_text(parent_elem, "groupId"),
            artifact_id=_text(parent_elem, "artifactId"),
            version=_text(parent_elem, "version"),
            relative_path=_text(parent_elem, "relativePath"),
        )

    properties: Dict[str, str] = {}
    props_elem = _child(root, "properties")
    if props_elem is not None:
        for node in props_elem:
            if isinstance(node.tag, str):
                properties[_local(node.tag)] = (node.text or "").strip()

    return PomModel(
        path=path,
        group_id=_text(root, "groupId"),
        artifact_id=_text(root, "artifactId"),
        version=_text(root, "version"),
        packaging=_text(root, "packaging"),
        parent=parent,
        properties=properties,
        dependencies=_read_dependencies(root),
        managed=_read_dependencies(_child(root, "dependencyManagement")),
    )


def _parent_candidates(child_path: str, parent: ParentRef) -> List[str]:
    """Candidate files for a parent reference, most specific first."""
    directory = os.path.dirname(os.path.abspath(child_path))
    candidates = []
    if parent.relative_path:
        rel = os.path.join(directory, parent.relative_path)
        if os.path.isdir(rel):
            rel = os.path.join(rel, "pom.xml")
        candidates.append(os.path.normpath(rel))
    if parent.artifact_id:
        if parent.version:
            candidates.append(os.path.join(directory, f"{parent.artifact_id}-{parent.version}.pom"))
        candidates.append(os.path.join(directory, f"{parent.artifact_id}.pom"))
    return candidates


def resolve_parent_path(child_path: str, parent: ParentRef) -> Optional[str]:
    """Locate the descriptor file of ``parent`` next to ``child_path``."""
    for candidate in _parent_candidates(child_path, parent):
        if os.path.isfile(candidate):
            return candidate
    return None


def load_hierarchy(path: str, max_depth: Optional[int] = None) -> List[PomModel]:
    """Load a descriptor and its parent chain.

    The walk stops at the depth limit, at a missing or unreadable parent and
    at a parent file already visited. Only a failure to read ``path`` itself
    is raised.

    Args:
        path: Descriptor to start from.
        max_depth: Maximum number of models in the chain.

    Returns:
        Models ordered parent first, ``path`` last.

    Raises:
        DescriptorParseError: When ``path`` itself cannot be read.
    """
    limit = Constants.PARENT_CHAIN_MAX_DEPTH if max_depth is None else max_depth
    chain: List[PomModel] = [read_pom_model(path)]
    visited = {os.path.abspath(path)}

    while len(chain) < limit:
        current = chain[-1]
        if current.parent is None:
            break
        parent_path = resolve_parent_path(current.path, current.parent)
        if parent_path is None or os.path.abspath(parent_path) in visited:
            if is_debug_enabled(logger):
                logger.debug(
                    "Parent unresolved for %s", current.path,
                    extra=extra_context(
                        event="decision", component="discovery", action="load_hierarchy",
                        outcome="cycle" if parent_path else "parent_missing",
                    ),
                )
            break
        try:
            model = read_pom_model(parent_path)
        except DescriptorParseError as e:
            logger.debug("Parent unresolved for %s: %s", current.path, e)
            break
        visited.add(os.path.abspath(parent_path))
        chain.append(model)

    chain.reverse()
    return chain
