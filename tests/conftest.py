"""Shared fixtures: descriptor writers and Constants isolation."""
import copy
import os

import pytest

from constants import Constants
from registry.local.index import RepositoryIndex
from registry.local.pom_parser import PomParser
from resolution.artifacts import ArtifactResolver


def make_pom(  # pylint: disable=too-many-arguments
    group=None,
    artifact=None,
    version=None,
    packaging=None,
    parent=None,
    properties=None,
    dependencies=None,
    managed=None,
    namespace=True,
):
    """Render a descriptor.

    ``parent`` is a (group, artifact, version) tuple. Dependencies are dicts
    with any of groupId/artifactId/version/scope/type.
    """
    def _deps(items):
        out = []
        for dep in items:
            fields = "".join(f"<{k}>{v}</{k}>" for k, v in dep.items())
            out.append(f"<dependency>{fields}</dependency>")
        return "<dependencies>" + "".join(out) + "</dependencies>"

    xmlns = ' xmlns="http://maven.apache.org/POM/4.0.0"' if namespace else ""
    parts = [f'<?xml version="1.0" encoding="UTF-8"?>\n<project{xmlns}>', "<modelVersion>4.0.0</modelVersion>"]
    if parent:
        pg, pa, pv = parent
        parts.append(f"<parent><groupId>{pg}</groupId><artifactId>{pa}</artifactId><version>{pv}</version></parent>")
    if group:
        parts.append(f"<groupId>{group}</groupId>")
    if artifact:
        parts.append(f"<artifactId>{artifact}</artifactId>")
    if version:
        parts.append(f"<version>{version}</version>")
    if packaging:
        parts.append(f"<packaging>{packaging}</packaging>")
    if properties:
        parts.append("<properties>" + "".join(f"<{k}>{v}</{k}>" for k, v in properties.items()) + "</properties>")
    if managed:
        parts.append("<dependencyManagement>" + _deps(managed) + "</dependencyManagement>")
    if dependencies:
        parts.append(_deps(dependencies))
    parts.append("</project>")
    return "\n".join(parts)


@pytest.fixture
def write_pom(tmp_path):
    """Write a descriptor into ``tmp_path`` and return its path."""
    def _write(name, subdir=None, **kwargs):
        directory = tmp_path / subdir if subdir else tmp_path
        os.makedirs(directory, exist_ok=True)
        path = directory / name
        path.write_text(make_pom(**kwargs), encoding="utf-8")
        return str(path)
    return _write


@pytest.fixture(autouse=True)
def restore_constants():
    """Undo any Constants mutation made by a test."""
    saved = {k: copy.deepcopy(v) for k, v in vars(Constants).items() if k.isupper()}
    yield
    for key, value in saved.items():
        setattr(Constants, key, value)


@pytest.fixture
def local_resolver(tmp_path):
    """Index ``tmp_path`` and return a resolver over it, without jar checks."""
    def _build():
        parser = PomParser()
        index = RepositoryIndex(parser)
        index.build(str(tmp_path))
        return ArtifactResolver(index)
    return _build
