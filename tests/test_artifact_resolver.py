"""Tests for ArtifactResolver."""
from registry.local.index import RepositoryIndex
from registry.local.jars import ArtifactVerifier
from registry.local.models import Coordinate, MavenScope
from resolution.artifacts import ArtifactResolver, plugin_artifact_candidates


class StaticIndex:
    """Index stand-in serving a fixed mapping."""

    def __init__(self, coordinates):
        self.coordinates = {c.key: c for c in coordinates}

    def find(self, group_id, artifact_id):
        return self.coordinates.get(f"{group_id}:{artifact_id}")

    def find_all_for_group(self, group_id):
        return [c for c in self.coordinates.values() if c.group_id == group_id]


class TestArtifactResolver:
    """Tests for resolve, filter and lookup."""

    def test_found_and_not_found(self, write_pom, local_resolver):
        """Installed keys resolve, others are reported missing."""
        write_pom("lib.pom", group="com.acme", artifact="lib", version="1.0")
        resolver = local_resolver()
        found = resolver.resolve(["com.acme:lib", "p:q"])
        assert set(found) == {"com.acme:lib"}
        assert found["com.acme:lib"].version == "1.0"
        assert resolver.not_found == {"p:q"}

    def test_resolve_replaces_previous_state(self, write_pom, local_resolver):
        """A second resolve starts over."""
        write_pom("lib.pom", group="com.acme", artifact="lib", version="1.0")
        resolver = local_resolver()
        resolver.resolve(["p:q"])
        resolver.resolve(["com.acme:lib"])
        assert resolver.not_found == set()
        assert set(resolver.system_artifacts) == {"com.acme:lib"}

    def test_filter_drops_boms_and_test_scope(self):
        """Only directly consumable artifacts survive filtering."""
        resolver = ArtifactResolver(StaticIndex([
            Coordinate("g", "lib", "1"),
            Coordinate("g", "bom", "1", packaging="pom"),
            Coordinate("g", "junit", "4", scope=MavenScope.TEST),
        ]))
        resolver.resolve(["g:lib", "g:bom", "g:junit"])
        assert set(resolver.filter()) == {"g:lib"}
        assert set(resolver.system_artifacts) == {"g:lib"}

    def test_placeholder_and_malformed_keys(self, write_pom, local_resolver):
        """Unresolved placeholders and malformed keys never match."""
        write_pom("lib.pom", group="g", artifact="lib", version="1")
        resolver = local_resolver()
        assert resolver.lookup("g:${lib.name}") is None
        assert resolver.lookup("nocolon") is None
        assert resolver.lookup("") is None
        resolver.resolve(["g:${lib.name}"])
        assert resolver.not_found == {"g:${lib.name}"}

    def test_lookup_is_stateless(self, write_pom, local_resolver):
        """lookup leaves the run state alone."""
        write_pom("lib.pom", group="g", artifact="lib", version="1")
        resolver = local_resolver()
        assert resolver.lookup("g:lib") is not None
        assert resolver.system_artifacts == {}

    def test_verifier_rejects_missing_jar(self, tmp_path, write_pom):
        """With verification on, a descriptor without a jar is not found."""
        write_pom("lib.pom", subdir="poms", group="g", artifact="lib", version="1")
        write_pom("bom.pom", subdir="poms", group="g", artifact="bom", version="1", packaging="pom")
        (tmp_path / "jars").mkdir()
        index = RepositoryIndex()
        index.build(str(tmp_path / "poms"))
        resolver = ArtifactResolver(index, ArtifactVerifier([str(tmp_path / "jars")]))
        assert resolver.lookup("g:lib") is None
        assert resolver.lookup("g:bom") is not None
        (tmp_path / "jars" / "lib-1.jar").write_bytes(b"")
        fresh = ArtifactResolver(index, ArtifactVerifier([str(tmp_path / "jars")]))
        assert fresh.lookup("g:lib") is not None


class TestPluginLookup:
    """Tests for plugin marker and plugin id lookups."""

    def test_marker_key(self, write_pom, local_resolver):
        """A marker key resolves through the plugin id."""
        write_pom("marker.pom", group="com.example.lint", artifact="com.example.lint.gradle.plugin", version="2")
        resolver = local_resolver()
        coordinate = resolver.lookup("com.example.lint:com.example.lint.gradle.plugin")
        assert coordinate.notation == "com.example.lint:com.example.lint.gradle.plugin:2"

    def test_group_fallback(self, write_pom, local_resolver):
        """An artifact of the plugin group mentioning gradle is accepted."""
        write_pom("core.pom", group="org.acme.build", artifact="aaa-core", version="1")
        write_pom("tools.pom", group="org.acme.build", artifact="acme-build-tools-gradle", version="1")
        resolver = local_resolver()
        assert resolver.find_plugin("org.acme.build").artifact_id == "acme-build-tools-gradle"
        assert resolver.find_plugin("org.nothing.here") is None

    def test_candidates(self):
        """The marker artifact id comes first and names are unique."""
        candidates = plugin_artifact_candidates("org.acme.build")
        assert candidates[0] == "org.acme.build.gradle.plugin"
        assert "build-plugin" in candidates
        assert "acme-build-gradle-plugin" in candidates
        assert len(candidates) == len(set(candidates))
