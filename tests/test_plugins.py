"""Tests for PluginResolver."""
from resolution.bom import BomExpander
from resolution.plugins import PluginResolver


def _plugins(resolver, core_namespace=None):
    return PluginResolver(resolver, BomExpander(resolver.index.parser, resolver), core_namespace)


class TestPluginResolver:
    """Tests for plugin id resolution."""

    def test_core_ids(self, local_resolver):
        """Dotless ids and the core namespace are left to the host."""
        plugins = _plugins(local_resolver())
        assert plugins.is_core("java-library")
        assert plugins.is_core("org.gradle.toolchains.foojay-resolver")
        assert not plugins.is_core("com.acme.lint")
        result = plugins.resolve(["java", "org.gradle.test-retry"])
        assert result.skipped == {"java", "org.gradle.test-retry"}
        assert not result.overrides

    def test_custom_core_namespace(self, local_resolver):
        """The core namespace is configurable."""
        assert _plugins(local_resolver(), "com.acme.").is_core("com.acme.lint")

    def test_marker_resolves_to_module(self, write_pom, local_resolver):
        """A plain plugin artifact becomes a single override."""
        write_pom("lint.pom", group="com.acme.lint", artifact="com.acme.lint.gradle.plugin", version="2")
        result = _plugins(local_resolver()).resolve(["com.acme.lint"])
        assert result.overrides == {"com.acme.lint": ["com.acme.lint:com.acme.lint.gradle.plugin:2"]}

    def test_missing_plugin_is_unresolved(self, local_resolver):
        """An absent plugin is reported, not fatal."""
        result = _plugins(local_resolver()).resolve(["com.missing.plugin"])
        assert result.unresolved == {"com.missing.plugin"}

    def test_bom_plugin_expands_to_modules(self, write_pom, local_resolver):
        """A plugin published as a BOM maps to its managed modules."""
        write_pom("tool-bom.pom", group="io.tool", artifact="io.tool.gradle.plugin", version="3", packaging="pom",
                  managed=[{"groupId": "io.tool", "artifactId": "tool-core", "version": "3.0"},
                           {"groupId": "io.tool", "artifactId": "tool-extra", "version": "3.1"}])
        write_pom("tool-core.pom", group="io.tool", artifact="tool-core", version="3.0.1")
        plugins = _plugins(local_resolver())
        expected = {"io.tool": ["io.tool:tool-core:3.0.1", "io.tool:tool-extra:3.1"]}
        assert plugins.resolve(["io.tool"]).overrides == expected
        assert plugins.resolve(["io.tool"]).overrides == expected

    def test_empty_bom_plugin_is_unresolved(self, write_pom, local_resolver):
        """A BOM plugin managing nothing is unresolved."""
        write_pom("empty.pom", group="io.empty", artifact="io.empty.gradle.plugin", version="1", packaging="pom")
        result = _plugins(local_resolver()).resolve(["io.empty"])
        assert result.unresolved == {"io.empty"}
