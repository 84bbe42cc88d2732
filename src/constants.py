"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    CONFIG_ERROR = 2
    EXIT_WARNINGS = 3


class OutputFormats(Enum):
    """Export formats supported by the program.

    Args:
        Enum (string): Export formats supported by the program.
    """

    JSON = "json"
    CSV = "csv"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    Values are overridden at startup by cli_config from YAML, env and CLI.
    """

    # Repository layout
    POMS_DIRS = ["/usr/share/maven-poms"]
    JARS_DIRS = ["/usr/share/java"]
    DESCRIPTOR_SUFFIXES = [".pom"]
    DESCRIPTOR_SCAN_DEPTH = 10
    JAR_SCAN_DEPTH = 3
    PARENT_CHAIN_MAX_DEPTH = 10
    PROPERTY_RESOLVE_PASSES = 20
    VERIFY_ARTIFACTS = True

    # Descriptor cache sizing
    CACHE_TTL_SEC = 30 * 60
    CACHE_POM_MAX_ENTRIES = 1000
    CACHE_DEP_MGMT_MAX_ENTRIES = 500
    CACHE_DEPENDENCIES_MAX_ENTRIES = 2000
    CACHE_PROPERTIES_MAX_ENTRIES = 1000

    # Configuration buckets
    BUCKET_API = "api"
    BUCKET_IMPLEMENTATION = "implementation"
    BUCKET_RUNTIME = "runtimeOnly"
    BUCKET_COMPILE_ONLY = "compileOnly"
    BUCKET_TEST = "testImplementation"

    # Plugins
    CORE_PLUGIN_NAMESPACE = "org.gradle."
    PLUGIN_MARKER_SUFFIX = ".gradle.plugin"

    # Config discovery
    ENV_CONFIG = "SYSDEPS_CONFIG"
    ENV_POMS_DIR = "SYSDEPS_POMS_DIR"
    ENV_JARS_DIR = "SYSDEPS_JARS_DIR"
    ENV_LOG_LEVEL = "SYSDEPS_LOG_LEVEL"
    DEFAULT_CONFIG_FILES = ["sysdeps.yml", "~/.config/sysdeps/sysdeps.yml"]

    LOG_FORMAT = "[%(levelname)s] %(message)s"
    UNSPECIFIED_VERSION = "(unspecified)"
