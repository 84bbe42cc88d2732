"""sysdeps: resolve a build's dependencies against locally installed Maven descriptors."""

import logging
import sys

from args import parse_args
from cli_config import ConfigError, apply_cli_overrides, apply_config, apply_env_overrides, load_yaml_config
from common.logging_utils import configure_logging, extra_context, is_debug_enabled
from constants import Constants, ExitCodes, OutputFormats
from manifest import BuildManifest, ManifestError, from_notations, load_list_file, load_manifest
from registry.local.discovery import RepositoryUnavailableError
from resolution.pipeline import ResolutionPipeline
from resolution.report import export_csv, export_json, log_report

LOG_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def build_manifest(args) -> BuildManifest:
    """Builds the manifest from whichever input option was given.

    Raises:
        ManifestError: When an input file cannot be read.
    """
    if getattr(args, "MANIFEST", None):
        manifest = load_manifest(args.MANIFEST)
    elif getattr(args, "LIST_FROM_FILE", None):
        notations = []
        for path in args.LIST_FROM_FILE:
            notations.extend(load_list_file(path))
        manifest = from_notations(notations)
    else:
        manifest = from_notations(getattr(args, "SINGLE", None) or [])
    manifest.plugins.extend(p for p in (getattr(args, "PLUGINS", None) or []) if p not in manifest.plugins)
    return manifest


def _configure(args) -> None:
    try:
        apply_config(load_yaml_config(getattr(args, "CONFIG", None)))
    except ConfigError as e:
        logging.error("Configuration error: %s", e)
        sys.exit(ExitCodes.CONFIG_ERROR.value)
    apply_env_overrides()
    apply_cli_overrides(args)


def _output_format(args) -> OutputFormats:
    if getattr(args, "OUTPUT_FORMAT", None):
        return OutputFormats(args.OUTPUT_FORMAT.lower())
    if args.OUTPUT.lower().endswith(".csv"):
        return OutputFormats.CSV
    return OutputFormats.JSON


def main(argv=None):
    """Main function of the program."""
    logger = logging.getLogger(__name__)

    args = parse_args(argv)
    configure_logging(args.LOG_LEVEL)
    if getattr(args, "LOG_FILE", None):
        handler = logging.FileHandler(args.LOG_FILE, encoding="utf-8")
        handler.setFormatter(logging.Formatter(LOG_FILE_FORMAT))
        logging.getLogger().addHandler(handler)

    if is_debug_enabled(logger):
        logger.debug("CLI start", extra=extra_context(event="function_entry", component="cli", action="main"))

    _configure(args)

    try:
        manifest = build_manifest(args)
    except ManifestError as e:
        logging.error("%s, aborting", e)
        sys.exit(ExitCodes.FILE_ERROR.value)

    declared = manifest.declared()
    if not declared.keys and not manifest.plugins:
        logging.warning("No dependencies or plugins found in the input.")
        sys.exit(ExitCodes.SUCCESS.value)

    pipeline = ResolutionPipeline(Constants.POMS_DIRS, Constants.JARS_DIRS, Constants.VERIFY_ARTIFACTS)
    try:
        result = pipeline.run(declared, manifest.plugins)
    except RepositoryUnavailableError as e:
        logging.error("Repository unavailable: %s", e)
        sys.exit(ExitCodes.FILE_ERROR.value)

    log_report(result)

    if getattr(args, "OUTPUT", None):
        if _output_format(args) == OutputFormats.CSV:
            export_csv(result, args.OUTPUT)
        else:
            export_json(result, args.OUTPUT)

    if result.has_warnings():
        logging.warning("One or more dependencies could not be resolved locally.")
        if args.ERROR_ON_WARNINGS:
            logging.error("Warnings present, exiting with non-zero status code.")
            sys.exit(ExitCodes.EXIT_WARNINGS.value)

    if is_debug_enabled(logger):
        logger.debug(
            "CLI finished",
            extra=extra_context(event="function_exit", component="cli", action="main", outcome="success"),
        )
    sys.exit(ExitCodes.SUCCESS.value)


if __name__ == "__main__":
    main()
