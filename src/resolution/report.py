"""Human-readable report and file exports for a resolution run."""
from __future__ import annotations

import csv
import json
import logging
import sys
from typing import Any, Dict, List

from constants import ExitCodes
from resolution.models import ResolutionResult

logger = logging.getLogger(__name__)


def log_report(result: ResolutionResult) -> None:
    """Log every report section."""
    logger.info("Initial dependencies: %s", ", ".join(sorted(result.declared)) or "none")
    logger.info("Resolved artifacts (%d):", len(result.resolved))
    for key in sorted(result.resolved):
        logger.info("  %s", result.resolved[key].notation)
    if result.test_context:
        logger.info("Test-context dependencies: %s", ", ".join(sorted(result.test_context)))
    for bucket in sorted(result.buckets):
        logger.info("Bucket %s:", bucket)
        for notation in sorted(result.buckets[bucket]):
            logger.info("  %s", notation)
    if result.not_found:
        logger.warning("Not found in the system repository: %s", ", ".join(sorted(result.not_found)))
    if result.skipped:
        logger.warning("Skipped transitive dependencies: %s", ", ".join(sorted(result.skipped)))
    for line in sorted(result.override_logs):
        logger.info(line)
    for line in sorted(result.apply_logs):
        logger.debug(line)
    for plugin_id in sorted(result.plugin_overrides):
        logger.info("Plugin %s -> %s", plugin_id, ", ".join(result.plugin_overrides[plugin_id]))
    if result.unresolved_plugins:
        logger.warning("Plugins left to the host: %s", ", ".join(sorted(result.unresolved_plugins)))


def to_dict(result: ResolutionResult) -> Dict[str, Any]:
    """JSON-ready view of a run."""
    return {
        "declared": sorted(result.declared),
        "resolved": {
            key: {
                "groupId": coord.group_id,
                "artifactId": coord.artifact_id,
                "version": coord.version,
                "packaging": coord.packaging,
                "scope": coord.scope.value,
                "pom": coord.pom_path,
            }
            for key, coord in sorted(result.resolved.items())
        },
        "testContext": sorted(result.test_context),
        "notFound": sorted(result.not_found),
        "skipped": sorted(result.skipped),
        "managedVersions": dict(sorted(result.managed_versions.items())),
        "bomManaged": {k: list(v) for k, v in sorted(result.bom_managed.items())},
        "processedBoms": sorted(result.processed_boms),
        "buckets": {k: sorted(v) for k, v in sorted(result.buckets.items())},
        "overrides": sorted(result.override_logs),
        "applies": sorted(result.apply_logs),
        "plugins": {
            "overrides": {k: list(v) for k, v in sorted(result.plugin_overrides.items())},
            "unresolved": sorted(result.unresolved_plugins),
            "skipped": sorted(result.skipped_plugins),
        },
        "repositoryDirs": list(result.repository_dirs),
    }


def _rows(result: ResolutionResult) -> List[List[Any]]:
    rows: List[List[Any]] = [["Key", "Version", "Scope", "Packaging", "Context", "Buckets", "Status"]]
    by_notation: Dict[str, List[str]] = {}
    for bucket, notations in result.buckets.items():
        for notation in notations:
            by_notation.setdefault(notation, []).append(bucket)
    for key, coord in sorted(result.resolved.items()):
        rows.append([
            key,
            coord.version,
            coord.scope.value,
            coord.packaging,
            "test" if key in result.test_context else "main",
            ";".join(sorted(by_notation.get(coord.notation, []))),
            "resolved",
        ])
    for key in sorted(result.not_found):
        rows.append([key, "", "", "", "", "", "not_found"])
    for key in sorted(result.skipped):
        rows.append([key, "", "", "", "", "", "skipped"])
    return rows


def export_csv(result: ResolutionResult, path: str) -> None:
    """Exports the run to a CSV file.

    Args:
        result: Resolution result.
        path: File path to export the CSV.
    """
    try:
        with open(path, 'w', newline='', encoding='utf-8') as file:
            export = csv.writer(file)
            export.writerows(_rows(result))
        logging.info("CSV file has been successfully exported at: %s", path)
    except (OSError, csv.Error) as e:
        logging.error("CSV file couldn't be written to disk: %s", e)
        sys.exit(ExitCodes.FILE_ERROR.value)


def export_json(result: ResolutionResult, path: str) -> None:
    """Exports the run to a JSON file.

    Args:
        result: Resolution result.
        path: File path to export the JSON.
    """
    try:
        with open(path, 'w', encoding='utf-8') as file:
            json.dump(to_dict(result), file, ensure_ascii=False, indent=4)
        logging.info("JSON file has been successfully exported at: %s", path)
    except OSError as e:
        logging.error("JSON file couldn't be written to disk: %s", e)
        sys.exit(ExitCodes.FILE_ERROR.value)
