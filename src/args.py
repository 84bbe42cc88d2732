"""Argument parsing functionality for sysdeps."""

import argparse


def build_parser():
    """Builds the argument parser."""
    parser = argparse.ArgumentParser(
        prog="sysdeps",
        description=(
            "sysdeps - resolve build dependencies against locally installed Maven descriptors"
        ),
        add_help=True,
    )

    input_group = parser.add_mutually_exclusive_group(required=True)
    input_group.add_argument("-m", "--manifest",
                        dest="MANIFEST",
                        help="Build manifest (YAML or JSON) listing modules, buckets and plugins",
                        action="store", type=str)
    input_group.add_argument("-l", "--load-list", "--load_list",
                        dest="LIST_FROM_FILE",
                        help="Load list of dependency notations from a file",
                        action="append", type=str)
    input_group.add_argument("-p", "--package",
                            dest="SINGLE",
                            help="Name a single dependency (group:artifact[:version]).",
                            action="append", type=str)

    parser.add_argument("--plugin",
                        dest="PLUGINS",
                        help="Plugin id to resolve (repeatable).",
                        action="append", type=str,
                        default=[])
    parser.add_argument("--poms-dir",
                        dest="POMS_DIRS",
                        help="Descriptor repository root (repeatable).",
                        action="append", type=str)
    parser.add_argument("--jars-dir",
                        dest="JARS_DIRS",
                        help="System jar directory (repeatable).",
                        action="append", type=str)
    parser.add_argument("--scan-depth",
                        dest="SCAN_DEPTH",
                        help="Sub-directory depth scanned below each jar directory.",
                        action="store", type=int)
    parser.add_argument("--no-verify",
                        dest="NO_VERIFY",
                        help="Accept descriptors without checking for an installed jar.",
                        action="store_true")
    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to a YAML/JSON config file.",
                        action="store", type=str)

    parser.add_argument("-o", "--output",
                        dest="OUTPUT",
                        help="Path to output file (JSON or CSV)",
                        action="store",
                        type=str)
    parser.add_argument("-f", "--format",
                        dest="OUTPUT_FORMAT",
                        help="Output format (json or csv). If not specified, inferred from --output extension; defaults to json.",
                        action="store",
                        type=str.lower,
                        choices=['json', 'csv'])

    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        default='INFO')
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)
    parser.add_argument("--error-on-warnings",
                        dest="ERROR_ON_WARNINGS",
                        help="Exit with a non-zero status code if anything could not be resolved.",
                        action="store_true")
    return parser


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    return build_parser().parse_args(argv)
