"""CLI argument parsing."""
import argparse
import sys
from typing import List, Optional

# Import defaults from config - single source of truth
from config import Defaults
from config.settings import OUTPUT_FORMATS


COMMANDS = ("string", "bytes", "file", "url", "shingle", "compare", "config")

# `rabinfp <text>` is shorthand for `rabinfp string <text>`
DEFAULT_COMMAND = "string"


# =============================================================================
# Shared Argument Helpers
# =============================================================================

def _add_common_args(parser, default=argparse.SUPPRESS) -> None:
    """Add output format and verbosity flags.

    They are accepted both before and after the subcommand. Subparsers use
    SUPPRESS defaults so a flag given before the subcommand is not reset.
    """
    parser.add_argument(
        "--format",
        choices=OUTPUT_FORMATS,
        default=default,
        dest="output_format",
        help="Fingerprint rendering: decimal (unsigned), signed (Java long) or hex (default: from config, decimal)"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        default=False if default is None else default,
        help="Enable debug logging"
    )


def _add_shingle_args(parser) -> None:
    parser.add_argument(
        "-s", "--shingle-size",
        metavar="N",
        type=int,
        default=None,
        help=f"Bytes per shingle window, at least {Defaults.MIN_SHINGLE_SIZE} (default: {Defaults.SHINGLE_SIZE})"
    )
    parser.add_argument(
        "-f", "--feature-set-size",
        metavar="N",
        type=int,
        default=None,
        help=f"Smallest fingerprints kept per document (default: {Defaults.FEATURE_SET_SIZE})"
    )


# ============================================================================
# Subcommand Parsers
# ============================================================================

def _add_string_parser(subparsers) -> None:
    """Add 'string' subcommand."""
    parser = subparsers.add_parser(
        "string",
        help="Fingerprint a string (UTF-16 code units)",
        description="Print the fingerprint of a string, hashed as UTF-16 code units."
    )
    parser.add_argument("text", help="String to fingerprint")
    _add_common_args(parser)
    parser.set_defaults(command="string")


def _add_bytes_parser(subparsers) -> None:
    """Add 'bytes' subcommand."""
    parser = subparsers.add_parser(
        "bytes",
        help="Fingerprint the encoded bytes of a string",
        description="Encode a string and print the fingerprint of the resulting bytes."
    )
    parser.add_argument("text", help="Text to encode and fingerprint")
    parser.add_argument(
        "-e", "--encoding",
        default="utf-8",
        help="Text encoding (default: utf-8)"
    )
    _add_common_args(parser)
    parser.set_defaults(command="bytes")


def _add_file_parser(subparsers) -> None:
    """Add 'file' subcommand."""
    parser = subparsers.add_parser(
        "file",
        help="Fingerprint one or more files",
        description="Print '<fingerprint>  <path>' for each file. Use '-' to read standard input.",
        epilog="""
Examples:
  rabinfp file README.md
  rabinfp file data/*.bin -w 8 --progress
  cat data.bin | rabinfp file -
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("paths", nargs="+", metavar="PATH", help="Files to fingerprint")
    parser.add_argument(
        "-w", "--workers",
        metavar="N",
        type=int,
        default=None,
        help=f"Concurrent hashing workers (default: {Defaults.HASH_WORKERS})"
    )
    parser.add_argument(
        "--chunk-size",
        metavar="BYTES",
        type=int,
        default=None,
        help=f"Read buffer size (default: {Defaults.READ_BUFFER_SIZE})"
    )
    parser.add_argument(
        "--progress",
        action="store_true",
        help="Show a progress bar"
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print results as JSON"
    )
    _add_common_args(parser)
    parser.set_defaults(command="file")


def _add_url_parser(subparsers) -> None:
    """Add 'url' subcommand."""
    parser = subparsers.add_parser(
        "url",
        help="Fingerprint the content of a URL",
        description="Download an http(s) or file: URL and print the fingerprint of its body."
    )
    parser.add_argument("url", help="URL to fetch")
    parser.add_argument(
        "-t", "--timeout",
        metavar="SECONDS",
        type=int,
        default=None,
        help=f"Request timeout (default: {Defaults.URL_TIMEOUT})"
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print result as JSON"
    )
    _add_common_args(parser)
    parser.set_defaults(command="url")


def _add_shingle_parser(subparsers) -> None:
    """Add 'shingle' subcommand."""
    parser = subparsers.add_parser(
        "shingle",
        help="Compute shingleprints for resemblance comparison",
        description=f"Compute the shingleprint of each file. With --write, save it next to the file as <file>{Defaults.SHINGLEPRINT_SUFFIX}.",
    )
    parser.add_argument(
        "paths",
        nargs="*",
        default=["-"],
        metavar="PATH",
        help="Files to sketch; '-' or no path reads standard input"
    )
    parser.add_argument(
        "--write",
        action="store_true",
        help=f"Write <file>{Defaults.SHINGLEPRINT_SUFFIX} instead of printing JSON"
    )
    _add_shingle_args(parser)
    parser.add_argument("-v", "--verbose", action="store_true", default=argparse.SUPPRESS, help="Enable debug logging")
    parser.set_defaults(command="shingle")


def _add_compare_parser(subparsers) -> None:
    """Add 'compare' subcommand."""
    parser = subparsers.add_parser(
        "compare",
        help="Compare two saved shingleprints",
        description="Print the estimated resemblance (0.00 - 1.00) of two shingleprint files."
    )
    parser.add_argument("first", metavar="SKETCH1", help="First shingleprint file")
    parser.add_argument("second", metavar="SKETCH2", help="Second shingleprint file")
    parser.add_argument("-v", "--verbose", action="store_true", default=argparse.SUPPRESS, help="Enable debug logging")
    parser.set_defaults(command="compare")


def _add_config_parser(subparsers) -> None:
    """Add 'config' subcommand for configuration management."""
    parser = subparsers.add_parser(
        "config",
        help="Manage configuration",
        description="Generate or show configuration file."
    )
    parser.add_argument(
        "action",
        choices=["init", "show", "path"],
        nargs="?",
        default="show",
        help="Action: init (create config file), show (display current config), path (show config file location)"
    )
    parser.add_argument(
        "-o", "--output",
        metavar="PATH",
        type=str,
        default="./rabinfp.yaml",
        help="Output path for config file (default: ./rabinfp.yaml)"
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Overwrite an existing config file"
    )
    parser.set_defaults(command="config")


# ============================================================================
# Main Parser
# ============================================================================

def create_parser() -> argparse.ArgumentParser:
    """Create the main argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="rabinfp",
        description="rabinfp - 64-bit Rabin fingerprints of strings, files and URLs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Subcommands:
  string    Fingerprint a string (the default: 'rabinfp <text>')
  bytes     Fingerprint the encoded bytes of a string
  file      Fingerprint files
  url       Fingerprint the content of a URL
  shingle   Compute shingleprints of files
  compare   Compare two shingleprints
  config    Manage configuration file ('rabinfp config show')

Examples:
  rabinfp "hello world"
  rabinfp --format hex -- -5
  rabinfp string "hello world" --format hex
  rabinfp file archive.tar.gz
  rabinfp url https://example.com/ --format signed
  rabinfp shingle a.txt b.txt --write
  rabinfp compare a.txt.sim.json b.txt.sim.json
        """
    )

    _add_common_args(parser, default=None)

    subparsers = parser.add_subparsers(
        title="commands",
        dest="command",
        metavar="<command>"
    )

    _add_string_parser(subparsers)
    _add_bytes_parser(subparsers)
    _add_file_parser(subparsers)
    _add_url_parser(subparsers)
    _add_shingle_parser(subparsers)
    _add_compare_parser(subparsers)
    _add_config_parser(subparsers)

    return parser


def _command_index(argv: List[str]) -> int:
    """Index of the first argument after leading --format/-v flags."""
    i = 0
    while i < len(argv):
        if argv[i] == "--format":
            i += 2
        elif argv[i] in ("-v", "--verbose") or argv[i].startswith("--format="):
            i += 1
        else:
            break
    return i


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments.

    A single argument is always the text for the 'string' subcommand, even
    when it names a subcommand or starts with '-' (only -h/--help are kept).
    With more arguments, a first argument that is neither a subcommand nor
    an option is taken as the text.

    Returns:
        Parsed arguments namespace
    """
    parser = create_parser()
    argv = list(sys.argv[1:] if argv is None else argv)

    i = _command_index(argv)
    if argv[i:i + 1] == ["--"]:
        del argv[i]
    rest = argv[i:]
    if len(rest) == 1 and rest[0] not in ("-h", "--help"):
        text = rest[0]
        argv[i:] = [DEFAULT_COMMAND, "--", text] if text.startswith("-") else [DEFAULT_COMMAND, text]
    elif rest and rest[0] not in COMMANDS and not rest[0].startswith("-"):
        argv.insert(i, DEFAULT_COMMAND)

    args = parser.parse_args(argv)

    # No input: usage on stderr, exit code 2
    if not args.command:
        parser.error("missing input: give a string to fingerprint or a subcommand")

    return args
