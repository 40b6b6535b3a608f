#!/usr/bin/env python3
"""rabinfp - 64-bit Rabin fingerprints.

This is the main entry point for the rabinfp tool.

Usage:
    rabinfp <text>                       # Fingerprint a string
    rabinfp bytes <text>                 # Fingerprint encoded bytes
    rabinfp file <path>...               # Fingerprint files
    rabinfp url <url>                    # Fingerprint a URL's content
    rabinfp shingle <path>... --write    # Compute shingleprints
    rabinfp compare <a.sim.json> <b.sim.json>
    rabinfp config init                  # Create default config file
    rabinfp config show                  # Show current configuration
"""
import os
import sys
import logging
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def configure_logging(verbose: bool = False):
    """Configure logging based on verbosity.

    Args:
        verbose: If True, enable debug logging for rabinfp modules
    """
    debug_mode = verbose or os.environ.get("RABINFP_DEBUG", "").lower() in ("1", "true", "yes")

    level = logging.DEBUG if debug_mode else logging.WARNING

    for logger_name in ["rabinfp.engine", "rabinfp.fetcher", "rabinfp.shingles"]:
        logger = logging.getLogger(logger_name)
        logger.setLevel(level)
        if not logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter("%(message)s"))
            logger.addHandler(handler)


def main(argv=None):
    """Main entry point - routes to subcommands."""
    from cli.args import parse_args
    from core.errors import FingerprintError
    from cli.commands import (
        cmd_string,
        cmd_bytes,
        cmd_file,
        cmd_url,
        cmd_shingle,
        cmd_compare,
        cmd_config,
    )

    # Command router
    commands = {
        "string": cmd_string,
        "bytes": cmd_bytes,
        "file": cmd_file,
        "url": cmd_url,
        "shingle": cmd_shingle,
        "compare": cmd_compare,
        "config": cmd_config,
    }

    args = parse_args(argv)

    verbose = getattr(args, 'verbose', False)
    configure_logging(verbose)

    handler = commands.get(args.command)
    if handler:
        # Config errors can surface from any command
        try:
            exit_code = handler(args)
        except FingerprintError as e:
            print(f"[ERROR] {e}", file=sys.stderr)
            exit_code = 1
        sys.exit(exit_code)
    else:
        print(f"Unknown command: {args.command}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
