"""CLI module for rabinfp."""
from .args import parse_args, create_parser
from .commands import cmd_string, cmd_bytes, cmd_file, cmd_url, cmd_shingle, cmd_compare, cmd_config

__all__ = [
    "parse_args",
    "create_parser",
    "cmd_string",
    "cmd_bytes",
    "cmd_file",
    "cmd_url",
    "cmd_shingle",
    "cmd_compare",
    "cmd_config",
]
