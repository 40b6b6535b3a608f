"""Shared formatting utilities."""
from typing import Optional

from .errors import InvalidArgumentError
from .utils import MASK64, to_signed64


def format_fingerprint(value: int, fmt: str = "decimal") -> str:
    """Render a fingerprint for output.

    Args:
        value: Unsigned 64-bit fingerprint
        fmt: "decimal" (unsigned), "signed" (two's complement, as a Java long
            would print it) or "hex" (16 zero-padded digits)

    Returns:
        Formatted fingerprint
    """
    value &= MASK64
    if fmt == "decimal":
        return str(value)
    if fmt == "signed":
        return str(to_signed64(value))
    if fmt == "hex":
        return f"{value:016x}"
    raise InvalidArgumentError(f"Unknown output format: {fmt}")


def print_section_header(title: str, char: str = "=", width: int = 70) -> None:
    """Print a section header.

    Args:
        title: Title to print
        char: Character for the line (default: "=")
        width: Line width (default: 70)
    """
    print("\n" + char * width)
    print(title)
    print(char * width)


def print_shingleprint_summary(
    source: str,
    shingle_size: int,
    feature_set_size: int,
    features_count: int,
    output_path: Optional[str] = None,
) -> None:
    """Print a short summary of a computed shingleprint."""
    print(f"{source}: {features_count}/{feature_set_size} features (shingle size {shingle_size})")
    if output_path:
        print(f"    [✓] Saved to: {output_path}")
