"""Packing helpers that turn typed input into the canonical byte form.

Every typed hash variant is defined as "pack to big-endian bytes, then run
the byte fold", so these functions are the only place the per-type packing
rules live.
"""
import json
import struct
from datetime import datetime, timezone
from typing import Any, Iterable, Sequence, Union

from pydantic import BaseModel

from .errors import InvalidArgumentError


MASK64 = 0xFFFFFFFFFFFFFFFF
MASK32 = 0xFFFFFFFF

BytesLike = Union[bytes, bytearray, memoryview]


def utc_now_iso() -> str:
    """Get current UTC timestamp in ISO 8601 format with Z suffix.

    Returns:
        ISO formatted timestamp (e.g., "2025-12-06T12:30:00.123456Z")
    """
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def check_int_range(value: Any, low: int, high: int, name: str) -> int:
    """Validate that value is an int in [low, high)."""
    if not _is_int(value):
        raise InvalidArgumentError(f"{name} must be an int, got {type(value).__name__}")
    if not low <= value < high:
        raise InvalidArgumentError(f"{name} out of range [{low}, {high}): {value}")
    return value


def to_unsigned64(value: int, name: str = "value") -> int:
    """Accept a signed or unsigned 64-bit int and return it as unsigned."""
    return check_int_range(value, -(1 << 63), 1 << 64, name) & MASK64


def to_signed64(value: int) -> int:
    """Interpret an unsigned 64-bit fingerprint as a two's complement long."""
    value &= MASK64
    if value & 0x8000000000000000:
        value -= 1 << 64
    return value


def pack_chars(chars: Union[str, Sequence[int]]) -> bytes:
    """Pack UTF-16 code units as 2 big-endian bytes each.

    A str is split into UTF-16 code units (non-BMP characters become
    surrogate pairs; lone surrogates are kept as-is).
    """
    if isinstance(chars, str):
        return chars.encode("utf-16-be", "surrogatepass")
    if chars is None or isinstance(chars, (bytes, bytearray, memoryview)):
        raise InvalidArgumentError("chars must be a str or a sequence of UTF-16 code units")
    try:
        units = [check_int_range(c, 0, 0x10000, "char") for c in chars]
    except TypeError as e:
        raise InvalidArgumentError(f"chars is not iterable: {e}") from e
    return struct.pack(f">{len(units)}H", *units)


def pack_ints(values: Iterable[int]) -> bytes:
    """Pack 32-bit ints (signed or unsigned) as 4 big-endian bytes each."""
    if values is None:
        raise InvalidArgumentError("values must not be None")
    try:
        words = [check_int_range(v, -(1 << 31), 1 << 32, "int") & MASK32 for v in values]
    except TypeError as e:
        raise InvalidArgumentError(f"values is not iterable: {e}") from e
    return struct.pack(f">{len(words)}I", *words)


def pack_longs(values: Iterable[int]) -> bytes:
    """Pack 64-bit ints (signed or unsigned) as 8 big-endian bytes each."""
    if values is None:
        raise InvalidArgumentError("values must not be None")
    try:
        words = [to_unsigned64(v, "long") for v in values]
    except TypeError as e:
        raise InvalidArgumentError(f"values is not iterable: {e}") from e
    return struct.pack(f">{len(words)}Q", *words)


def canonical_bytes(value: Any) -> bytes:
    """Serialize a value to canonical JSON bytes.

    Keys are sorted and separators are compact so equal values always give
    equal bytes. pydantic models are dumped in JSON mode first.
    """
    if isinstance(value, BaseModel):
        value = value.model_dump(mode="json")
    try:
        text = json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError) as e:
        raise InvalidArgumentError(f"Value cannot be serialized for hashing: {e}") from e
    return text.encode("utf-8")
