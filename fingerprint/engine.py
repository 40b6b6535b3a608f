"""Rabin fingerprinting engine.

Computes 64-bit Rabin fingerprints (M(x) mod P over GF(2)) using Broder's
table-driven scheme: the input is folded one 64-bit word at a time through
eight precomputed byte-lane tables.

M. O. Rabin, Fingerprinting by random polynomials. Harvard University
Report TR-15-81, 1981.

A. Z. Broder, Some applications of Rabin's fingerprinting method. In
Sequences II: Methods in Communications, Security, and Computer Science,
Springer-Verlag, 1993, pages 143-152.

The fingerprint is not a cryptographic hash: the polynomial is public and
the function is easy to invert.
"""
import logging
import struct
from functools import lru_cache
from typing import Any, Iterable, Optional, Sequence, Union

from config import Defaults
from core.errors import InvalidArgumentError
from core.utils import (
    MASK64,
    BytesLike,
    canonical_bytes,
    check_int_range,
    pack_chars,
    pack_ints,
    pack_longs,
    to_unsigned64,
)

from .builder import build_lookup_tables

logger = logging.getLogger("rabinfp.engine")

WORD_SIZE = 8
_WORD = struct.Struct(">Q")


def _as_view(data: Any) -> memoryview:
    if data is None:
        raise InvalidArgumentError("data must not be None")
    if isinstance(data, str):
        raise InvalidArgumentError("data must be bytes-like; use hash_string() for text")
    try:
        view = memoryview(data)
    except TypeError as e:
        raise InvalidArgumentError(f"data must be bytes-like, got {type(data).__name__}") from e
    if view.c_contiguous:
        try:
            return view.cast("B")
        except TypeError:
            pass
    # strided slices and non-native formats are copied out in logical order
    return memoryview(view.tobytes())


class RabinFingerprintEngine:
    """Table-driven 64-bit Rabin fingerprint.

    The engine holds no mutable state after construction. Lookup tables are
    shared per polynomial, and every hash call keeps its own accumulator,
    so one instance can be used from many threads at once.
    """

    def __init__(self, polynomial: int = Defaults.POLYNOMIAL):
        """Initialize engine.

        Args:
            polynomial: Low 64 bits of the degree-64 generator polynomial
        """
        check_int_range(polynomial, 0, 1 << 64, "polynomial")
        self.polynomial = polynomial
        self.tables = build_lookup_tables(polynomial)

    def __repr__(self) -> str:
        return f"RabinFingerprintEngine(polynomial=0x{self.polynomial:016X})"

    # ------------------------------------------------------------------
    # Folding primitives
    # ------------------------------------------------------------------

    def fold_words(self, w: int, view: memoryview) -> int:
        """Fold whole big-endian 64-bit words into the accumulator.

        ``len(view)`` must be a multiple of 8.
        """
        if not view:
            return w
        t0, t1, t2, t3, t4, t5, t6, t7 = self.tables
        for (word,) in _WORD.iter_unpack(view):
            w = (
                t0[w & 0xFF]
                ^ t1[(w >> 8) & 0xFF]
                ^ t2[(w >> 16) & 0xFF]
                ^ t3[(w >> 24) & 0xFF]
                ^ t4[(w >> 32) & 0xFF]
                ^ t5[(w >> 40) & 0xFF]
                ^ t6[(w >> 48) & 0xFF]
                ^ t7[w >> 56]
                ^ word
            )
        return w

    def fold_byte(self, w: int, byte: int) -> int:
        """Fold one byte with full reduction: w * x^8 + byte mod P."""
        return ((w << 8) & MASK64) ^ self.tables[0][w >> 56] ^ byte

    # ------------------------------------------------------------------
    # Canonical byte hash
    # ------------------------------------------------------------------

    def hash_bytes(
        self,
        data: BytesLike,
        offset: int = 0,
        length: Optional[int] = None,
        seed: int = 0,
    ) -> int:
        """Return the Rabin fingerprint of ``data[offset:offset + length]``.

        The first ``length % 8`` bytes are shifted into the accumulator one
        at a time, the rest is folded as whole words. With a non-zero seed
        this leading partial word is not reduced, matching the reference
        fingerprints bit for bit; use RabinDigest for exact continuation
        across unaligned pieces.

        Args:
            data: bytes, bytearray or memoryview
            offset: First byte to hash
            length: Number of bytes to hash (default: to the end of data)
            seed: Starting accumulator, e.g. a previous fingerprint

        Returns:
            Unsigned 64-bit fingerprint (the seed itself for empty input)
        """
        view = _as_view(data)
        check_int_range(offset, 0, len(view) + 1, "offset")
        if length is None:
            length = len(view) - offset
        check_int_range(length, 0, len(view) - offset + 1, "length")
        w = to_unsigned64(seed, "seed")

        view = view[offset:offset + length]
        head = length % WORD_SIZE
        for byte in view[:head]:
            w = ((w << 8) & MASK64) ^ byte
        return self.fold_words(w, view[head:])

    # ------------------------------------------------------------------
    # Typed variants (pack, then fold)
    # ------------------------------------------------------------------

    def hash_chars(self, chars: Union[str, Sequence[int]]) -> int:
        """Fingerprint a sequence of UTF-16 code units (2 bytes each)."""
        return self.hash_bytes(pack_chars(chars))

    def hash_string(self, text: str) -> int:
        """Fingerprint a string by its UTF-16 code units."""
        if not isinstance(text, str):
            raise InvalidArgumentError(f"text must be a str, got {type(text).__name__}")
        return self.hash_chars(text)

    def hash_ints(self, values: Iterable[int]) -> int:
        """Fingerprint a sequence of 32-bit ints (4 bytes each).

        With an odd count the first int becomes the starting accumulator.
        """
        return self.hash_bytes(pack_ints(values))

    def hash_longs(self, values: Iterable[int]) -> int:
        """Fingerprint a sequence of 64-bit ints, one table fold per value."""
        return self.hash_bytes(pack_longs(values))

    def hash_object(self, value: Any) -> int:
        """Fingerprint any JSON-serializable value or pydantic model.

        The value is serialized to canonical JSON first; only those bytes
        are hashed.
        """
        return self.hash_bytes(canonical_bytes(value))

    def new_digest(self, seed: int = 0) -> "RabinDigest":
        """Start an incremental fingerprint bound to this engine."""
        from .digest import RabinDigest
        return RabinDigest(engine=self, seed=seed)


@lru_cache(maxsize=None)
def get_engine(polynomial: int = Defaults.POLYNOMIAL) -> RabinFingerprintEngine:
    """Get the shared engine for a polynomial (created on first use)."""
    logger.debug(f"[ENGINE] Creating engine for polynomial 0x{polynomial:016X}")
    return RabinFingerprintEngine(polynomial)


def fingerprint(data: BytesLike, seed: int = 0) -> int:
    """Fingerprint bytes with the default engine."""
    return get_engine().hash_bytes(data, seed=seed)
