"""Lookup table construction for table-driven Rabin fingerprinting.

Broder's acceleration replaces bit-serial polynomial division with eight
256-entry tables, one per byte lane of the 64-bit accumulator. Entry
``tables[k][i]`` is ``i(x) * x^(64 + 8k) mod P`` where P = x^64 + polynomial,
so folding a whole word is eight lookups and nine XORs.

Tables depend only on the polynomial and are built once per polynomial,
then shared read-only by every engine in the process.
"""
import logging
from functools import lru_cache
from typing import Tuple

from config import Defaults
from core.errors import InvalidArgumentError
from core.utils import MASK64, check_int_range

logger = logging.getLogger("rabinfp.engine")

LANES = 8
TOP_BIT = 1 << (Defaults.DEGREE - 1)

LookupTables = Tuple[Tuple[int, ...], ...]


def build_mod_table(polynomial: int = Defaults.POLYNOMIAL) -> Tuple[int, ...]:
    """Compute x^(64+i) mod P for i in 0..63.

    ``mods[0]`` is the polynomial itself. Each next entry is the previous
    one shifted left by one bit, with the polynomial XORed back in when
    the bit shifted out of position 63 was set.
    """
    mods = [polynomial]
    for _ in range(1, Defaults.DEGREE):
        prev = mods[-1]
        value = (prev << 1) & MASK64
        if prev & TOP_BIT:
            value ^= polynomial
        mods.append(value)
    return tuple(mods)


@lru_cache(maxsize=None)
def build_lookup_tables(polynomial: int = Defaults.POLYNOMIAL) -> LookupTables:
    """Build the eight byte-lane tables for a polynomial (cached).

    Args:
        polynomial: Low 64 bits of the degree-64 generator polynomial

    Returns:
        Tuple of 8 tuples, each with 256 unsigned 64-bit entries
    """
    check_int_range(polynomial, 0, 1 << 64, "polynomial")
    if polynomial == 0:
        raise InvalidArgumentError("polynomial must be non-zero")

    mods = build_mod_table(polynomial)
    tables = [[0] * 256 for _ in range(LANES)]
    for i in range(1, 256):
        for j in range(8):
            if not (i >> j) & 1:
                continue
            for k in range(LANES):
                tables[k][i] ^= mods[j + 8 * k]

    logger.debug(f"[TABLES] Built lookup tables for polynomial 0x{polynomial:016X}")
    return tuple(tuple(table) for table in tables)
