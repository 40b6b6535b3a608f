"""Shingleprints: document resemblance from Rabin-fingerprinted shingles.

Every window of ``shingle_size`` consecutive bytes (a shingle) is
fingerprinted, and the ``feature_set_size`` smallest distinct fingerprints
are kept as the document's sketch. Two sketches are compared by the share
of features they have in common, which estimates the resemblance of the
documents (Broder, "On the resemblance and containment of documents",
SEQUENCES'97).
"""
import heapq
import json
import logging
from pathlib import Path
from typing import BinaryIO, List, Optional, Union

from pydantic import ValidationError

from config import Defaults, get_settings
from core.errors import InvalidArgumentError, IOFailureError, NotFoundError
from core.models import Shingleprint
from core.utils import BytesLike, check_int_range

from .engine import RabinFingerprintEngine, _as_view, get_engine

logger = logging.getLogger("rabinfp.shingles")


class ShingleprintBuilder:
    """Collects the smallest shingle fingerprints of a byte stream.

    The last ``shingle_size - 1`` bytes are carried between updates so a
    window spanning two chunks is still counted once.
    """

    def __init__(
        self,
        shingle_size: Optional[int] = None,
        feature_set_size: Optional[int] = None,
        engine: Optional[RabinFingerprintEngine] = None,
    ):
        settings = get_settings().shingles
        self.shingle_size = check_int_range(
            shingle_size if shingle_size is not None else settings.shingle_size,
            Defaults.MIN_SHINGLE_SIZE, 1 << 31, "shingle_size",
        )
        self.feature_set_size = check_int_range(
            feature_set_size if feature_set_size is not None else settings.feature_set_size,
            1, 1 << 31, "feature_set_size",
        )
        self.engine = engine or get_engine()
        # max-heap of kept features (stored negated) plus a set for dedup
        self._heap: List[int] = []
        self._kept = set()
        self._tail = b""

    def _insert(self, value: int) -> None:
        if value in self._kept:
            return
        if len(self._heap) == self.feature_set_size:
            if value >= -self._heap[0]:
                return
            self._kept.discard(-heapq.heappushpop(self._heap, -value))
        else:
            heapq.heappush(self._heap, -value)
        self._kept.add(value)

    def update(self, data: BytesLike) -> "ShingleprintBuilder":
        buf = self._tail + bytes(_as_view(data))
        size = self.shingle_size
        for start in range(len(buf) - size + 1):
            self._insert(self.engine.hash_bytes(buf, start, size))
        self._tail = buf[-(size - 1):] if len(buf) >= size - 1 else buf
        return self

    def result(self, source: Optional[str] = None) -> Shingleprint:
        return Shingleprint(
            shingle_size=self.shingle_size,
            feature_set_size=self.feature_set_size,
            features=sorted(self._kept),
            source=source,
        )


def shingleprint_bytes(
    data: BytesLike,
    shingle_size: Optional[int] = None,
    feature_set_size: Optional[int] = None,
) -> Shingleprint:
    """Compute the shingleprint of an in-memory byte sequence."""
    return ShingleprintBuilder(shingle_size, feature_set_size).update(data).result()


def shingleprint_stream(
    stream: BinaryIO,
    shingle_size: Optional[int] = None,
    feature_set_size: Optional[int] = None,
    chunk_size: Optional[int] = None,
) -> Shingleprint:
    """Compute the shingleprint of a binary stream, read in chunks."""
    builder = ShingleprintBuilder(shingle_size, feature_set_size)
    chunk_size = chunk_size or get_settings().hashing.read_buffer_size
    try:
        for chunk in iter(lambda: stream.read(chunk_size), b""):
            builder.update(chunk)
    except OSError as e:
        raise IOFailureError(f"Failed reading stream: {e}") from e
    return builder.result()


def shingleprint_file(
    path: Union[str, Path],
    shingle_size: Optional[int] = None,
    feature_set_size: Optional[int] = None,
) -> Shingleprint:
    """Compute the shingleprint of a file."""
    path = Path(path)
    try:
        with open(path, "rb") as f:
            sketch = shingleprint_stream(f, shingle_size, feature_set_size)
    except FileNotFoundError as e:
        raise NotFoundError(f"File not found: {path}") from e
    except IOFailureError:
        raise
    except OSError as e:
        raise IOFailureError(f"Failed reading {path}: {e}") from e
    sketch.source = str(path)
    logger.debug(f"[SHINGLE] {path}: {len(sketch)} features")
    return sketch


def resemblance(a: Shingleprint, b: Shingleprint) -> float:
    """Estimate how similar two documents are, from 0.0 to 1.0.

    Computed as matches / (2 * min(len(a), len(b)) - matches). Returns 0.0
    when either sketch is empty.
    """
    if a.shingle_size != b.shingle_size:
        raise InvalidArgumentError(
            f"Shingle size mismatch: {a.shingle_size} != {b.shingle_size}"
        )
    count = min(len(a.features), len(b.features))
    if count == 0:
        return 0.0
    matches = len(set(a.features) & set(b.features))
    return matches / (2 * count - matches)


def save_shingleprint(sketch: Shingleprint, path: Union[str, Path]) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(sketch.model_dump(), f, indent=2)
    return path


def load_shingleprint(path: Union[str, Path]) -> Shingleprint:
    """Load a shingleprint saved with save_shingleprint()."""
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise NotFoundError(f"Shingleprint file not found: {path}") from e
    except OSError as e:
        raise IOFailureError(f"Failed reading {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise InvalidArgumentError(f"Not a shingleprint file: {path}: {e}") from e

    try:
        sketch = Shingleprint.model_validate(data)
    except ValidationError as e:
        raise InvalidArgumentError(f"Not a shingleprint file: {path}: {e}") from e
    if sketch.version != Defaults.SHINGLEPRINT_VERSION:
        raise InvalidArgumentError(f"Bad shingleprint version in {path}: 0x{sketch.version:04X}")
    return sketch
