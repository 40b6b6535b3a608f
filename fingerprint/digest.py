"""Incremental Rabin fingerprinting with a hashlib-style interface."""
from typing import Optional

from core.utils import BytesLike, to_unsigned64

from .engine import WORD_SIZE, RabinFingerprintEngine, _as_view, get_engine


class RabinDigest:
    """Running fingerprint that can be fed any number of pieces.

    Whole 8-byte words are folded through the lane tables as they arrive and
    at most 7 bytes wait in a pending buffer. The pending bytes are folded
    with full reduction only when a value is requested, so the result does
    not depend on how the input was split. Started from seed 0 it always
    equals ``engine.hash_bytes(all_data)``.
    """

    name = "rabin64"
    digest_size = 8
    block_size = WORD_SIZE

    def __init__(self, data: Optional[BytesLike] = None, engine: Optional[RabinFingerprintEngine] = None, seed: int = 0):
        self.engine = engine or get_engine()
        self._value = to_unsigned64(seed, "seed")
        self._pending = bytearray()
        self.size = 0
        if data is not None:
            self.update(data)

    def update(self, data: BytesLike) -> "RabinDigest":
        """Feed more bytes."""
        view = _as_view(data)
        self.size += len(view)

        if self._pending:
            need = WORD_SIZE - len(self._pending)
            self._pending += view[:need]
            view = view[need:]
            if len(self._pending) < WORD_SIZE:
                return self
            self._value = self.engine.fold_words(self._value, memoryview(bytes(self._pending)))
            self._pending.clear()

        aligned = len(view) - len(view) % WORD_SIZE
        self._value = self.engine.fold_words(self._value, view[:aligned])
        self._pending += view[aligned:]
        return self

    def intdigest(self) -> int:
        """Fingerprint of everything fed so far, as an unsigned int."""
        w = self._value
        for byte in self._pending:
            w = self.engine.fold_byte(w, byte)
        return w

    def digest(self) -> bytes:
        return self.intdigest().to_bytes(self.digest_size, "big")

    def hexdigest(self) -> str:
        return f"{self.intdigest():016x}"

    def copy(self) -> "RabinDigest":
        other = RabinDigest(engine=self.engine, seed=self._value)
        other._pending = bytearray(self._pending)
        other.size = self.size
        return other
