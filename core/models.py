"""Data models for fingerprint results and shingleprints."""
from typing import Optional, List, Literal
from pydantic import BaseModel, Field, field_validator

# Import defaults from config - single source of truth
from config import Defaults

from .utils import to_signed64, utc_now_iso


class FingerprintResult(BaseModel):
    """Fingerprint of a single input, with where it came from."""
    source: str
    source_type: Literal["bytes", "string", "file", "stream", "url"]
    fingerprint: int = Field(ge=0, lt=1 << 64, description="Unsigned 64-bit Rabin fingerprint")
    size: Optional[int] = Field(default=None, description="Number of bytes hashed, when known")
    created_at: str = Field(default_factory=utc_now_iso)

    @property
    def hex(self) -> str:
        return f"{self.fingerprint:016x}"

    @property
    def signed(self) -> int:
        """Fingerprint as a signed 64-bit value (Java long rendering)."""
        return to_signed64(self.fingerprint)


class Shingleprint(BaseModel):
    """Resemblance sketch of a document.

    Holds the smallest distinct Rabin fingerprints over all windows of
    ``shingle_size`` bytes, sorted ascending.
    """
    version: int = Defaults.SHINGLEPRINT_VERSION
    shingle_size: int = Field(default=Defaults.SHINGLE_SIZE, ge=Defaults.MIN_SHINGLE_SIZE)
    feature_set_size: int = Field(default=Defaults.FEATURE_SET_SIZE, ge=1)
    features: List[int] = Field(default_factory=list)
    source: Optional[str] = None

    @field_validator("features")
    @classmethod
    def check_features(cls, features: List[int]) -> List[int]:
        """Features must be distinct unsigned 64-bit values in ascending order."""
        for value in features:
            if not 0 <= value < 1 << 64:
                raise ValueError(f"feature out of 64-bit range: {value}")
        if any(a >= b for a, b in zip(features, features[1:])):
            raise ValueError("features must be distinct and sorted ascending")
        return features

    def __len__(self) -> int:
        return len(self.features)
