"""Exceptions raised by rabinfp.

Every failure surfaces as a subclass of FingerprintError. The classes also
inherit the closest builtin so callers that catch ValueError or OSError keep
working.
"""


class FingerprintError(Exception):
    """Base class for all rabinfp errors."""


class InvalidArgumentError(FingerprintError, ValueError):
    """Input rejected before hashing (bad type, negative offset, out of range)."""


class IOFailureError(FingerprintError, OSError):
    """Reading a file, stream or URL failed."""


class NotFoundError(IOFailureError):
    """The file or URL does not exist."""
