"""Rabin fingerprinting module."""
from .engine import RabinFingerprintEngine, get_engine, fingerprint
from .digest import RabinDigest
from .fetcher import ContentFetcher, hash_file, hash_files, hash_stream, hash_url
from .builder import build_lookup_tables, build_mod_table

__all__ = [
    "RabinFingerprintEngine",
    "RabinDigest",
    "ContentFetcher",
    "get_engine",
    "fingerprint",
    "hash_file",
    "hash_files",
    "hash_stream",
    "hash_url",
    "build_lookup_tables",
    "build_mod_table",
]
