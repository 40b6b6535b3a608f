"""Readers that feed files, streams and URLs into the fingerprint engine."""
import io
import logging
import os
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import BinaryIO, List, Optional, Sequence, Union
from urllib.parse import urlparse
from urllib.request import url2pathname

import requests
from tqdm import tqdm

from config import get_settings
from core.errors import InvalidArgumentError, IOFailureError, NotFoundError
from core.models import FingerprintResult
from core.utils import check_int_range

from .digest import RabinDigest
from .engine import RabinFingerprintEngine, get_engine

# Configure logger
logger = logging.getLogger("rabinfp.fetcher")

PathLike = Union[str, os.PathLike]

NOT_FOUND_STATUS = (404, 410)


def _chunk_size(chunk_size: Optional[int]) -> int:
    if chunk_size is None:
        return get_settings().hashing.read_buffer_size
    return check_int_range(chunk_size, 1, 1 << 31, "chunk_size")


class ContentFetcher:
    """Reads resources in fixed-size chunks and fingerprints their bytes.

    Each call uses its own digest and read buffer, so one fetcher can be
    shared across threads.
    """

    def __init__(
        self,
        engine: Optional[RabinFingerprintEngine] = None,
        session: Optional[requests.Session] = None,
        chunk_size: Optional[int] = None,
    ):
        """Initialize fetcher.

        Args:
            engine: Engine to hash with (default: shared engine)
            session: Optional requests session to reuse for URLs
            chunk_size: Bytes per read (default: hashing.read_buffer_size)
        """
        self.settings = get_settings()
        self.engine = engine or get_engine()
        self.chunk_size = _chunk_size(chunk_size)
        self._session = session
        self._owns_session = session is None

    def close(self) -> None:
        """Close the HTTP session if this fetcher created it."""
        if self._owns_session and self._session is not None:
            self._session.close()
            self._session = None

    def __enter__(self) -> "ContentFetcher":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def session(self) -> requests.Session:
        if self._session is None:
            self._session = requests.Session()
            self._session.headers.update({"User-Agent": self.settings.fetch.user_agent})
        return self._session

    def hash_stream(self, stream: BinaryIO, seed: int = 0) -> int:
        """Fingerprint everything readable from a binary stream.

        The stream is read to EOF but not closed.
        """
        if stream is None or not hasattr(stream, "read"):
            raise InvalidArgumentError("stream must be a readable binary file object")
        if isinstance(stream, io.TextIOBase):
            raise InvalidArgumentError("stream must be opened in binary mode")

        digest = RabinDigest(engine=self.engine, seed=seed)
        try:
            while True:
                chunk = stream.read(self.chunk_size)
                if not chunk:
                    break
                if isinstance(chunk, str):
                    raise InvalidArgumentError("stream must be opened in binary mode")
                digest.update(chunk)
        except OSError as e:
            raise IOFailureError(f"Failed reading stream: {e}") from e

        logger.debug(f"[STREAM] {digest.size} bytes -> {digest.hexdigest()}")
        return digest.intdigest()

    def hash_file(self, path: PathLike) -> int:
        """Fingerprint the contents of a file."""
        return self._hash_file(path)[0]

    def _hash_file(self, path: PathLike):
        if path is None:
            raise InvalidArgumentError("path must not be None")
        path = Path(path)
        logger.debug(f"[FILE] Reading {path}")
        try:
            with open(path, "rb") as f:
                digest = RabinDigest(engine=self.engine)
                for chunk in iter(lambda: f.read(self.chunk_size), b""):
                    digest.update(chunk)
        except FileNotFoundError as e:
            raise NotFoundError(f"File not found: {path}") from e
        except OSError as e:
            raise IOFailureError(f"Failed reading {path}: {e}") from e
        return digest.intdigest(), digest.size

    def hash_url(self, url: str, timeout: Optional[int] = None) -> int:
        """Fingerprint the body of an http(s) or file: URL."""
        return self._hash_url(url, timeout)[0]

    def _hash_url(self, url: str, timeout: Optional[int] = None):
        if not isinstance(url, str) or not url:
            raise InvalidArgumentError("url must be a non-empty string")
        parsed = urlparse(url)

        if parsed.scheme == "file":
            return self._hash_file(url2pathname(parsed.path))
        if parsed.scheme not in ("http", "https"):
            raise InvalidArgumentError(f"Unsupported URL scheme: {parsed.scheme or '(none)'}")

        logger.debug(f"[FETCH] GET {url}")
        try:
            response = self.session.get(
                url,
                stream=True,
                timeout=timeout or self.settings.fetch.timeout,
                verify=self.settings.fetch.verify_tls,
                allow_redirects=True,
            )
        except requests.RequestException as e:
            raise IOFailureError(f"Failed fetching {url}: {e}") from e

        with response:
            if response.status_code in NOT_FOUND_STATUS:
                raise NotFoundError(f"URL not found (HTTP {response.status_code}): {url}")
            try:
                response.raise_for_status()
                digest = RabinDigest(engine=self.engine)
                for chunk in response.iter_content(chunk_size=self.chunk_size):
                    if chunk:
                        digest.update(chunk)
            except requests.RequestException as e:
                raise IOFailureError(f"Failed fetching {url}: {e}") from e

        logger.debug(f"[FETCH] HTTP {response.status_code} - {digest.size} bytes")
        return digest.intdigest(), digest.size

    def fingerprint_file(self, path: PathLike) -> FingerprintResult:
        value, size = self._hash_file(path)
        return FingerprintResult(source=str(path), source_type="file", fingerprint=value, size=size)

    def fingerprint_url(self, url: str, timeout: Optional[int] = None) -> FingerprintResult:
        value, size = self._hash_url(url, timeout)
        return FingerprintResult(source=url, source_type="url", fingerprint=value, size=size)

    def hash_files(
        self,
        paths: Sequence[PathLike],
        workers: Optional[int] = None,
        show_progress: bool = False,
    ) -> List[FingerprintResult]:
        """Fingerprint many files concurrently.

        Args:
            paths: Files to hash
            workers: Thread count (default: hashing.workers)
            show_progress: Show a tqdm progress bar

        Returns:
            One result per path, in the same order as ``paths``

        Raises:
            The first NotFoundError/IOFailureError hit; no partial list is returned.
        """
        paths = list(paths)
        workers = check_int_range(
            workers if workers is not None else self.settings.hashing.workers,
            1, 1 << 16, "workers",
        )
        if not paths:
            return []

        with ThreadPoolExecutor(max_workers=min(workers, len(paths))) as executor:
            results = executor.map(self.fingerprint_file, paths)
            if show_progress:
                results = tqdm(results, total=len(paths), desc="Hashing", unit="file")
            return list(results)


def hash_stream(stream: BinaryIO, chunk_size: Optional[int] = None, seed: int = 0) -> int:
    """Fingerprint a binary stream with the default engine."""
    return ContentFetcher(chunk_size=chunk_size).hash_stream(stream, seed=seed)


def hash_file(path: PathLike, chunk_size: Optional[int] = None) -> int:
    """Fingerprint a file with the default engine."""
    return ContentFetcher(chunk_size=chunk_size).hash_file(path)


def hash_url(
    url: str,
    session: Optional[requests.Session] = None,
    timeout: Optional[int] = None,
    chunk_size: Optional[int] = None,
) -> int:
    """Fingerprint a URL's content with the default engine."""
    with ContentFetcher(session=session, chunk_size=chunk_size) as fetcher:
        return fetcher.hash_url(url, timeout=timeout)


def hash_files(
    paths: Sequence[PathLike],
    workers: Optional[int] = None,
    show_progress: bool = False,
) -> List[FingerprintResult]:
    """Fingerprint many files concurrently with the default engine."""
    return ContentFetcher().hash_files(paths, workers=workers, show_progress=show_progress)
