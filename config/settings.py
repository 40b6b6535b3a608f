"""Settings and configuration management for rabinfp.

Configuration is loaded from (in order of precedence):
1. CLI arguments (highest priority)
2. Environment variables (RABINFP_*)
3. Config file (./rabinfp.yaml or ~/.rabinfp/config.yaml)
4. Built-in defaults (lowest priority)

IMPORTANT: All default values should be defined HERE only.
Other modules should import from config to avoid duplication.
"""
import os
from pathlib import Path
from typing import Optional, Dict, Any, Literal
from pydantic import BaseModel, Field, ValidationError
from functools import lru_cache
import yaml

from core.errors import InvalidArgumentError


# =============================================================================
# SINGLE SOURCE OF TRUTH: Default Values
# =============================================================================
# All default values are defined here. Do NOT duplicate in other files.

class Defaults:
    """Central location for all default values."""

    # Fingerprint polynomial (x^64 + POLYNOMIAL is the generator).
    # Not configurable: every stored fingerprint depends on it.
    POLYNOMIAL = 0x0060034000F0D50A
    DEGREE = 64

    # Hashing
    READ_BUFFER_SIZE = 2048   # Chunk size for file/stream/URL reads
    HASH_WORKERS = 4          # Concurrent workers for batch file hashing
    OUTPUT_FORMAT = "decimal" # decimal, signed, or hex

    # URL fetching
    URL_TIMEOUT = 10
    USER_AGENT = "rabinfp/0.1 (+https://pypi.org/project/rabinfp/)"

    # Shingleprints
    SHINGLE_SIZE = 8
    MIN_SHINGLE_SIZE = 4
    FEATURE_SET_SIZE = 128
    SHINGLEPRINT_VERSION = 0xCB01
    SHINGLEPRINT_SUFFIX = ".sim.json"


OUTPUT_FORMATS = ("decimal", "signed", "hex")


# =============================================================================
# Configuration Models
# =============================================================================

class HashingConfig(BaseModel):
    """Core hashing settings."""
    read_buffer_size: int = Field(default=Defaults.READ_BUFFER_SIZE, ge=1, description="Bytes read per chunk from files, streams and URLs")
    workers: int = Field(default=Defaults.HASH_WORKERS, ge=1, description="Concurrent workers for hashing many files")
    output_format: Literal["decimal", "signed", "hex"] = Field(default=Defaults.OUTPUT_FORMAT, description="decimal, signed, or hex")


class FetchConfig(BaseModel):
    """URL fetching settings."""
    timeout: int = Field(default=Defaults.URL_TIMEOUT, ge=1, description="HTTP request timeout in seconds")
    user_agent: str = Field(default=Defaults.USER_AGENT, description="User agent for HTTP requests")
    verify_tls: bool = Field(default=True, description="Verify TLS certificates for https URLs")


class ShingleConfig(BaseModel):
    """Shingleprint settings."""
    shingle_size: int = Field(default=Defaults.SHINGLE_SIZE, ge=Defaults.MIN_SHINGLE_SIZE, description="Bytes per shingle window")
    feature_set_size: int = Field(default=Defaults.FEATURE_SET_SIZE, ge=1, description="Smallest fingerprints kept per document")


def _env_int(name: str) -> Optional[int]:
    """Read a positive integer environment variable (values below 1 become 1)."""
    value = os.getenv(name)
    if not value:
        return None
    try:
        return max(1, int(value))
    except ValueError as e:
        raise InvalidArgumentError(f"{name} must be an integer, got {value!r}") from e


class Settings(BaseModel):
    """Main settings container."""
    hashing: HashingConfig = Field(default_factory=HashingConfig)
    fetch: FetchConfig = Field(default_factory=FetchConfig)
    shingles: ShingleConfig = Field(default_factory=ShingleConfig)

    def load_overrides_from_env(self) -> None:
        """Apply RABINFP_* environment variables on top of file/default values."""
        buffer_size = _env_int("RABINFP_READ_BUFFER_SIZE")
        if buffer_size:
            self.hashing = self.hashing.model_copy(update={"read_buffer_size": buffer_size})
        workers = _env_int("RABINFP_WORKERS")
        if workers:
            self.hashing = self.hashing.model_copy(update={"workers": workers})
        timeout = _env_int("RABINFP_URL_TIMEOUT")
        if timeout:
            self.fetch = self.fetch.model_copy(update={"timeout": timeout})
        user_agent = os.getenv("RABINFP_USER_AGENT")
        if user_agent:
            self.fetch = self.fetch.model_copy(update={"user_agent": user_agent})


# =============================================================================
# Config File Loading
# =============================================================================

def find_config_file() -> Optional[Path]:
    """Find config file in standard locations.

    Search order:
    1. ./rabinfp.yaml (current directory)
    2. ~/.rabinfp/config.yaml (user home)
    3. ~/.config/rabinfp/config.yaml (XDG config)
    """
    locations = [
        Path("./rabinfp.yaml"),
        Path("./rabinfp.yml"),
        Path.home() / ".rabinfp" / "config.yaml",
        Path.home() / ".rabinfp" / "config.yml",
        Path.home() / ".config" / "rabinfp" / "config.yaml",
    ]

    for path in locations:
        if path.exists():
            return path

    return None


def load_config_file(path: Optional[Path] = None) -> Dict[str, Any]:
    """Load configuration from YAML file.

    Args:
        path: Optional explicit path, otherwise searches standard locations

    Returns:
        Dictionary of config values (empty if no file found)
    """
    if path is None:
        path = find_config_file()

    if path is None or not path.exists():
        return {}

    try:
        with open(path, "r") as f:
            config = yaml.safe_load(f) or {}
        return config
    except (OSError, yaml.YAMLError) as e:
        print(f"[WARNING] Failed to load config file {path}: {e}")
        return {}


@lru_cache()
def get_settings(config_file: Optional[str] = None) -> Settings:
    """Get settings instance (cached).

    Loads from config file and environment variables.

    Args:
        config_file: Optional explicit config file path

    Returns:
        Settings instance with merged configuration
    """
    file_config = load_config_file(Path(config_file) if config_file else None)

    if file_config:
        try:
            settings = Settings.model_validate(file_config)
        except ValidationError as e:
            raise InvalidArgumentError(f"Invalid configuration: {e}") from e
    else:
        settings = Settings()

    settings.load_overrides_from_env()

    return settings


def create_default_config_file(path: Path = None) -> Path:
    """Create a default config file with all options documented.

    Args:
        path: Where to create the file (default: ./rabinfp.yaml)

    Returns:
        Path to created file
    """
    if path is None:
        path = Path("./rabinfp.yaml")

    default_config = """\
# rabinfp Configuration File
# ==========================
# Place this file in:
#   - ./rabinfp.yaml (current directory)
#   - ~/.rabinfp/config.yaml (user home)
#   - ~/.config/rabinfp/config.yaml (XDG config)
#
# The fingerprint polynomial (0x0060034000F0D50A) is fixed and cannot be set here.

hashing:
  read_buffer_size: 2048   # Bytes per read for files, streams and URLs
  workers: 4               # Concurrent workers for 'rabinfp file' with many paths
  output_format: decimal   # decimal (unsigned), signed (two's complement), or hex

fetch:
  timeout: 10              # HTTP request timeout in seconds
  verify_tls: true         # Verify TLS certificates
  # user_agent: "rabinfp/0.1"

shingles:
  shingle_size: 8          # Bytes per window (minimum 4)
  feature_set_size: 128    # Smallest fingerprints kept per document
"""

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        f.write(default_config)

    return path
