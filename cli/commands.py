"""CLI subcommand implementations."""
import json
import sys
from pathlib import Path

from config import Defaults, get_settings
from core.errors import FingerprintError
from core.formatting import format_fingerprint, print_section_header, print_shingleprint_summary
from core.models import FingerprintResult


def _output_format(args) -> str:
    return getattr(args, "output_format", None) or get_settings().hashing.output_format


def _fail(error: Exception) -> int:
    print(f"[ERROR] {error}", file=sys.stderr)
    return 1


def cmd_string(args) -> int:
    """Print the fingerprint of a string.

    Args:
        args: Parsed arguments with text, output_format

    Returns:
        Exit code (0 = success)
    """
    from fingerprint.engine import get_engine

    value = get_engine().hash_string(args.text)
    print(format_fingerprint(value, _output_format(args)))
    return 0


def cmd_bytes(args) -> int:
    """Print the fingerprint of a string's encoded bytes."""
    from fingerprint.engine import get_engine

    try:
        data = args.text.encode(args.encoding)
    except LookupError as e:
        return _fail(e)
    except UnicodeEncodeError as e:
        return _fail(f"Cannot encode text as {args.encoding}: {e}")

    print(format_fingerprint(get_engine().hash_bytes(data), _output_format(args)))
    return 0


def cmd_file(args) -> int:
    """Fingerprint files (or standard input with '-').

    Args:
        args: Parsed arguments with paths, workers, chunk_size, progress, json

    Returns:
        Exit code (0 = success, 1 = any file failed)
    """
    from fingerprint.fetcher import ContentFetcher

    fmt = _output_format(args)
    try:
        fetcher = ContentFetcher(chunk_size=args.chunk_size)
        files = [p for p in args.paths if p != "-"]
        results = fetcher.hash_files(files, workers=args.workers, show_progress=args.progress)
        if "-" in args.paths:
            value = fetcher.hash_stream(sys.stdin.buffer)
            results.insert(
                args.paths.index("-"),
                FingerprintResult(source="-", source_type="stream", fingerprint=value),
            )
    except FingerprintError as e:
        return _fail(e)

    if args.json:
        print(json.dumps([r.model_dump() for r in results], indent=2))
    else:
        for result in results:
            print(f"{format_fingerprint(result.fingerprint, fmt)}  {result.source}")
    return 0


def cmd_url(args) -> int:
    """Fingerprint the body of a URL."""
    from fingerprint.fetcher import ContentFetcher

    try:
        with ContentFetcher() as fetcher:
            result = fetcher.fingerprint_url(args.url, timeout=args.timeout)
    except FingerprintError as e:
        return _fail(e)

    if args.json:
        print(json.dumps(result.model_dump(), indent=2))
    else:
        print(format_fingerprint(result.fingerprint, _output_format(args)))
    return 0


def cmd_shingle(args) -> int:
    """Compute shingleprints of files (or standard input with '-').

    Args:
        args: Parsed arguments with paths, shingle_size, feature_set_size, write

    Returns:
        Exit code (0 = success)
    """
    from fingerprint.shingles import save_shingleprint, shingleprint_file, shingleprint_stream

    if args.write and "-" in args.paths:
        return _fail("--write needs file paths, not standard input")

    sketches = []
    for path in args.paths:
        try:
            if path == "-":
                sketch = shingleprint_stream(sys.stdin.buffer, args.shingle_size, args.feature_set_size)
                sketch.source = "-"
            else:
                sketch = shingleprint_file(path, args.shingle_size, args.feature_set_size)
        except FingerprintError as e:
            return _fail(e)

        if args.write:
            output_path = save_shingleprint(sketch, f"{path}{Defaults.SHINGLEPRINT_SUFFIX}")
            print_shingleprint_summary(
                source=path,
                shingle_size=sketch.shingle_size,
                feature_set_size=sketch.feature_set_size,
                features_count=len(sketch),
                output_path=str(output_path),
            )
        else:
            sketches.append(sketch.model_dump())

    if not args.write:
        print(json.dumps(sketches[0] if len(sketches) == 1 else sketches, indent=2))
    return 0


def cmd_compare(args) -> int:
    """Print the resemblance of two saved shingleprints."""
    from fingerprint.shingles import load_shingleprint, resemblance

    try:
        first = load_shingleprint(args.first)
        second = load_shingleprint(args.second)
        score = resemblance(first, second)
    except FingerprintError as e:
        return _fail(e)

    print(f"{score:4.2f}")
    return 0


def cmd_config(args) -> int:
    """Manage configuration.

    Args:
        args: Parsed arguments with action (init, show, path)

    Returns:
        Exit code (0 = success)
    """
    from config.settings import create_default_config_file, find_config_file

    action = getattr(args, "action", "show")

    if action == "init":
        output_path = Path(args.output)
        if output_path.exists() and not args.force:
            print(f"[!] Config file already exists: {output_path} (use --force to overwrite)")
            return 1

        created_path = create_default_config_file(output_path)
        print(f"\n[✓] Created config file: {created_path}")
        print("\nEdit this file to customize:")
        print("  - Read buffer size and worker count")
        print("  - Output format (decimal, signed, hex)")
        print("  - URL timeout and user agent")
        print("  - Shingle size and feature set size")
        return 0

    elif action == "path":
        config_file = find_config_file()
        print(config_file if config_file else "None (using defaults)")
        return 0

    settings = get_settings()
    print_section_header("CURRENT CONFIGURATION")

    config_file = find_config_file()
    if config_file:
        print(f"Config file: {config_file}")
    else:
        print("Config file: None (using defaults)")

    print(f"\nPolynomial: 0x{Defaults.POLYNOMIAL:016X} (fixed)")

    print("\n[Hashing]")
    print(f"  read_buffer_size: {settings.hashing.read_buffer_size}")
    print(f"  workers:          {settings.hashing.workers}")
    print(f"  output_format:    {settings.hashing.output_format}")

    print("\n[Fetch]")
    print(f"  timeout:    {settings.fetch.timeout}s")
    print(f"  verify_tls: {settings.fetch.verify_tls}")
    print(f"  user_agent: {settings.fetch.user_agent}")

    print("\n[Shingles]")
    print(f"  shingle_size:     {settings.shingles.shingle_size}")
    print(f"  feature_set_size: {settings.shingles.feature_set_size}")
    print("=" * 70)
    return 0
