"""Verify that the relay's environment configuration is complete and unchanged.

Two checks are available:

1. Load ``AppSettings`` from the given ``.env`` file so missing provider
   registration values (``CLIENT_ID``, ``TOKEN_ENDPOINT`` ...) or an
   inconsistent store selection are reported before the relay starts serving.
2. Record and later compare a checksum of the ``.env`` file to catch edits made
   outside a deploy.

Example usages::

    python -m scripts.check_env check --env-file /srv/oauth-relay/.env

    python -m scripts.check_env record --env-file /srv/oauth-relay/.env \
        --hash-file /srv/oauth-relay/.env.sha256

    python -m scripts.check_env verify --env-file /srv/oauth-relay/.env \
        --hash-file /srv/oauth-relay/.env.sha256
"""

from __future__ import annotations

import argparse
import hashlib
import sys
from pathlib import Path
from typing import Callable

from pydantic import ValidationError

from oauth_relay.core.config import AppSettings, _load_env_file

EXIT_OK = 0
EXIT_VALIDATION_ERROR = 2
EXIT_CHECKSUM_ERROR = 3
EXIT_RUNTIME_ERROR = 5


class StoreConfigurationError(Exception):
    """Raised when the selected store backend lacks its required settings."""


def _compute_hash(env_file: Path) -> str:
    return hashlib.sha256(env_file.read_bytes()).hexdigest()


def _validate_settings(env_file: Path) -> AppSettings:
    """Load settings from ``env_file`` and check the store selection."""
    _load_env_file(str(env_file))
    settings = AppSettings()  # type: ignore[call-arg]
    store = settings.store
    if store.backend == "dynamodb" and not store.dynamodb_table_name:
        raise StoreConfigurationError(
            "STORE_BACKEND=dynamodb requires DYNAMODB_TABLE_NAME to be set."
        )
    if store.backend == "memory" and settings.environment == "production":
        raise StoreConfigurationError(
            "STORE_BACKEND=memory cannot share handles between workers; "
            "use sqlite or dynamodb in production."
        )
    return settings


def _record_checksum(env_file: Path, hash_file: Path) -> int:
    checksum = _compute_hash(env_file)
    hash_file.write_text(f"{checksum}\n", encoding="utf-8")
    print(f"Recorded checksum to {hash_file} ({checksum})")
    return EXIT_OK


def _verify_checksum(env_file: Path, hash_file: Path) -> int:
    if not hash_file.exists():
        print(
            f"Expected checksum file {hash_file} is missing. "
            "Run the 'record' command first to establish a baseline.",
            file=sys.stderr,
        )
        return EXIT_RUNTIME_ERROR

    expected = hash_file.read_text(encoding="utf-8").strip()
    actual = _compute_hash(env_file)
    if expected == actual:
        print("Environment checksum OK.")
        return EXIT_OK

    print(
        "Environment checksum mismatch!\n"
        f"  expected: {expected}\n"
        f"  actual:   {actual}",
        file=sys.stderr,
    )
    return EXIT_CHECKSUM_ERROR


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Validate OAuth relay settings and detect .env drift."
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    for name, help_text, needs_hash in (
        ("check", "Validate settings only.", False),
        ("record", "Validate settings and store the checksum baseline.", True),
        ("verify", "Validate settings and compare against the baseline.", True),
    ):
        subparser = subparsers.add_parser(name, help=help_text)
        subparser.add_argument(
            "--env-file",
            default=".env",
            type=Path,
            help="Path to the environment file (default: .env in the working directory).",
        )
        if needs_hash:
            subparser.add_argument(
                "--hash-file",
                required=True,
                type=Path,
                help="Location of the checksum baseline.",
            )

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    env_file: Path = args.env_file
    if not env_file.exists():
        print(f"Environment file {env_file} does not exist.", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    try:
        _validate_settings(env_file)
    except ValidationError as exc:
        # Only field locations are printed so secret values never reach the console.
        missing = ", ".join(
            ".".join(str(part) for part in error["loc"]) for error in exc.errors()
        )
        print(f"Settings validation failed for: {missing}", file=sys.stderr)
        return EXIT_VALIDATION_ERROR
    except StoreConfigurationError as exc:
        print(str(exc), file=sys.stderr)
        return EXIT_VALIDATION_ERROR

    handlers: dict[str, Callable[[], int]] = {
        "record": lambda: _record_checksum(env_file, args.hash_file),
        "verify": lambda: _verify_checksum(env_file, args.hash_file),
        "check": lambda: EXIT_OK,
    }
    return handlers[args.command]()


if __name__ == "__main__":  # pragma: no cover - script entry point
    sys.exit(main())
