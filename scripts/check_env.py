"""Check that a deployment's ``.env`` can serve Product Hunt callbacks.

Runs the same configuration check the callback performs, so a missing client
secret or bot token is caught at deploy time instead of by the first user who
links an account. It can also pin a checksum of the ``.env`` file and report
drift later.

Example usages::

    python -m scripts.check_env check --env-file /srv/phlink/.env

    python -m scripts.check_env record --env-file /srv/phlink/.env \
        --hash-file /srv/phlink/.env.sha256

    # later, from cron
    python -m scripts.check_env verify --env-file /srv/phlink/.env \
        --hash-file /srv/phlink/.env.sha256
"""

from __future__ import annotations

import argparse
import hashlib
import sys
from pathlib import Path
from typing import Callable

from pydantic import ValidationError

from phlink.core.config import AppSettings, _load_env_file
from phlink.core.errors import MissingConfiguration

EXIT_OK = 0
EXIT_VALIDATION_ERROR = 2
EXIT_CHECKSUM_ERROR = 3
EXIT_RUNTIME_ERROR = 5


def _compute_hash(env_file: Path) -> str:
    return hashlib.sha256(env_file.read_bytes()).hexdigest()


def _validate_settings(env_file: Path) -> AppSettings:
    """Load ``env_file`` and raise ``MissingConfiguration`` for unset keys."""
    _load_env_file(str(env_file))
    settings = AppSettings(_env_file=env_file)
    missing = settings.missing_configuration()
    if missing:
        raise MissingConfiguration(missing)
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
            "Re-run with the 'record' command to establish a baseline.",
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
        f"  actual:   {actual}\n"
        "Review the change before restarting the callback service.",
        file=sys.stderr,
    )
    return EXIT_CHECKSUM_ERROR


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Validate callback configuration and detect .env drift."
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_env_file(subparser: argparse.ArgumentParser) -> None:
        subparser.add_argument(
            "--env-file",
            default=".env",
            type=Path,
            help="Path to the environment file (default: .env in the working directory).",
        )

    def add_hash_file(subparser: argparse.ArgumentParser, help_text: str) -> None:
        subparser.add_argument("--hash-file", required=True, type=Path, help=help_text)

    check_parser = subparsers.add_parser(
        "check", help="Validate settings without touching any checksum files."
    )
    add_env_file(check_parser)

    record_parser = subparsers.add_parser(
        "record", help="Validate settings and store the checksum baseline."
    )
    add_env_file(record_parser)
    add_hash_file(record_parser, "Location to write the checksum baseline.")

    verify_parser = subparsers.add_parser(
        "verify", help="Validate settings and compare the checksum with the baseline."
    )
    add_env_file(verify_parser)
    add_hash_file(verify_parser, "Location of the previously recorded checksum.")

    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    env_file: Path = args.env_file

    if not env_file.exists():
        print(
            f"Environment file {env_file} does not exist. "
            "Ensure the path is correct or create it before running this tool.",
            file=sys.stderr,
        )
        return EXIT_RUNTIME_ERROR

    try:
        settings = _validate_settings(env_file)
    except MissingConfiguration as exc:
        print(
            "Required settings are missing: " + ", ".join(exc.missing),
            file=sys.stderr,
        )
        return EXIT_VALIDATION_ERROR
    except ValidationError as exc:
        print(
            "Settings validation failed. Invalid values detected:\n"
            f"{exc.json(indent=2)}",
            file=sys.stderr,
        )
        return EXIT_VALIDATION_ERROR
    except Exception as exc:  # pylint: disable=broad-except
        print(f"Unexpected error during validation: {exc}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    print(f"Configuration OK (credential store: {settings.storage.backend}).")

    handlers: dict[str, Callable[[], int]] = {
        "check": lambda: EXIT_OK,
        "record": lambda: _record_checksum(env_file, args.hash_file),
        "verify": lambda: _verify_checksum(env_file, args.hash_file),
    }
    return handlers[args.command]()


if __name__ == "__main__":  # pragma: no cover - script entry point
    sys.exit(main())
