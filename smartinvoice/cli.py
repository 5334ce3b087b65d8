"""Command line entry point.

Commands::

    # One-time setup: authorize Drive access and write the token file.
    python -m smartinvoice authorize

    # Validate settings and the client secrets file without touching anything.
    python -m smartinvoice --env-file /opt/smartinvoice/.env check-config

    # Run the poller and the retention sweep until killed.
    python -m smartinvoice run
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Callable

from pydantic import ValidationError

from smartinvoice import worker
from smartinvoice.core.config import AppSettings, _load_env_file, get_settings
from smartinvoice.core.logging import configure_logging
from smartinvoice.dependencies import get_credential_store, load_client_config
from smartinvoice.services import AuthError

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_AUTH_ERROR = 1
EXIT_VALIDATION_ERROR = 2
EXIT_RUNTIME_ERROR = 5


def _prompt_for_code(auth_url: str) -> str:
    print("Open this URL in a browser and authorize the app:\n")
    print(f"  {auth_url}\n")
    print("After signing in, copy the code shown by Google (it starts with '4/').")
    return input("Paste the code here: ")


def _print_validation_error(exc: ValidationError) -> None:
    print(
        "Settings validation failed. Missing or invalid values detected:\n"
        f"{exc.json(indent=2)}",
        file=sys.stderr,
    )


def _check_config() -> int:
    try:
        settings = AppSettings()  # type: ignore[call-arg]
        load_client_config(settings.google.client_secrets_file)
    except ValidationError as exc:
        _print_validation_error(exc)
        return EXIT_VALIDATION_ERROR
    except FileNotFoundError as exc:
        print(str(exc), file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except ValueError as exc:
        print(f"Client secrets file is invalid: {exc}", file=sys.stderr)
        return EXIT_VALIDATION_ERROR

    print(f"Configuration OK ({settings.environment}).")
    return EXIT_OK


def _authorize() -> int:
    try:
        configure_logging(get_settings().log_level)
        credential_store = get_credential_store()
        asyncio.run(credential_store.authorize_interactively(_prompt_for_code))
    except ValidationError as exc:
        _print_validation_error(exc)
        return EXIT_VALIDATION_ERROR
    except (AuthError, FileNotFoundError, ValueError) as exc:
        logger.error("Authorization failed: %s", exc)
        return EXIT_AUTH_ERROR

    print("Authorization complete; token saved.")
    return EXIT_OK


def _run() -> int:
    try:
        settings = get_settings()
    except ValidationError as exc:
        _print_validation_error(exc)
        return EXIT_VALIDATION_ERROR
    configure_logging(settings.log_level)
    logger.info("Starting smart invoice poller (%s)", settings.environment)

    prompt = _prompt_for_code if sys.stdin.isatty() else None
    try:
        asyncio.run(worker.main(prompt))
    except AuthError as exc:
        logger.error("Authorization error: %s", exc)
        return EXIT_AUTH_ERROR
    except KeyboardInterrupt:
        logger.info("Smart invoice poller stopped")
        return EXIT_OK
    except Exception:  # pylint: disable=broad-except
        logger.exception("Startup error")
        return EXIT_RUNTIME_ERROR
    return EXIT_OK


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="smartinvoice",
        description="Upload new invoice PDFs to Google Drive and text customers the link.",
    )
    parser.add_argument(
        "--env-file",
        default=None,
        type=Path,
        help="Extra environment file to load before reading settings.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("run", help="Poll for invoices and sweep old files until stopped.")
    subparsers.add_parser(
        "authorize",
        help="Run the one-time Google authorization and write the token file.",
    )
    subparsers.add_parser(
        "check-config",
        help="Validate settings and the client secrets file.",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    env_file: Path | None = args.env_file
    if env_file is not None:
        if not env_file.exists():
            print(f"Environment file {env_file} does not exist.", file=sys.stderr)
            return EXIT_RUNTIME_ERROR
        _load_env_file(str(env_file))

    handlers: dict[str, Callable[[], int]] = {
        "run": _run,
        "authorize": _authorize,
        "check-config": _check_config,
    }
    return handlers[args.command]()


def cli() -> None:
    sys.exit(main())


__all__ = ["EXIT_AUTH_ERROR", "EXIT_OK", "EXIT_RUNTIME_ERROR", "EXIT_VALIDATION_ERROR", "main"]
