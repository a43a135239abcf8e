from __future__ import annotations

import argparse
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from credsync.app import (
    migrate_legacy_credentials,
    reconcile_credential,
    resync_credentials,
)
from credsync.config import configure_logging
from credsync.domain.model import ObjectRef

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Propagate provider credential changes to their linked copies"
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log debug output, including fingerprints",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    reconcile = subparsers.add_parser("reconcile", help="Reconcile one provider credential")
    reconcile.add_argument(
        "ref",
        type=str,
        help="Upstream credential as NAMESPACE/NAME",
    )

    resync = subparsers.add_parser(
        "resync",
        help="Reconcile every object carrying the credential label",
    )
    resync.add_argument(
        "--namespace",
        type=str,
        help="Only resync credentials in this namespace",
    )

    subparsers.add_parser(
        "migrate-legacy",
        help="Convert legacy provider connections to the current credential format",
    )

    return parser.parse_args(list(argv))


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        ref = ObjectRef.parse(parsed_args.ref) if parsed_args.command == "reconcile" else None
    except ValueError:
        configure_logging()
        log.exception("CLI validation error")
        sys.exit(2)

    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        if ref is not None:
            result = reconcile_credential(ref)
            ok = not result.failed
        elif parsed_args.command == "resync":
            summary = resync_credentials(namespace=parsed_args.namespace)
            ok = summary.ok
        elif parsed_args.command == "migrate-legacy":
            migration = migrate_legacy_credentials()
            log.info(
                "Legacy migration finished: migrated=%d, errors=%d",
                len(migration.migrated),
                len(migration.errors),
            )
            ok = migration.ok
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301
    except Exception:
        log.exception("Fatal error during %s", parsed_args.command)
        sys.exit(1)

    if not ok:
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console script entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
