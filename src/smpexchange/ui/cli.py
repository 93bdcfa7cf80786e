from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from smpexchange.app import create_user, export_file, import_file
from smpexchange.config import configure_logging
from smpexchange.domain.exchange import Severity

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Import and export SMP service groups")
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    import_cmd = subparsers.add_parser("import", help="Import service groups from a file")
    import_cmd.add_argument("file", type=Path, help="Exchange document to import")
    import_cmd.add_argument(
        "--overwrite",
        action="store_true",
        default=None,
        help="Overwrite service groups and business cards that already exist",
    )
    import_cmd.add_argument(
        "--default-owner",
        type=str,
        help="User id owning groups whose stored owner is unknown (defaults to config)",
    )

    export_cmd = subparsers.add_parser("export", help="Export all service groups to a file")
    export_cmd.add_argument("file", type=Path, help="Target exchange document")
    export_cmd.add_argument(
        "--include-business-cards",
        action="store_true",
        help="Also export business cards (requires directory integration)",
    )

    user = subparsers.add_parser("user", help="User management commands")
    user_sub = user.add_subparsers(dest="user_command", required=True)
    user_create = user_sub.add_parser("create", help="Create a user")
    user_create.add_argument("--id", dest="user_id", type=str, required=True, help="User id")
    user_create.add_argument(
        "--name",
        dest="display_name",
        type=str,
        required=True,
        help="Display name for the user",
    )

    return parser.parse_args(list(argv))


def _validate_args(args: argparse.Namespace) -> None:
    if args.command == "import" and not args.file.is_file():
        raise ValueError(f"Import file does not exist: {args.file}")
    if args.command == "user" and not args.user_id.strip():
        raise ValueError("User id must not be blank")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args: argparse.Namespace
    try:
        parsed_args = _parse_args(args_list)
        configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)
        _validate_args(parsed_args)
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if parsed_args.command == "import":
            action_log = import_file(
                parsed_args.file,
                overwrite_existing=parsed_args.overwrite,
                default_owner_id=parsed_args.default_owner,
            )
            summary = ", ".join(
                f"{severity}={len(action_log.by_severity(severity))}" for severity in Severity
            )
            log.info("Import finished: %s", summary)
            if action_log.has_error():
                log.error("Import of %s finished with errors", parsed_args.file)
                sys.exit(1)
        elif parsed_args.command == "export":
            document = export_file(
                parsed_args.file,
                include_business_cards=parsed_args.include_business_cards,
            )
            log.info(
                "Exported %s service groups and %s business cards",
                len(document.service_groups),
                len(document.business_cards),
            )
        elif parsed_args.command == "user" and parsed_args.user_command == "create":
            user = create_user(
                user_id=parsed_args.user_id,
                display_name=parsed_args.display_name,
            )
            log.info("Created user %s", user.id)
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except Exception:
        log.exception("Fatal error during %s", parsed_args.command)
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
