import argparse
import sys

from core.logging_setup import setup_console_logging
from learncheck.config import LOG_LEVEL, SESSION_RETENTION_DAYS
from learncheck.database import init_db
from learncheck.services.cleanup_service import cleanup_stale_sessions
from learncheck.services.session_store import SessionKey, SessionStore
from learncheck.utils.json_utils import json_dump


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Maintain stored quiz sessions")
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("list", help="List stored sessions")

    for name, help_text in (
        ("show", "Print a stored session as JSON"),
        ("clear", "Delete a stored session"),
    ):
        command = commands.add_parser(name, help=help_text)
        command.add_argument("--user", required=True, help="User id")
        command.add_argument("--tutorial", required=True, help="Tutorial id")

    cleanup = commands.add_parser("cleanup", help="Delete stale sessions")
    cleanup.add_argument(
        "--days",
        type=int,
        default=SESSION_RETENTION_DAYS,
        help="Delete sessions not updated for this many days",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None, store: SessionStore | None = None) -> int:
    args = parse_args(argv)
    if store is None:
        setup_console_logging(LOG_LEVEL)
        init_db()
        store = SessionStore()

    if args.command == "list":
        for key in store.list_keys():
            print(f"{key.user_id}\t{key.tutorial_id}")
        return 0

    if args.command == "cleanup":
        deleted = cleanup_stale_sessions(store, retention_days=args.days)
        print(f"Deleted {deleted} sessions")
        return 0

    key = SessionKey(user_id=args.user, tutorial_id=args.tutorial)
    if args.command == "show":
        session = store.read(key)
        if session is None:
            print(f"No session stored for {key}", file=sys.stderr)
            return 1
        print(json_dump(session.model_dump(mode="json")))
        return 0

    if not store.clear(key):
        print(f"No session stored for {key}", file=sys.stderr)
        return 1
    print(f"Cleared session for {key}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
