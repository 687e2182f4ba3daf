"""
Administrative commands.

Usage:
    kkal-tracker serve --port 8080
    kkal-tracker create-user alice@example.com hunter22 --language uk_UA
    kkal-tracker purge-activation-tokens
"""

import argparse
import logging
import sys

import uvicorn

from app.database import SessionLocal
from app.exceptions import KkalTrackerError
from app.schemas.auth import BCRYPT_MAX_PASSWORD_BYTES
from app.services.auth import get_auth_service

logger = logging.getLogger("kkal_tracker.cli")

LANGUAGE_CODES = ("en_US", "uk_UA", "ru_UA")
MIN_PASSWORD_LENGTH = 6


def password_arg(value: str) -> str:
    """Apply the same length rules as the registration endpoint."""
    if len(value) < MIN_PASSWORD_LENGTH:
        raise argparse.ArgumentTypeError(f"must be at least {MIN_PASSWORD_LENGTH} characters")
    if len(value.encode("utf-8")) > BCRYPT_MAX_PASSWORD_BYTES:
        raise argparse.ArgumentTypeError(f"must be at most {BCRYPT_MAX_PASSWORD_BYTES} bytes")
    return value


def serve(args: argparse.Namespace) -> int:
    uvicorn.run("main:app", host=args.host, port=args.port, reload=args.reload)
    return 0


def create_user(args: argparse.Namespace) -> int:
    """Create an already-active user, bypassing email activation."""
    db = SessionLocal()
    try:
        user, _ = get_auth_service().register(db, args.email, args.password, args.language, skip_activation=True)
    except KkalTrackerError as e:
        print(f"Failed to create user: {e.message}", file=sys.stderr)
        return 1
    finally:
        db.close()

    print(f"User created successfully: ID={user.id}, Email={user.email}, Language={args.language}")
    return 0


def purge_activation_tokens(args: argparse.Namespace) -> int:
    db = SessionLocal()
    try:
        count = get_auth_service().purge_expired_tokens(db)
    finally:
        db.close()
    print(f"Deleted {count} expired activation token(s)")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="kkal-tracker", description="Kkal Tracker administration")
    subparsers = parser.add_subparsers(dest="command", required=True)

    run = subparsers.add_parser("serve", help="Run the API server")
    run.add_argument("--host", default="127.0.0.1", help="Host to bind to")
    run.add_argument("--port", type=int, default=8080, help="Port to bind to")
    run.add_argument("--reload", action="store_true", help="Enable auto-reload")
    run.set_defaults(func=serve)

    create = subparsers.add_parser("create-user", help="Create an active user without email activation")
    create.add_argument("email")
    create.add_argument("password", type=password_arg)
    create.add_argument("--language", default="en_US", choices=LANGUAGE_CODES)
    create.set_defaults(func=create_user)

    purge = subparsers.add_parser("purge-activation-tokens", help="Delete expired activation tokens")
    purge.set_defaults(func=purge_activation_tokens)

    return parser


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(level=logging.WARNING, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
