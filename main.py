#!/usr/bin/env python3
"""
Flashcards API -- development server launcher.

Usage:
  python main.py
  python main.py --port 8000
  python main.py --host 0.0.0.0 --reload

Environment variables (or a .env file):
  SECRET_KEY    Required unless DEBUG=true. Signs session tokens; at least 32 chars.
  DATABASE_URL  SQLAlchemy URL (default: sqlite file flashcards.db next to this file).
  SMTP_HOST     Outgoing mail server. When unset, emails are written to the log.
  FRONTEND_URL  Base URL used for the links in verification and reset emails.
"""

import argparse

import uvicorn

from core.config import get_settings


def main() -> None:
    settings = get_settings()
    parser = argparse.ArgumentParser(
        prog="flashcards-api",
        description="Run the Flashcards REST API with uvicorn.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py
  PORT=8080 python main.py
  DEBUG=true python main.py --reload
        """,
    )
    parser.add_argument(
        "--host",
        default=settings.host,
        help=f"Interface to bind (default: {settings.host})",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=settings.port,
        help=f"Port to listen on (default: {settings.port})",
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Restart the server when source files change (development only)",
    )
    args = parser.parse_args()

    uvicorn.run("asgi:app", host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
