"""CLI entry point and argument parsing"""

import argparse
import asyncio
import inspect
import logging
import sys
from typing import List, Optional

import httpx
from rich.console import Console

import settings
from chat.api_client import ChatAPIError
from config.app_config import ConfigStore
from oauth.errors import AuthError
from oauth.mode import MODE_AUTO, MODE_BROWSER, MODE_DEVICE
from utils.storage import TokenStorage
from cli import auth_handlers, chat_handlers
from cli.debug_setup import configure_logging

logger = logging.getLogger(__name__)

# Errors reported as "error: <message>" with exit status 1
REPORTED_ERRORS = (AuthError, ChatAPIError, httpx.HTTPError, OSError)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=settings.APP_NAME,
        description="Google Chat CLI credential broker",
    )
    parser.add_argument("--debug", "-d", action="store_true",
                        help=f"Append a debug log to {settings.DEBUG_LOG_FILE} in the config directory")
    commands = parser.add_subparsers(dest="command", metavar="<command>")

    # auth
    auth = commands.add_parser("auth", help="Manage OAuth login for a profile")
    auth_commands = auth.add_subparsers(dest="auth_command", metavar="<subcommand>")

    setup = auth_commands.add_parser("setup", help="Show Google Cloud OAuth setup steps")
    setup.add_argument("--open", dest="open_links", action="store_true", help="Open setup links in browser")
    setup.set_defaults(handler=_run_auth_setup)

    login = auth_commands.add_parser("login", help="Log in and store a token")
    login.add_argument("--profile", default="", help="Profile name")
    login.add_argument("--client-id", default="", help="OAuth client ID")
    login.add_argument("--client-secret", default="", help="OAuth client secret")
    login.add_argument("--scopes", default="", help="Comma-separated OAuth scopes")
    login.add_argument("--all-scopes", action="store_true", help="Use the recommended Chat scopes")
    login.add_argument("--mode", default=MODE_AUTO,
                       help=f"Auth mode: {MODE_AUTO}, {MODE_BROWSER}, {MODE_DEVICE}")
    login.add_argument("--no-open", action="store_true", help="Do not open browser automatically")
    login.add_argument("--timeout", default="3m", help="Browser callback timeout (e.g. 90s, 3m)")
    login.set_defaults(handler=_run_auth_login)

    status = auth_commands.add_parser("status", help="Show token status")
    status.add_argument("--profile", default="", help="Profile name")
    status.add_argument("--json", dest="json_output", action="store_true", help="Print JSON")
    status.set_defaults(handler=_run_auth_status)

    logout = auth_commands.add_parser("logout", help="Remove the stored token")
    logout.add_argument("--profile", default="", help="Profile name")
    logout.set_defaults(handler=_run_auth_logout)

    # chat
    chat = commands.add_parser("chat", help="Google Chat API commands")
    chat_commands = chat.add_subparsers(dest="chat_command", metavar="<subcommand>")
    spaces = chat_commands.add_parser("spaces", help="Chat spaces")
    spaces_commands = spaces.add_subparsers(dest="spaces_command", metavar="<subcommand>")
    spaces_list = spaces_commands.add_parser("list", help="List spaces")
    spaces_list.add_argument("--profile", default="", help="Profile name")
    spaces_list.add_argument("--limit", type=int, default=100, help="Max spaces to return")
    spaces_list.add_argument("--json", dest="json_output", action="store_true", help="Print JSON")
    spaces_list.set_defaults(handler=_run_spaces_list)

    version = commands.add_parser("version", help="Print version")
    version.set_defaults(handler=_run_version)

    # Subcommand groups without a leaf print their own help
    for group in (auth, chat, spaces):
        group.set_defaults(handler=None, help_parser=group)
    parser.set_defaults(handler=None, help_parser=parser)
    for leaf in (setup, login, status, logout, spaces_list, version):
        leaf.set_defaults(help_parser=leaf)

    return parser


def _run_auth_setup(args, console, storage, config_store):
    auth_handlers.setup(console, open_links=args.open_links)


def _run_auth_login(args, console, storage, config_store):
    return auth_handlers.login(
        console,
        storage,
        config_store,
        profile=args.profile,
        mode=args.mode,
        no_open=args.no_open,
        timeout=args.timeout,
        all_scopes=args.all_scopes,
        client_id=args.client_id,
        client_secret=args.client_secret,
        scopes=args.scopes,
    )


def _run_auth_status(args, console, storage, config_store):
    auth_handlers.status(console, storage, config_store, profile=args.profile, json_output=args.json_output)


def _run_auth_logout(args, console, storage, config_store):
    auth_handlers.logout(console, storage, config_store, profile=args.profile)


def _run_spaces_list(args, console, storage, config_store):
    return chat_handlers.spaces_list(
        console,
        storage,
        config_store,
        profile=args.profile,
        limit=args.limit,
        json_output=args.json_output,
    )


def _run_version(args, console, storage, config_store):
    console.print(f"{settings.APP_NAME} {settings.VERSION}", highlight=False)


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the CLI

    Returns:
        Process exit status
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.handler is None:
        args.help_parser.print_help()
        return 2 if args.command else 0

    console = configure_logging(debug=args.debug, log_level=settings.LOG_LEVEL)
    storage = TokenStorage()
    config_store = ConfigStore()

    try:
        result = args.handler(args, console, storage, config_store)
        if inspect.iscoroutine(result):
            asyncio.run(result)
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        return 130
    except REPORTED_ERRORS as e:
        logger.debug(f"Command failed: {e!r}", exc_info=True)
        console.print(f"error: {e}", style="red", markup=False, highlight=False)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
