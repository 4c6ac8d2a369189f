"""Command line interface for the download client."""

import logging
from argparse import ArgumentParser, Namespace
from pathlib import Path
from sys import exit, stdout

from requests import RequestException

from .config import resolve_settings
from .models import UserDetails
from .session import DownloadResponseError, DownloadSession
from .utils import print_json

logger = logging.getLogger(__name__)


def main(argv=None):
    """Entry point for the dcli command."""
    args = parse_arguments(argv)
    config_logging(args)
    try:
        settings = resolve_settings(args)
        with DownloadSession(
            settings.username, settings.password, settings.server, settings.insecure
        ) as session:
            run_command(session, args)
    except (DownloadResponseError, RequestException, OSError, ValueError) as e:
        logger.error(f"{args.command} failed: {e}")
        exit(1)


def run_command(session: DownloadSession, args: Namespace) -> None:
    """Log in, run the selected command, and always log out afterwards."""
    user = session.login()
    try:
        if args.command == "login":
            print_json(user)
        else:
            args.handler(session, args)
    finally:
        session.logout()


def cmd_tokens(session: DownloadSession, args: Namespace) -> None:
    print_json(session.tokens())


def cmd_log(session: DownloadSession, args: Namespace) -> None:
    print_json(session.download_log())


def cmd_downloads(session: DownloadSession, args: Namespace) -> None:
    print_json(session.list_downloads())


def cmd_questions(session: DownloadSession, args: Namespace) -> None:
    print_json(session.questions())


def cmd_generate(session: DownloadSession, args: Namespace) -> None:
    print_json(session.generate(args.count, args.downloads))


def cmd_email(session: DownloadSession, args: Namespace) -> None:
    print_json(session.generate_for_email(args.email, args.downloads))


def cmd_set_user(session: DownloadSession, args: Namespace) -> None:
    details = UserDetails(
        username=args.user_name,
        password=args.user_password,
        email=args.email,
        name=args.name,
        type=args.type,
        token=args.token,
    )
    print_json(session.set_user(details))


def cmd_upload(session: DownloadSession, args: Namespace) -> None:
    session.upload(args.name, args.file)


def cmd_fetch(session: DownloadSession, args: Namespace) -> None:
    if args.output:
        try:
            with open(args.output, "wb") as f:
                written = session.download(args.path, f)
        except Exception:
            Path(args.output).unlink(missing_ok=True)
            raise
        logger.info(f"Wrote {written} bytes to {args.output}")
    else:
        session.download(args.path, stdout.buffer)
        stdout.buffer.flush()


def parse_arguments(argv=None) -> Namespace:
    """Parse command line arguments."""
    parser = make_parser("Client for the download server")
    parser.add_argument("-s", "--server", help="Server URL (or $DCLI_SERVER)")
    parser.add_argument("-u", "--username", help="User name (or $DCLI_USERNAME)")
    parser.add_argument("-p", "--password", help="Password (or $DCLI_PASSWORD)")
    parser.add_argument(
        "--insecure",
        action="store_true",
        help="Skip TLS certificate verification (development servers only)",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("login", help="Log in and print the user record")
    for name, handler, help_text in [
        ("tokens", cmd_tokens, "List tokens"),
        ("log", cmd_log, "Show the download log"),
        ("downloads", cmd_downloads, "List available downloads"),
        ("questions", cmd_questions, "List quiz questions"),
    ]:
        commands.add_parser(name, help=help_text).set_defaults(handler=handler)

    generate = commands.add_parser("generate", help="Generate tokens")
    generate.add_argument("count", type=int, help="Number of tokens")
    generate.add_argument("downloads", type=int, help="Downloads allowed per token")
    generate.set_defaults(handler=cmd_generate)

    email = commands.add_parser("email", help="Generate a token for an email")
    email.add_argument("email", help="Email address to bind the token to")
    email.add_argument("downloads", type=int, help="Downloads allowed")
    email.set_defaults(handler=cmd_email)

    set_user = commands.add_parser("set-user", help="Create or update a user")
    set_user.add_argument("--user-name", required=True, help="Login of the user")
    set_user.add_argument("--user-password", default="", help="New password")
    set_user.add_argument("--email", default="")
    set_user.add_argument("--name", default="", help="Display name")
    set_user.add_argument("--type", default="user", help="admin or user")
    set_user.add_argument("--token", default="")
    set_user.set_defaults(handler=cmd_set_user)

    upload = commands.add_parser("upload", help="Upload a new version")
    upload.add_argument("name", help="Name of the version on the server")
    upload.add_argument("file", help="Local file to upload")
    upload.set_defaults(handler=cmd_upload)

    fetch = commands.add_parser("fetch", help="Fetch a server path as raw bytes")
    fetch.add_argument("path", help="Path relative to the server URL")
    fetch.add_argument(
        "-o", "--output", help="Write output to file (binary mode) instead of stdout"
    )
    fetch.set_defaults(handler=cmd_fetch)

    return parser.parse_args(argv)


def make_parser(description: str) -> ArgumentParser:
    parser = ArgumentParser(prog="dcli", description=description)
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable verbose output"
    )
    parser.add_argument(
        "-q", "--quiet", action="store_true", help="Suppress INFO and below messages"
    )
    return parser


def config_logging(args) -> None:
    """Configure logging based on command line arguments."""
    if args.quiet:
        log_level = logging.WARNING
    elif args.verbose:
        log_level = logging.DEBUG
    else:
        log_level = logging.INFO

    logging.basicConfig(
        level=log_level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


if __name__ == "__main__":
    main()
