"""
zkpaste CLI — create an encrypted paste from a file or stdin.

  echo hello | zkpaste
  zkpaste -f notes.md -e 1week -b
  zkpaste -f main.rs -a screenshot.png -P

The decryption key stays in the URL fragment and never reaches the server.
"""

from __future__ import annotations

import argparse
import logging
import sys

from zkpaste import EXPIRE_CHOICES, __version__

_GREEN = "\x1b[92m"
_RED = "\x1b[31m"
_RESET = "\x1b[0m"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="zkpaste",
        description="Paste text to a PrivateBin-compatible service with client-side encryption.",
    )
    parser.add_argument("--version", action="version", version=f"zkpaste {__version__}")
    parser.add_argument("-f", "--file", help="Read from a file instead of stdin")
    parser.add_argument("-a", "--attachment", metavar="FILE", help="Path to a file to attach")

    pw = parser.add_mutually_exclusive_group()
    pw.add_argument("-p", "--password", help="Create a password protected paste")
    pw.add_argument(
        "-P", "--ask-password", action="store_true",
        help="Prompt for the paste password instead of passing it as an argument",
    )

    parser.add_argument("-e", "--expire", choices=EXPIRE_CHOICES, help="Expiration time of the paste")
    parser.add_argument("-s", "--sourcecode", action="store_true", help="Use source code highlighting")
    parser.add_argument("-m", "--markdown", action="store_true", help="Parse paste as markdown")
    parser.add_argument("-b", "--burn", action="store_true", help="Burn paste after reading")
    parser.add_argument(
        "-o", "--opendiscussion", action="store_true", help="Allow discussion for the paste",
    )
    parser.add_argument("--url", help="Paste service base URL (or set ZKPASTE_URL)")
    parser.add_argument("--no-compress", action="store_true", help="Do not zlib-compress the paste")
    parser.add_argument("--retries", type=int, help="Maximum upload attempts (default: 3)")
    parser.add_argument("--timeout", type=float, help="Seconds to wait per attempt (default: 30)")
    parser.add_argument("--config", help="Path to config.toml")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log progress to stderr")
    return parser


def _fail(error: Exception) -> None:
    """Print an error with its detail lines and exit non-zero."""
    print(f"Error: {error}", file=sys.stderr)
    details = getattr(error, "details", None)
    if callable(details):
        for line in details():
            print(f"  {line}", file=sys.stderr)
    sys.exit(1)


def _pick_formatter(args: argparse.Namespace, text: str | None, default: str) -> str:
    from zkpaste.inputs import guess_formatter

    if args.sourcecode:
        return "syntaxhighlighting"
    if args.markdown:
        return "markdown"
    guessed = guess_formatter(text, args.file)
    return guessed if guessed != "plaintext" else default


def main(argv: list[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )

    from zkpaste.client import PasteOptions, create_paste
    from zkpaste.codec import PasteContent
    from zkpaste.config import load_settings
    from zkpaste.errors import InvalidOptions, PasteError
    from zkpaste.inputs import load_attachment, read_input

    try:
        if args.sourcecode and args.markdown:
            raise InvalidOptions("Cannot specify both --sourcecode and --markdown")

        settings = load_settings(args.config)

        attachment = load_attachment(args.attachment) if args.attachment else None
        text = read_input(args.file)
        if text is None and attachment is None:
            raise InvalidOptions("No data provided to paste", field="content")

        password = args.password
        if args.ask_password:
            import getpass
            password = getpass.getpass("Paste password: ")

        options = PasteOptions.from_settings(
            settings,
            url=args.url,
            password=password or None,
            expire=args.expire,
            formatter=_pick_formatter(args, text, settings.formatter),
            burn=args.burn or None,
            opendiscussion=args.opendiscussion or None,
            compress=False if args.no_compress else None,
            max_retries=args.retries,
            timeout=args.timeout,
        )

        handle = create_paste(PasteContent(text=text, attachment=attachment), options)
    except PasteError as e:
        _fail(e)
        return

    print(f"{_GREEN}Paste ({options.formatter}): {_RESET}{handle.share_link(options.url)}")
    print(f"{_RED}Delete paste: {_RESET}{handle.delete_link(options.url)}")


if __name__ == "__main__":
    main()
