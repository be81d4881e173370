"""
Encoding-safe output for the CLI.

Strategy: no forced UTF-8; printable if possible, otherwise replacement fallback.
"""

import sys

import typer


def supports_unicode() -> bool:
    """
    Check if console supports unicode/emoji output.

    Returns:
        True if the terminal encoding can handle unicode.
    """
    try:
        "✅".encode(sys.stdout.encoding or "utf-8")
        return True
    except (UnicodeEncodeError, LookupError):
        return False


# Module-level cache for unicode support detection
_UNICODE_SUPPORT = supports_unicode()


def emoji(unicode_char: str, ascii_fallback: str) -> str:
    """Return emoji if supported, otherwise the ASCII fallback (e.g. '[ERROR]')."""
    return unicode_char if _UNICODE_SUPPORT else ascii_fallback


def _sanitize(text: str, encoding: str) -> str:
    try:
        return text.encode(encoding, errors="replace").decode(encoding, errors="replace")
    except LookupError:
        return text.encode("ascii", errors="replace").decode("ascii")


def safe_print(text: str, end: str = "\n", flush: bool = False, err: bool = False) -> None:
    """
    Print text with terminal-encoding fallback.

    Characters the terminal encoding cannot represent are replaced instead of
    raising UnicodeEncodeError mid-stream.

    Args:
        text: Text to print
        end: String appended after the last value (default: newline)
        flush: Whether to forcibly flush the stream (default: False)
        err: Whether to print to stderr instead of stdout (default: False)
    """
    if err:
        safe_print_err(text, end=end, flush=flush)
        return
    try:
        print(text, end=end, flush=flush)
    except UnicodeEncodeError:
        print(_sanitize(text, sys.stdout.encoding or "utf-8"), end=end, flush=flush)


def safe_print_err(text: str, end: str = "\n", flush: bool = False) -> None:
    """Print error text to stderr via typer.echo with the same fallback."""
    try:
        typer.echo(text, err=True, nl=(end == "\n"))
    except UnicodeEncodeError:
        typer.echo(_sanitize(text, sys.stderr.encoding or "utf-8"), err=True, nl=(end == "\n"))
    if flush:
        sys.stderr.flush()
