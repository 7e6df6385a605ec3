"""Command-line front door for peek.

Parses CLI options on top of the JSON config defaults, then either prints the
listing once (``--print``) or dispatches into the interactive browser runtime.
"""

from __future__ import annotations

import argparse
import locale
import shutil
import sys
from pathlib import Path

from . import __version__
from .directory_model import DirectoryModel
from .errors import NavigationError, PathTooLong
from .layout import compute_layout
from .render import header_text, render_listing
from .runtime import run_browser
from .runtime.config import BrowserConfig, load_browser_config
from .ui_theme import resolve_theme


class _ArgumentParser(argparse.ArgumentParser):
    """Argument errors exit with status 1 like every other startup failure."""

    def error(self, message: str):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="peek",
        description="Browse a directory inline in the terminal.",
    )
    parser.add_argument(
        "directory",
        nargs="?",
        default=".",
        help="Directory to start in. Defaults to the current directory.",
    )
    parser.add_argument(
        "-a", "--all", dest="show_hidden", action="store_true", default=None,
        help="Show entries whose names start with a dot.",
    )
    parser.add_argument(
        "-B", "--no-color", dest="color", action="store_false", default=None,
        help="Disable entry colors.",
    )
    parser.add_argument(
        "-c", "--clear", dest="clear_on_exit", action="store_true", default=None,
        help="Erase the listing on exit instead of leaving it on screen.",
    )
    parser.add_argument(
        "-d", "--no-directory", dest="show_directory", action="store_false", default=None,
        help="Do not print the directory path above the listing.",
    )
    parser.add_argument(
        "-F", "--classify", dest="indicators", action="store_true", default=None,
        help="Append a type indicator (one of /@|=*) to entry names.",
    )
    parser.add_argument(
        "-x", "--hex", dest="show_escapes", action="store_true", default=None,
        help="Show control and undecodable bytes in names as \\XX escapes.",
    )
    parser.add_argument(
        "-p", "--print", dest="print_only", action="store_true",
        help="Print the listing once and exit.",
    )
    parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def print_listing(config: BrowserConfig, start: str | Path, stream=None) -> None:
    """Write one non-interactive listing of ``start`` to ``stream``.

    Every entry is laid out on a single page sized to the entry count.
    """
    out = sys.stdout if stream is None else stream
    model = DirectoryModel.open(start, config.scan_options())
    state = model.state
    isatty = getattr(out, "isatty", None)
    theme = resolve_theme(no_color=not config.color, tty=bool(isatty and isatty()))
    columns = shutil.get_terminal_size((80, 24)).columns
    layout = compute_layout(
        [entry.cell_width for entry in state.entries],
        columns,
        len(state.entries) + 1,
    )

    lines: list[str] = []
    if config.show_directory:
        lines.append(theme.header + header_text(state, config.show_escapes) + theme.reset)
    lines.extend(
        line.rstrip(" ")
        for line in render_listing(state, layout, theme, config.show_escapes)
    )
    out.write("\n".join(lines) + "\n")
    out.flush()


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and run peek.

    Startup navigation failures and fatal errors exit with status 1 and a
    message on stderr; the terminal is already restored by then.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        locale.setlocale(locale.LC_ALL, "")
    except locale.Error:
        # Unsupported LANG/LC_* values keep the C locale for collation.
        pass

    config = load_browser_config().with_overrides(
        show_hidden=args.show_hidden,
        color=args.color,
        clear_on_exit=args.clear_on_exit,
        show_directory=args.show_directory,
        indicators=args.indicators,
        show_escapes=args.show_escapes,
    )

    try:
        if args.print_only:
            print_listing(config, args.directory)
            return
        if not (sys.stdin.isatty() and sys.stdout.isatty()):
            raise SystemExit("peek: interactive mode needs a terminal (use --print)")
        run_browser(config, args.directory)
    except NavigationError as exc:
        raise SystemExit(f"peek: {args.directory}: {exc.message}") from exc
    except PathTooLong as exc:
        raise SystemExit(f"peek: {exc.message}") from exc
    except MemoryError as exc:
        raise SystemExit("peek: out of memory") from exc


if __name__ == "__main__":
    main()
