"""Command-line front door for tpgtui.

Parses options, sets up logging and hands over to the interactive runtime.
"""

from __future__ import annotations

import argparse
import shutil
import sys

from .errors import TpgError
from .logs import LOG_ENV_VAR, setup_logging
from .runtime import run_app
from .ui_theme import available_theme_names


def _positive_int(value: str) -> int:
    """argparse type for positive integer values."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be >= 1")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tpg-tui",
        description="Browse and manage tpg tasks, epics and dependencies in the terminal.",
    )
    parser.add_argument("--db", default=None, help="SQLite database path (default: <.tpg dir>/tpg.db).")
    parser.add_argument("--project", default=None, help="Project for new items (default: config or directory name).")
    parser.add_argument(
        "--theme",
        default=None,
        help=f"UI theme name ({', '.join(available_theme_names())}, plain).",
    )
    parser.add_argument("--no-color", action="store_true", help="Disable all colour output.")
    parser.add_argument("--editor", default=None, help="Editor command for descriptions (default: $TPG_EDITOR, $EDITOR).")
    parser.add_argument("--log-file", default=None, help=f"Write debug logs here (or set ${LOG_ENV_VAR}).")
    parser.add_argument("--style", default=None, help="Pygments style for Markdown descriptions.")
    parser.add_argument("--render", action="store_true", help="Print the item list once and exit.")
    parser.add_argument("--width", type=_positive_int, default=None, help="Columns for --render output.")
    parser.add_argument("--height", type=_positive_int, default=None, help="Rows for --render output.")
    return parser


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and launch the TUI, or print one frame with ``--render``."""
    args = build_parser().parse_args(argv)
    setup_logging(args.log_file)

    from .runtime.app import AppOptions, render_snapshot

    options = AppOptions(
        db=args.db,
        project=args.project,
        theme=args.theme,
        no_color=args.no_color,
        editor=args.editor,
        style=args.style,
    )
    try:
        if args.render:
            term = shutil.get_terminal_size((100, 40))
            sys.stdout.write(render_snapshot(options, args.width or term.columns, args.height or term.lines))
            return
        run_app(options)
    except TpgError as exc:
        raise SystemExit(f"tpg-tui: {exc}") from exc


if __name__ == "__main__":
    main()
