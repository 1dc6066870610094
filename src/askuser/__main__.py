"""Entry point for the askuser CLI."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="askuser",
        description="Ask multiple-choice questions in the terminal and print the answers",
    )
    parser.add_argument(
        "file", nargs="?",
        help="JSON file with the question batch (default: stdin)",
    )
    parser.add_argument(
        "--line", action="store_true",
        help="Use the line-oriented prompt instead of the interactive panel",
    )
    parser.add_argument(
        "--multi", action="store_true",
        help="Use tabs and a review panel even for a single question",
    )
    parser.add_argument(
        "--schema", action="store_true",
        help="Print the ask_user tool schema and exit",
    )
    parser.add_argument(
        "--workspace", "-w", type=Path,
        help="Directory holding .askuser/config.toml (default: current directory)",
    )
    args = parser.parse_args(argv)

    from rich.console import Console as RichConsole

    from askuser.config import Config
    from askuser.exceptions import ConfigurationError
    from askuser.log import setup_logging
    from askuser.models import parse_questions
    from askuser.tools import AskUser
    from askuser.ui import Console, LineUserIO, TerminalUserIO

    if args.schema:
        print(json.dumps(AskUser().to_openai_schema(), indent=2))
        return 0

    config = Config.load(workspace=args.workspace or Path.cwd())
    setup_logging(config.log_dir, config.log_level)
    console = Console(RichConsole(stderr=True), tab_label_width=config.tab_label_width)

    try:
        raw = _read_batch(args.file)
        questions = parse_questions(raw, config.defaults)
    except OSError as e:
        console.print_error(f"Cannot read questions: {e}")
        return 2
    except ConfigurationError as e:
        console.print_error(str(e))
        return 2
    if not questions:
        console.print_error("No questions provided.")
        return 2

    interactive = sys.stdin.isatty() and sys.stdout.isatty()
    if interactive and not args.line:
        presenter = TerminalUserIO(config, force_multi=args.multi)
    else:
        presenter = LineUserIO(config=config, force_multi=args.multi)

    try:
        response = asyncio.run(presenter.present(questions))
    except ConfigurationError as e:
        console.print_error(str(e))
        return 2

    if not response:
        return 1
    print(response)
    return 0


def _read_batch(path: str | None) -> str:
    if path and path != "-":
        return Path(path).read_text(encoding="utf-8")
    return sys.stdin.read()


if __name__ == "__main__":
    sys.exit(main())
