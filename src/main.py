"""Main entry point for the task tracker.

With a subcommand the tool runs it once and exits (one-shot mode);
without one it starts the interactive loop.
"""
import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional
from cli import CLI
from config import Settings
from logging_setup import setup_logging
from models import TaskFilter
from storage import Storage

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="taskmaster", description="Priority-ranked to-do tracker")
    p.add_argument("--file", type=Path, help="Data file (default from TASKMASTER_DATA_FILE)")
    p.add_argument("--log-level", help="Console log level (default WARNING)")
    sub = p.add_subparsers(dest="cmd")

    pa = sub.add_parser("add", help="Add a task")
    pa.add_argument("title", nargs="+", help="Task title")
    pa.add_argument("-p", "--priority", help="low, medium, high, critical (or l/m/h/c)")
    pa.add_argument("-d", "--due", help="Due date YYYY-MM-DD, today or tomorrow")

    pl = sub.add_parser("list", help="List tasks by urgency")
    pl.add_argument("filter", nargs="?", default="pending",
                    choices=[f.value for f in TaskFilter])

    pn = sub.add_parser("next", help="Show the most urgent pending task(s)")
    pn.add_argument("count", nargs="?", type=int, default=1)

    for name, help_text in (("done", "Mark a task completed"), ("archive", "Archive a task"),
                            ("rm", "Delete a task"), ("show", "Show one task")):
        sp = sub.add_parser(name, help=help_text)
        sp.add_argument("id", type=int)
    return p


def run_once(cli: CLI, args: argparse.Namespace) -> int:
    if args.cmd == "add":
        return 0 if cli.add(" ".join(args.title), args.priority, args.due) is not None else 1
    if args.cmd == "list":
        cli.list_tasks(TaskFilter(args.filter))
        return 0
    if args.cmd == "next":
        cli.next_tasks(args.count)
        return 0
    if args.cmd in ("done", "archive", "rm"):
        return 0 if cli.transition(args.cmd, args.id) else 1
    if args.cmd == "show":
        cli.handle_line(f"show {args.id}")
        return 0 if args.id in cli.tracker else 1
    return 2


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = Settings.from_env()
    if args.file:
        settings = settings.with_overrides(data_file=args.file)
    setup_logging(args.log_level or settings.log_level, settings.log_file)
    logger.debug("Using data file %s", settings.data_file)

    tracker = Storage.load(settings.data_file, settings)
    if args.cmd:
        return run_once(CLI(tracker, settings.data_file), args)
    CLI(tracker, settings.data_file, alt_screen=settings.alt_screen and sys.stdout.isatty()).run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
