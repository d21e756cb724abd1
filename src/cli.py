"""Command-line interface for the tracker: interactive loop and command handlers.

The same handlers back the REPL (``CLI.run``) and one-shot mode
(``main.py``). Every mutating command saves the whole data file afterwards;
a failed save is reported and the session keeps its in-memory state.
"""
import logging
import shlex
import sys
from pathlib import Path
from typing import IO, Callable, List, Optional
from errors import PersistenceError, TrackerError
from models import Priority, TaskFilter, parse_date
from render import display, due_label, priority_bar
from storage import Storage
from theme import color, NOTICE_COLOR
from tracker import Tracker

logger = logging.getLogger(__name__)

# ESC[3J (scrollback), ESC[H (home), ESC[2J (screen), ESC[H (home)
CLEAR = "\033[3J\033[H\033[2J\033[H"
ALT_SCREEN_ON = "\033[?1049h"
ALT_SCREEN_OFF = "\033[?1049l"

PRIORITY_FLAGS = ('-p', '--priority')
DUE_FLAGS = ('-d', '--due')


class UsageError(Exception):
    """Bad command syntax; the message is shown to the user as-is."""


class CLI:
    def __init__(self, tracker: Tracker, data_file: Optional[Path] = None,
                 out: Optional[IO[str]] = None, input_fn: Callable[[str], str] = input,
                 alt_screen: bool = False):
        self.tracker: Tracker = tracker
        self.data_file: Path = Path(data_file or tracker.settings.data_file)
        self.out: IO[str] = out or sys.stdout
        self._input = input_fn
        self.alt_screen: bool = alt_screen

    def _print(self, *parts: str) -> None:
        print(*parts, file=self.out)

    def _write(self, raw: str) -> None:
        print(raw, end="", file=self.out, flush=True)

    # -------------------- persistence --------------------
    def persist(self) -> bool:
        try:
            Storage.save(self.tracker, self.data_file)
        except PersistenceError as exc:
            self._print(color(f"Save failed: {exc}", NOTICE_COLOR))
            self._print("Changes are kept for this session only.")
            return False
        return True

    # -------------------- interactive loop --------------------
    def run(self) -> None:
        """Read commands until exit/EOF; redraw the pending list each cycle."""
        exit_message: Optional[str] = None
        if self.alt_screen:
            self._write(ALT_SCREEN_ON)
        try:
            while True:
                if self.alt_screen:
                    self._write(CLEAR)
                    self._print("Pending tasks:")
                    self.list_tasks(TaskFilter.PENDING)
                line = self._input("\n> ").strip()
                if not line:
                    continue
                lower = line.lower()
                if lower in ('exit', 'quit'):
                    exit_message = "Goodbye."
                    break
                self.handle_line(line)
                if self.alt_screen:
                    self._input("\nPress Enter to continue...")
        except (KeyboardInterrupt, EOFError):
            exit_message = "Interrupted. Goodbye."
        finally:
            if self.alt_screen:
                self._write(ALT_SCREEN_OFF)
            if exit_message:
                self._print(exit_message)

    # -------------------- command dispatch --------------------
    def handle_line(self, line: str) -> None:
        try:
            tokens = shlex.split(line)
        except ValueError as exc:
            self._print(f"Could not parse command: {exc}")
            return
        if not tokens:
            return
        cmd, args = tokens[0].lower(), tokens[1:]
        logger.debug("command %s args=%s", cmd, args)
        handler = COMMANDS.get(cmd)
        if handler is None:
            self._print("Unknown command. Type 'help' for instructions.")
            return
        try:
            handler(self, args)
        except UsageError as exc:
            self._print(str(exc))
        except TrackerError as exc:
            self._print(str(exc))

    # ---- token parsing ----
    @staticmethod
    def _parse_id(args: List[str], usage: str) -> int:
        if len(args) != 1:
            raise UsageError(f"Usage: {usage}")
        raw = args[0].rstrip('.')
        if not raw.isdigit():
            raise UsageError("Invalid id.")
        return int(raw)

    @staticmethod
    def _split_add_args(args: List[str]):
        words: List[str] = []
        pr_token: Optional[str] = None
        due_token: Optional[str] = None
        it = iter(args)
        for tok in it:
            if tok in PRIORITY_FLAGS or tok in DUE_FLAGS:
                value = next(it, None)
                if value is None:
                    raise UsageError(f"Missing value for {tok}.")
                if tok in PRIORITY_FLAGS:
                    pr_token = value
                else:
                    due_token = value
            else:
                words.append(tok)
        return ' '.join(words), pr_token, due_token

    # -------------------- commands --------------------
    def add(self, title: str, priority_token: Optional[str] = None, due_token: Optional[str] = None) -> Optional[int]:
        priority = Priority.MEDIUM
        if priority_token is not None:
            parsed = Priority.parse(priority_token)
            if parsed is None:
                self._print(f'Unknown priority "{priority_token}", using Medium.')
            else:
                priority = parsed
        due = None
        if due_token is not None:
            due = parse_date(due_token, self.tracker.today())
            if due is None:
                self._print(f'Invalid date "{due_token}". Use YYYY-MM-DD, today or tomorrow.')
                return None
        try:
            task_id = self.tracker.create(title, priority, due)
        except TrackerError as exc:
            self._print(str(exc))
            return None
        self._print(f"Added task {task_id}.")
        if self.tracker.near_capacity:
            self._print(color(f"Warning: {len(self.tracker)} of {self.tracker.settings.max_tasks} task slots used.", NOTICE_COLOR))
        self.persist()
        return task_id

    def list_tasks(self, task_filter: TaskFilter = TaskFilter.PENDING) -> None:
        display(self.tracker.list_tasks(task_filter), self.tracker.today(), self.out)

    def next_tasks(self, limit: int = 1) -> None:
        if limit <= 1:
            task = self.tracker.retrieve_next_pending()
            tasks = [task] if task is not None else []
        else:
            tasks = self.tracker.upcoming(limit)
        if not tasks:
            self._print("Nothing pending.")
            return
        display(tasks, self.tracker.today(), self.out)

    def transition(self, verb: str, task_id: int) -> bool:
        action = {'done': self.tracker.complete, 'archive': self.tracker.archive, 'rm': self.tracker.remove}[verb]
        if not action(task_id):
            self._print(f"Task id {task_id} not found.")
            return False
        past = {'done': 'completed', 'archive': 'archived', 'rm': 'removed'}[verb]
        self._print(f"Task {task_id} {past}.")
        self.persist()
        return True

    def show(self, task_id: int) -> None:
        task = self.tracker.get(task_id)
        today = self.tracker.today()
        self._print(f"#{task.id} {task.title}")
        self._print(f"  priority: {priority_bar(task.priority)} {task.priority.label}")
        self._print(f"  due:      {due_label(task, today)}")
        self._print(f"  status:   {task.status.label}")
        self._print(f"  score:    {self.tracker.score(task, today):.2f}")

    def help(self) -> None:
        self._print("Commands:")
        self._print("  add <title...> [-p PRIORITY] [-d DATE]")
        self._print("                      Add a task; priority low/medium/high/critical (or l/m/h/c),")
        self._print("                      date YYYY-MM-DD, today or tomorrow")
        self._print("  list [FILTER]       List tasks by urgency; filter all/pending/completed/archived")
        self._print("  next [N]            Take the most urgent pending task off the queue (N>1: preview the top N)")
        self._print("  done <id>           Mark a task completed")
        self._print("  archive <id>        Archive a task")
        self._print("  rm <id>             Delete a task permanently")
        self._print("  show <id>           Show one task with its urgency score")
        self._print("  help                Show this help")
        self._print("  exit                Leave (changes are saved after every command)")

    # ---- REPL adapters ----
    def _cmd_add(self, args: List[str]) -> None:
        title, pr_token, due_token = self._split_add_args(args)
        self.add(title, pr_token, due_token)

    def _cmd_list(self, args: List[str]) -> None:
        if len(args) > 1:
            raise UsageError("Usage: list [all|pending|completed|archived]")
        task_filter = TaskFilter.PENDING
        if args:
            parsed = TaskFilter.parse(args[0])
            if parsed is None:
                raise UsageError("Invalid filter. Use all, pending, completed or archived.")
            task_filter = parsed
        self.list_tasks(task_filter)

    def _cmd_next(self, args: List[str]) -> None:
        if len(args) > 1 or (args and not args[0].isdigit()):
            raise UsageError("Usage: next [N]")
        self.next_tasks(int(args[0]) if args else 1)

    def _cmd_done(self, args: List[str]) -> None:
        self.transition('done', self._parse_id(args, "done <id>"))

    def _cmd_archive(self, args: List[str]) -> None:
        self.transition('archive', self._parse_id(args, "archive <id>"))

    def _cmd_rm(self, args: List[str]) -> None:
        self.transition('rm', self._parse_id(args, "rm <id>"))

    def _cmd_show(self, args: List[str]) -> None:
        self.show(self._parse_id(args, "show <id>"))

    def _cmd_help(self, args: List[str]) -> None:
        self.help()


COMMANDS = {
    'add': CLI._cmd_add,
    'list': CLI._cmd_list,
    'ls': CLI._cmd_list,
    'next': CLI._cmd_next,
    'done': CLI._cmd_done,
    'complete': CLI._cmd_done,
    'archive': CLI._cmd_archive,
    'rm': CLI._cmd_rm,
    'remove': CLI._cmd_rm,
    'show': CLI._cmd_show,
    'help': CLI._cmd_help,
}
