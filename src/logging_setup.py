"""Logging configuration for the CLI.

Console output goes to stderr so it never mixes with listings on stdout.
A file log is added only when a path is configured.
"""
from __future__ import annotations
import logging
import sys
from pathlib import Path
from typing import Optional, Union

FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
DATEFMT = "%Y-%m-%d %H:%M:%S"


def setup_logging(console_level: Union[int, str] = logging.WARNING,
                  log_file: Optional[Path] = None,
                  file_level: int = logging.DEBUG) -> None:
    """Install handlers on the root logger. Safe to call more than once."""
    if isinstance(console_level, str):
        console_level = getattr(logging, console_level.upper(), logging.WARNING)

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(fmt=FORMAT, datefmt=DATEFMT)

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(console_level)
    ch.setFormatter(fmt)
    root.addHandler(ch)

    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(log_file), encoding="utf-8")
        fh.setLevel(file_level)
        fh.setFormatter(fmt)
        root.addHandler(fh)

    logging.captureWarnings(True)
