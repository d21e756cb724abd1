"""Settings for the tracker, read from the environment and an optional .env.

Lookup order for every key: real environment variable, then the project
``.env`` file (one KEY=VALUE per line), then the built-in default. Malformed
numbers fall back to the default instead of failing startup.
"""
from __future__ import annotations
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, Optional

ENV_PREFIX = "TASKMASTER"
PROJECT_ROOT = Path(__file__).resolve().parent.parent
ENV_FILE = PROJECT_ROOT / '.env'
DEFAULT_DATA_FILE = PROJECT_ROOT / 'data' / 'tasks.jsonl'


def _k(suffix: str) -> str:
    return f"{ENV_PREFIX}_{suffix}"


def read_dotenv(path: Path = ENV_FILE) -> Dict[str, str]:
    """Parse KEY=VALUE lines; blank lines and # comments are skipped."""
    values: Dict[str, str] = {}
    if not path.exists():
        return values
    try:
        text = path.read_text(encoding='utf-8')
    except OSError:
        return values
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith('#') or '=' not in line:
            continue
        k, v = line.split('=', 1)
        values[k.strip()] = v.strip().strip('"').strip("'")
    return values


def truthy(value: Optional[str], default: bool = True) -> bool:
    if value is None:
        return default
    return value.strip().lower() not in {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class Settings:
    max_tasks: int = 100
    warn_threshold: int = 90
    aging_window_days: int = 7
    data_file: Path = DEFAULT_DATA_FILE
    log_level: str = "WARNING"
    log_file: Optional[Path] = None
    alt_screen: bool = True

    def with_overrides(self, **changes) -> "Settings":
        return replace(self, **changes)

    @staticmethod
    def from_env(environ: Optional[Dict[str, str]] = None, dotenv: Optional[Dict[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        file_values = read_dotenv() if dotenv is None else dotenv

        def get(suffix: str) -> Optional[str]:
            name = _k(suffix)
            raw = env.get(name)
            if raw is None or raw.strip() == "":
                raw = file_values.get(name)
            return raw

        def get_int(suffix: str, default: int, minimum: int = 1) -> int:
            raw = get(suffix)
            if raw is None:
                return default
            try:
                value = int(raw)
            except ValueError:
                return default
            return value if value >= minimum else default

        defaults = Settings()
        max_tasks = get_int("MAX_TASKS", defaults.max_tasks)
        warn_threshold = get_int("WARN_THRESHOLD", defaults.warn_threshold, minimum=0)
        if warn_threshold > max_tasks:
            warn_threshold = max_tasks
        data_file = get("DATA_FILE")
        log_file = get("LOG_FILE")
        return Settings(
            max_tasks=max_tasks,
            warn_threshold=warn_threshold,
            aging_window_days=get_int("AGING_WINDOW", defaults.aging_window_days),
            data_file=Path(data_file).expanduser() if data_file else defaults.data_file,
            log_level=(get("LOG_LEVEL") or defaults.log_level).upper(),
            log_file=Path(log_file).expanduser() if log_file else None,
            alt_screen=truthy(get("ALT_SCREEN"), defaults.alt_screen),
        )
