"""Color & style helpers.

Decisions:
- Truecolor preferred; falls back to 256-color cube if unsupported.
- Disables automatically when not a TTY unless FORCE_COLOR=1.
- Honors NO_COLOR for complete disable.
- Supports palette overrides via environment or project .env file.
"""
from __future__ import annotations
import os, sys
from config import read_dotenv

_FORCE = os.environ.get("FORCE_COLOR", "").lower() in {"1", "true", "yes", "on"}
_NO_COLOR = os.environ.get("NO_COLOR") is not None
_ENABLE = (_FORCE or sys.stdout.isatty()) and not _NO_COLOR
_COLORTERM = os.environ.get("COLORTERM", "").lower()
_USE_TRUECOLOR = _ENABLE and any(tok in _COLORTERM for tok in ("truecolor", "24bit"))

def _code(part: str) -> str:
    """Generate ANSI escape code for a given style part."""
    return f"\033[{part}m" if _ENABLE else ''

def _hex_to_rgb(hex_code: str) -> tuple[int,int,int]:
    h = hex_code.lstrip('#')
    return int(h[0:2],16), int(h[2:4],16), int(h[4:6],16)

def _fg_truecolor(r: int, g: int, b: int) -> str:
    return f"\033[38;2;{r};{g};{b}m"

def _fg_256(r: int, g: int, b: int) -> str:
    """Approximate RGB to xterm 256-color cube."""
    def to_6(x: int) -> int:
        return int(round(x / 255 * 5))
    r6, g6, b6 = to_6(r), to_6(g), to_6(b)
    idx = 16 + 36 * r6 + 6 * g6 + b6
    return f"\033[38;5;{idx}m"

def _from_hex(hex_code: str) -> str:
    if not _ENABLE:
        return ''
    r, g, b = _hex_to_rgb(hex_code)
    if _USE_TRUECOLOR:
        return _fg_truecolor(r, g, b)
    return _fg_256(r, g, b)

def _valid_hex(value: str) -> bool:
    h = value.lstrip('#')
    return len(h) == 6 and all(c in '0123456789abcdefABCDEF' for c in h)

RESET = _code('0')
BOLD = _code('1')
DIM = _code('2')
UNDERLINE = _code('4')

PALETTE_DEFAULTS = {
    'TASKMASTER_PRIMARY': '#476EAE',
    'TASKMASTER_LOW': '#48B3AF',
    'TASKMASTER_MEDIUM': '#A7E399',
    'TASKMASTER_HIGH': '#F6C667',
    'TASKMASTER_CRITICAL': '#E05A47',
    'TASKMASTER_DONE': '#7A8A99',
}

# priority: real env var > .env override > default
_DOTENV = read_dotenv()

def _palette(key: str) -> str:
    for source in (os.environ, _DOTENV):
        value = source.get(key)
        if value and _valid_hex(value):
            return '#' + value.strip().lstrip('#')
    return PALETTE_DEFAULTS[key]

PRIMARY = _from_hex(_palette('TASKMASTER_PRIMARY'))
C_DONE = _from_hex(_palette('TASKMASTER_DONE'))

# keyed by Priority ordinal
PRIORITY_COLOR = {
    0: _from_hex(_palette('TASKMASTER_LOW')),
    1: _from_hex(_palette('TASKMASTER_MEDIUM')),
    2: _from_hex(_palette('TASKMASTER_HIGH')),
    3: _from_hex(_palette('TASKMASTER_CRITICAL')),
}

# keyed by Status ordinal
STATUS_COLOR = {
    0: '',
    1: C_DONE,
    2: DIM + C_DONE,
}

HEADER_COLOR = PRIMARY
ID_COLOR = PRIMARY + BOLD
EMPTY_COLOR = DIM + PRIMARY
OVERDUE_COLOR = PRIORITY_COLOR[3] + BOLD
NOTICE_COLOR = _code('1;35')

def color(text: str, *styles: str) -> str:
    """Apply ANSI styles to a given text."""
    if not _ENABLE:
        return text
    return ''.join(styles) + text + RESET

__all__ = [
    'color','RESET','BOLD','DIM','UNDERLINE','PRIORITY_COLOR','STATUS_COLOR','HEADER_COLOR','ID_COLOR',
    'EMPTY_COLOR','OVERDUE_COLOR','NOTICE_COLOR','_ENABLE','_USE_TRUECOLOR','_FORCE'
]
