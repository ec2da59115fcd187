# velocity_broadcast/formatting.py
"""Legacy colour-code decoration.

Operators write colours with ``&`` codes (``&9&l[&3Server&9&l]&r``). The
host expects section-sign codes, so `colorize` translates them immediately
before a message is delivered. Decorated text is never stored.
"""
import re

from colorama import Fore, Style

ALT_COLOR_CHAR = "&"
SECTION_SIGN = "§"
FORMAT_CODES = "0123456789abcdefklmnor"

_ALT_CODE_RE = re.compile(rf"{re.escape(ALT_COLOR_CHAR)}([{FORMAT_CODES}])", re.IGNORECASE)
_ANY_CODE_RE = re.compile(
    rf"[{re.escape(ALT_COLOR_CHAR)}{SECTION_SIGN}]([{FORMAT_CODES}])", re.IGNORECASE
)
_SECTION_CODE_RE = re.compile(rf"{SECTION_SIGN}([{FORMAT_CODES}])", re.IGNORECASE)

_ANSI_CODES = {
    "0": Fore.BLACK,
    "1": Fore.BLUE,
    "2": Fore.GREEN,
    "3": Fore.CYAN,
    "4": Fore.RED,
    "5": Fore.MAGENTA,
    "6": Fore.YELLOW,
    "7": Fore.WHITE,
    "8": Fore.LIGHTBLACK_EX,
    "9": Fore.LIGHTBLUE_EX,
    "a": Fore.LIGHTGREEN_EX,
    "b": Fore.LIGHTCYAN_EX,
    "c": Fore.LIGHTRED_EX,
    "d": Fore.LIGHTMAGENTA_EX,
    "e": Fore.LIGHTYELLOW_EX,
    "f": Fore.LIGHTWHITE_EX,
    "l": Style.BRIGHT,
    "r": Style.RESET_ALL,
}


def colorize(text: str) -> str:
    """Translates ``&`` codes in `text` to section-sign codes."""
    return _ALT_CODE_RE.sub(lambda m: SECTION_SIGN + m.group(1).lower(), text)


def strip_codes(text: str) -> str:
    """Removes both ``&`` and section-sign codes, e.g. for log output."""
    return _ANY_CODE_RE.sub("", text)


def to_ansi(text: str) -> str:
    """Renders section-sign codes as terminal colours.

    Obfuscated, strikethrough, underline and italic codes have no portable
    terminal equivalent and are dropped.
    """
    rendered = _SECTION_CODE_RE.sub(
        lambda m: _ANSI_CODES.get(m.group(1).lower(), ""), text
    )
    return rendered + Style.RESET_ALL
