"""
Color backends for dump output.

Every piece of dump text is painted through one abstraction, `colorize(role, text)`,
where a `Role` names what the text *is* (a number, a string body, a back-reference)
rather than how it looks. Two interchangeable backends turn roles into markup:

    AnsiBackend: terminal escape sequences, honouring NO_COLOR / FORCE_COLOR.
    HtmlBackend: inline <span> elements for embedding in a web view.

A backend is chosen per dump call and carried by the render context, so an HTML
dump never touches the process-wide terminal color flag.
"""

# Standard library -----------------------------------------------------------------------------------------------------
import html
import os
import re
from enum import Enum, unique
from typing import Mapping

# Third-party ----------------------------------------------------------------------------------------------------------
import colorama
from colorama import Fore, Style
from colorama.ansi import code_to_chars


# Classes --------------------------------------------------------------------------------------------------------------

@unique
class Role(str, Enum):
    """
    Emphasis roles of dump output.

    Members are str subclasses; colorize() also accepts their plain string values,
    and unknown names fall back to DEFAULT styling.
    """
    MUTED = "muted"  # markers, type suffixes, punctuation
    EMPHASIS = "emphasis"  # quotes, true, field visibility
    STRING = "string"  # string bodies, stringer text, ASCII preview
    NUMBER = "number"  # numbers, indices, hex octets, addresses
    REFERENCE = "reference"  # back-reference markers
    KEY = "key"  # mapping keys, hex dump offsets
    DEFAULT = "default"


ANSI_CODES: Mapping[str, str] = {
    Role.MUTED.value: Fore.LIGHTBLACK_EX,
    Role.EMPHASIS.value: Fore.YELLOW,
    Role.STRING.value: code_to_chars("38;5;113"),
    Role.NUMBER.value: code_to_chars("38;5;38"),
    Role.REFERENCE.value: code_to_chars("38;5;247"),
    Role.KEY.value: code_to_chars("38;5;170"),
    Role.DEFAULT.value: code_to_chars("38;5;208"),
}

HTML_COLORS: Mapping[str, str] = {
    Role.MUTED.value: "#999",
    Role.EMPHASIS.value: "#ffb400",
    Role.STRING.value: "#80ff80",
    Role.NUMBER.value: "#40c0ff",
    Role.REFERENCE.value: "#aaa",
    Role.KEY.value: "#d087d0",
    Role.DEFAULT.value: "#ff7f00",
}

ANSI_RESET = Style.RESET_ALL

ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;]*m")
HTML_TAG_RE = re.compile(r"<span style=\"color:[^\"]*\">|</span>")


class ColorBackend:
    """
    Base backend: maps an emphasis role and a text to rendered text.

    Subclasses override colorize(), visible() and escape(). The base class renders plain text.
    """
    name = "plain"

    def colorize(self, role: Role | str, text: str) -> str:
        return text

    def visible(self, text: str) -> str:
        """Return text as it appears to the reader, with backend markup removed."""
        return text

    def escape(self, text: str) -> str:
        """Make unpainted text safe to embed in this backend's output."""
        return text

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class AnsiBackend(ColorBackend):
    """
    Terminal backend wrapping text in ANSI escape sequences.

    Args:
        enabled: Per-instance override. None defers to the process-wide flag
                 returned by color_enabled() at paint time.
    """
    name = "ansi"

    def __init__(self, enabled: bool | None = None):
        self.enabled = enabled

    @property
    def active(self) -> bool:
        if self.enabled is None:
            return color_enabled()
        return self.enabled

    def colorize(self, role: Role | str, text: str) -> str:
        if not self.active:
            return text
        code = ANSI_CODES.get(_role_key(role), ANSI_CODES[Role.DEFAULT.value])
        return f"{code}{text}{ANSI_RESET}"

    def visible(self, text: str) -> str:
        return strip_ansi(text)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(enabled={self.enabled!r})"


class HtmlBackend(ColorBackend):
    """
    Markup backend wrapping HTML-escaped text in a colored inline span.

    Roles without a mapped color use the DEFAULT color; text is never dropped.
    """
    name = "html"

    def colorize(self, role: Role | str, text: str) -> str:
        color = HTML_COLORS.get(_role_key(role), HTML_COLORS[Role.DEFAULT.value])
        return f'<span style="color:{color}">{html.escape(text, quote=False)}</span>'

    def escape(self, text: str) -> str:
        return html.escape(text, quote=False)

    def visible(self, text: str) -> str:
        return html.unescape(HTML_TAG_RE.sub("", text))


# Methods --------------------------------------------------------------------------------------------------------------

_color_enabled: bool | None = None


def detect_color(environ: Mapping[str, str] | None = None) -> bool:
    """
    Decide whether ANSI color output should be enabled.

    NO_COLOR (any non-empty value) disables color; otherwise FORCE_COLOR (any
    non-empty value) forces it on; otherwise color is enabled.

    Args:
        environ: Mapping to read instead of os.environ.
    """
    env = os.environ if environ is None else environ
    if env.get("NO_COLOR", ""):
        return False
    if env.get("FORCE_COLOR", ""):
        return True
    return True


def color_enabled() -> bool:
    """Return the process-wide ANSI color flag, detecting it on first use."""
    global _color_enabled
    if _color_enabled is None:
        set_color_enabled(None)
    return _color_enabled


def set_color_enabled(flag: bool | None) -> None:
    """
    Override the process-wide ANSI color flag.

    Args:
        flag: True or False to force the flag, None to re-run detect_color().
    """
    global _color_enabled
    if flag is not None and not isinstance(flag, bool):
        raise TypeError(f"color flag must be bool or None, but got {type(flag).__name__}")
    _color_enabled = detect_color() if flag is None else flag
    if _color_enabled:
        colorama.just_fix_windows_console()


def strip_ansi(text: str) -> str:
    """Remove ANSI SGR escape sequences from text."""
    return ANSI_ESCAPE_RE.sub("", text)


def _role_key(role: Role | str) -> str:
    """Plain string key of a role; Role members and their string values are interchangeable."""
    return role.value if isinstance(role, Role) else str(role)
