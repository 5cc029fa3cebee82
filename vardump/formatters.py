"""
Scalar formatters for dump output.

Leaf renderers for booleans, numbers, strings, mapping keys and byte buffers.
All formatters are pure: they take the value, the relevant limit and an optional
`paint(role, text)` callable supplied by a color backend, and return text.
Without a painter the output is plain, which is what the tests and other
non-terminal callers usually want.
"""

# Standard library -----------------------------------------------------------------------------------------------------
import math
from typing import Any, Callable

# Local ----------------------------------------------------------------------------------------------------------------
from .colors import Role

Painter = Callable[[str, str], str]

ELLIPSIS = "…"
INDENT_WIDTH = 2

HEX_LINE_LEN = 16
HEX_ASCII_START_COL = 50

_CONTROL_ESCAPES = str.maketrans({
    "\n": "\\n",
    "\t": "\\t",
    "\r": "\\r",
    "\v": "\\v",
    "\f": "\\f",
    "\x1b": "\\x1b",
})


# Methods --------------------------------------------------------------------------------------------------------------

def plain(role: str, text: str) -> str:
    """Painter that leaves text untouched."""
    return text


def indent(depth: int) -> str:
    """Leading whitespace for a line at the given nesting depth."""
    return " " * (max(depth, 0) * INDENT_WIDTH)


def escape_control(text: str) -> str:
    """
    Escape control characters that would break a one-line rendering.

    Newline, tab, carriage return, vertical tab and form feed become their two-character
    escapes; ESC becomes ``\\x1b`` so embedded ANSI sequences cannot restyle the dump.
    Everything else is left as is.

    Examples:
        >>> escape_control("line1\\nline2\\tok")
        'line1\\\\nline2\\\\tok'
    """
    return text.translate(_CONTROL_ESCAPES)


def fmt_bool(value: bool, paint: Painter = plain) -> str:
    if value:
        return paint(Role.EMPHASIS, "true")
    return paint(Role.MUTED, "false")


def fmt_int(value: int, paint: Painter = plain) -> str:
    """
    Decimal representation of any int, including int subclasses.

    Integers beyond the interpreter's int-to-str digit limit render as ``<int: N bits>``
    instead of raising.
    """
    try:
        text = int.__repr__(value)
    except ValueError:
        text = f"<int: {int.bit_length(value)} bits>"
    return paint(Role.NUMBER, text)


def fmt_float(value: float, paint: Painter = plain) -> str:
    """Fixed-point float with six decimals, e.g. ``1.500000``; ``+Inf``, ``-Inf`` and ``NaN`` otherwise."""
    special = _special_float(value)
    if special is not None:
        return paint(Role.NUMBER, special)
    return paint(Role.NUMBER, float.__format__(value, "f"))


def fmt_complex(value: complex, paint: Painter = plain) -> str:
    """
    Complex number as ``(a+bi)`` using the shortest form of each part.

    Examples:
        >>> fmt_complex(complex(1.1, 2.2))
        '(1.1+2.2i)'
        >>> fmt_complex(complex(1, -2))
        '(1-2i)'
    """
    real = _short_float(value.real)
    imag = _short_float(value.imag)
    sign = "" if imag.startswith(("-", "+")) else "+"
    return paint(Role.NUMBER, f"({real}{sign}{imag}i)")


def truncate(text: str, max_len: int) -> str:
    """
    Cut text to its first `max_len` code points, marking the cut with a single ellipsis.

    Examples:
        >>> truncate("abcdef", 3)
        'abc…'
        >>> truncate("abc", 3)
        'abc'
    """
    if len(text) > max_len:
        return text[:max_len] + ELLIPSIS
    return text


def fmt_str(value: str, max_len: int, paint: Painter = plain) -> str:
    """
    Quoted string with control characters escaped and length capped.

    A string longer than `max_len` code points keeps exactly its first `max_len`
    code points followed by a single ellipsis. Nothing before the limit is altered
    besides control-character escaping.

    Args:
        value: The string to render.
        max_len: Maximum number of code points shown, >= 0.
        paint: Color painter.

    Examples:
        >>> fmt_str("abc", max_len=10)
        '"abc"'
        >>> fmt_str("abcdef", max_len=3)
        '"abc…"'
    """
    body = escape_control(truncate(str.__str__(value), max_len))
    quote = paint(Role.EMPHASIS, '"')
    return f"{quote}{paint(Role.STRING, body)}{quote}"


def fmt_key(key: Any, paint: Painter = plain) -> str:
    """Mapping key text: str() of the key, escaped, with a fallback for a broken __str__."""
    try:
        text = key if isinstance(key, str) else str(key)
    except Exception as exc:
        text = f"<{type(key).__name__} object (str failed: {type(exc).__name__})>"
    return paint(Role.KEY, escape_control(text))


def fmt_hexdump(
        data: bytes,
        depth: int,
        *,
        type_name: str = "bytes",
        cap: int | None = None,
        paint: Painter = plain,
) -> str:
    """
    Format a byte buffer as a hex dump with an ASCII preview column.

    Layout::

        (bytes) (len=25 cap=25) {
          00000000  7b 22 6b 69 6e 64 22 3a  22 74 65 73 74 22 2c 22  | {"kind":"test"," |
          00000010  6f 6b 22 3a 74 72 75 65  7d                       | ok":true}        |
        }

    Rows hold 16 bytes and are indented one level deeper than `depth`; the closing
    brace sits at `depth`. Non-printable bytes show as ``.`` in the preview.

    Args:
        data: Raw bytes to dump.
        depth: Nesting depth of the buffer itself.
        type_name: Type shown in the header.
        cap: Allocated capacity shown in the header; defaults to len(data).
        paint: Color painter.
    """
    cap = len(data) if cap is None else cap
    body_indent = indent(depth + 1)

    lines = [paint(Role.STRING, f"({type_name}) (len={len(data)} cap={cap}) {{")]
    for offset in range(0, len(data), HEX_LINE_LEN):
        chunk = data[offset:offset + HEX_LINE_LEN]

        offset_str = f"{offset:08x}  "
        parts = [body_indent, paint(Role.KEY, offset_str)]
        visible_len = len(offset_str)

        for i in range(HEX_LINE_LEN):
            hex_str = f"{chunk[i]:02x} " if i < len(chunk) else "   "
            if i == 7:
                hex_str += " "
            parts.append(paint(Role.NUMBER, hex_str))
            visible_len += len(hex_str)

        parts.append(" " * max(1, HEX_ASCII_START_COL - visible_len))

        parts.append(paint(Role.MUTED, "| "))
        parts.extend(paint(Role.STRING, chr(b) if 32 <= b <= 126 else ".") for b in chunk)
        parts.append(" " * (HEX_LINE_LEN - len(chunk)))
        parts.append(paint(Role.MUTED, " |"))
        lines.append("".join(parts))

    lines.append(indent(depth) + paint(Role.STRING, "}"))
    return "\n".join(lines)


# Private Methods ------------------------------------------------------------------------------------------------------

def _special_float(x: float) -> str | None:
    if math.isnan(x):
        return "NaN"
    if math.isinf(x):
        return "+Inf" if x > 0 else "-Inf"
    return None


def _short_float(x: float) -> str:
    """Shortest repr of a float, dropping a trailing '.0' (1.0 -> '1', 2.5 -> '2.5')."""
    special = _special_float(x)
    if special is not None:
        return special
    text = repr(float(x))
    if text.endswith(".0"):
        text = text[:-2]
    return text
