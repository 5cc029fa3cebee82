"""
Recursive value dumper.

Renders any Python value, including recursive and self-referential graphs, as
indented, colorized text (or HTML) showing its full structure: type names, field
visibility, container contents, shared references and binary contents.

Entry points:
    dump(*values): Print to the configured writer (stdout by default).
    dump_str(*values): Return the rendering as a string.
    dump_html(*values): Return an HTML fragment for embedding in a web view.
    fdump(writer, *values): Write to any text stream.
    dd(*values): Dump, then terminate the process with status 1.

Each call starts with a header naming the calling file and line, followed by one
rendering per value:

    >>> dump_str({"a": 1}, [True])      # doctest: +SKIP
    <#dump // app.py:12
    {
      a => 1
    }
    [
      0 => true
    ]

Every call gets its own render context (reference table, color backend and output
buffer), so dumps running in different threads do not interfere.
"""

# Standard library -----------------------------------------------------------------------------------------------------
import io
import sys
import warnings

from dataclasses import dataclass, field, fields, replace
from typing import Any, Callable, Iterable, TextIO

# Local ----------------------------------------------------------------------------------------------------------------
from .abc import (
    Kind,
    as_stringer,
    channel_closed,
    classify,
    is_nil,
    is_trackable,
    opaque_address,
    read_field,
    struct_fields,
    unwrap,
)
from .colors import AnsiBackend, ColorBackend, HtmlBackend, Role
from .formatters import (
    escape_control,
    fmt_bool,
    fmt_complex,
    fmt_float,
    fmt_hexdump,
    fmt_int,
    fmt_key,
    fmt_str,
    indent,
    truncate,
)
from .refs import ReferenceTracker
from .sentinels import INVALID
from .tabwriter import TabWriter
from .tools import dump_header, find_external_caller
from .utils import class_name, type_name

DEFAULT_MAX_DEPTH = 15
DEFAULT_MAX_ITEMS = 100
DEFAULT_MAX_STRING_LEN = 100_000

MAX_DEPTH_MARKER = "... (max depth)"
TRUNCATED_MARKER = "... (truncated)"
INVALID_MARKER = "<invalid>"
BACKREF_MARKER = "↩"
FUNC_PLACEHOLDER = "func(...) {...}"

HTML_PROLOGUE = (
    "<body style='background-color:black;'>"
    '<pre style="background-color:black; color:white; padding:5px; border-radius: 5px">\n'
)
HTML_EPILOGUE = "</pre></body>"

_LIMITS = ("max_depth", "max_items", "max_str_len")

exit_func: Callable[[int], Any] = sys.exit
"""Process terminator used by dd(); replace it to intercept termination."""


# Classes --------------------------------------------------------------------------------------------------------------

@dataclass(frozen=True)
class DumpOptions:
    """
    Settings of a dump, immutable for the duration of a call.

    Attributes:
        max_depth: Deepest nesting level rendered; deeper nodes show "... (max depth)".
        max_items: Entries rendered per sequence, set or mapping before "... (truncated)".
        max_str_len: Code points of a string shown before it is cut with "…".
        writer: Text stream used by dump() and dd(); None means sys.stdout at call time.
        color: Force ANSI color on or off; None follows NO_COLOR / FORCE_COLOR detection.
        sort_keys: Render mapping entries and set members in sorted order when their
                   keys are comparable; otherwise the container's own iteration order.
        header: Print the "<#dump // file:line" header line.

    Use merge() to derive new options: like the functional options of a builder,
    negative limits passed to merge() are ignored and the current value is kept.

    Examples:
        >>> opts = DumpOptions().merge(max_depth=3, max_items=-1)
        >>> opts.max_depth, opts.max_items
        (3, 100)
    """
    max_depth: int = DEFAULT_MAX_DEPTH
    max_items: int = DEFAULT_MAX_ITEMS
    max_str_len: int = DEFAULT_MAX_STRING_LEN
    writer: TextIO | None = None
    color: bool | None = None
    sort_keys: bool = False
    header: bool = True

    def __post_init__(self) -> None:
        for name in _LIMITS:
            value = getattr(self, name)
            _check_limit(name, value)
            if value < 0:
                raise ValueError(f"DumpOptions.{name} must be >= 0, but got {value}")
        if self.writer is not None and not callable(getattr(self.writer, "write", None)):
            raise TypeError(f"DumpOptions.writer must have a write() method, but got {type(self.writer).__name__}")
        if self.color is not None and not isinstance(self.color, bool):
            raise TypeError(f"DumpOptions.color must be bool or None, but got {type(self.color).__name__}")

    def merge(self, **kwargs) -> "DumpOptions":
        """
        Return a copy with the given options replaced.

        Negative max_depth, max_items or max_str_len values are ignored.

        Raises:
            TypeError: On unknown option names or non-int limits.
        """
        known = {f.name for f in fields(self)}
        unknown = sorted(set(kwargs) - known)
        if unknown:
            raise TypeError(f"unknown dump option(s): {', '.join(unknown)}")

        updates = {}
        for name, value in kwargs.items():
            if name in _LIMITS:
                _check_limit(name, value)
                if value < 0:
                    continue
            updates[name] = value
        return replace(self, **updates)


@dataclass
class RenderContext:
    """
    Mutable state of one top-level dump call.

    Holds the options, the color backend, the reference table shared by all values
    of the call, and the output buffer. Never shared between calls.
    """
    options: DumpOptions
    backend: ColorBackend
    refs: ReferenceTracker = field(default_factory=ReferenceTracker)
    parts: list[str] = field(default_factory=list, repr=False)

    def write(self, text: str) -> None:
        self.parts.append(text)

    def paint(self, role: Role | str, text: str) -> str:
        return self.backend.colorize(role, text)

    def text(self, text: str) -> str:
        """Unpainted text, escaped for the backend."""
        return self.backend.escape(text)

    def getvalue(self) -> str:
        return "".join(self.parts)


class Dumper:
    """
    Dumper bound to a set of DumpOptions.

    Args:
        options: Base options; defaults to DumpOptions().
        exit_func: Terminator used by dd(); defaults to the module-level exit_func.
        **kwargs: Option overrides applied with DumpOptions.merge().

    Examples:
        >>> d = Dumper(max_depth=2, header=False, color=False)
        >>> print(d.dump_str([1, "a"]))
        [
          0 => 1
          1 => "a"
        ]
        <BLANKLINE>
    """

    def __init__(self,
                 options: DumpOptions | None = None,
                 *,
                 exit_func: Callable[[int], Any] | None = None,
                 **kwargs):
        if options is not None and not isinstance(options, DumpOptions):
            raise TypeError(f"options must be a DumpOptions instance, but got {type(options).__name__}")
        if exit_func is not None and not callable(exit_func):
            raise TypeError(f"exit_func must be callable, but got {type(exit_func).__name__}")
        self.options = (options or DumpOptions()).merge(**kwargs)
        self.exit_func = exit_func

    def with_options(self, **kwargs) -> "Dumper":
        """New Dumper with merged options and the same exit hook."""
        return Dumper(self.options.merge(**kwargs), exit_func=self.exit_func)

    def dump(self, *values: Any) -> None:
        """Render values to the configured writer (stdout by default)."""
        writer = self.options.writer if self.options.writer is not None else sys.stdout
        self._dump_to(writer, values, AnsiBackend(self.options.color))

    def fdump(self, writer: TextIO, *values: Any) -> None:
        """Render values to an arbitrary text stream."""
        if not callable(getattr(writer, "write", None)):
            raise TypeError(f"writer must have a write() method, but got {type(writer).__name__}")
        self._dump_to(writer, values, AnsiBackend(self.options.color))

    def dump_str(self, *values: Any) -> str:
        """Render values and return the text instead of writing it."""
        buffer = io.StringIO()
        self._dump_to(buffer, values, AnsiBackend(self.options.color))
        return buffer.getvalue()

    def dump_html(self, *values: Any) -> str:
        """Render values with the HTML backend inside a dark <body>/<pre> fragment."""
        buffer = io.StringIO()
        buffer.write(HTML_PROLOGUE)
        self._dump_to(buffer, values, HtmlBackend())
        buffer.write(HTML_EPILOGUE)
        return buffer.getvalue()

    def dd(self, *values: Any) -> None:
        """Dump values, then terminate with exit status 1."""
        self.dump(*values)
        terminate = self.exit_func if self.exit_func is not None else exit_func
        terminate(1)

    def _dump_to(self, writer: TextIO, values: Iterable[Any], backend: ColorBackend) -> None:
        if self.options.header:
            header = dump_header(find_external_caller())
            if header is not None:
                writer.write(backend.colorize(Role.MUTED, header) + "\n")

        ctx = RenderContext(options=self.options, backend=backend)
        tw = TabWriter(writer, padding=1, width=lambda cell: len(backend.visible(cell)))
        tw.write(render(values, ctx))
        tw.flush()


# Methods --------------------------------------------------------------------------------------------------------------

def configure(*, reset: bool = False, **kwargs) -> DumpOptions:
    """
    Adjust the options of the module-level dumper used by dump(), dump_str(), etc.

    Args:
        reset: Start from DumpOptions() defaults instead of the current options.
        **kwargs: DumpOptions fields to change.

    Returns:
        The options now in effect.
    """
    global _default_dumper
    base = Dumper() if reset else _default_dumper
    _default_dumper = base.with_options(**kwargs)
    return _default_dumper.options


def get_options() -> DumpOptions:
    """Options of the module-level dumper."""
    return _default_dumper.options


def dump(*values: Any) -> None:
    _default_dumper.dump(*values)


def dump_str(*values: Any) -> str:
    return _default_dumper.dump_str(*values)


def dump_html(*values: Any) -> str:
    return _default_dumper.dump_html(*values)


def fdump(writer: TextIO, *values: Any) -> None:
    _default_dumper.fdump(writer, *values)


def dd(*values: Any) -> None:
    _default_dumper.dd(*values)


def render(values: Iterable[Any], ctx: RenderContext) -> str:
    """
    Render top-level values into the context buffer, one per line, and return the text.

    All values share the context's reference table, so an object reachable from two
    arguments of the same call is expanded once and referenced afterwards.
    """
    for value in values:
        render_value(value, 0, ctx)
        ctx.write("\n")
    return ctx.getvalue()


def render_value(obj: Any, depth: int, ctx: RenderContext) -> None:
    """
    Render one node of a value graph at the given nesting depth.

    Checks run in priority order:
        1. depth beyond max_depth -> "... (max depth)", the node is not read
        2. INVALID -> "<invalid>"
        3. own __str__ (not for channel-like or nil handles) -> "<text> #<type>", capped at max_str_len
        4. channel-like handles -> "<type>(0x<id>)", or "<type>(nil)" once closed
        5. None, dead weakref or proxy, empty cell -> "<type>(nil)"
        6. already visited in this call -> "↩ &<id>", no further descent
        7. dispatch on Kind
    """
    if depth > ctx.options.max_depth:
        ctx.write(ctx.paint(Role.MUTED, MAX_DEPTH_MARKER))
        return

    kind = classify(obj)
    if kind is Kind.INVALID:
        ctx.write(ctx.paint(Role.MUTED, INVALID_MARKER))
        return

    if kind not in (Kind.CHANNEL, Kind.NIL):
        text = as_stringer(obj)
        if text is not None:
            text = escape_control(truncate(text, ctx.options.max_str_len))
            ctx.write(ctx.paint(Role.STRING, text) + ctx.paint(Role.MUTED, " #" + type_name(obj)))
            return

    if kind is Kind.CHANNEL:
        _render_channel(obj, ctx)
        return

    if is_nil(obj, kind):
        ctx.write(ctx.paint(Role.STRING, type_name(obj)) + ctx.paint(Role.MUTED, "(nil)"))
        return

    if is_trackable(obj, kind):
        ref_id, first_visit = ctx.refs.visit(obj)
        if not first_visit:
            ctx.write(ctx.paint(Role.REFERENCE, f"{BACKREF_MARKER} &{ref_id}"))
            return

    _RENDERERS[kind](obj, kind, depth, ctx)


# Private Methods ------------------------------------------------------------------------------------------------------

def _check_limit(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an int, but got {type(value).__name__}")


def _render_unwrapped(obj: Any, kind: Kind, depth: int, ctx: RenderContext) -> None:
    # One level of indirection does not count as nesting
    render_value(unwrap(obj, kind), depth, ctx)


def _render_struct(obj: Any, kind: Kind, depth: int, ctx: RenderContext) -> None:
    ctx.write(ctx.paint(Role.MUTED, "#" + type_name(obj)) + "\n")
    for f in struct_fields(obj):
        marker = "+" if f.exported else "-"
        ctx.write(indent(depth + 1) + ctx.paint(Role.EMPHASIS, marker) + ctx.text(escape_control(f.name)))
        ctx.write("\t" + ctx.text("=> "))
        render_value(read_field(obj, f), depth + 1, ctx)
        ctx.write("\n")
    ctx.write(indent(depth) + ctx.text("}"))


def _render_mapping(obj: Any, kind: Kind, depth: int, ctx: RenderContext) -> None:
    ctx.write(ctx.text("{") + "\n")
    try:
        for i, (key, value) in enumerate(_mapping_items(obj, ctx.options.sort_keys)):
            if i >= ctx.options.max_items:
                ctx.write(indent(depth + 1) + ctx.paint(Role.MUTED, TRUNCATED_MARKER) + "\n")
                break
            ctx.write(indent(depth + 1) + fmt_key(key, ctx.paint) + ctx.text(" => "))
            render_value(value, depth + 1, ctx)
            ctx.write("\n")
    except Exception as exc:
        _render_unreadable(obj, exc, depth + 1, ctx)
    ctx.write(indent(depth) + ctx.text("}"))


def _render_sequence(obj: Any, kind: Kind, depth: int, ctx: RenderContext) -> None:
    opening, closing = ("{", "}") if kind is Kind.SET else ("[", "]")
    values = obj
    if kind is Kind.SET and ctx.options.sort_keys:
        values = _sorted_or_given(obj)

    ctx.write(ctx.text(opening) + "\n")
    try:
        for i, value in enumerate(values):
            if i >= ctx.options.max_items:
                ctx.write(indent(depth + 1) + ctx.paint(Role.MUTED, TRUNCATED_MARKER) + "\n")
                break
            ctx.write(indent(depth + 1) + ctx.paint(Role.NUMBER, str(i)) + ctx.text(" => "))
            render_value(value, depth + 1, ctx)
            ctx.write("\n")
    except Exception as exc:
        _render_unreadable(obj, exc, depth + 1, ctx)
    ctx.write(indent(depth) + ctx.text(closing))


def _render_bytes(obj: Any, kind: Kind, depth: int, ctx: RenderContext) -> None:
    try:
        data, cap = _buffer_contents(obj)
    except ValueError:
        # released memoryview
        ctx.write(ctx.paint(Role.STRING, type_name(obj)) + ctx.paint(Role.MUTED, "(nil)"))
        return
    ctx.write(fmt_hexdump(data, depth, type_name=type_name(obj), cap=cap, paint=ctx.paint))


def _render_channel(obj: Any, ctx: RenderContext) -> None:
    name = type_name(obj)
    if channel_closed(obj):
        ctx.write(ctx.paint(Role.MUTED, name + "(nil)"))
        return
    ctx.write(ctx.paint(Role.MUTED, name) + ctx.text("(") + ctx.paint(Role.NUMBER, hex(id(obj))) + ctx.text(")"))


def _render_scalar(obj: Any, kind: Kind, depth: int, ctx: RenderContext) -> None:
    if kind is Kind.BOOL:
        ctx.write(fmt_bool(obj, ctx.paint))
    elif kind is Kind.INT:
        ctx.write(fmt_int(obj, ctx.paint))
    elif kind is Kind.FLOAT:
        ctx.write(fmt_float(obj, ctx.paint))
    elif kind is Kind.COMPLEX:
        ctx.write(fmt_complex(obj, ctx.paint))
    else:
        ctx.write(fmt_str(obj, ctx.options.max_str_len, ctx.paint))


def _render_func(obj: Any, kind: Kind, depth: int, ctx: RenderContext) -> None:
    ctx.write(ctx.paint(Role.MUTED, FUNC_PLACEHOLDER))


def _render_opaque(obj: Any, kind: Kind, depth: int, ctx: RenderContext) -> None:
    try:
        address = opaque_address(obj)
    except Exception:
        address = 0
    ctx.write(ctx.paint(Role.MUTED, f"unsafe.Pointer({hex(address)})"))


def _render_class(obj: Any, kind: Kind, depth: int, ctx: RenderContext) -> None:
    ctx.write(ctx.paint(Role.MUTED, f"<class: {class_name(obj, fully_qualified=True)}>"))


def _render_module(obj: Any, kind: Kind, depth: int, ctx: RenderContext) -> None:
    name = getattr(obj, "__name__", None)
    if not isinstance(name, str):
        name = "?"
    ctx.write(ctx.paint(Role.MUTED, f"<module: {escape_control(name)}>"))


def _render_unreadable(obj: Any, exc: Exception, depth: int, ctx: RenderContext) -> None:
    warnings.warn(
        f"Failed to read items of {type_name(obj)}: {type(exc).__name__}: {exc}",
        RuntimeWarning,
        stacklevel=2,
    )
    ctx.write(indent(depth) + ctx.paint(Role.MUTED, f"<unreadable: {type(exc).__name__}>") + "\n")


def _mapping_items(obj: Any, sort_keys: bool) -> Iterable[tuple[Any, Any]]:
    if isinstance(obj, dict):
        items: Iterable[tuple[Any, Any]] = dict.items(obj)
    else:
        items = ((key, _mapping_value(obj, key)) for key in obj)
    if sort_keys:
        items = list(items)
        try:
            items.sort(key=lambda kv: kv[0])
        except TypeError:
            pass
    return items


def _mapping_value(obj: Any, key: Any) -> Any:
    try:
        return obj[key]
    except Exception:
        return INVALID


def _sorted_or_given(values: Iterable[Any]) -> list[Any]:
    values = list(values)
    try:
        return sorted(values)
    except TypeError:
        return values


def _buffer_contents(obj: Any) -> tuple[bytes, int]:
    """Bytes and allocated capacity of a byte buffer."""
    if isinstance(obj, bytes):
        return obj, len(obj)
    if isinstance(obj, bytearray):
        return bytes(obj), obj.__alloc__()
    if isinstance(obj, memoryview):
        return obj.tobytes(), obj.nbytes
    data = obj.tobytes()
    return data, len(data)


_RENDERERS: dict[Kind, Callable[[Any, Kind, int, RenderContext], None]] = {
    Kind.POINTER: _render_unwrapped,
    Kind.INTERFACE: _render_unwrapped,
    Kind.STRUCT: _render_struct,
    Kind.MAPPING: _render_mapping,
    Kind.SEQUENCE: _render_sequence,
    Kind.SET: _render_sequence,
    Kind.BYTES: _render_bytes,
    Kind.BOOL: _render_scalar,
    Kind.INT: _render_scalar,
    Kind.FLOAT: _render_scalar,
    Kind.COMPLEX: _render_scalar,
    Kind.STRING: _render_scalar,
    Kind.FUNC: _render_func,
    Kind.OPAQUE: _render_opaque,
    Kind.CLASS: _render_class,
    Kind.MODULE: _render_module,
}

_default_dumper = Dumper()
