"""
Object introspection for the dumper: shape classification and read-only field access.

Every node of an inspected value graph is classified into a small closed set of
shapes (`Kind`). Instance state is enumerated as a flattened list of `FieldInfo`
descriptors, each carrying the full access path from the outer object, and read
with `read_field()`, which bypasses __getattribute__, __getattr__ and properties so
private and proxied state is seen exactly as stored. Nothing here mutates the
inspected objects or consumes iterators.
"""

# Standard library -----------------------------------------------------------------------------------------------------
import array
import collections.abc as abc
import dataclasses
import functools
import inspect
import io
import queue
import sys
import types
import weakref

from dataclasses import dataclass
from enum import Enum, unique
from typing import Any

# Local ----------------------------------------------------------------------------------------------------------------
from .sentinels import INVALID


# Classes --------------------------------------------------------------------------------------------------------------

@unique
class Kind(str, Enum):
    """
    Shape categories the renderer dispatches on.
    """
    INVALID = "invalid"  # no value at all
    NIL = "nil"  # None
    BOOL = "bool"
    INT = "int"
    FLOAT = "float"
    COMPLEX = "complex"
    STRING = "string"
    BYTES = "bytes"  # bytes, bytearray, memoryview, array('B')
    SEQUENCE = "sequence"
    SET = "set"
    MAPPING = "mapping"
    STRUCT = "struct"  # instances with named fields
    POINTER = "pointer"  # weakref.ref
    INTERFACE = "interface"  # closure cell
    FUNC = "func"
    CHANNEL = "channel"  # iterators, generators, queues, streams
    OPAQUE = "opaque"  # ctypes pointers
    CLASS = "class"
    MODULE = "module"


STEP_DICT = "dict"  # instance __dict__ via object.__getattribute__
STEP_KEY = "key"  # item of the current mapping
STEP_SLOT = "slot"  # __slots__ member descriptor
STEP_INDEX = "index"  # tuple item, for namedtuple fields


@dataclass(frozen=True)
class FieldInfo:
    """
    A named field of a struct-like object.

    Attributes:
        name: Field name as stored (name-mangled private slots keep their mangled name).
        exported: False for private names (leading underscore).
        path: Accessor steps from the outer object to the field value, each a
              (step, argument) pair; see read_field().
    """
    name: str
    exported: bool
    path: tuple[tuple[str, Any], ...]


_STRUCTURAL_STR_OWNERS = frozenset({
    object, type(None), bool, int, float, complex, str, bytes, bytearray,
    list, tuple, dict, set, frozenset, types.MappingProxyType,
})

_UNTRACKED_TYPES = (tuple, frozenset, range)


# Methods --------------------------------------------------------------------------------------------------------------

def classify(obj: Any) -> Kind:
    """
    Classify an object into its rendering Kind.

    Precedence matters: bool before int, text and byte buffers before sequences,
    namedtuples before sequences, iterators before anything structural (inspecting
    an iterator must never consume it).

    Examples:
        >>> classify(True)
        <Kind.BOOL: 'bool'>
        >>> classify(b"abc")
        <Kind.BYTES: 'bytes'>
        >>> classify({"a": 1})
        <Kind.MAPPING: 'mapping'>
    """
    if obj is INVALID:
        return Kind.INVALID
    if obj is None:
        return Kind.NIL
    # Proxies forward every lookup, __class__ included, to a referent that may be gone
    if isinstance(obj, weakref.ProxyTypes):
        return Kind.NIL if proxy_dead(obj) else Kind.CHANNEL
    if isinstance(obj, bool):
        return Kind.BOOL
    if isinstance(obj, int):
        return Kind.INT
    if isinstance(obj, float):
        return Kind.FLOAT
    if isinstance(obj, complex):
        return Kind.COMPLEX
    if isinstance(obj, str):
        return Kind.STRING
    if is_bytes_like(obj):
        return Kind.BYTES
    if isinstance(obj, type):
        return Kind.CLASS
    if isinstance(obj, types.ModuleType):
        return Kind.MODULE
    if isinstance(obj, weakref.ref):
        return Kind.POINTER
    if isinstance(obj, types.CellType):
        return Kind.INTERFACE
    if _is_opaque(obj):
        return Kind.OPAQUE
    if _is_channel(obj):
        return Kind.CHANNEL
    if inspect.isroutine(obj) or isinstance(obj, functools.partial):
        return Kind.FUNC
    if is_namedtuple(obj):
        return Kind.STRUCT
    if isinstance(obj, abc.Mapping):
        return Kind.MAPPING
    if isinstance(obj, abc.Set):
        return Kind.SET
    if isinstance(obj, (abc.Sequence, abc.ValuesView)):
        return Kind.SEQUENCE
    return Kind.STRUCT


def is_bytes_like(obj: Any) -> bool:
    """True for buffers rendered as a hex dump."""
    if isinstance(obj, (bytes, bytearray, memoryview)):
        return True
    return isinstance(obj, array.array) and obj.typecode == "B"


def is_namedtuple(obj: Any) -> bool:
    fields = getattr(type(obj), "_fields", None)
    return isinstance(obj, tuple) and isinstance(fields, tuple)


def proxy_dead(obj: Any) -> bool:
    """True for a weakref.proxy whose referent has been collected."""
    try:
        obj.__class__
    except ReferenceError:
        return True
    except Exception:
        return False
    return False


def is_nil(obj: Any, kind: Kind) -> bool:
    """
    True when a node holds no referent: None, a dead weak reference or proxy, an empty cell.
    """
    if kind is Kind.NIL:
        return True
    if kind is Kind.POINTER:
        return obj() is None
    if kind is Kind.INTERFACE:
        try:
            obj.cell_contents
        except ValueError:
            return True
    return False


def is_trackable(obj: Any, kind: Kind) -> bool:
    """
    True for nodes registered in the reference table before descending.

    Only shapes that recurse are tracked. Plain tuples, frozensets and ranges are left
    out: they cannot close a cycle on their own and the interpreter freely shares
    equal instances of them, which would print misleading back-references.
    """
    if kind not in (Kind.STRUCT, Kind.MAPPING, Kind.SEQUENCE, Kind.SET):
        return False
    return type(obj) not in _UNTRACKED_TYPES


def unwrap(obj: Any, kind: Kind) -> Any:
    """Referent of a POINTER or INTERFACE node (one level only)."""
    if kind is Kind.POINTER:
        return obj()
    if kind is Kind.INTERFACE:
        try:
            return obj.cell_contents
        except ValueError:
            return None
    raise TypeError(f"cannot unwrap a {kind.value} node")


def has_own_str(obj: Any) -> bool:
    """
    True when the object's class supplies its own textual form.

    The nearest class in the MRO defining __str__ decides: builtin bases whose __str__
    is just the structural repr (object, int, str, list, dict, ...) do not count.
    """
    for klass in type(obj).__mro__:
        if "__str__" in vars(klass):
            return klass not in _STRUCTURAL_STR_OWNERS
    return False


def as_stringer(obj: Any) -> str | None:
    """
    The object's own string form, or None when it has none.

    Never invoked on None or INVALID. A __str__ that raises or returns a non-str is
    treated as absent so the caller falls back to structural rendering.
    """
    if obj is None or obj is INVALID or not has_own_str(obj):
        return None
    try:
        text = str(obj)
    except Exception:
        return None
    return text if isinstance(text, str) else None


def channel_closed(obj: Any) -> bool:
    """
    True for a channel-like handle that can no longer produce values.

    Closed streams and finished generators, coroutines and async generators count as
    closed; other iterators and queues are always open.
    """
    if isinstance(obj, weakref.ProxyTypes):
        return proxy_dead(obj)
    if isinstance(obj, io.IOBase):
        try:
            return bool(obj.closed)
        except Exception:
            return False
    if inspect.isgenerator(obj):
        return obj.gi_frame is None
    if inspect.iscoroutine(obj):
        return obj.cr_frame is None
    if inspect.isasyncgen(obj):
        return obj.ag_frame is None
    return False


def opaque_address(obj: Any) -> int:
    """Raw address held by a ctypes pointer-like object, 0 for NULL."""
    import ctypes

    if isinstance(obj, ctypes.c_void_p):
        return obj.value or 0
    return ctypes.cast(obj, ctypes.c_void_p).value or 0


def struct_fields(obj: Any) -> list[FieldInfo]:
    """
    Flattened field list of a struct-like object.

    Order: namedtuple fields, dataclass fields in declaration order, __slots__ members of
    the whole MRO base-first, then any remaining instance __dict__ entries. Each name
    appears once. Fields inherited from base classes are listed on the object itself with
    the path that reaches them, never by position, so a subclass adding or shadowing
    fields cannot shift the pairing of names and values.

    Examples:
        >>> class Point:
        ...     def __init__(self):
        ...         self.x, self._y = 1, 2
        >>> [(f.name, f.exported) for f in struct_fields(Point())]
        [('x', True), ('_y', False)]
    """
    cls = type(obj)
    fields: list[FieldInfo] = []
    seen: set[str] = set()

    def add(name: str, path: tuple[tuple[str, Any], ...]) -> None:
        if name in seen:
            return
        seen.add(name)
        fields.append(FieldInfo(name=name, exported=not name.startswith("_"), path=path))

    dict_path = ((STEP_DICT, "__dict__"),)

    if is_namedtuple(obj):
        for index, name in enumerate(cls._fields):
            add(name, ((STEP_INDEX, index),))

    slots = _slot_descriptors(cls)

    if dataclasses.is_dataclass(cls):
        for f in dataclasses.fields(cls):
            if f.name in slots:
                add(f.name, ((STEP_SLOT, slots[f.name]),))
            else:
                add(f.name, dict_path + ((STEP_KEY, f.name),))

    for name, descriptor in slots.items():
        add(name, ((STEP_SLOT, descriptor),))

    instance_dict = _instance_dict(obj)
    if instance_dict is not None:
        for key in list(instance_dict):
            if isinstance(key, str):
                add(key, dict_path + ((STEP_KEY, key),))

    return fields


def read_field(obj: Any, field: FieldInfo) -> Any:
    """
    Read a field by walking its access path.

    Reads the stored value without going through __getattribute__, __getattr__ or
    descriptors other than the slot itself, and without copying or mutating anything.
    Returns INVALID when any step cannot be read (e.g. an unset slot).
    """
    current = obj
    for step, arg in field.path:
        try:
            if step == STEP_DICT:
                current = object.__getattribute__(current, arg)
            elif step == STEP_KEY:
                current = dict.__getitem__(current, arg) if isinstance(current, dict) else current[arg]
            elif step == STEP_SLOT:
                current = arg.__get__(current, type(current))
            elif step == STEP_INDEX:
                current = tuple.__getitem__(current, arg)
            else:
                return INVALID
        except Exception:
            return INVALID
    return current


# Private Methods ------------------------------------------------------------------------------------------------------

def _instance_dict(obj: Any) -> abc.Mapping | None:
    try:
        instance_dict = object.__getattribute__(obj, "__dict__")
    except (AttributeError, TypeError):
        return None
    return instance_dict if isinstance(instance_dict, abc.Mapping) else None


def _slot_descriptors(cls: type) -> dict[str, Any]:
    """Member descriptors of all __slots__ in the MRO, base classes first."""
    descriptors: dict[str, Any] = {}
    for klass in reversed(cls.__mro__):
        slots = vars(klass).get("__slots__", ())
        if isinstance(slots, str):
            slots = (slots,)
        for name in slots:
            if name in ("__dict__", "__weakref__"):
                continue
            stored = _mangle(klass, name)
            descriptor = vars(klass).get(stored)
            if isinstance(descriptor, types.MemberDescriptorType):
                descriptors[stored] = descriptor
    return descriptors


def _mangle(klass: type, name: str) -> str:
    """Stored attribute name of a slot, applying private name mangling."""
    if name.startswith("__") and not name.endswith("__"):
        return f"_{klass.__name__.lstrip('_')}{name}"
    return name


def _is_channel(obj: Any) -> bool:
    if isinstance(obj, (abc.Iterator, abc.AsyncIterator, abc.Coroutine, io.IOBase)):
        return True
    if isinstance(obj, (queue.Queue, queue.SimpleQueue)):
        return True
    # Modules not imported yet cannot have produced instances
    asyncio = sys.modules.get("asyncio")
    if asyncio is not None and isinstance(obj, asyncio.Queue):
        return True
    mp_queues = sys.modules.get("multiprocessing.queues")
    if mp_queues is not None and isinstance(obj, (mp_queues.Queue, mp_queues.SimpleQueue)):
        return True
    return False


def _is_opaque(obj: Any) -> bool:
    ctypes = sys.modules.get("ctypes")
    if ctypes is None:
        return False
    return isinstance(obj, (ctypes.c_void_p, ctypes._Pointer))
