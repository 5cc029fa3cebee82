#
# Vardump - Introspection Tests
#

# Standard library -----------------------------------------------------------------------------------------------------
import array
import asyncio
import collections
import ctypes
import functools
import gc
import io
import queue
import types
import weakref

from dataclasses import dataclass

# Third-party ----------------------------------------------------------------------------------------------------------
import pytest
from frozendict import frozendict

# Local ----------------------------------------------------------------------------------------------------------------
from vardump.abc import (
    Kind,
    as_stringer,
    channel_closed,
    classify,
    has_own_str,
    is_nil,
    is_trackable,
    read_field,
    struct_fields,
    unwrap,
)
from vardump.sentinels import INVALID


# Classes --------------------------------------------------------------------------------------------------------------

class Plain:
    def __init__(self):
        self.a = 1
        self._b = 2


@dataclass
class Record:
    id: int
    label: str = "x"


class SlotBase:
    __slots__ = ("base",)


class SlotChild(SlotBase):
    __slots__ = ("child", "__hidden")


class Shadow(Plain):
    def __init__(self):
        super().__init__()
        self.a = "shadowed"
        self.c = 3


class Hybrid(SlotBase):
    """Slots from the base, __dict__ from the subclass."""

    def __init__(self):
        self.base = "b"
        self.extra = "e"


class Texty:
    def __str__(self):
        return "texty"


class WrongStr:
    def __str__(self):
        return 42


class Bag(list):
    """Weak-referenceable list."""


Pair = collections.namedtuple("Pair", "left right")


# Tests ----------------------------------------------------------------------------------------------------------------

class TestClassify:
    @pytest.mark.parametrize(
        "value, kind",
        [
            pytest.param(INVALID, Kind.INVALID, id="invalid"),
            pytest.param(None, Kind.NIL, id="none"),
            pytest.param(True, Kind.BOOL, id="bool"),
            pytest.param(1, Kind.INT, id="int"),
            pytest.param(1.0, Kind.FLOAT, id="float"),
            pytest.param(1j, Kind.COMPLEX, id="complex"),
            pytest.param("s", Kind.STRING, id="str"),
            pytest.param(b"b", Kind.BYTES, id="bytes"),
            pytest.param(bytearray(), Kind.BYTES, id="bytearray"),
            pytest.param(memoryview(b""), Kind.BYTES, id="memoryview"),
            pytest.param(array.array("B", [1]), Kind.BYTES, id="array-B"),
            pytest.param([1], Kind.SEQUENCE, id="list"),
            pytest.param((1,), Kind.SEQUENCE, id="tuple"),
            pytest.param(range(2), Kind.SEQUENCE, id="range"),
            pytest.param({1}, Kind.SET, id="set"),
            pytest.param(frozenset(), Kind.SET, id="frozenset"),
            pytest.param({}, Kind.MAPPING, id="dict"),
            pytest.param(frozendict(a=1), Kind.MAPPING, id="frozendict"),
            pytest.param(types.MappingProxyType({}), Kind.MAPPING, id="mappingproxy"),
            pytest.param(Pair(1, 2), Kind.STRUCT, id="namedtuple"),
            pytest.param(Plain(), Kind.STRUCT, id="object"),
            pytest.param(int, Kind.CLASS, id="class"),
            pytest.param(io, Kind.MODULE, id="module"),
            pytest.param(len, Kind.FUNC, id="builtin"),
            pytest.param(functools.partial(len), Kind.FUNC, id="partial"),
            pytest.param(Plain().__init__, Kind.FUNC, id="bound-method"),
            pytest.param(iter([]), Kind.CHANNEL, id="iterator"),
            pytest.param(io.BytesIO(), Kind.CHANNEL, id="stream"),
            pytest.param(queue.Queue(), Kind.CHANNEL, id="queue"),
            pytest.param(asyncio.Queue(), Kind.CHANNEL, id="asyncio-queue"),
            pytest.param(ctypes.c_void_p(0), Kind.OPAQUE, id="void-pointer"),
        ],
    )
    def test_kind(self, value, kind):
        assert classify(value) is kind

    def test_pointer_and_cell(self):
        target = Plain()
        assert classify(weakref.ref(target)) is Kind.POINTER
        assert classify(types.CellType(1)) is Kind.INTERFACE

    def test_generator_is_channel(self):
        gen = (x for x in [])
        assert classify(gen) is Kind.CHANNEL


class TestNilAndTracking:
    def test_nil(self):
        assert is_nil(None, Kind.NIL)
        assert is_nil(types.CellType(), Kind.INTERFACE)
        assert not is_nil(types.CellType(0), Kind.INTERFACE)
        assert not is_nil([], Kind.SEQUENCE)

    def test_dead_reference(self):
        target = Plain()
        ref = weakref.ref(target)
        assert not is_nil(ref, Kind.POINTER)
        del target
        assert is_nil(ref, Kind.POINTER)

    @pytest.mark.parametrize(
        "value, tracked",
        [
            pytest.param([], True, id="list"),
            pytest.param({}, True, id="dict"),
            pytest.param(set(), True, id="set"),
            pytest.param(Plain(), True, id="object"),
            pytest.param(Pair(1, 2), True, id="namedtuple"),
            pytest.param((), False, id="tuple"),
            pytest.param(frozenset(), False, id="frozenset"),
            pytest.param(range(1), False, id="range"),
            pytest.param("s", False, id="str"),
            pytest.param(1, False, id="int"),
        ],
    )
    def test_trackable(self, value, tracked):
        assert is_trackable(value, classify(value)) is tracked

    def test_proxy(self):
        target = Plain()
        proxy = weakref.proxy(target)
        assert classify(proxy) is Kind.CHANNEL
        assert not channel_closed(proxy)
        del target
        gc.collect()
        assert classify(proxy) is Kind.NIL
        assert is_nil(proxy, Kind.NIL)
        assert channel_closed(proxy)

    def test_unwrap(self):
        target = Bag([1])
        assert unwrap(weakref.ref(target), Kind.POINTER) is target
        assert unwrap(types.CellType(target), Kind.INTERFACE) is target
        assert unwrap(types.CellType(), Kind.INTERFACE) is None
        with pytest.raises(TypeError):
            unwrap(target, Kind.SEQUENCE)


class TestStringer:
    def test_own_str(self):
        assert has_own_str(Texty())
        assert as_stringer(Texty()) == "texty"

    @pytest.mark.parametrize(
        "value",
        [
            pytest.param(1, id="int"),
            pytest.param("s", id="str"),
            pytest.param([1], id="list"),
            pytest.param({"a": 1}, id="dict"),
            pytest.param(Plain(), id="object"),
            pytest.param(types.MappingProxyType({}), id="mappingproxy"),
        ],
    )
    def test_structural_str_ignored(self, value):
        assert as_stringer(value) is None

    def test_non_str_result_ignored(self):
        assert as_stringer(WrongStr()) is None

    def test_never_called_on_none_or_invalid(self):
        assert as_stringer(None) is None
        assert as_stringer(INVALID) is None


class TestChannelClosed:
    def test_stream(self):
        stream = io.StringIO()
        assert not channel_closed(stream)
        stream.close()
        assert channel_closed(stream)

    def test_generator(self):
        gen = (x for x in [1])
        assert not channel_closed(gen)
        list(gen)
        assert channel_closed(gen)

    def test_coroutine(self):
        async def work():
            return 1

        coro = work()
        assert not channel_closed(coro)
        coro.close()
        assert channel_closed(coro)

    def test_queue_always_open(self):
        assert not channel_closed(queue.SimpleQueue())


class TestStructFields:
    def names(self, obj):
        return [(f.name, f.exported) for f in struct_fields(obj)]

    def test_plain(self):
        assert self.names(Plain()) == [("a", True), ("_b", False)]

    def test_dataclass_order(self):
        assert self.names(Record(1)) == [("id", True), ("label", True)]

    def test_namedtuple(self):
        pair = Pair("l", "r")
        fields = struct_fields(pair)
        assert [f.name for f in fields] == ["left", "right"]
        assert [read_field(pair, f) for f in fields] == ["l", "r"]

    def test_inherited_slots_base_first(self):
        obj = SlotChild()
        obj.base, obj.child = "b", "c"
        names = [f.name for f in struct_fields(obj)]
        assert names == ["base", "child", "_SlotChild__hidden"]
        values = {f.name: read_field(obj, f) for f in struct_fields(obj)}
        assert values["base"] == "b"
        assert values["child"] == "c"
        assert values["_SlotChild__hidden"] is INVALID

    def test_shadowed_attribute_listed_once(self):
        obj = Shadow()
        fields = struct_fields(obj)
        assert [f.name for f in fields] == ["a", "_b", "c"]
        assert read_field(obj, fields[0]) == "shadowed"

    def test_slots_and_dict(self):
        obj = Hybrid()
        fields = struct_fields(obj)
        assert [(f.name, read_field(obj, f)) for f in fields] == [("base", "b"), ("extra", "e")]

    def test_read_field_bypasses_getattribute(self):
        class Guarded:
            def __init__(self):
                self.secret = "s"

            def __getattribute__(self, name):
                if name == "secret":
                    raise AssertionError(name)
                return object.__getattribute__(self, name)

        obj = Guarded()
        (f,) = struct_fields(obj)
        assert read_field(obj, f) == "s"

    def test_read_field_does_not_mutate(self):
        obj = Plain()
        before = dict(vars(obj))
        for f in struct_fields(obj):
            read_field(obj, f)
        assert vars(obj) == before
