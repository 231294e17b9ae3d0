"""Tests for accessor path resolution."""

import pytest

from fixturekit.getters import NotAGetterError, getter, resolve_getter


class Bar:
    def Value5(self) -> int:
        return 5


class Foo:
    def __init__(self) -> None:
        self.b = Bar()
        self.calls: list[str] = []
        self.plain = 7

    def Value1(self) -> int:
        return 1

    def Value4(self) -> Bar:
        return self.b

    def GetterWithArg(self, arg: str) -> bool:
        self.calls.append("GetterWithArg")
        return False

    def NotGetter(self) -> None:
        self.calls.append("NotGetter")

    def WithDefault(self, scale: int = 2) -> int:
        return 10 * scale

    @property
    def length(self) -> int:
        self.calls.append("length")
        return 42


class Packet:
    __getters__ = {"Checksum": lambda packet: 0xBEEF}

    @getter("PacketType")
    def packet_type(self) -> int:
        return 3

    @getter()
    def payload(self) -> bytes:
        return b"\x01"


class SubPacket(Packet):
    pass


# --- failures ---


def test_missing_member():
    with pytest.raises(NotAGetterError, match="bar is not a method"):
        resolve_getter("bar", Foo())


def test_member_requiring_argument_not_invoked():
    foo = Foo()
    with pytest.raises(NotAGetterError, match="does not appear to be a getter"):
        resolve_getter("GetterWithArg", foo)
    assert foo.calls == []


def test_member_returning_nothing_not_invoked():
    foo = Foo()
    with pytest.raises(NotAGetterError, match="does not appear to be a getter"):
        resolve_getter("NotGetter", foo)
    assert foo.calls == []


def test_plain_attribute_is_not_a_getter():
    with pytest.raises(NotAGetterError, match="plain is not a method"):
        resolve_getter("plain", Foo())


def test_error_carries_segment_and_object():
    foo = Foo()
    with pytest.raises(NotAGetterError) as exc_info:
        resolve_getter("Value4.Missing", foo)
    assert exc_info.value.name == "Missing"
    assert exc_info.value.obj is foo.b


def test_not_a_getter_is_lookup_error():
    with pytest.raises(LookupError):
        resolve_getter("nope", Foo())


# --- successful resolution ---


def test_simple_getter():
    assert resolve_getter("Value1", Foo())() == 1


def test_getter_with_default_argument():
    assert resolve_getter("WithDefault", Foo())() == 20


def test_chained_getter():
    assert resolve_getter("Value4.Value5", Foo())() == 5


def test_property_resolved_without_reading_it():
    foo = Foo()
    accessor = resolve_getter("length", foo)
    assert foo.calls == []
    assert accessor() == 42
    assert foo.calls == ["length"]


def test_builtin_method():
    assert resolve_getter("upper", "abc")() == "ABC"


def test_registered_getters():
    packet = Packet()
    assert resolve_getter("PacketType", packet)() == 3
    assert resolve_getter("payload", packet)() == b"\x01"
    assert resolve_getter("Checksum", packet)() == 0xBEEF


def test_registered_getters_are_inherited():
    assert resolve_getter("PacketType", SubPacket())() == 3


class Registers:
    __getters__ = {
        "Status": lambda regs: 1,
        "Scaled": lambda regs, factor: 2 * factor,
    }

    def __init__(self) -> None:
        self.calls: list[str] = []

    @getter("Field")
    def field(self, index: int) -> int:
        self.calls.append("field")
        return index

    @getter("Reset")
    def reset(self) -> None:
        self.calls.append("reset")


# --- registered getters are checked like plain methods ---


def test_registered_method_requiring_argument_not_invoked():
    regs = Registers()
    with pytest.raises(NotAGetterError, match="Field does not appear to be a getter"):
        resolve_getter("Field", regs)
    assert regs.calls == []


def test_registered_method_returning_nothing_not_invoked():
    regs = Registers()
    with pytest.raises(NotAGetterError, match="Reset does not appear to be a getter"):
        resolve_getter("Reset", regs)
    assert regs.calls == []


def test_getters_mapping_entry_requiring_argument():
    with pytest.raises(NotAGetterError, match="Scaled does not appear to be a getter"):
        resolve_getter("Scaled", Registers())
    assert resolve_getter("Status", Registers())() == 1
