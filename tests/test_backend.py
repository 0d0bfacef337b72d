"""测试值后端."""

from decimal import Decimal, InvalidOperation
from typing import Any

import pytest

from tnetstring import (
    InvalidNumber,
    InvalidString,
    Kind,
    Pairs,
    PairsBackend,
    PythonBackend,
    TextBackend,
    UnsupportedType,
    ValueBackend,
    dumps,
    loads,
)


# --- PythonBackend ---


@pytest.mark.parametrize(
    ("value", "kind"),
    [
        (None, Kind.NULL),
        (True, Kind.BOOL),
        (False, Kind.BOOL),
        (0, Kind.INTEGER),
        (1.0, Kind.FLOAT),
        (b"", Kind.STRING),
        (bytearray(), Kind.STRING),
        (memoryview(b""), Kind.STRING),
        ("", Kind.STRING),
        ([], Kind.LIST),
        ((), Kind.LIST),
        ({}, Kind.MAPPING),
    ],
)
def test_python_classify(value: Any, kind: Kind) -> None:
    assert PythonBackend().classify(value) is kind


def test_python_classify_unsupported() -> None:
    with pytest.raises(UnsupportedType, match="complex"):
        PythonBackend().classify(1j)


def test_python_freeze_key() -> None:
    """不可哈希的键被递归冻结."""
    backend = PythonBackend()

    assert backend.freeze_key(memoryview(b"k")) == b"k"
    assert backend.freeze_key([1, [2]]) == (1, (2,))
    assert backend.freeze_key({b"a": [1]}) == ((b"a", (1,)),)
    assert backend.freeze_key(b"plain") == b"plain"


def test_python_mapping_key_as_mapping() -> None:
    """映射作为键时被冻结为键值对 tuple."""
    inner = b"1:a,1:1#"
    key = b"%d:%s}" % (len(inner), inner)
    payload = key + b"0:~"
    data = b"%d:%s}" % (len(payload), payload)

    assert loads(data) == {((b"a", 1),): None}


def test_python_tuple_encodes_as_list() -> None:
    assert dumps((1, 2)) == dumps([1, 2])
    assert loads(dumps((1, 2))) == [1, 2]


def test_python_number_text() -> None:
    backend = PythonBackend()

    assert backend.number_text(-7) == b"-7"
    assert backend.number_text(2.5) == b"2.5"
    assert backend.number_text(float("nan")) == b"nan"


# --- TextBackend ---


def test_text_backend_decodes_str() -> None:
    payload = b"6:h\xc3\xa9llo,1:1#"
    data = b"%d:%s]" % (len(payload), payload)

    assert loads(data, backend=TextBackend()) == ["héllo", 1]


def test_text_backend_mapping_keys() -> None:
    assert loads(b"8:1:k,1:v,}", backend=TextBackend()) == {"k": "v"}


def test_text_backend_invalid_utf8() -> None:
    """无法按指定编码解码的字符串负载抛出 InvalidString, 并带有负载位置."""
    payload = b"2:\xff\xfe,"
    data = b"%d:%s]" % (len(payload), payload)

    with pytest.raises(InvalidString) as exc_info:
        loads(data, backend=TextBackend())

    assert exc_info.value.pos == 4
    assert exc_info.value.loc == [0]


def test_text_backend_custom_encoding() -> None:
    backend = TextBackend("latin-1")

    assert loads(b"1:\xe9,", backend=backend) == "é"
    assert dumps("é", backend=backend) == b"1:\xe9,"


def test_text_backend_round_trip() -> None:
    value = {"name": "张三", "tags": ["a", "b"], "n": 3}
    backend = TextBackend()

    assert loads(dumps(value, backend=backend), backend=backend) == value


# --- PairsBackend ---


def test_pairs_backend_keeps_duplicates() -> None:
    payload = b"1:k,1:1#1:k,1:2#"
    data = b"%d:%s}" % (len(payload), payload)

    value = loads(data, backend=PairsBackend())

    assert isinstance(value, Pairs)
    assert value == [(b"k", 1), (b"k", 2)]
    assert value.to_dict() == {b"k": 2}


def test_pairs_backend_unhashable_keys() -> None:
    """Pairs 不要求键可哈希, 列表键保持为 list."""
    payload = b"4:1:1#]1:v,"
    data = b"%d:%s}" % (len(payload), payload)

    assert loads(data, backend=PairsBackend()) == [([1], b"v")]


def test_pairs_backend_round_trip() -> None:
    """Pairs 编码为映射, 重复键和顺序都被保留."""
    backend = PairsBackend()
    value = Pairs([(b"b", 1), (b"a", 2), (b"b", 3)])

    encoded = dumps(value, backend=backend)

    assert encoded == b"24:1:b,1:1#1:a,1:2#1:b,1:3#}"
    assert loads(encoded, backend=backend) == value


def test_pairs_backend_encodes_dict() -> None:
    assert dumps({b"a": 1}, backend=PairsBackend()) == b"8:1:a,1:1#}"


def test_pairs_without_backend_is_list() -> None:
    """默认后端把 Pairs 当作普通列表."""
    assert loads(dumps(Pairs([(1, 2)]))) == [[1, 2]]


# --- 自定义后端 ---


class DecimalBackend(PythonBackend):
    """把浮点负载解析为 Decimal 的后端."""

    def make_float(self, text: bytes) -> Any:
        try:
            return Decimal(text.decode("ascii"))
        except InvalidOperation as e:
            raise ValueError(str(e)) from e


class BoundedIntBackend(PythonBackend):
    """只接受 32 位整数的后端."""

    def make_integer(self, text: bytes) -> Any:
        value = int(text)
        if not -(2**31) <= value < 2**31:
            raise OverflowError("integer out of 32-bit range")
        return value


def test_custom_backend_make_float() -> None:
    assert loads(b"4:0.10^", backend=DecimalBackend()) == Decimal("0.10")


def test_custom_backend_overflow() -> None:
    """后端构造失败被转换为 InvalidNumber."""
    backend = BoundedIntBackend()

    assert loads(b"10:2147483647#", backend=backend) == 2**31 - 1
    with pytest.raises(InvalidNumber, match="32-bit"):
        loads(b"10:2147483648#", backend=backend)


def test_backend_is_abstract() -> None:
    """ValueBackend 不完整实现时无法实例化."""

    class Incomplete(ValueBackend):
        def make_string(self, data):
            return data

    with pytest.raises(TypeError):
        Incomplete()  # type: ignore[abstract]
