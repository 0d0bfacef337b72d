"""tnetstring 值后端.

编解码内核不直接构造或检查 Python 对象, 而是通过 `ValueBackend`
提供的一组固定能力访问宿主值系统. 这样解析/渲染算法只写一次,
可以复用到不同的值表示上.

内置后端:
    - `PythonBackend`: bytes/list/dict (默认).
    - `TextBackend`: 字符串负载解码为 str.
    - `PairsBackend`: 映射解码为 `Pairs`, 保留重复键和不可哈希键.
"""

import abc
from collections.abc import Iterable, Mapping
from enum import IntEnum
from typing import Any

from .exceptions import InvalidString, UnsupportedType


class Kind(IntEnum):
    """编码器可识别的七种值类型."""

    NULL = 0
    BOOL = 1
    INTEGER = 2
    FLOAT = 3
    STRING = 4
    LIST = 5
    MAPPING = 6


class ValueBackend(abc.ABC):
    """值后端接口.

    构造器和修改器仅在解码时调用, 检查器仅在编码时调用.
    构造失败时应抛出 `ValueError` (或其子类), 由解码器转换为对应的解码错误.
    """

    # --- 构造器 ---

    @abc.abstractmethod
    def make_string(self, data: bytes | memoryview) -> Any: ...

    @abc.abstractmethod
    def make_integer(self, text: bytes) -> Any: ...

    @abc.abstractmethod
    def make_float(self, text: bytes) -> Any: ...

    @abc.abstractmethod
    def null_value(self) -> Any: ...

    @abc.abstractmethod
    def true_value(self) -> Any: ...

    @abc.abstractmethod
    def false_value(self) -> Any: ...

    @abc.abstractmethod
    def new_list(self) -> Any: ...

    @abc.abstractmethod
    def new_mapping(self) -> Any: ...

    # --- 修改器 ---

    @abc.abstractmethod
    def list_append(self, lst: Any, value: Any) -> None: ...

    @abc.abstractmethod
    def mapping_insert(self, mapping: Any, key: Any, value: Any) -> None: ...

    # --- 检查器 ---

    @abc.abstractmethod
    def classify(self, value: Any) -> Kind:
        """返回值的类型, 无法识别时抛出 `UnsupportedType`."""

    @abc.abstractmethod
    def string_bytes(self, value: Any) -> bytes: ...

    @abc.abstractmethod
    def number_text(self, value: Any) -> bytes: ...

    @abc.abstractmethod
    def list_items(self, value: Any) -> Iterable[Any]: ...

    @abc.abstractmethod
    def mapping_items(self, value: Any) -> Iterable[tuple[Any, Any]]: ...


class PythonBackend(ValueBackend):
    """基于 Python 内置类型的默认后端.

    解码: 字符串 -> bytes, 列表 -> list, 映射 -> dict (重复键保留最后一个值).
    编码: 额外接受 str (UTF-8), tuple (作为列表) 以及任意 `Mapping`.
    """

    def make_string(self, data: bytes | memoryview) -> Any:
        return data

    def make_integer(self, text: bytes) -> Any:
        return int(text)

    def make_float(self, text: bytes) -> Any:
        return float(text)

    def null_value(self) -> Any:
        return None

    def true_value(self) -> Any:
        return True

    def false_value(self) -> Any:
        return False

    def new_list(self) -> Any:
        return []

    def new_mapping(self) -> Any:
        return {}

    def list_append(self, lst: Any, value: Any) -> None:
        lst.append(value)

    def mapping_insert(self, mapping: Any, key: Any, value: Any) -> None:
        mapping[self.freeze_key(key)] = value

    def freeze_key(self, key: Any) -> Any:
        """将不可哈希的键转换为可哈希的等价形式.

        - memoryview -> bytes
        - list -> tuple (递归)
        - dict -> 键值对 tuple (保持插入顺序)
        """
        if isinstance(key, memoryview):
            return key.tobytes()
        if isinstance(key, list):
            return tuple(self.freeze_key(x) for x in key)
        if isinstance(key, dict):
            return tuple(
                (self.freeze_key(k), self.freeze_key(v)) for k, v in key.items()
            )
        return key

    def classify(self, value: Any) -> Kind:
        # bool 必须先于 int 判断
        if value is None:
            return Kind.NULL
        if isinstance(value, bool):
            return Kind.BOOL
        if isinstance(value, int):
            return Kind.INTEGER
        if isinstance(value, float):
            return Kind.FLOAT
        if isinstance(value, bytes | bytearray | memoryview | str):
            return Kind.STRING
        if isinstance(value, list | tuple):
            return Kind.LIST
        if isinstance(value, Mapping):
            return Kind.MAPPING
        raise UnsupportedType(f"Cannot encode type: {type(value).__name__}")

    def string_bytes(self, value: Any) -> bytes:
        if isinstance(value, str):
            return value.encode("utf-8")
        if isinstance(value, bytearray | memoryview):
            return bytes(value)
        return value

    def number_text(self, value: Any) -> bytes:
        if isinstance(value, float):
            return float.__repr__(value).encode("ascii")
        return b"%d" % value

    def list_items(self, value: Any) -> Iterable[Any]:
        return value

    def mapping_items(self, value: Any) -> Iterable[tuple[Any, Any]]:
        return value.items()


class TextBackend(PythonBackend):
    """将字符串负载解码为 str 的后端.

    Args:
        encoding: 字符串负载的编码, 同时用于编码 str.
    """

    def __init__(self, encoding: str = "utf-8") -> None:
        self.encoding = encoding

    def make_string(self, data: bytes | memoryview) -> Any:
        try:
            return str(data, self.encoding)
        except UnicodeDecodeError as e:
            raise InvalidString(
                f"String payload is not valid {self.encoding}: {e}"
            ) from e

    def string_bytes(self, value: Any) -> bytes:
        if isinstance(value, str):
            return value.encode(self.encoding)
        return super().string_bytes(value)


class Pairs(list):
    """按出现顺序保存的映射键值对列表.

    与 dict 不同, 它保留重复键, 并允许任意值 (包括 list/dict) 作为键.
    """

    def to_dict(self) -> dict[Any, Any]:
        """转换为 dict, 重复键保留最后一个值."""
        return dict(self)


class PairsBackend(PythonBackend):
    """将映射解码为 `Pairs` 的后端.

    编码时 `Pairs` 被识别为映射, 其余类型同 `PythonBackend`.
    """

    def new_mapping(self) -> Any:
        return Pairs()

    def mapping_insert(self, mapping: Any, key: Any, value: Any) -> None:
        mapping.append((key, value))

    def classify(self, value: Any) -> Kind:
        if isinstance(value, Pairs):
            return Kind.MAPPING
        return super().classify(value)

    def mapping_items(self, value: Any) -> Iterable[tuple[Any, Any]]:
        if isinstance(value, Pairs):
            return value
        return super().mapping_items(value)
