"""tnetstring 编码器实现.

该模块提供逆序写入的`DataWriter`和
用于将 Python 对象序列化为 tnetstring 的`TNetStringEncoder`.

容器的长度前缀取决于已渲染子项的总字节数. 编码器从后往前写:
先写类型标签, 再逆序写入负载, 子项写完后才写长度前缀,
最后整体反转一次得到正向输出. 整个过程只需一遍, 不需要预先计算长度.
"""

from typing import Any

from .backend import Kind
from .config import Config
from .const import (
    FALSE_PAYLOAD,
    NULL_FRAME,
    TAG_BOOL,
    TAG_FLOAT,
    TAG_INTEGER,
    TAG_LIST,
    TAG_MAPPING,
    TAG_STRING,
    TRUE_PAYLOAD,
)
from .exceptions import CircularReference, TNetStringEncodeError, UnsupportedType
from .log import logger

_REVERSED_NULL = NULL_FRAME[::-1]


class DataWriter:
    """逆序累积 tnetstring 字节的写入器."""

    __slots__ = ("_buffer",)

    _buffer: bytearray

    def __init__(self):
        self._buffer = bytearray()

    @property
    def position(self) -> int:
        """已写入的字节数."""
        return len(self._buffer)

    def get_bytes(self) -> bytes:
        """返回正向顺序的字节."""
        return bytes(self._buffer[::-1])

    def write_tag(self, tag: int) -> None:
        """写入类型标签."""
        self._buffer.append(tag)

    def write_payload(self, data: bytes) -> None:
        """逆序写入负载."""
        self._buffer += data[::-1]

    def write_length(self, size: int) -> None:
        """逆序写入 `长度:` 前缀."""
        self._buffer += (b"%d:" % size)[::-1]

    def write_scalar(self, tag: int, payload: bytes) -> None:
        """写入一个完整的标量帧."""
        self.write_tag(tag)
        self.write_payload(payload)
        self.write_length(len(payload))

    def write_null(self) -> None:
        """写入 `0:~`."""
        self._buffer += _REVERSED_NULL


class TNetStringEncoder:
    """具有循环引用检测的递归 tnetstring 编码器."""

    __slots__ = (
        "_backend",
        "_config",
        "_encoding_stack",
        "_writer",
    )

    _writer: DataWriter
    _config: Config

    def __init__(self, config: Config):
        self._config = config
        self._backend = config.backend
        self._writer = DataWriter()
        # 跟踪正在编码的容器以检测循环引用
        self._encoding_stack: set[int] = set()

    def encode(self, obj: Any) -> bytes:
        """编码入口."""
        try:
            self._encode_root(obj)
            return self._writer.get_bytes()
        except TNetStringEncodeError as e:
            logger.error("Encoding failed: %s", e)
            raise

    def _encode_root(self, obj: Any) -> None:
        try:
            self.encode_value(obj)
        except RecursionError as e:
            raise TNetStringEncodeError(
                "Nesting depth exceeds the interpreter recursion limit"
            ) from e

    def encode_value(self, value: Any) -> None:
        """将单个值的帧 (逆序) 写入缓冲区.

        Raises:
            UnsupportedType: 类型无法编码且没有 `default` 函数.
            CircularReference: 容器包含自身.
        """
        try:
            kind = self._backend.classify(value)
        except UnsupportedType:
            if self._config.default is None:
                raise
            self._encode_default(value)
            return

        writer = self._writer
        if kind is Kind.NULL:
            writer.write_null()
        elif kind is Kind.BOOL:
            writer.write_scalar(TAG_BOOL, TRUE_PAYLOAD if value else FALSE_PAYLOAD)
        elif kind is Kind.INTEGER:
            writer.write_scalar(TAG_INTEGER, self._number_text(value))
        elif kind is Kind.FLOAT:
            writer.write_scalar(TAG_FLOAT, self._number_text(value))
        elif kind is Kind.STRING:
            writer.write_scalar(TAG_STRING, self._backend.string_bytes(value))
        else:
            self._encode_container(value, kind)

    def _number_text(self, value: Any) -> bytes:
        try:
            return self._backend.number_text(value)
        except ValueError as e:
            # 如超过 int 转字符串的位数上限 (sys.set_int_max_str_digits)
            raise TNetStringEncodeError(
                f"Cannot render {type(value).__name__} as text: {e}"
            ) from e

    def _encode_default(self, value: Any) -> None:
        """通过 `default` 转换未知类型后再编码."""
        obj_id = id(value)
        if obj_id in self._encoding_stack:
            raise CircularReference(f"Circular reference in {type(value).__name__}")

        self._encoding_stack.add(obj_id)
        try:
            self.encode_value(self._config.default(value))  # type: ignore[misc]
        finally:
            self._encoding_stack.discard(obj_id)

    def _encode_container(self, value: Any, kind: Kind) -> None:
        """编码列表或映射."""
        obj_id = id(value)
        if obj_id in self._encoding_stack:
            raise CircularReference(f"Circular reference in {type(value).__name__}")

        self._encoding_stack.add(obj_id)
        try:
            writer = self._writer
            if kind is Kind.LIST:
                writer.write_tag(TAG_LIST)
                mark = writer.position
                # 逆序写入, 所以最后一个元素先写
                for item in reversed(list(self._backend.list_items(value))):
                    self.encode_value(item)
            else:
                writer.write_tag(TAG_MAPPING)
                mark = writer.position
                pairs = list(self._backend.mapping_items(value))
                if self._config.sort_keys:
                    pairs = self._sorted_pairs(pairs)
                for key, item in reversed(pairs):
                    self.encode_value(item)
                    self.encode_value(key)
            writer.write_length(writer.position - mark)
        finally:
            self._encoding_stack.discard(obj_id)

    def _sorted_pairs(self, pairs: list[tuple[Any, Any]]) -> list[tuple[Any, Any]]:
        """按键的编码字节排序, 对任意键类型都给出确定的顺序."""
        keyed = []
        for key, item in pairs:
            sub = TNetStringEncoder(self._config)
            sub._encoding_stack = self._encoding_stack
            sub.encode_value(key)
            keyed.append((sub._writer.get_bytes(), key, item))
        keyed.sort(key=lambda entry: entry[0])
        return [(key, item) for _, key, item in keyed]
