"""tnetstring 解码器实现.

该模块提供用于零复制读取的`DataReader`和
递归下降解析单个帧的`TNetStringDecoder`.
"""

from collections.abc import Callable
from re import Pattern
from typing import Any

from .config import Config
from .const import (
    COLON,
    FALSE_PAYLOAD,
    FLOAT_PATTERN,
    INTEGER_PATTERN,
    TAG_BOOL,
    TAG_FLOAT,
    TAG_INTEGER,
    TAG_LIST,
    TAG_MAPPING,
    TAG_NAMES,
    TAG_NULL,
    TAG_STRING,
    TRUE_PAYLOAD,
)
from .exceptions import (
    DepthExceeded,
    InvalidBool,
    InvalidNull,
    InvalidNumber,
    MalformedLength,
    MalformedList,
    MalformedMapping,
    TNetStringDecodeError,
    TruncatedInput,
    UnknownTag,
)
from .log import get_hexdump, logger

_DIGIT_0 = 0x30
_DIGIT_9 = 0x39


class DataReader:
    """tnetstring 二进制数据的零复制读取器.

    包装memoryview以提供顺序读取功能,而无需
    不必要时复制数据. 嵌套容器的负载由新的读取器读取,
    `base` 记录其在原始输入中的偏移, 使错误位置始终是绝对偏移.
    """

    __slots__ = ("_base", "_pos", "_view", "length")

    _view: memoryview
    _pos: int
    _base: int
    length: int

    def __init__(self, data: bytes | bytearray | memoryview, base: int = 0):
        """初始化DataReader.

        Args:
            data: 要读取的二进制数据.
            base: 该数据在原始输入中的起始偏移.
        """
        view = memoryview(data)
        if view.ndim != 1 or view.format != "B":
            view = view.cast("B")
        self._view = view
        self._pos = 0
        self._base = base
        self.length = len(view)

    @property
    def data(self) -> memoryview:
        """被读取的完整数据."""
        return self._view

    @property
    def pos(self) -> int:
        """当前读取位置在原始输入中的绝对偏移."""
        return self._base + self._pos

    @property
    def remaining(self) -> int:
        """尚未读取的字节数."""
        return self.length - self._pos

    @property
    def eof(self) -> bool:
        """检查是否到达数据末尾."""
        return self._pos >= self.length

    def read_length(self) -> int:
        """读取 `数字+冒号` 形式的长度前缀.

        Raises:
            MalformedLength: 没有数字, 数字后不是冒号, 找不到冒号或有前导零.
        """
        view = self._view
        start = self._pos
        end = start
        while end < self.length and _DIGIT_0 <= view[end] <= _DIGIT_9:
            end += 1

        if end == start:
            if start >= self.length:
                raise MalformedLength("Missing length prefix", pos=self.pos)
            raise MalformedLength(
                f"Length prefix must start with a digit, got {view[start]:#04x}",
                pos=self.pos,
            )
        if end >= self.length:
            raise MalformedLength(
                "Length prefix is not terminated by ':'", pos=self.pos
            )
        if view[end] != COLON:
            raise MalformedLength(
                f"Expected ':' after length digits, got {view[end]:#04x}",
                pos=self._base + end,
            )
        if end - start > 1 and view[start] == _DIGIT_0:
            raise MalformedLength("Length prefix has a leading zero", pos=self.pos)

        length = int(view[start:end].tobytes())
        self._pos = end + 1
        return length

    def read_bytes(self, length: int, zero_copy: bool = False) -> bytes | memoryview:
        """读取字节序列.

        Args:
            length: 要读取的字节数.
            zero_copy: 如果为True, 则返回 memoryview 切片.

        Returns:
            包含数据的bytes或memoryview.

        Raises:
            TruncatedInput: 如果没有足够的数据可用.
        """
        if self._pos + length > self.length:
            raise TruncatedInput("Not enough data to read bytes", pos=self.pos)

        start = self._pos
        self._pos += length
        view = self._view[start : self._pos]
        return view if zero_copy else view.tobytes()

    def read_u8(self) -> int:
        """读取无符号8位整数."""
        if self._pos >= self.length:
            raise TruncatedInput("Not enough data to read u8", pos=self.pos)
        val = self._view[self._pos]
        self._pos += 1
        return val

    def rest(self, zero_copy: bool = False) -> bytes | memoryview:
        """返回所有未读取的数据, 不移动指针."""
        view = self._view[self._pos :]
        return view if zero_copy else view.tobytes()


class TNetStringDecoder:
    """单个 tnetstring 帧的递归下降解码器.

    通过配置中的值后端构造结果, 自身不持有跨调用的状态.
    """

    __slots__ = (
        "_backend",
        "_max_depth",
        "_reader",
        "_zero_copy",
    )

    def __init__(self, reader: DataReader, config: Config):
        self._reader = reader
        self._backend = config.backend
        self._max_depth = config.max_depth
        self._zero_copy = config.zero_copy

    def decode(self, suppress_log: bool = False) -> Any:
        """从读取器的当前位置解码一个值.

        读取器停在该帧类型标签之后, 调用方可以继续读取剩余数据.
        """
        if not suppress_log:
            logger.debug(
                "[TNetStringDecoder] 开始解码 %d 字节", self._reader.remaining
            )

        try:
            value = self._read_root()
        except TNetStringDecodeError as e:
            if not suppress_log:
                logger.error("[TNetStringDecoder] 解码错误: %s", e)
                if e.pos is not None:
                    logger.debug(get_hexdump(self._reader.data, e.pos))
            raise

        if not suppress_log:
            logger.debug(
                "[TNetStringDecoder] 解码完成, 剩余 %d 字节", self._reader.remaining
            )
        return value

    def _read_root(self) -> Any:
        try:
            return self._read_value(self._reader, 0)
        except RecursionError as e:
            # max_depth 大于解释器递归上限时, 仍以 DepthExceeded 结束
            raise DepthExceeded(
                "Nesting depth exceeds the interpreter recursion limit"
            ) from e

    def _read_value(self, reader: DataReader, depth: int) -> Any:
        if depth > self._max_depth:
            raise DepthExceeded(
                f"Nesting depth exceeds limit {self._max_depth}", pos=reader.pos
            )

        start = reader.pos
        length = reader.read_length()
        if reader.remaining < length + 1:
            raise TruncatedInput(
                f"Frame declares {length} payload bytes plus tag, "
                f"only {reader.remaining} available",
                pos=start,
            )

        payload_pos = reader.pos
        payload = reader.read_bytes(length, zero_copy=True)
        tag = reader.read_u8()
        backend = self._backend

        if tag == TAG_STRING:
            try:
                return backend.make_string(
                    payload if self._zero_copy else payload.tobytes()
                )
            except TNetStringDecodeError as e:
                if e.pos is None:
                    e.pos = payload_pos
                raise
        if tag == TAG_INTEGER:
            return self._read_number(
                payload,
                payload_pos,
                INTEGER_PATTERN,
                backend.make_integer,
                TAG_NAMES[tag],
            )
        if tag == TAG_FLOAT:
            return self._read_number(
                payload,
                payload_pos,
                FLOAT_PATTERN,
                backend.make_float,
                TAG_NAMES[tag],
            )
        if tag == TAG_BOOL:
            if payload == TRUE_PAYLOAD:
                return backend.true_value()
            if payload == FALSE_PAYLOAD:
                return backend.false_value()
            raise InvalidBool(
                f"Invalid bool payload: {payload.tobytes()!r}", pos=payload_pos
            )
        if tag == TAG_NULL:
            if length != 0:
                raise InvalidNull(
                    f"Null payload must be empty, got {length} bytes", pos=payload_pos
                )
            return backend.null_value()
        if tag == TAG_LIST:
            return self._read_list(DataReader(payload, payload_pos), depth)
        if tag == TAG_MAPPING:
            return self._read_mapping(DataReader(payload, payload_pos), depth)

        raise UnknownTag(f"Unknown type tag: {tag:#04x}", pos=reader.pos - 1)

    def _read_number(
        self,
        payload: memoryview,
        pos: int,
        pattern: Pattern[bytes],
        make: Callable[[bytes], Any],
        kind: str,
    ) -> Any:
        """严格解析数值负载: 整个负载必须匹配语法."""
        text = payload.tobytes()
        if pattern.fullmatch(text) is None:
            raise InvalidNumber(f"Invalid {kind} payload: {text!r}", pos=pos)
        try:
            return make(text)
        except TNetStringDecodeError:
            raise
        except (ValueError, OverflowError) as e:
            # 后端构造失败 (如超出宿主整数范围)
            raise InvalidNumber(
                f"Cannot build {kind} from {text!r}: {e}", pos=pos
            ) from e

    def _read_child(
        self,
        reader: DataReader,
        depth: int,
        index: int,
        overrun_error: type[TNetStringDecodeError],
    ) -> Any:
        """读取容器负载中的一个子帧.

        容器负载的长度已被校验, 子帧越界说明容器本身格式错误.
        """
        try:
            return self._read_value(reader, depth + 1)
        except TruncatedInput as e:
            raise overrun_error(
                f"Element overruns the enclosing payload: {e}", pos=e.pos, loc=[index]
            ) from e
        except TNetStringDecodeError as e:
            e.loc.insert(0, index)
            raise

    def _read_list(self, reader: DataReader, depth: int) -> Any:
        result = self._backend.new_list()
        index = 0
        while not reader.eof:
            item = self._read_child(reader, depth, index, MalformedList)
            self._backend.list_append(result, item)
            index += 1
        return result

    def _read_mapping(self, reader: DataReader, depth: int) -> Any:
        result = self._backend.new_mapping()
        index = 0
        while not reader.eof:
            key = self._read_child(reader, depth, index, MalformedMapping)
            if reader.eof:
                raise MalformedMapping(
                    "Mapping key has no matching value", pos=reader.pos, loc=[index]
                )
            value = self._read_child(reader, depth, index, MalformedMapping)
            self._backend.mapping_insert(result, key, value)
            index += 1
        return result
