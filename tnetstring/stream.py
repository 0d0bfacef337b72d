"""tnetstring 流式处理模块.

该模块提供用于网络协议和流处理的 Writer 和 Reader 类.
tnetstring 帧自带长度, 多个帧可以直接首尾相接, 不需要额外的分包头部.
Reader 只在一个帧的全部字节到达后才解码它.
"""

from collections.abc import Callable, Generator
from typing import Any

from .api import dumps
from .backend import ValueBackend
from .config import Config
from .decoder import DataReader, TNetStringDecoder
from .exceptions import MalformedLength, TruncatedInput
from .options import Option


class TNetStringWriter:
    """tnetstring 流式写入器.

    允许增量序列化多个对象到同一个缓冲区.
    """

    def __init__(
        self,
        option: Option = Option.NONE,
        default: Callable[[Any], Any] | None = None,
        backend: ValueBackend | None = None,
    ):
        """初始化流式写入器.

        Args:
            option: 序列化选项.
            default: 自定义序列化函数 (用于处理未知类型).
            backend: 值后端.
        """
        self._config = Config.from_params(
            option=option,
            backend=backend,
            default=default,
        )
        self._buffer = bytearray()

    def pack(self, obj: Any) -> None:
        """序列化对象并追加到缓冲区."""
        data = dumps(
            obj,
            option=self._config.flags,
            default=self._config.default,
            backend=self._config.backend,
        )
        self._buffer.extend(data)

    def write(self, obj: Any) -> None:
        """序列化对象并追加到缓冲区."""
        self.pack(obj)

    def pack_bytes(self, data: bytes) -> None:
        """直接追加原始字节 (应当是完整的帧)."""
        self._buffer.extend(data)

    def write_bytes(self, data: bytes) -> None:
        """直接追加原始字节."""
        self.pack_bytes(data)

    def get_buffer(self) -> bytes:
        """获取缓冲区数据的副本."""
        return bytes(self._buffer)

    def clear(self) -> None:
        """清空缓冲区."""
        self._buffer.clear()


class TNetStringReader:
    """tnetstring 流式读取器.

    通过 feed() 输入任意切分的数据, 迭代时依次产出所有已完整到达的值,
    未完整的尾部保留到下一次 feed().

    Usage:
        >>> reader = TNetStringReader()
        >>> reader.feed(received_bytes)
        >>> for obj in reader:
        ...     process(obj)
    """

    def __init__(
        self,
        option: Option = Option.NONE,
        max_buffer_size: int = 10 * 1024 * 1024,  # 10MB
        backend: ValueBackend | None = None,
        max_depth: int | None = None,
    ):
        """初始化流式读取器.

        Args:
            option: 反序列化选项. 流中解出的值不会引用内部缓冲区,
                因此 `Option.ZERO_COPY` 在这里被忽略.
            max_buffer_size: 最大缓冲区大小 (防止内存耗尽).
            backend: 值后端.
            max_depth: 最大嵌套深度.
        """
        self._config = Config.from_params(
            option=option & ~Option.ZERO_COPY,
            backend=backend,
            max_depth=max_depth,
        )
        self._buffer = bytearray()
        self._max_buffer_size = max_buffer_size

    def feed(self, data: bytes | bytearray | memoryview) -> None:
        """输入数据到内部缓冲区."""
        if len(self._buffer) + len(data) > self._max_buffer_size:
            raise BufferError("TNetStringReader buffer exceeded max size")
        self._buffer.extend(data)

    def feed_data(self, data: bytes | bytearray | memoryview) -> None:
        """输入数据到内部缓冲区."""
        self.feed(data)

    @property
    def pending(self) -> int:
        """缓冲区中尚未解码的字节数."""
        return len(self._buffer)

    def __iter__(self) -> Generator[Any, None, None]:
        """从缓冲区解析所有完整的帧.

        迭代期间 feed() 的新数据在下一次迭代时才会被解析.

        Yields:
            解析出的对象.

        Raises:
            TNetStringDecodeError: 缓冲区开头的帧格式错误.
        """
        # 快照解码, 避免 memoryview 导出期间无法修改 bytearray
        data = bytes(self._buffer)
        reader = DataReader(data)
        decoder = TNetStringDecoder(reader, self._config)
        consumed = 0
        try:
            while not reader.eof:
                try:
                    value = decoder.decode(suppress_log=True)
                except TruncatedInput:
                    break
                except MalformedLength:
                    # 只收到了长度数字, 冒号尚未到达; 前导零的前缀永远不会合法
                    tail = data[consumed:]
                    if tail.isdigit() and (len(tail) == 1 or tail[:1] != b"0"):
                        break
                    raise
                consumed = reader.pos
                yield value
        finally:
            del self._buffer[:consumed]
