"""tnetstring API模块.

提供用于 tnetstring 序列化和反序列化的高级接口
`dumps`, `loads`, `pop`, `dump`, `load`.
"""

from collections.abc import Callable
from typing import IO, Any

from .backend import ValueBackend
from .config import Config
from .decoder import DataReader, TNetStringDecoder
from .encoder import TNetStringEncoder
from .exceptions import TrailingData, TruncatedInput
from .options import Option

Buffer = bytes | bytearray | memoryview


def _check_buffer(data: Any) -> None:
    if not isinstance(data, bytes | bytearray | memoryview):
        raise TypeError(
            f"tnetstring data must be a bytes-like object, not {type(data).__name__}"
        )


def dumps(
    obj: Any,
    option: Option = Option.NONE,
    default: Callable[[Any], Any] | None = None,
    *,
    backend: ValueBackend | None = None,
) -> bytes:
    """序列化对象为 tnetstring 字节数据.

    Args:
        obj: 要序列化的 Python 对象.
            默认后端支持 None, bool, int, float, bytes, str, list, tuple 和 dict.
        option: 序列化选项 (如 `Option.SORT_KEYS`).
        default: 自定义序列化函数, 用于处理无法默认序列化的类型.
            函数签名应为 `def default(obj: Any) -> Any`.
        backend: 值后端, 默认为 `PythonBackend`.

    Returns:
        bytes: 序列化后的二进制数据.

    Raises:
        UnsupportedType: 对象类型无法编码.
        CircularReference: 容器包含自身.

    Examples:
        >>> dumps([12345, True, 0])
        b'19:5:12345#4:true!1:0#]'
    """
    config = Config.from_params(option=option, backend=backend, default=default)
    return TNetStringEncoder(config).encode(obj)


def dump(
    obj: Any,
    fp: IO[bytes],
    option: Option = Option.NONE,
    default: Callable[[Any], Any] | None = None,
    *,
    backend: ValueBackend | None = None,
) -> None:
    """序列化对象为 tnetstring 字节并写入文件.

    Args:
        obj: 要序列化的对象.
        fp: 文件类对象, 必须实现 `write(bytes)` 方法.
        option: 序列化选项.
        default: 未知类型的默认处理函数.
        backend: 值后端.
    """
    fp.write(dumps(obj, option=option, default=default, backend=backend))


def pop(
    data: Buffer,
    option: Option = Option.NONE,
    *,
    backend: ValueBackend | None = None,
    max_depth: int | None = None,
) -> tuple[Any, bytes | memoryview]:
    """从数据开头解析一个 tnetstring, 并返回剩余数据.

    Args:
        data: 输入的二进制数据, 可以包含多个连续的帧.
        option: 反序列化选项. `Option.ZERO_COPY` 时剩余数据为 memoryview.
        backend: 值后端.
        max_depth: 最大嵌套深度.

    Returns:
        (value, remainder): 解析出的值和未消耗的字节.

    Raises:
        TNetStringDecodeError: 数据格式错误.

    Examples:
        >>> pop(b"5:12345#3:abc,")
        (12345, b'3:abc,')
    """
    _check_buffer(data)
    config = Config.from_params(option=option, backend=backend, max_depth=max_depth)
    reader = DataReader(data)
    value = TNetStringDecoder(reader, config).decode()
    return value, reader.rest(config.zero_copy)


def loads(
    data: Buffer,
    option: Option = Option.NONE,
    *,
    backend: ValueBackend | None = None,
    max_depth: int | None = None,
) -> Any:
    """反序列化恰好一个 tnetstring.

    Args:
        data: 输入的二进制数据 (bytes, bytearray 或 memoryview).
        option: 反序列化选项 (如 `Option.ZERO_COPY`).
        backend: 值后端. 例如 `TextBackend()` 将字符串解码为 str,
            `PairsBackend()` 将映射解码为保留重复键的 `Pairs`.
        max_depth: 最大嵌套深度, 默认为 `DEFAULT_MAX_DEPTH`.

    Returns:
        解析后的对象.

    Raises:
        TrailingData: 解析完一个值后仍有剩余数据.
        TNetStringDecodeError: 数据格式错误.

    Examples:
        >>> loads(b"11:hello world,")
        b'hello world'
    """
    _check_buffer(data)
    config = Config.from_params(option=option, backend=backend, max_depth=max_depth)
    reader = DataReader(data)
    value = TNetStringDecoder(reader, config).decode()
    if not reader.eof:
        raise TrailingData(
            f"{reader.remaining} bytes of trailing data after value", pos=reader.pos
        )
    return value


def _read_frame(fp: IO[bytes]) -> bytes:
    """从文件读取恰好一个帧的原始字节."""
    prefix = bytearray()
    while True:
        c = fp.read(1)
        if not c:
            raise TruncatedInput(
                "Unexpected end of file in length prefix", pos=len(prefix)
            )
        prefix += c
        if not c.isdigit():
            break

    # 校验前缀 (冒号, 前导零等), 错误由 DataReader 抛出
    length = DataReader(prefix).read_length()
    body = fp.read(length + 1)
    if len(body) < length + 1:
        raise TruncatedInput(
            f"Unexpected end of file: expected {length + 1} bytes, got {len(body)}",
            pos=len(prefix) + len(body),
        )
    return bytes(prefix) + body


def load(
    fp: IO[bytes],
    option: Option = Option.NONE,
    *,
    backend: ValueBackend | None = None,
    max_depth: int | None = None,
) -> Any:
    """从文件读取并反序列化一个 tnetstring.

    只读取该帧的字节, 文件指针停在下一帧的开头,
    因此可以连续调用以读取多个帧.

    Args:
        fp: 打开的二进制文件对象.
        option: 反序列化选项.
        backend: 值后端.
        max_depth: 最大嵌套深度.

    Returns:
        解析后的对象.
    """
    return loads(_read_frame(fp), option=option, backend=backend, max_depth=max_depth)
