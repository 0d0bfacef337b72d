"""tnetstring 日志记录器.

库本身不挂载任何 Handler, 由调用方决定日志输出方式.
"""

import logging

logger = logging.getLogger("tnetstring")


def _printable(chunk: bytes) -> str:
    # tnetstring 的长度前缀和标签都是 ASCII, 对照显示便于定位
    return "".join(chr(b) if 0x20 <= b < 0x7F else "." for b in chunk)


def get_hexdump(
    data: bytes | bytearray | memoryview, pos: int, window: int = 16
) -> str:
    """获取指定位置周围数据的十六进制转储.

    Args:
        data: 原始输入数据.
        pos: 关注的字节偏移 (通常是出错位置).
        window: 偏移前后各显示的字节数.

    Returns:
        形如 `位置 N 的上下文 (显示 a-b):` 的标题行, 后接十六进制与 ASCII 对照.
    """
    start = max(0, pos - window)
    end = min(len(data), pos + window)
    chunk = bytes(data[start:end])

    hex_str = chunk.hex(" ")
    return (
        f"位置 {pos} 的上下文 (显示 {start}-{end}):\n"
        f"{hex_str}\n"
        f"|{_printable(chunk)}|"
    )
