"""tnetstring 特定的异常类.

该模块为 tnetstring 库定义了异常层次结构.
解码错误与编码错误各有一个基类, 具体的语法违规由子类区分.
"""


class TNetStringError(Exception):
    """所有 tnetstring 异常的基类."""

    pass


class TNetStringDecodeError(TNetStringError):
    """反序列化失败时抛出.

    Case:
        - 长度前缀格式错误.
        - 输入数据被截断.
        - 负载内容与类型标签不符.
    """

    def __init__(
        self,
        msg: str,
        pos: int | None = None,
        loc: list[str | int] | None = None,
    ) -> None:
        """初始化解码错误.

        Args:
            msg: 错误描述信息.
            pos: 错误发生处在输入中的绝对字节偏移.
            loc: 错误发生的位置路径 (列表索引或映射键值对序号).
        """
        super().__init__(msg)
        self.pos = pos
        self.loc = loc or []

    def __str__(self) -> str:
        base_msg = super().__str__()
        if self.loc:
            # 格式化为 dotted path
            loc_str = ".".join(str(x) for x in self.loc)
            return f"{base_msg} (at {loc_str})"
        return base_msg


class MalformedLength(TNetStringDecodeError):
    """长度前缀不是 `数字+冒号` 的形式."""

    pass


class TruncatedInput(TNetStringDecodeError):
    """输入数据不足以容纳声明长度的负载和类型标签.

    在流式读取时表示需要更多数据才能完成解析。
    """

    pass


class InvalidNumber(TNetStringDecodeError, ValueError):
    """整数或浮点数负载无法被完整解析."""

    pass


class InvalidBool(TNetStringDecodeError):
    """布尔负载不是 `true` 或 `false`."""

    pass


class InvalidNull(TNetStringDecodeError):
    """null 的负载长度不为 0."""

    pass


class InvalidString(TNetStringDecodeError):
    """字符串负载无法按后端要求的编码解码."""

    pass


class MalformedList(TNetStringDecodeError):
    """列表负载中的元素越过了列表的边界."""

    pass


class MalformedMapping(TNetStringDecodeError):
    """映射负载中的键值对不完整或越界."""

    pass


class UnknownTag(TNetStringDecodeError):
    """类型标签不属于已知的七种类型."""

    pass


class TrailingData(TNetStringDecodeError):
    """`loads` 解析完一个值后仍有剩余数据."""

    pass


class DepthExceeded(TNetStringDecodeError):
    """嵌套深度超过了配置的上限."""

    pass


class TNetStringEncodeError(TNetStringError):
    """序列化失败时抛出.

    Case:
        - 值的类型不属于支持的七种类型.
        - 循环引用.
    """

    pass


class UnsupportedType(TNetStringEncodeError, TypeError):
    """值的类型无法编码."""

    pass


class CircularReference(TNetStringEncodeError, ValueError):
    """容器直接或间接地包含了自身."""

    pass


Error = TNetStringError
LoadError = TNetStringDecodeError
DumpError = TNetStringEncodeError
