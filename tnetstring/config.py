"""tnetstring 配置对象."""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from .backend import PythonBackend, ValueBackend
from .const import DEFAULT_MAX_DEPTH
from .options import Option


@dataclass(frozen=True)
class Config:
    """tnetstring 序列化/反序列化配置 (不可变).

    这是所有配置的统一容器, 在 API 入口层创建,
    然后传递给 Encoder/Decoder 内核.

    Attributes:
        flags: 选项标志 (IntFlag).
        max_depth: 允许的最大嵌套深度.
        backend: 构造/检查宿主值的后端.
        default: 编码无法识别的类型时调用的转换函数.
    """

    flags: Option = Option.NONE
    max_depth: int = DEFAULT_MAX_DEPTH
    backend: ValueBackend = field(default_factory=PythonBackend)
    default: Callable[[Any], Any] | None = None

    @classmethod
    def from_params(
        cls,
        option: Option = Option.NONE,
        max_depth: int | None = None,
        backend: ValueBackend | None = None,
        default: Callable[[Any], Any] | None = None,
    ) -> "Config":
        """从参数构建配置对象.

        Args:
            option: Option 枚举.
            max_depth: 最大嵌套深度, None 表示使用默认值.
            backend: 值后端, None 表示使用 `PythonBackend`.
            default: 未知类型的转换函数.

        Returns:
            Config: 配置对象.
        """
        if max_depth is not None and max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {max_depth}")

        return cls(
            flags=option,
            max_depth=DEFAULT_MAX_DEPTH if max_depth is None else max_depth,
            backend=backend if backend is not None else PythonBackend(),
            default=default,
        )

    @property
    def sort_keys(self) -> bool:
        """是否按规范键序写出映射."""
        return bool(self.flags & Option.SORT_KEYS)

    @property
    def zero_copy(self) -> bool:
        """是否使用零复制模式."""
        return bool(self.flags & Option.ZERO_COPY)
