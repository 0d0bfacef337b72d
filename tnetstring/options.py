"""tnetstring 序列化和反序列化的配置选项.

该模块定义了用于控制 `dumps` 和 `loads` 函数行为的选项标志.
"""

from enum import IntFlag


class Option(IntFlag):
    """tnetstring 配置选项标志.

    可以使用位运算组合多个选项:
        option = Option.SORT_KEYS | Option.ZERO_COPY
    """

    # 默认行为: 按后端的迭代顺序写出映射, 解码时复制字符串
    NONE = 0x0000

    # --- 序列化选项 ---

    # 规范键序:
    # 映射的键值对按键的编码字节排序后写出, 对任意键类型都成立。
    SORT_KEYS = 0x0001

    # --- 反序列化选项 ---

    # 零拷贝模式:
    # 字符串和 pop 的剩余数据返回 memoryview 切片而不是复制内存。
    # 警告: memoryview 会引用原始 buffer, 需谨慎使用。
    ZERO_COPY = 0x0010
