"""tnetstring 协议常量.

该模块定义了 tnetstring 线格式使用的类型标签、分隔符和数值语法.
"""

import re

# 长度前缀与负载之间的分隔符
COLON = 0x3A

# 类型标签 (负载之后的单个字节)
TAG_STRING = 0x2C  # ','
TAG_INTEGER = 0x23  # '#'
TAG_FLOAT = 0x5E  # '^'
TAG_BOOL = 0x21  # '!'
TAG_NULL = 0x7E  # '~'
TAG_LIST = 0x5D  # ']'
TAG_MAPPING = 0x7D  # '}'

TAG_NAMES = {
    TAG_STRING: "string",
    TAG_INTEGER: "integer",
    TAG_FLOAT: "float",
    TAG_BOOL: "bool",
    TAG_NULL: "null",
    TAG_LIST: "list",
    TAG_MAPPING: "mapping",
}

TRUE_PAYLOAD = b"true"
FALSE_PAYLOAD = b"false"

# null 的唯一合法编码
NULL_FRAME = b"0:~"

# 数值负载语法 (必须完整匹配, 仅 ASCII, 不允许空白/前导+/下划线)
INTEGER_PATTERN = re.compile(rb"-?[0-9]+")
FLOAT_PATTERN = re.compile(
    rb"-?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][-+]?[0-9]+)?|-?inf|nan"
)

# 默认最大嵌套深度
DEFAULT_MAX_DEPTH = 200
