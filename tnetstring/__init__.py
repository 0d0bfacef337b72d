"""tnetstring 序列化库.

提供 typed netstring 的序列化(dumps)、反序列化(loads)
以及逐帧解析(pop)功能.
"""

from .api import dump, dumps, load, loads, pop
from .backend import (
    Kind,
    Pairs,
    PairsBackend,
    PythonBackend,
    TextBackend,
    ValueBackend,
)
from .config import Config
from .const import DEFAULT_MAX_DEPTH
from .exceptions import (
    CircularReference,
    DepthExceeded,
    DumpError,
    Error,
    InvalidBool,
    InvalidNull,
    InvalidNumber,
    InvalidString,
    LoadError,
    MalformedLength,
    MalformedList,
    MalformedMapping,
    TNetStringDecodeError,
    TNetStringEncodeError,
    TNetStringError,
    TrailingData,
    TruncatedInput,
    UnknownTag,
    UnsupportedType,
)
from .options import Option
from .stream import TNetStringReader, TNetStringWriter

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_MAX_DEPTH",
    "CircularReference",
    "Config",
    "DepthExceeded",
    "DumpError",
    "Error",
    "InvalidBool",
    "InvalidNull",
    "InvalidNumber",
    "InvalidString",
    "Kind",
    "LoadError",
    "MalformedLength",
    "MalformedList",
    "MalformedMapping",
    "Option",
    "Pairs",
    "PairsBackend",
    "PythonBackend",
    "TNetStringDecodeError",
    "TNetStringEncodeError",
    "TNetStringError",
    "TNetStringReader",
    "TNetStringWriter",
    "TextBackend",
    "TrailingData",
    "TruncatedInput",
    "UnknownTag",
    "UnsupportedType",
    "ValueBackend",
    "__version__",
    "dump",
    "dumps",
    "load",
    "loads",
    "pop",
]
