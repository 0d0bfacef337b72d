"""tnetstring 命令行工具."""

import json
import pprint
import sys
import traceback
from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.pretty import Pretty
from rich.syntax import Syntax
from rich.text import Text
from rich.tree import Tree

from .api import loads, pop
from .backend import PythonBackend, TextBackend, ValueBackend
from .exceptions import TNetStringError

# 流式读取配置
FILE_SIZE_THRESHOLD = 10 * 1024 * 1024  # 10MB
CHUNK_SIZE = 8 * 1024 * 1024  # 8MB

# 样式定义
STYLE_INDEX = "dim"
STYLE_TYPE = "cyan"
STYLE_VALUE_STR = "green"
STYLE_VALUE_NUM = "magenta"


def _read_binary_file(file_path: Path, verbose: bool) -> bytes:
    """读取二进制文件,大文件使用分块以控制内存.

    Args:
        file_path: 文件路径.
        verbose: 是否显示详细信息.

    Returns:
        文件内容的bytes.
    """
    file_size = file_path.stat().st_size

    if file_size > FILE_SIZE_THRESHOLD:
        if verbose:
            click.echo(f"[DEBUG] 文件大小 {file_size} 字节,使用分块读取", err=True)

        chunks = []
        with open(file_path, "rb") as f:
            while chunk := f.read(CHUNK_SIZE):
                chunks.append(chunk)
        return b"".join(chunks)
    return file_path.read_bytes()


def _parse_hex(text: str) -> bytes:
    """解析十六进制文本, 忽略所有空白."""
    cleaned = "".join(text.split())
    if not all(c in "0123456789abcdefABCDEF" for c in cleaned):
        raise ValueError("不是有效的十六进制字符串")
    return bytes.fromhex(cleaned)


def _kind_name(value: Any) -> str:
    if value is None:
        return "Null"
    if isinstance(value, bool):
        return "Bool"
    if isinstance(value, int):
        return "Integer"
    if isinstance(value, float):
        return "Float"
    if isinstance(value, bytes | bytearray | memoryview | str):
        return "String"
    if isinstance(value, list | tuple):
        return "List"
    return "Map"


def _display(value: Any) -> tuple[str, str]:
    """返回标量值的显示文本和样式."""
    if isinstance(value, bytes | bytearray | memoryview):
        data = bytes(value)
        try:
            return repr(data.decode("utf-8")), STYLE_VALUE_STR
        except UnicodeDecodeError:
            return data.hex(" ").upper(), STYLE_VALUE_STR
    if isinstance(value, str):
        return repr(value), STYLE_VALUE_STR
    return str(value), STYLE_VALUE_NUM


def _build_rich_tree(value: Any, tree: Tree, label_prefix: str = "") -> None:
    """递归构建 Rich 树.

    Args:
        value: 解码得到的值.
        tree: 父级 Tree 对象.
        label_prefix: 节点标签前缀 (列表索引或 Key/Value).
    """
    kind = _kind_name(value)
    label = Text()
    if label_prefix:
        label.append(f"{label_prefix} ", style=STYLE_INDEX)

    if kind == "List":
        label.append(f"List ({len(value)})", style=STYLE_TYPE)
        branch = tree.add(label)
        for i, item in enumerate(value):
            _build_rich_tree(item, branch, f"[{i}]")
    elif kind == "Map":
        items = list(value.items()) if isinstance(value, dict) else list(value)
        label.append(f"Map ({len(items)})", style=STYLE_TYPE)
        branch = tree.add(label)
        for i, (k, v) in enumerate(items):
            entry = branch.add(Text(f"Entry {i}", style=STYLE_INDEX))
            _build_rich_tree(k, entry, "Key")
            _build_rich_tree(v, entry, "Value")
    else:
        text, style = _display(value)
        label.append(f"{kind}: ", style=STYLE_TYPE)
        label.append(text, style=style)
        tree.add(label)


def _print_tree(values: list[Any], file: Any = None) -> None:
    """打印 tnetstring 值树 (使用 Rich).

    Args:
        values: 解码得到的值列表.
        file: 输出文件对象,默认为stdout.
    """
    console = Console(file=file, force_terminal=file is None)
    root = Tree("tnetstring", style="bold white")
    for value in values:
        _build_rich_tree(value, root)
    console.print(root)


def _to_jsonable(obj: Any) -> Any:
    """递归转换为 JSON 可表示的对象.

    字节数据优先按 UTF-8 解码, 否则输出十六进制; 非字符串的键转换为字符串.
    """
    if isinstance(obj, bytes | bytearray | memoryview):
        data = bytes(obj)
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError:
            return data.hex()
    if isinstance(obj, dict):
        result = {}
        for k, v in obj.items():
            key = _to_jsonable(k)
            if not isinstance(key, str):
                key = json.dumps(key)
            result[key] = _to_jsonable(v)
        return result
    if isinstance(obj, list | tuple):
        return [_to_jsonable(v) for v in obj]
    return obj


def _decode_all(data: bytes, backend: ValueBackend) -> list[Any]:
    """用 pop 依次解码所有首尾相接的帧."""
    values = []
    rest: bytes = data
    while rest:
        value, remainder = pop(rest, backend=backend)
        values.append(value)
        rest = bytes(remainder)
    return values


def _decode_and_print(
    data: bytes,
    output_format: str,
    output_file: str | None,
    verbose: bool,
    decode_all: bool,
    text: bool,
) -> None:
    """解码并输出结果."""
    backend: ValueBackend = TextBackend() if text else PythonBackend()

    if verbose:
        click.echo(f"[DEBUG] 数据大小: {len(data)} 字节", err=True)

    try:
        if decode_all:
            values = _decode_all(data, backend)
        else:
            values = [loads(data, backend=backend)]
    except TNetStringError as e:
        if verbose:
            traceback.print_exc(file=sys.stderr)
        raise click.ClickException(f"解码失败: {e}") from e

    if verbose:
        click.echo(f"[DEBUG] 解码得到 {len(values)} 个值", err=True)

    result: Any = values if decode_all else values[0]

    if output_format == "tree":
        if output_file:
            with open(output_file, "w", encoding="utf-8") as f:
                _print_tree(values, file=f)
            click.echo(f"结果已保存到: {output_file}", err=True)
        else:
            _print_tree(values)
        return

    if output_format == "json":
        output_text = json.dumps(_to_jsonable(result), indent=2, ensure_ascii=False)
    else:
        output_text = pprint.pformat(result, width=100)

    if output_file:
        Path(output_file).write_text(output_text, encoding="utf-8")
        click.echo(f"结果已保存到: {output_file}", err=True)
        return

    # 使用 Rich 进行高亮输出
    console = Console()
    if output_format == "json":
        console.print(Syntax(output_text, "json", theme="monokai", word_wrap=True))
    else:
        console.print(Pretty(result))


@click.command(help="tnetstring 解码命令行工具")
@click.argument("encoded", required=False)
@click.option(
    "-f",
    "--file",
    "file_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="从文件读取编码数据",
)
@click.option(
    "--hex",
    "is_hex",
    is_flag=True,
    help="输入为十六进制文本 (适用于参数和文件)",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["pretty", "json", "tree"]),
    default="pretty",
    show_default=True,
    help="输出格式",
)
@click.option(
    "-o",
    "--output",
    "output_file",
    type=click.Path(dir_okay=False, writable=True),
    help="将输出保存到文件 (如不指定则输出到控制台)",
)
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    help="显示详细的解码过程信息",
)
@click.option(
    "--all",
    "decode_all",
    is_flag=True,
    help="依次解码所有首尾相接的帧",
)
@click.option(
    "--text",
    is_flag=True,
    help="将字符串负载解码为 UTF-8 文本",
)
def cli(
    encoded: str | None,
    file_path: Path | None,
    is_hex: bool,
    output_format: str,
    output_file: str | None,
    verbose: bool,
    decode_all: bool,
    text: bool,
) -> None:
    """tnetstring 解码命令行工具.

    Examples:
      # 直接解码参数中的 tnetstring
      tnetstring "5:12345#"

      # 解码十六进制表示的数据
      tnetstring --hex "353a3132333435 23"

      # 从文件读取并以 JSON 格式输出
      tnetstring -f data.tns --format json

      # 解码文件中的所有帧并以 Tree 格式输出
      tnetstring -f data.tns --all --format tree
    """
    # 互斥参数检查
    if encoded and file_path:
        raise click.UsageError("不能同时指定 ENCODED 数据和 --file 参数")
    if not encoded and not file_path:
        raise click.UsageError("必须指定 ENCODED 数据或 --file 参数")

    try:
        if file_path:
            raw = _read_binary_file(file_path, verbose)
            data = _parse_hex(raw.decode("ascii")) if is_hex else raw
        else:
            assert encoded is not None
            data = _parse_hex(encoded) if is_hex else encoded.encode("utf-8")
    except (UnicodeDecodeError, ValueError) as e:
        if verbose:
            traceback.print_exc(file=sys.stderr)
        raise click.BadParameter(f"无效的十六进制格式 - {e}") from e

    _decode_and_print(data, output_format, output_file, verbose, decode_all, text)


def main() -> None:
    """入口函数."""
    cli()


if __name__ == "__main__":
    main()
