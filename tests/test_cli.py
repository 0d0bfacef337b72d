"""测试 tnetstring 命令行工具."""

import json
import re
from pathlib import Path

import pytest
from click.testing import CliRunner

from tnetstring import dumps
from tnetstring.__main__ import cli


@pytest.fixture
def runner() -> CliRunner:
    """提供 Click CLI 测试运行器.

    Returns:
        CliRunner 实例.
    """
    return CliRunner()


def strip_ansi(text: str) -> str:
    """去除 ANSI 转义序列."""
    ansi_escape = re.compile(r"\x1B(?:[@-Z\-_]|\[[0-?]*[ -/]*[@-~])")
    return ansi_escape.sub("", text)


# --- 基础 CLI 功能测试 ---


def test_cli_help(runner: CliRunner) -> None:
    """--help 选项应显示帮助信息."""
    result = runner.invoke(cli, ["--help"])

    assert result.exit_code == 0
    assert "Usage:" in result.output
    assert "--format" in result.output


def test_cli_missing_input(runner: CliRunner) -> None:
    """未提供输入参数时应报错并提示用法."""
    result = runner.invoke(cli, [])

    assert result.exit_code != 0
    assert "必须指定" in result.output


def test_cli_mutual_exclusion(runner: CliRunner) -> None:
    """同时提供参数和文件时应报错."""
    with runner.isolated_filesystem():
        Path("test.tns").write_bytes(b"0:~")

        result = runner.invoke(cli, ["0:~", "-f", "test.tns"])

        assert result.exit_code != 0
        assert "不能同时指定" in result.output


def test_cli_decode_argument(runner: CliRunner) -> None:
    """应能直接解码命令行参数中的 tnetstring."""
    result = runner.invoke(cli, ["5:12345#"])

    assert result.exit_code == 0
    assert "12345" in result.output


def test_cli_decode_hex(runner: CliRunner) -> None:
    """--hex 选项应将参数解析为十六进制, 忽略空白."""
    result = runner.invoke(cli, ["--hex", "353a3132 33343523"])

    assert result.exit_code == 0
    assert "12345" in result.output


def test_cli_decode_file(runner: CliRunner) -> None:
    """应能正确从文件中读取并解码二进制数据."""
    with runner.isolated_filesystem():
        Path("data.tns").write_bytes(dumps([b"\xff\x00", 1]))

        result = runner.invoke(cli, ["-f", "data.tns", "--format", "json"])

        assert result.exit_code == 0
        data = json.loads(strip_ansi(result.output))
        assert data == ["ff00", 1]


def test_cli_decode_hex_file(runner: CliRunner, tmp_path: Path) -> None:
    """--hex 同样适用于多行十六进制文本文件."""
    hex_file = tmp_path / "data.hex"
    hex_file.write_text("35 3a\n31 32 33 34 35\n23\n", encoding="utf-8")

    result = runner.invoke(cli, ["-f", str(hex_file), "--hex"])

    assert result.exit_code == 0
    assert "12345" in result.output


def test_cli_output_file(runner: CliRunner) -> None:
    """应能将解码结果保存到指定文件."""
    with runner.isolated_filesystem():
        result = runner.invoke(cli, ["5:12345#", "-o", "out.txt"])

        assert result.exit_code == 0
        assert "结果已保存到: out.txt" in result.output
        content = Path("out.txt").read_text(encoding="utf-8")
        assert content == "12345"


def test_cli_format_json(runner: CliRunner) -> None:
    """--format json 选项应输出合法的 JSON 数据."""
    encoded = dumps({b"name": b"alpha", b"n": 3}).decode()

    result = runner.invoke(cli, [encoded, "--format", "json"])

    assert result.exit_code == 0
    data = json.loads(strip_ansi(result.output))
    assert data == {"name": "alpha", "n": 3}


def test_cli_format_json_non_string_keys(runner: CliRunner) -> None:
    """JSON 输出中非字符串的键被转换为字符串."""
    result = runner.invoke(cli, [dumps({1: None}).decode(), "--format", "json"])

    assert result.exit_code == 0
    assert json.loads(strip_ansi(result.output)) == {"1": None}


def test_cli_decode_all(runner: CliRunner) -> None:
    """--all 选项应依次解码所有首尾相接的帧."""
    result = runner.invoke(cli, ["5:12345#3:abc,0:~", "--all", "--format", "json"])

    assert result.exit_code == 0
    assert json.loads(strip_ansi(result.output)) == [12345, "abc", None]


def test_cli_trailing_data_without_all(runner: CliRunner) -> None:
    """未指定 --all 时多余的帧是错误."""
    result = runner.invoke(cli, ["5:12345#3:abc,"])

    assert result.exit_code != 0
    assert "解码失败" in result.output
    assert "trailing" in result.output


def test_cli_text_mode(runner: CliRunner) -> None:
    """--text 选项应将字符串解码为 str."""
    result = runner.invoke(cli, ["--text", "5:hello,"])

    assert result.exit_code == 0
    assert "'hello'" in result.output
    assert "b'hello'" not in result.output


def test_cli_invalid_hex(runner: CliRunner) -> None:
    """提供无效的十六进制字符串时应报错."""
    result = runner.invoke(cli, ["--hex", "zz"])

    assert result.exit_code != 0
    assert "无效的十六进制格式" in result.output


def test_cli_decode_error(runner: CliRunner) -> None:
    """解码过程中发生错误时应优雅退出并显示错误信息."""
    result = runner.invoke(cli, ["5:123#"])

    assert result.exit_code != 0
    assert "解码失败" in result.output


def test_cli_verbose_output(runner: CliRunner) -> None:
    """-v 选项应显示数据大小, 并在出错时显示详细堆栈信息."""
    result = runner.invoke(cli, ["1:x~", "-v"])

    assert result.exit_code != 0
    assert "数据大小: 4 字节" in result.output
    assert "Traceback" in result.output


# --- Tree 格式输出测试 ---


def test_cli_tree_list(runner: CliRunner) -> None:
    """列表的树状输出应显示元素索引和类型."""
    result = runner.invoke(cli, ["19:5:12345#4:true!1:0#]", "--format", "tree"])

    assert result.exit_code == 0
    clean_output = strip_ansi(result.output)
    assert "tnetstring" in clean_output
    assert "List (3)" in clean_output
    assert "[0] Integer: 12345" in clean_output
    assert "[1] Bool: True" in clean_output


def test_cli_tree_mapping(runner: CliRunner) -> None:
    """映射的树状输出应显示键值对."""
    encoded = dumps({b"key": [1.5, None]}).decode()

    result = runner.invoke(cli, [encoded, "--format", "tree"])

    assert result.exit_code == 0
    clean_output = strip_ansi(result.output)
    assert "Map (1)" in clean_output
    assert "Entry 0" in clean_output
    assert "Key String: 'key'" in clean_output
    assert "Value List (2)" in clean_output
    assert "[0] Float: 1.5" in clean_output
    assert "[1] Null: None" in clean_output


def test_cli_tree_binary_string(runner: CliRunner) -> None:
    """非 UTF-8 字符串以十六进制显示."""
    result = runner.invoke(cli, ["--hex", "323aff00 2c", "--format", "tree"])

    assert result.exit_code == 0
    assert "String: FF 00" in strip_ansi(result.output)


def test_cli_tree_output_file(runner: CliRunner, tmp_path: Path) -> None:
    """树状输出应能正确保存到文件."""
    output_file = tmp_path / "output.txt"

    result = runner.invoke(
        cli, ["3:abc,", "--format", "tree", "--output", str(output_file)]
    )

    assert result.exit_code == 0
    assert f"结果已保存到: {output_file}" in result.output
    content = output_file.read_text(encoding="utf-8")
    assert "String: 'abc'" in content


def test_cli_tree_invalid_data(runner: CliRunner) -> None:
    """无效数据的树状输出应报错."""
    result = runner.invoke(cli, ["1:a?", "--format", "tree"])

    assert result.exit_code != 0
    assert "解码失败" in result.output
