"""
CLI 工具函数：Rich 输出、文件读取、压缩器创建。
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, NoReturn

from rich.console import Console

from terser_compressor.compressor import Compressor, EngineCapability
from terser_compressor.config import load_options
from terser_compressor.errors import TerserCompressorError

_console: Console | None = None


def create_console() -> Console:
    """创建或获取全局 Rich Console 实例。"""
    global _console
    if _console is None:
        _console = Console()
    return _console


def print_error(message: str, exit_code: int = 1) -> NoReturn:
    """打印错误信息并退出。"""
    console = create_console()
    console.print(f"[bold red]X 错误：[/bold red]{message}")
    sys.exit(exit_code)


def print_success(message: str) -> None:
    # 使用 OK 而非 ✓，兼容 Windows 终端编码
    create_console().print(f"[bold green]OK[/bold green] {message}")


def handle_compressor_error(error: TerserCompressorError) -> NoReturn:
    """以三段式 full_message 打印结构化异常并退出。"""
    console = create_console()
    console.print("\n[bold red]X 错误[/bold red]\n")
    console.print(error.full_message, markup=False, highlight=False)
    sys.exit(1)


def read_text_file(path: str | Path) -> str:
    """读取 UTF-8 文本文件，文件不存在或不可读时打印错误并退出。"""
    file_path = Path(path)
    if not file_path.exists():
        print_error(f"文件不存在：{file_path}")
    try:
        return file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        print_error(f"无法读取文件 {file_path}：{e}")


def load_json_file(path: str | Path) -> Any:
    """读取 JSON 文件（用于上游 Source Map）。"""
    content = read_text_file(path)
    try:
        return json.loads(content)
    except json.JSONDecodeError as e:
        print_error(f"{path} 不是有效的 JSON：{e}")


def create_compressor(options_path: str | None = None, legacy: bool = False) -> Compressor:
    """
    根据 CLI 参数创建 Compressor。

    未指定 --options 时在当前目录搜索 terser.yaml / terser.yml / config/terser.yaml。

    异常:
        TerserCompressorError: 选项无效或引擎不可用
    """
    options = load_options(path=options_path, search=options_path is None)
    capability = EngineCapability.LEGACY_NO_MAP if legacy else EngineCapability.MAP_CAPABLE
    return Compressor(options, capability=capability)
