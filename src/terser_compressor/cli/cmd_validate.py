"""
validate 命令：校验 YAML 选项文件。

只做选项校验，不启动引擎，适合放在 CI 流程里。
"""

from __future__ import annotations

import sys
from pathlib import Path

from rich.panel import Panel

from terser_compressor.cli.utils import create_console, print_error, print_success
from terser_compressor.config import validate_options_file

console = create_console()


def validate_command(path: str) -> None:
    if not Path(path).exists():
        print_error(f"文件不存在：{path}")

    console.print(f"[bold]校验选项文件：[/bold] {path}\n")
    errors = validate_options_file(path)

    if errors:
        console.print(Panel(
            "\n\n".join(errors),
            title=f"[bold red]校验失败（{len(errors)} 个错误）[/bold red]",
            border_style="red",
        ))
        sys.exit(1)

    print_success(f"{path} 校验通过")
