"""
terser-compressor CLI 入口。

用法::

    terser-compressor --help
    terser-compressor minify app.js --output app.min.js --map app.min.js.map
    terser-compressor minify bundle.js --input-map bundle.js.map
    terser-compressor cache-key --options terser.yaml
    terser-compressor validate terser.yaml
"""

from __future__ import annotations

import typer

from terser_compressor.cli.utils import create_console

app = typer.Typer(
    name="terser-compressor",
    help="terser-compressor：资产管道的可缓存 JavaScript 压缩器",
    add_completion=False,
    no_args_is_help=True,
)

console = create_console()


# ============================================================
# 子命令注册
# ============================================================

@app.command(name="minify")
def minify(
    input_file: str = typer.Argument(..., help="要压缩的 JavaScript 文件"),
    options: str | None = typer.Option(
        None,
        "--options",
        "-c",
        help="YAML 选项文件（默认在当前目录搜索 terser.yaml）",
    ),
    output: str | None = typer.Option(
        None,
        "--output",
        "-o",
        help="输出文件路径（不指定则输出到终端）",
    ),
    map_output: str | None = typer.Option(
        None,
        "--map",
        "-m",
        help="Source Map 输出路径",
    ),
    input_map: str | None = typer.Option(
        None,
        "--input-map",
        help="上游 Source Map（JSON），与引擎生成的 Map 合并",
    ),
    legacy: bool = typer.Option(
        False,
        "--legacy",
        help="旧版管道协议：不生成 Source Map",
    ),
) -> None:
    """压缩 JavaScript 文件。"""
    from terser_compressor.cli.cmd_minify import minify_command
    minify_command(
        input_file=input_file,
        options_path=options,
        output=output,
        map_output=map_output,
        input_map=input_map,
        legacy=legacy,
    )


@app.command(name="cache-key")
def cache_key(
    options: str | None = typer.Option(
        None,
        "--options",
        "-c",
        help="YAML 选项文件（默认在当前目录搜索 terser.yaml）",
    ),
) -> None:
    """打印当前选项与引擎版本对应的 cache key。"""
    from terser_compressor.cli.cmd_cache_key import cache_key_command
    cache_key_command(options_path=options)


@app.command(name="validate")
def validate(
    path: str = typer.Argument("terser.yaml", help="YAML 选项文件路径"),
) -> None:
    """校验 YAML 选项文件。"""
    from terser_compressor.cli.cmd_validate import validate_command
    validate_command(path=path)


@app.command(name="version")
def version() -> None:
    """显示版本信息。"""
    from terser_compressor import __version__
    console.print(f"terser-compressor v{__version__}")


# ============================================================
# CLI 入口点
# ============================================================

def main() -> None:
    """CLI 入口点。"""
    app()


if __name__ == "__main__":
    main()
