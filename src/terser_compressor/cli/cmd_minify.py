"""
minify 命令：压缩单个 JavaScript 文件。
"""

from __future__ import annotations

import json
from pathlib import Path

from terser_compressor.cli.utils import (
    create_compressor,
    create_console,
    handle_compressor_error,
    load_json_file,
    print_error,
    print_success,
    read_text_file,
)
from terser_compressor.compressor import AssetInput
from terser_compressor.errors import TerserCompressorError

console = create_console()


def minify_command(
    input_file: str,
    options_path: str | None = None,
    output: str | None = None,
    map_output: str | None = None,
    input_map: str | None = None,
    legacy: bool = False,
) -> str:
    """
    压缩 input_file，把代码写到 output（未指定时打印到标准输出）。

    返回:
        压缩后的代码
    """
    if legacy and map_output:
        print_error("--legacy 模式不生成 Source Map，不能同时指定 --map。")

    source = read_text_file(input_file)
    metadata = {"map": load_json_file(input_map)} if input_map else {}

    try:
        compressor = create_compressor(options_path, legacy=legacy)
        result = compressor.compile(
            AssetInput(data=source, filename=input_file, metadata=metadata)
        )
    except TerserCompressorError as e:
        handle_compressor_error(e)

    code = result.data
    if map_output and result.map is not None:
        Path(map_output).write_text(json.dumps(result.map, ensure_ascii=False), encoding="utf-8")
        code = f"{code}\n//# sourceMappingURL={Path(map_output).name}"

    if output:
        Path(output).write_text(code, encoding="utf-8")
        print_success(
            f"{input_file} → {output}（{len(source)} → {len(result.data)} 字符）"
        )
        if map_output:
            print_success(f"Source Map → {map_output}")
    else:
        console.out(code, highlight=False)
    return code
