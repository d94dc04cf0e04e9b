"""
cache-key 命令：打印当前选项对应的 cache key。
"""

from __future__ import annotations

from terser_compressor.cli.utils import create_compressor, create_console, handle_compressor_error
from terser_compressor.errors import TerserCompressorError

console = create_console()


def cache_key_command(options_path: str | None = None) -> str:
    try:
        compressor = create_compressor(options_path)
    except TerserCompressorError as e:
        handle_compressor_error(e)
    console.out(compressor.cache_key, highlight=False)
    return compressor.cache_key
