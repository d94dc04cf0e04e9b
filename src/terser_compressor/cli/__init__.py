"""
terser-compressor CLI：命令行工具。

提供：
- minify: 压缩单个 JavaScript 文件（可选输出 Source Map）
- cache-key: 打印当前选项对应的 cache key
- validate: 校验 YAML 选项文件
"""

from terser_compressor.cli.app import app, main

__all__ = ["app", "main"]
