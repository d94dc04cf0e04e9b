"""
terser-compressor 配置模块。

提供选项 Schema、规范化、YAML 选项文件加载和引擎设置。
"""

from terser_compressor.config.loader import load_options, validate_options_file
from terser_compressor.config.normalize import NormalizedOptions, normalize
from terser_compressor.config.schema import (
    CompressOptions,
    EngineSettings,
    JsRegex,
    MangleOptions,
    OutputOptions,
    ParseOptions,
    PropertiesOptions,
    SourceMapOptions,
    TerserOptions,
)

__all__ = [
    "CompressOptions",
    "EngineSettings",
    "JsRegex",
    "MangleOptions",
    "NormalizedOptions",
    "OutputOptions",
    "ParseOptions",
    "PropertiesOptions",
    "SourceMapOptions",
    "TerserOptions",
    "load_options",
    "normalize",
    "validate_options_file",
]
