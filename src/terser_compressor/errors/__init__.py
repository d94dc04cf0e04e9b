"""
terser-compressor 结构化异常体系。

所有异常遵循"三段式"规范：What / Why / How to fix。
"""

from terser_compressor.errors.exceptions import (
    CompileError,
    ConfigError,
    EngineUnavailableError,
    MapCombineError,
    OptionsLoadError,
    TerserCompressorError,
)

__all__ = [
    "CompileError",
    "ConfigError",
    "EngineUnavailableError",
    "MapCombineError",
    "OptionsLoadError",
    "TerserCompressorError",
]
