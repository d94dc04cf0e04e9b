"""
压缩器模块：选项 → 引擎调用 → Source Map 合并。

暴露三个层次的 API：
1. 高级 API：Compressor（管道直接调用）
2. 中级 API：EngineAdapter / select_adapter（自定义引擎调用方式）
3. 低级 API：derive_cache_key / AssetInput / CompileResult
"""

from terser_compressor.compressor.adapter import (
    EngineAdapter,
    LegacyAdapter,
    MapAdapter,
    select_adapter,
)
from terser_compressor.compressor.base import (
    AssetInput,
    CompileResult,
    CompressorConfig,
    EngineCapability,
    EngineOutput,
)
from terser_compressor.compressor.cache_key import canonical_json, derive_cache_key
from terser_compressor.compressor.compressor import Compressor

__all__ = [
    "AssetInput",
    "CompileResult",
    "Compressor",
    "CompressorConfig",
    "EngineAdapter",
    "EngineCapability",
    "EngineOutput",
    "LegacyAdapter",
    "MapAdapter",
    "canonical_json",
    "derive_cache_key",
    "select_adapter",
]
