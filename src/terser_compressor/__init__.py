"""
terser-compressor：资产管道中的可缓存 JavaScript 压缩器。

把 terser 包装成资产管道可以直接调用的压缩器：
选项在构造时校验并冻结，派生出稳定的 cache key；
每次编译返回压缩后的代码，并把引擎生成的 Source Map
与上游处理器的 Source Map 合并成一张从最终输出指向原始源码的 Map。

快速上手::

    from terser_compressor import Compressor

    compressor = Compressor({"mangle": {"reserved": ["jQuery"]}, "comments": "copyright"})
    result = compressor({"data": source, "filename": "application.js"})
    result["data"]         # → 压缩后的代码
    result["map"]          # → 合并后的 Source Map（v3 字典）
    compressor.cache_key   # → "Terser:5.31.0:1:…"

默认压缩器::

    from terser_compressor import facade

    facade.call({"data": source, "filename": "application.js"})
"""

from terser_compressor.compressor import (
    AssetInput,
    CompileResult,
    Compressor,
    CompressorConfig,
    EngineCapability,
    derive_cache_key,
)
from terser_compressor.config import TerserOptions, load_options, normalize
from terser_compressor.engine import (
    EngineError,
    MinifierEngine,
    TerserEngine,
    get_engine,
    register_engine,
)
from terser_compressor.errors import (
    CompileError,
    ConfigError,
    EngineUnavailableError,
    MapCombineError,
    OptionsLoadError,
    TerserCompressorError,
)
from terser_compressor.facade import CompressorFacade, default_facade
from terser_compressor.integration import register
from terser_compressor.sourcemap import SourceMap, combine_source_maps, format_source_map

__version__ = "0.1.0"

__all__ = [
    # 核心
    "Compressor",
    "CompressorFacade",
    "default_facade",
    "register",
    # 数据结构
    "AssetInput",
    "CompileResult",
    "CompressorConfig",
    "EngineCapability",
    "TerserOptions",
    "SourceMap",
    # 函数
    "combine_source_maps",
    "derive_cache_key",
    "format_source_map",
    "load_options",
    "normalize",
    # 引擎
    "EngineError",
    "MinifierEngine",
    "TerserEngine",
    "get_engine",
    "register_engine",
    # 异常
    "CompileError",
    "ConfigError",
    "EngineUnavailableError",
    "MapCombineError",
    "OptionsLoadError",
    "TerserCompressorError",
    # 版本
    "__version__",
]
