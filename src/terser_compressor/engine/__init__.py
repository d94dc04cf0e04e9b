"""
压缩引擎模块。

提供 MinifierEngine 协议、基于 Node.js 的 TerserEngine 和进程级默认引擎。
"""

from terser_compressor.engine.protocol import EngineError, MinifierEngine
from terser_compressor.engine.registry import clear_engine, get_engine, register_engine
from terser_compressor.engine.terser import TerserEngine

__all__ = [
    "EngineError",
    "MinifierEngine",
    "TerserEngine",
    "clear_engine",
    "get_engine",
    "register_engine",
]
