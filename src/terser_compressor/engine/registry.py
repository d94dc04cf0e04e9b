"""
引擎注册表：进程级默认引擎。

没有显式传入引擎的 Compressor 都使用这里返回的实例。
默认是按环境变量配置的 TerserEngine；测试或嵌入场景可以用
`register_engine()` 替换为任何实现了 MinifierEngine 协议的对象。
"""

from __future__ import annotations

import logging
import threading

from terser_compressor.config.schema import EngineSettings
from terser_compressor.engine.protocol import MinifierEngine
from terser_compressor.engine.terser import TerserEngine

logger = logging.getLogger(__name__)

_engine: MinifierEngine | None = None
_engine_lock = threading.Lock()


def get_engine() -> MinifierEngine:
    """
    获取进程级默认引擎。

    首次调用时按环境变量创建 TerserEngine（只创建一次）。

    返回:
        MinifierEngine 实例
    """
    global _engine
    if _engine is None:
        with _engine_lock:
            if _engine is None:
                _engine = TerserEngine(EngineSettings.from_env())
                logger.debug("创建默认 terser 引擎：%s", _engine.settings)
    return _engine


def register_engine(engine: MinifierEngine) -> None:
    """
    注册自定义默认引擎。

    参数:
        engine: 实现了 MinifierEngine 协议的对象

    示例::

        register_engine(TerserEngine(EngineSettings(node_bin="/opt/node/bin/node")))
    """
    global _engine
    if not isinstance(engine, MinifierEngine):
        raise TypeError(
            f"engine 必须实现 MinifierEngine 协议，"
            f"但 {type(engine).__name__} 缺少必要的成员。"
            f"需要实现：version, compile(source, options, filename), "
            f"compile_with_map(source, options, filename)"
        )
    with _engine_lock:
        _engine = engine
    logger.info("已注册自定义默认引擎：%s", type(engine).__name__)


def clear_engine() -> None:
    """清除默认引擎。通常仅在测试中使用。"""
    global _engine
    with _engine_lock:
        _engine = None
