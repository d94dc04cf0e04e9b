"""
进程级默认压缩器。

宿主管道通常直接注册一个"开箱即用"的压缩器，不关心选项。
`CompressorFacade` 在首次使用时创建默认 `Compressor()`，之后所有调用共享它。

用法::

    from terser_compressor import facade

    record = facade.call({"data": source, "filename": "application.js"})
    facade.cache_key()

自定义选项请直接构造 `Compressor(...)`，它与默认实例不共享任何可变状态。
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from typing import Any

from terser_compressor.compressor.base import AssetInput
from terser_compressor.compressor.compressor import Compressor

logger = logging.getLogger(__name__)


class CompressorFacade:
    """
    惰性创建、线程安全的默认压缩器持有者。

    并发的首次调用最多只会构造一个 Compressor（双重检查加锁）。
    """

    def __init__(self) -> None:
        self._compressor: Compressor | None = None
        self._lock = threading.Lock()

    def default_compressor(self) -> Compressor:
        """返回默认压缩器，首次调用时创建。"""
        compressor = self._compressor
        if compressor is None:
            with self._lock:
                if self._compressor is None:
                    self._compressor = Compressor()
                    logger.debug("创建默认压缩器：%r", self._compressor)
                compressor = self._compressor
        return compressor

    @property
    def compiler(self) -> Compressor:
        return self.default_compressor()

    def cache_key(self) -> str:
        return self.default_compressor().cache_key

    def __call__(self, asset: AssetInput | Mapping[str, Any]) -> dict[str, Any]:
        return self.default_compressor()(asset)

    def reset(self) -> None:
        """丢弃默认压缩器，下次使用时重新创建。通常仅在测试中使用。"""
        with self._lock:
            self._compressor = None


default_facade = CompressorFacade()


def call(asset: AssetInput | Mapping[str, Any]) -> dict[str, Any]:
    """用默认压缩器编译一个资产记录。"""
    return default_facade(asset)


def cache_key() -> str:
    """默认压缩器的 cache key。"""
    return default_facade.cache_key()


def default_compressor() -> Compressor:
    return default_facade.default_compressor()


def reset_default_compressor() -> None:
    default_facade.reset()
