"""
宿主资产管道集成。

把压缩器注册到资产环境中，作为 `application/javascript` 的压缩器::

    from terser_compressor.integration import register

    register(environment)                      # 默认压缩器，名称 "terser"
    register(environment, compressor=Compressor({"mangle": False}))
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any, Protocol, runtime_checkable

from terser_compressor.config.defaults import COMPRESSOR_NAME, JAVASCRIPT_MIME_TYPE
from terser_compressor.facade import default_facade

logger = logging.getLogger(__name__)

AssetCompressor = Callable[[Mapping[str, Any]], Mapping[str, Any]]


@runtime_checkable
class AssetEnvironment(Protocol):
    """
    宿主资产环境需要提供的注册接口。

    `register_compressor(mime_type, name, compressor)`：把可调用对象
    注册为指定 MIME 类型的压缩器，之后可以按名称选用。
    """

    def register_compressor(self, mime_type: str, name: str, compressor: AssetCompressor) -> Any:
        ...


def register(
    environment: AssetEnvironment,
    name: str = COMPRESSOR_NAME,
    compressor: AssetCompressor | None = None,
) -> None:
    """
    在资产环境中注册 JavaScript 压缩器。

    参数:
        environment: 实现了 AssetEnvironment 协议的宿主环境
        name: 注册名称（默认 "terser"）
        compressor: 压缩器；None 时使用进程级默认压缩器

    异常:
        TypeError: environment 没有 register_compressor 方法
    """
    if not isinstance(environment, AssetEnvironment):
        raise TypeError(
            f"environment 必须提供 register_compressor(mime_type, name, compressor)，"
            f"{type(environment).__name__} 没有该方法。"
        )
    if compressor is None:
        compressor = default_facade
    environment.register_compressor(JAVASCRIPT_MIME_TYPE, name, compressor)
    logger.info("已注册 %s 压缩器：%s", JAVASCRIPT_MIME_TYPE, name)
