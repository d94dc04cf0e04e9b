"""
Compressor：资产管道中的可缓存 JavaScript 压缩器。

构造时完成全部准备工作：规范化选项（非法选项在这里就抛出 ConfigError，
早于任何引擎调用）、解析协议能力并选定适配器、派生 cache key。
之后每次调用只做一件事：编译资产，必要时合并 Source Map。

基本用法::

    compressor = Compressor({"mangle": {"reserved": ["jQuery"]}})
    result = compressor({
        "data": source,
        "filename": "app/assets/javascripts/application.js",
        "metadata": {"map": upstream_map},
    })
    result["data"], result["map"]

旧版管道（不支持 Source Map）::

    compressor = Compressor(pipeline_version="3.7.2")
    compressor({"data": source, "filename": "application.js"})["data"]
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from terser_compressor.compressor.adapter import EngineAdapter, select_adapter
from terser_compressor.compressor.base import (
    AssetInput,
    CompileResult,
    CompressorConfig,
    EngineCapability,
)
from terser_compressor.compressor.cache_key import derive_cache_key
from terser_compressor.config.defaults import ADAPTER_VERSION
from terser_compressor.config.normalize import normalize
from terser_compressor.config.schema import TerserOptions
from terser_compressor.engine.protocol import MinifierEngine
from terser_compressor.engine.registry import get_engine
from terser_compressor.sourcemap.combine import combine_source_maps, format_source_map

logger = logging.getLogger(__name__)


class Compressor:
    """
    可缓存的 terser 压缩器。

    参数:
        options: 压缩器选项（字典或 TerserOptions）。None 时使用默认选项。
        engine: 自定义引擎；None 时使用进程级默认引擎。
        capability: 显式指定协议能力；None 时由 pipeline_version 解析。
        pipeline_version: 宿主管道版本，主版本 ≥ 4 时生成 Source Map。

    异常:
        ConfigError: 选项中有未识别的键或非法取值
    """

    def __init__(
        self,
        options: Mapping[str, Any] | TerserOptions | None = None,
        *,
        engine: MinifierEngine | None = None,
        capability: EngineCapability | None = None,
        pipeline_version: str | int | None = None,
    ) -> None:
        normalized = normalize(options)
        if capability is None:
            capability = EngineCapability.for_pipeline(pipeline_version)

        self._engine = engine if engine is not None else get_engine()
        self._adapter: EngineAdapter = select_adapter(capability, self._engine)

        engine_version = self._engine.version
        self._config = CompressorConfig(
            options=normalized,
            cache_key=derive_cache_key(engine_version, ADAPTER_VERSION, normalized),
            engine_capability=capability,
            engine_version=engine_version,
        )
        logger.debug(
            "创建压缩器：capability=%s, cache_key=%s",
            capability.value,
            self._config.cache_key,
        )

    @property
    def config(self) -> CompressorConfig:
        return self._config

    @property
    def cache_key(self) -> str:
        """供宿主管道组成缓存条目键的只读字符串。"""
        return self._config.cache_key

    @property
    def options(self) -> TerserOptions:
        return self._config.options

    @property
    def capability(self) -> EngineCapability:
        return self._config.engine_capability

    def compile(self, asset: AssetInput | Mapping[str, Any]) -> CompileResult:
        """
        编译一个资产。

        参数:
            asset: AssetInput 或管道的字典记录 {data, filename, metadata}

        返回:
            CompileResult；Map 协议下附带合并后的 Source Map

        异常:
            CompileError: 引擎拒绝了输入
            MapCombineError: 上游 Map 无法解析
        """
        asset = AssetInput.from_record(asset)
        output = self._adapter.compile(self._config, asset)
        if output.raw_map is None:
            return CompileResult(data=output.data)

        fresh = format_source_map(output.raw_map, asset.filename, asset.load_path)
        combined = combine_source_maps(asset.upstream_map, fresh)
        return CompileResult(data=output.data, map=combined.to_dict())

    def __call__(self, asset: AssetInput | Mapping[str, Any]) -> dict[str, Any]:
        """宿主管道的调用入口：返回 {data, map?}。"""
        return self.compile(asset).to_record()

    def __repr__(self) -> str:
        return f"Compressor(capability={self.capability.value!r}, cache_key={self.cache_key!r})"
