"""
压缩器的核心数据结构。

- EngineCapability：宿主管道协商出的协议能力（是否支持 Source Map）
- AssetInput：管道交给压缩器的资产记录（只读）
- CompileResult：返回给管道的结果（每次调用新建）
- CompressorConfig：构造一次、之后不可变的压缩器配置，被所有并发的 compile 调用共享
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from terser_compressor.config.defaults import ADAPTER_VERSION, MAP_SUPPORT_MIN_VERSION
from terser_compressor.config.schema import TerserOptions
from terser_compressor.errors import ConfigError
from terser_compressor.sourcemap.model import SourceMap

_MAJOR_VERSION = re.compile(r"^\s*v?(\d+)")


class EngineCapability(str, Enum):
    """
    引擎协议能力。

    构造压缩器时解析一次，决定使用哪个 EngineAdapter，
    之后不再在调用路径上做版本判断。
    """

    LEGACY_NO_MAP = "legacy_no_map"
    """宿主管道不支持 Source Map 元数据：只返回压缩后的代码"""

    MAP_CAPABLE = "map_capable"
    """宿主管道支持 Source Map：生成并合并 Map"""

    @classmethod
    def for_pipeline(cls, pipeline_version: str | int | None) -> EngineCapability:
        """
        根据宿主管道版本解析协议能力。

        参数:
            pipeline_version: 管道版本（如 "4.2.0"、"3.7"、4）；None 表示未声明

        返回:
            主版本 ≥ 4 或未声明时为 MAP_CAPABLE，否则为 LEGACY_NO_MAP

        异常:
            ConfigError: 版本号无法识别
        """
        if pipeline_version is None:
            return cls.MAP_CAPABLE
        match = _MAJOR_VERSION.match(str(pipeline_version))
        if match is None:
            raise ConfigError(
                what=f"无法识别宿主管道版本 '{pipeline_version}'。",
                why="版本号需要以主版本数字开头，例如 '4.1.0' 或 '3'。",
                how="传入正确的 pipeline_version，或直接指定 capability。",
                field_path="pipeline_version",
            )
        if int(match.group(1)) >= MAP_SUPPORT_MIN_VERSION:
            return cls.MAP_CAPABLE
        return cls.LEGACY_NO_MAP


@dataclass(frozen=True)
class AssetInput:
    """
    宿主管道交给压缩器的资产记录。

    属性:
        data: JavaScript 源码
        filename: 资产文件路径
        metadata: 上游处理器附带的元数据，`metadata["map"]` 为上游 Source Map
        load_path: 资产所在的加载路径根目录（用于生成管道相对路径）
    """

    data: str
    filename: str
    metadata: Mapping[str, Any] = field(default_factory=dict)
    load_path: str | None = None

    @property
    def upstream_map(self) -> Any:
        return self.metadata.get("map")

    @classmethod
    def from_record(cls, record: AssetInput | Mapping[str, Any]) -> AssetInput:
        """
        从管道的字典记录构造 AssetInput。

        `data` 可以是 str、UTF-8 bytes 或带 read() 的文件对象。

        异常:
            TypeError: 记录缺少 data / filename，或 data 类型不支持
        """
        if isinstance(record, AssetInput):
            return record
        if not isinstance(record, Mapping):
            raise TypeError(
                f"资产记录必须是字典或 AssetInput，实际类型为 {type(record).__name__}。"
            )
        if "data" not in record:
            raise TypeError("资产记录缺少 'data' 字段。")

        metadata = record.get("metadata") or {}
        return cls(
            data=_read_source(record["data"]),
            filename=str(record.get("filename") or "input.js"),
            metadata=metadata,
            load_path=record.get("load_path"),
        )


def _read_source(data: Any) -> str:
    if hasattr(data, "read"):
        data = data.read()
    if isinstance(data, bytes):
        return data.decode("utf-8")
    if isinstance(data, str):
        return data
    raise TypeError(f"资产 data 必须是 str、bytes 或文件对象，实际类型为 {type(data).__name__}。")


@dataclass(frozen=True)
class EngineOutput:
    """EngineAdapter 的输出：压缩后的代码，以及（仅 Map 协议）解析后的引擎 Map。"""

    data: str
    raw_map: SourceMap | None = None


@dataclass(frozen=True)
class CompileResult:
    """
    一次编译的结果，调用方拥有其所有权。

    属性:
        data: 压缩后的代码
        map: 合并后的 Source Map（仅 Map 协议）
    """

    data: str
    map: dict[str, Any] | None = None

    def to_record(self) -> dict[str, Any]:
        """转换为宿主管道使用的字典形式 {data, map?}。"""
        record: dict[str, Any] = {"data": self.data}
        if self.map is not None:
            record["map"] = self.map
        return record


@dataclass(frozen=True)
class CompressorConfig:
    """
    压缩器配置：构造一次，之后不可变。

    属性:
        options: 规范化后的选项树
        cache_key: 由 (引擎版本, 适配层版本, 选项) 派生的缓存键
        engine_capability: 协议能力
        engine_version: 引擎版本号
        adapter_version: 适配层版本号
    """

    options: TerserOptions
    cache_key: str
    engine_capability: EngineCapability
    engine_version: str
    adapter_version: str = ADAPTER_VERSION
