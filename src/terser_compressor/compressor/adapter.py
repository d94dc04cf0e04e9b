"""
EngineAdapter：对外部引擎的唯一调用点。

两种协议变体在构造时由 `select_adapter()` 选定一次：
- LegacyAdapter：调用引擎的普通编译入口，只返回代码
- MapAdapter：在选项中合并 `source_map: {filename}`，调用生成 Map 的入口，
  返回代码和解析后的引擎 Map

引擎报告的错误一律包装为 CompileError，原始诊断文本保持不变。
压缩是确定性的，重试不会改变结果，所以从不重试。
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Protocol

from terser_compressor.compressor.base import (
    AssetInput,
    CompressorConfig,
    EngineCapability,
    EngineOutput,
)
from terser_compressor.engine.protocol import EngineError, MinifierEngine
from terser_compressor.errors import CompileError
from terser_compressor.sourcemap.model import SourceMap

logger = logging.getLogger(__name__)


class EngineAdapter(Protocol):
    """引擎适配器协议。"""

    capability: EngineCapability

    def compile(self, config: CompressorConfig, asset: AssetInput) -> EngineOutput:
        """调用引擎编译资产，引擎拒绝输入时抛出 CompileError。"""
        ...


class LegacyAdapter:
    """不支持 Source Map 的宿主管道：只调用普通编译入口。"""

    capability = EngineCapability.LEGACY_NO_MAP

    def __init__(self, engine: MinifierEngine) -> None:
        self._engine = engine

    def compile(self, config: CompressorConfig, asset: AssetInput) -> EngineOutput:
        options = config.options.to_engine_options()
        logger.debug("编译 %s（无 Source Map）", asset.filename)
        with _wrap_engine_errors(config, asset):
            code = self._engine.compile(asset.data, options, asset.filename)
        return EngineOutput(data=code)


class MapAdapter:
    """支持 Source Map 的宿主管道：调用生成 Map 的编译入口。"""

    capability = EngineCapability.MAP_CAPABLE

    def __init__(self, engine: MinifierEngine) -> None:
        self._engine = engine

    def compile(self, config: CompressorConfig, asset: AssetInput) -> EngineOutput:
        options = config.options.with_source_map(asset.filename).to_engine_options()
        logger.debug("编译 %s（生成 Source Map）", asset.filename)
        with _wrap_engine_errors(config, asset):
            code, raw_map = self._engine.compile_with_map(asset.data, options, asset.filename)
        return EngineOutput(data=code, raw_map=SourceMap.parse(raw_map))


def select_adapter(capability: EngineCapability, engine: MinifierEngine) -> EngineAdapter:
    """按协议能力选择适配器。"""
    if capability is EngineCapability.MAP_CAPABLE:
        return MapAdapter(engine)
    return LegacyAdapter(engine)


@contextmanager
def _wrap_engine_errors(config: CompressorConfig, asset: AssetInput) -> Iterator[None]:
    try:
        yield
    except EngineError as e:
        raise compile_error_from_engine(e, asset, config.options.error_context_lines) from e


def compile_error_from_engine(
    error: EngineError,
    asset: AssetInput,
    context_lines: int,
) -> CompileError:
    """
    把引擎错误转换为 CompileError。

    `what` 是引擎的原始诊断文本；`why` 附上出错位置附近的源码。
    """
    filename = error.filename or asset.filename
    if error.line is None:
        why = f"{filename}：引擎没有提供出错位置。"
    else:
        location = f"{filename} 第 {error.line} 行"
        if error.col is not None:
            location += f"第 {error.col} 列"
        snippet = _source_context(asset.data, error.line, error.col, context_lines)
        why = f"{location}：\n{snippet}" if snippet else f"{location}。"

    return CompileError(
        what=error.message,
        why=why,
        how="修正该位置的语法错误，或检查压缩选项是否被当前引擎版本支持。",
        filename=filename,
        line=error.line,
        col=error.col,
    )


def _source_context(source: str, line: int, col: int | None, context_lines: int) -> str:
    """截取出错行附近的源码，出错行用 '>' 标记，列位置用 '^' 标记。"""
    if context_lines <= 0:
        return ""
    lines = source.splitlines()
    if not 1 <= line <= len(lines):
        return ""

    start = max(1, line - context_lines // 2)
    end = min(len(lines), start + context_lines - 1)
    width = len(str(end))
    output = []
    for number in range(start, end + 1):
        marker = ">" if number == line else " "
        output.append(f"{marker} {number:>{width}} | {lines[number - 1]}")
        if number == line and col is not None:
            output.append(f"  {' ' * width} | {' ' * col}^")
    return "\n".join(output)
