"""
Source Map 合并：把引擎新生成的 Map 与上游 Map 串联成一张。

上游处理器（转译、拼接）已经给输入附带了一张 Map（中间文件 → 原始文件），
引擎压缩后又生成一张（压缩输出 → 中间文件）。合并后得到
压缩输出 → 原始文件 的单张 Map。

在上游 Map 中找不到对应位置的映射以"只有生成位置"的段保留，不会导致失败。
"""

from __future__ import annotations

import bisect
import logging
import posixpath
from collections import defaultdict
from collections.abc import Mapping
from typing import Any
from urllib.parse import unquote, urlsplit

from terser_compressor.sourcemap.model import MappingSegment, SourceMap

logger = logging.getLogger(__name__)


class _OriginalPositionIndex:
    """按中间文件的行索引上游 Map，查找某列之前最近的映射。"""

    def __init__(self, upstream: SourceMap) -> None:
        by_line: dict[int, list[MappingSegment]] = defaultdict(list)
        for segment in upstream.mappings:
            by_line[segment.generated_line].append(segment)

        # 上游 Map 不保证有序；用全序键排序，使结果与条目顺序无关
        self._segments: dict[int, list[MappingSegment]] = {}
        self._columns: dict[int, list[int]] = {}
        for line, segments in by_line.items():
            segments.sort(key=MappingSegment.sort_key)
            self._segments[line] = segments
            self._columns[line] = [segment.generated_column for segment in segments]

    def lookup(self, line: int, column: int) -> MappingSegment | None:
        columns = self._columns.get(line)
        if not columns:
            return None
        position = bisect.bisect_right(columns, column) - 1
        if position < 0:
            return None
        return self._segments[line][position]


def combine_source_maps(
    upstream: SourceMap | Mapping[str, Any] | str | None,
    fresh: SourceMap,
) -> SourceMap:
    """
    合并上游 Map 与引擎新生成的 Map。

    参数:
        upstream: 输入资产元数据中的 Map（中间文件 → 原始文件），可为 None
        fresh: 引擎生成并已格式化的 Map（压缩输出 → 中间文件）

    返回:
        压缩输出 → 原始文件 的 Map；没有上游 Map 时直接返回 fresh

    异常:
        MapCombineError: 上游 Map 的结构完全无法解析
    """
    if upstream is None:
        return fresh

    upstream_map = SourceMap.parse(upstream)
    index = _OriginalPositionIndex(upstream_map)

    combined: list[MappingSegment] = []
    unresolved = 0
    for segment in fresh.mappings:
        if not segment.is_resolved:
            combined.append(segment)
            continue

        original = index.lookup(segment.original_line or 0, segment.original_column or 0)
        if original is None or not original.is_resolved:
            unresolved += 1
            combined.append(MappingSegment(segment.generated_line, segment.generated_column))
            continue

        combined.append(
            MappingSegment(
                generated_line=segment.generated_line,
                generated_column=segment.generated_column,
                source=original.source,
                original_line=original.original_line,
                original_column=original.original_column,
                name=original.name or segment.name,
            )
        )

    if unresolved:
        logger.debug(
            "合并 Source Map 时有 %d/%d 个映射在上游 Map 中没有对应位置，已保留为未解析段。",
            unresolved,
            len(fresh.mappings),
        )

    combined.sort(key=MappingSegment.sort_key)
    return SourceMap(
        mappings=tuple(combined),
        file=fresh.file,
        sources=(),
        names=(),
        sources_content=dict(upstream_map.sources_content),
    )


def format_source_map(
    source_map: SourceMap,
    filename: str,
    load_path: str | None = None,
) -> SourceMap:
    """
    把引擎 Map 中的路径改写为相对于资产管道的路径。

    - `file` 改为资产的逻辑路径（相对 load_path）
    - `file://` URI 去掉协议头；相对路径的源按资产所在目录解析
    - 源文件路径改为相对 `file` 所在目录

    参数:
        source_map: 引擎生成的 Map
        filename: 资产文件路径（与传给引擎的文件名一致）
        load_path: 资产所在的加载路径根目录

    返回:
        路径改写后的新 Map，映射位置不变
    """
    filename = _to_posix(filename)
    root = _to_posix(load_path) if load_path else None
    file = _logical_path(filename, root)
    file_dir = posixpath.dirname(file) or "."

    renamed: dict[str, str] = {}

    def rewrite(source: str) -> str:
        if source not in renamed:
            path = _to_posix(source)
            if path.startswith("file://"):
                path = unquote(urlsplit(path).path)
            if path != filename and not posixpath.isabs(path):
                path = posixpath.normpath(posixpath.join(posixpath.dirname(filename), path))
            logical = _logical_path(path, root)
            if posixpath.isabs(logical) == posixpath.isabs(file_dir):
                logical = posixpath.relpath(logical, file_dir)
            renamed[source] = logical
        return renamed[source]

    mappings = tuple(
        segment if not segment.is_resolved
        else MappingSegment(
            generated_line=segment.generated_line,
            generated_column=segment.generated_column,
            source=rewrite(segment.source),
            original_line=segment.original_line,
            original_column=segment.original_column,
            name=segment.name,
        )
        for segment in source_map.mappings
    )
    return SourceMap(
        mappings=mappings,
        file=file,
        sources=tuple(rewrite(source) for source in source_map.sources),
        names=source_map.names,
        sources_content={
            rewrite(source): content for source, content in source_map.sources_content.items()
        },
    )


def _to_posix(path: str) -> str:
    return path.replace("\\", "/")


def _logical_path(path: str, load_path: str | None) -> str:
    """返回相对 load_path 的逻辑路径；不在 load_path 之下时原样返回。"""
    if load_path:
        root = load_path.rstrip("/") + "/"
        if path.startswith(root):
            return path[len(root):]
    return path
