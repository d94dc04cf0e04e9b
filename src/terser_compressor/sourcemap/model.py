"""
Source Map 的统一内存表示。

引擎产出的 JSON 字符串、宿主管道元数据里的字典、由拼接产生的索引 Map（sections），
在合并之前都先解析为同一个 `SourceMap`：映射段保存绝对位置，
源文件和名称直接以字符串引用，不依赖原 Map 里的索引表。

索引表在 to_dict() 时按首次出现顺序重建。
"""

from __future__ import annotations

import json
import posixpath
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any

from terser_compressor.errors import MapCombineError
from terser_compressor.sourcemap.vlq import decode_mappings, encode_mappings

SOURCE_MAP_VERSION = 3


@dataclass(frozen=True)
class MappingSegment:
    """
    一条映射：生成位置 → 原始位置。

    行号从 0 开始（与 mappings 编码一致）。`source` 为 None 的段只有生成位置，
    表示该位置无法追溯到原始文件。
    """

    generated_line: int
    generated_column: int
    source: str | None = None
    original_line: int | None = None
    original_column: int | None = None
    name: str | None = None

    @property
    def is_resolved(self) -> bool:
        return self.source is not None

    def sort_key(self) -> tuple[int, int, str, int, int, str]:
        """全序排序键，保证输出与输入条目顺序无关。"""
        return (
            self.generated_line,
            self.generated_column,
            self.source or "",
            -1 if self.original_line is None else self.original_line,
            -1 if self.original_column is None else self.original_column,
            self.name or "",
        )


@dataclass(frozen=True)
class SourceMap:
    """
    Source Map v3。

    属性:
        mappings: 全部映射段（不要求有序）
        file: 生成文件名
        sources: 声明的源文件顺序（to_dict 时优先沿用）
        names: 声明的名称顺序
        sources_content: 源文件名 → 源码内容
    """

    mappings: tuple[MappingSegment, ...] = ()
    file: str | None = None
    sources: tuple[str, ...] = ()
    names: tuple[str, ...] = ()
    sources_content: dict[str, str | None] = field(default_factory=dict)

    @classmethod
    def parse(cls, value: SourceMap | Mapping[str, Any] | str | bytes) -> SourceMap:
        """
        从 JSON 字符串或字典解析 Source Map。

        异常:
            MapCombineError: 结构无法解析（非字典、版本不是 3、VLQ 非法、索引越界）
        """
        if isinstance(value, SourceMap):
            return value
        if isinstance(value, (str, bytes)):
            try:
                value = json.loads(value)
            except json.JSONDecodeError as e:
                raise MapCombineError(
                    what="Source Map 不是合法的 JSON。",
                    why=str(e),
                    how="检查上游处理器输出的 map 是否被截断或混入了其它内容。",
                ) from e
        if not isinstance(value, Mapping):
            raise MapCombineError(
                what="Source Map 必须是字典（mapping）。",
                why=f"实际类型为 {type(value).__name__}。",
                how="确认资产元数据中的 map 是解析后的 Source Map 对象。",
            )
        if "sections" in value:
            return _flatten_index_map(value)
        return _parse_regular_map(value)

    def to_dict(self) -> dict[str, Any]:
        """序列化为标准 v3 字典，映射按生成位置排序。"""
        sources = list(self.sources)
        names = list(self.names)
        source_index = {source: i for i, source in enumerate(sources)}
        name_index = {name: i for i, name in enumerate(names)}

        lines: list[list[tuple[int, ...]]] = []
        for segment in sorted(self.mappings, key=MappingSegment.sort_key):
            while len(lines) <= segment.generated_line:
                lines.append([])
            if not segment.is_resolved:
                lines[segment.generated_line].append((segment.generated_column,))
                continue
            if segment.source not in source_index:
                source_index[segment.source] = len(sources)
                sources.append(segment.source)
            fields: tuple[int, ...] = (
                segment.generated_column,
                source_index[segment.source],
                segment.original_line or 0,
                segment.original_column or 0,
            )
            if segment.name is not None:
                if segment.name not in name_index:
                    name_index[segment.name] = len(names)
                    names.append(segment.name)
                fields += (name_index[segment.name],)
            lines[segment.generated_line].append(fields)

        result: dict[str, Any] = {"version": SOURCE_MAP_VERSION}
        if self.file is not None:
            result["file"] = self.file
        result["sources"] = sources
        result["names"] = names
        result["mappings"] = encode_mappings(lines)
        if any(self.sources_content.get(source) is not None for source in sources):
            result["sourcesContent"] = [self.sources_content.get(source) for source in sources]
        return result

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, separators=(",", ":"))

    def replace(self, **changes: Any) -> SourceMap:
        return replace(self, **changes)


def _parse_regular_map(data: Mapping[str, Any]) -> SourceMap:
    version = data.get("version")
    if version != SOURCE_MAP_VERSION:
        raise MapCombineError(
            what=f"不支持的 Source Map 版本：{version!r}。",
            why="只有 v3 的行/列语义与引擎输出一致，其它版本无法可靠地合并。",
            how="让上游处理器输出 version 3 的 Source Map。",
            details={"version": version},
        )

    mappings_text = data.get("mappings", "")
    raw_sources = data.get("sources", [])
    raw_names = data.get("names", [])
    if not isinstance(mappings_text, str):
        raise MapCombineError(what="Source Map 的 mappings 字段必须是字符串。")
    if not isinstance(raw_sources, list) or not isinstance(raw_names, list):
        raise MapCombineError(what="Source Map 的 sources 和 names 字段必须是数组。")
    if not all(source is None or isinstance(source, str) for source in raw_sources):
        raise MapCombineError(
            what="Source Map 的 sources 只能包含字符串或 null。",
            why=f"sources = {raw_sources!r}",
            how="检查上游处理器生成的 sources 字段。",
        )
    if not all(isinstance(name, str) for name in raw_names):
        raise MapCombineError(
            what="Source Map 的 names 只能包含字符串。",
            why=f"names = {raw_names!r}",
            how="检查上游处理器生成的 names 字段。",
        )
    source_root = data.get("sourceRoot")
    if source_root is not None and not isinstance(source_root, str):
        raise MapCombineError(what="Source Map 的 sourceRoot 字段必须是字符串。")

    root = source_root or ""
    sources = [
        None if source is None else (posixpath.join(root, source) if root else source)
        for source in raw_sources
    ]
    names = list(raw_names)
    contents = data.get("sourcesContent") or []
    if not isinstance(contents, list):
        raise MapCombineError(what="Source Map 的 sourcesContent 字段必须是数组。")

    try:
        decoded = decode_mappings(mappings_text)
    except ValueError as e:
        raise MapCombineError(
            what="Source Map 的 mappings 字段无法解码。",
            why=str(e),
            how="检查上游处理器是否输出了合法的 Base64 VLQ。",
        ) from e

    segments = []
    for line_number, line in enumerate(decoded):
        for fields in line:
            if len(fields) == 1:
                segments.append(MappingSegment(line_number, fields[0]))
                continue
            if fields[1] < 0 or (len(fields) == 5 and fields[4] < 0):
                raise MapCombineError(
                    what="Source Map 的映射含有负数索引。",
                    why=f"第 {line_number + 1} 行的段 {fields}。",
                )
            try:
                source = sources[fields[1]]
                name = names[fields[4]] if len(fields) == 5 else None
            except IndexError:
                raise MapCombineError(
                    what="Source Map 的映射引用了不存在的源文件或名称。",
                    why=f"第 {line_number + 1} 行的段 {fields} 索引越界"
                        f"（{len(sources)} 个源文件，{len(names)} 个名称）。",
                    how="检查上游处理器生成的 sources / names 是否完整。",
                ) from None
            if source is None:
                segments.append(MappingSegment(line_number, fields[0]))
                continue
            segments.append(
                MappingSegment(
                    generated_line=line_number,
                    generated_column=fields[0],
                    source=source,
                    original_line=fields[2],
                    original_column=fields[3],
                    name=name,
                )
            )

    sources_content = {
        source: content
        for source, content in zip(sources, contents)
        if source is not None
    }
    file = data.get("file")
    return SourceMap(
        mappings=tuple(segments),
        file=file if isinstance(file, str) else None,
        sources=tuple(source for source in sources if source is not None),
        names=tuple(names),
        sources_content=sources_content,
    )


def _flatten_index_map(data: Mapping[str, Any]) -> SourceMap:
    """把带 sections 的索引 Map 展开为普通 Map。"""
    if data.get("version") != SOURCE_MAP_VERSION:
        raise MapCombineError(
            what=f"不支持的索引 Map 版本：{data.get('version')!r}。",
            how="让上游处理器输出 version 3 的 Source Map。",
        )
    sections = data["sections"]
    if not isinstance(sections, list):
        raise MapCombineError(what="索引 Map 的 sections 字段必须是数组。")

    segments: list[MappingSegment] = []
    sources: list[str] = []
    names: list[str] = []
    sources_content: dict[str, str | None] = {}

    for position, section in enumerate(sections):
        if not isinstance(section, Mapping) or "map" not in section:
            raise MapCombineError(
                what=f"索引 Map 的第 {position + 1} 个 section 缺少内嵌的 map。",
                why="引用外部 url 的 section 不受支持。",
                how="让上游处理器内联每个 section 的 map。",
            )
        offset = section.get("offset") or {}
        line_offset = offset.get("line", 0)
        column_offset = offset.get("column", 0)
        if not isinstance(line_offset, int) or not isinstance(column_offset, int):
            raise MapCombineError(what=f"索引 Map 的第 {position + 1} 个 section 的 offset 非法。")

        inner = SourceMap.parse(section["map"])
        for segment in inner.mappings:
            column = segment.generated_column
            if segment.generated_line == 0:
                column += column_offset
            segments.append(
                replace(
                    segment,
                    generated_line=segment.generated_line + line_offset,
                    generated_column=column,
                )
            )
        sources.extend(source for source in inner.sources if source not in sources)
        names.extend(name for name in inner.names if name not in names)
        sources_content.update(inner.sources_content)

    file = data.get("file")
    return SourceMap(
        mappings=tuple(segments),
        file=file if isinstance(file, str) else None,
        sources=tuple(sources),
        names=tuple(names),
        sources_content=sources_content,
    )
