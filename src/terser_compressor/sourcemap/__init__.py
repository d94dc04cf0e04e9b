"""
Source Map 模块：解析、路径格式化与两阶段合并。
"""

from terser_compressor.sourcemap.combine import combine_source_maps, format_source_map
from terser_compressor.sourcemap.model import MappingSegment, SourceMap
from terser_compressor.sourcemap.vlq import (
    decode_mappings,
    decode_vlq,
    encode_mappings,
    encode_vlq,
)

__all__ = [
    "MappingSegment",
    "SourceMap",
    "combine_source_maps",
    "decode_mappings",
    "decode_vlq",
    "encode_mappings",
    "encode_vlq",
    "format_source_map",
]
