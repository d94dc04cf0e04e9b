"""
Base64 VLQ 编解码：Source Map v3 的 mappings 字段格式。

mappings 字符串按生成文件的行用 ';' 分隔，行内的段用 ',' 分隔，
每段是 1、4 或 5 个 VLQ 整数：

    [生成列, 源文件索引, 原始行, 原始列, 名称索引]

生成列在每行开头重置为相对 0，其余字段在整个 mappings 中相对前一段累计。
本模块的 decode/encode 负责绝对值与相对值之间的换算。
"""

from __future__ import annotations

from collections.abc import Sequence

_BASE64 = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"
_BASE64_VALUES = {char: index for index, char in enumerate(_BASE64)}

_VLQ_SHIFT = 5
_VLQ_BASE = 1 << _VLQ_SHIFT
_VLQ_MASK = _VLQ_BASE - 1
_VLQ_CONTINUATION = _VLQ_BASE

# 一段合法的字段数：仅生成列 / 带源位置 / 带源位置和名称
_SEGMENT_LENGTHS = (1, 4, 5)

Segment = tuple[int, ...]


def encode_vlq(value: int) -> str:
    """把一个整数编码为 Base64 VLQ 字符串。"""
    vlq = ((-value) << 1) | 1 if value < 0 else value << 1
    chars = []
    while True:
        digit = vlq & _VLQ_MASK
        vlq >>= _VLQ_SHIFT
        if vlq:
            digit |= _VLQ_CONTINUATION
        chars.append(_BASE64[digit])
        if not vlq:
            return "".join(chars)


def decode_vlq(text: str) -> list[int]:
    """
    把一段 Base64 VLQ 字符串解码为整数列表。

    异常:
        ValueError: 出现非 Base64 字符，或最后一个整数不完整
    """
    values: list[int] = []
    value = 0
    shift = 0
    for char in text:
        try:
            digit = _BASE64_VALUES[char]
        except KeyError:
            raise ValueError(f"非法的 Base64 VLQ 字符：{char!r}") from None
        value += (digit & _VLQ_MASK) << shift
        if digit & _VLQ_CONTINUATION:
            shift += _VLQ_SHIFT
            continue
        negative = value & 1
        value >>= 1
        values.append(-value if negative else value)
        value = 0
        shift = 0
    if shift:
        raise ValueError(f"VLQ 序列不完整：{text!r}")
    return values


def decode_mappings(mappings: str) -> list[list[Segment]]:
    """
    解码 mappings 字符串为按行分组的绝对位置段。

    返回:
        列表下标为生成行（0 起），每行是若干段，
        每段为 (生成列,) 或 (生成列, 源索引, 原始行, 原始列[, 名称索引])

    异常:
        ValueError: VLQ 非法或段的字段数不是 1/4/5
    """
    lines: list[list[Segment]] = []
    source = original_line = original_column = name = 0

    for line_text in mappings.split(";"):
        line: list[Segment] = []
        generated_column = 0
        if line_text:
            for segment_text in line_text.split(","):
                if not segment_text:
                    continue
                fields = decode_vlq(segment_text)
                if len(fields) not in _SEGMENT_LENGTHS:
                    raise ValueError(
                        f"段 {segment_text!r} 含 {len(fields)} 个字段，只允许 1、4 或 5 个"
                    )
                generated_column += fields[0]
                if len(fields) == 1:
                    line.append((generated_column,))
                    continue
                source += fields[1]
                original_line += fields[2]
                original_column += fields[3]
                if len(fields) == 5:
                    name += fields[4]
                    line.append((generated_column, source, original_line, original_column, name))
                else:
                    line.append((generated_column, source, original_line, original_column))
        lines.append(line)

    return lines


def encode_mappings(lines: Sequence[Sequence[Segment]]) -> str:
    """把按行分组的绝对位置段编码为 mappings 字符串（各行内须已按生成列排序）。"""
    encoded_lines = []
    source = original_line = original_column = name = 0

    for line in lines:
        generated_column = 0
        encoded_segments = []
        for segment in line:
            parts = [encode_vlq(segment[0] - generated_column)]
            generated_column = segment[0]
            if len(segment) >= 4:
                parts.append(encode_vlq(segment[1] - source))
                parts.append(encode_vlq(segment[2] - original_line))
                parts.append(encode_vlq(segment[3] - original_column))
                source, original_line, original_column = segment[1], segment[2], segment[3]
            if len(segment) == 5:
                parts.append(encode_vlq(segment[4] - name))
                name = segment[4]
            encoded_segments.append("".join(parts))
        encoded_lines.append(",".join(encoded_segments))

    return ";".join(encoded_lines)
