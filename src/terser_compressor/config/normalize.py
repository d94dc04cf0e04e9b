"""
选项规范化：调用方字典 → 不可变的选项树。

`normalize()` 是纯函数：不修改调用方传入的对象，
相同输入（与键顺序无关）总是得到相等的 `TerserOptions`。
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from terser_compressor.config.schema import TerserOptions
from terser_compressor.errors import ConfigError

logger = logging.getLogger(__name__)

NormalizedOptions = TerserOptions


def normalize(
    raw_options: Mapping[str, Any] | TerserOptions | None = None,
    source: str = "<options>",
) -> NormalizedOptions:
    """
    规范化压缩器选项。

    参数:
        raw_options: 调用方提供的选项字典；已规范化的 `TerserOptions` 原样返回
        source: 选项来源（文件路径等），只用于错误信息

    返回:
        TerserOptions 实例

    异常:
        ConfigError: 出现未识别的键或取值不合法
    """
    if isinstance(raw_options, TerserOptions):
        return raw_options
    if raw_options is None:
        raw_options = {}
    if not isinstance(raw_options, Mapping):
        raise ConfigError(
            what=f"压缩器选项 '{source}' 必须是字典（mapping）。",
            why=f"实际类型为 {type(raw_options).__name__}。",
            how="以键值对形式传入选项，例如 {'mangle': False}。",
            config_path=source,
        )

    try:
        options = TerserOptions.model_validate(dict(raw_options))
    except ValidationError as e:
        raise config_error_from_validation(e, source) from e

    logger.debug("选项规范化完成：%s", source)
    return options


def config_error_from_validation(error: ValidationError, source: str) -> ConfigError:
    """把 Pydantic 校验错误转换为字段级别的 ConfigError。"""
    error_details = []
    field_paths = []
    for err in error.errors():
        field_path = " → ".join(str(loc) for loc in err["loc"])
        field_paths.append(".".join(str(loc) for loc in err["loc"]))
        error_details.append(f"  字段 '{field_path}': {err['msg']}")

    return ConfigError(
        what=f"压缩器选项 '{source}' 校验失败（{error.error_count()} 个错误）。",
        why="\n".join(error_details),
        how="删除未识别的选项或修正取值，可用选项见 docs/options.md。"
            "可以使用 'terser-compressor validate <path>' 命令进行预校验。",
        config_path=source,
        field_path=field_paths[0] if field_paths else "",
        errors=field_paths,
    )
