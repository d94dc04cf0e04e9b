"""
YAML 选项文件加载与校验。

压缩器选项通常随项目提交在 `terser.yaml` 中。本模块负责：
1. 从文件路径加载 YAML 选项，或在默认路径中自动搜索
2. 合并运行时覆盖（默认 → 文件 → 覆盖）
3. 交给 `normalize()` 校验，输出精确到字段的错误信息

库模式下的 Compressor() 从不自动读取文件，自动搜索只给 CLI 使用。
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from terser_compressor.config.defaults import OPTIONS_SEARCH_PATHS
from terser_compressor.config.normalize import NormalizedOptions, normalize
from terser_compressor.errors import ConfigError, OptionsLoadError

logger = logging.getLogger(__name__)

_SEARCH_PATHS = [Path(p) for p in OPTIONS_SEARCH_PATHS]


def load_options(
    path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
    search: bool = False,
) -> NormalizedOptions:
    """
    加载并校验压缩器选项。

    加载优先级：
    1. 显式指定的路径
    2. search=True 时，当前目录下的默认搜索路径
    3. 全部使用默认值

    参数:
        path: YAML 文件路径
        overrides: 运行时覆盖的选项（深度合并到文件内容之上）
        search: 未指定 path 时是否搜索默认路径

    返回:
        规范化后的选项树

    异常:
        OptionsLoadError: 文件不存在或格式错误
        ConfigError: 选项校验失败
    """
    raw_options: dict[str, Any] = {}
    source = "<default>"

    if path is not None:
        raw_options = _load_yaml_file(Path(path))
        source = str(path)
    elif search:
        for search_path in _SEARCH_PATHS:
            if search_path.exists():
                logger.info("自动发现选项文件：%s", search_path)
                raw_options = _load_yaml_file(search_path)
                source = str(search_path)
                break
        else:
            logger.info("未找到选项文件，使用默认选项。")

    if overrides:
        raw_options = _deep_merge(raw_options, overrides)

    return normalize(raw_options, source=source)


def _load_yaml_file(path: Path) -> dict[str, Any]:
    """加载并解析 YAML 文件。"""
    if not path.exists():
        raise OptionsLoadError(
            what=f"选项文件 '{path}' 不存在。",
            why=f"在路径 '{path.absolute()}' 下未找到该文件。",
            how="请检查文件路径是否正确。",
            file_path=str(path),
        )

    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise OptionsLoadError(
            what=f"无法读取选项文件 '{path}'。",
            why=str(e),
            how="请检查文件权限和编码（需要 UTF-8）。",
            file_path=str(path),
        ) from e

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise OptionsLoadError(
            what=f"选项文件 '{path}' 的 YAML 格式无效。",
            why=str(e),
            how="请使用 YAML 格式校验工具检查文件语法。",
            file_path=str(path),
        ) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise OptionsLoadError(
            what=f"选项文件 '{path}' 的根元素必须是字典（mapping）。",
            why=f"实际类型为 {type(data).__name__}。",
            how="请确保 YAML 文件的根元素是键值对形式，例如：\n"
                "  mangle:\n"
                "    reserved: [jQuery]\n"
                "  output:\n"
                "    comments: copyright",
            file_path=str(path),
        )

    return data


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """深度合并两个字典，override 中的值优先。"""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def validate_options_file(path: str | Path) -> list[str]:
    """
    校验选项文件，返回错误列表。

    不抛出异常，而是收集错误信息返回，用于 CLI 的 validate 命令和 CI 流程。

    参数:
        path: YAML 文件路径

    返回:
        错误信息列表（空列表表示校验通过）
    """
    errors: list[str] = []

    try:
        load_options(path=path)
    except ConfigError as e:
        errors.append(e.full_message)

    return errors
