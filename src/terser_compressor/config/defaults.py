"""
默认值与常量。

选项 Schema 的默认值集中在这里。完整的选项树会传给引擎，不依赖引擎自身的默认值。
"""

from __future__ import annotations

# 资产管道中 JavaScript 压缩器注册使用的 MIME 类型与名称
JAVASCRIPT_MIME_TYPE = "application/javascript"
COMPRESSOR_NAME = "terser"

# 适配层自身的协议版本，改变选项翻译规则或 Source Map 处理方式时递增
ADAPTER_VERSION = "1"

# 宿主管道从该主版本起支持 Source Map 元数据
MAP_SUPPORT_MIN_VERSION = 4

# 默认不混淆 $super，避免破坏 PrototypeJS
DEFAULT_RESERVED_NAMES: tuple[str, ...] = ("$super",)

DEFAULT_MAX_LINE_LEN = 32 * 1024

DEFAULT_ERROR_CONTEXT_LINES = 8

# comments: copyright 对应的正则：保留 /*! ... */ 和提到 Copyright 的注释
COPYRIGHT_COMMENT_PATTERN = r"(^!)|Copyright"
COPYRIGHT_COMMENT_FLAGS = "i"

QUOTE_STYLES: dict[str, int] = {
    "auto": 0,
    "single": 1,
    "double": 2,
    "original": 3,
}

COMMENT_POLICIES = ("none", "all", "copyright", "jsdoc", "some")

# JavaScript 正则允许的 flags
JS_REGEX_FLAGS = frozenset("dgimsuy")

# YAML 选项文件的默认搜索路径
OPTIONS_SEARCH_PATHS = (
    "terser.yaml",
    "terser.yml",
    "config/terser.yaml",
)

# 引擎设置对应的环境变量
ENV_NODE_BIN = "TERSER_NODE_BIN"
ENV_TERSER_MODULE = "TERSER_MODULE"
ENV_TIMEOUT = "TERSER_TIMEOUT"
ENV_VERSION = "TERSER_VERSION"
