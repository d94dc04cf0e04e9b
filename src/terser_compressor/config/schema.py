"""
压缩器选项的 Schema 定义与校验。

这里定义的 Pydantic 模型就是压缩器对外暴露的选项树：
调用方传入的字典在这里被校验、补全默认值、展开简写，
再由 `to_engine_options()` 翻译为 terser 原生的选项结构。

每个选项组都是 frozen + extra="forbid" 的模型：未识别的键在构造时就是硬错误。
"""

from __future__ import annotations

import os
import re
import warnings
from collections.abc import Mapping
from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from terser_compressor.config.defaults import (
    COMMENT_POLICIES,
    COPYRIGHT_COMMENT_FLAGS,
    COPYRIGHT_COMMENT_PATTERN,
    DEFAULT_ERROR_CONTEXT_LINES,
    DEFAULT_MAX_LINE_LEN,
    DEFAULT_RESERVED_NAMES,
    ENV_NODE_BIN,
    ENV_TERSER_MODULE,
    ENV_TIMEOUT,
    ENV_VERSION,
    JS_REGEX_FLAGS,
    QUOTE_STYLES,
)

# Python re flags → JavaScript RegExp flags（re.UNICODE 是 str 模式的默认值，不翻译）
_PY_TO_JS_FLAGS = (
    (re.IGNORECASE, "i"),
    (re.MULTILINE, "m"),
    (re.DOTALL, "s"),
)

# define 的取值只能是 JSON 字面量
DefineValue = Union[bool, int, float, str, None]


class _OptionGroup(BaseModel):
    """所有选项组的公共配置：不可变、拒绝未知键。"""

    model_config = ConfigDict(extra="forbid", frozen=True)

    def to_engine(self) -> dict[str, Any]:
        """翻译为引擎原生的选项字典（跳过未设置的 None 值）。"""
        result: dict[str, Any] = {}
        for name in type(self).model_fields:
            value = getattr(self, name)
            if value is None:
                continue
            result[name] = _engine_value(value)
        return result


class JsRegex(_OptionGroup):
    """
    可序列化的 JavaScript 正则。

    接受 `re.compile(...)` 对象或 `{"pattern": ..., "flags": ...}` 字典，
    在传给引擎时编码为 `{"$regex": pattern, "$flags": flags}`，
    由驱动脚本还原为 RegExp。
    """

    pattern: str
    flags: str = ""

    @model_validator(mode="before")
    @classmethod
    def _from_compiled(cls, value: Any) -> Any:
        if isinstance(value, re.Pattern):
            flags = "".join(js for py, js in _PY_TO_JS_FLAGS if value.flags & py)
            return {"pattern": value.pattern, "flags": flags}
        return value

    @field_validator("flags")
    @classmethod
    def _check_flags(cls, value: str) -> str:
        unknown = set(value) - JS_REGEX_FLAGS
        if unknown:
            raise ValueError(
                f"不支持的正则 flags：{''.join(sorted(unknown))}，"
                f"可用值为 {''.join(sorted(JS_REGEX_FLAGS))}"
            )
        return "".join(sorted(set(value)))

    def to_engine(self) -> dict[str, Any]:
        return {"$regex": self.pattern, "$flags": self.flags}


CommentPolicy = Union[Literal["none", "all", "copyright", "jsdoc", "some"], JsRegex]
NameFilter = Union[bool, JsRegex]


def _engine_value(value: Any) -> Any:
    if isinstance(value, _OptionGroup):
        return value.to_engine()
    if isinstance(value, tuple):
        return [_engine_value(item) for item in value]
    if isinstance(value, dict):
        return {key: _engine_value(item) for key, item in value.items()}
    return value


def _coerce_comment_policy(value: Any) -> Any:
    if value is True:
        return "all"
    if value is False:
        return "none"
    if isinstance(value, str):
        return value.lower()
    return value


def _true_as_empty_group(value: Any) -> Any:
    if value is True or value is None:
        return {}
    return value


def _merge_into_group(group: Any, key: str, value: Any) -> Any:
    """
    把简写选项合并进子选项组，子选项组显式设置过的键优先。

    group 可能是 True / False / dict / 已构造的选项模型。
    返回新对象，从不修改调用方传入的值。
    """
    if group is False:
        return group
    if group is True or group is None:
        return {key: value}
    if isinstance(group, BaseModel):
        if key in group.model_fields_set:
            return group
        explicit = group.model_dump(exclude_unset=True)
        return {**explicit, key: value}
    if isinstance(group, Mapping):
        if key in group:
            return group
        return {**group, key: value}
    return group


class PropertiesOptions(_OptionGroup):
    """属性名混淆选项（mangle.properties）。"""

    builtins: bool = Field(default=False, description="是否混淆内置对象的属性名")
    debug: Union[bool, str] = Field(default=False, description="调试模式，混淆名带上原名")
    keep_quoted: Union[bool, Literal["strict"]] = Field(
        default=False, description="是否保留引号包裹的属性名"
    )
    regex: JsRegex | None = Field(default=None, description="只混淆匹配该正则的属性名")
    reserved: tuple[str, ...] = Field(default=(), description="不混淆的属性名")
    undeclared: bool = Field(default=False, description="是否混淆未声明的属性访问")


class MangleOptions(_OptionGroup):
    """标识符混淆选项。"""

    eval: bool = Field(default=False, description="是否混淆 eval/with 作用域内的名称")
    keep_classnames: NameFilter = Field(default=False, description="保留类名")
    keep_fnames: NameFilter = Field(default=False, description="保留函数名")
    module: bool = Field(default=False, description="按 ES 模块处理")
    properties: Union[Literal[False], PropertiesOptions] = Field(
        default=False, description="属性名混淆，True 表示使用默认设置"
    )
    reserved: tuple[str, ...] = Field(
        default=DEFAULT_RESERVED_NAMES, description="不混淆的标识符"
    )
    safari10: bool = Field(default=False, description="规避 Safari 10 的循环变量 bug")
    toplevel: bool = Field(default=False, description="是否混淆顶层作用域的名称")

    @field_validator("properties", mode="before")
    @classmethod
    def _properties_true(cls, value: Any) -> Any:
        if value is True:
            return {}
        return value


class CompressOptions(_OptionGroup):
    """
    压缩优化选项。

    字段名与 terser 的 compress 选项一一对应，未列出的键一律拒绝。
    """

    arrows: bool = True
    booleans: bool = True
    booleans_as_integers: bool = False
    collapse_vars: bool = False
    comparisons: bool = True
    computed_props: bool = True
    conditionals: bool = True
    dead_code: bool = True
    directives: bool = True
    drop_console: bool = False
    drop_debugger: bool = True
    evaluate: bool = True
    expression: bool = False
    hoist_funs: bool = False
    hoist_props: bool = True
    hoist_vars: bool = False
    if_return: bool = True
    inline: Union[bool, int] = True
    join_vars: bool = True
    keep_classnames: NameFilter = False
    keep_fargs: bool = False
    keep_fnames: NameFilter = False
    keep_infinity: bool = False
    lhs_constants: bool = True
    loops: bool = True
    negate_iife: bool = True
    passes: int = Field(default=1, ge=1)
    properties: bool = True
    pure_funcs: tuple[str, ...] | None = None
    pure_getters: Union[bool, Literal["strict"]] = "strict"
    reduce_funcs: bool = False
    reduce_vars: bool = False
    sequences: Union[bool, int] = True
    side_effects: bool = True
    switches: bool = True
    top_retain: tuple[str, ...] | None = None
    toplevel: bool = False
    typeofs: bool = True
    unsafe: bool = False
    unsafe_arrows: bool = False
    unsafe_comps: bool = False
    unsafe_math: bool = False
    unsafe_methods: bool = False
    unsafe_proto: bool = False
    unsafe_regexp: bool = False
    unused: bool = True


class OutputOptions(_OptionGroup):
    """
    输出格式选项（terser 5 中称为 format）。

    `comments` 为 None 时沿用顶层的 `comments` 简写。
    """

    ascii_only: bool = Field(default=True, description="只输出 ASCII 字符")
    beautify: bool = Field(default=False, description="美化输出")
    braces: bool = Field(default=False, description="if/for 等语句总是带花括号")
    comments: CommentPolicy | None = Field(default=None, description="注释保留策略")
    indent_level: int = Field(default=4, ge=0)
    indent_start: int = Field(default=0, ge=0)
    inline_script: bool = Field(default=True, description="转义 </script")
    keep_numbers: bool = Field(default=False, description="保留数字字面量的原始写法")
    keep_quoted_props: bool = Field(default=False, description="保留属性名的引号")
    max_line_len: int = Field(
        default=DEFAULT_MAX_LINE_LEN, ge=0, description="最大行长度，0 表示不限制"
    )
    preamble: str | None = Field(default=None, description="输出开头追加的文本")
    preserve_annotations: bool = False
    quote_keys: bool = Field(default=False, description="属性名总是加引号")
    quote_style: int = Field(default=0, ge=0, le=3, description="auto/single/double/original")
    safari10: bool = False
    semicolons: bool = True
    shebang: bool = Field(default=True, description="保留 #! 行")
    webkit: bool = False
    width: int = Field(default=80, gt=0)
    wrap_func_args: bool = True
    wrap_iife: bool = Field(default=False, description="用括号包裹立即执行函数")

    @field_validator("comments", mode="before")
    @classmethod
    def _coerce_comments(cls, value: Any) -> Any:
        return _coerce_comment_policy(value)

    @field_validator("quote_style", mode="before")
    @classmethod
    def _named_quote_style(cls, value: Any) -> Any:
        if isinstance(value, str):
            try:
                return QUOTE_STYLES[value.lower()]
            except KeyError:
                raise ValueError(
                    f"quote_style '{value}' 无效，可用值：{', '.join(QUOTE_STYLES)} 或 0-3"
                ) from None
        return value


class ParseOptions(_OptionGroup):
    """解析选项。"""

    bare_returns: bool = False
    html5_comments: bool = True
    shebang: bool = True


class SourceMapOptions(_OptionGroup):
    """引擎生成 Source Map 的选项。"""

    filename: str | None = Field(default=None, description="生成 Source Map 时的输入文件名")
    include_sources: bool = Field(default=False, description="是否内嵌 sourcesContent")

    def to_engine(self) -> dict[str, Any]:
        result: dict[str, Any] = {"includeSources": self.include_sources}
        if self.filename is not None:
            result["filename"] = self.filename
        return result


class TerserOptions(_OptionGroup):
    """
    完整的压缩器选项：规范化后的选项树。

    每个字段都有显式的默认值，规范化结果与调用方是否写出默认值无关，
    这是 cache key 稳定的前提。

    用法::

        options = TerserOptions.model_validate({
            "mangle": {"reserved": ["jQuery"]},
            "output": {"comments": "copyright"},
            "keep_fnames": True,
        })
        engine_options = options.to_engine_options()

    简写规则:
        - `keep_fnames` / `keep_classnames` / `toplevel` 写入 compress 和 mangle，
          除非子选项组已经显式设置了同名键
        - `comments` 是 `output.comments` 的简写，后者优先；都未设置时为 "none"
        - `mangle_properties` 是 `mangle.properties` 的旧写法（已废弃）
        - `define` 需要 compress，`compress: false` 时设置 define 是错误
    """

    compress: Union[Literal[False], CompressOptions] = Field(default_factory=CompressOptions)
    mangle: Union[Literal[False], MangleOptions] = Field(default_factory=MangleOptions)
    output: OutputOptions = Field(default_factory=OutputOptions)
    parse: ParseOptions = Field(default_factory=ParseOptions)
    define: tuple[tuple[str, DefineValue], ...] = Field(
        default=(), description="编译期常量定义（标识符 → 字面量），按标识符排序"
    )
    keep_fnames: NameFilter | None = Field(default=None, description="同时作用于 compress 和 mangle")
    keep_classnames: NameFilter | None = Field(
        default=None, description="同时作用于 compress 和 mangle"
    )
    comments: CommentPolicy = Field(default="none", description="output.comments 的简写")
    toplevel: bool = Field(default=False, description="顶层作用域的变量可被删除/混淆")
    source_map: Union[Literal[False], SourceMapOptions] = Field(default=False)
    error_context_lines: int = Field(
        default=DEFAULT_ERROR_CONTEXT_LINES, ge=0, description="编译错误时展示的上下文行数"
    )

    @model_validator(mode="before")
    @classmethod
    def _expand_shorthands(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return data
        data = dict(data)

        if "mangle_properties" in data:
            legacy = data.pop("mangle_properties")
            warnings.warn(
                "选项 'mangle_properties' 已废弃，请改用 mangle: {properties: ...}。",
                DeprecationWarning,
                stacklevel=2,
            )
            if data.get("mangle", True) is False and legacy is not False:
                raise ValueError("mangle_properties 需要 mangle，不能与 mangle: false 同时使用")
            data["mangle"] = _merge_into_group(data.get("mangle", True), "properties", legacy)

        for key in ("keep_fnames", "keep_classnames", "toplevel"):
            value = data.get(key)
            if value is None:
                continue
            for group in ("compress", "mangle"):
                data[group] = _merge_into_group(data.get(group, True), key, value)

        return data

    @field_validator("define", mode="before")
    @classmethod
    def _define_as_pairs(cls, value: Any) -> Any:
        if isinstance(value, Mapping):
            return tuple(sorted(value.items(), key=lambda item: str(item[0])))
        return value

    @model_validator(mode="after")
    def _define_needs_compress(self) -> TerserOptions:
        if self.define and self.compress is False:
            raise ValueError("define 通过 compress.global_defs 生效，不能与 compress: false 同时使用")
        return self

    @field_validator("compress", "mangle", mode="before")
    @classmethod
    def _true_means_defaults(cls, value: Any) -> Any:
        return _true_as_empty_group(value)

    @field_validator("source_map", mode="before")
    @classmethod
    def _source_map_true(cls, value: Any) -> Any:
        if value is True:
            return {}
        if value is None:
            return False
        return value

    @field_validator("comments", mode="before")
    @classmethod
    def _coerce_comments(cls, value: Any) -> Any:
        return _coerce_comment_policy(value)

    @property
    def effective_comments(self) -> CommentPolicy:
        """实际生效的注释策略：output.comments 优先于顶层简写。"""
        if self.output.comments is not None:
            return self.output.comments
        return self.comments

    def with_source_map(self, filename: str) -> TerserOptions:
        """返回一份打开了 Source Map 生成的新选项树（原对象不变）。"""
        current = self.source_map if self.source_map is not False else SourceMapOptions()
        return self.model_copy(
            update={"source_map": current.model_copy(update={"filename": filename})}
        )

    def to_engine_options(self) -> dict[str, Any]:
        """
        翻译为 terser `minify()` 的原生选项。

        返回:
            可 JSON 序列化的字典；正则编码为 `{"$regex", "$flags"}`
        """
        if self.compress is False:
            compress: Any = False
        else:
            compress = self.compress.to_engine()
            if self.define:
                compress["global_defs"] = dict(self.define)

        if self.mangle is False:
            mangle: Any = False
        else:
            mangle = self.mangle.to_engine()

        output = self.output.to_engine()
        output["comments"] = comments_to_engine(self.effective_comments)
        if not self.output.max_line_len:
            output["max_line_len"] = False

        options: dict[str, Any] = {
            "compress": compress,
            "mangle": mangle,
            "format": output,
            "parse": self.parse.to_engine(),
            "toplevel": self.toplevel,
        }
        if self.source_map is not False:
            options["sourceMap"] = self.source_map.to_engine()
        return options


def comments_to_engine(policy: CommentPolicy) -> Any:
    """把注释策略翻译为 terser format.comments 的取值。"""
    if isinstance(policy, JsRegex):
        return policy.to_engine()
    if policy == "none":
        return False
    if policy == "all":
        return "all"
    if policy == "copyright":
        return JsRegex(
            pattern=COPYRIGHT_COMMENT_PATTERN, flags=COPYRIGHT_COMMENT_FLAGS
        ).to_engine()
    if policy in COMMENT_POLICIES:
        # jsdoc / some：引擎内置的 license 保留策略
        return "some"
    raise ValueError(f"未知的注释策略：{policy!r}")


class EngineSettings(BaseModel):
    """
    terser 引擎的运行时设置。

    这些设置只决定"去哪里找引擎"，不参与 cache key；
    引擎版本号通过 `version` 显式指定或在首次使用时探测。
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    node_bin: str = Field(default="node", description="node 可执行文件")
    terser_module: str = Field(default="terser", description="require() 使用的 terser 模块路径")
    timeout_seconds: float | None = Field(default=None, gt=0, description="单次调用超时")
    version: str | None = Field(default=None, description="显式指定引擎版本，跳过探测")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> EngineSettings:
        """从环境变量读取设置，未设置的项使用默认值。"""
        env = os.environ if environ is None else environ
        values: dict[str, Any] = {}
        if env.get(ENV_NODE_BIN):
            values["node_bin"] = env[ENV_NODE_BIN]
        if env.get(ENV_TERSER_MODULE):
            values["terser_module"] = env[ENV_TERSER_MODULE]
        if env.get(ENV_TIMEOUT):
            values["timeout_seconds"] = env[ENV_TIMEOUT]
        if env.get(ENV_VERSION):
            values["version"] = env[ENV_VERSION]
        return cls(**values)
