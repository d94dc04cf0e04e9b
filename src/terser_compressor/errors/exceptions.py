"""
结构化异常体系：错误信息即文档。

每条异常遵循"三段式"规范：
1. What went wrong（发生了什么）
2. Why it happened（为什么发生）
3. How to fix it（怎么修）

所有异常都向调用方传播，本层从不重试或吞掉异常。

示例::

    ConfigError(
        what="压缩器选项校验失败（1 个错误）。",
        why="  字段 'foo': Extra inputs are not permitted",
        how="删除未识别的选项，或对照 docs/options.md 修正拼写。",
        field_path="foo",
    )
"""

from __future__ import annotations

from typing import Any


class TerserCompressorError(Exception):
    """
    terser-compressor 异常基类。

    所有异常都继承自此类，支持三段式错误消息。

    属性:
        what: 发生了什么
        why: 为什么发生
        how: 怎么修复
        details: 额外的上下文信息（用于调试）
    """

    def __init__(
        self,
        what: str,
        why: str = "",
        how: str = "",
        details: dict[str, Any] | None = None,
    ) -> None:
        self.what = what
        self.why = why
        self.how = how
        self.details = details or {}

        parts = [what]
        if why:
            parts.append(f"→ 原因：{why}")
        if how:
            parts.append(f"→ 修复建议：{how}")

        self.full_message = "\n".join(parts)
        super().__init__(self.full_message)

    def __str__(self) -> str:
        return self.full_message

    def to_dict(self) -> dict[str, Any]:
        """转换为字典格式，用于 CLI 的 JSON 输出。"""
        result: dict[str, Any] = {
            "error_type": type(self).__name__,
            "what": self.what,
        }
        if self.why:
            result["why"] = self.why
        if self.how:
            result["how"] = self.how
        if self.details:
            result["details"] = self.details
        return result


# === 配置相关异常 ===


class ConfigError(TerserCompressorError):
    """
    选项配置异常。

    当选项中出现未识别的键、或取值不合法时抛出。
    总是在规范化/构造阶段同步抛出，早于任何一次引擎调用。

    示例::

        raise ConfigError(
            what="压缩器选项校验失败（1 个错误）。",
            why="  字段 'mangle → toplevl': Extra inputs are not permitted",
            how="检查拼写：是否想写 'toplevel'？",
            field_path="mangle.toplevl",
        )
    """

    def __init__(
        self,
        what: str,
        why: str = "",
        how: str = "",
        config_path: str = "",
        field_path: str = "",
        **kwargs: Any,
    ) -> None:
        details = {
            "config_path": config_path,
            "field_path": field_path,
        }
        details.update(kwargs)
        super().__init__(what=what, why=why, how=how, details=details)
        self.config_path = config_path
        self.field_path = field_path


class OptionsLoadError(ConfigError):
    """
    选项文件加载异常。

    当 YAML 选项文件不存在、无法读取或格式错误时抛出。
    """

    def __init__(
        self,
        what: str,
        why: str = "",
        how: str = "",
        file_path: str = "",
        **kwargs: Any,
    ) -> None:
        super().__init__(what=what, why=why, how=how, config_path=file_path, **kwargs)
        self.file_path = file_path


# === 编译相关异常 ===


class CompileError(TerserCompressorError):
    """
    编译异常：引擎拒绝了输入。

    `what` 原样保存引擎的诊断信息（例如 "Unexpected token: punc ())"），不做改写。

    示例::

        raise CompileError(
            what="Unexpected token: punc ())",
            why="application.js 第 1 行第 0 列：\\n    1 | )(",
            how="修正该位置的语法错误后重新构建。",
            filename="application.js",
            line=1,
            col=0,
        )
    """

    def __init__(
        self,
        what: str,
        why: str = "",
        how: str = "",
        filename: str = "",
        line: int | None = None,
        col: int | None = None,
        **kwargs: Any,
    ) -> None:
        details: dict[str, Any] = {"filename": filename}
        if line is not None:
            details["line"] = line
        if col is not None:
            details["col"] = col
        details.update(kwargs)
        super().__init__(what=what, why=why, how=how, details=details)
        self.engine_message = what
        self.filename = filename
        self.line = line
        self.col = col


class EngineUnavailableError(TerserCompressorError):
    """
    引擎不可用异常。

    当引擎运行时无法启动（例如找不到 node 可执行文件或 terser 包）、
    调用超时、或返回了无法解析的响应时抛出。
    """

    def __init__(
        self,
        what: str,
        why: str = "",
        how: str = "",
        command: list[str] | None = None,
        **kwargs: Any,
    ) -> None:
        details: dict[str, Any] = {"command": command or []}
        details.update(kwargs)
        super().__init__(what=what, why=why, how=how, details=details)
        self.command = command or []


# === Source Map 相关异常 ===


class MapCombineError(TerserCompressorError):
    """
    Source Map 合并异常。

    仅当 Source Map 的结构完全无法解析时抛出（不是字典、版本不是 3、
    VLQ 编码非法、索引越界）。
    缺失或部分缺失的映射不是错误：未能解析的位置会原样保留。
    """

    pass
