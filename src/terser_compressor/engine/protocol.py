"""
MinifierEngine 协议定义。

压缩引擎（分词、AST 变换、混淆、代码生成）对本层是黑盒，
只通过这里定义的编译契约访问：

    compile(source, options, filename) -> code
    compile_with_map(source, options, filename) -> (code, serialized_map)

失败时抛出 EngineError，携带引擎原始的诊断文本。
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


class EngineError(Exception):
    """
    引擎原生错误：引擎拒绝了输入（语法错误、非法选项等）。

    适配层会把它包装为 CompileError，`message` 原样保留。

    属性:
        message: 引擎的诊断文本
        line: 出错行号（1 起），引擎未提供时为 None
        col: 出错列号（0 起），引擎未提供时为 None
        filename: 引擎报告的文件名
    """

    def __init__(
        self,
        message: str,
        line: int | None = None,
        col: int | None = None,
        filename: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.line = line
        self.col = col
        self.filename = filename


@runtime_checkable
class MinifierEngine(Protocol):
    """
    压缩引擎协议。

    内置实现为 TerserEngine（通过 Node.js 调用 terser）。

    最小实现示例::

        class IdentityEngine:
            version = "0.0.0"

            def compile(self, source, options, filename="input.js"):
                return source

            def compile_with_map(self, source, options, filename="input.js"):
                return source, '{"version":3,"sources":[],"names":[],"mappings":""}'
    """

    @property
    def version(self) -> str:
        """引擎版本号，参与 cache key 计算。"""
        ...

    def compile(self, source: str, options: dict[str, Any], filename: str = "input.js") -> str:
        """
        压缩源码。

        参数:
            source: JavaScript 源码
            options: 引擎原生选项
            filename: 输入文件名（用于诊断信息）

        返回:
            压缩后的代码

        抛出:
            EngineError: 引擎拒绝了输入
        """
        ...

    def compile_with_map(
        self, source: str, options: dict[str, Any], filename: str = "input.js"
    ) -> tuple[str, str]:
        """
        压缩源码并生成 Source Map。

        返回:
            (压缩后的代码, 序列化的 Source Map JSON)

        抛出:
            EngineError: 引擎拒绝了输入
        """
        ...
