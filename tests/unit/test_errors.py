"""
错误处理单元测试：测试所有异常类。

覆盖范围:
- 三段式错误信息验证（What / Why / How）
- 各异常的附加字段与 to_dict()
- 异常继承关系
"""

from __future__ import annotations

import pytest

from terser_compressor.errors import (
    CompileError,
    ConfigError,
    EngineUnavailableError,
    MapCombineError,
    OptionsLoadError,
    TerserCompressorError,
)


class TestTerserCompressorError:
    """TerserCompressorError 基类测试。"""

    def test_error_has_three_segments(self) -> None:
        """测试错误信息包含三段（What/Why/How）。"""
        error = TerserCompressorError(
            what="发生了错误",
            why="因为某个原因",
            how="请这样修复",
        )
        message = str(error)

        assert "发生了错误" in message
        assert "因为某个原因" in message
        assert "请这样修复" in message

    def test_optional_segments_omitted(self) -> None:
        """测试 why/how 为空时不出现在消息中。"""
        error = TerserCompressorError(what="只有 what")
        assert error.full_message == "只有 what"

    def test_to_dict(self) -> None:
        """测试 to_dict 输出错误类型和各段内容。"""
        error = TerserCompressorError(what="A", why="B", details={"k": 1})
        result = error.to_dict()

        assert result["error_type"] == "TerserCompressorError"
        assert result["what"] == "A"
        assert result["why"] == "B"
        assert "how" not in result
        assert result["details"] == {"k": 1}


class TestConfigError:
    """ConfigError / OptionsLoadError 测试。"""

    def test_config_error_fields(self) -> None:
        """测试 ConfigError 记录 config_path 和 field_path。"""
        error = ConfigError(what="选项无效", config_path="terser.yaml", field_path="mangle.foo")

        assert error.config_path == "terser.yaml"
        assert error.field_path == "mangle.foo"
        assert error.details["field_path"] == "mangle.foo"

    def test_options_load_error_is_config_error(self) -> None:
        """测试 OptionsLoadError 继承 ConfigError，file_path 同时作为 config_path。"""
        error = OptionsLoadError(what="文件不存在", file_path="missing.yaml")

        assert isinstance(error, ConfigError)
        assert error.file_path == "missing.yaml"
        assert error.config_path == "missing.yaml"


class TestCompileError:
    """CompileError 测试。"""

    def test_engine_message_preserved(self) -> None:
        """测试引擎诊断文本原样保存在 what 和 engine_message 中。"""
        error = CompileError(
            what="Unexpected token: punc ())",
            filename="application.js",
            line=1,
            col=0,
        )

        assert error.engine_message == "Unexpected token: punc ())"
        assert str(error).startswith("Unexpected token: punc ())")
        assert error.details == {"filename": "application.js", "line": 1, "col": 0}

    def test_position_optional(self) -> None:
        """测试没有位置信息时 details 中不含 line/col。"""
        error = CompileError(what="boom", filename="a.js")
        assert error.line is None
        assert "line" not in error.details


class TestOtherErrors:
    """EngineUnavailableError / MapCombineError 测试。"""

    def test_engine_unavailable_command(self) -> None:
        """测试 EngineUnavailableError 记录命令行。"""
        error = EngineUnavailableError(what="找不到 node", command=["node", "driver.js"])
        assert error.command == ["node", "driver.js"]
        assert error.to_dict()["details"]["command"] == ["node", "driver.js"]

    @pytest.mark.parametrize(
        "error_class",
        [ConfigError, OptionsLoadError, CompileError, EngineUnavailableError, MapCombineError],
    )
    def test_all_errors_inherit_base(self, error_class: type) -> None:
        """测试所有异常都继承 TerserCompressorError。"""
        assert issubclass(error_class, TerserCompressorError)
        with pytest.raises(TerserCompressorError):
            raise error_class(what="x")
