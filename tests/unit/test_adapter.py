"""
EngineAdapter 单元测试。

覆盖范围:
- select_adapter(): 按协议能力选择适配器
- LegacyAdapter / MapAdapter: 引擎调用方式与选项
- EngineError → CompileError 包装与源码上下文
"""

from __future__ import annotations

import pytest
from conftest import FakeEngine, make_map

from terser_compressor.compressor import (
    AssetInput,
    CompressorConfig,
    EngineCapability,
    LegacyAdapter,
    MapAdapter,
    select_adapter,
)
from terser_compressor.compressor.adapter import compile_error_from_engine
from terser_compressor.config import normalize
from terser_compressor.engine import EngineError
from terser_compressor.errors import CompileError, MapCombineError
from terser_compressor.sourcemap import SourceMap


def make_config(options: dict | None = None, capability=EngineCapability.MAP_CAPABLE):
    return CompressorConfig(
        options=normalize(options),
        cache_key="Terser:test",
        engine_capability=capability,
        engine_version="5.0.0-fake",
    )


class TestEngineCapability:
    """EngineCapability.for_pipeline() 测试。"""

    @pytest.mark.parametrize(
        ("version", "expected"),
        [
            (None, EngineCapability.MAP_CAPABLE),
            ("4.0.0", EngineCapability.MAP_CAPABLE),
            ("v5.1", EngineCapability.MAP_CAPABLE),
            (4, EngineCapability.MAP_CAPABLE),
            ("3.7.2", EngineCapability.LEGACY_NO_MAP),
            ("2", EngineCapability.LEGACY_NO_MAP),
        ],
    )
    def test_for_pipeline(self, version, expected) -> None:
        """测试主版本 ≥ 4 或未声明时支持 Source Map。"""
        assert EngineCapability.for_pipeline(version) is expected

    def test_unrecognized_version(self) -> None:
        """测试无法识别的版本号抛出 ConfigError。"""
        from terser_compressor.errors import ConfigError

        with pytest.raises(ConfigError):
            EngineCapability.for_pipeline("latest")


class TestSelectAdapter:
    """select_adapter() 测试。"""

    def test_map_capable(self, fake_engine: FakeEngine) -> None:
        """测试 MAP_CAPABLE 选择 MapAdapter。"""
        adapter = select_adapter(EngineCapability.MAP_CAPABLE, fake_engine)
        assert isinstance(adapter, MapAdapter)
        assert adapter.capability is EngineCapability.MAP_CAPABLE

    def test_legacy(self, fake_engine: FakeEngine) -> None:
        """测试 LEGACY_NO_MAP 选择 LegacyAdapter。"""
        adapter = select_adapter(EngineCapability.LEGACY_NO_MAP, fake_engine)
        assert isinstance(adapter, LegacyAdapter)


class TestLegacyAdapter:
    """LegacyAdapter 测试。"""

    def test_calls_plain_compile(self, fake_engine: FakeEngine) -> None:
        """测试调用普通编译入口，只返回代码。"""
        adapter = LegacyAdapter(fake_engine)
        output = adapter.compile(
            make_config(capability=EngineCapability.LEGACY_NO_MAP),
            AssetInput(data="  var a = 1;  ", filename="a.js"),
        )

        assert output.data == "var a = 1;"
        assert output.raw_map is None
        assert fake_engine.calls[0]["method"] == "compile"
        assert fake_engine.calls[0]["filename"] == "a.js"
        assert "sourceMap" not in fake_engine.calls[0]["options"]

    def test_passes_engine_options(self, fake_engine: FakeEngine) -> None:
        """测试传给引擎的是翻译后的原生选项。"""
        LegacyAdapter(fake_engine).compile(
            make_config({"mangle": False}), AssetInput(data="x", filename="a.js")
        )
        assert fake_engine.calls[0]["options"]["mangle"] is False


class TestMapAdapter:
    """MapAdapter 测试。"""

    def test_requests_source_map(self, fake_engine: FakeEngine) -> None:
        """测试选项中合并了 sourceMap.filename，并解析返回的 Map。"""
        output = MapAdapter(fake_engine).compile(
            make_config(), AssetInput(data="var a;", filename="app.js")
        )

        call = fake_engine.calls[0]
        assert call["method"] == "compile_with_map"
        assert call["options"]["sourceMap"]["filename"] == "app.js"
        assert isinstance(output.raw_map, SourceMap)
        assert output.raw_map.sources == ("app.js",)

    def test_config_options_unchanged(self, fake_engine: FakeEngine) -> None:
        """测试合并 sourceMap 不修改共享的配置。"""
        config = make_config()
        MapAdapter(fake_engine).compile(config, AssetInput(data="var a;", filename="app.js"))
        assert config.options.source_map is False

    def test_invalid_engine_map(self) -> None:
        """测试引擎返回无法解析的 Map 时抛出 MapCombineError。"""
        engine = FakeEngine(raw_map=make_map([], "", version=2))
        with pytest.raises(MapCombineError):
            MapAdapter(engine).compile(make_config(), AssetInput(data="x", filename="a.js"))


class TestEngineErrorWrapping:
    """EngineError → CompileError 测试。"""

    def test_message_verbatim(self) -> None:
        """测试引擎诊断文本原样保留，并以原异常为 cause。"""
        engine_error = EngineError("Unexpected token: punc ())", line=1, col=0)
        engine = FakeEngine(error=engine_error)

        with pytest.raises(CompileError) as exc_info:
            MapAdapter(engine).compile(make_config(), AssetInput(data=")(", filename="a.js"))

        error = exc_info.value
        assert error.engine_message == "Unexpected token: punc ())"
        assert "Unexpected token" in str(error)
        assert error.filename == "a.js"
        assert (error.line, error.col) == (1, 0)
        assert error.__cause__ is engine_error

    def test_never_retried(self) -> None:
        """测试编译失败不会重试。"""
        engine = FakeEngine(error=EngineError("boom"))
        with pytest.raises(CompileError):
            LegacyAdapter(engine).compile(make_config(), AssetInput(data="x", filename="a.js"))
        assert len(engine.calls) == 1

    def test_source_context(self) -> None:
        """测试 why 中包含出错行附近的源码和列标记。"""
        source = "\n".join(f"line{i}" for i in range(1, 21))
        error = compile_error_from_engine(
            EngineError("Unexpected token", line=10, col=2),
            AssetInput(data=source, filename="a.js"),
            context_lines=4,
        )

        assert "> 10 | line10" in error.why
        assert "line8" in error.why
        assert "line12" not in error.why
        assert "line7" not in error.why
        assert "|   ^" in error.why

    def test_context_disabled(self) -> None:
        """测试 error_context_lines 为 0 时不附带源码。"""
        error = compile_error_from_engine(
            EngineError("Unexpected token", line=1, col=0),
            AssetInput(data="var a = ;", filename="a.js"),
            context_lines=0,
        )
        assert "var a" not in error.why
        assert "a.js" in error.why

    def test_without_position(self) -> None:
        """测试引擎没有提供位置时也能生成错误信息。"""
        error = compile_error_from_engine(
            EngineError("Invalid option"),
            AssetInput(data="x", filename="a.js"),
            context_lines=8,
        )
        assert error.line is None
        assert error.what == "Invalid option"
