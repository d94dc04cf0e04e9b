"""
Compressor 单元测试。

覆盖范围:
- 构造：选项校验早于引擎调用、协议能力解析、cache key
- compile / __call__：两种协议下的结果形状、Source Map 格式化与合并
"""

from __future__ import annotations

import io

import pytest
from conftest import FakeEngine, make_map

from terser_compressor import Compressor, EngineCapability
from terser_compressor.compressor import AssetInput, CompileResult
from terser_compressor.config import normalize
from terser_compressor.engine import EngineError
from terser_compressor.errors import CompileError, ConfigError


class TestConstruction:
    """构造阶段测试。"""

    def test_unknown_option_before_engine_call(self, fake_engine: FakeEngine) -> None:
        """测试未知选项在构造时抛出 ConfigError，且不调用引擎。"""
        with pytest.raises(ConfigError):
            Compressor({"foo": True}, engine=fake_engine)
        assert fake_engine.calls == []

    def test_unknown_option_before_engine_lookup(self) -> None:
        """测试选项校验早于获取默认引擎（未注册引擎时也先报 ConfigError）。"""
        with pytest.raises(ConfigError):
            Compressor({"foo": True})

    def test_uses_registered_engine(self, registered_engine: FakeEngine) -> None:
        """测试未传入引擎时使用进程级默认引擎。"""
        compressor = Compressor()
        compressor({"data": "var a;", "filename": "a.js"})
        assert len(registered_engine.calls) == 1

    def test_cache_key(self, fake_engine: FakeEngine) -> None:
        """测试 cache key 包含引擎版本和适配层版本。"""
        compressor = Compressor(engine=fake_engine)
        assert compressor.cache_key.startswith("Terser:5.0.0-fake:1:")
        assert compressor.config.cache_key == compressor.cache_key

    def test_cache_key_independent_of_capability(self, fake_engine: FakeEngine) -> None:
        """测试协议能力不影响 cache key。"""
        legacy = Compressor(engine=fake_engine, pipeline_version="3")
        modern = Compressor(engine=fake_engine, pipeline_version="4")
        assert legacy.cache_key == modern.cache_key

    def test_same_options_same_key(self, fake_engine: FakeEngine) -> None:
        """测试语义相同的选项得到相同 cache key。"""
        first = Compressor({"mangle": {"toplevel": True}, "toplevel": True}, engine=fake_engine)
        second = Compressor({"toplevel": True, "mangle": {"toplevel": True}}, engine=fake_engine)
        assert first.cache_key == second.cache_key

    def test_different_options_different_key(self, fake_engine: FakeEngine) -> None:
        """测试不同选项得到不同 cache key。"""
        assert (
            Compressor(engine=fake_engine).cache_key
            != Compressor({"mangle": False}, engine=fake_engine).cache_key
        )

    def test_define_cannot_change_after_construction(self, fake_engine: FakeEngine) -> None:
        """测试构造后无法修改 define，引擎收到的选项与 cache key 保持一致。"""
        compressor = Compressor(
            {"define": {"DEBUG": False}}, engine=fake_engine, pipeline_version="3"
        )
        key = compressor.cache_key

        with pytest.raises(TypeError):
            compressor.options.define["DEBUG"] = True  # type: ignore[index]
        compressor({"data": "var a;", "filename": "a.js"})

        assert fake_engine.calls[0]["options"]["compress"]["global_defs"] == {"DEBUG": False}
        assert compressor.cache_key == key

    def test_accepts_normalized_options(self, fake_engine: FakeEngine) -> None:
        """测试可以直接传入规范化后的选项树。"""
        options = normalize({"toplevel": True})
        assert Compressor(options, engine=fake_engine).options is options

    @pytest.mark.parametrize(
        ("pipeline_version", "expected"),
        [
            (None, EngineCapability.MAP_CAPABLE),
            ("4.1.0", EngineCapability.MAP_CAPABLE),
            ("3.7.2", EngineCapability.LEGACY_NO_MAP),
        ],
    )
    def test_capability_from_pipeline_version(
        self, fake_engine: FakeEngine, pipeline_version, expected
    ) -> None:
        """测试由宿主管道版本解析协议能力。"""
        compressor = Compressor(engine=fake_engine, pipeline_version=pipeline_version)
        assert compressor.capability is expected

    def test_explicit_capability(self, fake_engine: FakeEngine) -> None:
        """测试显式指定的协议能力优先。"""
        compressor = Compressor(
            engine=fake_engine,
            capability=EngineCapability.LEGACY_NO_MAP,
            pipeline_version="5",
        )
        assert compressor.capability is EngineCapability.LEGACY_NO_MAP


class TestLegacyCompile:
    """旧版管道协议测试。"""

    def test_returns_data_only(self, fake_engine: FakeEngine) -> None:
        """测试只返回 data，不含 map。"""
        compressor = Compressor(engine=fake_engine, pipeline_version="3")
        record = compressor({"data": " var a = 1; ", "filename": "a.js"})

        assert record == {"data": "var a = 1;"}
        assert fake_engine.calls[0]["method"] == "compile"


class TestMapCompile:
    """支持 Source Map 的管道协议测试。"""

    def test_returns_data_and_map(self, fake_engine: FakeEngine) -> None:
        """测试返回 data 和 v3 Map。"""
        compressor = Compressor(engine=fake_engine)
        record = compressor({"data": "var a;", "filename": "src/app.js"})

        assert record["data"] == "var a;"
        assert record["map"]["version"] == 3
        assert record["map"]["file"] == "src/app.js"
        assert record["map"]["sources"] == ["app.js"]

    def test_load_path_logical_file(self, fake_engine: FakeEngine) -> None:
        """测试 Map 的 file 为相对 load_path 的逻辑路径。"""
        compressor = Compressor(engine=fake_engine)
        record = compressor(
            {
                "data": "var a;",
                "filename": "/srv/app/assets/javascripts/app.js",
                "load_path": "/srv/app/assets/javascripts",
            }
        )
        assert record["map"]["file"] == "app.js"
        assert record["map"]["sources"] == ["app.js"]

    def test_upstream_map_combined(self) -> None:
        """测试上游 Map 与引擎 Map 合并为指向原始文件的 Map。"""
        engine = FakeEngine(raw_map=make_map(["app.js"], "AAAA,EAAE", file="app.js"))
        upstream = make_map(["app.coffee"], "AAIE,EAAC", names=[], sourcesContent=["coffee"])
        compressor = Compressor(engine=engine)

        record = compressor(
            {"data": "var a;", "filename": "app.js", "metadata": {"map": upstream}}
        )

        assert record["map"]["sources"] == ["app.coffee"]
        assert record["map"]["sourcesContent"] == ["coffee"]
        # (0,0) → 上游 (0,0) → app.coffee (4,2)；(0,2) → 上游 (0,2) → app.coffee (4,3)
        assert record["map"]["mappings"] == "AAIE,EAAC"

    def test_upstream_map_unresolved_kept(self) -> None:
        """测试上游 Map 中找不到的位置保留为未解析段。"""
        engine = FakeEngine(raw_map=make_map(["app.js"], "AAAA;AACA", file="app.js"))
        upstream = make_map(["app.coffee"], "AAAA")
        compressor = Compressor(engine=engine)

        record = compressor(
            {"data": "var a;\nvar b;", "filename": "app.js", "metadata": {"map": upstream}}
        )

        assert record["map"]["mappings"] == "AAAA;A"

    def test_compile_returns_result(self, fake_engine: FakeEngine) -> None:
        """测试 compile() 返回 CompileResult。"""
        result = Compressor(engine=fake_engine).compile(AssetInput(data="x", filename="a.js"))
        assert isinstance(result, CompileResult)
        assert result.map is not None


class TestAssetInput:
    """资产记录解析测试。"""

    def test_bytes_and_file_objects(self, fake_engine: FakeEngine) -> None:
        """测试 data 可以是 bytes 或文件对象。"""
        compressor = Compressor(engine=fake_engine, pipeline_version="3")

        assert compressor({"data": b"var a;", "filename": "a.js"})["data"] == "var a;"
        assert compressor({"data": io.StringIO("var b;"), "filename": "b.js"})["data"] == "var b;"

    def test_missing_data(self, fake_engine: FakeEngine) -> None:
        """测试缺少 data 的记录抛出 TypeError。"""
        with pytest.raises(TypeError):
            Compressor(engine=fake_engine)({"filename": "a.js"})

    def test_default_filename(self) -> None:
        """测试缺少 filename 时使用 input.js。"""
        asset = AssetInput.from_record({"data": "x"})
        assert asset.filename == "input.js"
        assert asset.upstream_map is None


class TestCompileErrors:
    """编译错误测试。"""

    def test_compile_error_propagates(self) -> None:
        """测试引擎错误以 CompileError 传播给调用方。"""
        engine = FakeEngine(error=EngineError("Unexpected token: punc ())", line=1, col=0))
        compressor = Compressor(engine=engine)

        with pytest.raises(CompileError, match="Unexpected token"):
            compressor({"data": ")(", "filename": "a.js"})

    def test_instances_share_no_state(self, fake_engine: FakeEngine) -> None:
        """测试不同实例的配置相互独立。"""
        first = Compressor({"mangle": False}, engine=fake_engine)
        second = Compressor(engine=fake_engine)

        first({"data": "x", "filename": "a.js"})
        second({"data": "x", "filename": "a.js"})

        assert fake_engine.calls[0]["options"]["mangle"] is False
        assert fake_engine.calls[1]["options"]["mangle"] is not False
