"""
真实 terser 引擎的端到端测试。

需要 Node.js 和 terser npm 包（可以通过 TERSER_NODE_BIN / TERSER_MODULE 指定），
不可用时整个模块跳过。
"""

from __future__ import annotations

import os
import shutil
import subprocess

import pytest

from terser_compressor import Compressor, TerserEngine, register_engine
from terser_compressor.config import EngineSettings
from terser_compressor.errors import CompileError

pytestmark = pytest.mark.integration


def _terser_available() -> bool:
    settings = EngineSettings.from_env()
    if shutil.which(settings.node_bin) is None:
        return False
    try:
        completed = subprocess.run(
            [settings.node_bin, "-e", f"require({settings.terser_module!r})"],
            capture_output=True,
            env={**os.environ},
            timeout=30,
            check=False,
        )
    except (OSError, subprocess.TimeoutExpired):
        return False
    return completed.returncode == 0


if not _terser_available():
    pytest.skip("需要 Node.js 和 terser npm 包", allow_module_level=True)


SOURCE = "function bar(foo) {return foo + 'bar'};"


@pytest.fixture(autouse=True)
def terser_engine() -> TerserEngine:
    engine = TerserEngine(EngineSettings.from_env())
    register_engine(engine)
    return engine


class TestTerserEndToEnd:
    """真实引擎测试。"""

    def test_version_detected(self, terser_engine: TerserEngine) -> None:
        """测试探测到 terser 版本号。"""
        assert terser_engine.version[0].isdigit()
        assert Compressor().cache_key.startswith(f"Terser:{terser_engine.version}:1:")

    def test_mangles_by_default(self) -> None:
        """测试默认混淆参数名。"""
        record = Compressor()({"data": SOURCE, "filename": "test.js"})
        assert "(foo)" not in record["data"]

    def test_mangle_disabled(self) -> None:
        """测试关闭混淆后保留参数名。"""
        record = Compressor({"mangle": False})({"data": SOURCE, "filename": "test.js"})
        assert "(foo)" in record["data"]

    def test_syntax_error(self) -> None:
        """测试语法错误抛出带引擎原始信息的 CompileError。"""
        with pytest.raises(CompileError, match="Unexpected token"):
            Compressor()({"data": ")(", "filename": "test.js"})

    def test_comments_removed_by_default(self) -> None:
        """测试默认不保留注释。"""
        source = "/* hello */ var a = 1; // tail\n"
        record = Compressor()({"data": source, "filename": "test.js"})
        assert "hello" not in record["data"]
        assert "tail" not in record["data"]

    def test_copyright_comments_kept(self) -> None:
        """测试 copyright 策略保留 /*! */ 注释。"""
        source = "/*! keep me */\nvar a = 1;\n"
        record = Compressor({"comments": "copyright"})({"data": source, "filename": "test.js"})
        assert "keep me" in record["data"]

    def test_recompile_is_stable(self) -> None:
        """测试对压缩结果再次压缩不会出错，也不会变长。"""
        compressor = Compressor()
        first = compressor({"data": SOURCE, "filename": "test.js"})["data"]
        second = compressor({"data": first, "filename": "test.js"})["data"]
        assert len(second) <= len(first)

    def test_source_map_generated(self) -> None:
        """测试生成的 Source Map 指向输入文件。"""
        record = Compressor()({"data": SOURCE, "filename": "lib/test.js"})

        assert record["map"]["version"] == 3
        assert record["map"]["file"] == "lib/test.js"
        assert record["map"]["sources"] == ["test.js"]
        assert record["map"]["mappings"]

    def test_legacy_pipeline(self) -> None:
        """测试旧版管道协议只返回代码。"""
        record = Compressor(pipeline_version="3")({"data": SOURCE, "filename": "test.js"})
        assert set(record) == {"data"}
