"""
测试套件共享 Fixtures 和配置。

本文件定义了所有测试中可复用的 fixtures、假引擎和辅助函数。
单元测试一律使用进程内的 FakeEngine，不启动 Node.js。
"""

from __future__ import annotations

import json
from typing import Any

import pytest

from terser_compressor.engine import clear_engine, register_engine
from terser_compressor.engine.protocol import EngineError
from terser_compressor.facade import reset_default_compressor


# === 假引擎 ===


class FakeEngine:
    """
    记录调用的进程内引擎。

    - 默认把源码去掉首尾空白作为"压缩结果"
    - 默认 Map：生成位置 (0, 0) → 输入文件 (0, 0)
    - 设置 error 后每次调用都抛出该 EngineError
    """

    def __init__(
        self,
        version: str = "5.0.0-fake",
        code: str | None = None,
        raw_map: str | dict[str, Any] | None = None,
        error: EngineError | None = None,
    ) -> None:
        self.version = version
        self.code = code
        self.raw_map = raw_map
        self.error = error
        self.calls: list[dict[str, Any]] = []

    def _record(self, method: str, source: str, options: dict[str, Any], filename: str) -> str:
        self.calls.append(
            {"method": method, "source": source, "options": options, "filename": filename}
        )
        if self.error is not None:
            raise self.error
        return self.code if self.code is not None else source.strip()

    def compile(self, source: str, options: dict[str, Any], filename: str = "input.js") -> str:
        return self._record("compile", source, options, filename)

    def compile_with_map(
        self, source: str, options: dict[str, Any], filename: str = "input.js"
    ) -> tuple[str, str]:
        code = self._record("compile_with_map", source, options, filename)
        raw_map = self.raw_map
        if raw_map is None:
            raw_map = make_map(sources=[filename], mappings="AAAA", file=filename)
        if isinstance(raw_map, dict):
            raw_map = json.dumps(raw_map)
        return code, raw_map


def make_map(
    sources: list[str],
    mappings: str,
    names: list[str] | None = None,
    file: str | None = None,
    **extra: Any,
) -> dict[str, Any]:
    """构造一个 v3 Source Map 字典。"""
    source_map: dict[str, Any] = {
        "version": 3,
        "sources": sources,
        "names": names or [],
        "mappings": mappings,
    }
    if file is not None:
        source_map["file"] = file
    source_map.update(extra)
    return source_map


# === Fixtures ===


@pytest.fixture(autouse=True)
def _isolate_process_state():
    """每个测试前后清空默认引擎和默认压缩器。"""
    clear_engine()
    reset_default_compressor()
    yield
    clear_engine()
    reset_default_compressor()


@pytest.fixture
def fake_engine() -> FakeEngine:
    """未注册为默认引擎的 FakeEngine。"""
    return FakeEngine()


@pytest.fixture
def registered_engine() -> FakeEngine:
    """已注册为进程级默认引擎的 FakeEngine。"""
    engine = FakeEngine()
    register_engine(engine)
    return engine


@pytest.fixture
def sample_source() -> str:
    """多行 JavaScript 源码示例。"""
    return (
        "// header comment\n"
        "function bar(foo) {\n"
        "  return foo + 'bar';\n"
        "}\n"
    )
