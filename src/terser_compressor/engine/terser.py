"""
基于 Node.js 的 terser 引擎。

terser 是 JavaScript 写的压缩器，这里通过随包分发的驱动脚本
`terser_driver.js` 调用它：每次编译启动一个 node 子进程，
经 stdin/stdout 交换一条 JSON 请求/响应。

- node 可执行文件由 `EngineSettings.node_bin`（环境变量 TERSER_NODE_BIN）指定
- terser 模块由 `EngineSettings.terser_module`（环境变量 TERSER_MODULE）指定，
  可以是包名，也可以是 node_modules 中的绝对路径

每次调用一个独立子进程，没有跨调用共享的引擎状态。
"""

from __future__ import annotations

import json
import logging
import os
import subprocess
import threading
from pathlib import Path
from typing import Any

from terser_compressor.config.schema import EngineSettings
from terser_compressor.engine.protocol import EngineError
from terser_compressor.errors import EngineUnavailableError

logger = logging.getLogger(__name__)

DRIVER_PATH = Path(__file__).with_name("terser_driver.js")


class TerserEngine:
    """
    terser 引擎实现（MinifierEngine 协议）。

    用法::

        engine = TerserEngine()
        code = engine.compile("var a = 1;", {"mangle": False})

        # 指定 node 和 terser 位置
        engine = TerserEngine(EngineSettings(
            node_bin="/usr/local/bin/node",
            terser_module="/srv/app/node_modules/terser",
        ))

    属性:
        settings: 引擎运行时设置
    """

    def __init__(self, settings: EngineSettings | None = None) -> None:
        self._settings = settings or EngineSettings.from_env()
        self._version = self._settings.version
        self._version_lock = threading.Lock()

    @property
    def settings(self) -> EngineSettings:
        return self._settings

    @property
    def version(self) -> str:
        """terser 版本号；未在设置中指定时首次访问会探测一次并缓存。"""
        if self._version is None:
            with self._version_lock:
                if self._version is None:
                    response = self._run({"command": "version"})
                    self._version = str(response.get("version", "unknown"))
                    logger.info("检测到 terser 版本：%s", self._version)
        return self._version

    def compile(self, source: str, options: dict[str, Any], filename: str = "input.js") -> str:
        response = self._minify(source, options, filename)
        return response["code"]

    def compile_with_map(
        self, source: str, options: dict[str, Any], filename: str = "input.js"
    ) -> tuple[str, str]:
        response = self._minify(source, options, filename)
        raw_map = response.get("map")
        if not raw_map:
            raise EngineUnavailableError(
                what="terser 没有返回 Source Map。",
                why="选项中缺少 sourceMap，或 terser 版本不支持生成 Source Map。",
                how="升级 terser 到 5.x，并确认 compile_with_map 的选项包含 sourceMap。",
            )
        return response["code"], raw_map

    def _minify(self, source: str, options: dict[str, Any], filename: str) -> dict[str, Any]:
        response = self._run(
            {
                "command": "minify",
                "source": source,
                "filename": filename,
                "options": options,
            }
        )
        error = response.get("error")
        if error is not None:
            raise EngineError(
                message=error.get("message") or "terser 报告了未知错误",
                line=error.get("line"),
                col=error.get("col"),
                filename=error.get("filename") or filename,
            )
        if not isinstance(response.get("code"), str):
            raise EngineUnavailableError(
                what="terser 驱动返回的响应缺少 code 字段。",
                why=f"响应内容：{str(response)[:200]}",
                how="确认 TERSER_MODULE 指向的是 terser 5.x。",
            )
        return response

    def _run(self, request: dict[str, Any]) -> dict[str, Any]:
        """启动驱动进程，发送请求并解析响应。"""
        command = [self._settings.node_bin, str(DRIVER_PATH)]
        env = {**os.environ, "TERSER_MODULE": self._settings.terser_module}
        logger.debug("调用 terser 驱动：command=%s", request.get("command"))

        try:
            completed = subprocess.run(
                command,
                input=json.dumps(request),
                capture_output=True,
                encoding="utf-8",
                env=env,
                timeout=self._settings.timeout_seconds,
                check=False,
            )
        except FileNotFoundError as e:
            raise EngineUnavailableError(
                what=f"找不到 node 可执行文件 '{self._settings.node_bin}'。",
                why=str(e),
                how="安装 Node.js，或通过环境变量 TERSER_NODE_BIN 指定 node 的路径。",
                command=command,
            ) from e
        except subprocess.TimeoutExpired as e:
            raise EngineUnavailableError(
                what=f"terser 调用超过了 {self._settings.timeout_seconds} 秒。",
                why="输入过大，或 compress.passes 设置过高。",
                how="调大 TERSER_TIMEOUT，或减小 compress.passes。",
                command=command,
            ) from e

        if completed.returncode != 0:
            raise EngineUnavailableError(
                what="terser 驱动进程异常退出。",
                why=completed.stderr.strip() or f"退出码 {completed.returncode}",
                how="确认已安装 terser（npm install terser），"
                    "或通过环境变量 TERSER_MODULE 指定其路径。",
                command=command,
                returncode=completed.returncode,
            )

        try:
            response = json.loads(completed.stdout)
        except json.JSONDecodeError as e:
            raise EngineUnavailableError(
                what="无法解析 terser 驱动的输出。",
                why=str(e),
                how="检查 node 启动时是否输出了额外内容（例如 NODE_OPTIONS 中的调试参数）。",
                command=command,
            ) from e

        if not isinstance(response, dict):
            raise EngineUnavailableError(
                what="terser 驱动的输出不是 JSON 对象。",
                why=f"实际类型为 {type(response).__name__}。",
                command=command,
            )
        return response
