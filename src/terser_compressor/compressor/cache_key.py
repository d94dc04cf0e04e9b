"""
Cache key 派生。

宿主管道用 cache key 和文件内容哈希一起组成缓存条目的键：
key 相同 ⇒ 相同输入一定得到相同的压缩结果，可以跳过重新编译。

key 是 (引擎版本, 适配层版本, 规范化选项) 的纯函数：
对选项做规范化 JSON 序列化（键排序、固定分隔符）后取 SHA-256。
"""

from __future__ import annotations

import hashlib
import json
import logging
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel

logger = logging.getLogger(__name__)

CACHE_KEY_PREFIX = "Terser"


def canonical_json(value: Any) -> str:
    """与键顺序无关的 JSON 序列化。"""
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def derive_cache_key(
    engine_version: str,
    adapter_version: str,
    normalized_options: BaseModel | Mapping[str, Any],
) -> str:
    """
    计算 cache key。

    参数:
        engine_version: 引擎版本号
        adapter_version: 适配层版本号
        normalized_options: 规范化后的选项树（或等价的字典）

    返回:
        形如 "Terser:<引擎版本>:<适配层版本>:<sha256>" 的字符串

    示例::

        key = derive_cache_key("5.31.0", "1", normalize({"mangle": False}))
    """
    if isinstance(normalized_options, BaseModel):
        options_payload = normalized_options.model_dump(mode="json")
    else:
        options_payload = dict(normalized_options)

    payload = {
        "engine": engine_version,
        "adapter": adapter_version,
        "options": options_payload,
    }
    digest = hashlib.sha256(canonical_json(payload).encode("utf-8")).hexdigest()
    cache_key = f"{CACHE_KEY_PREFIX}:{engine_version}:{adapter_version}:{digest}"
    logger.debug("派生 cache key：%s", cache_key)
    return cache_key
