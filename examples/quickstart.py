"""
terser-compressor 快速上手示例。

演示三种用法：直接压缩、合并上游 Source Map、注册到资产管道。

运行方式：
    python examples/quickstart.py

需要 Node.js 和 terser（npm install terser）。
"""

import json


def main() -> None:
    from terser_compressor import Compressor, register

    source = (
        "/*! MyLib v1.0 | (c) Example Inc. */\n"
        "function greet(name) {\n"
        "  // say hello\n"
        "  return 'Hello, ' + name + '!';\n"
        "}\n"
    )

    # ===== 场景 1：最简用法 =====
    print("=" * 60)
    print("场景 1：最简用法")
    print("=" * 60)

    compressor = Compressor({"comments": "copyright"})
    record = compressor({"data": source, "filename": "app/assets/javascripts/greet.js"})

    print(f"\n压缩结果：{record['data']}")
    print(f"cache key：{compressor.cache_key}")
    print(f"Source Map：{json.dumps(record['map'], ensure_ascii=False)}")

    # ===== 场景 2：合并上游 Source Map =====
    print("\n" + "=" * 60)
    print("场景 2：合并上游（例如 CoffeeScript 转译）的 Source Map")
    print("=" * 60)

    upstream_map = {
        "version": 3,
        "sources": ["greet.coffee"],
        "names": [],
        "mappings": "AAAA;AACA;AACA;AACA;AACA",
    }
    record = compressor(
        {
            "data": source,
            "filename": "app/assets/javascripts/greet.js",
            "load_path": "app/assets/javascripts",
            "metadata": {"map": upstream_map},
        }
    )
    print(f"\n合并后的 sources：{record['map']['sources']}")
    print(f"合并后的 mappings：{record['map']['mappings']}")

    # ===== 场景 3：注册到资产管道 =====
    print("\n" + "=" * 60)
    print("场景 3：注册到资产管道")
    print("=" * 60)

    class Environment:
        def __init__(self):
            self.compressors = {}

        def register_compressor(self, mime_type, name, compressor):
            self.compressors[(mime_type, name)] = compressor

    environment = Environment()
    register(environment)
    register(environment, name="terser_readable", compressor=Compressor({"mangle": False}))
    print(f"\n已注册：{sorted(environment.compressors)}")


if __name__ == "__main__":
    main()
