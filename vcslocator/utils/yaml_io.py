"""YAML 文件读取工具

统一 encoding="utf-8"、空值保护与大小限制。
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

# 配置文件最大大小限制 (1MB)
MAX_YAML_SIZE = 1024 * 1024


def load_yaml(path: str | Path) -> dict[str, Any]:
    """安全读取 YAML 文件

    返回:
        dict: 解析后的字典。文件不存在、为空或顶层不是映射时返回空字典

    异常:
        ValueError: 文件过大或 YAML 格式错误
        OSError: IO 错误
    """
    p = Path(path)
    if not p.exists():
        return {}

    size = p.stat().st_size
    if size > MAX_YAML_SIZE:
        raise ValueError(f"YAML 文件过大: {p} ({size} 字节)")

    with open(p, encoding="utf-8") as f:
        try:
            result = yaml.safe_load(f)
        except yaml.YAMLError as e:
            logger.error("解析 YAML 文件失败: %s, 错误: %s", p, e)
            raise ValueError(f"YAML 格式错误: {p}") from e

    if result is None:
        return {}
    if not isinstance(result, dict):
        logger.warning("%s 内容不是字典类型 (实际类型: %s)，返回空字典", p, type(result).__name__)
        return {}
    return result
