"""集中配置管理

Options 为不可变配置值，通过 with_* 方法派生新实例。
支持从 YAML 文件加载 + 编程式覆盖，另提供进程级默认配置。
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, fields, replace
from typing import Any

from vcslocator.core.exceptions import ConfigError
from vcslocator.utils.yaml_io import load_yaml

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 4


@dataclass(frozen=True)
class Options:
    """定位符解析与拉取选项"""

    # 解析
    ref_is_branch: bool = False

    # 克隆
    clone_path: str = ""  # 为空时使用内存文件系统
    git_binary: str = "git"

    # 认证
    read_credentials: bool = True
    http_username: str = ""
    http_password: str = ""

    # 并发
    max_workers: int = DEFAULT_MAX_WORKERS

    def __post_init__(self) -> None:
        if self.max_workers < 1:
            raise ConfigError(f"max_workers 必须 >= 1: {self.max_workers}")

    # ---- with 模式 ----

    def with_ref_as_branch(self, value: bool = True) -> Options:
        """将歧义的版本标记视为分支而非标签"""
        return replace(self, ref_is_branch=value)

    def with_clone_path(self, path: str) -> Options:
        return replace(self, clone_path=path)

    def with_read_credentials(self, value: bool = True) -> Options:
        return replace(self, read_credentials=value)

    def with_http_credentials(self, username: str, password: str) -> Options:
        return replace(self, http_username=username, http_password=password)

    def with_max_workers(self, n: int) -> Options:
        return replace(self, max_workers=n)

    # ---- 序列化 ----

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Options:
        known = {f.name for f in fields(cls)}
        unknown = sorted(k for k in data if k not in known)
        if unknown:
            logger.warning("忽略未知配置项: %s", ", ".join(unknown))
        try:
            return cls(**{k: v for k, v in data.items() if k in known})
        except TypeError as e:
            raise ConfigError(f"配置内容无效: {e}") from e

    @classmethod
    def from_file(cls, path: str = "configs/vcslocator.yml") -> Options:
        """从 YAML 文件加载配置，不存在则返回默认"""
        try:
            data = load_yaml(path)
        except (OSError, ValueError) as e:
            raise ConfigError(f"读取配置失败: {path}: {e}") from e
        if not data:
            return cls()
        return cls.from_dict(data)

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        if d["http_password"]:
            d["http_password"] = "***"
        return d


# 全局默认，首次 import 时不加载文件；由 CLI / Web 入口显式初始化
_current: Options | None = None


def get_options() -> Options:
    """获取当前默认选项（未初始化则返回默认值）"""
    global _current  # noqa: PLW0603
    if _current is None:
        _current = Options()
    return _current


def set_options(options: Options) -> None:
    global _current  # noqa: PLW0603
    _current = options


def init_options(path: str = "configs/vcslocator.yml") -> Options:
    """从文件初始化全局默认选项"""
    global _current  # noqa: PLW0603
    _current = Options.from_file(path)
    logger.info("配置已加载: %s", path)
    return _current
