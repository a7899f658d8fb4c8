"""核心数据模型

Components 为解析结果（不可变），FetchPlan / FetchOutcome 为批量拉取过程中的
临时对象，生命周期仅限一次批量调用。
"""

from __future__ import annotations

import threading
from dataclasses import asdict, dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from vcslocator.core.protocols import ContentFilesystem

TRANSPORT_HTTPS = "https"
TRANSPORT_SSH = "ssh"
TRANSPORT_FILE = "file"

# 无 `tool+` 前缀时允许的传输协议
SANCTIONED_TRANSPORTS = (TRANSPORT_HTTPS, TRANSPORT_SSH, TRANSPORT_FILE)


# =========================================================================
# 解析结果
# =========================================================================


@dataclass(frozen=True)
class Components:
    """VCS 定位符的组成部分

    commit / tag / branch 至多一个非空；ref_string 始终保留原始版本标记。
    """

    tool: str = ""
    transport: str = ""
    hostname: str = ""
    repo_path: str = ""
    ref_string: str = ""
    commit: str = ""
    tag: str = ""
    branch: str = ""
    sub_path: str = ""

    def repo_url(self) -> str:
        """根据传输协议合成克隆地址，file 协议直接使用本地路径"""
        path = self.repo_path.lstrip("/")
        if self.transport in (TRANSPORT_HTTPS, ""):
            return f"https://{self.hostname}/{path}"
        if self.transport == TRANSPORT_SSH:
            return f"git@{self.hostname}:{path}"
        if self.transport == TRANSPORT_FILE:
            return self.repo_path
        return ""

    @property
    def unclassified_ref(self) -> bool:
        """ref 存在但未被归类为 commit/tag/branch（如 refs/notes/...）"""
        return bool(self.ref_string) and not (self.commit or self.tag or self.branch)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


# =========================================================================
# 批量拉取
# =========================================================================


@dataclass
class FetchPlan:
    """一次去重后的克隆单元：同一仓库 + 同一版本标记只克隆一次

    files 记录 原始下标 -> 子路径；filesystem 仅由克隆任务写入一次。
    """

    key: str
    locator: str
    components: Components
    files: dict[int, str] = field(default_factory=dict)
    _filesystem: ContentFilesystem | None = field(default=None, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def attach(self, fs: ContentFilesystem) -> None:
        with self._lock:
            self._filesystem = fs

    @property
    def filesystem(self) -> ContentFilesystem | None:
        with self._lock:
            return self._filesystem


@dataclass
class FetchOutcome:
    """单个下标的拉取结果"""

    index: int
    size: int = 0
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None
