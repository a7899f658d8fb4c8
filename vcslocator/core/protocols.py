"""协作方协议定义

拉取编排只依赖这里的抽象：仓库访问层、内容文件系统、认证解析器。
使用 typing.Protocol 而非 ABC，测试中的 fake 实现无需继承。
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING, BinaryIO, Protocol

if TYPE_CHECKING:
    from vcslocator.core.config import Options
    from vcslocator.core.models import Components


# =========================================================================
# 内容文件系统
# =========================================================================

class ContentFilesystem(Protocol):
    """检出后的只读文件视图，路径相对仓库根目录、以 / 分隔"""

    def open(self, path: str) -> BinaryIO:
        """打开文件，不存在抛 FileNotFoundError，目录抛 IsADirectoryError"""
        ...

    def walk(self) -> Iterator[str]:
        """遍历所有文件路径"""
        ...

    def is_dir(self, path: str) -> bool:
        ...


# =========================================================================
# 仓库访问
# =========================================================================

class Auth(Protocol):
    """传递给 git 的认证方式"""

    def git_args(self) -> list[str]:
        """附加在 git 子命令之前的 -c 配置参数"""
        ...

    def git_env(self) -> dict[str, str]:
        """附加的环境变量"""
        ...


class Repository(Protocol):
    """一次克隆得到的仓库句柄"""

    def fetch(self, refspec: str) -> None:
        ...

    def resolve_revision(self, rev: str) -> str:
        """解析为完整 commit 哈希"""
        ...

    def checkout(self, commit: str) -> None:
        ...

    def filesystem(self) -> ContentFilesystem:
        ...

    def close(self) -> None:
        ...


class RepositoryProvider(Protocol):
    """仓库访问层：克隆 / 拉取 / 解析版本 / 检出"""

    def clone(
        self,
        url: str,
        *,
        reference: str = "",
        auth: Auth | None = None,
        single_branch: bool = True,
        path: str = "",
    ) -> Repository:
        ...


# =========================================================================
# 认证
# =========================================================================

class AuthResolver(Protocol):
    def resolve(self, components: Components, options: Options) -> Auth | None:
        ...
