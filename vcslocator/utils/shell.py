"""命令执行工具 — 统一子进程调用

通过 CommandExecutor 协议抽象子进程执行，git 访问层经由此处调用，
测试时可注入 fake 实现，无需 patch subprocess。
"""

from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass
from typing import Protocol

logger = logging.getLogger(__name__)


# =========================================================================
# 命令执行结果
# =========================================================================

@dataclass
class CommandResult:
    """命令执行结果（与 subprocess 解耦）

    binary=True 执行时 stdout 为 bytes，否则为 str。
    """

    returncode: int
    stdout: str | bytes
    stderr: str

    @property
    def success(self) -> bool:
        return self.returncode == 0

    @property
    def text(self) -> str:
        if isinstance(self.stdout, bytes):
            return self.stdout.decode("utf-8", errors="replace").strip()
        return self.stdout.strip()


# =========================================================================
# 命令执行器协议
# =========================================================================

class CommandExecutor(Protocol):
    """命令执行器协议 — 抽象子进程调用"""

    def execute(
        self,
        cmd: list[str],
        *,
        cwd: str | None = None,
        env: dict[str, str] | None = None,
        binary: bool = False,
    ) -> CommandResult:
        """执行命令并返回结果"""
        ...


# =========================================================================
# 默认实现: 本地执行器
# =========================================================================

class LocalExecutor:
    """本地子进程执行器（默认实现）

    env 为附加变量，在当前进程环境之上合并。
    """

    def execute(
        self,
        cmd: list[str],
        *,
        cwd: str | None = None,
        env: dict[str, str] | None = None,
        binary: bool = False,
    ) -> CommandResult:
        full_env = {**os.environ, **env} if env else None
        try:
            r = subprocess.run(
                cmd, capture_output=True, cwd=cwd, env=full_env,
                check=False, text=not binary,
            )
        except FileNotFoundError as e:
            # 可执行文件不存在，按 shell 惯例返回 127
            logger.error("命令不存在: %s", cmd[0])
            return CommandResult(returncode=127, stdout=b"" if binary else "", stderr=str(e))
        stderr = r.stderr.decode("utf-8", errors="replace") if binary else r.stderr
        return CommandResult(returncode=r.returncode, stdout=r.stdout, stderr=stderr)


# =========================================================================
# 全局默认执行器（可替换）
# =========================================================================

_default_executor: CommandExecutor = LocalExecutor()


def get_executor() -> CommandExecutor:
    """获取全局默认命令执行器"""
    return _default_executor


def set_executor(executor: CommandExecutor) -> None:
    """替换全局默认命令执行器（用于测试）"""
    global _default_executor  # noqa: PLW0603
    _default_executor = executor
