"""仓库访问层 — 基于 git 命令行

clone 不指定 path 时执行 bare 克隆到临时目录，filesystem() 将固定版本的内容
通过 git archive 读入内存后删除临时目录；指定 path 时在该目录检出工作区。
"""

from __future__ import annotations

import logging
import shutil
import tempfile
from pathlib import Path

from vcslocator.core.exceptions import CheckoutError, CloneError, FetchRefError, ResolveRevisionError
from vcslocator.core.protocols import Auth, ContentFilesystem
from vcslocator.services.git.fs import DirFS, MemoryFS
from vcslocator.utils.shell import CommandExecutor, CommandResult, get_executor

logger = logging.getLogger(__name__)

_NO_PROMPT_ENV = {"GIT_TERMINAL_PROMPT": "0"}


def short_ref_name(reference: str) -> str:
    """refs/heads/x、refs/tags/x -> x，供 git clone --branch 使用"""
    for prefix in ("refs/heads/", "refs/tags/"):
        if reference.startswith(prefix):
            return reference[len(prefix):]
    return reference


class GitRepository:
    """git 仓库句柄

    bare 模式下 checkout 只固定版本，不产生工作区。
    """

    def __init__(
        self,
        path: Path,
        *,
        url: str,
        bare: bool,
        auth: Auth | None = None,
        executor: CommandExecutor | None = None,
        git_binary: str = "git",
    ) -> None:
        self.path = path
        self.url = url
        self.bare = bare
        self._auth = auth
        self._executor = executor or get_executor()
        self._git_binary = git_binary
        self._rev = "HEAD"
        self._closed = False

    @property
    def revision(self) -> str:
        return self._rev

    def _git(self, *args: str, binary: bool = False) -> CommandResult:
        return run_git(
            list(args), cwd=str(self.path), auth=self._auth,
            executor=self._executor, git_binary=self._git_binary, binary=binary,
        )

    def fetch(self, refspec: str) -> None:
        r = self._git("fetch", "--quiet", "origin", refspec)
        if not r.success:
            raise FetchRefError(
                f"拉取引用失败 {refspec!r} ({self.url}): {r.stderr.strip()[:300]}",
                locator=self.url, ref=refspec,
            )

    def resolve_revision(self, rev: str) -> str:
        r = self._git("rev-parse", "--verify", "--quiet", f"{rev}^{{commit}}")
        if not r.success or not r.text:
            raise ResolveRevisionError(
                f"无法解析版本 {rev!r} ({self.url})", locator=self.url, ref=rev,
            )
        return r.text

    def checkout(self, commit: str) -> None:
        if not self.bare:
            r = self._git("checkout", "--quiet", "--detach", commit)
            if not r.success:
                raise CheckoutError(
                    f"检出提交失败 {commit} ({self.url}): {r.stderr.strip()[:300]}",
                    locator=self.url, ref=commit,
                )
        self._rev = commit

    def filesystem(self) -> ContentFilesystem:
        if not self.bare:
            return DirFS(self.path)
        r = self._git("archive", "--format=tar", self._rev, binary=True)
        if not r.success:
            raise CheckoutError(
                f"读取版本内容失败 {self._rev} ({self.url}): {r.stderr.strip()[:300]}",
                locator=self.url, ref=self._rev,
            )
        fs = MemoryFS.from_tar(r.stdout if isinstance(r.stdout, bytes) else r.stdout.encode())
        self.close()
        return fs

    def close(self) -> None:
        """删除临时 bare 克隆；磁盘检出目录由调用方管理"""
        if self.bare and not self._closed:
            shutil.rmtree(self.path, ignore_errors=True)
            self._closed = True


class GitProvider:
    """git 命令行实现的仓库访问层"""

    def __init__(self, executor: CommandExecutor | None = None, git_binary: str = "git") -> None:
        self._executor = executor
        self.git_binary = git_binary

    def clone(
        self,
        url: str,
        *,
        reference: str = "",
        auth: Auth | None = None,
        single_branch: bool = True,
        path: str = "",
    ) -> GitRepository:
        executor = self._executor or get_executor()
        bare = not path
        if bare:
            target = Path(tempfile.mkdtemp(prefix="vcslocator-"))
        else:
            target = Path(path)
            target.parent.mkdir(parents=True, exist_ok=True)

        argv = ["clone", "--quiet"]
        if bare:
            argv.append("--bare")
        if single_branch:
            argv.append("--single-branch")
        if reference:
            argv += ["--branch", short_ref_name(reference)]
        argv += [url, str(target)]

        logger.info("克隆仓库: %s%s -> %s", url, f"@{reference}" if reference else "",
                    "内存" if bare else target)
        r = run_git(argv, auth=auth, executor=executor, git_binary=self.git_binary)
        if not r.success:
            if bare:
                shutil.rmtree(target, ignore_errors=True)
            raise CloneError(f"克隆仓库失败 {url}: {r.stderr.strip()[:300]}", locator=url)

        return GitRepository(
            target, url=url, bare=bare, auth=auth,
            executor=executor, git_binary=self.git_binary,
        )


def run_git(
    argv: list[str],
    *,
    cwd: str | None = None,
    auth: Auth | None = None,
    executor: CommandExecutor | None = None,
    git_binary: str = "git",
    binary: bool = False,
) -> CommandResult:
    """执行 git 子命令，认证参数放在子命令之前"""
    cmd = [git_binary]
    env = dict(_NO_PROMPT_ENV)
    if auth is not None:
        cmd += auth.git_args()
        env.update(auth.git_env())
    cmd += argv
    logger.debug("git %s (cwd=%s)", " ".join(argv), cwd or ".")
    return (executor or get_executor()).execute(cmd, cwd=cwd, env=env, binary=binary)
