"""测试套共享 fixture — fake 仓库访问层 + 真实 git 仓库

  FakeProvider            统计克隆次数与最大并发数，内容来自预置的 dict
  git_repo                用 git 命令行构建的临时仓库（无 git 时跳过）
"""

from __future__ import annotations

import shutil
import subprocess
import threading
import time
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from vcslocator.core.exceptions import CloneError, ResolveRevisionError
from vcslocator.services.git import MemoryFS

# =========================================================================
# fake 仓库访问层
# =========================================================================


class FakeRepo:
    def __init__(self, provider: FakeProvider, url: str, reference: str) -> None:
        self.provider = provider
        self.url = url
        self.reference = reference
        self.checked_out = ""
        self.closed = False

    def fetch(self, refspec: str) -> None:
        self.provider.fetched.append(refspec)
        self.provider.unknown_revisions.discard(refspec)

    def resolve_revision(self, rev: str) -> str:
        if rev in self.provider.unknown_revisions:
            raise ResolveRevisionError(f"无法解析版本 {rev!r}", locator=self.url, ref=rev)
        return rev

    def checkout(self, commit: str) -> None:
        self.checked_out = commit

    def filesystem(self) -> MemoryFS:
        return MemoryFS(self.provider.contents.get(self.url, {}))

    def close(self) -> None:
        self.closed = True


@dataclass
class FakeProvider:
    """线程安全的 fake 仓库访问层

    contents: 仓库地址 -> {路径: 内容}；failing 中的地址克隆时抛 CloneError。
    """

    contents: dict[str, dict[str, bytes]] = field(default_factory=dict)
    failing: set[str] = field(default_factory=set)
    unknown_revisions: set[str] = field(default_factory=set)
    delay: float = 0.0
    calls: list[tuple[str, str, str]] = field(default_factory=list)
    fetched: list[str] = field(default_factory=list)
    repos: list[FakeRepo] = field(default_factory=list)
    max_active: int = 0
    _active: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock)

    @property
    def clone_count(self) -> int:
        return len(self.calls)

    def clone(self, url, *, reference="", auth=None, single_branch=True, path=""):
        with self._lock:
            self.calls.append((url, reference, path))
            self._active += 1
            self.max_active = max(self.max_active, self._active)
        try:
            if self.delay:
                time.sleep(self.delay)
            if url in self.failing:
                raise CloneError(f"克隆仓库失败 {url}", locator=url)
            repo = FakeRepo(self, url, reference)
            with self._lock:
                self.repos.append(repo)
            return repo
        finally:
            with self._lock:
                self._active -= 1


class NullAuthResolver:
    def resolve(self, components, options):
        return None


@pytest.fixture()
def fake_provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture()
def null_auth() -> NullAuthResolver:
    return NullAuthResolver()


# =========================================================================
# 真实 git 仓库
# =========================================================================


@dataclass
class GitRepoInfo:
    path: Path
    commit1: str
    commit2: str
    feature_commit: str

    @property
    def locator_base(self) -> str:
        return f"file://{self.path}"


def _git(cwd: Path, *args: str) -> str:
    r = subprocess.run(
        ["git", *args], cwd=cwd, capture_output=True, text=True, check=True,
    )
    return r.stdout.strip()


@pytest.fixture(scope="session")
def git_repo(tmp_path_factory) -> GitRepoInfo:
    """构建测试仓库

    main:     commit1 (tag v1.0) -> commit2 (修改 README.md)
    feature:  从 commit2 分出，新增 extra.txt
    refs/custom/snap 指向 commit1
    """
    if shutil.which("git") is None:
        pytest.skip("未安装 git")

    root = tmp_path_factory.mktemp("origin") / "repo"
    root.mkdir()
    _git(root, "init", "--quiet")
    _git(root, "checkout", "--quiet", "-b", "main")
    _git(root, "config", "user.name", "tester")
    _git(root, "config", "user.email", "tester@example.com")
    _git(root, "config", "commit.gpgsign", "false")
    _git(root, "config", "tag.gpgsign", "false")

    (root / "README.md").write_text("version one\n", encoding="utf-8")
    (root / "docs" / "api").mkdir(parents=True)
    (root / "docs" / "guide.md").write_text("# guide\n", encoding="utf-8")
    (root / "docs" / "api" / "index.md").write_text("# api\n", encoding="utf-8")
    (root / "src").mkdir()
    (root / "src" / "app.py").write_text("print('hi')\n", encoding="utf-8")
    _git(root, "add", ".")
    _git(root, "commit", "--quiet", "-m", "first")
    commit1 = _git(root, "rev-parse", "HEAD")
    _git(root, "tag", "v1.0")

    (root / "README.md").write_text("version two\n", encoding="utf-8")
    _git(root, "commit", "--quiet", "-am", "second")
    commit2 = _git(root, "rev-parse", "HEAD")

    _git(root, "checkout", "--quiet", "-b", "feature")
    (root / "extra.txt").write_text("feature only\n", encoding="utf-8")
    _git(root, "add", "extra.txt")
    _git(root, "commit", "--quiet", "-m", "feature")
    feature_commit = _git(root, "rev-parse", "HEAD")
    _git(root, "checkout", "--quiet", "main")

    _git(root, "update-ref", "refs/custom/snap", commit1)
    return GitRepoInfo(path=root, commit1=commit1, commit2=commit2, feature_commit=feature_commit)
