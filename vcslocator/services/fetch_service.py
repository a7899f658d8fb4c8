"""拉取服务 — 单文件 / 目录 / 批量拉取的编排

批量拉取分两个阶段，均为有界并发：
1. 克隆阶段：每个去重后的计划克隆一次，任一失败则整批失败，不进入阶段 2
2. 复制阶段：每个输入下标打开子路径并写入对应的输出，失败按下标收集

仓库访问层与认证解析器可注入，默认使用 git 命令行实现。
"""

from __future__ import annotations

import hashlib
import io
import logging
import time
from collections.abc import Sequence
from functools import partial
from pathlib import Path
from typing import BinaryIO, Protocol

from vcslocator.core import protocols
from vcslocator.core.aggregate import aggregate_errors
from vcslocator.core.config import Options, get_options
from vcslocator.core.exceptions import (
    BatchCloneError,
    CloneError,
    CopyError,
    NoSubPathError,
    OpenError,
    ResolveRevisionError,
    UnsupportedToolError,
    ValidationError,
    VcsLocatorError,
)
from vcslocator.core.locator import DEFAULT_TOOL, parse
from vcslocator.core.models import Components, FetchOutcome, FetchPlan
from vcslocator.core.planner import build_plans
from vcslocator.core.protocols import ContentFilesystem, Repository, RepositoryProvider
from vcslocator.core.scheduler import BoundedExecutor
from vcslocator.services.auth import AuthResolver
from vcslocator.services.git import GitProvider, clean_path

logger = logging.getLogger(__name__)

COPY_CHUNK_SIZE = 64 * 1024
FULL_SHA_LEN = 40


class Writer(Protocol):
    def write(self, data: bytes, /) -> object: ...


class FetchService:
    """定位符拉取服务"""

    def __init__(
        self,
        options: Options | None = None,
        *,
        provider: RepositoryProvider | None = None,
        auth_resolver: protocols.AuthResolver | None = None,
    ) -> None:
        self.options = options or get_options()
        self.provider = provider or GitProvider(git_binary=self.options.git_binary)
        self.auth_resolver = auth_resolver or AuthResolver()

    def parse(self, locator: str, options: Options | None = None) -> Components:
        opts = options or self.options
        return parse(locator, opts)

    # ---- 克隆 ----

    def clone_repository(self, locator: str, options: Options | None = None) -> ContentFilesystem:
        """克隆定位符指向的仓库并返回检出内容"""
        opts = options or self.options
        components = self.parse(locator, opts)
        return self._clone(locator, components, opts, opts.clone_path)

    def _clone(
        self, locator: str, components: Components, opts: Options, path: str,
    ) -> ContentFilesystem:
        if components.tool != DEFAULT_TOOL:
            raise UnsupportedToolError(components.tool)

        url = components.repo_url()
        if not url:
            raise CloneError(
                f"无法为传输协议 {components.transport!r} 生成仓库地址: {locator}",
                locator=locator,
            )

        reference = ""
        if components.branch:
            reference = f"refs/heads/{components.branch}"
        elif components.tag:
            reference = f"refs/tags/{components.tag}"

        auth = self.auth_resolver.resolve(components, opts) if opts.read_credentials else None
        repo = self.provider.clone(
            url, reference=reference, auth=auth, single_branch=True, path=path,
        )
        try:
            if components.commit:
                repo.checkout(self._resolve_commit(repo, components.commit))
            elif components.unclassified_ref:
                repo.fetch(components.ref_string)
                repo.checkout(repo.resolve_revision("FETCH_HEAD"))
            return repo.filesystem()
        finally:
            repo.close()

    @staticmethod
    def _resolve_commit(repo: Repository, commit: str) -> str:
        """单分支克隆中找不到的完整哈希，按哈希单独拉取后再解析"""
        try:
            return repo.resolve_revision(commit)
        except ResolveRevisionError:
            if len(commit) != FULL_SHA_LEN:
                raise
            logger.info("提交 %s 不在克隆的分支中，按哈希拉取", commit)
            repo.fetch(commit)
            return repo.resolve_revision(commit)

    # ---- 单定位符 ----

    def copy_file(self, locator: str, writer: Writer, options: Options | None = None) -> int:
        """拉取单个文件写入 writer，返回写入字节数"""
        opts = options or self.options
        components = self.parse(locator, opts)
        if not components.sub_path:
            raise NoSubPathError(locator)

        fs = self._clone(locator, components, opts, opts.clone_path)
        return _copy_stream(fs, components.sub_path, writer)

    def get_file(self, locator: str, options: Options | None = None) -> bytes:
        buf = io.BytesIO()
        self.copy_file(locator, buf, options)
        return buf.getvalue()

    def download(self, locator: str, local_dir: str | Path, options: Options | None = None) -> list[Path]:
        """将子路径（文件或目录）镜像到本地目录，保留仓库内相对路径"""
        opts = options or self.options
        components = self.parse(locator, opts)
        if not components.sub_path:
            raise NoSubPathError(locator)

        try:
            prefix = clean_path(components.sub_path)
        except ValueError as e:
            raise OpenError(str(e), path=components.sub_path) from e

        fs = self._clone(locator, components, opts, opts.clone_path)
        dest_root = Path(local_dir)
        written: list[Path] = []
        for path in fs.walk():
            if prefix != "." and path != prefix and not path.startswith(prefix + "/"):
                continue
            dest = dest_root / path
            dest.parent.mkdir(parents=True, exist_ok=True)
            with dest.open("wb") as out:
                _copy_stream(fs, path, out)
            written.append(dest)

        if not written:
            raise OpenError(f"子路径在仓库中不存在: {components.sub_path}", path=components.sub_path)
        logger.info("已下载 %d 个文件到 %s", len(written), dest_root)
        return written

    # ---- 批量 ----

    def copy_file_group(
        self,
        locators: Sequence[str],
        writers: Sequence[Writer],
        options: Options | None = None,
    ) -> list[FetchOutcome]:
        """批量拉取，同一仓库 + 版本只克隆一次

        克隆阶段失败抛 BatchCloneError；复制阶段任一下标失败抛 BatchFetchError，
        其余下标的数据已写入对应 writer。
        """
        if len(locators) != len(writers):
            raise ValidationError(
                f"输出数量 ({len(writers)}) 与定位符数量 ({len(locators)}) 不一致"
            )
        opts = options or self.options
        plans = build_plans(locators, opts)

        self._clone_phase(list(plans), opts)

        jobs = [(i, plan, sub) for plan in plans for i, sub in plan.files.items()]
        start = time.monotonic()
        results = BoundedExecutor(opts.max_workers, name="copy").run(
            [partial(self._copy_one, i, plan, sub, writers[i]) for i, plan, sub in jobs]
        )

        errors: dict[int, Exception] = dict(plans.errors)
        outcomes: dict[int, FetchOutcome] = {}
        for (i, _, _), res in zip(jobs, results):
            if res.error is not None:
                errors[i] = _as_exception(res.error)
                logger.warning("拉取 #%d 失败: %s", i, res.error)
            elif res.value is not None:
                outcomes[i] = res.value
        logger.info(
            "复制阶段完成: 成功 %d, 失败 %d (%.1f秒)",
            len(outcomes), len(errors), time.monotonic() - start,
        )

        agg = aggregate_errors(errors, len(locators))
        if agg is not None:
            raise agg
        return [outcomes[i] for i in range(len(locators))]

    def get_group(self, locators: Sequence[str], options: Options | None = None) -> list[bytes]:
        buffers = [io.BytesIO() for _ in locators]
        self.copy_file_group(locators, buffers, options)
        return [b.getvalue() for b in buffers]

    def _clone_phase(self, plans: list[FetchPlan], opts: Options) -> None:
        start = time.monotonic()
        results = BoundedExecutor(opts.max_workers, name="clone").run(
            [partial(self._clone_plan, plan, opts) for plan in plans]
        )
        failures = [_as_exception(r.error) for r in results if r.error is not None]
        logger.info(
            "克隆阶段完成: %d 个仓库, 失败 %d (%.1f秒)",
            len(plans), len(failures), time.monotonic() - start,
        )
        if failures:
            raise BatchCloneError(failures)

    def _clone_plan(self, plan: FetchPlan, opts: Options) -> None:
        path = ""
        if opts.clone_path:
            # 每个计划独立的检出目录
            digest = hashlib.sha1(plan.key.encode("utf-8")).hexdigest()[:12]
            path = str(Path(opts.clone_path) / digest)
        try:
            fs = self._clone(plan.locator, plan.components, opts, path)
        except (VcsLocatorError, OSError) as e:
            raise CloneError(f"读取 {plan.locator!r} 失败: {e}", locator=plan.locator) from e
        plan.attach(fs)

    @staticmethod
    def _copy_one(index: int, plan: FetchPlan, sub_path: str, writer: Writer) -> FetchOutcome:
        fs = plan.filesystem
        if fs is None:
            raise OpenError(f"仓库未就绪 #{index}: {plan.locator}", index=index, path=sub_path)
        if not sub_path:
            raise NoSubPathError(plan.locator)
        size = _copy_stream(fs, sub_path, writer, index=index)
        return FetchOutcome(index=index, size=size)


def _copy_stream(fs: ContentFilesystem, path: str, writer: Writer, *, index: int = -1) -> int:
    label = f" #{index}" if index >= 0 else ""
    try:
        src: BinaryIO = fs.open(path)
    except (OSError, ValueError) as e:
        raise OpenError(f"打开文件{label} ({path!r}) 失败: {e}", index=index, path=path) from e

    size = 0
    with src:
        try:
            while True:
                chunk = src.read(COPY_CHUNK_SIZE)
                if not chunk:
                    break
                writer.write(chunk)
                size += len(chunk)
        except OSError as e:
            raise CopyError(f"复制数据流{label} 失败: {e}", index=index) from e
    return size


def _as_exception(err: BaseException) -> Exception:
    if not isinstance(err, Exception):
        raise err
    return err


# =========================================================================
# 便捷函数（使用默认选项）
# =========================================================================

def clone_repository(locator: str, options: Options | None = None) -> ContentFilesystem:
    return FetchService(options).clone_repository(locator)


def copy_file(locator: str, writer: Writer, options: Options | None = None) -> int:
    return FetchService(options).copy_file(locator, writer)


def get_file(locator: str, options: Options | None = None) -> bytes:
    return FetchService(options).get_file(locator)


def download(locator: str, local_dir: str | Path, options: Options | None = None) -> list[Path]:
    return FetchService(options).download(locator, local_dir)


def copy_file_group(
    locators: Sequence[str], writers: Sequence[Writer], options: Options | None = None,
) -> list[FetchOutcome]:
    return FetchService(options).copy_file_group(locators, writers)


def get_group(locators: Sequence[str], options: Options | None = None) -> list[bytes]:
    return FetchService(options).get_group(locators)
