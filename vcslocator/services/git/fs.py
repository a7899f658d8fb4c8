"""内容文件系统实现

- MemoryFS: 检出内容全部保存在内存中（默认模式，不保留工作目录）
- DirFS: 磁盘上的检出目录，隐藏 .git
"""

from __future__ import annotations

import io
import logging
import os
import posixpath
import tarfile
from collections.abc import Iterator
from pathlib import Path
from typing import BinaryIO

logger = logging.getLogger(__name__)


def clean_path(path: str) -> str:
    """规范化仓库内路径：去掉开头的 /，拒绝越出仓库根目录"""
    p = posixpath.normpath(path.lstrip("/")) if path.strip("/") else "."
    if p == ".." or p.startswith("../"):
        raise ValueError(f"路径越出仓库根目录: {path}")
    return p


class MemoryFS:
    """内存文件系统"""

    def __init__(self, files: dict[str, bytes] | None = None) -> None:
        self._files = dict(files or {})

    @classmethod
    def from_tar(cls, data: bytes) -> MemoryFS:
        """从 git archive 的 tar 流构建，仅保留普通文件"""
        files: dict[str, bytes] = {}
        with tarfile.open(fileobj=io.BytesIO(data), mode="r:") as tf:
            for member in tf.getmembers():
                if not member.isfile():
                    continue
                f = tf.extractfile(member)
                if f is None:
                    continue
                files[clean_path(member.name)] = f.read()
        logger.debug("内存文件系统: %d 个文件", len(files))
        return cls(files)

    def open(self, path: str) -> BinaryIO:
        p = clean_path(path)
        if p in self._files:
            return io.BytesIO(self._files[p])
        if self.is_dir(p):
            raise IsADirectoryError(f"是目录: {path}")
        raise FileNotFoundError(f"文件不存在: {path}")

    def walk(self) -> Iterator[str]:
        yield from sorted(self._files)

    def is_dir(self, path: str) -> bool:
        p = clean_path(path)
        if p == ".":
            return True
        prefix = p + "/"
        return any(name.startswith(prefix) for name in self._files)


class DirFS:
    """磁盘检出目录"""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def _resolve(self, path: str) -> Path:
        p = clean_path(path)
        if p == ".git" or p.startswith(".git/"):
            raise FileNotFoundError(f"文件不存在: {path}")
        return self.root / p

    def open(self, path: str) -> BinaryIO:
        target = self._resolve(path)
        if target.is_dir():
            raise IsADirectoryError(f"是目录: {path}")
        return target.open("rb")

    def walk(self) -> Iterator[str]:
        for dirpath, dirnames, filenames in os.walk(self.root):
            dirnames[:] = sorted(d for d in dirnames if d != ".git")
            rel = Path(dirpath).relative_to(self.root)
            for name in sorted(filenames):
                yield (rel / name).as_posix()

    def is_dir(self, path: str) -> bool:
        try:
            return self._resolve(path).is_dir()
        except FileNotFoundError:
            return False
