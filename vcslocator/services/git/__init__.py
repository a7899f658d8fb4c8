"""git 仓库访问层与内容文件系统"""

from vcslocator.services.git.fs import DirFS, MemoryFS, clean_path
from vcslocator.services.git.provider import GitProvider, GitRepository, run_git

__all__ = [
    "DirFS",
    "GitProvider",
    "GitRepository",
    "MemoryFS",
    "clean_path",
    "run_git",
]
