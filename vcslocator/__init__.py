"""vcslocator - 解析 VCS 定位符并拉取其引用的文件或目录

    >>> from vcslocator import parse, get_file
    >>> parse("git+https://github.com/org/repo@v1.0#README.md").tag
    'v1.0'
"""

from vcslocator.core.config import Options, get_options, init_options, set_options
from vcslocator.core.exceptions import BatchCloneError, BatchFetchError, VcsLocatorError
from vcslocator.core.locator import Locator, classify_ref, parse
from vcslocator.core.models import Components, FetchOutcome
from vcslocator.services.auth import AuthResolver, get_auth_method
from vcslocator.services.fetch_service import (
    FetchService,
    clone_repository,
    copy_file,
    copy_file_group,
    download,
    get_file,
    get_group,
)

__version__ = "0.3.0"

__all__ = [
    "AuthResolver",
    "BatchCloneError",
    "BatchFetchError",
    "Components",
    "FetchOutcome",
    "FetchService",
    "Locator",
    "Options",
    "VcsLocatorError",
    "classify_ref",
    "clone_repository",
    "copy_file",
    "copy_file_group",
    "download",
    "get_auth_method",
    "get_file",
    "get_group",
    "get_options",
    "init_options",
    "parse",
    "set_options",
]
