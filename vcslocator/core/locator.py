"""VCS 定位符解析

格式:
    [<tool>+]<transport>://<host>[/<repo-path>][@<ref>][#<subpath>]
    <owner>/<repo>[@<ref>]                     GitHub 简写
    file://<path>[@<ref>][#<subpath>]          本地仓库简写

解析为纯函数，不做任何 I/O。版本标记按启发式规则归类为 commit / tag / branch。
"""

from __future__ import annotations

import re
from urllib.parse import SplitResult, unquote, urlsplit

from vcslocator.core.config import Options
from vcslocator.core.exceptions import (
    BadURIError,
    EmptyLocatorError,
    MissingFilePathError,
    UnsupportedTransportError,
)
from vcslocator.core.models import (
    SANCTIONED_TRANSPORTS,
    TRANSPORT_FILE,
    TRANSPORT_HTTPS,
    Components,
)

FILE_PREFIX = "file://"
TAG_PREFIX = "refs/tags/"
BRANCH_PREFIX = "refs/heads/"
REF_PREFIX = "refs/"

GITHUB_HOST = "github.com"
DEFAULT_TOOL = "git"

# 完整 SHA1 或 7 位短哈希；7 位十六进制的标签/分支名会被误判为 commit
_SHA1_RE = re.compile(r"^[a-f0-9]{40}$")
_SHA1_SHORT_RE = re.compile(r"^[a-f0-9]{7}$")
_SLUG_RE = re.compile(r"^[-A-Za-z0-9_]+/[-A-Za-z0-9_]+$")
_BAD_ESCAPE_RE = re.compile(r"%(?![0-9A-Fa-f]{2})")
_CONTROL_RE = re.compile(r"[\x00-\x1f\x7f]")


def classify_ref(ref: str, ref_is_branch: bool = False) -> tuple[str, str, str]:
    """将版本标记归类，返回 (tag, branch, commit)，至多一个非空

    refs/tags/ 与 refs/heads/ 前缀总是显式的；其余 refs/ 开头的标记保持未归类，
    由调用方通过原始 ref_string 按字面使用。
    """
    if not ref:
        return "", "", ""

    commit = ref if (_SHA1_RE.match(ref) or _SHA1_SHORT_RE.match(ref)) else ""

    if ref.startswith(TAG_PREFIX):
        return ref[len(TAG_PREFIX):], "", ""
    if ref.startswith(BRANCH_PREFIX):
        return "", ref[len(BRANCH_PREFIX):], ""
    if commit:
        return "", "", commit
    if ref_is_branch:
        return "", ref, ""
    if not ref.startswith(REF_PREFIX):
        return ref, "", ""
    return "", "", ""


def parse(locator: str, options: Options | None = None) -> Components:
    """解析定位符，失败抛 ParseError 子类

    options 中仅 ref_is_branch 影响解析结果，未指定时使用默认值。
    """
    ref_is_branch = options.ref_is_branch if options is not None else False
    if not locator:
        raise EmptyLocatorError()
    if _CONTROL_RE.search(locator):
        raise BadURIError(f"定位符包含控制字符: {locator!r}")

    is_file = locator.startswith(FILE_PREFIX)
    if is_file:
        # 去掉字面前缀后按本地路径解析，盘符等不会被误认为 scheme
        parts = _split("file:" + locator[len(FILE_PREFIX):], locator)
    else:
        parts = _split(locator, locator)

    path = unquote(parts.path)
    sub_path = unquote(parts.fragment)
    repo_path, _, ref = path.partition("@")

    if not is_file and not parts.scheme and not parts.netloc and _SLUG_RE.match(repo_path):
        tag, branch, commit = classify_ref(ref, ref_is_branch)
        return Components(
            tool=DEFAULT_TOOL, transport=TRANSPORT_HTTPS, hostname=GITHUB_HOST,
            repo_path=repo_path, ref_string=ref,
            tag=tag, branch=branch, commit=commit, sub_path=sub_path,
        )

    if is_file:
        tool, transport = DEFAULT_TOOL, TRANSPORT_FILE
    else:
        tool, plus, transport = parts.scheme.partition("+")
        if not plus:
            tool, transport = "", tool
            if transport not in SANCTIONED_TRANSPORTS:
                raise UnsupportedTransportError(transport)

    tag, branch, commit = classify_ref(ref, ref_is_branch)

    hostname = parts.hostname or ""
    if transport == TRANSPORT_FILE:
        if parts.netloc:
            repo_path = parts.netloc + repo_path
        hostname = ""
        if not repo_path:
            raise MissingFilePathError(f"file 定位符缺少仓库路径: {locator}")

    return Components(
        tool=tool, transport=transport, hostname=hostname,
        repo_path=repo_path, ref_string=ref,
        tag=tag, branch=branch, commit=commit, sub_path=sub_path,
    )


def _split(text: str, locator: str) -> SplitResult:
    try:
        parts = urlsplit(text)
    except ValueError as e:
        raise BadURIError(f"定位符不是合法 URI: {locator}: {e}") from e
    if _BAD_ESCAPE_RE.search(parts.path) or _BAD_ESCAPE_RE.search(parts.fragment):
        raise BadURIError(f"定位符包含非法转义序列: {locator}")
    return parts


class Locator(str):
    """包装定位符字符串，提供解析方法"""

    __slots__ = ()

    def parse(self, options: Options | None = None) -> Components:
        return parse(str(self), options)
