"""结果聚合 — 将按下标收集的错误映射回调用方的原始顺序"""

from __future__ import annotations

from collections.abc import Mapping

from vcslocator.core.exceptions import BatchFetchError


def aggregate_errors(errors: Mapping[int, Exception], total: int) -> BatchFetchError | None:
    """全部成功返回 None，否则返回长度为 total 的位置错误集合

    始终按 0..total-1 投影，不依赖映射的迭代顺序。
    """
    if not errors:
        return None
    return BatchFetchError([errors.get(i) for i in range(total)])
