"""拉取计划构建

将一批定位符按 (仓库地址, 原始版本标记) 分组，每组只克隆一次。
解析失败记录到对应下标，不中断整批。
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field

from vcslocator.core.config import Options
from vcslocator.core.exceptions import ParseError
from vcslocator.core.locator import parse
from vcslocator.core.models import Components, FetchPlan

logger = logging.getLogger(__name__)


def plan_key(components: Components) -> str:
    """去重键: 仓库地址:原始版本标记

    使用 ref_string 而非归类结果，未归类的引用（refs/pull/...）之间、以及与
    无版本标记的定位符之间不会被合并。同一版本的不同写法（v1 与
    refs/tags/v1、不同长度的短哈希）仍会各自克隆一次。
    """
    return f"{components.repo_url()}:{components.ref_string}"


@dataclass
class PlanSet:
    """计划集合：key -> FetchPlan，按首次出现顺序排列"""

    plans: dict[str, FetchPlan] = field(default_factory=dict)
    errors: dict[int, ParseError] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.plans)

    def __iter__(self) -> Iterator[FetchPlan]:
        return iter(self.plans.values())


def build_plans(locators: Sequence[str], options: Options | None = None) -> PlanSet:
    """单线程构建计划，完成后才进入并发阶段"""
    result = PlanSet()
    for i, loc in enumerate(locators):
        try:
            components = parse(loc, options)
        except ParseError as e:
            logger.warning("解析定位符 #%d 失败: %s", i, e)
            result.errors[i] = e
            continue

        key = plan_key(components)
        plan = result.plans.get(key)
        if plan is None:
            plan = FetchPlan(key=key, locator=loc, components=components)
            result.plans[key] = plan
        plan.files[i] = components.sub_path

    logger.info(
        "拉取计划: %d 个定位符 -> %d 次克隆 (解析失败 %d)",
        len(locators), len(result.plans), len(result.errors),
    )
    return result
