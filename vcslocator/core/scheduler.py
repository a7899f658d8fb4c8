"""有界并发执行器

固定并行度的线程池，执行一组相互独立的任务并收集每个任务的结果。
任一任务失败不会取消其他任务；run 返回时所有任务均已结束（阶段屏障）。
结果顺序与输入顺序一致，不依赖完成顺序。
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Generic, TypeVar

from vcslocator.core.config import DEFAULT_MAX_WORKERS

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class TaskOutcome(Generic[T]):
    """单个任务的执行结果"""

    value: T | None = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class BoundedExecutor:
    """可配置并行度的任务执行器，无隐式重试"""

    def __init__(self, max_workers: int = DEFAULT_MAX_WORKERS, *, name: str = "task") -> None:
        self.max_workers = max(1, max_workers)
        self.name = name

    def run(self, tasks: Sequence[Callable[[], T]]) -> list[TaskOutcome[T]]:
        if not tasks:
            return []

        workers = min(self.max_workers, len(tasks))
        logger.debug("%s: 执行 %d 个任务，并行度 %d", self.name, len(tasks), workers)
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix=self.name) as pool:
            futures = [pool.submit(task) for task in tasks]
            outcomes: list[TaskOutcome[T]] = []
            for future in futures:
                err = future.exception()
                if err is not None:
                    outcomes.append(TaskOutcome(error=err))
                else:
                    outcomes.append(TaskOutcome(value=future.result()))
        return outcomes
