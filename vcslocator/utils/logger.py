"""vcslocator 日志配置

库代码只通过 logging.getLogger(__name__) 获取 logger，handler 由入口
（CLI / Web）调用 setup_logging 或 setup_logging_from_env 配置。
批量拉取的克隆与复制在工作线程中执行，日志中带上线程名以区分阶段。
"""

from __future__ import annotations

import json
import logging
import os
import sys
from collections.abc import Mapping
from datetime import datetime, timezone

ENV_LOG_LEVEL = "VCSLOCATOR_LOG_LEVEL"
ENV_LOG_JSON = "VCSLOCATOR_LOG_JSON"

TEXT_FORMAT = "%(asctime)s [%(levelname)-7s] %(threadName)s %(name)s: %(message)s"


class JSONFormatter(logging.Formatter):
    """每条记录输出一行 JSON"""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "thread": record.threadName,
            "message": record.getMessage(),
        }
        if record.exc_info and record.exc_info[1]:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


def setup_logging(level: str = "INFO", json_output: bool = False) -> None:
    """配置根日志器，输出到 stderr

    stdout 留给 `get` 等命令输出文件内容。重复调用会替换已有 handler。
    """
    reset_logging()
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JSONFormatter() if json_output else logging.Formatter(TEXT_FORMAT))
    root.addHandler(handler)


def setup_logging_from_env(environ: Mapping[str, str] | None = None) -> None:
    """按 VCSLOCATOR_LOG_LEVEL / VCSLOCATOR_LOG_JSON 配置日志"""
    env = os.environ if environ is None else environ
    setup_logging(
        level=env.get(ENV_LOG_LEVEL, "INFO"),
        json_output=env.get(ENV_LOG_JSON, "") == "1",
    )


def reset_logging() -> None:
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
