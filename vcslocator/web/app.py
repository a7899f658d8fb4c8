"""轻量级 Web API（基于 Flask）

提供：定位符解析、单文件拉取、批量拉取。

启动方式: vcslocator serve --port 8890
"""

from __future__ import annotations

import logging

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from vcslocator import __version__
from vcslocator.core.exceptions import VcsLocatorError
from vcslocator.web.blueprints.locators_bp import locators_bp
from vcslocator.web.responses import locator_error

logger = logging.getLogger(__name__)

MAX_CONTENT_LENGTH = 1024 * 1024  # 1 MB

app = Flask(__name__)
app.config["MAX_CONTENT_LENGTH"] = MAX_CONTENT_LENGTH
app.register_blueprint(locators_bp)


# =========================================================================
# 全局 JSON 错误处理
# =========================================================================


@app.errorhandler(HTTPException)
def handle_http_exception(exc):
    """将所有 HTTP 异常统一返回 JSON"""
    return jsonify(error=exc.description), exc.code


@app.errorhandler(VcsLocatorError)
def handle_locator_error(exc):
    logger.warning("请求失败 [%s]: %s", exc.code, exc)
    return locator_error(exc)


@app.errorhandler(Exception)
def handle_generic_exception(exc):  # noqa: ARG001
    """捕获未处理异常，返回 500 JSON"""
    logger.exception("未处理的异常")
    return jsonify(error="服务器内部错误"), 500


@app.route("/api/health")
def health():
    return jsonify(status="ok", version=__version__)


def run_server(port: int = 8890, debug: bool = False, host: str = "127.0.0.1") -> None:
    logger.info("vcslocator API 已启动: http://%s:%d", host, port)
    app.run(host=host, port=port, debug=debug)
