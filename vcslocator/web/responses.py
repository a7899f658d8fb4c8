"""Web 层统一响应辅助函数"""

from __future__ import annotations

from flask import Response, jsonify

from vcslocator.core.exceptions import VcsLocatorError


def ok(data: dict, status: int = 200) -> tuple[Response, int] | Response:
    """成功响应"""
    if status == 200:
        return jsonify(data)
    return jsonify(data), status


def bad_request(message: str, code: str = "BAD_REQUEST") -> tuple[Response, int]:
    """请求参数错误"""
    return jsonify(error=message, code=code), 400


def locator_error(exc: VcsLocatorError) -> tuple[Response, int]:
    """业务异常统一映射为 400"""
    return bad_request(str(exc), exc.code)
