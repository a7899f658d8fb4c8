"""定位符 API Blueprint"""

from __future__ import annotations

import base64
import hashlib
import io
from typing import Any

from flask import Blueprint, Response, request

from vcslocator.core.config import get_options
from vcslocator.core.exceptions import BatchFetchError
from vcslocator.services.fetch_service import FetchService
from vcslocator.web.responses import bad_request, ok

locators_bp = Blueprint("locators", __name__, url_prefix="/api/locators")

# 单次批量请求的定位符数量上限
MAX_GROUP_SIZE = 100


def _fetch_svc() -> FetchService:
    return FetchService(get_options())


def _encode(data: bytes) -> dict[str, Any]:
    return {
        "size": len(data),
        "sha256": hashlib.sha256(data).hexdigest(),
        "content_b64": base64.b64encode(data).decode("ascii"),
    }


@locators_bp.route("/parse", methods=["POST"])
def parse() -> tuple[Response, int] | Response:
    body = request.get_json(silent=True) or {}
    locator = body.get("locator", "")
    if not isinstance(locator, str):
        return bad_request("locator 必须是字符串")
    opts = get_options()
    if "ref_is_branch" in body:
        opts = opts.with_ref_as_branch(bool(body["ref_is_branch"]))
    components = _fetch_svc().parse(locator, opts)
    return ok({"components": components.to_dict(), "repo_url": components.repo_url()})


@locators_bp.route("/file", methods=["POST"])
def get_file() -> tuple[Response, int] | Response:
    body = request.get_json(silent=True) or {}
    locator = body.get("locator", "")
    if not locator or not isinstance(locator, str):
        return bad_request("需要提供 locator")
    data = _fetch_svc().get_file(locator)
    return ok({"locator": locator, **_encode(data)})


@locators_bp.route("/group", methods=["POST"])
def get_group() -> tuple[Response, int] | Response:
    body = request.get_json(silent=True) or {}
    locators = body.get("locators", [])
    if not isinstance(locators, list) or not all(isinstance(x, str) for x in locators):
        return bad_request("locators 必须是字符串列表")
    if not locators:
        return bad_request("需要提供 locators")
    if len(locators) > MAX_GROUP_SIZE:
        return bad_request(f"单次最多 {MAX_GROUP_SIZE} 个定位符")

    buffers = [io.BytesIO() for _ in locators]
    errors: list[Exception | None] = [None] * len(locators)
    try:
        _fetch_svc().copy_file_group(locators, buffers)
    except BatchFetchError as e:
        errors = e.errors

    results: list[dict[str, Any]] = []
    for i, (buf, err) in enumerate(zip(buffers, errors)):
        if err is not None:
            results.append({"index": i, "ok": False, "error": str(err)})
        else:
            results.append({"index": i, "ok": True, **_encode(buf.getvalue())})
    return ok({"results": results})
