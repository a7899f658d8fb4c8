"""统一异常体系

所有业务异常继承 VcsLocatorError，按阶段划分：
- 解析阶段：ParseError 及其子类（单个定位符致命，不重试）
- 克隆阶段：CloneError / FetchRefError / ResolveRevisionError / CheckoutError
- 复制阶段：OpenError / CopyError（批量模式下按下标收集，不立即抛出）

CLI 层据此输出友好提示，Web 层据此映射为 400 JSON。
"""

from __future__ import annotations


class VcsLocatorError(Exception):
    """基础异常"""

    code: str = "UNKNOWN"

    def __init__(self, message: str) -> None:
        super().__init__(message)


# =========================================================================
# 解析阶段
# =========================================================================

class ParseError(VcsLocatorError):
    """定位符解析失败"""

    code = "PARSE_ERROR"


class EmptyLocatorError(ParseError):
    code = "EMPTY_LOCATOR"

    def __init__(self) -> None:
        super().__init__("定位符为空字符串")


class BadURIError(ParseError):
    code = "BAD_URI"


class UnsupportedTransportError(ParseError):
    """无 `tool+` 前缀时传输协议必须是 https / ssh / file"""

    code = "UNSUPPORTED_TRANSPORT"

    def __init__(self, transport: str) -> None:
        super().__init__(f"不支持的传输协议: {transport!r}")
        self.transport = transport


class MissingFilePathError(ParseError):
    code = "MISSING_FILE_PATH"


# =========================================================================
# 操作前置校验
# =========================================================================

class UnsupportedToolError(VcsLocatorError):
    code = "UNSUPPORTED_TOOL"

    def __init__(self, tool: str) -> None:
        super().__init__(f"仅支持 git 定位符，当前工具: {tool!r}")
        self.tool = tool


class NoSubPathError(VcsLocatorError):
    code = "NO_SUBPATH"

    def __init__(self, locator: str) -> None:
        super().__init__(f"定位符未指定子路径: {locator}")
        self.locator = locator


class ValidationError(VcsLocatorError):
    """输入数据校验失败"""

    code = "VALIDATION_ERROR"


class ConfigError(VcsLocatorError):
    """配置文件缺失或内容无效"""

    code = "CONFIG_ERROR"


class AuthError(VcsLocatorError):
    """找不到可用的认证方式"""

    code = "AUTH_ERROR"


# =========================================================================
# 克隆阶段（委托给仓库访问层的失败）
# =========================================================================

class CloneError(VcsLocatorError):
    code = "CLONE_FAILURE"

    def __init__(self, message: str, *, locator: str = "") -> None:
        super().__init__(message)
        self.locator = locator


class FetchRefError(CloneError):
    code = "FETCH_REF_FAILURE"

    def __init__(self, message: str, *, locator: str = "", ref: str = "") -> None:
        super().__init__(message, locator=locator)
        self.ref = ref


class ResolveRevisionError(FetchRefError):
    code = "RESOLVE_REVISION_FAILURE"


class CheckoutError(FetchRefError):
    code = "CHECKOUT_FAILURE"


# =========================================================================
# 复制阶段
# =========================================================================

class OpenError(VcsLocatorError):
    code = "OPEN_FAILURE"

    def __init__(self, message: str, *, index: int = -1, path: str = "") -> None:
        super().__init__(message)
        self.index = index
        self.path = path


class CopyError(VcsLocatorError):
    code = "COPY_FAILURE"

    def __init__(self, message: str, *, index: int = -1) -> None:
        super().__init__(message)
        self.index = index


# =========================================================================
# 批量聚合
# =========================================================================

class BatchCloneError(VcsLocatorError):
    """克隆阶段任一计划失败时整体失败，errors 保存全部失败原因"""

    code = "BATCH_CLONE_FAILURE"

    def __init__(self, errors: list[Exception]) -> None:
        lines = "; ".join(str(e) for e in errors)
        super().__init__(f"克隆仓库失败 ({len(errors)} 个): {lines}")
        self.errors = list(errors)


class BatchFetchError(VcsLocatorError):
    """按输入下标定位的错误集合

    errors 长度与输入定位符数量一致，成功的下标对应 None。
    """

    code = "BATCH_FETCH_FAILURE"

    def __init__(self, errors: list[Exception | None]) -> None:
        self.errors = list(errors)
        super().__init__(self._join())

    @property
    def failed(self) -> dict[int, Exception]:
        return {i: e for i, e in enumerate(self.errors) if e is not None}

    def _join(self) -> str:
        return "\n".join(str(e) for e in self.errors if e is not None)

    def __str__(self) -> str:
        return self._join()
