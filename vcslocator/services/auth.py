"""认证解析

模仿 git 的行为自动选择认证方式：
- ssh: 优先使用 SSH agent，其次 ~/.ssh 下的默认私钥
- https: 使用配置中的 HTTP 用户名/密码（Basic 认证）
- file: 无需认证
"""

from __future__ import annotations

import base64
import logging
import os
import shlex
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from vcslocator.core.config import Options, get_options
from vcslocator.core.exceptions import AuthError
from vcslocator.core.locator import parse
from vcslocator.core.models import TRANSPORT_HTTPS, TRANSPORT_SSH, Components
from vcslocator.core.protocols import Auth

logger = logging.getLogger(__name__)

# 与 git 相同的私钥查找顺序
SSH_KEY_FILES = ("id_ed25519", "id_ecdsa", "id_rsa", "id_dsa")


@dataclass(frozen=True)
class BasicAuth:
    username: str
    password: str = field(repr=False)

    def git_args(self) -> list[str]:
        token = base64.b64encode(f"{self.username}:{self.password}".encode()).decode()
        return ["-c", f"http.extraHeader=Authorization: Basic {token}"]

    def git_env(self) -> dict[str, str]:
        return {}


@dataclass(frozen=True)
class SSHAgentAuth:
    socket: str

    def git_args(self) -> list[str]:
        return []

    def git_env(self) -> dict[str, str]:
        return {"SSH_AUTH_SOCK": self.socket}


@dataclass(frozen=True)
class SSHKeyAuth:
    key_path: str

    def git_args(self) -> list[str]:
        return []

    def git_env(self) -> dict[str, str]:
        return {"GIT_SSH_COMMAND": f"ssh -i {shlex.quote(self.key_path)} -o IdentitiesOnly=yes"}


class AuthResolver:
    """按传输协议选择认证方式

    home / environ 可注入，测试时无需触碰真实的 ~/.ssh。
    """

    def __init__(self, home: str | Path | None = None, environ: Mapping[str, str] | None = None) -> None:
        self._home = Path(home) if home is not None else None
        self._environ = environ if environ is not None else os.environ

    def resolve(self, components: Components, options: Options) -> Auth | None:
        if components.transport == TRANSPORT_SSH:
            return self._ssh_auth()
        if components.transport == TRANSPORT_HTTPS:
            return self._http_auth(options)
        return None

    def _ssh_auth(self) -> Auth:
        sock = self._environ.get("SSH_AUTH_SOCK", "")
        if sock and Path(sock).exists():
            logger.debug("使用 SSH agent 认证")
            return SSHAgentAuth(socket=sock)

        home = self._home or Path.home()
        ssh_dir = home / ".ssh"
        last_err: OSError | None = None
        for name in SSH_KEY_FILES:
            key = ssh_dir / name
            if not key.is_file():
                continue
            try:
                with key.open("rb") as f:
                    f.read(1)
            except OSError as e:
                last_err = e
                continue
            logger.debug("使用 SSH 私钥认证: %s", key)
            return SSHKeyAuth(key_path=str(key))

        if last_err is not None:
            raise AuthError(f"没有可用的 SSH 私钥: {last_err}") from last_err
        raise AuthError("没有可用的 SSH 认证方式")

    @staticmethod
    def _http_auth(options: Options) -> Auth | None:
        if not options.http_username and not options.http_password:
            return None
        return BasicAuth(username=options.http_username, password=options.http_password)


def get_auth_method(
    locator: str,
    options: Options | None = None,
    resolver: AuthResolver | None = None,
) -> Auth | None:
    """解析定位符并返回对应的认证方式"""
    opts = options or get_options()
    components = parse(locator, opts)
    return (resolver or AuthResolver()).resolve(components, opts)
