"""vcslocator 命令行接口

CLI 按功能拆分为子模块，每个模块注册自己的命令到 main group。
全局选项解析为 Options 保存在 click 上下文中。
"""

import click

from vcslocator import __version__
from vcslocator.core.config import Options
from vcslocator.core.exceptions import VcsLocatorError
from vcslocator.services.fetch_service import FetchService
from vcslocator.utils.logger import setup_logging_from_env


def _svc(ctx: click.Context) -> FetchService:
    """从上下文获取拉取服务"""
    return FetchService(ctx.find_object(Options))


def _fail(e: VcsLocatorError) -> click.ClickException:
    return click.ClickException(f"[{e.code}] {e}")


@click.group()
@click.version_option(version=__version__)
@click.option("--config", "-c", "config_path", default="", help="YAML 配置文件路径")
@click.option("--ref-as-branch", is_flag=True, default=False, help="将歧义的版本标记视为分支")
@click.option("--clone-path", default=None, help="磁盘检出目录（默认使用内存）")
@click.option("--no-credentials", is_flag=True, default=False, help="不自动查找认证信息")
@click.option("--http-username", envvar="VCSLOCATOR_HTTP_USERNAME", default=None, help="HTTP 用户名")
@click.option("--http-password", envvar="VCSLOCATOR_HTTP_PASSWORD", default=None, help="HTTP 密码")
@click.option("--workers", "-w", type=int, default=None, help="并行度")
@click.pass_context
def main(
    ctx: click.Context, config_path: str, ref_as_branch: bool, clone_path: str | None,
    no_credentials: bool, http_username: str | None, http_password: str | None,
    workers: int | None,
) -> None:
    """vcslocator - VCS 定位符解析与文件拉取"""
    setup_logging_from_env()
    try:
        opts = Options.from_file(config_path) if config_path else Options()
        if ref_as_branch:
            opts = opts.with_ref_as_branch(True)
        if clone_path is not None:
            opts = opts.with_clone_path(clone_path)
        if no_credentials:
            opts = opts.with_read_credentials(False)
        if http_username is not None or http_password is not None:
            opts = opts.with_http_credentials(
                http_username if http_username is not None else opts.http_username,
                http_password if http_password is not None else opts.http_password,
            )
        if workers is not None:
            opts = opts.with_max_workers(workers)
    except VcsLocatorError as e:
        raise _fail(e) from e
    ctx.obj = opts


# 注册各功能子命令
from vcslocator.cli.cmd_locator import register as _reg_locator  # noqa: E402
from vcslocator.cli.cmd_misc import register as _reg_misc  # noqa: E402

_reg_locator(main)
_reg_misc(main)
