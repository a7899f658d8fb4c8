"""CLI — 杂项命令"""

from __future__ import annotations

import json

import click

from vcslocator.core.config import Options


def register(group: click.Group) -> None:
    group.add_command(show_config)
    group.add_command(serve)


@click.command(name="config")
@click.pass_context
def show_config(ctx: click.Context) -> None:
    """显示生效的配置（密码已隐藏）"""
    opts = ctx.find_object(Options) or Options()
    click.echo(json.dumps(opts.to_dict(), ensure_ascii=False, indent=2))


@click.command()
@click.option("--port", default=8890, help="监听端口")
@click.option("--host", default="127.0.0.1", help="监听地址")
@click.pass_context
def serve(ctx: click.Context, port: int, host: str) -> None:
    """启动 Web API"""
    from vcslocator.core.config import set_options
    from vcslocator.web.app import run_server

    set_options(ctx.find_object(Options) or Options())
    run_server(port=port, host=host)
