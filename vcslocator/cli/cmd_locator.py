"""CLI — 定位符解析与拉取命令"""

from __future__ import annotations

import hashlib
import io
import json
import sys
from pathlib import Path, PurePosixPath

import click

from vcslocator.cli import _fail, _svc
from vcslocator.core.exceptions import BatchFetchError, VcsLocatorError


def register(group: click.Group) -> None:
    group.add_command(parse_cmd)
    group.add_command(get)
    group.add_command(download)
    group.add_command(group_cmd)


@click.command(name="parse")
@click.argument("locator")
@click.option("--json", "as_json", is_flag=True, help="以 JSON 输出")
@click.pass_context
def parse_cmd(ctx: click.Context, locator: str, as_json: bool) -> None:
    """解析定位符并输出各组成部分"""
    try:
        components = _svc(ctx).parse(locator)
    except VcsLocatorError as e:
        raise _fail(e) from e
    data = components.to_dict()
    if as_json:
        click.echo(json.dumps(data, ensure_ascii=False))
        return
    for key, value in data.items():
        click.echo(f"  {key:10s} {value}")
    url = components.repo_url()
    if url:
        click.echo(f"  {'repo_url':10s} {url}")


@click.command()
@click.argument("locator")
@click.option("--output", "-o", type=click.Path(dir_okay=False), default=None, help="输出文件（默认 stdout）")
@click.pass_context
def get(ctx: click.Context, locator: str, output: str | None) -> None:
    """拉取单个文件"""
    svc = _svc(ctx)
    try:
        if output:
            with open(output, "wb") as f:
                svc.copy_file(locator, f)
            click.echo(f"已写入: {output}", err=True)
        else:
            svc.copy_file(locator, sys.stdout.buffer)
    except VcsLocatorError as e:
        raise _fail(e) from e


@click.command()
@click.argument("locator")
@click.argument("dest", type=click.Path(file_okay=False))
@click.pass_context
def download(ctx: click.Context, locator: str, dest: str) -> None:
    """将子路径（文件或目录）下载到本地目录"""
    try:
        written = _svc(ctx).download(locator, dest)
    except VcsLocatorError as e:
        raise _fail(e) from e
    click.echo(f"已下载 {len(written)} 个文件到 {dest}")


@click.command(name="group")
@click.argument("locators", nargs=-1, required=True)
@click.option("--dest", "-d", type=click.Path(file_okay=False), required=True, help="输出目录")
@click.pass_context
def group_cmd(ctx: click.Context, locators: tuple[str, ...], dest: str) -> None:
    """批量拉取，同一仓库和版本只克隆一次

    每个定位符写入 DEST/<下标>-<文件名>。
    """
    buffers = [io.BytesIO() for _ in locators]
    failed: dict[int, Exception] = {}
    try:
        _svc(ctx).copy_file_group(list(locators), buffers)
    except BatchFetchError as e:
        failed = e.failed
    except VcsLocatorError as e:
        raise _fail(e) from e

    out_dir = Path(dest)
    out_dir.mkdir(parents=True, exist_ok=True)
    for i, (loc, buf) in enumerate(zip(locators, buffers)):
        if i in failed:
            click.echo(f"  [{i}] 失败  {loc}: {failed[i]}")
            continue
        name = PurePosixPath(loc.rpartition("#")[2]).name or "content"
        target = out_dir / f"{i}-{name}"
        data = buf.getvalue()
        target.write_bytes(data)
        digest = hashlib.sha256(data).hexdigest()
        click.echo(f"  [{i}] 成功  {target}  sha256={digest}")

    if failed:
        raise click.ClickException(f"{len(failed)}/{len(locators)} 个定位符拉取失败")
