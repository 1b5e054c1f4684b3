"""Command line interface for boxcop."""
from contextlib import contextmanager
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from boxcop import projects as project_ops
from boxcop import settings
from boxcop.db import Database
from boxcop.errors import BoxcopError
from boxcop.logging_conf import logger
from boxcop.metadata import MetadataResolver
from boxcop.models import ProjectSpace, parse_share_id
from boxcop.namespace import PartitionCache
from boxcop.resolver import SHARE_COLUMNS, build_row, resolve_all
from boxcop.transfer import transfer_share

console = Console()
err_console = Console(stderr=True)


def pretty(columns: list[str], rows: list[list[str]]):
    table = Table(box=None, header_style="bold")
    for column in columns:
        table.add_column(column)
    for row in rows:
        table.add_row(*row)
    console.print(table)


@contextmanager
def spinner(message: str):
    with err_console.status(message):
        yield


class BoxcopGroup(click.Group):
    """Report BoxcopError as a one line message with exit status 1."""

    def invoke(self, ctx):
        try:
            return super().invoke(ctx)
        except BoxcopError as e:
            logger.debug(f"{type(e).__name__}: {e}")
            raise click.ClickException(str(e)) from e


@click.group(cls=BoxcopGroup)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx, verbose):
    """Administration of CERNBox project spaces and shares."""
    if verbose:
        logger.setLevel("DEBUG")
    try:
        settings.validate_config()
    except ValueError as e:
        raise click.ClickException(str(e)) from e
    ctx.ensure_object(dict)


def get_store(ctx) -> Database:
    """Open the record store once per invocation."""
    if "db" not in ctx.obj:
        ctx.obj["db"] = Database()
        ctx.call_on_close(ctx.obj["db"].close)
    return ctx.obj["db"]


# ========================================
# Project spaces
# ========================================

@main.group("project")
def project():
    """Project spaces."""


def print_projects(projects: list[ProjectSpace], printpath: bool, cache: Optional[PartitionCache] = None):
    columns = ["Name", "RelativePath", "Owner"]
    rows = [[p.name, p.rel, p.owner] for p in projects]
    if printpath:
        columns.append("Path")
        cache = cache or PartitionCache()
        with spinner("Looking up project paths..."):
            for row, p in zip(rows, projects):
                row.append(project_ops.project_path(p, cache))
    pretty(columns, rows)


@project.command("add")
@click.argument("name")
@click.argument("svc_account")
@click.pass_context
def project_add(ctx, name, svc_account):
    """Add a new project (in db only)."""
    project_ops.add_project(get_store(ctx), name, svc_account)


@project.command("delete")
@click.argument("name_or_path")
@click.pass_context
def project_delete(ctx, name_or_path):
    """Delete a project (in db only)."""
    project_ops.delete_project(get_store(ctx), name_or_path)


@project.command("list")
@click.option("--owner", "-o", default="", help="Filter by owner account")
@click.option("--printpath", is_flag=True, help="Print EOS path, it may take a while to run")
@click.pass_context
def project_list(ctx, owner, printpath):
    """List all project spaces."""
    projects = project_ops.get_projects(get_store(ctx), project_ops.by_owner(owner))
    print_projects(projects, printpath)


@project.command("orphan")
@click.option("--quiet", "-q", is_flag=True, help="Only show project names")
@click.option("--printpath", is_flag=True, help="Print EOS path, it may take a while to run")
@click.pass_context
def project_orphan(ctx, quiet, printpath):
    """List only the projects which are in the DB but not in EOS."""
    cache = PartitionCache()
    with spinner("Listing EOS project partitions..."):
        orphans = project_ops.get_projects(get_store(ctx), project_ops.OrphanFilter(cache))
    if quiet:
        for orphan in orphans:
            click.echo(orphan.name)
    else:
        print_projects(orphans, printpath, cache)


@project.command("getowner")
@click.argument("name_or_path")
@click.pass_context
def project_getowner(ctx, name_or_path):
    """Get the owner of a project space."""
    click.echo(project_ops.get_project_owner(get_store(ctx), name_or_path))


@project.command("update-svc-account")
@click.argument("name_or_path")
@click.argument("svc_account")
@click.pass_context
def project_update_svc_account(ctx, name_or_path, svc_account):
    """Update the ownership of a project space (in db only)."""
    project_ops.update_service_account(get_store(ctx), name_or_path, svc_account)


# ========================================
# Shares
# ========================================

@main.group("sharing")
def sharing():
    """Sharing info."""


@sharing.command("list")
@click.option("--owner", "-o", default="", help="Filter by owner account")
@click.option("--id", "-i", "share_id", default="", help="Filter by share id")
@click.option("--token", "-t", default="", help="Filter by public link token")
@click.option("--share-with", "-s", default="", help="Filter by share with (username or egroup)")
@click.option("--all", "-a", "show_all", is_flag=True, help="Show all shares")
@click.option("--printpath", is_flag=True, help="Print EOS path, it can be expensive depending on number of shares")
@click.option("--concurrency", type=click.IntRange(min=1), default=settings.DEFAULT_CONCURRENCY,
              show_default=True, help="Use up to <n> concurrent connections to resolve paths")
@click.option("--timeout", type=click.FloatRange(min=0), default=settings.RESOLVE_TIMEOUT,
              help="Give up resolving paths after this many seconds (0 waits forever)")
@click.pass_context
def sharing_list(ctx, owner, share_id, token, share_with, show_all, printpath, concurrency, timeout):
    """List shares, one table per given filter."""
    store = get_store(ctx)
    queries = []
    if owner.strip():
        queries.append(lambda: store.get_shares_by_owner(owner.strip()))
    if share_id.strip():
        queries.append(lambda: store.get_shares_by_id(parse_share_id(share_id)))
    if share_with.strip():
        queries.append(lambda: store.get_shares_by_share_with(share_with.strip()))
    if token.strip():
        queries.append(lambda: store.get_shares_by_token(token.strip()))
    if show_all:
        queries.append(store.get_all_shares)
    if not queries:
        click.echo(ctx.get_help())
        ctx.exit(1)

    with MetadataResolver(concurrency=concurrency) as resolver:
        for query in queries:
            shares = query()
            with spinner(f"Resolving {len(shares)} shares..."):
                result = resolve_all(shares, printpath, concurrency, resolver, timeout=timeout or None)
            pretty(result.columns, [row.cells for row in result.rows])
            if result.degraded:
                err_console.print(f"[yellow]Warning:[/yellow] {len(result.degraded)} paths could not be resolved")


@sharing.command("transfer")
@click.argument("share_id")
@click.argument("new_owner")
@click.argument("project_ref", metavar="PROJECT")
@click.option("--yes", "-y", is_flag=True, help="Confirm the transfer of ownership without asking")
@click.pass_context
def sharing_transfer(ctx, share_id, new_owner, project_ref, yes):
    """
    Transfer a share to a new owner.

    Example: boxcop sharing transfer 1345 gonzalhu cernbox
    """
    store = get_store(ctx)

    def confirm(message: str) -> bool:
        return click.confirm(message, default=False)

    share = transfer_share(store, share_id, new_owner, project_ref, confirmed=yes, confirm=confirm)
    pretty(SHARE_COLUMNS[:-1], [build_row(share).cells])


if __name__ == "__main__":
    main()
