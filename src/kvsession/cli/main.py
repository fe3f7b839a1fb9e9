# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""kvsession CLI: inspect and purge sessions on a live backend."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import click
from rich.markup import escape
from rich.table import Table

from kvsession import __version__
from kvsession.cli.console import console
from kvsession.core.config import Config
from kvsession.kernel.exceptions import KvSessionException
from kvsession.kernel.lifecycle import Lifecycle
from kvsession.logging.structlog_adapter import StructlogAdapter
from kvsession.session.auto_configuration import SessionStoreAutoConfiguration
from kvsession.session.store import KeyValueSessionStore

T = TypeVar("T")


def _load_config(config_path: str | None, url: str | None, prefix: str | None) -> Config:
    config = Config.from_file(config_path)
    store_overrides: dict[str, Any] = {}
    if url is not None:
        store_overrides["redis"] = {"url": url}
    if prefix is not None:
        store_overrides["prefix"] = prefix
    if not store_overrides:
        return config
    return config.with_overrides({"kvsession": {"store": store_overrides}})


def _run(ctx: click.Context, operation: Callable[[KeyValueSessionStore], Awaitable[T]]) -> T:
    """Run *operation* against the context's store, opening and closing its backend."""
    obj = ctx.ensure_object(dict)

    async def main() -> T:
        store = obj.get("store")
        if store is not None:
            return await operation(store)

        auto = SessionStoreAutoConfiguration(obj["config"])
        backend = auto.backend()
        lifecycle = backend if isinstance(backend, Lifecycle) else None
        if lifecycle is not None:
            await lifecycle.start()
        try:
            return await operation(auto.session_store(backend))
        finally:
            if lifecycle is not None:
                await lifecycle.stop()

    try:
        return asyncio.run(main())
    except KvSessionException as exc:
        console.print(f"[error]{type(exc).__name__}:[/error] {escape(str(exc))}")
        raise click.exceptions.Exit(2) from exc


@click.group()
@click.version_option(version=__version__, prog_name="kvsession")
@click.option("--config", "config_path", type=click.Path(dir_okay=False), default=None, help="YAML or TOML config file.")
@click.option("--url", default=None, help="Redis URL, overrides kvsession.store.redis.url.")
@click.option("--prefix", default=None, help="Key prefix, overrides kvsession.store.prefix.")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, url: str | None, prefix: str | None) -> None:
    """kvsession: manage sessions stored in a Redis-like backend."""
    obj = ctx.ensure_object(dict)
    config = obj.get("config") or _load_config(config_path, url, prefix)
    StructlogAdapter().configure(config)
    obj["config"] = config


@cli.command("ids")
@click.pass_context
def ids_command(ctx: click.Context) -> None:
    """List session ids under the prefix."""
    for sid in _run(ctx, lambda store: store.ids()):
        click.echo(sid)


@cli.command("count")
@click.pass_context
def count_command(ctx: click.Context) -> None:
    """Print the number of sessions under the prefix."""
    click.echo(_run(ctx, lambda store: store.length()))


@cli.command("show")
@click.argument("sid")
@click.pass_context
def show_command(ctx: click.Context, sid: str) -> None:
    """Print one session as JSON."""
    session = _run(ctx, lambda store: store.get(sid))
    if session is None:
        console.print(f"[warning]No session[/warning] {escape(sid)}")
        raise click.exceptions.Exit(1)
    click.echo(json.dumps(session, indent=2, sort_keys=True, default=str))


@cli.command("list")
@click.pass_context
def list_command(ctx: click.Context) -> None:
    """Show every session with its cookie expiry."""
    sessions = _run(ctx, lambda store: store.all())

    table = Table(title="Sessions", border_style="dim")
    table.add_column("Session id", style="info")
    table.add_column("Expires")
    table.add_column("Keys", style="dim")
    for sid, session in sorted(sessions.items()):
        cookie = session.get("cookie")
        expires = cookie.get("expires") if isinstance(cookie, dict) else None
        table.add_row(sid, str(expires) if expires else "-", ", ".join(sorted(k for k in session if k != "cookie")))
    console.print(table)


@cli.command("destroy")
@click.argument("sid")
@click.pass_context
def destroy_command(ctx: click.Context, sid: str) -> None:
    """Delete one session."""
    _run(ctx, lambda store: store.destroy(sid))
    console.print(f"[success]Destroyed[/success] {escape(sid)}")


@cli.command("clear")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation.")
@click.pass_context
def clear_command(ctx: click.Context, yes: bool) -> None:
    """Delete every session under the prefix."""
    if not yes:
        click.confirm("Delete every session under the configured prefix?", abort=True)

    async def clear(store: KeyValueSessionStore) -> int:
        count = await store.length()
        await store.clear()
        return count

    count = _run(ctx, clear)
    console.print(f"[success]Cleared[/success] {count} session(s)")
