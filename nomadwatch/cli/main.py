"""
CLI tool for nomadwatch.

Parses a selector, performs a single fetch against Nomad and prints the
resulting snapshot as a table or as JSON.
"""

import json
import sys
from dataclasses import asdict
from typing import Callable, List, Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from nomadwatch import __version__
from nomadwatch.clients import ClientSet
from nomadwatch.config import NomadWatchConfig
from nomadwatch.exceptions import DependencyError
from nomadwatch.logger import LogConfig, setup_logging
from nomadwatch.query import (
    Query,
    parse_node_query,
    parse_nodes_query,
    parse_region_nodes_query,
)
from nomadwatch.snapshot import NodeSnippet, ResponseMetadata

console = Console()
err_console = Console(stderr=True)


@click.group()
@click.version_option(version=__version__, prog_name="nomadwatch")
@click.option("--config", "-c", "config_file", help="Configuration file path")
@click.option("--address", help="Nomad HTTP API address")
@click.option("--token", envvar="NOMAD_TOKEN", help="Nomad ACL token")
@click.option("--region", help="Region to read from")
@click.option("--namespace", help="Namespace to read from")
@click.pass_context
def cli(
    ctx: click.Context,
    config_file: Optional[str],
    address: Optional[str],
    token: Optional[str],
    region: Optional[str],
    namespace: Optional[str],
):
    """nomadwatch - read Nomad node snapshots"""
    try:
        if config_file:
            config = NomadWatchConfig.from_yaml(config_file)
        else:
            config = NomadWatchConfig.from_env()
        config = config.with_overrides(
            address=address, token=token, region=region, namespace=namespace
        )
    except DependencyError as e:
        err_console.print(f"[red]Error: {escape(str(e))}[/red]")
        sys.exit(1)

    setup_logging(LogConfig.from_settings(config.logging))
    ctx.obj = config


def _render(records: List[NodeSnippet], meta: ResponseMetadata, as_json: bool) -> None:
    if as_json:
        click.echo(
            json.dumps(
                {
                    "nodes": [asdict(r) for r in records],
                    "last_index": meta.last_index,
                    "last_contact": meta.last_contact,
                },
                indent=2,
            )
        )
        return

    table = Table(title=f"Nodes (index {meta.last_index})")
    table.add_column("Name", style="cyan")
    table.add_column("ID")
    table.add_column("Address", style="green")
    table.add_column("Datacenter")
    table.add_column("Region")

    for r in records:
        table.add_row(
            *(escape(v) for v in (r.name, r.id, r.address, r.datacenter, r.region))
        )

    console.print(table)


def _run(
    config: NomadWatchConfig,
    parse: Callable[[str], Query],
    selector: str,
    as_json: bool,
) -> None:
    try:
        query = parse(selector)
        with ClientSet.from_config(config.nomad) as clients:
            try:
                records, meta = query.fetch(clients, config.nomad.default_options())
            finally:
                query.stop()
    except DependencyError as e:
        err_console.print(f"[red]Error: {escape(str(e))}[/red]")
        sys.exit(1)

    _render(records, meta, as_json)


@cli.command()
@click.argument("node_id", default="")
@click.option("--json", "as_json", is_flag=True, help="Print JSON instead of a table")
@click.pass_obj
def node(config: NomadWatchConfig, node_id: str, as_json: bool):
    """Show one node by identifier, or every node when none is given."""
    _run(config, parse_node_query, node_id, as_json)


@cli.command()
@click.argument("selector", default="")
@click.option("--json", "as_json", is_flag=True, help="Print JSON instead of a table")
@click.pass_obj
def nodes(config: NomadWatchConfig, selector: str, as_json: bool):
    """List nodes, optionally in one datacenter (@dc1)."""
    _run(config, parse_nodes_query, selector, as_json)


@cli.command("region-nodes")
@click.argument("selector", default="")
@click.option("--json", "as_json", is_flag=True, help="Print JSON instead of a table")
@click.pass_obj
def region_nodes(config: NomadWatchConfig, selector: str, as_json: bool):
    """List nodes, optionally in one region (@us-east-1)."""
    _run(config, parse_region_nodes_query, selector, as_json)


def main():
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
