"""pipehook CLI for compiling @hook directives - Tyro implementation."""

import json
import logging
import sys
from builtins import print as builtin_print
from graphlib import CycleError
from pathlib import Path
from typing import Annotated, Literal

import attrs
import tyro
from rich import print
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from pipehook.config import CONFIG_FILENAME, PipehookConfig, get_config, set_config_instance
from pipehook.directive import DIRECTIVE_DEFINITION
from pipehook.document import dump_graph, load_graph, load_request
from pipehook.errors import PipehookError
from pipehook.pipeline import EntityPipelines
from pipehook.resources.validation import validate_graph
from pipehook.transformer import HookTransformer


# Subcommand definitions using attrs
@attrs.define
class Compile:
    """Compile @hook entities of a compile request into pipeline resolvers."""

    input: Annotated[Path, tyro.conf.Positional]
    """Compile request (YAML or JSON)."""

    output: Annotated[Path | None, tyro.conf.arg(aliases=["-o"])] = None
    """Write the compiled template here instead of stdout."""

    validate: Annotated[bool, tyro.conf.arg(aliases=["-v"])] = False
    """Validate the compiled graph and fail on findings."""


GraphFormat = Literal["ascii", "mermaid", "json"]


@attrs.define
class Graph:
    """Show the deployment order of a compiled template.

    Resources are grouped into waves; every resource only depends on
    resources of earlier waves.
    """

    template: Annotated[Path, tyro.conf.Positional]
    """Compiled template (output of `pipehook compile`)."""

    output: Annotated[GraphFormat, tyro.conf.arg(aliases=["-o"])] = "ascii"
    """Output format: ascii, mermaid, json."""

    validate: Annotated[bool, tyro.conf.arg(aliases=["-v"])] = False
    """Validate the graph and report any issues."""


@attrs.define
class Directive:
    """Print the @hook directive definition."""


# Type alias for all subcommands
Command = (
    Annotated[Compile, tyro.conf.subcommand(name="compile")]
    | Annotated[Graph, tyro.conf.subcommand(name="graph")]
    | Annotated[Directive, tyro.conf.subcommand(name="directive")]
)


def setup_logging(debug: bool = False) -> None:
    """Configure logging with 100-character text width."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s - %(name)-20s - %(levelname)-8s - %(message).100s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def load_cli_config(config_dir: Path | None) -> PipehookConfig:
    """Load configuration from an explicit directory, or fall back to discovery."""
    if config_dir is None:
        return get_config()
    config = PipehookConfig.from_yaml(config_dir / CONFIG_FILENAME)
    set_config_instance(config)
    return config


def _external_ids(config: PipehookConfig) -> list[str]:
    """Ids the compiled graph may reference without defining: the API and the env parameter."""
    return [config.api_logical_id, config.env_parameter]


def _summary_table(results: list[EntityPipelines]) -> Table:
    table = Table(show_header=True, header_style="bold")
    table.add_column("Type", style="cyan")
    table.add_column("Stack", style="magenta")
    table.add_column("Operation")
    table.add_column("Functions", style="green")

    for result in results:
        for operation, functions in result.functions.items():
            table.add_row(result.entity, result.group, operation.value, str(len(functions)))
    return table


def _report_findings(findings: list[str], console: Console) -> None:
    if findings:
        console.print("[yellow]Graph Validation Warnings:[/yellow]")
        for finding in findings:
            console.print(f"  • {escape(finding)}")
    else:
        console.print("[green]Graph validation passed - no issues found[/green]")


def handle_compile(cmd: Compile, config: PipehookConfig) -> None:
    """Handle compile subcommand."""
    err_console = Console(stderr=True)

    request = load_request(cmd.input)
    arena = request.to_arena()
    results = HookTransformer(config).transform(request.entities, arena)

    if cmd.validate:
        findings = validate_graph(arena.graph, external=_external_ids(config))
        _report_findings(findings, err_console)
        if findings:
            sys.exit(1)

    output = dump_graph(arena.graph)
    if cmd.output is None:
        builtin_print(output)
    else:
        cmd.output.write_text(output + "\n")
        err_console.print(f"[green]Written to:[/green] {cmd.output}")

    if results:
        err_console.print(Panel(_summary_table(results), title="[bold]Hook Pipelines[/bold]", border_style="blue"))
    else:
        err_console.print("[dim]No types annotated with @hook[/dim]")


def handle_graph(cmd: Graph, config: PipehookConfig) -> None:
    """Handle graph subcommand to visualize deployment order."""
    graph = load_graph(cmd.template)

    if cmd.validate:
        _report_findings(validate_graph(graph, external=_external_ids(config)), Console())
        print()

    if cmd.output == "mermaid":
        builtin_print(graph.to_mermaid())
    elif cmd.output == "json":
        graph_data = {
            "deployment_order": graph.deployment_order(),
            "waves": [sorted(wave) for wave in graph.deployment_waves()],
            "resources": {
                resource_id: {
                    "type": graph.get(resource_id).type,
                    "group": graph.group_of(resource_id),
                    "dependencies": graph.dependencies(resource_id),
                }
                for resource_id in graph
            },
        }
        builtin_print(json.dumps(graph_data, indent=2))
    else:
        console = Console()
        console.print(Panel("[bold cyan]Resource Deployment Graph[/bold cyan]", expand=False))

        console.print("\n[bold]Deployment Groups:[/bold]")
        table = Table(show_header=True, header_style="bold")
        table.add_column("Group", style="magenta")
        table.add_column("Resources", style="cyan")
        for group, resource_ids in sorted(graph.groups().items()):
            table.add_row(group, "\n".join(resource_ids))
        console.print(table)

        console.print("\n[bold]Deployment Waves:[/bold]")
        console.print(graph.to_ascii(), markup=False)


def main(
    cmd: Annotated[Command, tyro.conf.arg(name="")],
    *,
    config_dir: Annotated[Path | None, tyro.conf.arg(help="Configuration directory")] = None,
) -> None:
    """pipehook - compile @hook directives into AppSync pipeline resolvers.

    Wraps the model transformer's single-step resolvers with before/after
    Lambda hooks.
    """
    config = load_cli_config(config_dir)
    setup_logging(config.debug)

    try:
        if isinstance(cmd, Compile):
            handle_compile(cmd, config)
        elif isinstance(cmd, Graph):
            handle_graph(cmd, config)
        elif isinstance(cmd, Directive):
            builtin_print(DIRECTIVE_DEFINITION, end="")
    except PipehookError as e:
        Console(stderr=True).print(f"[red]Error:[/red] {escape(str(e))}", highlight=False)
        sys.exit(1)
    except CycleError as e:
        Console(stderr=True).print(f"[red]Error:[/red] dependency cycle: {escape(' -> '.join(e.args[1]))}")
        sys.exit(1)


def entry_point() -> None:
    """Entry point for the pipehook command."""
    tyro.cli(main)


if __name__ == "__main__":
    entry_point()
