"""Main CLI entry point."""

import asyncio

import click

from kubereach.cli.commands import (
    DIRECTIONS,
    EXIT_ERROR,
    check_async,
    console,
    describe_pod_async,
    list_policies_async,
    matrix_async,
)
from kubereach.core.models import ConfigurationError, Protocol
from kubereach.utils.config import Settings, load_config
from kubereach.utils.logging import setup_logging

manifest_option = click.option(
    "--filename",
    "-f",
    "filenames",
    multiple=True,
    type=click.Path(exists=True),
    help="Manifest file or directory (repeatable). Reads the live cluster when omitted.",
)
port_option = click.option(
    "--port",
    "-p",
    "ports",
    multiple=True,
    help="Port to evaluate as PROTOCOL/PORT or PORT (repeatable)",
)


@click.group()
@click.version_option()
@click.option("--config", "config_path", type=click.Path(dir_okay=False), help="Configuration file")
@click.option("--kubeconfig", help="Path to the kubeconfig file")
@click.option("--context", help="Kubeconfig context to use")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Log level",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: str | None,
    kubeconfig: str | None,
    context: str | None,
    log_level: str | None,
) -> None:
    """kubereach - Kubernetes NetworkPolicy reachability analysis."""
    try:
        settings = load_config(config_path)
    except ConfigurationError as e:
        console.print(f"[red]Error:[/red] {e}", highlight=False, soft_wrap=True)
        ctx.exit(EXIT_ERROR)

    if kubeconfig:
        settings.kubeconfig = kubeconfig
    if context:
        settings.context = context
    if log_level:
        settings.log_level = log_level.upper()

    setup_logging(settings.log_level, settings.log_file)
    ctx.obj = settings


@cli.command("check")
@manifest_option
@click.argument("source")
@click.argument("destination")
@click.option("--port", "-p", type=click.IntRange(1, 65535), required=True, help="Destination port")
@click.option(
    "--protocol",
    type=click.Choice([p.value for p in Protocol], case_sensitive=False),
    default="TCP",
    show_default=True,
    help="Protocol",
)
@click.option(
    "--direction",
    "-d",
    type=click.Choice(list(DIRECTIONS)),
    default="both",
    show_default=True,
    help="Evaluate destination ingress, source egress, or both",
)
@click.option("--explain", "-e", is_flag=True, help="Show which policies decided the result")
@click.option("--output", "-o", type=click.Choice(["text", "json"]), default="text", help="Output format")
@click.pass_obj
def check(
    settings: Settings,
    filenames: tuple[str, ...],
    source: str,
    destination: str,
    port: int,
    protocol: str,
    direction: str,
    explain: bool,
    output: str,
) -> None:
    """Check if SOURCE may connect to DESTINATION (namespace/pod).

    Exits 0 when allowed, 1 when denied, 2 on errors.
    """
    code = asyncio.run(
        check_async(settings, filenames, source, destination, protocol.upper(), port, direction, explain, output)
    )
    raise SystemExit(code)


@cli.command("matrix")
@manifest_option
@port_option
@click.option("--namespace", "-n", help="Only evaluate destinations in this namespace")
@click.option(
    "--direction",
    "-d",
    type=click.Choice(list(DIRECTIONS)),
    default="ingress",
    show_default=True,
    help="Evaluate destination ingress, source egress, or both",
)
@click.option(
    "--output",
    "-o",
    type=click.Choice(["table", "json", "yaml", "csv"]),
    default="table",
    help="Output format",
)
@click.option("--output-file", type=click.Path(dir_okay=False, writable=True), help="Write the export to a file")
@click.pass_obj
def matrix(
    settings: Settings,
    filenames: tuple[str, ...],
    ports: tuple[str, ...],
    namespace: str | None,
    direction: str,
    output: str,
    output_file: str | None,
) -> None:
    """Show the reachability matrix for every pod pair."""
    code = asyncio.run(matrix_async(settings, filenames, namespace, ports, direction, output, output_file))
    raise SystemExit(code)


@cli.command("list")
@manifest_option
@click.option("--namespace", "-n", help="Kubernetes namespace to list (all namespaces if not specified)")
@click.option("--output", "-o", type=click.Choice(["table", "json"]), default="table", help="Output format")
@click.pass_obj
def list_policies(settings: Settings, filenames: tuple[str, ...], namespace: str | None, output: str) -> None:
    """List network policies."""
    code = asyncio.run(list_policies_async(settings, filenames, namespace, output))
    raise SystemExit(code)


@cli.command("describe")
@manifest_option
@port_option
@click.argument("pod")
@click.pass_obj
def describe(settings: Settings, filenames: tuple[str, ...], ports: tuple[str, ...], pod: str) -> None:
    """Describe the policies and peers of POD (namespace/pod)."""
    code = asyncio.run(describe_pod_async(settings, filenames, pod, ports))
    raise SystemExit(code)


@cli.command("tui")
@manifest_option
@click.pass_obj
def tui(settings: Settings, filenames: tuple[str, ...]) -> None:
    """Launch the Terminal User Interface."""
    from kubereach.tui import run

    run(settings, filenames)


if __name__ == "__main__":
    cli()
