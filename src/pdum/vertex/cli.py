"""CLI entry point for pdum_vertex."""

import logging
import sys
from pathlib import Path
from typing import Optional, Set, Tuple

import typer
import yaml
from InquirerPy import inquirer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from pdum.vertex import planner
from pdum.vertex.config import Config
from pdum.vertex.reconciler import EndpointReconciler
from pdum.vertex.types import Endpoint, ImmutableFieldError, VertexError

app = typer.Typer(
    help="Declarative reconciler for Vertex AI endpoints",
    no_args_is_help=True,
)
console = Console()

_state: dict = {}


@app.callback()
def main_options(
    project: Optional[str] = typer.Option(None, "--project", "-p", help="Project to address (defaults to ADC)"),
    region: Optional[str] = typer.Option(None, "--region", "-r", help="Region of the endpoint, e.g. us-central1"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log API calls"),
):
    """Options shared by every command."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )
    _state["project"] = project
    _state["region"] = region


def _reconciler() -> EndpointReconciler:
    config = Config.from_environment(project=_state.get("project"), region=_state.get("region"))
    return EndpointReconciler(config)


def load_manifest(path: Path) -> Tuple[Endpoint, Set[str]]:
    """Load desired endpoint state from a YAML manifest.

    Returns the endpoint together with the field names the manifest sets.
    Fields it leaves out are not managed by the manifest.
    """
    with open(path, "r", encoding="utf-8") as f:
        manifest = yaml.safe_load(f) or {}
    if not isinstance(manifest, dict):
        raise ValueError(f"{path} must contain a mapping of endpoint fields")
    return Endpoint.from_manifest(manifest), set(manifest)


def render_endpoint(endpoint: Endpoint) -> Table:
    table = Table(title=endpoint.display_name or endpoint.name, show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("name", endpoint.name)
    table.add_row("display_name", endpoint.display_name)
    table.add_row("metadata_schema_uri", endpoint.metadata_schema_uri)
    table.add_row("labels", ", ".join(f"{k}={v}" for k, v in sorted(endpoint.labels.items())))
    kms = endpoint.encryption_spec[0].kms_key_name if endpoint.encryption_spec else ""
    table.add_row("kms_key_name", kms)
    table.add_row("project", endpoint.project or "")
    table.add_row("region", endpoint.region or "")
    table.add_row("create_time", endpoint.create_time)
    table.add_row("update_time", endpoint.update_time)
    return table


def _run(action):
    try:
        return action()
    except (VertexError, ValueError, OSError, yaml.YAMLError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user.[/yellow]")
        sys.exit(130)
    except Exception as e:
        console.print(f"[bold red]Unexpected error:[/bold red] {e}")
        sys.exit(1)


@app.command("version")
def version():
    """Show the version of pdum_vertex."""
    from pdum.vertex import __version__

    console.print(f"pdum_vertex version: [bold green]{__version__}[/bold green]")


@app.command("get")
def get(name: str = typer.Argument(..., help="Endpoint resource name")):
    """Show the current state of an endpoint."""

    def action():
        endpoint = _reconciler().read(Endpoint(name=name, region=_state.get("region")))
        if endpoint is None:
            console.print(f"[yellow]Endpoint {name} does not exist.[/yellow]")
            sys.exit(1)
        console.print(render_endpoint(endpoint))

    _run(action)


@app.command("create")
def create(manifest: Path = typer.Argument(..., exists=True, dir_okay=False, help="YAML manifest")):
    """Create an endpoint from a YAML manifest."""

    def action():
        desired, given = load_manifest(manifest)
        with console.status("Creating endpoint..."):
            endpoint = _reconciler().create(desired, explicitly_set=given)
        console.print(f"[green]Created[/green] {endpoint.name}")
        console.print(render_endpoint(endpoint))

    _run(action)


@app.command("apply")
def apply(manifest: Path = typer.Argument(..., exists=True, dir_okay=False, help="YAML manifest")):
    """
    Converge an endpoint to a YAML manifest.

    If the manifest names an existing endpoint (``name:``), only the changed
    mutable fields the manifest sets are patched; fields it leaves out keep
    their remote values. Otherwise the endpoint is created.
    """

    def action():
        desired, given = load_manifest(manifest)
        reconciler = _reconciler()
        observed = reconciler.read(desired) if desired.name else None
        if observed is None:
            with console.status("Creating endpoint..."):
                endpoint = reconciler.create(desired, explicitly_set=given)
            console.print(f"[green]Created[/green] {endpoint.name}")
        else:
            drift = [attr for attr in planner.immutable_drift(observed, desired) if attr in given]
            if drift:
                raise ImmutableFieldError(drift, observed.id)
            changed = [attr for attr in planner.changed_fields(observed, desired) if attr in given]
            with console.status("Updating endpoint..."):
                endpoint = reconciler.update(observed, desired, changed)
            console.print(f"[green]Up to date:[/green] {endpoint.name}")
        console.print(render_endpoint(endpoint))

    _run(action)


@app.command("delete")
def delete(
    name: str = typer.Argument(..., help="Endpoint resource name"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
):
    """Delete an endpoint (succeeds if it is already gone)."""

    def action():
        if not yes and not inquirer.confirm(message=f"Delete {name}?", default=False).execute():
            console.print("[yellow]Aborted.[/yellow]")
            return
        with console.status("Deleting endpoint..."):
            _reconciler().delete(Endpoint(name=name, region=_state.get("region")))
        console.print(f"[green]Deleted[/green] {name}")

    _run(action)


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
