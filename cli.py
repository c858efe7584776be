"""Typer application exposing the ``deploy`` command."""

from pathlib import Path
from typing import Optional

import typer
from pulumi import automation as auto

from config import EDGE_REGION

PROJECT_FILE = "Pulumi.yaml"

app = typer.Typer(
    name="hosting",
    help="Provision the shared static hosting stack.",
    no_args_is_help=True,
)


@app.callback()
def main() -> None:
    """Multi-site static hosting on S3 + CloudFront."""


@app.command()
def deploy(
    stack: str = typer.Option("dev", "--stack", "-s", help="Pulumi stack to deploy."),
    work_dir: Optional[Path] = typer.Option(
        None,
        "--work-dir",
        "-C",
        help="Pulumi project directory. Defaults to the current directory.",
    ),
) -> None:
    """Apply the full configuration (pulumi up) in us-east-1."""
    project_dir = (work_dir or Path.cwd()).resolve()
    if not (project_dir / PROJECT_FILE).is_file():
        typer.secho(f"No {PROJECT_FILE} in {project_dir}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    pulumi_stack = auto.create_or_select_stack(stack_name=stack, work_dir=str(project_dir))
    pulumi_stack.set_config("aws:region", auto.ConfigValue(value=EDGE_REGION))

    typer.echo(f"Deploying stack {stack} to {EDGE_REGION}...")
    try:
        result = pulumi_stack.up(on_output=typer.echo)
    except auto.CommandError as exc:
        typer.secho(f"Deploy failed: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc

    typer.secho(f"Deploy {result.summary.result}", fg=typer.colors.GREEN)
    for key, output in result.outputs.items():
        typer.echo(f"  {key}: {output.value}")


if __name__ == "__main__":
    app()
