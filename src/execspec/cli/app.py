"""
Root Typer application for the execspec CLI.

Works on serialized execution specs on disk: inspect their state, verify
parameter names, run the submission mutations, and derive reusable
templates. Nothing here talks to a cluster.
"""

from __future__ import annotations

from pathlib import Path

import typer

from execspec.cli.utils import fail, load_spec, output_dict, parse_pairs
from execspec.core.errors import ExecSpecError
from execspec.core.logging import configure_logging
from execspec.core.settings import get_settings
from execspec.execution import ScheduledWorkflow, prepare_execution
from execspec.execution.models import ObjectMeta

app = typer.Typer(
    name="execspec",
    help="execspec - inspect and prepare pipeline execution specs.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

_FILE = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="YAML or JSON execution spec")


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from importlib.metadata import PackageNotFoundError
        from importlib.metadata import version as pkg_version

        from execspec import __version__

        try:
            v = pkg_version("spine-execspec")
        except PackageNotFoundError:
            v = __version__
        typer.echo(f"execspec {v}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging on stderr."),
) -> None:
    """execspec CLI - work with serialized pipeline run resources."""
    settings = get_settings()
    configure_logging(
        level="DEBUG" if verbose else settings.log_level,
        json_format=settings.log_json,
        service=settings.service_name,
        cache_loggers=False,
    )


# ── Commands ─────────────────────────────────────────────────────────────


@app.command("inspect")
def inspect_spec(
    path: Path = _FILE,
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Show identity, state, schedule linkage, and parameters."""
    spec = load_spec(path)
    output_dict(
        {
            "name": spec.execution_name(),
            "type": spec.execution_type().value,
            "condition": spec.condition(),
            "final": spec.is_in_final_state(),
            "schedule_uid": spec.scheduled_workflow_uuid_as_string_or_empty(),
            "scheduled_at": spec.scheduled_at_in_sec_or_0(),
            "content_hash": spec.content_hash(),
            "parameters": spec.parameters(),
        },
        as_json=json_out,
        title=f"Execution: {spec.execution_name()}",
    )


@app.command("verify")
def verify_parameters(
    path: Path = _FILE,
    param: list[str] = typer.Option(None, "--param", "-p", help="NAME=VALUE (repeatable)"),
) -> None:
    """Fail if any --param names a parameter the spec does not declare."""
    spec = load_spec(path)
    params = parse_pairs(param, option="--param")
    try:
        spec.verify_parameters(params)
    except ExecSpecError as e:
        fail(e)
    typer.echo(f"OK: {len(params)} parameter(s) declared by {spec.execution_name()}")


@app.command("prepare")
def prepare(
    path: Path = _FILE,
    param: list[str] = typer.Option(None, "--param", "-p", help="NAME=VALUE override (repeatable)"),
    label: list[str] = typer.Option(None, "--label", "-l", help="KEY=VALUE resource label (repeatable)"),
    template_label: list[str] = typer.Option(
        None, "--template-label", "-t", help="KEY=VALUE label for every template (repeatable)"
    ),
    name: str | None = typer.Option(None, "--name", help="Assign a concrete name"),
    uid: str | None = typer.Option(None, "--uid", help="Value substituted for {{workflow.uid}}"),
    schedule_name: str | None = typer.Option(None, "--schedule-name", help="Owning recurring schedule"),
    schedule_uid: str | None = typer.Option(None, "--schedule-uid", help="UID of the owning schedule"),
    strict: bool | None = typer.Option(None, "--strict/--no-strict", help="Reject undeclared --param names"),
    ignore_entrypoint: bool = typer.Option(False, "--ignore-entrypoint"),
    as_yaml: bool = typer.Option(False, "--yaml", help="Emit YAML instead of canonical JSON"),
) -> None:
    """Apply submission mutations and print the prepared resource."""
    spec = load_spec(path)
    schedule = None
    if schedule_name or schedule_uid:
        schedule = ScheduledWorkflow(metadata=ObjectMeta(name=schedule_name, uid=schedule_uid))
    try:
        prepare_execution(
            spec,
            parameters=parse_pairs(param, option="--param"),
            schedule=schedule,
            labels=parse_pairs(label, option="--label"),
            template_labels=parse_pairs(template_label, option="--template-label"),
            name=name,
            uid=uid,
            strict_parameters=strict,
            ignore_entrypoint=ignore_entrypoint,
        )
    except ExecSpecError as e:
        fail(e)
    typer.echo(spec.to_yaml() if as_yaml else spec.to_string_for_store(), nl=not as_yaml)


@app.command("template")
def template(path: Path = _FILE) -> None:
    """Print the reusable template derived from a named run."""
    spec = load_spec(path)
    typer.echo(spec.get_execution_spec().to_yaml(), nl=False)


@app.command("artifact")
def artifact(
    path: Path = _FILE,
    node_id: str = typer.Argument(..., help="Status node identifier"),
    artifact_name: str = typer.Argument(..., help="Output artifact name"),
) -> None:
    """Print the object-store key of a node's output artifact."""
    spec = load_spec(path)
    key = spec.find_object_store_artifact_key_or_empty(node_id, artifact_name)
    if not key:
        typer.echo(f"No object-store key for artifact {artifact_name!r} on node {node_id!r}", err=True)
        raise typer.Exit(code=1)
    typer.echo(key)
