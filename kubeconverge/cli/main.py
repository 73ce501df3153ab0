"""kubeconverge command-line interface.

Commands:
    kubeconverge classify FILE [--json]     Classify objects in a YAML/JSON file offline.
    kubeconverge wait FILE [--delete]       Poll live objects until they converge.
    kubeconverge apply FILE [--dry-run]     Create or update objects, then wait.
    kubeconverge delete FILE [--dry-run]    Delete objects, then wait until gone.
    kubeconverge version                    Print version and exit.

Poll parameters default to the ``KUBECONVERGE_POLL_*`` environment
variables and can be overridden per invocation.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import click
import yaml
from kubernetes_asyncio.client.exceptions import ApiException
from kubernetes_asyncio.config import ConfigException

from kubeconverge import __version__
from kubeconverge.client.base import ResourceNotFoundError
from kubeconverge.client.kubernetes import KubernetesResourceClient
from kubeconverge.config import load_config
from kubeconverge.manifest.lifecycle import ConvergenceError, ManifestLifecycle
from kubeconverge.models.config import KubeConvergeConfig, PollConfig
from kubeconverge.models.poll import PollOutcome, PollResult
from kubeconverge.models.resources import ResourceIdentity
from kubeconverge.models.status import Reason
from kubeconverge.observability.logging import setup_logging
from kubeconverge.poller.convergence import ConvergencePoller
from kubeconverge.status.core import compute
from kubeconverge.status.fields import ClassificationError

# ---------------------------------------------------------------------------
# Colour helpers
# ---------------------------------------------------------------------------

_REASON_COLORS: dict[str, str] = {
    Reason.READY: "green",
    Reason.USER_MANAGED: "green",
    Reason.NO_STATUS_INFO: "cyan",
    Reason.IN_PROGRESS: "yellow",
    Reason.TERMINATING: "yellow",
    Reason.FAILED: "red",
}

_OUTCOME_COLORS: dict[str, str] = {
    PollOutcome.SUCCEEDED: "green",
    PollOutcome.FAILED: "red",
    PollOutcome.ABORTED: "yellow",
}


def _styled_reason(reason: str) -> str:
    return click.style(reason, fg=_REASON_COLORS.get(reason, "white"), bold=True)


def _styled_outcome(outcome: str) -> str:
    return click.style(outcome.upper(), fg=_OUTCOME_COLORS.get(outcome, "white"), bold=True)


# ---------------------------------------------------------------------------
# Manifest loading
# ---------------------------------------------------------------------------


def _load_manifests(path: Path) -> list[dict[str, object]]:
    """Load every object from a YAML or JSON file, flattening ``*List`` kinds.

    Raises click.ClickException when the file cannot be parsed.
    """
    try:
        documents = list(yaml.safe_load_all(path.read_text()))
    except (OSError, yaml.YAMLError) as exc:
        raise click.ClickException(f"Cannot read {path}: {exc}") from exc

    manifests: list[dict[str, object]] = []
    for doc in documents:
        if doc is None:
            continue
        if not isinstance(doc, dict):
            raise click.ClickException(f"{path}: expected a mapping, got {type(doc).__name__}")
        items = doc.get("items")
        kind = doc.get("kind")
        if isinstance(kind, str) and kind.endswith("List") and isinstance(items, list):
            manifests.extend(item for item in items if isinstance(item, dict))
        else:
            manifests.append(doc)
    return manifests


def _identities(manifests: list[dict[str, object]]) -> list[ResourceIdentity]:
    try:
        return [ResourceIdentity.from_manifest(m) for m in manifests]
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc


# ---------------------------------------------------------------------------
# Poll options
# ---------------------------------------------------------------------------


def _poll_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Attach the per-invocation poll overrides to a command."""
    options = [
        click.option("--max-retries", type=click.IntRange(min=1), default=None, help="Fetch attempts to make."),
        click.option("--initial-delay", type=click.FloatRange(min=0.0), default=None, help="First backoff in seconds."),
        click.option("--backoff-factor", type=click.FloatRange(min=1.0), default=None, help="Backoff multiplier."),
        click.option(
            "--initial-get-delay",
            type=click.FloatRange(min=0.0),
            default=None,
            help="Settle delay before the first fetch, in seconds.",
        ),
        click.option("--timeout", type=click.FloatRange(min=0.0, min_open=True), default=None, help="Deadline (s)."),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _poll_config(base: PollConfig, overrides: dict[str, Any]) -> PollConfig:
    update = {key: value for key, value in overrides.items() if value is not None}
    return base.model_copy(update=update) if update else base


def _run_against_cluster(coro: Any) -> Any:
    """Run ``coro``; raise click.ClickException on API, kubeconfig or convergence failures."""
    try:
        return asyncio.run(coro)
    except ApiException as exc:
        raise click.ClickException(f"Kubernetes API error {exc.status}: {exc.reason}") from exc
    except ConfigException as exc:
        raise click.ClickException(f"Cannot load Kubernetes configuration: {exc}") from exc
    except (ConvergenceError, ResourceNotFoundError) as exc:
        raise click.ClickException(str(exc)) from exc


async def _make_client(config: KubeConvergeConfig) -> KubernetesResourceClient:
    return await KubernetesResourceClient.from_config(context=config.kube_context)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.option("--context", "kube_context", default=None, metavar="NAME", help="kubeconfig context to use.")
@click.pass_context
def cli(ctx: click.Context, kube_context: str | None) -> None:
    """kubeconverge - wait for Kubernetes resources to converge."""
    try:
        config = load_config()
    except ValueError as exc:
        raise click.ClickException(f"Invalid configuration: {exc}") from exc
    if kube_context:
        config = config.model_copy(update={"kube_context": kube_context})
    setup_logging(config.log.level, json_output=config.log.json_output)
    ctx.ensure_object(dict)
    ctx.obj["config"] = config


# ---------------------------------------------------------------------------
# kubeconverge version
# ---------------------------------------------------------------------------


@cli.command("version")
def cmd_version() -> None:
    """Print the kubeconverge version and exit."""
    click.echo(f"kubeconverge {__version__}")


# ---------------------------------------------------------------------------
# kubeconverge classify
# ---------------------------------------------------------------------------


@cli.command("classify")
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--json", "output_json", is_flag=True, default=False, help="Print verdicts as JSON.")
def cmd_classify(file: Path, output_json: bool) -> None:
    """Classify every object in FILE without contacting a cluster."""
    rows: list[dict[str, object]] = []
    errors = 0
    for manifest in _load_manifests(file):
        resource = _describe(manifest)
        try:
            verdict = compute(manifest)
        except ClassificationError as exc:
            errors += 1
            rows.append({"resource": resource, "error": str(exc)})
            continue
        rows.append({"resource": resource, **verdict.to_dict()})

    if output_json:
        click.echo(json.dumps(rows, indent=2))
    else:
        for row in rows:
            if "error" in row:
                click.echo(f"{row['resource']}  {click.style('ERROR', fg='red', bold=True)}  {row['error']}")
                continue
            reason = str(row["reason"])
            message = f"  {row['message']}" if row["message"] else ""
            click.echo(f"{row['resource']}  {row['status']}  {_styled_reason(reason)}{message}")

    if errors:
        raise click.ClickException(f"{errors} object(s) could not be classified")


def _describe(manifest: dict[str, object]) -> str:
    try:
        identity = ResourceIdentity.from_manifest(manifest)
    except ValueError:
        return "<unnamed>"
    return f"{identity.kind}/{identity.namespaced_name}"


# ---------------------------------------------------------------------------
# kubeconverge wait
# ---------------------------------------------------------------------------


@cli.command("wait")
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--delete", "is_deletion", is_flag=True, default=False, help="Wait for the objects to be deleted.")
@_poll_options
@click.pass_context
def cmd_wait(ctx: click.Context, file: Path, is_deletion: bool, **overrides: Any) -> None:
    """Poll the live objects named in FILE until they converge."""
    config: KubeConvergeConfig = ctx.obj["config"]
    poll_config = _poll_config(config.poll, overrides)
    identities = _identities(_load_manifests(file))

    async def _wait() -> list[PollResult]:
        client = await _make_client(config)
        try:
            poller = ConvergencePoller(client)
            return await poller.poll_many(identities, is_deletion=is_deletion, config=poll_config)
        finally:
            await client.close()

    results: list[PollResult] = _run_against_cluster(_wait())
    failed = 0
    for result in results:
        click.echo(f"{result.identity.kind}/{result.identity.namespaced_name}  {_styled_outcome(result.outcome)}")
        if not result.succeeded:
            failed += 1
            click.echo(f"  {result.message}")
    if failed:
        raise click.ClickException(f"{failed} object(s) did not converge")


# ---------------------------------------------------------------------------
# kubeconverge apply / delete
# ---------------------------------------------------------------------------


def _run_lifecycle(ctx: click.Context, file: Path, action: str, dry_run: bool, overrides: dict[str, Any]) -> None:
    """Run ``action`` ("apply" or "delete") for every object in FILE, in order."""
    config: KubeConvergeConfig = ctx.obj["config"]
    poll_config = _poll_config(config.poll, overrides)
    manifests = _load_manifests(file)
    _identities(manifests)
    past_tense = {"apply": "applied", "delete": "deleted"}[action]
    suffix = " (dry run)" if dry_run else ""

    async def _execute() -> None:
        client = await _make_client(config)
        try:
            lifecycle = ManifestLifecycle(client, config=poll_config)
            for manifest in manifests:
                if action == "apply":
                    await lifecycle.apply(manifest, dry_run=dry_run)
                else:
                    await lifecycle.delete(manifest, dry_run=dry_run)
                click.echo(f"{_describe(manifest)}  {click.style(past_tense, fg='green')}{suffix}")
        finally:
            await client.close()

    _run_against_cluster(_execute())


@cli.command("apply")
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--dry-run", is_flag=True, default=False, help="Server-side dry run; no waiting.")
@_poll_options
@click.pass_context
def cmd_apply(ctx: click.Context, file: Path, dry_run: bool, **overrides: Any) -> None:
    """Create or update the objects in FILE, then wait until they are ready."""
    _run_lifecycle(ctx, file, "apply", dry_run, overrides)


@cli.command("delete")
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--dry-run", is_flag=True, default=False, help="Server-side dry run; no waiting.")
@_poll_options
@click.pass_context
def cmd_delete(ctx: click.Context, file: Path, dry_run: bool, **overrides: Any) -> None:
    """Delete the objects in FILE, then wait until they are gone."""
    _run_lifecycle(ctx, file, "delete", dry_run, overrides)


# ---------------------------------------------------------------------------
# Entrypoint
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    cli()
