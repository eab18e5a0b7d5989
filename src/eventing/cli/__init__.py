from pathlib import Path

import typer
import yaml
from dotenv import load_dotenv, find_dotenv
from typing_extensions import Annotated

from eventing.crd.conditions import read_condition
from eventing.crd.registry import CRDRegistry

load_dotenv(find_dotenv())

app = typer.Typer(
    help="Eventing: Channel operator and resource readiness tools",
    add_completion=False,
)


def iter_resources(documents):
    """Yield resources from manifest documents, unpacking ``List`` kinds.

    Raises ValueError for documents or items that are not mappings.
    """
    for document in documents:
        if document is None:
            continue
        if not isinstance(document, dict):
            raise ValueError(f"manifest document must be a mapping, got {type(document).__name__}")
        if str(document.get("kind") or "").endswith("List") and "items" in document:
            items = document["items"] or []
            if not isinstance(items, list):
                raise ValueError(f"List items must be a sequence, got {type(items).__name__}")
            for item in items:
                if item is None:
                    continue
                if not isinstance(item, dict):
                    raise ValueError(f"List item must be a mapping, got {type(item).__name__}")
                yield item
        else:
            yield document


def lookup_kind(registry, resource):
    kind = resource.get("kind")
    info = registry.get_model_by_api_version(resource.get("apiVersion"), kind)
    if info is None:
        versions = registry.get_models_by_kind(kind)
        info = versions[0] if versions else None
    return info


@app.command("operator")
def run_operator():
    """Run the Kubernetes operator (connects to cluster)."""
    from eventing.main import main

    main()


@app.command("kinds")
def list_kinds():
    """List registered resource kinds and their condition sets."""
    registry = CRDRegistry()
    registry.discover_models()

    for key, info in sorted(registry.get_all_models().items()):
        condition_set = info["condition_set"]
        if condition_set is None:
            typer.echo(f"{key}: no conditions")
            continue
        dependents = ", ".join(sorted(condition_set.dependents))
        typer.echo(f"{key}: {condition_set.happy} <- {dependents}")


@app.command("status")
def show_status(
    manifest: Annotated[
        Path,
        typer.Argument(
            exists=True, dir_okay=False, readable=True, help="YAML manifest file"
        ),
    ],
):
    """Print conditions and readiness of the resources in a manifest.

    Exits with 1 when any resource is not ready.
    """
    registry = CRDRegistry()
    registry.discover_models()

    try:
        with open(manifest, "r") as f:
            resources = list(iter_resources(yaml.safe_load_all(f)))
    except (yaml.YAMLError, ValueError) as e:
        typer.echo(f"Could not parse {manifest}: {e}", err=True)
        raise typer.Exit(2)

    all_ready = True
    for resource in resources:
        kind = resource.get("kind")
        metadata = resource.get("metadata")
        if not isinstance(metadata, dict):
            metadata = {}
        ref = "/".join(str(x) for x in (metadata.get("namespace"), metadata.get("name")) if x)

        info = lookup_kind(registry, resource)
        if info is None or info["condition_set"] is None:
            typer.echo(f"Unknown kind: {kind}", err=True)
            raise typer.Exit(2)

        condition_set = info["condition_set"]
        status = resource.get("status") or {}
        try:
            happy = read_condition(status, condition_set.happy)
            conditions = [read_condition(status, t) for t in condition_set.types]
        except ValueError as e:
            typer.echo(f"Malformed conditions on {kind} {ref}: {e}", err=True)
            raise typer.Exit(2)

        ready = happy is not None and happy.is_true
        all_ready = all_ready and ready
        typer.echo(f"{kind} {ref}: {'Ready' if ready else 'NotReady'}")

        for condition_type, condition in zip(condition_set.types, conditions):
            if condition is None:
                typer.echo(f"  {condition_type:<16} <missing>")
                continue
            line = f"  {condition.type:<16} {condition.status.value:<8} {condition.reason} {condition.message}"
            typer.echo(line.rstrip())

    if not all_ready:
        raise typer.Exit(1)
