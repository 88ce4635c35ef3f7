# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/metaldata/cli/app.py
from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer
import yaml

from metaldata.config.loader import load_settings
from metaldata.config.models import Settings
from metaldata.errors import DataError, NotFoundError, StoreError, TerminalError
from metaldata.ipam.address import compute_address
from metaldata.ipam.mask import mask_for
from metaldata.logging.log import init_logging
from metaldata.models import AddressRange, Metal3Data, Metal3IPPool, Secret
from metaldata.observers.dispatcher import EventBus
from metaldata.observers.jsonfile import JsonFileObserver
from metaldata.observers.logger import LoggerObserver
from metaldata.reconcile.controller import DataReconciler
from metaldata.reconcile.manager import DataManager, DataState
from metaldata.store.memory import MemoryStore

# ------------------------------------------------------------------------------
# CLI setup
# ------------------------------------------------------------------------------

app = typer.Typer(help="Render Metal3 metadata and network data documents")

EXIT_ERROR = 1
EXIT_PENDING = 2


def _load_bundle(bundle: Path) -> MemoryStore:
    with bundle.open(encoding="utf-8") as f:
        documents = list(yaml.safe_load_all(f))
    return MemoryStore.from_documents(documents)


def _open_store(bundle: Optional[Path], settings: Settings):
    if bundle is not None:
        return _load_bundle(bundle)
    from metaldata.store.kube import KubeStore, load_api_client

    return KubeStore(load_api_client(settings.kube_context))


def _pick_data(store, name: Optional[str], namespace: str) -> Metal3Data:
    if name:
        return store.get(Metal3Data, name, namespace)
    if not isinstance(store, MemoryStore):
        raise typer.BadParameter("--name is required without a bundle")
    candidates = store.list(Metal3Data, namespace)
    if len(candidates) != 1:
        raise typer.BadParameter(
            f"bundle holds {len(candidates)} Metal3Data in {namespace}, pass --name"
        )
    return candidates[0]


def _bus(logger, events: Optional[Path]) -> EventBus:
    observers: List = [LoggerObserver(logger)]
    if events is not None:
        observers.append(JsonFileObserver(events))
    return EventBus(observers)


def _write_documents(store, data: Metal3Data, out: Path) -> None:
    out.mkdir(parents=True, exist_ok=True)
    for ref, key in ((data.spec.meta_data, "metaData"), (data.spec.network_data, "networkData")):
        if ref is None or not ref.name:
            continue
        try:
            secret = store.get(Secret, ref.name, data.metadata.namespace)
        except NotFoundError:
            # the template has no section for this document
            typer.echo(f"  skipped {ref.name}: not rendered")
            continue
        path = out / f"{ref.name}.yaml"
        path.write_bytes(secret.payload(key))
        typer.echo(f"  wrote {path}")


# ------------------------------------------------------------------------------
# Commands
# ------------------------------------------------------------------------------

@app.command()
def reconcile(
    bundle: Optional[Path] = typer.Argument(
        None, exists=True, dir_okay=False,
        help="Multi-document YAML of objects; omit to talk to the cluster",
    ),
    name: Optional[str] = typer.Option(None, "--name", help="Metal3Data name"),
    namespace: Optional[str] = typer.Option(None, "--namespace", "-n"),
    out: Optional[Path] = typer.Option(None, "--out", help="Write rendered documents here"),
    config: Optional[Path] = typer.Option(None, "--config", help="Settings YAML"),
    events: Optional[Path] = typer.Option(None, "--events", help="Append events as JSON lines"),
    log_dir: Optional[Path] = typer.Option(None, "--log-dir"),
    debug: bool = typer.Option(False, "--debug"),
):
    """Run one reconciliation pass for a Metal3Data."""
    settings = load_settings(config)
    namespace = namespace or settings.namespace
    logger, run_id, log_path = init_logging(
        base_dir=log_dir or settings.log_dir,
        verbose=debug,
        target=f"{namespace}/{name}" if name else None,
    )

    try:
        store = _open_store(bundle, settings)
        data = _pick_data(store, name, namespace)
        reconciler = DataReconciler(
            store, settings=settings, bus=_bus(logger, events), run_id=run_id,
        )
        result = reconciler.reconcile(data.metadata.namespace, data.metadata.name)
    except StoreError as e:
        typer.secho(f"store error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(EXIT_ERROR)

    typer.echo(f"{data.metadata.namespace}/{data.metadata.name}: {result.state.value}")
    typer.echo(f"  Run ID   : {run_id}")
    typer.echo(f"  Logs     : {log_path}")

    if result.state is DataState.ERRORED:
        typer.secho(f"  error: {result.error}", fg=typer.colors.RED, err=True)
        raise typer.Exit(EXIT_ERROR)
    if result.requeue:
        typer.echo(f"  retry after {result.requeue_after:g}s")
        raise typer.Exit(EXIT_PENDING)

    if out is not None:
        _write_documents(store, store.get(Metal3Data, data.metadata.name, data.metadata.namespace), out)


@app.command()
def release(
    bundle: Optional[Path] = typer.Argument(None, exists=True, dir_okay=False),
    name: Optional[str] = typer.Option(None, "--name"),
    namespace: Optional[str] = typer.Option(None, "--namespace", "-n"),
    config: Optional[Path] = typer.Option(None, "--config"),
    log_dir: Optional[Path] = typer.Option(None, "--log-dir"),
    debug: bool = typer.Option(False, "--debug"),
):
    """Release the IP pool claims held by a Metal3Data."""
    settings = load_settings(config)
    namespace = namespace or settings.namespace
    logger, run_id, _ = init_logging(
        base_dir=log_dir or settings.log_dir,
        verbose=debug,
        target=f"{namespace}/{name}" if name else None,
    )

    try:
        store = _open_store(bundle, settings)
        data = _pick_data(store, name, namespace)
        manager = DataManager(
            store, data, settings=settings, bus=_bus(logger, None), run_id=run_id,
        )
        result = manager.release_leases()
    except DataError as e:
        typer.secho(f"error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(EXIT_ERROR)

    if isinstance(store, MemoryStore):
        for pool in store.list(Metal3IPPool, data.metadata.namespace):
            owners = ", ".join(ref.name for ref in pool.metadata.owner_references) or "-"
            typer.echo(f"  {pool.metadata.name}: owners={owners}")

    if result.requeue:
        typer.echo(f"  retry after {result.requeue_after:g}s")
        raise typer.Exit(EXIT_PENDING)
    typer.echo(f"{data.metadata.namespace}/{data.metadata.name}: released")


@app.command()
def address(
    offset: int = typer.Option(..., "--offset", help="Position inside the range"),
    start: Optional[str] = typer.Option(None, "--start"),
    end: Optional[str] = typer.Option(None, "--end"),
    subnet: Optional[str] = typer.Option(None, "--subnet"),
):
    """Compute the address at OFFSET in a pool range."""
    try:
        typer.echo(compute_address(AddressRange(start=start, end=end, subnet=subnet), offset))
    except TerminalError as e:
        typer.secho(str(e), fg=typer.colors.RED, err=True)
        raise typer.Exit(EXIT_ERROR)


@app.command()
def netmask(
    prefix: int = typer.Argument(..., help="Prefix length"),
    ipv6: bool = typer.Option(False, "--ipv6"),
):
    """Print the netmask for a prefix length."""
    try:
        typer.echo(mask_for(prefix, not ipv6))
    except TerminalError as e:
        typer.secho(str(e), fg=typer.colors.RED, err=True)
        raise typer.Exit(EXIT_ERROR)


if __name__ == "__main__":
    app()
