"""Command-line entrypoints for StoichSim."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Annotated, Optional, Tuple

import typer

from stoichsim.catalog import ReactionCatalog, as_records, default_catalog, load_catalog, normalize_inputs
from stoichsim.config import Settings, load_settings
from stoichsim.errors import (
    CatalogError,
    InvalidQuantityError,
    PersistenceError,
    ReactionNotFoundError,
    UnknownUnitError,
)
from stoichsim.models import SimulationResult
from stoichsim.persistence import sqlite_store
from stoichsim.progress import progress_at, reactant_remaining
from stoichsim.stoichiometry import calculate_stoichiometry
from stoichsim.validation import validated_input

app = typer.Typer(add_completion=False)
logger = logging.getLogger(__name__)


@app.callback()
def main(
    ctx: typer.Context,
    config_file: Annotated[
        Optional[Path],
        typer.Option(
            "--config", exists=True, dir_okay=False, help="Path to JSON settings file."
        ),
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging.")] = False,
) -> None:
    """Stoichiometry simulator."""
    try:
        settings = load_settings(config_file)
    except (OSError, ValueError) as exc:
        # JSONDecodeError is a ValueError.
        raise typer.BadParameter(f"Cannot load settings: {exc}", param_hint="--config")
    level = logging.DEBUG if verbose else getattr(logging, settings.log_level, logging.WARNING)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")
    ctx.obj = settings


def _settings(ctx: typer.Context) -> Settings:
    return ctx.obj if isinstance(ctx.obj, Settings) else load_settings()


def _catalog(settings: Settings, catalog_file: Optional[Path]) -> ReactionCatalog:
    path = catalog_file or settings.catalog_path
    logger.debug("Using catalog %s", path or "<bundled>")
    try:
        return load_catalog(path) if path is not None else default_catalog()
    except (OSError, json.JSONDecodeError, CatalogError) as exc:
        typer.echo(f"Error loading reactions: {exc}", err=True)
        raise typer.Exit(code=1)


def _print_result(result: SimulationResult) -> None:
    reaction = result.reaction
    typer.echo(reaction.balanced_equation)
    typer.echo(f"Type: {reaction.reaction_type}")
    if reaction.enthalpy_kj is not None:
        kind = "exothermic" if reaction.is_exothermic else "endothermic"
        typer.echo(f"ΔH = {reaction.enthalpy_kj} kJ/mol ({kind})")
    typer.echo("")
    for step in result.calculation_steps:
        typer.echo(step)
    typer.echo("")
    typer.echo(f"Limiting reagent: {result.limiting_reagent_name}")
    for product in result.products_formed:
        typer.echo(f"  {product.name} ({product.formula}): {product.moles:.4f} mol, {product.mass:.4f} g")
    typer.echo(f"Theoretical yield: {result.theoretical_yield:.4f} g")
    excess = result.excess_reagent
    typer.echo(f"Excess {excess.name}: {excess.leftover_moles:.4f} mol ({excess.leftover_mass:.4f} g)")
    if reaction.observation:
        typer.echo(f"Observation: {reaction.observation}")


def _run_simulation(
    settings: Settings,
    catalog: ReactionCatalog,
    first: Tuple[str, float, str],
    second: Tuple[str, float, str],
) -> SimulationResult:
    first_name, first_quantity, first_unit = first
    second_name, second_quantity, second_unit = second
    try:
        reaction = catalog.find(first_name, second_name)
    except ReactionNotFoundError as exc:
        typer.echo(f"{exc}. This combination of reactants is not in the catalog.", err=True)
        raise typer.Exit(code=1)

    try:
        first_input = validated_input(first_quantity, first_unit, settings.strict_units)
        second_input = validated_input(second_quantity, second_unit, settings.strict_units)
    except (InvalidQuantityError, UnknownUnitError) as exc:
        raise typer.BadParameter(str(exc))

    # The engine expects catalog order; swap when the user picked B first.
    input_a, input_b = normalize_inputs(reaction, first_name, first_input, second_input)
    return calculate_stoichiometry(
        reaction, input_a.quantity, input_a.unit, input_b.quantity, input_b.unit
    )


@app.command()
def simulate(
    ctx: typer.Context,
    first: Annotated[str, typer.Argument(help="First reactant name.")],
    first_quantity: Annotated[float, typer.Argument(help="First reactant quantity.")],
    first_unit: Annotated[str, typer.Argument(help="grams, moles or mL.")],
    second: Annotated[str, typer.Argument(help="Second reactant name.")],
    second_quantity: Annotated[float, typer.Argument(help="Second reactant quantity.")],
    second_unit: Annotated[str, typer.Argument(help="grams, moles or mL.")],
    catalog_file: Annotated[
        Optional[Path], typer.Option("--catalog", help="JSON reaction catalog.")
    ] = None,
    save: Annotated[bool, typer.Option(help="Save the result to history.")] = False,
    history_file: Annotated[
        Optional[Path], typer.Option(help="SQLite history file.")
    ] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Print JSON output.")] = False,
) -> None:
    """Run a stoichiometry simulation for two reactants."""
    settings = _settings(ctx)
    result = _run_simulation(
        settings,
        _catalog(settings, catalog_file),
        (first, first_quantity, first_unit),
        (second, second_quantity, second_unit),
    )

    if as_json:
        typer.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    else:
        _print_result(result)

    if save:
        path = history_file or settings.history_file
        try:
            connection = sqlite_store.connect(path)
            try:
                sqlite_store.ensure_schema(connection)
                history_id = sqlite_store.save_simulation(connection, result)
            finally:
                connection.close()
        except PersistenceError as exc:
            typer.echo(str(exc), err=True)
            raise typer.Exit(code=1)
        typer.echo(f"Simulation saved (#{history_id}).", err=True)


@app.command()
def reactions(
    ctx: typer.Context,
    catalog_file: Annotated[
        Optional[Path], typer.Option("--catalog", help="JSON reaction catalog.")
    ] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Print JSON output.")] = False,
) -> None:
    """List the reactions in the catalog."""
    catalog = _catalog(_settings(ctx), catalog_file)
    if as_json:
        typer.echo(json.dumps(as_records(catalog), indent=2, ensure_ascii=False))
        return
    for reaction in catalog:
        typer.echo(f"{reaction.balanced_equation}  [{reaction.reaction_type}]")


@app.command()
def partners(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Reactant name.")],
    catalog_file: Annotated[
        Optional[Path], typer.Option("--catalog", help="JSON reaction catalog.")
    ] = None,
) -> None:
    """List reactants that react with NAME."""
    catalog = _catalog(_settings(ctx), catalog_file)
    found = catalog.partners(name)
    if not found:
        typer.echo(f"No reactions with {name}.", err=True)
        raise typer.Exit(code=1)
    for partner in found:
        typer.echo(partner)


@app.command()
def history(
    ctx: typer.Context,
    history_file: Annotated[
        Optional[Path], typer.Option(help="SQLite history file.")
    ] = None,
    limit: Annotated[Optional[int], typer.Option(help="Show at most N entries.")] = None,
) -> None:
    """Show saved simulations, newest first."""
    path = history_file or _settings(ctx).history_file
    try:
        connection = sqlite_store.connect(path)
        try:
            sqlite_store.ensure_schema(connection)
            entries = sqlite_store.list_history(connection, limit=limit)
            summary = sqlite_store.history_summary(connection)
        finally:
            connection.close()
    except PersistenceError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1)

    typer.echo(
        f"{summary['simulations']} simulations, {summary['distinct_reactions']} reactions,"
        f" {summary['total_yield']:.2f}g total yield"
    )
    for entry in entries:
        leftover = entry.get("leftover_reagent") or {}
        typer.echo(
            f"#{entry['id']} {entry['created_at']} {entry['balanced_equation']}"
            f" | limiting: {entry['limiting_reagent']}"
            f" | yield: {entry['theoretical_yield']:.4f} g"
            f" | leftover: {leftover.get('name', '-')} {leftover.get('mass', 0.0):.4f} g"
        )


@app.command()
def delete(
    ctx: typer.Context,
    history_id: Annotated[int, typer.Argument(help="History entry ID.")],
    history_file: Annotated[
        Optional[Path], typer.Option(help="SQLite history file.")
    ] = None,
) -> None:
    """Delete a saved simulation."""
    path = history_file or _settings(ctx).history_file
    try:
        connection = sqlite_store.connect(path)
        try:
            sqlite_store.ensure_schema(connection)
            deleted = sqlite_store.delete_simulation(connection, history_id)
        finally:
            connection.close()
    except PersistenceError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1)
    if not deleted:
        typer.echo(f"No simulation #{history_id}.", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"Simulation #{history_id} deleted.")


@app.command()
def progress(
    ctx: typer.Context,
    first: Annotated[str, typer.Argument(help="First reactant name.")],
    first_quantity: Annotated[float, typer.Argument(help="First reactant quantity.")],
    first_unit: Annotated[str, typer.Argument(help="grams, moles or mL.")],
    second: Annotated[str, typer.Argument(help="Second reactant name.")],
    second_quantity: Annotated[float, typer.Argument(help="Second reactant quantity.")],
    second_unit: Annotated[str, typer.Argument(help="grams, moles or mL.")],
    elapsed_ms: Annotated[float, typer.Option(help="Playback time (ms).")] = 0.0,
    catalog_file: Annotated[
        Optional[Path], typer.Option("--catalog", help="JSON reaction catalog.")
    ] = None,
) -> None:
    """Show reaction progress after ELAPSED_MS of playback."""
    settings = _settings(ctx)
    result = _run_simulation(
        settings,
        _catalog(settings, catalog_file),
        (first, first_quantity, first_unit),
        (second, second_quantity, second_unit),
    )
    reaction = result.reaction
    percent = progress_at(
        elapsed_ms, step=settings.progress_step, interval_ms=settings.frame_interval_ms
    )
    remaining_a, remaining_b = reactant_remaining(result, percent)
    payload = {
        "progress": percent,
        reaction.reactant_a.name: remaining_a,
        reaction.reactant_b.name: remaining_b,
        "products": percent,
    }
    typer.echo(json.dumps(payload, indent=2, ensure_ascii=False))
