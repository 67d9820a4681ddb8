# -*- coding: utf-8 -*-
"""
Foodprint CLI
=============

Operator commands for the emissions engine and its reference store.
"""

import json
from datetime import date
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from foodprint._version import __version__
from foodprint.config.manager import ConfigManager, get_config
from foodprint.connectors.registry import build_sources
from foodprint.data.maintenance import (
    initialize_reference_data,
    populate_initial_data,
    update_local_database,
)
from foodprint.engine import EmissionsEngine, get_default_engine, open_reference_store
from foodprint.exceptions import ConfigurationError, FoodprintException, ValidationError
from foodprint.logging_config import setup_logging

app = typer.Typer(
    name="foodprint",
    help="Foodprint: carbon footprint estimates for dishes and ingredients",
    no_args_is_help=True,
    add_completion=False,
)
console = Console()


def _get_engine() -> EmissionsEngine:
    return get_default_engine()


@app.callback()
def _root(
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="Override the configured log level"
    ),
    config_path: Optional[Path] = typer.Option(
        None, "--config", help="YAML or JSON configuration file"
    ),
):
    """
    Foodprint - dish and ingredient emission estimates
    """
    if config_path is not None:
        try:
            ConfigManager.get_instance().load_from_file(config_path)
        except ConfigurationError as e:
            console.print(f"[red]Configuration error:[/red] {e}")
            raise typer.Exit(1)
    config = get_config()
    setup_logging(log_level or config.logging.level, config.logging.format, rich=True)


@app.command()
def version():
    """Show Foodprint version"""
    console.print(f"[bold green]Foodprint v{__version__}[/bold green]")


@app.command()
def calculate(
    dish_name: str = typer.Argument(..., help="Name of the dish"),
    ingredients: List[str] = typer.Argument(..., help="Ingredient names"),
    quantity: int = typer.Option(1, "--quantity", "-q", help="Number of servings"),
    country: str = typer.Option("global", "--country", "-c", help="Country of consumption"),
    detail_level: str = typer.Option(
        "standard", "--detail", "-d", help="basic, standard or detailed"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the raw JSON response"),
):
    """Estimate the emissions of a dish"""
    try:
        result = _get_engine().calculate(
            dish_name, ingredients, quantity=quantity, detail_level=detail_level, country=country
        )
    except ValidationError as e:
        console.print(f"[red]Invalid request:[/red] {e.message}")
        for field, problem in e.invalid_fields.items():
            console.print(f"  [yellow]{field}[/yellow]: {problem}")
        raise typer.Exit(1)

    if as_json:
        console.print(json.dumps(result, indent=2))
        return

    console.print(f"[bold]{dish_name}[/bold] x{quantity}")
    console.print(f"Total: [bold green]{result['total']}[/bold green] kg CO2e")
    console.print(f"Saved: [bold cyan]{result['saved']}[/bold cyan] kg CO2e")
    if "range" in result:
        console.print(
            f"Range: {result['range']['lower']} - {result['range']['upper']} kg CO2e "
            f"(confidence: {result['confidence']})"
        )

    if "ingredients" in result:
        table = Table(title="Ingredients")
        table.add_column("Ingredient", style="cyan")
        table.add_column("Category")
        table.add_column("Grams", justify="right")
        table.add_column("kg CO2e", justify="right", style="green")
        table.add_column("Confidence")
        table.add_column("Source")
        for item in result["ingredients"]:
            table.add_row(
                item["name"],
                item["category"],
                str(item["weight"]),
                str(item["emissions"]),
                item["confidence"],
                item["data_source"],
            )
        console.print(table)


@app.command()
def categorize(
    ingredient: str = typer.Argument(..., help="Ingredient to classify"),
    as_json: bool = typer.Option(False, "--json", help="Print JSON"),
):
    """Classify an ingredient against the taxonomy"""
    result = _get_engine().categorize(ingredient)
    if as_json:
        console.print(json.dumps(result, indent=2))
        return

    table = Table(title=f"Classification of {ingredient!r}")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    for key, value in result.items():
        table.add_row(key, str(value))
    console.print(table)


@app.command()
def factor(
    category: str = typer.Argument(..., help="Food category"),
    item: str = typer.Argument("default", help="Specific item"),
    country: str = typer.Option("global", "--country", "-c"),
):
    """Resolve one emission factor and show where it came from"""
    result = _get_engine().emission_factor(category, item, country)
    console.print(
        f"{result['category']}/{result['item']} ({result['country']}): "
        f"[bold green]{result['value']}[/bold green] kg CO2e/kg "
        f"via {result['tier']} ({result['source']})"
    )


@app.command()
def seasonality(
    ingredient: str = typer.Argument(..., help="Ingredient"),
    country: str = typer.Option("global", "--country", "-c"),
    on_date: Optional[str] = typer.Option(None, "--date", help="YYYY-MM-DD (default today)"),
):
    """Show the season and seasonal factor of an ingredient"""
    try:
        parsed = date.fromisoformat(on_date) if on_date else None
    except ValueError:
        console.print(f"[red]Invalid date:[/red] {on_date}")
        raise typer.Exit(1)

    result = _get_engine().seasonality(ingredient, country, parsed)
    console.print(
        f"{ingredient} in {result['country']} on {result['date']}: "
        f"[bold]{result['season']}[/bold] (factor {result['factor']})"
    )


@app.command("init-db")
def init_db(
    populate: bool = typer.Option(
        True, "--populate/--no-populate", help="Fill an empty factor store"
    ),
):
    """Create the reference store and seed it"""
    config = get_config()
    try:
        factor_store, adjustment_store = open_reference_store(config)
        seeded = initialize_reference_data(adjustment_store)
        written = 0
        if populate:
            sources = build_sources(
                config.sources, timeout=config.resolver.external_timeout_seconds
            )
            written = populate_initial_data(factor_store, sources)
    except FoodprintException as e:
        console.print(f"[red]Initialization failed:[/red] {e}")
        raise typer.Exit(1)

    table = Table(title="Reference store")
    table.add_column("Table", style="cyan")
    table.add_column("Rows inserted", justify="right")
    for name, count in seeded.items():
        table.add_row(name, str(count))
    table.add_row("emission_factors", str(written))
    console.print(table)


@app.command()
def refresh():
    """Pull updates from every external source"""
    config = get_config()
    try:
        factor_store, _ = open_reference_store(config)
        sources = build_sources(config.sources, timeout=config.resolver.external_timeout_seconds)
        written = update_local_database(factor_store, sources)
    except FoodprintException as e:
        console.print(f"[red]Refresh failed:[/red] {e}")
        raise typer.Exit(1)
    console.print(f"[green]Refreshed {written} emission factors[/green]")


def main():
    app()


if __name__ == "__main__":
    main()
