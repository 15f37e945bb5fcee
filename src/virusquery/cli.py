"""Command-line interface for virusquery."""

import json
import logging
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from virusquery.config import load_settings
from virusquery.exceptions import VirusQueryError
from virusquery.filters.pipeline import FilterRequest, apply_filters
from virusquery.models.mutation import Mutation
from virusquery.models.mutation_set import MutationSet
from virusquery.schema.registry import SchemaRegistry
from virusquery.viruses.registry import default_virus_registry

# Load environment variables from .env file
load_dotenv()

app = typer.Typer(
    name="virusquery",
    help="Per-virus query schemas and mutation set filtering for drug resistance analysis",
    add_completion=False,
)

console = Console()


def setup_logging(verbose: bool = False) -> None:
    """Setup logging configuration.

    Args:
        verbose: Enable debug logging
    """
    level = logging.DEBUG if verbose else load_settings(dotenv=False).log_level

    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, console=console)],
    )


def load_mutations(path: Path, virus_name: str, gene: Optional[str]):
    """Load mutations from a JSON list of strings (RT:M184V) or Mutation records."""
    config = default_virus_registry().get(virus_name)
    with open(path, "r") as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise ValueError("Input must be a JSON list of mutations")

    texts = [item for item in data if isinstance(item, str)]
    mutations, errors = MutationSet.from_strings(texts, gene=gene, virus=config)
    records = [Mutation(**item) for item in data if isinstance(item, dict)]
    return mutations.union(MutationSet(records)), errors


@app.command()
def viruses() -> None:
    """List registered viruses."""
    table = Table(title="Viruses")
    table.add_column("Virus", style="bold")
    table.add_column("Genes")
    table.add_column("Drug classes")
    table.add_column("Default algorithm")
    for config in default_virus_registry():
        table.add_row(
            config.name,
            ", ".join(config.gene_names),
            ", ".join(config.drug_class_names),
            config.default_algorithm or "-",
        )
    console.print(table)


@app.command()
def schema(
    virus: str = typer.Argument(..., help="Virus name (e.g., HIV1)"),
    type_name: Optional[str] = typer.Option(None, "--type", "-t", help="Render only this type"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output file path"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
) -> None:
    """Render the schema of a virus.

    Example:
        virusquery schema HIV1 --type SequenceAnalysis
    """
    setup_logging(verbose)

    try:
        variant_schema = SchemaRegistry(default_virus_registry()).get(virus)
        text = variant_schema.to_sdl([type_name] if type_name else None)
    except VirusQueryError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    if output:
        output.write_text(text + "\n")
        console.print(f"[green]Saved to {output}[/green]")
    else:
        console.print(text, highlight=False, markup=False)


@app.command(name="filter")
def filter_mutations(
    input_file: Path = typer.Argument(..., help="Input JSON file with mutations"),
    virus: str = typer.Option("HIV1", "--virus", help="Virus the mutations belong to"),
    filter_options: list[str] = typer.Option(
        [], "--filter", "-f", help="Filter option (e.g., DRM), repeatable"
    ),
    include_genes: list[str] = typer.Option(
        [], "--include-gene", help="Keep only mutations of this gene, repeatable"
    ),
    drug_class: Optional[str] = typer.Option(None, "--drug-class", help="Drug class (e.g., NRTI)"),
    mutation_type: Optional[str] = typer.Option(None, "--mutation-type", help="Mutation type"),
    custom: list[str] = typer.Option([], "--custom", help="Custom list mutation, repeatable"),
    gene: Optional[str] = typer.Option(None, "--gene", help="Gene of mutations without a prefix"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output JSON file path"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
) -> None:
    """Filter a mutation list.

    Input JSON format:
    ["RT:M184V", "PR:L90M", {"gene": "RT", "position": 103, "amino_acids": "N"}]

    Example:
        virusquery filter mutations.json --filter DRM --include-gene RT
    """
    setup_logging(verbose)

    if not input_file.exists():
        console.print(f"[red]Error: Input file not found: {input_file}[/red]")
        raise typer.Exit(1)

    try:
        config = default_virus_registry().get(virus)
        mutations, errors = load_mutations(input_file, virus, gene)
        request = FilterRequest(
            filter_options=tuple(filter_options),
            include_genes=frozenset(include_genes) if include_genes else None,
            drug_class=drug_class,
            mutation_type=mutation_type,
            custom_list=tuple(custom),
        )
        result = apply_filters(mutations, request, config, gene=gene)
    except (VirusQueryError, ValueError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    table = Table(title=f"{len(result.mutations)} of {len(mutations)} mutations")
    table.add_column("Gene")
    table.add_column("Mutation", style="bold")
    table.add_column("Type")
    table.add_column("DRM class")
    for mutation in result.mutations:
        table.add_row(
            mutation.gene,
            mutation.short_text,
            mutation.primary_type or "-",
            mutation.drm_drug_class or "-",
        )
    console.print(table)

    for validation in [*errors, *result.validation_results]:
        console.print(validation.to_report(), markup=False)

    if output:
        with open(output, "w") as f:
            json.dump(result.mutations.to_json(), f, indent=2)
        console.print(f"[green]Saved to {output}[/green]")


@app.command()
def version() -> None:
    """Show version information."""
    from virusquery import __version__

    console.print(f"virusquery version {__version__}")


if __name__ == "__main__":
    app()
