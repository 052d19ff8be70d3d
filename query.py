#!/usr/bin/env python3
"""Ad hoc runner for the Pantry Service pipelines.

Run recipe searches or receipt parses directly without starting the API server.

Usage:
    python query.py chicken rice garlic
    python query.py --debug chicken rice  # Show the per-query search trace
    python query.py --receipt images/receipt.jpg  # Parse a receipt photo with Gemini

Features:
- Direct pipeline execution (same code paths as the API routes)
- Recipes rendered as a table, receipt items as a list
- Debug mode to display the full JSON outcome
- Clean exit after completion
"""

import asyncio
import sys
from pathlib import Path

from rich.console import Console
from rich.table import Table

from pantry_service.exceptions import PantryServiceError
from pantry_service.receipts.gemini_parser import parse_receipt_with_gemini
from pantry_service.search.orchestrator import generate_recipes
from pantry_service.utils.logger import logger

console = Console()

USAGE = "Usage: python query.py [--debug] [--receipt PATH] [ingredient ...]"


def run_recipes(ingredients: list[str], debug: bool = False) -> None:
    """Search recipes for the given ingredients and print them."""
    logger.info(f"Generating recipes for: {', '.join(ingredients)}")
    outcome = asyncio.run(generate_recipes(ingredients))

    if debug:
        console.print("[bold cyan]Debug Mode: Full Outcome[/bold cyan]")
        console.print("[dim]" + "=" * 60 + "[/dim]")
        console.print_json(data=outcome.model_dump(mode="json", by_alias=True))
        console.print("[dim]" + "=" * 60 + "[/dim]")
        console.print()

    if outcome.fallback:
        console.print(f"[yellow]Search unavailable after {outcome.attempts} queries, showing catalog recipes[/yellow]")
    else:
        console.print(f"[green]✓ Query:[/green] {outcome.used_query} [dim]({outcome.attempts} tried)[/dim]")

    table = Table(title="Recipes")
    table.add_column("Title", style="bold")
    table.add_column("Source")
    table.add_column("URL", overflow="fold")
    for recipe in outcome.recipes:
        table.add_row(recipe.title, recipe.source, recipe.url)
    console.print(table)


def run_receipt(image_path: str, debug: bool = False) -> None:
    """Parse a receipt image and print the extracted items."""
    image_file = Path(image_path)
    if not image_file.exists():
        console.print(f"[red]✗ Error: Image file not found: {image_path}[/red]")
        sys.exit(1)

    logger.info(f"Loading image: {image_file.name}...")
    image_bytes = image_file.read_bytes()
    result = asyncio.run(parse_receipt_with_gemini(image_bytes))

    if debug:
        console.print_json(data=result.model_dump(mode="json"))

    console.print(f"[green]✓ {len(result.items)} items[/green] [dim](model: {result.model})[/dim]")
    for item in result.items:
        console.print(f"  • {item}")


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print(USAGE)
        print("")
        print("Examples:")
        print("  python query.py chicken rice garlic")
        print("  python query.py --debug chicken rice")
        print("  python query.py --receipt images/receipt.jpg")
        sys.exit(1)

    debug_mode = False
    receipt_path = None
    argv_start = 1

    while argv_start < len(sys.argv) and sys.argv[argv_start].startswith("--"):
        if sys.argv[argv_start] == "--debug":
            debug_mode = True
            argv_start += 1
        elif sys.argv[argv_start] == "--receipt":
            argv_start += 1
            if argv_start >= len(sys.argv):
                print("Error: --receipt flag requires a file path")
                sys.exit(1)
            receipt_path = sys.argv[argv_start]
            argv_start += 1
        else:
            print(f"Unknown flag: {sys.argv[argv_start]}")
            sys.exit(1)

    ingredients = sys.argv[argv_start:]
    if receipt_path is None and not ingredients:
        print("Error: No ingredients provided")
        print(USAGE)
        sys.exit(1)

    try:
        if receipt_path:
            run_receipt(receipt_path, debug=debug_mode)
        else:
            run_recipes(ingredients, debug=debug_mode)
    except KeyboardInterrupt:
        logger.info("\nQuery interrupted by user.")
        sys.exit(0)
    except (PantryServiceError, ValueError) as e:
        console.print(f"[red]✗ Error: {e}[/red]")
        sys.exit(1)
