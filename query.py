#!/usr/bin/env python3
"""Ad hoc runner for the Ingredient Scan Service.

Run a single operation directly without starting the long-running service.

Usage:
    python query.py detect [--mode food|ingredient] IMAGE_PATH
    python query.py recipe "Chicken Adobo"
    python query.py match [--exact] [--catalog FILE] "garlic, onion, tomato"
    python query.py shopping [--catalog FILE] [--have "garlic, onion"] "Recipe Title" ["Other Title" ...]
    python query.py --debug recipe "Sinigang"   # Print full JSON

Features:
- Rich tables for detections, matches and shopping lists
- Markdown rendering for provider recipes
- Debug mode to display full JSON for any result
"""

import asyncio
import sys
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.markdown import Markdown
from rich.table import Table

from src.catalog.catalog import InMemoryRecipeCatalog
from src.models.models import MatchMode, RecipeDTO, ScanMode
from src.service.service import initialize_scan_service
from src.utils.config import config
from src.utils.errors import ScanServiceError
from src.utils.logger import logger

console = Console()

USAGE = """Usage: python query.py [--debug] <command> [options] <args>

Commands:
  detect   [--mode food|ingredient] IMAGE_PATH
  recipe   "FOOD NAME"
  match    [--exact] [--catalog FILE] "ingredient, ingredient, ..."
  shopping [--catalog FILE] [--have "ingredient, ..."] "RECIPE TITLE" ...

Examples:
  python query.py detect --mode ingredient images/fridge.jpg
  python query.py recipe "Chicken Adobo"
  python query.py match --catalog data/recipes.json "garlic, onion, tomato"
  python query.py shopping --catalog data/recipes.json --have "garlic" "Chicken Adobo"
"""


def split_names(text: str) -> List[str]:
    return [part.strip() for part in text.split(",") if part.strip()]


def recipe_markdown(recipe: RecipeDTO) -> str:
    lines = [f"# {recipe.title}", ""]
    if recipe.description:
        lines += [recipe.description, ""]
    lines += [
        f"*Source: {recipe.source_provider} · Prep {recipe.prep_minutes} min · "
        f"Cook {recipe.cook_minutes} min · Serves {recipe.servings}*",
        "",
        "## Ingredients",
    ]
    for ing in recipe.ingredients:
        quantity = " ".join(part for part in (ing.amount, ing.unit) if part)
        lines.append(f"- {quantity} {ing.name}".replace("-  ", "- "))
    lines += ["", "## Instructions"]
    lines += [f"{idx}. {step}" for idx, step in enumerate(recipe.steps, 1)]
    if recipe.note:
        lines += ["", f"> {recipe.note}"]
    return "\n".join(lines)


async def run_command(command: str, args: List[str], options: dict, debug: bool = False) -> None:
    catalog = InMemoryRecipeCatalog.from_json_file(options["catalog"]) if options.get("catalog") else None
    service = await initialize_scan_service(catalog=catalog)

    if command == "detect":
        image_file = Path(args[0])
        if not image_file.exists():
            console.print(f"[red]✗ Error: Image file not found: {image_file}[/red]")
            sys.exit(1)
        outcome = await service.detect(image_file.read_bytes(), ScanMode(options.get("mode", "ingredient")))
        if debug:
            console.print_json(outcome.model_dump_json())
            return
        if not outcome.items:
            style = "yellow" if outcome.retryable else "dim"
            console.print(f"[{style}]{outcome.message}[/{style}]")
            return
        table = Table(title=f"Detected ({outcome.mode.value} scan, overall {outcome.overall_confidence:.0%})")
        table.add_column("Item", style="bold")
        table.add_column("Category")
        table.add_column("Confidence", justify="right")
        for item in outcome.items:
            table.add_row(item.name, item.category.value, f"{item.confidence:.0%}")
        console.print(table)

    elif command == "recipe":
        recipe = await service.get_recipe_for_food(" ".join(args))
        if debug:
            console.print_json(recipe.model_dump_json())
        else:
            console.print(Markdown(recipe_markdown(recipe)))
        for quota in service.quota_status():
            console.print(f"[dim]{quota.provider_id}: {quota.remaining}/{quota.daily_limit} requests left today[/dim]")

    elif command == "match":
        mode = MatchMode.EXACT if options.get("exact") else MatchMode.PARTIAL
        results = await service.match_recipes(split_names(" ".join(args)), mode=mode)
        if debug:
            console.print_json(data=[r.model_dump(mode="json") for r in results])
            return
        if not results:
            console.print("[yellow]No matching recipes found[/yellow]")
            return
        table = Table(title=f"Recipe matches ({mode.value})")
        table.add_column("Recipe", style="bold")
        table.add_column("Score", justify="right")
        table.add_column("Rating", justify="right")
        table.add_column("Matched")
        table.add_column("Missing", style="red")
        for result in results:
            table.add_row(
                result.recipe_ref.title,
                f"{result.match_score:.0%}",
                f"{result.recipe_ref.average_rating:.1f}",
                ", ".join(result.matched_ingredients),
                ", ".join(result.missing_ingredients),
            )
        console.print(table)

    elif command == "shopping":
        titles = {title.strip().lower() for title in args}
        selected = [r for r in await service.catalog.find_by_names(args) if r.title.strip().lower() in titles]
        if not selected:
            console.print("[yellow]None of the given recipe titles are in the catalog[/yellow]")
            return
        items = await service.build_shopping_list(selected, split_names(options.get("have", "")))
        if debug:
            console.print_json(data=[i.model_dump() for i in items])
            return
        table = Table(title=f"Shopping list for {len(selected)} recipe(s)")
        table.add_column("Item", style="bold")
        table.add_column("Amount")
        table.add_column("Used in", justify="right")
        for item in items:
            table.add_row(item.name, f"{item.amount} {item.unit}".strip(), str(item.used_in_recipe_count))
        console.print(table)


def parse_args(argv: List[str]) -> Optional[tuple]:
    """Split argv into (debug, command, options, positional args). None on bad input."""
    debug = False
    idx = 0
    while idx < len(argv) and argv[idx] == "--debug":
        debug = True
        idx += 1

    if idx >= len(argv) or argv[idx] not in ("detect", "recipe", "match", "shopping"):
        return None
    command = argv[idx]
    idx += 1

    options = {}
    while idx < len(argv) and argv[idx].startswith("--"):
        flag = argv[idx]
        if flag == "--exact":
            options["exact"] = True
            idx += 1
        elif flag in ("--mode", "--catalog", "--have"):
            if idx + 1 >= len(argv):
                print(f"Error: {flag} flag requires a value")
                return None
            options[flag[2:]] = argv[idx + 1]
            idx += 2
        elif flag == "--debug":
            debug = True
            idx += 1
        else:
            print(f"Unknown flag: {flag}")
            return None

    args = argv[idx:]
    if not args:
        print(f"Error: {command} needs an argument")
        return None
    if options.get("mode") and options["mode"] not in ("food", "ingredient"):
        print(f"Error: --mode must be 'food' or 'ingredient', got: {options['mode']}")
        return None
    return debug, command, options, args


if __name__ == "__main__":
    parsed = parse_args(sys.argv[1:])
    if parsed is None:
        print(USAGE)
        sys.exit(1)

    debug_mode, command, options, args = parsed
    if not options.get("catalog") and config.RECIPE_CATALOG_FILE:
        options["catalog"] = config.RECIPE_CATALOG_FILE

    try:
        asyncio.run(run_command(command, args, options, debug=debug_mode))
    except KeyboardInterrupt:
        logger.info("\nQuery interrupted by user.")
        sys.exit(0)
    except ScanServiceError as e:
        console.print(f"[red]✗ {e}[/red]")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Query execution failed: {e}", exc_info=True)
        sys.exit(1)
