#!/usr/bin/env python3
"""Ad hoc runner for the OCR structuring pipeline.

Structure a saved recognition result without going through the app.

Usage:
    python ocr_query.py INGREDIENTS samples/ingredients.json
    python ocr_query.py --debug PREPARATION samples/steps.json  # Also show the raw recognition

The JSON file holds an OcrResult dump:
    {"text": "...", "blocks": [{"text": "...", "lines": [{"text": "..."}]}]}
"""

import sys
from pathlib import Path
from typing import Any, List, Optional

from pydantic import BaseModel, ValidationError
from rich.console import Console

from recipedia.models.models import OcrResult, RecipeField
from recipedia.ocr.dispatcher import recognize_field
from recipedia.ocr.transformers import OcrParseError
from recipedia.utils.logger import logger

console = Console()

USAGE = "Usage: python ocr_query.py [--debug] FIELD ocr.json"


def parse_field(name: str) -> Optional[RecipeField]:
    """Resolve "ingredients", "INGREDIENTS" or "IMAGE_SOURCE" to a RecipeField."""
    normalized = name.strip().upper()
    for field in RecipeField:
        if normalized in (field.name, field.value):
            return field
    return None


def load_ocr_result(path: Path) -> OcrResult:
    """Read an OcrResult JSON dump.

    Raises:
        FileNotFoundError: If the file does not exist.
        pydantic.ValidationError: If the JSON is not an OcrResult.
    """
    return OcrResult.model_validate_json(path.read_text(encoding="utf-8"))


def to_jsonable(value: Any) -> Any:
    """Convert recognized values (models, lists of models) to plain JSON data."""
    if isinstance(value, BaseModel):
        return value.model_dump()
    if isinstance(value, list):
        return [to_jsonable(item) for item in value]
    return value


def run_ocr_query(field: RecipeField, path: Path, debug: bool = False) -> int:
    """Structure the recognition stored at `path` as `field` and print it.

    Returns:
        Process exit code.
    """
    try:
        ocr = load_ocr_result(path)
    except FileNotFoundError:
        console.print(f"[red]✗ Error: OCR file not found: {path}[/red]")
        return 1
    except ValidationError as e:
        logger.error(f"Invalid OCR file {path}: {e}")
        return 1

    if debug:
        console.print("[bold cyan]Debug Mode: Recognition Input[/bold cyan]")
        console.print("[dim]" + "=" * 60 + "[/dim]")
        console.print_json(data=ocr.model_dump())
        console.print("[dim]" + "=" * 60 + "[/dim]")
        console.print()

    try:
        value = recognize_field(ocr, field)
    except OcrParseError as e:
        console.print(f"[red]✗ Could not structure {field.value}: {e}[/red]")
        return 1

    console.print(f"[bold green]{field.value}[/bold green]")
    console.print_json(data=to_jsonable(value))
    return 0


def main(argv: List[str]) -> int:
    debug_mode = False
    args = list(argv)
    while args and args[0].startswith("--"):
        flag = args.pop(0)
        if flag == "--debug":
            debug_mode = True
        else:
            print(f"Unknown flag: {flag}")
            return 1

    if len(args) != 2:
        print(USAGE)
        print("")
        print("Fields: " + ", ".join(field.name for field in RecipeField))
        return 1

    field = parse_field(args[0])
    if field is None:
        print(f"Unknown field: {args[0]}")
        return 1

    return run_ocr_query(field, Path(args[1]), debug=debug_mode)


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
