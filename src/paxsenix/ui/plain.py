"""
plain.py

PURPOSE: Console output formatting for the CLI.
DEPENDENCIES: rich

ARCHITECTURE NOTES:
This module provides formatted console output using Rich.
It handles:
- Model listings
- Completion text, whole or streamed piece by piece
- Errors, including HTTP error bodies
"""

import json
from typing import Any

from rich.console import Console
from rich.markdown import Markdown
from rich.table import Table

from paxsenix.errors import HttpStatusError

# Global console instance
console = Console()


def print_models(models: Any) -> None:
    """Print a /v1/models response as a table."""
    entries = models.get("data", []) if isinstance(models, dict) else []
    table = Table(title="Available models")
    table.add_column("ID", style="bold cyan")
    table.add_column("Owner")
    for entry in entries:
        table.add_row(str(entry.get("id", "?")), str(entry.get("owned_by", "")))
    console.print(table)


def completion_text(response: Any) -> str:
    """Pull the assistant text out of a chat completion response."""
    try:
        return response["choices"][0]["message"]["content"] or ""
    except (KeyError, IndexError, TypeError):
        return json.dumps(response, indent=2, default=str)


def delta_text(chunk: Any) -> str:
    """Pull the incremental text out of a streamed chunk, if any."""
    try:
        return chunk["choices"][0]["delta"].get("content") or ""
    except (KeyError, IndexError, TypeError, AttributeError):
        return ""


def print_completion(response: Any) -> None:
    """Print a whole completion, rendered as markdown."""
    console.print(Markdown(completion_text(response)))


def print_delta(chunk: Any) -> None:
    """Print the text of one streamed chunk without a newline."""
    text = delta_text(chunk)
    if text:
        console.print(text, end="", markup=False, highlight=False)


def print_error(error: Exception | str) -> None:
    """Print an error message, with the body of HTTP errors."""
    console.print(f"Error: {error}", style="red", markup=False)
    if isinstance(error, HttpStatusError) and error.data is not None:
        console.print(json.dumps(error.data, indent=2, default=str), style="dim", markup=False)
