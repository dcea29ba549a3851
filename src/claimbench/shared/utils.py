"""
Utilities Module - Common helper functions.
==========================================

Provides utility functions for:
- File I/O (JSON, JSONL, YAML)
- Directory management
- Concurrent fan-out that fails fast
"""

import asyncio
import json
from pathlib import Path
from typing import Any, Awaitable, Iterator, TypeVar

import yaml

from claimbench.shared.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


# ─────────────────────────────────────────────────────────────────────────────
# Directory Management
# ─────────────────────────────────────────────────────────────────────────────


def ensure_directory(path: Path) -> Path:
    """
    Ensure a directory exists, creating it if necessary.

    Args:
        path: Directory path

    Returns:
        The same path, for chaining
    """
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


# ─────────────────────────────────────────────────────────────────────────────
# File I/O
# ─────────────────────────────────────────────────────────────────────────────


def load_json(path: str | Path) -> Any:
    """
    Load JSON from file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        json.JSONDecodeError: If the file is not valid JSON
    """
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def save_json(path: str | Path, data: Any, indent: int = 2) -> None:
    """
    Save data as JSON, creating parent directories as needed.

    Args:
        path: Output file path
        data: JSON-serializable data
        indent: Indentation level
    """
    path = Path(path)
    ensure_directory(path.parent)

    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=indent, ensure_ascii=False)

    logger.debug(f"Saved JSON to {path}")


def load_jsonl(path: str | Path) -> Iterator[dict[str, Any]]:
    """
    Lazily load records from a JSONL file.

    Blank lines are skipped; invalid lines raise json.JSONDecodeError.
    """
    with open(path, encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if line:
                yield json.loads(line)


def load_yaml(path: str | Path) -> Any:
    """Load YAML from file."""
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f)


# ─────────────────────────────────────────────────────────────────────────────
# Concurrency
# ─────────────────────────────────────────────────────────────────────────────


async def gather_or_cancel(*aws: Awaitable[T]) -> list[T]:
    """
    Run awaitables concurrently and return results in argument order.

    If any of them fails (or the caller is cancelled) the remaining ones
    are cancelled before the error propagates.
    """
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
