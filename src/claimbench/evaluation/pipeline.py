"""
Pipeline Module - Contract for the RAG pipeline under test.
===========================================================
"""

import importlib
import inspect
from typing import Protocol, Sequence

from claimbench.shared.schemas import ContextChunk


class RagPipeline(Protocol):
    """A RAG pipeline: answers a question and returns the context it used."""

    async def generate(self, question: str) -> tuple[str, Sequence[ContextChunk]]:
        ...


def load_pipeline(spec: str) -> RagPipeline:
    """
    Resolve a pipeline from a ``module:attribute`` import string.

    Classes and zero-argument factory functions are called to obtain the
    pipeline instance; objects with a ``generate`` method are used as-is.

    Raises:
        ValueError: If the string is malformed or the target has no ``generate``
    """
    module_name, _, attribute = spec.partition(":")
    if not module_name or not attribute:
        raise ValueError(f"Pipeline must be given as 'module:attribute', got {spec!r}")

    target = getattr(importlib.import_module(module_name), attribute)

    if inspect.isclass(target) or not hasattr(target, "generate"):
        if not callable(target):
            raise ValueError(f"{spec} is neither a pipeline nor a pipeline factory")
        target = target()

    if not callable(getattr(target, "generate", None)):
        raise ValueError(f"{spec} does not provide a generate() method")
    return target
