"""
Ground Truth Module - Question/answer datasets for evaluation.
==============================================================

Supported formats:
- JSON: a list of objects, or {"questions": [...]}
- JSONL: one object per line
- YAML: same shapes as JSON

Each object needs a question (``question`` or ``query``) and an answer
(``answer`` or ``ground_truth``).
"""

from pathlib import Path
from typing import Any, Iterator

from claimbench.shared.logging import get_logger
from claimbench.shared.utils import load_json, load_jsonl, load_yaml

logger = get_logger(__name__)

_QUESTION_KEYS = ("question", "query")
_ANSWER_KEYS = ("answer", "ground_truth", "ground_truth_answer")


def _first_present(item: dict[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        if key in item:
            return item[key]
    return None


def _to_pair(item: Any, index: int) -> tuple[str, str]:
    if not isinstance(item, dict):
        raise ValueError(f"Ground truth entry {index} is not an object: {item!r}")

    question = _first_present(item, _QUESTION_KEYS)
    answer = _first_present(item, _ANSWER_KEYS)
    if not isinstance(question, str) or not isinstance(answer, str):
        raise ValueError(f"Ground truth entry {index} needs a question and an answer")

    return question, answer


class GroundTruthDataset:
    """
    Lazy, restartable sequence of (question, answer) pairs.

    The file is read again on every iteration.

    Example:
        >>> dataset = GroundTruthDataset("data/ground_truth.jsonl")
        >>> for question, answer in dataset:
        ...     print(question)
    """

    SUFFIXES = (".json", ".jsonl", ".yaml", ".yml")

    def __init__(self, path: str | Path):
        self.path = Path(path)

        if not self.path.exists():
            raise FileNotFoundError(f"Ground truth file not found: {self.path}")
        if self.path.suffix.lower() not in self.SUFFIXES:
            raise ValueError(f"Unsupported ground truth format: {self.path.suffix}")

    def _records(self) -> Iterator[Any]:
        suffix = self.path.suffix.lower()

        if suffix == ".jsonl":
            yield from load_jsonl(self.path)
            return

        data = load_json(self.path) if suffix == ".json" else load_yaml(self.path)
        if isinstance(data, dict):
            data = data.get("questions", [])
        if not isinstance(data, list):
            raise ValueError(f"Ground truth file {self.path} does not contain a list")
        yield from data

    def __iter__(self) -> Iterator[tuple[str, str]]:
        for index, item in enumerate(self._records()):
            yield _to_pair(item, index)


def load_ground_truth(path: str | Path) -> GroundTruthDataset:
    """
    Open a ground truth dataset.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file format is not supported
    """
    logger.info(f"Loading ground truth from {path}")
    return GroundTruthDataset(path)
