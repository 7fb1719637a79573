import os
import logging
from typing import Any, Dict, List, Sequence
import orjson
from ..models import Question

logger = logging.getLogger("mcq_practice")

LOAD_HELP = (
    "Could not load question bank files.\n\n"
    "Make sure BOTH exist:\n"
    "- the bank index (e.g. public/data/index.json)\n"
    "- the files listed inside it (e.g. public/data/2024_p1.json)\n\n"
)

class LoadError(Exception):
    """Fatal problem with the bank index, a bank file, or the merged pool."""

    def __init__(self, source: str, cause: str) -> None:
        super().__init__(f"{source}: {cause}" if source else cause)
        self.source = source
        self.cause = cause

    def user_message(self) -> str:
        return LOAD_HELP + f"Details: {self}"

def _read_json(root: str, rel_path: str) -> Any:
    path = os.path.join(root, rel_path.lstrip("/"))
    try:
        with open(path, "rb") as f:
            raw = f.read()
    except FileNotFoundError:
        raise LoadError(rel_path, "file not found")
    except OSError as e:
        raise LoadError(rel_path, f"unreadable ({e.strerror or e})")
    try:
        return orjson.loads(raw)
    except orjson.JSONDecodeError as e:
        raise LoadError(rel_path, f"not valid JSON ({e})")

def _bank_files(index: Any, index_file: str) -> List[str]:
    files = index.get("files") if isinstance(index, dict) else None
    if not isinstance(files, list) or not files:
        raise LoadError(index_file, "has no files[] list")
    return [str(f) for f in files]

def merge_banks(banks: Sequence[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """First occurrence of an id wins; records without an id are dropped."""
    merged: List[Dict[str, Any]] = []
    seen: set[str] = set()
    for bank in banks:
        for raw in bank.get("questions") or []:
            if not isinstance(raw, dict) or not raw.get("id"):
                continue
            # ids compare as text, so 1 and "1" are one question
            qid = str(raw["id"])
            if qid in seen:
                continue
            seen.add(qid)
            merged.append(raw)
    return merged

def _to_questions(records: List[Dict[str, Any]]) -> List[Question]:
    # every record here has an id; the models default or coerce the rest
    return [Question.model_validate(raw) for raw in records]

def load_questions(data_dir: str, index_file: str) -> List[Question]:
    """Read the bank index, then every listed bank in order, and merge them.

    Bank paths in the index are resolved against ``data_dir``, the same root
    the index itself lives under. Any missing, malformed or empty source
    aborts the whole load with a LoadError naming that source.
    """
    index = _read_json(data_dir, index_file)
    files = _bank_files(index, index_file)
    banks: List[Dict[str, Any]] = []
    for rel_path in files:
        bank = _read_json(data_dir, rel_path)
        questions = bank.get("questions") if isinstance(bank, dict) else None
        if not isinstance(questions, list) or not questions:
            raise LoadError(rel_path, "loaded but had no questions[]")
        banks.append(bank)
        logger.debug({"event": "bank_read", "file": rel_path, "count": len(questions)})
    merged = _to_questions(merge_banks(banks))
    if not merged:
        raise LoadError("", "No questions found after merging banks")
    logger.info({"event": "banks_loaded", "files": len(files), "questions": len(merged)})
    return merged
