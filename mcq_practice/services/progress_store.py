import os
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List
import orjson
from pydantic import TypeAdapter, ValidationError
from ..models import AttemptRecord, FeedbackEntry, ProgressState, Question

logger = logging.getLogger("mcq_practice")

_feedback_list = TypeAdapter(List[FeedbackEntry])

def utc_iso(now: datetime | None = None) -> str:
    stamp = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return stamp.isoformat(timespec="milliseconds").replace("+00:00", "Z")

def _read_document(path: str) -> Any:
    """Parsed JSON at ``path``, or None when absent or unreadable."""
    if not os.path.exists(path):
        return None
    try:
        with open(path, "rb") as f:
            return orjson.loads(f.read())
    except (OSError, orjson.JSONDecodeError):
        logger.warning({"event": "storage_unreadable", "path": path})
        return None

def _write_document(path: str, payload: Any) -> None:
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(path, "wb") as f:
        f.write(orjson.dumps(payload, option=orjson.OPT_INDENT_2))

class ProgressStore:
    """Durable per-question attempt history, persisted as one JSON document."""

    def __init__(self, path: str) -> None:
        self.path = path

    def load(self) -> ProgressState:
        """Stored attempts; unreadable entries are dropped one by one, not the whole store."""
        raw = _read_document(self.path)
        if raw is None:
            return ProgressState()
        attempts = raw.get("attempts") if isinstance(raw, dict) else None
        if not isinstance(attempts, dict):
            logger.warning({"event": "progress_corrupt", "path": self.path})
            return ProgressState()
        kept: Dict[str, AttemptRecord] = {}
        for qid, entry in attempts.items():
            try:
                kept[qid] = AttemptRecord.model_validate(entry)
            except ValidationError:
                logger.warning({"event": "attempt_record_dropped", "path": self.path, "question_id": qid})
        return ProgressState(attempts=kept)

    def save(self, state: ProgressState) -> None:
        _write_document(self.path, state.model_dump(mode="json", by_alias=True))

    def record_attempt(self, question: Question, correct: bool, hints_used: int, time_spent_sec: int, now: datetime | None = None) -> ProgressState:
        state = self.load()
        existing = state.attempts.get(question.id) or AttemptRecord(unit=question.unit, topic=question.topic)
        updated = existing.model_copy(update={
            "times": existing.times + 1,
            "correct_count": existing.correct_count + (1 if correct else 0),
            "hints_total": existing.hints_total + hints_used,
            "time_total_sec": existing.time_total_sec + time_spent_sec,
            "last_was_correct": bool(correct),
            "last_hints_used": hints_used,
            "last_attempt_iso": utc_iso(now),
            "unit": question.unit,
            "topic": question.topic,
        })
        attempts = dict(state.attempts)
        attempts[question.id] = updated
        new_state = ProgressState(attempts=attempts)
        self.save(new_state)
        logger.debug({"event": "attempt_recorded", "question_id": question.id, "correct": bool(correct), "hints_used": hints_used, "times": updated.times})
        return new_state

    def reset(self) -> ProgressState:
        try:
            os.remove(self.path)
        except FileNotFoundError:
            pass
        logger.info({"event": "progress_reset", "path": self.path})
        return self.load()

class FeedbackLog:
    """Append-only list of issue reports. Only ever written by the engine."""

    def __init__(self, path: str) -> None:
        self.path = path

    def load(self) -> List[FeedbackEntry]:
        raw = _read_document(self.path)
        if raw is None:
            return []
        try:
            return _feedback_list.validate_python(raw)
        except ValidationError:
            logger.warning({"event": "feedback_corrupt", "path": self.path})
            return []

    def append(self, entry: FeedbackEntry) -> List[FeedbackEntry]:
        entries = self.load()
        entries.append(entry)
        _write_document(self.path, [e.model_dump(mode="json", by_alias=True) for e in entries])
        logger.info({"event": "feedback_saved", "question_id": entry.question_id})
        return entries
