from typing import Dict, List, Sequence, Tuple
from ..models import AttemptRecord, ProgressState, Question, TopicSummary

def weakness_score(record: AttemptRecord) -> int:
    """wrong=2, correct-with-hints=1, correct-no-hints=0 (last attempt only)."""
    if not record.last_was_correct:
        return 2
    return 1 if record.last_hints_used > 0 else 0

def summarize_topics(progress: ProgressState, session_questions: Sequence[Question]) -> List[TopicSummary]:
    """Rank the session's topics worst first.

    Only questions with an attempt record count. Correct answers that needed
    hints still count towards the needs-work score.
    """
    by_topic: Dict[Tuple[str, str], TopicSummary] = {}
    for q in session_questions:
        record = progress.attempts.get(q.id)
        if record is None:
            continue
        key = (q.unit, q.topic)
        group = by_topic.get(key)
        if group is None:
            group = by_topic[key] = TopicSummary(unit=q.unit, topic=q.topic)
        group.total += 1
        group.correct += 1 if record.last_was_correct else 0
        group.hints += record.last_hints_used
        group.weakness_total += weakness_score(record)

    ranked = list(by_topic.values())
    for t in ranked:
        t.accuracy = t.correct / t.total if t.total else 0.0
        t.weakness_avg = t.weakness_total / t.total if t.total else 0.0
    ranked.sort(key=lambda t: (-t.weakness_avg, t.accuracy))
    return ranked
