import pytest
from mcq_practice.models import AttemptRecord, ProgressState
from mcq_practice.services.summary import summarize_topics, weakness_score
from conftest import make_question


def record(correct, hints, unit="U1", topic="Waves"):
    return AttemptRecord(times=1, correct_count=int(correct), last_was_correct=correct, last_hints_used=hints, unit=unit, topic=topic)


@pytest.mark.parametrize("correct,hints,expected", [(True, 0, 0), (True, 2, 1), (False, 0, 2), (False, 3, 2)])
def test_weakness_score(correct, hints, expected):
    assert weakness_score(record(correct, hints)) == expected


def test_groups_by_unit_and_topic_and_ranks_worst_first():
    questions = [
        make_question("a1", unit="U1", topic="Waves"),
        make_question("a2", unit="U1", topic="Waves"),
        make_question("b1", unit="U2", topic="Waves"),
        make_question("c1", unit="U1", topic="Optics"),
    ]
    progress = ProgressState(attempts={
        "a1": record(True, 0),
        "a2": record(False, 1),
        "b1": record(True, 2),
        "c1": record(True, 0),
    })

    ranked = summarize_topics(progress, questions)

    assert [(t.unit, t.topic) for t in ranked] == [("U1", "Waves"), ("U2", "Waves"), ("U1", "Optics")]
    waves = ranked[0]
    assert (waves.total, waves.correct, waves.hints, waves.weakness_total) == (2, 1, 1, 2)
    assert waves.accuracy == 0.5
    assert waves.weakness_avg == 1.0


def test_equal_weakness_prefers_lower_accuracy():
    questions = [
        make_question("x1", topic="Hinted"),
        make_question("x2", topic="Hinted"),
        make_question("y1", topic="Mixed"),
        make_question("y2", topic="Mixed"),
    ]
    progress = ProgressState(attempts={
        "x1": record(True, 1),
        "x2": record(True, 1),
        "y1": record(False, 0),
        "y2": record(True, 0),
    })
    ranked = summarize_topics(progress, questions)
    assert [t.topic for t in ranked] == ["Mixed", "Hinted"]


def test_unanswered_and_out_of_session_questions_are_ignored():
    progress = ProgressState(attempts={"other": record(False, 0)})
    assert summarize_topics(progress, [make_question("q1")]) == []
