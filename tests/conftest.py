import json
import random
import pytest
from mcq_practice.models import Question
from mcq_practice.services.progress_store import FeedbackLog, ProgressStore
from mcq_practice.state import SessionEngine


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def raw_question(qid, unit="U1", topic="Waves", key="A", options=("one", "two", "three", "four")):
    return {
        "id": qid,
        "unit": unit,
        "topic": topic,
        "prompt": {"stem": f"Stem for {qid}", "options": list(options)},
        "answer": {"mcq_key": key},
        "socratic_hints": {
            "level1": [f"{qid} nudge"],
            "level2": [f"{qid} method"],
            "level3": [{"step": "Select", "content": "v = f λ", "mark_award": 1}],
        },
    }


def make_question(qid, **kwargs) -> Question:
    return Question.model_validate(raw_question(qid, **kwargs))


@pytest.fixture
def write_json(tmp_path):
    def _write(rel_path, payload):
        path = tmp_path / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(payload), encoding="utf-8")
        return path
    return _write


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def progress_store(tmp_path):
    return ProgressStore(str(tmp_path / "storage" / "progress.json"))


@pytest.fixture
def feedback_log(tmp_path):
    return FeedbackLog(str(tmp_path / "storage" / "feedback.json"))


@pytest.fixture
def make_engine(progress_store, feedback_log, clock):
    def _make(questions, seed=7, **kwargs):
        engine = SessionEngine(progress_store, feedback_log, rng=random.Random(seed), clock=clock, **kwargs)
        engine.attach(questions)
        return engine
    return _make
