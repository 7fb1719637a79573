import threading
from concurrent.futures import ThreadPoolExecutor
import pytest
from fastapi.testclient import TestClient
from mcq_practice import main
from mcq_practice.services.repository import LoadError
from mcq_practice.state import SessionEngine
from conftest import make_question


@pytest.fixture
def client(monkeypatch, make_engine):
    questions = [make_question("q1", key="B", options=("10^3 J", "5 m s-1")), make_question("q2", key="A")]
    engine = make_engine(questions)
    monkeypatch.setattr(main, "engine", engine)
    return TestClient(main.app)


def test_full_session_over_http(client):
    view = client.get("/api/session").json()
    assert view["phase"] == "in_progress"
    assert (view["position"], view["length"], view["bank_size"]) == (1, 2, 2)

    for _ in range(2):
        client.post("/api/session/hint")
        client.post("/api/session/select", json={"letter": "A"})
        view = client.post("/api/session/submit").json()
        assert view["submitted"] is True
        assert view["correct_key"] in ("A", "B")
        view = client.post("/api/session/next").json()

    assert view["phase"] == "finished"
    assert view["question"] is None
    topics = client.get("/api/summary").json()
    assert [t["topic"] for t in view["summary"]] == [t["topic"] for t in topics] == ["Waves"]
    assert topics[0]["hints"] == 2


def test_html_rendering_is_opt_in(client):
    main.engine.start_session()
    while main.engine.current_question.id != "q1":
        main.engine.start_session()
    plain = client.get("/api/session").json()["question"]["options"]
    html = client.get("/api/session", params={"html": True}).json()["question"]["options"]
    assert plain[0]["text"] == "10^3 J"
    assert html[0]["text"] == "10<sup>3</sup> J"
    assert html[1]["text"] == "5 m s<sup>−1</sup>"


def test_feedback_requires_a_note(client):
    assert client.post("/api/feedback", json={"note": "  "}).status_code == 400
    entry = client.post("/api/feedback", json={"note": "diagram missing"}).json()
    assert entry["note"] == "diagram missing"
    assert entry["questionId"] == main.engine.current_question.id


def test_reset_progress_clears_summary(client):
    client.post("/api/session/select", json={"letter": "A"})
    client.post("/api/session/submit")
    assert client.get("/api/summary").json()
    client.post("/api/progress/reset")
    assert client.get("/api/summary").json() == []


def test_load_failure_is_reported(monkeypatch, progress_store, feedback_log):
    engine = SessionEngine(progress_store, feedback_log)
    engine.fail(LoadError("data/2024_p1.json", "file not found"))
    monkeypatch.setattr(main, "engine", engine)

    response = TestClient(main.app).post("/api/session/start")

    assert response.status_code == 503
    assert "data/2024_p1.json" in response.json()["detail"]


def test_concurrent_submits_record_one_attempt(client, progress_store):
    main.engine.select_option("A")
    qid = main.engine.current_question.id

    with ThreadPoolExecutor(max_workers=8) as pool:
        views = list(pool.map(lambda _: main.submit_answer(), range(16)))

    assert all(v.submitted for v in views)
    assert progress_store.load().attempts[qid].times == 1


def test_routes_wait_for_the_engine_lock(client):
    main.engine_lock.acquire()
    try:
        worker = threading.Thread(target=main.request_hint)
        worker.start()
        worker.join(timeout=0.2)
        assert worker.is_alive()
        assert main.engine.hint_level == 0
    finally:
        main.engine_lock.release()
    worker.join(timeout=5)
    assert not worker.is_alive()
    assert main.engine.hint_level == 1
