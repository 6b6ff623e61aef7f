from fastapi.testclient import TestClient

from errors import GenerationFailure
from main import app

client = TestClient(app)


def _new_session(store, answer=10.0):
    return store.create_session("Ali has 4 apples and buys 6 more.", answer, "easy", "addition")


def test_submit_correct_answer(fake_gateway, store):
    s = _new_session(store)
    r = client.post("/problem/submit", json={"sessionId": s.id, "userAnswer": 10})
    assert r.status_code == 200
    body = r.json()
    assert body["isCorrect"] is True
    assert body["feedback"] == "Great work!"
    assert body["hint"] == "Try adding the numbers."
    assert body["solutionSteps"] == ["Add 2 and 2.", "The answer is 4."]


def test_submit_within_tolerance_and_string_answer(fake_gateway, store):
    s = _new_session(store)
    r = client.post("/problem/submit", json={"sessionId": s.id, "userAnswer": "10.005"})
    assert r.status_code == 200
    assert r.json()["isCorrect"] is True


def test_submit_incorrect_answer_hint_mentions_attempt(fake_gateway, store):
    s = _new_session(store)
    r = client.post("/problem/submit", json={"sessionId": s.id, "userAnswer": 12})
    assert r.status_code == 200
    assert r.json()["isCorrect"] is False

    hint_prompts = [p for p in fake_gateway.prompts if p.startswith("You are helping")]
    assert len(hint_prompts) == 1
    assert "currently at this answer: 12" in hint_prompts[0]


def test_submit_correct_answer_hint_omits_attempt(fake_gateway, store):
    s = _new_session(store)
    client.post("/problem/submit", json={"sessionId": s.id, "userAnswer": 10})
    hint_prompt = next(p for p in fake_gateway.prompts if p.startswith("You are helping"))
    assert "currently at this answer" not in hint_prompt


def test_submit_grades_against_stored_answer(fake_gateway, store):
    s = _new_session(store, answer=10)
    r = client.post(
        "/problem/submit",
        json={"sessionId": s.id, "userAnswer": 99, "correctAnswer": 99},
    )
    assert r.status_code == 200
    assert r.json()["isCorrect"] is False


def test_submit_persists_submission(fake_gateway, store):
    s = _new_session(store)
    client.post("/problem/submit", json={"sessionId": s.id, "userAnswer": 7})

    sessions = store.list_recent_sessions()
    assert len(sessions) == 1
    subs = sessions[0].submissions
    assert len(subs) == 1
    assert subs[0].user_answer == 7
    assert subs[0].is_correct is False
    assert subs[0].hint_text == "Try adding the numbers."
    assert subs[0].solution_steps == ["Add 2 and 2.", "The answer is 4."]


def test_submit_unparseable_steps_fall_back_to_empty(fake_gateway, store):
    fake_gateway.solution = "Step 1: add. Step 2: done."
    s = _new_session(store)
    r = client.post("/problem/submit", json={"sessionId": s.id, "userAnswer": 10})
    assert r.status_code == 200
    assert r.json()["solutionSteps"] == []
    assert store.list_recent_sessions()[0].submissions[0].solution_steps is None


def test_submit_steps_drop_non_strings(fake_gateway, store):
    fake_gateway.solution = '["  Add 4 and 6. ", 3, null, "Answer: 10"]'
    s = _new_session(store)
    r = client.post("/problem/submit", json={"sessionId": s.id, "userAnswer": 10})
    assert r.json()["solutionSteps"] == ["Add 4 and 6.", "Answer: 10"]


def test_submit_missing_session_id_is_400(fake_gateway, store):
    r = client.post("/problem/submit", json={"userAnswer": 10})
    assert r.status_code == 400
    assert r.json()["error"] == "Invalid submission payload."
    assert client.get("/problem/score").json()["totalAttempts"] == 0
    assert fake_gateway.prompts == []


def test_submit_non_numeric_answer_is_400(fake_gateway, store):
    s = _new_session(store)
    for bad in ("ten", None, "", True, "nan", "inf"):
        r = client.post("/problem/submit", json={"sessionId": s.id, "userAnswer": bad})
        assert r.status_code == 400, bad
    assert client.get("/problem/score").json()["totalAttempts"] == 0


def test_submit_malformed_body_is_400(fake_gateway):
    r = client.post(
        "/problem/submit", content=b"not json", headers={"content-type": "application/json"}
    )
    assert r.status_code == 400


def test_submit_unknown_session_is_404(fake_gateway):
    r = client.post("/problem/submit", json={"sessionId": "does-not-exist", "userAnswer": 1})
    assert r.status_code == 404
    assert r.json()["error"] == "Problem session not found."


def test_submit_generation_failure_is_500_and_not_persisted(fake_gateway, store):
    s = _new_session(store)
    fake_gateway.error = GenerationFailure("no endpoint")
    r = client.post("/problem/submit", json={"sessionId": s.id, "userAnswer": 10})
    assert r.status_code == 500
    assert client.get("/problem/score").json()["totalAttempts"] == 0


def test_submit_oversized_integer_is_400(fake_gateway, store):
    s = _new_session(store)
    huge = "1" + "0" * 400
    r = client.post(
        "/problem/submit",
        content=f'{{"sessionId": "{s.id}", "userAnswer": {huge}}}',
        headers={"content-type": "application/json"},
    )
    assert r.status_code == 400
    assert r.json()["error"] == "Invalid submission payload."
    assert client.get("/problem/score").json()["totalAttempts"] == 0
