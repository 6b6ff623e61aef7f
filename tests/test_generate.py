from fastapi.testclient import TestClient

from errors import GenerationFailure, InvalidGenerationResponse
from main import app

client = TestClient(app)


def test_health():
    r = client.get("/")
    assert r.status_code == 200
    assert r.json().get("ok") is True


def test_generate_creates_session(fake_gateway, store):
    r = client.post("/problem")
    assert r.status_code == 200
    body = r.json()
    assert isinstance(body["sessionId"], str) and body["sessionId"]
    assert body["problem"]["problem_text"] == "2+2"
    assert body["problem"]["final_answer"] == 4

    saved = store.get_session(body["sessionId"])
    assert saved.correct_answer == 4
    assert saved.difficulty == "medium"
    assert saved.problem_type == "mixed"


def test_generate_passes_difficulty_and_type(fake_gateway):
    r = client.post("/problem", json={"difficulty": "hard", "problemType": "division"})
    assert r.status_code == 200
    problem = r.json()["problem"]
    assert problem["difficulty"] == "hard"
    assert problem["problem_type"] == "division"
    assert "Difficulty: hard" in fake_gateway.prompts[0]
    assert "division" in fake_gateway.prompts[0]


def test_generate_rejects_unknown_difficulty(fake_gateway):
    r = client.post("/problem", json={"difficulty": "impossible"})
    assert r.status_code == 400
    assert "error" in r.json()
    assert fake_gateway.prompts == []


def test_generate_accepts_fenced_json_and_string_answer(fake_gateway):
    fake_gateway.problem = '```json\n{"problem_text": " Share 10 sweets. ", "final_answer": "2.5"}\n```'
    r = client.post("/problem")
    assert r.status_code == 200
    problem = r.json()["problem"]
    assert problem["problem_text"] == "Share 10 sweets."
    assert problem["final_answer"] == 2.5


def test_generate_non_json_is_500_and_not_persisted(fake_gateway):
    fake_gateway.problem = "Sorry, I can't help with that."
    r = client.post("/problem")
    assert r.status_code == 500
    assert "error" in r.json()

    history = client.get("/problem/history").json()
    assert history["sessions"] == []


def test_generate_missing_fields_is_500(fake_gateway):
    fake_gateway.problem = '{"problem_text": "2+2"}'
    r = client.post("/problem")
    assert r.status_code == 500
    assert client.get("/problem/history").json()["sessions"] == []


def test_generate_non_numeric_answer_is_500(fake_gateway):
    fake_gateway.problem = '{"problem_text": "2+2", "final_answer": "four"}'
    r = client.post("/problem")
    assert r.status_code == 500


def test_generate_backend_failure_hides_detail(fake_gateway):
    fake_gateway.error = GenerationFailure("[v1 generateText] quota exceeded for key abc")
    r = client.post("/problem")
    assert r.status_code == 500
    assert "quota" not in r.json()["error"]


def test_generate_oversized_integer_answer_is_500(fake_gateway):
    fake_gateway.problem = '{"problem_text": "Count the stars.", "final_answer": 1' + "0" * 400 + "}"
    r = client.post("/problem")
    assert r.status_code == 500
    assert r.json()["error"] == InvalidGenerationResponse.public_message
    assert client.get("/problem/history").json()["sessions"] == []
