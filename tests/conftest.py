import os
import tempfile
import threading

# Point the app at a throwaway SQLite file before db.py builds its engine
_DB_DIR = tempfile.mkdtemp(prefix="math-practice-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{_DB_DIR}/test.db"
os.environ["GOOGLE_API_KEY"] = "test-key"

import pytest  # noqa: E402

import models  # noqa: E402,F401
from db import Base, SessionLocal, engine  # noqa: E402
from deps.services import get_gateway  # noqa: E402
from main import app  # noqa: E402
from store import ProblemSessionStore  # noqa: E402

Base.metadata.create_all(engine)


class FakeGateway:
    """
    Stands in for TextGenerationGateway. Answers by prompt kind so the three
    concurrent submit calls each get their own canned text.
    """

    def __init__(
        self,
        problem='{"problem_text":"2+2","final_answer":4}',
        feedback="Great work!",
        hint="Try adding the numbers.",
        solution='["Add 2 and 2.", "The answer is 4."]',
        error=None,
    ):
        self.problem = problem
        self.feedback = feedback
        self.hint = hint
        self.solution = solution
        self.error = error
        self.prompts = []
        self._lock = threading.Lock()

    def generate(self, prompt):
        with self._lock:
            self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        if prompt.startswith("Create a Primary 5"):
            return self.problem
        if prompt.startswith("Provide a step-by-step solution"):
            return self.solution
        if prompt.startswith("You are helping"):
            return self.hint
        return self.feedback


@pytest.fixture(autouse=True)
def clean_db():
    ProblemSessionStore(SessionLocal).reset_all()
    yield


@pytest.fixture
def store():
    return ProblemSessionStore(SessionLocal)


@pytest.fixture
def fake_gateway():
    fake = FakeGateway()
    app.dependency_overrides[get_gateway] = lambda: fake
    yield fake
    app.dependency_overrides.pop(get_gateway, None)
