from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

Difficulty = Literal["easy", "medium", "hard"]
ProblemType = Literal["mixed", "addition", "subtraction", "multiplication", "division"]

# ---------- Records (store -> handlers) ----------


def _as_utc(value: datetime | None) -> datetime | None:
    # SQLite drops the offset on timezone-aware columns; everything is stored as UTC
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class SubmissionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: str
    created_at: datetime | None
    session_id: str
    user_answer: float
    is_correct: bool
    feedback_text: str
    hint_text: Optional[str] = None
    solution_steps: Optional[List[str]] = None

    @field_validator("created_at")
    @classmethod
    def created_at_utc(cls, v: datetime | None) -> datetime | None:
        return _as_utc(v)


class SessionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: str
    created_at: datetime | None
    difficulty: Difficulty = "medium"
    problem_type: Optional[ProblemType] = None
    problem_text: str
    correct_answer: float

    @field_validator("created_at")
    @classmethod
    def created_at_utc(cls, v: datetime | None) -> datetime | None:
        return _as_utc(v)


class SessionWithSubmissions(SessionOut):
    # newest first; the front end reads the nested rows under the table name
    submissions: List[SubmissionOut] = Field(
        default_factory=list,
        validation_alias=AliasChoices("submissions", "math_problem_submissions"),
        serialization_alias="math_problem_submissions",
    )


class ScoreOut(BaseModel):
    totalAttempts: int
    correctAnswers: int
    accuracy: float


# ---------- Generate ----------


class GenerateRequest(BaseModel):
    difficulty: Difficulty = "medium"
    problemType: ProblemType = "mixed"


class ProblemOut(BaseModel):
    problem_text: str
    final_answer: float
    difficulty: Difficulty
    problem_type: Optional[ProblemType] = None


class GenerateResponse(BaseModel):
    sessionId: str
    problem: ProblemOut


# ---------- Submit ----------


class SubmitRequest(BaseModel):
    # Checked by the handler so that a bad payload is a 400 with our message
    sessionId: Optional[str] = None
    userAnswer: Any = None


class SubmitResponse(BaseModel):
    isCorrect: bool
    feedback: str
    hint: Optional[str] = None
    solutionSteps: List[str] = Field(default_factory=list)


# ---------- History / reset ----------


class HistoryResponse(BaseModel):
    sessions: List[SessionWithSubmissions]


class ResetResponse(BaseModel):
    success: bool
