from __future__ import annotations

import json
import logging
import math
import re
from concurrent.futures import ThreadPoolExecutor
from typing import Annotated, Any, List, Optional, Tuple

from fastapi import APIRouter, Depends

from deps.services import get_gateway, get_store
from errors import BadRequest, InvalidGenerationResponse
from gateway import TextGenerationGateway
from grading import is_correct
from prompts import (
    build_feedback_prompt,
    build_hint_prompt,
    build_problem_prompt,
    build_solution_prompt,
)
from schemas.problems import (
    GenerateRequest,
    GenerateResponse,
    HistoryResponse,
    ProblemOut,
    ResetResponse,
    ScoreOut,
    SubmitRequest,
    SubmitResponse,
)
from store import HISTORY_LIMIT, ProblemSessionStore

logger = logging.getLogger("math-practice.problems")

router = APIRouter(prefix="/problem", tags=["problems"])

Store = Annotated[ProblemSessionStore, Depends(get_store)]
Gateway = Annotated[TextGenerationGateway, Depends(get_gateway)]

# models like to wrap JSON in prose or ``` fences; grab the outermost object/array
_JSON_OBJECT_RE = re.compile(r"\{[\s\S]*\}")
_JSON_ARRAY_RE = re.compile(r"\[[\s\S]*\]")

_INVALID_SUBMISSION_MSG = "Invalid submission payload."

# --- Parsing helpers ---------------------------------------------------------------


def _finite_number(value: Any) -> Optional[float]:
    """Number or numeric string -> float. None for anything else, NaN and inf included."""
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    elif not isinstance(value, (int, float)):
        return None
    try:
        num = float(value)
    except (ValueError, OverflowError):
        # huge JSON integers overflow rather than becoming inf
        return None
    return num if math.isfinite(num) else None


def parse_generated_problem(raw: str) -> Tuple[str, float]:
    m = _JSON_OBJECT_RE.search(raw or "")
    if not m:
        raise InvalidGenerationResponse(f"AI response did not contain a JSON object: {raw!r}")
    try:
        data = json.loads(m.group(0))
    except json.JSONDecodeError as e:
        raise InvalidGenerationResponse(f"Failed to parse AI response: {e}") from e

    if not isinstance(data, dict):
        raise InvalidGenerationResponse("AI response is not a JSON object")

    text = data.get("problem_text")
    answer = data.get("final_answer")
    if not isinstance(text, str) or not text.strip():
        raise InvalidGenerationResponse("AI response missing problem_text")
    if isinstance(answer, bool) or not isinstance(answer, (int, float, str)):
        raise InvalidGenerationResponse("AI response missing final_answer")

    final_answer = _finite_number(answer)
    if final_answer is None:
        raise InvalidGenerationResponse(f"Final answer must be a finite number, got {answer!r}")
    return text.strip(), final_answer


def parse_solution_steps(raw: str) -> Optional[List[str]]:
    """JSON array of strings -> list of steps; None when the text isn't one."""
    m = _JSON_ARRAY_RE.search(raw or "")
    if not m:
        logger.warning("solution steps missing JSON array: %r", raw)
        return None
    try:
        data = json.loads(m.group(0))
    except json.JSONDecodeError as e:
        logger.warning("failed to parse solution steps (%s): %r", e, raw)
        return None
    if not isinstance(data, list):
        return None
    return [s.strip() for s in data if isinstance(s, str)]


# --- Endpoints ---------------------------------------------------------------------


@router.post("", response_model=GenerateResponse)
def generate_problem(store: Store, gateway: Gateway, req: Optional[GenerateRequest] = None):
    req = req or GenerateRequest()

    raw = gateway.generate(build_problem_prompt(req.difficulty, req.problemType))
    problem_text, final_answer = parse_generated_problem(raw)

    session = store.create_session(
        problem_text,
        final_answer,
        difficulty=req.difficulty,
        problem_type=req.problemType,
    )
    logger.info("created session %s (%s/%s)", session.id, session.difficulty, session.problem_type)

    return GenerateResponse(
        sessionId=session.id,
        problem=ProblemOut(
            problem_text=session.problem_text,
            final_answer=session.correct_answer,
            difficulty=session.difficulty,
            problem_type=session.problem_type,
        ),
    )


@router.post("/submit", response_model=SubmitResponse)
def submit_answer(req: SubmitRequest, store: Store, gateway: Gateway):
    user_answer = _finite_number(req.userAnswer)
    if not req.sessionId or user_answer is None:
        raise BadRequest(
            f"sessionId={req.sessionId!r} userAnswer={req.userAnswer!r}",
            public_message=_INVALID_SUBMISSION_MSG,
        )

    # Grade against what we stored, never against anything the client sent
    session = store.get_session(req.sessionId)
    correct = is_correct(user_answer, session.correct_answer)

    context = f"Difficulty: {session.difficulty}"
    if session.problem_type:
        context += f", Type: {session.problem_type}"

    # All three must finish before we answer; any failure fails the request
    with ThreadPoolExecutor(max_workers=3) as pool:
        feedback_f = pool.submit(
            gateway.generate,
            build_feedback_prompt(
                f"{session.problem_text} ({context})",
                session.correct_answer,
                user_answer,
                correct,
            ),
        )
        hint_f = pool.submit(
            gateway.generate,
            build_hint_prompt(
                session.problem_text,
                session.correct_answer,
                None if correct else user_answer,
            ),
        )
        solution_f = pool.submit(
            gateway.generate,
            build_solution_prompt(session.problem_text, session.correct_answer),
        )
        feedback_text = feedback_f.result()
        hint_text = hint_f.result()
        solution_raw = solution_f.result()

    steps = parse_solution_steps(solution_raw) if solution_raw else None

    store.create_submission(
        session.id,
        user_answer,
        correct,
        feedback_text,
        hint_text=hint_text,
        solution_steps=steps,
    )

    return SubmitResponse(
        isCorrect=correct,
        feedback=feedback_text,
        hint=hint_text,
        solutionSteps=steps or [],
    )


@router.get("/history", response_model=HistoryResponse)
def problem_history(store: Store):
    return HistoryResponse(sessions=store.list_recent_sessions(HISTORY_LIMIT))


@router.get("/score", response_model=ScoreOut)
def problem_score(store: Store):
    return store.score_summary()


@router.post("/reset", response_model=ResetResponse)
def reset_problems(store: Store):
    store.reset_all()
    logger.info("all sessions and submissions deleted")
    return ResetResponse(success=True)
