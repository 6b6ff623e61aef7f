from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload, sessionmaker

from errors import NotFound, StorageFailure
from grading import accuracy
from models import ProblemSession, Submission
from schemas.problems import ScoreOut, SessionOut, SessionWithSubmissions, SubmissionOut

logger = logging.getLogger("math-practice.store")

HISTORY_LIMIT = 20


class ProblemSessionStore:
    """
    Sessions and submissions. Returns pydantic records; ORM rows never leave
    the DB session that loaded them.
    """

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    @contextmanager
    def _db(self, op: str) -> Iterator[Session]:
        db = self._session_factory()
        try:
            yield db
        except SQLAlchemyError as e:
            db.rollback()
            logger.error("store.%s failed: %s", op, e)
            raise StorageFailure(f"{op}: {type(e).__name__}: {e}") from e
        finally:
            db.close()

    # --- sessions ---

    def create_session(
        self,
        problem_text: str,
        correct_answer: float,
        difficulty: str = "medium",
        problem_type: Optional[str] = None,
    ) -> SessionOut:
        with self._db("create_session") as db:
            row = ProblemSession(
                problem_text=problem_text,
                correct_answer=float(correct_answer),
                difficulty=difficulty,
                problem_type=problem_type,
            )
            db.add(row)
            db.commit()
            db.refresh(row)
            return SessionOut.model_validate(row)

    def get_session(self, session_id: str) -> SessionOut:
        with self._db("get_session") as db:
            row = db.get(ProblemSession, session_id)
            if row is None:
                raise NotFound(
                    f"session {session_id!r} does not exist",
                    public_message="Problem session not found.",
                )
            return SessionOut.model_validate(row)

    def list_recent_sessions(self, limit: int = HISTORY_LIMIT) -> List[SessionWithSubmissions]:
        with self._db("list_recent_sessions") as db:
            rows = db.scalars(
                select(ProblemSession)
                .options(selectinload(ProblemSession.submissions))
                .order_by(ProblemSession.created_at.desc())
                .limit(limit)
            ).all()
            return [SessionWithSubmissions.model_validate(r) for r in rows]

    # --- submissions ---

    def create_submission(
        self,
        session_id: str,
        user_answer: float,
        is_correct: bool,
        feedback_text: str,
        hint_text: Optional[str] = None,
        solution_steps: Optional[List[str]] = None,
    ) -> SubmissionOut:
        with self._db("create_submission") as db:
            row = Submission(
                session_id=session_id,
                user_answer=float(user_answer),
                is_correct=bool(is_correct),
                feedback_text=feedback_text,
                hint_text=hint_text,
                solution_steps=solution_steps,
            )
            db.add(row)
            db.commit()
            db.refresh(row)
            return SubmissionOut.model_validate(row)

    # --- aggregate ---

    def score_summary(self) -> ScoreOut:
        with self._db("score_summary") as db:
            total = db.scalar(select(func.count(Submission.id))) or 0
            correct = (
                db.scalar(select(func.count(Submission.id)).where(Submission.is_correct))
                or 0
            )
        return ScoreOut(totalAttempts=total, correctAnswers=correct, accuracy=accuracy(correct, total))

    def reset_all(self) -> None:
        with self._db("reset_all") as db:
            # submissions reference sessions, so they go first
            db.execute(delete(Submission))
            db.execute(delete(ProblemSession))
            db.commit()
