from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import List, Optional

import sqlalchemy as sa
from sqlalchemy import JSON, Boolean, DateTime, Float, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db import Base


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(UTC)


class ProblemSession(Base):
    __tablename__ = "math_problem_sessions"
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, index=True
    )
    difficulty: Mapped[str] = mapped_column(String(16), default="medium")
    # older rows were written before problem types existed
    problem_type: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    problem_text: Mapped[str] = mapped_column(Text)
    correct_answer: Mapped[float] = mapped_column(Float)

    submissions: Mapped[List["Submission"]] = relationship(
        back_populates="session",
        order_by=lambda: Submission.created_at.desc(),
    )


class Submission(Base):
    __tablename__ = "math_problem_submissions"
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, index=True
    )
    session_id: Mapped[str] = mapped_column(
        ForeignKey("math_problem_sessions.id"), index=True
    )
    user_answer: Mapped[float] = mapped_column(Float)
    is_correct: Mapped[bool] = mapped_column(Boolean, default=False)
    feedback_text: Mapped[str] = mapped_column(Text, default="")
    hint_text: Mapped[Optional[str]] = mapped_column(sa.Text, nullable=True)
    solution_steps: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)

    session: Mapped[ProblemSession] = relationship(back_populates="submissions")
