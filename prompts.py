# Prompt text for the generative backend.
# Everything here is pure string building; no I/O.

from __future__ import annotations

from typing import Optional

DEFAULT_DIFFICULTY = "medium"
DEFAULT_PROBLEM_TYPE = "mixed"

_DIFFICULTY_GUIDANCE = {
    "easy": "Keep the numbers small and friendly (whole numbers below 1000).",
    "medium": "Use numbers a typical Primary 5 student would meet, which may include simple fractions or decimals.",
    "hard": "Make it challenging for a strong Primary 5 student, with larger numbers, fractions or decimals.",
}

_TYPE_GUIDANCE = {
    "mixed": "Any combination of the four operations is allowed.",
    "addition": "The problem should mainly practise addition.",
    "subtraction": "The problem should mainly practise subtraction.",
    "multiplication": "The problem should mainly practise multiplication.",
    "division": "The problem should mainly practise division.",
}


def _fmt_number(x: float) -> str:
    if abs(x - round(x)) < 1e-12:
        return str(int(round(x)))
    return str(x)


def build_problem_prompt(
    difficulty: str = DEFAULT_DIFFICULTY, problem_type: str = DEFAULT_PROBLEM_TYPE
) -> str:
    return " ".join(
        [
            "Create a Primary 5 level math word problem that aligns with the Singapore Mathematics syllabus.",
            f"Difficulty: {difficulty}. {_DIFFICULTY_GUIDANCE.get(difficulty, '')}",
            _TYPE_GUIDANCE.get(problem_type, ""),
            'Respond strictly as minified JSON with two properties: "problem_text" (string) and "final_answer" (number).',
            "Ensure the problem requires at most two computation steps and has a final numerical answer.",
            "Do not include any additional commentary, formatting, or markdown code fences.",
        ]
    )


def build_feedback_prompt(
    problem_text: str, correct_answer: float, user_answer: float, is_correct: bool
) -> str:
    return " ".join(
        [
            "You are a supportive Primary 5 mathematics tutor.",
            f'A student attempted the following problem: "{problem_text}".',
            f"The correct answer is {_fmt_number(correct_answer)}. "
            f"The student answered {_fmt_number(user_answer)}.",
            (
                "Congratulate them briefly and reinforce the strategy that led to the correct answer."
                if is_correct
                else "Explain where their reasoning likely went wrong and offer a clear tip "
                "to reach the correct answer next time."
            ),
            "Keep the tone encouraging, concise, and actionable.",
            "Do not mention you are an AI. Respond in 2-4 sentences.",
        ]
    )


def build_hint_prompt(
    problem_text: str, correct_answer: float, user_answer: Optional[float] = None
) -> str:
    """
    A nudge towards the method. The correct answer is only given to the model so
    it knows what *not* to reveal.
    """
    if user_answer is not None:
        nudge = (
            f"The student is currently at this answer: {_fmt_number(user_answer)}. "
            "Provide a helpful hint that nudges them towards the correct approach "
            f"without giving away the final answer ({_fmt_number(correct_answer)})."
        )
    else:
        nudge = (
            "Provide a helpful hint that nudges the student towards the correct approach "
            "without giving away the final answer."
        )
    return " ".join(
        [
            "You are helping a Primary 5 student with a math word problem.",
            f'Problem: "{problem_text}".',
            nudge,
            "Keep the hint to 2 sentences and focus on strategy rather than the final numeric solution.",
        ]
    )


def build_solution_prompt(problem_text: str, correct_answer: float) -> str:
    return " ".join(
        [
            "Provide a step-by-step solution for the following Primary 5 math problem.",
            f'Problem: "{problem_text}".',
            f"Final answer: {_fmt_number(correct_answer)}.",
            "Return the response strictly as a JSON array of strings where each string is one "
            "concise step (do not include numbering or markdown).",
        ]
    )
