"""Brand personality quiz: four fixed questions folded into one summary string."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Mapping, Optional, Tuple

from errors import QuizClosedError

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class QuizOption:
    label: str
    value: str
    description: str


@dataclass(frozen=True)
class QuizQuestion:
    id: str
    question: str
    options: Tuple[QuizOption, ...]

    def values(self) -> Tuple[str, ...]:
        return tuple(opt.value for opt in self.options)

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "question": self.question,
            "options": [
                {"label": o.label, "value": o.value, "description": o.description}
                for o in self.options
            ],
        }


QUESTIONS: Tuple[QuizQuestion, ...] = (
    QuizQuestion(
        id="heritage",
        question="How does your brand relate to tradition?",
        options=(
            QuizOption("Traditional", "established and reliable", "Rooted in history and proven methods."),
            QuizOption("Disruptive", "bold and groundbreaking", "Challenging the status quo."),
        ),
    ),
    QuizQuestion(
        id="relationship",
        question="What is the ideal relationship with your customer?",
        options=(
            QuizOption("The Expert", "guiding and professional", "A trusted authority in the field."),
            QuizOption("The Peer", "relatable and friendly", "Like a smart, helpful friend."),
        ),
    ),
    QuizQuestion(
        id="energy",
        question="What is the energy level of the brand?",
        options=(
            QuizOption("Calm & Zen", "calm, focused, and minimal", "Quiet efficiency and premium stillness."),
            QuizOption("Dynamic & High-Energy", "dynamic, experimental, and loud", "Vibrant, fast-paced, and bold."),
        ),
    ),
    QuizQuestion(
        id="visual_preference",
        question="Which visual style resonates most?",
        options=(
            QuizOption("Minimalist Luxury", "luxury minimalist", "Clean lines, lots of negative space."),
            QuizOption("Organic & Human", "organic and approachable", "Soft textures, hand-drawn elements."),
        ),
    ),
)


@dataclass(frozen=True)
class QuizStep:
    """Outcome of one answer: either the next question index or the final summary."""

    answers: Dict[str, str]
    index: Optional[int]
    summary: Optional[str] = None

    @property
    def done(self) -> bool:
        return self.summary is not None


def summarize(answers: Mapping[str, str], questions: Tuple[QuizQuestion, ...] = QUESTIONS) -> str:
    """Fold a complete answer set into the personality summary."""
    overall = ", ".join(answers[q.id] for q in questions)
    return (
        f"Preferred Brand Vibe: {answers['energy']}, "
        f"Style Preference: {answers['visual_preference']}, "
        f"Heritage: {answers['heritage']}, "
        f"Relationship: {answers['relationship']}. "
        f"Overall summary: {overall}."
    )


def advance(
    answers: Mapping[str, str],
    index: int,
    value: str,
    questions: Tuple[QuizQuestion, ...] = QUESTIONS,
) -> QuizStep:
    """Record ``value`` for question ``index`` and move on.

    Returns a new answer mapping; the input mapping is never mutated.
    """
    if not 0 <= index < len(questions):
        raise ValueError(f"question index {index} out of range 0..{len(questions) - 1}")
    question = questions[index]
    if value not in question.values():
        raise ValueError(f"{value!r} is not an option for question {question.id!r}")

    next_answers = {**answers, question.id: value}
    if index < len(questions) - 1:
        return QuizStep(next_answers, index + 1)
    return QuizStep(next_answers, None, summarize(next_answers, questions))


class BrandQuiz:
    """One pass through the quiz.

    ``on_complete`` receives the summary exactly once, after the last answer.
    ``close()`` abandons the quiz without calling it.
    """

    def __init__(
        self,
        on_complete: Callable[[str], None],
        on_close: Optional[Callable[[], None]] = None,
        questions: Tuple[QuizQuestion, ...] = QUESTIONS,
    ) -> None:
        self.on_complete = on_complete
        self.on_close = on_close
        self.questions = questions
        self.index = 0
        self.answers: Dict[str, str] = {}
        self.finished = False

    @property
    def current(self) -> Optional[QuizQuestion]:
        if self.finished:
            return None
        return self.questions[self.index]

    @property
    def progress(self) -> float:
        """Fraction shown on the progress bar: step N of M counts the current question."""
        if self.finished:
            return 1.0
        return (self.index + 1) / len(self.questions)

    def select(self, value: str) -> QuizStep:
        if self.finished:
            raise QuizClosedError("quiz is no longer open")
        step = advance(self.answers, self.index, value, self.questions)
        self.answers = step.answers
        if step.done:
            self.finished = True
            log.info("Quiz complete: %s", step.summary)
            self.on_complete(step.summary)
        else:
            self.index = step.index
        return step

    def close(self) -> None:
        if self.finished:
            return
        self.finished = True
        log.debug("Quiz closed at step %d of %d", self.index + 1, len(self.questions))
        if self.on_close:
            self.on_close()

    def to_dict(self) -> Dict:
        current = self.current
        return {
            "step": self.index + 1,
            "total": len(self.questions),
            "progress": self.progress,
            "question": current.to_dict() if current else None,
            "finished": self.finished,
        }
