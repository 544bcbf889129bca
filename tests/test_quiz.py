import itertools

import pytest

from errors import QuizClosedError
from quiz import QUESTIONS, BrandQuiz, advance, summarize

ALL_PATHS = list(itertools.product(*(q.values() for q in QUESTIONS)))


def test_catalog_is_fixed():
    assert [q.id for q in QUESTIONS] == ["heritage", "relationship", "energy", "visual_preference"]
    assert all(len(q.options) == 2 for q in QUESTIONS)


def test_advance_moves_to_next_question_without_summary():
    step = advance({}, 0, "bold and groundbreaking")
    assert step.index == 1
    assert step.summary is None
    assert not step.done
    assert step.answers == {"heritage": "bold and groundbreaking"}


def test_advance_does_not_mutate_answers():
    answers = {"heritage": "established and reliable"}
    advance(answers, 1, "relatable and friendly")
    assert answers == {"heritage": "established and reliable"}


def test_advance_rejects_unknown_option_and_index():
    with pytest.raises(ValueError):
        advance({}, 0, "calm, focused, and minimal")
    with pytest.raises(ValueError):
        advance({}, 4, "luxury minimalist")
    with pytest.raises(ValueError):
        advance({}, -1, "established and reliable")


@pytest.mark.parametrize("path", ALL_PATHS)
def test_summary_lists_values_in_fixed_order(path):
    answers, index, step = {}, 0, None
    for value in path:
        step = advance(answers, index, value)
        answers, index = step.answers, step.index

    heritage, relationship, energy, visual = path
    assert step.done and step.index is None
    summary = step.summary
    head, _, overall = summary.partition("Overall summary: ")
    positions = [head.index(v) for v in (energy, visual, heritage, relationship)]
    assert positions == sorted(positions)
    assert overall == f"{heritage}, {relationship}, {energy}, {visual}."


def test_summary_format():
    answers = {
        "heritage": "established and reliable",
        "relationship": "guiding and professional",
        "energy": "calm, focused, and minimal",
        "visual_preference": "luxury minimalist",
    }
    assert summarize(answers) == (
        "Preferred Brand Vibe: calm, focused, and minimal, Style Preference: luxury minimalist, "
        "Heritage: established and reliable, Relationship: guiding and professional. "
        "Overall summary: established and reliable, guiding and professional, "
        "calm, focused, and minimal, luxury minimalist."
    )


def test_brand_quiz_completes_exactly_once():
    summaries = []
    quiz = BrandQuiz(on_complete=summaries.append)
    for question in QUESTIONS:
        assert quiz.current is question
        quiz.select(question.options[0].value)

    assert len(summaries) == 1
    assert quiz.current is None
    assert quiz.progress == 1.0
    with pytest.raises(QuizClosedError):
        quiz.select(QUESTIONS[-1].options[0].value)
    assert len(summaries) == 1


def test_brand_quiz_close_never_completes():
    summaries, closed = [], []
    quiz = BrandQuiz(on_complete=summaries.append, on_close=lambda: closed.append(True))
    quiz.select(QUESTIONS[0].options[1].value)
    quiz.select(QUESTIONS[1].options[1].value)
    quiz.close()

    assert summaries == []
    assert closed == [True]
    with pytest.raises(QuizClosedError):
        quiz.select(QUESTIONS[2].options[0].value)


def test_progress_counts_current_step():
    quiz = BrandQuiz(on_complete=lambda s: None)
    assert quiz.progress == 0.25
    quiz.select(QUESTIONS[0].options[0].value)
    assert quiz.progress == 0.5
    assert quiz.to_dict()["step"] == 2
