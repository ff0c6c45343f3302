import pytest

from interviewer.infrastructure.ai.parsers import (
    DEFAULT_CATEGORY_SCORES,
    parse_evaluation_response,
    parse_question_response,
)

FULL_EVALUATION = """Overall Score: 0.85
Category Scores:
- Technical Skills: 0.9
- Communication: 0.8

Feedback: The candidate demonstrated strong technical skills and clear communication.

Strengths:
- Excellent problem-solving
- Clear explanations

Areas for Improvement:
- Could improve time management
- Needs more depth in answers

Recommendations:
- Practice system design questions
- Review data structures"""


# --- Questions ---

def test_single_question_full_format():
    questions = parse_question_response(
        "Question: What is a goroutine?\nCategory: technical\nDifficulty: medium\nExpected Time: 5")

    assert len(questions) == 1
    assert questions[0].question == "What is a goroutine?"
    assert questions[0].category == "technical"
    assert questions[0].difficulty == "medium"
    assert questions[0].expected_time == 5


def test_multiple_questions():
    questions = parse_question_response(
        "Question: First question?\nCategory: behavioral\nDifficulty: easy\nExpected Time: 3\n\n"
        "Question: Second question?\nCategory: technical\nDifficulty: hard\nExpected Time: 10 minutes")

    assert [q.question for q in questions] == ["First question?", "Second question?"]
    assert [q.expected_time for q in questions] == [3, 10]


def test_whitespace_is_trimmed():
    questions = parse_question_response(
        "  Question:   Trimmed question?\n  Category:   technical\n  Difficulty:   hard\nExpected Time: 5")
    assert questions[0].question == "Trimmed question?"
    assert questions[0].difficulty == "hard"


def test_expected_time_without_number_defaults_to_five():
    questions = parse_question_response(
        "Question: Q?\nCategory: technical\nDifficulty: easy\nExpected Time: a few minutes")
    assert questions[0].expected_time == 5


@pytest.mark.parametrize("content", [
    "",
    "   \n\n   \t\t   ",
    "This is just some random text without any question format.",
    "Question: Incomplete question\nCategory: technical\nDifficulty: easy",
    "Question: Missing difficulty\nCategory: technical\nExpected Time: 5",
    "question: lower-case prefix\ncategory: technical\ndifficulty: easy\nexpected time: 5",
])
def test_unparseable_content_yields_no_questions(content):
    assert parse_question_response(content) == []


def test_trailing_incomplete_block_is_dropped():
    questions = parse_question_response(
        "Question: Complete question?\nCategory: technical\nDifficulty: easy\nExpected Time: 5\n\n"
        "Question: Incomplete question\nCategory: technical")
    assert len(questions) == 1


def test_incomplete_block_does_not_leak_into_next():
    questions = parse_question_response(
        "Question: Lost?\nExpected Time: 5\n"
        "Category: technical\nDifficulty: easy\nExpected Time: 5")
    assert questions == []


# --- Evaluation ---

def test_full_evaluation():
    evaluation = parse_evaluation_response(FULL_EVALUATION)

    assert evaluation.overall_score == pytest.approx(0.85)
    assert "strong technical skills" in evaluation.feedback
    assert evaluation.strengths == ["Excellent problem-solving", "Clear explanations"]
    assert evaluation.weaknesses == ["Could improve time management", "Needs more depth in answers"]
    assert evaluation.recommendations == ["Practice system design questions", "Review data structures"]
    assert evaluation.category_scores["technical"] == pytest.approx(0.9)
    assert evaluation.category_scores["communication"] == pytest.approx(0.8)
    assert evaluation.category_scores["problem_solving"] == DEFAULT_CATEGORY_SCORES["problem_solving"]


def test_feedback_only():
    evaluation = parse_evaluation_response("Feedback: Basic feedback text here.")
    assert evaluation.feedback == "Basic feedback text here."
    assert evaluation.overall_score == 0.7


def test_multiline_feedback_joined_with_spaces():
    evaluation = parse_evaluation_response(
        "Feedback: First line of feedback.\nSecond line continues the feedback.\nThird line as well.\n\n"
        "Strengths:\n- Good work")

    assert evaluation.feedback == (
        "First line of feedback. Second line continues the feedback. Third line as well.")
    assert evaluation.strengths == ["Good work"]


def test_empty_content_returns_defaults():
    evaluation = parse_evaluation_response("")

    assert evaluation.overall_score == 0.7
    assert evaluation.category_scores == {
        "technical": 0.7, "communication": 0.8, "problem_solving": 0.6, "experience": 0.7,
    }
    assert evaluation.feedback == ""
    assert evaluation.strengths == evaluation.weaknesses == evaluation.recommendations == []


def test_defaults_are_not_shared_between_results():
    first = parse_evaluation_response("")
    first.category_scores["technical"] = 0.0
    assert parse_evaluation_response("").category_scores["technical"] == 0.7


@pytest.mark.parametrize("line, expected", [
    ("Overall Score: 0.42", 0.42),
    ("Overall Score: 8.5/10", 0.85),
    ("Overall Score: 72", 0.72),
    ("Overall Score: 250", 1.0),
    ("Overall Score: not given", 0.7),
])
def test_overall_score_scales(line, expected):
    assert parse_evaluation_response(line).overall_score == pytest.approx(expected)


def test_bullets_outside_sections_are_ignored():
    evaluation = parse_evaluation_response("- orphan bullet\nStrengths:\n- kept")
    assert evaluation.strengths == ["kept"]
    assert evaluation.weaknesses == []
