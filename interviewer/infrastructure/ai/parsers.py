"""Parsers turning model free text into structured questions and evaluations.

Both parsers are total: any input yields a value and nothing is raised.
Unrecognised or malformed text degrades to empty lists and default scores.
"""

import logging
import re
from typing import Dict, List, Optional

from interviewer.domain.models.ai import EvaluationResponse, InterviewQuestion

logger = logging.getLogger(__name__)

DEFAULT_EXPECTED_TIME = 5  # minutes
DEFAULT_OVERALL_SCORE = 0.7
DEFAULT_CATEGORY_SCORES: Dict[str, float] = {
    "technical": 0.7,
    "communication": 0.8,
    "problem_solving": 0.6,
    "experience": 0.7,
}

# Category bullet labels in the evaluation prompt -> category score keys
CATEGORY_LABELS = {
    "technical skills": "technical",
    "communication": "communication",
    "problem solving": "problem_solving",
    "experience": "experience",
}

_NUMBER = re.compile(r"\d+(?:\.\d+)?")

QUESTION_PREFIX = "Question:"
CATEGORY_PREFIX = "Category:"
DIFFICULTY_PREFIX = "Difficulty:"
EXPECTED_TIME_PREFIX = "Expected Time:"


def _first_number(text: str) -> Optional[float]:
    match = _NUMBER.search(text)
    return float(match.group()) if match else None


def parse_question_response(content: str) -> List[InterviewQuestion]:
    """Extracts questions from `Question:/Category:/Difficulty:/Expected Time:` blocks.

    A question is emitted when its `Expected Time:` line is reached and the
    block has a question, category and difficulty. Incomplete blocks,
    including a trailing block without `Expected Time:`, are dropped.
    """
    questions: List[InterviewQuestion] = []
    question = category = difficulty = ""

    for raw_line in content.splitlines():
        line = raw_line.strip()
        if line.startswith(QUESTION_PREFIX):
            question = line[len(QUESTION_PREFIX):].strip()
        elif line.startswith(CATEGORY_PREFIX):
            category = line[len(CATEGORY_PREFIX):].strip()
        elif line.startswith(DIFFICULTY_PREFIX):
            difficulty = line[len(DIFFICULTY_PREFIX):].strip()
        elif line.startswith(EXPECTED_TIME_PREFIX):
            if question and category and difficulty:
                minutes = _first_number(line[len(EXPECTED_TIME_PREFIX):])
                questions.append(InterviewQuestion(
                    question=question,
                    category=category,
                    difficulty=difficulty,
                    expected_time=int(minutes) if minutes else DEFAULT_EXPECTED_TIME,
                ))
            else:
                logger.debug(f"Dropping incomplete question block: question={question!r}")
            question = category = difficulty = ""

    return questions


def _parse_score(text: str) -> Optional[float]:
    value = _first_number(text)
    if value is None:
        return None
    if value > 1.0:
        # "85" or "8.5/10" style answers
        value = value / 100.0 if value > 10.0 else value / 10.0
    return min(max(value, 0.0), 1.0)


def parse_evaluation_response(content: str) -> EvaluationResponse:
    """Extracts score, feedback and the bulleted sections from an evaluation.

    Missing scores fall back to DEFAULT_OVERALL_SCORE and
    DEFAULT_CATEGORY_SCORES; missing sections stay empty.
    """
    evaluation = EvaluationResponse(overall_score=DEFAULT_OVERALL_SCORE)
    sections: Dict[str, List[str]] = {
        "strengths": evaluation.strengths,
        "weaknesses": evaluation.weaknesses,
        "recommendations": evaluation.recommendations,
    }
    category_scores = dict(DEFAULT_CATEGORY_SCORES)
    feedback_lines: List[str] = []
    in_feedback = False
    current_section = ""

    for raw_line in content.splitlines():
        line = raw_line.strip()

        if line.startswith("Overall Score:"):
            score = _parse_score(line[len("Overall Score:"):])
            if score is not None:
                evaluation.overall_score = score
            in_feedback, current_section = False, ""
            continue
        if line.startswith("Category Scores:"):
            in_feedback, current_section = False, "categories"
            continue
        if line.startswith("Feedback:"):
            in_feedback, current_section = True, ""
            text = line[len("Feedback:"):].strip()
            if text:
                feedback_lines.append(text)
            continue
        if line.startswith("Strengths:"):
            in_feedback, current_section = False, "strengths"
            continue
        if line.startswith("Areas for Improvement:"):
            in_feedback, current_section = False, "weaknesses"
            continue
        if line.startswith("Recommendations:"):
            in_feedback, current_section = False, "recommendations"
            continue

        if in_feedback and line:
            feedback_lines.append(line)

        if line.startswith("- ") and len(line) > 2:
            item = line[2:].strip()
            if current_section == "categories":
                label, _, value = item.partition(":")
                key = CATEGORY_LABELS.get(label.strip().lower())
                score = _parse_score(value)
                if key and score is not None:
                    category_scores[key] = score
            elif current_section in sections:
                sections[current_section].append(item)

    evaluation.feedback = " ".join(feedback_lines)
    evaluation.category_scores = category_scores
    return evaluation
