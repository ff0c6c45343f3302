"""Prompt builders shared by all provider adapters.

Pure functions: identical input always renders identical text.
"""

from typing import List

from interviewer.domain.models.ai import EvaluationRequest, PromptTemplate, QuestionGenerationRequest
from interviewer.domain.models.common import is_traditional_chinese

QUESTION_GENERATION_TEMPLATE = PromptTemplate(
    name="question_generation",
    category="questions",
    description="Generate interview questions in a line-oriented, parseable format.",
    variables=["experience_level", "interview_type", "difficulty", "job_description",
               "resume_content", "num_questions"],
    template="""You are an expert interviewer tasked with generating high-quality interview questions.

Experience Level: {experience_level}
Interview Type: {interview_type}
Difficulty: {difficulty}

Job Description:
{job_description}

Candidate Resume:
{resume_content}

Generate {num_questions} relevant interview questions that:
1. Assess the candidate's skills and experience based on the job description
2. Are appropriate for the {experience_level} level
3. Focus on {interview_type} aspects
4. Match the difficulty level: {difficulty}

Format each question as:
Question: [question text]
Category: [technical/behavioral/situational]
Difficulty: [easy/medium/hard]
Expected Time: [minutes]

Provide diverse questions that thoroughly evaluate the candidate for this role.""",
)

EVALUATION_TEMPLATE = PromptTemplate(
    name="evaluation",
    category="evaluation",
    description="Evaluate answers in a sectioned format understood by parse_evaluation_response.",
    variables=["job_description", "criteria", "detail_level"],
    template="""You are an expert interview evaluator. Evaluate the candidate's answers objectively and provide detailed feedback.

Job Description: {job_description}
Evaluation Criteria: {criteria}
Detail Level: {detail_level}

Provide evaluation in this format:
Overall Score: [0.0-1.0]
Category Scores:
- Technical Skills: [0.0-1.0]
- Communication: [0.0-1.0]
- Problem Solving: [0.0-1.0]
- Experience: [0.0-1.0]

Feedback: [comprehensive feedback paragraph]

Strengths:
- [strength 1]
- [strength 2]

Areas for Improvement:
- [area 1]
- [area 2]

Recommendations:
- [specific recommendation 1]
- [specific recommendation 2]

Be specific, constructive, and fair in your evaluation.""",
)

ENGLISH_DIRECTIVE = "IMPORTANT: Respond in English only."
TRADITIONAL_CHINESE_DIRECTIVE = """CRITICAL LANGUAGE REQUIREMENT:
- You MUST respond ONLY in Traditional Chinese (繁體中文)
- Use Traditional Chinese characters for ALL communication
- All questions, acknowledgments, and follow-ups must be in Traditional Chinese"""

INTERVIEWER_ROLE = """You are a professional interviewer conducting a job interview.
Keep a friendly, professional and conversational tone, and keep your replies concise."""

CONTINUING_INSTRUCTIONS = """Your task for this turn:
- Briefly acknowledge the candidate's last answer
- Ask one clear question at a time that assesses skills, experience, problem solving or cultural fit
- Ask follow-up questions when an answer deserves a deeper look"""

CLOSING_INSTRUCTIONS = """This is the final message of the interview. Your task for this turn:
- Politely wrap up the interview without asking any new questions
- Briefly thank the candidate for their time and answers
- Mention the next steps: the team will review the interview and follow up"""


def build_question_generation_prompt(request: QuestionGenerationRequest) -> str:
    return QUESTION_GENERATION_TEMPLATE.render(
        experience_level=request.experience_level,
        interview_type=request.interview_type,
        difficulty=request.difficulty,
        job_description=request.job_description,
        resume_content=request.resume_content,
        num_questions=request.num_questions,
    )


def build_evaluation_prompt(request: EvaluationRequest) -> str:
    return EVALUATION_TEMPLATE.render(
        job_description=request.job_description,
        criteria=", ".join(request.criteria),
        detail_level=request.detail_level,
    )


def format_answers_for_evaluation(questions: List[str], answers: List[str]) -> str:
    """Pairs questions with answers; extra entries on either side are ignored."""
    parts = ["Interview Questions and Candidate Answers:\n\n"]
    for i, (question, answer) in enumerate(zip(questions, answers), start=1):
        parts.append(f"Q{i}: {question}\n")
        parts.append(f"A{i}: {answer}\n\n")
    return "".join(parts)


def language_directive(language: str) -> str:
    if is_traditional_chinese(language):
        return TRADITIONAL_CHINESE_DIRECTIVE
    return ENGLISH_DIRECTIVE


def build_system_prompt(language: str, is_closing: bool) -> str:
    """System prompt for a chat turn; the language directive opens and closes it."""
    directive = language_directive(language)
    instructions = CLOSING_INSTRUCTIONS if is_closing else CONTINUING_INSTRUCTIONS
    return f"{directive}\n\n{INTERVIEWER_ROLE}\n\n{instructions}\n\n{directive}"
