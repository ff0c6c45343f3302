"""Interview orchestration over the enhanced client.

Builds chat context for each turn and applies the eight-message termination
rule. Provider evaluations are reduced to a score and feedback pair.
"""

import enum
import logging
from typing import Any, Dict, List, Optional, Tuple

from interviewer.core.services.enhanced_client import EnhancedAIClient
from interviewer.domain.models.ai import (
    ChatRequest,
    EvaluationRequest,
    InterviewQuestion,
    Message,
    QuestionGenerationRequest,
)
from interviewer.domain.models.common import LANGUAGE_ENGLISH, ROLE_ASSISTANT, ROLE_SYSTEM, ROLE_USER
from interviewer.domain.models.config import AIConfig
from interviewer.domain.models.metrics import UsageMetrics
from interviewer.infrastructure.ai import factory, prompts

logger = logging.getLogger(__name__)

# Number of user-authored messages after which the next AI turn closes the interview.
END_INTERVIEW_MESSAGE_COUNT = 8

# Role label used by the session store for interviewer turns.
STORED_AI_ROLE = "ai"

CHAT_MAX_TOKENS = 500
CHAT_TEMPERATURE = 0.7
CLOSING_MAX_TOKENS = 300

DEFAULT_EVALUATION_JOB_DESCRIPTION = "General interview evaluation"
EVALUATION_CRITERIA = ["communication", "technical_knowledge", "problem_solving", "clarity", "cultural_fit"]
NO_ANSWERS_FEEDBACK = "No answers provided."


class InterviewPhase(enum.Enum):
    ACTIVE = "active"
    CLOSING = "closing"
    COMPLETED = "completed"


def should_end_interview(user_message_count: int) -> bool:
    return user_message_count >= END_INTERVIEW_MESSAGE_COUNT


def next_phase(phase: InterviewPhase, user_message_count: int) -> InterviewPhase:
    """Phase after one AI turn.

    An active session stays active until the user message count reaches the
    threshold; the closing turn completes it. Completed is terminal.
    """
    if phase is InterviewPhase.ACTIVE:
        return InterviewPhase.CLOSING if should_end_interview(user_message_count) else InterviewPhase.ACTIVE
    return InterviewPhase.COMPLETED


def build_chat_messages(
    history: List[Dict[str, str]],
    user_message: str,
    language: str = LANGUAGE_ENGLISH,
    is_closing: bool = False,
) -> List[Message]:
    """System prompt, then history in storage order, then the user message if non-empty.

    Stored "ai" roles become "assistant"; any other role is kept as-is.
    """
    messages = [Message(role=ROLE_SYSTEM, content=prompts.build_system_prompt(language, is_closing))]
    for entry in history:
        role = entry.get("role", ROLE_USER)
        if role == STORED_AI_ROLE:
            role = ROLE_ASSISTANT
        messages.append(Message(role=role, content=entry.get("content", "")))
    if user_message:
        messages.append(Message(role=ROLE_USER, content=user_message))
    return messages


class InterviewClient:
    """High-level interview operations over the enhanced client.

    Builds conversation context (system prompt, history, language), applies
    the termination policy and reduces evaluations to a score and feedback.
    """

    def __init__(self, config: AIConfig, enhanced_client: Optional[EnhancedAIClient] = None):
        config.validate()
        self._client = enhanced_client or EnhancedAIClient(config)
        self._client.get_provider()
        logger.info(f"InterviewClient ready (provider={self.get_current_provider()}, model={self.get_current_model()})")

    @property
    def enhanced_client(self) -> EnhancedAIClient:
        return self._client

    # --- Chat ---

    async def _chat(self, session_id: str, history: List[Dict[str, str]], user_message: str,
                    language: str, is_closing: bool, max_tokens: int) -> str:
        request = ChatRequest(
            messages=build_chat_messages(history, user_message, language, is_closing),
            max_tokens=max_tokens,
            temperature=CHAT_TEMPERATURE,
            session_id=session_id,
            context={"language": language, "closing_interview": is_closing},
        )
        logger.debug(f"Session {session_id}: sending {len(request.messages)} messages (closing={is_closing})")
        response = await self._client.generate_response(request)
        return response.content

    async def generate_chat_response(
        self,
        session_id: str,
        history: List[Dict[str, str]],
        user_message: str,
        language: str = LANGUAGE_ENGLISH,
    ) -> str:
        return await self._chat(session_id, history, user_message, language, False, CHAT_MAX_TOKENS)

    async def generate_closing_message(
        self,
        session_id: str,
        history: List[Dict[str, str]],
        user_message: str,
        language: str = LANGUAGE_ENGLISH,
    ) -> str:
        return await self._chat(session_id, history, user_message, language, True, CLOSING_MAX_TOKENS)

    def should_end_interview(self, user_message_count: int) -> bool:
        return should_end_interview(user_message_count)

    # --- Evaluation ---

    async def evaluate_answers(
        self, questions: List[str], answers: List[str], language: str = LANGUAGE_ENGLISH
    ) -> Tuple[float, str]:
        return await self.evaluate_answers_with_context(
            questions, answers, DEFAULT_EVALUATION_JOB_DESCRIPTION, language)

    async def evaluate_answers_with_context(
        self,
        questions: List[str],
        answers: List[str],
        job_description: str,
        language: str = LANGUAGE_ENGLISH,
    ) -> Tuple[float, str]:
        """Scores a conversation; returns (overall_score, feedback).

        With no answers the result is (0.0, "No answers provided.") and no
        provider is called.
        """
        if not answers:
            return 0.0, NO_ANSWERS_FEEDBACK

        request = EvaluationRequest(
            questions=questions,
            answers=answers,
            job_description=job_description,
            criteria=list(EVALUATION_CRITERIA),
            detail_level="detailed",
            language=language,
            context={
                "interview_type": "conversational",
                "evaluation_type": "chat_based",
                "language": language,
            },
        )
        response = await self._client.evaluate_answers(request)
        return response.overall_score, response.feedback

    # --- Question generation ---

    async def generate_questions_from_resume(self, resume_text: str, job_description: str) -> List[InterviewQuestion]:
        request = QuestionGenerationRequest(
            job_description=job_description,
            resume_content=resume_text,
            interview_type="mixed",
            num_questions=8,
            experience_level="mid",
            difficulty="medium",
        )
        response = await self._client.generate_questions(request)
        return response.questions

    async def generate_interview_questions(self, job_description: str, question_count: int) -> List[InterviewQuestion]:
        request = QuestionGenerationRequest(
            job_description=job_description,
            interview_type="general",
            num_questions=question_count,
            experience_level="mid",
            difficulty="medium",
        )
        response = await self._client.generate_questions(request)
        return response.questions

    # --- Providers ---

    def get_provider_info(self) -> Dict[str, Dict[str, Any]]:
        return {name: factory.get_provider_info(name) for name in self._client.get_available_providers()}

    def switch_provider(self, provider_name: str) -> None:
        self._client.switch_provider(provider_name)

    def get_current_provider(self) -> str:
        return self._client.config.default_provider

    def get_current_model(self) -> str:
        return self._client.config.default_model

    def get_metrics(self) -> UsageMetrics:
        return self._client.get_metrics()

    async def is_healthy(self) -> bool:
        return await self._client.is_healthy()

    async def aclose(self) -> None:
        await self._client.aclose()
