"""Offline provider returning deterministic canned responses.

Never touches the network and never fails. Replies in Traditional Chinese
when a system message asks for it, in English otherwise. Always registered
by the enhanced client as the guaranteed fallback provider.
"""

import logging
from typing import Any, AsyncIterator, Dict, List

from interviewer.domain.interfaces.ai_model import AIProvider
from interviewer.domain.models.ai import (
    ChatRequest,
    ChatResponse,
    EvaluationRequest,
    EvaluationResponse,
    InterviewQuestion,
    QuestionGenerationRequest,
    QuestionGenerationResponse,
    StreamChunk,
    TokenUsage,
)
from interviewer.domain.models.common import MOCK_MODEL, PROVIDER_MOCK, ROLE_SYSTEM, TokenCount, is_traditional_chinese

logger = logging.getLogger(__name__)

CHINESE_MARKERS = ("Traditional Chinese", "繁體中文")

CHAT_REPLY_EN = "[MOCK] Interview response - This is a test mock response"
CHAT_REPLY_ZH = "[模擬] 面試問題回應 - 這是測試用的模擬回應"
STREAM_REPLY = "[MOCK] Streaming response - This is a test mock streaming response"


def _usage(prompt: int, completion: int) -> TokenUsage:
    return TokenUsage(
        prompt_tokens=TokenCount(prompt),
        completion_tokens=TokenCount(completion),
        total_tokens=TokenCount(prompt + completion),
    )


def wants_traditional_chinese(request: ChatRequest) -> bool:
    return any(
        message.role == ROLE_SYSTEM and any(marker in message.content for marker in CHINESE_MARKERS)
        for message in request.messages
    )


class MockProvider(AIProvider):
    """Canned-response provider for development and tests."""

    def __init__(self) -> None:
        self.request_count = 0

    def get_provider_name(self) -> str:
        return PROVIDER_MOCK

    def get_supported_models(self) -> List[str]:
        return [MOCK_MODEL]

    async def generate_response(self, request: ChatRequest) -> ChatResponse:
        self.request_count += 1
        content = CHAT_REPLY_ZH if wants_traditional_chinese(request) else CHAT_REPLY_EN
        logger.debug(f"MockProvider answering request #{self.request_count}")
        return ChatResponse(
            content=content,
            finish_reason="stop",
            token_usage=_usage(10, 20),
            model=MOCK_MODEL,
            provider=PROVIDER_MOCK,
            response_time=0.01,
        )

    async def generate_stream_response(self, request: ChatRequest) -> AsyncIterator[StreamChunk]:
        self.request_count += 1
        yield StreamChunk(
            content=STREAM_REPLY,
            delta=STREAM_REPLY,
            is_complete=True,
            finish_reason="stop",
            tokens_used=30,
        )

    async def generate_interview_questions(self, request: QuestionGenerationRequest) -> QuestionGenerationResponse:
        self.request_count += 1
        categories = ["technical", "behavioral", "technical"]
        questions = [
            InterviewQuestion(question=f"[MOCK] Test question {i}", category=category, difficulty="medium")
            for i, category in enumerate(categories, start=1)
        ]
        return QuestionGenerationResponse(
            questions=questions,
            rationale="[MOCK] Simple test question rationale",
            token_usage=_usage(20, 40),
            provider=PROVIDER_MOCK,
            model=MOCK_MODEL,
        )

    async def evaluate_answers(self, request: EvaluationRequest) -> EvaluationResponse:
        self.request_count += 1
        if is_traditional_chinese(request.language):
            marker, feedback = "[模擬]", "[模擬] 測試用評估回饋"
            labels = ("測試優勢", "測試弱點", "測試建議")
            separator = ""
        else:
            marker, feedback = "[MOCK]", "[MOCK] Test evaluation feedback"
            labels = ("Test strength", "Test weakness", "Test recommendation")
            separator = " "

        def items(label: str) -> List[str]:
            return [f"{marker} {label}{separator}{n}" for n in (1, 2)]

        return EvaluationResponse(
            overall_score=0.8,
            category_scores={"technical": 0.8, "communication": 0.85, "problem_solving": 0.75},
            feedback=feedback,
            strengths=items(labels[0]),
            weaknesses=items(labels[1]),
            recommendations=items(labels[2]),
            token_usage=_usage(50, 150),
            provider=PROVIDER_MOCK,
            model=MOCK_MODEL,
        )

    async def validate_credentials(self) -> None:
        return None

    async def is_healthy(self) -> bool:
        return True

    async def get_usage_stats(self) -> Dict[str, Any]:
        return {"mock": True, "requests": self.request_count}
