"""Adapter for OpenAI-style chat-completions APIs.

Authenticates with a bearer header and maps the internal chat protocol onto
`POST /chat/completions` with a `choices` array in the response.
"""

import logging
import time
from typing import Any, AsyncIterator, Dict, List, Optional

import httpx

from interviewer.domain.exceptions import ProviderError, StreamingNotSupportedError
from interviewer.domain.models.ai import (
    ChatRequest,
    ChatResponse,
    EvaluationRequest,
    EvaluationResponse,
    Message,
    QuestionGenerationRequest,
    QuestionGenerationResponse,
    StreamChunk,
    TokenUsage,
)
from interviewer.domain.models.common import PROVIDER_OPENAI, ROLE_SYSTEM, ROLE_USER, TokenCount
from interviewer.domain.models.config import AIConfig
from interviewer.infrastructure.ai import parsers, prompts
from interviewer.infrastructure.ai.base_provider import BaseProvider

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.openai.com/v1"
CHAT_COMPLETIONS_ENDPOINT = "/chat/completions"
VALIDATION_MODEL = "gpt-3.5-turbo"
SUPPORTED_MODELS = [
    "gpt-4",
    "gpt-4-turbo",
    "gpt-4-turbo-preview",
    "gpt-3.5-turbo",
    "gpt-3.5-turbo-16k",
]

QUESTION_MAX_TOKENS = 2000
QUESTION_TEMPERATURE = 0.7
EVALUATION_MAX_TOKENS = 3000
EVALUATION_TEMPERATURE = 0.3
QUESTION_RATIONALE = "Questions generated based on job requirements and candidate experience"


class OpenAIProvider(BaseProvider):
    """OpenAI chat-completions adapter."""

    def __init__(self, api_key: str, config: AIConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        super().__init__(config, config.openai_base_url or DEFAULT_BASE_URL, transport=transport)
        self._api_key = api_key
        logger.info(f"OpenAIProvider initialized (base_url={self.base_url})")

    # --- ProviderAdapter ---

    def set_auth(self, request: httpx.Request) -> None:
        request.headers["Authorization"] = f"Bearer {self._api_key}"

    def get_endpoint_url(self, endpoint: str) -> str:
        return self.base_url + endpoint

    # --- AIProvider ---

    def get_provider_name(self) -> str:
        return PROVIDER_OPENAI

    def get_supported_models(self) -> List[str]:
        return list(SUPPORTED_MODELS)

    def build_payload(self, request: ChatRequest) -> Dict[str, Any]:
        """Chat-completions body; zero-valued optional fields are omitted."""
        payload: Dict[str, Any] = {
            "model": self.get_model_name(request.model),
            "messages": [m.to_wire() for m in request.messages],
        }
        if request.max_tokens:
            payload["max_tokens"] = request.max_tokens
        if request.temperature:
            payload["temperature"] = request.temperature
        if request.top_p:
            payload["top_p"] = request.top_p
        if request.stream:
            payload["stream"] = True
        return payload

    async def generate_response(self, request: ChatRequest) -> ChatResponse:
        start_time = time.perf_counter()
        body = await self.make_request(CHAT_COMPLETIONS_ENDPOINT, self.build_payload(request))
        data = self.decode_json(body)

        error = data.get("error")
        if error:
            raise ProviderError(
                f"OpenAI API error: {error.get('message', '')} ({error.get('type', '')})",
                provider=PROVIDER_OPENAI,
            )

        choices = data.get("choices") or []
        if not choices:
            raise ProviderError("no choices returned from OpenAI", provider=PROVIDER_OPENAI)

        choice = choices[0]
        usage = data.get("usage") or {}
        return ChatResponse(
            content=(choice.get("message") or {}).get("content") or "",
            finish_reason=choice.get("finish_reason") or "",
            token_usage=TokenUsage(
                prompt_tokens=TokenCount(usage.get("prompt_tokens", 0)),
                completion_tokens=TokenCount(usage.get("completion_tokens", 0)),
                total_tokens=TokenCount(usage.get("total_tokens", 0)),
            ),
            model=data.get("model", ""),
            provider=PROVIDER_OPENAI,
            response_time=time.perf_counter() - start_time,
            metadata={"id": data.get("id", ""), "created": data.get("created", 0)},
        )

    def generate_stream_response(self, request: ChatRequest) -> AsyncIterator[StreamChunk]:
        raise StreamingNotSupportedError("OpenAI")

    async def generate_interview_questions(self, request: QuestionGenerationRequest) -> QuestionGenerationResponse:
        chat_request = ChatRequest(
            messages=[
                Message(role=ROLE_SYSTEM, content=prompts.build_question_generation_prompt(request)),
                Message(
                    role=ROLE_USER,
                    content=(f"Generate {request.num_questions} interview questions based on this "
                             f"job description: {request.job_description}"),
                ),
            ],
            max_tokens=QUESTION_MAX_TOKENS,
            temperature=QUESTION_TEMPERATURE,
        )
        response = await self.generate_response(chat_request)
        questions = parsers.parse_question_response(response.content)
        logger.info(f"OpenAI generated {len(questions)} questions ({request.num_questions} requested)")

        return QuestionGenerationResponse(
            questions=questions,
            rationale=QUESTION_RATIONALE,
            token_usage=response.token_usage,
            provider=PROVIDER_OPENAI,
            model=response.model,
        )

    async def evaluate_answers(self, request: EvaluationRequest) -> EvaluationResponse:
        system_prompt = prompts.build_evaluation_prompt(request)
        chat_request = ChatRequest(
            messages=[
                Message(role=ROLE_SYSTEM,
                        content=f"{system_prompt}\n\n{prompts.language_directive(request.language)}"),
                Message(role=ROLE_USER,
                        content=prompts.format_answers_for_evaluation(request.questions, request.answers)),
            ],
            max_tokens=EVALUATION_MAX_TOKENS,
            temperature=EVALUATION_TEMPERATURE,
        )
        response = await self.generate_response(chat_request)

        evaluation = parsers.parse_evaluation_response(response.content)
        evaluation.token_usage = response.token_usage
        evaluation.provider = PROVIDER_OPENAI
        evaluation.model = response.model
        return evaluation

    async def validate_credentials(self) -> None:
        payload = {
            "model": VALIDATION_MODEL,
            "messages": [{"role": ROLE_USER, "content": "Hello"}],
            "max_tokens": 5,
        }
        await self.make_request(CHAT_COMPLETIONS_ENDPOINT, payload)

    async def get_usage_stats(self) -> Dict[str, Any]:
        return {"provider": PROVIDER_OPENAI, "status": "healthy"}
