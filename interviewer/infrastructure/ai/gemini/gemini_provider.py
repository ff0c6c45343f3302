"""Adapter for Gemini-style generate-content APIs.

Gemini knows only the "user" and "model" roles and has no system role, so
system messages are folded into the first remaining entry. The API key
travels as a `key` query parameter instead of a header.
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
from interviewer.domain.models.common import PROVIDER_GEMINI, ROLE_ASSISTANT, ROLE_SYSTEM, ROLE_USER, TokenCount
from interviewer.domain.models.config import AIConfig
from interviewer.infrastructure.ai import parsers, prompts
from interviewer.infrastructure.ai.base_provider import BaseProvider

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_MODEL = "gemini-1.5-flash"
GEMINI_MODEL_ROLE = "model"
SUPPORTED_MODELS = [
    "gemini-1.5-pro",
    "gemini-1.5-flash",
    "gemini-pro",
    "gemini-pro-vision",
]
SAFETY_CATEGORIES = [
    "HARM_CATEGORY_HARASSMENT",
    "HARM_CATEGORY_HATE_SPEECH",
    "HARM_CATEGORY_SEXUALLY_EXPLICIT",
    "HARM_CATEGORY_DANGEROUS_CONTENT",
]
SAFETY_THRESHOLD = "BLOCK_MEDIUM_AND_ABOVE"

QUESTION_MAX_TOKENS = 2000
QUESTION_TEMPERATURE = 0.7
EVALUATION_MAX_TOKENS = 3000
EVALUATION_TEMPERATURE = 0.3
QUESTION_RATIONALE = "Questions generated based on job requirements and candidate experience using Gemini AI"


def generate_content_endpoint(model: str) -> str:
    return f"/models/{model}:generateContent"


def default_safety_settings() -> List[Dict[str, str]]:
    return [{"category": category, "threshold": SAFETY_THRESHOLD} for category in SAFETY_CATEGORIES]


def convert_messages(messages: List[Message]) -> List[Dict[str, Any]]:
    """Converts internal messages to Gemini `contents` entries.

    "assistant" becomes "model"; system messages are joined with blank lines
    and prepended to the first non-system entry. A conversation holding only
    system messages becomes a single user entry with the system text.
    """
    contents: List[Dict[str, Any]] = []
    system_parts: List[str] = []

    for message in messages:
        if message.role == ROLE_SYSTEM:
            system_parts.append(message.content)
            continue
        role = GEMINI_MODEL_ROLE if message.role == ROLE_ASSISTANT else message.role
        contents.append({"parts": [{"text": message.content}], "role": role})

    if system_parts:
        system_prompt = "\n\n".join(system_parts)
        if contents:
            first_part = contents[0]["parts"][0]
            first_part["text"] = f"{system_prompt}\n\n{first_part['text']}"
        else:
            contents.append({"parts": [{"text": system_prompt}], "role": ROLE_USER})

    return contents


class GeminiProvider(BaseProvider):
    """Gemini generateContent adapter."""

    def __init__(self, api_key: str, config: AIConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        super().__init__(config, config.gemini_base_url or DEFAULT_BASE_URL, transport=transport)
        self._api_key = api_key
        logger.info(f"GeminiProvider initialized (base_url={self.base_url})")

    # --- ProviderAdapter ---

    def set_auth(self, request: httpx.Request) -> None:
        # Credentials are carried in the URL, see get_endpoint_url.
        pass

    def get_endpoint_url(self, endpoint: str) -> str:
        return str(httpx.URL(self.base_url + endpoint).copy_add_param("key", self._api_key))

    # --- AIProvider ---

    def get_provider_name(self) -> str:
        return PROVIDER_GEMINI

    def get_supported_models(self) -> List[str]:
        return list(SUPPORTED_MODELS)

    def build_payload(self, request: ChatRequest) -> Dict[str, Any]:
        generation_config: Dict[str, Any] = {}
        if request.temperature:
            generation_config["temperature"] = request.temperature
        if request.top_p:
            generation_config["topP"] = request.top_p
        if request.max_tokens:
            generation_config["maxOutputTokens"] = request.max_tokens

        return {
            "contents": convert_messages(request.messages),
            "generationConfig": generation_config,
            "safetySettings": default_safety_settings(),
        }

    async def generate_response(self, request: ChatRequest) -> ChatResponse:
        start_time = time.perf_counter()
        model = self.get_model_name(request.model, DEFAULT_MODEL)
        body = await self.make_request(generate_content_endpoint(model), self.build_payload(request))
        data = self.decode_json(body)

        error = data.get("error")
        if error:
            raise ProviderError(
                f"Gemini API error: {error.get('message', '')} (code: {error.get('code', 0)})",
                status_code=error.get("code"),
                provider=PROVIDER_GEMINI,
            )

        candidates = data.get("candidates") or []
        if not candidates:
            raise ProviderError("no candidates returned from Gemini", provider=PROVIDER_GEMINI)

        candidate = candidates[0]
        parts = (candidate.get("content") or {}).get("parts") or []
        if not parts:
            raise ProviderError("no content parts in Gemini response", provider=PROVIDER_GEMINI)

        usage = data.get("usageMetadata") or {}
        return ChatResponse(
            content=parts[0].get("text", ""),
            finish_reason=candidate.get("finishReason", ""),
            token_usage=TokenUsage(
                prompt_tokens=TokenCount(usage.get("promptTokenCount", 0)),
                completion_tokens=TokenCount(usage.get("candidatesTokenCount", 0)),
                total_tokens=TokenCount(usage.get("totalTokenCount", 0)),
            ),
            model=model,
            provider=PROVIDER_GEMINI,
            response_time=time.perf_counter() - start_time,
            metadata={
                "index": candidate.get("index", 0),
                "safety_ratings": candidate.get("safetyRatings", []),
            },
        )

    def generate_stream_response(self, request: ChatRequest) -> AsyncIterator[StreamChunk]:
        raise StreamingNotSupportedError("Gemini")

    async def generate_interview_questions(self, request: QuestionGenerationRequest) -> QuestionGenerationResponse:
        prompt = (
            f"{prompts.build_question_generation_prompt(request)}\n\n"
            f"Generate {request.num_questions} interview questions based on this job description: "
            f"{request.job_description}"
        )
        chat_request = ChatRequest(
            messages=[Message(role=ROLE_USER, content=prompt)],
            max_tokens=QUESTION_MAX_TOKENS,
            temperature=QUESTION_TEMPERATURE,
        )
        response = await self.generate_response(chat_request)
        questions = parsers.parse_question_response(response.content)
        logger.info(f"Gemini generated {len(questions)} questions ({request.num_questions} requested)")

        return QuestionGenerationResponse(
            questions=questions,
            rationale=QUESTION_RATIONALE,
            token_usage=response.token_usage,
            provider=PROVIDER_GEMINI,
            model=response.model,
        )

    async def evaluate_answers(self, request: EvaluationRequest) -> EvaluationResponse:
        prompt = "\n\n".join([
            prompts.build_evaluation_prompt(request),
            prompts.language_directive(request.language),
            prompts.format_answers_for_evaluation(request.questions, request.answers),
        ])
        chat_request = ChatRequest(
            messages=[Message(role=ROLE_USER, content=prompt)],
            max_tokens=EVALUATION_MAX_TOKENS,
            temperature=EVALUATION_TEMPERATURE,
        )
        response = await self.generate_response(chat_request)

        evaluation = parsers.parse_evaluation_response(response.content)
        evaluation.token_usage = response.token_usage
        evaluation.provider = PROVIDER_GEMINI
        evaluation.model = response.model
        return evaluation

    async def validate_credentials(self) -> None:
        payload = {
            "contents": [{"parts": [{"text": "Hello"}]}],
            "generationConfig": {"maxOutputTokens": 5},
        }
        await self.make_request(generate_content_endpoint(self.get_model_name("", DEFAULT_MODEL)), payload)

    async def get_usage_stats(self) -> Dict[str, Any]:
        return {"provider": PROVIDER_GEMINI, "status": "healthy"}
