"""Domain models related to AI interactions.

Provider-neutral shapes for chat, question generation and evaluation. Every
adapter translates its vendor's wire format to and from these structures.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .common import MessageRole, ROLE_SYSTEM, TokenCount

# --- Chat Structures ---

@dataclass
class Message:
    """A single conversation turn."""
    role: MessageRole
    content: str
    timestamp: float = field(default_factory=time.time)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_wire(self) -> Dict[str, str]:
        """Role/content pair as sent to chat-completions style APIs."""
        return {"role": self.role, "content": self.content}


@dataclass
class TokenUsage:
    """Token usage reported by a vendor. All-zero when usage is omitted."""
    prompt_tokens: TokenCount = TokenCount(0)
    completion_tokens: TokenCount = TokenCount(0)
    total_tokens: TokenCount = TokenCount(0)


@dataclass
class ChatRequest:
    messages: List[Message]
    model: str = ""
    max_tokens: int = 0
    temperature: float = 0.0
    top_p: float = 0.0
    stream: bool = False
    system_prompt: str = ""
    session_id: str = ""
    context: Dict[str, Any] = field(default_factory=dict)

    def system_message(self) -> Optional[Message]:
        """The leading system message, if the conversation starts with one."""
        if self.messages and self.messages[0].role == ROLE_SYSTEM:
            return self.messages[0]
        return None


@dataclass
class ChatResponse:
    """Completion returned by a provider.

    `content` is untrusted free text; structured use cases go through the
    parsers in `infrastructure.ai.parsers`.
    """
    content: str
    finish_reason: str = ""
    token_usage: TokenUsage = field(default_factory=TokenUsage)
    model: str = ""
    provider: str = ""
    response_time: float = 0.0  # seconds
    timestamp: float = field(default_factory=time.time)
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class StreamChunk:
    """Partial response yielded by streaming providers."""
    content: str
    delta: str = ""
    is_complete: bool = False
    finish_reason: str = ""
    tokens_used: int = 0
    timestamp: float = field(default_factory=time.time)

# --- Interview Question Generation ---

@dataclass
class InterviewQuestion:
    question: str
    category: str
    difficulty: str
    expected_time: int = 5  # minutes
    keywords: List[str] = field(default_factory=list)
    follow_up: List[str] = field(default_factory=list)


@dataclass
class QuestionGenerationRequest:
    job_description: str
    resume_content: str = ""
    experience_level: str = "mid"
    interview_type: str = "mixed"
    num_questions: int = 5
    difficulty: str = "medium"
    context: Dict[str, Any] = field(default_factory=dict)


@dataclass
class QuestionGenerationResponse:
    questions: List[InterviewQuestion]
    rationale: str = ""
    token_usage: TokenUsage = field(default_factory=TokenUsage)
    provider: str = ""
    model: str = ""
    timestamp: float = field(default_factory=time.time)

# --- Evaluation ---

@dataclass
class EvaluationRequest:
    """Answers to evaluate. `questions` and `answers` may differ in length."""
    questions: List[str]
    answers: List[str]
    job_description: str = ""
    criteria: List[str] = field(default_factory=list)
    context: Dict[str, Any] = field(default_factory=dict)
    detail_level: str = "detailed"
    language: str = "en"


@dataclass
class EvaluationResponse:
    overall_score: float
    category_scores: Dict[str, float] = field(default_factory=dict)
    feedback: str = ""
    strengths: List[str] = field(default_factory=list)
    weaknesses: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)
    token_usage: TokenUsage = field(default_factory=TokenUsage)
    provider: str = ""
    model: str = ""
    timestamp: float = field(default_factory=time.time)

# --- Prompt Templates ---

@dataclass
class PromptTemplate:
    """A named prompt with `{placeholder}` variables."""
    name: str
    template: str
    variables: List[str] = field(default_factory=list)
    category: str = ""
    description: str = ""

    def render(self, **values: Any) -> str:
        missing = [v for v in self.variables if v not in values]
        if missing:
            raise KeyError(f"Prompt template '{self.name}' missing variables: {', '.join(missing)}")
        return self.template.format(**values)
