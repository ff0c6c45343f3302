"""Interface for interacting with the user (input/output).

Defines the contract the command handler uses to show interviewer turns,
evaluation results and diagnostics, and to read candidate input.
"""

import abc
from typing import Any, Dict, List

from interviewer.domain.models.ai import InterviewQuestion
from interviewer.domain.models.metrics import UsageMetrics


class UserInterface(abc.ABC):
    """Abstract Base Class for user interaction."""

    @abc.abstractmethod
    def display_output(self, output: str, **kwargs: Any) -> None:
        """Displays standard output to the user.

        Args:
            output: Text to display.
            **kwargs: Formatting options such as `title`.
        """
        pass

    @abc.abstractmethod
    def display_error(self, error_message: str, **kwargs: Any) -> None:
        pass

    @abc.abstractmethod
    def display_warning(self, warning_message: str, **kwargs: Any) -> None:
        pass

    @abc.abstractmethod
    def display_info(self, info_message: str, **kwargs: Any) -> None:
        pass

    @abc.abstractmethod
    def get_prompt(self, prompt_message: str = "> ") -> str:
        """Reads one line of input synchronously.

        Async callers should wrap this in asyncio.to_thread.
        """
        pass

    def display_session_header(self, provider_name: str, model_name: str, language: str) -> None:
        pass

    def display_session_footer(self, message_count: int, session_duration_secs: float) -> None:
        pass

    def display_questions(self, questions: List[InterviewQuestion]) -> None:
        pass

    def display_evaluation(self, score: float, feedback: str) -> None:
        pass

    def display_provider_info(self, info: Dict[str, Dict[str, Any]], current_provider: str) -> None:
        pass

    def display_metrics(self, metrics: UsageMetrics) -> None:
        pass
