"""Command Handler: runs CLI commands against an InterviewClient.

Receives already-parsed arguments from main.py, calls the interview client
and renders results through the UserInterface. Domain errors are shown to
the user; anything else propagates.
"""

import asyncio
import logging
import time
import uuid
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import yaml

from interviewer.core.services.interview_service import InterviewClient, InterviewPhase, next_phase
from interviewer.domain.exceptions import InterviewerError
from interviewer.domain.interfaces.user_interface import UserInterface
from interviewer.domain.models.common import LANGUAGE_ENGLISH

logger = logging.getLogger(__name__)

EXIT_COMMANDS = ("exit", "quit")


def load_transcript(path: Path) -> Tuple[List[str], List[str], str]:
    """Reads questions, answers and an optional job description from YAML or JSON.

    Accepted shapes::

        questions: [...]
        answers: [...]
        job_description: ...

    or a top-level list of ``{question: ..., answer: ...}`` items. Items
    without an answer are skipped along with their question.

    Raises:
        ValueError: If the file cannot be read or has neither shape.
    """
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ValueError(f"could not read transcript {path}: {e}") from e

    if isinstance(data, list):
        pairs = [item for item in data if isinstance(item, dict) and item.get("answer")]
        questions = [str(item.get("question", "")) for item in pairs]
        answers = [str(item["answer"]) for item in pairs]
        return questions, answers, ""

    if isinstance(data, dict):
        questions = [str(q) for q in data.get("questions") or []]
        answers = [str(a) for a in data.get("answers") or []]
        return questions, answers, str(data.get("job_description") or "")

    raise ValueError(f"transcript {path} must contain a list of Q/A pairs or a questions/answers mapping")


class CommandHandler:
    """Handles CLI commands and delegates to the interview client."""

    def __init__(self, client: InterviewClient, ui: UserInterface):
        self.client = client
        self.ui = ui

    async def run_chat(self, language: str = LANGUAGE_ENGLISH, show_metrics: bool = False) -> None:
        """Runs an interactive interview until it completes or the candidate leaves.

        The interviewer opens the session. After each candidate message the
        termination rule decides whether the reply continues the interview or
        closes it.
        """
        session_id = uuid.uuid4().hex
        history: List[Dict[str, str]] = []
        user_message_count = 0
        phase = InterviewPhase.ACTIVE
        start_time = time.time()

        logger.info(f"Starting interview session {session_id} (language={language})")
        self.ui.display_session_header(
            self.client.get_current_provider(), self.client.get_current_model(), language)

        try:
            opening = await self.client.generate_chat_response(session_id, history, "", language)
            self.ui.display_output(opening)
            history.append({"role": "ai", "content": opening})

            while phase is not InterviewPhase.COMPLETED:
                user_message = (await asyncio.to_thread(self.ui.get_prompt, "You")).strip()
                if user_message.lower() in EXIT_COMMANDS:
                    logger.info(f"Session {session_id} left by candidate")
                    break
                if not user_message:
                    continue

                user_message_count += 1
                phase = next_phase(phase, user_message_count)
                if phase is InterviewPhase.CLOSING:
                    reply = await self.client.generate_closing_message(session_id, history, user_message, language)
                    phase = next_phase(phase, user_message_count)
                else:
                    reply = await self.client.generate_chat_response(session_id, history, user_message, language)

                history.append({"role": "user", "content": user_message})
                history.append({"role": "ai", "content": reply})
                self.ui.display_output(reply)
        except InterviewerError as e:
            logger.error(f"Interview session {session_id} failed: {e}")
            self.ui.display_error(f"Interview failed: {e}")

        self.ui.display_session_footer(user_message_count, time.time() - start_time)

        if phase is InterviewPhase.COMPLETED:
            answers = [m["content"] for m in history if m["role"] == "user"]
            questions = [m["content"] for m in history if m["role"] == "ai"]
            await self._evaluate(questions, answers, "", language)

        if show_metrics:
            self.ui.display_metrics(self.client.get_metrics())

    async def _evaluate(self, questions: List[str], answers: List[str], job_description: str, language: str) -> None:
        try:
            if job_description:
                score, feedback = await self.client.evaluate_answers_with_context(
                    questions, answers, job_description, language)
            else:
                score, feedback = await self.client.evaluate_answers(questions, answers, language)
        except InterviewerError as e:
            logger.error(f"Evaluation failed: {e}")
            self.ui.display_error(f"Evaluation failed: {e}")
            return
        self.ui.display_evaluation(score, feedback)

    async def handle_evaluate(
        self,
        transcript_path: Path,
        job_description: Optional[str] = None,
        language: str = LANGUAGE_ENGLISH,
        show_metrics: bool = False,
    ) -> None:
        logger.info(f"Handling 'evaluate' command for transcript: {transcript_path}")
        try:
            questions, answers, file_job_description = load_transcript(transcript_path)
        except ValueError as e:
            self.ui.display_error(str(e))
            return

        await self._evaluate(questions, answers, job_description or file_job_description, language)
        if show_metrics:
            self.ui.display_metrics(self.client.get_metrics())

    async def handle_questions(
        self,
        job_description: str,
        resume_path: Optional[Path] = None,
        count: int = 5,
        show_metrics: bool = False,
    ) -> None:
        logger.info(f"Handling 'questions' command (resume={resume_path}, count={count})")
        try:
            if resume_path is not None:
                resume_text = resume_path.read_text(encoding='utf-8')
                questions = await self.client.generate_questions_from_resume(resume_text, job_description)
            else:
                questions = await self.client.generate_interview_questions(job_description, count)
        except OSError as e:
            self.ui.display_error(f"Could not read resume {resume_path}: {e}")
            return
        except InterviewerError as e:
            logger.error(f"Question generation failed: {e}")
            self.ui.display_error(f"Question generation failed: {e}")
            return

        self.ui.display_questions(questions)
        if show_metrics:
            self.ui.display_metrics(self.client.get_metrics())

    def handle_providers(self) -> None:
        self.ui.display_provider_info(self.client.get_provider_info(), self.client.get_current_provider())

    async def handle_health(self) -> bool:
        healthy = await self.client.is_healthy()
        if healthy:
            self.ui.display_info(
                f"Healthy: at least one provider is reachable (default: {self.client.get_current_provider()}).")
        else:
            self.ui.display_error("Unhealthy: no configured provider responded.")
        return healthy
