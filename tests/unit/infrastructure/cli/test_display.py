import io
from unittest.mock import MagicMock

import pytest
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel

from interviewer.domain.models.ai import InterviewQuestion
from interviewer.domain.models.metrics import ProviderStats, UsageMetrics
from interviewer.infrastructure.cli.display import ConsoleDisplay, format_duration


@pytest.fixture
def mock_console():
    """Fixture to create a mock rich Console object."""
    return MagicMock()


@pytest.fixture
def console_display(mock_console: MagicMock):
    return ConsoleDisplay(console=mock_console)


@pytest.fixture
def recorded():
    """A ConsoleDisplay writing to an in-memory buffer, plus that buffer."""
    buffer = io.StringIO()
    console = Console(file=buffer, width=120, color_system=None)
    return ConsoleDisplay(console=console), buffer


def test_display_output_renders_markdown_panel(console_display: ConsoleDisplay, mock_console: MagicMock):
    """Interviewer turns are printed as a Markdown panel."""
    console_display.display_output("Hello **World**")

    panel = mock_console.print.call_args.args[0]
    assert isinstance(panel, Panel)
    assert isinstance(panel.renderable, Markdown)
    assert panel.renderable.markup == "Hello **World**"
    assert panel.border_style == "blue"
    assert "Interviewer" in panel.title


def test_candidate_title_uses_green_border(console_display: ConsoleDisplay, mock_console: MagicMock):
    console_display.display_output("My answer", title="You")

    panel = mock_console.print.call_args.args[0]
    assert panel.border_style == "green"


def test_get_prompt(console_display: ConsoleDisplay, mock_console: MagicMock):
    """get_prompt reads from console.input and returns the raw text."""
    mock_console.input.return_value = "user input"

    assert console_display.get_prompt("You") == "user input"
    mock_console.input.assert_called_once_with("[bold green] You [/bold green] ")


def test_error_info_warning(recorded):
    display, buffer = recorded

    display.display_error("it broke")
    display.display_info("fyi")
    display.display_warning("careful")

    output = buffer.getvalue()
    for text in ("Error", "it broke", "Info", "fyi", "Warning", "careful"):
        assert text in output


def test_session_header_and_footer(recorded):
    display, buffer = recorded

    display.display_session_header("openai", "gpt-4", "zh-TW")
    display.display_session_footer(8, 125)

    output = buffer.getvalue()
    assert "openai" in output and "gpt-4" in output and "zh-TW" in output
    assert "Candidate messages: 8" in output
    assert "2m 5s" in output


def test_display_questions(recorded):
    display, buffer = recorded
    questions = [
        InterviewQuestion(question="Explain Go interfaces", category="technical", difficulty="medium", expected_time=5),
        InterviewQuestion(question="Describe a conflict", category="behavioral", difficulty="easy", expected_time=3),
    ]

    display.display_questions(questions)

    output = buffer.getvalue()
    assert "Explain Go interfaces" in output
    assert "behavioral" in output


def test_display_questions_empty_warns(recorded):
    display, buffer = recorded
    display.display_questions([])
    assert "no parseable questions" in buffer.getvalue()


def test_display_evaluation(recorded):
    display, buffer = recorded
    display.display_evaluation(0.8, "Strong communication.")

    output = buffer.getvalue()
    assert "Score: 80%" in output
    assert "Strong communication." in output


def test_display_provider_info_marks_default(recorded):
    display, buffer = recorded
    info = {
        "mock": {"name": "Mock", "models": ["mock-model"], "max_tokens": 4096},
        "openai": {"name": "OpenAI", "models": ["gpt-4", "gpt-3.5-turbo"], "max_tokens": 4096},
    }

    display.display_provider_info(info, current_provider="mock")

    output = buffer.getvalue()
    assert "mock (default)" in output
    assert "gpt-4, gpt-3.5-turbo" in output


def test_display_metrics(recorded):
    display, buffer = recorded
    metrics = UsageMetrics(
        total_requests=3, successful_requests=2, failed_requests=1, cache_hits=1, total_tokens_used=60,
        total_cost=0.00012, avg_response_time=0.25,
        provider_stats={"mock": ProviderStats(requests=3, successes=2, failures=1, tokens_used=60)},
    )

    display.display_metrics(metrics)

    output = buffer.getvalue()
    assert "$0.000120" in output
    assert "2/3 ok, 60 tokens" in output


@pytest.mark.parametrize("seconds, expected", [(0, "0m 0s"), (59.9, "0m 59s"), (125, "2m 5s"), (3725, "1h 2m 5s")])
def test_format_duration(seconds, expected):
    assert format_duration(seconds) == expected
