import logging
import time
from datetime import datetime
from typing import Any, Dict, List, Optional

from rich.align import Align
from rich.box import HEAVY, ROUNDED, SIMPLE
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from interviewer.domain.interfaces.user_interface import UserInterface
from interviewer.domain.models.ai import InterviewQuestion
from interviewer.domain.models.metrics import UsageMetrics

logger = logging.getLogger(__name__)


def format_duration(seconds: float) -> str:
    minutes, secs = divmod(int(seconds), 60)
    hours, minutes = divmod(minutes, 60)
    return f"{hours}h {minutes}m {secs}s" if hours else f"{minutes}m {secs}s"


class ConsoleDisplay(UserInterface):
    """UserInterface implementation rendering to the terminal with rich."""

    def __init__(self, console: Optional[Console] = None):
        self._console = console or Console()
        self.session_start_time = time.time()
        self.message_count = 0
        self.last_sender: Optional[str] = None

    @property
    def console(self) -> Console:
        return self._console

    def display_output(self, output: str, **kwargs: Any) -> None:
        """Renders a chat turn as a Markdown panel.

        Args:
            output: Message text; interviewer replies may contain Markdown.
            **kwargs: `title` names the sender (default "Interviewer").
        """
        title = kwargs.get("title", "Interviewer")
        self.message_count += 1
        logger.debug(f"display_output called: title={title}, content_length={len(output)}")

        if self.last_sender != title:
            self.console.print("")
        self.last_sender = title

        timestamp = datetime.now().strftime("%H:%M:%S")
        is_candidate = title.lower() in ("you", "candidate")
        border_style = "green" if is_candidate else "blue"
        header = f"[bold white]{title}[/bold white] [dim]·[/dim] [dim white]{timestamp}[/dim white]"

        panel = Panel(
            Markdown(output),
            title=header,
            title_align="left",
            border_style=border_style,
            box=SIMPLE if is_candidate else ROUNDED,
            padding=(0, 1),
        )
        self.console.print(panel)

    def get_prompt(self, prompt_message: str = "> ") -> str:
        self.last_sender = None
        self.console.print("")
        user_input = self.console.input(f"[bold green] {prompt_message} [/bold green] ")
        self.message_count += 1
        return user_input

    def display_error(self, error_message: str, **kwargs: Any) -> None:
        panel = Panel(
            Text(error_message, style="white"),
            title="[bold red]Error[/bold red]",
            border_style="red",
            box=HEAVY,
            padding=(0, 1),
        )
        self.console.print(panel)

    def display_info(self, info_message: str, **kwargs: Any) -> None:
        panel = Panel(
            Text(info_message, style="white"),
            title="[bold blue]Info[/bold blue]",
            border_style="blue",
            box=SIMPLE,
            padding=(0, 1),
        )
        self.console.print(panel)

    def display_warning(self, warning_message: str, **kwargs: Any) -> None:
        logger.warning(f"Display warning: {warning_message}")
        panel = Panel(
            Text(warning_message, style="white"),
            title="[bold yellow]Warning[/bold yellow]",
            border_style="yellow",
            box=HEAVY,
            padding=(0, 1),
        )
        self.console.print(panel)

    def display_session_header(self, provider_name: str, model_name: str, language: str) -> None:
        table = Table(show_header=False, box=ROUNDED, border_style="cyan", padding=(0, 1))
        table.add_column("Content", style="cyan")
        table.add_row("[bold cyan]Interview Session[/bold cyan]")
        table.add_row(f"Provider: [bold]{provider_name}[/bold]  Model: [bold]{model_name}[/bold]")
        table.add_row(f"Language: [bold]{language}[/bold]")
        table.add_row(f"Started at {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
        table.add_row("Type 'exit' or 'quit' to leave early")

        self.console.print("")
        self.console.print(Align.center(table))
        self.console.print("")

    def display_session_footer(self, message_count: int, session_duration_secs: float) -> None:
        table = Table(show_header=False, box=SIMPLE, border_style="cyan", padding=(0, 1))
        table.add_column("Content", style="cyan")
        table.add_row("[bold cyan]Interview Summary[/bold cyan]")
        table.add_row(f"Candidate messages: [bold]{message_count}[/bold]")
        table.add_row(f"Duration: [bold]{format_duration(session_duration_secs)}[/bold]")

        self.console.print("")
        self.console.print(Align.center(table))
        self.console.print("")

    def display_questions(self, questions: List[InterviewQuestion]) -> None:
        if not questions:
            self.display_warning("The provider returned no parseable questions.")
            return

        table = Table(show_header=True, box=ROUNDED, border_style="cyan", padding=(0, 1))
        table.add_column("#", style="cyan", justify="right")
        table.add_column("Question", style="white")
        table.add_column("Category", style="bold")
        table.add_column("Difficulty")
        table.add_column("Minutes", justify="right")
        for i, question in enumerate(questions, 1):
            table.add_row(
                str(i), question.question, question.category, question.difficulty, str(question.expected_time))
        self.console.print(table)

    def display_evaluation(self, score: float, feedback: str) -> None:
        style = "green" if score >= 0.7 else "yellow" if score >= 0.4 else "red"
        panel = Panel(
            Markdown(feedback or "_No feedback returned._"),
            title=f"[bold {style}]Score: {score:.0%}[/bold {style}]",
            title_align="left",
            border_style=style,
            box=ROUNDED,
            padding=(0, 1),
        )
        self.console.print(panel)

    def display_provider_info(self, info: Dict[str, Dict[str, Any]], current_provider: str) -> None:
        table = Table(show_header=True, box=ROUNDED, border_style="cyan", padding=(0, 1))
        table.add_column("Provider", style="bold")
        table.add_column("Name")
        table.add_column("Models")
        table.add_column("Max tokens", justify="right")
        for name, details in info.items():
            marker = " [green](default)[/green]" if name == current_provider else ""
            table.add_row(
                f"{name}{marker}",
                str(details.get("name", "")),
                ", ".join(details.get("models", [])),
                str(details.get("max_tokens", "")),
            )
        self.console.print(table)

    def display_metrics(self, metrics: UsageMetrics) -> None:
        table = Table(show_header=True, box=ROUNDED, border_style="cyan", padding=(0, 1))
        table.add_column("Metric", style="bold")
        table.add_column("Value", justify="right")
        table.add_row("Requests", str(metrics.total_requests))
        table.add_row("Successful", str(metrics.successful_requests))
        table.add_row("Failed", str(metrics.failed_requests))
        table.add_row("Cache hits", str(metrics.cache_hits))
        table.add_row("Tokens", str(metrics.total_tokens_used))
        table.add_row("Cost", f"${metrics.total_cost:.6f}")
        table.add_row("Avg response time", f"{metrics.avg_response_time:.3f}s")
        for name, stats in metrics.provider_stats.items():
            table.add_row(f"[cyan]{name}[/cyan]", f"{stats.successes}/{stats.requests} ok, {stats.tokens_used} tokens")
        self.console.print(table)
