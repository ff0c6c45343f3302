"""Main entry point for the interviewer application.

Sets up the Typer CLI application, performs dependency injection (Composition Root),
defines CLI commands, and delegates execution to the CommandHandler.
"""

import asyncio
import logging
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar

import typer
from typing_extensions import Annotated

from interviewer.core.client_factory import AIClientFactory
from interviewer.core.command_handler import CommandHandler
from interviewer.domain.exceptions import ConfigurationError
from interviewer.domain.models.common import LANGUAGE_ENGLISH
from interviewer.infrastructure.cli.display import ConsoleDisplay
from interviewer.infrastructure.config.settings import get_config, load_ai_config
from interviewer.infrastructure.monitoring.logger_setup import setup_logging

logger = logging.getLogger(__name__)

T = TypeVar("T")


# --- Dependency Injection Container (Manual) ---

def create_dependencies(provider: str = "", model: str = "", verbose: bool = False) -> Dict[str, Any]:
    """Creates and wires up all dependencies for one command invocation.

    This acts as the Composition Root.

    Raises:
        ConfigurationError: If the configuration or the overrides are invalid.
    """
    config = load_ai_config(validate=False)

    log_level = "DEBUG" if verbose else get_config('logging.level', 'WARNING')
    setup_logging(
        log_level=log_level,
        log_file=get_config('logging.file'),
        log_format=get_config('logging.format', '%(asctime)s - %(name)s - %(levelname)s - %(message)s'),
    )

    dependencies: Dict[str, Any] = {'ui': ConsoleDisplay()}
    dependencies['client_factory'] = AIClientFactory(config)
    dependencies['client'] = dependencies['client_factory'].create_client(provider=provider, model=model)
    dependencies['command_handler'] = CommandHandler(client=dependencies['client'], ui=dependencies['ui'])
    logger.info("All dependencies initialized successfully.")
    return dependencies


# --- Typer App Definition ---
app = typer.Typer(
    name="interviewer",
    help="AI interview assistant: chat interviews, answer evaluation and question generation over OpenAI, Gemini or a mock provider.",
    add_completion=False,
)


# --- Helper for Running Async Commands ---
def run_async(dependencies: Dict[str, Any], action: Callable[[CommandHandler], Awaitable[T]]) -> T:
    """Runs an async handler action and closes the client's HTTP resources afterwards."""
    async def runner() -> T:
        try:
            return await action(dependencies['command_handler'])
        finally:
            await dependencies['client'].aclose()

    return asyncio.run(runner())


def _dependencies_from(ctx: typer.Context) -> Dict[str, Any]:
    options = ctx.obj or {}
    try:
        return create_dependencies(
            provider=options.get('provider') or "",
            model=options.get('model') or "",
            verbose=options.get('verbose', False),
        )
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        ConsoleDisplay().display_error(f"Configuration error: {e}")
        raise typer.Exit(code=1)


# --- CLI Commands ---

MetricsOption = Annotated[
    bool,
    typer.Option("--metrics", help="Print usage metrics (requests, tokens, cost) when done."),
]


@app.command()
def chat(ctx: typer.Context, metrics: MetricsOption = False):
    """Start an interactive interview. It closes after eight candidate messages."""
    dependencies = _dependencies_from(ctx)
    language = ctx.obj.get('language', LANGUAGE_ENGLISH)
    run_async(dependencies, lambda handler: handler.run_chat(language=language, show_metrics=metrics))


@app.command()
def evaluate(
    ctx: typer.Context,
    transcript: Annotated[Path, typer.Argument(
        exists=True, file_okay=True, dir_okay=False, readable=True, resolve_path=True,
        help="YAML or JSON file with questions and answers.")],
    job_description: Annotated[Optional[str], typer.Option(
        "--job", "-j", help="Job description used as evaluation context.")] = None,
    metrics: MetricsOption = False,
):
    """Score a finished interview transcript."""
    dependencies = _dependencies_from(ctx)
    language = ctx.obj.get('language', LANGUAGE_ENGLISH)
    run_async(dependencies, lambda handler: handler.handle_evaluate(
        transcript, job_description=job_description, language=language, show_metrics=metrics))


@app.command()
def questions(
    ctx: typer.Context,
    job_description: Annotated[str, typer.Argument(help="Job description to tailor the questions to.")],
    resume: Annotated[Optional[Path], typer.Option(
        "--resume", "-r", exists=True, file_okay=True, dir_okay=False, readable=True, resolve_path=True,
        help="Candidate resume (plain text). Generates eight mixed questions.")] = None,
    count: Annotated[int, typer.Option("--count", "-n", min=1, help="Number of questions without a resume.")] = 5,
    metrics: MetricsOption = False,
):
    """Generate interview questions for a job description."""
    dependencies = _dependencies_from(ctx)
    run_async(dependencies, lambda handler: handler.handle_questions(
        job_description, resume_path=resume, count=count, show_metrics=metrics))


@app.command()
def providers(ctx: typer.Context):
    """List available providers and their models."""
    dependencies = _dependencies_from(ctx)

    async def show(handler: CommandHandler) -> None:
        handler.handle_providers()

    run_async(dependencies, show)


@app.command()
def health(ctx: typer.Context):
    """Check that at least one provider responds. Exits 1 otherwise."""
    dependencies = _dependencies_from(ctx)
    if not run_async(dependencies, lambda handler: handler.handle_health()):
        raise typer.Exit(code=1)


@app.callback()
def main_callback(
    ctx: typer.Context,
    provider: Annotated[Optional[str], typer.Option(
        "--provider", "-p", help="Provider to use ('openai', 'gemini', 'mock'). Uses AI_DEFAULT_PROVIDER if not set.")] = None,
    model: Annotated[Optional[str], typer.Option(
        "--model", "-m", help="Model name, or 'provider/model'. Uses AI_DEFAULT_MODEL if not set.")] = None,
    language: Annotated[str, typer.Option(
        "--language", "-l", help="Interview language: 'en' or 'zh-TW'.")] = LANGUAGE_ENGLISH,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
):
    """Global options shared by all commands."""
    ctx.obj = {'provider': provider, 'model': model, 'language': language, 'verbose': verbose}


# --- Main Execution Guard ---

def cli_entry_point():
    """Function to be called by the script entry point in pyproject.toml."""
    app()


if __name__ == "__main__":
    cli_entry_point()
