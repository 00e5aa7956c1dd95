"""
Typer CLI for the quiz engine.

Commands:
    quiz-engine scopes                    - List quiz/topic scopes in the question bank
    quiz-engine take QUIZ_ID              - Take a quiz, then remediate missed questions
    quiz-engine practice SCOPE_ID         - Practice questions at one difficulty
    quiz-engine sessions sweep            - Delete sessions older than the expiry window
    quiz-engine serve                     - Run the HTTP API

Usage:
    quiz-engine --help
    quiz-engine take integrals-101
    quiz-engine practice integrals-101 --difficulty hard --rounds 8
    quiz-engine sessions sweep --hours 1
"""

from __future__ import annotations

import os
import sys

# Fix Windows encoding issues for Unicode characters (box drawing)
if sys.platform == "win32":
    os.environ.setdefault("PYTHONIOENCODING", "utf-8")
    if hasattr(sys.stdout, "reconfigure"):
        sys.stdout.reconfigure(encoding="utf-8", errors="replace")

from datetime import timedelta
from typing import Optional

import typer
from loguru import logger
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

from config import get_settings
from quiz_engine.core.errors import QuizEngineError
from quiz_engine.core.logging import configure_logging
from quiz_engine.quiz.models import Difficulty, Question, QuestionType
from quiz_engine.services import EngineServices, build_services
from quiz_engine.study.attempt_service import WrongQuestion

app = typer.Typer(
    help="quiz-engine CLI: quizzes, remediation and practice over a question bank",
    no_args_is_help=True,
)
sessions_app = typer.Typer(help="Session housekeeping")
app.add_typer(sessions_app, name="sessions")

console = Console()

DIFFICULTY_CHOICES = [d.value for d in Difficulty]


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show engine debug logs"),
):
    configure_logging(level="DEBUG" if verbose else "WARNING")


# ========================================
# Presentation helpers
# ========================================


def _show_question(question: Question, header: str) -> None:
    lines = [question.body, ""]
    for option in question.options:
        lines.append(f"  [cyan]{option.label}[/cyan]  {option.text}")
    console.print(
        Panel(
            "\n".join(lines).rstrip(),
            title=header,
            subtitle=question.difficulty.value,
            border_style="blue",
        )
    )


def _ask_answer(question: Question) -> str:
    """Prompt for an answer; returns an option id or free text."""
    if question.question_type == QuestionType.OPEN_ENDED or not question.options:
        return Prompt.ask("Your answer")

    labels = [option.label for option in question.options]
    label = Prompt.ask("Your answer", choices=labels)
    return next(option.id for option in question.options if option.label == label)


def _show_feedback(is_correct: bool, correct_answer: str, explanation: str) -> None:
    if is_correct:
        console.print("[green]Correct![/green]")
    else:
        console.print(f"[red]Incorrect.[/red] Correct answer: [bold]{correct_answer}[/bold]")
    if explanation:
        console.print(f"[dim]{explanation}[/dim]")
    console.print()


def _fail(exc: QuizEngineError) -> None:
    console.print(f"[red]{type(exc).__name__}:[/red] {exc}")
    raise typer.Exit(code=1)


# ========================================
# Commands
# ========================================


@app.command("scopes")
def list_scopes():
    """List the scopes in the question bank."""
    services = build_services()

    table = Table(title="Question Scopes")
    table.add_column("Scope", style="cyan")
    table.add_column("Title")
    table.add_column("Questions", justify="right")
    table.add_column("By difficulty")

    for scope in services.repository.list_scopes():
        by_difficulty = ", ".join(f"{d}: {n}" for d, n in sorted(scope.difficulties.items()))
        table.add_row(scope.id, scope.title, str(scope.question_count), by_difficulty)

    console.print(table)


@app.command("take")
def take_quiz(
    quiz_id: str = typer.Argument(..., help="Quiz scope id"),
    remediate: bool = typer.Option(
        True, "--remediate/--no-remediate", help="Offer remediation for missed questions"
    ),
):
    """Take a quiz one question at a time."""
    services = build_services()

    try:
        started = services.attempts.start(quiz_id)
        question: Optional[Question] = started.first_question
        index = 0
        while question is not None:
            index += 1
            _show_question(question, f"Question {index}/{started.total_questions}")
            outcome = services.attempts.answer(started.attempt_id, question.id, _ask_answer(question))
            _show_feedback(outcome.is_correct, outcome.correct_answer, outcome.explanation)
            question = outcome.next_question

        summary = services.attempts.summary(started.attempt_id)
    except QuizEngineError as exc:
        _fail(exc)

    console.print(
        Panel(
            f"Score: [bold]{summary.score}/{summary.total}[/bold] ({summary.percentage}%)",
            title="Quiz Summary",
            border_style="green" if not summary.remediation_required else "yellow",
        )
    )

    if not summary.wrong_questions:
        return

    table = Table(title="Missed Questions")
    table.add_column("Question")
    table.add_column("Your answer", style="red")
    table.add_column("Correct answer", style="green")
    for wrong in summary.wrong_questions:
        table.add_row(wrong.question_text, wrong.user_answer, wrong.correct_answer)
    console.print(table)

    if not remediate:
        return

    for wrong in summary.wrong_questions:
        if Confirm.ask(f"Remediate \"{wrong.question_text}\"?", default=True):
            _run_remediation(services, started.attempt_id, wrong)


def _run_remediation(services: EngineServices, attempt_id: str, wrong: WrongQuestion) -> None:
    difficulty = Prompt.ask(
        "Difficulty",
        choices=DIFFICULTY_CHOICES,
        default=wrong.recommended_difficulty.value,
    )

    try:
        view = services.remediation.begin(attempt_id, wrong.question_id, difficulty)
        question = view.question
        served = 0
        while question is not None:
            served += 1
            _show_question(
                question,
                f"Remedial {served} ({view.completed}/{view.required} correct)",
            )
            outcome = services.remediation.submit(view.remediation_id, _ask_answer(question))
            _show_feedback(outcome.is_correct, outcome.correct_answer, outcome.explanation)
            view.completed = outcome.completed
            question = outcome.next_question
    except QuizEngineError as exc:
        _fail(exc)

    console.print(f"[green]Remediation complete[/green] after {served} questions.\n")


@app.command("practice")
def practice(
    scope_id: str = typer.Argument(..., help="Scope to practice"),
    difficulty: str = typer.Option(
        Difficulty.EASY.value, "--difficulty", "-d", help="easy, standard or hard"
    ),
    rounds: int = typer.Option(5, "--rounds", "-n", min=1, help="Questions to answer"),
):
    """Answer practice questions, generating more as needed."""
    if difficulty not in DIFFICULTY_CHOICES:
        console.print(f"[red]Unknown difficulty:[/red] {difficulty}")
        raise typer.Exit(code=1)

    services = build_services()

    try:
        started = services.practice.start(scope_id, difficulty)
        if not started.context_used:
            console.print(
                f"[yellow]No {difficulty} questions in {scope_id}; using general practice questions.[/yellow]"
            )

        queue = list(started.questions)
        for round_number in range(1, rounds + 1):
            if not queue:
                queue.append(services.practice.generate_more(started.session_id))
            question = queue.pop(0)
            _show_question(question, f"Practice {round_number}/{rounds}")
            outcome = services.practice.answer(started.session_id, question.id, _ask_answer(question))
            _show_feedback(outcome.is_correct, outcome.correct_answer, outcome.explanation)

        stats = services.practice.get(started.session_id)
    except QuizEngineError as exc:
        _fail(exc)

    console.print(
        f"Practice done: [bold]{stats.total_correct}/{stats.questions_completed}[/bold] "
        f"correct ({stats.accuracy}%)"
    )


@sessions_app.command("sweep")
def sweep_sessions(
    hours: Optional[int] = typer.Option(
        None, "--hours", min=0, help="Maximum session age (default: session_expiry_hours)"
    ),
):
    """Delete sessions not saved within the expiry window."""
    settings = get_settings()
    max_age = hours if hours is not None else settings.session_expiry_hours

    services = build_services(settings)
    removed = services.store.sweep_expired(timedelta(hours=max_age), locks=services.locks)
    console.print(f"Removed [bold]{removed}[/bold] sessions older than {max_age}h")


@app.command("serve")
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind host (default: api_host)"),
    port: Optional[int] = typer.Option(None, "--port", help="Bind port (default: api_port)"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
):
    """Run the HTTP API with uvicorn."""
    import uvicorn

    settings = get_settings()
    logger.info("Starting quiz engine API")
    uvicorn.run(
        "quiz_engine.api.main:app",
        host=host or settings.api_host,
        port=port or settings.api_port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    app()
