"""CLI for the Maturity Diagnostic.

Provides a command-line interface for answering the questionnaire,
scoring answer files, exporting reports and browsing saved history.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .config import load_config
from .engine import CONTEXT_STEP, MATURITY_STEP, RESULTS_STEP, DiagnosticEngine, DiagnosticReport
from .explainer import adequacy_status, build_copy_summary, format_score, to_title
from .export import build_export_payload, export_to_json, write_export
from .questionnaire import get_default_questionnaire, load_questionnaire, validate_questionnaire
from .schema import DiagnosticState, QuestionnaireSchema
from .store import ReportHistory, StateStore, load_answers_file, state_fingerprint

console = Console()

STATUS_COLORS = {
    "underbuilt": "red",
    "balanced": "green",
    "overbuilt": "yellow",
}


def _load_questionnaire(path: Optional[str]) -> QuestionnaireSchema:
    return load_questionnaire(path) if path else get_default_questionnaire()


@click.group()
@click.version_option(version="1.0.0", prog_name="maturity-diagnostic")
@click.option(
    "--config", "config_path",
    type=click.Path(exists=True),
    help="Path to a diagnostic-config.yaml (default: auto-detect)"
)
@click.option(
    "--log-level",
    default="WARNING",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging verbosity"
)
def main(config_path: Optional[str], log_level: str):
    """Design System Maturity Diagnostic.

    Compares structural maturity (SSI) against operational pressure (OPI)
    and suggests where practice consistency may need reinforcement.
    """
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    load_config(Path(config_path) if config_path else None)


@main.command("questions")
@click.option(
    "--questionnaire", "-q",
    type=click.Path(exists=True),
    help="Path to a custom questionnaire (YAML or JSON)"
)
def questions_cmd(questionnaire: Optional[str]):
    """Show the questionnaire with answer options."""
    try:
        schema = _load_questionnaire(questionnaire)

        context = schema.operational_context
        console.print(f"\n[bold blue]{context.title}[/bold blue]")
        if context.description:
            console.print(f"[dim]{context.description}[/dim]")
        console.print()
        for i, q in enumerate(context.questions, 1):
            console.print(f"[bold cyan]{i}. {q.prompt}[/bold cyan]")
            console.print(f"   ID: {q.id}")
            for opt in q.options:
                console.print(f"     - {opt.score}: {opt.label}")
            console.print()

        maturity = schema.structural_maturity
        console.print(f"[bold blue]{maturity.title}[/bold blue]")
        if maturity.description:
            console.print(f"[dim]{maturity.description}[/dim]")
        for dimension in maturity.dimensions:
            console.print(f"\n[bold]{dimension}[/bold]")
            for q in schema.questions_for_dimension(dimension):
                console.print(f"  [cyan]{q.prompt}[/cyan]")
                console.print(f"   ID: {q.id}")
                if q.help_text:
                    console.print(f"   [dim]{q.help_text}[/dim]")
                labels = ", ".join(f"{k}={v}" for k, v in sorted(q.scoring_labels.items()))
                if labels:
                    console.print(f"   Scale: {labels}")

    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


@main.command("score")
@click.option(
    "--answers", "-a",
    required=True,
    type=click.Path(exists=True),
    help="Path to an answers file (JSON or YAML)"
)
@click.option(
    "--questionnaire", "-q",
    type=click.Path(exists=True),
    help="Path to a custom questionnaire (YAML or JSON)"
)
@click.option(
    "--out", "-o",
    type=click.Path(),
    help="Write the JSON export to this file or directory"
)
@click.option(
    "--json-output", "-j",
    is_flag=True,
    help="Output the raw JSON export instead of formatted text"
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Show the pressure breakdown and per-dimension detail"
)
@click.option(
    "--save/--no-save",
    default=False,
    help="Add the result to the saved report history"
)
def score_cmd(
    answers: str,
    questionnaire: Optional[str],
    out: Optional[str],
    json_output: bool,
    verbose: bool,
    save: bool,
):
    """Score an answers file.

    Examples:
        maturity-diagnostic score -a answers.json
        maturity-diagnostic score -a answers.yaml -v --save
        maturity-diagnostic score -a answers.json -j > report.json
    """
    try:
        engine = DiagnosticEngine(_load_questionnaire(questionnaire))
        state = load_answers_file(answers)
        result = engine.build_report(state)
        payload = build_export_payload(result.report, result.guidance, state.context_responses)

        if json_output:
            click.echo(export_to_json(payload))
        else:
            display_result(result, verbose)

        if out:
            path = write_export(payload, out)
            if not json_output:
                console.print(f"\n[green]Report saved to {path}[/green]")

        if save:
            ReportHistory().save_snapshot(
                result.report, result.summary, result.guidance, state_fingerprint(state)
            )

    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


@main.command("validate")
@click.option(
    "--answers", "-a",
    type=click.Path(exists=True),
    help="Path to an answers file (JSON or YAML)"
)
@click.option(
    "--questionnaire", "-q",
    type=click.Path(),
    help="Path to a questionnaire file (YAML or JSON)"
)
def validate_cmd(answers: Optional[str], questionnaire: Optional[str]):
    """Validate a questionnaire and/or check an answers file is complete.

    Answers are checked against the given questionnaire, or the bundled
    one. Exits with status 1 on any problem.

    Examples:
        maturity-diagnostic validate -q questionnaire.yaml
        maturity-diagnostic validate -a answers.json
        maturity-diagnostic validate -q questionnaire.yaml -a answers.json
    """
    if not answers and not questionnaire:
        console.print("[yellow]Please specify --answers and/or --questionnaire to validate[/yellow]")
        return

    all_valid = True

    if questionnaire:
        is_valid, issues = validate_questionnaire(questionnaire)
        if is_valid:
            console.print(f"[green]✓ Questionnaire valid: {questionnaire}[/green]")
        else:
            console.print(f"[red]✗ Questionnaire invalid: {questionnaire}[/red]")
            for issue in issues:
                console.print(f"  - {issue}")
            all_valid = False

    if answers:
        try:
            engine = DiagnosticEngine(_load_questionnaire(questionnaire))
            state = load_answers_file(answers)
        except Exception as e:
            console.print(f"[red]Error: {e}[/red]")
            sys.exit(1)

        answers_complete = True
        for step in (CONTEXT_STEP, MATURITY_STEP):
            message = engine.validate_step(state, step)
            if message is None:
                continue
            answers_complete = False
            console.print(f"[red]✗ {message}[/red]")
            for question_id in engine.missing_questions(state, step):
                console.print(f"  - {question_id}")

        if answers_complete:
            console.print(f"[green]✓ All questions answered: {answers}[/green]")
        all_valid = all_valid and answers_complete

    sys.exit(0 if all_valid else 1)


@main.command("export")
@click.option(
    "--answers", "-a",
    required=True,
    type=click.Path(exists=True),
    help="Path to an answers file (JSON or YAML)"
)
@click.option(
    "--questionnaire", "-q",
    type=click.Path(exists=True),
    help="Path to a custom questionnaire (YAML or JSON)"
)
@click.option(
    "--out", "-o",
    type=click.Path(),
    default=".",
    help="Output file or directory (default: current directory)"
)
def export_cmd(answers: str, questionnaire: Optional[str], out: str):
    """Write the JSON report export for an answers file."""
    try:
        engine = DiagnosticEngine(_load_questionnaire(questionnaire))
        state = load_answers_file(answers)
        result = engine.build_report(state)
        payload = build_export_payload(result.report, result.guidance, state.context_responses)
        path = write_export(payload, out)
        console.print(f"[green]✓[/green] Report exported to: {path}")
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


@main.command("run")
@click.option(
    "--state", "state_path",
    type=click.Path(),
    help="State file (default: from config)"
)
@click.option(
    "--questionnaire", "-q",
    type=click.Path(exists=True),
    help="Path to a custom questionnaire (YAML or JSON)"
)
@click.option(
    "--reset",
    is_flag=True,
    help="Discard saved answers and start over"
)
def run_cmd(state_path: Optional[str], questionnaire: Optional[str], reset: bool):
    """Answer the questionnaire interactively.

    Answers are saved after every question, so an interrupted run resumes
    where it stopped.
    """
    try:
        engine = DiagnosticEngine(_load_questionnaire(questionnaire))
        store = StateStore(state_path)
        state = store.clear() if reset else store.load()

        if state.current_step == RESULTS_STEP:
            state.current_step = CONTEXT_STEP

        if state.current_step == CONTEXT_STEP:
            prompt_context_answers(engine, state, store)
            state.current_step = MATURITY_STEP
            store.save(state)

        if state.current_step == MATURITY_STEP:
            prompt_maturity_answers(engine, state, store)
            state.current_step = RESULTS_STEP
            store.save(state)

        result = engine.build_report(state)
        display_result(result, verbose=False)

        history = ReportHistory()
        saved = history.save_snapshot(
            result.report, result.summary, result.guidance, state_fingerprint(state)
        )
        console.print(f"\n[dim]{len(saved)} report(s) in history. Run 'maturity-diagnostic history' to list them.[/dim]")

    except click.Abort:
        console.print("\n[yellow]Stopped. Your answers so far are saved.[/yellow]")
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


@main.command("history")
@click.option(
    "--limit", "-n",
    default=10,
    type=int,
    help="Number of saved reports to show"
)
def history_cmd(limit: int):
    """List saved reports, newest first."""
    try:
        reports = ReportHistory().load()
        if not reports:
            console.print("No saved report yet.")
            return

        table = Table(show_header=True, header_style="bold")
        table.add_column("Saved", style="cyan", no_wrap=True)
        table.add_column("SSI", justify="right")
        table.add_column("OPI", justify="right")
        table.add_column("Gap", justify="right")
        table.add_column("Status")
        table.add_column("Risks", justify="right")

        for item in reports[:limit]:
            status = adequacy_status(item.adequacy_gap)
            color = STATUS_COLORS.get(status.class_name, "white")
            table.add_row(
                item.timestamp,
                format_score(item.ssi),
                format_score(item.opi),
                format_score(item.adequacy_gap),
                f"[{color}]{status.label}[/{color}]",
                str(len(item.risks)),
            )

        console.print(table)
        if len(reports) > limit:
            console.print(f"\n[dim]... and {len(reports) - limit} more[/dim]")

    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


@main.command("init-config")
@click.option(
    "--out", "-o",
    type=click.Path(),
    default="diagnostic-config.yaml",
    help="Output path for the configuration file"
)
@click.option(
    "--force", "-f",
    is_flag=True,
    help="Overwrite existing config file"
)
def init_config_cmd(out: str, force: bool):
    """Generate a default configuration file.

    Example:
        maturity-diagnostic init-config --out my-config.yaml
    """
    from .config import save_default_config

    out_path = Path(out)
    if out_path.exists() and not force:
        console.print(f"[red]Error:[/red] Config file already exists: {out}")
        console.print("Use --force to overwrite")
        sys.exit(1)

    try:
        save_default_config(out_path)
        console.print(f"[green]✓[/green] Config file created: {out}")
        console.print("\nThis file configures:")
        console.print("  • risk_thresholds - When dimension, entropy and drift risks are flagged")
        console.print("  • status_thresholds - Gap bands for Underbuilt / Balanced / Overbuilt")
        console.print("  • history - How many saved reports are kept")
        console.print("  • storage - Where answers and report history are stored")
    except Exception as e:
        console.print(f"[red]Error creating config:[/red] {e}")
        sys.exit(1)


def _prompt_choice(prompt: str, choices: list[tuple[int, str]]) -> int:
    """Prompt for one of a list of (score, label) choices by number."""
    choice_map = {str(idx): score for idx, (score, _) in enumerate(choices, 1)}

    console.print(f"[bold cyan]{prompt}[/bold cyan]")
    for idx, (_, label) in enumerate(choices, 1):
        console.print(f"     [bold]{idx}[/bold]. {label}")

    raw_answer = click.prompt(
        f"   Select [1-{len(choices)}]",
        type=click.Choice(list(choice_map)),
        show_choices=False,
    )
    return choice_map[raw_answer]


def prompt_context_answers(engine: DiagnosticEngine, state: DiagnosticState, store: StateStore) -> None:
    """Prompt for unanswered operational context questions."""
    section = engine.questionnaire.operational_context
    missing = set(engine.missing_questions(state, CONTEXT_STEP))
    if not missing:
        return

    console.print(f"\n[bold yellow]━━━ Step 1/3: {section.title} ━━━[/bold yellow]")
    if section.description:
        console.print(f"[dim]{section.description}[/dim]\n")

    for q in section.questions:
        if q.id not in missing:
            continue
        choices = [(opt.score, opt.label) for opt in q.options]
        state.context_responses[q.id] = _prompt_choice(q.prompt, choices)
        store.save(state)
        console.print()


def prompt_maturity_answers(engine: DiagnosticEngine, state: DiagnosticState, store: StateStore) -> None:
    """Prompt for unanswered structural maturity questions, by dimension."""
    section = engine.questionnaire.structural_maturity
    missing = set(engine.missing_questions(state, MATURITY_STEP))
    if not missing:
        return

    console.print(f"\n[bold yellow]━━━ Step 2/3: {section.title} ━━━[/bold yellow]")
    if section.description:
        console.print(f"[dim]{section.description}[/dim]")

    for dimension in section.dimensions:
        questions = [q for q in engine.questionnaire.questions_for_dimension(dimension) if q.id in missing]
        if not questions:
            continue
        console.print(f"\n[bold]{dimension}[/bold]")
        for q in questions:
            if q.help_text:
                console.print(f"[dim]{q.help_text}[/dim]")
            choices = [
                (value, f"{value} - {q.scoring_labels.get(value, '')}")
                for value in range(4)
            ]
            state.responses[q.id] = _prompt_choice(q.prompt, choices)
            store.save(state)
            console.print()


def display_result(result: DiagnosticReport, verbose: bool):
    """Display a diagnostic report in formatted text."""
    report = result.report
    color = STATUS_COLORS.get(result.status.class_name, "white")
    gap_color = "red" if report.adequacy_gap < 0 else "green"

    console.print(Panel(
        f"{result.summary}\n\n"
        f"SSI: [bold]{format_score(report.ssi)}[/bold] | "
        f"OPI: [bold]{format_score(report.opi)}[/bold] | "
        f"Adequacy Gap: [{gap_color}]{format_score(report.adequacy_gap)}[/{gap_color}] "
        f"([{color}]{result.status.label}[/{color}])",
        title="Results",
    ))
    console.print(
        "[dim]This tool describes alignment between system practices and operational "
        "pressure. It is a reflective diagnostic, not an audit.[/dim]"
    )

    table = Table(show_header=True, header_style="bold")
    table.add_column("Dimension", style="cyan")
    table.add_column("Score", justify="right")
    table.add_column("Gap vs OPI", justify="right")
    if verbose:
        table.add_column("Avg (0-3)", justify="right")
        table.add_column("Answered", justify="right")
    for dimension, score in report.dimension_scores.items():
        risk = report.risks.by_dimension.get(dimension)
        gap = report.dimension_gaps.get(dimension, 0.0)
        gap_text = f"[red]{format_score(gap)}[/red]" if risk and risk.risk else format_score(gap)
        row = [to_title(dimension), format_score(score.score100), gap_text]
        if verbose:
            row.extend([f"{score.avg:.2f}", f"{score.answered}/{score.total}"])
        table.add_row(*row)
    console.print(table)

    if verbose:
        console.print("\n[bold]Operational Pressure Breakdown:[/bold]")
        for factor, item in report.operational_pressure.breakdown.items():
            console.print(
                f"  • {factor}: level {item.raw:g} → {format_score(item.score100)} "
                f"× {item.weight:.2f} = {format_score(item.contribution)}"
            )

    console.print("\n[bold]Stronger signals:[/bold]")
    for item in result.strengths:
        console.print(f"  [green]•[/green] {item.dimension} ({format_score(item.score100)})")

    console.print("\n[bold]Emerging signals:[/bold]")
    for item in result.weaknesses:
        console.print(f"  [yellow]•[/yellow] {item.dimension} ({format_score(item.score100)})")

    console.print("\n[bold]Potential signals to monitor:[/bold]")
    if result.risks:
        for risk in result.risks:
            console.print(f"  [red]•[/red] {risk}")
    else:
        console.print("  [green]No strong gap signals were detected in this response set.[/green]")

    console.print("\n[bold]Actionable next steps:[/bold]")
    for tip in result.guidance:
        console.print(f"  • {tip}")

    if verbose:
        console.print("\n[bold]Copyable summary:[/bold]")
        console.print(build_copy_summary(report, result.summary), markup=False)


if __name__ == "__main__":
    main()
