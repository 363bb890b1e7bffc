"""Interactive CLI application."""
import logging
from dataclasses import replace
from datetime import date
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

from jee_tracker.assistant import GeminiAssistant
from jee_tracker.config import get_settings
from jee_tracker.dashboard import (
    days_until_exam, get_confidence_color, get_confidence_label, get_focus_chapters,
    get_subject_progress, get_test_kpis, score_trend, sort_tests,
)
from jee_tracker.dates import days_between, format_ddmmyy, parse_date, today_iso
from jee_tracker.db import init_db
from jee_tracker.exporter import export_backup, export_logs_csv
from jee_tracker.importer import BackupFormatError, import_backup, import_logs_csv
from jee_tracker.models import (
    PYQ_YEARS, AppState, DailyLog, PlannerTask, RevisionTile, Subject, SubjectScore,
    TestRecord, TestScores, TestType, new_id,
)
from jee_tracker.mutations import (
    add_revision_tile, cycle_priority, delete_chapter, delete_planner_task, delete_revision_tile,
    delete_test, merge_logs, save_planner_task, save_test, set_chapter_confidence,
    toggle_planner_task, toggle_pyq_year, toggle_revision, toggle_theme, upsert_daily_log,
)
from jee_tracker.planner import chapter_for_task, tasks_for_week
from jee_tracker.seed import is_seeded, seed_all
from jee_tracker.session import AssistantSession, FileExporter, SessionBusyError
from jee_tracker.stats import overall_stats, subject_stats
from jee_tracker.storage import load_state, save_state

console = Console()

MENU_WORDS = ("q", "menu", "back")


class BackToMenu(Exception):
    """Raised when the user types 'q', 'menu' or 'back' inside a command."""


def ask(prompt: str, **kwargs) -> str:
    answer = Prompt.ask(prompt, **kwargs)
    if answer is not None and answer.strip().lower() in MENU_WORDS:
        raise BackToMenu()
    return answer


def ask_int(prompt: str, default: Optional[int] = None) -> int:
    while True:
        kwargs = {} if default is None else {"default": str(default)}
        answer = ask(prompt, **kwargs)
        try:
            return int(answer)
        except (TypeError, ValueError):
            console.print("[red]Please enter a whole number.[/red]")


def show_welcome():
    console.print(Panel(
        f"[bold]JEE Study Tracker[/bold]\n[dim]{days_until_exam()} days to the exam[/dim]",
        title="Welcome", border_style="magenta",
    ))


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("dashboard", "KPIs, syllabus progress, focus chapters"),
        ("chapters", "Syllabus tracker"),
        ("tests", "Test analysis"),
        ("revisions", "Revision timeline"),
        ("planner", "Weekly planner"),
        ("log", "Daily progress log"),
        ("ask", "Talk to the assistant"),
        ("export", "Back up data / logs"),
        ("import", "Restore backup / import logs"),
        ("theme", "Toggle dark/light"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def _bar(percent: int, width: int = 20) -> str:
    filled = max(0, min(width, round(percent * width / 100)))
    return "█" * filled + "░" * (width - filled)


def _pick_subject() -> Subject:
    choice = ask("Subject", choices=["p", "c", "m"], default="p")
    return {"p": Subject.PHYSICS, "c": Subject.CHEMISTRY, "m": Subject.MATHEMATICS}[choice]


# Dashboard

def cmd_dashboard(db_path: str):
    state = load_state(db_path)
    kpis = get_test_kpis(state.tests)
    console.print(Panel(
        f"[bold]{days_until_exam()}[/bold] days to go  |  Tests: [bold]{kpis['count']}[/bold]  |  "
        f"Avg: [bold]{kpis['avg_score']}[/bold]  |  Best: [bold]{kpis['best_score']}[/bold]  |  "
        f"Last 5: [bold]{kpis['last5_avg']}[/bold]",
        title="Dashboard", border_style="magenta",
    ))

    table = Table(title="Syllabus Progress")
    table.add_column("Subject", style="cyan")
    table.add_column("Chapters", justify="right")
    table.add_column("PYQ Completion")
    table.add_column("Confidence")
    for subject in Subject:
        progress = get_subject_progress(state, subject)
        color = get_confidence_color(progress["avg_confidence"])
        table.add_row(
            subject.value,
            str(progress["total_chapters"]),
            f"{_bar(progress['avg_completion'])} {progress['avg_completion']}%",
            f"[{color}]{progress['avg_confidence']}% {get_confidence_label(progress['avg_confidence'])}[/{color}]",
        )
    console.print(table)

    focus = get_focus_chapters(state)
    if focus:
        console.print("\n[bold]Focus chapters:[/bold]")
        for ch in focus:
            console.print(f"  [red]{ch.confidence}%[/red] {ch.name} [dim]({ch.subject.value}, {ch.priority.value})[/dim]")


# Chapters

def _chapter_table(state: AppState, subject: Subject) -> list:
    chapters = [c for c in state.chapters if c.subject == subject]
    table = Table(title=f"{subject.value} Chapters")
    table.add_column("#", justify="right")
    table.add_column("Chapter", style="cyan")
    table.add_column("Unit")
    table.add_column("Prio", justify="center")
    table.add_column("Conf", justify="right")
    table.add_column("R1/R2", justify="center")
    table.add_column("PYQs " + " ".join(str(y)[2:] for y in PYQ_YEARS))
    for i, ch in enumerate(chapters, 1):
        color = get_confidence_color(ch.confidence)
        revs = ("✓" if ch.rev1 else "·") + ("✓" if ch.rev2 else "·")
        pyqs = "  ".join("✓" if p.completed else "·" for p in ch.pyqs)
        table.add_row(
            str(i), ch.name, ch.unit, ch.priority.value,
            f"[{color}]{ch.confidence}%[/{color}]", revs, pyqs,
        )
    console.print(table)
    return chapters


def cmd_chapters(db_path: str):
    subject = _pick_subject()
    while True:
        state = load_state(db_path)
        chapters = _chapter_table(state, subject)
        if not chapters:
            console.print("[yellow]No chapters for this subject.[/yellow]")
            return
        action = ask("Action", choices=["conf", "prio", "rev", "pyq", "delete", "done"], default="done")
        if action == "done":
            return
        number = ask_int("Chapter #")
        if not 1 <= number <= len(chapters):
            console.print("[red]No such chapter.[/red]")
            continue
        chapter = chapters[number - 1]
        if action == "conf":
            state = set_chapter_confidence(state, chapter.id, ask_int("Confidence (0-100)", chapter.confidence))
        elif action == "prio":
            state = cycle_priority(state, chapter.id)
        elif action == "rev":
            state = toggle_revision(state, chapter.id, int(ask("Revision", choices=["1", "2"])))
        elif action == "pyq":
            year = ask("Year", choices=[str(y) for y in PYQ_YEARS])
            state = toggle_pyq_year(state, chapter.id, int(year))
        elif action == "delete":
            if not Confirm.ask(f"Delete {chapter.name} and its revision plans?"):
                continue
            state = delete_chapter(state, chapter.id)
        save_state(db_path, state)


# Tests

def _subject_score(label: str) -> SubjectScore:
    return SubjectScore(
        correct=max(0, ask_int(f"{label} correct", 0)),
        incorrect=max(0, ask_int(f"{label} incorrect", 0)),
        unattempted=max(0, ask_int(f"{label} unattempted", 0)),
    )


def _add_test(state: AppState) -> AppState:
    name = ask("Test name")
    day = parse_date(ask("Date (YYYY-MM-DD)", default=today_iso())).isoformat()
    test_type = TestType(ask("Type", choices=[t.value for t in TestType], default=TestType.FULL_SYLLABUS.value))
    subject = None
    scores = TestScores()
    if test_type.single_subject:
        subject = _pick_subject()
        setattr(scores, subject.score_key, _subject_score(subject.value))
    else:
        scores = TestScores(
            physics=_subject_score("Physics"),
            chemistry=_subject_score("Chemistry"),
            maths=_subject_score("Mathematics"),
        )
    notes = ask("Notes", default="")
    return save_test(state, TestRecord(
        id=new_id(), name=name, date=day, type=test_type, scores=scores, subject=subject, notes=notes,
    ))


def cmd_tests(db_path: str):
    while True:
        state = load_state(db_path)
        tests = sort_tests(state.tests)
        table = Table(title="Tests")
        table.add_column("#", justify="right")
        table.add_column("Date")
        table.add_column("Name", style="cyan")
        table.add_column("Type")
        table.add_column("Marks", justify="right")
        table.add_column("Accuracy", justify="right")
        for i, t in enumerate(tests, 1):
            stats = overall_stats(t.scores)
            table.add_row(
                str(i), format_ddmmyy(t.date), t.name, t.type.value,
                str(stats.total_marks), f"{stats.overall_accuracy}%",
            )
        console.print(table)
        action = ask("Action", choices=["add", "view", "delete", "trend", "done"], default="done")
        if action == "done":
            return
        if action == "add":
            save_state(db_path, _add_test(state))
        elif action == "trend":
            for row in score_trend(state.tests):
                console.print(
                    f"  {row['date']}  Overall [bold]{row['Overall']}[/bold]  "
                    + "  ".join(f"{s.value[:4]} {row[s.value]}" for s in Subject)
                )
        else:
            number = ask_int("Test #")
            if not 1 <= number <= len(tests):
                console.print("[red]No such test.[/red]")
                continue
            test = tests[number - 1]
            if action == "view":
                for subject in Subject:
                    s = subject_stats(test.scores.for_subject(subject))
                    console.print(f"  {subject.value:<12} marks {s.marks:>4}  accuracy {s.accuracy}%")
                if test.notes:
                    console.print(f"  [dim]{test.notes}[/dim]")
            elif Confirm.ask(f"Delete {test.name}?"):
                save_state(db_path, delete_test(state, test.id))


# Revisions

def cmd_revisions(db_path: str):
    while True:
        state = load_state(db_path)
        table = Table(title="Revision Plans")
        table.add_column("#", justify="right")
        table.add_column("Chapter", style="cyan")
        table.add_column("From")
        table.add_column("To")
        table.add_column("Days", justify="right")
        table.add_column("Questions", justify="right")
        tiles = sorted(state.revision_tiles, key=lambda t: t.start_date)
        for i, tile in enumerate(tiles, 1):
            chapter = state.chapter_by_id(tile.chapter_id)
            table.add_row(
                str(i), chapter.name if chapter else "[dim]?[/dim]",
                format_ddmmyy(tile.start_date), format_ddmmyy(tile.end_date),
                str(days_between(parse_date(tile.start_date), parse_date(tile.end_date)) + 1),
                f"{tile.attempted_q}/{tile.target_q}",
            )
        console.print(table)
        action = ask("Action", choices=["add", "delete", "done"], default="done")
        if action == "done":
            return
        if action == "add":
            needle = ask("Chapter name").lower()
            chapter = next((c for c in state.chapters if needle and needle in c.name.lower()), None)
            if chapter is None:
                console.print("[red]No matching chapter.[/red]")
                continue
            start = parse_date(ask("Start (YYYY-MM-DD)", default=today_iso())).isoformat()
            end = parse_date(ask("End (YYYY-MM-DD)", default=start)).isoformat()
            tile = RevisionTile(
                id=new_id(), chapter_id=chapter.id, subject=chapter.subject, start_date=start, end_date=end,
                target_q=max(1, ask_int("Target questions", 50)), notes=ask("Notes", default=""),
            )
            save_state(db_path, add_revision_tile(state, tile))
        else:
            number = ask_int("Plan #")
            if 1 <= number <= len(tiles):
                save_state(db_path, delete_revision_tile(state, tiles[number - 1].id))


# Planner

def cmd_planner(db_path: str):
    while True:
        state = load_state(db_path)
        week = tasks_for_week(state, date.today())
        numbered = []
        for day, tasks in week.items():
            console.print(f"\n[bold]{parse_date(day).strftime('%a')} {format_ddmmyy(day)}[/bold]")
            for task in tasks:
                numbered.append(task)
                chapter = chapter_for_task(state, task)
                mark = "[green]✓[/green]" if task.completed else "·"
                name = chapter.name if chapter else "[dim]deleted chapter[/dim]"
                console.print(f"  {len(numbered):>2}. {mark} {name} [dim]{task.remark}[/dim]")
        action = ask("\nAction", choices=["add", "toggle", "delete", "done"], default="done")
        if action == "done":
            return
        if action == "add":
            day = parse_date(ask("Date (YYYY-MM-DD)", default=today_iso())).isoformat()
            needle = ask("Chapter name").lower()
            chapter = next((c for c in state.chapters if needle and needle in c.name.lower()), None)
            if chapter is None:
                console.print("[red]No matching chapter.[/red]")
                continue
            task = PlannerTask(id=new_id(), date=day, chapter_id=chapter.id, remark=ask("Remark", default=""))
            save_state(db_path, save_planner_task(state, task))
        else:
            number = ask_int("Task #")
            if not 1 <= number <= len(numbered):
                continue
            task = numbered[number - 1]
            if action == "toggle":
                save_state(db_path, toggle_planner_task(state, task.id))
            else:
                save_state(db_path, delete_planner_task(state, task.id))


# Daily log

def cmd_log(db_path: str):
    state = load_state(db_path)
    table = Table(title="Recent Logs")
    table.add_column("Date")
    table.add_column("Phy", justify="right")
    table.add_column("Chem", justify="right")
    table.add_column("Math", justify="right")
    table.add_column("Minutes", justify="right")
    table.add_column("Remarks")
    for log in sorted(state.logs, key=lambda l: l.date, reverse=True)[:10]:
        table.add_row(
            format_ddmmyy(log.date), str(log.physics_q), str(log.chemistry_q), str(log.math_q),
            str(log.study_time), log.remarks,
        )
    console.print(table)
    if not Confirm.ask("Log progress?", default=True):
        return
    day = parse_date(ask("Date (YYYY-MM-DD)", default=today_iso())).isoformat()
    existing = next((l for l in state.logs if l.date == day), None) or DailyLog(id=new_id(), date=day)
    log = replace(
        existing,
        physics_q=max(0, ask_int("Physics questions", existing.physics_q)),
        chemistry_q=max(0, ask_int("Chemistry questions", existing.chemistry_q)),
        math_q=max(0, ask_int("Math questions", existing.math_q)),
        study_time=max(0, ask_int("Study time (minutes)", existing.study_time)),
        remarks=ask("Remarks", default=existing.remarks),
    )
    save_state(db_path, upsert_daily_log(state, log))
    console.print(f"[green]Logged {log.total_questions} questions for {day}.[/green]")


# Assistant

def make_session() -> AssistantSession:
    settings = get_settings()
    assistant = GeminiAssistant(settings.gemini_api_key, settings.gemini_model, settings.request_timeout)
    return AssistantSession(assistant, exporter=FileExporter(settings.export_dir))


def cmd_ask(db_path: str, session: AssistantSession):
    console.print("[dim]Ask anything; an empty line returns to the menu.[/dim]")
    while True:
        text = Prompt.ask("[bold magenta]you[/bold magenta]", default="")
        if not text.strip():
            return
        state = load_state(db_path)
        try:
            with console.status("Thinking..."):
                result = session.ask(text, state)
        except SessionBusyError as e:
            console.print(f"[yellow]{e}[/yellow]")
            continue
        if result.changed:
            save_state(db_path, result.state)
        console.print(Panel(result.reply, title="Max", border_style="magenta"))


# Files

def cmd_export(db_path: str):
    state = load_state(db_path)
    directory = Path(get_settings().export_dir)
    what = ask("Export", choices=["data", "logs"], default="data")
    if what == "data":
        target = export_backup(state, directory)
    else:
        target = export_logs_csv(state.logs, directory)
    console.print(f"[green]Wrote {target}[/green]")


def cmd_import(db_path: str):
    file_path = ask("File path")
    if not Path(file_path).exists():
        console.print(f"[red]File not found: {file_path}[/red]")
        return
    try:
        if file_path.lower().endswith(".csv"):
            logs = import_logs_csv(file_path)
            save_state(db_path, merge_logs(load_state(db_path), logs))
            console.print(f"[green]Imported {len(logs)} log entries.[/green]")
        else:
            state = import_backup(file_path)
            save_state(db_path, state)
            console.print(f"[green]Restored {len(state.chapters)} chapters and {len(state.tests)} tests.[/green]")
    except BackupFormatError as e:
        console.print(f"[red]Import failed: {e}[/red]")


def cmd_theme(db_path: str):
    state = toggle_theme(load_state(db_path))
    save_state(db_path, state)
    console.print(f"Theme: [bold]{state.theme.value}[/bold]")


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def main():
    settings = get_settings()
    configure_logging(settings.log_level)
    db_path = settings.db_path
    init_db(db_path)
    first_run = not is_seeded(db_path)
    if first_run:
        console.print("[dim]Setting up for first use...[/dim]")
    seed_all(db_path)
    if first_run:
        console.print("[green]Ready![/green]\n")

    show_welcome()
    session = make_session()

    while True:
        show_menu()
        choice = Prompt.ask("\n[bold]>[/bold]", default="dashboard").strip().lower()
        try:
            if choice == "dashboard":
                cmd_dashboard(db_path)
            elif choice == "chapters":
                cmd_chapters(db_path)
            elif choice == "tests":
                cmd_tests(db_path)
            elif choice == "revisions":
                cmd_revisions(db_path)
            elif choice == "planner":
                cmd_planner(db_path)
            elif choice == "log":
                cmd_log(db_path)
            elif choice == "ask":
                cmd_ask(db_path, session)
            elif choice == "export":
                cmd_export(db_path)
            elif choice == "import":
                cmd_import(db_path)
            elif choice == "theme":
                cmd_theme(db_path)
            elif choice in ("quit", "exit", "q"):
                console.print("[dim]All the best for the exam![/dim]")
                break
            else:
                console.print("[red]Unknown command. Try again.[/red]")
        except BackToMenu:
            continue
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except Exception as e:
            console.print(f"[red]Error: {e}[/red]")


if __name__ == "__main__":
    main()
