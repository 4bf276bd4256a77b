"""Terminal rendering of sessions and review reports."""

from __future__ import annotations

from rich.console import Console, Group
from rich.markup import escape
from rich.panel import Panel
from rich.text import Text

from prbob_core.auth.session import Authenticating, Session, SignedIn, SignedOut
from prbob_core.models import CodeIssue, ReviewResult

_SEVERITY_STYLE = {1: "red", 2: "dark_orange", 3: "yellow", 4: "blue", 5: "dim"}

_RISK_STYLE = {
    "Very Low": "green",
    "Low": "green",
    "Medium": "yellow",
    "High": "red",
    "Very High": "bold red",
}


def score_style(score: float) -> str:
    if score > 85:
        return "green"
    if score > 60:
        return "yellow"
    return "red"


def describe_session(session: Session) -> str:
    if isinstance(session, SignedIn):
        return f"[green]Signed in as [bold]{escape(session.user.login)}[/bold][/green] ({session.user.html_url})"
    if isinstance(session, Authenticating):
        return f"[dim]Authenticating ({session.reason})...[/dim]"
    if isinstance(session, SignedOut) and session.error:
        return f"[red]{escape(session.error)}[/red]"
    return "[yellow]Not signed in.[/yellow]"


def _issue_panel(issue: CodeIssue) -> Panel:
    style = _SEVERITY_STYLE.get(issue.severity, "white")
    body = Group(
        Text(issue.description),
        Text(""),
        Text("Suggestion", style="bold cyan"),
        Text(issue.suggestion, style="dim"),
    )
    return Panel(
        body,
        title=f"[{style}]{issue.severity_label} Priority[/{style}]",
        subtitle=escape(issue.file_path),
        title_align="left",
        subtitle_align="right",
        border_style=style,
    )


def print_review(console: Console, result: ReviewResult) -> None:
    score = result.overall_score
    score_text = f"{score:g}"
    risk_style = _RISK_STYLE.get(result.breakage_risk, "white")
    header = Text.assemble(
        ("Overall Score ", "bold"),
        (score_text, f"bold {score_style(score)}"),
        ("   Breakage Risk ", "bold"),
        (result.breakage_risk, risk_style),
    )
    console.print(Panel(Group(header, Text(""), Text(result.summary)), title="Review Summary", title_align="left"))

    issues = result.sorted_issues()
    if not issues:
        console.print("[green]No issues found. The changes look good.[/green]")
        return

    console.print(f"\n[bold]Identified Issues ({len(issues)})[/bold]")
    for issue in issues:
        console.print(_issue_panel(issue))
