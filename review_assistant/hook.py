"""
Git pre-commit hook for AI Code Review Assistant.

Reviews the staged changes through a running backend and blocks the commit
when critical issues are found. ``code-review-hook install`` writes a hook
script into the repository that calls ``code-review-hook run``.
"""

import logging
import os
import shutil
import sys
import time
from pathlib import Path
from typing import Any, Optional

import httpx
import typer
from rich.console import Console
from rich.markup import escape

from review_assistant.config import get_settings
from review_assistant.exceptions import ReviewAssistantError
from review_assistant.services.git_service import GitService

logger = logging.getLogger("code_review.hook")

app = typer.Typer(
    name="code-review-hook",
    help="AI code review as a git pre-commit hook",
    add_completion=False,
)

console = Console()

RULE = "━" * 50
MAX_LISTED_ISSUES = 5
SEVERITY_STYLES = {"CRITICAL": "red", "MAJOR": "yellow"}

HOOK_SCRIPT = '#!/bin/sh\nexec "{python}" -m review_assistant.hook run "$@"\n'


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    return body.get("message") or body.get("error") or "Unknown error"


def _print_summary(review: dict[str, Any], out: Console) -> None:
    out.print("\n[green]Analysis Complete![/green]")
    out.print(RULE, style="blue")

    out.print(f"\nFiles analyzed: {review['filesAnalyzed']}", style="cyan")
    if review.get("analysisTime") is not None:
        out.print(f"Analysis time: {review['analysisTime']:.2f}s", style="cyan")
    out.print(f"Tokens used: {review['tokensUsed']}", style="cyan")
    if review.get("estimatedEffort"):
        out.print(f"Estimated effort: {review['estimatedEffort']:.1f}h", style="cyan")

    out.print("\nIssues Found:", style="yellow")
    out.print(f"   Critical: {review['criticalIssues']}", style="red" if review["criticalIssues"] else "green")
    out.print(f"   Major: {review['majorIssues']}", style="yellow" if review["majorIssues"] else "green")
    out.print(f"   Minor: {review['minorIssues']}", style="blue" if review["minorIssues"] else "green")
    out.print(f"   Total: {review['issuesFound']}", style="cyan")


def _print_important_issues(issues: list[dict[str, Any]], out: Console) -> None:
    important = [i for i in issues if i["severity"] in SEVERITY_STYLES]
    if not important:
        return

    out.print("\nImportant Issues:", style="yellow")
    out.print(RULE, style="yellow")
    for issue in important[:MAX_LISTED_ISSUES]:
        style = SEVERITY_STYLES[issue["severity"]]
        out.print(f"\n\\[{issue['severity']}] {escape(issue['title'])}", style=style)
        out.print(f"   {escape(issue['filePath'])}:{issue['lineNumber']}", style="blue")
        out.print(f"   {escape(issue['description'])}")
        if issue.get("suggestion"):
            out.print(f"   Suggestion: {escape(issue['suggestion'])}", style="green")

    if len(important) > MAX_LISTED_ISSUES:
        out.print(f"\n... and {len(important) - MAX_LISTED_ISSUES} more issues", style="yellow")


def review_staged(
    client: httpx.Client,
    repository_path: str,
    user_id: int,
    out: Console,
) -> int:
    """
    Review the staged changes of a repository through the backend.

    Args:
        client: HTTP client whose base URL is the backend.
        repository_path: Root of the working tree to review.
        user_id: User the review is stored for.
        out: Console the report is printed to.

    Returns:
        Exit code for the hook; 1 blocks the commit.
    """
    out.print("\nRunning automated code review...", style="cyan")
    out.print(RULE, style="blue")

    try:
        client.get("/health").raise_for_status()
    except httpx.HTTPError as e:
        logger.debug(f"Backend health check failed: {e}")
        out.print("\nError: Cannot connect to code review backend", style="red")
        out.print(f"   Make sure the backend is running at {client.base_url}", style="yellow")
        out.print("   Or set SKIP_CODE_REVIEW=true to bypass this check\n", style="yellow")
        return 1

    out.print("\nAnalyzing staged changes...", style="blue")
    try:
        response = client.post(
            "/api/reviews/analyze-staged",
            json={"repositoryPath": repository_path, "userId": user_id},
        )
    except httpx.HTTPError as e:
        out.print("\nCode review failed:", style="red")
        out.print(f"   {escape(str(e))}", style="red")
        out.print("\n   Use: git commit --no-verify to skip this check\n", style="yellow")
        return 1

    if response.status_code != 200:
        out.print("\nAnalysis failed", style="red")
        out.print(f"   {escape(_error_message(response))}", style="red")
        return 1

    review = response.json()["review"]
    _print_summary(review, out)
    _print_important_issues(review.get("issues", []), out)

    out.print(f"\n{RULE}", style="blue")
    out.print(f"Report: {str(client.base_url).rstrip('/')}/api/reviews/{review['id']}", style="cyan")
    out.print(f"Review ID: {review['id']}", style="cyan")

    if review["criticalIssues"] > 0:
        out.print("\nCOMMIT BLOCKED: Critical issues found!", style="bold red")
        out.print("   Please fix critical issues before committing.", style="yellow")
        out.print("   Or use: git commit --no-verify to skip this check\n", style="yellow")
        return 1

    if review["majorIssues"] > 0:
        out.print("\nWarning: Major issues found!", style="yellow")
        out.print("   Consider fixing these issues before committing.", style="yellow")
        out.print("   Proceeding with commit...\n", style="green")
    elif review["issuesFound"] == 0:
        out.print("\nNo issues found! Great job!", style="green")
        out.print("   Proceeding with commit...\n", style="green")

    return 0


def install_hook(repository_path: str, git_service: Optional[GitService] = None) -> tuple[Path, Optional[Path]]:
    """
    Install the pre-commit hook into the repository containing ``repository_path``.

    An existing hook is copied to ``pre-commit.backup.<milliseconds>`` first.

    Returns:
        Tuple of the hook path and the backup path, if one was made.
    """
    repo = (git_service or GitService()).open_repository(repository_path)
    hooks_dir = Path(repo.git_dir) / "hooks"
    hooks_dir.mkdir(parents=True, exist_ok=True)
    hook_path = hooks_dir / "pre-commit"

    backup_path = None
    if hook_path.exists():
        backup_path = hooks_dir / f"pre-commit.backup.{int(time.time() * 1000)}"
        shutil.copy2(hook_path, backup_path)

    hook_path.write_text(HOOK_SCRIPT.format(python=sys.executable))
    hook_path.chmod(0o755)
    logger.info(f"Installed pre-commit hook at {hook_path}")
    return hook_path, backup_path


@app.command("run")
def run_hook() -> None:
    """Review the staged changes; a non-zero exit blocks the commit."""
    settings = get_settings()

    if settings.skip_code_review:
        console.print("\nSkipping code review (SKIP_CODE_REVIEW=true)\n", style="yellow")
        raise typer.Exit(0)

    git = GitService()
    try:
        repository_path = git.repository_root(os.getcwd())
        staged = git.has_staged_changes(repository_path)
    except ReviewAssistantError as e:
        console.print(f"\n{escape(e.message)}", style="red")
        raise typer.Exit(1)

    if not staged:
        console.print("\nNo staged changes found", style="yellow")
        raise typer.Exit(0)

    with httpx.Client(base_url=settings.code_review_backend, timeout=settings.hook_timeout) as client:
        code = review_staged(client, repository_path, settings.code_review_user_id, console)
    raise typer.Exit(code)


@app.command("install")
def install(
    path: str = typer.Option(".", "--path", "-p", help="Any path inside the repository"),
) -> None:
    """Install the pre-commit hook into a git repository."""
    settings = get_settings()

    console.print("\nInstalling Git Pre-commit Hook...", style="blue")
    console.print(RULE, style="blue")

    try:
        hook_path, backup_path = install_hook(path)
    except ReviewAssistantError as e:
        console.print("\nInstallation failed:", style="red")
        console.print(f"   {escape(e.message)}", style="red")
        console.print("\n   Make sure you are in a Git repository.\n", style="yellow")
        raise typer.Exit(1)

    if backup_path is not None:
        console.print(f"\nBacked up existing hook to: {backup_path}", style="yellow")

    console.print("\nPre-commit hook installed successfully!", style="green")
    console.print("\nConfiguration:", style="blue")
    console.print(f"   Hook location: {hook_path}")
    console.print(f"   Backend URL: {settings.code_review_backend}")
    console.print(f"   User ID: {settings.code_review_user_id}")

    console.print("\nEnvironment Variables (optional):", style="yellow")
    console.print("   CODE_REVIEW_BACKEND - Backend URL (default: http://localhost:5000)")
    console.print("   CODE_REVIEW_USER_ID - Your user ID (default: 1)")
    console.print('   SKIP_CODE_REVIEW - Set to "true" to disable review')

    console.print("\nUsage:", style="green")
    console.print("   The hook will automatically run before each commit.")
    console.print("   To skip: git commit --no-verify")


def main() -> None:
    """Entry point for the code-review-hook script."""
    app()


if __name__ == "__main__":
    main()
