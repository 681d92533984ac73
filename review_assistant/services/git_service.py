"""
Git Service for AI Code Review Assistant.

Extracts staged, modified or committed changes from a local repository and
parses the unified diff into per-file change sets.
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from git import Repo
from git.exc import BadName, BadObject, GitCommandError, InvalidGitRepositoryError, NoSuchPathError

from review_assistant.config import get_settings
from review_assistant.exceptions import (
    CommitNotFoundError,
    InvalidRepositoryError,
    NoChangesError,
    ReviewAssistantError,
)
from review_assistant.utils.helpers import detect_language

HUNK_HEADER = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")
DIFF_GIT_HEADER = re.compile(r"^diff --git (\"?a/.+?\"?) (\"?b/.+\"?)$")

DIFF_FLAGS = ("--no-color", "--no-ext-diff")


@dataclass
class DiffLine:
    """A line present after the change, with its post-change line number."""

    number: int
    content: str
    kind: str  # "add" or "context"


@dataclass
class FileChange:
    """Represents one file in a diff."""

    path: str
    old_path: Optional[str] = None
    is_new: bool = False
    is_deleted: bool = False
    is_binary: bool = False
    lines: list[DiffLine] = field(default_factory=list)

    @property
    def code(self) -> str:
        """Added and context lines joined in order."""
        return "\n".join(line.content for line in self.lines)

    @property
    def language(self) -> Optional[str]:
        return detect_language(self.path)

    def file_line(self, code_line: int) -> int:
        """
        Map a 1-based line of ``code`` to its line number in the changed file.

        Lines past the end of the change map to its last line.
        """
        if not self.lines:
            return code_line
        index = min(max(code_line, 1), len(self.lines)) - 1
        return self.lines[index].number


@dataclass
class ChangeSet:
    """Changes selected for one review."""

    repository_path: str
    branch: str
    source: str  # staged, modified or commit
    files: list[FileChange]
    commit_hash: Optional[str] = None


def _strip_prefix(path: str) -> str:
    path = path.strip().strip('"')
    if path.startswith(("a/", "b/")):
        return path[2:]
    return path


def parse_unified_diff(diff_text: str) -> list[FileChange]:
    """
    Parse unified diff text into file changes.

    Removed lines are dropped and do not advance the post-change line
    counter. Hunk content is delimited by the counts in each hunk header.

    Args:
        diff_text: Output of ``git diff`` or ``git show``.

    Returns:
        List of FileChange objects in diff order.
    """
    files: list[FileChange] = []
    current: Optional[FileChange] = None
    old_remaining = new_remaining = 0
    new_line = 0

    for raw in diff_text.splitlines():
        if old_remaining > 0 or new_remaining > 0:
            if raw.startswith("\\"):
                continue
            marker, content = (raw[0], raw[1:]) if raw else (" ", "")
            if marker == "+":
                current.lines.append(DiffLine(new_line, content, "add"))
                new_line += 1
                new_remaining -= 1
                continue
            if marker == "-":
                old_remaining -= 1
                continue
            if marker == " ":
                current.lines.append(DiffLine(new_line, content, "context"))
                new_line += 1
                old_remaining -= 1
                new_remaining -= 1
                continue
            # Malformed hunk; fall through and treat as a header line.
            old_remaining = new_remaining = 0

        header = DIFF_GIT_HEADER.match(raw)
        if header:
            current = FileChange(
                path=_strip_prefix(header.group(2)),
                old_path=_strip_prefix(header.group(1)),
            )
            files.append(current)
            continue

        if raw.startswith("--- "):
            if current is None:
                current = FileChange(path="")
                files.append(current)
            target = raw[4:].split("\t")[0]
            if target == "/dev/null":
                current.is_new = True
            else:
                current.old_path = _strip_prefix(target)
            continue

        if raw.startswith("+++ ") and current is not None:
            target = raw[4:].split("\t")[0]
            if target == "/dev/null":
                current.is_deleted = True
            else:
                current.path = _strip_prefix(target)
            continue

        if current is None:
            continue

        if raw.startswith("new file mode"):
            current.is_new = True
        elif raw.startswith("deleted file mode"):
            current.is_deleted = True
        elif raw.startswith("rename to "):
            current.path = raw[len("rename to "):].strip()
        elif raw.startswith("Binary files") or raw.startswith("GIT binary patch"):
            current.is_binary = True
        else:
            hunk = HUNK_HEADER.match(raw)
            if hunk:
                old_remaining = int(hunk.group(2) if hunk.group(2) is not None else 1)
                new_line = int(hunk.group(3))
                new_remaining = int(hunk.group(4) if hunk.group(4) is not None else 1)

    for change in files:
        if change.is_deleted and change.old_path:
            change.path = change.old_path

    return files


class GitService:
    """
    Local git repository access.

    Selects the change set for a review (staged first, then unstaged
    modifications, or a single commit) and filters the files worth sending
    to the model.
    """

    def __init__(self, min_changed_code_length: Optional[int] = None) -> None:
        """
        Initialize the Git Service.

        Args:
            min_changed_code_length: Files whose changed code is shorter are
                skipped. Uses settings if not provided.
        """
        self._logger = logging.getLogger("code_review.git_service")
        settings = get_settings()
        self._min_length = (
            min_changed_code_length
            if min_changed_code_length is not None
            else settings.min_changed_code_length
        )

    def open_repository(self, repository_path: str) -> Repo:
        """Open the repository containing ``repository_path``."""
        try:
            return Repo(repository_path, search_parent_directories=True)
        except (InvalidGitRepositoryError, NoSuchPathError):
            raise InvalidRepositoryError(f"{repository_path} is not a git repository")

    def current_branch(self, repo: Repo) -> str:
        """Name of the checked-out branch, or HEAD when detached."""
        try:
            return repo.active_branch.name
        except TypeError:
            return "HEAD"

    def repository_root(self, repository_path: str) -> str:
        return str(self.open_repository(repository_path).working_tree_dir)

    def has_staged_changes(self, repository_path: str) -> bool:
        """Whether the index differs from HEAD."""
        repo = self.open_repository(repository_path)
        try:
            return bool(repo.git.diff("--cached", "--name-only").strip())
        except GitCommandError as e:
            raise ReviewAssistantError(f"git diff failed: {e.stderr or e}")

    def get_staged_changes(self, repository_path: str) -> ChangeSet:
        """
        Get the changes to review for a working tree.

        Staged changes win; with nothing staged the unstaged modifications
        of tracked files are used instead.

        Raises:
            NoChangesError: If nothing is staged or modified.
        """
        repo = self.open_repository(repository_path)

        try:
            staged = repo.git.diff("--cached", "--name-only").splitlines()
            modified = repo.git.diff("--name-only").splitlines()

            if not staged and not modified:
                raise NoChangesError()

            if staged:
                source = "staged"
                diff = repo.git.diff("--cached", *DIFF_FLAGS)
            else:
                source = "modified"
                diff = repo.git.diff(*DIFF_FLAGS)
        except GitCommandError as e:
            raise ReviewAssistantError(f"git diff failed: {e.stderr or e}")

        if not diff.strip():
            raise NoChangesError(
                "No changes detected in the diff. "
                "Please make sure you have uncommitted changes."
            )

        files = parse_unified_diff(diff)
        if not files:
            raise NoChangesError(
                "Unable to parse diff. Please check if there are valid code changes."
            )

        self._logger.info(f"Found {len(files)} {source} file(s) in {repository_path}")

        return ChangeSet(
            repository_path=repository_path,
            branch=self.current_branch(repo),
            source=source,
            files=files,
        )

    def get_commit_changes(self, repository_path: str, commit_hash: str) -> ChangeSet:
        """
        Get the changes introduced by one commit.

        Raises:
            CommitNotFoundError: If the commit does not resolve.
            NoChangesError: If the commit has an empty diff.
        """
        repo = self.open_repository(repository_path)

        try:
            commit = repo.commit(commit_hash)
        except (BadName, BadObject, ValueError, GitCommandError):
            raise CommitNotFoundError(commit_hash)

        try:
            diff = repo.git.show(commit.hexsha, "--format=", *DIFF_FLAGS)
        except GitCommandError as e:
            raise ReviewAssistantError(f"git show failed: {e.stderr or e}")

        if not diff.strip():
            raise NoChangesError("No changes found in commit")

        files = parse_unified_diff(diff)
        if not files:
            raise NoChangesError("Unable to parse commit diff")

        return ChangeSet(
            repository_path=repository_path,
            branch=self.current_branch(repo),
            source="commit",
            files=files,
            commit_hash=commit_hash,
        )

    def analyzable_files(self, files: list[FileChange]) -> list[FileChange]:
        """
        Filter out files that should not be sent to the model.

        Skips deleted and binary files, unsupported extensions and changes
        shorter than the minimal length.
        """
        result = []
        for change in files:
            if change.is_deleted:
                self._logger.info(f"Skipping deleted file: {change.path}")
                continue

            if change.language is None:
                self._logger.info(f"Skipping unsupported file: {change.path}")
                continue

            if change.is_binary or len(change.code.strip()) < self._min_length:
                self._logger.info(f"Skipping file with minimal changes: {change.path}")
                continue

            result.append(change)

        return result

    def read_file(self, repository_path: str, file_path: str) -> str:
        """
        Read a file from the working tree.

        Args:
            repository_path: Path inside the repository.
            file_path: Path relative to the repository root.

        Returns:
            File content.
        """
        repo = self.open_repository(repository_path)
        root = Path(repo.working_tree_dir).resolve()
        full_path = (root / file_path).resolve()

        if root not in full_path.parents:
            raise ReviewAssistantError(f"{file_path} is outside the repository")

        try:
            return full_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise ReviewAssistantError(f"File {file_path} not found in working tree")
