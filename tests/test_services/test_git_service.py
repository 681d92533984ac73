"""
Tests for Git Service.

Tests unified diff parsing and change extraction from temporary repositories.
"""

import pytest

from conftest import write_file
from review_assistant.exceptions import (
    CommitNotFoundError,
    InvalidRepositoryError,
    NoChangesError,
    ReviewAssistantError,
)
from review_assistant.services.git_service import (
    DiffLine,
    FileChange,
    GitService,
    parse_unified_diff,
)

MODIFIED_DIFF = """diff --git a/src/app.js b/src/app.js
index 83db48f..bf269f4 100644
--- a/src/app.js
+++ b/src/app.js
@@ -1,4 +1,5 @@
 const a = 1;
-const b = 2;
+const b = 3;
+const c = 4;
 const d = 5;
 const e = 6;
"""

NEW_AND_DELETED_DIFF = """diff --git a/new.py b/new.py
new file mode 100644
index 0000000..e69de29
--- /dev/null
+++ b/new.py
@@ -0,0 +1,2 @@
+def main():
+    return 1
diff --git a/old.go b/old.go
deleted file mode 100644
index e69de29..0000000
--- a/old.go
+++ /dev/null
@@ -1,1 +0,0 @@
-package main
diff --git a/logo.png b/logo.png
index 1111111..2222222 100644
Binary files a/logo.png and b/logo.png differ
"""


class TestParseUnifiedDiff:
    """Tests for parse_unified_diff function."""

    def test_modified_file_line_numbers(self):
        """Test removed lines do not advance the post-change counter."""
        files = parse_unified_diff(MODIFIED_DIFF)

        assert len(files) == 1
        change = files[0]
        assert change.path == "src/app.js"
        assert [(line.number, line.kind) for line in change.lines] == [
            (1, "context"),
            (2, "add"),
            (3, "add"),
            (4, "context"),
            (5, "context"),
        ]
        assert "const b = 2;" not in change.code
        assert [line.content for line in change.lines if line.kind == "add"] == [
            "const b = 3;",
            "const c = 4;",
        ]

    def test_new_deleted_and_binary(self):
        files = parse_unified_diff(NEW_AND_DELETED_DIFF)
        by_path = {f.path: f for f in files}

        assert by_path["new.py"].is_new is True
        assert by_path["new.py"].code == "def main():\n    return 1"
        assert by_path["old.go"].is_deleted is True
        assert by_path["old.go"].lines == []
        assert by_path["logo.png"].is_binary is True

    def test_multiple_hunks(self):
        diff = (
            "diff --git a/a.py b/a.py\n"
            "--- a/a.py\n"
            "+++ b/a.py\n"
            "@@ -1,2 +1,2 @@\n"
            "-x = 1\n"
            "+x = 2\n"
            " y = 2\n"
            "@@ -10 +10,2 @@\n"
            " z = 3\n"
            "+w = 4\n"
        )

        change = parse_unified_diff(diff)[0]

        assert [line.number for line in change.lines] == [1, 2, 10, 11]

    def test_file_line_maps_code_lines_across_hunks(self):
        """Test lines of the joined code map back to post-change file lines."""
        diff = (
            "diff --git a/a.py b/a.py\n"
            "--- a/a.py\n"
            "+++ b/a.py\n"
            "@@ -1,2 +1,2 @@\n"
            "-x = 1\n"
            "+x = 2\n"
            " y = 2\n"
            "@@ -30 +30,2 @@\n"
            " z = 3\n"
            "+w = 4\n"
        )

        change = parse_unified_diff(diff)[0]

        assert change.file_line(1) == 1
        assert change.file_line(3) == 30
        assert change.file_line(4) == 31
        assert change.file_line(99) == 31
        assert change.file_line(0) == 1

    def test_line_starting_with_diff_markers_inside_hunk(self):
        """Test content lines are delimited by hunk counts, not prefixes."""
        diff = (
            "diff --git a/a.py b/a.py\n"
            "--- a/a.py\n"
            "+++ b/a.py\n"
            "@@ -0,0 +1,2 @@\n"
            "+--- not a header\n"
            "++++ also content\n"
        )

        change = parse_unified_diff(diff)[0]

        assert [line.content for line in change.lines] == ["--- not a header", "+++ also content"]

    def test_no_newline_marker_ignored(self):
        diff = (
            "diff --git a/a.js b/a.js\n"
            "--- a/a.js\n"
            "+++ b/a.js\n"
            "@@ -1 +1 @@\n"
            "-var x = 1\n"
            "\\ No newline at end of file\n"
            "+const x = 1\n"
            "\\ No newline at end of file\n"
        )

        change = parse_unified_diff(diff)[0]

        assert change.code == "const x = 1"

    def test_rename(self):
        diff = (
            "diff --git a/old.js b/new.js\n"
            "similarity index 100%\n"
            "rename from old.js\n"
            "rename to new.js\n"
        )

        change = parse_unified_diff(diff)[0]

        assert change.path == "new.js"
        assert change.old_path == "old.js"

    def test_empty_diff(self):
        assert parse_unified_diff("") == []


class TestAnalyzableFiles:
    """Tests for GitService.analyzable_files."""

    def _change(self, path, code, **flags):
        change = FileChange(path=path, **flags)
        for number, content in enumerate(code.split("\n"), start=1):
            change.lines.append(DiffLine(number, content, "add"))
        return change

    def test_filters(self):
        service = GitService(min_changed_code_length=5)
        files = [
            self._change("a.js", "var x = 1"),
            self._change("README.md", "# Title and more text"),
            self._change("b.py", "x=1"),
            self._change("c.go", "package main", is_deleted=True),
            self._change("d.rs", "fn main() {}", is_binary=True),
        ]

        result = service.analyzable_files(files)

        assert [f.path for f in result] == ["a.js"]


class TestGitService:
    """Tests for GitService against real repositories."""

    def test_not_a_repository(self, tmp_path):
        with pytest.raises(InvalidRepositoryError):
            GitService().open_repository(str(tmp_path))

    def test_missing_path(self, tmp_path):
        with pytest.raises(InvalidRepositoryError):
            GitService().open_repository(str(tmp_path / "missing"))

    def test_no_changes(self, git_repo):
        with pytest.raises(NoChangesError):
            GitService().get_staged_changes(git_repo.working_tree_dir)

    def test_staged_changes(self, git_repo):
        write_file(git_repo, "a.js", "var x = 1\n")

        changes = GitService().get_staged_changes(git_repo.working_tree_dir)

        assert changes.source == "staged"
        assert changes.branch == git_repo.active_branch.name
        assert [f.path for f in changes.files] == ["a.js"]
        assert changes.files[0].is_new is True
        assert changes.files[0].code == "var x = 1"

    def test_staged_wins_over_modified(self, git_repo):
        write_file(git_repo, "README.md", "# Sample\nunstaged edit\n", stage=False)
        write_file(git_repo, "a.py", "print('hi')\n")

        changes = GitService().get_staged_changes(git_repo.working_tree_dir)

        assert [f.path for f in changes.files] == ["a.py"]

    def test_modified_fallback(self, git_repo):
        """Test unstaged modifications are used when nothing is staged."""
        write_file(git_repo, "README.md", "# Sample\nmore docs\n", stage=False)

        changes = GitService().get_staged_changes(git_repo.working_tree_dir)

        assert changes.source == "modified"
        assert [f.path for f in changes.files] == ["README.md"]

    def test_subdirectory_path(self, git_repo):
        write_file(git_repo, "src/lib/util.ts", "export const one = 1;\n")

        changes = GitService().get_staged_changes(f"{git_repo.working_tree_dir}/src")

        assert changes.files[0].path == "src/lib/util.ts"

    def test_commit_changes(self, git_repo):
        write_file(git_repo, "main.go", "package main\n\nfunc main() {}\n")
        git_repo.git.commit("-m", "Add main")
        commit_hash = git_repo.head.commit.hexsha

        changes = GitService().get_commit_changes(git_repo.working_tree_dir, commit_hash[:8])

        assert changes.source == "commit"
        assert changes.commit_hash == commit_hash[:8]
        assert [f.path for f in changes.files] == ["main.go"]
        assert "func main() {}" in changes.files[0].code

    def test_commit_not_found(self, git_repo):
        with pytest.raises(CommitNotFoundError) as exc_info:
            GitService().get_commit_changes(git_repo.working_tree_dir, "deadbeef")

        assert "deadbeef" in exc_info.value.message

    def test_read_file(self, git_repo):
        write_file(git_repo, "a.js", "var x = 1\n")
        assert GitService().read_file(git_repo.working_tree_dir, "a.js") == "var x = 1\n"

    def test_read_file_outside_repository(self, git_repo):
        with pytest.raises(ReviewAssistantError):
            GitService().read_file(git_repo.working_tree_dir, "../../etc/passwd")

    def test_read_missing_file(self, git_repo):
        with pytest.raises(ReviewAssistantError):
            GitService().read_file(git_repo.working_tree_dir, "missing.js")
