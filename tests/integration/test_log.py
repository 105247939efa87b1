"""Integration tests for gitlite log command."""

import os
from pathlib import Path

from typer.testing import CliRunner

from gitlite.cli.main import app

runner = CliRunner()


def _commit_file(root: Path, name: str, content: str, message: str) -> None:
    (root / name).write_text(content)
    runner.invoke(app, ["add", name])
    runner.invoke(app, ["commit", message])


class TestLogCommand:
    """Test gitlite log command."""

    def test_log_empty_repo(self, tmp_path: Path) -> None:
        """Test log on newly initialized repo with no commits."""
        original_cwd = Path.cwd()
        os.chdir(tmp_path)

        try:
            runner.invoke(app, ["init", "--quiet"])

            result = runner.invoke(app, ["log"])

            assert result.exit_code == 0
            assert "no commits yet" in result.stdout.lower()
        finally:
            os.chdir(original_cwd)

    def test_log_single_commit(self, tmp_path: Path) -> None:
        original_cwd = Path.cwd()
        os.chdir(tmp_path)

        try:
            runner.invoke(app, ["init", "--quiet"])
            _commit_file(tmp_path, "file.txt", "content", "First commit")
            head = (tmp_path / ".gitLite" / "HEAD").read_text(encoding="utf-8")

            result = runner.invoke(app, ["log"])

            assert result.exit_code == 0
            assert f"commit {head}" in result.stdout
            assert "First commit" in result.stdout
            assert "Date:" in result.stdout
            assert "(root commit)" in result.stdout
            assert "file.txt" in result.stdout
        finally:
            os.chdir(original_cwd)

    def test_log_newest_first(self, tmp_path: Path) -> None:
        original_cwd = Path.cwd()
        os.chdir(tmp_path)

        try:
            runner.invoke(app, ["init", "--quiet"])
            _commit_file(tmp_path, "f.txt", "1", "First commit")
            _commit_file(tmp_path, "f.txt", "2", "Second commit")
            _commit_file(tmp_path, "f.txt", "3", "Third commit")

            result = runner.invoke(app, ["log"])

            assert result.exit_code == 0
            out = result.stdout
            assert out.index("Third commit") < out.index("Second commit") < out.index("First commit")
            assert out.count("(root commit)") == 1
        finally:
            os.chdir(original_cwd)

    def test_log_max_count(self, tmp_path: Path) -> None:
        original_cwd = Path.cwd()
        os.chdir(tmp_path)

        try:
            runner.invoke(app, ["init", "--quiet"])
            _commit_file(tmp_path, "f.txt", "1", "First commit")
            _commit_file(tmp_path, "f.txt", "2", "Second commit")
            _commit_file(tmp_path, "f.txt", "3", "Third commit")

            result = runner.invoke(app, ["log", "-n", "2"])

            assert result.exit_code == 0
            assert "Third commit" in result.stdout
            assert "Second commit" in result.stdout
            assert "First commit" not in result.stdout
        finally:
            os.chdir(original_cwd)

    def test_log_oneline(self, tmp_path: Path) -> None:
        original_cwd = Path.cwd()
        os.chdir(tmp_path)

        try:
            runner.invoke(app, ["init", "--quiet"])
            _commit_file(tmp_path, "f.txt", "1", "First commit")
            _commit_file(tmp_path, "f.txt", "2", "Second commit")
            head = (tmp_path / ".gitLite" / "HEAD").read_text(encoding="utf-8")

            result = runner.invoke(app, ["log", "--oneline"])

            assert result.exit_code == 0
            lines = result.stdout.strip().splitlines()
            assert lines[0] == f"{head[:7]} Second commit"
            assert lines[1].endswith("First commit")
            assert len(lines) == 2
        finally:
            os.chdir(original_cwd)

    def test_log_broken_chain(self, tmp_path: Path) -> None:
        """Test that a HEAD pointing at a missing object is a data error."""
        original_cwd = Path.cwd()
        os.chdir(tmp_path)

        try:
            runner.invoke(app, ["init", "--quiet"])
            (tmp_path / ".gitLite" / "HEAD").write_text("a" * 40)

            result = runner.invoke(app, ["log"])

            assert result.exit_code == 3
            assert "Object not found" in result.stdout
        finally:
            os.chdir(original_cwd)
