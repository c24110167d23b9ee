"""Tests for the buildforce CLI commands."""

from __future__ import annotations

import json
import os
import unittest.mock
from typing import TYPE_CHECKING

from click.testing import CliRunner

from buildforce.cli import main

if TYPE_CHECKING:
    from pathlib import Path

_ENV = {"OPENROUTER_API_KEY": "sk-test", "OPENROUTER_MODEL": "test/model"}


def _ok(content: str) -> unittest.mock.MagicMock:
    response = unittest.mock.MagicMock(status_code=200)
    response.json.return_value = {"choices": [{"message": {"content": content}}]}
    return response


class TestInit:
    def test_init_project(self, sample_project: Path) -> None:
        runner = CliRunner()
        with unittest.mock.patch.dict(os.environ, _ENV):
            result = runner.invoke(main, ["init", "demo", "--project", str(sample_project)])

        assert result.exit_code == 0, result.output
        arch = (sample_project / "buildforce" / "memory" / "architecture.md").read_text()
        assert arch.startswith("# demo Architecture")
        assert "- Build Tools: vite" in arch
        assert (sample_project / ".cursor" / "rules" / "buildforce.mdc").is_file()

    def test_already_initialized(self, sample_project: Path) -> None:
        (sample_project / "buildforce").mkdir()
        result = CliRunner().invoke(main, ["init", "--project", str(sample_project)])
        assert result.exit_code == 0
        assert "already initialized" in result.output

    def test_skip_analysis_with_tools(self, tmp_path: Path) -> None:
        runner = CliRunner()
        with unittest.mock.patch.dict(os.environ, _ENV):
            result = runner.invoke(
                main,
                ["init", "--skip-analysis", "--tools", "cline,windsurf", "--project", str(tmp_path)],
            )

        assert result.exit_code == 0, result.output
        assert "Warning: Project analysis skipped" in result.output
        assert (tmp_path / ".clinerules").is_file()
        assert (tmp_path / ".windsurfrules").is_file()
        assert not (tmp_path / ".cursor").exists()

    def test_unknown_tool(self, tmp_path: Path) -> None:
        result = CliRunner().invoke(main, ["init", "--tools", "vim", "--project", str(tmp_path)])
        assert result.exit_code == 2
        assert not (tmp_path / "buildforce").exists()

    def test_prompts_for_openrouter(self, tmp_path: Path) -> None:
        runner = CliRunner()
        with unittest.mock.patch.dict(os.environ, {}, clear=True):
            result = runner.invoke(
                main,
                ["init", "--skip-analysis", "--project", str(tmp_path)],
                input="sk-typed\n\n",
            )
            env_text = (tmp_path / ".env").read_text()

        assert result.exit_code == 0, result.output
        assert "OPENROUTER_API_KEY=sk-typed" in env_text
        assert "OPENROUTER_MODEL=anthropic/claude-3.7-sonnet:thinking" in env_text

    def test_analysis_failure(self, tmp_path: Path) -> None:
        (tmp_path / "data.txt").write_text("nothing to see")
        runner = CliRunner()
        with unittest.mock.patch.dict(os.environ, _ENV):
            result = runner.invoke(main, ["init", "--project", str(tmp_path)])
        assert result.exit_code == 1
        assert "Error: No meaningful information extracted from chunk" in result.output


class TestAnalyze:
    def test_json(self, sample_project: Path) -> None:
        result = CliRunner().invoke(main, ["analyze", "--json", "--project", str(sample_project)])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["name"] == "sample"
        assert data["type"] == "node"
        assert data["testFrameworks"] == ["jest"]
        assert data["structure"]["directories"] == ["src"]

    def test_summary(self, sample_project: Path) -> None:
        result = CliRunner().invoke(main, ["analyze", "--project", str(sample_project)])
        assert result.exit_code == 0, result.output
        assert "Build tools" in result.output
        assert "vite" in result.output

    def test_partition(self, sample_project: Path) -> None:
        result = CliRunner().invoke(
            main, ["analyze", "--json", "--partition", "--project", str(sample_project)]
        )
        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["dependencies"] == ["typescript", "node", "jest", "vite"]

    def test_empty_project(self, tmp_path: Path) -> None:
        result = CliRunner().invoke(main, ["analyze", "--project", str(tmp_path)])
        assert result.exit_code == 1
        assert "Error: [FILE_READ_ERROR] No files found in the project" in result.output


class TestPlan:
    def test_requires_init(self, tmp_path: Path) -> None:
        result = CliRunner().invoke(main, ["plan", "--project", str(tmp_path)])
        assert result.exit_code == 1
        assert "not initialized" in result.output

    def test_session_loop(self, tmp_path: Path) -> None:
        (tmp_path / "buildforce").mkdir()
        with unittest.mock.patch(
            "buildforce.planning.agent.httpx.post",
            side_effect=[_ok("What next?"), _ok("Noted.")],
        ):
            result = CliRunner().invoke(
                main,
                ["plan", "--api-key", "sk-flag", "--project", str(tmp_path)],
                input="Add search\n\nexit\n",
            )

        assert result.exit_code == 0, result.output
        assert "What next?" in result.output
        assert "Noted." in result.output
        assert "Session saved after 2 exchanges." in result.output
        history = (
            tmp_path / "buildforce" / "sessions" / "planned" / "session-001" / ".chat-history.md"
        ).read_text()
        assert "Add search" in history

    def test_llm_error(self, tmp_path: Path) -> None:
        (tmp_path / "buildforce").mkdir()
        response = unittest.mock.MagicMock(status_code=500, text="down")
        with unittest.mock.patch("buildforce.planning.agent.httpx.post", return_value=response):
            result = CliRunner().invoke(
                main, ["plan", "--api-key", "k", "--project", str(tmp_path)]
            )
        assert result.exit_code == 1
        assert "OpenRouter API error 500" in result.output


class TestMain:
    def test_version(self) -> None:
        result = CliRunner().invoke(main, ["--version"])
        assert result.exit_code == 0
        assert "buildforce" in result.output
