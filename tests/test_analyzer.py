"""Tests for buildforce.analysis.analyzer module."""

from __future__ import annotations

import json
import unittest.mock
from pathlib import Path

import pytest

from buildforce.analysis.analyzer import (
    ProjectAnalyzer,
    is_excluded,
    parent_directories,
    project_name,
)
from buildforce.analysis.chunk import ChunkManager, frame
from buildforce.analysis.types import AnalysisConfig, AnalysisErrorKind, AnalysisSystemError
from buildforce.tools.files import FileOperationError

MANIFEST = json.dumps(
    {"dependencies": {"express": "^4"}, "devDependencies": {"mocha": "^10", "esbuild": "^0.20"}}
)


def _analyzer(tools, config: AnalysisConfig | None = None) -> ProjectAnalyzer:
    return ProjectAnalyzer(ChunkManager(tools, config), tools)


class TestHelpers:
    def test_is_excluded(self) -> None:
        assert is_excluded("node_modules/x/index.js")
        assert is_excluded("packages/a/dist/out.js")
        assert not is_excluded("src/index.ts")
        assert not is_excluded("build")

    def test_parent_directories(self) -> None:
        files = ["README.md", "src/a.ts", "src/lib/b.ts", "src/c.ts"]
        assert parent_directories(files) == ["src", "src/lib"]

    def test_project_name(self) -> None:
        assert project_name(Path("/work/demo")) == "demo"
        assert project_name("/work/demo/") == "demo"


class TestDiscoverFiles:
    def test_empty_project(self, make_tools) -> None:
        with pytest.raises(AnalysisSystemError) as excinfo:
            _analyzer(make_tools()).discover_files()
        assert excinfo.value.kind is AnalysisErrorKind.FILE_READ_ERROR
        assert excinfo.value.message == "No files found in the project"

    def test_only_excluded_files(self, make_tools) -> None:
        tools = make_tools({"node_modules/x/package.json": MANIFEST})
        with pytest.raises(AnalysisSystemError) as excinfo:
            _analyzer(tools).discover_files()
        assert excinfo.value.kind is AnalysisErrorKind.FILE_READ_ERROR

    def test_filters_excluded(self, make_tools) -> None:
        tools = make_tools({"node_modules/x/package.json": MANIFEST, "src/a.ts": "class A {}"})
        assert _analyzer(tools).discover_files() == ["src/a.ts"]

    def test_search_failure(self, make_tools) -> None:
        class BrokenTools(make_tools):  # type: ignore[misc, valid-type]
            def search_files(self, pattern: str) -> list[str]:
                raise FileOperationError("disk gone")

        with pytest.raises(AnalysisSystemError) as excinfo:
            _analyzer(BrokenTools()).discover_files()
        assert excinfo.value.kind is AnalysisErrorKind.FILE_READ_ERROR
        assert isinstance(excinfo.value.details, FileOperationError)

    def test_probe_failure_excludes_path(self, make_tools) -> None:
        class FlakyTools(make_tools):  # type: ignore[misc, valid-type]
            def is_file(self, path: str) -> bool:
                if path == "bad.ts":
                    raise OSError("stat failed")
                return super().is_file(path)

        tools = FlakyTools({"bad.ts": "x", "good.ts": "class G {}"})
        assert _analyzer(tools).discover_files() == ["good.ts"]


class TestAnalyzeProject:
    def test_sample_project(self, fake_tools) -> None:
        result = _analyzer(fake_tools).analyze_project(Path("/work/sample"))
        assert result.name == "sample"
        assert result.type == "node"
        assert result.description == "Build a CLI tool, Keep memory of the project"
        assert result.dependencies == ["typescript", "node", "jest", "vite"]
        assert result.build_tools == ["vite"]
        assert result.test_frameworks == ["jest"]
        assert "Object-Oriented" in result.frameworks
        assert result.structure.files == ["README.md", "package.json", "src/index.ts"]
        assert result.structure.directories == ["src"]

    def test_empty_project(self, make_tools) -> None:
        with pytest.raises(AnalysisSystemError) as excinfo:
            _analyzer(make_tools()).analyze_project("/work/empty")
        assert excinfo.value.kind is AnalysisErrorKind.FILE_READ_ERROR

    def test_no_signal_raises_first_error(self, make_tools) -> None:
        tools = make_tools({"data.txt": "hello"})
        with pytest.raises(AnalysisSystemError) as excinfo:
            _analyzer(tools).analyze_project("/work/data")
        assert excinfo.value.kind is AnalysisErrorKind.ANALYSIS_ERROR

    def test_unreadable_file_fails_single_chunk(self, make_tools) -> None:
        tools = make_tools({"package.json": MANIFEST}, unreadable={"src/secret.ts"})
        with pytest.raises(AnalysisSystemError) as excinfo:
            _analyzer(tools).analyze_project("/work/demo")
        assert excinfo.value.kind is AnalysisErrorKind.CHUNK_CREATION_ERROR

    def test_dev_tooling_from_framed_manifest(self, make_tools) -> None:
        tools = make_tools({"package.json": frame("package.json", MANIFEST)})
        result = _analyzer(tools).analyze_project("/work/demo")
        assert result.dependencies == ["express", "mocha", "esbuild"]
        assert result.build_tools == ["esbuild"]
        assert result.test_frameworks == ["mocha"]

    def test_malformed_manifest_has_no_tooling(self, make_tools) -> None:
        tools = make_tools({"package.json": "{oops", "a.ts": "class A {}"})
        result = _analyzer(tools).analyze_project("/work/demo")
        assert result.dependencies == []
        assert result.build_tools == []
        assert result.test_frameworks == []
        assert result.frameworks == ["Object-Oriented"]


class TestPartitionedAnalysis:
    def test_signal_despite_chunk_error(self, make_tools) -> None:
        tools = make_tools({"package.json": MANIFEST}, unreadable={"lib/a.ts"})
        config = AnalysisConfig(partition=True)
        result = _analyzer(tools, config).analyze_project("/work/demo")
        assert result.dependencies == ["express", "mocha", "esbuild"]

    def test_low_relevance_chunks_dropped(self, make_tools) -> None:
        tools = make_tools({"package.json": MANIFEST, "lib/a.ts": "class Hidden {}"})
        config = AnalysisConfig(partition=True, min_relevance=0.6)
        analysis = _analyzer(tools, config).analyze()
        assert analysis.architecture.tech_stack == ("express", "mocha", "esbuild")
        assert analysis.specification.components == ()

    def test_fallback_when_all_filtered(self, make_tools) -> None:
        tools = make_tools({"package.json": MANIFEST})
        config = AnalysisConfig(partition=True, min_relevance=0.99)
        analysis = _analyzer(tools, config).analyze()
        assert analysis.architecture.tech_stack == ("express", "mocha", "esbuild")

    def test_merges_across_chunks(self, make_tools) -> None:
        tools = make_tools(
            {
                "README.md": "## Goals\n- Ship\n",
                "src/a.ts": "class A {}",
                "lib/b.ts": "class B {}",
            }
        )
        config = AnalysisConfig(partition=True)
        analysis = _analyzer(tools, config).analyze()
        assert analysis.specification.goals == ("Ship",)
        assert set(analysis.specification.components) == {"A", "B"}


class TestMergeFailure:
    @pytest.mark.parametrize("partition", [False, True])
    def test_merge_error_propagates(self, make_tools, partition: bool) -> None:
        tools = make_tools(
            {
                "package.json": MANIFEST,
                "README.md": "## Goals\n- Ship\n",
                "src/a.ts": "class A {}",
            }
        )
        error = AnalysisSystemError(
            AnalysisErrorKind.MERGE_ERROR, "Failed to merge chunk analysis results"
        )
        with unittest.mock.patch(
            "buildforce.analysis.analyzer.merge_analysis", side_effect=error
        ) as mock_merge:
            with pytest.raises(AnalysisSystemError) as excinfo:
                _analyzer(tools, AnalysisConfig(partition=partition)).analyze_project("/work/demo")

        assert excinfo.value.kind is AnalysisErrorKind.MERGE_ERROR
        mock_merge.assert_called_once()
