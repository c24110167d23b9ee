"""Analysis domain: chunking, signal extraction, merging and adaptation."""

from buildforce.analysis.adapter import to_core_analysis
from buildforce.analysis.analyzer import ProjectAnalyzer
from buildforce.analysis.chunk import ChunkManager
from buildforce.analysis.extract import (
    analyze_chunk,
    extract_architecture,
    extract_specification,
)
from buildforce.analysis.merge import merge_analysis
from buildforce.analysis.types import (
    AnalysisConfig,
    AnalysisErrorKind,
    AnalysisSystemError,
    Architecture,
    Chunk,
    ChunkAnalysisResult,
    ProjectAnalysis,
    SourceFile,
    Specification,
)

__all__ = [
    "AnalysisConfig",
    "AnalysisErrorKind",
    "AnalysisSystemError",
    "Architecture",
    "Chunk",
    "ChunkAnalysisResult",
    "ChunkManager",
    "ProjectAnalysis",
    "ProjectAnalyzer",
    "SourceFile",
    "Specification",
    "analyze_chunk",
    "extract_architecture",
    "extract_specification",
    "merge_analysis",
    "to_core_analysis",
]
