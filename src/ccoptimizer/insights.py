"""Insight aggregation and the end-to-end analysis pipeline."""

from pathlib import Path
from typing import Iterable, Optional

from .config import OptimizerConfig
from .llm import Backend
from .models import AnalysisReport
from .progress import NullProgress, ProgressSink
from .projects import count_projects, discover_corpus
from .runner import AnalysisRunner
from .sampling import select_sample

INSIGHT_SEPARATOR = '\n\n'


def aggregate_insights(results: Iterable[Optional[str]]) -> str:
    """Join non-empty results, in order, separated by a blank line."""
    return INSIGHT_SEPARATOR.join(r for r in results if r)


def analyze_conversations(
    projects_dir: Path,
    config: OptimizerConfig,
    backend: Optional[Backend] = None,
    progress: Optional[ProgressSink] = None,
) -> AnalysisReport:
    """
    Discover, sample, and analyze transcripts under `projects_dir`.

    Raises OSError only if `projects_dir` itself cannot be listed.
    """
    progress = progress or NullProgress()

    corpus = discover_corpus(projects_dir, progress=progress)
    project_count = count_projects(corpus)
    progress.report(f"Found {len(corpus)} chats from {project_count} projects")

    sample = select_sample(corpus, config.max_conversations)
    runner = AnalysisRunner(config, backend=backend, progress=progress)
    results = runner.run_all(sample)

    return AnalysisReport(
        conversation_count=len(corpus),
        project_count=project_count,
        analyzed_count=len(sample),
        insights=aggregate_insights(results),
    )
