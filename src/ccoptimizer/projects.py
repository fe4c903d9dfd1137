"""Project discovery and corpus collection."""

import logging
from pathlib import Path
from typing import Optional

from .models import Conversation
from .parser import parse_transcript
from .progress import NullProgress, ProgressSink

logger = logging.getLogger(__name__)

TRANSCRIPT_SUFFIX = '.jsonl'


def find_projects(projects_dir: Path) -> list[Path]:
    """
    List project directories (immediate subdirectories), sorted by name.

    Raises OSError if `projects_dir` itself cannot be listed.
    """
    projects = []
    for entry in projects_dir.iterdir():
        try:
            if entry.is_dir():
                projects.append(entry)
        except OSError:
            continue
    projects.sort(key=lambda p: p.name)
    return projects


def find_transcript_files(project_dir: Path) -> list[Path]:
    """
    Find all transcript JSONL files in a project directory, sorted by name.

    Returns an empty list if the directory is missing or unreadable.
    """
    try:
        files = [
            f for f in project_dir.iterdir()
            if f.name.endswith(TRANSCRIPT_SUFFIX) and f.is_file()
        ]
    except OSError as e:
        logger.warning("Skipping unreadable project %s (%s)", project_dir, type(e).__name__)
        return []

    files.sort(key=lambda p: p.name)
    return files


def discover_corpus(projects_dir: Path, progress: Optional[ProgressSink] = None) -> list[Conversation]:
    """
    Parse every transcript under `projects_dir` into a Conversation.

    Transcripts with no messages, and transcripts that cannot be read, are
    left out of the corpus.
    """
    progress = progress or NullProgress()
    corpus: list[Conversation] = []

    for project_dir in find_projects(projects_dir):
        project = project_dir.name

        for transcript_file in find_transcript_files(project_dir):
            progress.report(f"Reading {project}/{transcript_file.name}...")

            try:
                parsed = parse_transcript(transcript_file)
            except OSError as e:
                logger.warning("Skipping unreadable transcript %s (%s)", transcript_file, type(e).__name__)
                continue

            if not parsed.messages:
                continue

            corpus.append(Conversation(
                project=project,
                source_file=transcript_file.name,
                messages=parsed.messages,
                metadata=parsed.metadata,
            ))

    return corpus


def count_projects(corpus: list[Conversation]) -> int:
    """Number of distinct projects represented in the corpus."""
    return len({c.project for c in corpus})
