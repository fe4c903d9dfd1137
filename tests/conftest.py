"""Pytest fixtures for ccoptimizer tests."""

import json
import shutil
from pathlib import Path

import pytest

from ccoptimizer.config import OptimizerConfig
from ccoptimizer.models import Conversation, Message


@pytest.fixture
def fixtures_dir() -> Path:
    """Path to the test fixtures directory."""
    return Path(__file__).parent / 'fixtures'


@pytest.fixture
def sample_transcript_path(fixtures_dir) -> Path:
    """Transcript with 3 user lines, 2 assistant lines and 1 malformed line."""
    return fixtures_dir / 'sample_transcript.jsonl'


@pytest.fixture
def assistant_only_path(fixtures_dir) -> Path:
    """Transcript that yields no messages."""
    return fixtures_dir / 'assistant_only.jsonl'


@pytest.fixture
def temp_projects_dir(tmp_path, fixtures_dir):
    """
    Projects tree with one populated project and one empty project.

    projects/
      -home-dev-webapp/sample_transcript.jsonl
      -home-dev-empty/
    """
    projects_dir = tmp_path / 'projects'
    webapp = projects_dir / '-home-dev-webapp'
    webapp.mkdir(parents=True)
    (projects_dir / '-home-dev-empty').mkdir()

    shutil.copy(fixtures_dir / 'sample_transcript.jsonl', webapp / 'sample_transcript.jsonl')
    return projects_dir


@pytest.fixture
def write_transcript():
    """Write a list of records (dicts or raw strings) as a JSONL file."""
    def _write(path: Path, records: list) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        lines = [r if isinstance(r, str) else json.dumps(r) for r in records]
        path.write_text('\n'.join(lines) + '\n')
        return path
    return _write


def user_record(content, cwd=None, timestamp='2026-01-15T09:00:00.000Z') -> dict:
    record = {'type': 'user', 'message': {'role': 'user', 'content': content}, 'timestamp': timestamp}
    if cwd:
        record['cwd'] = cwd
    return record


def assistant_record(blocks, cwd=None, timestamp='2026-01-15T09:00:05.000Z') -> dict:
    record = {'type': 'assistant', 'message': {'role': 'assistant', 'content': blocks}, 'timestamp': timestamp}
    if cwd:
        record['cwd'] = cwd
    return record


def make_conversation(*contents, roles=None, project='-home-dev-webapp', source_file='a.jsonl') -> Conversation:
    """Build a Conversation; roles default to alternating user/assistant."""
    roles = roles or ['user' if i % 2 == 0 else 'assistant' for i in range(len(contents))]
    messages = [Message(role=r, content=c) for r, c in zip(roles, contents)]
    return Conversation(project=project, source_file=source_file, messages=messages)


@pytest.fixture
def config() -> OptimizerConfig:
    return OptimizerConfig()


@pytest.fixture
def dry_run_config() -> OptimizerConfig:
    return OptimizerConfig(dry_run=True)
