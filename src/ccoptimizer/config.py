"""Run configuration and defaults."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

DEFAULT_MAX_CONVERSATIONS = 20
DEFAULT_MAX_USER_MESSAGES = 5
DEFAULT_MAX_MESSAGE_CHARS = 200
DEFAULT_ANALYSIS_TIMEOUT = 15.0
DEFAULT_GENERATION_TIMEOUT = 20.0
DEFAULT_BACKEND = 'claude-cli'
DEFAULT_CLAUDE_COMMAND = ('claude', '-p')


def get_default_projects_dir() -> Path:
    return Path.home() / '.claude' / 'projects'


@dataclass
class OptimizerConfig:
    """Settings for one analysis run, threaded explicitly into each component."""
    projects_dir: Path = field(default_factory=get_default_projects_dir)
    output_path: Path = Path('CLAUDE.md')
    max_conversations: int = DEFAULT_MAX_CONVERSATIONS
    max_user_messages: int = DEFAULT_MAX_USER_MESSAGES
    max_message_chars: int = DEFAULT_MAX_MESSAGE_CHARS
    analysis_timeout: float = DEFAULT_ANALYSIS_TIMEOUT
    generation_timeout: float = DEFAULT_GENERATION_TIMEOUT
    backend: str = DEFAULT_BACKEND
    claude_command: tuple[str, ...] = DEFAULT_CLAUDE_COMMAND
    model: Optional[str] = None
    dry_run: bool = False

    def __post_init__(self):
        if self.max_conversations < 0:
            raise ValueError(f"max_conversations must be >= 0, got {self.max_conversations}")
        if self.analysis_timeout <= 0 or self.generation_timeout <= 0:
            raise ValueError("Timeouts must be positive")
