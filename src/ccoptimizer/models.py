"""Data models for ccoptimizer."""

from dataclasses import dataclass, field
from typing import Any, Literal, Optional, Union


@dataclass
class UserEntry:
    """A decoded `type: user` line from a transcript."""
    content: Any
    timestamp: Optional[str] = None
    cwd: Optional[str] = None


@dataclass
class AssistantEntry:
    """A decoded `type: assistant` line; `blocks` is the raw content list."""
    blocks: list
    timestamp: Optional[str] = None
    cwd: Optional[str] = None


@dataclass
class UnrecognizedEntry:
    """Any other record kind (summaries, system lines, progress, ...)."""
    kind: Optional[str]
    timestamp: Optional[str] = None
    cwd: Optional[str] = None


LogEntry = Union[UserEntry, AssistantEntry, UnrecognizedEntry]


@dataclass
class Message:
    """Represents a normalized message from a transcript."""
    role: Literal["user", "assistant"]
    content: Any
    timestamp: Optional[str] = None


@dataclass
class ParsedTranscript:
    """Messages and metadata extracted from a single transcript file."""
    messages: list[Message] = field(default_factory=list)
    metadata: dict[str, str] = field(default_factory=dict)


@dataclass
class Conversation:
    """A transcript that yielded at least one message."""
    project: str
    source_file: str
    messages: list[Message]
    metadata: dict[str, str] = field(default_factory=dict)

    @property
    def project_label(self) -> str:
        """Short project name (last dash-separated segment of the directory)."""
        return self.project.split('-')[-1] or self.project


@dataclass
class AnalysisReport:
    """Outcome of a full analysis run."""
    conversation_count: int
    project_count: int
    analyzed_count: int
    insights: str
