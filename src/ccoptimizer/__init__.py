"""ccoptimizer - infer CLAUDE.md preferences from Claude chat transcripts."""

__version__ = "0.1.0"
