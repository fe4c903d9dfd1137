"""Consolidating combined insights into a CLAUDE.md document."""

import logging
from datetime import date
from pathlib import Path
from typing import Optional

from .config import OptimizerConfig
from .llm import Backend, LLMError, make_backend

logger = logging.getLogger(__name__)

DOCUMENT_HEADING = "# Optimized Claude Instructions"

FOOTER_TEMPLATE = "---\n\n*Generated on {date} by ccoptimizer*"


CONSOLIDATION_PROMPT = """
<task>
Consolidate these user preferences from multiple conversations into a clean CLAUDE.md file.
The goal is to create clear, actionable instructions that will guide future Claude interactions.
</task>

<user_preferences>
{insights}
</user_preferences>

<instructions>
Create a well-structured CLAUDE.md starting with the heading "{heading}" and with:
- Clear section headings (Communication Style, Code Preferences, Task Execution, etc.)
- Short, declarative bullet points
- No redundancy between rules
- Focus on actionable directives that directly impact Claude's behavior
Output ONLY the final CLAUDE.md content, no meta-commentary.
</instructions>

<examples>
## Communication Style
- Keep responses extremely brief and direct
- Skip preambles, explanations, and summaries
- Match user's casual tone when appropriate

## Code Preferences
- Never add code comments
- Edit existing files instead of creating new ones
- Follow existing patterns and conventions in the codebase

## Task Execution
- Do exactly what's asked, nothing more
- Never create documentation files unless explicitly requested
</examples>"""


def build_consolidation_prompt(insights: str) -> str:
    return CONSOLIDATION_PROMPT.format(insights=insights, heading=DOCUMENT_HEADING)


def format_footer(today: Optional[date] = None) -> str:
    today = today or date.today()
    return FOOTER_TEMPLATE.format(date=today.isoformat())


def render_fallback_document(insights: str, today: Optional[date] = None) -> str:
    """Plain document used when consolidation is skipped or fails."""
    return f"{DOCUMENT_HEADING}\n\n{insights}\n\n{format_footer(today)}\n"


def generate_claude_md(
    insights: str,
    config: OptimizerConfig,
    backend: Optional[Backend] = None,
    today: Optional[date] = None,
) -> str:
    """
    Turn combined insights into the final CLAUDE.md text.

    The backend's answer is used only if it contains the expected top-level
    heading; otherwise the insights are wrapped as-is.
    """
    if config.dry_run:
        return render_fallback_document(insights, today)

    backend = backend or make_backend(config)

    try:
        content = backend(
            build_consolidation_prompt(insights),
            timeout=config.generation_timeout,
            label="consolidation",
        )
    except LLMError as e:
        logger.warning("Generation failed: %s", e)
        return render_fallback_document(insights, today)

    if content and DOCUMENT_HEADING in content:
        return f"{content.rstrip()}\n\n{format_footer(today)}\n"

    logger.warning("Consolidated output lacked %r heading; using fallback", DOCUMENT_HEADING)
    return render_fallback_document(insights, today)


def write_claude_md(content: str, output_path: Path, force: bool = False) -> str:
    """
    Write the document, creating parent directories.

    Raises FileExistsError if the file exists and `force` is False.
    """
    if output_path.exists() and not force:
        raise FileExistsError(f"File already exists: {output_path}. Use --force to overwrite.")

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(content)
    return str(output_path)
