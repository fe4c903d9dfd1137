"""Per-conversation preference analysis.

Each selected conversation is reduced to a short excerpt of what the user
wrote, and that excerpt is handed to one isolated backend call. Calls run
one at a time, in order, and any failure only costs that conversation's
insight.
"""

import logging
from typing import Optional

from .config import DEFAULT_MAX_MESSAGE_CHARS, DEFAULT_MAX_USER_MESSAGES, OptimizerConfig
from .llm import Backend, LLMError, LLMTimeoutError, make_backend
from .models import Conversation
from .progress import NullProgress, ProgressSink

logger = logging.getLogger(__name__)


# =============================================================================
# Prompt
# =============================================================================

ANALYSIS_PROMPT = """Analyze these user messages and write 3-5 concise rules for CLAUDE.md:
{user_messages}

Focus on their communication style, technical preferences, and what frustrates them.
Write as short directives like:
- Keep responses brief
- Never add code comments
- Use existing files instead of creating new ones"""

DRY_RUN_INSIGHT = "- Prefers brief responses\n- No code comments\n- Values simplicity"

TRUNCATION_MARKER = "..."

PREVIEW_CHARS = 50


def truncate(text: str, max_chars: int = DEFAULT_MAX_MESSAGE_CHARS) -> str:
    """Cut `text` to `max_chars`, marking the cut with an ellipsis."""
    if len(text) > max_chars:
        return text[:max_chars] + TRUNCATION_MARKER
    return text


def build_user_excerpt(
    conversation: Conversation,
    max_messages: int = DEFAULT_MAX_USER_MESSAGES,
    max_chars: int = DEFAULT_MAX_MESSAGE_CHARS,
) -> str:
    """
    Join the first few user messages, each truncated, one per line.

    Only plain-text user content counts; structured content (tool results,
    image blocks) contributes nothing.
    """
    user_messages = [m for m in conversation.messages if m.role == 'user'][:max_messages]

    lines = []
    for msg in user_messages:
        if not isinstance(msg.content, str):
            continue
        text = truncate(msg.content, max_chars)
        if text:
            lines.append(text)

    return '\n'.join(lines)


def build_analysis_prompt(user_messages: str) -> str:
    return ANALYSIS_PROMPT.format(user_messages=user_messages)


def first_line_preview(insight: str, max_chars: int = PREVIEW_CHARS) -> str:
    first = insight.split('\n')[0]
    return first[:max_chars]


class AnalysisRunner:
    """
    Runs one backend call per conversation.

    Args:
        config: Run settings; `dry_run` swaps every call for a canned insight.
        backend: Callable taking ``(prompt, timeout=..., label=...)``.
            Defaults to the backend named in `config`.
        progress: Sink for status updates.
    """

    def __init__(
        self,
        config: OptimizerConfig,
        backend: Optional[Backend] = None,
        progress: Optional[ProgressSink] = None,
    ):
        self.config = config
        self.backend = backend or make_backend(config)
        self.progress = progress or NullProgress()

    def run_one(self, conversation: Conversation) -> Optional[str]:
        """
        Analyze one conversation.

        Returns:
            The insight text; "" if the backend timed out or answered with
            nothing; None if the conversation was skipped or the backend
            failed.
        """
        if len(conversation.messages) < 2:
            return None

        excerpt = build_user_excerpt(
            conversation,
            max_messages=self.config.max_user_messages,
            max_chars=self.config.max_message_chars,
        )
        if not excerpt:
            return None

        if self.config.dry_run:
            return DRY_RUN_INSIGHT

        prompt = build_analysis_prompt(excerpt)
        label = f"{conversation.project}/{conversation.source_file}"

        try:
            return self.backend(prompt, timeout=self.config.analysis_timeout, label=label)
        except LLMTimeoutError as e:
            logger.warning("Analysis timed out: %s", e)
            return ""
        except LLMError as e:
            logger.warning("Analysis failed: %s", e)
            return None

    def run_all(self, conversations: list[Conversation]) -> list[Optional[str]]:
        """Analyze conversations sequentially; results follow input order."""
        results: list[Optional[str]] = []
        total = len(conversations)

        for index, conversation in enumerate(conversations, 1):
            self.progress.report(
                f"Analyzing conversation {index}/{total} from {conversation.project_label}..."
            )
            insight = self.run_one(conversation)
            results.append(insight)

            if insight:
                preview = first_line_preview(insight)
                if preview:
                    self.progress.report(f"Found: {preview}...")

        return results
