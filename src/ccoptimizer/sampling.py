"""Bounding the corpus to an analysis sample."""

from .config import DEFAULT_MAX_CONVERSATIONS
from .models import Conversation


def select_sample(
    corpus: list[Conversation],
    max_conversations: int = DEFAULT_MAX_CONVERSATIONS,
) -> list[Conversation]:
    """
    Return the first `max_conversations` conversations in corpus order.

    This is a plain prefix, not a recency or relevance ranking, so repeated
    runs over the same tree analyze the same conversations.
    """
    if max_conversations < 0:
        raise ValueError(f"max_conversations must be >= 0, got {max_conversations}")
    return list(corpus[:max_conversations])
