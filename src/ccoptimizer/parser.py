"""JSONL transcript parser."""

import json
import logging
from pathlib import Path
from typing import Iterator

from .models import (
    AssistantEntry,
    LogEntry,
    Message,
    ParsedTranscript,
    UnrecognizedEntry,
    UserEntry,
)

logger = logging.getLogger(__name__)

TOOL_MARKER = "[Used tool: {name}]"


def parse_jsonl(path: Path) -> Iterator[dict]:
    """
    Stream parse a JSONL file, yielding records.

    Malformed lines (bad JSON or invalid UTF-8), and lines that decode to
    something other than an object, are skipped. Processes line-by-line
    without loading the entire file.
    """
    with open(path, 'rb') as f:
        for line_num, raw in enumerate(f, 1):
            raw = raw.strip()
            if not raw:
                continue
            try:
                record = json.loads(raw.decode('utf-8'))
            except (UnicodeDecodeError, json.JSONDecodeError) as e:
                # Only log error type and location, not the content
                logger.debug("Skipping malformed JSON at %s:%d (%s)", path, line_num, type(e).__name__)
                continue
            if not isinstance(record, dict):
                logger.debug("Skipping non-object record at %s:%d", path, line_num)
                continue
            yield record


def decode_entry(record: dict) -> LogEntry:
    """
    Classify a raw record by its `type` discriminator.

    `user` and `assistant` records without `message.content` are treated as
    unrecognized, so only their working directory is ever consulted.
    """
    kind = record.get('type')
    timestamp = record.get('timestamp')
    cwd = record.get('cwd')
    if not isinstance(cwd, str) or not cwd:
        cwd = None

    message = record.get('message')
    content = message.get('content') if isinstance(message, dict) else None

    if kind == 'user' and content:
        return UserEntry(content=content, timestamp=timestamp, cwd=cwd)

    if kind == 'assistant' and content:
        blocks = content if isinstance(content, list) else []
        return AssistantEntry(blocks=blocks, timestamp=timestamp, cwd=cwd)

    return UnrecognizedEntry(kind=kind, timestamp=timestamp, cwd=cwd)


def render_assistant_content(blocks: list) -> str:
    """Concatenate text blocks and inline a marker for each tool call."""
    parts = []
    for block in blocks:
        if not isinstance(block, dict):
            continue
        block_type = block.get('type')
        if block_type == 'text':
            text = block.get('text')
            if isinstance(text, str):
                parts.append(text)
        elif block_type == 'tool_use':
            parts.append(TOOL_MARKER.format(name=block.get('name', 'unknown')))
    return ''.join(parts)


def parse_transcript(path: Path) -> ParsedTranscript:
    """
    Extract messages and metadata from one transcript file.

    Returns messages in file order. `metadata['cwd']` holds the first working
    directory seen in the file. I/O errors propagate to the caller.
    """
    transcript = ParsedTranscript()

    for record in parse_jsonl(path):
        entry = decode_entry(record)

        if isinstance(entry, UserEntry):
            transcript.messages.append(
                Message(role='user', content=entry.content, timestamp=entry.timestamp)
            )
        elif isinstance(entry, AssistantEntry):
            text = render_assistant_content(entry.blocks)
            if text:
                transcript.messages.append(
                    Message(role='assistant', content=text, timestamp=entry.timestamp)
                )

        if entry.cwd and 'cwd' not in transcript.metadata:
            transcript.metadata['cwd'] = entry.cwd

    return transcript
