"""External analysis backends.

Each backend takes a single prompt and returns the response text, raising
LLMError on any failure. Two backends are available:

- ``claude-cli``: one-shot ``claude -p`` subprocess fed on stdin (default)
- ``anthropic``: the Anthropic API (requires the ``api`` extra)
"""

import contextlib
import functools
import logging
import os
import signal
import subprocess
from typing import Callable, Optional, Sequence

from .config import DEFAULT_CLAUDE_COMMAND, OptimizerConfig

logger = logging.getLogger(__name__)

DEFAULT_API_MODEL = "claude-sonnet-4-20250514"

Backend = Callable[..., str]


class LLMError(Exception):
    """Base error for backend calls."""


class LLMTimeoutError(LLMError):
    """The backend did not answer within its deadline."""


def _kill_process_tree(proc: subprocess.Popen) -> None:
    """Kill a timed-out child and anything it spawned, then reap it."""
    try:
        os.killpg(proc.pid, signal.SIGKILL)
    except (AttributeError, ProcessLookupError, PermissionError):
        # No process groups on this platform, or the group is already gone
        proc.kill()

    # Grandchildren may still hold the pipes; stop reading them
    for stream in (proc.stdin, proc.stdout, proc.stderr):
        if stream is not None:
            with contextlib.suppress(OSError):
                stream.close()
    proc.wait()


def call_claude_cli(
    prompt: str,
    *,
    timeout: float,
    command: Sequence[str] = DEFAULT_CLAUDE_COMMAND,
    model: Optional[str] = None,
    label: str = "analysis",
) -> str:
    """
    Run the Claude CLI once: write the prompt to stdin, close it, read stdout.

    Args:
        prompt: Full instruction text.
        timeout: Hard wall-clock limit in seconds.
        command: Command line to launch (default ``claude -p``).
        model: Optional ``--model`` override.
        label: Label for logging and error messages.

    Returns:
        The response text (stripped).

    Raises:
        LLMTimeoutError: The process did not exit in time (it has been killed).
        LLMError: The process could not be launched or exited non-zero.
    """
    cmd = list(command)
    if model:
        cmd.extend(["--model", model])

    # Filter CLAUDECODE env var to prevent recursive Claude invocations
    env = {k: v for k, v in os.environ.items() if k != "CLAUDECODE"}

    logger.debug("Calling %s (%s, timeout=%ss)", cmd[0], label, timeout)

    try:
        proc = subprocess.Popen(
            cmd,
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            encoding="utf-8",
            errors="replace",
            env=env,
            start_new_session=True,
        )
    except OSError as exc:
        raise LLMError(f"Could not launch {cmd[0]!r} (label={label}): {exc}") from exc

    try:
        stdout, stderr = proc.communicate(input=prompt, timeout=timeout)
    except subprocess.TimeoutExpired as exc:
        _kill_process_tree(proc)
        raise LLMTimeoutError(f"{cmd[0]} timed out after {timeout}s (label={label})") from exc

    if proc.returncode != 0:
        raise LLMError(
            f"{cmd[0]} failed (exit {proc.returncode}, label={label}): {(stderr or '')[:500]}"
        )

    return (stdout or "").strip()


def _import_anthropic():
    try:
        import anthropic
    except ImportError:
        raise ImportError(
            "anthropic package not installed. "
            "Install with: pip install 'ccoptimizer[api]'"
        )
    return anthropic


def call_anthropic_api(
    prompt: str,
    *,
    timeout: float,
    model: Optional[str] = None,
    api_key: Optional[str] = None,
    label: str = "analysis",
) -> str:
    """
    Send the prompt to the Anthropic API.

    Requires ANTHROPIC_API_KEY (or `api_key`). Any client error, including
    the request deadline, is raised as LLMError.
    """
    anthropic = _import_anthropic()

    api_key = api_key or os.environ.get('ANTHROPIC_API_KEY')
    if not api_key:
        raise LLMError(
            "No API key provided. Set ANTHROPIC_API_KEY environment variable "
            "or pass api_key parameter."
        )

    client = anthropic.Anthropic(api_key=api_key, timeout=timeout, max_retries=0)

    logger.debug("Calling Anthropic API model=%s (%s)", model or DEFAULT_API_MODEL, label)

    try:
        response = client.messages.create(
            model=model or DEFAULT_API_MODEL,
            max_tokens=2048,
            messages=[{"role": "user", "content": prompt}],
        )
    except anthropic.APITimeoutError as exc:
        raise LLMTimeoutError(f"Anthropic API timed out after {timeout}s (label={label})") from exc
    except anthropic.APIError as exc:
        raise LLMError(f"Anthropic API failed (label={label}): {exc}") from exc

    text = "".join(block.text for block in response.content if block.type == "text")
    return text.strip()


_BACKENDS: dict[str, Backend] = {
    'claude-cli': call_claude_cli,
    'anthropic': call_anthropic_api,
}

BACKEND_NAMES = tuple(_BACKENDS)


def get_backend(name: str) -> Backend:
    """Look up a backend function by name."""
    try:
        return _BACKENDS[name]
    except KeyError:
        raise ValueError(
            f"Unknown analysis backend: {name!r} (choose from {', '.join(BACKEND_NAMES)})"
        ) from None


def make_backend(config: OptimizerConfig) -> Backend:
    """
    Bind the configured backend to its command and model settings.

    Raises ImportError up front if the backend's client library is missing,
    so individual calls only ever fail with LLMError.
    """
    backend = get_backend(config.backend)
    if backend is call_claude_cli:
        return functools.partial(call_claude_cli, command=config.claude_command, model=config.model)
    if backend is call_anthropic_api:
        _import_anthropic()
    return functools.partial(backend, model=config.model)
