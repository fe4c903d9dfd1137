"""Progress reporting for long-running scans and analysis."""

from typing import Protocol

import click


class ProgressSink(Protocol):
    """Receives free-text status updates. Fire-and-forget."""

    def report(self, status: str) -> None:
        ...


class NullProgress:
    """Discards all updates."""

    def report(self, status: str) -> None:
        pass


class EchoProgress:
    """Writes updates to stderr so stdout stays clean for results."""

    def report(self, status: str) -> None:
        click.echo(status, err=True)


class RecordingProgress:
    """Keeps every update in memory; handy for tests and summaries."""

    def __init__(self):
        self.updates: list[str] = []

    def report(self, status: str) -> None:
        self.updates.append(status)
