"""CLI entry point for ccoptimizer."""

import logging
import shlex
import sys
from pathlib import Path

import click

from .config import (
    DEFAULT_ANALYSIS_TIMEOUT,
    DEFAULT_BACKEND,
    DEFAULT_CLAUDE_COMMAND,
    DEFAULT_MAX_CONVERSATIONS,
    OptimizerConfig,
    get_default_projects_dir,
)
from .llm import BACKEND_NAMES


def analysis_options(fn):
    """Options shared by every command that runs the analysis pipeline."""
    options = [
        click.option("--projects-dir", default=None, envvar="CCOPTIMIZER_PROJECTS_DIR",
                     help="Path to Claude projects directory (default: ~/.claude/projects)"),
        click.option("--max-conversations", default=DEFAULT_MAX_CONVERSATIONS, show_default=True,
                     type=click.IntRange(min=0), help="Number of conversations to analyze"),
        click.option("--timeout", default=DEFAULT_ANALYSIS_TIMEOUT, show_default=True,
                     type=click.FloatRange(min=0, min_open=True), help="Per-conversation analysis timeout (seconds)"),
        click.option("--backend", default=DEFAULT_BACKEND, show_default=True, envvar="CCOPTIMIZER_BACKEND",
                     type=click.Choice(BACKEND_NAMES), help="Analysis backend"),
        click.option("--claude-command", default=shlex.join(DEFAULT_CLAUDE_COMMAND), show_default=True,
                     envvar="CCOPTIMIZER_CLAUDE_CMD", help="Command used by the claude-cli backend"),
        click.option("--model", default=None, help="Model override for the backend"),
        click.option("--dry-run", is_flag=True, help="Skip AI calls and use canned insights"),
        click.option("--verbose", "-v", is_flag=True, help="Enable debug logging"),
    ]
    for option in reversed(options):
        fn = option(fn)
    return fn


def build_config(projects_dir, max_conversations, timeout, backend, claude_command, model, dry_run, **overrides) -> OptimizerConfig:
    command = tuple(shlex.split(claude_command))
    if not command:
        raise click.BadParameter("Command must not be empty.", param_hint="--claude-command")

    return OptimizerConfig(
        projects_dir=Path(projects_dir) if projects_dir else get_default_projects_dir(),
        max_conversations=max_conversations,
        analysis_timeout=timeout,
        backend=backend,
        claude_command=command,
        model=model,
        dry_run=dry_run,
        **overrides,
    )


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def run_analysis(config: OptimizerConfig):
    """Run the pipeline with console progress, exiting on fatal errors."""
    from .insights import analyze_conversations
    from .progress import EchoProgress

    if not config.projects_dir.is_dir():
        click.echo(f"Error: Projects directory not found: {config.projects_dir}", err=True)
        sys.exit(1)

    try:
        return analyze_conversations(config.projects_dir, config, progress=EchoProgress())
    except ImportError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    except OSError as e:
        click.echo(f"Error: Cannot read projects directory {config.projects_dir}: {e}", err=True)
        sys.exit(1)


@click.group()
@click.version_option(package_name="ccoptimizer")
def main():
    """ccoptimizer - learn your preferences from Claude transcripts and write CLAUDE.md."""
    pass


@main.command()
@analysis_options
@click.option("--output", default=None, help="Write combined insights to file (default: stdout)")
def analyze(verbose, output, **options):
    """Analyze transcripts and print the combined insights."""
    setup_logging(verbose)
    config = build_config(**options)

    report = run_analysis(config)

    click.echo(
        f"Analyzed {report.analyzed_count} of {report.conversation_count} conversations "
        f"from {report.project_count} projects",
        err=True,
    )

    if not report.insights:
        click.echo("No insights found.", err=True)
        return

    if output:
        Path(output).write_text(report.insights + "\n")
        click.echo(f"Wrote insights to: {output}")
    else:
        click.echo(report.insights)


@main.command()
@analysis_options
@click.option("--output", default="CLAUDE.md", show_default=True, help="Path of the generated file")
@click.option("--force", is_flag=True, help="Overwrite an existing file")
def generate(verbose, output, force, **options):
    """Analyze transcripts and write a consolidated CLAUDE.md."""
    from .generator import generate_claude_md, write_claude_md

    setup_logging(verbose)
    config = build_config(output_path=Path(output), **options)

    if config.output_path.exists() and not force:
        click.echo(f"Error: File already exists: {config.output_path}", err=True)
        click.echo("Use --force to overwrite.", err=True)
        sys.exit(1)

    report = run_analysis(config)

    if not report.insights:
        click.echo(
            f"No insights found in {report.analyzed_count} analyzed conversations; nothing written.",
            err=True,
        )
        sys.exit(1)

    click.echo("Consolidating insights...", err=True)
    content = generate_claude_md(report.insights, config)

    path = write_claude_md(content, config.output_path, force=force)
    click.echo(f"Created: {path}")
    click.echo(
        f"Learned from {report.analyzed_count} conversations across {report.project_count} projects"
    )


@main.command()
@click.option("--projects-dir", default=None, envvar="CCOPTIMIZER_PROJECTS_DIR",
              help="Path to Claude projects directory (default: ~/.claude/projects)")
def stats(projects_dir):
    """Show transcript statistics without running any analysis."""
    from .projects import discover_corpus, find_projects, find_transcript_files

    projects_path = Path(projects_dir) if projects_dir else get_default_projects_dir()

    if not projects_path.is_dir():
        click.echo(f"Error: Projects directory not found: {projects_path}", err=True)
        sys.exit(1)

    try:
        project_dirs = find_projects(projects_path)
        transcript_count = sum(len(find_transcript_files(p)) for p in project_dirs)
        corpus = discover_corpus(projects_path)
    except OSError as e:
        click.echo(f"Error: Cannot read projects directory {projects_path}: {e}", err=True)
        sys.exit(1)

    click.echo("Transcript Statistics")
    click.echo("=" * 50)
    click.echo("")

    user_count = sum(1 for c in corpus for m in c.messages if m.role == 'user')
    assistant_count = sum(1 for c in corpus for m in c.messages if m.role == 'assistant')

    click.echo(f"  Projects: {len(project_dirs)}")
    click.echo(f"  Transcript files: {transcript_count}")
    click.echo(f"  Conversations with messages: {len(corpus)}")
    click.echo(f"  Total messages: {user_count + assistant_count}")
    click.echo(f"    User: {user_count}")
    click.echo(f"    Assistant: {assistant_count}")
    click.echo("")

    per_project: dict[str, int] = {}
    for conversation in corpus:
        per_project[conversation.project] = per_project.get(conversation.project, 0) + 1

    if per_project:
        click.echo("Conversations per project")
        click.echo("-" * 30)
        for name, count in per_project.items():
            click.echo(f"  {name}: {count}")
        click.echo("")


if __name__ == "__main__":
    main()
