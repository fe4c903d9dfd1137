"""Tests for CLI commands."""

import sys
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from ccoptimizer.cli import main
from ccoptimizer.runner import DRY_RUN_INSIGHT


@pytest.fixture
def runner():
    """Create CLI test runner."""
    return CliRunner()


class TestAnalyzeCommand:
    """Tests for analyze command."""

    def test_analyze_dry_run(self, runner, temp_projects_dir):
        result = runner.invoke(main, [
            'analyze',
            '--dry-run',
            '--projects-dir', str(temp_projects_dir),
        ])

        assert result.exit_code == 0
        assert DRY_RUN_INSIGHT in result.output
        assert 'Analyzed 1 of 1 conversations from 1 projects' in result.output

    def test_analyze_writes_output_file(self, runner, temp_projects_dir, tmp_path):
        output = tmp_path / 'insights.txt'

        result = runner.invoke(main, [
            'analyze',
            '--dry-run',
            '--projects-dir', str(temp_projects_dir),
            '--output', str(output),
        ])

        assert result.exit_code == 0
        assert output.read_text() == DRY_RUN_INSIGHT + '\n'

    def test_analyze_missing_projects_dir(self, runner, tmp_path):
        result = runner.invoke(main, [
            'analyze',
            '--projects-dir', str(tmp_path / 'nonexistent'),
        ])

        assert result.exit_code == 1
        assert 'not found' in result.output.lower()

    def test_analyze_projects_dir_from_env(self, runner, temp_projects_dir):
        result = runner.invoke(
            main, ['analyze', '--dry-run'],
            env={'CCOPTIMIZER_PROJECTS_DIR': str(temp_projects_dir)},
        )

        assert result.exit_code == 0
        assert DRY_RUN_INSIGHT in result.output

    def test_analyze_custom_command(self, runner, temp_projects_dir):
        """--claude-command swaps in any stdin-to-stdout program."""
        command = f'"{sys.executable}" -c "print(\'- From custom command\')"'

        result = runner.invoke(main, [
            'analyze',
            '--projects-dir', str(temp_projects_dir),
            '--claude-command', command,
        ])

        assert result.exit_code == 0
        assert '- From custom command' in result.output

    def test_analyze_no_insights(self, runner, tmp_path):
        result = runner.invoke(main, ['analyze', '--dry-run', '--projects-dir', str(tmp_path)])

        assert result.exit_code == 0
        assert 'No insights found' in result.output

    def test_invalid_backend_rejected(self, runner, temp_projects_dir):
        result = runner.invoke(main, [
            'analyze',
            '--projects-dir', str(temp_projects_dir),
            '--backend', 'invalid',
        ])

        assert result.exit_code == 2


class TestGenerateCommand:
    """Tests for generate command."""

    def test_generate_dry_run(self, runner, temp_projects_dir, tmp_path):
        output = tmp_path / 'CLAUDE.md'

        result = runner.invoke(main, [
            'generate',
            '--dry-run',
            '--projects-dir', str(temp_projects_dir),
            '--output', str(output),
        ])

        assert result.exit_code == 0
        assert 'Created' in result.output
        content = output.read_text()
        assert content.startswith('# Optimized Claude Instructions')
        assert DRY_RUN_INSIGHT in content

    def test_generate_refuses_existing_file(self, runner, temp_projects_dir, tmp_path):
        output = tmp_path / 'CLAUDE.md'
        output.write_text('hand-written')

        result = runner.invoke(main, [
            'generate',
            '--dry-run',
            '--projects-dir', str(temp_projects_dir),
            '--output', str(output),
        ])

        assert result.exit_code == 1
        assert 'already exists' in result.output
        assert output.read_text() == 'hand-written'

    def test_generate_force(self, runner, temp_projects_dir, tmp_path):
        output = tmp_path / 'CLAUDE.md'
        output.write_text('hand-written')

        result = runner.invoke(main, [
            'generate',
            '--dry-run',
            '--force',
            '--projects-dir', str(temp_projects_dir),
            '--output', str(output),
        ])

        assert result.exit_code == 0
        assert output.read_text().startswith('# Optimized Claude Instructions')

    def test_generate_nothing_found(self, runner, tmp_path):
        output = tmp_path / 'CLAUDE.md'
        projects = tmp_path / 'projects'
        projects.mkdir()

        result = runner.invoke(main, [
            'generate',
            '--dry-run',
            '--projects-dir', str(projects),
            '--output', str(output),
        ])

        assert result.exit_code == 1
        assert not output.exists()


class TestStatsCommand:
    """Tests for stats command."""

    def test_stats(self, runner, temp_projects_dir):
        result = runner.invoke(main, ['stats', '--projects-dir', str(temp_projects_dir)])

        assert result.exit_code == 0
        assert 'Projects: 2' in result.output
        assert 'Transcript files: 1' in result.output
        assert 'Total messages: 5' in result.output
        assert 'User: 3' in result.output
        assert 'Assistant: 2' in result.output
        assert '-home-dev-webapp: 1' in result.output

    def test_stats_missing_dir(self, runner, tmp_path):
        result = runner.invoke(main, ['stats', '--projects-dir', str(tmp_path / 'nope')])

        assert result.exit_code == 1
        assert 'not found' in result.output.lower()

    def test_stats_unreadable_dir(self, runner, temp_projects_dir):
        with patch('ccoptimizer.projects.find_projects', side_effect=PermissionError('denied')):
            result = runner.invoke(main, ['stats', '--projects-dir', str(temp_projects_dir)])

        assert result.exit_code == 1
        assert 'Cannot read projects directory' in result.output
        assert 'Traceback' not in result.output
