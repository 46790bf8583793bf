"""Tests for the command-line utilities."""

import json

import pytest
import yaml
from click.testing import CliRunner

from branchrun.__main__ import cli


def test_schema_command() -> None:
    """The schema command prints the JSON Schema of branches."""
    result = CliRunner().invoke(cli, ['schema'])

    assert result.exit_code == 0

    schema = json.loads(result.output)

    assert schema['title'] == 'branchrun'
    assert schema['$schema'].startswith('https://json-schema.org/')
    assert 'steps' in schema['properties']
    assert 'Step' in schema['$defs']


def test_settings_command(monkeypatch: pytest.MonkeyPatch) -> None:
    """The settings command prints the effective settings as YAML."""
    monkeypatch.setenv('BRANCHRUN_IDLE_INTERVAL', '2.5')
    monkeypatch.delenv('BRANCHRUN_BROWSER_DIRECTIVE', raising=False)

    result = CliRunner().invoke(cli, ['settings'])

    assert result.exit_code == 0
    assert yaml.safe_load(result.output) == {
        'browser_directive': 'execute in browser',
        'idle_interval': 2.5,
    }
