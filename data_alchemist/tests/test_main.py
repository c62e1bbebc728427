"""Tests for the command-line launcher."""

from __future__ import annotations

import pytest

from data_alchemist.frontend import main as launcher


def test_default_command_runs_both(monkeypatch) -> None:
    ran = []
    monkeypatch.setattr(launcher, 'COMMANDS', {'both': lambda: ran.append('both')})
    monkeypatch.setattr('sys.argv', ['data-alchemist'])
    launcher.main()
    assert ran == ['both']


def test_command_name_is_case_insensitive(monkeypatch) -> None:
    ran = []
    monkeypatch.setattr(launcher, 'COMMANDS', {'server': lambda: ran.append('server')})
    monkeypatch.setattr('sys.argv', ['data-alchemist', 'SERVER'])
    launcher.main()
    assert ran == ['server']


def test_unknown_command_exits_with_usage(monkeypatch) -> None:
    monkeypatch.setattr('sys.argv', ['data-alchemist', 'deploy'])
    with pytest.raises(SystemExit) as excinfo:
        launcher.main()
    assert 'Unknown command: deploy' in str(excinfo.value.code)
    assert 'server|ui|both' in str(excinfo.value.code)
