"""Tests for the rules configuration helpers."""

from __future__ import annotations

from datetime import datetime

from data_alchemist.backend import rules


def test_rule_descriptions() -> None:
    assert rules.manual_rule('Email', 'Required') == 'Email: Required'
    assert rules.ai_rule('  tasks need a category ') == 'AI Rule: tasks need a category'


def test_build_rules_config_defaults() -> None:
    config = rules.build_rules_config(['Email: Required'])
    assert config['rules'] == ['Email: Required']
    assert config['weights'] == {'accuracy': 80, 'completeness': 70, 'consistency': 90}
    assert datetime.fromisoformat(config['timestamp']).tzinfo is not None


def test_build_rules_config_ignores_unknown_weights() -> None:
    config = rules.build_rules_config([], {'consistency': 10, 'speed': 99})
    assert config['weights'] == {'accuracy': 80, 'completeness': 70, 'consistency': 10}
