"""
Tests for the AI assistant wrapper.

The chat-completion client is replaced with a fake that records each
request and returns canned content, so no network calls are made.
"""

from __future__ import annotations

import json

import pytest
from openai import OpenAIError

from conftest import make_client
from data_alchemist.backend import ai_assistant
from data_alchemist.backend.errors import AIServiceError


def test_get_suggestion_returns_stripped_text(fake_ai) -> None:
    fake_ai.content = '  5\n'
    suggestion = ai_assistant.get_suggestion('PriorityLevel', 'Priority must be between 1-5', '7')
    assert suggestion == '5'
    call = fake_ai.calls[0]
    assert call['model'] == ai_assistant.MODEL
    assert call['temperature'] == 0.2
    assert 'response_format' not in call
    assert "column named 'PriorityLevel'" in call['messages'][1]['content']
    assert "'7'" in call['messages'][1]['content']


def test_empty_suggestion_is_empty_string(fake_ai) -> None:
    fake_ai.content = None
    assert ai_assistant.get_suggestion('A', 'bad', 'x') == ''


def test_transport_failure_raises_service_error(fake_ai) -> None:
    fake_ai.error = OpenAIError('connection reset')
    with pytest.raises(AIServiceError):
        ai_assistant.get_suggestion('A', 'bad', 'x')


def test_missing_api_key_raises_service_error(monkeypatch) -> None:
    monkeypatch.setattr(ai_assistant, '_client', None)
    monkeypatch.delenv('GROQ_API_KEY', raising=False)
    monkeypatch.delenv('OPENAI_API_KEY', raising=False)
    with pytest.raises(AIServiceError):
        ai_assistant.get_suggestion('A', 'bad', 'x')


def test_sample_rows_caps_and_tags_rows() -> None:
    rows = [make_client(f'C{i}') for i in range(20)]
    sample = ai_assistant.sample_rows(rows)
    assert len(sample) == ai_assistant.MAX_SAMPLE_ROWS == 15
    assert sample[14]['rowIndex'] == 14
    assert sample[0]['ClientID'] == 'C0'


def test_propose_modification_sends_only_the_sample(fake_ai) -> None:
    fake_ai.content = json.dumps({'modifications': []})
    rows = [make_client(f'C{i}') for i in range(20)]
    result = ai_assistant.propose_modification('set all priorities to 2', rows, 'clients')
    call = fake_ai.calls[0]
    prompt = call['messages'][1]['content']
    assert call['temperature'] == 0.1
    assert call['response_format'] == {'type': 'json_object'}
    assert '"ClientID": "C14"' in prompt
    assert '"ClientID": "C15"' not in prompt
    assert 'set all priorities to 2' in prompt
    assert result == {
        'modifications': [],
        'summary': 'The AI proposes making 0 change(s) to the clients data.',
    }


def test_propose_modification_drops_invalid_entries(fake_ai) -> None:
    fake_ai.content = json.dumps({'modifications': [
        {'rowIndex': 1, 'column': 'PriorityLevel', 'newValue': '3'},
        {'rowIndex': 99, 'column': 'PriorityLevel', 'newValue': '3'},
        'not an object',
        {'rowIndex': '0', 'column': 'ClientName', 'newValue': 'Acme'},
        {'rowIndex': 0, 'newValue': 'no column'},
        {'rowIndex': 2, 'column': 'AttributesJSON', 'newValue': None},
    ]})
    rows = [make_client('C1'), make_client('C2'), make_client('C3')]
    result = ai_assistant.propose_modification('fix things', rows, 'clients')
    assert result['modifications'] == [
        {'rowIndex': 1, 'column': 'PriorityLevel', 'newValue': '3'},
        {'rowIndex': 0, 'column': 'ClientName', 'newValue': 'Acme'},
        {'rowIndex': 2, 'column': 'AttributesJSON', 'newValue': ''},
    ]
    assert result['summary'] == 'The AI proposes making 3 change(s) to the clients data.'


def test_propose_modification_empty_content_means_no_changes(fake_ai) -> None:
    fake_ai.content = ''
    result = ai_assistant.propose_modification('do something', [make_client('C1')], 'clients')
    assert result['modifications'] == []


@pytest.mark.parametrize('content', [
    'Sure! Here are the changes you asked for.',
    '[1, 2, 3]',
    json.dumps({'modifications': 'row 1'}),
])
def test_propose_modification_rejects_bad_payloads(fake_ai, content) -> None:
    fake_ai.content = content
    with pytest.raises(AIServiceError):
        ai_assistant.propose_modification('do something', [make_client('C1')], 'clients')


def test_recommend_rules_normalises_entries(fake_ai) -> None:
    fake_ai.content = json.dumps({'recommendations': [
        {'id': 'r1', 'description': 'ClientID must be unique'},
        {'description': 'PriorityLevel must be between 1 and 5'},
        {'id': 'r3'},
        'AttributesJSON must be valid JSON',
    ]})
    result = ai_assistant.recommend_rules([make_client('C1')], 'clients')
    assert result == {'recommendations': [
        {'id': 'r1', 'description': 'ClientID must be unique'},
        {'id': 'rec-2', 'description': 'PriorityLevel must be between 1 and 5'},
        {'id': 'rec-3', 'description': 'AttributesJSON must be valid JSON'},
    ]}
    call = fake_ai.calls[0]
    assert call['temperature'] == 0.5
    assert call['response_format'] == {'type': 'json_object'}


def test_recommend_rules_ids_are_unique(fake_ai) -> None:
    """Repeated or colliding ids are suffixed so every entry stays addressable."""
    fake_ai.content = json.dumps({'recommendations': [
        {'description': 'Emails must contain an at sign'},
        {'id': 'rec-1', 'description': 'ClientID must be unique'},
        {'id': 'r', 'description': 'PriorityLevel must be 1-5'},
        {'id': 'r', 'description': 'AttributesJSON must parse'},
    ]})
    result = ai_assistant.recommend_rules([make_client('C1')], 'clients')
    ids = [rec['id'] for rec in result['recommendations']]
    assert ids == ['rec-1', 'rec-1-2', 'r', 'r-2']


def test_recommend_rules_rejects_non_json(fake_ai) -> None:
    fake_ai.content = 'I recommend making IDs unique.'
    with pytest.raises(AIServiceError):
        ai_assistant.recommend_rules([make_client('C1')], 'clients')
