"""Shared fixtures: sample rows and a fake chat-completion client."""

from __future__ import annotations

from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import pytest

from data_alchemist.backend import ai_assistant


class FakeCompletions:
    """Stands in for ``client.chat.completions`` and records every call."""

    def __init__(self) -> None:
        self.content: Optional[str] = ''
        self.error: Optional[Exception] = None
        self.calls: List[Dict[str, Any]] = []

    def create(self, **kwargs: Any) -> Any:
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


@pytest.fixture
def fake_ai(monkeypatch: pytest.MonkeyPatch) -> FakeCompletions:
    completions = FakeCompletions()
    client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    monkeypatch.setattr(ai_assistant, '_client', client)
    return completions


def make_client(client_id: str, priority: str = '3', attributes: str = '{"location": "NY"}') -> Dict[str, Any]:
    return {
        'ClientID': client_id,
        'ClientName': f'Client {client_id}',
        'PriorityLevel': priority,
        'RequestedTaskIDs': 'T1,T2',
        'AttributesJSON': attributes,
    }


def make_worker(worker_id: str, slots: str = '[1,2,3]') -> Dict[str, Any]:
    return {
        'WorkerID': worker_id,
        'WorkerName': f'Worker {worker_id}',
        'Skills': 'coding,ml',
        'AvailableSlots': slots,
        'MaxLoadPerPhase': '2',
    }


def make_task(task_id: str) -> Dict[str, Any]:
    return {
        'TaskID': task_id,
        'TaskName': f'Task {task_id}',
        'Category': 'ETL',
        'Duration': '2',
        'RequiredSkills': 'coding',
    }


@pytest.fixture
def clients() -> List[Dict[str, Any]]:
    return [make_client('C1'), make_client('C2', priority='7'), make_client('C3', attributes='{bad json')]
