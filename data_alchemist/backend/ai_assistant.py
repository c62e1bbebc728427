"""
Integration helpers for the hosted chat-completion API.

This module defines a thin wrapper around the OpenAI client that
builds prompts for the three AI features of the application (single
value fix suggestions, natural-language modification proposals and
validation rule recommendations) and submits them to an
OpenAI-compatible endpoint.  Groq is the default provider; set
``AI_BASE_URL`` to point elsewhere.

The API key is read from ``GROQ_API_KEY`` (or ``OPENAI_API_KEY``) on
the first call rather than at import time, so the server can serve its
other endpoints without one.  Every failure, including a missing key,
is raised as :class:`~data_alchemist.backend.errors.AIServiceError`.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, List, Optional

from openai import OpenAI, OpenAIError

from .errors import AIServiceError

logger = logging.getLogger(__name__)

MODEL: str = os.getenv('AI_MODEL', 'llama3-8b-8192')
BASE_URL: str = os.getenv('AI_BASE_URL', 'https://api.groq.com/openai/v1')
TIMEOUT: float = float(os.getenv('AI_TIMEOUT', '60'))

SUGGESTION_TEMPERATURE = 0.2
MODIFICATION_TEMPERATURE = 0.1
RECOMMENDATION_TEMPERATURE = 0.5

# Only the head of a dataset is sent to the model
MAX_SAMPLE_ROWS = 15

_client: Optional[OpenAI] = None


def _resolve_api_key() -> str:
    """Resolve the API key from environment variables."""
    for name in ('GROQ_API_KEY', 'OPENAI_API_KEY'):
        key = os.getenv(name)
        if key:
            return key
    raise AIServiceError('Missing AI API key. Set GROQ_API_KEY or OPENAI_API_KEY in your environment.')


def get_client() -> OpenAI:
    """Return the shared OpenAI client, creating it on first use."""
    global _client
    if _client is None:
        _client = OpenAI(api_key=_resolve_api_key(), base_url=BASE_URL, timeout=TIMEOUT)
    return _client


def _complete(system: str, prompt: str, temperature: float, json_mode: bool = False) -> str:
    """Send one non-streaming chat completion and return the message text."""
    kwargs: Dict[str, Any] = {
        'messages': [
            {'role': 'system', 'content': system},
            {'role': 'user', 'content': prompt},
        ],
        'model': MODEL,
        'temperature': temperature,
    }
    if json_mode:
        kwargs['response_format'] = {'type': 'json_object'}
    try:
        completion = get_client().chat.completions.create(**kwargs)
    except OpenAIError as e:
        logger.error(f"AI completion request failed: {e}")
        raise AIServiceError('AI completion request failed') from e
    try:
        content = completion.choices[0].message.content
    except (AttributeError, IndexError) as e:
        raise AIServiceError('AI response had no choices') from e
    return content or ''


def _complete_json(system: str, prompt: str, temperature: float) -> Dict[str, Any]:
    content = _complete(system, prompt, temperature, json_mode=True)
    try:
        payload = json.loads(content or '{}')
    except json.JSONDecodeError as e:
        logger.error(f"AI returned non-JSON content: {content[:200]!r}")
        raise AIServiceError('AI response was not valid JSON') from e
    if not isinstance(payload, dict):
        raise AIServiceError('AI response was not a JSON object')
    return payload


def sample_rows(data: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Return the rows sent to the model, each tagged with its row index."""
    return [{'rowIndex': i, **row} for i, row in enumerate(data[:MAX_SAMPLE_ROWS])]


def get_suggestion(column: str, error: str, current_value: Any) -> str:
    """Ask the model for a single corrected value for one invalid cell.

    Returns:
        The suggested value as plain text with surrounding whitespace
        removed.
    """
    prompt = (
        f"For a CSV file column named '{column}', a data entry of '{current_value}' is invalid. "
        f"The error is: '{error}'. Provide a likely correct value. "
        "Respond with only the corrected value, and nothing else."
    )
    suggestion = _complete(
        'You are a helpful data correction assistant.',
        prompt,
        SUGGESTION_TEMPERATURE,
    ).strip()
    logger.info(f"AI suggestion for column {column}: {suggestion!r}")
    return suggestion


def propose_modification(command: str, data: List[Dict[str, Any]], data_type: str) -> Dict[str, Any]:
    """Translate a natural-language command into a list of cell edits.

    The model sees only the first :data:`MAX_SAMPLE_ROWS` rows.  Its
    answer is checked before being returned: edits that are not
    objects, lack a column, or point at a row that does not exist are
    dropped.

    Args:
        command: The user's instruction, e.g. "set PriorityLevel to 3
            for every client in Group A".
        data: The full dataset the command applies to.
        data_type: One of ``clients``, ``workers`` or ``tasks``.

    Returns:
        A dictionary with a ``modifications`` list of ``{"rowIndex",
        "column", "newValue"}`` entries and a human-readable
        ``summary``.  The list is empty when the command cannot be
        mapped onto the data.
    """
    sample = sample_rows(data)
    columns = list(data[0].keys()) if data else []
    prompt = f"""You are a data modification assistant working on a {data_type} dataset.

The dataset has these columns: {', '.join(columns)}
Here are the first {len(sample)} rows as JSON, each tagged with its rowIndex:
{json.dumps(sample, indent=2, default=str)}

The user wants to apply this change:
"{command}"

Work out which cells must change to carry out the command. Only use rowIndex values and
column names that appear above. Return a JSON object with exactly this structure:
{{
  "modifications": [
    {{"rowIndex": 0, "column": "ColumnName", "newValue": "the new value"}}
  ]
}}
If the command cannot be applied to this data, return {{"modifications": []}}."""
    payload = _complete_json(
        'You are a data modification assistant that only responds with JSON.',
        prompt,
        MODIFICATION_TEMPERATURE,
    )
    raw = payload.get('modifications', [])
    if not isinstance(raw, list):
        raise AIServiceError('AI modifications field was not a list')
    modifications: List[Dict[str, Any]] = []
    for entry in raw:
        if not isinstance(entry, dict):
            logger.warning(f"Dropping non-object modification: {entry!r}")
            continue
        index = entry.get('rowIndex')
        column = entry.get('column')
        if isinstance(index, str) and index.strip().isdigit():
            index = int(index)
        if not isinstance(index, int) or isinstance(index, bool) or not 0 <= index < len(data):
            logger.warning(f"Dropping modification with invalid rowIndex: {entry!r}")
            continue
        if not column or not isinstance(column, str):
            logger.warning(f"Dropping modification without column: {entry!r}")
            continue
        new_value = entry.get('newValue', '')
        modifications.append({
            'rowIndex': index,
            'column': column,
            'newValue': '' if new_value is None else new_value,
        })
    summary = f"The AI proposes making {len(modifications)} change(s) to the {data_type} data."
    logger.info(summary)
    return {'modifications': modifications, 'summary': summary}


def recommend_rules(data: List[Dict[str, Any]], data_type: str) -> Dict[str, Any]:
    """Ask the model for validation or operational rules suited to the data.

    Returns:
        A dictionary with a ``recommendations`` list of ``{"id",
        "description"}`` entries.
    """
    sample = sample_rows(data)
    prompt = f"""You are an expert data analysis assistant reviewing a {data_type} dataset.

Here are the first {len(sample)} rows as JSON:
{json.dumps(sample, indent=2, default=str)}

Suggest validation or operational rules that would keep this data consistent, for example
required formats, value ranges, uniqueness constraints or relationships between columns.
Return a JSON object with exactly this structure:
{{
  "recommendations": [
    {{"id": "rec-1", "description": "A one-sentence description of the rule"}}
  ]
}}"""
    payload = _complete_json(
        'You are a data analysis assistant that only responds with JSON.',
        prompt,
        RECOMMENDATION_TEMPERATURE,
    )
    raw = payload.get('recommendations', [])
    if not isinstance(raw, list):
        raise AIServiceError('AI recommendations field was not a list')
    recommendations: List[Dict[str, str]] = []
    used_ids = set()
    for entry in raw:
        if isinstance(entry, str):
            entry = {'description': entry}
        if not isinstance(entry, dict) or not entry.get('description'):
            logger.warning(f"Dropping recommendation without description: {entry!r}")
            continue
        base_id = str(entry.get('id') or f"rec-{len(recommendations) + 1}")
        # Ids key the UI buttons, so repeats get a numeric suffix
        rec_id, suffix = base_id, 2
        while rec_id in used_ids:
            rec_id = f"{base_id}-{suffix}"
            suffix += 1
        used_ids.add(rec_id)
        recommendations.append({'id': rec_id, 'description': str(entry['description'])})
    logger.info(f"AI recommended {len(recommendations)} rules for {data_type}")
    return {'recommendations': recommendations}
