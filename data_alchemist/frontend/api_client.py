"""
HTTP client for the Data Alchemist API.

The Streamlit UI never touches the backend modules directly; every
action goes through one of the functions below, which issue a single
request and raise :class:`APIError` with the server's ``error`` message
on failure.  ``search_all`` is the one place where several requests run
at once.
"""

from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional, Tuple

import requests

logger = logging.getLogger(__name__)

BACKEND_URL: str = os.getenv('BACKEND_URL', 'http://localhost:3001').rstrip('/')
TIMEOUT = 120


class APIError(Exception):
    """Raised when the backend returns an error or cannot be reached."""


def _url(path: str) -> str:
    return f"{BACKEND_URL}/api/{path}"


def _check(response: requests.Response) -> requests.Response:
    if response.ok:
        return response
    try:
        message = response.json().get('error') or response.reason
    except ValueError:
        message = response.reason
    raise APIError(f"{message} (HTTP {response.status_code})")


def _post_json(path: str, payload: Dict[str, Any]) -> requests.Response:
    try:
        response = requests.post(_url(path), json=payload, timeout=TIMEOUT)
    except requests.RequestException as e:
        logger.error(f"Request to {path} failed: {e}")
        raise APIError(f"Could not reach the backend at {BACKEND_URL}") from e
    return _check(response)


def upload_csv(filename: str, content: bytes, data_type: str) -> List[Dict[str, Any]]:
    try:
        response = requests.post(
            _url('upload'),
            files={'file': (filename, content, 'text/csv')},
            data={'dataType': data_type},
            timeout=TIMEOUT,
        )
    except requests.RequestException as e:
        logger.error(f"Upload of {filename} failed: {e}")
        raise APIError(f"Could not reach the backend at {BACKEND_URL}") from e
    return _check(response).json()['data']


def search(data_type: str, query: str, data: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    payload = {'dataType': data_type, 'searchQuery': query, 'data': data}
    return _post_json('search', payload).json()['data']


def search_all(query: str, datasets: Dict[str, List[Dict[str, Any]]]) -> Dict[str, List[Dict[str, Any]]]:
    """Search every dataset in parallel.

    All searches are joined before returning.  If any one fails, its
    :class:`APIError` propagates and no partial result is returned.
    """
    with ThreadPoolExecutor(max_workers=max(len(datasets), 1)) as pool:
        futures = {
            data_type: pool.submit(search, data_type, query, rows)
            for data_type, rows in datasets.items()
        }
        return {data_type: future.result() for data_type, future in futures.items()}


def export_csv(data: List[Dict[str, Any]]) -> bytes:
    return _post_json('export-csv', {'data': data}).content


def validate(data_type: str, data: List[Dict[str, Any]]) -> Tuple[List[Dict[str, Any]], Dict[str, Any]]:
    body = _post_json('validate', {'dataType': data_type, 'data': data}).json()
    return body['errors'], body['report']


def get_suggestion(column: str, error: str, current_value: Any) -> str:
    payload = {'column': column, 'error': error, 'currentValue': current_value}
    return _post_json('get-suggestion', payload).json()['suggestion']


def propose_modification(command: str, data: List[Dict[str, Any]], data_type: str) -> Dict[str, Any]:
    payload = {'command': command, 'data': data, 'dataType': data_type}
    return _post_json('propose-modification', payload).json()


def apply_modifications(
    data: List[Dict[str, Any]],
    modifications: List[Dict[str, Any]],
) -> Tuple[List[Dict[str, Any]], int]:
    body = _post_json('apply-modifications', {'data': data, 'modifications': modifications}).json()
    return body['data'], body['applied']


def recommend_rules(data: List[Dict[str, Any]], data_type: str) -> List[Dict[str, str]]:
    body = _post_json('recommend-rules', {'data': data, 'dataType': data_type}).json()
    return body.get('recommendations', [])


def export_rules(rules: List[str], weights: Optional[Dict[str, int]] = None) -> bytes:
    payload: Dict[str, Any] = {'rules': rules}
    if weights:
        payload['weights'] = weights
    return _post_json('export-rules', payload).content
